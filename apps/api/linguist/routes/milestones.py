from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query
from pydantic import BaseModel

from ..children import current_child
from ..db import list_milestones
from ..milestones import (
    get_next_milestone,
    milestone_achieved_message,
    reconcile_in_background,
    reconcile_vocabulary_milestones,
)
from ..schemas import Milestone, MilestoneType
from ..supabase import UserContext, get_user_context, resolve_optional_uuid

router = APIRouter(prefix="/api/v1", tags=["milestones"])
logger = logging.getLogger(__name__)


class ToggleMilestonePayload(BaseModel):
    achieved: bool


class MilestoneUpdateResponse(BaseModel):
    milestone: Milestone
    message: Optional[str] = None


class ReconcileResponse(BaseModel):
    updated: List[Milestone]
    messages: List[str]


@router.get("/milestones", response_model=List[Milestone])
async def list_milestones_endpoint(
    background_tasks: BackgroundTasks,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> List[Milestone]:
    child = await current_child(auth, child_id_header, child_id)
    milestones = await list_milestones(auth.supabase, child.id, auth.user_id)
    background_tasks.add_task(reconcile_in_background, auth.supabase, child.id, auth.user_id)
    return milestones


@router.get("/milestones/next", response_model=Optional[Milestone])
async def next_milestone_endpoint(
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> Optional[Milestone]:
    child = await current_child(auth, child_id_header, child_id)
    return await get_next_milestone(auth.supabase, child.id, auth.user_id)


@router.post("/milestones/reconcile", response_model=ReconcileResponse)
async def reconcile_milestones_endpoint(
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> ReconcileResponse:
    child = await current_child(auth, child_id_header, child_id)
    updated = await reconcile_vocabulary_milestones(auth.supabase, child.id, auth.user_id)
    messages = [milestone_achieved_message(item.title) for item in updated if item.achieved]
    return ReconcileResponse(updated=updated, messages=messages)


@router.patch("/milestones/{milestone_id}", response_model=MilestoneUpdateResponse)
async def toggle_milestone_endpoint(
    milestone_id: str,
    payload: ToggleMilestonePayload,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> MilestoneUpdateResponse:
    milestone_uuid = resolve_optional_uuid(milestone_id, "milestone_id")
    if not milestone_uuid:
        raise HTTPException(status_code=400, detail="Invalid milestone_id")
    child = await current_child(auth, child_id_header, child_id)
    rows = await auth.supabase.select(
        "milestones",
        params={
            "select": "*",
            "id": f"eq.{milestone_uuid}",
            "child_id": f"eq.{child.id}",
            "user_id": f"eq.{auth.user_id}",
            "limit": "1",
        },
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Milestone not found")
    milestone = Milestone.model_validate(rows[0])
    if milestone.milestone_type == MilestoneType.VOCABULARY.value:
        raise HTTPException(
            status_code=400,
            detail="Vocabulary milestones follow the word count and cannot be toggled",
        )
    if milestone.achieved == payload.achieved:
        return MilestoneUpdateResponse(milestone=milestone)

    changes = {
        "achieved": payload.achieved,
        "achieved_date": datetime.now(timezone.utc).isoformat() if payload.achieved else None,
    }
    updated = await auth.supabase.update(
        "milestones",
        changes,
        params={"id": f"eq.{milestone.id}", "user_id": f"eq.{auth.user_id}"},
    )
    row = updated[0] if updated else {**milestone.model_dump(), **changes}
    result = Milestone.model_validate(row)
    message = milestone_achieved_message(result.title) if result.achieved else None
    return MilestoneUpdateResponse(milestone=result, message=message)
