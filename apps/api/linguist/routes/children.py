from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel

from ..children import ActiveChildSelector, require_owned_child
from ..milestones import seed_default_milestones
from ..schemas import Child, CreateChildPayload
from ..supabase import UserContext, get_user_context, requested_child_id, resolve_optional_uuid
from ..validation import parse_birthdate, require_text, validate_avatar

router = APIRouter(prefix="/api/v1", tags=["children"])
logger = logging.getLogger(__name__)


class ChildrenResponse(BaseModel):
    children: List[Child]
    current_child_id: Optional[str] = None


@router.get("/children", response_model=ChildrenResponse)
async def list_children_endpoint(
    child_id: Optional[str] = Query(None, description="Child to mark as current"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> ChildrenResponse:
    selector = ActiveChildSelector(auth.supabase, auth.user_id)
    children = await selector.refresh(raise_errors=True)
    requested = requested_child_id(child_id_header, child_id)
    if requested:
        try:
            selector.select(requested)
        except KeyError:
            logger.warning("requested child not found", extra={"child_id": requested})
    current = selector.current
    return ChildrenResponse(children=children, current_child_id=current.id if current else None)


@router.post("/children", response_model=Child)
async def create_child_endpoint(
    payload: CreateChildPayload,
    auth: UserContext = Depends(get_user_context),
) -> Child:
    name = require_text(payload.name, "Child name")
    birthdate = parse_birthdate(payload.birthdate)
    avatar = validate_avatar(payload.avatar)
    rows = await auth.supabase.insert(
        "children",
        {
            "name": name,
            "birthdate": birthdate.isoformat(),
            "avatar": avatar,
            "user_id": auth.user_id,
        },
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Child insert returned no row.")
    child = Child.model_validate(rows[0])
    logger.info("child created", extra={"child_id": child.id})
    await seed_default_milestones(auth.supabase, child.id, auth.user_id)
    return child


@router.delete("/children/{child_id}")
async def delete_child_endpoint(
    child_id: str,
    auth: UserContext = Depends(get_user_context),
) -> dict:
    child_uuid = resolve_optional_uuid(child_id, "child_id")
    child = await require_owned_child(auth, child_uuid)
    # words and milestones go with the child through the backend's foreign-key cascade
    await auth.supabase.delete(
        "children",
        params={"id": f"eq.{child.id}", "user_id": f"eq.{auth.user_id}"},
    )
    logger.info("child deleted", extra={"child_id": child.id})
    return {"deleted": child.id}
