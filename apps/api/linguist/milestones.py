"""Vocabulary milestone progress, kept in step with a child's word count."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from .db import owner_params
from .schemas import Milestone, MilestoneType
from .supabase import SupabaseClient

logger = logging.getLogger(__name__)

DEFAULT_MILESTONES_RPC = "create_default_milestones_for_child"

ACHIEVED_MESSAGES = {
    "First Word": "🎉 Amazing! Your child just said their first word!",
    "10 Words": "🌟 Wow! 10 words already! Your little one is growing fast!",
    "50 Words": "🚀 Incredible! 50 words is a huge milestone!",
    "100 Words": "🏆 Outstanding! 100 words - your child is becoming a great communicator!",
}


def vocabulary_changes(
    milestone: Milestone,
    word_count: int,
    achieved_at: str,
) -> Optional[Dict[str, Any]]:
    """Return the column updates a milestone needs for ``word_count``, or None if it is current."""

    is_achieved = word_count >= milestone.target_value
    was_achieved = milestone.achieved
    if milestone.current_value == word_count and was_achieved == is_achieved:
        return None

    changes: Dict[str, Any] = {"current_value": word_count}
    if is_achieved and not was_achieved:
        changes["achieved"] = True
        changes["achieved_date"] = achieved_at
    elif was_achieved and not is_achieved:
        changes["achieved"] = False
        changes["achieved_date"] = None
    return changes


async def _write_milestone(
    supabase: SupabaseClient,
    milestone: Milestone,
    changes: Dict[str, Any],
    user_id: str,
) -> Optional[Milestone]:
    try:
        await supabase.update(
            "milestones",
            changes,
            params={"id": f"eq.{milestone.id}", "user_id": f"eq.{user_id}"},
        )
    except Exception as exc:
        logger.exception(
            "Error updating milestone",
            exc_info=exc,
            extra={"milestone_id": milestone.id, "title": milestone.title},
        )
        return None

    updated = Milestone.model_validate({**milestone.model_dump(), **changes})
    logger.info(
        "milestone progress updated",
        extra={
            "milestone_id": milestone.id,
            "title": milestone.title,
            "current_value": updated.current_value,
            "target_value": milestone.target_value,
        },
    )
    if updated.achieved and not milestone.achieved:
        logger.info("milestone achieved", extra={"milestone_id": milestone.id, "title": milestone.title})
    return updated


async def reconcile_vocabulary_milestones(
    supabase: SupabaseClient,
    child_id: str,
    user_id: str,
    *,
    now: Optional[datetime] = None,
) -> List[Milestone]:
    """Bring every vocabulary milestone of a child in line with its current word count.

    Read failures propagate to the caller. Writes are issued concurrently and a
    failed write is logged without affecting its siblings. Returns the
    milestones that were successfully written.
    """

    owner = owner_params(child_id, user_id)
    word_count = await supabase.count("words", params=owner)
    rows = await supabase.select(
        "milestones",
        params={
            "select": "*",
            **owner,
            "milestone_type": f"eq.{MilestoneType.VOCABULARY.value}",
        },
    )
    if not rows:
        return []

    achieved_at = (now or datetime.now(timezone.utc)).isoformat()
    writes = []
    for row in rows:
        milestone = Milestone.model_validate(row)
        if milestone.milestone_type != MilestoneType.VOCABULARY.value:
            continue
        changes = vocabulary_changes(milestone, word_count, achieved_at)
        if changes is None:
            continue
        writes.append(_write_milestone(supabase, milestone, changes, user_id))

    if not writes:
        return []
    results = await asyncio.gather(*writes)
    return [milestone for milestone in results if milestone is not None]


async def reconcile_in_background(supabase: SupabaseClient, child_id: str, user_id: str) -> None:
    """Fire-and-forget wrapper; nothing raised here reaches the caller."""

    try:
        updated = await reconcile_vocabulary_milestones(supabase, child_id, user_id)
    except Exception as exc:
        logger.exception(
            "Error updating vocabulary milestones",
            exc_info=exc,
            extra={"child_id": child_id},
        )
        return
    if updated:
        logger.info(
            "vocabulary milestones reconciled",
            extra={"child_id": child_id, "updated": len(updated)},
        )


async def get_next_milestone(
    supabase: SupabaseClient,
    child_id: str,
    user_id: str,
) -> Optional[Milestone]:
    try:
        rows = await supabase.select(
            "milestones",
            params={
                "select": "*",
                **owner_params(child_id, user_id),
                "achieved": "eq.false",
                "order": "target_value.asc",
                "limit": "1",
            },
        )
    except HTTPException as exc:
        logger.exception("Error getting next milestone", exc_info=exc, extra={"child_id": child_id})
        return None
    if not rows:
        return None
    return Milestone.model_validate(rows[0])


def milestone_achieved_message(title: str) -> str:
    return ACHIEVED_MESSAGES.get(title, f"🎊 Congratulations! Milestone achieved: {title}")


async def seed_default_milestones(supabase: SupabaseClient, child_id: str, user_id: str) -> bool:
    """Ask the backend to create the canonical milestones for a new child."""

    try:
        await supabase.rpc(DEFAULT_MILESTONES_RPC, {"child_id": child_id, "user_id": user_id})
    except HTTPException as exc:
        logger.exception(
            "Error creating default milestones",
            exc_info=exc,
            extra={"child_id": child_id},
        )
        return False
    return True
