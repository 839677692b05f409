from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query

from ..children import current_child
from ..db import count_words, list_categories, list_milestones, list_words
from ..milestones import get_next_milestone, reconcile_in_background
from ..schemas import HomeSummary, StatisticsResponse
from ..statistics import (
    compute_milestone_stats,
    compute_word_stats,
    learning_streak,
    vocabulary_growth,
)
from ..supabase import UserContext, get_user_context

router = APIRouter(prefix="/api/v1", tags=["statistics"])
logger = logging.getLogger(__name__)


@router.get("/home", response_model=HomeSummary)
async def home_summary_endpoint(
    background_tasks: BackgroundTasks,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> HomeSummary:
    child = await current_child(auth, child_id_header, child_id)
    today = date.today()
    words, todays_words, achieved, next_milestone = await asyncio.gather(
        list_words(auth.supabase, child.id, auth.user_id),
        count_words(auth.supabase, child.id, auth.user_id, learned_on=today),
        list_milestones(auth.supabase, child.id, auth.user_id, achieved=True),
        get_next_milestone(auth.supabase, child.id, auth.user_id),
    )
    background_tasks.add_task(reconcile_in_background, auth.supabase, child.id, auth.user_id)
    return HomeSummary(
        child=child,
        total_words=len(words),
        todays_words=todays_words,
        achieved_milestones=len(achieved),
        streak_days=learning_streak((word.date_learned for word in words), today=today),
        next_milestone=next_milestone,
    )


@router.get("/statistics", response_model=StatisticsResponse)
async def statistics_endpoint(
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> StatisticsResponse:
    child = await current_child(auth, child_id_header, child_id)
    words, categories, milestones = await asyncio.gather(
        list_words(auth.supabase, child.id, auth.user_id),
        list_categories(auth.supabase),
        list_milestones(auth.supabase, child.id, auth.user_id),
    )
    today = date.today()
    logger.info(
        "statistics computed",
        extra={"child_id": child.id, "words": len(words), "milestones": len(milestones)},
    )
    return StatisticsResponse(
        words=compute_word_stats(words, categories, today=today),
        milestones=compute_milestone_stats(milestones),
        streak_days=learning_streak((word.date_learned for word in words), today=today),
        growth=vocabulary_growth(words),
    )
