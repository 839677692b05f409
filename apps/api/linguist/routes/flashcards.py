from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, Field

from ..children import current_child
from ..db import list_words
from ..flashcards import DECK_SIZE, score_session
from ..schemas import FlashcardSummary, Word
from ..supabase import UserContext, get_user_context

router = APIRouter(prefix="/api/v1", tags=["flashcards"])


class ScoreSessionPayload(BaseModel):
    reviewed_ids: List[str] = Field(default_factory=list)
    correct_ids: List[str] = Field(default_factory=list)


@router.get("/flashcards", response_model=List[Word])
async def flashcard_deck_endpoint(
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> List[Word]:
    child = await current_child(auth, child_id_header, child_id)
    return await list_words(auth.supabase, child.id, auth.user_id, with_category=True, limit=DECK_SIZE)


@router.post("/flashcards/score", response_model=FlashcardSummary)
async def score_flashcards_endpoint(
    payload: ScoreSessionPayload,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> FlashcardSummary:
    child = await current_child(auth, child_id_header, child_id)
    deck = await list_words(auth.supabase, child.id, auth.user_id, limit=DECK_SIZE)
    return score_session(deck, payload.reviewed_ids, payload.correct_ids)
