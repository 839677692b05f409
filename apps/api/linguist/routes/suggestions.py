from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.concurrency import run_in_threadpool

from ..children import current_child
from ..config import CONFIG
from ..db import list_categories, list_words
from ..schemas import SuggestionsResponse
from ..speech import validate_language_tag
from ..suggestions import build_suggestions
from ..supabase import UserContext, get_user_context

router = APIRouter(prefix="/api/v1", tags=["suggestions"])


@router.get("/suggestions", response_model=SuggestionsResponse)
async def suggestions_endpoint(
    language: Optional[str] = Query(None, description="Language tag for suggested words"),
    limit: int = Query(10, ge=1, le=30),
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> SuggestionsResponse:
    language_tag = validate_language_tag(language, CONFIG.default_speech_language)
    child = await current_child(auth, child_id_header, child_id)
    words, categories = await asyncio.gather(
        list_words(auth.supabase, child.id, auth.user_id),
        list_categories(auth.supabase),
    )
    return await run_in_threadpool(
        build_suggestions, words, categories, language=language_tag, limit=limit
    )
