from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query

from ..children import current_child
from ..conceptnet import language_code, suggest_category
from ..config import CONFIG
from ..db import delete_word, insert_word, list_categories, list_words
from ..milestones import reconcile_in_background
from ..schemas import CreateWordPayload, VoiceWordsPayload, VoiceWordsResponse, Word
from ..speech import SUPPORTED_LANGUAGES, final_candidates, validate_language_tag
from ..supabase import UserContext, get_user_context, resolve_optional_uuid
from ..validation import optional_text, require_text

router = APIRouter(prefix="/api/v1", tags=["words"])
logger = logging.getLogger(__name__)


def filter_words(words: List[Word], search: Optional[str], category_id: Optional[str]) -> List[Word]:
    term = (search or "").strip().lower()
    filtered = []
    for word in words:
        if term and term not in word.word.lower():
            continue
        if category_id and word.category_id != category_id:
            continue
        filtered.append(word)
    return filtered


@router.get("/words", response_model=List[Word])
async def list_words_endpoint(
    search: Optional[str] = Query(None, description="Case-insensitive substring"),
    category_id: Optional[str] = Query(None, description="Only words in this category"),
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> List[Word]:
    child = await current_child(auth, child_id_header, child_id)
    logger.info(
        "child-scoped request",
        extra={"method": "GET", "path": "/api/v1/words", "child_id": child.id},
    )
    words = await list_words(auth.supabase, child.id, auth.user_id, with_category=True)
    return filter_words(words, search, resolve_optional_uuid(category_id, "category_id"))


@router.post("/words", response_model=Word)
async def create_word_endpoint(
    payload: CreateWordPayload,
    background_tasks: BackgroundTasks,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    language: Optional[str] = Query(None, description="Language tag used for auto-categorization"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> Word:
    text = require_text(payload.word, "Word")
    child = await current_child(auth, child_id_header, child_id)
    category_id = resolve_optional_uuid(payload.category_id, "category_id")

    if category_id is None and payload.auto_categorize:
        categories = await list_categories(auth.supabase)
        match = await suggest_category(text, categories, language=language_code(language))
        if match is not None:
            category_id = match.id
            logger.info("word auto-categorized", extra={"word": text, "category": match.name})

    word = await insert_word(
        auth.supabase,
        child_id=child.id,
        user_id=auth.user_id,
        word=text,
        category_id=category_id,
        date_learned=payload.date_learned or date.today(),
        notes=optional_text(payload.notes),
    )
    background_tasks.add_task(reconcile_in_background, auth.supabase, child.id, auth.user_id)
    return word


@router.delete("/words/{word_id}")
async def delete_word_endpoint(
    word_id: str,
    background_tasks: BackgroundTasks,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> dict:
    word_uuid = resolve_optional_uuid(word_id, "word_id")
    if not word_uuid:
        raise HTTPException(status_code=400, detail="Invalid word_id")
    child = await current_child(auth, child_id_header, child_id)
    await delete_word(auth.supabase, word_uuid, child.id, auth.user_id)
    background_tasks.add_task(reconcile_in_background, auth.supabase, child.id, auth.user_id)
    return {"deleted": word_uuid}


@router.post("/words/voice", response_model=VoiceWordsResponse)
async def add_voice_words_endpoint(
    payload: VoiceWordsPayload,
    background_tasks: BackgroundTasks,
    child_id: Optional[str] = Query(None, description="Child identifier"),
    auth: UserContext = Depends(get_user_context),
    child_id_header: Optional[str] = Header(None, alias="X-Linguist-Child-Id"),
) -> VoiceWordsResponse:
    validate_language_tag(payload.language, CONFIG.default_speech_language)
    candidates = final_candidates(payload.results)
    if not candidates:
        raise HTTPException(status_code=400, detail="No final transcript to add")
    child = await current_child(auth, child_id_header, child_id)
    category_id = resolve_optional_uuid(payload.category_id, "category_id")

    existing = {word.word.lower() for word in await list_words(auth.supabase, child.id, auth.user_id)}
    added: List[Word] = []
    skipped: List[str] = []
    today = date.today()
    try:
        for candidate in candidates:
            if candidate in existing:
                skipped.append(candidate)
                continue
            added.append(
                await insert_word(
                    auth.supabase,
                    child_id=child.id,
                    user_id=auth.user_id,
                    word=candidate,
                    category_id=category_id,
                    date_learned=today,
                )
            )
    except HTTPException:
        # background tasks are dropped on an error response
        if added:
            logger.warning(
                "voice words partially stored",
                extra={"child_id": child.id, "stored": [word.word for word in added]},
            )
            await reconcile_in_background(auth.supabase, child.id, auth.user_id)
        raise
    if added:
        background_tasks.add_task(reconcile_in_background, auth.supabase, child.id, auth.user_id)
    return VoiceWordsResponse(added=added, skipped=skipped)


@router.get("/speech/languages")
async def list_speech_languages() -> Dict[str, object]:
    return {"default": CONFIG.default_speech_language, "languages": SUPPORTED_LANGUAGES}
