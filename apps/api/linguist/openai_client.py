"""OpenAI integration for suggesting the next words to practice."""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from openai import APIError, OpenAI

from .config import CONFIG
from .schemas import CategoryGap, WordSuggestion

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You help parents of toddlers choose the next words to model during play.
Suggest short, concrete, high-frequency early words a young child can say.
Prefer categories the child is missing. Never repeat a word the child already knows.
Respond with JSON only: {"suggestions": [{"word": str, "category": str, "priority": "high" | "medium" | "low"}]}.
""".strip()

_PRIORITIES = {"high", "medium", "low"}


@lru_cache
def _client() -> Optional[OpenAI]:
    if not CONFIG.openai_api_key:
        return None
    return OpenAI(api_key=CONFIG.openai_api_key)


def _build_user_message(
    known_words: List[str],
    gaps: List[CategoryGap],
    language: str,
    limit: int,
) -> str:
    context = {
        "language": language,
        "known_words": known_words,
        "missing_categories": [
            {"category": gap.category, "needed": gap.needed, "severity": gap.severity} for gap in gaps
        ],
        "max_suggestions": limit,
    }
    return json.dumps(context, ensure_ascii=False)


def _coerce_suggestion(item: Dict[str, Any]) -> Optional[WordSuggestion]:
    word = str(item.get("word") or "").strip().lower()
    if not word:
        return None
    priority = str(item.get("priority") or "medium").lower()
    if priority not in _PRIORITIES:
        priority = "medium"
    return WordSuggestion(word=word, category=str(item.get("category") or "Other"), priority=priority)


def generate_word_suggestions(
    known_words: List[str],
    gaps: List[CategoryGap],
    *,
    language: str = "en-US",
    limit: int = 10,
) -> Optional[List[WordSuggestion]]:
    """Ask the model for suggestions; None means the caller should use its fallback."""

    client = _client()
    if client is None:
        return None
    try:
        response = client.chat.completions.create(
            model=CONFIG.openai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(known_words, gaps, language, limit)},
            ],
            temperature=0.4,
            response_format={"type": "json_object"},
        )
    except APIError as exc:
        logger.exception("OpenAI chat API failed, falling back to starter words", exc_info=exc)
        return None

    try:
        raw_content = response.choices[0].message.content or ""
    except (AttributeError, IndexError, KeyError) as exc:
        logger.exception("Unexpected OpenAI response format, falling back to starter words", exc_info=exc)
        return None

    content = raw_content.strip().strip("`")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.exception("Failed to parse OpenAI JSON payload, falling back to starter words", exc_info=exc)
        return None

    items = payload.get("suggestions") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return None
    suggestions = [_coerce_suggestion(item) for item in items if isinstance(item, dict)]
    return [suggestion for suggestion in suggestions if suggestion is not None][:limit]
