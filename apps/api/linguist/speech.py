"""Adapters over a platform speech-to-text capability.

Decoding itself happens on the device or in the browser; this module only
consumes the recognizer's result stream and turns final transcripts into
candidate word text.
"""
from __future__ import annotations

import logging
import re
from typing import AsyncIterator, Dict, Iterable, List, Optional, Protocol

from fastapi import HTTPException

from .schemas import RecognitionResult

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: Dict[str, str] = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "fr-FR": "Français",
    "es-ES": "Español",
    "de-DE": "Deutsch",
    "it-IT": "Italiano",
    "pt-BR": "Português",
    "nl-NL": "Nederlands",
    "ja-JP": "日本語",
    "zh-CN": "中文",
    "ar-SA": "العربية",
    "ru-RU": "Русский",
}

_EDGE_PUNCTUATION = re.compile(r"^[\W_]+|[\W_]+$", re.UNICODE)


class SpeechRecognitionError(RuntimeError):
    """Raised by a recognizer when recognition fails."""


class SpeechRecognizer(Protocol):
    def start(self, language_tag: str) -> AsyncIterator[RecognitionResult]:
        ...

    async def stop(self) -> None:
        ...


def validate_language_tag(tag: Optional[str], default: str = "en-US") -> str:
    language = tag or default
    if language not in SUPPORTED_LANGUAGES:
        raise HTTPException(status_code=400, detail=f"Unsupported language: {language}")
    return language


def candidate_word(transcript: str) -> Optional[str]:
    """Normalize a final transcript into word text, or None if nothing is left."""

    collapsed = " ".join(transcript.split())
    cleaned = _EDGE_PUNCTUATION.sub("", collapsed).lower()
    return cleaned or None


def final_candidates(results: Iterable[RecognitionResult]) -> List[str]:
    """Candidate words from final results, in order, without duplicates."""

    seen = set()
    candidates = []
    for result in results:
        if not result.is_final:
            continue
        word = candidate_word(result.transcript)
        if word and word not in seen:
            seen.add(word)
            candidates.append(word)
    return candidates


async def collect_final_transcripts(stream: AsyncIterator[RecognitionResult]) -> List[str]:
    return [result.transcript async for result in stream if result.is_final]


async def listen_for_word(recognizer: SpeechRecognizer, language_tag: str) -> Optional[str]:
    """Return the first final candidate the recognizer produces.

    A recognition failure propagates once; callers fall back to manual entry.
    """

    language = validate_language_tag(language_tag)
    try:
        async for result in recognizer.start(language):
            if not result.is_final:
                continue
            word = candidate_word(result.transcript)
            if word:
                return word
    except SpeechRecognitionError:
        logger.warning("speech recognition failed", extra={"language": language})
        raise
    finally:
        await recognizer.stop()
    return None
