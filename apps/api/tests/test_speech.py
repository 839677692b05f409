import asyncio

import pytest
from fastapi import HTTPException

from linguist.schemas import RecognitionResult
from linguist.speech import (
    SpeechRecognitionError,
    candidate_word,
    collect_final_transcripts,
    final_candidates,
    listen_for_word,
    validate_language_tag,
)


class ScriptedRecognizer:
    def __init__(self, results, *, fail_after=None):
        self.results = results
        self.fail_after = fail_after
        self.language = None
        self.stopped = False

    async def start(self, language_tag):
        self.language = language_tag
        for index, result in enumerate(self.results):
            if self.fail_after is not None and index >= self.fail_after:
                raise SpeechRecognitionError("no-speech")
            yield result

    async def stop(self):
        self.stopped = True


def _result(transcript, is_final=True):
    return RecognitionResult(transcript=transcript, is_final=is_final)


def test_candidate_word_normalizes_transcript():
    assert candidate_word("  Doggy! ") == "doggy"
    assert candidate_word("Teddy   bear.") == "teddy bear"
    assert candidate_word("?!") is None


def test_final_candidates_skip_interim_and_duplicates():
    results = [
        _result("ba", is_final=False),
        _result("Ball"),
        _result("ball!"),
        _result("", is_final=True),
        _result("cup"),
    ]

    assert final_candidates(results) == ["ball", "cup"]


def test_language_tag_validation():
    assert validate_language_tag(None) == "en-US"
    assert validate_language_tag("fr-FR") == "fr-FR"
    with pytest.raises(HTTPException) as exc:
        validate_language_tag("xx-XX")
    assert exc.value.status_code == 400


def test_listen_for_word_returns_first_final_candidate():
    recognizer = ScriptedRecognizer([_result("mo", is_final=False), _result("More!"), _result("milk")])

    word = asyncio.run(listen_for_word(recognizer, "en-GB"))

    assert word == "more"
    assert recognizer.language == "en-GB"
    assert recognizer.stopped is True


def test_listen_for_word_without_final_result():
    recognizer = ScriptedRecognizer([_result("mi", is_final=False)])

    assert asyncio.run(listen_for_word(recognizer, "en-US")) is None
    assert recognizer.stopped is True


def test_listen_for_word_failure_propagates_and_stops():
    recognizer = ScriptedRecognizer([_result("uh", is_final=False)], fail_after=0)

    with pytest.raises(SpeechRecognitionError):
        asyncio.run(listen_for_word(recognizer, "en-US"))
    assert recognizer.stopped is True


def test_collect_final_transcripts():
    recognizer = ScriptedRecognizer([_result("a", is_final=False), _result("apple"), _result("banana")])

    transcripts = asyncio.run(collect_final_transcripts(recognizer.start("en-US")))

    assert transcripts == ["apple", "banana"]
