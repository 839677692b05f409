from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .schemas import FlashcardSummary, Word
from .statistics import percentage

DECK_SIZE = 20


class FlashcardSession:
    """A single review pass over a child's words."""

    def __init__(self, words: List[Word]) -> None:
        self.words = list(words[:DECK_SIZE])
        self.index = 0
        self.flipped = False
        self.finished = not self.words
        self.reviewed: Set[str] = set()
        self.correct: Set[str] = set()

    @property
    def current(self) -> Optional[Word]:
        if self.finished or not self.words:
            return None
        return self.words[self.index]

    def flip(self) -> bool:
        self.flipped = not self.flipped
        return self.flipped

    def next(self) -> Optional[Word]:
        self.flipped = False
        if self.index < len(self.words) - 1:
            self.index += 1
        else:
            self.finished = True
        return self.current

    def previous(self) -> Optional[Word]:
        self.flipped = False
        if self.index > 0:
            self.index -= 1
            self.finished = False
        return self.current

    def mark_correct(self) -> Optional[Word]:
        word = self.current
        if word is not None:
            self.correct.add(word.id)
            self.reviewed.add(word.id)
        return self.next()

    def mark_incorrect(self) -> Optional[Word]:
        word = self.current
        if word is not None:
            self.reviewed.add(word.id)
        return self.next()

    def reset(self) -> None:
        self.index = 0
        self.flipped = False
        self.finished = not self.words
        self.reviewed.clear()
        self.correct.clear()

    def summary(self) -> FlashcardSummary:
        return score_session(self.words, self.reviewed, self.correct)


def score_session(
    words: List[Word],
    reviewed_ids: Iterable[str],
    correct_ids: Iterable[str],
) -> FlashcardSummary:
    deck_ids = {word.id for word in words}
    reviewed = deck_ids & set(reviewed_ids)
    correct = deck_ids & set(correct_ids)
    return FlashcardSummary(
        reviewed=len(reviewed | correct),
        correct=len(correct),
        total=len(deck_ids),
        accuracy=percentage(len(correct), len(deck_ids)),
    )
