from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from .openai_client import generate_word_suggestions
from .schemas import CategoryGap, SuggestionsResponse, Word, WordCategory, WordSuggestion

# category -> (expected early words, severity when short)
EXPECTED_CATEGORY_COUNTS: Dict[str, Tuple[int, str]] = {
    "Family": (4, "high"),
    "Food": (5, "high"),
    "Animals": (5, "high"),
    "Actions": (4, "high"),
    "Toys": (3, "medium"),
    "Body Parts": (3, "medium"),
    "Colors": (2, "medium"),
    "Numbers": (2, "medium"),
}

STARTER_WORDS: List[WordSuggestion] = [
    WordSuggestion(word="mama", category="Family", priority="high"),
    WordSuggestion(word="dada", category="Family", priority="high"),
    WordSuggestion(word="dog", category="Animals", priority="high"),
    WordSuggestion(word="cat", category="Animals", priority="high"),
    WordSuggestion(word="apple", category="Food", priority="high"),
    WordSuggestion(word="milk", category="Food", priority="high"),
    WordSuggestion(word="ball", category="Toys", priority="high"),
    WordSuggestion(word="clap", category="Actions", priority="high"),
    WordSuggestion(word="more", category="Actions", priority="high"),
    WordSuggestion(word="nose", category="Body Parts", priority="medium"),
    WordSuggestion(word="book", category="Toys", priority="medium"),
    WordSuggestion(word="look", category="Actions", priority="medium"),
    WordSuggestion(word="red", category="Colors", priority="low"),
    WordSuggestion(word="two", category="Numbers", priority="low"),
]


def category_gaps(words: Iterable[Word], categories: Iterable[WordCategory]) -> List[CategoryGap]:
    names = {category.id: category.name for category in categories}
    counts = Counter(names.get(word.category_id) for word in words if word.category_id)
    gaps = []
    for name, (expected, severity) in EXPECTED_CATEGORY_COUNTS.items():
        current = counts.get(name, 0)
        if current < expected:
            gaps.append(CategoryGap(category=name, current=current, expected=expected, severity=severity))
    gaps.sort(key=lambda gap: (gap.severity != "high", -gap.needed))
    return gaps


def starter_suggestions(known: Iterable[str], gaps: List[CategoryGap], limit: int) -> List[WordSuggestion]:
    known_words = {word.lower() for word in known}
    gap_order = {gap.category: index for index, gap in enumerate(gaps)}
    candidates = [item for item in STARTER_WORDS if item.word not in known_words]
    candidates.sort(key=lambda item: gap_order.get(item.category, len(gap_order)))
    return candidates[:limit]


def build_suggestions(
    words: List[Word],
    categories: List[WordCategory],
    *,
    language: str = "en-US",
    limit: int = 10,
) -> SuggestionsResponse:
    gaps = category_gaps(words, categories)
    known = [word.word.lower() for word in words]
    generated: Optional[List[WordSuggestion]] = generate_word_suggestions(
        known, gaps, language=language, limit=limit
    )
    if generated:
        known_set = set(known)
        suggestions = [item for item in generated if item.word not in known_set]
    else:
        suggestions = starter_suggestions(known, gaps, limit)
    return SuggestionsResponse(missing_categories=gaps, suggestions=suggestions)
