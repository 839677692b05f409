from datetime import date, datetime, timezone

from linguist.schemas import Milestone, Word, WordCategory
from linguist.statistics import (
    compute_milestone_stats,
    compute_word_stats,
    learning_streak,
    percentage,
    vocabulary_growth,
)

from .supabase_helpers import category_row, milestone_row, word_row

TODAY = date(2025, 3, 10)


def _words(*specs):
    return [
        Word.model_validate(word_row("child", "user", text, date_learned=learned, category_id=category))
        for text, learned, category in specs
    ]


def test_word_stats_windows_and_categories():
    food = WordCategory.model_validate(category_row("Food", color="#4ECDC4"))
    animals = WordCategory.model_validate(category_row("Animals", color="#FFEAA7"))
    words = _words(
        ("milk", "2025-03-10", food.id),
        ("dog", "2025-03-08", animals.id),
        ("cat", "2025-03-01", animals.id),
        ("ball", "2025-02-20", None),
        ("mama", "2024-12-01", "missing-category"),
    )

    stats = compute_word_stats(words, [food, animals], today=TODAY)

    assert stats.total == 5
    assert stats.today == 1
    assert stats.this_week == 2
    assert stats.this_month == 4
    buckets = {item.name: item for item in stats.by_category}
    assert buckets["Animals"].count == 2
    assert buckets["Food"].color == "#4ECDC4"
    assert buckets["Unknown"].count == 2
    assert buckets["Unknown"].category_id is None
    assert [item.word for item in stats.recent_words] == ["milk", "dog", "cat", "ball", "mama"]
    assert stats.recent_words[3].category == "Unknown"


def test_recent_words_are_capped_at_five():
    words = _words(*[(f"w{day}", f"2025-03-{day:02d}", None) for day in range(1, 9)])

    stats = compute_word_stats(words, [], today=TODAY)

    assert [item.word for item in stats.recent_words] == ["w8", "w7", "w6", "w5", "w4"]


def test_milestone_stats_percentage_and_recent():
    rows = [
        milestone_row(child_id="c", user_id="u", title="First Word", target_value=1, achieved=True,
                      achieved_date="2025-01-01T00:00:00+00:00"),
        milestone_row(child_id="c", user_id="u", title="10 Words", target_value=10, achieved=True,
                      achieved_date="2025-02-01T00:00:00+00:00"),
        milestone_row(child_id="c", user_id="u", title="50 Words", target_value=50),
    ]

    stats = compute_milestone_stats([Milestone.model_validate(row) for row in rows])

    assert stats.total == 3
    assert stats.achieved == 2
    assert stats.percentage == 67
    assert [item.title for item in stats.recent_achievements] == ["10 Words", "First Word"]
    assert stats.recent_achievements[0].achieved_date == datetime(2025, 2, 1, tzinfo=timezone.utc)


def test_milestone_stats_empty():
    stats = compute_milestone_stats([])

    assert stats.percentage == 0
    assert stats.recent_achievements == []


def test_percentage_handles_zero_total():
    assert percentage(3, 0) == 0
    assert percentage(1, 4) == 25


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13
    assert percentage(5, 8) == 63
    assert percentage(1, 3) == 33


def test_streak_counts_back_from_today():
    days = [date(2025, 3, 10), date(2025, 3, 9), date(2025, 3, 8), date(2025, 3, 6)]

    assert learning_streak(days, today=TODAY) == 3


def test_streak_allows_nothing_logged_yet_today():
    days = [date(2025, 3, 9), date(2025, 3, 8)]

    assert learning_streak(days, today=TODAY) == 2


def test_streak_broken_before_yesterday():
    assert learning_streak([date(2025, 3, 7)], today=TODAY) == 0
    assert learning_streak([], today=TODAY) == 0


def test_vocabulary_growth_is_cumulative():
    words = _words(
        ("a", "2025-03-01", None),
        ("b", "2025-03-01", None),
        ("c", "2025-03-04", None),
    )

    growth = vocabulary_growth(words)

    assert [(point.day, point.total) for point in growth] == [
        (date(2025, 3, 1), 2),
        (date(2025, 3, 4), 3),
    ]
