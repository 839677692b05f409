"""Client-side derived statistics over word and milestone rows."""
from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .schemas import (
    CategoryCount,
    GrowthPoint,
    Milestone,
    MilestoneStats,
    RecentAchievement,
    RecentWord,
    Word,
    WordCategory,
    WordStats,
)

UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_COLOR = "#8E8E93"
WEEK_DAYS = 7
MONTH_DAYS = 30
RECENT_WORD_LIMIT = 5
RECENT_ACHIEVEMENT_LIMIT = 3


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    # half rounds up, so 1 of 8 is 13
    return int(part * 100 / whole + 0.5)


def compute_word_stats(
    words: List[Word],
    categories: Iterable[WordCategory],
    *,
    today: Optional[date] = None,
) -> WordStats:
    today = today or date.today()
    category_map: Dict[str, WordCategory] = {category.id: category for category in categories}
    week_start = today - timedelta(days=WEEK_DAYS)
    month_start = today - timedelta(days=MONTH_DAYS)

    counts: Counter = Counter(
        word.category_id if word.category_id in category_map else None for word in words
    )
    by_category = []
    for category_id, count in counts.most_common():
        category = category_map.get(category_id) if category_id else None
        by_category.append(
            CategoryCount(
                category_id=category_id,
                name=category.name if category else UNKNOWN_CATEGORY,
                color=category.color if category else UNKNOWN_COLOR,
                count=count,
            )
        )

    recent = sorted(words, key=lambda word: word.date_learned, reverse=True)[:RECENT_WORD_LIMIT]
    recent_words = [
        RecentWord(
            word=word.word,
            date_learned=word.date_learned,
            category=category_map[word.category_id].name
            if word.category_id in category_map
            else UNKNOWN_CATEGORY,
        )
        for word in recent
    ]

    return WordStats(
        total=len(words),
        today=sum(1 for word in words if word.date_learned == today),
        this_week=sum(1 for word in words if word.date_learned >= week_start),
        this_month=sum(1 for word in words if word.date_learned >= month_start),
        by_category=by_category,
        recent_words=recent_words,
    )


def compute_milestone_stats(milestones: List[Milestone]) -> MilestoneStats:
    achieved = [milestone for milestone in milestones if milestone.achieved]
    dated = [milestone for milestone in achieved if milestone.achieved_date is not None]
    dated.sort(key=lambda milestone: milestone.achieved_date, reverse=True)
    return MilestoneStats(
        total=len(milestones),
        achieved=len(achieved),
        percentage=percentage(len(achieved), len(milestones)),
        recent_achievements=[
            RecentAchievement(title=milestone.title, achieved_date=milestone.achieved_date)
            for milestone in dated[:RECENT_ACHIEVEMENT_LIMIT]
        ],
    )


def learning_streak(learned_dates: Iterable[date], *, today: Optional[date] = None) -> int:
    """Count consecutive days with at least one new word.

    The streak ends today, or yesterday when nothing has been logged yet today.
    """

    today = today or date.today()
    days = set(learned_dates)
    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def vocabulary_growth(words: List[Word]) -> List[GrowthPoint]:
    per_day = Counter(word.date_learned for word in words)
    total = 0
    points = []
    for day in sorted(per_day):
        total += per_day[day]
        points.append(GrowthPoint(day=day, total=total))
    return points
