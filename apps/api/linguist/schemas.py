"""Pydantic schemas shared across the API."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class MilestoneType(str, Enum):
    VOCABULARY = "vocabulary"
    SPEECH = "speech"


MILESTONE_TYPE_DESCRIPTIONS = {
    MilestoneType.VOCABULARY: "Driven by the child's total word count",
    MilestoneType.SPEECH: "Toggled manually by the parent (phrases, sentences)",
}

CHILD_AVATARS = ["👶", "🧒", "👦", "👧", "🧑", "👨", "👩"]
DEFAULT_CHILD_AVATAR = CHILD_AVATARS[0]

DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Family", "icon": "👨‍👩‍👧‍👦", "color": "#FF6B6B"},
    {"name": "Food", "icon": "🍎", "color": "#4ECDC4"},
    {"name": "Toys", "icon": "🧸", "color": "#45B7D1"},
    {"name": "Actions", "icon": "🏃", "color": "#96CEB4"},
    {"name": "Animals", "icon": "🐶", "color": "#FFEAA7"},
    {"name": "Body Parts", "icon": "👂", "color": "#A29BFE"},
    {"name": "Colors", "icon": "🌈", "color": "#FD79A8"},
    {"name": "Numbers", "icon": "🔢", "color": "#FDCB6E"},
]


class Child(BaseModel):
    id: str
    name: str
    birthdate: date
    avatar: str = DEFAULT_CHILD_AVATAR
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WordCategory(BaseModel):
    id: str
    name: str
    icon: str = ""
    color: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Word(BaseModel):
    id: str
    word: str
    category_id: Optional[str] = None
    child_id: str
    user_id: str
    date_learned: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    word_categories: Optional[WordCategory] = Field(
        default=None,
        description="Embedded category row when selected with a join",
    )


class Milestone(BaseModel):
    id: str
    child_id: str
    user_id: str
    title: str
    description: Optional[str] = None
    milestone_type: str
    target_value: int = 0
    current_value: int = 0
    achieved: bool = False
    achieved_date: Optional[datetime] = None
    icon: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateChildPayload(BaseModel):
    name: str
    birthdate: str = Field(..., description="Calendar date in YYYY-MM-DD form")
    avatar: str = DEFAULT_CHILD_AVATAR


class CreateWordPayload(BaseModel):
    word: str
    category_id: Optional[str] = None
    date_learned: Optional[date] = None
    notes: Optional[str] = None
    auto_categorize: bool = Field(
        default=False,
        description="Look the word up in ConceptNet and pick a matching category",
    )


class RecognitionResult(BaseModel):
    transcript: str
    is_final: bool = False


class VoiceWordsPayload(BaseModel):
    results: List[RecognitionResult]
    language: Optional[str] = None
    category_id: Optional[str] = None


class VoiceWordsResponse(BaseModel):
    added: List[Word]
    skipped: List[str] = Field(default_factory=list)


class CategoryCount(BaseModel):
    category_id: Optional[str] = None
    name: str
    color: str
    count: int


class RecentWord(BaseModel):
    word: str
    date_learned: date
    category: str


class WordStats(BaseModel):
    total: int = 0
    today: int = 0
    this_week: int = 0
    this_month: int = 0
    by_category: List[CategoryCount] = Field(default_factory=list)
    recent_words: List[RecentWord] = Field(default_factory=list)


class RecentAchievement(BaseModel):
    title: str
    achieved_date: datetime


class MilestoneStats(BaseModel):
    total: int = 0
    achieved: int = 0
    percentage: int = 0
    recent_achievements: List[RecentAchievement] = Field(default_factory=list)


class GrowthPoint(BaseModel):
    day: date
    total: int


class StatisticsResponse(BaseModel):
    words: WordStats
    milestones: MilestoneStats
    streak_days: int
    growth: List[GrowthPoint] = Field(default_factory=list)


class HomeSummary(BaseModel):
    child: Child
    total_words: int
    todays_words: int
    achieved_milestones: int
    streak_days: int
    next_milestone: Optional[Milestone] = None


class CategoryGap(BaseModel):
    category: str
    current: int
    expected: int
    severity: str

    @property
    def needed(self) -> int:
        return max(self.expected - self.current, 0)


class WordSuggestion(BaseModel):
    word: str
    category: str
    priority: str = "medium"


class SuggestionsResponse(BaseModel):
    missing_categories: List[CategoryGap]
    suggestions: List[WordSuggestion]


class FlashcardSummary(BaseModel):
    reviewed: int
    correct: int
    total: int
    accuracy: int
