# app/progress.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

PROGRESS_VERSION = 2


class LetterTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class MasteryLevel(str, Enum):
    MASTERED = "mastered"
    LEARNING = "learning"
    WEAK = "weak"
    LOCKED = "locked"


@dataclass(frozen=True)
class LetterHistoryEntry:
    date: str  # ISO timestamp
    accuracy: float
    session_id: str = ""


@dataclass(frozen=True)
class WeakLetterInfo:
    letter: str
    accuracy: float
    trend: LetterTrend
    consistency: int
    priority: int


@dataclass(frozen=True)
class XpBreakdown:
    base_xp: int
    star_bonus: int
    accuracy_bonus: int
    speed_bonus: int
    streak_bonus: int
    total: int


@dataclass
class AchievementProgress:
    achievement_id: str
    unlocked: bool = False
    unlocked_at: Optional[str] = None
    seen: bool = False


@dataclass(frozen=True)
class DailyTheme:
    emoji: str
    name: str


@dataclass(frozen=True)
class DailyChallenge:
    date: str  # YYYY-MM-DD
    text: str
    theme: DailyTheme
    word_count: int
    character_count: int


@dataclass(frozen=True)
class ProgressSnapshot:
    """Read-only aggregate handed to achievement checks."""
    completed_lessons: List[str] = field(default_factory=list)
    stages_completed: int = 0
    total_xp: int = 0
    average_wpm: float = 0.0
    average_accuracy: float = 0.0
    practice_streak: int = 0
    longest_streak: int = 0
    total_sessions: int = 0
    perfect_lessons: int = 0
    three_star_lessons: int = 0
    weak_letters: Dict[str, float] = field(default_factory=dict)
    home_key_clicks: int = 0
    levels_key_clicks: int = 0


@dataclass
class SessionResult:
    lesson_id: str
    accuracy: float
    wpm: int
    date: str


@dataclass
class LessonProgress:
    lesson_id: str
    best_accuracy: float = 0.0
    best_wpm: int = 0
    attempts: int = 0
    stars: int = 0
    xp_earned: int = 0
    last_attempt: Optional[str] = None


@dataclass
class ProgressRecord:
    """Everything the repository persists for one learner."""
    version: int = PROGRESS_VERSION
    completed_lessons: List[str] = field(default_factory=list)
    lessons: Dict[str, LessonProgress] = field(default_factory=dict)
    total_xp: int = 0
    average_accuracy: float = 0.0
    average_wpm: float = 0.0
    practice_streak: int = 0
    longest_streak: int = 0
    last_practice_date: Optional[str] = None
    session_history: List[SessionResult] = field(default_factory=list)
    weak_letters: Dict[str, float] = field(default_factory=dict)
    letter_history: Dict[str, List[LetterHistoryEntry]] = field(default_factory=dict)
    achievements: Dict[str, AchievementProgress] = field(default_factory=dict)
    home_key_clicks: int = 0
    levels_key_clicks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ProgressRecord":
        return ProgressRecord(
            version=int(data.get("version", PROGRESS_VERSION)),
            completed_lessons=list(data.get("completed_lessons", [])),
            lessons={
                k: LessonProgress(**v) for k, v in data.get("lessons", {}).items()
            },
            total_xp=int(data.get("total_xp", 0)),
            average_accuracy=float(data.get("average_accuracy", 0.0)),
            average_wpm=float(data.get("average_wpm", 0.0)),
            practice_streak=int(data.get("practice_streak", 0)),
            longest_streak=int(data.get("longest_streak", 0)),
            last_practice_date=data.get("last_practice_date"),
            session_history=[SessionResult(**s) for s in data.get("session_history", [])],
            weak_letters={k: float(v) for k, v in data.get("weak_letters", {}).items()},
            letter_history={
                letter: [LetterHistoryEntry(**e) for e in entries]
                for letter, entries in data.get("letter_history", {}).items()
            },
            achievements={
                k: AchievementProgress(**v) for k, v in data.get("achievements", {}).items()
            },
            home_key_clicks=int(data.get("home_key_clicks", 0)),
            levels_key_clicks=int(data.get("levels_key_clicks", 0)),
        )
