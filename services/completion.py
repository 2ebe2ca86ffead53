# services/completion.py
"""
End-of-session bookkeeping.

`complete_session` runs synchronously and in a fixed order so later steps see
earlier results: letter EMAs/history first, then XP (which needs the updated
streak), then aggregate achievements, then the single-session ones.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date as Date, datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional

from app.calculation import calculate_stars
from app.progress import (
    LessonProgress,
    ProgressRecord,
    ProgressSnapshot,
    SessionResult,
    WeakLetterInfo,
    XpBreakdown,
)
from app.state import LetterStats, TypingStats
from services.achievements import (
    check_all_achievements,
    check_session_achievements,
    create_achievement_progress,
    get_total_achievement_xp_reward,
)
from services.lessons import count_completed_stages
from services.weakkeys import DEFAULT_HISTORY_LIMIT, LetterAccessors, WeakKeys
from services.xp import calculate_xp_enhanced

log = logging.getLogger(__name__)

HOME_KEY = "home"
LEVELS_KEY = "levels"


class ProgressStore:
    """In-memory owner of a ProgressRecord; persistence is the repository's job."""

    def __init__(self, record: Optional[ProgressRecord] = None):
        self.record = record or ProgressRecord()

    # -------- letter data --------
    def letter_accessors(self) -> LetterAccessors:
        rec = self.record
        return LetterAccessors(
            read_ema=lambda: rec.weak_letters,
            write_ema=rec.weak_letters.__setitem__,
            read_history=lambda: rec.letter_history,
            write_history=rec.letter_history.__setitem__,
        )

    # -------- lessons / sessions --------
    def complete_lesson(self, lesson_id: str, accuracy: float, wpm: int, stars: int,
                        xp_earned: int, now: Optional[datetime] = None) -> LessonProgress:
        """Record one session; the lesson counts as completed only when stars > 0."""
        now = now or datetime.now(timezone.utc)
        rec = self.record

        rec.session_history.append(SessionResult(lesson_id, accuracy, wpm, now.isoformat()))
        n = len(rec.session_history)
        rec.average_accuracy = (rec.average_accuracy * (n - 1) + accuracy) / n
        rec.average_wpm = (rec.average_wpm * (n - 1) + wpm) / n

        prev = rec.lessons.get(lesson_id) or LessonProgress(lesson_id)
        progress = LessonProgress(
            lesson_id=lesson_id,
            best_accuracy=max(prev.best_accuracy, accuracy),
            best_wpm=max(prev.best_wpm, wpm),
            attempts=prev.attempts + 1,
            stars=max(prev.stars, stars),
            xp_earned=max(prev.xp_earned, xp_earned),
            last_attempt=now.isoformat(),
        )
        rec.lessons[lesson_id] = progress

        if stars > 0 and lesson_id not in rec.completed_lessons:
            rec.completed_lessons.append(lesson_id)
        return progress

    def update_streak(self, today: Optional[Date] = None) -> int:
        """Same day keeps the streak, the next day extends it, any gap restarts at 1."""
        today = today or Date.today()
        last = Date.fromisoformat(self.record.last_practice_date) if self.record.last_practice_date else None

        if last == today:
            return self.record.practice_streak
        if last is not None and last == today - timedelta(days=1):
            self.record.practice_streak += 1
        else:
            self.record.practice_streak = 1

        self.record.last_practice_date = today.isoformat()
        self.record.longest_streak = max(self.record.longest_streak, self.record.practice_streak)
        return self.record.practice_streak

    def add_xp(self, amount: int) -> int:
        self.record.total_xp += max(0, amount)
        return self.record.total_xp

    def register_click(self, key: str) -> int:
        if key == HOME_KEY:
            self.record.home_key_clicks += 1
            return self.record.home_key_clicks
        if key == LEVELS_KEY:
            self.record.levels_key_clicks += 1
            return self.record.levels_key_clicks
        raise ValueError(f"Unknown click target: {key!r}")

    def unlock(self, achievement_ids: List[str], now: Optional[datetime] = None) -> None:
        for achievement_id in achievement_ids:
            self.record.achievements[achievement_id] = create_achievement_progress(achievement_id, now)

    def snapshot(self) -> ProgressSnapshot:
        rec = self.record
        return ProgressSnapshot(
            completed_lessons=list(rec.completed_lessons),
            stages_completed=count_completed_stages(rec.completed_lessons),
            total_xp=rec.total_xp,
            average_wpm=rec.average_wpm,
            average_accuracy=rec.average_accuracy,
            practice_streak=rec.practice_streak,
            longest_streak=rec.longest_streak,
            total_sessions=len(rec.session_history),
            perfect_lessons=sum(1 for lp in rec.lessons.values() if lp.best_accuracy >= 100),
            three_star_lessons=sum(1 for lp in rec.lessons.values() if lp.stars >= 3),
            weak_letters=dict(rec.weak_letters),
            home_key_clicks=rec.home_key_clicks,
            levels_key_clicks=rec.levels_key_clicks,
        )

    def check_click_achievements(self, now: Optional[datetime] = None) -> List[str]:
        newly = check_all_achievements(self.snapshot(), self.record.achievements)
        self.unlock(newly, now)
        return newly


@dataclass
class CompletionReport:
    stats: TypingStats
    xp: XpBreakdown
    stars: int
    newly_unlocked: List[str] = field(default_factory=list)
    achievement_xp: int = 0
    letter_updates: Dict[str, float] = field(default_factory=dict)
    weak_letters: List[WeakLetterInfo] = field(default_factory=list)


NO_XP = XpBreakdown(base_xp=0, star_bonus=0, accuracy_bonus=0, speed_bonus=0, streak_bonus=0, total=0)


def complete_session(
    store: ProgressStore,
    stats: TypingStats,
    letter_tally: Mapping[str, LetterStats],
    lesson_id: str,
    base_xp: int,
    passing_accuracy: float = 70,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
    session_id: Optional[str] = None,
    today: Optional[Date] = None,
    now: Optional[datetime] = None,
) -> CompletionReport:
    now = now or datetime.now(timezone.utc)
    session_id = session_id or uuid.uuid4().hex
    weak_keys = WeakKeys(store.letter_accessors(), history_limit=history_limit, now=now.isoformat)

    # 1. letters
    letter_updates = weak_keys.record_session(letter_tally, session_id)

    # 2. xp
    stars = calculate_stars(stats.accuracy, passing_accuracy)
    streak = store.update_streak(today)
    if stars > 0:
        xp = calculate_xp_enhanced(base_xp, stats.accuracy, stats.wpm, stars, streak)
    else:
        xp = NO_XP
    store.complete_lesson(lesson_id, stats.accuracy, stats.wpm, stars, xp.total, now)
    store.add_xp(xp.total)

    # 3. achievements: aggregate first, then this session
    newly = check_all_achievements(store.snapshot(), store.record.achievements)
    store.unlock(newly, now)
    session_newly = check_session_achievements(stats.wpm, stats.accuracy, store.record.achievements)
    store.unlock(session_newly, now)
    newly += session_newly

    reward = get_total_achievement_xp_reward(newly)
    store.add_xp(reward)

    log.info(
        "Session %s on %s: %s wpm, %s%% accuracy, %d stars, +%d xp, unlocked %s",
        session_id, lesson_id, stats.wpm, stats.accuracy, stars, xp.total + reward, newly or "nothing",
    )
    return CompletionReport(
        stats=stats,
        xp=xp,
        stars=stars,
        newly_unlocked=newly,
        achievement_xp=reward,
        letter_updates=letter_updates,
        weak_letters=weak_keys.ranked(),
    )
