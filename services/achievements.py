# services/achievements.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from app.progress import AchievementProgress, ProgressSnapshot
from services.letter_analytics import MASTERED_THRESHOLD
from services.lessons import total_lessons

log = logging.getLogger(__name__)

# session conditions look at one finished session, not the aggregate
SESSION_WPM_MIN = "session_wpm_min"
SESSION_ACCURACY_MIN = "session_accuracy_min"
SESSION_CONDITIONS = (SESSION_WPM_MIN, SESSION_ACCURACY_MIN)


@dataclass(frozen=True)
class Achievement:
    id: str
    category: str
    rarity: str
    icon: str
    title: str
    description: str
    xp_reward: int
    condition_type: str
    threshold: float
    hidden: bool = False


ACHIEVEMENTS: List[Achievement] = [
    # milestone
    Achievement("first-steps", "milestone", "common", "🎯", "First Steps",
                "Complete your first lesson", 25, "lessons_completed", 1),
    Achievement("home-row-hero", "milestone", "common", "🏠", "Home Row Hero",
                "Complete Stage 1", 50, "stages_completed", 1),
    Achievement("halfway-there", "milestone", "rare", "⛰️", "Halfway There",
                "Complete 3 stages", 100, "stages_completed", 3),
    Achievement("keyboard-conqueror", "milestone", "legendary", "🏆", "Keyboard Conqueror",
                "Complete the entire curriculum", 500, "curriculum_complete", 1),
    # speed
    Achievement("speed-demon", "speed", "common", "⚡", "Speed Demon",
                "Reach 30 WPM average", 50, "average_wpm", 30),
    Achievement("lightning-fingers", "speed", "rare", "⚡", "Lightning Fingers",
                "Reach 50 WPM in a lesson", 75, SESSION_WPM_MIN, 50),
    Achievement("turbo-typer", "speed", "epic", "🚀", "Turbo Typer",
                "Reach 70 WPM in a lesson", 150, SESSION_WPM_MIN, 70),
    # accuracy
    Achievement("perfectionist", "accuracy", "rare", "💎", "Perfectionist",
                "Complete 5 lessons with 100% accuracy", 100, "perfect_lessons", 5),
    Achievement("star-collector", "accuracy", "rare", "⭐", "Star Collector",
                "Earn 3 stars on 10 lessons", 100, "three_star_lessons", 10),
    # streak
    Achievement("on-fire", "streak", "common", "🔥", "On Fire!",
                "Reach a 7-day streak", 75, "streak_days", 7),
    Achievement("unstoppable", "streak", "epic", "🔥", "Unstoppable",
                "Reach a 30-day streak", 200, "streak_days", 30),
    # dedication
    Achievement("dedicated-typist", "dedication", "common", "📚", "Dedicated Typist",
                "Complete 25 practice sessions", 50, "total_sessions", 25),
    Achievement("xp-hunter", "dedication", "rare", "💰", "XP Hunter",
                "Earn 1000 total XP", 100, "total_xp", 1000),
    # mastery
    Achievement("key-master", "mastery", "epic", "🔑", "Key Master",
                "Master 20 keys (95%+ accuracy)", 150, "keys_mastered", 20),
    # secret
    Achievement("curious-clicker", "secret", "common", "🗝️", "Curious Clicker",
                "Click the key 10 times", 10, "home_key_clicks", 10, hidden=True),
    Achievement("key-enthusiast", "secret", "rare", "🔐", "Key Enthusiast",
                "Click the key 50 times", 25, "home_key_clicks", 50, hidden=True),
    Achievement("key-obsessed", "secret", "epic", "🏅", "Key Obsessed",
                "Click the key 100 times", 50, "home_key_clicks", 100, hidden=True),
    Achievement("map-explorer", "secret", "common", "🗺️", "Map Explorer",
                "Click the quest key 10 times", 10, "levels_key_clicks", 10, hidden=True),
    Achievement("treasure-seeker", "secret", "rare", "💎", "Treasure Seeker",
                "Click the quest key 50 times", 25, "levels_key_clicks", 50, hidden=True),
    Achievement("legendary-finder", "secret", "legendary", "👑", "Legendary Finder",
                "Click the quest key 100 times", 100, "levels_key_clicks", 100, hidden=True),
]

_BY_ID: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def _keys_mastered(s: ProgressSnapshot) -> int:
    return sum(1 for acc in s.weak_letters.values() if acc >= MASTERED_THRESHOLD)


_SNAPSHOT_METRICS: Dict[str, Callable[[ProgressSnapshot], float]] = {
    "lessons_completed": lambda s: len(s.completed_lessons),
    "stages_completed": lambda s: s.stages_completed,
    "total_xp": lambda s: s.total_xp,
    "average_wpm": lambda s: s.average_wpm,
    "average_accuracy": lambda s: s.average_accuracy,
    "streak_days": lambda s: s.practice_streak,
    "longest_streak": lambda s: s.longest_streak,
    "total_sessions": lambda s: s.total_sessions,
    "perfect_lessons": lambda s: s.perfect_lessons,
    "three_star_lessons": lambda s: s.three_star_lessons,
    "keys_mastered": _keys_mastered,
    "home_key_clicks": lambda s: s.home_key_clicks,
    "levels_key_clicks": lambda s: s.levels_key_clicks,
}


def get_achievement(achievement_id: str) -> Optional[Achievement]:
    return _BY_ID.get(achievement_id)


def check_achievement_condition(achievement: Achievement, snapshot: ProgressSnapshot) -> bool:
    if achievement.condition_type == "curriculum_complete":
        return len(snapshot.completed_lessons) >= total_lessons()
    metric = _SNAPSHOT_METRICS.get(achievement.condition_type)
    if metric is None:
        # session conditions and unknown types never unlock from a snapshot
        return False
    return metric(snapshot) >= achievement.threshold


def _is_unlocked(current: Mapping[str, AchievementProgress], achievement_id: str) -> bool:
    existing = current.get(achievement_id)
    return existing is not None and existing.unlocked


def check_all_achievements(
    snapshot: ProgressSnapshot,
    current: Mapping[str, AchievementProgress],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> List[str]:
    """IDs that unlock now. Unlocked entries are skipped, so nothing is ever revoked."""
    newly = []
    for achievement in catalog:
        if achievement.condition_type in SESSION_CONDITIONS:
            continue
        if _is_unlocked(current, achievement.id):
            continue
        if check_achievement_condition(achievement, snapshot):
            newly.append(achievement.id)
    if newly:
        log.debug("Snapshot unlocks: %s", ", ".join(newly))
    return newly


def check_session_achievements(
    session_wpm: float,
    session_accuracy: float,
    current: Mapping[str, AchievementProgress],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> List[str]:
    newly = []
    for achievement in catalog:
        if _is_unlocked(current, achievement.id):
            continue
        if achievement.condition_type == SESSION_WPM_MIN and session_wpm >= achievement.threshold:
            newly.append(achievement.id)
        elif achievement.condition_type == SESSION_ACCURACY_MIN and session_accuracy >= achievement.threshold:
            newly.append(achievement.id)
    return newly


def create_achievement_progress(achievement_id: str, now: Optional[datetime] = None) -> AchievementProgress:
    now = now or datetime.now(timezone.utc)
    return AchievementProgress(
        achievement_id=achievement_id,
        unlocked=True,
        unlocked_at=now.isoformat(),
        seen=False,
    )


def get_total_achievement_xp_reward(achievement_ids: Iterable[str]) -> int:
    return sum(_BY_ID[i].xp_reward for i in achievement_ids if i in _BY_ID)
