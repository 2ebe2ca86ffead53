"""
Letter analytics: trend, consistency and priority derived from a letter's
accuracy history. Everything here is a pure function over snapshots; nothing
is cached, callers recompute whenever they need a view.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from app.calculation import round_half_up
from app.progress import LetterHistoryEntry, LetterTrend, MasteryLevel, WeakLetterInfo

MIN_ENTRIES_FOR_TREND = 3
TREND_THRESHOLD = 5.0
WEAK_THRESHOLD = 80.0
MASTERED_THRESHOLD = 95.0
LEARNING_THRESHOLD = 70.0
# std-dev of a very erratic typist; maps to consistency 0
MAX_STD_DEV = 35.0

History = Mapping[str, Sequence[LetterHistoryEntry]]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def get_letter_trend(history: Sequence[LetterHistoryEntry]) -> LetterTrend:
    if len(history) < MIN_ENTRIES_FOR_TREND:
        return LetterTrend.STABLE

    mid = len(history) // 2
    older = _mean([e.accuracy for e in history[:mid]])
    recent = _mean([e.accuracy for e in history[mid:]])
    diff = recent - older

    if diff >= TREND_THRESHOLD:
        return LetterTrend.IMPROVING
    if diff <= -TREND_THRESHOLD:
        return LetterTrend.DECLINING
    return LetterTrend.STABLE


def get_consistency(history: Sequence[LetterHistoryEntry]) -> int:
    """0-100, higher means steadier accuracy across sessions."""
    if len(history) < 2:
        return 100

    values = [e.accuracy for e in history]
    mean = _mean(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    std_dev = math.sqrt(variance)

    score = max(0.0, min(100.0, 100.0 - (std_dev / MAX_STD_DEV) * 100.0))
    return int(round_half_up(score))


def calculate_priority(accuracy: float, trend: LetterTrend, consistency: float) -> int:
    priority = 100.0 - accuracy
    if trend is LetterTrend.DECLINING:
        priority += 15
    elif trend is LetterTrend.IMPROVING:
        priority -= 10
    priority += (100.0 - consistency) * 0.1
    return int(max(0.0, min(100.0, round_half_up(priority))))


def get_weak_letters_ranked(weak_letters: Mapping[str, float], letter_history: History) -> List[WeakLetterInfo]:
    result: List[WeakLetterInfo] = []
    for letter, accuracy in weak_letters.items():
        if accuracy >= WEAK_THRESHOLD:
            continue
        history = letter_history.get(letter, ())
        trend = get_letter_trend(history)
        consistency = get_consistency(history)
        result.append(
            WeakLetterInfo(
                letter=letter,
                accuracy=round_half_up(accuracy, 2),
                trend=trend,
                consistency=consistency,
                priority=calculate_priority(accuracy, trend, consistency),
            )
        )
    # stable sort: ties keep insertion order
    result.sort(key=lambda info: -info.priority)
    return result


def get_most_problematic(weak_letters: Mapping[str, float], letter_history: History, limit: int = 5) -> List[str]:
    return [info.letter for info in get_weak_letters_ranked(weak_letters, letter_history)[:limit]]


def _letters_with_trend(weak_letters: Mapping[str, float], letter_history: History, trend: LetterTrend) -> List[str]:
    return [
        letter for letter in weak_letters
        if get_letter_trend(letter_history.get(letter, ())) is trend
    ]


def get_improving_letters(weak_letters: Mapping[str, float], letter_history: History) -> List[str]:
    return _letters_with_trend(weak_letters, letter_history, LetterTrend.IMPROVING)


def get_declining_letters(weak_letters: Mapping[str, float], letter_history: History) -> List[str]:
    return _letters_with_trend(weak_letters, letter_history, LetterTrend.DECLINING)


def _parse_date(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def get_recently_mastered(
    weak_letters: Mapping[str, float],
    letter_history: History,
    days_back: int = 7,
    now: Optional[datetime] = None,
) -> List[str]:
    """Letters now at 95%+ that were still below it at some point in the window."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(days=days_back)

    mastered = []
    for letter, accuracy in weak_letters.items():
        if accuracy < MASTERED_THRESHOLD:
            continue
        history = letter_history.get(letter, ())
        if len(history) < 2:
            continue
        recent = [e for e in history if _parse_date(e.date) >= cutoff]
        if any(e.accuracy < MASTERED_THRESHOLD for e in recent):
            mastered.append(letter)
    return mastered


def get_mastery_level(letter: str, weak_letters: Mapping[str, float]) -> MasteryLevel:
    if letter not in weak_letters:
        return MasteryLevel.LOCKED
    accuracy = weak_letters[letter]
    if accuracy >= MASTERED_THRESHOLD:
        return MasteryLevel.MASTERED
    if accuracy >= LEARNING_THRESHOLD:
        return MasteryLevel.LEARNING
    return MasteryLevel.WEAK


def get_letter_stats(weak_letters: Mapping[str, float], letter_history: History) -> Dict[str, int]:
    stats = {
        "total_tracked": len(weak_letters),
        "mastered": 0,
        "learning": 0,
        "weak": 0,
        "improving": 0,
        "declining": 0,
    }
    for letter in weak_letters:
        stats[get_mastery_level(letter, weak_letters).value] += 1
        trend = get_letter_trend(letter_history.get(letter, ()))
        if trend is not LetterTrend.STABLE:
            stats[trend.value] += 1
    return stats
