# app/calculation.py
"""
Typing metrics.

A "word" is 5 characters. WPM only counts correct characters so mistakes
never inflate the score. Net WPM is the legacy formula: gross WPM minus
errors per minute.
"""
import math

CHARS_PER_WORD = 5


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a scoreboard does (2.5 -> 3), not like round() (2.5 -> 2)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def calculate_wpm(correct_chars: int, elapsed_ms: float) -> int:
    if elapsed_ms <= 0 or correct_chars <= 0:
        return 0
    minutes = elapsed_ms / 60000.0
    wpm = (correct_chars / CHARS_PER_WORD) / minutes
    return int(round_half_up(max(0.0, wpm)))


def calculate_net_wpm(typed_chars: int, errors: int, elapsed_ms: float) -> int:
    if elapsed_ms <= 0 or typed_chars <= 0:
        return 0
    minutes = elapsed_ms / 60000.0
    gross = (typed_chars / CHARS_PER_WORD) / minutes
    net = gross - max(0, errors) / minutes
    return int(round_half_up(max(0.0, net)))


def calculate_accuracy(correct: int, total: int) -> float:
    # nothing typed yet means nothing typed wrong
    if total <= 0:
        return 100.0
    return round_half_up(correct / total * 100.0, 1)


def format_time(elapsed_ms: float) -> str:
    total_seconds = int(max(0, elapsed_ms) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def calculate_progress(position: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round_half_up(position / total * 100.0))


def _accuracy_score(accuracy: float) -> int:
    if accuracy >= 98:
        return 5
    if accuracy >= 95:
        return 4
    if accuracy >= 90:
        return 3
    if accuracy >= 80:
        return 2
    return 1


def _speed_score(wpm: float) -> int:
    if wpm >= 60:
        return 5
    if wpm >= 40:
        return 4
    if wpm >= 25:
        return 3
    if wpm >= 15:
        return 2
    return 1


def calculate_rating(accuracy: float, wpm: float) -> int:
    """1-5 stars, accuracy weighted 0.7 and speed 0.3."""
    weighted = _accuracy_score(accuracy) * 0.7 + _speed_score(wpm) * 0.3
    return int(round_half_up(weighted))


def get_performance_feedback(accuracy: float, wpm: float) -> str:
    if accuracy >= 98 and wpm >= 40:
        return "excellent"
    if accuracy >= 95 and wpm >= 30:
        return "great"
    if accuracy >= 90:
        return "good"
    if accuracy >= 80:
        return "keepPracticing"
    return "needsWork"


def calculate_stars(accuracy: float, passing_threshold: float = 70) -> int:
    """Lesson stars: 0 failed, 1 passed, 2 at 90%+, 3 at 98%+."""
    if accuracy < passing_threshold:
        return 0
    if accuracy >= 98:
        return 3
    if accuracy >= 90:
        return 2
    return 1
