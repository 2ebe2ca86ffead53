"""
XP for a finished lesson.

    star-adjusted = base * (1 + max(0, stars - 1) * 0.25)
    accuracy bonus  +20% of star-adjusted at 100% accuracy
    speed bonus     +10% per full 10 WPM above 30, at most +50%
    streak bonus    +5% per streak day, at most +25%
"""
import math

from app.calculation import round_half_up
from app.progress import XpBreakdown


def get_star_multiplier(stars: int) -> float:
    return 1 + max(0, stars - 1) * 0.25


def get_speed_bonus_multiplier(wpm: float) -> float:
    if wpm < 30:
        return 0.0
    tiers = math.floor((wpm - 30) / 10)
    return min(tiers * 0.1, 0.5)


def get_streak_bonus_multiplier(streak: int) -> float:
    if streak <= 0:
        return 0.0
    return min(streak * 0.05, 0.25)


def calculate_xp_enhanced(base_xp: int, accuracy: float, wpm: float, stars: int, streak: int) -> XpBreakdown:
    adjusted = base_xp * get_star_multiplier(stars)
    adjusted_rounded = int(round_half_up(adjusted))

    accuracy_bonus = int(round_half_up(adjusted * 0.2)) if accuracy >= 100 else 0
    speed_bonus = int(round_half_up(adjusted * get_speed_bonus_multiplier(wpm)))
    streak_bonus = int(round_half_up(adjusted * get_streak_bonus_multiplier(streak)))

    return XpBreakdown(
        base_xp=base_xp,
        star_bonus=adjusted_rounded - base_xp,
        accuracy_bonus=accuracy_bonus,
        speed_bonus=speed_bonus,
        streak_bonus=streak_bonus,
        total=adjusted_rounded + accuracy_bonus + speed_bonus + streak_bonus,
    )


def calculate_xp_simple(base_xp: int, accuracy: float, stars: int) -> int:
    bonus = 1.2 if accuracy >= 100 else 1.0
    return int(round_half_up(base_xp * get_star_multiplier(stars) * bonus))
