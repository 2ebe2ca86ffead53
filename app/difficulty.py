from dataclasses import dataclass
from typing import Dict, Tuple

CHILD = "child"
TEEN = "teen"
ADULT = "adult"
AGE_GROUPS = (CHILD, TEEN, ADULT)


@dataclass(frozen=True)
class DifficultyProfile:
    word_length_range: Tuple[int, int]
    encouragement_level: str
    show_keyboard_default: bool
    show_finger_guide_default: bool


PROFILES: Dict[str, DifficultyProfile] = {
    CHILD: DifficultyProfile((2, 4), "high", True, True),
    TEEN: DifficultyProfile((3, 6), "medium", True, False),
    ADULT: DifficultyProfile((4, 8), "low", False, False),
}


def get_difficulty_profile(age_group: str) -> DifficultyProfile:
    # unknown groups get the middle profile
    return PROFILES.get(age_group, PROFILES[TEEN])


def is_word_appropriate(word: str, age_group: str) -> bool:
    lo, hi = get_difficulty_profile(age_group).word_length_range
    return lo <= len(word) <= hi
