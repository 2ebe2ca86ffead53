# services/daily.py
"""
Daily challenge: every learner gets the same text on the same calendar day.

The PRNG is Mulberry32 on unsigned 32-bit integers. The draw order
(sentence count, shuffle, theme) is part of the output format; reordering
the draws changes every challenge ever issued.
"""
from __future__ import annotations

import math
from datetime import date as Date
from typing import Callable, List, Optional, Sequence, TypeVar

from app.progress import DailyChallenge, DailyTheme
from app.validation import HEBREW, QWERTY

T = TypeVar("T")

_MASK = 0xFFFFFFFF

SENTENCES_EN = [
    "The quick brown fox jumps over the lazy dog near the river bank.",
    "Programming requires patience and practice to master effectively.",
    "Keyboard skills are essential in our digital age.",
    "Every expert was once a beginner who never gave up.",
    "Success comes from consistent daily practice and dedication.",
    "Type each word carefully and watch your speed increase.",
    "The journey of a thousand miles begins with a single step.",
    "Learning to type fast opens many doors in your career.",
    "Focus on accuracy first, then speed will naturally follow.",
    "Challenge yourself every day to become a better typist.",
    "Your fingers will remember the keys with enough practice.",
    "Speed and precision are the hallmarks of a skilled typist.",
    "Take breaks when needed but always return to practice.",
    "The keyboard is your instrument, master it with care.",
    "Daily practice is the secret to typing excellence.",
    "Stay calm and let your fingers dance across the keys.",
    "Every keystroke brings you closer to mastery.",
    "Believe in yourself and your typing will improve.",
    "The best typists started exactly where you are now.",
    "Persistence and practice make perfect performance.",
    "Keep your eyes on the screen, not on the keyboard.",
    "Muscle memory develops through repetition and patience.",
    "Fast typing is a valuable skill in many professions.",
    "Type with confidence and accuracy will follow.",
    "A good typist never looks down at their hands.",
    "Practice makes progress, not just perfection.",
    "Your daily challenge awaits, are you ready?",
    "Each day brings new opportunities to improve.",
    "The more you type, the faster you become.",
    "Embrace the challenge and grow stronger today.",
]

SENTENCES_HE = [
    "הקלדה מהירה היא מיומנות חשובה בעולם הדיגיטלי של היום.",
    "כל מומחה התחיל פעם כמתחיל שלא ויתר אף פעם.",
    "תרגול יומי הוא המפתח להצלחה בהקלדה עיוורת.",
    "המקלדת היא כלי, ואפשר לשלוט בה עם מספיק תרגול.",
    "כל הקשה על המקלדת מקרבת אותך לשליטה מושלמת.",
    "התמקד קודם בדיוק, והמהירות תבוא באופן טבעי.",
    "האצבעות שלך יזכרו את המקשים עם מספיק תרגול.",
    "אתגר את עצמך כל יום להפוך למקליד טוב יותר.",
    "הצלחה מגיעה מתרגול עקבי ומסירות יומיומית.",
    "למד להקליד מהר ופתח דלתות רבות בקריירה שלך.",
    "מהירות ודיוק הם סימני ההיכר של מקליד מיומן.",
    "תרגול עושה התקדמות, לא רק שלמות.",
    "האתגר היומי שלך מחכה, האם אתה מוכן?",
    "כל יום מביא הזדמנויות חדשות להשתפר.",
    "ככל שתקליד יותר, כך תהיה מהיר יותר.",
    "שמור על הרוגע ותן לאצבעותיך לרקוד על המקשים.",
    "האמן בעצמך וההקלדה שלך תשתפר.",
    "המקלידים הטובים ביותר התחילו בדיוק היכן שאתה עכשיו.",
    "התמדה ותרגול מביאים לביצוע מושלם.",
    "שמור את העיניים על המסך, לא על המקלדת.",
]

THEMES = [
    DailyTheme("🌅", "Morning Motivation"),
    DailyTheme("🎯", "Focus Challenge"),
    DailyTheme("⚡", "Speed Trial"),
    DailyTheme("🎮", "Game Day"),
    DailyTheme("📚", "Learning Session"),
    DailyTheme("🏆", "Championship Round"),
    DailyTheme("🔥", "Streak Builder"),
]


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK


class Mulberry32:
    """Seeded PRNG; `next()` returns floats in [0, 1)."""

    def __init__(self, seed: int):
        self.state = seed & _MASK

    def next(self) -> float:
        self.state = (self.state + 0x6D2B79F5) & _MASK
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK
        return ((t ^ (t >> 14)) & _MASK) / 4294967296

    __call__ = next


def shuffle(items: Sequence[T], rand: Callable[[], float]) -> List[T]:
    """Fisher-Yates from the back; returns a new list."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = math.floor(rand() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def date_to_seed(day: Date) -> int:
    return day.year * 10000 + day.month * 100 + day.day


def sentences_for_layout(layout: str) -> List[str]:
    return SENTENCES_HE if layout == HEBREW else SENTENCES_EN


def get_daily_challenge(day: Optional[Date] = None, layout: str = QWERTY) -> DailyChallenge:
    day = day or Date.today()
    rand = Mulberry32(date_to_seed(day))

    count = 2 + math.floor(rand() * 2)
    picked = shuffle(sentences_for_layout(layout), rand)[:count]
    text = " ".join(picked)
    theme = THEMES[math.floor(rand() * len(THEMES))]

    return DailyChallenge(
        date=day.isoformat(),
        text=text,
        theme=theme,
        word_count=len(text.split()),
        character_count=len(text),
    )


def get_today_string() -> str:
    return Date.today().isoformat()


def is_today(date_string: str) -> bool:
    return date_string == get_today_string()
