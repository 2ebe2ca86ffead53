from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

from app.validation import HEBREW, QWERTY

# -------- English pools --------
TWO_LETTER = [
    "a", "an", "am", "as", "at", "be", "by", "do", "go", "he",
    "if", "in", "is", "it", "me", "my", "no", "of", "on", "or",
    "so", "to", "up", "us", "we",
]

THREE_LETTER = [
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
    "how", "man", "new", "now", "old", "see", "way", "who", "boy", "did",
    "let", "put", "say", "she", "too", "use", "any", "may", "run", "top",
    "big", "red", "cat", "dog", "sun", "fun", "cup", "hat", "bat", "mat",
    "sat", "ran", "hop", "job", "box", "fox", "mix", "fix", "six", "yes",
]

FOUR_LETTER = [
    "that", "with", "have", "this", "will", "your", "from", "they",
    "been", "some", "what", "when", "make", "like", "time", "just",
    "know", "take", "come", "want", "look", "good", "work", "year",
    "also", "back", "give", "most", "only", "over", "such", "more",
    "find", "here", "many", "than", "them", "then", "were", "very",
    "call", "down", "each", "even", "hand", "high", "last", "long",
    "life", "home", "love", "read", "keep", "help", "play", "feel",
    "best", "must", "need", "part", "into", "well", "same", "used",
    "book", "city", "much", "name", "kind", "move", "open", "live",
    "tree", "blue", "fast", "jump", "word", "next", "both", "hard",
]

FIVE_LETTER = [
    "there", "their", "which", "would", "these", "other", "about",
    "could", "after", "first", "water", "where", "think", "being",
    "great", "place", "right", "still", "young", "every", "found",
    "world", "house", "never", "under", "again", "might", "while",
    "three", "those", "night", "thing", "group", "state", "since",
    "study", "light", "write", "story", "point", "heard", "often",
    "asked", "later", "known", "small", "early", "began", "taken",
    "paper", "music", "happy", "start", "plant", "learn", "watch",
    "earth", "close", "above", "along", "sound", "today", "money",
    "green", "speak", "party", "heart", "peace", "quiet", "dream",
]

SIX_LETTER = [
    "people", "before", "should", "number", "always", "become",
    "around", "though", "school", "family", "friend", "little",
    "mother", "father", "system", "second", "public", "almost",
    "happen", "simple", "person", "change", "really", "follow",
    "return", "reason", "answer", "others", "better", "during",
    "beauty", "nature", "wonder", "listen", "travel", "garden",
    "gentle", "warmth", "safety", "moment", "sunset", "breath",
]

# -------- Hebrew pools --------
SHORT_HEBREW = [
    "אם", "אב", "יד", "עד", "גב", "זה", "לא", "כן", "מה", "על",
    "עם", "אל", "גם", "רק", "בו", "לו", "כי", "או", "פה", "שם",
    "דג", "גל", "חם", "קר", "טל", "יש", "אך", "עץ", "בת", "בן",
    "אמא", "אבא", "סבא", "סבתא", "ילד", "ילדה", "כלב", "חתול", "דבש", "עוף",
    "חלב", "לחם", "מים", "שמש", "ירח", "כוכב", "ספר", "בית", "דלת", "חלון",
]

MEDIUM_HEBREW = [
    "שלום", "תודה", "בוקר", "ערב", "לילה", "יופי", "חבר", "חברה", "מורה",
    "תלמיד", "כיתה", "ספריה", "עיתון", "רחוב", "עיר", "כפר", "נהר", "ים", "הר",
    "שדה", "פרח", "עציץ", "גינה", "בגד", "נעל", "כובע", "שעון", "טלפון",
    "מחשב", "מסך", "עכבר", "רדיו", "שולחן", "כיסא", "מיטה", "ארון",
    "קיר", "רצפה", "תקרה", "גג", "מרפסת", "מטבח", "סלון", "חדר",
]

LONG_HEBREW = [
    "מקלדת", "הקלדה", "תרגול", "תרגיל", "אימון", "למידה", "הצלחה", "התקדמות", "שיפור", "מיומנות",
    "מהירות", "דיוק", "ריכוז", "אצבעות", "תוכנה", "יישום", "קובץ",
    "תיקיה", "מסמך", "טקסט", "מילה", "משפט", "פסקה", "עמוד", "סיפור", "כתיבה",
    "קריאה", "שיחה", "דיבור", "הקשבה", "שמיעה", "ראיה", "תצפית", "מחשבה", "רעיון", "יצירה",
]


class WordBank:
    """
    Word pools for one layout: three length tiers, a flat list and a
    letter -> words index built once at construction.
    `tier_weights` are the cumulative draw probabilities for short/medium;
    None draws uniformly from the flat list.
    """

    def __init__(self, short: Sequence[str], medium: Sequence[str], long: Sequence[str],
                 tier_weights: Optional[Sequence[float]] = None):
        self.short = list(short)
        self.medium = list(medium)
        self.long = list(long)
        self.all_words = self.short + self.medium + self.long
        self.tier_weights = tier_weights
        self.by_letter: Dict[str, List[str]] = {}
        for word in self.all_words:
            for letter in sorted(set(word.lower())):
                self.by_letter.setdefault(letter, []).append(word)

    def words_for_letter(self, letter: str) -> List[str]:
        return list(self.by_letter.get(letter.lower(), ()))

    def random_word(self, rng: random.Random) -> str:
        if self.tier_weights is None:
            return rng.choice(self.all_words)
        roll = rng.random()
        short_cut, medium_cut = self.tier_weights
        if roll < short_cut:
            pool = self.short
        elif roll < medium_cut:
            pool = self.medium
        else:
            pool = self.long
        return rng.choice(pool)

    def random_word_with_letter(self, letter: str, rng: random.Random) -> str:
        words = self.words_for_letter(letter)
        if not words:
            return self.random_word(rng)
        return rng.choice(words)

    def words_in_range(self, lo: int, hi: int) -> List[str]:
        return [w for w in self.all_words if lo <= len(w) <= hi]


ENGLISH = WordBank(
    TWO_LETTER, THREE_LETTER + FOUR_LETTER, FIVE_LETTER + SIX_LETTER,
    tier_weights=(0.15, 0.75),
)
HEBREW_BANK = WordBank(SHORT_HEBREW, MEDIUM_HEBREW, LONG_HEBREW)

_BANKS = {QWERTY: ENGLISH, HEBREW: HEBREW_BANK}


def get_word_bank(layout: str = QWERTY) -> WordBank:
    return _BANKS.get(layout, ENGLISH)
