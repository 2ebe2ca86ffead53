# services/text_generator.py
"""
Practice text that leans toward the learner's weak letters.

Two flavours share the same loop: keep drawing words until the character
budget (word + one space each) is spent. With probability `weak_letter_weight`
a word is drawn from the letter index for a weak/target letter, otherwise
from the general pool. Calm practice uses 0.4, targeted practice 0.7.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from app.difficulty import TEEN, get_difficulty_profile
from app.validation import QWERTY
from services.wordbank import WordBank, get_word_bank

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 60
DEFAULT_APPEND_THRESHOLD = 0.8
# letters at or above this accuracy are not worth biasing toward
RANDOM_WEAK_CUTOFF = 85.0


@dataclass
class CalmTextConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    weak_letters: Mapping[str, float] = field(default_factory=dict)
    focus_weak_letters: bool = True
    weak_letter_weight: float = 0.4
    layout: str = QWERTY


@dataclass
class TargetedTextConfig:
    weak_letters: Mapping[str, float] = field(default_factory=dict)
    age_group: str = TEEN
    target_letters: Optional[Sequence[str]] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    weak_letter_weight: float = 0.7
    layout: str = QWERTY


def get_weakest_letter(weak_letters: Mapping[str, float]) -> Optional[str]:
    if not weak_letters:
        return None
    return min(weak_letters.items(), key=lambda kv: kv[1])[0]


def get_random_weak_letter(weak_letters: Mapping[str, float], rng: random.Random) -> Optional[str]:
    """Pick a letter below 85%, weighted by how far below 100 it sits."""
    weak = [(letter, acc) for letter, acc in weak_letters.items() if acc < RANDOM_WEAK_CUTOFF]
    if not weak:
        return None

    weights = [100.0 - acc for _, acc in weak]
    roll = rng.random() * sum(weights)
    for (letter, _), weight in zip(weak, weights):
        roll -= weight
        if roll <= 0:
            return letter
    return weak[0][0]


def _fill(chunk_size: int, draw: Callable[[], str]) -> str:
    words: List[str] = []
    count = 0
    # at least one word, so appending can never stall
    while not words or count < chunk_size:
        word = draw()
        words.append(word)
        count += len(word) + 1
    return " ".join(words)


# -------- calm (ambient) practice --------
def generate_calm_text(config: Optional[CalmTextConfig] = None, rng: Optional[random.Random] = None) -> str:
    config = config or CalmTextConfig()
    rng = rng or random.Random()
    bank = get_word_bank(config.layout)
    focus = config.focus_weak_letters and len(config.weak_letters) > 0

    def draw() -> str:
        if focus and rng.random() < config.weak_letter_weight:
            letter = get_random_weak_letter(config.weak_letters, rng)
            if letter is not None:
                return bank.random_word_with_letter(letter, rng)
        return bank.random_word(rng)

    return _fill(config.chunk_size, draw)


def _join_chunk(existing: str, chunk: str) -> str:
    if existing and not existing[-1].isspace():
        return " " + chunk
    return chunk


def generate_more_text(existing: str, config: Optional[CalmTextConfig] = None,
                       rng: Optional[random.Random] = None) -> str:
    """A new chunk, with a leading space when `existing` needs one."""
    return _join_chunk(existing, generate_calm_text(config, rng))


def get_append_threshold(text_length: int, threshold: float = DEFAULT_APPEND_THRESHOLD) -> int:
    return int(text_length * threshold)


def should_generate_more(position: int, text_length: int, threshold: float = DEFAULT_APPEND_THRESHOLD) -> bool:
    return position >= get_append_threshold(text_length, threshold)


# -------- targeted practice --------
def _random_word_for_age(bank: WordBank, age_group: str, rng: random.Random) -> str:
    lo, hi = get_difficulty_profile(age_group).word_length_range
    pool = bank.words_in_range(lo, hi)
    if not pool:
        return rng.choice(bank.medium)
    return rng.choice(pool)


def _random_word_with_letter_for_age(bank: WordBank, letter: str, age_group: str, rng: random.Random) -> str:
    lo, hi = get_difficulty_profile(age_group).word_length_range
    letter_words = bank.words_for_letter(letter)
    fitting = [w for w in letter_words if lo <= len(w) <= hi]
    if fitting:
        return rng.choice(fitting)
    if letter_words:
        return rng.choice(letter_words)
    return _random_word_for_age(bank, age_group, rng)


def _select_target_letter(config: TargetedTextConfig, rng: random.Random) -> Optional[str]:
    if config.target_letters:
        return rng.choice(list(config.target_letters))
    return get_random_weak_letter(config.weak_letters, rng)


def generate_targeted_text(config: TargetedTextConfig, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    bank = get_word_bank(config.layout)
    has_targets = bool(config.target_letters) or len(config.weak_letters) > 0

    def draw() -> str:
        if has_targets and rng.random() < config.weak_letter_weight:
            letter = _select_target_letter(config, rng)
            if letter is not None:
                return _random_word_with_letter_for_age(bank, letter, config.age_group, rng)
        return _random_word_for_age(bank, config.age_group, rng)

    return _fill(config.chunk_size, draw)


def generate_more_targeted_text(existing: str, config: TargetedTextConfig,
                                rng: Optional[random.Random] = None) -> str:
    return _join_chunk(existing, generate_targeted_text(config, rng))


def generate_initial_targeted_text(config: TargetedTextConfig, initial_chunks: int = 3,
                                   rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return " ".join(generate_targeted_text(config, rng) for _ in range(max(1, initial_chunks)))


def get_target_letter_stats(text: str, target_letters: Sequence[str]) -> Dict[str, object]:
    targets = {letter.lower() for letter in target_letters}
    breakdown = {letter: 0 for letter in targets}
    hits = 0
    for ch in text.lower():
        if ch in targets:
            hits += 1
            breakdown[ch] += 1
    total = sum(1 for ch in text if not ch.isspace())
    return {
        "total_chars": total,
        "target_letter_count": hits,
        "target_letter_percentage": round(hits / total * 100) if total else 0,
        "letter_breakdown": breakdown,
    }


class EndlessText:
    """
    Growing practice text. The caller reports the cursor position; once it
    passes the threshold fraction of the text a new chunk is appended, at most
    once per crossing.
    """

    def __init__(
        self,
        make_chunk: Callable[[str, int], str],
        initial_chunk_size: int = DEFAULT_CHUNK_SIZE,
        append_chunk_size: int = 40,
        threshold: float = DEFAULT_APPEND_THRESHOLD,
        on_text_appended: Optional[Callable[[str], None]] = None,
    ):
        self._make_chunk = make_chunk
        self.initial_chunk_size = initial_chunk_size
        self.append_chunk_size = append_chunk_size
        self.threshold = threshold
        self.on_text_appended = on_text_appended
        self.text = ""
        self._last_append_position = 0
        self.reset()

    @classmethod
    def calm(cls, config: CalmTextConfig, rng: Optional[random.Random] = None, **kw) -> "EndlessText":
        rng = rng or random.Random()

        def make(existing: str, size: int) -> str:
            return generate_more_text(existing, replace(config, chunk_size=size), rng)

        return cls(make, **kw)

    @classmethod
    def targeted(cls, config: TargetedTextConfig, rng: Optional[random.Random] = None, **kw) -> "EndlessText":
        rng = rng or random.Random()

        def make(existing: str, size: int) -> str:
            return generate_more_targeted_text(existing, replace(config, chunk_size=size), rng)

        return cls(make, **kw)

    def reset(self) -> None:
        self.text = self._make_chunk("", self.initial_chunk_size)
        self._last_append_position = 0

    def append_more(self) -> str:
        chunk = self._make_chunk(self.text, self.append_chunk_size)
        self._last_append_position = len(self.text)
        self.text += chunk
        log.debug("Appended %d chars, text now %d", len(chunk), len(self.text))
        if self.on_text_appended:
            self.on_text_appended(chunk)
        return chunk

    def check_and_append(self, position: int) -> str:
        if position > self._last_append_position and should_generate_more(position, len(self.text), self.threshold):
            return self.append_more()
        return ""
