# services/weakkeys.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from app.calculation import round_half_up
from app.progress import LetterHistoryEntry, WeakLetterInfo
from app.state import LetterStats
from services.letter_analytics import get_weak_letters_ranked

log = logging.getLogger(__name__)

EMA_PRIOR_WEIGHT = 0.7
EMA_SAMPLE_WEIGHT = 0.3
DEFAULT_HISTORY_LIMIT = 50


def update_ema(previous: Optional[float], sample: float) -> float:
    sample = max(0.0, min(100.0, sample))
    if previous is None:
        return sample
    value = EMA_PRIOR_WEIGHT * previous + EMA_SAMPLE_WEIGHT * sample
    return max(0.0, min(100.0, round_half_up(value, 2)))


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LetterAccessors:
    """Read/write hooks into whatever store owns the letter data."""
    read_ema: Callable[[], Mapping[str, float]]
    write_ema: Callable[[str, float], None]
    read_history: Callable[[], Mapping[str, Sequence[LetterHistoryEntry]]]
    write_history: Callable[[str, List[LetterHistoryEntry]], None]

    @classmethod
    def in_memory(cls) -> "LetterAccessors":
        ema: Dict[str, float] = {}
        history: Dict[str, List[LetterHistoryEntry]] = {}
        return cls(
            read_ema=lambda: ema,
            write_ema=ema.__setitem__,
            read_history=lambda: history,
            write_history=history.__setitem__,
        )


class WeakKeys:
    def __init__(
        self,
        accessors: Optional[LetterAccessors] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        now: Callable[[], str] = _utc_now,
    ):
        self.accessors = accessors or LetterAccessors.in_memory()
        self.history_limit = history_limit
        self.now = now

    def note(self, letter: str, accuracy: float, session_id: str = "") -> float:
        """Fold one session's accuracy for `letter` into its EMA and history."""
        if not letter:
            return 0.0
        key = letter.lower()
        ema = update_ema(self.accessors.read_ema().get(key), accuracy)
        self.accessors.write_ema(key, ema)

        history = list(self.accessors.read_history().get(key, ()))
        history.append(LetterHistoryEntry(date=self.now(), accuracy=accuracy, session_id=session_id))
        self.accessors.write_history(key, history[-self.history_limit:])
        return ema

    def record_session(self, letter_tally: Mapping[str, LetterStats], session_id: str = "") -> Dict[str, float]:
        updated = {}
        for letter, stats in letter_tally.items():
            if stats.total <= 0:
                continue
            updated[letter] = self.note(letter, stats.correct / stats.total * 100.0, session_id)
        if updated:
            log.debug("Updated %d letter EMAs for session %r", len(updated), session_id)
        return updated

    def snapshot(self) -> Dict[str, float]:
        return dict(self.accessors.read_ema())

    def history(self, letter: str) -> List[LetterHistoryEntry]:
        return list(self.accessors.read_history().get(letter.lower(), ()))

    def ranked(self) -> List[WeakLetterInfo]:
        return get_weak_letters_ranked(self.accessors.read_ema(), self.accessors.read_history())
