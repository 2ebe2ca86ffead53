from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class SessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class CharStatus(str, Enum):
    PENDING = "pending"
    CURRENT = "current"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class CharacterState:
    char: str
    index: int
    status: CharStatus


@dataclass(frozen=True)
class LetterStats:
    correct: int = 0
    total: int = 0

    def hit(self, correct: bool) -> "LetterStats":
        return LetterStats(self.correct + (1 if correct else 0), self.total + 1)

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 100.0
        return self.correct / self.total * 100.0


@dataclass(frozen=True)
class SessionState:
    """
    One practice attempt. Never mutated: every transition builds a new one.
    Times are milliseconds on whatever clock the engine was given.
    """
    target_text: str = ""
    cursor_position: int = 0
    status: SessionStatus = SessionStatus.IDLE
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    pause_started_at: Optional[float] = None
    paused_duration: float = 0.0
    errors: Tuple[int, ...] = ()
    typed: str = ""
    letter_tally: Dict[str, LetterStats] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def correct_count(self) -> int:
        return self.cursor_position - len(self.errors)

    def elapsed_ms(self, now: float) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else now
        elapsed = end - self.start_time - self.paused_duration
        if self.status is SessionStatus.PAUSED and self.pause_started_at is not None:
            elapsed -= now - self.pause_started_at
        return max(0.0, elapsed)


@dataclass(frozen=True)
class TypingStats:
    wpm: int = 0
    net_wpm: int = 0
    accuracy: float = 100.0
    correct_count: int = 0
    error_count: int = 0
    elapsed_ms: float = 0.0
    characters_typed: int = 0
    total_characters: int = 0
