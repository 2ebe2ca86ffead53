# services/typing_engine.py
"""
Typing session state machine.

`apply()` is the whole machine: a pure function from (state, event, now)
to a Transition. It never reads a clock and never mutates its input.
`TypingEngine` is the small stateful wrapper the UI talks to: it owns the
current SessionState, a clock and the callbacks.

    idle -> running -> (paused <-> running) -> completed

Nothing leaves `completed`; Reset and SetText start a fresh session.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from app.calculation import calculate_accuracy, calculate_net_wpm, calculate_wpm
from app.state import (
    CharacterState,
    CharStatus,
    LetterStats,
    SessionState,
    SessionStatus,
    TypingStats,
)
from app.timer import monotonic_ms
from app.validation import (
    detect_layout_from_char,
    detect_layout_from_text,
    is_character_compatible_with_layout,
    is_printable_key,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    allow_backspace: bool = False
    layout: Optional[str] = None  # None: inferred from the target text


# -------- events --------
@dataclass(frozen=True)
class SetText:
    text: str


@dataclass(frozen=True)
class KeyPress:
    char: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[SetText, KeyPress, Backspace, Start, Pause, Resume, Reset]


class Signal(str, Enum):
    ACCEPTED = "accepted"
    IGNORED = "ignored"
    LAYOUT_MISMATCH = "layout_mismatch"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Transition:
    state: SessionState
    signal: Optional[Signal] = None
    correct: Optional[bool] = None
    expected: Optional[str] = None
    detected_layout: Optional[str] = None


def session_layout(state: SessionState, config: EngineConfig) -> str:
    return config.layout or detect_layout_from_text(state.target_text)


def _tally_key(expected: str) -> Optional[str]:
    return expected.lower() if expected.isalpha() else None


def _key_press(state: SessionState, ev: KeyPress, now: float, config: EngineConfig) -> Transition:
    if state.status in (SessionStatus.PAUSED, SessionStatus.COMPLETED):
        return Transition(state, Signal.IGNORED)
    if ev.ctrl or ev.alt or ev.meta or not is_printable_key(ev.char):
        return Transition(state, Signal.IGNORED)
    if state.cursor_position >= len(state.target_text):
        return Transition(state, Signal.IGNORED)

    layout = session_layout(state, config)
    if not is_character_compatible_with_layout(ev.char, layout):
        # not scored and not consumed: the learner just needs to switch layouts
        return Transition(
            state, Signal.LAYOUT_MISMATCH, detected_layout=detect_layout_from_char(ev.char)
        )

    pos = state.cursor_position
    expected = state.target_text[pos]
    correct = ev.char == expected

    tally = state.letter_tally
    letter = _tally_key(expected)
    if letter is not None:
        tally = dict(tally)
        tally[letter] = tally.get(letter, LetterStats()).hit(correct)

    new_pos = pos + 1
    done = new_pos >= len(state.target_text)
    new_state = replace(
        state,
        cursor_position=new_pos,
        typed=state.typed + ev.char,
        errors=state.errors if correct else state.errors + (pos,),
        start_time=state.start_time if state.start_time is not None else now,
        status=SessionStatus.COMPLETED if done else SessionStatus.RUNNING,
        end_time=now if done else None,
        letter_tally=tally,
    )
    return Transition(
        new_state,
        Signal.COMPLETED if done else Signal.ACCEPTED,
        correct=correct,
        expected=expected,
    )


def _backspace(state: SessionState, config: EngineConfig) -> Transition:
    if not config.allow_backspace:
        return Transition(state, Signal.IGNORED)
    if state.status in (SessionStatus.PAUSED, SessionStatus.COMPLETED):
        return Transition(state, Signal.IGNORED)
    if state.cursor_position <= 0:
        return Transition(state, Signal.IGNORED)

    new_pos = state.cursor_position - 1
    new_state = replace(
        state,
        cursor_position=new_pos,
        typed=state.typed[:-1],
        errors=tuple(i for i in state.errors if i != new_pos),
    )
    return Transition(new_state, Signal.ACCEPTED)


def apply(state: SessionState, event: Event, now: float, config: EngineConfig = EngineConfig()) -> Transition:
    if isinstance(event, KeyPress):
        return _key_press(state, event, now, config)

    if isinstance(event, Backspace):
        return _backspace(state, config)

    if isinstance(event, SetText):
        return Transition(SessionState(target_text=event.text))

    if isinstance(event, Reset):
        return Transition(SessionState(target_text=state.target_text))

    if isinstance(event, Start):
        if state.status is SessionStatus.IDLE and state.target_text:
            return Transition(replace(state, status=SessionStatus.RUNNING, start_time=now))
        if state.status is SessionStatus.PAUSED:
            return apply(state, Resume(), now, config)
        return Transition(state)

    if isinstance(event, Pause):
        if state.status is not SessionStatus.RUNNING:
            return Transition(state)
        return Transition(replace(state, status=SessionStatus.PAUSED, pause_started_at=now))

    if isinstance(event, Resume):
        if state.status is not SessionStatus.PAUSED:
            return Transition(state)
        pause_len = now - state.pause_started_at if state.pause_started_at is not None else 0.0
        return Transition(
            replace(
                state,
                status=SessionStatus.RUNNING,
                paused_duration=state.paused_duration + max(0.0, pause_len),
                pause_started_at=None,
            )
        )

    raise TypeError(f"Unknown event: {event!r}")


# -------- derived views --------
def build_characters(state: SessionState) -> List[CharacterState]:
    errors = set(state.errors)
    finished = state.status is SessionStatus.COMPLETED
    out: List[CharacterState] = []
    for i, ch in enumerate(state.target_text):
        if i < state.cursor_position:
            status = CharStatus.INCORRECT if i in errors else CharStatus.CORRECT
        elif i == state.cursor_position and not finished:
            status = CharStatus.CURRENT
        else:
            status = CharStatus.PENDING
        out.append(CharacterState(ch, i, status))
    return out


def build_stats(state: SessionState, now: float) -> TypingStats:
    elapsed = state.elapsed_ms(now)
    correct = state.correct_count
    return TypingStats(
        wpm=calculate_wpm(correct, elapsed),
        net_wpm=calculate_net_wpm(state.cursor_position, state.error_count, elapsed),
        accuracy=calculate_accuracy(correct, state.cursor_position),
        correct_count=correct,
        error_count=state.error_count,
        elapsed_ms=elapsed,
        characters_typed=state.cursor_position,
        total_characters=len(state.target_text),
    )


class TypingEngine:
    def __init__(
        self,
        target_text: str = "",
        allow_backspace: bool = False,
        layout: Optional[str] = None,
        clock: Callable[[], float] = monotonic_ms,
        on_character_typed: Optional[Callable[[str, bool], None]] = None,
        on_error: Optional[Callable[[str, str], None]] = None,
        on_complete: Optional[Callable[[TypingStats], None]] = None,
        on_layout_mismatch: Optional[Callable[[str, Optional[str]], None]] = None,
    ):
        self.config = EngineConfig(allow_backspace=allow_backspace, layout=layout)
        self.clock = clock
        self.on_character_typed = on_character_typed
        self.on_error = on_error
        self.on_complete = on_complete
        self.on_layout_mismatch = on_layout_mismatch
        self.state = SessionState(target_text=target_text or "")
        self.result: Optional[TypingStats] = None

    # -------- state access --------
    @property
    def target(self) -> str:
        return self.state.target_text

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def cursor_position(self) -> int:
        return self.state.cursor_position

    @property
    def errors(self) -> List[int]:
        return list(self.state.errors)

    @property
    def letter_tally(self) -> Dict[str, LetterStats]:
        return dict(self.state.letter_tally)

    @property
    def layout(self) -> str:
        return session_layout(self.state, self.config)

    @property
    def is_input_enabled(self) -> bool:
        return bool(self.target) and self.status in (SessionStatus.IDLE, SessionStatus.RUNNING)

    def characters(self) -> List[CharacterState]:
        return build_characters(self.state)

    def stats(self) -> TypingStats:
        return build_stats(self.state, self.clock())

    def elapsed_ms(self) -> float:
        return self.state.elapsed_ms(self.clock())

    # -------- commands --------
    def dispatch(self, event: Event) -> Transition:
        now = self.clock()
        tr = apply(self.state, event, now, self.config)
        self.state = tr.state
        if isinstance(event, (SetText, Reset)):
            self.result = None
        self._notify(event, tr, now)
        return tr

    def set_text(self, text: str) -> None:
        self.dispatch(SetText(text or ""))

    def process_key(self, ch: str, ctrl: bool = False, alt: bool = False, meta: bool = False) -> Transition:
        return self.dispatch(KeyPress(ch, ctrl=ctrl, alt=alt, meta=meta))

    def backspace(self) -> Transition:
        return self.dispatch(Backspace())

    def start(self) -> None:
        self.dispatch(Start())

    def pause(self) -> None:
        self.dispatch(Pause())

    def resume(self) -> None:
        self.dispatch(Resume())

    def reset(self, new_text: Optional[str] = None) -> None:
        if new_text is not None:
            self.dispatch(SetText(new_text))
        else:
            self.dispatch(Reset())

    def _notify(self, event: Event, tr: Transition, now: float) -> None:
        if tr.signal is Signal.LAYOUT_MISMATCH:
            log.info("Layout mismatch: expected %s, got %s", self.layout, tr.detected_layout)
            if self.on_layout_mismatch:
                self.on_layout_mismatch(self.layout, tr.detected_layout)
            return

        if not isinstance(event, KeyPress) or tr.correct is None:
            return

        if self.on_character_typed:
            self.on_character_typed(event.char, tr.correct)
        if not tr.correct and self.on_error:
            self.on_error(event.char, tr.expected)

        if tr.signal is Signal.COMPLETED:
            self.result = build_stats(self.state, now)
            log.info(
                "Session completed: %d wpm, %.1f%% accuracy, %d errors",
                self.result.wpm, self.result.accuracy, self.result.error_count,
            )
            if self.on_complete:
                self.on_complete(self.result)
