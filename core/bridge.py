# core/bridge.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Qt, Signal

from app.state import SessionStatus, TypingStats
from app.timer import HighResTimer
from core.chrono import SessionTicker
from services.typing_engine import Signal as EngineSignal
from services.typing_engine import Transition, TypingEngine

log = logging.getLogger(__name__)

BACKSPACE = "<BACKSPACE>"


def normalize_key(key: int, text: str, modifiers) -> Optional[str]:
    """Map a Qt key event to a character, BACKSPACE, or None for non-typing keys."""
    if modifiers & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
        return None
    if key == Qt.Key_Backspace:
        return BACKSPACE
    if text and text >= " ":
        return text
    return None


class SessionBridge(QObject):
    """
    Qt face of a TypingEngine. Widgets forward keys here and listen to the
    signals; the engine itself stays free of Qt.
    """
    charactersChanged = Signal(object)      # List[CharacterState]
    statsChanged = Signal(object)           # TypingStats
    statusChanged = Signal(str)
    characterTyped = Signal(str, bool)
    errorTyped = Signal(str, str)           # typed, expected
    layoutMismatch = Signal(str, str)       # expected, detected
    completed = Signal(object)              # TypingStats
    elapsedChanged = Signal(float)

    def __init__(self, text: str = "", allow_backspace: bool = False, layout: Optional[str] = None,
                 tick_ms: int = 100, parent=None):
        super().__init__(parent)
        self.timer = HighResTimer()
        self.engine = TypingEngine(
            text,
            allow_backspace=allow_backspace,
            layout=layout,
            clock=self.timer.now_ms,
            on_character_typed=self.characterTyped.emit,
            on_error=self.errorTyped.emit,
            on_layout_mismatch=self._on_mismatch,
            on_complete=self._on_complete,
        )
        self.ticker = SessionTicker(self.engine.elapsed_ms, tick_ms, self)
        self.ticker.elapsedChanged.connect(self.elapsedChanged)
        self._last_status = self.engine.status

    # -------- input --------
    def handle_key(self, key: int, text: str, modifiers) -> bool:
        """Returns True when the key was consumed by the session."""
        nk = normalize_key(key, text, modifiers)
        if nk is None:
            return False
        if nk == BACKSPACE:
            tr = self.engine.backspace()
        else:
            tr = self.engine.process_key(nk)
        self._after(tr)
        return tr.signal not in (EngineSignal.IGNORED, EngineSignal.LAYOUT_MISMATCH)

    def type_text(self, text: str) -> None:
        for ch in text:
            self._after(self.engine.process_key(ch))

    def backspace(self) -> None:
        self._after(self.engine.backspace())

    # -------- control --------
    def start(self) -> None:
        self.engine.start()
        self._after()

    def pause(self) -> None:
        self.engine.pause()
        self._after()

    def resume(self) -> None:
        self.engine.resume()
        self._after()

    def reset(self, new_text: Optional[str] = None) -> None:
        self.engine.reset(new_text)
        self._after()

    # -------- internals --------
    def _after(self, tr: Optional[Transition] = None) -> None:
        if tr is not None and tr.signal in (EngineSignal.IGNORED, EngineSignal.LAYOUT_MISMATCH):
            return
        self.charactersChanged.emit(self.engine.characters())
        self.statsChanged.emit(self.engine.stats())
        self._sync_status()

    def _sync_status(self) -> None:
        status = self.engine.status
        if status is SessionStatus.RUNNING:
            self.ticker.start()
        else:
            self.ticker.stop()
        if status is not self._last_status:
            self._last_status = status
            self.statusChanged.emit(status.value)

    def _on_mismatch(self, expected: str, detected: Optional[str]) -> None:
        self.layoutMismatch.emit(expected, detected or "")

    def _on_complete(self, stats: TypingStats) -> None:
        log.info("Bridge relaying completion (%d wpm)", stats.wpm)
        self.completed.emit(stats)
