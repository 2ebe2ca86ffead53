# core/chrono.py
from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal


class SessionTicker(QObject):
    """Display tick. Reads elapsed time from the session; never changes it."""
    elapsedChanged = Signal(float)  # seconds (active-time only)
    started = Signal()
    stopped = Signal()

    def __init__(self, read_elapsed_ms: Callable[[], float], tick_ms: int = 100, parent=None):
        super().__init__(parent)
        self._read = read_elapsed_ms

        self._tick = QTimer(self)
        self._tick.setInterval(tick_ms)
        self._tick.timeout.connect(self._on_tick)

    def start(self):
        if not self._tick.isActive():
            self._tick.start()
            self.started.emit()

    def stop(self):
        if self._tick.isActive():
            self._tick.stop()
            # one last reading so the display settles on the frozen value
            self.elapsedChanged.emit(self.seconds())
            self.stopped.emit()

    def is_active(self) -> bool:
        return self._tick.isActive()

    def seconds(self) -> float:
        return self._read() / 1000.0

    def _on_tick(self):
        self.elapsedChanged.emit(self.seconds())
