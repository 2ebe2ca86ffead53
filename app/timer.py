import time

from PySide6.QtCore import QElapsedTimer


def monotonic_ms() -> float:
    """Default engine clock: milliseconds on a monotonic clock."""
    return time.monotonic() * 1000.0


class HighResTimer:
    def __init__(self):
        self.t = QElapsedTimer()
        self.t.start()

    def now_ms(self) -> float:
        # usable as an engine clock: only differences are ever taken
        return float(self.t.elapsed())
