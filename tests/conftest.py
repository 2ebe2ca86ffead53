import os

# must be set before any Qt module is imported
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from services.typing_engine import TypingEngine


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_engine(clock):
    def _make(text="abc", **kw):
        return TypingEngine(text, clock=clock, **kw)
    return _make
