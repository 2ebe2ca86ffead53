import pyqtgraph as pg
from PySide6.QtCore import Qt

from app.progress import LetterHistoryEntry, LetterTrend, WeakLetterInfo
from core.bridge import BACKSPACE, SessionBridge, normalize_key
from core.chrono import SessionTicker
from utils.graph_helper import (
    letter_history_series,
    setup_accuracy_plot,
    setup_history_plot,
    update_bars,
    update_history,
    weak_letter_bars,
)


def info(letter, accuracy, priority):
    return WeakLetterInfo(letter, accuracy, LetterTrend.STABLE, 100, priority)


# -------- ticker --------
def test_ticker_reports_seconds(qtbot):
    ticker = SessionTicker(lambda: 1500.0, tick_ms=10)
    with qtbot.waitSignal(ticker.elapsedChanged, timeout=1000) as blocker:
        ticker.start()
    assert blocker.args == [1.5]
    assert ticker.is_active()

    with qtbot.waitSignal(ticker.stopped, timeout=1000):
        ticker.stop()
    assert not ticker.is_active()


# -------- bridge --------
def test_normalize_key():
    assert normalize_key(Qt.Key_A, "a", Qt.NoModifier) == "a"
    assert normalize_key(Qt.Key_A, "a", Qt.ControlModifier) is None
    assert normalize_key(Qt.Key_Backspace, "", Qt.NoModifier) == BACKSPACE
    assert normalize_key(Qt.Key_Shift, "", Qt.NoModifier) is None


def test_bridge_runs_a_session(qtbot):
    bridge = SessionBridge("ab")
    statuses = []
    bridge.statusChanged.connect(statuses.append)

    bridge.type_text("a")
    assert statuses == ["running"]
    assert bridge.ticker.is_active()

    bridge.pause()
    assert not bridge.ticker.is_active()
    bridge.resume()

    with qtbot.waitSignal(bridge.completed, timeout=1000) as blocker:
        bridge.type_text("b")
    assert blocker.args[0].accuracy == 100.0
    assert statuses == ["running", "paused", "running", "completed"]
    assert not bridge.ticker.is_active()


def test_bridge_emits_views_after_each_key(qtbot):
    bridge = SessionBridge("abc")
    with qtbot.waitSignal(bridge.charactersChanged, timeout=1000) as chars:
        bridge.type_text("x")
    assert [c.char for c in chars.args[0]] == ["a", "b", "c"]

    with qtbot.waitSignal(bridge.statsChanged, timeout=1000) as stats:
        bridge.type_text("b")
    assert stats.args[0].error_count == 1


def test_bridge_layout_mismatch(qtbot):
    bridge = SessionBridge("abc")
    with qtbot.waitSignal(bridge.layoutMismatch, timeout=1000) as blocker:
        bridge.type_text("ש")
    assert blocker.args == ["qwerty", "hebrew"]
    assert bridge.engine.cursor_position == 0


def test_bridge_relays_errors(qtbot):
    bridge = SessionBridge("abc")
    with qtbot.waitSignal(bridge.errorTyped, timeout=1000) as blocker:
        bridge.type_text("x")
    assert blocker.args == ["x", "a"]


def test_mismatched_key_is_not_consumed(qtbot):
    bridge = SessionBridge("abc")
    assert not bridge.handle_key(0x05E9, "ש", Qt.NoModifier)
    assert bridge.engine.cursor_position == 0


def test_bridge_key_handling(qtbot):
    bridge = SessionBridge("abc", allow_backspace=True)
    assert bridge.handle_key(Qt.Key_A, "a", Qt.NoModifier)
    assert not bridge.handle_key(Qt.Key_C, "c", Qt.ControlModifier)
    assert bridge.handle_key(Qt.Key_Backspace, "", Qt.NoModifier)
    assert bridge.engine.cursor_position == 0


def test_bridge_reset(qtbot):
    bridge = SessionBridge("ab")
    bridge.type_text("a")
    bridge.reset("xyz")
    assert bridge.engine.target == "xyz"
    assert bridge.engine.cursor_position == 0
    assert not bridge.ticker.is_active()


# -------- charts --------
def test_bar_data():
    x, heights, ticks = weak_letter_bars([info("q", 40.0, 60), info("z", 70.0, 30)])
    assert x == [0, 1]
    assert heights == [40.0, 70.0]
    assert ticks == [(0, "Q"), (1, "Z")]


def test_history_series():
    history = [LetterHistoryEntry("2024-01-01T00:00:00+00:00", 50.0),
               LetterHistoryEntry("2024-01-02T00:00:00+00:00", 75.0)]
    assert letter_history_series(history) == ([0, 1], [50.0, 75.0])


def test_plots_accept_updates(qtbot):
    plot = pg.PlotWidget()
    qtbot.addWidget(plot)
    bars = setup_accuracy_plot(plot, "#e06c75")
    update_bars(bars, plot, [info("q", 40.0, 60), info("z", 70.0, 30)])
    assert list(bars.opts["height"]) == [40.0, 70.0]

    other = pg.PlotWidget()
    qtbot.addWidget(other)
    curve = setup_history_plot(other, "#61afef")
    update_history(curve, [LetterHistoryEntry("2024-01-01T00:00:00+00:00", 50.0)])
    xs, ys = curve.getData()
    assert list(ys) == [50.0]
