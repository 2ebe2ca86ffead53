from typing import List, Sequence, Tuple

import pyqtgraph as pg

from app.progress import LetterHistoryEntry, WeakLetterInfo


def weak_letter_bars(ranked: Sequence[WeakLetterInfo]) -> Tuple[List[int], List[float], List[Tuple[int, str]]]:
    x = list(range(len(ranked)))
    heights = [info.accuracy for info in ranked]
    ticks = [(i, info.letter.upper()) for i, info in enumerate(ranked)]
    return x, heights, ticks


def letter_history_series(history: Sequence[LetterHistoryEntry]) -> Tuple[List[int], List[float]]:
    return list(range(len(history))), [e.accuracy for e in history]


def setup_accuracy_plot(plot_widget: pg.PlotWidget, bar_color: str):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.15)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.setYRange(0, 100)
    plot_widget.getAxis('left').setStyle(tickLength=-5)
    bars = pg.BarGraphItem(x=[], height=[], width=0.8, brush=pg.mkBrush(bar_color))
    plot_widget.addItem(bars)
    return bars


def setup_history_plot(plot_widget: pg.PlotWidget, line_color: str):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.15)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.setYRange(0, 100)
    plot_widget.getAxis('bottom').setTicks([])
    return plot_widget.plot([], [], pen=pg.mkPen(line_color, width=2.5), antialias=True)


def update_bars(bars: pg.BarGraphItem, plot_widget: pg.PlotWidget, ranked: Sequence[WeakLetterInfo]):
    x, heights, ticks = weak_letter_bars(ranked)
    bars.setOpts(x=x, height=heights, width=0.8)
    plot_widget.getAxis('bottom').setTicks([ticks])


def update_history(curve, history: Sequence[LetterHistoryEntry]):
    x, y = letter_history_series(history)
    curve.setData(x, y)
