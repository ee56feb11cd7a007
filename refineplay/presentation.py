"""Presentation hooks driven by playback, plus a plain-text console renderer."""

import sys
import textwrap
from typing import TextIO

from refineplay.errors import PlaybackAborted
from refineplay.metrics import pass_label
from refineplay.models import METRIC_NAMES, FormattedMetrics, MetricSeries, Pass, Problem


class Presenter:
    """Callbacks invoked synchronously by the scheduler. Return values are ignored.

    Subclasses override only the hooks they care about.
    """

    def on_pass_shown(self, problem: Problem, pass_: Pass, pass_index: int, total_passes: int) -> None:
        pass

    def on_metrics_updated(self, metrics: FormattedMetrics, series: MetricSeries) -> None:
        pass

    def on_change_described(self, text: str) -> None:
        pass

    def on_complete(self) -> None:
        pass

    def on_aborted(self, error: PlaybackAborted) -> None:
        pass


def score_bar(value: int, width: int = 20) -> str:
    filled = round(value / 100 * width)
    return "[" + "#" * filled + " " * (width - filled) + "]"


class ConsolePresenter(Presenter):
    """Writes each pass, its critique and its scores to a text stream."""

    def __init__(self, stream: TextIO | None = None, width: int = 78) -> None:
        self.stream = stream or sys.stdout
        self.width = width

    def _write(self, text: str = "") -> None:
        self.stream.write(text + "\n")
        self.stream.flush()

    def on_pass_shown(self, problem, pass_, pass_index, total_passes):
        header = f" {problem.title} | {pass_label(pass_index, total_passes)} of {total_passes} "
        self._write()
        self._write(header.center(self.width, "="))
        self._write(pass_.output)
        self._write()
        self._write("Critique:")
        self._write(textwrap.indent(pass_.critique, "  "))

    def on_change_described(self, text):
        self._write(f"> {text}")

    def on_metrics_updated(self, metrics, series):
        for name in METRIC_NAMES:
            value = getattr(metrics, name)
            trend = " -> ".join(str(v) for v in getattr(series, name))
            self._write(f"  {name.capitalize():<12} {score_bar(value)} {value:>3}%   ({trend})")
        self._write(f"  {'Errors':<12} {metrics.errors}")
        self._write(f"  {'Average':<12} {metrics.average}%")

    def on_complete(self):
        self._write()
        self._write(" Refinement complete ".center(self.width, "="))

    def on_aborted(self, error):
        self._write(f"Playback aborted: {error}")
