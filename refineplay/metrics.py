"""Derived display metrics for refinement passes.

Everything here is a pure function of pass data: nothing is mutated and the
same inputs always give the same outputs.
"""

import math
from collections.abc import Sequence
from typing import Any, Protocol

from refineplay.errors import InvalidPass
from refineplay.models import (
    METRIC_NAMES,
    FormattedMetrics,
    MetricHistory,
    MetricSeries,
    Pass,
    Problem,
)

NO_CHANGE = "No significant changes detected"

METRIC_COLORS = {
    "clarity": "#14b8a6",
    "correctness": "#22c55e",
    "structure": "#f59e0b",
}

KEY_INSIGHTS = {
    1: "Initial pass commits to a solution quickly but lacks nuance. Single-factor thinking dominates.",
    2: "Second pass reviews the first and identifies gaps. Multi-factor thinking emerges but lacks integration.",
    3: "Third pass synthesizes multiple factors into coherent explanation. Begins connecting causal chains.",
    4: "Fourth pass adds technical depth and empirical grounding. Explains why certain factors matter more.",
    5: "Fifth pass achieves mastery: combines technical precision, impact, failure modes, and actionable recommendations.",
}
DEFAULT_INSIGHT = "Refinement improves reasoning quality with each iteration."


class Scored(Protocol):
    """Anything exposing the three scores and an error count (Pass, FormattedMetrics)."""
    clarity: int
    correctness: int
    structure: int
    errors: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_metrics(pass_: Pass | None) -> FormattedMetrics:
    """Scores of a pass plus their average, rounded half up."""
    if pass_ is None:
        raise InvalidPass("Cannot format metrics for a missing pass")
    total = pass_.clarity + pass_.correctness + pass_.structure
    return FormattedMetrics(
        clarity=pass_.clarity,
        correctness=pass_.correctness,
        structure=pass_.structure,
        errors=pass_.errors,
        average=_round_half_up(total / 3),
    )


def describe_change(previous: Scored, current: Scored) -> str:
    """Summarize what improved between two passes.

    Only improvements are reported; a metric that got worse is left out.
    """
    improvements = []
    for name in METRIC_NAMES:
        delta = getattr(current, name) - getattr(previous, name)
        if delta > 0:
            improvements.append(f"{name} +{delta}%")
    if current.errors < previous.errors:
        improvements.append(f"errors -{previous.errors - current.errors}")

    if not improvements:
        return NO_CHANGE
    return f"Improved: {', '.join(improvements)}"


def build_series(history: Sequence[Scored], current: Scored) -> MetricSeries:
    """Chart skeleton: each metric over the shown passes, ending at ``current``."""
    shown = [*history, current]
    return MetricSeries(**{
        name: [getattr(p, name) for p in shown] for name in METRIC_NAMES
    })


def metric_history(problem: Problem, num_passes: int) -> MetricHistory:
    """Metric values for a problem's first ``num_passes`` passes, no playback needed."""
    passes = problem.passes[:max(1, num_passes)]
    return MetricHistory(
        clarity=[p.clarity for p in passes],
        correctness=[p.correctness for p in passes],
        structure=[p.structure for p in passes],
        errors=[p.errors for p in passes],
    )


def pass_labels(count: int) -> list[str]:
    return [f"Pass {i + 1}" for i in range(count)]


def pass_label(index: int, total: int) -> str:
    """Display label for the pass at 0-based ``index`` out of ``total``."""
    label = f"Pass {index + 1}"
    if index == 0:
        return label + " (Initial)"
    if index == total - 1:
        return label + " (Final)"
    return label


def chart_datasets(series: MetricSeries) -> list[dict[str, Any]]:
    """One line dataset per metric, independent of any charting library."""
    return [
        {
            "label": name.capitalize(),
            "data": list(getattr(series, name)),
            "color": METRIC_COLORS[name],
        }
        for name in METRIC_NAMES
    ]


def key_insight(pass_number: int) -> str:
    return KEY_INSIGHTS.get(pass_number, DEFAULT_INSIGHT)
