"""Tests for derived display metrics."""

import pytest

from refineplay.errors import InvalidPass
from refineplay.metrics import (
    DEFAULT_INSIGHT,
    NO_CHANGE,
    build_series,
    chart_datasets,
    describe_change,
    format_metrics,
    key_insight,
    metric_history,
    pass_label,
    pass_labels,
)


class TestFormatMetrics:
    def test_equal_scores(self, make_pass):
        m = format_metrics(make_pass(90, 90, 90, errors=0))
        assert m.average == 90
        assert (m.clarity, m.correctness, m.structure, m.errors) == (90, 90, 90, 0)

    def test_exact_mean(self, make_pass):
        assert format_metrics(make_pass(90, 85, 80)).average == 85

    @pytest.mark.parametrize("scores,expected", [
        ((35, 30, 40), 35),    # 35.0
        ((75, 90, 80), 82),    # 81.67
        ((95, 98, 95), 96),    # 96.0
        ((90, 90, 91), 90),    # 90.33
        ((0, 0, 1), 0),
        ((100, 100, 100), 100),
    ])
    def test_rounding(self, make_pass, scores, expected):
        assert format_metrics(make_pass(*scores)).average == expected

    def test_missing_pass(self):
        with pytest.raises(InvalidPass):
            format_metrics(None)


class TestDescribeChange:
    def test_reports_every_improvement(self, make_pass):
        text = describe_change(
            make_pass(75, 90, 80, errors=2), make_pass(95, 98, 95, errors=1),
        )
        assert text.startswith("Improved: ")
        for part in ("clarity +20%", "correctness +8%", "structure +15%", "errors -1"):
            assert part in text

    def test_decreases_are_omitted(self, make_pass):
        text = describe_change(
            make_pass(80, 90, 70, errors=1), make_pass(60, 95, 70, errors=3),
        )
        assert text == "Improved: correctness +5%"

    def test_no_change_sentinel(self, make_pass):
        p = make_pass(50, 50, 50, errors=1)
        assert describe_change(p, p) == NO_CHANGE

    def test_all_worse_is_no_change(self, make_pass):
        assert describe_change(make_pass(90, 90, 90), make_pass(10, 10, 10, errors=4)) == NO_CHANGE

    def test_accepts_formatted_metrics(self, make_pass):
        prev = format_metrics(make_pass(10, 10, 10, errors=2))
        cur = format_metrics(make_pass(20, 10, 10, errors=2))
        assert describe_change(prev, cur) == "Improved: clarity +10%"


class TestBuildSeries:
    def test_history_then_current(self, make_pass):
        history = [make_pass(10, 20, 30), make_pass(40, 50, 60)]
        current = format_metrics(make_pass(70, 80, 90))

        series = build_series(history, current)

        assert series.clarity == [10, 40, 70]
        assert series.correctness == [20, 50, 80]
        assert series.structure == [30, 60, 90]

    def test_empty_history(self, make_pass):
        series = build_series([], make_pass(1, 2, 3))
        assert series.clarity == [1]
        assert series.structure == [3]

    def test_does_not_mutate_history(self, make_pass):
        history = (make_pass(10, 20, 30),)
        build_series(history, make_pass(1, 2, 3))
        assert len(history) == 1


class TestMetricHistory:
    def test_first_n_passes(self, catalog):
        h = metric_history(catalog.get("code-review"), 3)
        assert h.clarity == [35, 75, 95]
        assert h.correctness == [30, 90, 98]
        assert h.errors == [4, 2, 1]

    def test_more_than_available(self, catalog):
        h = metric_history(catalog.get("math"), 10)
        assert len(h.clarity) == 4


class TestLabels:
    def test_pass_label(self):
        assert pass_label(0, 4) == "Pass 1 (Initial)"
        assert pass_label(1, 4) == "Pass 2"
        assert pass_label(3, 4) == "Pass 4 (Final)"
        assert pass_label(0, 1) == "Pass 1 (Initial)"

    def test_pass_labels(self):
        assert pass_labels(3) == ["Pass 1", "Pass 2", "Pass 3"]

    def test_key_insight(self):
        assert key_insight(1).startswith("Initial pass")
        assert key_insight(9) == DEFAULT_INSIGHT


class TestChartDatasets:
    def test_one_dataset_per_metric(self, make_pass):
        series = build_series([make_pass(10, 20, 30)], make_pass(40, 50, 60))
        datasets = chart_datasets(series)
        assert [d["label"] for d in datasets] == ["Clarity", "Correctness", "Structure"]
        assert datasets[0]["data"] == [10, 40]
        assert datasets[0]["color"] == "#14b8a6"
