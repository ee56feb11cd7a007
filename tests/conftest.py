"""Shared test fixtures for refineplay tests."""

import pytest

from refineplay.catalog import Catalog, default_catalog
from refineplay.engine import RefinementEngine
from refineplay.models import Pass, Problem, Scores
from refineplay.presentation import Presenter


def _make_pass(clarity, correctness, structure, errors=0, output=None, critique=""):
    return Pass(
        output=output or f"output {clarity}/{correctness}/{structure}",
        critique=critique,
        scores=Scores(clarity=clarity, correctness=correctness, structure=structure),
        errors=errors,
    )


@pytest.fixture()
def make_pass():
    """Factory for Pass objects from bare scores."""
    return _make_pass


@pytest.fixture()
def small_catalog():
    """Two problems: 'alpha' with 3 passes, 'beta' with a single pass."""
    alpha = Problem(
        key="alpha", title="Alpha", description="Three passes",
        passes=(
            _make_pass(40, 50, 30, errors=3, output="first draft"),
            _make_pass(70, 80, 60, errors=1, output="second draft"),
            _make_pass(90, 95, 85, errors=0, output="final draft"),
        ),
    )
    beta = Problem(
        key="beta", title="Beta", description="One pass",
        passes=(_make_pass(60, 60, 60, errors=2, output="only draft"),),
    )
    return Catalog({"alpha": alpha, "beta": beta})


@pytest.fixture(scope="session")
def catalog():
    """The embedded catalog."""
    return default_catalog()


@pytest.fixture()
def engine(small_catalog):
    return RefinementEngine(small_catalog)


# --- Fake timer loop ---


class FakeHandle:
    def __init__(self, when, delay, callback, args):
        self.when = when
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Stands in for asyncio's call_later; time only moves when a handle fires."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_next(self):
        handle = min(self.pending, key=lambda h: h.when)
        self.now = handle.when
        handle.fired = True
        handle.callback(*handle.args)
        return handle

    def run_all(self, limit=100):
        while self.pending and limit:
            self.run_next()
            limit -= 1


@pytest.fixture()
def fake_loop():
    return FakeLoop()


class RecordingPresenter(Presenter):
    """Records every hook call as (hook_name, payload)."""

    def __init__(self):
        self.events = []

    def on_pass_shown(self, problem, pass_, pass_index, total_passes):
        self.events.append(("shown", (problem.key, pass_index, total_passes)))

    def on_metrics_updated(self, metrics, series):
        self.events.append(("metrics", (metrics, series)))

    def on_change_described(self, text):
        self.events.append(("change", text))

    def on_complete(self):
        self.events.append(("complete", None))

    def on_aborted(self, error):
        self.events.append(("aborted", error))

    def of(self, name):
        return [payload for hook, payload in self.events if hook == name]


@pytest.fixture()
def recorder():
    return RecordingPresenter()
