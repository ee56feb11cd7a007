"""Refinement engine: the playback state machine.

States are pass indices ``0..max_pass_index``. The only forward transition
is ``next_pass`` (+1); ``reset`` and ``init_problem`` return to index 0
unconditionally. History is an append-only log of passes already shown,
so at every settled moment ``len(history) == current_pass_index``.
"""

import logging
import math

from refineplay.catalog import Catalog
from refineplay.config import PlaybackConfig
from refineplay.errors import InvalidPass, UnknownProblem
from refineplay.models import Pass, Problem

logger = logging.getLogger(__name__)


class RefinementEngine:
    """Owns problem selection, pass progression, history and speed."""

    def __init__(self, catalog: Catalog, config: PlaybackConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or PlaybackConfig()
        self._problem: Problem | None = None
        self._current = 0
        self._max = 0
        self._history: list[Pass] = []
        self._speed = self.config.default_speed

    # --- read-only state ---

    @property
    def selected_problem_key(self) -> str | None:
        return self._problem.key if self._problem else None

    @property
    def current_pass_index(self) -> int:
        return self._current

    @property
    def max_pass_index(self) -> int:
        return self._max

    @property
    def total_passes(self) -> int:
        """Number of passes this playback will show."""
        return self._max + 1 if self._problem else 0

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def history(self) -> tuple[Pass, ...]:
        return tuple(self._history)

    # --- transitions ---

    def init_problem(self, problem_key: str, requested_pass_count: int) -> bool:
        """Select a problem and rewind to its first pass.

        The pass cap is ``min(requested_pass_count, available) - 1``, with
        counts below 1 clamped to 1. Raises UnknownProblem without touching
        any state if the key is not in the catalog.
        """
        try:
            problem = self.catalog.get(problem_key)
        except UnknownProblem:
            logger.warning("Cannot select %r: not in catalog", problem_key)
            raise

        count = max(1, int(requested_pass_count))
        self._problem = problem
        self._max = min(count, problem.pass_count) - 1
        self._current = 0
        self._history = []
        logger.debug(
            "Selected %s: %d of %d passes", problem.key, self._max + 1, problem.pass_count,
        )
        return True

    def try_init_problem(self, problem_key: str, requested_pass_count: int) -> bool:
        """Like init_problem, but returns False for an unknown key."""
        try:
            return self.init_problem(problem_key, requested_pass_count)
        except UnknownProblem:
            return False

    def next_pass(self) -> bool:
        """Advance one pass. Returns False (and changes nothing) at the cap.

        The pass being left is appended to history before the index moves.
        """
        if self._problem is None or self._current >= self._max:
            return False
        current = self.get_current_pass()
        if current is None:
            raise InvalidPass(
                f"Pass index {self._current} out of range for {self._problem.key}"
            )
        self._history.append(current)
        self._current += 1
        return True

    def reset(self) -> None:
        """Rewind to pass 0. Keeps the selected problem, cap and speed."""
        self._current = 0
        self._history = []

    def set_speed(self, multiplier: float) -> None:
        """Set the playback speed. Non-positive or non-finite values clamp to min_speed."""
        try:
            value = float(multiplier)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value) or value < self.config.min_speed:
            logger.warning(
                "Speed %r out of range, clamping to %s", multiplier, self.config.min_speed,
            )
            value = self.config.min_speed
        self._speed = value

    # --- queries ---

    def get_problem(self) -> Problem | None:
        return self._problem

    def get_current_pass(self) -> Pass | None:
        if self._problem is None:
            return None
        if not 0 <= self._current < self._problem.pass_count:
            return None
        return self._problem.passes[self._current]

    def is_complete(self) -> bool:
        return self._problem is not None and self._current == self._max

    def get_progress(self) -> float:
        """Percentage of the configured passes shown so far, 0-100."""
        if self._problem is None:
            return 0.0
        return (self._current + 1) / (self._max + 1) * 100

    def get_animation_duration(self) -> float:
        """Animation time in milliseconds, inversely proportional to speed."""
        return self.config.base_duration_ms / self._speed

    def __repr__(self) -> str:
        return (
            f"RefinementEngine({self.selected_problem_key}: "
            f"pass {self._current}/{self._max}, speed={self._speed})"
        )
