"""Timed playback: advances a RefinementEngine one pass per tick.

Each tick is a single ``loop.call_later`` handle. The delay is read from the
engine when the tick is scheduled, so a speed change applies from the next
tick on and never to one already queued. At most one tick is pending at a
time; every start/cancel bumps a generation counter and stale ticks exit
without touching anything.
"""

import asyncio
import logging

from refineplay.engine import RefinementEngine
from refineplay.errors import InvalidPass, PlaybackAborted, UnknownProblem
from refineplay.metrics import build_series, describe_change, format_metrics
from refineplay.presentation import Presenter

logger = logging.getLogger(__name__)


class PlaybackScheduler:
    """Drives engine.next_pass on a speed-adjusted timer and feeds a Presenter."""

    def __init__(
        self,
        engine: RefinementEngine,
        presenter: Presenter | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        pause_ms: float | None = None,
    ) -> None:
        self.engine = engine
        self.presenter = presenter or Presenter()
        self.pause_ms = engine.config.pause_ms if pause_ms is None else pause_ms
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._generation = 0
        self._running = False
        self._done: asyncio.Future | None = None
        self.completed = False
        self.error: PlaybackAborted | None = None

    @property
    def is_running(self) -> bool:
        """True while a playback is in progress; callers disable their start control on it."""
        return self._running

    def tick_delay_ms(self) -> float:
        return self.engine.get_animation_duration() + self.pause_ms

    # --- control ---

    def start(self) -> None:
        """Rewind the engine, show pass 0 immediately, then schedule ticks."""
        self._begin(rewind=True)

    def resume(self) -> None:
        """Continue from the engine's current settled pass without rewinding."""
        self._begin(rewind=False)

    def cancel(self) -> None:
        """Stop playback. Idempotent; the engine stays where it last settled."""
        self._drop_handle()
        if not self._running:
            return
        self._generation += 1
        self._running = False
        logger.info(
            "Playback cancelled at pass %d", self.engine.current_pass_index,
        )
        self._resolve(False)

    async def run(self) -> bool:
        """Play from the first pass and wait until playback ends.

        Returns True if it ran to completion, False if cancelled or aborted.
        """
        self.cancel()
        done = asyncio.get_running_loop().create_future()
        self._done = done
        self.start()
        try:
            return await done
        except asyncio.CancelledError:
            self.cancel()
            raise

    # --- internals ---

    def _begin(self, rewind: bool) -> None:
        self.cancel()
        if self.engine.get_problem() is None:
            raise UnknownProblem(None)
        if rewind:
            self.engine.reset()

        self._generation += 1
        generation = self._generation
        self._running = True
        self.completed = False
        self.error = None
        logger.info(
            "Playback started: %s from pass %d of %d",
            self.engine.selected_problem_key,
            self.engine.current_pass_index + 1,
            self.engine.total_passes,
        )

        if self._surface() and self._is_current(generation):
            try:
                self._schedule(generation)
            except RuntimeError:
                # no injected loop and none running
                self._generation += 1
                self._running = False
                self._resolve(False)
                raise

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _schedule(self, generation: int) -> None:
        loop = self._loop or asyncio.get_running_loop()
        delay_ms = self.tick_delay_ms()
        logger.debug("Next tick in %.0f ms", delay_ms)
        self._handle = loop.call_later(delay_ms / 1000, self._tick, generation)

    def _tick(self, generation: int) -> None:
        if not self._is_current(generation):
            return
        self._handle = None

        if self.engine.is_complete():
            self._finish()
            return

        try:
            advanced = self.engine.next_pass()
        except InvalidPass as e:
            self._abort(e)
            return
        if not advanced:
            logger.warning("Engine refused to advance at pass %d", self.engine.current_pass_index)
            self.cancel()
            return

        if self._surface() and self._is_current(generation):
            self._schedule(generation)

    def _surface(self) -> bool:
        """Push the current pass to the presenter. Returns False if playback aborted."""
        try:
            self._show_current()
        except Exception as e:
            self._abort(e)
            return False
        return True

    def _show_current(self) -> None:
        problem = self.engine.get_problem()
        current = self.engine.get_current_pass()
        if problem is None or current is None:
            raise InvalidPass(f"No pass at index {self.engine.current_pass_index}")

        index = self.engine.current_pass_index
        history = self.engine.history
        self.presenter.on_pass_shown(problem, current, index, self.engine.total_passes)
        if history:
            self.presenter.on_change_described(describe_change(history[-1], current))
        metrics = format_metrics(current)
        self.presenter.on_metrics_updated(metrics, build_series(history, metrics))

    def _finish(self) -> None:
        self._running = False
        try:
            self.presenter.on_complete()
        except Exception as e:
            self._abort(e)
            return
        self.completed = True
        logger.info(
            "Playback complete: %s, %d passes shown",
            self.engine.selected_problem_key, self.engine.total_passes,
        )
        self._resolve(True)

    def _abort(self, cause: Exception) -> None:
        index = self.engine.current_pass_index
        error = PlaybackAborted(f"Playback aborted at pass {index}: {cause}", pass_index=index)
        error.__cause__ = cause
        logger.error("Playback aborted at pass %d", index, exc_info=cause)

        self._drop_handle()
        self._generation += 1
        self._running = False
        self.error = error
        try:
            self.presenter.on_aborted(error)
        except Exception:
            logger.exception("on_aborted hook raised")
        self._resolve(False)

    def _drop_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _resolve(self, result: bool) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(result)
