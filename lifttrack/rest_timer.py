"""Rest timer countdown and the one-second cadences of the workout view.

:class:`RestTimerDriver` ticks the rest timer and :class:`ElapsedTimeDriver`
reports how long the workout has been running.  Both live as long as the
view that creates them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from kivy.clock import Clock

from lifttrack.calculations import workout_duration
from lifttrack.models import RestTimerState

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from lifttrack.workout_store import WorkoutStore


class RestTimer:
    """Countdown started after a completed set.

    The timer is either absent (``state is None``), running, or expired.  An
    expired timer keeps ``seconds == 0`` on screen until it is stopped or
    replaced by a new :meth:`start`.
    """

    def __init__(self) -> None:
        self.state: RestTimerState | None = None
        # incremented on every start so drivers can tell restarts from ticks
        self.generation = 0

    @property
    def is_running(self) -> bool:
        return self.state is not None and self.state.running

    @property
    def is_complete(self) -> bool:
        return (
            self.state is not None
            and not self.state.running
            and self.state.seconds == 0
        )

    @property
    def seconds(self) -> int:
        return self.state.seconds if self.state else 0

    @property
    def duration(self) -> int:
        return self.state.duration if self.state else 0

    def start(self, duration: int) -> None:
        """Replace any current countdown with a fresh one of ``duration`` seconds."""

        duration = max(0, int(duration))
        self.state = RestTimerState(running=True, seconds=duration, duration=duration)
        self.generation += 1

    def tick(self) -> bool:
        """Advance the countdown by one second.

        Returns ``True`` if the state changed.
        """

        state = self.state
        if state is None or not state.running:
            return False
        if state.seconds <= 1:
            self.state = state.model_copy(update={"running": False, "seconds": 0})
        else:
            self.state = state.model_copy(update={"seconds": state.seconds - 1})
        return True

    def stop(self) -> None:
        """Cancel or dismiss the timer."""

        self.state = None


class Ticker:
    """Cancellable periodic callback scheduled on the Kivy clock."""

    def __init__(self, callback: Callable[[], object], interval: float = 1.0, clock=None):
        self.callback = callback
        self.interval = interval
        self._clock = clock or Clock
        self._event = None

    @property
    def is_running(self) -> bool:
        return self._event is not None

    def start(self) -> None:
        """(Re)start the cadence so the next tick lands one interval from now."""

        self.stop()
        self._event = self._clock.schedule_interval(self._tick, self.interval)

    def stop(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def _tick(self, dt) -> None:
        self.callback()


class RestTimerDriver:
    """Tick a store's rest timer once per second while it runs.

    The cadence restarts on every new timer, stops once the timer is absent
    or expired, and ``on_expire`` fires once per expiry (vibration cue).
    Call :meth:`detach` when the owning view goes away.
    """

    def __init__(
        self,
        store: "WorkoutStore",
        on_expire: Callable[[], object] | None = None,
        clock=None,
    ):
        self.store = store
        self.on_expire = on_expire
        self.ticker = Ticker(store.tick_rest_timer, 1.0, clock=clock)
        self._generation = store.rest_timer.generation
        self._expired_generation: int | None = (
            self._generation if store.rest_timer.is_complete else None
        )
        self._unsubscribe = store.subscribe(self._on_change)
        self._on_change(store)

    def _on_change(self, store: "WorkoutStore") -> None:
        timer = store.rest_timer
        if timer.is_running:
            if timer.generation != self._generation or not self.ticker.is_running:
                self._generation = timer.generation
                self.ticker.start()
            return
        self.ticker.stop()
        if timer.is_complete and self._expired_generation != timer.generation:
            self._expired_generation = timer.generation
            logging.debug("Rest timer expired after %s seconds", timer.duration)
            if self.on_expire is not None:
                self.on_expire()

    def detach(self) -> None:
        self.ticker.stop()
        self._unsubscribe()


class ElapsedTimeDriver:
    """Call ``on_update`` with the workout's elapsed seconds once per second.

    Runs while the store has an active workout and reports immediately when
    one becomes active.
    """

    def __init__(
        self,
        store: "WorkoutStore",
        on_update: Callable[[int], object],
        clock=None,
        now: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.on_update = on_update
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.ticker = Ticker(self._tick, 1.0, clock=clock)
        self._unsubscribe = store.subscribe(self._on_change)
        self._on_change(store)

    def _on_change(self, store: "WorkoutStore") -> None:
        if not store.is_active:
            self.ticker.stop()
        elif not self.ticker.is_running:
            self.ticker.start()
            self._tick()

    def _tick(self) -> None:
        workout = self.store.active_workout
        if workout is not None:
            self.on_update(workout_duration(workout.started_at, self._now()))

    def detach(self) -> None:
        self.ticker.stop()
        self._unsubscribe()
