"""Run an action once a day at a fixed wall-clock time."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Protocol

from domain.upgrades.schedule import ScheduleSpec, parse_schedule


_LOGGER = logging.getLogger(__name__)


class Timer(Protocol):
    daemon: bool

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def _default_timer(delay: float, callback: Callable[[], None]) -> Timer:
    return threading.Timer(delay, callback)


class ScheduledJob:
    """A running daily schedule; re-arms itself after each firing."""

    def __init__(
        self,
        spec: ScheduleSpec,
        action: Callable[[], None],
        *,
        clock: Callable[[], datetime],
        timer_factory: TimerFactory,
    ) -> None:
        self.spec = spec
        self._action = action
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Timer | None = None
        self._cancelled = False
        self.next_run: datetime = spec.next_occurrence(clock())
        self.runs = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        _LOGGER.info("Cancelled daily upgrade schedule at %s", self.spec)

    def _arm(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            delay = max(0.0, (self.next_run - self._clock()).total_seconds())
            timer = self._timer_factory(delay, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()
        _LOGGER.debug("Next scheduled upgrade at %s (in %.0f seconds)", self.next_run, delay)

    def _fire(self) -> None:
        if self._cancelled:
            return
        _LOGGER.info("Running scheduled upgrade (%s)", self.spec)
        try:
            self.runs += 1
            self._action()
        except Exception:
            _LOGGER.exception("Scheduled upgrade failed")
        finally:
            # Slots the action overran are skipped.
            self.next_run = self.spec.next_occurrence(self._clock())
            self._arm()


class RecurringScheduler:
    """Arm daily timers for :class:`ScheduleSpec` values."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: TimerFactory = _default_timer,
    ) -> None:
        self._clock = clock
        self._timer_factory = timer_factory

    def schedule(self, spec: ScheduleSpec | str, action: Callable[[], None]) -> ScheduledJob:
        """Fire ``action`` at the next occurrence of ``spec`` and daily after."""

        if not isinstance(spec, ScheduleSpec):
            spec = parse_schedule(spec)
        job = ScheduledJob(spec, action, clock=self._clock, timer_factory=self._timer_factory)
        _LOGGER.info("Scheduled daily upgrade at %s; first run %s", spec, job.next_run)
        job._arm()
        return job


__all__ = ["RecurringScheduler", "ScheduleSpec", "ScheduledJob", "parse_schedule"]
