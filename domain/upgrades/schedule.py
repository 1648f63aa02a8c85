"""Time-of-day schedules for the daily upgrade job."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from domain.upgrades.errors import InvalidScheduleError

SCHEDULE_PERIOD = timedelta(hours=24)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([ap]\.?m\.?)?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class ScheduleSpec:
    """A time of day that repeats every ``period``."""

    hour: int
    minute: int
    period: timedelta = SCHEDULE_PERIOD

    def next_occurrence(self, now: datetime) -> datetime:
        """Return the first occurrence strictly after ``now``."""

        candidate = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_schedule(text: str) -> ScheduleSpec:
    """Parse ``HH:MM`` (24h) or ``H:MMam``/``H:MMpm`` (12h) into a spec."""

    if not isinstance(text, str):
        raise InvalidScheduleError(f"Schedule time must be a string: {text!r}")
    match = _TIME_PATTERN.match(text)
    if match is None:
        raise InvalidScheduleError(f"Unrecognised schedule time: {text!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    meridiem = match.group(3)
    if minute > 59:
        raise InvalidScheduleError(f"Minute out of range in schedule time: {text!r}")
    if meridiem:
        if not 1 <= hour <= 12:
            raise InvalidScheduleError(f"Hour out of range for 12-hour time: {text!r}")
        is_pm = meridiem.lower().startswith("p")
        hour = hour % 12 + (12 if is_pm else 0)
    elif hour > 23:
        raise InvalidScheduleError(f"Hour out of range in schedule time: {text!r}")
    return ScheduleSpec(hour=hour, minute=minute)


__all__ = ["SCHEDULE_PERIOD", "ScheduleSpec", "parse_schedule"]
