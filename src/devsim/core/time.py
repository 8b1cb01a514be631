"""
Simulation-logical time.

There is no global "now": time only exists as values carried by ModelCtx and
queue entries. A TimeModel fixes the concrete representation for one
simulation; every other component only relies on:
- ordering (<, ==) between times
- add(time, duration) with a non-negative duration
- a zero duration

Available representations:
- FloatTimeModel(np.float64): double precision (default)
- FloatTimeModel(np.float32): single precision
- CalendarTimeModel: datetime instants, timedelta durations

Scheduling requests are expressed as triggers relative to the current time:
- Now():         zero delay, processed in the current instant
- After(delay):  current time + delay
- At(time):      an absolute time, not in the past
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol, Union

import numpy as np

from devsim.core.errors import InvalidScheduleError


class TimeModel(Protocol):
    """Protocol for concrete time representations."""

    @property
    def zero(self) -> Any:
        """The zero duration."""
        ...

    def time(self, value: Any) -> Any:
        """Coerce a value into a time instant of this representation."""
        ...

    def duration(self, value: Any) -> Any:
        """Coerce a value into a non-negative duration."""
        ...

    def add(self, time: Any, duration: Any) -> Any:
        """Return time + duration."""
        ...


@dataclass(frozen=True)
class FloatTimeModel:
    """Scalar floating point time. dtype selects single or double precision."""

    dtype: type = np.float64

    def __post_init__(self):
        if self.dtype not in (np.float32, np.float64):
            raise ValueError(f"Unsupported float time dtype: {self.dtype!r}")

    @property
    def zero(self):
        return self.dtype(0.0)

    def time(self, value: Any):
        if isinstance(value, (datetime, timedelta)):
            raise InvalidScheduleError(f"Expected a numeric time, got {value!r}")
        t = self.dtype(value)
        if math.isnan(t):
            raise InvalidScheduleError("Time cannot be NaN")
        return t

    def duration(self, value: Any):
        if isinstance(value, (datetime, timedelta)):
            raise InvalidScheduleError(f"Expected a numeric duration, got {value!r}")
        d = self.dtype(value)
        if math.isnan(d):
            raise InvalidScheduleError("Duration cannot be NaN")
        if d < 0:
            raise InvalidScheduleError(f"Negative duration: {value}")
        return d

    def add(self, time: Any, duration: Any):
        return self.dtype(time + duration)


@dataclass(frozen=True)
class CalendarTimeModel:
    """
    Calendar time: datetime instants and timedelta durations.

    Numbers are accepted as durations in seconds; ISO-8601 strings are
    accepted as instants.
    """

    @property
    def zero(self) -> timedelta:
        return timedelta(0)

    def time(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                raise InvalidScheduleError(f"Not an ISO-8601 instant: {value!r}") from exc
        raise InvalidScheduleError(f"Expected a datetime instant, got {value!r}")

    def duration(self, value: Any) -> timedelta:
        if isinstance(value, timedelta):
            d = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            if math.isnan(value):
                raise InvalidScheduleError("Duration cannot be NaN")
            d = timedelta(seconds=value)
        else:
            raise InvalidScheduleError(f"Expected a timedelta duration, got {value!r}")
        if d < timedelta(0):
            raise InvalidScheduleError(f"Negative duration: {d}")
        return d

    def add(self, time: datetime, duration: timedelta) -> datetime:
        return time + duration


# ═══════════════════════════════════════════════════════════════
# SCHEDULING TRIGGERS
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Now:
    """Zero delay: run within the current instant."""


@dataclass(frozen=True)
class At:
    """An absolute time, which must not lie in the past."""

    time: Any


@dataclass(frozen=True)
class After:
    """A non-negative delay from the current time."""

    delay: Any


NOW = Now()

TimeTrigger = Union[Now, At, After]


def resolve_trigger(trigger: TimeTrigger, now: Any, time_model: TimeModel) -> Any:
    """
    Turn a trigger into an absolute time.

    Raises:
        InvalidScheduleError: At() in the past, or After() with a negative delay
    """
    if isinstance(trigger, Now):
        return now
    if isinstance(trigger, After):
        return time_model.add(now, time_model.duration(trigger.delay))
    if isinstance(trigger, At):
        target = time_model.time(trigger.time)
        if target < now:
            raise InvalidScheduleError(
                f"Tried scheduling in the past: {target}; current time is {now}"
            )
        return target
    raise TypeError(f"Expected Now, At or After, got {type(trigger).__name__}")
