"""
Timer: emits a signal at a start time, optionally repeating.

The timer has no inputs. It is the usual way to kick off activity in a
model graph: connect its `signal` output to any SIGNAL-typed input
(Generator.trigger, Queue.pop, ...).
"""

from __future__ import annotations
from typing import Any

from devsim.core.context import ModelCtx
from devsim.core.model import Model
from devsim.core.ports import SIGNAL, OutputPort
from devsim.core.time import NOW, After, At


class Timer(Model):
    """
    A signal source.

    The first signal fires at `start` (absolute), shifted by `delay` when
    both are given; after `delay` from the initial time when only `delay`
    is given; immediately if neither is. With `repeat`, it fires again
    every `repeat` until the next firing would pass `end`.
    """

    outputs = (OutputPort("signal", SIGNAL),)

    def __init__(
        self,
        start: Any = None,
        delay: Any = None,
        repeat: Any = None,
        end: Any = None,
    ):
        self.start = start
        self.delay = delay
        self.repeat = repeat
        self.end = end
        self.fired = 0

    def initialize(self, ctx: ModelCtx) -> None:
        if self.start is not None:
            first = ctx.time_model.time(self.start)
            if self.delay is not None:
                first = ctx.time_model.add(first, ctx.time_model.duration(self.delay))
            trigger = At(first)
        elif self.delay is not None:
            trigger = After(self.delay)
        else:
            trigger = NOW
        self._schedule_within_end(ctx, trigger)

    def handle_update(self, ctx: ModelCtx) -> None:
        ctx.emit("signal", None)
        self.fired += 1
        if self.repeat is not None:
            self._schedule_within_end(ctx, After(self.repeat))

    def _schedule_within_end(self, ctx: ModelCtx, trigger) -> None:
        when = ctx.schedule_update(trigger)
        if self.end is not None and when > self.end:
            ctx.cancel_update()


def periodic_timer(period: Any, start: Any = None, end: Any = None) -> Timer:
    """
    Convenience factory for a repeating timer.

    Args:
        period: Time between signals
        start: Absolute time of the first signal (initial time if None)
        end: Last time a signal may fire (unbounded if None)
    """
    return Timer(start=start, repeat=period, end=end)
