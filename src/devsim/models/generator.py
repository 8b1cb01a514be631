"""
Generator: draws random values from the model's own random source.

Two ways to drive it:
- Externally: every SIGNAL on `trigger` produces one sample (same instant)
- Self-paced: with `interval`, it keeps sampling at random inter-arrival
  times, e.g. interval=lambda rng: rng.exponential(2.0) for a Poisson source
"""

from __future__ import annotations
from typing import Any, Callable

import numpy as np

from devsim.core.context import ModelCtx
from devsim.core.model import Model
from devsim.core.ports import SIGNAL, InputPort, OutputPort
from devsim.core.time import NOW, After

Distribution = Callable[[np.random.Generator], Any]


class Generator(Model):
    """
    Emits samples of `distribution` on `output`.

    Args:
        distribution: Called with a numpy Generator, returns one sample
        value_type: Declared type of the `output` port
        interval: Optional inter-arrival sampler for self-paced generation
        rng: Optional private Generator overriding the simulation-derived one
    """

    inputs = (InputPort("trigger", SIGNAL),)

    def __init__(
        self,
        distribution: Distribution,
        value_type: Any = float,
        interval: Distribution | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.distribution = distribution
        self.value_type = value_type
        self.interval = interval
        self._rng_override = rng
        self.generated = 0

    def output_ports(self):
        return (OutputPort("output", self.value_type),)

    def initialize(self, ctx: ModelCtx) -> None:
        if self.interval is not None:
            ctx.schedule_update(After(self.interval(self._rng(ctx))))

    def on_trigger(self, _: None, ctx: ModelCtx) -> None:
        ctx.schedule_update(NOW)

    def handle_update(self, ctx: ModelCtx) -> None:
        rng = self._rng(ctx)
        ctx.emit("output", self.distribution(rng))
        self.generated += 1
        if self.interval is not None:
            ctx.schedule_update(After(self.interval(rng)))

    def _rng(self, ctx: ModelCtx) -> np.random.Generator:
        if self._rng_override is not None:
            return self._rng_override
        if ctx.rng is None:
            raise RuntimeError("Generator needs randomness enabled or an explicit rng")
        return ctx.rng
