"""
ModelCtx: the per-invocation handle passed into model handlers.

A context is valid only while the handler it was built for is running.
Models must not keep it; any use after the invocation ends raises
ContextExpired.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any

from devsim.core.errors import ContextExpired
from devsim.core.time import NOW, TimeModel, TimeTrigger

if TYPE_CHECKING:
    import numpy as np
    from devsim.core.simulation import Simulation


_model_logger = logging.getLogger("devsim.model")


class ModelLogAdapter(logging.LoggerAdapter):
    """Prefixes records with the model id and simulation time."""

    def process(self, msg, kwargs):
        return f"[{self.extra['model_id']} @ {self.extra['sim_time']}] {msg}", kwargs


class ModelCtx:
    """
    Context for one handler invocation.

    Attributes:
        time: current logical time
        model_id: id of the model being invoked
    """

    __slots__ = ("_simulation", "time", "model_id", "_rng", "_open", "_log")

    def __init__(
        self,
        simulation: "Simulation",
        model_id: str,
        time: Any,
        rng: "np.random.Generator | None",
    ):
        self._simulation = simulation
        self.time = time
        self.model_id = model_id
        self._rng = rng
        self._open = True
        self._log: ModelLogAdapter | None = None

    def schedule_update(self, when: TimeTrigger = NOW) -> Any:
        """
        Request this model's handle_update at Now(), After(delay) or At(time).

        Replaces any pending self-activation of this model. Returns the
        absolute activation time.

        Raises:
            InvalidScheduleError: past At() or negative After()
        """
        self._check_open()
        return self._simulation._schedule_activation(self.model_id, when, self.time)

    def cancel_update(self) -> bool:
        """Drop the pending self-activation, if any (go dormant)."""
        self._check_open()
        return self._simulation._cancel_activation(self.model_id)

    def emit(self, port: str, value: Any) -> None:
        """
        Emit a value on one of this model's output ports.

        Connected inputs receive it at the current time, before this call
        returns, in connection-declaration order. Unconnected outputs are
        simulation boundary outputs.

        Raises:
            UnknownPort: the model declares no such output
        """
        self._check_open()
        self._simulation._emit(self.model_id, port, value)

    @property
    def rng(self) -> "np.random.Generator | None":
        """This model's own random source (None when randomness is disabled)."""
        self._check_open()
        return self._rng

    @property
    def time_model(self) -> "TimeModel":
        """The simulation's time representation, for arithmetic on times."""
        return self._simulation.time_model

    @property
    def log(self) -> ModelLogAdapter:
        if self._log is None:
            self._log = ModelLogAdapter(
                _model_logger, {"model_id": self.model_id, "sim_time": self.time}
            )
        return self._log

    @property
    def is_open(self) -> bool:
        return self._open

    def _close(self) -> None:
        self._open = False

    def _check_open(self) -> None:
        if not self._open:
            raise ContextExpired(self.model_id)

    def __repr__(self) -> str:
        state = "open" if self._open else "expired"
        return f"ModelCtx(model_id={self.model_id!r}, time={self.time!r}, {state})"
