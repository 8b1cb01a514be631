"""
Error taxonomy for the simulation kernel.

Two families:
- BuildError: raised while assembling a simulation (models, ports, wiring).
  A failing build call leaves the graph exactly as it was before the call.
- Runtime errors: raised from step()/run(). They abort the current instant
  only; clock and queue stay as they were at the point of failure.

SimulationEnded is a terminal signal, not a failure.
"""

from __future__ import annotations
from typing import Any


class SimulationError(Exception):
    """Base class for every error surfaced by the kernel."""


# ═══════════════════════════════════════════════════════════════
# BUILD-TIME
# ═══════════════════════════════════════════════════════════════


class BuildError(SimulationError):
    """Graph construction failed."""


class UnknownModel(BuildError):
    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Simulation has no model with id: {model_id!r}")


class UnknownPort(BuildError):
    def __init__(self, model_id: str, port: str, direction: str):
        self.model_id = model_id
        self.port = port
        self.direction = direction
        super().__init__(f"Model {model_id!r} has no {direction} port named {port!r}")


class PortTypeMismatch(BuildError):
    def __init__(
        self,
        source: tuple[str, str],
        destination: tuple[str, str],
        output_type: Any,
        input_type: Any,
    ):
        self.source = source
        self.destination = destination
        self.output_type = output_type
        self.input_type = input_type
        super().__init__(
            f"Output {source[0]}::{source[1]} ({_type_name(output_type)}) and "
            f"input {destination[0]}::{destination[1]} ({_type_name(input_type)}) "
            "types do not match"
        )


class DuplicateModel(BuildError):
    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Model id already in use: {model_id!r}")


class DuplicatePort(BuildError):
    def __init__(self, model_id: str, port: str):
        self.model_id = model_id
        self.port = port
        super().__init__(f"Model {model_id!r} declares port {port!r} more than once")


class MissingHandler(BuildError):
    def __init__(self, model_id: str, port: str, handler: str):
        self.model_id = model_id
        self.port = port
        self.handler = handler
        super().__init__(
            f"Model {model_id!r} declares input {port!r} but has no "
            f"callable handler {handler!r}"
        )


class InputAlreadyConnected(BuildError):
    """An input port accepts a single producer; use a Merge model to combine."""

    def __init__(self, destination: tuple[str, str], existing: tuple[str, str]):
        self.destination = destination
        self.existing = existing
        super().__init__(
            f"Input {destination[0]}::{destination[1]} is already fed by "
            f"{existing[0]}::{existing[1]}"
        )


class GraphFrozen(BuildError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation} after the simulation has started")


# ═══════════════════════════════════════════════════════════════
# RUNTIME
# ═══════════════════════════════════════════════════════════════


class InvalidScheduleError(SimulationError):
    """Scheduling at a past time or with a negative/NaN duration."""


class CascadeLimitExceeded(SimulationError):
    def __init__(self, time: Any, limit: int, model_id: str):
        self.time = time
        self.limit = limit
        self.model_id = model_id
        super().__init__(
            f"More than {limit} handler invocations at time {time} "
            f"(last: {model_id!r}); models keep re-triggering each other"
        )


class HandlerError(SimulationError):
    """
    A model handler raised a non-kernel exception.

    The original exception is available as `source` and as `__cause__`.
    """

    def __init__(self, model_id: str, time: Any, source: BaseException, port: str | None = None):
        self.model_id = model_id
        self.time = time
        self.source = source
        self.port = port
        where = f"input {port!r}" if port is not None else "update"
        super().__init__(
            f"Model {model_id!r} failed in {where} handler at time {time}: "
            f"{type(source).__name__}: {source}"
        )


class ObserverError(SimulationError):
    """An emission observer raised. The original exception is `source`."""

    def __init__(self, model_id: str, port: str, time: Any, source: BaseException):
        self.model_id = model_id
        self.port = port
        self.time = time
        self.source = source
        super().__init__(
            f"Observer failed on emission {model_id}::{port} at time {time}: "
            f"{type(source).__name__}: {source}"
        )


class ContextExpired(SimulationError):
    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(
            f"ModelCtx for {model_id!r} used after its handler invocation ended"
        )


class SimulationEnded(SimulationError):
    """Nothing left to do: the queue is exhausted or the stop time was reached."""


def _type_name(value_type: Any) -> str:
    return getattr(value_type, "__name__", repr(value_type))
