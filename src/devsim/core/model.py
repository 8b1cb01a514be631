"""
The capability interface every simulable unit implements.

A model:
- declares typed input ports, each backed by a handler method
- declares typed output ports it may emit on
- optionally reacts to its own scheduled self-activation (handle_update)

Models never call each other. All interaction goes through ModelCtx:
ctx.emit() for outputs, ctx.schedule_update() for self-activations.
A model that does not reschedule itself inside handle_update goes dormant
until an input reactivates it.

Example:

    class Ticker(Model):
        outputs = (OutputPort("tick", float),)

        def initialize(self, ctx):
            ctx.schedule_update(At(0.0))

        def handle_update(self, ctx):
            ctx.emit("tick", ctx.time)
            ctx.schedule_update(After(1.0))
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Sequence

from devsim.core.ports import InputPort, OutputPort

if TYPE_CHECKING:
    from devsim.core.context import ModelCtx


class Model:
    """
    Base class for atomic models.

    Port declarations come from the `inputs` / `outputs` class attributes.
    Override input_ports() / output_ports() when they depend on the instance
    (e.g. a configurable number of outputs).
    """

    inputs: Sequence[InputPort] = ()
    outputs: Sequence[OutputPort] = ()

    def input_ports(self) -> Sequence[InputPort]:
        return tuple(self.inputs)

    def output_ports(self) -> Sequence[OutputPort]:
        return tuple(self.outputs)

    def initialize(self, ctx: "ModelCtx") -> None:
        """
        Called once when the simulation starts, at the initial time.

        Typical use: schedule the first self-activation.
        """

    def handle_input(self, port: str, value: Any, ctx: "ModelCtx") -> None:
        """
        React to a value arriving on an input port.

        The default implementation dispatches to the port's handler method,
        called as handler(value, ctx).
        """
        for declared in self.input_ports():
            if declared.name == port:
                getattr(self, declared.handler_name)(value, ctx)
                return
        raise KeyError(f"{type(self).__name__} has no input port {port!r}")

    def handle_update(self, ctx: "ModelCtx") -> None:
        """React to this model's own scheduled activation becoming due."""

    def uses_default_dispatch(self) -> bool:
        """Whether input handling goes through the per-port handler methods."""
        return type(self).handle_input is Model.handle_input
