"""
Fan-out and fan-in helpers.

The kernel lets an output feed many inputs, but an input accepts a single
producer. Cloner and Merge make both directions explicit:
- Cloner: one input copied to `fanout` separately named outputs
- Merge: `fanin` inputs forwarded to one output, in arrival order
"""

from __future__ import annotations
import copy
from typing import Any

from devsim.core.context import ModelCtx
from devsim.core.model import Model
from devsim.core.ports import InputPort, OutputPort


class Cloner(Model):
    """Copies every value on `input` to output_0 .. output_{fanout-1}."""

    def __init__(self, value_type: Any, fanout: int, deep_copy: bool = False):
        if fanout < 1:
            raise ValueError(f"fanout must be >= 1, got {fanout}")
        self.value_type = value_type
        self.fanout = fanout
        self.deep_copy = deep_copy

    def input_ports(self):
        return (InputPort("input", self.value_type),)

    def output_ports(self):
        return tuple(OutputPort(f"output_{i}", self.value_type) for i in range(self.fanout))

    def on_input(self, value: Any, ctx: ModelCtx) -> None:
        for i in range(self.fanout):
            ctx.emit(f"output_{i}", copy.deepcopy(value) if self.deep_copy else value)


class Merge(Model):
    """Forwards values from input_0 .. input_{fanin-1} to `output`."""

    def __init__(self, value_type: Any, fanin: int):
        if fanin < 1:
            raise ValueError(f"fanin must be >= 1, got {fanin}")
        self.value_type = value_type
        self.fanin = fanin
        self.forwarded = 0

    def input_ports(self):
        return tuple(InputPort(f"input_{i}", self.value_type) for i in range(self.fanin))

    def output_ports(self):
        return (OutputPort("output", self.value_type),)

    def handle_input(self, port: str, value: Any, ctx: ModelCtx) -> None:
        ctx.emit("output", value)
        self.forwarded += 1
