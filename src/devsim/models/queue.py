"""FIFO buffer: stores values from `input`, releases the oldest on `pop`."""

from __future__ import annotations
from collections import deque
from typing import Any

from devsim.core.context import ModelCtx
from devsim.core.model import Model
from devsim.core.ports import SIGNAL, InputPort, OutputPort


class Queue(Model):
    """
    First-in first-out buffer.

    A pop on an empty queue is ignored. `max_length` tracks the largest
    backlog seen.
    """

    def __init__(self, value_type: Any):
        self.value_type = value_type
        self.items: deque = deque()
        self.max_length = 0

    def input_ports(self):
        return (
            InputPort("input", self.value_type),
            InputPort("pop", SIGNAL),
        )

    def output_ports(self):
        return (OutputPort("output", self.value_type),)

    def on_input(self, value: Any, ctx: ModelCtx) -> None:
        self.items.append(value)
        self.max_length = max(self.max_length, len(self.items))

    def on_pop(self, _: None, ctx: ModelCtx) -> None:
        if self.items:
            ctx.emit("output", self.items.popleft())

    def __len__(self) -> int:
        return len(self.items)
