"""Recorder: a sink keeping every (time, value) pair it receives."""

from __future__ import annotations
from typing import Any

import numpy as np

from devsim.core.context import ModelCtx
from devsim.core.model import Model
from devsim.core.ports import InputPort


class Recorder(Model):
    """Terminal model for collecting results of a run."""

    def __init__(self, value_type: Any, port: str = "input"):
        self.value_type = value_type
        self.port = port
        self.records: list[tuple[Any, Any]] = []

    def input_ports(self):
        return (InputPort(self.port, self.value_type, handler="record"),)

    def record(self, value: Any, ctx: ModelCtx) -> None:
        self.records.append((ctx.time, value))

    @property
    def times(self) -> list:
        return [t for t, _ in self.records]

    @property
    def values(self) -> list:
        return [v for _, v in self.records]

    def get_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (times, values) as numpy arrays."""
        return np.asarray(self.times), np.asarray(self.values)

    def __len__(self) -> int:
        return len(self.records)
