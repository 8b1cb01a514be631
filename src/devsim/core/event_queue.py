"""
Time-ordered queue of pending model activations.

Entries are ordered by (time, sequence). The sequence number is assigned at
push time from a counter owned by the queue (one queue per Simulation), so
events sharing a timestamp always come out in insertion order.

Each model has at most one pending self-activation. Pushing a new one for
the same model supersedes the old entry, which is dropped lazily when it
reaches the top of the heap.
"""

from __future__ import annotations
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExternalInput:
    """Payload of a harness-injected event: a value for one input port."""

    port: str
    value: Any


@dataclass(frozen=True, order=True)
class ScheduledEvent:
    """
    A queue entry.

    payload is None for a self-activation ("run handle_update at time"),
    or an ExternalInput to deliver to the model's input port.
    """

    time: Any
    sequence: int
    model_id: str = field(compare=False)
    payload: ExternalInput | None = field(default=None, compare=False)

    @property
    def is_activation(self) -> bool:
        return self.payload is None


class EventQueue:
    """Min-priority queue over ScheduledEvent with reschedule-replaces."""

    def __init__(self):
        self._heap: list[ScheduledEvent] = []
        self._counter = itertools.count()
        # model_id -> its single live self-activation
        self._activations: dict[str, ScheduledEvent] = {}
        # sequences of superseded/removed entries still sitting in the heap
        self._dead: set[int] = set()
        self._live = 0

    def push(self, time: Any, model_id: str, payload: ExternalInput | None = None) -> ScheduledEvent:
        """
        Insert an entry and return it.

        A self-activation (payload=None) replaces any pending activation
        of the same model.
        """
        event = ScheduledEvent(time, next(self._counter), model_id, payload)
        if payload is None:
            self.remove(model_id)
            self._activations[model_id] = event
        heapq.heappush(self._heap, event)
        self._live += 1
        return event

    def pop_min(self) -> ScheduledEvent | None:
        """Remove and return the earliest live entry, or None if empty."""
        self._discard_dead()
        if not self._heap:
            return None
        event = heapq.heappop(self._heap)
        self._live -= 1
        if event.is_activation:
            del self._activations[event.model_id]
        return event

    def peek_min_time(self) -> Any | None:
        """Time of the earliest live entry, or None if empty."""
        self._discard_dead()
        if not self._heap:
            return None
        return self._heap[0].time

    def remove(self, model_id: str) -> bool:
        """
        Drop the pending self-activation of a model.

        Returns True if there was one. Injected external inputs are kept.
        """
        event = self._activations.pop(model_id, None)
        if event is None:
            return False
        self._dead.add(event.sequence)
        self._live -= 1
        return True

    def pending(self, model_id: str) -> ScheduledEvent | None:
        """The pending self-activation of a model, if any."""
        return self._activations.get(model_id)

    def _discard_dead(self):
        heap = self._heap
        while heap and heap[0].sequence in self._dead:
            self._dead.discard(heapq.heappop(heap).sequence)

    def __len__(self) -> int:
        return self._live

    def __bool__(self) -> bool:
        return self._live > 0

    def __iter__(self):
        """Live entries in processing order (does not consume the queue)."""
        return iter(sorted(e for e in self._heap if e.sequence not in self._dead))
