"""
Reusable atomic models.

Plain Model subclasses built only on the public kernel interface:
- Timer: signal source, one-shot or periodic
- Generator: random samples, triggered or self-paced
- Queue: FIFO buffer released by a pop signal
- Cloner / Merge: explicit fan-out and fan-in
- Recorder: sink collecting (time, value) pairs
"""

from devsim.models.timer import Timer, periodic_timer
from devsim.models.generator import Generator
from devsim.models.queue import Queue
from devsim.models.routing import Cloner, Merge
from devsim.models.recorder import Recorder

__all__ = [
    "Timer",
    "periodic_timer",
    "Generator",
    "Queue",
    "Cloner",
    "Merge",
    "Recorder",
]
