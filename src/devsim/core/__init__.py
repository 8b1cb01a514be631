"""
Core kernel primitives.

This layer knows NOTHING about what the models simulate. It only knows:
- Logical time and scheduling triggers
- A time-ordered queue of model activations
- Typed ports and the connections between them
- The capability interface models implement
- The engine that resolves one instant at a time
"""

from devsim.core.time import (
    TimeModel,
    FloatTimeModel,
    CalendarTimeModel,
    Now,
    At,
    After,
    NOW,
    resolve_trigger,
)
from devsim.core.errors import (
    SimulationError,
    BuildError,
    UnknownModel,
    UnknownPort,
    PortTypeMismatch,
    DuplicateModel,
    DuplicatePort,
    MissingHandler,
    InputAlreadyConnected,
    GraphFrozen,
    InvalidScheduleError,
    CascadeLimitExceeded,
    HandlerError,
    ObserverError,
    ContextExpired,
    SimulationEnded,
)
from devsim.core.event_queue import EventQueue, ScheduledEvent, ExternalInput
from devsim.core.ports import SIGNAL, InputPort, OutputPort, Connection, ConnectionGraph
from devsim.core.model import Model
from devsim.core.context import ModelCtx
from devsim.core.rng import model_rng, model_seed_sequence
from devsim.core.simulation import (
    Simulation,
    SimulationConfig,
    SimulationState,
    StopReason,
    StepOutcome,
    RunOutcome,
    Emission,
)

__all__ = [
    # Time
    "TimeModel",
    "FloatTimeModel",
    "CalendarTimeModel",
    "Now",
    "At",
    "After",
    "NOW",
    "resolve_trigger",
    # Errors
    "SimulationError",
    "BuildError",
    "UnknownModel",
    "UnknownPort",
    "PortTypeMismatch",
    "DuplicateModel",
    "DuplicatePort",
    "MissingHandler",
    "InputAlreadyConnected",
    "GraphFrozen",
    "InvalidScheduleError",
    "CascadeLimitExceeded",
    "HandlerError",
    "ObserverError",
    "ContextExpired",
    "SimulationEnded",
    # Queue and graph
    "EventQueue",
    "ScheduledEvent",
    "ExternalInput",
    "SIGNAL",
    "InputPort",
    "OutputPort",
    "Connection",
    "ConnectionGraph",
    # Models and engine
    "Model",
    "ModelCtx",
    "model_rng",
    "model_seed_sequence",
    "Simulation",
    "SimulationConfig",
    "SimulationState",
    "StopReason",
    "StepOutcome",
    "RunOutcome",
    "Emission",
]
