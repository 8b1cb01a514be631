"""
Simulation: the coordinating engine.

Owns the model table, the connection graph, the event queue, the clock and
the per-model random sources.

Lifecycle:
    BUILDING  → add_model(), connect(), schedule_update(), inject()
    (first step()/run() freezes the graph and calls every model's initialize())
    IDLE → ADVANCING → PROCESSING → IDLE ... → TERMINAL

One step fully resolves one logical instant:
1. Pop the earliest entry, move the clock to its time.
2. Invoke the model's handle_update (or deliver an injected input).
3. Every emit inside that handler is routed on the spot: each connected
   input's handler runs at the same time, before emit() returns. Those
   handlers may emit and schedule in turn.
4. Repeat while the queue's earliest time equals the clock.

Routing is a synchronous call stack, so nested emits and schedules run
depth-first in connection-declaration order. The recursion limit is raised
for the duration of an instant so that config.cascade_limit, not the
interpreter, bounds a same-instant cascade.
"""

from __future__ import annotations
import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

import numpy as np

from devsim.core.context import ModelCtx
from devsim.core.errors import (
    CascadeLimitExceeded,
    GraphFrozen,
    HandlerError,
    MissingHandler,
    ObserverError,
    SimulationEnded,
    SimulationError,
    UnknownModel,
)
from devsim.core.event_queue import EventQueue, ExternalInput
from devsim.core.model import Model
from devsim.core.ports import Connection, ConnectionGraph
from devsim.core.rng import fresh_seed, model_rng
from devsim.core.time import NOW, FloatTimeModel, TimeModel, TimeTrigger, resolve_trigger

logger = logging.getLogger(__name__)

# Interpreter frames one nested delivery adds (_emit, _deliver, _invoke, the
# input closure, handle_input, the port handler, ModelCtx.emit), with slack
_FRAMES_PER_INVOCATION = 10


@dataclass
class SimulationConfig:
    """
    Configuration for a simulation.

    cascade_limit has no default: it bounds the number of handler
    invocations within one instant and must be chosen for the model at hand.
    """

    cascade_limit: int                # Max handler invocations per instant
    seed: int | None = None           # None: fresh entropy, reported in the log
    initial_time: Any = 0.0           # Clock value before the first step
    time_model: TimeModel = field(default_factory=FloatTimeModel)
    enable_rng: bool = True           # Give every model its own random source
    record_emissions: bool = True     # Keep the emission trace in memory

    def __post_init__(self):
        if (
            isinstance(self.cascade_limit, bool)
            or not isinstance(self.cascade_limit, (int, np.integer))
            or self.cascade_limit < 1
        ):
            raise ValueError(f"cascade_limit must be a positive int, got {self.cascade_limit!r}")
        if self.seed is not None:
            if isinstance(self.seed, bool) or not isinstance(self.seed, (int, np.integer)):
                raise ValueError(f"seed must be an int, got {self.seed!r}")
            if self.seed < 0:
                raise ValueError(f"seed must be non-negative, got {self.seed}")


class SimulationState(Enum):
    BUILDING = auto()    # Graph still mutable, nothing has run
    IDLE = auto()        # Between instants
    ADVANCING = auto()   # Moving the clock to the next queued time
    PROCESSING = auto()  # Resolving every cascade of the current instant
    TERMINAL = auto()    # Queue exhausted or unrecoverable failure


class StopReason(Enum):
    EXHAUSTED = auto()      # Queue empty
    UNTIL_REACHED = auto()  # Next instant lies at or beyond `until`
    STOPPED = auto()        # request_stop() honored between steps


@dataclass(frozen=True)
class StepOutcome:
    """Summary of one resolved instant."""

    time: Any
    activations: int   # handle_update invocations
    deliveries: int    # handle_input invocations (routed and injected)

    @property
    def invocations(self) -> int:
        return self.activations + self.deliveries


@dataclass(frozen=True)
class RunOutcome:
    """Summary of a run() call."""

    steps: int
    time: Any
    reason: StopReason


@dataclass(frozen=True)
class Emission:
    """One value emitted on an output port."""

    time: Any
    model_id: str
    port: str
    value: Any
    destinations: tuple[Connection, ...] = ()

    @property
    def is_boundary(self) -> bool:
        """True for outputs with no connection: visible only outside the simulation."""
        return not self.destinations


EmissionObserver = Callable[[Emission], None]


class Simulation:
    """
    The coupled-model root and its execution engine.

    Usage:
        sim = Simulation(SimulationConfig(cascade_limit=1000, seed=7))
        sim.add_model("gen", Generator(...))
        sim.add_model("sink", Recorder(float))
        sim.connect("gen", "output", "sink", "input")
        outcome = sim.run(until=100.0)
    """

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.time_model = config.time_model
        self._time = self.time_model.time(config.initial_time)

        self._models: dict[str, Model] = {}
        self._rngs: dict[str, np.random.Generator] = {}
        self._graph = ConnectionGraph()
        self._queue = EventQueue()

        self.state = SimulationState.BUILDING
        self.emissions: list[Emission] = []
        self.last_error: SimulationError | None = None
        self._observers: list[EmissionObserver] = []
        self._stop_requested = False
        self._init_failed = False

        # Per-instant counters
        self._cascade_count = 0
        self._delivery_count = 0

        if config.enable_rng:
            if config.seed is None:
                self.seed: int | None = fresh_seed()
                logger.info("No seed configured, using seed=%d", self.seed)
            else:
                self.seed = int(config.seed)
        else:
            self.seed = None

    # ═══════════════════════════════════════════════════════════════
    # BUILD API
    # ═══════════════════════════════════════════════════════════════

    def add_model(self, model_id: str, model: Model) -> Model:
        """
        Add a model instance under a unique id.

        Raises:
            GraphFrozen: the simulation already started
            DuplicateModel: id already in use
            DuplicatePort: the model declares a port name twice
            MissingHandler: an input port has no callable handler method
        """
        if self._graph.frozen:
            raise GraphFrozen("add a model")
        if not isinstance(model_id, str) or not model_id:
            raise ValueError(f"Model id must be a non-empty string, got {model_id!r}")

        inputs = list(model.input_ports())
        outputs = list(model.output_ports())
        if isinstance(model, Model) and model.uses_default_dispatch():
            for port in inputs:
                if not callable(getattr(model, port.handler_name, None)):
                    raise MissingHandler(model_id, port.name, port.handler_name)

        self._graph.add_node(model_id, inputs, outputs)
        self._models[model_id] = model
        if self.seed is not None:
            self._rngs[model_id] = model_rng(self.seed, model_id)

        logger.debug(
            "Added model %r (%s): %d inputs, %d outputs",
            model_id, type(model).__name__, len(inputs), len(outputs),
        )
        return model

    def connect(
        self,
        source_model: str,
        output_port: str,
        destination_model: str,
        input_port: str,
    ) -> Connection:
        """
        Connect an output port to an input port of identical type.

        Raises:
            GraphFrozen, UnknownModel, UnknownPort, PortTypeMismatch,
            InputAlreadyConnected
        """
        connection = self._graph.connect(source_model, output_port, destination_model, input_port)
        logger.debug("Connected %s", connection)
        return connection

    def schedule_update(self, model_id: str, when: TimeTrigger = NOW) -> Any:
        """
        Schedule a model's self-activation from outside the simulation.

        The trigger is resolved against the current clock. Returns the
        absolute activation time.
        """
        self._check_not_processing("schedule_update")
        if model_id not in self._models:
            raise UnknownModel(model_id)
        time = self._schedule_activation(model_id, when, self._time)
        self._reopen()
        return time

    def inject(self, model_id: str, port: str, value: Any, when: TimeTrigger = NOW) -> Any:
        """
        Schedule delivery of an external value to an input port.

        Injected values are independent queue entries: they do not replace
        the model's pending self-activation. Returns the delivery time.
        """
        self._check_not_processing("inject")
        self._graph.input_port(model_id, port)
        time = resolve_trigger(when, self._time, self.time_model)
        self._queue.push(time, model_id, ExternalInput(port, value))
        logger.debug("Injected value into %s::%s for t=%s", model_id, port, time)
        self._reopen()
        return time

    def observe(self, observer: EmissionObserver) -> None:
        """Call observer(emission) for every emission, as it is routed."""
        self._observers.append(observer)

    # ═══════════════════════════════════════════════════════════════
    # EXECUTION API
    # ═══════════════════════════════════════════════════════════════

    def step(self) -> StepOutcome:
        """
        Resolve exactly one logical instant.

        Raises:
            SimulationEnded: nothing is queued
            SimulationError: a runtime failure; the instant is aborted,
                the clock and remaining queue are left as they are
        """
        self._check_not_processing("step")
        self._start()
        if not self._queue:
            self.state = SimulationState.TERMINAL
            raise SimulationEnded(f"Event queue exhausted at t={self._time}")
        return self._process_instant()

    def run(self, until: Any = None) -> RunOutcome:
        """
        Repeat step() until the queue is exhausted, the next instant is at
        or beyond `until`, or request_stop() was called.

        Raises:
            SimulationEnded: called with nothing left to do
            SimulationError: a runtime failure (see step())
        """
        self._check_not_processing("run")
        self._start()
        until_time = self.time_model.time(until) if until is not None else None

        next_time = self._queue.peek_min_time()
        if next_time is None:
            self.state = SimulationState.TERMINAL
            raise SimulationEnded(f"Event queue exhausted at t={self._time}")
        if until_time is not None and next_time >= until_time:
            raise SimulationEnded(f"Stop time {until_time} already reached")

        steps = 0
        while True:
            if self._stop_requested:
                self._stop_requested = False
                reason = StopReason.STOPPED
                break
            next_time = self._queue.peek_min_time()
            if next_time is None:
                self.state = SimulationState.TERMINAL
                reason = StopReason.EXHAUSTED
                break
            if until_time is not None and next_time >= until_time:
                reason = StopReason.UNTIL_REACHED
                break
            self._process_instant()
            steps += 1

        logger.info("Run stopped (%s) after %d steps at t=%s", reason.name, steps, self._time)
        return RunOutcome(steps=steps, time=self._time, reason=reason)

    def request_stop(self) -> None:
        """Stop run() before its next step. Never interrupts an instant."""
        self._stop_requested = True

    # ═══════════════════════════════════════════════════════════════
    # INSPECTION
    # ═══════════════════════════════════════════════════════════════

    @property
    def time(self) -> Any:
        """Current clock value."""
        return self._time

    @property
    def models(self) -> Mapping[str, Model]:
        return MappingProxyType(self._models)

    def model(self, model_id: str) -> Model:
        try:
            return self._models[model_id]
        except KeyError:
            raise UnknownModel(model_id) from None

    @property
    def graph(self) -> ConnectionGraph:
        return self._graph

    @property
    def connections(self) -> list[Connection]:
        return list(self._graph)

    @property
    def pending_events(self) -> int:
        return len(self._queue)

    def peek_next_time(self) -> Any | None:
        return self._queue.peek_min_time()

    def pending_activation(self, model_id: str) -> Any | None:
        """Time of the model's pending self-activation, or None if dormant."""
        event = self._queue.pending(model_id)
        return event.time if event is not None else None

    def rng_for(self, model_id: str) -> np.random.Generator | None:
        if model_id not in self._models:
            raise UnknownModel(model_id)
        return self._rngs.get(model_id)

    @property
    def boundary_outputs(self) -> list[Emission]:
        """Recorded emissions on unconnected outputs."""
        return [e for e in self.emissions if e.is_boundary]

    # ═══════════════════════════════════════════════════════════════
    # ENGINE INTERNALS
    # ═══════════════════════════════════════════════════════════════

    def _start(self) -> None:
        """Freeze the graph and initialize models, on the first step/run."""
        if self._init_failed:
            raise SimulationError(
                f"Model initialization failed ({self.last_error}); simulation cannot run"
            )
        if self.state is not SimulationState.BUILDING:
            return
        self._graph.freeze()
        self.state = SimulationState.PROCESSING
        logger.info(
            "Starting simulation: %d models, %d connections, t=%s, seed=%s",
            len(self._models), len(self._graph), self._time, self.seed,
        )
        try:
            with self._stack_headroom():
                for model_id, model in self._models.items():
                    self._cascade_count = 0
                    self._invoke(model_id, model.initialize)
        except BaseException as exc:
            if isinstance(exc, SimulationError):
                self._abort(exc)
            self._init_failed = True
            self.state = SimulationState.TERMINAL
            raise
        self.state = SimulationState.IDLE

    def _process_instant(self) -> StepOutcome:
        self.state = SimulationState.ADVANCING
        time = self._queue.peek_min_time()
        self._time = time
        self.state = SimulationState.PROCESSING
        self._cascade_count = 0
        self._delivery_count = 0

        activations = 0
        try:
            with self._stack_headroom():
                while True:
                    next_time = self._queue.peek_min_time()
                    if next_time is None or next_time > time:
                        break
                    event = self._queue.pop_min()
                    if event.is_activation:
                        self._invoke(event.model_id, self._models[event.model_id].handle_update)
                        activations += 1
                    else:
                        payload = event.payload
                        self._deliver(event.model_id, payload.port, payload.value)
        except SimulationError as exc:
            self._abort(exc)
            raise
        finally:
            self.state = SimulationState.IDLE

        logger.debug(
            "t=%s resolved: %d activations, %d deliveries",
            time, activations, self._delivery_count,
        )
        return StepOutcome(time=time, activations=activations, deliveries=self._delivery_count)

    def _invoke(self, model_id: str, handler: Callable[[ModelCtx], None], port: str | None = None) -> None:
        """Run one handler with a fresh context. Its emits are routed from inside the call."""
        self._cascade_count += 1
        if self._cascade_count > self.config.cascade_limit:
            raise CascadeLimitExceeded(self._time, self.config.cascade_limit, model_id)

        ctx = ModelCtx(self, model_id, self._time, self._rngs.get(model_id))
        try:
            handler(ctx)
        except SimulationError:
            raise
        except Exception as exc:
            raise HandlerError(model_id, self._time, exc, port=port) from exc
        finally:
            ctx._close()

    def _deliver(self, model_id: str, port: str, value: Any) -> None:
        self._delivery_count += 1
        model = self._models[model_id]
        self._invoke(model_id, lambda ctx: model.handle_input(port, value, ctx), port=port)

    def _emit(self, model_id: str, port: str, value: Any) -> None:
        """Record one emission, then run every connected input handler in declaration order."""
        self._graph.output_port(model_id, port)
        destinations = self._graph.destinations(model_id, port)
        emission = Emission(self._time, model_id, port, value, tuple(destinations))
        if self.config.record_emissions:
            self.emissions.append(emission)
        self._notify(emission)
        for connection in destinations:
            logger.debug("t=%s deliver %s", self._time, connection)
            self._deliver(connection.destination_model, connection.destination_port, value)

    def _notify(self, emission: Emission) -> None:
        for observer in self._observers:
            try:
                observer(emission)
            except SimulationError:
                raise
            except Exception as exc:
                raise ObserverError(emission.model_id, emission.port, emission.time, exc) from exc

    @contextmanager
    def _stack_headroom(self) -> Iterator[None]:
        """Raise the recursion limit so cascade_limit nested handlers fit."""
        previous = sys.getrecursionlimit()
        sys.setrecursionlimit(previous + self.config.cascade_limit * _FRAMES_PER_INVOCATION)
        try:
            yield
        finally:
            sys.setrecursionlimit(previous)

    def _abort(self, exc: SimulationError) -> None:
        self.last_error = exc
        logger.warning("Instant t=%s aborted: %s", self._time, exc)

    def _schedule_activation(self, model_id: str, when: TimeTrigger, now: Any) -> Any:
        time = resolve_trigger(when, now, self.time_model)
        self._queue.push(time, model_id)
        logger.debug("Scheduled %r for t=%s", model_id, time)
        return time

    def _cancel_activation(self, model_id: str) -> bool:
        return self._queue.remove(model_id)

    def _check_not_processing(self, operation: str) -> None:
        if self.state in (SimulationState.ADVANCING, SimulationState.PROCESSING):
            raise SimulationError(f"Cannot call {operation}() while an instant is being processed")

    def _reopen(self) -> None:
        if self.state is SimulationState.TERMINAL and not self._init_failed:
            self.state = SimulationState.IDLE

    def __repr__(self) -> str:
        return (
            f"Simulation(t={self._time}, state={self.state.name}, "
            f"models={len(self._models)}, pending={len(self._queue)})"
        )
