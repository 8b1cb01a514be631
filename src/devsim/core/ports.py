"""
Ports and the connection graph.

A port is a named, typed attachment point on a model:
- InputPort: owns a handler (a method on the model) that consumes values
- OutputPort: only declares the type of the values the model emits

Connections are directed edges (model, output) -> (model, input). Both ends
must declare the identical type; this is checked once, when connecting, and
never again while routing.

Topology rules:
- An output may fan out to any number of inputs (broadcast).
- An input accepts at most one producer. Merging several producers is a
  modeling decision made with an explicit Merge model.

The graph is built before the simulation starts, then frozen. Routing is a
plain lookup returning destinations in declaration order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from devsim.core.errors import (
    DuplicateModel,
    DuplicatePort,
    GraphFrozen,
    InputAlreadyConnected,
    PortTypeMismatch,
    UnknownModel,
    UnknownPort,
)


# Value type of pure notifications: ports of this type carry None.
SIGNAL = type(None)


@dataclass(frozen=True)
class InputPort:
    """
    Input declaration.

    handler names the model method invoked as handler(value, ctx);
    it defaults to "on_<name>".
    """

    name: str
    value_type: Any
    handler: str | None = None

    @property
    def handler_name(self) -> str:
        return self.handler if self.handler is not None else f"on_{self.name}"


@dataclass(frozen=True)
class OutputPort:
    """Output declaration: an emission point with a declared value type."""

    name: str
    value_type: Any


@dataclass(frozen=True)
class Connection:
    """Directed edge from an output port to an input port."""

    source_model: str
    source_port: str
    destination_model: str
    destination_port: str

    @property
    def source(self) -> tuple[str, str]:
        return self.source_model, self.source_port

    @property
    def destination(self) -> tuple[str, str]:
        return self.destination_model, self.destination_port

    def __str__(self) -> str:
        return (
            f"{self.source_model}::{self.source_port} -> "
            f"{self.destination_model}::{self.destination_port}"
        )


class ConnectionGraph:
    """
    Port tables of every model plus the connections between them.

    Each mutating call either succeeds completely or leaves the graph
    untouched.
    """

    def __init__(self):
        self._inputs: dict[str, dict[str, InputPort]] = {}
        self._outputs: dict[str, dict[str, OutputPort]] = {}
        self._connections: list[Connection] = []
        self._routes: dict[tuple[str, str], list[Connection]] = {}
        self._producers: dict[tuple[str, str], Connection] = {}
        self._frozen = False

    # ───────────────────────────────────────────────────────────────
    # Build phase
    # ───────────────────────────────────────────────────────────────

    def add_node(
        self,
        model_id: str,
        inputs: Iterable[InputPort],
        outputs: Iterable[OutputPort],
    ) -> None:
        """Register a model's port declarations."""
        if self._frozen:
            raise GraphFrozen("add a model")
        if model_id in self._inputs:
            raise DuplicateModel(model_id)

        input_table = _port_table(model_id, inputs)
        output_table = _port_table(model_id, outputs)

        self._inputs[model_id] = input_table
        self._outputs[model_id] = output_table

    def connect(
        self,
        source_model: str,
        output_port: str,
        destination_model: str,
        input_port: str,
    ) -> Connection:
        """
        Add a connection.

        Raises:
            GraphFrozen: the simulation already started
            UnknownModel: either model id is absent
            UnknownPort: a port does not exist on its model
            PortTypeMismatch: declared types differ
            InputAlreadyConnected: the input already has a producer
        """
        if self._frozen:
            raise GraphFrozen("connect ports")

        out = self.output_port(source_model, output_port)
        inp = self.input_port(destination_model, input_port)

        if out.value_type != inp.value_type:
            raise PortTypeMismatch(
                (source_model, output_port),
                (destination_model, input_port),
                out.value_type,
                inp.value_type,
            )

        existing = self._producers.get((destination_model, input_port))
        if existing is not None:
            raise InputAlreadyConnected((destination_model, input_port), existing.source)

        connection = Connection(source_model, output_port, destination_model, input_port)
        self._connections.append(connection)
        self._routes.setdefault(connection.source, []).append(connection)
        self._producers[connection.destination] = connection
        return connection

    def freeze(self) -> None:
        """Make the graph read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ───────────────────────────────────────────────────────────────
    # Lookup
    # ───────────────────────────────────────────────────────────────

    def input_port(self, model_id: str, name: str) -> InputPort:
        ports = self._inputs.get(model_id)
        if ports is None:
            raise UnknownModel(model_id)
        try:
            return ports[name]
        except KeyError:
            raise UnknownPort(model_id, name, "input") from None

    def output_port(self, model_id: str, name: str) -> OutputPort:
        ports = self._outputs.get(model_id)
        if ports is None:
            raise UnknownModel(model_id)
        try:
            return ports[name]
        except KeyError:
            raise UnknownPort(model_id, name, "output") from None

    def destinations(self, model_id: str, output_port: str) -> list[Connection]:
        """Connections leaving an output port, in declaration order."""
        return list(self._routes.get((model_id, output_port), ()))

    def producer(self, model_id: str, input_port: str) -> Connection | None:
        """The connection feeding an input port, if any."""
        return self._producers.get((model_id, input_port))

    def inputs_of(self, model_id: str) -> list[InputPort]:
        return list(self._inputs.get(model_id, {}).values())

    def outputs_of(self, model_id: str) -> list[OutputPort]:
        return list(self._outputs.get(model_id, {}).values())

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._inputs

    def __iter__(self) -> Iterator[Connection]:
        return iter(self._connections)

    def __len__(self) -> int:
        return len(self._connections)


def _port_table(model_id: str, ports: Iterable[Any]) -> dict[str, Any]:
    table: dict[str, Any] = {}
    for port in ports:
        if port.name in table:
            raise DuplicatePort(model_id, port.name)
        table[port.name] = port
    return table
