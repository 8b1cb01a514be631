"""End-to-end scenarios built from small models."""

import pytest

from devsim.core import (
    After,
    At,
    InputPort,
    Model,
    OutputPort,
    Simulation,
    SimulationConfig,
    StopReason,
)
from devsim.core.errors import CascadeLimitExceeded, PortTypeMismatch
from devsim.analysis import analyze_arrivals, emission_times
from devsim.models import Generator, Queue, Recorder, periodic_timer


class Ticker(Model):
    """Emits the current time on `tick` every second from t=0."""

    outputs = (OutputPort("tick", float),)

    def initialize(self, ctx):
        ctx.schedule_update(At(0.0))

    def handle_update(self, ctx):
        ctx.emit("tick", float(ctx.time))
        ctx.schedule_update(After(1.0))


class Once(Model):
    outputs = (OutputPort("out", int),)

    def __init__(self, at, value):
        self.at = at
        self.value = value

    def initialize(self, ctx):
        ctx.schedule_update(At(self.at))

    def handle_update(self, ctx):
        ctx.emit("out", self.value)


class Collect(Model):
    inputs = (InputPort("in", int),)

    def __init__(self):
        self.received = []

    def on_in(self, value, ctx):
        self.received.append((ctx.time, value))


class Echo(Model):
    inputs = (InputPort("in", int),)
    outputs = (OutputPort("out", int),)

    def on_in(self, value, ctx):
        ctx.emit("out", value)


class TestScenarios:
    """Small complete simulations."""

    def test_ticker_until_five(self, sim):
        sim.add_model("ticker", Ticker())

        outcome = sim.run(until=5.0)

        assert outcome.reason is StopReason.UNTIL_REACHED
        assert [e.value for e in sim.boundary_outputs] == [0.0, 1.0, 2.0, 3.0, 4.0]
        assert sim.peek_next_time() == 5.0

    def test_single_delivery(self, sim):
        sim.add_model("A", Once(at=2.0, value=3))
        b = sim.add_model("B", Collect())
        sim.connect("A", "out", "B", "in")

        sim.run()
        assert b.received == [(2.0, 3)]

    def test_type_mismatch_leaves_graph_usable(self, sim):
        sim.add_model("ticker", Ticker())
        b = sim.add_model("B", Collect())
        with pytest.raises(PortTypeMismatch):
            sim.connect("ticker", "tick", "B", "in")

        sim.add_model("A", Once(at=1.0, value=4))
        sim.connect("A", "out", "B", "in")
        sim.run(until=2.0)
        assert b.received == [(1.0, 4)]

    def test_zero_delay_loop_hits_cascade_bound(self, sim):
        sim.add_model("ping", Echo())
        sim.add_model("pong", Echo())
        sim.connect("ping", "out", "pong", "in")
        sim.connect("pong", "out", "ping", "in")
        sim.inject("ping", "in", 1, At(0.0))

        with pytest.raises(CascadeLimitExceeded):
            sim.run()
        assert sim.last_error is not None

    def test_poisson_queue(self):
        sim = Simulation(SimulationConfig(cascade_limit=100, seed=11))
        sim.add_model("arrivals", Generator(
            lambda rng: int(rng.integers(1, 100)),
            value_type=int,
            interval=lambda rng: rng.exponential(1.0),
        ))
        queue = sim.add_model("queue", Queue(int))
        sim.add_model("server", periodic_timer(1.25))
        served = sim.add_model("served", Recorder(int))
        sim.connect("arrivals", "output", "queue", "input")
        sim.connect("server", "signal", "queue", "pop")
        sim.connect("queue", "output", "served", "input")

        sim.run(until=500.0)

        arrivals = emission_times(sim.emissions, model_id="arrivals")
        stats = analyze_arrivals(arrivals)
        assert stats.rate == pytest.approx(1.0, rel=0.2)
        assert stats.is_poisson(alpha=0.001)
        assert 0 < len(served) <= len(arrivals)
        assert queue.max_length > 0
