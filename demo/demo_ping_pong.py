#!/usr/bin/env python3
"""
Demo: Ping-Pong and the Cascade Bound

Two models bounce a counter back and forth:

1. With a delay between hits, the rally advances the clock normally
2. With zero delay, every hit lands in the same instant
3. The kernel stops the runaway instant at the configured cascade bound
4. The simulation stays inspectable after the failure

Output: output/demo_ping_pong/rally.png
"""

import matplotlib.pyplot as plt

from devsim.core import (
    After,
    At,
    CascadeLimitExceeded,
    InputPort,
    Model,
    OutputPort,
    Simulation,
    SimulationConfig,
)
from devsim.viz import plot_emission_timeline, save_figure


class Player(Model):
    """Returns the ball after `delay`, incrementing the hit counter."""

    inputs = (InputPort("ball", int),)
    outputs = (OutputPort("hit", int),)

    def __init__(self, delay: float, serve: bool = False):
        self.delay = delay
        self.serve = serve
        self.holding = 0
        self.hits = 0

    def initialize(self, ctx):
        if self.serve:
            ctx.schedule_update(At(0.0))

    def on_ball(self, count, ctx):
        self.holding = count
        ctx.schedule_update(After(self.delay))

    def handle_update(self, ctx):
        self.hits += 1
        ctx.emit("hit", self.holding + 1)


class Wall(Model):
    """Returns the ball immediately."""

    inputs = (InputPort("ball", int),)
    outputs = (OutputPort("hit", int),)

    def on_ball(self, count, ctx):
        ctx.emit("hit", count + 1)


def build(left, right, cascade_limit):
    sim = Simulation(SimulationConfig(cascade_limit=cascade_limit, enable_rng=False))
    sim.add_model("left", left)
    sim.add_model("right", right)
    sim.connect("left", "hit", "right", "ball")
    sim.connect("right", "hit", "left", "ball")
    return sim


def main():
    print("=" * 60)
    print("  PING-PONG DEMONSTRATION")
    print("=" * 60)

    print("\n1. Timed rally (0.5 between hits)...")
    timed = build(Player(0.5, serve=True), Player(0.5), cascade_limit=100)
    outcome = timed.run(until=10.0)
    print(f"   {outcome.steps} instants, last at t={outcome.time}")
    print(f"   Hits: left={timed.model('left').hits}, right={timed.model('right').hits}")

    print("\n2. Zero-delay rally against a wall...")
    limit = 1000
    runaway = build(Player(0.0, serve=True), Wall(), cascade_limit=limit)
    try:
        runaway.run()
    except CascadeLimitExceeded as exc:
        print(f"   Stopped: {exc}")
    print(f"   Clock still at t={runaway.time}, state={runaway.state.name}")
    print(f"   Recorded {len(runaway.emissions)} emissions before the bound hit")

    print("\n3. Creating visualization...")
    fig, _ = plot_emission_timeline(timed.emissions, title="Timed Rally")
    save_figure(fig, "output/demo_ping_pong/rally.png")
    plt.close(fig)
    print("\n   Saved: output/demo_ping_pong/rally.png")

    print("\n" + "=" * 60)
    print("  Ping-pong demonstration complete!")
    print("=" * 60)
    print("\nInterpretation:")
    print("  • Delayed replies advance logical time")
    print(f"  • Zero-delay replies never leave the instant; the bound ({limit}) catches them")


if __name__ == "__main__":
    main()
