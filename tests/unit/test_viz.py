"""Smoke tests for the plotting helpers."""

import matplotlib.pyplot as plt
import numpy as np

from devsim.core import SIGNAL, Simulation, SimulationConfig
from devsim.models import Generator, Recorder, periodic_timer
from devsim.viz import (
    plot_emission_timeline,
    plot_event_counts,
    plot_interval_histogram,
    save_figure,
)


def small_run():
    sim = Simulation(SimulationConfig(cascade_limit=100, seed=5))
    sim.add_model("clock", periodic_timer(1.0, end=5.0))
    sim.add_model("gen", Generator(lambda rng: rng.random()))
    sim.add_model("sink", Recorder(float))
    sim.add_model("stray", periodic_timer(2.5))
    sim.connect("clock", "signal", "gen", "trigger")
    sim.connect("gen", "output", "sink", "input")
    sim.run(until=6.0)
    return sim


class TestTimeline:
    """Tests for timeline plots."""

    def test_emission_timeline(self):
        sim = small_run()
        fig, ax = plot_emission_timeline(sim.emissions)

        labels = [t.get_text() for t in ax.get_yticklabels()]
        assert labels == ["clock::signal", "stray::signal", "gen::output"]
        plt.close(fig)

    def test_empty_timeline(self):
        fig, ax = plot_emission_timeline([])
        assert ax.get_title() == "Emission Timeline"
        plt.close(fig)

    def test_event_counts(self):
        fig = plot_event_counts(small_run().emissions)
        assert len(fig.axes[0].patches) == 3
        plt.close(fig)

    def test_interval_histogram(self):
        times = np.cumsum(np.random.default_rng(1).exponential(1.0, size=200))
        fig, ax = plot_interval_histogram(times)
        assert ax.get_legend() is not None
        plt.close(fig)

    def test_save_figure(self, tmp_path):
        fig, _ = plot_emission_timeline(small_run().emissions)
        path = tmp_path / "nested" / "timeline.png"
        save_figure(fig, path)
        assert path.exists()
        plt.close(fig)


def test_signal_type_is_plottable():
    sim = Simulation(SimulationConfig(cascade_limit=10, enable_rng=False))
    sim.add_model("t", periodic_timer(1.0, end=2.0))
    sim.add_model("rec", Recorder(SIGNAL))
    sim.connect("t", "signal", "rec", "input")
    sim.run()
    fig, _ = plot_emission_timeline(sim.emissions)
    plt.close(fig)
