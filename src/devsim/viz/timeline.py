"""
Timeline plots of emission traces.

- plot_emission_timeline: one row per (model, port), a tick per emission
- plot_event_counts: bar chart of emissions per (model, port)
- plot_interval_histogram: inter-event gaps against a fitted exponential
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from devsim.analysis.trace import emission_counts, inter_event_intervals, times_as_seconds

if TYPE_CHECKING:
    from devsim.core.simulation import Emission


BOUNDARY_COLOR = "tab:red"    # unconnected outputs
INTERNAL_COLOR = "tab:blue"   # routed outputs


def _channels(emissions: Sequence["Emission"]) -> list[tuple[str, str]]:
    """(model_id, port) pairs in order of first appearance."""
    seen: dict[tuple[str, str], None] = {}
    for e in emissions:
        seen.setdefault((e.model_id, e.port), None)
    return list(seen)


def plot_emission_timeline(
    emissions: Sequence["Emission"],
    title: str = "Emission Timeline",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (10, 4),
    marker_size: float = 60.0,
) -> tuple[Figure, Axes]:
    """
    Plot every emission as a marker on its (model, port) row.

    Boundary outputs (no connection) are drawn in red, routed ones in blue.

    Args:
        emissions: Emission records, e.g. sim.emissions
        title: Plot title
        ax: Existing axes (creates new if None)
        figsize: Figure size if creating new figure
        marker_size: Scatter marker size

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    channels = _channels(emissions)
    rows = {channel: i for i, channel in enumerate(channels)}
    times = times_as_seconds([e.time for e in emissions])

    if len(emissions) > 0:
        ys = np.array([rows[(e.model_id, e.port)] for e in emissions])
        colors = [BOUNDARY_COLOR if e.is_boundary else INTERNAL_COLOR for e in emissions]
        ax.scatter(times, ys, c=colors, s=marker_size, marker="|", linewidths=2, zorder=3)

    ax.set_yticks(range(len(channels)))
    ax.set_yticklabels([f"{model}::{port}" for model, port in channels])
    ax.set_xlabel("Simulation time")
    ax.set_title(title)
    ax.grid(True, axis="x", alpha=0.3)

    return fig, ax


def plot_event_counts(
    emissions: Sequence["Emission"],
    title: str = "Emissions per Output",
    figsize: tuple[float, float] = (8, 4),
) -> Figure:
    """Bar chart of emission counts per (model, port)."""
    counts = emission_counts(emissions)
    labels = [f"{model}::{port}" for model, port in counts]

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(range(len(counts)), list(counts.values()), color=INTERNAL_COLOR)
    ax.set_xticks(range(len(counts)))
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("Emissions")
    ax.set_title(title)

    fig.tight_layout()
    return fig


def plot_interval_histogram(
    times: np.ndarray,
    title: str = "Inter-event Intervals",
    bins: int = 30,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 5),
) -> tuple[Figure, Axes]:
    """
    Histogram of gaps between events with the fitted exponential density.

    Args:
        times: Event times
        title: Plot title
        bins: Histogram bins
        ax: Existing axes (creates new if None)

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    gaps = inter_event_intervals(times)
    if gaps.size > 0:
        ax.hist(gaps, bins=bins, density=True, alpha=0.6, color=INTERNAL_COLOR, label="Observed")
        mean_gap = gaps.mean()
        if mean_gap > 0:
            xs = np.linspace(0.0, gaps.max(), 200)
            ax.plot(xs, np.exp(-xs / mean_gap) / mean_gap, "k--", label="Exponential fit")
        ax.legend()

    ax.set_xlabel("Interval")
    ax.set_ylabel("Density")
    ax.set_title(title)

    return fig, ax


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
