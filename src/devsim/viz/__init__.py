"""
Visualization utilities.

- Emission timelines
- Per-output emission counts
- Inter-event interval histograms
"""

from devsim.viz.timeline import (
    plot_emission_timeline,
    plot_event_counts,
    plot_interval_histogram,
    save_figure,
)

__all__ = [
    "plot_emission_timeline",
    "plot_event_counts",
    "plot_interval_histogram",
    "save_figure",
]
