"""
Emission trace analysis.

Works on the Emission records a Simulation keeps in `sim.emissions`
(or collects through an observer). Calendar times are converted to
seconds elapsed since the earliest emission considered.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

if TYPE_CHECKING:
    from devsim.core.simulation import Emission


@dataclass
class TraceSummary:
    """Aggregate statistics of an emission trace."""

    n_emissions: int
    n_boundary: int              # Emissions on unconnected outputs
    first_time: float | None
    last_time: float | None
    mean_interval: float | None  # Mean gap between successive emissions
    counts: dict[tuple[str, str], int]  # (model_id, port) -> emissions


def select(
    emissions: Iterable["Emission"],
    model_id: str | None = None,
    port: str | None = None,
) -> list["Emission"]:
    """Filter emissions by model id and/or port name."""
    return [
        e for e in emissions
        if (model_id is None or e.model_id == model_id)
        and (port is None or e.port == port)
    ]


def times_as_seconds(times: Sequence) -> np.ndarray:
    """
    Convert simulation times to a float array.

    datetime values become seconds since the earliest one.
    """
    if len(times) == 0:
        return np.empty(0, dtype=np.float64)
    if isinstance(times[0], datetime):
        origin = min(times)
        return np.array([(t - origin).total_seconds() for t in times], dtype=np.float64)
    return np.asarray(times, dtype=np.float64)


def emission_times(
    emissions: Iterable["Emission"],
    model_id: str | None = None,
    port: str | None = None,
) -> np.ndarray:
    """Times of the selected emissions, in trace order."""
    return times_as_seconds([e.time for e in select(emissions, model_id, port)])


def inter_event_intervals(times: np.ndarray) -> np.ndarray:
    """Gaps between successive (sorted) event times."""
    times = np.sort(np.asarray(times, dtype=np.float64))
    return np.diff(times)


def emission_counts(emissions: Iterable["Emission"]) -> dict[tuple[str, str], int]:
    """Number of emissions per (model_id, port)."""
    return dict(Counter((e.model_id, e.port) for e in emissions))


def summarize_trace(emissions: Sequence["Emission"]) -> TraceSummary:
    """
    Summarize a trace.

    Args:
        emissions: Emission records, e.g. sim.emissions

    Returns:
        TraceSummary; time fields are None for an empty trace
    """
    times = times_as_seconds([e.time for e in emissions])
    intervals = inter_event_intervals(times)

    return TraceSummary(
        n_emissions=len(emissions),
        n_boundary=sum(1 for e in emissions if e.is_boundary),
        first_time=float(times.min()) if times.size else None,
        last_time=float(times.max()) if times.size else None,
        mean_interval=float(intervals.mean()) if intervals.size else None,
        counts=emission_counts(emissions),
    )
