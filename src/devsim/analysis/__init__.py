"""
Analysis layer: post-run statistics over emission traces.

IMPORTANT: This is NOT seen by the engine. It only reads recorded results.

- summarize_trace: counts, time span and mean gap of a trace
- analyze_arrivals: exponential fit and KS test of an event stream
"""

from devsim.analysis.trace import (
    TraceSummary,
    select,
    times_as_seconds,
    emission_times,
    inter_event_intervals,
    emission_counts,
    summarize_trace,
)
from devsim.analysis.arrivals import ArrivalStats, analyze_arrivals

__all__ = [
    "TraceSummary",
    "select",
    "times_as_seconds",
    "emission_times",
    "inter_event_intervals",
    "emission_counts",
    "summarize_trace",
    "ArrivalStats",
    "analyze_arrivals",
]
