"""
Arrival process statistics.

Checks whether a stream of event times looks like a Poisson process:
- rate: maximum-likelihood estimate 1 / mean inter-arrival time
- cv: coefficient of variation of the gaps (1 for exponential gaps)
- Kolmogorov-Smirnov test of the gaps against the fitted exponential
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np
from scipy import stats

from devsim.analysis.trace import inter_event_intervals


@dataclass
class ArrivalStats:
    """Inter-arrival statistics of one event stream."""

    n_arrivals: int
    mean_interval: float
    rate: float
    cv: float
    ks_statistic: float
    ks_pvalue: float

    def is_poisson(self, alpha: float = 0.05) -> bool:
        """True if the KS test does not reject exponential gaps at level alpha."""
        return self.ks_pvalue >= alpha


def analyze_arrivals(times: np.ndarray) -> ArrivalStats:
    """
    Fit an exponential inter-arrival model to event times.

    Args:
        times: Event times (any order)

    Returns:
        ArrivalStats

    Raises:
        ValueError: fewer than 3 events, or all events at the same time
    """
    times = np.asarray(times, dtype=np.float64)
    if times.size < 3:
        raise ValueError(f"Need at least 3 arrivals, got {times.size}")

    gaps = inter_event_intervals(times)
    mean_gap = float(gaps.mean())
    if mean_gap <= 0:
        raise ValueError("All arrivals share one timestamp; rate is undefined")

    ks = stats.kstest(gaps, "expon", args=(0.0, mean_gap))

    return ArrivalStats(
        n_arrivals=int(times.size),
        mean_interval=mean_gap,
        rate=1.0 / mean_gap,
        cv=float(gaps.std(ddof=1) / mean_gap),
        ks_statistic=float(ks.statistic),
        ks_pvalue=float(ks.pvalue),
    )
