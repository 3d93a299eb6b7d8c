"""
Signal extraction: stability heatmap and trend arrow over daily totals.

Inputs are chronologically ordered, density-complete daily_total series
(one slot per calendar day, zeros for missing days). Ordering and
completeness are the caller's responsibility; a wrong series gives a
misleading trend, not an error. Only the length is checked here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from yatra.config import StabilityParams, YatraConfig
from yatra.errors import InsufficientHistoryError


class TrendArrow(str, Enum):
    UP = "Up"
    DOWN = "Down"
    FLAT = "Flat"

    @property
    def symbol(self) -> str:
        return {"Up": "↗", "Down": "↘", "Flat": "→"}[self.value]


@dataclass(frozen=True)
class StabilityMetrics:
    stability_heatmap: List[int]
    trend_arrow: Optional[TrendArrow]

    def to_dict(self) -> dict:
        return {
            "stability_heatmap": list(self.stability_heatmap),
            "trend_arrow": self.trend_arrow.value if self.trend_arrow else None,
        }


def _trunc_mean(values: Sequence[int]) -> int:
    """Integer mean truncated toward zero."""
    total = int(sum(values))
    q = abs(total) // len(values)
    return q if total >= 0 else -q


def _history(series: Sequence[int], p: StabilityParams) -> np.ndarray:
    """The trailing `history_days` entries, or a typed error if too short."""
    if len(series) < p.history_days:
        raise InsufficientHistoryError(p.history_days, len(series))
    return np.asarray(series, dtype=np.int64)[-p.history_days:]


# ---------------------------------------------------------------------------
# Heatmap
# ---------------------------------------------------------------------------

def heatmap_7d_averages(series: Sequence[int], p: StabilityParams) -> List[int]:
    """
    Trailing `window_days` averages for the last `heatmap_points` days.

    With the defaults this is 15 points, each the truncated mean of the 7
    days ending on that day, oldest first.
    """
    history = _history(series, p)
    sums = (
        pd.Series(history)
        .rolling(p.window_days, min_periods=p.window_days)
        .sum()
        .iloc[p.window_days - 1:]
    )
    return [int(v) for v in np.trunc(sums.to_numpy() / p.window_days)]


# ---------------------------------------------------------------------------
# Trend arrow
# ---------------------------------------------------------------------------

def trend_arrow(
    series: Sequence[int],
    exclude_last_day: bool,
    p: StabilityParams,
) -> Optional[TrendArrow]:
    """
    Compare the mean of the most recent days against the days before them.

    Returns None when both means are zero (no activity to classify).
    """
    history = _history(series, p)
    end = len(history) - 1 if exclude_last_day else len(history)
    split = end - p.trend_recent_days
    start = split - p.trend_previous_days

    recent = _trunc_mean(history[split:end])
    previous = _trunc_mean(history[start:split])

    if recent == 0 and previous == 0:
        return None
    if abs(recent - previous) < p.flat_band:
        return TrendArrow.FLAT
    if recent > previous:
        return TrendArrow.UP
    return TrendArrow.DOWN


def compute_stability_metrics(
    daily_totals: Sequence[int],
    is_today: bool,
    cfg: YatraConfig,
) -> StabilityMetrics:
    """Heatmap and trend arrow for one participant's daily totals."""
    p = cfg.stability
    return StabilityMetrics(
        stability_heatmap=heatmap_7d_averages(daily_totals, p),
        trend_arrow=trend_arrow(daily_totals, is_today and p.exclude_incomplete_today, p),
    )
