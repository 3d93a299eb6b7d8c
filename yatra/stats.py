"""
Ad-hoc statistics: one aggregation over one practice's entries inside a
date window, re-expressed in the practice's native data type.

The engine does not decide who may see a statistic; `visible_to_all` is
left to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from yatra.entries import decode_entries
from yatra.models import Aggregation, DiaryRow, YatraPractice, YatraStatistics
from yatra.values import DataType, Int, Value, value_from_units, value_to_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatWindow:
    """Inclusive date window."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")


@dataclass(frozen=True)
class StatisticResult:
    label: str
    value: Optional[Value]

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "value": value_to_json(self.value) if self.value is not None else None,
        }


def _windowed(entries: Iterable[Tuple[date, Optional[Value]]], window: StatWindow) -> pd.Series:
    """Non-null values inside the window, as an object Series indexed by day."""
    kept = [(d, v) for d, v in entries if v is not None and window.start <= d <= window.end]
    return pd.Series(
        [v for _, v in kept],
        index=pd.Index([d for d, _ in kept], name="day"),
        dtype=object,
    )


def compute_statistic(
    entries: Iterable[Tuple[date, Optional[Value]]],
    aggregation: Aggregation,
    window: StatWindow,
    data_type: DataType,
) -> Optional[Value]:
    """
    Aggregate (day, value) entries inside `window`.

    Count counts non-null entries of any type and always returns an Int.
    Sum/Avg/Min/Max use comparable values only and return None when there
    are none; Avg uses integer division.
    """
    values = _windowed(entries, window)

    if aggregation is Aggregation.COUNT:
        return Int(int(values.size))

    data_type = DataType(data_type)
    if not data_type.is_comparable:
        logger.debug("%s has no comparison scale for %s", data_type.value, aggregation.value)
        return None

    units = values.map(lambda v: v.as_comparable() if v.data_type is data_type else None).dropna()
    if units.empty:
        return None
    units = units.astype("int64")

    if aggregation is Aggregation.SUM:
        total = int(units.sum())
        if data_type is DataType.TIME:
            # A sum of clock times is not a time of day
            return value_from_units(DataType.DURATION, total)
        return value_from_units(data_type, total)
    if aggregation is Aggregation.AVG:
        return value_from_units(data_type, int(units.sum()) // int(units.size))
    if aggregation is Aggregation.MIN:
        return value_from_units(data_type, int(units.min()))
    return value_from_units(data_type, int(units.max()))


def compute_statistics(
    config: YatraStatistics,
    practices: Sequence[YatraPractice],
    rows: Iterable[DiaryRow],
    cob_date: date,
) -> List[StatisticResult]:
    """Evaluate every configured statistic across all participants' entries."""
    by_id = {p.id: p for p in practices}
    decoded = decode_entries(rows, practices)

    results = []
    for stat in config.statistics:
        practice = by_id.get(stat.practice_id)
        if practice is None:
            logger.warning("Statistic %r refers to unknown practice %s", stat.label, stat.practice_id)
            results.append(StatisticResult(stat.label, None))
            continue

        window = StatWindow(stat.time_range.window_start(cob_date), cob_date)
        logger.debug(
            "Statistic %r: %s of %s from %s to %s",
            stat.label, stat.aggregation.value, practice.practice, window.start, window.end,
        )
        entries = [
            (day, value)
            for (_, day, practice_id), value in decoded.values.items()
            if practice_id == practice.id
        ]
        results.append(StatisticResult(
            stat.label,
            compute_statistic(entries, stat.aggregation, window, practice.data_type),
        ))

    return results
