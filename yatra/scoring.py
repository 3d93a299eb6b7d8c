"""
Daily scoring: per-practice rule results rolled up into one score per
participant per calendar day.

The day grid is density-complete: every participant gets one row per day in
the requested range, with missing diary entries scored as absent values.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from yatra.entries import DecodedEntries, decode_entries
from yatra.models import DiaryRow, YatraPractice
from yatra.rules import RuleResult, evaluate_rules


SCORE_COLUMNS = (
    "mandatory_score",
    "mandatory_total",
    "bonus_score",
)


# ---------------------------------------------------------------------------
# Single day
# ---------------------------------------------------------------------------

def daily_total(mandatory_score: int, mandatory_total: int, bonus_score: int) -> int:
    """
    Percentage score for one day.

    A day with any failed mandatory practice is capped at the raw mandatory
    count; otherwise bonus points are added on top.
    """
    if mandatory_total > 0 and mandatory_score < mandatory_total:
        score = mandatory_score
    else:
        score = mandatory_score + bonus_score
    return score * 100 // max(mandatory_total, 1)


@dataclass(frozen=True)
class DailyScore:
    participant_id: str
    day: date
    mandatory_score: int
    mandatory_total: int
    bonus_score: int

    def daily_total(self) -> int:
        return daily_total(self.mandatory_score, self.mandatory_total, self.bonus_score)

    def to_dict(self) -> dict:
        return {
            "mandatory_score": self.mandatory_score,
            "mandatory_total": self.mandatory_total,
            "bonus_score": self.bonus_score,
            "daily_total": self.daily_total(),
        }


def aggregate_day(results: Iterable[RuleResult]) -> Tuple[int, int, int]:
    """Return (mandatory_score, mandatory_total, bonus_score) for one day."""
    mandatory_score = mandatory_total = bonus_score = 0
    for r in results:
        if r.mandatory_pass is not None:
            mandatory_total += 1
            if r.mandatory_pass:
                mandatory_score += 1
        bonus_score += r.bonus_points
    return mandatory_score, mandatory_total, bonus_score


# ---------------------------------------------------------------------------
# Day grid
# ---------------------------------------------------------------------------

def practice_results_frame(
    entries: DecodedEntries,
    practices: Sequence[YatraPractice],
    participants: Sequence[str],
    start: date,
    end: date,
) -> pd.DataFrame:
    """One row per (participant, day, practice) with its RuleResult columns."""
    days = pd.date_range(start, end, freq="D").date

    records = []
    for participant_id in participants:
        for day in days:
            for practice in practices:
                value = entries.get(participant_id, day, practice.id)
                result = evaluate_rules(value, practice.daily_score)
                records.append((
                    participant_id,
                    day,
                    practice.id,
                    result.mandatory_pass,
                    result.bonus_points,
                ))

    return pd.DataFrame(
        records,
        columns=["participant_id", "day", "practice_id", "mandatory_pass", "bonus_points"],
    )


def compute_daily_totals(df: pd.DataFrame) -> pd.Series:
    """Vectorised daily_total() over a frame holding SCORE_COLUMNS."""
    score = df["mandatory_score"]
    total = df["mandatory_total"]
    failed = (total > 0) & (score < total)
    capped = np.where(failed, score, score + df["bonus_score"])
    return pd.Series(
        (capped * 100) // np.maximum(total, 1),
        index=df.index,
        dtype="int64",
    )


def daily_scores_frame(
    entries: DecodedEntries,
    practices: Sequence[YatraPractice],
    participants: Sequence[str],
    start: date,
    end: date,
) -> pd.DataFrame:
    """
    Aggregate practice results per participant and day.

    Columns: participant_id, day, mandatory_score, mandatory_total,
    bonus_score, daily_total. Sorted by participant then day.
    """
    per = practice_results_frame(entries, practices, participants, start, end)

    per["passed"] = per["mandatory_pass"].eq(True).astype("int64")
    per["has_mandatory"] = per["mandatory_pass"].notna().astype("int64")
    per["bonus_points"] = per["bonus_points"].astype("int64")

    df = (
        per.groupby(["participant_id", "day"], sort=True)
        .agg(
            mandatory_score=("passed", "sum"),
            mandatory_total=("has_mandatory", "sum"),
            bonus_score=("bonus_points", "sum"),
        )
        .reset_index()
    )
    df["daily_total"] = compute_daily_totals(df)
    return df


def compute_daily_scores(
    rows: Iterable[DiaryRow],
    practices: Sequence[YatraPractice],
    start: date,
    end: date,
    participants: Optional[Sequence[str]] = None,
) -> List[DailyScore]:
    """
    Daily scores for every participant and every day in [start, end].

    Participants default to everyone who has at least one row.
    """
    if end < start:
        raise ValueError(f"end ({end}) is before start ({start})")

    entries = decode_entries(rows, practices)
    if participants is None:
        participants = sorted(entries.names)

    df = daily_scores_frame(entries, practices, participants, start, end)
    return [
        DailyScore(
            participant_id=r.participant_id,
            day=r.day,
            mandatory_score=int(r.mandatory_score),
            mandatory_total=int(r.mandatory_total),
            bonus_score=int(r.bonus_score),
        )
        for r in df.itertuples(index=False)
    ]


def participant_totals(df: pd.DataFrame, participant_id: str) -> List[int]:
    """Chronological daily_total series for one participant."""
    rows = df[df["participant_id"] == participant_id].sort_values("day")
    return [int(v) for v in rows["daily_total"]]
