"""
Pipeline orchestration: load → decode → score → signal → statistics → report.

This is the only module with I/O (file loading, report formatting).
All analytical logic is delegated to values, rules, scoring, signals,
stats and zones.
"""

import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from yatra.config import YatraConfig
from yatra.entries import DecodedEntries, decode_entries
from yatra.models import YatraSnapshot
from yatra.rules import evaluate_rules
from yatra.scoring import DailyScore, daily_scores_frame, participant_totals
from yatra.signals import TrendArrow, compute_stability_metrics
from yatra.stats import compute_statistics
from yatra.values import format_value, value_to_json
from yatra.zones import classify_colour

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

def load_data(filepath: Union[str, Path]) -> YatraSnapshot:
    """Load and validate a yatra snapshot from a JSON file."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not data:
        raise ValueError("Data file is empty")

    return _validate(data)


def _validate(data: dict) -> YatraSnapshot:
    try:
        return YatraSnapshot.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid yatra snapshot: {e}") from e


# ---------------------------------------------------------------------------
# Core analysis (PURE FUNCTION — NO FILE I/O)
# ---------------------------------------------------------------------------

def _participants(snapshot: YatraSnapshot, entries: DecodedEntries) -> List[tuple]:
    """(id, name) for members plus anyone with entries, ordered by name then id."""
    people: Dict[str, str] = {p.id: p.name for p in snapshot.participants}
    for participant_id, name in entries.names.items():
        people.setdefault(participant_id, name)
    return sorted(people.items(), key=lambda item: (item[1], item[0]))


def _row_cells(snapshot: YatraSnapshot, entries: DecodedEntries, participant_id: str, cfg: YatraConfig) -> List[Dict]:
    cells = []
    for practice in snapshot.practices:
        value = entries.get(participant_id, snapshot.cob_date, practice.id)
        result = evaluate_rules(value, practice.daily_score)
        colour = (
            classify_colour(value, practice.colour_zones).value
            if practice.colour_zones is not None
            else None
        )
        cells.append({
            "practice_id": practice.id,
            "value": value_to_json(value) if value is not None else None,
            "display": format_value(value, cfg.display) if value is not None else "",
            "colour": colour,
            "mandatory_pass": result.mandatory_pass,
            "bonus_points": result.bonus_points,
        })
    return cells


def _analyze_snapshot(snapshot: YatraSnapshot, cfg: YatraConfig, today: date) -> Dict:
    """
    Core analysis operating purely on a validated snapshot.

    Stateless.
    No file reads.
    Safe for backend / API usage.
    """
    cob = snapshot.cob_date

    # Stage 1: Decode
    entries = decode_entries(snapshot.entries, snapshot.practices)
    people = _participants(snapshot, entries)

    # Stage 2: Score the zero-padded history ending at cob
    history_start = cob - timedelta(days=cfg.stability.history_days - 1)
    scores = daily_scores_frame(
        entries,
        snapshot.practices,
        [participant_id for participant_id, _ in people],
        history_start,
        cob,
    )

    # Stage 3: Rows + signals
    is_today = cob == today
    data = []
    for participant_id, name in people:
        totals = participant_totals(scores, participant_id)
        today_row = scores[(scores["participant_id"] == participant_id) & (scores["day"] == cob)].iloc[0]
        day_score = DailyScore(
            participant_id=participant_id,
            day=cob,
            mandatory_score=int(today_row["mandatory_score"]),
            mandatory_total=int(today_row["mandatory_total"]),
            bonus_score=int(today_row["bonus_score"]),
        )

        row = {
            "participant_id": participant_id,
            "participant_name": name,
            "row": _row_cells(snapshot, entries, participant_id, cfg),
            "daily_score": day_score.to_dict(),
        }
        if snapshot.show_stability_metrics:
            row.update(compute_stability_metrics(totals, is_today, cfg).to_dict())
        data.append(row)

    # Stage 4: Statistics
    statistics = []
    if snapshot.statistics is not None:
        for s in compute_statistics(snapshot.statistics, snapshot.practices, snapshot.entries, cob):
            stat = s.to_dict()
            stat["display"] = format_value(s.value, cfg.display) if s.value is not None else None
            statistics.append(stat)

    logger.info(
        "Analyzed %d participants x %d practices for %s (%d parse errors)",
        len(people), len(snapshot.practices), cob, len(entries.errors),
    )

    return {
        "cob_date": cob.isoformat(),
        "practices": [p.practice for p in snapshot.practices],
        "data": data,
        "statistics": statistics,
        "parse_errors": [e.to_dict() for e in entries.errors],
    }


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def analyze(
    filepath: Union[str, Path],
    cfg: Optional[YatraConfig] = None,
    today: Optional[date] = None,
) -> Dict:
    """
    CLI-compatible entry point.
    Reads a JSON snapshot file and runs analysis.
    """
    if cfg is None:
        cfg = YatraConfig()

    snapshot = load_data(filepath)
    return _analyze_snapshot(snapshot, cfg, today or date.today())


def analyze_data(
    data: dict,
    cfg: Optional[YatraConfig] = None,
    today: Optional[date] = None,
) -> Dict:
    """
    Backend / UI integration entry point.

    Accepts the snapshot dict directly.
    No file system usage.
    """
    if cfg is None:
        cfg = YatraConfig()

    if not data:
        raise ValueError("Input data cannot be empty")

    return _analyze_snapshot(_validate(data), cfg, today or date.today())


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def _heatmap_cells(heatmap: List[int]) -> str:
    return " ".join(f"{v:3d}" for v in heatmap)


def generate_report(result: Dict) -> str:
    """Format the analysis result as a human-readable text report."""
    lines = [
        "YATRA DAILY REPORT",
        "=" * 58,
        "",
        f"  Date                : {result['cob_date']}",
        f"  Practices           : {', '.join(result['practices'])}",
        "",
        "  Participants:",
    ]

    for row in result["data"]:
        score = row["daily_score"]
        arrow = row.get("trend_arrow")
        trend = TrendArrow(arrow).symbol if arrow else "-"
        lines.append(
            f"    {row['participant_name'][:20]:20s} : {score['daily_total']:4d}%"
            f"  (mandatory {score['mandatory_score']}/{score['mandatory_total']},"
            f" bonus {score['bonus_score']})  trend {trend}"
        )
        values = [c["display"] or "-" for c in row["row"]]
        lines.append(f"      values            : {' | '.join(values)}")
        if "stability_heatmap" in row:
            lines.append(f"      stability (7d avg): {_heatmap_cells(row['stability_heatmap'])}")

    if result["statistics"]:
        lines.append("")
        lines.append("  Statistics:")
        for stat in result["statistics"]:
            lines.append(f"    - {stat['label']}: {stat['display'] or 'n/a'}")

    if result["parse_errors"]:
        lines.append("")
        lines.append(f"  ⚠  {len(result['parse_errors'])} entries could not be read and were ignored")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
