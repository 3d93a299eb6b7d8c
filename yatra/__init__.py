"""
YATRA — Scoring & Analytics Engine for group habit tracking

Turns per-practice daily diary entries into comparable values, daily
scores, a 7-day stability heatmap, a trend arrow, ad-hoc statistics and
colour zones.

Architecture:
    config      — Window sizes, bands and display labels (single source of truth)
    values      — Value union, parsing, formatting, comparison scale
    models      — Pydantic models for persisted configuration and diary rows
    entries     — Decoding of fetched rows into typed values
    rules       — Mandatory threshold + gated bonus rule evaluation
    scoring     — Per-day aggregation into daily scores
    signals     — Stability heatmap and trend arrow
    stats       — Windowed ad-hoc statistics
    zones       — Colour zone classification
    pipeline    — Orchestration: load → decode → score → signal → statistics → report

Public API:
    analyze(filepath)       → CLI mode
    analyze_data(data)      → UI / backend mode
    generate_report(result) → formatted report
"""

from yatra.pipeline import analyze, analyze_data, generate_report
from yatra.rules import evaluate_rules
from yatra.scoring import compute_daily_scores
from yatra.signals import compute_stability_metrics
from yatra.stats import compute_statistic
from yatra.zones import classify_colour

__version__ = "0.1.0"

__all__ = [
    "analyze",
    "analyze_data",
    "generate_report",
    "evaluate_rules",
    "compute_daily_scores",
    "compute_stability_metrics",
    "compute_statistic",
    "classify_colour",
]
