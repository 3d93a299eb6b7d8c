"""
Centralized configuration for every window size, band and display label.

Every tunable constant lives here. The stability constants are product
smoothing choices, not statistically derived values.
"""

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Stability heatmap / trend arrow
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StabilityParams:
    """Window sizes and thresholds for the heatmap and trend arrow."""

    # Heatmap: `heatmap_points` trailing averages of `window_days` each
    window_days: int = 7
    heatmap_points: int = 15

    # Trend: mean of the last N days vs mean of the M days before them
    trend_recent_days: int = 3
    trend_previous_days: int = 4

    # |recent - previous| below this is reported as Flat
    flat_band: int = 6

    # Drop the reference day from the trend when it is today
    exclude_incomplete_today: bool = True

    def __post_init__(self):
        if self.window_days < 1 or self.heatmap_points < 1:
            raise ValueError("window_days and heatmap_points must be positive")
        if self.trend_recent_days < 1 or self.trend_previous_days < 1:
            raise ValueError("trend windows must be positive")
        # The trend must fit inside the history even with the last day dropped
        if self.trend_recent_days + self.trend_previous_days > self.history_days - 1:
            raise ValueError(
                f"Trend windows ({self.trend_recent_days}+{self.trend_previous_days}) "
                f"do not fit in {self.history_days} days of history"
            )

    @property
    def history_days(self) -> int:
        """Days of history needed to produce every heatmap point (21 by default)."""
        return self.window_days + self.heatmap_points - 1


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DisplayParams:
    """Labels used to format and parse durations and booleans."""

    hours_label: str = "h"
    minutes_label: str = "m"
    checkmark: str = "✓"


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YatraConfig:
    """Complete engine configuration. Pass to pipeline to override defaults."""

    stability: StabilityParams = field(default_factory=StabilityParams)
    display: DisplayParams = field(default_factory=DisplayParams)


# ---------------------------------------------------------------------------
# Runtime settings (CLI only)
# ---------------------------------------------------------------------------

LOG_FORMAT_ENV = "YATRA_LOG_FORMAT"
LOG_LEVEL_ENV = "YATRA_LOG_LEVEL"
