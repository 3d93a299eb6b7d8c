"""
Configuration and input models — pydantic validation for persisted JSON.

Practice scoring rules, colour zones and statistic selections are stored as
JSON blobs next to each yatra practice. These models validate the blobs (and
the diary rows fed to the engine) before any computation runs. Value fields
accept the persisted tagged form ({"Int": 5}) or an already decoded Value.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from yatra.values import DataType, Value, value_from_json, value_to_json


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, Value):
        return v
    return value_from_json(v)


def _dump_value(v: Optional[Value]) -> Optional[dict]:
    return None if v is None else value_to_json(v)


ValueField = Annotated[
    Value,
    BeforeValidator(_coerce_value),
    PlainSerializer(_dump_value),
]

OptionalValueField = Annotated[
    Optional[Value],
    BeforeValidator(_coerce_value),
    PlainSerializer(_dump_value),
]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BetterDirection(str, Enum):
    HIGHER = "Higher"
    LOWER = "Lower"


class ZoneColour(str, Enum):
    NEUTRAL = "Neutral"
    MUTED_RED = "MutedRed"
    RED = "Red"
    YELLOW = "Yellow"
    GREEN = "Green"
    DARK_GREEN = "DarkGreen"


class Aggregation(str, Enum):
    SUM = "Sum"
    AVG = "Avg"
    MIN = "Min"
    MAX = "Max"
    COUNT = "Count"


class TimeRange(str, Enum):
    LAST_7_DAYS = "Last7Days"
    LAST_30_DAYS = "Last30Days"
    LAST_90_DAYS = "Last90Days"
    LAST_365_DAYS = "Last365Days"
    THIS_WEEK = "ThisWeek"
    THIS_MONTH = "ThisMonth"
    THIS_QUARTER = "ThisQuarter"
    THIS_YEAR = "ThisYear"

    def window_start(self, cob_date: date) -> date:
        """First day (inclusive) of the window ending at cob_date."""
        if self in _LAST_N_DAYS:
            return cob_date - timedelta(days=_LAST_N_DAYS[self])
        if self is TimeRange.THIS_WEEK:
            return cob_date - timedelta(days=cob_date.weekday())
        if self is TimeRange.THIS_MONTH:
            return cob_date.replace(day=1)
        if self is TimeRange.THIS_QUARTER:
            return cob_date.replace(month=(cob_date.month - 1) // 3 * 3 + 1, day=1)
        return cob_date.replace(month=1, day=1)


_LAST_N_DAYS = {
    TimeRange.LAST_7_DAYS: 7,
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_90_DAYS: 90,
    TimeRange.LAST_365_DAYS: 365,
}


# ---------------------------------------------------------------------------
# Daily score rules
# ---------------------------------------------------------------------------

class BonusRule(_Frozen):
    """Extra points when the entry crosses `threshold` in the better direction."""

    threshold: ValueField
    points: int = Field(ge=0, le=255)


class DailyScoreConfig(_Frozen):
    """Per-practice scoring: one optional mandatory threshold plus bonus rules."""

    better_direction: BetterDirection = BetterDirection.HIGHER
    mandatory_threshold: OptionalValueField = None
    bonus_rules: list[BonusRule] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Colour zones
# ---------------------------------------------------------------------------

class Bound(_Frozen):
    """Upper limit (inclusive) of one colour bucket. `to=None` never matches."""

    to: OptionalValueField = None
    colour: ZoneColour


class ColourZonesConfig(_Frozen):
    better_direction: BetterDirection = BetterDirection.HIGHER
    bounds: list[Bound] = Field(default_factory=list)
    no_value_colour: ZoneColour = ZoneColour.NEUTRAL
    best_colour: Optional[ZoneColour] = None


# ---------------------------------------------------------------------------
# Ad-hoc statistics
# ---------------------------------------------------------------------------

class YatraStatistic(_Frozen):
    label: str
    practice_id: str
    aggregation: Aggregation
    time_range: TimeRange


class YatraStatistics(_Frozen):
    visible_to_all: bool = False
    statistics: list[YatraStatistic] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Yatra snapshot: practices, members, diary rows
# ---------------------------------------------------------------------------

class YatraPractice(_Frozen):
    id: str
    practice: str
    data_type: DataType
    daily_score: Optional[DailyScoreConfig] = None
    colour_zones: Optional[ColourZonesConfig] = None

    @field_validator("practice")
    @classmethod
    def practice_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("practice name must not be empty")
        return v


class Participant(_Frozen):
    id: str
    name: str


class DiaryRow(_Frozen):
    """One stored diary entry. `value` is the raw persisted JSON, undecoded."""

    participant_id: str
    participant_name: str
    cob_date: date
    practice_id: str
    value: Any = None


class YatraSnapshot(_Frozen):
    """Everything the pipeline needs for one yatra and one reference date."""

    cob_date: date
    practices: list[YatraPractice]
    participants: list[Participant] = Field(default_factory=list)
    entries: list[DiaryRow] = Field(default_factory=list)
    statistics: Optional[YatraStatistics] = None
    show_stability_metrics: bool = True

    @field_validator("practices")
    @classmethod
    def practices_not_empty(cls, v: list[YatraPractice]) -> list[YatraPractice]:
        if not v:
            raise ValueError("practices must not be empty")
        ids = [p.id for p in v]
        if len(set(ids)) != len(ids):
            raise ValueError("practice ids must be unique")
        return v
