"""
Rule evaluation: one practice's daily score config against one entry value.

Pure functions, no side effects. Bonus points are gated behind the
mandatory check so they can only be earned on top of compliance.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from yatra.models import BetterDirection, DailyScoreConfig
from yatra.values import Value, comparable_pair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleResult:
    """Outcome for one practice on one day.

    mandatory_pass is None when the practice has no mandatory threshold and
    therefore does not count towards the mandatory total.
    """

    mandatory_pass: Optional[bool]
    bonus_points: int = 0


NOT_SCORED = RuleResult(mandatory_pass=None, bonus_points=0)


def meets_threshold(
    value: Optional[Value],
    threshold: Value,
    direction: BetterDirection,
) -> Optional[bool]:
    """
    True when `value` reaches `threshold` in the better direction.

    Returns None when the two cannot be compared (absent value, Bool/Text,
    or a threshold of a different data type).
    """
    pair = comparable_pair(value, threshold)
    if pair is None:
        return None
    units, limit = pair
    if direction is BetterDirection.HIGHER:
        return units >= limit
    return units <= limit


def _bonus_points(value: Optional[Value], cfg: DailyScoreConfig) -> int:
    if value is None or value.as_comparable() is None:
        return 0

    points = 0
    for rule in cfg.bonus_rules:
        hit = meets_threshold(value, rule.threshold, cfg.better_direction)
        if hit is None:
            logger.debug(
                "Skipping bonus rule: %s threshold for %s value",
                rule.threshold.data_type.value,
                value.data_type.value,
            )
            continue
        if hit:
            points += rule.points
    return points


def evaluate_rules(value: Optional[Value], cfg: Optional[DailyScoreConfig]) -> RuleResult:
    """Evaluate mandatory threshold and gated bonus rules for one entry."""
    if cfg is None:
        return NOT_SCORED

    if cfg.mandatory_threshold is None:
        # No mandatory requirement: bonus is evaluated unconditionally
        return RuleResult(mandatory_pass=None, bonus_points=_bonus_points(value, cfg))

    passed = bool(meets_threshold(value, cfg.mandatory_threshold, cfg.better_direction))
    if not passed:
        return RuleResult(mandatory_pass=False, bonus_points=0)

    return RuleResult(mandatory_pass=True, bonus_points=_bonus_points(value, cfg))
