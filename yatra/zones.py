"""
Colour zones: map a value to a display colour.

Bounds are ascending buckets scanned in order with a plain `<=`; only the
fallback colour depends on the better direction.
"""

from typing import Optional

from yatra.models import BetterDirection, ColourZonesConfig, ZoneColour
from yatra.values import Value, comparable_pair


def classify_colour(value: Optional[Value], config: ColourZonesConfig) -> ZoneColour:
    """First bound whose limit is >= value, else the best colour for the direction."""
    if value is None:
        return config.no_value_colour

    for bound in config.bounds:
        if bound.to is None:
            continue
        pair = comparable_pair(value, bound.to)
        if pair is not None and pair[0] <= pair[1]:
            return bound.colour

    if config.best_colour is not None:
        return config.best_colour
    if config.better_direction is BetterDirection.HIGHER:
        return ZoneColour.GREEN
    return ZoneColour.RED
