"""Human readable distances and durations.

Rounding follows the browser client that consumes these strings: halves round
up (``Math.round``) and fixed-point output rounds the exact binary value half
away from zero (``Number.toFixed``). Python's ``round`` uses banker's rounding
and would disagree on ties such as 1.5 minutes.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

METERS_TO_MILES = 0.000621371
FEET_PER_MILE = 5280


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_fixed(value: float, digits: int = 0) -> str:
    if not math.isfinite(value):
        return str(value)
    if value == 0:
        value = 0.0  # drop the sign of -0.0
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_distance(meters: float, units: str = "metric") -> str:
    """Render a route length, e.g. ``"5.2 km"``, ``"640 m"``, ``"3.1 miles"`` or ``"900 ft"``."""

    if units == "imperial":
        miles = meters * METERS_TO_MILES
        if miles >= 1:
            return f"{to_fixed(miles, 1)} miles"
        return f"{to_fixed(miles * FEET_PER_MILE, 0)} ft"
    if meters >= 1000:
        return f"{to_fixed(meters / 1000, 1)} km"
    return f"{to_fixed(meters, 0)} m"


def format_time(seconds: float) -> str:
    """Render a duration in whole minutes, switching to ``"1h 5min"`` past the hour."""

    minutes = round_half_up(seconds / 60)
    if minutes >= 60:
        hours, remaining = divmod(minutes, 60)
        return f"{hours}h {remaining}min" if remaining > 0 else f"{hours}h"
    return f"{minutes} min"


def format_stop_distance(distance_km: float) -> str:
    """Compact walking distance used on stop pins: ``"500m"`` or ``"1.2km"``."""

    if distance_km < 1:
        return f"{round_half_up(distance_km * 1000)}m"
    return f"{to_fixed(distance_km, 1)}km"


__all__ = [
    "FEET_PER_MILE",
    "METERS_TO_MILES",
    "format_distance",
    "format_stop_distance",
    "format_time",
    "round_half_up",
    "to_fixed",
]
