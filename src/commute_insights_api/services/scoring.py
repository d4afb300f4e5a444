"""Commute desirability scores (0-100, higher is better)."""

from __future__ import annotations

from typing import Dict, Iterable

from ..models.domain import CommuteScore, NearbyStop, NormalizedRoute, TransportMode
from .formatting import format_distance, format_time, round_half_up

MODE_WEIGHTS: Dict[TransportMode, float] = {
    TransportMode.DRIVE: 1.0,
    TransportMode.TRANSIT: 1.2,
    TransportMode.BIKE: 1.1,
    TransportMode.WALK: 0.8,
}
DEFAULT_MODE_WEIGHT = 1.0

WALKING_SPEED_KMH = 5.0
DEFAULT_CONNECTOR_RIDE_MINUTES = 30
CONNECTOR_METERS_PER_MINUTE = 500  # ~30 km/h shuttle


def calculate_commute_score(
    time_in_seconds: float,
    distance_in_meters: float,
    mode: TransportMode | str,
) -> int:
    """Score one commute option.

    Starts at 100, loses points past 20 and 30 minutes and past 25 km, then
    applies the mode adjustment (bike and walk get a bonus that long distances
    eat back). The result is clamped to [0, 100].
    """
    mode = TransportMode(mode)
    score = 100.0

    time_in_minutes = time_in_seconds / 60
    if time_in_minutes > 30:
        score -= (time_in_minutes - 30) * 2
    elif time_in_minutes > 20:
        score -= time_in_minutes - 20

    distance_in_km = distance_in_meters / 1000
    if distance_in_km > 25:
        score -= (distance_in_km - 25) * 1.5

    if mode is TransportMode.BIKE:
        score += 10
        if distance_in_km > 15:
            score -= (distance_in_km - 15) * 3
    elif mode is TransportMode.WALK:
        score += 15
        if distance_in_km > 3:
            score -= (distance_in_km - 3) * 10
    elif mode is TransportMode.TRANSIT:
        score += 8

    # Clamping before rounding keeps inf/nan inputs from reaching int().
    return round_half_up(max(0.0, min(100.0, score)))


def calculate_overall_score(scores: Iterable[CommuteScore]) -> int:
    """Weighted mean of the per-mode scores; 0 when there is nothing to combine."""

    weighted_sum = 0.0
    total_weight = 0.0
    for item in scores:
        weight = MODE_WEIGHTS.get(item.mode, DEFAULT_MODE_WEIGHT)
        weighted_sum += item.score * weight
        total_weight += weight

    if total_weight == 0:
        return 0
    return round_half_up(weighted_sum / total_weight)


def score_route(route: NormalizedRoute) -> CommuteScore:
    props = route.properties
    return CommuteScore(
        mode=props.mode,
        time=props.time,
        distance=props.distance,
        time_formatted=props.time_formatted,
        distance_formatted=props.distance_formatted,
        score=calculate_commute_score(props.time, props.distance, props.mode),
    )


def connector_walking_minutes(nearby_stop: NearbyStop) -> int:
    return round_half_up(nearby_stop.distance_km / WALKING_SPEED_KMH * 60)


def connector_commute_score(nearby_stop: NearbyStop, units: str = "metric") -> CommuteScore:
    """Synthesize the shuttle option: walk to ``nearby_stop`` then ride to the office."""

    walking_minutes = connector_walking_minutes(nearby_stop)
    ride_minutes = nearby_stop.stop.commute_time_to_office_minutes or DEFAULT_CONNECTOR_RIDE_MINUTES
    total_seconds = (walking_minutes + ride_minutes) * 60
    total_meters = nearby_stop.distance_km * 1000 + ride_minutes * CONNECTOR_METERS_PER_MINUTE

    return CommuteScore(
        mode=TransportMode.TRANSIT,
        time=total_seconds,
        distance=total_meters,
        time_formatted=format_time(total_seconds),
        distance_formatted=format_distance(total_meters, units),
        score=calculate_commute_score(total_seconds, total_meters, TransportMode.TRANSIT),
    )


def score_ring_color(score: int) -> str:
    if score >= 90:
        return "#16a34a"
    if score >= 80:
        return "#2563eb"
    if score >= 70:
        return "#ca8a04"
    if score >= 60:
        return "#ea580c"
    return "#dc2626"


def transport_mode_name(mode: TransportMode | str) -> str:
    mode = TransportMode(mode)
    return {
        TransportMode.DRIVE: "Driving",
        TransportMode.BIKE: "Biking",
        TransportMode.WALK: "Walking",
        TransportMode.TRANSIT: "Transit",
    }.get(mode, mode.value)


__all__ = [
    "CONNECTOR_METERS_PER_MINUTE",
    "DEFAULT_CONNECTOR_RIDE_MINUTES",
    "MODE_WEIGHTS",
    "WALKING_SPEED_KMH",
    "calculate_commute_score",
    "calculate_overall_score",
    "connector_commute_score",
    "connector_walking_minutes",
    "score_ring_color",
    "score_route",
    "transport_mode_name",
]
