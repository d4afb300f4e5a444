"""Turn raw Geoapify routing responses into map-ready routes."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..models.domain import (
    TRANSPORT_MODE_COLORS,
    GeocodedAddress,
    GeoJsonPosition,
    GeoPoint,
    NormalizedRoute,
    RouteGeometry,
    RouteProperties,
    RoutingMapData,
    TransportMode,
)
from .formatting import format_distance, format_time

logger = logging.getLogger(__name__)

ERROR_ROUTE_ID = "error-route"

UNKNOWN_ADDRESS = GeocodedAddress(
    original="Unknown",
    formatted="Unknown location",
    coordinates=GeoPoint(lat=0.0, lng=0.0),
)


class RouteNormalizationError(ValueError):
    """The provider payload cannot be turned into a route."""


def generate_route_id(start: str, end: str, mode: TransportMode | str) -> str:
    """Stable id for a (start, end, mode) triple."""

    mode = TransportMode(mode)
    digest = hashlib.sha1(f"{start}-{end}-{mode.value}".encode("utf-8")).hexdigest()[:12]
    return f"route-{mode.value}-{digest}"


def normalize_routing_response(
    routing_data: Mapping[str, Any] | None,
    geocoded_addresses: Sequence[Optional[GeocodedAddress]],
    mode: TransportMode | str,
    units: str = "metric",
) -> RoutingMapData:
    """Normalize one provider response; failures come back as ``success=False``.

    Only the first feature is read. ``geocoded_addresses`` holds the start and
    end geocodes; a missing one is replaced by an "Unknown location"
    placeholder at (0, 0).
    """
    mode = TransportMode(mode)
    start_address = _address_at(geocoded_addresses, 0)
    end_address = _address_at(geocoded_addresses, 1)

    try:
        features = (routing_data or {}).get("features") or []
        if not features:
            raise RouteNormalizationError("No route found in response")

        feature = features[0]
        geometry = feature.get("geometry") or {}
        properties = feature.get("properties") or {}

        coordinates = _extract_line(geometry)
        logger.debug(
            "Normalized %s geometry for %s: %d points",
            geometry.get("type"),
            mode.value,
            len(coordinates),
        )

        distance = float(properties.get("distance") or 0)
        time = float(properties.get("time") or 0)

        route = NormalizedRoute(
            id=generate_route_id(start_address.original, end_address.original, mode),
            geometry=RouteGeometry(coordinates=coordinates),
            properties=RouteProperties(
                mode=mode,
                distance=distance,
                time=time,
                distance_formatted=format_distance(distance, units),
                time_formatted=format_time(time),
                description=_describe_waypoints(properties.get("way_points")),
                color=TRANSPORT_MODE_COLORS[mode],
            ),
        )

        return RoutingMapData(
            start_address=start_address,
            end_address=end_address,
            route=route,
            waypoints=[start_address.coordinates, end_address.coordinates],
            success=True,
        )
    except (RouteNormalizationError, AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Error normalizing %s routing response: %s", mode.value, exc)
        return _failure(start_address, end_address, mode, units, str(exc) or "Unknown error occurred")


def route_center(routing_map_data: RoutingMapData) -> GeoPoint:
    start = routing_map_data.start_address.coordinates
    end = routing_map_data.end_address.coordinates
    return GeoPoint(lat=(start.lat + end.lat) / 2, lng=(start.lng + end.lng) / 2)


def calculate_zoom_level(distance: float) -> int:
    """Map zoom suited to a route ``distance`` in meters."""

    if distance < 1000:
        return 15
    if distance < 5000:
        return 13
    if distance < 25000:
        return 11
    if distance < 100000:
        return 9
    return 7


# Helpers ----------------------------------------------------------------
def _address_at(addresses: Sequence[Optional[GeocodedAddress]], index: int) -> GeocodedAddress:
    if index < len(addresses) and addresses[index] is not None:
        return addresses[index]
    return UNKNOWN_ADDRESS


def _extract_line(geometry: Dict[str, Any]) -> List[GeoJsonPosition]:
    geometry_type = geometry.get("type")
    raw_coordinates = geometry.get("coordinates")

    if geometry_type == "LineString":
        line = raw_coordinates or []
    elif geometry_type == "MultiLineString":
        # Later sub-paths are dropped.
        if not raw_coordinates:
            raise RouteNormalizationError("MultiLineString geometry has no line strings")
        line = raw_coordinates[0] or []
    else:
        raise RouteNormalizationError(f"Unsupported geometry type: {geometry_type}")

    return [(float(coord[0]), float(coord[1])) for coord in line]


def _describe_waypoints(way_points: Any) -> Optional[str]:
    if not way_points:
        return None
    labels = []
    for point in way_points:
        if isinstance(point, Mapping) and point.get("location"):
            lng, lat = point["location"][:2]
            labels.append(f"{lat},{lng}")
        else:
            labels.append(str(point))
    return f"Via {', '.join(labels)}"


def _failure(
    start_address: GeocodedAddress,
    end_address: GeocodedAddress,
    mode: TransportMode,
    units: str,
    message: str,
) -> RoutingMapData:
    return RoutingMapData(
        start_address=start_address,
        end_address=end_address,
        route=NormalizedRoute(
            id=ERROR_ROUTE_ID,
            geometry=RouteGeometry(coordinates=[]),
            properties=RouteProperties(
                mode=mode,
                distance=0,
                time=0,
                distance_formatted=format_distance(0, units),
                time_formatted=format_time(0),
                color=TRANSPORT_MODE_COLORS[mode],
            ),
        ),
        waypoints=[],
        success=False,
        error=message,
    )


__all__ = [
    "ERROR_ROUTE_ID",
    "RouteNormalizationError",
    "UNKNOWN_ADDRESS",
    "calculate_zoom_level",
    "generate_route_id",
    "normalize_routing_response",
    "route_center",
]
