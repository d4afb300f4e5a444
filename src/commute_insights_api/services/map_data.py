"""Assemble pins, routes and isochrone overlays into one map payload."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.domain import (
    Address,
    ConnectorStop,
    ConnectorStopPin,
    GeocodedAddress,
    MapData,
    MapPin,
    MapRadius,
    MapRoute,
    MicrosoftBuilding,
    MicrosoftBuildingPin,
    OtherPin,
    RoutingMapData,
)
from .catalogue import ConnectorCatalogue

logger = logging.getLogger(__name__)

SEATTLE_CENTER: Tuple[float, float] = (47.6062, -122.3321)
CONNECTOR_AREA_CENTER: Tuple[float, float] = (47.6205, -122.3493)
UNKNOWN_COMMUTE_MINUTES = 999999


class MapDataAssembler:
    """Collects map features for one analysis; pins are unique by id.

    The same pin may be offered once per transport mode; the first one added
    is kept.
    """

    def __init__(self) -> None:
        self._pins: Dict[str, MapPin] = {}
        self._routes: List[MapRoute] = []
        self._radii: List[MapRadius] = []

    def add_pin(self, pin: MapPin) -> bool:
        if pin.id in self._pins:
            return False
        self._pins[pin.id] = pin
        return True

    def add_pins(self, pins: Iterable[MapPin]) -> None:
        for pin in pins:
            self.add_pin(pin)

    def add_route(self, route: MapRoute) -> None:
        self._routes.append(route)

    def add_radius(self, radius: MapRadius) -> None:
        self._radii.append(radius)

    def add_routing_result(self, result: RoutingMapData) -> bool:
        """Add the endpoints and polyline of a normalized route; failed results are skipped."""

        if not result.success:
            logger.info("Skipping failed %s route: %s", result.route.properties.mode.value, result.error)
            return False
        converted = routing_result_to_map_data(result)
        self.add_pins(converted.pins)
        for route in converted.routes:
            self.add_route(route)
        return True

    def build(self) -> MapData:
        return MapData(pins=list(self._pins.values()), routes=list(self._routes), radii=list(self._radii))


def routing_result_to_map_data(result: RoutingMapData) -> MapData:
    route = result.route
    props = route.properties
    return MapData(
        pins=[
            _endpoint_pin("start", "Start", result.start_address),
            _endpoint_pin("end", "End", result.end_address),
        ],
        routes=[
            MapRoute(
                id=route.id,
                name=f"{props.mode.value} route",
                geometry=route.geometry,
                color=props.color,
                description=props.description or f"{props.mode.value} route",
                distance=props.distance_formatted,
                estimated_time=props.time_formatted,
            )
        ],
        radii=[],
    )


def connector_stop_pin(stop: ConnectorStop) -> ConnectorStopPin:
    return ConnectorStopPin(
        id=stop.id,
        name=stop.name,
        coordinates=stop.coordinates,
        description=stop.description,
        has_parking=stop.has_parking,
        is_ms_building=stop.is_ms_building,
        commute_time_to_office_minutes=stop.commute_time_to_office_minutes or None,
        address=stop.address,
    )


def building_pin(building: MicrosoftBuilding) -> MicrosoftBuildingPin:
    return MicrosoftBuildingPin(
        id=building.id,
        name=building.name,
        coordinates=building.coordinates,
        building_name=building.building_name,
        address=building.address,
        logo=building.logo,
    )


def explore(
    catalogue: ConnectorCatalogue,
    *,
    transportation_method: Optional[str] = None,
    microsoft_building: Optional[str] = None,
    radius_time_minutes: Optional[str] = None,
    total_time_to_office: Optional[float] = None,
) -> MapData:
    """Area-explorer payload built from the catalogue and its precomputed isochrones."""

    connector_pins = [connector_stop_pin(stop) for stop in catalogue.stops]
    building_pins = [building_pin(building) for building in catalogue.buildings]

    if not transportation_method:
        return MapData(pins=[*connector_pins, *building_pins])

    if transportation_method == "drive":
        return MapData(pins=[pin for pin in building_pins if pin.name == microsoft_building])

    if transportation_method == "connector":
        stops = list(catalogue.stops)
        if radius_time_minutes and total_time_to_office:
            radius_minutes = int(radius_time_minutes)
            stops = [
                stop
                for stop in stops
                if (stop.commute_time_to_office_minutes or UNKNOWN_COMMUTE_MINUTES) + radius_minutes
                <= total_time_to_office
            ]

        radii: List[MapRadius] = []
        if radius_time_minutes:
            for stop in stops:
                isochrone = stop.radii.get(radius_time_minutes)
                if isochrone is None:
                    continue
                radii.append(
                    MapRadius(
                        id=f"{stop.id}-{radius_time_minutes}",
                        name=f"{stop.name} - {radius_time_minutes} min radius",
                        type="connectorStopRadius",
                        address=isochrone.address,
                        center_point=isochrone.coordinates,
                        geometry=isochrone.boundary_geojson,
                        travel_time_minutes=isochrone.travel_time_minutes,
                        transport_mode=isochrone.transport_mode,
                    )
                )

        return MapData(pins=[connector_stop_pin(stop) for stop in stops], radii=radii)

    return MapData()


def get_map_center(map_data: MapData, transportation_method: Optional[str] = None) -> Tuple[float, float]:
    """``(lat, lng)`` to centre a map on."""

    if transportation_method == "connector":
        return CONNECTOR_AREA_CENTER

    pins = map_data.pins
    if len(pins) == 1:
        lng, lat = pins[0].coordinates
        return (lat, lng)
    if pins:
        avg_lat = sum(pin.coordinates[1] for pin in pins) / len(pins)
        avg_lng = sum(pin.coordinates[0] for pin in pins) / len(pins)
        return (avg_lat, avg_lng)
    return SEATTLE_CENTER


def _endpoint_pin(pin_id: str, name: str, address: GeocodedAddress) -> OtherPin:
    parts = [part.strip() for part in address.formatted.split(",")]
    return OtherPin(
        id=pin_id,
        name=name,
        coordinates=address.coordinates.to_position(),
        address=Address(
            street=parts[0] or address.formatted,
            city=parts[1] if len(parts) > 1 else None,
            state=parts[2] if len(parts) > 2 else None,
        ),
    )


__all__ = [
    "MapDataAssembler",
    "building_pin",
    "connector_stop_pin",
    "explore",
    "get_map_center",
    "routing_result_to_map_data",
]
