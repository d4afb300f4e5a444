from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import pytest

from commute_insights_api.models.domain import (
    ConnectorStop,
    GeocodedAddress,
    GeoPoint,
    MicrosoftBuilding,
    StopIsochrone,
    TransportMode,
)
from commute_insights_api.services.catalogue import ConnectorCatalogue
from commute_insights_api.services.geoapify import GeoapifyError

# Home sits next to the "near" stop on Capitol Hill.
HOME = GeoPoint(lat=47.6150, lng=-122.3200)


def square(lng: float, lat: float, half: float = 0.004) -> Dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [lng - half, lat - half],
                [lng + half, lat - half],
                [lng + half, lat + half],
                [lng - half, lat + half],
                [lng - half, lat - half],
            ]
        ],
    }


def isochrone(lng: float, lat: float, minutes: int) -> StopIsochrone:
    return StopIsochrone(
        address=f"{lat},{lng}",
        coordinates=(lng, lat),
        boundary_geojson=square(lng, lat),
        travel_time_minutes=minutes,
        transport_mode="walk",
    )


def feature_collection(
    coordinates: List[Any],
    distance: Optional[float] = 1000,
    time: Optional[float] = 600,
    geometry_type: str = "LineString",
    **properties: Any,
) -> Dict[str, Any]:
    props: Dict[str, Any] = dict(properties)
    if distance is not None:
        props["distance"] = distance
    if time is not None:
        props["time"] = time
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": geometry_type, "coordinates": coordinates},
                "properties": props,
            }
        ],
    }


@pytest.fixture
def stops() -> List[ConnectorStop]:
    return [
        ConnectorStop(
            id="near",
            name="Near Stop",
            coordinates=(-122.3208, 47.6153),
            description="Broadway & Pine",
            commute_time_to_office_minutes=40,
            radii={"5": isochrone(-122.3208, 47.6153, 5), "10": isochrone(-122.3208, 47.6153, 10)},
        ),
        ConnectorStop(
            id="mid-a",
            name="Mid A",
            coordinates=(-122.3200, 47.6285),
            description="Eastlake",
            has_parking=True,
            radii={"10": isochrone(-122.3200, 47.6285, 10)},
        ),
        ConnectorStop(
            id="mid-b",
            name="Mid B",
            coordinates=(-122.3200, 47.6285),
            description="Eastlake, second bay",
            commute_time_to_office_minutes=35,
        ),
        ConnectorStop(
            id="far",
            name="Far Stop",
            coordinates=(-122.3200, 47.6600),
            description="University District",
            commute_time_to_office_minutes=25,
            radii={"10": isochrone(-122.3200, 47.6600, 10)},
        ),
    ]


@pytest.fixture
def buildings() -> List[MicrosoftBuilding]:
    return [
        MicrosoftBuilding(
            id="building-109",
            name="BUILDING 109",
            building_name="Building 109",
            coordinates=(-122.1353, 47.6412),
        ),
        MicrosoftBuilding(
            id="building-111",
            name="BUILDING 111",
            building_name="Building 111",
            coordinates=(-122.1331, 47.6395),
        ),
    ]


@pytest.fixture
def catalogue(stops, buildings) -> ConnectorCatalogue:
    return ConnectorCatalogue(stops, buildings)


class StubGeoapifyClient:
    """Stands in for GeoapifyClient; answers from canned payloads."""

    def __init__(
        self,
        routes: Optional[Dict[TransportMode, Dict[str, Any]]] = None,
        failures: Iterable[TransportMode] = (),
        geocodes: Optional[Dict[str, GeocodedAddress]] = None,
    ) -> None:
        self.routes = routes or {}
        self.failures = set(failures)
        self.geocodes = geocodes or {}
        self.route_calls: List[Any] = []
        self.autocomplete_calls: List[Any] = []

    def route(self, waypoints, mode="drive"):
        mode = TransportMode(mode)
        self.route_calls.append((waypoints, mode))
        if mode in self.failures:
            raise GeoapifyError(f"{mode.value} routing unavailable")
        return self.routes.get(mode, {"type": "FeatureCollection", "features": []})

    def autocomplete(self, text, **kwargs):
        self.autocomplete_calls.append((text, kwargs))
        return {"results": [{"formatted": f"{text}, Seattle, WA", "lat": HOME.lat, "lon": HOME.lng}]}

    def geocode(self, address):
        return self.geocodes.get(address)


@pytest.fixture
def route_payloads() -> Dict[TransportMode, Dict[str, Any]]:
    line = [[-122.3200, 47.6150], [-122.2000, 47.6300], [-122.1353, 47.6412]]
    return {
        TransportMode.DRIVE: feature_collection(line, distance=16000, time=1500),
        TransportMode.BIKE: feature_collection(line, distance=17000, time=3600),
        TransportMode.WALK: feature_collection(line, distance=15500, time=11400),
    }


@pytest.fixture
def geoapify_stub(route_payloads) -> StubGeoapifyClient:
    return StubGeoapifyClient(routes=route_payloads)


@pytest.fixture
def home() -> GeoPoint:
    return HOME


@pytest.fixture
def make_route():
    return feature_collection


@pytest.fixture
def stub_client_class():
    return StubGeoapifyClient
