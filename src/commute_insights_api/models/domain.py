"""Domain models shared between services and the API layer."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# GeoJSON order: (longitude, latitude). UI-facing code uses GeoPoint instead.
GeoJsonPosition = Tuple[float, float]

Units = Literal["metric", "imperial"]


class TransportMode(str, Enum):
    DRIVE = "drive"
    WALK = "walk"
    BIKE = "bike"
    TRANSIT = "transit"
    TRUCK = "truck"
    TAXI = "taxi"

    @classmethod
    def _missing_(cls, value: object) -> "TransportMode | None":
        if isinstance(value, str):
            alias = _MODE_ALIASES.get(value.strip().lower())
            if alias is not None:
                return cls(alias)
        return None


_MODE_ALIASES = {
    "drive": "drive",
    "walk": "walk",
    "bike": "bike",
    "cycle": "bike",
    "bicycle": "bike",
    "transit": "transit",
    "connector": "transit",
    "truck": "truck",
    "taxi": "taxi",
}


class _ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class GeoPoint(_ValueObject):
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def to_position(self) -> GeoJsonPosition:
        return (self.lng, self.lat)

    @classmethod
    def from_position(cls, position: GeoJsonPosition) -> "GeoPoint":
        lng, lat = position[0], position[1]
        return cls(lat=lat, lng=lng)


class GeocodedAddress(_ValueObject):
    original: str
    formatted: str
    coordinates: GeoPoint


class Address(_ValueObject):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


# Routes -----------------------------------------------------------------
class RouteGeometry(_ValueObject):
    type: Literal["LineString"] = "LineString"
    coordinates: List[GeoJsonPosition] = Field(default_factory=list)


class RouteProperties(_ValueObject):
    mode: TransportMode
    distance: float = Field(ge=0)  # meters
    time: float = Field(ge=0)  # seconds
    distance_formatted: str
    time_formatted: str
    description: Optional[str] = None
    color: str


class NormalizedRoute(_ValueObject):
    id: str
    geometry: RouteGeometry
    properties: RouteProperties


class RoutingMapData(_ValueObject):
    start_address: GeocodedAddress
    end_address: GeocodedAddress
    route: NormalizedRoute
    waypoints: List[GeoPoint] = Field(default_factory=list)
    success: bool
    error: Optional[str] = None


# Catalogue --------------------------------------------------------------
class StopIsochrone(_ValueObject):
    """Precomputed reachable area around a stop for one minute bucket."""

    address: str
    coordinates: GeoJsonPosition
    boundary_geojson: Dict[str, Any]
    travel_time_minutes: int
    transport_mode: str


class ConnectorStop(_ValueObject):
    id: str
    name: str
    coordinates: GeoJsonPosition
    description: str = ""
    has_parking: bool = False
    is_ms_building: bool = False
    commute_time_to_office_minutes: Optional[int] = None
    address: Optional[Address] = None
    radii: Dict[str, StopIsochrone] = Field(default_factory=dict)

    @property
    def location(self) -> GeoPoint:
        return GeoPoint.from_position(self.coordinates)


class MicrosoftBuilding(_ValueObject):
    id: str
    name: str
    building_name: str
    coordinates: GeoJsonPosition
    address: Optional[Address] = None
    logo: Optional[str] = None

    @property
    def location(self) -> GeoPoint:
        return GeoPoint.from_position(self.coordinates)


class NearbyStop(_ValueObject):
    stop: ConnectorStop
    distance_km: float
    distance_formatted: str


class CommuteScore(_ValueObject):
    mode: TransportMode
    time: float  # seconds
    distance: float  # meters
    time_formatted: str
    distance_formatted: str
    score: int = Field(ge=0, le=100)


# Map payload ------------------------------------------------------------
class _BaseMapPin(_ValueObject):
    id: str
    coordinates: GeoJsonPosition
    name: str
    address: Optional[Address] = None


class ConnectorStopPin(_BaseMapPin):
    type: Literal["connectorStop"] = "connectorStop"
    description: str = ""
    has_parking: bool = False
    is_ms_building: bool = False
    commute_time_to_office_minutes: Optional[int] = None


class MicrosoftBuildingPin(_BaseMapPin):
    type: Literal["microsoftBuilding"] = "microsoftBuilding"
    building_name: str
    logo: Optional[str] = None


class OtherPin(_BaseMapPin):
    type: Literal["other"] = "other"


MapPin = Annotated[
    Union[ConnectorStopPin, MicrosoftBuildingPin, OtherPin],
    Field(discriminator="type"),
]


class MapRoute(_ValueObject):
    id: str
    name: str
    geometry: RouteGeometry
    color: Optional[str] = None
    description: Optional[str] = None
    distance: Optional[str] = None
    estimated_time: Optional[str] = None


class MapRadius(_ValueObject):
    id: str
    name: str
    type: Literal["connectorStopRadius", "otherRadius"]
    address: str
    center_point: GeoJsonPosition
    geometry: Dict[str, Any]
    color: Optional[str] = None
    travel_time_minutes: int
    transport_mode: str


class MapData(_ValueObject):
    pins: List[MapPin] = Field(default_factory=list)
    routes: List[MapRoute] = Field(default_factory=list)
    radii: List[MapRadius] = Field(default_factory=list)


TRANSPORT_MODE_COLORS: Dict[TransportMode, str] = {
    TransportMode.DRIVE: "#3b82f6",
    TransportMode.TRANSIT: "#10b981",
    TransportMode.WALK: "#8b5cf6",
    TransportMode.BIKE: "#f59e0b",
    TransportMode.TRUCK: "#ef4444",
    TransportMode.TAXI: "#06b6d4",
}
