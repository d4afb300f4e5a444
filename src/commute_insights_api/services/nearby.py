"""Connector stops within reach of a user location."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..models.domain import ConnectorStopPin, NearbyStop
from .catalogue import ConnectorCatalogue
from .formatting import format_stop_distance
from .geo import distance_km

DEFAULT_RADIUS_KM = 2.0
DEFAULT_MAX_RESULTS = 5
WALKABLE_DISTANCE_KM = 1.0


@dataclass(slots=True)
class NearbySummary:
    count: int
    closest_distance: Optional[str]
    closest_stop_name: Optional[str]
    has_walkable_stops: bool


class NearbyStopFinder:
    def __init__(self, catalogue: ConnectorCatalogue) -> None:
        self.catalogue = catalogue

    def find_nearby_stops(
        self,
        user_lat: float,
        user_lng: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[NearbyStop]:
        """Stops within ``radius_km``, closest first, at most ``max_results``.

        Equal distances keep catalogue order.
        """
        nearby: List[NearbyStop] = []
        for stop in self.catalogue.stops:
            stop_lng, stop_lat = stop.coordinates
            distance = distance_km(user_lat, user_lng, stop_lat, stop_lng)
            if distance <= radius_km:
                nearby.append(
                    NearbyStop(
                        stop=stop,
                        distance_km=distance,
                        distance_formatted=format_stop_distance(distance),
                    )
                )

        nearby.sort(key=lambda item: item.distance_km)
        return nearby[: max(0, max_results)]

    def get_nearby_pins(
        self,
        user_lat: float,
        user_lng: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[ConnectorStopPin]:
        pins: List[ConnectorStopPin] = []
        for item in self.find_nearby_stops(user_lat, user_lng, radius_km, max_results):
            stop = item.stop
            pins.append(
                ConnectorStopPin(
                    id=stop.id,
                    name=stop.name,
                    coordinates=stop.coordinates,
                    description=f"{stop.description}\n\nDistance: {item.distance_formatted} from your location",
                    has_parking=stop.has_parking,
                    is_ms_building=stop.is_ms_building,
                    commute_time_to_office_minutes=stop.commute_time_to_office_minutes or None,
                    address=stop.address,
                )
            )
        return pins

    def has_nearby_stops(
        self,
        user_lat: float,
        user_lng: float,
        walking_distance_km: float = WALKABLE_DISTANCE_KM,
    ) -> bool:
        return len(self.find_nearby_stops(user_lat, user_lng, walking_distance_km, 1)) > 0

    def get_nearby_summary(
        self,
        user_lat: float,
        user_lng: float,
        radius_km: float = DEFAULT_RADIUS_KM,
    ) -> NearbySummary:
        nearby = self.find_nearby_stops(user_lat, user_lng, radius_km)
        # Walkability is always judged at 1 km, whatever the search radius.
        walkable = self.find_nearby_stops(user_lat, user_lng, WALKABLE_DISTANCE_KM)

        closest = nearby[0] if nearby else None
        return NearbySummary(
            count=len(nearby),
            closest_distance=closest.distance_formatted if closest else None,
            closest_stop_name=closest.stop.name if closest else None,
            has_walkable_stops=len(walkable) > 0,
        )


__all__ = [
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_RADIUS_KM",
    "NearbyStopFinder",
    "NearbySummary",
    "WALKABLE_DISTANCE_KM",
]
