"""High level orchestration of a commute analysis."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.config import Settings, settings
from ..models.domain import (
    Address,
    CommuteScore,
    GeocodedAddress,
    GeoPoint,
    MapData,
    MicrosoftBuildingPin,
    OtherPin,
    RoutingMapData,
    TransportMode,
)
from .catalogue import ConnectorCatalogue
from .geoapify import GeoapifyClient, GeoapifyError
from .map_builder import MapBuilder
from .map_data import MapDataAssembler, get_map_center
from .nearby import NearbyStopFinder
from .normalizer import calculate_zoom_level, normalize_routing_response, route_center
from .scoring import calculate_overall_score, connector_commute_score, connector_walking_minutes, score_route

logger = logging.getLogger(__name__)


class UnknownBuildingError(LookupError):
    """The requested building is not in the catalogue."""


class AddressNotFoundError(ValueError):
    """The home address could not be geocoded."""


@dataclass(slots=True)
class ModeFailure:
    mode: TransportMode
    error: str


@dataclass(slots=True)
class ScoringStop:
    """The connector stop the shuttle score was computed from."""

    name: str
    walking_time_minutes: int
    commute_time_to_office_minutes: Optional[int] = None


@dataclass(slots=True)
class CommuteAnalysis:
    home: GeocodedAddress
    destination: GeocodedAddress
    scores: List[CommuteScore]
    overall_score: int
    map_data: MapData
    scoring_stop: Optional[ScoringStop] = None
    failed_modes: List[ModeFailure] = field(default_factory=list)
    map_file: Optional[Path] = None


class CommuteAnalysisService:
    """Runs routing, normalization, scoring and map assembly for one request."""

    def __init__(
        self,
        catalogue: ConnectorCatalogue,
        client: GeoapifyClient | None,
        config: Settings | None = None,
        *,
        map_builder: MapBuilder | None = None,
    ) -> None:
        self.config = config or settings
        self.catalogue = catalogue
        self.client = client
        self.finder = NearbyStopFinder(catalogue)
        self.map_builder = map_builder or MapBuilder()

    def analyze(
        self,
        home_address: str,
        building_name: str,
        *,
        home_location: GeoPoint | None = None,
        enable_bike: bool = False,
        enable_walk: bool = False,
        enable_connector: bool = False,
        units: str | None = None,
        render_map: bool = False,
    ) -> CommuteAnalysis:
        units = units or self.config.default_units
        building = self.catalogue.find_building(building_name)
        if building is None:
            raise UnknownBuildingError(f"Unknown Microsoft building: {building_name}")

        home = self._resolve_home(home_address, home_location)
        destination = GeocodedAddress(
            original=building.name,
            formatted=building.name,
            coordinates=building.location,
        )

        modes = [TransportMode.DRIVE]
        if enable_bike:
            modes.append(TransportMode.BIKE)
        if enable_walk:
            modes.append(TransportMode.WALK)

        assembler = MapDataAssembler()
        assembler.add_pin(
            OtherPin(
                id="start",
                name="Home",
                coordinates=home.coordinates.to_position(),
                address=Address(street=home_address),
            )
        )
        assembler.add_pin(
            MicrosoftBuildingPin(
                id="end",
                name=building.name,
                coordinates=building.coordinates,
                building_name=building.name,
            )
        )
        if enable_connector:
            assembler.add_pins(
                self.finder.get_nearby_pins(
                    home.coordinates.lat,
                    home.coordinates.lng,
                    self.config.display_stop_radius_km,
                    self.config.display_stop_max_results,
                )
            )

        scores: List[CommuteScore] = []
        failures: List[ModeFailure] = []
        focus: RoutingMapData | None = None
        for mode in modes:
            result = self._route_mode(home, destination, mode, units)
            if isinstance(result, ModeFailure):
                failures.append(result)
                continue
            assembler.add_routing_result(result)
            scores.append(score_route(result.route))
            if focus is None or result.route.properties.distance > focus.route.properties.distance:
                focus = result

        scoring_stop = None
        if enable_connector:
            nearby = self.finder.find_nearby_stops(
                home.coordinates.lat,
                home.coordinates.lng,
                self.config.scoring_stop_radius_km,
                self.config.scoring_stop_max_results,
            )
            if nearby:
                closest = nearby[0]
                scoring_stop = ScoringStop(
                    name=closest.stop.name,
                    walking_time_minutes=connector_walking_minutes(closest),
                    commute_time_to_office_minutes=closest.stop.commute_time_to_office_minutes,
                )
                scores.append(connector_commute_score(closest, units))
            else:
                logger.info("No connector stop within %.1f km of %s", self.config.scoring_stop_radius_km, home_address)

        map_data = assembler.build()
        analysis = CommuteAnalysis(
            home=home,
            destination=destination,
            scores=scores,
            overall_score=calculate_overall_score(scores),
            map_data=map_data,
            scoring_stop=scoring_stop,
            failed_modes=failures,
        )

        if render_map:
            analysis.map_file = self._render(analysis, focus)
        return analysis

    # Helpers --------------------------------------------------------------
    def _resolve_home(self, home_address: str, home_location: GeoPoint | None) -> GeocodedAddress:
        if home_location is not None:
            return GeocodedAddress(original=home_address, formatted=home_address, coordinates=home_location)
        if self.client is None:
            raise GeoapifyError("Geocoding is unavailable: no provider client configured")

        geocoded = self.client.geocode(home_address)
        if geocoded is None:
            raise AddressNotFoundError(f"Could not geocode address: {home_address}")
        return geocoded

    def _route_mode(
        self,
        home: GeocodedAddress,
        destination: GeocodedAddress,
        mode: TransportMode,
        units: str,
    ) -> RoutingMapData | ModeFailure:
        if self.client is None:
            return ModeFailure(mode=mode, error="Routing is unavailable: no provider client configured")
        try:
            raw = self.client.route([home.coordinates, destination.coordinates], mode)
        except GeoapifyError as exc:
            logger.warning("Routing request for %s failed: %s", mode.value, exc)
            return ModeFailure(mode=mode, error=str(exc))

        result = normalize_routing_response(raw, [home, destination], mode, units)
        if not result.success:
            return ModeFailure(mode=mode, error=result.error or "Could not compute this mode")
        return result

    def _render(self, analysis: CommuteAnalysis, focus: RoutingMapData | None) -> Path:
        if focus is not None:
            midpoint = route_center(focus)
            center = (midpoint.lat, midpoint.lng)
            zoom = calculate_zoom_level(focus.route.properties.distance)
        else:
            center = get_map_center(analysis.map_data)
            zoom = None
        filename = f"commute_{_slug(analysis.home.original)}_{_slug(analysis.destination.original)}.html"
        return self.map_builder.build(
            analysis.map_data,
            self.config.views_dir / filename,
            center=center,
            zoom=zoom,
            scores=analysis.scores,
        )


def _slug(value: str) -> str:
    value = re.sub(r"[^a-z0-9]+", "_", value.strip().lower())
    return value.strip("_")[:40] or "location"


__all__ = [
    "AddressNotFoundError",
    "CommuteAnalysis",
    "CommuteAnalysisService",
    "ModeFailure",
    "ScoringStop",
    "UnknownBuildingError",
]
