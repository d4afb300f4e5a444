"""HTTP routes exposed by the FastAPI application."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from ..core.config import settings
from ..models.api import (
    BuildingOption,
    CommuteScoreRequest,
    CommuteScoreResponse,
    ExplorerRequest,
    ExplorerResponse,
    ModeFailureInfo,
    NearbyStopsResponse,
    NearbySummaryResponse,
    ScoringStopInfo,
    WalkableResponse,
)
from ..services.catalogue import ConnectorCatalogue
from ..services.geoapify import GeoapifyClient, GeoapifyConfigError, GeoapifyError
from ..services.map_data import explore, get_map_center
from ..services.nearby import NearbyStopFinder
from ..services.pipeline import AddressNotFoundError, CommuteAnalysisService, UnknownBuildingError

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_catalogue() -> ConnectorCatalogue:
    return ConnectorCatalogue.from_settings(settings)


def get_geoapify_client() -> Optional[GeoapifyClient]:
    try:
        return GeoapifyClient(settings)
    except GeoapifyConfigError as exc:
        logger.error("Geoapify client unavailable: %s", exc)
        return None


def _require_client(client: Optional[GeoapifyClient]) -> GeoapifyClient:
    if client is None:
        raise HTTPException(status_code=500, detail="API configuration error")
    return client


@router.get("/health")
def healthcheck() -> dict[str, bool]:
    return {"ok": True}


# Provider proxies -------------------------------------------------------
@router.get("/routing")
def routing(
    waypoints: Optional[str] = None,
    mode: str = "drive",
    client: Optional[GeoapifyClient] = Depends(get_geoapify_client),
) -> Dict[str, Any]:
    if not waypoints:
        raise HTTPException(status_code=400, detail="Waypoints parameter is required")
    client = _require_client(client)
    try:
        return client.route(waypoints, mode)
    except GeoapifyError:
        logger.exception("Error fetching routing data")
        raise HTTPException(status_code=500, detail="Failed to fetch routing data")


@router.get("/geocode/autocomplete")
def autocomplete(
    text: Optional[str] = None,
    type: Optional[str] = None,
    lang: str = "en",
    filter: Optional[str] = None,
    bias: Optional[str] = None,
    limit: int = 5,
    format: str = "json",
    client: Optional[GeoapifyClient] = Depends(get_geoapify_client),
) -> Dict[str, Any]:
    if not text:
        raise HTTPException(status_code=400, detail="Text parameter is required")
    client = _require_client(client)
    try:
        return client.autocomplete(text, type=type, lang=lang, filter=filter, bias=bias, limit=limit, format=format)
    except GeoapifyError:
        logger.exception("Error fetching autocomplete data")
        raise HTTPException(status_code=500, detail="Failed to fetch autocomplete data")


# Commute analysis -------------------------------------------------------
@router.post("/commute-score", response_model=CommuteScoreResponse)
def commute_score(
    request: CommuteScoreRequest,
    catalogue: ConnectorCatalogue = Depends(get_catalogue),
    client: Optional[GeoapifyClient] = Depends(get_geoapify_client),
) -> CommuteScoreResponse:
    service = CommuteAnalysisService(catalogue, client, settings)
    try:
        analysis = service.analyze(
            request.home_address,
            request.building,
            home_location=request.home_location,
            enable_bike=request.enable_bike,
            enable_walk=request.enable_walk,
            enable_connector=request.enable_connector,
            units=request.units,
            render_map=request.render_map,
        )
    except UnknownBuildingError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AddressNotFoundError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except GeoapifyError as exc:
        logger.exception("Commute analysis failed")
        return CommuteScoreResponse(success=False, message=str(exc))

    scoring_stop = None
    if analysis.scoring_stop is not None:
        stop = analysis.scoring_stop
        scoring_stop = ScoringStopInfo(
            name=stop.name,
            walking_time_minutes=stop.walking_time_minutes,
            commute_time_to_office_minutes=stop.commute_time_to_office_minutes,
        )

    message = None
    if not analysis.scores:
        message = "No commute option could be computed"

    return CommuteScoreResponse(
        success=bool(analysis.scores),
        scores=analysis.scores,
        overall_score=analysis.overall_score,
        map_data=analysis.map_data,
        scoring_stop=scoring_stop,
        failed_modes=[ModeFailureInfo(mode=item.mode, error=item.error) for item in analysis.failed_modes],
        view_file=analysis.map_file.name if analysis.map_file else None,
        message=message,
    )


# Connector stops --------------------------------------------------------
@router.get("/connector-stops/nearby", response_model=NearbyStopsResponse)
def nearby_stops(
    lat: float,
    lng: float,
    radius_km: float = Query(2.0, gt=0),
    max_results: int = Query(5, ge=1, le=50),
    catalogue: ConnectorCatalogue = Depends(get_catalogue),
) -> NearbyStopsResponse:
    stops = NearbyStopFinder(catalogue).find_nearby_stops(lat, lng, radius_km, max_results)
    return NearbyStopsResponse(count=len(stops), stops=stops)


@router.get("/connector-stops/summary", response_model=NearbySummaryResponse)
def nearby_summary(
    lat: float,
    lng: float,
    radius_km: float = Query(2.0, gt=0),
    catalogue: ConnectorCatalogue = Depends(get_catalogue),
) -> NearbySummaryResponse:
    summary = NearbyStopFinder(catalogue).get_nearby_summary(lat, lng, radius_km)
    return NearbySummaryResponse(
        count=summary.count,
        closest_distance=summary.closest_distance,
        closest_stop_name=summary.closest_stop_name,
        has_walkable_stops=summary.has_walkable_stops,
    )


@router.get("/connector-stops/walkable", response_model=WalkableResponse)
def walkable_stops(
    lat: float,
    lng: float,
    walking_distance_km: float = Query(1.0, gt=0),
    catalogue: ConnectorCatalogue = Depends(get_catalogue),
) -> WalkableResponse:
    finder = NearbyStopFinder(catalogue)
    return WalkableResponse(has_nearby_stops=finder.has_nearby_stops(lat, lng, walking_distance_km))


# Explorer ---------------------------------------------------------------
@router.get("/buildings", response_model=List[BuildingOption])
def list_buildings(catalogue: ConnectorCatalogue = Depends(get_catalogue)) -> List[BuildingOption]:
    return [BuildingOption(**option) for option in catalogue.building_options()]


@router.post("/explorer", response_model=ExplorerResponse)
def explorer(
    request: ExplorerRequest,
    catalogue: ConnectorCatalogue = Depends(get_catalogue),
) -> ExplorerResponse:
    map_data = explore(
        catalogue,
        transportation_method=request.transportation_method,
        microsoft_building=request.microsoft_building,
        radius_time_minutes=request.radius_time_minutes,
        total_time_to_office=request.total_time_to_office,
    )
    center = get_map_center(map_data, request.transportation_method)
    return ExplorerResponse(map_data=map_data, center=list(center))


@router.get("/views/{filename}")
def get_view(filename: str) -> FileResponse:
    safe_name = os.path.basename(filename)
    file_path = settings.views_dir / safe_name
    if not file_path.exists():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(file_path)


__all__ = ["get_catalogue", "get_geoapify_client", "router"]
