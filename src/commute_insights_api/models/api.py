"""Pydantic schemas exposed by the HTTP layer."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .domain import CommuteScore, GeoPoint, MapData, NearbyStop, TransportMode, Units


class CommuteScoreRequest(BaseModel):
    home_address: str = Field(min_length=3, max_length=200)
    home_location: Optional[GeoPoint] = None
    building: str
    enable_bike: bool = False
    enable_walk: bool = False
    enable_connector: bool = False
    units: Optional[Units] = None
    render_map: bool = False


class ScoringStopInfo(BaseModel):
    name: str
    walking_time_minutes: int
    commute_time_to_office_minutes: Optional[int] = None


class ModeFailureInfo(BaseModel):
    mode: TransportMode
    error: str


class CommuteScoreResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    scores: List[CommuteScore] = Field(default_factory=list)
    overall_score: int = 0
    map_data: Optional[MapData] = None
    scoring_stop: Optional[ScoringStopInfo] = None
    failed_modes: List[ModeFailureInfo] = Field(default_factory=list)
    view_file: Optional[str] = None
    message: Optional[str] = None


class NearbySummaryResponse(BaseModel):
    count: int
    closest_distance: Optional[str] = None
    closest_stop_name: Optional[str] = None
    has_walkable_stops: bool


class NearbyStopsResponse(BaseModel):
    count: int
    stops: List[NearbyStop]


class WalkableResponse(BaseModel):
    has_nearby_stops: bool


class BuildingOption(BaseModel):
    value: str
    label: str


class ExplorerRequest(BaseModel):
    """Area-explorer form; every field is optional while the form is being filled in."""

    transportation_method: Optional[Literal["drive", "connector", "walk"]] = None
    total_time_to_office: Optional[float] = Field(default=None, ge=1, le=180)
    microsoft_building: Optional[str] = None
    radius_time_minutes: Optional[Literal["5", "10", "15"]] = None

    @model_validator(mode="after")
    def _building_required_for_point_to_point(self) -> "ExplorerRequest":
        if self.transportation_method in {"drive", "walk"} and not self.microsoft_building:
            raise ValueError("Microsoft building is required for drive and walk transportation methods")
        return self


class ExplorerResponse(BaseModel):
    map_data: MapData
    center: List[float]
