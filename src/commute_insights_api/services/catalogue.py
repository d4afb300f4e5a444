"""Static connector-stop and office-building catalogues."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from ..core.config import Settings, settings
from ..models.domain import ConnectorStop, MicrosoftBuilding

logger = logging.getLogger(__name__)


class ConnectorCatalogue:
    """Read-only view over the connector stops and Microsoft buildings.

    The production data lives in ``data/*.json``; tests build instances from
    small in-memory fixtures instead.
    """

    def __init__(
        self,
        stops: Iterable[ConnectorStop] = (),
        buildings: Iterable[MicrosoftBuilding] = (),
    ) -> None:
        self.stops: List[ConnectorStop] = list(stops)
        self.buildings: List[MicrosoftBuilding] = list(buildings)

    @classmethod
    def from_files(cls, stops_path: Path, buildings_path: Path) -> "ConnectorCatalogue":
        stops = [ConnectorStop.model_validate(item) for item in cls._load_json(stops_path)]
        buildings = [MicrosoftBuilding.model_validate(item) for item in cls._load_json(buildings_path)]
        logger.info("Loaded %d connector stops and %d buildings", len(stops), len(buildings))
        return cls(stops, buildings)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "ConnectorCatalogue":
        config = config or settings
        return cls.from_files(config.connector_stops_path, config.buildings_path)

    def get_stop(self, stop_id: str) -> Optional[ConnectorStop]:
        for stop in self.stops:
            if stop.id == stop_id:
                return stop
        return None

    def find_building(self, name: str) -> Optional[MicrosoftBuilding]:
        for building in self.buildings:
            if building.name == name:
                return building
        return None

    def building_options(self) -> List[dict[str, str]]:
        return [{"value": building.name, "label": building.name} for building in self.buildings]

    @staticmethod
    def _load_json(path: Path) -> Sequence[Any]:
        if not path.exists():
            raise FileNotFoundError(f"Catalogue not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON list in {path}")
        return data


__all__ = ["ConnectorCatalogue"]
