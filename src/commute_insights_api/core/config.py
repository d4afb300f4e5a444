"""Global settings shared across the service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _split_env_list(value: str | None) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    return float(value)


@dataclass(slots=True)
class Settings:
    """Encapsulates filesystem paths, provider credentials and runtime options."""

    project_root: Path = PROJECT_ROOT
    data_dir: Path = PROJECT_ROOT / "data"
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    geoapify_api_key: str | None = field(default_factory=lambda: os.getenv("GEOAPIFY_API_KEY") or None)
    geoapify_base_url: str = "https://api.geoapify.com/v1"
    geoapify_timeout: float = field(default_factory=lambda: _env_float("GEOAPIFY_TIMEOUT", 15.0))
    geoapify_max_retries: int = field(default_factory=lambda: int(os.getenv("GEOAPIFY_MAX_RETRIES", "3")))

    default_units: str = field(default_factory=lambda: os.getenv("DEFAULT_UNITS", "metric"))

    # Nearby connector stops drawn on the commute map vs. used for the connector score.
    display_stop_radius_km: float = 3.0
    display_stop_max_results: int = 8
    scoring_stop_radius_km: float = 2.0
    scoring_stop_max_results: int = 5

    connector_stops_path: Path = field(init=False)
    buildings_path: Path = field(init=False)
    views_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        origins_env = _split_env_list(os.getenv("API_ALLOWED_ORIGINS"))
        if origins_env:
            self.allowed_origins = origins_env

        if self.default_units not in {"metric", "imperial"}:
            raise ValueError(f"DEFAULT_UNITS must be 'metric' or 'imperial', got {self.default_units!r}")

        stops_env = os.getenv("CONNECTOR_STOPS_PATH")
        self.connector_stops_path = Path(stops_env) if stops_env else self.data_dir / "connector_stops.json"
        buildings_env = os.getenv("MICROSOFT_BUILDINGS_PATH")
        self.buildings_path = Path(buildings_env) if buildings_env else self.data_dir / "microsoft_buildings.json"

        self.views_dir = self.data_dir / "views"
        self.views_dir.mkdir(parents=True, exist_ok=True)

    def ensure_files(self) -> None:
        """Surface actionable errors for required assets."""

        for path in (self.connector_stops_path, self.buildings_path):
            if not path.exists():
                raise FileNotFoundError(
                    f"Catalogue not found at {path}. Set CONNECTOR_STOPS_PATH / MICROSOFT_BUILDINGS_PATH."
                )


settings = Settings()
