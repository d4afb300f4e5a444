"""Thin client for the Geoapify routing and autocomplete endpoints."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, Mapping, Optional, Sequence

import requests

from ..core.config import Settings, settings
from ..models.domain import GeocodedAddress, GeoPoint, TransportMode

logger = logging.getLogger(__name__)

# Geoapify's names for our transport modes.
PROVIDER_MODES: Dict[TransportMode, str] = {
    TransportMode.DRIVE: "drive",
    TransportMode.WALK: "walk",
    TransportMode.BIKE: "bicycle",
    TransportMode.TRANSIT: "transit",
    TransportMode.TRUCK: "truck",
    TransportMode.TAXI: "taxi",
}

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class GeoapifyError(RuntimeError):
    """The provider could not be reached or answered with an error."""


class GeoapifyConfigError(ValueError):
    """No API key is configured."""


def format_waypoints(points: Sequence[GeoPoint]) -> str:
    """``lat,lng|lat,lng`` as expected by the routing endpoint."""

    return "|".join(f"{point.lat},{point.lng}" for point in points)


class GeoapifyClient:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or settings
        self.api_key = api_key or self.config.geoapify_api_key
        if not self.api_key:
            raise GeoapifyConfigError("GEOAPIFY_API_KEY is not set")
        self.base_url = self.config.geoapify_base_url.rstrip("/")
        self.timeout = self.config.geoapify_timeout
        self.max_retries = max(1, self.config.geoapify_max_retries)
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    # Public API -----------------------------------------------------------
    def route(self, waypoints: str | Sequence[GeoPoint], mode: TransportMode | str = "drive") -> Dict[str, Any]:
        """Raw routing response (GeoJSON FeatureCollection)."""

        if not isinstance(waypoints, str):
            waypoints = format_waypoints(waypoints)
        try:
            provider_mode = PROVIDER_MODES[TransportMode(mode)]
        except ValueError:
            provider_mode = str(mode)
        return self._get("/routing", {"waypoints": waypoints, "mode": provider_mode})

    def autocomplete(
        self,
        text: str,
        *,
        type: Optional[str] = None,
        lang: str = "en",
        filter: Optional[str] = None,
        bias: Optional[str] = None,
        limit: int = 5,
        format: str = "json",
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"text": text, "format": format, "lang": lang, "limit": limit}
        optional = {"type": type, "filter": filter, "bias": bias}
        params.update({key: value for key, value in optional.items() if value})
        return self._get("/geocode/autocomplete", params)

    def geocode(self, address: str) -> Optional[GeocodedAddress]:
        """Best match for ``address``, or ``None`` when the provider knows nothing."""

        data = self.autocomplete(address, limit=1)
        results = data.get("results") or []
        if not results:
            return None
        first = results[0]
        try:
            return GeocodedAddress(
                original=address,
                formatted=first.get("formatted") or address,
                coordinates=GeoPoint(lat=float(first["lat"]), lng=float(first["lon"])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise GeoapifyError(f"Malformed geocoding result for {address!r}: {exc}") from exc

    # Internal helpers -----------------------------------------------------
    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("Geoapify request %s %s", path, params)
        response = self._request_with_retry(url, {**params, "apiKey": self.api_key})
        try:
            data = response.json()
        except ValueError as exc:
            raise GeoapifyError(f"Geoapify returned invalid JSON for {path}") from exc
        if not isinstance(data, Mapping):
            raise GeoapifyError(f"Geoapify returned an unexpected {type(data).__name__} payload for {path}")
        return dict(data)

    def _request_with_retry(self, url: str, params: Dict[str, Any], base_delay: float = 0.5) -> requests.Response:
        """GET with exponential backoff and jitter on timeouts, network errors and 429/5xx."""

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.session.get(url, params=params, timeout=self.timeout)
                if resp.status_code in RETRY_STATUSES:
                    raise requests.HTTPError(f"{resp.status_code} {resp.reason}", response=resp)
                resp.raise_for_status()
                return resp
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as exc:
                response = getattr(exc, "response", None)
                retryable = response is None or response.status_code in RETRY_STATUSES
                if attempt == self.max_retries or not retryable:
                    detail = response.text[:200] if response is not None else str(exc)
                    raise GeoapifyError(f"Geoapify request failed: {detail}") from exc

                delay = base_delay * (2 ** (attempt - 1))
                delay += random.uniform(0, 0.25 * delay)
                logger.warning("Geoapify request failed (%s), retry %d in %.1fs", exc, attempt, delay)
                time.sleep(delay)
            except requests.RequestException as exc:
                raise GeoapifyError(f"Geoapify request failed: {exc}") from exc

        raise GeoapifyError("Geoapify request failed")


__all__ = [
    "GeoapifyClient",
    "GeoapifyConfigError",
    "GeoapifyError",
    "PROVIDER_MODES",
    "format_waypoints",
]
