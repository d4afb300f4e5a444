#!/usr/bin/env python3
"""Run one commute analysis against the live Geoapify API and print the scores."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--home", required=True, help="Home address")
    parser.add_argument("--building", required=True, help='Microsoft building, e.g. "BUILDING 109"')
    parser.add_argument("--lat", type=float, help="Home latitude (skips geocoding)")
    parser.add_argument("--lng", type=float, help="Home longitude (skips geocoding)")
    parser.add_argument("--bike", action="store_true")
    parser.add_argument("--walk", action="store_true")
    parser.add_argument("--connector", action="store_true")
    parser.add_argument("--imperial", action="store_true")
    parser.add_argument("--render", action="store_true", help="Write a Folium map under data/views")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    _ensure_src_on_path()
    from commute_insights_api.models.domain import GeoPoint
    from commute_insights_api.services.catalogue import ConnectorCatalogue
    from commute_insights_api.services.geoapify import GeoapifyClient
    from commute_insights_api.services.pipeline import CommuteAnalysisService
    from commute_insights_api.services.scoring import transport_mode_name

    args = _parse_args(argv)
    home_location = None
    if args.lat is not None and args.lng is not None:
        home_location = GeoPoint(lat=args.lat, lng=args.lng)

    service = CommuteAnalysisService(ConnectorCatalogue.from_settings(), GeoapifyClient())
    analysis = service.analyze(
        args.home,
        args.building,
        home_location=home_location,
        enable_bike=args.bike,
        enable_walk=args.walk,
        enable_connector=args.connector,
        units="imperial" if args.imperial else "metric",
        render_map=args.render,
    )

    for score in analysis.scores:
        print(
            f"{transport_mode_name(score.mode):<10} {score.score:>3}  "
            f"{score.time_formatted:>10}  {score.distance_formatted:>10}"
        )
    for failure in analysis.failed_modes:
        print(f"{transport_mode_name(failure.mode):<10}   -  {failure.error}")
    print(f"Overall    {analysis.overall_score:>3}")
    if analysis.scoring_stop:
        print(f"Connector stop: {analysis.scoring_stop.name} ({analysis.scoring_stop.walking_time_minutes} min walk)")
    if analysis.map_file:
        print(f"Map written to {analysis.map_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
