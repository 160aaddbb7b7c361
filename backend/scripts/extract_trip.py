#!/usr/bin/env python3
"""
Run the trip map pipeline on a notes file and print the result as JSON.

Usage:
  python scripts/extract_trip.py notes/tokyo.txt
  python scripts/extract_trip.py notes/tokyo.txt --max-distance-km 50 --html

Needs ANTHROPIC_API_KEY and GOOGLE_MAPS_API_KEY (environment or .env).
"""
import argparse
import logging
import sys
from pathlib import Path

backend = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend))

from settings import get_settings
from tripmap.errors import TripMapError
from tripmap.extraction.extractor import PlaceExtractor
from tripmap.geocoding.client import GeocodingClient
from tripmap.trips.service import build_trip_map


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Extract and geocode places from trip notes")
    parser.add_argument("notes", type=Path, help="Plain-text trip notes")
    parser.add_argument(
        "--max-distance-km",
        type=float,
        default=settings.max_distance_km,
        help="Drop places farther than this from the destination",
    )
    parser.add_argument("--html", action="store_true", help="Print only the highlighted notes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )

    if not args.notes.exists():
        print(f"Error: notes file not found: {args.notes}", file=sys.stderr)
        return 1
    if not settings.anthropic_api_key or not settings.google_maps_api_key:
        print("Error: set ANTHROPIC_API_KEY and GOOGLE_MAPS_API_KEY", file=sys.stderr)
        return 1

    extractor = PlaceExtractor(
        api_key=settings.anthropic_api_key,
        model=settings.extraction_model,
        max_tokens=settings.extraction_max_tokens,
        timeout_seconds=settings.extraction_timeout_seconds,
    )
    geocoder = GeocodingClient(
        api_key=settings.google_maps_api_key,
        timeout_seconds=settings.geocode_timeout_seconds,
        bias_radius_m=settings.geocode_bias_radius_m,
    )
    text = args.notes.read_text(encoding="utf-8")
    try:
        trip = build_trip_map(
            text,
            extractor,
            geocoder,
            max_distance_km=args.max_distance_km,
            max_workers=settings.geocode_max_workers,
        )
    except TripMapError as e:
        print(f"Error ({e.kind}): {e.user_message}", file=sys.stderr)
        return 2

    if args.html:
        print(trip.highlighted_html)
    else:
        print(trip.model_dump_json(indent=2))
    if trip.unresolved_count:
        print(
            f"{trip.unresolved_count} of {trip.unresolved_count + len(trip.places)} places could not be located.",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
