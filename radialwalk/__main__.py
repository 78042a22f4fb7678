#!/usr/bin/env python3
"""
radialwalk - find points about 5 km away on foot in every cardinal direction

Usage:
    python -m radialwalk --lat LAT --lon LON [options]
    python -m radialwalk --search QUERY [options]
    python -m radialwalk --serve [--lat LAT --lon LON | --search QUERY]

Options:
    --lat LAT         Origin latitude
    --lon LON         Origin longitude
    --search QUERY    Geocode QUERY and use the best match as origin
    --serve           Run the interactive map in the browser
    --html FILE       Write the result as an interactive HTML map
    --json FILE       Write the result as JSON
    --log FILE        Log file path (default: radialwalk_TIMESTAMP.log)
    --target-km KM    Seed distance for each direction (default: 5.0)
    --min-km KM       Shortest accepted walking distance (default: 4.0)
    --max-km KM       Longest accepted walking distance (default: 6.0)
    --delay SECONDS   Pause between directions (default: 1.0)
"""

import argparse
import json
import sys
from datetime import datetime
from typing import Optional

from .config import CONFIG
from .discovery import RadialDiscoveryEngine
from .errors import GeocodingError, InvalidCoordinate
from .geocoding import PlaceResolver
from .logger import Logger
from .models import Coordinate
from .pacing import Pacer, RateLimiter
from .routing import RouteResolver
from .session import MapSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="radialwalk - find points about 5 km away on foot in every cardinal direction"
    )
    parser.add_argument("--lat", type=float, metavar="LAT",
                        help="Origin latitude")
    parser.add_argument("--lon", type=float, metavar="LON",
                        help="Origin longitude")
    parser.add_argument("--search", metavar="QUERY",
                        help="Search for a place and use it as origin")
    parser.add_argument("--serve", action="store_true",
                        help="Run the interactive map in the browser")
    parser.add_argument("--no-browser", action="store_true",
                        help="Do not open a browser window with --serve")
    parser.add_argument("--html", metavar="FILE",
                        help="Write the result as an interactive HTML map")
    parser.add_argument("--json", metavar="FILE",
                        help="Write the result as JSON")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: radialwalk_TIMESTAMP.log)")
    parser.add_argument("--target-km", type=float, default=CONFIG["target_km"],
                        help=f"Seed distance per direction in km (default: {CONFIG['target_km']})")
    parser.add_argument("--min-km", type=float, default=CONFIG["min_km"],
                        help=f"Shortest accepted walking distance (default: {CONFIG['min_km']})")
    parser.add_argument("--max-km", type=float, default=CONFIG["max_km"],
                        help=f"Longest accepted walking distance (default: {CONFIG['max_km']})")
    parser.add_argument("--delay", type=float, default=CONFIG["pacing_delay"],
                        help=f"Seconds between directions (default: {CONFIG['pacing_delay']})")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace):
    # Validate lat/lon - must provide both or neither
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be used together")
    has_origin = args.lat is not None or args.search
    if args.lat is not None and args.search:
        parser.error("use either --lat/--lon or --search, not both")
    if not args.serve and not has_origin:
        parser.error("an origin is required: --lat/--lon or --search (or use --serve)")
    if args.min_km > args.max_km:
        parser.error("--min-km must not exceed --max-km")
    if args.target_km <= 0:
        parser.error("--target-km must be positive")
    if args.delay < 0:
        parser.error("--delay must not be negative")


def build_session(args: argparse.Namespace, logger: Logger) -> MapSession:
    limiter = RateLimiter()
    routes = RouteResolver(logger=logger, rate_limiter=limiter)
    places = PlaceResolver(logger=logger, rate_limiter=limiter)
    engine = RadialDiscoveryEngine(
        routes=routes,
        places=places,
        pacer=Pacer(args.delay),
        logger=logger,
        target_km=args.target_km,
        min_km=args.min_km,
        max_km=args.max_km,
    )
    return MapSession(engine=engine, places=places, logger=logger)


def print_results(session: MapSession):
    snapshot = session.snapshot()
    for marker in snapshot["markers"]:
        lat, lon = marker["position"]
        print(f"\nOrigin: {marker['name']} ({lat:.5f}, {lon:.5f})")
    if not snapshot["flags"]:
        print("No walkable points found in the accepted distance band.")
        return
    for flag in snapshot["flags"]:
        lat, lon = flag["position"]
        print(f"  {flag['direction_label']:<6} ({flag['distance_km']:.2f}km) "
              f"{lat:.5f}, {lon:.5f} - {flag['name']}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)

    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"radialwalk_{timestamp}.log"
    logger = Logger(log_path)

    try:
        session = build_session(args, logger)

        if args.serve:
            from .server import MapServer
            server = MapServer(session, open_browser=not args.no_browser)
            logger.callback = server.send_log
            if args.lat is not None:
                session.center = Coordinate(args.lat, args.lon)
            elif args.search:
                place = session.places.search(args.search)
                if place is None:
                    print(f"No results found for: {args.search}")
                    return 1
                session.center = place.position
                session.zoom = CONFIG["search_zoom"]
            server.serve_forever()
            return 0

        if args.search:
            marker = session.search(args.search, background=False)
            if marker is None:
                print(f"No results found for: {args.search}")
                return 1
        else:
            session.add_marker(Coordinate(args.lat, args.lon), background=False)

        print_results(session)

        if args.json:
            with open(args.json, "w", encoding="utf-8") as f:
                json.dump(session.snapshot(), f, indent=2, ensure_ascii=False)
            print(f"\nResult saved to: {args.json}")

        if args.html:
            from .map_view import save_map
            save_map(session.snapshot(), args.html)
            print(f"\nMap saved to: {args.html}")

        return 0
    except InvalidCoordinate as e:
        print(f"Invalid coordinate: {e}")
        return 2
    except GeocodingError as e:
        print(f"Search error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.log("Interrupted by user")
        return 130
    finally:
        logger.close()


if __name__ == "__main__":
    sys.exit(main())
