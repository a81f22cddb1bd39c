#!/usr/bin/env python3
"""Manual check that the Google Directions optimizer is configured and reachable."""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from route_planner.config import settings
from route_planner.models.domain import Coordinate, RouteStop
from route_planner.services.routing.errors import RouteOptimizationError
from route_planner.services.routing.external import ExternalRouteOptimizer
from route_planner.services.routing.heuristic import calculate_total_distance, nearest_neighbor_sequence

# Lagos, Nigeria
ORIGIN = Coordinate(lat=6.5244, lng=3.3792)
DESTINATION = Coordinate(lat=6.4698, lng=3.5852)
STOPS = [
    RouteStop(id="ikeja", coordinates=Coordinate(lat=6.6018, lng=3.3515)),
    RouteStop(id="yaba", coordinates=Coordinate(lat=6.5095, lng=3.3711)),
    RouteStop(id="victoria-island", coordinates=Coordinate(lat=6.4281, lng=3.4219)),
]


async def run_check() -> int:
    print("=" * 60)
    print("Google Directions Optimization Check")
    print("=" * 60)
    print()

    print("1. Offline nearest-neighbor optimizer...")
    ordered = nearest_neighbor_sequence(ORIGIN, STOPS)
    print(f"   [OK] Order: {', '.join(stop.id for stop in ordered)}")
    print(f"   [OK] Estimated distance: {calculate_total_distance(ORIGIN, ordered, DESTINATION):.0f} km")
    print()

    print("2. Checking Google configuration...")
    if not settings.google_maps_api_key:
        print("   [ERROR] ROUTE_GOOGLE_MAPS_API_KEY is not configured")
        print("   Please set it in your .env file")
        return 1
    print(f"   [OK] Directions endpoint: {settings.directions_base_url}")
    print()

    print("3. Requesting an optimized route...")
    optimizer = ExternalRouteOptimizer()
    try:
        result = await optimizer.optimize(ORIGIN, DESTINATION, STOPS)
    except RouteOptimizationError as e:
        print(f"   [ERROR] {e}")
        return 1
    finally:
        await optimizer.aclose()

    print(f"   [OK] Order: {', '.join(stop.id for stop in result.optimized_stops)}")
    print(f"   [OK] Distance: {result.total_distance_km} km, duration: {result.total_duration_minutes:.0f} min")
    print(f"   [OK] Legs: {len(result.legs)}, polyline length: {len(result.polyline)}")
    print()
    print("=" * 60)
    print("[SUCCESS] Google Directions optimization is working!")
    print("=" * 60)
    return 0


def main() -> int:
    return asyncio.run(run_check())


if __name__ == "__main__":
    sys.exit(main())
