"""Offline nearest-neighbor stop sequencing.

Used when the Google Directions service is not configured or fails. It needs
no API key and performs no I/O, trading optimality for availability.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Sequence

from ...models.domain import Coordinate, RouteStop
from ..geospatial import (
    DEFAULT_AVERAGE_SPEED_KMH,
    estimate_travel_time_minutes,
    haversine_distance_km,
    round_half_up,
)
from .errors import InvalidCoordinateError

# Straight-line distance underestimates road distance; constant, not terrain aware.
ROAD_DISTANCE_FACTOR = 1.3
# Urban average speed used for duration estimates.
AVERAGE_SPEED_KMH = DEFAULT_AVERAGE_SPEED_KMH

logger = logging.getLogger(__name__)


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and not math.isnan(value)


def validate_stops_for_optimization(stops: Sequence[RouteStop]) -> bool:
    """Return True if every stop has numeric, non-NaN coordinates."""

    return all(
        stop.coordinates is not None
        and _is_number(stop.coordinates.lat)
        and _is_number(stop.coordinates.lng)
        for stop in stops
    )


def invalid_stop_ids(stops: Sequence[RouteStop]) -> list[str]:
    return [stop.id for stop in stops if not validate_stops_for_optimization([stop])]


def _find_nearest(position: Coordinate, pool: list[RouteStop]) -> int:
    # Strict comparison keeps the first stop in pool order on ties.
    best_index = 0
    best_distance = haversine_distance_km(position, pool[0].coordinates)
    for index in range(1, len(pool)):
        distance = haversine_distance_km(position, pool[index].coordinates)
        if distance < best_distance:
            best_index = index
            best_distance = distance
    return best_index


def nearest_neighbor_sequence(origin: Coordinate, stops: Sequence[RouteStop]) -> list[RouteStop]:
    """Greedy nearest-neighbor ordering starting from ``origin``.

    Returns copies of the stops with ``sequence`` set to 1..N. The input
    stops are not modified.
    """
    if not stops:
        return []
    if len(stops) == 1:
        return [stops[0].with_sequence(1)]

    optimized: list[RouteStop] = []
    position = origin
    remaining = list(stops)

    while remaining:
        nearest = remaining.pop(_find_nearest(position, remaining))
        optimized.append(nearest.with_sequence(len(optimized) + 1))
        position = nearest.coordinates

    return optimized


async def optimize_stops_nearest_neighbor(
    origin: Coordinate,
    destination: Coordinate,
    stops: Sequence[RouteStop],
) -> list[RouteStop]:
    """Async entry point matching the external optimizer's shape.

    The destination does not influence the greedy walk; it is accepted so both
    optimizers share one call signature.
    """
    if not validate_stops_for_optimization(stops):
        raise InvalidCoordinateError(invalid_stop_ids(stops))
    optimized = nearest_neighbor_sequence(origin, stops)
    logger.debug(f"Nearest-neighbor sequenced {len(optimized)} stops")
    return optimized


def keep_entered_order(stops: Sequence[RouteStop]) -> list[RouteStop]:
    """Number the stops 1..N in the order the caller entered them."""

    return [stop.with_sequence(position) for position, stop in enumerate(stops, start=1)]


def straight_line_distance_km(origin: Coordinate, stops: Sequence[RouteStop], destination: Coordinate) -> float:
    points = [origin, *(stop.coordinates for stop in stops), destination]
    return sum(haversine_distance_km(start, end) for start, end in zip(points, points[1:]))


def calculate_total_distance(origin: Coordinate, stops: Sequence[RouteStop], destination: Coordinate) -> float:
    """Estimated road distance in whole kilometers for the ordered stops.

    Sums the haversine legs origin -> stops -> destination, applies
    ``ROAD_DISTANCE_FACTOR`` and rounds once at the end. Malformed coordinates
    yield NaN instead of raising.
    """
    return round_half_up(straight_line_distance_km(origin, stops, destination) * ROAD_DISTANCE_FACTOR)


def estimate_travel_time(distance_km: float) -> float:
    """Travel time in minutes at ``AVERAGE_SPEED_KMH``."""

    return estimate_travel_time_minutes(distance_km, AVERAGE_SPEED_KMH)
