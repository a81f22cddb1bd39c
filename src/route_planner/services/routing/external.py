"""Route optimization through the Google Directions service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Sequence, TypeVar

from ...config import settings
from ...models.domain import Coordinate, OptimizationMethod, OptimizedRouteResult, RouteLeg, RouteStop
from ..geospatial import round_half_up
from .directions_client import GoogleDirectionsClient
from .errors import (
    EmptyStopsError,
    InvalidCoordinateError,
    OptimizationCancelledError,
    OptimizationServiceError,
    TooManyStopsError,
)
from .heuristic import invalid_stop_ids, validate_stops_for_optimization
from .readiness import ReadinessGate

# Headroom under Google's own limit of 25 waypoints.
MAX_OPTIMIZATION_STOPS = 15

T = TypeVar("T")

logger = logging.getLogger(__name__)


def validate_external_stops(stops: Sequence[RouteStop], max_stops: int = MAX_OPTIMIZATION_STOPS) -> None:
    """Raise if the stops cannot be sent to the directions service."""

    if len(stops) == 0:
        raise EmptyStopsError()
    if len(stops) > max_stops:
        raise TooManyStopsError(len(stops), max_stops)
    if not validate_stops_for_optimization(stops):
        raise InvalidCoordinateError(invalid_stop_ids(stops))


def _value(section: Any) -> float:
    if isinstance(section, dict):
        return section.get("value") or 0
    return 0


def _meters_to_km(meters: float) -> float:
    return round_half_up(meters / 100) / 10


def _seconds_to_minutes(seconds: float) -> float:
    return round_half_up(seconds / 60)


def translate_directions_response(payload: dict, stops: Sequence[RouteStop]) -> OptimizedRouteResult:
    """Map a Directions API payload onto an ``OptimizedRouteResult``.

    Per-leg figures are rounded independently of the totals, so the sum of
    leg distances may differ from ``total_distance_km`` by rounding error.
    """
    routes = payload.get("routes") or []
    if not routes:
        raise OptimizationServiceError("ZERO_RESULTS", "Directions response contained no routes")
    route = routes[0]

    order = list(route.get("waypoint_order") or range(len(stops)))
    if sorted(order) != list(range(len(stops))):
        raise OptimizationServiceError(
            "INVALID_RESPONSE",
            f"waypoint_order {order} is not a permutation of {len(stops)} stops",
        )

    optimized_stops = []
    for position, original_index in enumerate(order):
        stop = stops[original_index].with_sequence(position + 1)
        # Arrival times are not returned in this request mode.
        stop.estimated_arrival = None
        optimized_stops.append(stop)

    raw_legs = route.get("legs") or []
    total_meters = sum(_value(leg.get("distance")) for leg in raw_legs)
    total_seconds = sum(_value(leg.get("duration")) for leg in raw_legs)
    legs = [
        RouteLeg(
            distance_km=_meters_to_km(_value(leg.get("distance"))),
            duration_minutes=int(_seconds_to_minutes(_value(leg.get("duration")))),
            start_address=leg.get("start_address") or "",
            end_address=leg.get("end_address") or "",
        )
        for leg in raw_legs
    ]

    overview = route.get("overview_polyline")
    polyline = (overview.get("points") if isinstance(overview, dict) else overview) or ""

    return OptimizedRouteResult(
        optimized_stops=optimized_stops,
        total_distance_km=_meters_to_km(total_meters),
        total_duration_minutes=_seconds_to_minutes(total_seconds),
        polyline=polyline,
        legs=legs,
        method=OptimizationMethod.GOOGLE,
    )


async def run_cancellable(work: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """Await ``work`` unless ``cancel_event`` is set first.

    When the event wins, the in-flight work is cancelled and
    ``OptimizationCancelledError`` is raised.
    """
    if cancel_event is None:
        return await work
    if cancel_event.is_set():
        if asyncio.iscoroutine(work):
            work.close()
        raise OptimizationCancelledError()

    task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        watcher.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    logger.info("Route optimization request cancelled by caller")
    raise OptimizationCancelledError()


class ExternalRouteOptimizer:
    """Delegates stop ordering to Google's waypoint optimization."""

    def __init__(
        self,
        client: GoogleDirectionsClient | None = None,
        readiness: ReadinessGate | None = None,
        max_stops: int | None = None,
    ) -> None:
        self.client = client or GoogleDirectionsClient()
        self.readiness = readiness or ReadinessGate(
            self.client.is_ready,
            poll_interval=settings.readiness_poll_interval_seconds,
            max_attempts=settings.readiness_max_attempts,
        )
        self.max_stops = max_stops if max_stops is not None else settings.max_optimization_stops

    async def _request(self, origin: Coordinate, destination: Coordinate, stops: Sequence[RouteStop]) -> dict:
        await self.readiness.wait()
        return await self.client.route(origin, destination, [stop.coordinates for stop in stops])

    async def optimize(
        self,
        origin: Coordinate,
        destination: Coordinate,
        stops: Sequence[RouteStop],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> OptimizedRouteResult:
        validate_external_stops(stops, self.max_stops)

        payload = await run_cancellable(self._request(origin, destination, stops), cancel_event)
        result = translate_directions_response(payload, stops)
        logger.info(
            f"Google optimized {len(stops)} stops: {result.total_distance_km} km, "
            f"{result.total_duration_minutes:.0f} min over {len(result.legs)} legs"
        )
        return result

    async def aclose(self) -> None:
        await self.client.aclose()
