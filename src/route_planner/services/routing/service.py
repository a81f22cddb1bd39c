"""Routing orchestration service."""

from __future__ import annotations

import asyncio
import logging
from typing import Literal, Sequence

from ...config import settings
from ...models.domain import Coordinate, OptimizationMethod, OptimizedRouteResult, RouteStop
from ..geospatial import decode_polyline
from .errors import (
    EmptyStopsError,
    InvalidCoordinateError,
    ServiceError,
    ServiceUnavailableError,
    TooManyStopsError,
)
from .external import ExternalRouteOptimizer, validate_external_stops
from .heuristic import (
    calculate_total_distance,
    estimate_travel_time,
    invalid_stop_ids,
    keep_entered_order,
    optimize_stops_nearest_neighbor,
    validate_stops_for_optimization,
)

MethodName = Literal["auto", "google", "nearest_neighbor", "manual"]

logger = logging.getLogger(__name__)

__all__ = [
    "RouteOptimizationService",
    "calculate_total_distance",
    "decode_polyline",
    "estimate_travel_time",
    "optimize_route_with_external_service",
    "optimize_stops_nearest_neighbor",
    "validate_stops_for_optimization",
]


def _build_external_optimizer() -> ExternalRouteOptimizer | None:
    if not settings.google_maps_api_key:
        return None
    try:
        return ExternalRouteOptimizer()
    except ValueError as exc:
        logger.error(f"External route optimizer initialization failed: {exc}")
        return None


def _heuristic_result(
    origin: Coordinate,
    destination: Coordinate,
    ordered: list[RouteStop],
    method: OptimizationMethod,
    fallback_reason: str | None = None,
) -> OptimizedRouteResult:
    distance_km = calculate_total_distance(origin, ordered, destination)
    return OptimizedRouteResult(
        optimized_stops=ordered,
        total_distance_km=distance_km,
        total_duration_minutes=estimate_travel_time(distance_km),
        polyline="",
        legs=[],
        method=method,
        fallback_reason=fallback_reason,
    )


class RouteOptimizationService:
    """Chooses between Google optimization and the offline heuristic.

    ``method="auto"`` tries Google when it is configured and falls back to the
    nearest-neighbor heuristic on service errors or when the stop count is
    outside what Google accepts. ``method="google"`` propagates those errors.
    An empty stop list under ``"auto"`` goes straight to the direct route.
    """

    def __init__(self, external: ExternalRouteOptimizer | None = None, *, use_settings: bool = True) -> None:
        if external is None and use_settings:
            external = _build_external_optimizer()
        self.external = external

    @property
    def external_configured(self) -> bool:
        return self.external is not None

    async def optimize(
        self,
        origin: Coordinate,
        destination: Coordinate,
        stops: Sequence[RouteStop],
        *,
        method: MethodName | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OptimizedRouteResult:
        method = method or settings.default_optimization_method
        if not validate_stops_for_optimization(stops):
            raise InvalidCoordinateError(invalid_stop_ids(stops))

        if method == "manual":
            return _heuristic_result(origin, destination, keep_entered_order(stops), OptimizationMethod.MANUAL)

        fallback_reason = None
        # Without stops the route is origin -> destination and there is nothing to optimize
        if method == "google" or (method == "auto" and stops):
            if self.external is None:
                if method == "google":
                    raise ServiceError("Google route optimization is not configured")
                fallback_reason = "external optimizer not configured"
            else:
                try:
                    return await self.external.optimize(origin, destination, stops, cancel_event=cancel_event)
                except (ServiceError, EmptyStopsError, TooManyStopsError) as exc:
                    if method == "google":
                        raise
                    fallback_reason = exc.message
                    logger.warning(f"Google optimization unavailable, using nearest-neighbor fallback: {exc}")

        ordered = await optimize_stops_nearest_neighbor(origin, destination, stops)
        result = _heuristic_result(
            origin, destination, ordered, OptimizationMethod.NEAREST_NEIGHBOR, fallback_reason
        )
        logger.info(
            f"Nearest-neighbor optimized {len(ordered)} stops: ~{result.total_distance_km:.0f} km, "
            f"~{result.total_duration_minutes:.0f} min"
        )
        return result

    async def aclose(self) -> None:
        if self.external is not None:
            await self.external.aclose()


async def optimize_route_with_external_service(
    origin: Coordinate,
    destination: Coordinate,
    stops: Sequence[RouteStop],
    *,
    optimizer: ExternalRouteOptimizer | None = None,
    cancel_event: asyncio.Event | None = None,
) -> OptimizedRouteResult:
    """Optimize through Google. Errors propagate so the caller can fall back."""

    if optimizer is not None:
        return await optimizer.optimize(origin, destination, stops, cancel_event=cancel_event)
    validate_external_stops(stops, settings.max_optimization_stops)
    try:
        owned = ExternalRouteOptimizer()
    except ValueError as exc:
        raise ServiceUnavailableError(str(exc)) from exc
    try:
        return await owned.optimize(origin, destination, stops, cancel_event=cancel_event)
    finally:
        await owned.aclose()
