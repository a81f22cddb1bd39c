"""Multi-stop route optimization."""

from .errors import (
    EmptyStopsError,
    InvalidCoordinateError,
    OptimizationCancelledError,
    OptimizationServiceError,
    RouteOptimizationError,
    ServiceError,
    ServiceUnavailableError,
    TooManyStopsError,
)
from .service import (
    RouteOptimizationService,
    calculate_total_distance,
    decode_polyline,
    estimate_travel_time,
    optimize_route_with_external_service,
    optimize_stops_nearest_neighbor,
    validate_stops_for_optimization,
)

__all__ = [
    "RouteOptimizationService",
    "optimize_route_with_external_service",
    "optimize_stops_nearest_neighbor",
    "calculate_total_distance",
    "estimate_travel_time",
    "decode_polyline",
    "validate_stops_for_optimization",
    "RouteOptimizationError",
    "EmptyStopsError",
    "TooManyStopsError",
    "InvalidCoordinateError",
    "ServiceError",
    "ServiceUnavailableError",
    "OptimizationServiceError",
    "OptimizationCancelledError",
]
