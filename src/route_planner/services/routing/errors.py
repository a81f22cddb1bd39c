"""Exceptions raised by the route optimization services."""

from __future__ import annotations


class RouteOptimizationError(Exception):
    """Base exception for route optimization."""

    def __init__(self, message: str | None = None):
        self.message = message or "Route optimization failed"
        super().__init__(self.message)


class StopValidationError(RouteOptimizationError, ValueError):
    """Raised when the caller supplies stops that cannot be optimized."""


class EmptyStopsError(StopValidationError):
    def __init__(self, message: str | None = None):
        super().__init__(message or "At least one stop is required for optimization")


class TooManyStopsError(StopValidationError):
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(f"Maximum {limit} stops allowed (got {count})")


class InvalidCoordinateError(StopValidationError):
    def __init__(self, stop_ids: list[str] | None = None):
        self.stop_ids = list(stop_ids or [])
        detail = f": {', '.join(self.stop_ids)}" if self.stop_ids else ""
        super().__init__(f"Stops are missing valid coordinates{detail}")


class ServiceError(RouteOptimizationError):
    """Raised when the external optimization service cannot produce a route."""


class ServiceUnavailableError(ServiceError):
    def __init__(self, message: str | None = None):
        super().__init__(message or "Route optimization service is not available")


class OptimizationServiceError(ServiceError):
    """The directions service answered with a non-OK status."""

    def __init__(self, status: str, message: str | None = None):
        self.status = status
        self.service_message = message
        text = f"Directions service error: {status}"
        if message:
            text = f"{text} ({message})"
        super().__init__(text)


class OptimizationCancelledError(RouteOptimizationError):
    def __init__(self, message: str | None = None):
        super().__init__(message or "Route optimization was cancelled")
