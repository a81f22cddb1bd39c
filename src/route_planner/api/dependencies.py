"""FastAPI dependency providers."""

from __future__ import annotations

from functools import lru_cache

from ..services.routing.service import RouteOptimizationService


@lru_cache(maxsize=1)
def get_optimization_service() -> RouteOptimizationService:
    return RouteOptimizationService()
