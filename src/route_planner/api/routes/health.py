"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.routing.service import RouteOptimizationService
from ..dependencies import get_optimization_service

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/directions", status_code=status.HTTP_200_OK)
def health_directions(service: RouteOptimizationService = Depends(get_optimization_service)) -> dict:
    """Report which optimization path requests will take."""
    configured = service.external_configured
    return {
        "service": "google_directions",
        "configured": configured,
        "fallback": "nearest_neighbor",
        "message": "Google waypoint optimization enabled."
        if configured
        else "Google Maps API key not set (ROUTE_GOOGLE_MAPS_API_KEY); using nearest-neighbor optimization.",
    }
