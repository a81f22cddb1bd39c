"""Route optimization endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...schemas.routing import (
    DecodePolylineRequest,
    DecodePolylineResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    PointModel,
)
from ...models.domain import OptimizedRouteResult
from ...services.geospatial import decode_polyline
from ...services.outputs.routing_formatter import route_result_to_csv
from ...services.routing.errors import ServiceError
from ...services.routing.service import RouteOptimizationService
from ..dependencies import get_optimization_service

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


async def _run_optimization(payload: OptimizeRouteRequest, service: RouteOptimizationService) -> OptimizedRouteResult:
    try:
        return await service.optimize(
            payload.origin.to_domain(),
            payload.destination.to_domain(),
            [stop.to_domain() for stop in payload.stops],
            method=payload.method,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ServiceError as exc:
        logger.warning(f"Route optimization service failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc


@router.post("/optimize", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
async def optimize(
    payload: OptimizeRouteRequest,
    service: RouteOptimizationService = Depends(get_optimization_service),
) -> OptimizeRouteResponse:
    result = await _run_optimization(payload, service)
    return OptimizeRouteResponse.from_result(result)


@router.post("/optimize.csv", status_code=status.HTTP_200_OK)
async def optimize_csv(
    payload: OptimizeRouteRequest,
    service: RouteOptimizationService = Depends(get_optimization_service),
) -> Response:
    """Optimize and return the stop manifest as CSV."""
    result = await _run_optimization(payload, service)
    return Response(
        content=route_result_to_csv(result),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="route_manifest.csv"'},
    )


@router.post("/decode-polyline", response_model=DecodePolylineResponse, status_code=status.HTTP_200_OK)
def decode(payload: DecodePolylineRequest) -> DecodePolylineResponse:
    try:
        points = decode_polyline(payload.polyline)
    except IndexError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Polyline is truncated or malformed.",
        ) from exc
    return DecodePolylineResponse(coordinates=[PointModel(lat=point.lat, lng=point.lng) for point in points])
