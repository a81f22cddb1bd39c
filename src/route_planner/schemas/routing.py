"""Routing request/response schemas."""

from __future__ import annotations

from dataclasses import asdict
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Coordinate, OptimizedRouteResult, RouteStop, StopStatus


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class StopCoordinateModel(BaseModel):
    # Not range-checked here; stop validation happens in the optimizer.
    lat: Optional[float] = None
    lng: Optional[float] = None


class RouteStopModel(BaseModel):
    id: str
    sequence: int = 0
    address: str = ""
    coordinates: Optional[StopCoordinateModel] = None
    recipient_name: Optional[str] = None
    recipient_phone: Optional[str] = None
    delivery_notes: Optional[str] = None
    estimated_arrival: Optional[str] = None
    status: StopStatus = StopStatus.PENDING

    def to_domain(self) -> RouteStop:
        coordinates = None
        if self.coordinates is not None:
            coordinates = Coordinate(lat=self.coordinates.lat, lng=self.coordinates.lng)
        return RouteStop(
            id=self.id,
            coordinates=coordinates,
            sequence=self.sequence,
            address=self.address,
            recipient_name=self.recipient_name,
            recipient_phone=self.recipient_phone,
            delivery_notes=self.delivery_notes,
            estimated_arrival=self.estimated_arrival,
            status=self.status,
        )

    @classmethod
    def from_domain(cls, stop: RouteStop) -> "RouteStopModel":
        coordinates = None
        if stop.coordinates is not None:
            coordinates = StopCoordinateModel(lat=stop.coordinates.lat, lng=stop.coordinates.lng)
        return cls(
            id=stop.id,
            sequence=stop.sequence,
            address=stop.address,
            coordinates=coordinates,
            recipient_name=stop.recipient_name,
            recipient_phone=stop.recipient_phone,
            delivery_notes=stop.delivery_notes,
            estimated_arrival=stop.estimated_arrival,
            status=stop.status,
        )


class OptimizeRouteRequest(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    stops: List[RouteStopModel] = Field(default_factory=list)
    method: Optional[Literal["auto", "google", "nearest_neighbor", "manual"]] = Field(
        default=None,
        description="Optimization method. Defaults to the configured method (auto).",
    )


class RouteLegModel(BaseModel):
    distance_km: float
    duration_minutes: int
    start_address: str
    end_address: str


class OptimizeRouteResponse(BaseModel):
    method: str
    optimized_stops: List[RouteStopModel]
    total_distance_km: float
    total_duration_minutes: float
    polyline: str
    legs: List[RouteLegModel]
    fallback_reason: Optional[str] = None

    @classmethod
    def from_result(cls, result: OptimizedRouteResult) -> "OptimizeRouteResponse":
        return cls(
            method=result.method.value,
            optimized_stops=[RouteStopModel.from_domain(stop) for stop in result.optimized_stops],
            total_distance_km=result.total_distance_km,
            total_duration_minutes=result.total_duration_minutes,
            polyline=result.polyline,
            legs=[RouteLegModel(**asdict(leg)) for leg in result.legs],
            fallback_reason=result.fallback_reason,
        )


class DecodePolylineRequest(BaseModel):
    polyline: str


class PointModel(BaseModel):
    lat: float
    lng: float


class DecodePolylineResponse(BaseModel):
    coordinates: List[PointModel]
