"""Domain models for delivery stops and optimized routes."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class StopStatus(str, Enum):
    """Delivery progress of a stop, owned by the caller."""

    PENDING = "pending"
    ARRIVED = "arrived"
    COMPLETED = "completed"
    FAILED = "failed"


class OptimizationMethod(str, Enum):
    MANUAL = "manual"
    NEAREST_NEIGHBOR = "nearest_neighbor"
    GOOGLE = "google"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(slots=True)
class RouteStop:
    """A delivery stop supplied by the caller.

    Only ``sequence`` (and ``estimated_arrival`` on the external path) is
    rewritten by the optimizers; every other field passes through untouched.
    """

    id: str
    coordinates: Optional[Coordinate]
    sequence: int = 0
    address: str = ""
    recipient_name: Optional[str] = None
    recipient_phone: Optional[str] = None
    delivery_notes: Optional[str] = None
    estimated_arrival: Optional[str] = None
    status: StopStatus = StopStatus.PENDING

    def with_sequence(self, sequence: int) -> "RouteStop":
        return replace(self, sequence=sequence)


@dataclass(slots=True)
class RouteLeg:
    distance_km: float
    duration_minutes: int
    start_address: str
    end_address: str


@dataclass(slots=True)
class OptimizedRouteResult:
    optimized_stops: List[RouteStop]
    total_distance_km: float
    total_duration_minutes: float
    polyline: str = ""
    legs: List[RouteLeg] = field(default_factory=list)
    method: OptimizationMethod = OptimizationMethod.NEAREST_NEIGHBOR
    fallback_reason: Optional[str] = None
