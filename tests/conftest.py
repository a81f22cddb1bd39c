import pytest

from route_planner.models.domain import Coordinate, RouteStop

LAGOS_ORIGIN = Coordinate(lat=6.5244, lng=3.3792)
LAGOS_DESTINATION = Coordinate(lat=6.4698, lng=3.5852)


def make_stop(sid: str, lat: float, lng: float, **extra) -> RouteStop:
    return RouteStop(id=sid, coordinates=Coordinate(lat=lat, lng=lng), address=f"{sid} street", **extra)


@pytest.fixture
def origin() -> Coordinate:
    return LAGOS_ORIGIN


@pytest.fixture
def destination() -> Coordinate:
    return LAGOS_DESTINATION


@pytest.fixture
def lagos_stops() -> list[RouteStop]:
    return [
        make_stop("victoria-island", 6.4281, 3.4219),
        make_stop("ikeja", 6.6018, 3.3515),
        make_stop("yaba", 6.5095, 3.3711),
        make_stop("lekki", 6.4474, 3.4700),
    ]
