import asyncio

import httpx
import pytest

from route_planner.models.domain import OptimizationMethod
from route_planner.services.routing.directions_client import GoogleDirectionsClient, build_directions_params
from route_planner.services.routing.errors import (
    EmptyStopsError,
    InvalidCoordinateError,
    OptimizationCancelledError,
    OptimizationServiceError,
    ServiceUnavailableError,
    TooManyStopsError,
)
from route_planner.services.routing.external import (
    MAX_OPTIMIZATION_STOPS,
    ExternalRouteOptimizer,
    translate_directions_response,
)
from route_planner.services.routing.readiness import ReadinessGate

from conftest import make_stop


def _leg(meters: int, seconds: int, start: str, end: str) -> dict:
    return {
        "distance": {"text": f"{meters / 1000} km", "value": meters},
        "duration": {"text": f"{seconds // 60} mins", "value": seconds},
        "start_address": start,
        "end_address": end,
    }


def _ok_payload(order: list[int], legs: list[dict] | None = None) -> dict:
    return {
        "status": "OK",
        "geocoded_waypoints": [],
        "routes": [
            {
                "waypoint_order": order,
                "legs": legs or [],
                "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"},
                "summary": "Third Mainland Bridge",
            }
        ],
    }


THREE_STOP_PAYLOAD = _ok_payload(
    [2, 0, 1],
    [
        _leg(1234, 125, "Origin Rd", "Yaba"),
        _leg(2346, 250, "Yaba", "Victoria Island"),
        _leg(3456, 375, "Victoria Island", "Ikeja"),
        _leg(4567, 500, "Ikeja", "Lekki"),
    ],
)


class RecordingHandler:
    def __init__(self, response: httpx.Response | Exception) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _optimizer(handler: RecordingHandler) -> ExternalRouteOptimizer:
    client = GoogleDirectionsClient(
        api_key="test-key",
        base_url="https://maps.example.test/directions/json",
        transport=httpx.MockTransport(handler),
    )
    return ExternalRouteOptimizer(client=client, max_stops=MAX_OPTIMIZATION_STOPS)


@pytest.fixture
def three_stops():
    return [
        make_stop("ikeja", 6.6018, 3.3515, estimated_arrival="09:00"),
        make_stop("lekki", 6.4474, 3.4700, estimated_arrival="09:30"),
        make_stop("yaba", 6.5095, 3.3711, estimated_arrival="10:00"),
    ]


def test_build_directions_params(origin, destination, three_stops):
    params = build_directions_params(origin, destination, [s.coordinates for s in three_stops], "k")

    assert params["origin"] == "6.5244,3.3792"
    assert params["destination"] == "6.4698,3.5852"
    assert params["waypoints"] == "optimize:true|6.6018,3.3515|6.4474,3.47|6.5095,3.3711"
    assert params["mode"] == "driving"
    assert params["units"] == "metric"
    assert params["key"] == "k"


def test_client_requires_api_key(monkeypatch):
    from route_planner.config import settings

    monkeypatch.setattr(settings, "google_maps_api_key", None)
    with pytest.raises(ValueError):
        GoogleDirectionsClient()


def test_translation_reorders_and_rounds(three_stops):
    result = translate_directions_response(THREE_STOP_PAYLOAD, three_stops)

    assert result.method is OptimizationMethod.GOOGLE
    assert [s.id for s in result.optimized_stops] == ["yaba", "ikeja", "lekki"]
    assert [s.sequence for s in result.optimized_stops] == [1, 2, 3]
    assert all(s.estimated_arrival is None for s in result.optimized_stops)
    # Input stops are untouched
    assert three_stops[0].estimated_arrival == "09:00"

    assert result.total_distance_km == 11.6
    assert result.total_duration_minutes == 21
    assert [leg.distance_km for leg in result.legs] == [1.2, 2.3, 3.5, 4.6]
    assert [leg.duration_minutes for leg in result.legs] == [2, 4, 6, 8]
    # Legs are rounded on their own and need not add up to the totals
    assert sum(leg.duration_minutes for leg in result.legs) == 20
    assert result.legs[0].start_address == "Origin Rd"
    assert result.legs[-1].end_address == "Lekki"
    assert result.polyline == "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def test_translation_rounds_half_values_up():
    stops = [make_stop("yaba", 6.5095, 3.3711)]
    payload = _ok_payload([0], [_leg(250, 150, "Origin Rd", "Yaba")])

    result = translate_directions_response(payload, stops)

    assert result.total_distance_km == 0.3
    assert result.total_duration_minutes == 3
    assert result.legs[0].distance_km == 0.3
    assert result.legs[0].duration_minutes == 3


def test_translation_handles_missing_fields(three_stops):
    payload = {"status": "OK", "routes": [{"waypoint_order": [0, 1, 2], "legs": [{}]}]}

    result = translate_directions_response(payload, three_stops)

    assert result.polyline == ""
    assert result.total_distance_km == 0
    assert result.legs[0].start_address == ""


def test_translation_rejects_non_permutation(three_stops):
    with pytest.raises(OptimizationServiceError) as excinfo:
        translate_directions_response(_ok_payload([0, 0, 1]), three_stops)

    assert excinfo.value.status == "INVALID_RESPONSE"


@pytest.mark.asyncio
async def test_optimize_calls_service_once(origin, destination, three_stops):
    handler = RecordingHandler(httpx.Response(200, json=THREE_STOP_PAYLOAD))
    optimizer = _optimizer(handler)

    result = await optimizer.optimize(origin, destination, three_stops)
    await optimizer.aclose()

    assert len(handler.requests) == 1
    params = handler.requests[0].url.params
    assert params["waypoints"].startswith("optimize:true|")
    assert params["mode"] == "driving"
    assert params["units"] == "metric"
    assert [s.id for s in result.optimized_stops] == ["yaba", "ikeja", "lekki"]


@pytest.mark.asyncio
async def test_fifteen_stops_are_accepted(origin, destination):
    stops = [make_stop(f"S{i}", 6.4 + i / 100, 3.3 + i / 100) for i in range(15)]
    handler = RecordingHandler(httpx.Response(200, json=_ok_payload(list(reversed(range(15))))))

    result = await _optimizer(handler).optimize(origin, destination, stops)

    assert len(handler.requests) == 1
    assert [s.id for s in result.optimized_stops] == [f"S{i}" for i in reversed(range(15))]
    assert [s.sequence for s in result.optimized_stops] == list(range(1, 16))


@pytest.mark.asyncio
async def test_sixteen_stops_fail_before_network(origin, destination):
    stops = [make_stop(f"S{i}", 6.4 + i / 100, 3.3) for i in range(16)]
    handler = RecordingHandler(httpx.Response(200, json=_ok_payload([])))

    with pytest.raises(TooManyStopsError) as excinfo:
        await _optimizer(handler).optimize(origin, destination, stops)

    assert "Maximum 15 stops allowed" in str(excinfo.value)
    assert handler.requests == []


@pytest.mark.asyncio
async def test_empty_stops_rejected(origin, destination):
    handler = RecordingHandler(httpx.Response(200, json=_ok_payload([])))

    with pytest.raises(EmptyStopsError, match="At least one stop is required"):
        await _optimizer(handler).optimize(origin, destination, [])

    assert handler.requests == []


@pytest.mark.asyncio
async def test_invalid_coordinates_rejected(origin, destination):
    handler = RecordingHandler(httpx.Response(200, json=_ok_payload([0])))

    with pytest.raises(InvalidCoordinateError):
        await _optimizer(handler).optimize(origin, destination, [make_stop("bad", float("nan"), 3.3)])

    assert handler.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["ZERO_RESULTS", "MAX_WAYPOINTS_EXCEEDED", "OVER_QUERY_LIMIT"])
async def test_non_ok_status_raises(origin, destination, three_stops, status):
    handler = RecordingHandler(httpx.Response(200, json={"status": status, "routes": []}))

    with pytest.raises(OptimizationServiceError) as excinfo:
        await _optimizer(handler).optimize(origin, destination, three_stops)

    assert excinfo.value.status == status


@pytest.mark.asyncio
async def test_request_denied_carries_message(origin, destination, three_stops):
    body = {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid.", "routes": []}
    handler = RecordingHandler(httpx.Response(200, json=body))

    with pytest.raises(OptimizationServiceError) as excinfo:
        await _optimizer(handler).optimize(origin, destination, three_stops)

    assert excinfo.value.service_message == "The provided API key is invalid."
    assert "REQUEST_DENIED" in str(excinfo.value)


@pytest.mark.asyncio
async def test_http_error_raises_service_error(origin, destination, three_stops):
    handler = RecordingHandler(httpx.Response(500, text="boom"))

    with pytest.raises(OptimizationServiceError) as excinfo:
        await _optimizer(handler).optimize(origin, destination, three_stops)

    assert excinfo.value.status == "HTTP_500"


@pytest.mark.asyncio
async def test_network_failure_raises_unavailable(origin, destination, three_stops):
    handler = RecordingHandler(httpx.ConnectError("connection refused"))

    with pytest.raises(ServiceUnavailableError):
        await _optimizer(handler).optimize(origin, destination, three_stops)


@pytest.mark.asyncio
async def test_readiness_timeout_raises_before_request(origin, destination, three_stops):
    handler = RecordingHandler(httpx.Response(200, json=THREE_STOP_PAYLOAD))
    optimizer = _optimizer(handler)

    async def no_wait(_seconds: float) -> None:
        return None

    optimizer.readiness = ReadinessGate(lambda: False, max_attempts=3, sleep=no_wait)

    with pytest.raises(ServiceUnavailableError):
        await optimizer.optimize(origin, destination, three_stops)

    assert handler.requests == []


class HangingClient:
    """Directions client whose request never completes."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    def is_ready(self) -> bool:
        return True

    async def route(self, origin, destination, waypoints):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise

    async def aclose(self) -> None:
        return None


@pytest.mark.asyncio
async def test_cancel_before_request(origin, destination, three_stops):
    handler = RecordingHandler(httpx.Response(200, json=THREE_STOP_PAYLOAD))
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(OptimizationCancelledError):
        await _optimizer(handler).optimize(origin, destination, three_stops, cancel_event=cancel)

    assert handler.requests == []


@pytest.mark.asyncio
async def test_cancel_in_flight_request(origin, destination, three_stops):
    client = HangingClient()
    optimizer = ExternalRouteOptimizer(client=client, max_stops=15)
    cancel = asyncio.Event()

    task = asyncio.create_task(optimizer.optimize(origin, destination, three_stops, cancel_event=cancel))
    await client.started.wait()
    cancel.set()

    with pytest.raises(OptimizationCancelledError):
        await task
    assert client.cancelled is True
