"""HTTP client for the Google Directions web service."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate
from .errors import OptimizationServiceError, ServiceUnavailableError

logger = logging.getLogger(__name__)


def format_location(coordinate: Coordinate) -> str:
    return f"{coordinate.lat},{coordinate.lng}"


def build_directions_params(
    origin: Coordinate,
    destination: Coordinate,
    waypoints: Sequence[Coordinate],
    api_key: str,
) -> dict[str, str]:
    """Query parameters for a driving route with Google's waypoint optimization enabled."""

    params = {
        "origin": format_location(origin),
        "destination": format_location(destination),
        "mode": "driving",
        "units": "metric",
        "key": api_key,
    }
    if waypoints:
        params["waypoints"] = "|".join(["optimize:true", *(format_location(point) for point in waypoints)])
    return params


class GoogleDirectionsClient:
    """Thin async wrapper around the Directions JSON endpoint.

    Sends one request per call. Retry policy, if any, belongs to the caller.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = base_url or settings.directions_base_url
        self.timeout = timeout if timeout is not None else settings.directions_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                transport=self._transport,
            )
        return self._client

    def is_ready(self) -> bool:
        """Readiness probe: an API key is configured and the client can be opened."""

        return bool(self.api_key) and not self._get_client().is_closed

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate],
    ) -> dict:
        """Request an optimized driving route and return the raw JSON payload.

        Raises:
            ServiceUnavailableError: the service could not be reached
            OptimizationServiceError: HTTP error or non-OK Directions status
        """
        params = build_directions_params(origin, destination, waypoints, self.api_key)
        client = self._get_client()
        try:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            logger.warning(f"Directions request failed with HTTP {code}")
            raise OptimizationServiceError(f"HTTP_{code}", exc.response.reason_phrase) from exc
        except httpx.TimeoutException as exc:
            logger.warning(f"Directions request timed out after {self.timeout}s")
            raise ServiceUnavailableError(f"Directions request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            logger.warning(f"Directions service unreachable: {exc}")
            raise ServiceUnavailableError(f"Failed to reach directions service: {exc}") from exc
        except ValueError as exc:
            raise OptimizationServiceError("INVALID_RESPONSE", "Response body is not valid JSON") from exc

        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            message = data.get("error_message") if isinstance(data, dict) else None
            raise OptimizationServiceError(str(status or "UNKNOWN_ERROR"), message)
        return data
