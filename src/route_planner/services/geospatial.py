"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
POLYLINE_PRECISION = 1e5
DEFAULT_AVERAGE_SPEED_KMH = 40.0


def to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def to_degrees(radians: float) -> float:
    return radians * (180 / math.pi)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = to_radians(lat1), to_radians(lat2)
    d_phi = to_radians(lat2 - lat1)
    d_lambda = to_radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers."""

    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def is_valid_coordinate(coordinate: Coordinate | None) -> bool:
    """Return True if the coordinate is finite and inside the lat/lng ranges."""

    if coordinate is None:
        return False
    lat, lng = coordinate.lat, coordinate.lng
    if not all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in (lat, lng)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(encoded: str) -> list[Coordinate]:
    """Decode a Google encoded polyline into coordinates.

    Each value is a zig-zag encoded delta split into 5-bit chunks, least
    significant first, with ``0x20`` as the continuation bit and 63 added to
    every chunk. Latitude and longitude alternate and are scaled by 1e5.

    Args:
        encoded: Encoded polyline string (may be empty)

    Returns:
        Ordered list of decoded coordinates
    """
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        lat += dlat
        dlng, index = _decode_value(encoded, index)
        lng += dlng
        coordinates.append(Coordinate(lat=lat / POLYLINE_PRECISION, lng=lng / POLYLINE_PRECISION))

    return coordinates


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values, like JavaScript's Math.round.

    Python's built-in ``round`` sends ties to the even neighbour, which gives
    46 rather than 47 minutes for 31 km at 40 km/h.
    """
    if not math.isfinite(value):
        return value
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def estimate_travel_time_minutes(distance_km: float, avg_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH) -> float:
    """Linear travel time estimate in whole minutes. NaN input yields NaN."""

    minutes = distance_km / avg_speed_kmh * 60
    if not math.isfinite(minutes):
        return minutes
    return round_half_up(minutes)
