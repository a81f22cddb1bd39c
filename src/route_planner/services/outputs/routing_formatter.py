"""Serializers for optimized route outputs."""

from __future__ import annotations

import csv
import io

from ...models.domain import OptimizedRouteResult


def route_result_to_csv(result: OptimizedRouteResult) -> str:
    """Stop manifest with one row per stop in visit order.

    Leg columns are filled only when the directions service supplied legs;
    leg ``i`` ends at stop ``i``.
    """
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "address",
        "lat",
        "lng",
        "recipient_name",
        "recipient_phone",
        "leg_distance_km",
        "leg_duration_minutes",
        "method",
        "total_distance_km",
        "total_duration_minutes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for index, stop in enumerate(result.optimized_stops):
        leg = result.legs[index] if index < len(result.legs) else None
        writer.writerow(
            {
                "sequence": stop.sequence,
                "stop_id": stop.id,
                "address": stop.address,
                "lat": stop.coordinates.lat if stop.coordinates else "",
                "lng": stop.coordinates.lng if stop.coordinates else "",
                "recipient_name": stop.recipient_name or "",
                "recipient_phone": stop.recipient_phone or "",
                "leg_distance_km": leg.distance_km if leg else "",
                "leg_duration_minutes": leg.duration_minutes if leg else "",
                "method": result.method.value,
                "total_distance_km": result.total_distance_km,
                "total_duration_minutes": result.total_duration_minutes,
            }
        )
    return buffer.getvalue()
