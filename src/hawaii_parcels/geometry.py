from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import Point, Polygon

from hawaii_parcels.models import Centroid, Vertex


# Geographic center of the Hawaiian archipelago. Used whenever a parcel has no
# usable boundary so map placement always gets a position.
HAWAII_CENTER = Centroid(lat=21.0943, lng=-157.4983)


@dataclass(frozen=True)
class Envelope:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self) -> None:
        if self.max_lat < self.min_lat or self.max_lng < self.min_lng:
            raise ValueError("envelope is invalid")

    def to_esri(self) -> str:
        # ArcGIS envelope order is xmin,ymin,xmax,ymax.
        return f"{self.min_lng},{self.min_lat},{self.max_lng},{self.max_lat}"

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


def envelope_around(lat: float, lng: float, radius: float) -> Envelope:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError("lat/lng must be finite")
    if not math.isfinite(radius) or radius <= 0:
        raise ValueError("radius must be positive")
    return Envelope(
        min_lat=lat - radius,
        max_lat=lat + radius,
        min_lng=lng - radius,
        max_lng=lng + radius,
    )


def _rings(geometry: Optional[Dict[str, Any]]) -> List[Any]:
    if not isinstance(geometry, dict):
        return []
    rings = geometry.get("rings")
    if not isinstance(rings, list):
        return []
    return rings


def outer_ring(geometry: Optional[Dict[str, Any]]) -> Tuple[Vertex, ...]:
    """Return the first ring's [lng, lat] vertices, or an empty tuple."""

    rings = _rings(geometry)
    if not rings or not isinstance(rings[0], list):
        return ()
    out: List[Vertex] = []
    for pt in rings[0]:
        if (
            isinstance(pt, (list, tuple))
            and len(pt) >= 2
            and isinstance(pt[0], (int, float))
            and isinstance(pt[1], (int, float))
        ):
            out.append((float(pt[0]), float(pt[1])))
    return tuple(out)


def compute_centroid(geometry: Optional[Dict[str, Any]]) -> Centroid:
    """Vertex average of the outer ring.

    This is not an area-weighted centroid; at lot scale the difference does
    not matter and callers rely on the vertex-average value.
    """

    ring = outer_ring(geometry)
    if not ring:
        return HAWAII_CENTER
    sum_lng = 0.0
    sum_lat = 0.0
    for lng, lat in ring:
        sum_lng += lng
        sum_lat += lat
    n = len(ring)
    return Centroid(lat=sum_lat / n, lng=sum_lng / n)


def distance_to_parcel(geometry: Optional[Dict[str, Any]], lat: float, lng: float) -> float:
    """Planar distance in degrees from the point to the outer ring polygon.

    Zero when the point is inside. `math.inf` when there is no usable ring.
    """

    ring = outer_ring(geometry)
    if len(ring) < 3:
        return math.inf
    polygon = Polygon(ring)
    if not polygon.is_valid:
        polygon = polygon.buffer(0)
    if polygon.is_empty:
        return math.inf
    return float(polygon.distance(Point(lng, lat)))
