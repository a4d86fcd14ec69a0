"""
Polygon geometry helpers: ring centroid and geodesic area.

Coordinates follow GeoJSON ordering, [longitude, latitude].
"""

import math
import numbers
from typing import Any, List, Sequence, Tuple

# Spherical earth using the WGS84 semi-major axis. Stored plot areas are
# calibrated against this approximation, keep it as is.
EARTH_RADIUS_M = 6378137.0
SQUARE_METERS_PER_HECTARE = 10000.0
AREA_DECIMALS = 4

# (lat, lon) returned when there is nothing to average
FALLBACK_CENTROID: Tuple[float, float] = (-26.83, -65.20)


def _to_radians(degrees: float) -> float:
    return degrees * math.pi / 180


def is_position(value: Any) -> bool:
    """True for a [longitude, latitude, ...] sequence of real numbers."""
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and isinstance(value[0], numbers.Real) and not isinstance(value[0], bool)
        and isinstance(value[1], numbers.Real) and not isinstance(value[1], bool)
    )


def _positions(ring: Any) -> List[Sequence[float]]:
    # malformed entries are skipped, never indexed
    if not isinstance(ring, (list, tuple)):
        return []
    return [point for point in ring if is_position(point)]


def _is_closed(ring: Sequence[Sequence[float]]) -> bool:
    first, last = ring[0], ring[-1]
    return first[0] == last[0] and first[1] == last[1]


def _vertex_mean(points: Sequence[Sequence[float]]) -> Tuple[float, float]:
    count = len(points)
    sum_lng = sum(p[0] for p in points)
    sum_lat = sum(p[1] for p in points)
    return sum_lat / count, sum_lng / count


def compute_ring_centroid(ring: Sequence[Sequence[float]]) -> Tuple[float, float]:
    """
    Area-weighted centroid of the polygon bounded by ``ring``.

    Uses the shoelace centroid formula over the distinct vertices of the
    ring (a repeated closing point is ignored). Zero-area rings fall back to
    the mean of their vertices. Entries that are not [lon, lat] number
    pairs are skipped; a ring with no usable point returns
    ``FALLBACK_CENTROID``.

    Args:
        ring: Sequence of [longitude, latitude] points, closed or open.

    Returns:
        ``(latitude, longitude)``. The order is swapped on purpose, map
        widgets take lat/lng.
    """
    ring = _positions(ring)
    n = len(ring)
    if n == 0:
        return FALLBACK_CENTROID

    m = n - 1 if _is_closed(ring) else n
    if m == 0:
        # single point, or a point repeated as its own closure
        return _vertex_mean(ring)

    area = 0.0
    cx = 0.0
    cy = 0.0
    for i in range(m):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[(i + 1) % m][0], ring[(i + 1) % m][1]
        cross = xi * yj - xj * yi
        area += cross
        cx += (xi + xj) * cross
        cy += (yi + yj) * cross

    area = area / 2
    if area == 0:
        return _vertex_mean(ring[:m])

    return cy / (6 * area), cx / (6 * area)


def compute_polygon_centroid(coordinates: Sequence[Sequence[Sequence[float]]]) -> Tuple[float, float]:
    """Centroid of a Polygon's exterior ring, as ``(latitude, longitude)``."""
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        return FALLBACK_CENTROID
    return compute_ring_centroid(coordinates[0])


def compute_polygon_area_hectares(coordinates: Sequence[Sequence[Sequence[float]]]) -> float:
    """
    Geodesic area of a Polygon's exterior ring in hectares.

    Spherical excess approximation:
    area = |sum((lon2 - lon1) * (sin(lat1) + sin(lat2)))| * R^2 / 2

    Holes (``coordinates[1:]``) are ignored. The ring may be open or closed,
    the closing edge of a closed ring has zero length and adds nothing.

    Args:
        coordinates: GeoJSON Polygon coordinates, list of rings.

    Returns:
        Area in hectares rounded to 4 decimals, 0 for empty input or rings
        with fewer than 3 usable points (malformed positions are skipped).
    """
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        return 0.0

    ring = _positions(coordinates[0])
    if len(ring) < 3:
        return 0.0

    n = len(ring)
    total = 0.0
    for i in range(n):
        lon1, lat1 = ring[i][0], ring[i][1]
        lon2, lat2 = ring[(i + 1) % n][0], ring[(i + 1) % n][1]
        total += (_to_radians(lon2) - _to_radians(lon1)) * (
            math.sin(_to_radians(lat1)) + math.sin(_to_radians(lat2))
        )

    area_m2 = abs(total) * EARTH_RADIUS_M * EARTH_RADIUS_M / 2
    return round(area_m2 / SQUARE_METERS_PER_HECTARE, AREA_DECIMALS)
