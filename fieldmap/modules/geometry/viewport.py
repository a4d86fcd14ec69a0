"""
Viewport calculation for FeatureCollections.

Walks every coordinate pair in the collection regardless of geometry type
and derives a map center and zoom level from the bounding box.
"""

import math
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from fieldmap.modules.geometry.engine import is_position

FALLBACK_LONGITUDE = -65.207
FALLBACK_LATITUDE = -26.832
DEFAULT_ZOOM = 13
MIN_ZOOM = 1
MAX_ZOOM = 20

Bounds = Tuple[float, float, float, float]


def _walk_positions(node: Any) -> Iterator[Tuple[float, float]]:
    if is_position(node):
        yield float(node[0]), float(node[1])
    elif isinstance(node, (list, tuple)):
        for child in node:
            yield from _walk_positions(child)


def _geometry_positions(geometry: Any) -> Iterator[Tuple[float, float]]:
    if not isinstance(geometry, Mapping):
        return
    if "geometries" in geometry:
        for member in geometry.get("geometries") or []:
            yield from _geometry_positions(member)
    yield from _walk_positions(geometry.get("coordinates"))


def calculate_bounds(feature_collection: Mapping[str, Any]) -> Optional[Bounds]:
    """
    Bounding box ``(min_lng, min_lat, max_lng, max_lat)`` of every position
    in the collection, or ``None`` when no position is found.
    """
    min_lng = math.inf
    min_lat = math.inf
    max_lng = -math.inf
    max_lat = -math.inf
    found = False

    for feature in feature_collection.get("features") or []:
        if not isinstance(feature, Mapping):
            continue
        for lng, lat in _geometry_positions(feature.get("geometry")):
            found = True
            min_lng = min(min_lng, lng)
            max_lng = max(max_lng, lng)
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)

    if not found:
        return None
    return min_lng, min_lat, max_lng, max_lat


def zoom_for_span(max_diff: float) -> int:
    """Zoom level that fits a span of ``max_diff`` degrees, clamped to [1, 20]."""
    if max_diff <= 0:
        return DEFAULT_ZOOM
    # half-up rounding, log2 values like 3.5 must go to 4
    zoom = math.floor(math.log2(360 / max_diff) + 0.5) + 1
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def calculate_center(feature_collection: Mapping[str, Any]) -> Dict[str, float]:
    """
    Center and zoom for a FeatureCollection.

    Returns the fixed fallback location at zoom 13 for an empty collection
    (or one without any coordinates); zoom is 13 too when every position is
    the same point.
    """
    features = feature_collection.get("features") or []
    if not features:
        return {"longitude": FALLBACK_LONGITUDE, "latitude": FALLBACK_LATITUDE, "zoom": DEFAULT_ZOOM}

    bounds = calculate_bounds(feature_collection)
    if bounds is None:
        return {"longitude": FALLBACK_LONGITUDE, "latitude": FALLBACK_LATITUDE, "zoom": DEFAULT_ZOOM}

    min_lng, min_lat, max_lng, max_lat = bounds
    max_diff = max(max_lng - min_lng, max_lat - min_lat)

    return {
        "longitude": (min_lng + max_lng) / 2,
        "latitude": (min_lat + max_lat) / 2,
        "zoom": zoom_for_span(max_diff),
    }
