import math

import pytest
from shapely.geometry import Polygon

from fieldmap.modules.geometry.engine import (
    EARTH_RADIUS_M,
    FALLBACK_CENTROID,
    compute_polygon_area_hectares,
    compute_polygon_centroid,
    compute_ring_centroid,
)

UNIT_SQUARE = [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]

# ~0.01 degree square near San Miguel de Tucuman
TUCUMAN_SQUARE = [
    [-65.20, -26.83],
    [-65.19, -26.83],
    [-65.19, -26.82],
    [-65.20, -26.82],
    [-65.20, -26.83],
]


def _lat_band_area_ha(lon_span, lat1, lat2):
    # exact spherical area of a lat/lon rectangle
    d_lon = lon_span * math.pi / 180
    d_sin = abs(math.sin(lat2 * math.pi / 180) - math.sin(lat1 * math.pi / 180))
    return EARTH_RADIUS_M ** 2 * d_lon * d_sin / 10000


# --- centroid ---

def test_unit_square_centroid_is_lat_lon_swapped():
    assert compute_ring_centroid(UNIT_SQUARE) == pytest.approx((0.5, 0.5))


def test_centroid_output_order_is_latitude_first():
    ring = [[10, 0], [12, 0], [12, 2], [10, 2], [10, 0]]
    lat, lon = compute_ring_centroid(ring)
    assert lat == pytest.approx(1.0)
    assert lon == pytest.approx(11.0)


def test_triangle_centroid():
    lat, lon = compute_ring_centroid([[0, 0], [4, 0], [0, 3]])
    assert lon == pytest.approx(4 / 3)
    assert lat == pytest.approx(1.0)


def test_centroid_same_for_open_and_closed_ring():
    assert compute_ring_centroid(TUCUMAN_SQUARE) == compute_ring_centroid(TUCUMAN_SQUARE[:-1])


def test_centroid_independent_of_winding():
    clockwise = list(reversed(TUCUMAN_SQUARE))
    assert compute_ring_centroid(clockwise) == pytest.approx(compute_ring_centroid(TUCUMAN_SQUARE))


@pytest.mark.parametrize("ring", [
    [[0, 0], [4, 0], [5, 3], [2, 5], [-1, 2], [0, 0]],
    [[-65.21, -26.84], [-65.18, -26.835], [-65.17, -26.81], [-65.2, -26.8]],
])
def test_convex_centroid_matches_shapely_and_lies_in_bbox(ring):
    lat, lon = compute_ring_centroid(ring)
    expected = Polygon(ring).centroid

    assert lon == pytest.approx(expected.x, abs=1e-6)
    assert lat == pytest.approx(expected.y, abs=1e-6)

    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    assert min(lons) <= lon <= max(lons)
    assert min(lats) <= lat <= max(lats)


def test_empty_ring_returns_default_location():
    assert compute_ring_centroid([]) == FALLBACK_CENTROID


def test_collinear_ring_falls_back_to_vertex_mean():
    assert compute_ring_centroid([[0, 0], [1, 1], [2, 2]]) == pytest.approx((1.0, 1.0))


def test_collinear_closed_ring_ignores_closing_point_in_mean():
    # the repeated [0, 0] must not pull the mean
    assert compute_ring_centroid([[0, 0], [3, 0], [6, 0], [0, 0]]) == pytest.approx((0.0, 3.0))


def test_single_point_ring():
    assert compute_ring_centroid([[3, 4]]) == (4.0, 3.0)
    assert compute_ring_centroid([[3, 4], [3, 4]]) == (4.0, 3.0)


def test_polygon_centroid_uses_exterior_ring():
    hole = [[0.2, 0.2], [0.4, 0.2], [0.4, 0.4], [0.2, 0.4], [0.2, 0.2]]
    assert compute_polygon_centroid([UNIT_SQUARE, hole]) == pytest.approx((0.5, 0.5))
    assert compute_polygon_centroid([]) == FALLBACK_CENTROID


# --- area ---

def test_area_of_small_square_near_tucuman():
    area = compute_polygon_area_hectares([TUCUMAN_SQUARE])
    expected = _lat_band_area_ha(0.01, -26.83, -26.82)

    assert area == pytest.approx(expected, abs=1e-3)
    # ~1.1 km x 1.0 km
    assert 110 < area < 111.2


def test_area_rounded_to_four_decimals():
    area = compute_polygon_area_hectares([TUCUMAN_SQUARE])
    assert area == round(area, 4)


def test_area_same_for_open_and_closed_ring():
    assert compute_polygon_area_hectares([TUCUMAN_SQUARE]) == compute_polygon_area_hectares([TUCUMAN_SQUARE[:-1]])


def test_area_non_negative_for_either_winding():
    clockwise = list(reversed(TUCUMAN_SQUARE))
    assert compute_polygon_area_hectares([clockwise]) == compute_polygon_area_hectares([TUCUMAN_SQUARE])
    assert compute_polygon_area_hectares([clockwise]) > 0


def test_area_ignores_holes():
    hole = [[-65.198, -26.828], [-65.192, -26.828], [-65.192, -26.822], [-65.198, -26.828]]
    assert compute_polygon_area_hectares([TUCUMAN_SQUARE, hole]) == compute_polygon_area_hectares([TUCUMAN_SQUARE])


@pytest.mark.parametrize("coordinates", [
    [],
    None,
    [[]],
    [[[-65.2, -26.8], [-65.1, -26.8]]],
])
def test_area_is_zero_for_empty_or_short_rings(coordinates):
    assert compute_polygon_area_hectares(coordinates) == 0


@pytest.mark.parametrize("ring", [
    [[-65.2, -26.8], [-65.2, -26.8], [-65.2, -26.8]],
    [[-65.2, -26.8], [-65.2, -26.7], [-65.2, -26.6], [-65.2, -26.8]],
    [[0, 0], [1, 0], [2, 0], [0, 0]],
])
def test_zero_area_rings(ring):
    assert compute_polygon_area_hectares([ring]) == 0


# --- malformed positions ---

def test_ring_of_short_positions_returns_default_location():
    assert compute_ring_centroid([[1], [2], [3]]) == FALLBACK_CENTROID
    assert compute_ring_centroid("abc") == FALLBACK_CENTROID
    assert compute_polygon_centroid([["a", "b", "c"]]) == FALLBACK_CENTROID


def test_malformed_entries_are_skipped_in_centroid():
    noisy = [[0, 0], [1], [1, 0], None, [1, 1], ["x", "y"], [0, 1], [True, False], [0, 0]]
    assert compute_ring_centroid(noisy) == pytest.approx(compute_ring_centroid(UNIT_SQUARE))


@pytest.mark.parametrize("coordinates", [
    "abc",
    [["a", "b", "c"]],
    [[[1], [2], [3]]],
    [[[0, 0], [1], [1, 1], [0, 0]]],
    [[None, {"lng": 1}, [0, 0]]],
])
def test_area_is_zero_for_malformed_rings(coordinates):
    assert compute_polygon_area_hectares(coordinates) == 0


def test_malformed_entries_are_skipped_in_area():
    noisy = TUCUMAN_SQUARE[:2] + [[-65.19]] + TUCUMAN_SQUARE[2:]
    assert compute_polygon_area_hectares([noisy]) == compute_polygon_area_hectares([TUCUMAN_SQUARE])
