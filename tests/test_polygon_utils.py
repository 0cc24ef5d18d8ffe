import random

import pytest

from citylots.geometry import PolygonUtils


L_SHAPE = [(0.0, 0.0), (20.0, 0.0), (20.0, 10.0), (10.0, 10.0), (10.0, 20.0), (0.0, 20.0)]


def rotations(polygon):
    return [polygon[i:] + polygon[:i] for i in range(len(polygon))]


def test_area_of_square(large_block):
    assert PolygonUtils.polygon_area(large_block) == pytest.approx(10000.0)


def test_area_is_rotation_and_winding_invariant():
    for rotated in rotations(L_SHAPE):
        assert PolygonUtils.polygon_area(rotated) == pytest.approx(300.0)
        assert PolygonUtils.polygon_area(rotated[::-1]) == pytest.approx(300.0)


def test_area_of_degenerate_polygon_is_zero():
    assert PolygonUtils.polygon_area([(0.0, 0.0), (1.0, 1.0)]) == 0.0


def test_perimeter(small_block):
    assert PolygonUtils.polygon_perimeter(small_block) == pytest.approx(40.0)


def test_average_point(small_block):
    assert PolygonUtils.average_point(small_block) == (5.0, 5.0)


def test_edge_midpoints(small_block):
    assert PolygonUtils.edge_midpoints(small_block) == [
        (5.0, 0.0), (10.0, 5.0), (5.0, 10.0), (0.0, 5.0)
    ]


@pytest.mark.parametrize("point,expected", [
    ((5.0, 5.0), True),
    ((15.0, 5.0), True),
    ((5.0, 15.0), True),
    ((15.0, 15.0), False),  # in the notch
    ((25.0, 5.0), False),
    ((-1.0, -1.0), False),
])
def test_inside_polygon_concave(point, expected):
    for rotated in rotations(L_SHAPE):
        assert PolygonUtils.inside_polygon(point, rotated) is expected
        assert PolygonUtils.inside_polygon(point, rotated[::-1]) is expected


def test_point_outside_bounding_box_is_outside(rng):
    for _ in range(100):
        x = rng.uniform(-50.0, 50.0)
        y = rng.choice([rng.uniform(-50.0, -0.1), rng.uniform(20.1, 50.0)])
        assert not PolygonUtils.inside_polygon((x, y), L_SHAPE)


def test_resize_geometry_inset(large_block):
    inset = PolygonUtils.resize_geometry(large_block, -20.0)

    assert inset is not None
    assert len(inset) == 4
    assert PolygonUtils.polygon_area(inset) == pytest.approx(3600.0)
    xs = sorted(p[0] for p in inset)
    assert xs[0] == pytest.approx(20.0)
    assert xs[-1] == pytest.approx(80.0)


def test_resize_geometry_collapse_returns_none(small_block):
    assert PolygonUtils.resize_geometry(small_block, -6.0) is None


def test_resize_geometry_rejects_too_few_points():
    assert PolygonUtils.resize_geometry([(0.0, 0.0), (1.0, 0.0)], -0.1) is None


def test_subdivide_pieces_respect_area_bounds(large_block, rng):
    lots = PolygonUtils.subdivide_polygon(large_block, 50.0, rng)

    assert len(lots) > 50
    for lot in lots:
        assert len(lot) >= 3
        area = PolygonUtils.polygon_area(lot)
        assert 25.0 <= area < 100.0
    total = sum(PolygonUtils.polygon_area(lot) for lot in lots)
    assert total == pytest.approx(10000.0, rel=1e-6)


def test_subdivide_is_deterministic_for_a_seed(large_block):
    first = PolygonUtils.subdivide_polygon(large_block, 50.0, random.Random(7))
    second = PolygonUtils.subdivide_polygon(large_block, 50.0, random.Random(7))
    assert first == second


def test_subdivide_keeps_small_polygon_whole(small_block, rng):
    assert PolygonUtils.subdivide_polygon(small_block, 60.0, rng) == [small_block]


def test_subdivide_drops_tiny_polygon(small_block, rng):
    assert PolygonUtils.subdivide_polygon(small_block, 300.0, rng) == []


def test_subdivide_drops_skinny_polygon(rng):
    sliver = [(0.0, 0.0), (100.0, 0.0), (100.0, 1.0), (0.0, 1.0)]
    assert PolygonUtils.subdivide_polygon(sliver, 10.0, rng) == []
