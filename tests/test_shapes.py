import math

import pytest
from shapely.geometry import Point

from gpCamlib.aperture import PrimitiveInstance, StandardAperture, PRIM_CENTER_LINE, PRIM_CIRCLE, PRIM_OUTLINE, \
    PRIM_THERMAL, PRIM_VECTOR_LINE
from gpCamlib.errors import UnsupportedInterpolationAperture, UnsupportedPrimitive
from gpCamlib.shapes import ArcSpec, arc_geometry, flash_geometry, interpolation_geometry, resolve_arc_center
from gpCamlib.utils import arc_sweep, point_angle


STEPS = 40


def approx_bounds(bounds, expected):
    assert bounds == pytest.approx(expected, abs=1e-9)


def test_arc_sweep():
    assert arc_sweep(0, 90, 'ccw') == 90
    assert arc_sweep(0, 90, 'cw') == -270
    assert arc_sweep(90, 0, 'cw') == -90
    assert arc_sweep(350, 10, 'ccw') == pytest.approx(20)


def test_same_angle_is_a_full_circle():
    assert arc_sweep(45, 45, 'ccw') == 360
    assert arc_sweep(45, 45, 'cw') == -360


def test_point_angle():
    assert point_angle((0, 0), (1, 0)) == 0
    assert point_angle((0, 0), (0, 1)) == pytest.approx(90)
    assert point_angle((0, 0), (0, -1)) == pytest.approx(270)
    assert point_angle((1, 1), (0, 1)) == pytest.approx(180)


def test_multi_quadrant_center():
    assert resolve_arc_center((1, 2), (5, 5), (-1, 0.5), 'cw', 'MULTI') == (0, 2.5)


@pytest.mark.parametrize('start, stop, offset, direction, center', [
    ((1, 0), (0, 1), (1, 0), 'ccw', (0, 0)),
    ((0, 1), (-1, 0), (0, 1), 'ccw', (0, 0)),
    ((-1, 0), (0, -1), (1, 0), 'ccw', (0, 0)),
    ((0, -1), (1, 0), (0, 1), 'ccw', (0, 0)),
    ((0, 1), (1, 0), (0, 1), 'cw', (0, 0)),
    ((1, 0), (0, -1), (1, 0), 'cw', (0, 0)),
    ((0, -1), (-1, 0), (0, 1), 'cw', (0, 0)),
    ((-1, 0), (0, 1), (1, 0), 'cw', (0, 0)),
])
def test_single_quadrant_center(start, stop, offset, direction, center):
    assert resolve_arc_center(start, stop, offset, direction, 'SINGLE') == center


def test_full_circle_arc():
    spec = ArcSpec((1, 0), (1, 0), (-1, 0), 'ccw', 'MULTI')
    assert spec.sweep == 360
    assert spec.radius == 1

    disk = arc_geometry(spec, STEPS)
    assert disk.area == pytest.approx(math.pi, rel=1e-2)
    approx_bounds(disk.bounds, (-1, -1, 1, 1))


def test_clockwise_full_circle():
    spec = ArcSpec((0, 1), (0, 1), (0, -1), 'cw', 'MULTI')
    assert spec.sweep == -360
    assert arc_geometry(spec, STEPS).area == pytest.approx(math.pi, rel=1e-2)


def test_quarter_pie():
    spec = ArcSpec((1, 0), (0, 1), (-1, 0), 'ccw', 'MULTI')
    assert spec.sweep == pytest.approx(90)
    pie = arc_geometry(spec, STEPS)
    assert pie.area == pytest.approx(math.pi / 4, rel=1e-2)
    approx_bounds(pie.bounds, (0, 0, 1, 1))


def test_arc_points_end_exactly():
    spec = ArcSpec((1, 0), (0, 1), (-1, 0), 'cw', 'MULTI')
    assert spec.sweep == pytest.approx(-270)
    points = spec.points(STEPS)
    assert points[0] == pytest.approx((1, 0))
    assert points[-1] == (0, 1)
    assert len(points) == 31


def test_stroked_arc():
    spec = ArcSpec((1, 0), (-1, 0), (-1, 0), 'ccw', 'MULTI')
    ring = arc_geometry(spec, STEPS, filled=False, width=0.1)
    # Half ring plus two round caps
    expected = math.pi * 0.1 + math.pi * 0.05 ** 2
    assert ring.area == pytest.approx(expected, rel=2e-2)
    assert not ring.contains(Point(0, 0))


def test_zero_radius_arc():
    spec = ArcSpec((1, 1), (1, 1), (0, 0), 'ccw', 'MULTI')
    assert arc_geometry(spec, STEPS).is_empty


def test_flash_circle_with_hole():
    geo, hole = flash_geometry(StandardAperture('C', [0.1, 0.04]), 1, 2, STEPS)
    approx_bounds(geo.bounds, (0.95, 1.95, 1.05, 2.05))
    assert hole == 0.04


def test_flash_circle_without_hole():
    geo, hole = flash_geometry(StandardAperture('C', [0.1]), 0, 0, STEPS)
    assert hole is None
    assert geo.area == pytest.approx(math.pi * 0.05 ** 2, rel=1e-2)


def test_flash_rectangle():
    geo, hole = flash_geometry(StandardAperture('R', [0.2, 0.1, 0.05]), 1, 1, STEPS)
    approx_bounds(geo.bounds, (0.9, 0.95, 1.1, 1.05))
    assert geo.area == pytest.approx(0.02)
    assert hole == 0.05


def test_flash_obround():
    geo, hole = flash_geometry(StandardAperture('O', [0.2, 0.1]), 0, 0, STEPS)
    approx_bounds(geo.bounds, (-0.1, -0.05, 0.1, 0.05))
    assert geo.area == pytest.approx(0.1 * 0.1 + math.pi * 0.05 ** 2, rel=1e-2)
    assert hole is None

    tall, _ = flash_geometry(StandardAperture('O', [0.1, 0.2]), 0, 0, STEPS)
    approx_bounds(tall.bounds, (-0.05, -0.1, 0.05, 0.1))


def test_flash_polygon():
    geo, hole = flash_geometry(StandardAperture('P', [2, 4]), 0, 0, STEPS)
    assert geo.area == pytest.approx(2.0)
    approx_bounds(geo.bounds, (-1, -1, 1, 1))
    assert hole is None


def test_flash_polygon_rotation_and_hole():
    geo, hole = flash_geometry(StandardAperture('P', [2, 4, 45, 0.5]), 0, 0, STEPS)
    s = math.sqrt(0.5)
    approx_bounds(geo.bounds, (-s, -s, s, s))
    assert hole == 0.5


def test_macro_rotation_is_clockwise():
    # Circle at (1, 0) rotated by 90 ends below the flash point.
    geo, hole = flash_geometry(PrimitiveInstance(PRIM_CIRCLE, [1, 0.5, 1, 0, 90]), 0, 0, STEPS)
    assert geo.centroid.x == pytest.approx(0, abs=1e-9)
    assert geo.centroid.y == pytest.approx(-1, abs=1e-9)
    assert hole is None


def test_macro_center_line():
    geo, _ = flash_geometry(PrimitiveInstance(PRIM_CENTER_LINE, [1, 2, 0.5, 0, 0, 90]), 5, 5, STEPS)
    approx_bounds(geo.bounds, (4.75, 4, 5.25, 6))


def test_macro_outline():
    primitive = PrimitiveInstance(PRIM_OUTLINE, [1, 3, 0, 0, 1, 0, 1, 1, 0, 0, 0])
    geo, _ = flash_geometry(primitive, 1, 1, STEPS)
    assert geo.area == pytest.approx(0.5)
    approx_bounds(geo.bounds, (1, 1, 2, 2))


@pytest.mark.parametrize('primitive', [
    PrimitiveInstance(PRIM_VECTOR_LINE, [1, 0.1, 0, 0, 1, 1, 0]),
    PrimitiveInstance(PRIM_THERMAL, [0, 0, 1, 0.8, 0.1, 0]),
])
def test_unsupported_macro_primitives(primitive):
    with pytest.raises(UnsupportedPrimitive):
        flash_geometry(primitive, 0, 0, STEPS)


def test_circle_interpolation():
    [geo] = interpolation_geometry(StandardAperture('C', [0.01]), (1, 1), (2, 1), STEPS)
    approx_bounds(geo.bounds, (0.995, 0.995, 2.005, 1.005))


def test_zero_length_circle_interpolation():
    [geo] = interpolation_geometry(StandardAperture('C', [0.1]), (1, 1), (1, 1), STEPS)
    assert geo.area == pytest.approx(math.pi * 0.05 ** 2, rel=1e-2)


def test_rectangle_interpolation():
    stroke, head, tail = interpolation_geometry(StandardAperture('R', [0.3, 0.4]), (0, 0), (1, 0), STEPS)
    # Flat caps do not extend past the end points.
    approx_bounds(stroke.bounds, (0, -0.25, 1, 0.25))
    approx_bounds(head.bounds, (-0.15, -0.2, 0.15, 0.2))
    approx_bounds(tail.bounds, (0.85, -0.2, 1.15, 0.2))


def test_other_apertures_cannot_interpolate():
    with pytest.raises(UnsupportedInterpolationAperture):
        interpolation_geometry(StandardAperture('O', [0.2, 0.1]), (0, 0), (1, 0), STEPS)
    with pytest.raises(UnsupportedInterpolationAperture):
        interpolation_geometry(PrimitiveInstance(PRIM_CIRCLE, [1, 0.5, 0, 0, 0]), (0, 0), (1, 0), STEPS)
