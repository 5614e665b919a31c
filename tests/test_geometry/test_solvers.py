import math

import numpy as np
import pytest

from sprayteach.cad_types import Vector
from sprayteach.solvers import arc_from_three_points, circle_from_three_points


def _point_on(center, radius, angle_deg, x_axis=(1, 0, 0), y_axis=(0, 1, 0)):
    theta = math.radians(angle_deg)
    return Vector.from_array(
        np.asarray(center, dtype=float)
        + radius * math.cos(theta) * np.asarray(x_axis, dtype=float)
        + radius * math.sin(theta) * np.asarray(y_axis, dtype=float)
    )


def test_unit_circle_in_xy():
    fit = circle_from_three_points((1, 0, 0), (0, 1, 0), (-1, 0, 0))
    assert fit is not None
    assert fit.center == Vector(0, 0, 0)
    assert math.isclose(fit.radius, 1.0, rel_tol=1e-9)
    assert fit.normal == Vector(0, 0, 1)


@pytest.mark.parametrize(
    "angles",
    [(0, 120, 240), (10, 20, 30), (-170, 5, 95), (1, 179, 359)],
)
def test_circle_center_is_equidistant_in_tilted_plane(angles):
    center = (1.0, 2.0, 3.0)
    normal = np.array([1.0, 1.0, 1.0]) / math.sqrt(3)
    x_axis = np.array([1.0, -1.0, 0.0]) / math.sqrt(2)
    y_axis = np.cross(normal, x_axis)
    points = [_point_on(center, 2.5, a, x_axis, y_axis) for a in angles]

    fit = circle_from_three_points(*points)

    assert fit is not None
    for p in points:
        assert math.isclose(fit.center.distance_to(p), fit.radius, rel_tol=1e-9)
    assert fit.center == Vector(*center)
    assert math.isclose(fit.radius, 2.5, rel_tol=1e-9)
    assert math.isclose(abs(fit.normal.dot(normal)), 1.0, rel_tol=1e-9)


def test_collinear_points_have_no_circle():
    assert circle_from_three_points((0, 0, 0), (1, 1, 1), (2, 2, 2)) is None


def test_coincident_points_have_no_circle():
    assert circle_from_three_points((1, 1, 0), (1, 1, 0), (1, 1, 0)) is None


class TestArcFromThreePoints:
    """Arc fitting and sweep sense."""

    @pytest.fixture
    def center(self):
        return (2.0, -1.0, 0.5)

    def test_recovers_counter_clockwise_arc(self, center):
        """Points at 10, 55, 100 degrees give a CCW sweep from 10 to 100."""
        points = [_point_on(center, 3.0, a) for a in (10, 55, 100)]
        fit = arc_from_three_points(*points)

        assert fit is not None
        assert not fit.is_clockwise
        assert fit.radius == pytest.approx(3.0, abs=1e-3)
        assert fit.start_angle == pytest.approx(10.0, abs=1e-3)
        assert fit.end_angle == pytest.approx(100.0, abs=1e-3)
        assert fit.center == Vector(*center)

    def test_clockwise_traversal_swaps_angles(self, center):
        """The stored angle pair stays counter-clockwise."""
        points = [_point_on(center, 3.0, a) for a in (100, 55, 10)]
        fit = arc_from_three_points(*points)

        assert fit is not None
        assert fit.is_clockwise
        assert fit.start_angle == pytest.approx(10.0, abs=1e-3)
        assert fit.end_angle == pytest.approx(100.0, abs=1e-3)

    def test_sweep_across_zero_degrees(self, center):
        points = [_point_on(center, 1.0, a) for a in (350, 10, 30)]
        fit = arc_from_three_points(*points)

        assert fit is not None
        assert not fit.is_clockwise
        assert fit.start_angle == pytest.approx(350.0, abs=1e-6)
        assert fit.end_angle == pytest.approx(30.0, abs=1e-6)
        assert fit.sweep == pytest.approx(40.0, abs=1e-6)

    def test_large_sweep_through_mid_point(self, center):
        """A 300 degree arc is told apart from its 60 degree complement."""
        points = [_point_on(center, 1.0, a) for a in (0, 150, 300)]
        fit = arc_from_three_points(*points)

        assert fit is not None
        assert not fit.is_clockwise
        assert fit.sweep == pytest.approx(300.0, abs=1e-6)

    def test_center_keeps_arc_height(self, center):
        points = [_point_on(center, 3.0, a) for a in (10, 55, 100)]
        fit = arc_from_three_points(*points)
        assert fit.center.z == pytest.approx(0.5)

    def test_vertical_arc_uses_its_own_plane(self):
        points = [_point_on((0, 0, 0), 2.0, a, (1, 0, 0), (0, 0, 1)) for a in (0, 45, 90)]
        fit = arc_from_three_points(*points)

        assert fit is not None
        assert fit.center == Vector(0, 0, 0)
        assert fit.radius == pytest.approx(2.0)

    def test_collinear_points_are_degenerate(self):
        assert arc_from_three_points((0, 0, 0), (1, 0, 0), (2, 0, 0)) is None
