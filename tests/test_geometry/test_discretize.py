import math

import pytest

from sprayteach.cad_types import Vector
from sprayteach.discretize import (
    discretize_circle,
    discretize_primitive,
    discretize_trajectory,
    path_points_2d,
    walk_angles,
)
from sprayteach.primitives import Arc, Circle, Insert, Line, Polyline
from sprayteach.trajectory import (
    TrajectoryPoint,
    TrajectoryPrimitive,
    select,
    set_reversed,
)


def test_walk_angles_appends_exact_end():
    angles = walk_angles(0.0, 100.0, 15.0)
    assert angles[:7] == [0.0, 15.0, 30.0, 45.0, 60.0, 75.0, 90.0]
    assert angles[-1] == 100.0
    assert len(angles) == 8


def test_walk_angles_backwards():
    assert walk_angles(0.0, 90.0, 30.0, backwards=True) == [90.0, 60.0, 30.0, 0.0]


def test_walk_angles_across_zero():
    angles = walk_angles(350.0, 20.0, 10.0)
    assert angles == [350.0, 360.0, 370.0, 380.0]


def test_non_positive_resolution_raises():
    with pytest.raises(ValueError):
        walk_angles(0.0, 90.0, 0.0)
    with pytest.raises(ValueError):
        discretize_primitive(Line((0, 0), (1, 0)), -1.0)


class TestLineTrajectory:
    """Line paths and reversal."""

    @pytest.fixture
    def line_trajectory(self):
        return select(Line((0, 0), (3, 4)))

    def test_two_points(self, line_trajectory):
        points = discretize_trajectory(line_trajectory, 15.0)
        assert points == [Vector(0, 0, 0), Vector(3, 4, 0)]

    def test_reverse_round_trip(self, line_trajectory):
        """Reversing and un-reversing gives back the endpoint order."""
        reversed_points = discretize_trajectory(line_trajectory, 15.0, reversed=True)
        forward_points = discretize_trajectory(line_trajectory, 15.0, reversed=False)

        assert reversed_points == [Vector(3, 4, 0), Vector(0, 0, 0)]
        assert forward_points == [Vector(0, 0, 0), Vector(3, 4, 0)]

    def test_reversed_flag_is_default(self, line_trajectory):
        points = discretize_trajectory(set_reversed(line_trajectory, True), 15.0)
        assert points[0] == Vector(3, 4, 0)

    def test_regenerated_list_is_fresh(self, line_trajectory):
        first = discretize_trajectory(line_trajectory, 15.0)
        second = discretize_trajectory(line_trajectory, 15.0)
        assert first == second
        assert first is not second


class TestArcTrajectory:
    """Arc paths follow point1 -> point3."""

    @pytest.fixture
    def arc_trajectory(self):
        return select(Arc((0, 0, 0), 10.0, 0.0, 90.0))

    def test_forward(self, arc_trajectory):
        points = discretize_trajectory(arc_trajectory, 15.0)

        assert len(points) == 7
        assert points[0] == Vector(10, 0, 0)
        assert points[-1] == Vector(0, 10, 0)
        for p in points:
            assert math.isclose(p.length(), 10.0, rel_tol=1e-9)

    def test_reversed_walks_from_end(self, arc_trajectory):
        points = discretize_trajectory(arc_trajectory, 15.0, reversed=True)

        assert points[0] == Vector(0, 10, 0)
        assert points[-1] == Vector(10, 0, 0)
        assert points[1] == Vector(
            10 * math.cos(math.radians(75)), 10 * math.sin(math.radians(75)), 0
        )

    def test_clockwise_points_stay_clockwise(self):
        trajectory = TrajectoryPrimitive(
            "Arc",
            TrajectoryPoint((0, 10)),
            TrajectoryPoint((math.sqrt(50), math.sqrt(50))),
            TrajectoryPoint((10, 0)),
        )
        points = discretize_trajectory(trajectory, 10.0)

        assert points[0] == Vector(0, 10, 0)
        assert points[-1] == Vector(10, 0, 0)
        for p in points:
            assert math.isclose(p.length(), 10.0, rel_tol=1e-9)
            assert p.x >= -1e-9 and p.y >= -1e-9

    def test_resolution_not_dividing_sweep(self, arc_trajectory):
        points = discretize_trajectory(arc_trajectory, 40.0)
        assert len(points) == 4  # 0, 40, 80, 90
        assert points[-1] == Vector(0, 10, 0)

    def test_arc_keeps_height(self):
        trajectory = select(Arc((0, 0, 5.0), 2.0, 0.0, 180.0))
        points = discretize_trajectory(trajectory, 30.0)
        assert all(math.isclose(p.z, 5.0, abs_tol=1e-9) for p in points)

    def test_collinear_points_fall_back_to_defining_points(self):
        trajectory = TrajectoryPrimitive(
            "Arc",
            TrajectoryPoint((0, 0)),
            TrajectoryPoint((1, 0)),
            TrajectoryPoint((2, 0)),
        )
        points = discretize_trajectory(trajectory, 15.0)
        assert points == [Vector(0, 0, 0), Vector(1, 0, 0), Vector(2, 0, 0)]


@pytest.mark.parametrize("step", [15.0, 7.0, 50.0, 100.0, 360.0 / 7, 400.0])
def test_circle_is_closed_for_any_step(step):
    points = discretize_circle((1, 2, 0), 3.0, (0, 0, 1), step)

    assert len(points) >= 2
    assert points[0].distance_to(points[-1]) < 1e-6
    for p in points:
        assert math.isclose(p.distance_to((1, 2, 0)), 3.0, rel_tol=1e-9)


def test_circle_basis_for_xy_plane_starts_on_x_axis():
    points = discretize_circle((0, 0, 0), 1.0, (0, 0, 1), 90.0)
    assert points == [
        Vector(1, 0, 0),
        Vector(0, 1, 0),
        Vector(-1, 0, 0),
        Vector(0, -1, 0),
        Vector(1, 0, 0),
    ]


def test_reversed_circle_runs_clockwise():
    points = discretize_circle((0, 0, 0), 1.0, (0, 0, 1), 90.0, reversed=True)
    assert points[1] == Vector(0, -1, 0)


def test_tilted_circle_stays_in_its_plane():
    normal = Vector(1, 0, 0)
    points = discretize_circle((0, 0, 0), 2.0, normal, 30.0)
    assert all(abs(p.x) < 1e-12 for p in points)


def test_circle_trajectory_starts_at_point1():
    trajectory = select(Circle((5, 5), 2.0))
    points = discretize_trajectory(trajectory, 15.0)

    assert points[0] == trajectory.point1.position
    assert points[-1] == points[0]
    assert len(points) == 25


def test_circle_without_parameters_uses_three_points():
    trajectory = TrajectoryPrimitive(
        "Circle",
        TrajectoryPoint((2, 0)),
        TrajectoryPoint((0, 2)),
        TrajectoryPoint((-2, 0)),
    )
    points = discretize_trajectory(trajectory, 45.0)

    assert points[0] == Vector(2, 0, 0)
    assert points[-1] == points[0]
    assert all(math.isclose(p.length(), 2.0, rel_tol=1e-9) for p in points)


def test_degenerate_circle_falls_back_to_closed_points():
    trajectory = TrajectoryPrimitive(
        "Circle",
        TrajectoryPoint((0, 0)),
        TrajectoryPoint((1, 0)),
        TrajectoryPoint((2, 0)),
    )
    points = discretize_trajectory(trajectory, 15.0)
    assert points == [Vector(0, 0, 0), Vector(1, 0, 0), Vector(2, 0, 0), Vector(0, 0, 0)]


def test_native_arc_preview():
    points = discretize_primitive(Arc((0, 0), 1.0, 0.0, 90.0), 30.0)
    assert points[0] == Vector(1, 0, 0)
    assert points[-1] == Vector(0, 1, 0)

    reversed_points = discretize_primitive(Arc((0, 0), 1.0, 0.0, 90.0), 30.0, reversed=True)
    assert reversed_points[0] == Vector(0, 1, 0)


def test_polyline_preview_follows_bulges():
    polyline = Polyline([(0, 0, 0.0), (2, 0, 1.0), (2, 2, 0.0)])
    points = discretize_primitive(polyline, 15.0)

    assert points[0] == Vector(0, 0, 0)
    assert points[1] == Vector(2, 0, 0)
    assert points[2] != Vector(2, 0, 0)
    assert points[-1] == Vector(2, 2, 0)
    assert max(p.x for p in points) == pytest.approx(3.0)


def test_insert_has_no_preview():
    assert discretize_primitive(Insert("B", (0, 0)), 15.0) == []


def test_path_points_2d_splits_coordinates():
    xs, ys = path_points_2d([Vector(0, 1, 5), Vector(2, 3, 5)])
    assert xs == [0.0, 2.0]
    assert ys == [1.0, 3.0]
