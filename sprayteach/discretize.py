"""
Discretization of trajectories and drawing primitives into point lists.

Every call returns a fresh list in traversal order. Nothing is cached on the
trajectory, so the path can be regenerated after any edit.
"""

import logging
import math
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from sprayteach.bulge import bulge_to_arc, polyline_segments
from sprayteach.cad_types import Vector, VectorLike, as_vector
from sprayteach.constants import CLOSING_POINT_TOLERANCE, DEFAULT_RESOLUTION_DEGREES
from sprayteach.geom_utils import (
    ccw_sweep,
    dominant_plane,
    local_basis,
    point_on_circle,
)
from sprayteach.primitives import Arc, Circle, Line, Polyline, Primitive
from sprayteach.solvers import arc_from_three_points, circle_from_three_points

if TYPE_CHECKING:
    from sprayteach.trajectory import TrajectoryPrimitive

logger = logging.getLogger(__name__)


def _check_resolution(resolution_degrees: float) -> None:
    if not resolution_degrees > 0:
        raise ValueError(f"Resolution must be positive, got {resolution_degrees}")


def walk_angles(
    start_deg: float, end_deg: float, resolution_degrees: float, backwards: bool = False
) -> List[float]:
    """Angles of a counter-clockwise span sampled at a fixed step.

    Forward walks go from ``start_deg`` up to ``start_deg + sweep``; backward
    walks go from the end down to the start. The exact final angle is always
    appended, whether or not it falls on a step.
    """
    _check_resolution(resolution_degrees)
    sweep = ccw_sweep(start_deg, end_deg)
    origin = start_deg + sweep if backwards else start_deg
    step = -resolution_degrees if backwards else resolution_degrees
    angles = []
    k = 0
    while k * resolution_degrees < sweep - 1e-9:
        angles.append(origin + k * step)
        k += 1
    angles.append(origin - sweep if backwards else origin + sweep)
    return angles


def discretize_line(start: VectorLike, end: VectorLike, reversed: bool = False) -> List[Vector]:
    start = as_vector(start)
    end = as_vector(end)
    return [end, start] if reversed else [start, end]


def discretize_arc(
    arc: Arc, resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES, reversed: bool = False
) -> List[Vector]:
    """Sample a native arc from start to end angle, or end to start if reversed."""
    x_axis, y_axis = local_basis(arc.normal)
    return [
        point_on_circle(arc.center, arc.radius, angle, x_axis, y_axis)
        for angle in walk_angles(
            arc.start_angle, arc.end_angle, resolution_degrees, backwards=reversed
        )
    ]


def discretize_circle(
    center: VectorLike,
    radius: float,
    normal: VectorLike,
    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES,
    reversed: bool = False,
) -> List[Vector]:
    """Closed loop around a circle starting at angle 0 of its local basis.

    The last point repeats the first one. Reversed circles run clockwise.
    """
    _check_resolution(resolution_degrees)
    x_axis, y_axis = local_basis(normal)
    return _sample_circle(
        as_vector(center), radius, x_axis, y_axis, 0.0, resolution_degrees, reversed
    )


def _sample_circle(
    center: Vector,
    radius: float,
    x_axis: Vector,
    y_axis: Vector,
    start_angle: float,
    resolution_degrees: float,
    reversed: bool,
) -> List[Vector]:
    step = -resolution_degrees if reversed else resolution_degrees
    points = []
    k = 0
    while k * resolution_degrees < 360.0 - 1e-9:
        points.append(
            point_on_circle(center, radius, start_angle + k * step, x_axis, y_axis)
        )
        k += 1
    first = points[0]
    if len(points) == 1 or points[-1].distance_to(first) ** 2 > CLOSING_POINT_TOLERANCE:
        points.append(first)
    return points


def _plane_point(center: Vector, normal: Vector, radius: float, angle_deg: float) -> Vector:
    """Point of a projected-plane arc, lifted back onto the arc's plane."""
    u, v, w = dominant_plane(normal)
    theta = math.radians(angle_deg)
    point = [0.0, 0.0, 0.0]
    point[u] = center[u] + radius * math.cos(theta)
    point[v] = center[v] + radius * math.sin(theta)
    point[w] = center[w] - (
        normal[u] * (point[u] - center[u]) + normal[v] * (point[v] - center[v])
    ) / normal[w]
    return Vector(*point)


def discretize_three_point_arc(
    p1: VectorLike,
    p2: VectorLike,
    p3: VectorLike,
    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES,
    reversed: bool = False,
) -> List[Vector]:
    """Sample the arc p1 -> p2 -> p3 (or p3 -> p1 when reversed).

    Falls back to the three defining points if no arc fits through them.
    """
    _check_resolution(resolution_degrees)
    fit = arc_from_three_points(p1, p2, p3)
    if fit is None:
        logger.debug("Degenerate arc, emitting defining points")
        points = [as_vector(p1), as_vector(p2), as_vector(p3)]
        return points[::-1] if reversed else points
    # a clockwise fit has its angle pair swapped, so p1 sits at end_angle
    backwards = fit.is_clockwise != reversed
    return [
        _plane_point(fit.center, fit.normal, fit.radius, angle)
        for angle in walk_angles(
            fit.start_angle, fit.end_angle, resolution_degrees, backwards=backwards
        )
    ]


def discretize_polyline(
    polyline: Polyline,
    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES,
    reversed: bool = False,
) -> List[Vector]:
    points: List[Vector] = []
    for start, end, bulge in polyline_segments(polyline):
        bulge_arc = bulge_to_arc(start, end, bulge)
        if bulge_arc is None:
            segment = [start, end]
        else:
            segment = discretize_arc(
                bulge_arc.to_arc(polyline.elevation),
                resolution_degrees,
                reversed=not bulge_arc.is_ccw,
            )
        if points:
            segment = segment[1:]
        points.extend(segment)
    if not points and polyline.vertices:
        v = polyline.vertices[0]
        points.append(Vector(v.x, v.y, polyline.elevation))
    return points[::-1] if reversed else points


def discretize_primitive(
    primitive: Primitive,
    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES,
    reversed: bool = False,
) -> List[Vector]:
    """Preview points of a drawing primitive. Inserts are not expanded."""
    _check_resolution(resolution_degrees)
    if isinstance(primitive, Line):
        return discretize_line(primitive.start, primitive.end, reversed)
    if isinstance(primitive, Arc):
        return discretize_arc(primitive, resolution_degrees, reversed)
    if isinstance(primitive, Circle):
        return discretize_circle(
            primitive.center, primitive.radius, primitive.normal, resolution_degrees, reversed
        )
    if isinstance(primitive, Polyline):
        return discretize_polyline(primitive, resolution_degrees, reversed)
    logger.debug(f"No preview for {primitive.primitive_type}")
    return []


def discretize_trajectory(
    trajectory: "TrajectoryPrimitive",
    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES,
    reversed: Optional[bool] = None,
) -> List[Vector]:
    """Path points of a trajectory in spraying order.

    Args:
        trajectory: the taught primitive.
        resolution_degrees: angular step for arcs and circles.
        reversed: overrides ``trajectory.is_reversed`` when given.

    Returns:
        Fresh list of points; lines give 2 points, arcs and circles at least 2.
    """
    _check_resolution(resolution_degrees)
    if reversed is None:
        reversed = trajectory.is_reversed
    p1, p2, p3 = (
        p.position if p is not None else None
        for p in (trajectory.point1, trajectory.point2, trajectory.point3)
    )

    if trajectory.primitive_type == "Line":
        return discretize_line(p1, p2, reversed)

    if trajectory.primitive_type == "Arc":
        return discretize_three_point_arc(p1, p2, p3, resolution_degrees, reversed)

    if trajectory.primitive_type == "Circle":
        if trajectory.circle_radius and trajectory.circle_center is not None:
            return discretize_circle(
                trajectory.circle_center,
                trajectory.circle_radius,
                trajectory.circle_normal,
                resolution_degrees,
                reversed,
            )
        fit = circle_from_three_points(p1, p2, p3)
        if fit is None:
            logger.debug("Degenerate circle, emitting defining points")
            points = [p1, p2, p3, p1]
            return points[::-1] if reversed else points
        # start the loop at point1
        return _circle_from_point(fit.center, fit.radius, fit.normal, p1, resolution_degrees, reversed)

    raise ValueError(f"Unknown trajectory type: {trajectory.primitive_type}")


def _circle_from_point(
    center: Vector,
    radius: float,
    normal: Vector,
    start: Vector,
    resolution_degrees: float,
    reversed: bool,
) -> List[Vector]:
    x_axis, y_axis = local_basis(normal)
    offset = as_vector(start) - center
    start_angle = math.degrees(math.atan2(offset.dot(y_axis), offset.dot(x_axis)))
    return _sample_circle(
        center, radius, x_axis, y_axis, start_angle, resolution_degrees, reversed
    )


def path_points_2d(points: Sequence[Vector]) -> Tuple[List[float], List[float]]:
    """Split points into x and y lists for plotting."""
    return [p.x for p in points], [p.y for p in points]
