import math
from typing import Tuple

import numpy as np

from sprayteach.cad_types import Vector, VectorLike, as_vector
from sprayteach.constants import ARBITRARY_AXIS_THRESHOLD


def rads_to_degs(rads: float) -> float:
    return rads * 180 / math.pi


def degs_to_rads(degs: float) -> float:
    return degs * math.pi / 180


def normalize_angle(angle_deg: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    angle = math.fmod(angle_deg, 360.0)
    if angle < 0:
        angle += 360.0
    # fmod of a tiny negative value can land exactly on 360
    if angle >= 360.0:
        angle -= 360.0
    return angle


def ccw_sweep(start_deg: float, end_deg: float) -> float:
    """Counter-clockwise sweep from start to end, in (0, 360]."""
    sweep = normalize_angle(end_deg - start_deg)
    return 360.0 if sweep == 0.0 else sweep


def angle_in_ccw_span(angle_deg: float, start_deg: float, end_deg: float) -> bool:
    """True if ``angle_deg`` lies on the counter-clockwise arc from start to end."""
    relative = normalize_angle(angle_deg - start_deg)
    return relative <= ccw_sweep(start_deg, end_deg)


def angles_close(a_deg: float, b_deg: float, tolerance: float) -> bool:
    """Compare two angles on the circle, e.g. 359.999 is close to 0.001."""
    diff = abs(normalize_angle(a_deg) - normalize_angle(b_deg))
    return min(diff, 360.0 - diff) < tolerance


def rotate_by_z(vec, phi):
    """Rotate a 2D or 3D vector about the Z axis by ``phi`` radians."""
    vec = np.asarray(vec, dtype=float)
    rotation = np.array(
        [
            [np.cos(phi), -np.sin(phi), 0],
            [np.sin(phi), np.cos(phi), 0],
            [0, 0, 1],
        ]
    )
    if vec.shape == (2,):
        return rotation[:2, :2] @ vec
    return rotation @ vec


def local_basis(normal: VectorLike) -> Tuple[Vector, Vector]:
    """In-plane (x_axis, y_axis) for a plane with the given normal.

    Uses the arbitrary axis rule of the drawing format: the helper axis is
    world Y when the normal is almost parallel to world Z, world Z otherwise.
    For the +Z normal this yields world X and world Y.
    """
    normal = as_vector(normal).normalize()
    if (
        abs(normal.x) < ARBITRARY_AXIS_THRESHOLD
        and abs(normal.y) < ARBITRARY_AXIS_THRESHOLD
    ):
        helper = Vector(0, 1, 0)
    else:
        helper = Vector(0, 0, 1)
    x_axis = helper.cross(normal).normalize()
    y_axis = normal.cross(x_axis).normalize()
    return x_axis, y_axis


def point_on_circle(
    center: VectorLike,
    radius: float,
    angle_deg: float,
    x_axis: VectorLike,
    y_axis: VectorLike,
) -> Vector:
    center = np.asarray(as_vector(center))
    theta = degs_to_rads(angle_deg)
    offset = radius * (
        math.cos(theta) * np.asarray(as_vector(x_axis))
        + math.sin(theta) * np.asarray(as_vector(y_axis))
    )
    return Vector.from_array(center + offset)


def dominant_plane(normal: VectorLike) -> Tuple[int, int, int]:
    """Axis indices (u, v, dropped) of the projection plane for a normal.

    The dropped axis is the normal's largest component; (u, v) keep a
    right-handed order so XY stays XY.
    """
    normal = np.abs(np.asarray(as_vector(normal)))
    dropped = int(np.argmax(normal))
    if dropped == 0:
        return 1, 2, 0
    if dropped == 1:
        return 2, 0, 1
    return 0, 1, 2
