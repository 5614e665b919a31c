"""
Circle and arc reconstruction from three points on the curve.

Both solvers return ``None`` for degenerate input (collinear or coincident
points, vanishing radius) instead of raising; callers decide on a fallback.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from sprayteach.cad_types import Vector, VectorLike, as_vector
from sprayteach.constants import (
    ARC_TOLERANCE,
    CIRCLE_TOLERANCE,
    RADIUS_RELATIVE_TOLERANCE,
)
from sprayteach.geom_utils import dominant_plane, normalize_angle, rads_to_degs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircleFit:
    center: Vector
    radius: float
    normal: Vector  # unit length


@dataclass(frozen=True)
class ArcFit:
    center: Vector
    radius: float
    start_angle: float  # degrees, (start, end) is always counter-clockwise
    end_angle: float
    normal: Vector
    is_clockwise: bool  # True if p1 -> p2 -> p3 runs clockwise

    @property
    def sweep(self) -> float:
        return normalize_angle(self.end_angle - self.start_angle)


def circle_from_three_points(
    p1: VectorLike,
    p2: VectorLike,
    p3: VectorLike,
    tolerance: float = CIRCLE_TOLERANCE,
) -> Optional[CircleFit]:
    """Circumscribed circle of three points in 3D.

    Args:
        p1, p2, p3: points on the circle, in any plane.
        tolerance: collinearity and minimum radius threshold.

    Returns:
        The fitted circle or ``None`` if the points are degenerate.
    """
    a = np.asarray(as_vector(p1))
    ab = np.asarray(as_vector(p2)) - a
    ac = np.asarray(as_vector(p3)) - a

    normal = np.cross(ab, ac)
    normal_sq = float(np.dot(normal, normal))
    if normal_sq < tolerance * tolerance:
        logger.debug("Circle points are collinear, no circle")
        return None

    ab_sq = float(np.dot(ab, ab))
    ac_sq = float(np.dot(ac, ac))
    offset = np.cross(ab_sq * ac - ac_sq * ab, normal) / (2.0 * normal_sq)
    center = a + offset
    radius = float(np.linalg.norm(offset))
    if radius < tolerance:
        logger.debug(f"Circle radius {radius} below tolerance")
        return None

    distances = [
        float(np.linalg.norm(np.asarray(as_vector(p)) - center)) for p in (p1, p2, p3)
    ]
    if max(distances) - min(distances) > RADIUS_RELATIVE_TOLERANCE * radius:
        logger.warning(
            f"Circle fit drift: distances {distances} disagree with radius {radius}"
        )

    return CircleFit(
        center=Vector.from_array(center),
        radius=radius,
        normal=Vector.from_array(normal / math.sqrt(normal_sq)),
    )


def arc_from_three_points(
    p1: VectorLike,
    p2: VectorLike,
    p3: VectorLike,
    tolerance: float = ARC_TOLERANCE,
) -> Optional[ArcFit]:
    """Arc through start ``p1``, an intermediate ``p2`` and end ``p3``.

    The circumcenter is computed in the dominant plane of the arc (XY for flat
    drawings) and angles are measured there. The returned ``(start_angle,
    end_angle)`` pair always runs counter-clockwise; ``is_clockwise`` tells
    whether the original traversal p1 -> p3 was clockwise, in which case the
    two angles have been swapped.

    Args:
        p1: start point.
        p2: any point strictly between start and end.
        p3: end point.
        tolerance: collinearity threshold.

    Returns:
        The fitted arc or ``None`` for degenerate input.
    """
    a = np.asarray(as_vector(p1))
    b = np.asarray(as_vector(p2))
    c = np.asarray(as_vector(p3))

    normal = np.cross(b - a, c - a)
    normal_length = float(np.linalg.norm(normal))
    if normal_length < tolerance:
        logger.debug("Arc points are collinear, no arc")
        return None
    normal = normal / normal_length

    u, v, w = dominant_plane(normal)
    x1, y1 = a[u], a[v]
    x2, y2 = b[u], b[v]
    x3, y3 = c[u], c[v]

    d = 2.0 * (x1 * (y2 - y3) + x2 * (y3 - y1) + x3 * (y1 - y2))
    if abs(d) < tolerance:
        logger.debug(f"Arc determinant {d} below tolerance")
        return None

    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3
    cu = (s1 * (y2 - y3) + s2 * (y3 - y1) + s3 * (y1 - y2)) / d
    cv = (s1 * (x3 - x2) + s2 * (x1 - x3) + s3 * (x2 - x1)) / d

    center = np.zeros(3)
    center[u] = cu
    center[v] = cv
    # back onto the arc plane; for an XY arc this is p1.z
    center[w] = a[w] - (normal[u] * (cu - a[u]) + normal[v] * (cv - a[v])) / normal[w]

    radius = math.hypot(x1 - cu, y1 - cv)

    start = normalize_angle(rads_to_degs(math.atan2(y1 - cv, x1 - cu)))
    mid = normalize_angle(rads_to_degs(math.atan2(y2 - cv, x2 - cu)))
    end = normalize_angle(rads_to_degs(math.atan2(y3 - cv, x3 - cu)))

    sweep = (end - start + 360.0) % 360.0
    mid_relative = (mid - start + 360.0) % 360.0
    is_clockwise = not mid_relative < sweep
    if is_clockwise:
        start, end = end, start

    if normal[w] < 0:
        # Negative hemisphere normals are left as computed; angles above are
        # measured in the projected plane regardless of the normal's sign.
        logger.debug("Arc normal points into the negative hemisphere, not flipped")

    return ArcFit(
        center=Vector.from_array(center),
        radius=radius,
        start_angle=start,
        end_angle=end,
        normal=Vector.from_array(normal),
        is_clockwise=is_clockwise,
    )
