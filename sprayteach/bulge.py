import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from sprayteach.cad_types import Vector, VectorLike, as_vector
from sprayteach.constants import BULGE_TOLERANCE, CHORD_EPSILON, MAX_BULGE_RADIUS
from sprayteach.geom_utils import normalize_angle, rads_to_degs
from sprayteach.primitives import Arc, Line, Polyline, Primitive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulgeArc:
    """Arc segment encoded by a polyline bulge between ``start`` and ``end``."""

    start: Vector
    end: Vector
    center: Vector
    radius: float
    included_angle: float  # radians, signed like the bulge
    is_ccw: bool
    is_large_arc: bool

    @property
    def start_angle(self) -> float:
        """Start of the counter-clockwise angle pair, in degrees."""
        return self._ccw_angles()[0]

    @property
    def end_angle(self) -> float:
        return self._ccw_angles()[1]

    def _ccw_angles(self) -> Tuple[float, float]:
        a1 = normalize_angle(
            rads_to_degs(math.atan2(self.start.y - self.center.y, self.start.x - self.center.x))
        )
        a2 = normalize_angle(
            rads_to_degs(math.atan2(self.end.y - self.center.y, self.end.x - self.center.x))
        )
        return (a1, a2) if self.is_ccw else (a2, a1)

    def to_arc(self, z: float = 0.0, layer: str = "0") -> Arc:
        return Arc(
            center=self.center.with_z(z),
            radius=self.radius,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
            layer=layer,
        )


def bulge_to_arc(
    p1: VectorLike,
    p2: VectorLike,
    bulge: float,
    tolerance: float = BULGE_TOLERANCE,
) -> Optional[BulgeArc]:
    """Convert a bulged polyline segment into arc parameters.

    Args:
        p1: segment start (x, y).
        p2: segment end (x, y).
        bulge: tan(included angle / 4); positive bulges turn counter-clockwise.
        tolerance: bulges smaller than this are straight.

    Returns:
        The arc, or ``None`` when the segment has to be drawn as a straight
        line (flat bulge, zero chord or an inconsistent radius).
    """
    if abs(bulge) < tolerance:
        return None

    start = as_vector(p1).with_z(0.0)
    end = as_vector(p2).with_z(0.0)
    dx = end.x - start.x
    dy = end.y - start.y
    chord = math.hypot(dx, dy)
    if chord < CHORD_EPSILON:
        logger.debug("Bulge segment has zero chord, drawing as line")
        return None

    theta = 4.0 * math.atan(bulge)
    half_sin = math.sin(theta / 2.0)
    if abs(half_sin) < CHORD_EPSILON:
        logger.debug(f"Inconsistent bulge {bulge} for chord {chord}")
        return None

    radius = abs(chord / (2.0 * half_sin))
    if not math.isfinite(radius) or radius > MAX_BULGE_RADIUS:
        logger.debug(f"Bulge radius {radius} out of range, drawing as line")
        return None

    # signed distance from chord midpoint to center along the left normal
    offset = (chord / 2.0) * math.cos(theta / 2.0) / half_sin
    center = Vector(
        (start.x + end.x) / 2.0 - dy / chord * offset,
        (start.y + end.y) / 2.0 + dx / chord * offset,
        0.0,
    )
    return BulgeArc(
        start=start,
        end=end,
        center=center,
        radius=radius,
        included_angle=theta,
        is_ccw=bulge > 0,
        is_large_arc=abs(theta) >= math.pi - tolerance,
    )


def polyline_segments(polyline: Polyline) -> Iterator[Tuple[Vector, Vector, float]]:
    """Yield ``(start, end, bulge)`` per segment, closing segment included."""
    vertices = polyline.vertices
    count = len(vertices)
    last = count if polyline.closed else count - 1
    for i in range(max(last, 0)):
        v1 = vertices[i]
        v2 = vertices[(i + 1) % count]
        yield (
            Vector(v1.x, v1.y, polyline.elevation),
            Vector(v2.x, v2.y, polyline.elevation),
            v1.bulge,
        )


def segment_primitives(polyline: Polyline) -> Iterator[Primitive]:
    """Native :class:`Line` or :class:`Arc` per segment, zero-length ones skipped."""
    for start, end, bulge in polyline_segments(polyline):
        bulge_arc = bulge_to_arc(start, end, bulge)
        if bulge_arc is not None:
            yield bulge_arc.to_arc(polyline.elevation, polyline.layer)
        elif start.distance_to(end) > 0:
            yield Line(start, end, layer=polyline.layer)
