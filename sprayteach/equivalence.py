"""
Tolerance-based equality of drawing primitives and reconciliation of saved
trajectories against a freshly parsed drawing.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sprayteach.bulge import segment_primitives
from sprayteach.cad_types import VectorLike, as_vector
from sprayteach.constants import MATCH_TOLERANCE, POLYLINE_ENTITY
from sprayteach.geom_utils import angles_close
from sprayteach.primitives import Arc, Circle, Line, Polyline, Primitive
from sprayteach.registry import PrimitiveRegistry
from sprayteach.trajectory import TrajectoryPrimitive, set_key

logger = logging.getLogger(__name__)


def points_equal(p1: VectorLike, p2: VectorLike, tolerance: float = MATCH_TOLERANCE) -> bool:
    return as_vector(p1).is_close(p2, tolerance)


def _lines_equivalent(a: Line, b: Line, tolerance: float) -> bool:
    same_direction = points_equal(a.start, b.start, tolerance) and points_equal(
        a.end, b.end, tolerance
    )
    opposite_direction = points_equal(a.start, b.end, tolerance) and points_equal(
        a.end, b.start, tolerance
    )
    return same_direction or opposite_direction


def _circles_equivalent(a: Circle, b: Circle, tolerance: float) -> bool:
    return points_equal(a.center, b.center, tolerance) and abs(a.radius - b.radius) < tolerance


def _arcs_equivalent(a: Arc, b: Arc, tolerance: float) -> bool:
    if not points_equal(a.center, b.center, tolerance):
        return False
    if abs(a.radius - b.radius) >= tolerance:
        return False
    in_order = angles_close(a.start_angle, b.start_angle, tolerance) and angles_close(
        a.end_angle, b.end_angle, tolerance
    )
    swapped = angles_close(a.start_angle, b.end_angle, tolerance) and angles_close(
        a.end_angle, b.start_angle, tolerance
    )
    return in_order or swapped


def _polylines_equivalent(a: Polyline, b: Polyline, tolerance: float) -> bool:
    if len(a.vertices) != len(b.vertices) or a.closed != b.closed:
        return False
    for va, vb in zip(a.vertices, b.vertices):
        if (
            abs(va.x - vb.x) >= tolerance
            or abs(va.y - vb.y) >= tolerance
            or abs(va.bulge - vb.bulge) >= tolerance
        ):
            return False
    return True


_MATCHERS = {
    Line: _lines_equivalent,
    Arc: _arcs_equivalent,
    Circle: _circles_equivalent,
    Polyline: _polylines_equivalent,
}


def are_equivalent(a: Primitive, b: Primitive, tolerance: float = MATCH_TOLERANCE) -> bool:
    """Whether two primitives describe the same geometry within ``tolerance``.

    Lines match in either direction, arcs match with their angle pair in
    either order, polylines match vertex by vertex. Different types never
    match.
    """
    if a is None or b is None or type(a) is not type(b):
        return False
    matcher = _MATCHERS.get(type(a))
    if matcher is None:
        return False
    return matcher(a, b, tolerance)


def find_equivalent(
    primitive: Primitive, registry: PrimitiveRegistry, tolerance: float = MATCH_TOLERANCE
) -> Optional[str]:
    """Key of the first registry entry equivalent to ``primitive``."""
    for key, candidate in registry.items():
        if are_equivalent(primitive, candidate, tolerance):
            return key
    return None


def find_polyline_source(
    segment: Primitive, registry: PrimitiveRegistry, tolerance: float = MATCH_TOLERANCE
) -> Optional[str]:
    """Key of the first polyline with a segment equivalent to ``segment``."""
    for key, candidate in registry.items():
        if not isinstance(candidate, Polyline):
            continue
        if any(
            are_equivalent(segment, part, tolerance) for part in segment_primitives(candidate)
        ):
            return key
    return None


@dataclass
class ReconcileResult:
    trajectories: List[TrajectoryPrimitive] = field(default_factory=list)
    resolved: List[int] = field(default_factory=list)  # key was still valid
    rebound: List[int] = field(default_factory=list)
    unmatched: List[int] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.unmatched


def _has_live_reference(trajectory: TrajectoryPrimitive, registry: PrimitiveRegistry) -> bool:
    primitive = registry.resolve(trajectory.primitive_key)
    if primitive is None:
        return False
    # polyline segments are keyed by their source polyline
    if trajectory.entity_type == POLYLINE_ENTITY:
        return isinstance(primitive, Polyline)
    return primitive.primitive_type == trajectory.primitive_type


def reconcile(
    trajectories: Sequence[TrajectoryPrimitive],
    registry: PrimitiveRegistry,
    tolerance: float = MATCH_TOLERANCE,
) -> ReconcileResult:
    """Re-link saved trajectories to the primitives of a freshly parsed drawing.

    Trajectories whose key still resolves are kept. The others are rebound to
    the first equivalent primitive in drawing order; a primitive can be
    matched by any number of trajectories. Polyline segments stay keyed by
    their polyline and are rebound to the first polyline with an equivalent
    segment. Trajectories without a match keep their stale key and are
    reported, never raised.

    Args:
        trajectories: saved trajectories, in pass order.
        registry: registry built from the new drawing.
        tolerance: matching tolerance in drawing units.

    Returns:
        Updated trajectories (same order) and the indices per outcome.
    """
    result = ReconcileResult()
    for index, trajectory in enumerate(trajectories):
        if _has_live_reference(trajectory, registry):
            result.trajectories.append(trajectory)
            result.resolved.append(index)
            continue

        reference = trajectory.reference_primitive()
        if reference is None:
            key = None
        elif trajectory.entity_type == POLYLINE_ENTITY:
            key = find_polyline_source(reference, registry, tolerance)
        else:
            key = find_equivalent(reference, registry, tolerance)
        if key is None:
            logger.warning(
                f"No drawing entity matches {trajectory.primitive_type} trajectory "
                f"#{index}, keeping stale reference {trajectory.primitive_key}"
            )
            result.trajectories.append(trajectory)
            result.unmatched.append(index)
            continue

        logger.debug(f"Rebound {trajectory.primitive_type} trajectory #{index} to {key}")
        result.trajectories.append(set_key(trajectory, key))
        result.rebound.append(index)
    return result
