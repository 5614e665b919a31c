import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from sprayteach.bulge import bulge_to_arc, polyline_segments
from sprayteach.cad_types import VectorLike, as_vector
from sprayteach.constants import IGNORED_LAYERS
from sprayteach.geom_utils import angle_in_ccw_span, degs_to_rads, rotate_by_z
from sprayteach.primitives import (
    Arc,
    Block,
    Circle,
    Drawing,
    Insert,
    Line,
    Polyline,
    Primitive,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @staticmethod
    def from_points(points: Iterable[Sequence[float]]) -> Optional["BoundingBox"]:
        coords = np.asarray([(float(p[0]), float(p[1])) for p in points])
        if coords.size == 0:
            return None
        return BoundingBox(
            float(coords[:, 0].min()),
            float(coords[:, 1].min()),
            float(coords[:, 0].max()),
            float(coords[:, 1].max()),
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0

    def corners(self) -> List[Tuple[float, float]]:
        return [
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        ]

    def union(self, other: Optional["BoundingBox"]) -> "BoundingBox":
        if other is None:
            return self
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def expanded(self, margin: float) -> "BoundingBox":
        """Grow by ``margin`` times the larger side on every edge."""
        pad = margin * max(self.width, self.height, 1e-9)
        return BoundingBox(
            self.min_x - pad, self.min_y - pad, self.max_x + pad, self.max_y + pad
        )

    def contains(self, point: Sequence[float], tolerance: float = 0.0) -> bool:
        return (
            self.min_x - tolerance <= point[0] <= self.max_x + tolerance
            and self.min_y - tolerance <= point[1] <= self.max_y + tolerance
        )


def union_all(boxes: Iterable[Optional[BoundingBox]]) -> Optional[BoundingBox]:
    result = None
    for box in boxes:
        if box is None:
            continue
        result = box if result is None else result.union(box)
    return result


def arc_bounds(
    center: VectorLike, radius: float, start_angle: float, end_angle: float
) -> BoundingBox:
    """Extents of a counter-clockwise arc, quadrant points included when swept.

    Angles are taken in the XY plane about +Z. The arc's own normal is not
    consulted, so an arc with a -Z normal is bounded as its XY mirror image
    rather than along the path it is discretized to.
    """
    center = as_vector(center)
    points = []
    for angle in [start_angle, end_angle] + [
        a for a in (0.0, 90.0, 180.0, 270.0) if angle_in_ccw_span(a, start_angle, end_angle)
    ]:
        theta = degs_to_rads(angle)
        points.append(
            (center.x + radius * math.cos(theta), center.y + radius * math.sin(theta))
        )
    return BoundingBox.from_points(points)


def polyline_bounds(polyline: Polyline) -> Optional[BoundingBox]:
    box = BoundingBox.from_points((v.x, v.y) for v in polyline.vertices)
    if box is None:
        return None
    for start, end, bulge in polyline_segments(polyline):
        bulge_arc = bulge_to_arc(start, end, bulge)
        if bulge_arc is not None:
            box = box.union(
                arc_bounds(
                    bulge_arc.center,
                    bulge_arc.radius,
                    bulge_arc.start_angle,
                    bulge_arc.end_angle,
                )
            )
    return box


def transform_point(
    point: Sequence[float],
    location: VectorLike,
    x_scale: float = 1.0,
    y_scale: float = 1.0,
    rotation: float = 0.0,
) -> Tuple[float, float]:
    """Block space to drawing space: scale, then rotate (degrees), then move."""
    location = as_vector(location)
    scaled = np.array([point[0] * x_scale, point[1] * y_scale])
    rotated = rotate_by_z(scaled, degs_to_rads(rotation))
    return float(rotated[0] + location.x), float(rotated[1] + location.y)


def block_bounds(
    block: Block, drawing: Optional[Drawing] = None, _visiting: Tuple[str, ...] = ()
) -> Optional[BoundingBox]:
    if block.name in _visiting:
        logger.warning(f"Block {block.name} references itself, ignoring the cycle")
        return None
    visiting = _visiting + (block.name,)
    return union_all(
        primitive_bounds(entity, drawing, _visiting=visiting) for entity in block.entities
    )


def insert_bounds(
    insert: Insert, drawing: Optional[Drawing] = None, _visiting: Tuple[str, ...] = ()
) -> BoundingBox:
    """Extents of a block instance from the four transformed block corners.

    A missing or empty block collapses to the insertion point.
    """
    block = drawing.resolve_block(insert.block_name) if drawing is not None else None
    local = None
    if block is None:
        logger.debug(f"Block {insert.block_name} not found")
    else:
        local = block_bounds(block, drawing, _visiting)
    if local is None:
        return BoundingBox(
            insert.location.x, insert.location.y, insert.location.x, insert.location.y
        )
    return BoundingBox.from_points(
        transform_point(
            corner, insert.location, insert.x_scale, insert.y_scale, insert.rotation
        )
        for corner in local.corners()
    )


def primitive_bounds(
    primitive: Primitive, drawing: Optional[Drawing] = None, _visiting: Tuple[str, ...] = ()
) -> Optional[BoundingBox]:
    """Axis-aligned extents of one primitive in the XY plane.

    Args:
        primitive: the entity.
        drawing: block table used to resolve inserts.

    Returns:
        The bounding box, or ``None`` for entities without extent.
    """
    if isinstance(primitive, Line):
        return BoundingBox.from_points([primitive.start, primitive.end])
    if isinstance(primitive, Circle):
        c, r = primitive.center, primitive.radius
        return BoundingBox(c.x - r, c.y - r, c.x + r, c.y + r)
    if isinstance(primitive, Arc):
        return arc_bounds(
            primitive.center, primitive.radius, primitive.start_angle, primitive.end_angle
        )
    if isinstance(primitive, Polyline):
        return polyline_bounds(primitive)
    if isinstance(primitive, Insert):
        return insert_bounds(primitive, drawing, _visiting)
    logger.debug(f"No bounds for {type(primitive).__name__}")
    return None


def drawing_bounds(
    drawing: Drawing, ignore_layers: Optional[Iterable[str]] = None
) -> Optional[BoundingBox]:
    """Extents of all drawing entities outside the helper layers."""
    if ignore_layers is None:
        ignore_layers = IGNORED_LAYERS
    ignored = {name.upper() for name in ignore_layers}
    return union_all(
        primitive_bounds(entity, drawing)
        for entity in drawing.entities
        if entity.layer.upper() not in ignored
    )
