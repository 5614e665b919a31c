"""
sprayteach - trajectory teaching for spray robots.

Turns picked drawing primitives (lines, arcs, circles, polylines) into
ordered spray paths and re-links saved trajectories to reloaded drawings.
"""

__version__ = "0.1.0"
__author__ = "Your Name"
__email__ = "your.email@example.com"

# Geometry types
from .cad_types import Vector

# Drawing primitives
from .primitives import (
    Arc,
    Block,
    Circle,
    Drawing,
    Insert,
    Line,
    Polyline,
    PolylineVertex,
    primitive_from_json,
)

# Geometry core
from .bounding_box import BoundingBox, drawing_bounds, primitive_bounds
from .bulge import bulge_to_arc
from .discretize import discretize_primitive, discretize_trajectory
from .equivalence import are_equivalent, reconcile
from .registry import PrimitiveRegistry
from .solvers import arc_from_three_points, circle_from_three_points

# Teaching workflow
from .config import Configuration, SprayPass
from .settings import TeachSettings
from .trajectory import (
    TrajectoryPoint,
    TrajectoryPrimitive,
    select,
    select_polyline,
    set_reversed,
    set_z,
    toggle_direction,
)

__all__ = [
    # Geometry types
    "Vector",
    # Primitives
    "Arc",
    "Block",
    "Circle",
    "Drawing",
    "Insert",
    "Line",
    "Polyline",
    "PolylineVertex",
    "primitive_from_json",
    # Geometry core
    "BoundingBox",
    "drawing_bounds",
    "primitive_bounds",
    "bulge_to_arc",
    "discretize_primitive",
    "discretize_trajectory",
    "are_equivalent",
    "reconcile",
    "PrimitiveRegistry",
    "arc_from_three_points",
    "circle_from_three_points",
    # Teaching workflow
    "Configuration",
    "SprayPass",
    "TeachSettings",
    "TrajectoryPoint",
    "TrajectoryPrimitive",
    "select",
    "select_polyline",
    "set_reversed",
    "set_z",
    "toggle_direction",
]
