"""
Taught trajectories and the commands that create and edit them.

A :class:`TrajectoryPrimitive` stores its geometry as labeled points (two for
a line, three for an arc or a circle) so it survives reversal and
serialization without re-deriving angle conventions. Commands never mutate;
they return an updated copy.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from sprayteach.bulge import bulge_to_arc, polyline_segments
from sprayteach.cad_types import Vector, VectorLike, as_vector
from sprayteach.constants import (
    ARC_ENTITY,
    CIRCLE_ENTITY,
    CIRCLE_SELECTION_ANGLES,
    DEFAULT_SPRAY_SPEED,
    LINE_ENTITY,
    MIN_PATH_LENGTH,
    MM_PER_M,
    POLYLINE_ENTITY,
    TRAJECTORY_TYPES,
)
from sprayteach.discretize import discretize_trajectory
from sprayteach.geom_utils import dominant_plane, local_basis, point_on_circle
from sprayteach.primitives import Arc, Circle, Line, Polyline, Primitive
from sprayteach.settings import TeachSettings
from sprayteach.solvers import arc_from_three_points, circle_from_three_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectoryPoint:
    """Path point with the tool orientation angles (degrees)."""

    position: Vector
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "position", as_vector(self.position))

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def z(self) -> float:
        return self.position.z

    def with_z(self, z: float) -> "TrajectoryPoint":
        return replace(self, position=self.position.with_z(z))

    def to_json(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "rx": self.rx,
            "ry": self.ry,
            "rz": self.rz,
        }

    @staticmethod
    def from_json(json_data) -> "TrajectoryPoint":
        return TrajectoryPoint(
            Vector(json_data["x"], json_data["y"], json_data.get("z", 0.0)),
            rx=json_data.get("rx", 0.0),
            ry=json_data.get("ry", 0.0),
            rz=json_data.get("rz", 0.0),
        )


@dataclass(frozen=True)
class NozzleSettings:
    upper_enabled: bool = True
    upper_gas_on: bool = False
    upper_liquid_on: bool = False
    lower_enabled: bool = False
    lower_gas_on: bool = False
    lower_liquid_on: bool = False

    def to_json(self) -> Dict[str, bool]:
        return {
            "upper_enabled": self.upper_enabled,
            "upper_gas_on": self.upper_gas_on,
            "upper_liquid_on": self.upper_liquid_on,
            "lower_enabled": self.lower_enabled,
            "lower_gas_on": self.lower_gas_on,
            "lower_liquid_on": self.lower_liquid_on,
        }

    @classmethod
    def from_json(cls, json_data) -> "NozzleSettings":
        return cls(**{k: bool(v) for k, v in json_data.items() if k in cls().to_json()})


@dataclass(frozen=True)
class TrajectoryPrimitive:
    primitive_type: str  # "Line", "Arc" or "Circle"
    point1: TrajectoryPoint  # line start, arc start, circle at 0 deg
    point2: TrajectoryPoint  # line end, arc mid, circle at 120 deg
    point3: Optional[TrajectoryPoint] = None  # arc end, circle at 240 deg
    # Original circle parameters, authoritative over the three points
    circle_center: Optional[Vector] = None
    circle_radius: float = 0.0
    circle_normal: Optional[Vector] = None
    is_reversed: bool = False
    nozzle: NozzleSettings = field(default_factory=NozzleSettings)
    nozzle_number: int = 0
    entity_type: str = ""
    runtime: float = 0.0  # seconds
    primitive_key: Optional[str] = None  # PrimitiveRegistry key

    def __post_init__(self):
        if self.primitive_type not in TRAJECTORY_TYPES:
            raise ValueError(f"Unknown trajectory type: {self.primitive_type}")
        if self.primitive_type != "Line" and self.point3 is None:
            raise ValueError(f"{self.primitive_type} trajectory needs three points")
        if self.runtime < 0:
            raise ValueError(f"Runtime must not be negative, got {self.runtime}")
        for name in ("circle_center", "circle_normal"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_vector(value))

    @property
    def start_point(self) -> TrajectoryPoint:
        return self.point1

    @property
    def end_point(self) -> TrajectoryPoint:
        return self.point2 if self.primitive_type == "Line" else self.point3

    def labeled_points(self) -> List[TrajectoryPoint]:
        if self.primitive_type == "Line":
            return [self.point1, self.point2]
        return [self.point1, self.point2, self.point3]

    def traversal_points(self) -> List[TrajectoryPoint]:
        """Labeled points in spraying order."""
        points = self.labeled_points()
        return points[::-1] if self.is_reversed else points

    def path(self, resolution_degrees: float) -> List[Vector]:
        return discretize_trajectory(self, resolution_degrees)

    def reference_primitive(self) -> Optional[Primitive]:
        """Drawing primitive described by this trajectory, used for matching.

        Returns ``None`` when the stored points no longer define an arc or a
        circle.
        """
        if self.primitive_type == "Line":
            return Line(self.point1.position, self.point2.position)

        if self.primitive_type == "Circle":
            if self.circle_radius > 0 and self.circle_center is not None:
                return Circle(
                    self.circle_center,
                    self.circle_radius,
                    self.circle_normal if self.circle_normal is not None else Vector(0, 0, 1),
                )
            fit = circle_from_three_points(
                self.point1.position, self.point2.position, self.point3.position
            )
            return None if fit is None else Circle(fit.center, fit.radius, fit.normal)

        fit = arc_from_three_points(
            self.point1.position, self.point2.position, self.point3.position
        )
        if fit is None:
            return None
        # angles of the fit run counter-clockwise about the positive plane axis
        normal = fit.normal
        if normal[dominant_plane(normal)[2]] < 0:
            normal = Vector.from_array(-normal)
        return Arc(fit.center, fit.radius, fit.start_angle, fit.end_angle, normal)

    def to_json(self) -> Dict[str, Any]:
        json_data: Dict[str, Any] = {"type": self.primitive_type}
        if self.primitive_type == "Line":
            json_data["start"] = self.point1.to_json()
            json_data["end"] = self.point2.to_json()
        else:
            json_data["point1"] = self.point1.to_json()
            json_data["point2"] = self.point2.to_json()
            json_data["point3"] = self.point3.to_json()
        if self.primitive_type == "Circle" and self.circle_center is not None:
            normal = self.circle_normal
            if normal is None:
                normal = Vector(0, 0, 1)
            json_data["circle"] = {
                "center": self.circle_center.to_json(),
                "radius": self.circle_radius,
                "normal": normal.to_json(),
            }
        json_data.update(
            {
                "entity_type": self.entity_type,
                "is_reversed": self.is_reversed,
                "nozzle": self.nozzle.to_json(),
                "nozzle_number": self.nozzle_number,
                "runtime": self.runtime,
                "primitive_key": self.primitive_key,
            }
        )
        return json_data

    @staticmethod
    def from_json(json_data) -> "TrajectoryPrimitive":
        primitive_type = json_data.get("type")
        try:
            if primitive_type == "Line":
                point1 = TrajectoryPoint.from_json(json_data["start"])
                point2 = TrajectoryPoint.from_json(json_data["end"])
                point3 = None
            else:
                point1 = TrajectoryPoint.from_json(json_data["point1"])
                point2 = TrajectoryPoint.from_json(json_data["point2"])
                point3 = TrajectoryPoint.from_json(json_data["point3"])
        except KeyError as e:
            raise ValueError(f"{primitive_type} record is missing {e}") from e

        circle = json_data.get("circle")
        return TrajectoryPrimitive(
            primitive_type=primitive_type,
            point1=point1,
            point2=point2,
            point3=point3,
            circle_center=Vector.from_json(circle["center"]) if circle else None,
            circle_radius=circle["radius"] if circle else 0.0,
            circle_normal=Vector.from_json(circle["normal"]) if circle else None,
            is_reversed=json_data.get("is_reversed", False),
            nozzle=NozzleSettings.from_json(json_data.get("nozzle", {})),
            nozzle_number=json_data.get("nozzle_number", 0),
            entity_type=json_data.get("entity_type", ""),
            runtime=json_data.get("runtime", 0.0),
            primitive_key=json_data.get("primitive_key"),
        )


def path_length(points: Sequence[VectorLike]) -> float:
    """Length of a point path in metres; drawing units are millimetres."""
    length = 0.0
    for a, b in zip(points, points[1:]):
        length += as_vector(a).distance_to(b)
    return length / MM_PER_M


def min_runtime(
    points: Sequence[VectorLike], speed: float = DEFAULT_SPRAY_SPEED
) -> float:
    """Shortest runtime in seconds for the path at ``speed`` m/s."""
    length = path_length(points)
    if length < MIN_PATH_LENGTH:
        return 0.0
    return length / speed


def with_min_runtime(
    trajectory: TrajectoryPrimitive, settings: Optional[TeachSettings] = None
) -> TrajectoryPrimitive:
    settings = settings or TeachSettings()
    points = trajectory.path(settings.resolution_degrees)
    return replace(trajectory, runtime=min_runtime(points, settings.spray_speed))


def select(
    primitive: Primitive,
    key: Optional[str] = None,
    settings: Optional[TeachSettings] = None,
) -> TrajectoryPrimitive:
    """Create the trajectory for a picked line, arc or circle.

    Args:
        primitive: the picked drawing entity.
        key: registry key of ``primitive``, stored for later lookup.
        settings: resolution and speed used for the initial runtime.

    Returns:
        New trajectory with its minimum runtime.
    """
    if isinstance(primitive, Line):
        start, end = primitive.start, primitive.end
        # the endpoint nearer the origin starts the path
        if end.squared_length() < start.squared_length():
            start, end = end, start
        trajectory = TrajectoryPrimitive(
            "Line",
            TrajectoryPoint(start),
            TrajectoryPoint(end),
            entity_type=LINE_ENTITY,
            primitive_key=key,
        )
    elif isinstance(primitive, Arc):
        trajectory = TrajectoryPrimitive(
            "Arc",
            TrajectoryPoint(primitive.start_point),
            TrajectoryPoint(primitive.mid_point),
            TrajectoryPoint(primitive.end_point),
            entity_type=ARC_ENTITY,
            primitive_key=key,
        )
    elif isinstance(primitive, Circle):
        x_axis, y_axis = local_basis(primitive.normal)
        p1, p2, p3 = (
            TrajectoryPoint(
                point_on_circle(primitive.center, primitive.radius, angle, x_axis, y_axis)
            )
            for angle in CIRCLE_SELECTION_ANGLES
        )
        trajectory = TrajectoryPrimitive(
            "Circle",
            p1,
            p2,
            p3,
            circle_center=primitive.center,
            circle_radius=primitive.radius,
            circle_normal=primitive.normal.normalize(),
            entity_type=CIRCLE_ENTITY,
            primitive_key=key,
        )
    elif isinstance(primitive, Polyline):
        raise ValueError("Polylines are taught per segment, use select_polyline")
    else:
        raise ValueError(f"Cannot teach a {primitive.primitive_type}")

    return with_min_runtime(trajectory, settings)


def select_polyline(
    polyline: Polyline,
    key: Optional[str] = None,
    settings: Optional[TeachSettings] = None,
) -> List[TrajectoryPrimitive]:
    """One trajectory per polyline segment, in vertex order."""
    trajectories = []
    for start, end, bulge in polyline_segments(polyline):
        bulge_arc = bulge_to_arc(start, end, bulge)
        if bulge_arc is None:
            if start.distance_to(end) == 0:
                logger.debug("Skipping zero-length polyline segment")
                continue
            trajectory = TrajectoryPrimitive(
                "Line",
                TrajectoryPoint(start),
                TrajectoryPoint(end),
                entity_type=POLYLINE_ENTITY,
                primitive_key=key,
            )
        else:
            arc = bulge_arc.to_arc(polyline.elevation)
            trajectory = TrajectoryPrimitive(
                "Arc",
                TrajectoryPoint(start),
                TrajectoryPoint(arc.mid_point),
                TrajectoryPoint(end),
                entity_type=POLYLINE_ENTITY,
                primitive_key=key,
            )
        trajectories.append(with_min_runtime(trajectory, settings))
    return trajectories


def set_reversed(trajectory: TrajectoryPrimitive, reversed: bool) -> TrajectoryPrimitive:
    return replace(trajectory, is_reversed=reversed)


def toggle_direction(trajectory: TrajectoryPrimitive) -> TrajectoryPrimitive:
    return replace(trajectory, is_reversed=not trajectory.is_reversed)


def set_z(trajectory: TrajectoryPrimitive, z: float) -> TrajectoryPrimitive:
    """Move every labeled point (and the circle center) to height ``z``."""
    if not math.isfinite(z):
        raise ValueError(f"Z must be finite, got {z}")
    changes: Dict[str, Any] = {
        "point1": trajectory.point1.with_z(z),
        "point2": trajectory.point2.with_z(z),
    }
    if trajectory.point3 is not None:
        changes["point3"] = trajectory.point3.with_z(z)
    if trajectory.circle_center is not None:
        changes["circle_center"] = trajectory.circle_center.with_z(z)
    return replace(trajectory, **changes)


def set_line_z(
    trajectory: TrajectoryPrimitive,
    start_z: Optional[float] = None,
    end_z: Optional[float] = None,
) -> TrajectoryPrimitive:
    if trajectory.primitive_type != "Line":
        raise ValueError("Per-endpoint heights only apply to lines")
    point1, point2 = trajectory.point1, trajectory.point2
    if start_z is not None:
        point1 = point1.with_z(start_z)
    if end_z is not None:
        point2 = point2.with_z(end_z)
    return replace(trajectory, point1=point1, point2=point2)


def set_nozzle(trajectory: TrajectoryPrimitive, **flags) -> TrajectoryPrimitive:
    unknown = set(flags) - set(trajectory.nozzle.to_json())
    if unknown:
        raise ValueError(f"Unknown nozzle flags: {sorted(unknown)}")
    return replace(trajectory, nozzle=replace(trajectory.nozzle, **flags))


def set_runtime(trajectory: TrajectoryPrimitive, seconds: float) -> TrajectoryPrimitive:
    if seconds < 0:
        raise ValueError(f"Runtime must not be negative, got {seconds}")
    return replace(trajectory, runtime=float(seconds))


def set_key(trajectory: TrajectoryPrimitive, key: Optional[str]) -> TrajectoryPrimitive:
    return replace(trajectory, primitive_key=key)
