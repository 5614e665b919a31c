"""
Drawing-native primitives.

These are the shapes handed over by the drawing parser. They are immutable
once parsed; trajectories never hold them directly but refer to them through
:class:`sprayteach.registry.PrimitiveRegistry` keys.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from sprayteach.cad_types import Vector, as_vector
from sprayteach.geom_utils import ccw_sweep, local_basis, point_on_circle


def _default_normal():
    return Vector(0, 0, 1)


class Primitive:
    """Base class of all drawing entities."""

    primitive_type: ClassVar[str] = "Primitive"

    def to_json(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class Line(Primitive):
    primitive_type: ClassVar[str] = "Line"

    start: Vector
    end: Vector
    layer: str = "0"

    def __post_init__(self):
        object.__setattr__(self, "start", as_vector(self.start))
        object.__setattr__(self, "end", as_vector(self.end))

    def length(self) -> float:
        return self.start.distance_to(self.end)

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": self.primitive_type,
            "start": self.start.to_json(),
            "end": self.end.to_json(),
            "layer": self.layer,
        }

    @classmethod
    def from_json(cls, json_data) -> "Line":
        return cls(
            Vector.from_json(json_data["start"]),
            Vector.from_json(json_data["end"]),
            layer=json_data.get("layer", "0"),
        )


@dataclass(frozen=True, eq=False)
class Arc(Primitive):
    """Arc running counter-clockwise about ``normal`` from start to end angle."""

    primitive_type: ClassVar[str] = "Arc"

    center: Vector
    radius: float
    start_angle: float  # degrees
    end_angle: float  # degrees
    normal: Vector = field(default_factory=_default_normal)
    layer: str = "0"

    def __post_init__(self):
        object.__setattr__(self, "center", as_vector(self.center))
        object.__setattr__(self, "normal", as_vector(self.normal))
        object.__setattr__(self, "radius", float(self.radius))

    @property
    def sweep(self) -> float:
        return ccw_sweep(self.start_angle, self.end_angle)

    def point_at(self, angle_deg: float) -> Vector:
        x_axis, y_axis = local_basis(self.normal)
        return point_on_circle(self.center, self.radius, angle_deg, x_axis, y_axis)

    @property
    def start_point(self) -> Vector:
        return self.point_at(self.start_angle)

    @property
    def end_point(self) -> Vector:
        return self.point_at(self.end_angle)

    @property
    def mid_point(self) -> Vector:
        return self.point_at(self.start_angle + self.sweep / 2.0)

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": self.primitive_type,
            "center": self.center.to_json(),
            "radius": self.radius,
            "start_angle": self.start_angle,
            "end_angle": self.end_angle,
            "normal": self.normal.to_json(),
            "layer": self.layer,
        }

    @classmethod
    def from_json(cls, json_data) -> "Arc":
        return cls(
            center=Vector.from_json(json_data["center"]),
            radius=json_data["radius"],
            start_angle=json_data["start_angle"],
            end_angle=json_data["end_angle"],
            normal=Vector.from_json(json_data.get("normal", {"x": 0, "y": 0, "z": 1})),
            layer=json_data.get("layer", "0"),
        )


@dataclass(frozen=True, eq=False)
class Circle(Primitive):
    primitive_type: ClassVar[str] = "Circle"

    center: Vector
    radius: float
    normal: Vector = field(default_factory=_default_normal)
    layer: str = "0"

    def __post_init__(self):
        object.__setattr__(self, "center", as_vector(self.center))
        object.__setattr__(self, "normal", as_vector(self.normal))
        object.__setattr__(self, "radius", float(self.radius))

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": self.primitive_type,
            "center": self.center.to_json(),
            "radius": self.radius,
            "normal": self.normal.to_json(),
            "layer": self.layer,
        }

    @classmethod
    def from_json(cls, json_data) -> "Circle":
        return cls(
            center=Vector.from_json(json_data["center"]),
            radius=json_data["radius"],
            normal=Vector.from_json(json_data.get("normal", {"x": 0, "y": 0, "z": 1})),
            layer=json_data.get("layer", "0"),
        )


@dataclass(frozen=True)
class PolylineVertex:
    x: float
    y: float
    bulge: float = 0.0  # tan(included angle / 4), positive is counter-clockwise

    def to_json(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "bulge": self.bulge}

    @classmethod
    def from_json(cls, json_data) -> "PolylineVertex":
        return cls(json_data["x"], json_data["y"], json_data.get("bulge", 0.0))


@dataclass(frozen=True, eq=False)
class Polyline(Primitive):
    primitive_type: ClassVar[str] = "Polyline"

    vertices: Tuple[PolylineVertex, ...]
    closed: bool = False
    elevation: float = 0.0
    layer: str = "0"

    def __post_init__(self):
        vertices = tuple(
            v if isinstance(v, PolylineVertex) else PolylineVertex(*v)
            for v in self.vertices
        )
        object.__setattr__(self, "vertices", vertices)

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": self.primitive_type,
            "vertices": [v.to_json() for v in self.vertices],
            "closed": self.closed,
            "elevation": self.elevation,
            "layer": self.layer,
        }

    @classmethod
    def from_json(cls, json_data) -> "Polyline":
        return cls(
            vertices=tuple(PolylineVertex.from_json(v) for v in json_data["vertices"]),
            closed=json_data.get("closed", False),
            elevation=json_data.get("elevation", 0.0),
            layer=json_data.get("layer", "0"),
        )


@dataclass(frozen=True, eq=False)
class Insert(Primitive):
    """Instance of a named block: scaled, then rotated, then translated."""

    primitive_type: ClassVar[str] = "Insert"

    block_name: str
    location: Vector
    x_scale: float = 1.0
    y_scale: float = 1.0
    rotation: float = 0.0  # degrees
    layer: str = "0"

    def __post_init__(self):
        object.__setattr__(self, "location", as_vector(self.location))

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": self.primitive_type,
            "block_name": self.block_name,
            "location": self.location.to_json(),
            "x_scale": self.x_scale,
            "y_scale": self.y_scale,
            "rotation": self.rotation,
            "layer": self.layer,
        }

    @classmethod
    def from_json(cls, json_data) -> "Insert":
        return cls(
            block_name=json_data["block_name"],
            location=Vector.from_json(json_data["location"]),
            x_scale=json_data.get("x_scale", 1.0),
            y_scale=json_data.get("y_scale", 1.0),
            rotation=json_data.get("rotation", 0.0),
            layer=json_data.get("layer", "0"),
        )


@dataclass(frozen=True, eq=False)
class Block:
    name: str
    entities: Tuple[Primitive, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "entities", tuple(self.entities))

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "entities": [e.to_json() for e in self.entities]}

    @classmethod
    def from_json(cls, json_data) -> "Block":
        return cls(
            json_data["name"],
            tuple(primitive_from_json(e) for e in json_data.get("entities", [])),
        )


@dataclass
class Drawing:
    """Ordered entity list of a parsed drawing plus its block table."""

    entities: List[Primitive] = field(default_factory=list)
    blocks: Dict[str, Block] = field(default_factory=dict)

    def resolve_block(self, name: str) -> Optional[Block]:
        return self.blocks.get(name)

    def add_block(self, block: Block) -> None:
        self.blocks[block.name] = block

    def to_json(self) -> Dict[str, Any]:
        return {
            "entities": [e.to_json() for e in self.entities],
            "blocks": [b.to_json() for b in self.blocks.values()],
        }

    @classmethod
    def from_json(cls, json_data) -> "Drawing":
        drawing = cls([primitive_from_json(e) for e in json_data.get("entities", [])])
        for block_data in json_data.get("blocks", []):
            drawing.add_block(Block.from_json(block_data))
        return drawing


PRIMITIVE_CLASSES = {
    Line.primitive_type: Line,
    Arc.primitive_type: Arc,
    Circle.primitive_type: Circle,
    Polyline.primitive_type: Polyline,
    Insert.primitive_type: Insert,
}


def primitive_from_json(json_data) -> Primitive:
    primitive_type = json_data.get("type")
    if primitive_type not in PRIMITIVE_CLASSES:
        raise ValueError(f"Unknown primitive type: {primitive_type}")
    return PRIMITIVE_CLASSES[primitive_type].from_json(json_data)
