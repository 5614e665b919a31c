from typing import Sequence, Tuple, Union

import numpy as np


class Vector(np.ndarray):
    def __new__(cls, x: float, y: float, z: float = 0) -> "Vector":
        return np.asarray([x, y, z], dtype=float).view(cls)

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        # plain arrays, so numpy's own ``==`` never dispatches back here
        return bool(np.allclose(np.asarray(self), np.asarray(other, dtype=float)))

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    __hash__ = None

    def __repr__(self):
        return f"Vector({float(self[0])}, {float(self[1])}, {float(self[2])})"

    @staticmethod
    def from_array(values) -> "Vector":
        values = np.asarray(values, dtype=float)
        if values.shape == (2,):
            return Vector(values[0], values[1], 0.0)
        if values.shape != (3,):
            raise ValueError(f"Cannot build a Vector from shape {values.shape}")
        return Vector(values[0], values[1], values[2])

    def normalize(self) -> "Vector":
        norm = np.linalg.norm(self)
        if norm == 0:
            raise ValueError("Cannot normalize a zero-length vector")
        return Vector.from_array(np.asarray(self) / norm)

    def length(self) -> float:
        return float(np.linalg.norm(self))

    def squared_length(self) -> float:
        return float(np.dot(self, self))

    def dot(self, other: "VectorLike") -> float:
        return float(np.dot(np.asarray(self), np.asarray(as_vector(other))))

    def cross(self, other: "VectorLike") -> "Vector":
        return Vector.from_array(np.cross(np.asarray(self), np.asarray(as_vector(other))))

    def distance_to(self, other: "VectorLike") -> float:
        return float(np.linalg.norm(np.asarray(self) - np.asarray(as_vector(other))))

    def is_close(self, other: "VectorLike", tolerance: float) -> bool:
        """Per-axis comparison, strictly inside ``tolerance`` on every axis."""
        delta = np.abs(np.asarray(self) - np.asarray(as_vector(other)))
        return bool(np.all(delta < tolerance))

    def with_z(self, z: float) -> "Vector":
        return Vector(self.x, self.y, z)

    @property
    def x(self) -> float:
        return float(self[0])

    @property
    def y(self) -> float:
        return float(self[1])

    @property
    def z(self) -> float:
        return float(self[2])

    def to_json(self):
        return {
            "x": float(self.x),
            "y": float(self.y),
            "z": float(self.z),
        }

    @staticmethod
    def from_json(json_data):
        return Vector(json_data["x"], json_data["y"], json_data.get("z", 0.0))


VectorLike = Union[Tuple[float, float], Tuple[float, float, float], Sequence[float], Vector]


def as_vector(value: VectorLike) -> Vector:
    """Coerce a 2- or 3-tuple (or array) into a :class:`Vector`."""
    if isinstance(value, Vector):
        return value
    return Vector.from_array(value)
