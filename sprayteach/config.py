"""
Spray passes and the saved teaching configuration.

The configuration is stored as a JSON document. Trajectory point lists are
not part of it; they are regenerated from the labeled points on load.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sprayteach.constants import DEFAULT_MODBUS_HOST, DEFAULT_MODBUS_PORT
from sprayteach.trajectory import TrajectoryPrimitive

logger = logging.getLogger(__name__)


@dataclass
class SprayPass:
    """Named, ordered list of trajectories sprayed in one run."""

    name: str
    trajectories: List[TrajectoryPrimitive] = field(default_factory=list)

    def add(self, trajectory: TrajectoryPrimitive) -> int:
        self.trajectories.append(trajectory)
        return len(self.trajectories) - 1

    def replace_at(self, index: int, trajectory: TrajectoryPrimitive) -> None:
        self.trajectories[index] = trajectory

    def remove_at(self, index: int) -> TrajectoryPrimitive:
        return self.trajectories.pop(index)

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "trajectories": [t.to_json() for t in self.trajectories],
        }

    @classmethod
    def from_json(cls, json_data) -> "SprayPass":
        return cls(
            name=json_data.get("name", ""),
            trajectories=[
                TrajectoryPrimitive.from_json(t) for t in json_data.get("trajectories", [])
            ],
        )


@dataclass
class Configuration:
    product_name: str = ""
    modbus_host: str = DEFAULT_MODBUS_HOST
    modbus_port: int = DEFAULT_MODBUS_PORT
    spray_passes: List[SprayPass] = field(default_factory=list)
    current_pass_index: int = -1  # -1 when no pass is selected

    def __post_init__(self):
        if not 0 < self.modbus_port < 65536:
            raise ValueError(f"Invalid Modbus port: {self.modbus_port}")

    @property
    def current_pass(self) -> Optional[SprayPass]:
        if 0 <= self.current_pass_index < len(self.spray_passes):
            return self.spray_passes[self.current_pass_index]
        return None

    def add_pass(self, name: Optional[str] = None) -> SprayPass:
        spray_pass = SprayPass(name or f"Pass {len(self.spray_passes) + 1}")
        self.spray_passes.append(spray_pass)
        self.current_pass_index = len(self.spray_passes) - 1
        return spray_pass

    def remove_pass(self, index: int) -> SprayPass:
        if not 0 <= index < len(self.spray_passes):
            raise ValueError(f"No spray pass at index {index}")
        removed = self.spray_passes.pop(index)
        if self.current_pass_index >= len(self.spray_passes):
            self.current_pass_index = len(self.spray_passes) - 1
        return removed

    def all_trajectories(self) -> List[TrajectoryPrimitive]:
        return [t for spray_pass in self.spray_passes for t in spray_pass.trajectories]

    def to_json(self) -> Dict[str, Any]:
        return {
            "product_name": self.product_name,
            "modbus": {"host": self.modbus_host, "port": self.modbus_port},
            "current_pass_index": self.current_pass_index,
            "spray_passes": [p.to_json() for p in self.spray_passes],
        }

    @classmethod
    def from_json(cls, json_data) -> "Configuration":
        modbus = json_data.get("modbus", {})
        configuration = cls(
            product_name=json_data.get("product_name", ""),
            modbus_host=modbus.get("host", DEFAULT_MODBUS_HOST),
            modbus_port=modbus.get("port", DEFAULT_MODBUS_PORT),
            spray_passes=[SprayPass.from_json(p) for p in json_data.get("spray_passes", [])],
            current_pass_index=json_data.get("current_pass_index", -1),
        )
        if configuration.current_pass is None and configuration.current_pass_index != -1:
            logger.warning(
                f"Current pass index {configuration.current_pass_index} out of range, reset"
            )
            configuration.current_pass_index = -1
        return configuration

    def save(self, path: Union[str, Path]) -> None:
        with open(path, "w") as fp:
            json.dump(self.to_json(), fp, indent=2)

    @staticmethod
    def load(path: Union[str, Path]) -> "Configuration":
        with open(path, "r") as fp:
            return Configuration.from_json(json.load(fp))
