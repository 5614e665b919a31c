import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from sprayteach.constants import (
    DEFAULT_RESOLUTION_DEGREES,
    DEFAULT_SPRAY_SPEED,
    IGNORED_LAYERS,
    MATCH_TOLERANCE,
)

logger = logging.getLogger(__name__)


@dataclass
class TeachSettings:
    """Numeric settings threaded through discretization and matching."""

    resolution_degrees: float = DEFAULT_RESOLUTION_DEGREES  # arc/circle step
    match_tolerance: float = MATCH_TOLERANCE  # reconciliation, drawing units
    spray_speed: float = DEFAULT_SPRAY_SPEED  # m/s
    ignore_layers: List[str] = field(default_factory=lambda: list(IGNORED_LAYERS))

    def __post_init__(self):
        if not self.resolution_degrees > 0:
            raise ValueError(
                f"resolution_degrees must be positive, got {self.resolution_degrees}"
            )
        if self.resolution_degrees > 360:
            logger.warning(
                f"resolution_degrees {self.resolution_degrees} exceeds a full turn"
            )
        if self.match_tolerance <= 0:
            raise ValueError(f"match_tolerance must be positive, got {self.match_tolerance}")
        if self.spray_speed <= 0:
            raise ValueError(f"spray_speed must be positive, got {self.spray_speed}")

    def to_json(self) -> Dict[str, Any]:
        return {
            "resolution_degrees": self.resolution_degrees,
            "match_tolerance": self.match_tolerance,
            "spray_speed": self.spray_speed,
            "ignore_layers": list(self.ignore_layers),
        }

    @classmethod
    def from_json(cls, json_data) -> "TeachSettings":
        known = cls().to_json().keys()
        unknown = set(json_data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in json_data.items() if k in known})

    @staticmethod
    def load(path: Union[str, Path]) -> "TeachSettings":
        with open(path, "r") as fp:
            return TeachSettings.from_json(json.load(fp))
