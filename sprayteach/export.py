"""
Values handed to the controller link.

The link itself (register framing, unit scaling) lives outside this package;
this module only lays out what is sent.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from sprayteach.config import Configuration, SprayPass
from sprayteach.constants import (
    LOWER_GAS_CODES,
    LOWER_LIQUID_CODES,
    PRIMITIVE_CODES,
    RESERVED_VALUE_COUNT,
    UNKNOWN_PRIMITIVE_CODE,
    UPPER_GAS_CODES,
    UPPER_LIQUID_CODES,
)
from sprayteach.settings import TeachSettings
from sprayteach.trajectory import TrajectoryPrimitive, path_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectoryPayload:
    index: int
    primitive_code: int
    points: List[Tuple[float, float, float]]
    upper_gas_on: bool
    upper_liquid_on: bool
    lower_gas_on: bool
    lower_liquid_on: bool
    runtime: float  # s
    speed: float  # m/s


def primitive_code(primitive_type: str) -> int:
    return PRIMITIVE_CODES.get(primitive_type, UNKNOWN_PRIMITIVE_CODE)


def spray_speed(trajectory: TrajectoryPrimitive, points) -> float:
    """Speed in m/s for the trajectory runtime, 0 when it has none."""
    if trajectory.runtime <= 0:
        return 0.0
    return path_length(points) / trajectory.runtime


def build_payload(
    spray_pass: SprayPass, settings: Optional[TeachSettings] = None
) -> List[TrajectoryPayload]:
    """Discretized points and spray flags per trajectory of a pass."""
    settings = settings or TeachSettings()
    payload = []
    for index, trajectory in enumerate(spray_pass.trajectories):
        points = trajectory.path(settings.resolution_degrees)
        nozzle = trajectory.nozzle
        payload.append(
            TrajectoryPayload(
                index=index,
                primitive_code=primitive_code(trajectory.primitive_type),
                points=[(p.x, p.y, p.z) for p in points],
                upper_gas_on=nozzle.upper_enabled and nozzle.upper_gas_on,
                upper_liquid_on=nozzle.upper_enabled and nozzle.upper_liquid_on,
                lower_gas_on=nozzle.lower_enabled and nozzle.lower_gas_on,
                lower_liquid_on=nozzle.lower_enabled and nozzle.lower_liquid_on,
                runtime=trajectory.runtime,
                speed=spray_speed(trajectory, points),
            )
        )
    return payload


def _flag(on: bool, codes: Tuple[int, int]) -> float:
    return float(codes[0] if on else codes[1])


def trajectory_values(
    index: int, trajectory: TrajectoryPrimitive, settings: TeachSettings
) -> List[float]:
    nozzle = trajectory.nozzle
    values = [
        float(index),
        float(primitive_code(trajectory.primitive_type)),
        _flag(nozzle.upper_enabled and nozzle.upper_gas_on, UPPER_GAS_CODES),
        _flag(nozzle.upper_enabled and nozzle.upper_liquid_on, UPPER_LIQUID_CODES),
        _flag(nozzle.lower_enabled and nozzle.lower_gas_on, LOWER_GAS_CODES),
        _flag(nozzle.lower_enabled and nozzle.lower_liquid_on, LOWER_LIQUID_CODES),
        spray_speed(trajectory, trajectory.path(settings.resolution_degrees)),
    ]
    for point in trajectory.traversal_points():
        values.extend([point.x, point.y, point.z, point.rx, point.ry, point.rz])
    values.extend([0.0] * RESERVED_VALUE_COUNT)
    return values


def send_data_values(
    configuration: Configuration, settings: Optional[TeachSettings] = None
) -> List[float]:
    """Flat value list for the controller, all passes in order.

    Layout: pass count, then per pass its trajectory count followed by each
    trajectory's index, type code, nozzle codes, speed, labeled points
    ``(x, y, z, rx, ry, rz)`` in spraying order and reserved zeros.
    """
    settings = settings or TeachSettings()
    values = [float(len(configuration.spray_passes))]
    for spray_pass in configuration.spray_passes:
        values.append(float(len(spray_pass.trajectories)))
        for index, trajectory in enumerate(spray_pass.trajectories):
            values.extend(trajectory_values(index, trajectory, settings))
    return values


def write_send_data(
    configuration: Configuration,
    path: Union[str, Path],
    settings: Optional[TeachSettings] = None,
) -> int:
    """Write the send data one value per line; returns the value count."""
    values = send_data_values(configuration, settings)
    with open(path, "w") as fp:
        for value in values:
            fp.write(f"{value:.3f}\n")
    logger.info(f"Wrote {len(values)} send values to {path}")
    return len(values)
