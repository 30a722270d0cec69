"""
Sensor observations consumed by the fusion filter.

An observation is one of two immutable variants:

    LidarObservation(timestamp, px, py)
    RadarObservation(timestamp, rho, phi, rho_dot)

Timestamps are integer microseconds and must be non-decreasing across the
sequence handed to the filter. Values are validated when the observation is
constructed; the filter itself does not re-check them.
"""

import math
import numpy as np
from typing import Union
from dataclasses import dataclass
from enum import Enum

from ..tools import polar_to_cartesian


class SensorType(Enum):
    """Enumeration of supported sensor types."""
    LIDAR = "lidar"
    RADAR = "radar"


def _validate_common(timestamp: int, values: tuple) -> None:
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, np.integer)):
        raise ValueError(f"Timestamp must be an integer number of microseconds, got {timestamp!r}")
    if timestamp < 0:
        raise ValueError(f"Timestamp must be non-negative, got {timestamp}")
    if not all(math.isfinite(value) for value in values):
        raise ValueError(f"Measurement contains NaN or infinite values: {values}")


@dataclass(frozen=True)
class LidarObservation:
    """
    Lidar position reading in the Cartesian tracking frame.

    Attributes:
        timestamp: Acquisition time [µs]
        px: Position along x [m]
        py: Position along y [m]
    """
    timestamp: int
    px: float
    py: float

    sensor_type = SensorType.LIDAR

    def __post_init__(self):
        _validate_common(self.timestamp, (self.px, self.py))

    @property
    def raw_measurements(self) -> np.ndarray:
        """Measurement vector z = [px, py]."""
        return np.array([self.px, self.py], dtype=float)

    def initial_position(self):
        """Cartesian position used to start a track from this reading."""
        return float(self.px), float(self.py)


@dataclass(frozen=True)
class RadarObservation:
    """
    Radar range/bearing/range-rate reading relative to the sensor origin.

    Attributes:
        timestamp: Acquisition time [µs]
        rho: Range [m]
        phi: Bearing from the x axis [rad]
        rho_dot: Range rate [m/s]
    """
    timestamp: int
    rho: float
    phi: float
    rho_dot: float

    sensor_type = SensorType.RADAR

    def __post_init__(self):
        _validate_common(self.timestamp, (self.rho, self.phi, self.rho_dot))
        if self.rho < 0:
            raise ValueError(f"Radar range must be non-negative, got {self.rho}")

    @property
    def raw_measurements(self) -> np.ndarray:
        """Measurement vector z = [ρ, φ, ρ̇]."""
        return np.array([self.rho, self.phi, self.rho_dot], dtype=float)

    def initial_position(self):
        """
        Cartesian position used to start a track from this reading.

        Range rate is discarded: without a bearing rate it does not
        determine a 2D velocity.
        """
        return polar_to_cartesian(self.rho, self.phi)


Observation = Union[LidarObservation, RadarObservation]


def observation_from_values(sensor_type: Union[SensorType, str], timestamp: int,
                            values) -> Observation:
    """
    Build an observation from a sensor tag and raw values.

    Args:
        sensor_type: SensorType or its name/value ('L'/'lidar', 'R'/'radar')
        timestamp: Acquisition time [µs]
        values: Raw measurement values of the sensor's arity

    Returns:
        LidarObservation or RadarObservation

    Raises:
        ValueError: If the tag is unknown or the arity is wrong
    """
    if not isinstance(sensor_type, SensorType):
        tag = str(sensor_type).strip().lower()
        aliases = {'l': SensorType.LIDAR, 'laser': SensorType.LIDAR, 'lidar': SensorType.LIDAR,
                   'r': SensorType.RADAR, 'radar': SensorType.RADAR}
        if tag not in aliases:
            raise ValueError(f"Unknown sensor type: {sensor_type!r}")
        sensor_type = aliases[tag]

    values = [float(value) for value in values]
    if sensor_type == SensorType.LIDAR:
        if len(values) != 2:
            raise ValueError(f"Lidar measurement must have 2 elements (px, py), got {len(values)}")
        return LidarObservation(int(timestamp), *values)

    if len(values) != 3:
        raise ValueError(f"Radar measurement must have 3 elements (rho, phi, rho_dot), got {len(values)}")
    return RadarObservation(int(timestamp), *values)
