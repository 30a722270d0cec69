"""
Sensor modules for lidar/radar fusion.

This module contains the observation types consumed by the fusion filter and
simulated lidar and radar sensors that produce them.
"""

from .measurement import (
    SensorType,
    LidarObservation,
    RadarObservation,
    Observation,
    observation_from_values
)
from .lidar import LidarSensor
from .radar import RadarSensor

__all__ = [
    "SensorType",
    "LidarObservation",
    "RadarObservation",
    "Observation",
    "observation_from_values",
    "LidarSensor",
    "RadarSensor"
]
