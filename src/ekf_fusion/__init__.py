"""
EKF Fusion: Lidar/Radar Sensor Fusion with an Extended Kalman Filter

A Python package for tracking a moving object in 2D by fusing asynchronous
lidar position readings and radar range/bearing/range-rate readings.

This package implements:
- A Kalman filter core with linear and extended updates
- Fusion orchestration that starts a track and dispatches each observation
- Closed-form radar Jacobian and coordinate conversions
- Simulated lidar/radar sensors, trajectories and scenario scoring
"""

from .config import FusionConfig
from .fusion.kalman import KalmanFilter, CovarianceIntegrityError
from .fusion.fusion_ekf import FusionEKF, SessionState
from .sensors.measurement import (
    SensorType,
    LidarObservation,
    RadarObservation,
    observation_from_values
)
from .sensors.lidar import LidarSensor
from .sensors.radar import RadarSensor
from .simulation.trajectory import TrajectoryGenerator, TrajectoryParameters
from .simulation.scenario import ScenarioResult, run_scenario
from .tools import (
    DegenerateJacobianError,
    calculate_jacobian,
    calculate_rmse,
    cartesian_to_polar,
    polar_to_cartesian,
    normalize_angle
)

__version__ = "1.0.0"
__author__ = "EKF Fusion Team"

__all__ = [
    "FusionConfig",
    "KalmanFilter",
    "CovarianceIntegrityError",
    "FusionEKF",
    "SessionState",
    "SensorType",
    "LidarObservation",
    "RadarObservation",
    "observation_from_values",
    "LidarSensor",
    "RadarSensor",
    "TrajectoryGenerator",
    "TrajectoryParameters",
    "ScenarioResult",
    "run_scenario",
    "DegenerateJacobianError",
    "calculate_jacobian",
    "calculate_rmse",
    "cartesian_to_polar",
    "polar_to_cartesian",
    "normalize_angle"
]
