"""
Sensor fusion algorithms for lidar/radar tracking.

This module implements the Kalman filter core and the orchestration that
combines lidar and radar observations into one state estimate.
"""

from .kalman import (
    KalmanFilter,
    CovarianceIntegrityError,
    transition_matrix,
    process_noise_matrix
)
from .fusion_ekf import FusionEKF, SessionState

__all__ = [
    "KalmanFilter",
    "CovarianceIntegrityError",
    "transition_matrix",
    "process_noise_matrix",
    "FusionEKF",
    "SessionState"
]
