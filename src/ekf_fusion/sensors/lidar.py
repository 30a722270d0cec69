"""
Lidar sensor simulation.

Lidar Measurement Model:
    z_lidar = [px, py]ᵀ + n_lidar

    where n_lidar ~ N(0, σ²I) is zero-mean Gaussian position noise.

Readings may be dropped with a fixed probability to model occlusion or
missed returns.
"""

import numpy as np
from typing import Optional

from .measurement import LidarObservation


class LidarSensor:
    """
    Lidar sensor producing noisy Cartesian position readings.

    Attributes:
        noise_std: Standard deviation of position noise per axis (meters)
        dropout_prob: Probability of a missing reading [0.0, 1.0]
        sensor_id: Unique identifier for this lidar unit
    """

    def __init__(self, noise_std: float = 0.15, dropout_prob: float = 0.0,
                 sensor_id: int = 1):
        """
        Initialize lidar sensor.

        Args:
            noise_std: Standard deviation of Gaussian position noise (meters)
            dropout_prob: Probability of measurement dropout per reading
            sensor_id: Unique identifier for this lidar unit
        """
        if noise_std < 0:
            raise ValueError("Lidar noise standard deviation must be non-negative")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.noise_std = noise_std
        self.dropout_prob = dropout_prob
        self.sensor_id = sensor_id

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[LidarObservation]:
        """
        Generate a lidar reading of the true position.

        Args:
            true_state: True state [px, py, vx, vy]
            timestamp: Acquisition time [µs]

        Returns:
            LidarObservation, or None if the reading dropped out

        Raises:
            ValueError: If true_state has fewer than 2 elements
        """
        if len(true_state) < 2:
            raise ValueError("Lidar requires at least a 2D position [px, py]")

        if np.random.random() < self.dropout_prob:
            return None

        noise = np.random.normal(0, self.noise_std, 2)
        return LidarObservation(int(timestamp),
                                float(true_state[0] + noise[0]),
                                float(true_state[1] + noise[1]))

    def get_measurement_covariance(self) -> np.ndarray:
        """
        Get measurement noise covariance matrix.

        Returns:
            2x2 covariance matrix for lidar readings
        """
        return np.eye(2) * self.noise_std ** 2

    def get_sensor_info(self) -> dict:
        return {
            'sensor_id': self.sensor_id,
            'sensor_type': 'LIDAR',
            'noise_std': self.noise_std,
            'dropout_prob': self.dropout_prob,
            'covariance': self.get_measurement_covariance().tolist()
        }
