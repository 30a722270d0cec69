"""
Radar sensor simulation.

Radar Measurement Model:
    z_radar = h(x) + n_radar

    h(x) = [√(px² + py²), atan2(py, px), (px·vx + py·vy)/√(px² + py²)]ᵀ
    n_radar ~ N(0, diag(σρ², σφ², σρ̇²))

The sensor sits at the origin of the tracking frame. Bearings are reported
in (-π, π].
"""

import numpy as np
from typing import Optional

from ..tools import cartesian_to_polar, normalize_angle
from .measurement import RadarObservation


class RadarSensor:
    """
    Radar sensor producing noisy range, bearing and range-rate readings.

    Attributes:
        range_noise_std: Range noise standard deviation (meters)
        bearing_noise_std: Bearing noise standard deviation (radians)
        range_rate_noise_std: Range-rate noise standard deviation (m/s)
        dropout_prob: Probability of a missing reading [0.0, 1.0]
        sensor_id: Unique identifier for this radar unit
    """

    def __init__(self, range_noise_std: float = 0.3, bearing_noise_std: float = 0.03,
                 range_rate_noise_std: float = 0.3, dropout_prob: float = 0.0,
                 sensor_id: int = 1):
        if min(range_noise_std, bearing_noise_std, range_rate_noise_std) < 0:
            raise ValueError("Radar noise standard deviations must be non-negative")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.range_noise_std = range_noise_std
        self.bearing_noise_std = bearing_noise_std
        self.range_rate_noise_std = range_rate_noise_std
        self.dropout_prob = dropout_prob
        self.sensor_id = sensor_id

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[RadarObservation]:
        """
        Generate a radar reading of the true state.

        Args:
            true_state: True state [px, py, vx, vy]
            timestamp: Acquisition time [µs]

        Returns:
            RadarObservation, or None if the reading dropped out

        Raises:
            ValueError: If true_state is not a 4-element state
        """
        if len(true_state) != 4:
            raise ValueError("Radar requires a full state [px, py, vx, vy]")

        if np.random.random() < self.dropout_prob:
            return None

        rho, phi, rho_dot = cartesian_to_polar(np.asarray(true_state, dtype=float))
        rho += np.random.normal(0, self.range_noise_std)
        phi += np.random.normal(0, self.bearing_noise_std)
        rho_dot += np.random.normal(0, self.range_rate_noise_std)

        return RadarObservation(int(timestamp),
                                float(abs(rho)),
                                normalize_angle(float(phi)),
                                float(rho_dot))

    def get_measurement_covariance(self) -> np.ndarray:
        """
        Get measurement noise covariance matrix.

        Returns:
            3x3 covariance matrix for radar readings
        """
        return np.diag([self.range_noise_std ** 2,
                        self.bearing_noise_std ** 2,
                        self.range_rate_noise_std ** 2])

    def get_sensor_info(self) -> dict:
        return {
            'sensor_id': self.sensor_id,
            'sensor_type': 'RADAR',
            'range_noise_std': self.range_noise_std,
            'bearing_noise_std': self.bearing_noise_std,
            'range_rate_noise_std': self.range_rate_noise_std,
            'dropout_prob': self.dropout_prob,
            'covariance': self.get_measurement_covariance().tolist()
        }
