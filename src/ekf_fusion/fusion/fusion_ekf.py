"""
Lidar/radar fusion orchestration.

FusionEKF owns the sensor-specific bookkeeping around a KalmanFilter:

    - Start the track from the first observation of either sensor
    - Convert timestamps to elapsed time and rebuild F and Q every step
    - Route each observation to the linear (lidar) or extended (radar) update

Session States:
    UNINITIALIZED --first observation--> RUNNING

A radar update whose linearization point is too close to the sensor origin
is skipped; the prediction stands as the estimate for that step.
"""

import numpy as np
from typing import Dict, Any, Optional
from enum import Enum
import logging

from ..config import FusionConfig
from ..tools import DegenerateJacobianError, calculate_jacobian, cartesian_to_polar
from ..sensors.measurement import LidarObservation, RadarObservation, SensorType
from .kalman import KalmanFilter, STATE_SIZE

logger = logging.getLogger(__name__)

# Lidar measures position directly
H_LIDAR = np.array([[1.0, 0.0, 0.0, 0.0],
                    [0.0, 1.0, 0.0, 0.0]])

# Unit elapsed time until the first real prediction overwrites it
F_INITIAL = np.array([[1.0, 0.0, 1.0, 0.0],
                      [0.0, 1.0, 0.0, 1.0],
                      [0.0, 0.0, 1.0, 0.0],
                      [0.0, 0.0, 0.0, 1.0]])


class SessionState(Enum):
    """Lifecycle of a fusion session."""
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"


class FusionEKF:
    """
    Sequential fusion of lidar and radar observations of one moving object.

    Attributes:
        config: Immutable session configuration
        ekf: Underlying Kalman filter holding state and covariance
        session_state: UNINITIALIZED until the first observation arrives
        previous_timestamp: Timestamp of the last processed observation [µs]
    """

    def __init__(self, config: Optional[FusionConfig] = None):
        """
        Initialize the fusion filter.

        Args:
            config: Session configuration; defaults to FusionConfig()
        """
        self.config = config or FusionConfig()
        self.ekf = KalmanFilter(debug_checks=self.config.debug_checks)

        self.session_state = SessionState.UNINITIALIZED
        self.previous_timestamp = 0

        # Radar H is a placeholder until the first Jacobian is evaluated
        self._initial_models = {
            SensorType.LIDAR: (H_LIDAR, self.config.lidar_noise),
            SensorType.RADAR: (np.zeros((3, STATE_SIZE)), self.config.radar_noise)
        }
        self._update_strategies = {
            SensorType.LIDAR: self._update_lidar,
            SensorType.RADAR: self._update_radar
        }

        self._prediction_count = 0
        self._update_count = 0
        self._skipped_updates = 0

    @property
    def is_initialized(self) -> bool:
        return self.session_state == SessionState.RUNNING

    @property
    def state(self) -> np.ndarray:
        """Copy of the current state estimate [px, py, vx, vy]."""
        return self.ekf.x.copy()

    @property
    def covariance(self) -> np.ndarray:
        """Copy of the current state covariance."""
        return self.ekf.P.copy()

    def process_measurement(self, observation) -> bool:
        """
        Incorporate one observation into the estimate.

        Observations must arrive in non-decreasing timestamp order.

        Args:
            observation: LidarObservation or RadarObservation

        Returns:
            True if the observation was used (initialization or update),
            False if its update was skipped

        Raises:
            TypeError: If observation is not a known observation variant
        """
        if not isinstance(observation, (LidarObservation, RadarObservation)):
            raise TypeError(f"Unsupported observation type: {type(observation).__name__}")

        if self.session_state == SessionState.UNINITIALIZED:
            self._initialize(observation)
            return True

        dt = (observation.timestamp - self.previous_timestamp) / self.config.timestamp_scale
        self.previous_timestamp = observation.timestamp

        self.ekf.predict(dt, self.config.noise_ax, self.config.noise_ay)
        self._prediction_count += 1

        applied = self._update_strategies[observation.sensor_type](observation)
        if applied:
            self._update_count += 1
        else:
            self._skipped_updates += 1
        return applied

    def _initialize(self, observation) -> None:
        px, py = observation.initial_position()
        H, R = self._initial_models[observation.sensor_type]

        self.ekf.init(np.array([px, py, 0.0, 0.0]),
                      self.config.initial_covariance,
                      F_INITIAL,
                      H, R,
                      np.zeros((STATE_SIZE, STATE_SIZE)))

        self.previous_timestamp = observation.timestamp
        self.session_state = SessionState.RUNNING
        logger.info(f"Fusion filter initialized from {observation.sensor_type.value} "
                    f"at ({px:.3f}, {py:.3f})")

    def _update_lidar(self, observation: LidarObservation) -> bool:
        self.ekf.set_measurement_model(H_LIDAR, self.config.lidar_noise)
        self.ekf.update(observation.raw_measurements)
        return True

    def _update_radar(self, observation: RadarObservation) -> bool:
        try:
            Hj = calculate_jacobian(self.ekf.x, self.config.jacobian_threshold)
        except DegenerateJacobianError as e:
            logger.warning(f"Radar update skipped at t={observation.timestamp}: {e}")
            self.ekf.clear_innovation()
            return False

        self.ekf.set_measurement_model(Hj, self.config.radar_noise)
        # Bearing is the only angular component of (ρ, φ, ρ̇)
        self.ekf.update_ekf(observation.raw_measurements, cartesian_to_polar, angle_indices=(1,))
        return True

    def reset(self) -> None:
        """Return to the uninitialized state; the next observation starts a new track."""
        self.session_state = SessionState.UNINITIALIZED
        self.previous_timestamp = 0
        self._prediction_count = 0
        self._update_count = 0
        self._skipped_updates = 0
        logger.info("Fusion filter reset")

    def get_state_dict(self) -> Dict[str, Any]:
        """
        Get state and diagnostic information as a dictionary.

        ``last_nis`` belongs to the most recent step and is None when that
        step applied no update.

        Returns:
            Dictionary with estimate, uncertainties and counters
        """
        std_devs = np.sqrt(np.clip(np.diag(self.ekf.P), 0.0, None))
        return {
            'session_state': self.session_state.value,
            'position': self.ekf.x[0:2].tolist(),
            'velocity': self.ekf.x[2:4].tolist(),
            'position_uncertainty': std_devs[0:2].tolist(),
            'velocity_uncertainty': std_devs[2:4].tolist(),
            'covariance_trace': float(np.trace(self.ekf.P)),
            'last_nis': self.ekf.nis,
            'prediction_count': self._prediction_count,
            'update_count': self._update_count,
            'skipped_updates': self._skipped_updates,
            'previous_timestamp': self.previous_timestamp
        }
