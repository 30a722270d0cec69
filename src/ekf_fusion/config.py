"""
Filter configuration for lidar/radar fusion.

All constants the fusion filter needs (measurement noise per sensor type,
acceleration noise intensities, initial covariance and the degenerate
Jacobian threshold) are gathered in one immutable configuration object that
is built once per session and handed to the orchestrator.

Default values assume meters, radians and seconds:
    - Lidar position noise: σ = 0.15 m per axis
    - Radar noise: σρ = 0.3 m, σφ = 0.03 rad, σρ̇ = 0.3 m/s
    - Acceleration noise intensity: 9 (m/s²)² per axis
"""

import numpy as np
from typing import Dict, Any
from dataclasses import dataclass, field


def _default_lidar_noise() -> np.ndarray:
    return np.array([[0.0225, 0.0],
                     [0.0, 0.0225]])


def _default_radar_noise() -> np.ndarray:
    return np.array([[0.09, 0.0, 0.0],
                     [0.0, 0.0009, 0.0],
                     [0.0, 0.0, 0.09]])


def _default_initial_covariance() -> np.ndarray:
    return np.eye(4)


@dataclass(frozen=True)
class FusionConfig:
    """
    Immutable parameters of a fusion session.

    Attributes:
        lidar_noise: 2x2 lidar measurement noise covariance R_lidar
        radar_noise: 3x3 radar measurement noise covariance R_radar
        noise_ax: Acceleration noise intensity along x [(m/s²)²]
        noise_ay: Acceleration noise intensity along y [(m/s²)²]
        initial_covariance: 4x4 state covariance used at initialization
        jacobian_threshold: Minimum px² + py² for a defined radar Jacobian
        timestamp_scale: Timestamp ticks per second (microseconds by default)
        debug_checks: Assert covariance symmetry/PSD after every step
    """
    lidar_noise: np.ndarray = field(default_factory=_default_lidar_noise)
    radar_noise: np.ndarray = field(default_factory=_default_radar_noise)
    noise_ax: float = 9.0
    noise_ay: float = 9.0
    initial_covariance: np.ndarray = field(default_factory=_default_initial_covariance)
    jacobian_threshold: float = 1e-4
    timestamp_scale: float = 1e6
    debug_checks: bool = False

    def __post_init__(self):
        """Validate and freeze matrix parameters."""
        # Measurement noise keeps S = HPHᵀ + R invertible even when P collapses
        for name, shape, definite in (('lidar_noise', (2, 2), True),
                                      ('radar_noise', (3, 3), True),
                                      ('initial_covariance', (4, 4), False)):
            matrix = np.array(getattr(self, name), dtype=float)
            if matrix.shape != shape:
                raise ValueError(f"{name} must have shape {shape}, got {matrix.shape}")
            if not np.allclose(matrix, matrix.T):
                raise ValueError(f"{name} must be symmetric")
            min_eigenvalue = np.min(np.linalg.eigvalsh(matrix))
            if definite and min_eigenvalue <= 1e-12:
                raise ValueError(f"{name} must be positive definite")
            if min_eigenvalue < -1e-12:
                raise ValueError(f"{name} must be positive semi-definite")
            matrix.setflags(write=False)
            object.__setattr__(self, name, matrix)

        if self.noise_ax < 0 or self.noise_ay < 0:
            raise ValueError(
                f"Noise intensities must be non-negative, got ({self.noise_ax}, {self.noise_ay})")
        if self.jacobian_threshold <= 0:
            raise ValueError(f"Jacobian threshold must be positive, got {self.jacobian_threshold}")
        if self.timestamp_scale <= 0:
            raise ValueError(f"Timestamp scale must be positive, got {self.timestamp_scale}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary view, suitable for logging or JSON export."""
        return {
            'lidar_noise': self.lidar_noise.tolist(),
            'radar_noise': self.radar_noise.tolist(),
            'noise_ax': self.noise_ax,
            'noise_ay': self.noise_ay,
            'initial_covariance': self.initial_covariance.tolist(),
            'jacobian_threshold': self.jacobian_threshold,
            'timestamp_scale': self.timestamp_scale,
            'debug_checks': self.debug_checks
        }
