"""
Kalman Filter Core for 2D Constant-Velocity Tracking

This module holds the belief of the tracker (state vector and covariance) and
applies the standard and extended Kalman recursions to it. It knows nothing
about sensor types: callers supply the measurement model (H, R) before every
update.

State Vector Definition:
    x = [px, py, vx, vy]ᵀ ∈ ℝ⁴

Constant-Velocity Process Model:
        ⎡1 0 Δt 0 ⎤
    F = ⎢0 1 0  Δt⎥
        ⎢0 0 1  0 ⎥
        ⎣0 0 0  1 ⎦

    Process noise from white acceleration with intensities σ²ax, σ²ay:

        ⎡Δt⁴/4·σ²ax  0           Δt³/2·σ²ax  0         ⎤
    Q = ⎢0           Δt⁴/4·σ²ay  0           Δt³/2·σ²ay⎥
        ⎢Δt³/2·σ²ax  0           Δt²·σ²ax    0         ⎥
        ⎣0           Δt³/2·σ²ay  0           Δt²·σ²ay  ⎦

Recursion:
    Prediction:
        x̂(k|k-1) = F x̂(k-1|k-1)
        P(k|k-1) = F P(k-1|k-1) Fᵀ + Q
    Update:
        y = z - H x̂            (linear)   or   y = z - h(x̂)   (extended)
        S = H P Hᵀ + R
        K = P Hᵀ S⁻¹
        x̂ = x̂ + K y
        P = (I - K H) P
"""

import numpy as np
import scipy.linalg
from typing import Callable, Optional, Sequence
import logging

from ..tools import normalize_angle

logger = logging.getLogger(__name__)

STATE_SIZE = 4


class CovarianceIntegrityError(AssertionError):
    """Raised by debug checks when the covariance stops being symmetric PSD."""


def transition_matrix(dt: float) -> np.ndarray:
    """
    Constant-velocity state transition matrix.

    Args:
        dt: Elapsed time [s]

    Returns:
        4x4 transition matrix F
    """
    F = np.eye(STATE_SIZE)
    F[0, 2] = dt
    F[1, 3] = dt
    return F


def process_noise_matrix(dt: float, noise_ax: float, noise_ay: float) -> np.ndarray:
    """
    Discretized white-acceleration process noise.

    Args:
        dt: Elapsed time [s]
        noise_ax: Acceleration noise intensity along x
        noise_ay: Acceleration noise intensity along y

    Returns:
        4x4 process noise covariance Q
    """
    dt_2 = dt * dt
    dt_3 = dt_2 * dt
    dt_4 = dt_3 * dt

    return np.array([
        [dt_4 / 4 * noise_ax, 0.0, dt_3 / 2 * noise_ax, 0.0],
        [0.0, dt_4 / 4 * noise_ay, 0.0, dt_3 / 2 * noise_ay],
        [dt_3 / 2 * noise_ax, 0.0, dt_2 * noise_ax, 0.0],
        [0.0, dt_3 / 2 * noise_ay, 0.0, dt_2 * noise_ay]
    ])


class KalmanFilter:
    """
    Linear / extended Kalman filter over a four-dimensional state.

    The state vector and covariance are allocated once and then overwritten
    in place by init, predict and the update steps, so references handed
    out through the ``x`` and ``P`` attributes stay valid for the lifetime
    of the filter.

    Attributes:
        x: State vector [px, py, vx, vy]
        P: State covariance
        F: State transition matrix
        Q: Process noise covariance
        H: Measurement matrix (or Jacobian) used by the next update
        R: Measurement noise covariance used by the next update
        y: Last innovation
        S: Last innovation covariance
        debug_checks: Verify covariance integrity after every step
    """

    def __init__(self, debug_checks: bool = False):
        self.x = np.zeros(STATE_SIZE)
        self.P = np.eye(STATE_SIZE)
        self.F = np.eye(STATE_SIZE)
        self.Q = np.zeros((STATE_SIZE, STATE_SIZE))
        self.H = np.zeros((2, STATE_SIZE))
        self.R = np.eye(2)

        self.y: Optional[np.ndarray] = None
        self.S: Optional[np.ndarray] = None
        self.debug_checks = debug_checks

    def init(self, x0: np.ndarray, P0: np.ndarray, F0: np.ndarray,
             H0: np.ndarray, R0: np.ndarray, Q0: np.ndarray) -> None:
        """
        Assign the initial belief and model matrices.

        Args:
            x0: Initial state (4,)
            P0: Initial covariance (4, 4)
            F0: State transition matrix (4, 4)
            H0: Measurement matrix (m, 4)
            R0: Measurement noise (m, m)
            Q0: Process noise (4, 4)
        """
        self.x[:] = x0
        self.P[:] = P0
        self.set_transition_matrix(F0)
        self.set_process_noise(Q0)
        self.set_measurement_model(H0, R0)
        self.y = None
        self.S = None
        self._debug_check("init")

    def set_transition_matrix(self, F: np.ndarray) -> None:
        """Replace the state transition matrix used by predict()."""
        self.F[:] = F

    def set_process_noise(self, Q: np.ndarray) -> None:
        """Replace the process noise covariance used by predict()."""
        self.Q[:] = Q

    def set_measurement_model(self, H: np.ndarray, R: np.ndarray) -> None:
        """
        Replace the measurement model used by the next update.

        Args:
            H: Measurement matrix or Jacobian (m, 4)
            R: Measurement noise covariance (m, m)

        Raises:
            ValueError: If H and R dimensions are inconsistent
        """
        H = np.asarray(H, dtype=float)
        R = np.asarray(R, dtype=float)
        if H.ndim != 2 or H.shape[1] != STATE_SIZE:
            raise ValueError(f"Measurement matrix must have shape (m, {STATE_SIZE}), got {H.shape}")
        if R.shape != (H.shape[0], H.shape[0]):
            raise ValueError(f"Measurement noise shape {R.shape} does not match H {H.shape}")
        self.H = H.copy()
        self.R = R.copy()

    def predict(self, dt: Optional[float] = None,
                noise_ax: float = 0.0, noise_ay: float = 0.0) -> None:
        """
        Propagate the belief through the constant-velocity model.

        When ``dt`` is given the transition matrix and process noise are
        rebuilt from it first; otherwise the currently assigned F and Q are
        used as they are.

        Args:
            dt: Optional elapsed time since the last step [s]
            noise_ax: Acceleration noise intensity along x (with dt)
            noise_ay: Acceleration noise intensity along y (with dt)
        """
        if dt is not None:
            self.set_transition_matrix(transition_matrix(dt))
            self.set_process_noise(process_noise_matrix(dt, noise_ax, noise_ay))

        self.x[:] = self.F @ self.x
        self.P[:] = self.F @ self.P @ self.F.T + self.Q

        logger.debug(f"Prediction step completed, F[0,2]={self.F[0, 2]:.3f}s")
        self._debug_check("predict")

    def update(self, z: Sequence[float]) -> None:
        """
        Linear Kalman update with the assigned H and R.

        Args:
            z: Measurement vector (m,)
        """
        z = np.asarray(z, dtype=float)
        y = z - self.H @ self.x
        self._apply_innovation(y)

    def update_ekf(self, z: Sequence[float],
                   measurement_function: Callable[[np.ndarray], np.ndarray],
                   angle_indices: Sequence[int] = ()) -> None:
        """
        Extended Kalman update with a nonlinear measurement function.

        The assigned H must be the Jacobian of ``measurement_function``
        evaluated at the current state. Angular innovation components are
        normalized into (-π, π] before they enter the update.

        Args:
            z: Measurement vector (m,)
            measurement_function: h(x) mapping the state into measurement space
            angle_indices: Innovation components holding angles
        """
        z = np.asarray(z, dtype=float)
        y = z - measurement_function(self.x)
        for index in angle_indices:
            y[index] = normalize_angle(y[index])
        self._apply_innovation(y)

    def _apply_innovation(self, y: np.ndarray) -> None:
        H = self.H
        PHt = self.P @ H.T
        S = H @ PHt + self.R

        # K = P Hᵀ S⁻¹, solved as (S⁻¹ H P)ᵀ since S and P are symmetric
        K = scipy.linalg.solve(S, PHt.T, assume_a='pos').T

        self.x[:] = self.x + K @ y
        self.P[:] = (np.eye(STATE_SIZE) - K @ H) @ self.P

        self.y = y
        self.S = S

        logger.debug(f"Measurement update applied: |y|={np.linalg.norm(y):.3f}")
        self._debug_check("update")

    def clear_innovation(self) -> None:
        """Forget the last innovation, e.g. when a step ends without an update."""
        self.y = None
        self.S = None

    @property
    def nis(self) -> Optional[float]:
        """Normalized innovation squared yᵀS⁻¹y of the last update."""
        if self.y is None or self.S is None:
            return None
        return float(self.y @ scipy.linalg.solve(self.S, self.y, assume_a='pos'))

    def check_covariance(self, tolerance: float = 1e-9) -> None:
        """
        Assert the covariance is symmetric positive semi-definite.

        Args:
            tolerance: Allowed asymmetry and negative eigenvalue magnitude

        Raises:
            CovarianceIntegrityError: If P is not finite, symmetric or PSD
        """
        if not np.all(np.isfinite(self.P)):
            raise CovarianceIntegrityError("State covariance contains NaN or infinite values")

        scale = max(1.0, float(np.max(np.abs(self.P))))
        asymmetry = float(np.max(np.abs(self.P - self.P.T)))
        if asymmetry > tolerance * scale:
            raise CovarianceIntegrityError(f"State covariance is not symmetric: max |P - Pᵀ| = {asymmetry:.3e}")

        min_eigenvalue = float(np.min(scipy.linalg.eigh(self.P, eigvals_only=True)))
        if min_eigenvalue < -tolerance * scale:
            raise CovarianceIntegrityError(
                f"State covariance is not positive semi-definite: λ_min = {min_eigenvalue:.3e}")

    def _debug_check(self, step: str) -> None:
        if self.debug_checks:
            try:
                self.check_covariance()
            except CovarianceIntegrityError:
                logger.error(f"Covariance integrity lost after {step}")
                raise
