"""
Coordinate conversion and linearization utilities for radar fusion.

Radar Measurement Model:
    h(x) = [ρ, φ, ρ̇]ᵀ

    ρ  = √(px² + py²)
    φ  = atan2(py, px)
    ρ̇  = (px·vx + py·vy) / ρ

Measurement Jacobian Hj = ∂h/∂x evaluated at x = [px, py, vx, vy]ᵀ:

    ⎡ px/ρ                 py/ρ                 0     0    ⎤
    ⎢ -py/ρ²               px/ρ²                0     0    ⎥
    ⎣ py(vx·py - vy·px)/ρ³ px(vy·px - vx·py)/ρ³ px/ρ  py/ρ ⎦

The Jacobian is undefined at ρ = 0. Callers receive a DegenerateJacobianError
instead of a matrix full of NaN/Inf entries.
"""

import math
import numpy as np
from typing import Sequence, Tuple


DEFAULT_JACOBIAN_THRESHOLD = 1e-4


class DegenerateJacobianError(ArithmeticError):
    """Raised when the radar Jacobian is evaluated too close to the sensor origin."""

    def __init__(self, squared_range: float, threshold: float):
        self.squared_range = squared_range
        self.threshold = threshold
        super().__init__(
            f"Radar Jacobian undefined: px² + py² = {squared_range:.3e} < {threshold:.1e}")


def normalize_angle(angle: float) -> float:
    """
    Map an angle onto the half-open interval (-π, π].

    Args:
        angle: Angle in radians

    Returns:
        Equivalent angle in (-π, π]
    """
    wrapped = (angle + math.pi) % (2.0 * math.pi) - math.pi
    if wrapped <= -math.pi:
        wrapped = math.pi
    return wrapped


def polar_to_cartesian(rho: float, phi: float) -> Tuple[float, float]:
    """
    Convert a radar range/bearing pair to a Cartesian position.

    The bearing is reduced with fmod(φ, 2π) first; sine and cosine are
    periodic so the position is the same as for the principal angle.

    Args:
        rho: Range [m]
        phi: Bearing [rad], measured from the x axis

    Returns:
        Tuple of (px, py)
    """
    phi = math.fmod(phi, 2.0 * math.pi)
    return rho * math.cos(phi), rho * math.sin(phi)


def cartesian_to_polar(state: np.ndarray) -> np.ndarray:
    """
    Radar measurement function h(x).

    Args:
        state: State vector [px, py, vx, vy]

    Returns:
        Predicted radar measurement [ρ, φ, ρ̇]
    """
    px, py, vx, vy = state
    rho = math.hypot(px, py)
    phi = math.atan2(py, px)
    # ρ̇ has no direction at the origin
    rho_dot = (px * vx + py * vy) / rho if rho > 0.0 else 0.0
    return np.array([rho, phi, rho_dot])


def calculate_jacobian(state: np.ndarray,
                       threshold: float = DEFAULT_JACOBIAN_THRESHOLD) -> np.ndarray:
    """
    Evaluate the radar measurement Jacobian at the given state.

    Args:
        state: Linearization point [px, py, vx, vy]
        threshold: Minimum px² + py² for which the Jacobian is evaluated

    Returns:
        3x4 Jacobian matrix

    Raises:
        DegenerateJacobianError: If px² + py² is below threshold
    """
    px, py, vx, vy = state

    c1 = px * px + py * py
    if c1 < threshold:
        raise DegenerateJacobianError(c1, threshold)
    c2 = math.sqrt(c1)
    c3 = c1 * c2

    return np.array([
        [px / c2, py / c2, 0.0, 0.0],
        [-py / c1, px / c1, 0.0, 0.0],
        [py * (vx * py - vy * px) / c3, px * (vy * px - vx * py) / c3, px / c2, py / c2]
    ])


def calculate_rmse(estimations: Sequence[np.ndarray],
                   ground_truth: Sequence[np.ndarray]) -> np.ndarray:
    """
    Component-wise root mean square error of an estimate sequence.

    Args:
        estimations: Sequence of estimated state vectors
        ground_truth: Sequence of true state vectors, same length

    Returns:
        RMSE per state component

    Raises:
        ValueError: If the sequences are empty or differ in length or shape
    """
    if len(estimations) == 0:
        raise ValueError("Cannot compute RMSE of an empty estimate sequence")
    if len(estimations) != len(ground_truth):
        raise ValueError(
            f"Estimate and ground truth lengths differ: {len(estimations)} != {len(ground_truth)}")

    estimates = np.asarray(estimations, dtype=float)
    truth = np.asarray(ground_truth, dtype=float)
    if estimates.shape != truth.shape:
        raise ValueError(f"Shape mismatch: {estimates.shape} != {truth.shape}")

    residuals = estimates - truth
    return np.sqrt(np.mean(residuals ** 2, axis=0))
