"""
2D Ground-Truth Trajectory Generation

Closed-form planar trajectories used to drive simulated sensors and to score
the fusion filter.

Trajectory Types:
    circle:
        px(t) = cx + R·cos(ωt),   vx(t) = -R·ω·sin(ωt)
        py(t) = cy + R·sin(ωt),   vy(t) =  R·ω·cos(ωt)
        with ω = 2π/T

    linear:
        p(t) = p₀ + v·t,          v(t) = v
"""

import numpy as np
from typing import Tuple
from dataclasses import dataclass


@dataclass
class TrajectoryParameters:
    """Parameters for ground-truth trajectory generation with validation."""

    trajectory_type: str = "circle"            # "circle" or "linear"
    radius: float = 10.0                       # Circle radius [m]
    period: float = 30.0                       # Circle period [s]
    center: Tuple[float, float] = (0.0, 0.0)   # Circle center [m]
    start: Tuple[float, float] = (5.0, 5.0)    # Linear start position [m]
    velocity: Tuple[float, float] = (1.0, 0.5) # Linear velocity [m/s]

    def __post_init__(self):
        """Validate trajectory parameters."""
        if self.trajectory_type not in ["circle", "linear"]:
            raise ValueError(f"Unknown trajectory type: {self.trajectory_type}")
        if self.radius <= 0:
            raise ValueError(f"Trajectory radius must be positive, got {self.radius}")
        if self.period <= 0:
            raise ValueError(f"Period must be positive, got {self.period}")


class TrajectoryGenerator:
    """
    Ground-truth state generator for a single moving object.

    Attributes:
        params: Trajectory parameters
    """

    def __init__(self, params: TrajectoryParameters = None):
        self.params = params if params is not None else TrajectoryParameters()
        self._omega = 2 * np.pi / self.params.period

    def get_state(self, t: float) -> np.ndarray:
        """
        True state at time t.

        Args:
            t: Time since trajectory start [s]

        Returns:
            State vector [px, py, vx, vy]
        """
        if self.params.trajectory_type == "circle":
            R = self.params.radius
            cx, cy = self.params.center
            angle = self._omega * t
            return np.array([
                cx + R * np.cos(angle),
                cy + R * np.sin(angle),
                -R * self._omega * np.sin(angle),
                R * self._omega * np.cos(angle)
            ])

        start = np.asarray(self.params.start, dtype=float)
        velocity = np.asarray(self.params.velocity, dtype=float)
        return np.concatenate([start + velocity * t, velocity])

    def get_position(self, t: float) -> np.ndarray:
        """True position [px, py] at time t."""
        return self.get_state(t)[0:2]

    def get_velocity(self, t: float) -> np.ndarray:
        """True velocity [vx, vy] at time t."""
        return self.get_state(t)[2:4]

    def sample(self, duration: float, dt: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sample the trajectory on a uniform time grid.

        Args:
            duration: Total time span [s]
            dt: Sampling interval [s]

        Returns:
            Tuple of (times, states) with states shaped (N, 4)

        Raises:
            ValueError: If duration or dt is non-positive
        """
        if duration <= 0 or dt <= 0:
            raise ValueError(f"Duration and dt must be positive, got {duration}, {dt}")
        times = np.arange(0.0, duration, dt)
        states = np.array([self.get_state(t) for t in times])
        return times, states
