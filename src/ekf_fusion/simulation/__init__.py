"""
Simulation components for lidar/radar fusion.

Components:
    - TrajectoryGenerator: Closed-form 2D ground-truth trajectories
    - run_scenario: Simulated sensor readings fed through the fusion filter
"""

from .trajectory import TrajectoryGenerator, TrajectoryParameters
from .scenario import ScenarioResult, run_scenario

__all__ = [
    "TrajectoryGenerator",
    "TrajectoryParameters",
    "ScenarioResult",
    "run_scenario"
]
