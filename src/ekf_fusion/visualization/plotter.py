"""
Plotting of fusion results.

Functions:
    plot_tracking_result: Ground truth, estimates and raw readings in the xy plane
    plot_estimation_error: Position error magnitude over time
    create_summary_figure: Both panels side by side
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Tuple
import logging

from ..sensors.measurement import LidarObservation, RadarObservation
from ..tools import polar_to_cartesian

logger = logging.getLogger(__name__)


def plot_tracking_result(result, ax: Optional[plt.Axes] = None,
                         show_measurements: bool = True) -> plt.Axes:
    """
    Plot ground truth, fused estimates and sensor readings in the xy plane.

    Args:
        result: ScenarioResult from run_scenario
        ax: Axes to draw on; a new figure is created if None
        show_measurements: Also scatter lidar and radar readings

    Returns:
        The axes that were drawn on
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    truth = np.asarray(result.ground_truth)
    estimates = np.asarray(result.estimates)

    ax.plot(truth[:, 0], truth[:, 1], color='black', linewidth=1.5, label='Ground truth')
    ax.plot(estimates[:, 0], estimates[:, 1], color='tab:blue', linewidth=1.2, label='EKF estimate')

    if show_measurements:
        lidar_points = np.array([[obs.px, obs.py] for obs in result.observations
                                 if isinstance(obs, LidarObservation)])
        radar_points = np.array([polar_to_cartesian(obs.rho, obs.phi) for obs in result.observations
                                 if isinstance(obs, RadarObservation)])
        if len(lidar_points):
            ax.scatter(lidar_points[:, 0], lidar_points[:, 1], s=8, marker='o',
                       color='tab:green', alpha=0.5, label='Lidar')
        if len(radar_points):
            ax.scatter(radar_points[:, 0], radar_points[:, 1], s=8, marker='x',
                       color='tab:red', alpha=0.5, label='Radar')

    ax.set_xlabel('px [m]')
    ax.set_ylabel('py [m]')
    ax.set_title('Lidar/Radar Fusion')
    ax.set_aspect('equal', adjustable='datalim')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='best')
    return ax


def plot_estimation_error(result, ax: Optional[plt.Axes] = None) -> plt.Axes:
    """
    Plot the Euclidean position error of the estimates over time.

    Args:
        result: ScenarioResult from run_scenario
        ax: Axes to draw on; a new figure is created if None

    Returns:
        The axes that were drawn on
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))

    times = np.asarray(result.timestamps, dtype=float) / 1e6
    errors = np.linalg.norm(np.asarray(result.estimates)[:, 0:2] -
                            np.asarray(result.ground_truth)[:, 0:2], axis=1)

    ax.plot(times, errors, color='tab:blue', linewidth=1.0)
    if result.rmse is not None:
        ax.axhline(float(np.linalg.norm(result.rmse[0:2])), color='tab:orange',
                   linestyle='--', label='Position RMSE')
        ax.legend(loc='best')
    ax.set_xlabel('Time [s]')
    ax.set_ylabel('Position error [m]')
    ax.grid(True, alpha=0.3)
    return ax


def create_summary_figure(result, figure_size: Tuple[int, int] = (14, 6)) -> plt.Figure:
    """Tracking plot and error plot side by side."""
    fig, (track_ax, error_ax) = plt.subplots(1, 2, figsize=figure_size)
    plot_tracking_result(result, ax=track_ax)
    plot_estimation_error(result, ax=error_ax)
    fig.tight_layout()
    logger.debug("Summary figure created")
    return fig
