"""
Visualization components for lidar/radar fusion.

This module plots fused tracks against ground truth and raw sensor readings.
"""

from .plotter import plot_tracking_result, plot_estimation_error, create_summary_figure

__all__ = [
    "plot_tracking_result",
    "plot_estimation_error",
    "create_summary_figure"
]
