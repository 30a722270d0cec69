#!/usr/bin/env python3
"""
Lidar/Radar Fusion Demo

Simulates a target moving along a circle or a straight line, observed in turn
by a lidar and a radar, and reports how closely the fused EKF estimate tracks
the ground truth.

Run with: ekf-fusion --duration 30 --plot
"""

import argparse
import logging

import numpy as np

from .config import FusionConfig
from .simulation.trajectory import TrajectoryGenerator, TrajectoryParameters
from .simulation.scenario import run_scenario


def run_demo(duration=20.0, dt=0.05, trajectory_type="circle", seed=None,
             plot=False, debug_checks=False):
    """Run one simulated fusion scenario and print the accuracy summary."""
    if seed is not None:
        np.random.seed(seed)

    print("=== Lidar/Radar Fusion with an Extended Kalman Filter ===")
    print(f"Trajectory: {trajectory_type}, duration {duration} s, reading interval {dt} s")
    print()

    trajectory = TrajectoryGenerator(TrajectoryParameters(trajectory_type=trajectory_type))
    config = FusionConfig(debug_checks=debug_checks)
    result = run_scenario(trajectory, duration=duration, dt=dt, config=config)

    print(f"Observations processed: {len(result.estimates)}")
    print(f"Radar updates skipped:  {result.skipped_updates}")
    print("RMSE [px, py, vx, vy]: " + ", ".join(f"{value:.4f}" for value in result.rmse))

    if plot:
        import matplotlib.pyplot as plt
        from .visualization.plotter import create_summary_figure

        create_summary_figure(result)
        plt.show()

    return result


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Lidar/Radar EKF Fusion Demo')
    parser.add_argument('--duration', type=float, default=20.0,
                        help='Simulation duration in seconds (default: 20)')
    parser.add_argument('--dt', type=float, default=0.05,
                        help='Interval between sensor readings in seconds (default: 0.05)')
    parser.add_argument('--trajectory', choices=['circle', 'linear'], default='circle',
                        help='Ground-truth trajectory type (default: circle)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible sensor noise')
    parser.add_argument('--plot', action='store_true',
                        help='Show tracking and error plots')
    parser.add_argument('--debug-checks', action='store_true',
                        help='Assert covariance symmetry and positive semi-definiteness every step')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        run_demo(duration=args.duration,
                 dt=args.dt,
                 trajectory_type=args.trajectory,
                 seed=args.seed,
                 plot=args.plot,
                 debug_checks=args.debug_checks)
    except Exception as e:
        print(f"\nSimulation error: {e}")
        raise


if __name__ == "__main__":
    main()
