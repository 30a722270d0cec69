import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ekf_fusion.fusion import (
    KalmanFilter,
    CovarianceIntegrityError,
    transition_matrix,
    process_noise_matrix
)
from ekf_fusion.tools import calculate_jacobian, cartesian_to_polar


H_LIDAR = np.array([[1.0, 0.0, 0.0, 0.0],
                    [0.0, 1.0, 0.0, 0.0]])
R_LIDAR = np.eye(2) * 0.0225
R_RADAR = np.diag([0.09, 0.0009, 0.09])


def make_filter(x0, P0=None, H=H_LIDAR, R=R_LIDAR, debug_checks=False):
    kf = KalmanFilter(debug_checks=debug_checks)
    kf.init(np.asarray(x0, dtype=float),
            np.eye(4) if P0 is None else P0,
            np.eye(4), H, R, np.zeros((4, 4)))
    return kf


class TestProcessModel:
    """Test constant-velocity transition and process noise matrices"""

    def test_transition_matrix_time_entries(self):
        """Test elapsed time appears only in the position/velocity coupling"""
        F = transition_matrix(0.5)
        expected = np.eye(4)
        expected[0, 2] = 0.5
        expected[1, 3] = 0.5
        np.testing.assert_allclose(F, expected)

    def test_process_noise_blocks(self):
        """Test process noise follows the white acceleration discretization"""
        Q = process_noise_matrix(2.0, 9.0, 4.0)

        assert Q[0, 0] == pytest.approx(16.0 / 4 * 9.0)
        assert Q[0, 2] == pytest.approx(8.0 / 2 * 9.0)
        assert Q[2, 2] == pytest.approx(4.0 * 9.0)
        assert Q[1, 1] == pytest.approx(16.0 / 4 * 4.0)
        assert Q[1, 3] == pytest.approx(8.0 / 2 * 4.0)
        assert Q[3, 3] == pytest.approx(4.0 * 4.0)

        # No cross-axis coupling
        assert Q[0, 1] == 0.0 and Q[0, 3] == 0.0 and Q[2, 3] == 0.0
        np.testing.assert_allclose(Q, Q.T)

    def test_process_noise_zero_dt(self):
        """Test zero elapsed time injects no uncertainty"""
        np.testing.assert_allclose(process_noise_matrix(0.0, 9.0, 9.0), np.zeros((4, 4)))


class TestKalmanPredict:
    """Test the prediction step"""

    def test_noise_free_prediction(self):
        """Test constant-velocity propagation with zero process noise"""
        kf = make_filter([0.0, 0.0, 1.0, 1.0])

        kf.predict(1.0, 0.0, 0.0)

        np.testing.assert_allclose(kf.x, [1.0, 1.0, 1.0, 1.0])

    def test_prediction_with_assigned_matrices(self):
        """Test predict() without dt uses the caller-assigned F and Q"""
        kf = make_filter([2.0, -1.0, 0.5, 0.25])
        kf.set_transition_matrix(transition_matrix(2.0))
        kf.set_process_noise(np.zeros((4, 4)))

        kf.predict()

        np.testing.assert_allclose(kf.x, [3.0, -0.5, 0.5, 0.25])
        expected_P = transition_matrix(2.0) @ np.eye(4) @ transition_matrix(2.0).T
        np.testing.assert_allclose(kf.P, expected_P)

    def test_prediction_increases_uncertainty(self):
        """Test covariance trace grows when process noise is positive"""
        kf = make_filter([0.0, 0.0, 1.0, 1.0])
        initial_trace = np.trace(kf.P)

        kf.predict(0.1, 9.0, 9.0)

        assert np.trace(kf.P) > initial_trace

    def test_prediction_rebuilds_transition_and_noise(self):
        """Test predict(dt) stores the dt-dependent F and Q"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])

        kf.predict(0.25, 9.0, 9.0)

        np.testing.assert_allclose(kf.F, transition_matrix(0.25))
        np.testing.assert_allclose(kf.Q, process_noise_matrix(0.25, 9.0, 9.0))

    def test_state_is_updated_in_place(self):
        """Test state and covariance arrays are never reallocated"""
        kf = make_filter([1.0, 2.0, 3.0, 4.0])
        x_ref, P_ref = kf.x, kf.P

        kf.predict(0.1, 9.0, 9.0)
        kf.update([1.5, 2.5])

        assert kf.x is x_ref
        assert kf.P is P_ref


class TestKalmanUpdate:
    """Test the linear and extended update steps"""

    def test_linear_update_moves_toward_measurement(self):
        """Test the estimate moves toward a lidar position reading"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])

        kf.update([1.0, -1.0])

        assert 0.9 < kf.x[0] < 1.0
        assert -1.0 < kf.x[1] < -0.9

    def test_linear_update_reduces_trace(self):
        """Test posterior trace never exceeds prior trace for random priors"""
        np.random.seed(42)
        for _ in range(20):
            A = np.random.randn(4, 4)
            P0 = A @ A.T + np.eye(4) * 0.1
            kf = make_filter(np.random.randn(4), P0=P0)
            prior_trace = np.trace(kf.P)

            kf.update(np.random.randn(2))

            assert np.trace(kf.P) <= prior_trace + 1e-12

    def test_linear_update_matches_closed_form(self):
        """Test gain and posterior against a hand-derived scalar case"""
        kf = make_filter([1.0, 1.0, 0.0, 0.0])
        kf.predict(1.0, 9.0, 9.0)

        kf.update([2.0, 1.0])

        # Prior x-axis block [[4.25, 5.5], [5.5, 10]], S = 4.25 + 0.0225
        assert kf.x[0] == pytest.approx(1.0 + 4.25 / 4.2725)
        assert kf.x[2] == pytest.approx(5.5 / 4.2725)
        assert kf.x[1] == pytest.approx(1.0)
        assert kf.S[0, 0] == pytest.approx(4.2725)

    def test_innovation_and_nis_recorded(self):
        """Test last innovation and NIS are kept for diagnostics"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])
        assert kf.nis is None

        kf.update([0.3, 0.4])

        np.testing.assert_allclose(kf.y, [0.3, 0.4])
        expected_nis = float(kf.y @ np.linalg.inv(kf.S) @ kf.y)
        assert kf.nis == pytest.approx(expected_nis)

    def test_ekf_update_uses_nonlinear_prediction(self):
        """Test innovation is z - h(x), not z - Hx"""
        x0 = np.array([3.0, 4.0, 1.0, 0.0])
        kf = make_filter(x0, H=calculate_jacobian(x0), R=R_RADAR)
        z = np.array([5.2, np.arctan2(4.0, 3.0) + 0.01, 0.7])

        kf.update_ekf(z, cartesian_to_polar, angle_indices=(1,))

        np.testing.assert_allclose(kf.y, z - cartesian_to_polar(x0), atol=1e-12)
        assert np.all(np.isfinite(kf.x))

    def test_ekf_bearing_innovation_is_normalized(self):
        """Test bearing residual across the ±π seam stays in (-π, π]"""
        x0 = np.array([-5.0, 0.01, 0.0, 0.0])
        kf = make_filter(x0, H=calculate_jacobian(x0), R=R_RADAR)
        predicted_bearing = np.arctan2(0.01, -5.0)  # just below π
        z = np.array([5.0, -np.pi + 0.01, 0.0])

        kf.update_ekf(z, cartesian_to_polar, angle_indices=(1,))

        assert -np.pi < kf.y[1] <= np.pi
        assert kf.y[1] == pytest.approx((-np.pi + 0.01) - predicted_bearing + 2 * np.pi)
        assert abs(kf.y[1]) < 0.1

    def test_ekf_update_without_angles_leaves_innovation_unwrapped(self):
        """Test no component is wrapped unless listed as an angle"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])

        kf.update_ekf([10.0, -7.0], lambda x: H_LIDAR @ x)

        np.testing.assert_allclose(kf.y, [10.0, -7.0])

    def test_measurement_model_shape_validation(self):
        """Test inconsistent H and R are rejected"""
        kf = KalmanFilter()
        with pytest.raises(ValueError):
            kf.set_measurement_model(np.zeros((3, 4)), np.eye(2))
        with pytest.raises(ValueError):
            kf.set_measurement_model(np.zeros((2, 3)), np.eye(2))


class TestCovarianceIntegrity:
    """Test debug-time covariance checks"""

    def test_valid_covariance_passes(self):
        """Test a long sequence of steps keeps the covariance valid"""
        kf = make_filter([1.0, 1.0, 0.5, 0.5], debug_checks=True)
        for step in range(50):
            kf.predict(0.05, 9.0, 9.0)
            kf.update([1.0 + 0.025 * step, 1.0 + 0.025 * step])
        kf.check_covariance()

    def test_asymmetric_covariance_detected(self):
        """Test an asymmetric covariance triggers an assertion"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])
        kf.P[0, 1] = 0.5

        with pytest.raises(CovarianceIntegrityError):
            kf.check_covariance()

    def test_negative_eigenvalue_detected(self):
        """Test a non-PSD covariance triggers an assertion"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0])
        kf.P[2, 2] = -1.0

        with pytest.raises(CovarianceIntegrityError):
            kf.check_covariance()

    def test_debug_checks_run_on_predict(self):
        """Test a negative process noise is caught when debug checks are on"""
        kf = make_filter([0.0, 0.0, 0.0, 0.0], debug_checks=True)
        kf.set_process_noise(-10.0 * np.eye(4))

        with pytest.raises(AssertionError):
            kf.predict()


if __name__ == "__main__":
    pytest.main([__file__])
