import pytest
import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing
import matplotlib.pyplot as plt
from unittest.mock import patch
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ekf_fusion.simulation import run_scenario
from ekf_fusion.visualization import plot_tracking_result, plot_estimation_error, create_summary_figure
from ekf_fusion import main as cli


@pytest.fixture
def scenario_result():
    np.random.seed(0)
    return run_scenario(duration=2.0, dt=0.1)


class TestPlotting:
    """Test fusion result plots"""

    def test_tracking_plot(self, scenario_result):
        """Test tracking plot draws truth, estimate and both sensors"""
        ax = plot_tracking_result(scenario_result)

        assert len(ax.lines) == 2
        labels = [text.get_text() for text in ax.get_legend().get_texts()]
        assert 'Lidar' in labels
        assert 'Radar' in labels
        plt.close('all')

    def test_tracking_plot_without_measurements(self, scenario_result):
        """Test measurement scatter can be disabled"""
        fig, ax = plt.subplots()
        returned = plot_tracking_result(scenario_result, ax=ax, show_measurements=False)

        assert returned is ax
        assert len(ax.collections) == 0
        plt.close(fig)

    def test_error_plot(self, scenario_result):
        """Test error plot has one sample per estimate"""
        ax = plot_estimation_error(scenario_result)

        xdata = ax.lines[0].get_xdata()
        assert len(xdata) == len(scenario_result.estimates)
        plt.close('all')

    def test_summary_figure(self, scenario_result):
        """Test summary figure holds both panels"""
        fig = create_summary_figure(scenario_result)
        assert len(fig.axes) == 2
        plt.close(fig)


class TestCommandLine:
    """Test the demo entry point"""

    def test_run_demo(self, capsys):
        """Test demo prints an accuracy summary"""
        result = cli.run_demo(duration=2.0, dt=0.1, seed=1)

        output = capsys.readouterr().out
        assert "RMSE" in output
        assert result.rmse.shape == (4,)

    def test_main_parses_arguments(self, capsys):
        """Test main() forwards command line options"""
        argv = ['ekf-fusion', '--duration', '1.0', '--trajectory', 'linear', '--seed', '3']
        with patch.object(sys, 'argv', argv):
            cli.main()

        assert "linear" in capsys.readouterr().out

    def test_main_with_plot(self):
        """Test plotting path without opening a window"""
        with patch('matplotlib.pyplot.show') as mock_show:
            cli.run_demo(duration=1.0, dt=0.1, seed=2, plot=True)
            mock_show.assert_called_once()
        plt.close('all')


if __name__ == "__main__":
    pytest.main([__file__])
