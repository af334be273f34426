"""
Tests for the watch CLI.
"""

from unittest.mock import patch

from uptime_prober.interface import watch


class TestWatchCli:
    """Tests for main function."""

    @patch("uptime_prober.interface.watch.run_health_check")
    def test_main_defaults(self, mock_run):
        """Test defaults are passed through to the runner."""
        mock_run.return_value = 0

        assert watch.main([]) == 0
        mock_run.assert_called_once_with(
            config_path=None, dry_run=False, record=True, log_dir=None
        )

    @patch("uptime_prober.interface.watch.run_health_check")
    def test_main_flags(self, mock_run):
        """Test CLI flags map to runner arguments."""
        mock_run.return_value = 1

        exit_code = watch.main(
            ["--config", "p.json", "--dry-run", "--no-record", "--log-dir", "out"]
        )

        assert exit_code == 1
        mock_run.assert_called_once_with(
            config_path="p.json", dry_run=True, record=False, log_dir="out"
        )

    @patch("uptime_prober.interface.watch.run_health_check")
    def test_main_keyboard_interrupt(self, mock_run):
        """Test interrupt returns 130."""
        mock_run.side_effect = KeyboardInterrupt

        assert watch.main([]) == 130
