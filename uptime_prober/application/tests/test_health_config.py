"""
Tests for health config module.
"""

import json
from pathlib import Path

import pytest

from uptime_prober.core.entities import TargetKind
from uptime_prober.health import config


class TestLoadConfig:
    """Tests for load_config function."""

    @pytest.fixture
    def write_config(self, tmp_path):
        def _write(data):
            path = tmp_path / "probe.json"
            path.write_text(json.dumps(data), encoding="utf-8")
            return str(path)

        return _write

    def test_defaults(self):
        """Test default backend and frontend targets."""
        probe_config = config.load_config(environ={})

        backend, frontend = probe_config.targets
        assert backend.name == "backend"
        assert backend.url == "http://localhost:5000/health"
        assert backend.kind is TargetKind.LIVENESS_JSON
        assert backend.timeout == 10.0
        assert frontend.name == "frontend"
        assert frontend.url == "http://localhost:3000"
        assert frontend.kind is TargetKind.REACHABILITY
        assert probe_config.alert_webhook_url is None
        assert probe_config.alert_email is None
        assert probe_config.log_dir == Path("./logs")

    def test_environment_overrides(self):
        """Test environment variables feed the defaults."""
        environ = {
            "BACKEND_URL": "https://api.example.com/",
            "FRONTEND_URL": "https://app.example.com",
            "PROBE_TIMEOUT_SECONDS": "2.5",
            "SLACK_WEBHOOK_URL": "https://hooks.example.com/x",
            "HEALTH_LOG_DIR": "/var/log/probe",
            "SMTP_PORT": "2525",
        }

        probe_config = config.load_config(environ=environ)

        assert probe_config.targets[0].url == "https://api.example.com/health"
        assert probe_config.targets[1].url == "https://app.example.com"
        assert all(t.timeout == 2.5 for t in probe_config.targets)
        assert probe_config.alert_webhook_url == "https://hooks.example.com/x"
        assert probe_config.log_dir == Path("/var/log/probe")
        assert probe_config.smtp.port == 2525

    def test_file_targets_replace_defaults_in_order(self, write_config):
        """Test targets from file keep file order."""
        path = write_config(
            {
                "targets": {
                    "zeta": {"url": "http://z", "kind": "reachability"},
                    "alpha": {
                        "url": "http://a/health",
                        "kind": "liveness-json",
                        "timeout": 3,
                    },
                },
                "alert_webhook_url": "http://sink",
                "log_dir": "/tmp/probe-logs",
            }
        )

        probe_config = config.load_config(path, environ={})

        assert [t.name for t in probe_config.targets] == ["zeta", "alpha"]
        assert probe_config.targets[0].timeout == 10.0
        assert probe_config.targets[1].timeout == 3.0
        assert probe_config.targets[1].kind is TargetKind.LIVENESS_JSON
        assert probe_config.alert_webhook_url == "http://sink"
        assert probe_config.log_dir == Path("/tmp/probe-logs")

    def test_config_path_from_environment(self, write_config):
        """Test HEALTH_CONFIG selects the file."""
        path = write_config({"targets": {"only": {"url": "http://o"}}})

        probe_config = config.load_config(environ={"HEALTH_CONFIG": path})

        assert [t.name for t in probe_config.targets] == ["only"]

    def test_invalid_target_skipped(self, write_config):
        """Test invalid targets are skipped, valid ones kept."""
        path = write_config(
            {
                "targets": {
                    "good": {"url": "http://g"},
                    "no_url": {"kind": "reachability"},
                    "bad_kind": {"url": "http://b", "kind": "ftp"},
                    "bad_timeout": {"url": "http://t", "timeout": -1},
                }
            }
        )

        probe_config = config.load_config(path, environ={})

        assert [t.name for t in probe_config.targets] == ["good"]

    def test_no_valid_targets(self, write_config):
        """Test config with no valid targets raises ConfigError."""
        path = write_config({"targets": {"bad": {"kind": "reachability"}}})

        with pytest.raises(config.ConfigError, match="No valid targets"):
            config.load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        """Test missing config file raises ConfigError."""
        with pytest.raises(config.ConfigError, match="not found"):
            config.load_config(str(tmp_path / "nope.json"), environ={})

    def test_invalid_json(self, tmp_path):
        """Test invalid JSON raises ConfigError."""
        path = tmp_path / "probe.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(config.ConfigError, match="Invalid JSON"):
            config.load_config(str(path), environ={})

    def test_invalid_timeout_env(self):
        """Test non-numeric timeout raises ConfigError."""
        with pytest.raises(config.ConfigError):
            config.load_config(environ={"PROBE_TIMEOUT_SECONDS": "soon"})

    def test_config_error_is_value_error(self):
        """Test ConfigError can be handled as ValueError."""
        assert issubclass(config.ConfigError, ValueError)

    @pytest.mark.parametrize("value", [None, "", 5, ["logs"]])
    def test_invalid_log_dir(self, write_config, value):
        """Test log_dir must be a non-empty string."""
        path = write_config({"log_dir": value})

        with pytest.raises(config.ConfigError, match="log_dir"):
            config.load_config(path, environ={})

    @pytest.mark.parametrize("key", ["alert_webhook_url", "alert_email"])
    def test_non_string_alert_field(self, write_config, key):
        """Test alert fields must be strings."""
        path = write_config({key: {"url": "http://sink"}})

        with pytest.raises(config.ConfigError, match=key):
            config.load_config(path, environ={})

    def test_null_alert_field_disables_env_value(self, write_config):
        """Test null in the file clears an environment alert sink."""
        path = write_config({"alert_webhook_url": None})

        probe_config = config.load_config(
            path, environ={"SLACK_WEBHOOK_URL": "http://sink"}
        )

        assert probe_config.alert_webhook_url is None

    @pytest.mark.parametrize("value", [0, True, "4", 1.5])
    def test_invalid_max_workers(self, write_config, value):
        """Test max_workers must be a positive int."""
        path = write_config({"max_workers": value})

        with pytest.raises(config.ConfigError, match="max_workers"):
            config.load_config(path, environ={})

    def test_config_path_is_directory(self, tmp_path):
        """Test unreadable config path raises ConfigError."""
        with pytest.raises(config.ConfigError):
            config.load_config(str(tmp_path), environ={})
