"""
Health configuration - Builds the probe configuration once at startup.

Targets, alert sinks and the log directory come from environment
variables, optionally overridden by a JSON file. The resulting
ProbeConfig is passed explicitly to the runner; nothing else reads the
environment.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from uptime_prober.core.entities import Target, TargetKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_BACKEND_URL = "http://localhost:5000"
DEFAULT_BACKEND_ENDPOINT = "/health"
DEFAULT_FRONTEND_URL = "http://localhost:3000"
DEFAULT_LOG_DIR = "./logs"


# Config file structure
# {
#   "targets": {
#     "name": {
#       "url": str,
#       "kind": str,  # "reachability", "liveness-json"
#       "timeout": Optional[float]
#     }
#   },
#   "alert_webhook_url": Optional[str],
#   "alert_email": Optional[str],
#   "log_dir": Optional[str],
#   "max_workers": Optional[int]
# }


class ConfigError(ValueError):
    """Raised when the probe configuration cannot be built."""


@dataclass(frozen=True)
class SmtpSettings:
    """SMTP connection settings for the e-mail alert sink."""

    host: str = "localhost"
    port: int = 25
    user: Optional[str] = None
    password: Optional[str] = None
    sender: str = "health-check@localhost"


@dataclass(frozen=True)
class ProbeConfig:
    """Immutable configuration for one process run."""

    targets: Tuple[Target, ...]
    alert_webhook_url: Optional[str] = None
    alert_email: Optional[str] = None
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    max_workers: Optional[int] = None


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProbeConfig:
    """
    Load probe configuration from the environment and an optional JSON file.

    Args:
        config_path: Path to JSON config file. If None, HEALTH_CONFIG is
                     consulted; if that is unset too, only the environment
                     and built-in defaults are used.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        ProbeConfig for this run

    Raises:
        ConfigError: If the file is missing or invalid, or no valid
                     targets remain
    """
    if environ is None:
        environ = os.environ

    timeout = _parse_timeout(
        environ.get("PROBE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        "PROBE_TIMEOUT_SECONDS",
    )
    targets = _default_targets(environ, timeout)
    webhook_url = environ.get("SLACK_WEBHOOK_URL") or environ.get(
        "ALERT_WEBHOOK_URL"
    )
    alert_email = environ.get("ALERT_EMAIL") or None
    log_dir = environ.get("HEALTH_LOG_DIR", DEFAULT_LOG_DIR)
    max_workers = None

    if config_path is None:
        config_path = environ.get("HEALTH_CONFIG") or None

    if config_path is not None:
        data = _read_config_file(config_path)

        if "targets" in data:
            targets = _parse_targets(data["targets"], timeout)
        webhook_url = _optional_field(data, "alert_webhook_url", webhook_url)
        alert_email = _optional_field(data, "alert_email", alert_email)
        if "log_dir" in data:
            log_dir = data["log_dir"]
            if not isinstance(log_dir, str) or not log_dir:
                raise ConfigError("Field 'log_dir' must be a non-empty string")
        max_workers = data.get("max_workers")
        if max_workers is not None and (
            isinstance(max_workers, bool)
            or not isinstance(max_workers, int)
            or max_workers < 1
        ):
            raise ConfigError("Field 'max_workers' must be a positive int")

    if not targets:
        raise ConfigError("No valid targets configured")

    try:
        smtp_port = int(environ.get("SMTP_PORT", "25"))
    except ValueError as e:
        raise ConfigError(f"SMTP_PORT must be an int: {e}") from e

    smtp = SmtpSettings(
        host=environ.get("SMTP_HOST", "localhost"),
        port=smtp_port,
        user=environ.get("SMTP_USER") or None,
        password=environ.get("SMTP_PASSWORD") or None,
        sender=environ.get("SMTP_FROM", "health-check@localhost"),
    )

    probe_config = ProbeConfig(
        targets=tuple(targets),
        alert_webhook_url=webhook_url or None,
        alert_email=alert_email or None,
        smtp=smtp,
        log_dir=Path(log_dir),
        max_workers=max_workers,
    )

    logger.info(
        "Loaded probe config: %d targets, alerting %s, log dir %s",
        len(probe_config.targets),
        "enabled" if (webhook_url or alert_email) else "disabled",
        probe_config.log_dir,
    )

    return probe_config


def _default_targets(environ: Mapping[str, str], timeout: float) -> List[Target]:
    """Backend liveness and frontend reachability targets."""
    backend_url = environ.get("BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/")
    backend_endpoint = environ.get("BACKEND_HEALTH_ENDPOINT", DEFAULT_BACKEND_ENDPOINT)
    frontend_url = environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL)

    return [
        Target(
            name="backend",
            url=f"{backend_url}{backend_endpoint}",
            kind=TargetKind.LIVENESS_JSON,
            timeout=timeout,
        ),
        Target(
            name="frontend",
            url=frontend_url,
            kind=TargetKind.REACHABILITY,
            timeout=timeout,
        ),
    ]


def _read_config_file(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {config_path}")

    return data


def _optional_field(
    data: Dict[str, Any], key: str, current: Optional[str]
) -> Optional[str]:
    """
    Read an optional string field; null in the file disables it.

    Raises:
        ConfigError: If the value is neither a string nor null
    """
    if key not in data:
        return current
    value = data[key]
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Field '{key}' must be a string or null")
    return value or None


def _parse_targets(raw_targets: Any, default_timeout: float) -> List[Target]:
    """
    Validate the targets section, keeping file order.

    Invalid entries are logged and skipped.
    """
    if not isinstance(raw_targets, dict):
        raise ConfigError("Field 'targets' must be a mapping of name -> target")

    targets: List[Target] = []
    for name, target_config in raw_targets.items():
        try:
            targets.append(_validate_target(name, target_config, default_timeout))
        except ConfigError as e:
            logger.error("Invalid config for target %s: %s", name, e)
            continue

    return targets


def _validate_target(
    name: str, config: Dict[str, Any], default_timeout: float
) -> Target:
    """
    Validate a single target's configuration.

    Args:
        name: Target name
        config: Raw configuration dict
        default_timeout: Timeout used when the entry sets none

    Returns:
        Validated Target

    Raises:
        ConfigError: If config is invalid
    """
    if not isinstance(config, dict):
        raise ConfigError(f"Config must be a dict for target: {name}")

    url = config.get("url")
    if not isinstance(url, str) or not url:
        raise ConfigError(f"Field 'url' must be a non-empty string for target: {name}")

    kind_value = config.get("kind", TargetKind.REACHABILITY.value)
    try:
        kind = TargetKind(kind_value)
    except ValueError as e:
        valid_kinds = tuple(k.value for k in TargetKind)
        raise ConfigError(
            f"Field 'kind' must be one of {valid_kinds} for target: {name}"
        ) from e

    timeout = _parse_timeout(config.get("timeout", default_timeout), name)

    return Target(name=name, url=url, kind=kind, timeout=timeout)


def _parse_timeout(value: Any, owner: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"Timeout must be a number for: {owner}")
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Timeout must be a number for: {owner}") from e
    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive for: {owner}")
    return timeout
