"""
Health runner - Orchestrates one sweep over all configured targets.

Targets are probed concurrently; their records are collected in
configuration order before alerts are dispatched and the report is
recorded.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from uptime_prober.core.entities import HealthRecord, RunReport, Target
from uptime_prober.health import checks, config, console, notify, store

logger = logging.getLogger(__name__)

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1


def check_target(target: Target) -> HealthRecord:
    """
    Probe and evaluate a single target.

    Args:
        target: Target to check

    Returns:
        HealthRecord for the target
    """
    logger.debug("Probing %s (%s, timeout %gs)", target.name, target.url, target.timeout)
    result = checks.probe(target)
    record = checks.evaluate(result, target.kind)

    if record.healthy:
        logger.info(
            "%s healthy: HTTP %d in %.0fms",
            target.name,
            result.status_code,
            result.elapsed_ms,
        )
    else:
        logger.info(
            "%s unhealthy: HTTP %d in %.0fms - %s",
            target.name,
            result.status_code,
            result.elapsed_ms,
            record.detail,
        )
    return record


def collect_report(
    probe_config: config.ProbeConfig, started_at: Optional[datetime] = None
) -> RunReport:
    """
    Check every target and build the run report.

    Args:
        probe_config: Probe configuration
        started_at: Report timestamp (defaults to now, UTC)

    Returns:
        RunReport with one record per target, in configuration order
    """
    if started_at is None:
        started_at = datetime.now(timezone.utc)

    targets = probe_config.targets
    max_workers = probe_config.max_workers or max(len(targets), 1)

    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="probe"
    ) as executor:
        records = list(executor.map(check_target, targets))

    return RunReport(
        records={record.target_name: record for record in records},
        timestamp=started_at,
    )


def run_sweep(
    probe_config: config.ProbeConfig,
    dispatcher: Optional[notify.AlertDispatcher] = None,
    record: bool = True,
    echo: bool = False,
    started_at: Optional[datetime] = None,
) -> RunReport:
    """
    Run one full sweep: probe, alert, record.

    Args:
        probe_config: Probe configuration
        dispatcher: Alert dispatcher (defaults to the no-op sink)
        record: If False, skip writing the report to the log
        echo: If True, print the pass/fail report to stdout
        started_at: Report timestamp (defaults to now, UTC)

    Returns:
        Completed RunReport

    Raises:
        store.RecorderError: If the report could not be persisted
    """
    if dispatcher is None:
        dispatcher = notify.AlertDispatcher()

    report = collect_report(probe_config, started_at=started_at)

    if echo:
        console.print_report(report)

    for health_record in report.unhealthy.values():
        dispatcher.dispatch(health_record)

    if record:
        store.append_report(report, probe_config.log_dir)

    return report


def exit_code_for(report: RunReport) -> int:
    return EXIT_HEALTHY if report.overall else EXIT_UNHEALTHY


def run_health_check(
    config_path: Optional[str] = None,
    dry_run: bool = False,
    record: bool = True,
    log_dir: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Run a sweep end to end and return the process exit code.

    Args:
        config_path: Path to JSON config file (optional)
        dry_run: If True, don't send alerts
        record: If False, don't write to the log
        log_dir: Override for the log directory
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Exit code: 0 (all healthy), 1 (unhealthy target or run failure)
    """
    try:
        probe_config = config.load_config(config_path, environ=environ)
    except config.ConfigError as e:
        logger.critical("Invalid probe configuration: %s", e)
        return EXIT_UNHEALTHY

    if log_dir is not None:
        probe_config = replace(probe_config, log_dir=Path(log_dir))

    sink = notify.build_alert_sink(probe_config, dry_run=dry_run)
    dispatcher = notify.AlertDispatcher(sink)
    started_at = datetime.now(timezone.utc)

    console.print_header(started_at)

    try:
        report = run_sweep(
            probe_config,
            dispatcher=dispatcher,
            record=record,
            echo=True,
            started_at=started_at,
        )
    except store.RecorderError as e:
        logger.critical("Persistence failure, run history lost: %s", e)
        return EXIT_UNHEALTHY
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Health check run failed: %s", e, exc_info=True)
        return EXIT_UNHEALTHY

    return exit_code_for(report)
