#!/usr/bin/env python3
"""
Health Watch CLI - Command-line interface for the uptime probe.

Usage:
    python -m uptime_prober.interface.watch [--config probe.json] [--dry-run]

Exit codes:
    0: All targets healthy
    1: At least one target unhealthy, or the run itself failed
"""

import argparse
import logging
import sys
from typing import List, Optional

from uptime_prober.health import run_health_check


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Probe configured HTTP targets once and report their health",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0  - All targets healthy
  1  - At least one target unhealthy, or the run failed

Environment:
  BACKEND_URL, BACKEND_HEALTH_ENDPOINT, FRONTEND_URL, PROBE_TIMEOUT_SECONDS,
  SLACK_WEBHOOK_URL, ALERT_EMAIL, SMTP_*, HEALTH_LOG_DIR, HEALTH_CONFIG

Examples:
  uptime-probe
  uptime-probe --config probe.json
  uptime-probe --dry-run --no-record
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to JSON config file (default: $HEALTH_CONFIG, else environment only)",
    )

    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for the daily run logs (default: $HEALTH_LOG_DIR or ./logs)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't send alerts, just print results",
    )

    parser.add_argument(
        "--no-record",
        action="store_true",
        help="Don't append this run to the daily log",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 (healthy), 1 (unhealthy or failed)
    """
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting health check run")

    if args.dry_run:
        logger.info("Dry-run mode: No alerts will be sent")

    try:
        exit_code = run_health_check(
            config_path=args.config,
            dry_run=args.dry_run,
            record=not args.no_record,
            log_dir=args.log_dir,
        )
        logger.info("Health check completed with exit code: %d", exit_code)
        return exit_code
    except KeyboardInterrupt:
        logger.error("Health check interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
