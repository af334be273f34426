"""
Health store - Date-partitioned JSON log of run reports.

Each calendar day (UTC) has one file holding a JSON array of reports.
Appending reads the whole partition, adds the report and rewrites the
file. Not safe for concurrent writers; runs must not overlap.
"""

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

from uptime_prober.core.entities import RunReport

logger = logging.getLogger(__name__)

PARTITION_PREFIX = "health-check-"


class RecorderError(RuntimeError):
    """Raised when a log partition cannot be read or written."""


def partition_path(log_dir: Path, day: date) -> Path:
    """
    Path of the partition file for a day.

    Args:
        log_dir: Directory holding the partitions
        day: Calendar day

    Returns:
        e.g. log_dir / "health-check-2024-01-31.json"
    """
    return Path(log_dir) / f"{PARTITION_PREFIX}{day.isoformat()}.json"


def load_partition(log_dir: Path, day: date) -> List[Dict[str, Any]]:
    """
    Load all reports recorded for a day.

    Args:
        log_dir: Directory holding the partitions
        day: Calendar day

    Returns:
        List of report dicts, empty if the partition does not exist

    Raises:
        RecorderError: If the file cannot be read or is not a JSON array
    """
    path = partition_path(log_dir, day)

    if not path.exists():
        logger.debug("Partition not found: %s. Starting fresh.", path)
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RecorderError(f"Failed to read log partition {path}: {e}") from e

    if not isinstance(data, list):
        raise RecorderError(f"Log partition {path} does not hold a JSON array")

    return data


def write_partition(log_dir: Path, day: date, reports: List[Dict[str, Any]]) -> Path:
    """
    Rewrite a day's partition with the given reports.

    The file is written next to its final location and then moved into
    place, so readers never see a half-written partition.

    Args:
        log_dir: Directory holding the partitions
        day: Calendar day
        reports: Full list of report dicts for the day

    Returns:
        Path of the written partition

    Raises:
        RecorderError: If the directory or file cannot be written
    """
    path = partition_path(log_dir, day)
    tmp_path = path.with_name(path.name + ".tmp")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(reports, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        raise RecorderError(f"Failed to write log partition {path}: {e}") from e

    logger.debug("Saved %d reports to %s", len(reports), path)
    return path


def append_report(report: RunReport, log_dir: Path) -> Path:
    """
    Append a run report to its day's partition.

    Args:
        report: Completed RunReport
        log_dir: Directory holding the partitions

    Returns:
        Path of the updated partition

    Raises:
        RecorderError: If the partition cannot be read or written
    """
    day = report.timestamp.date()
    reports = load_partition(log_dir, day)
    reports.append(report.to_dict())
    path = write_partition(log_dir, day, reports)

    logger.info("Recorded run report #%d for %s in %s", len(reports), day, path)
    return path
