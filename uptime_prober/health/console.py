"""
Health console - Human-readable pass/fail output on stdout.
"""

from datetime import datetime
from typing import List

from uptime_prober.core.entities import HealthRecord, RunReport

BANNER_WIDTH = 50


def format_record(record: HealthRecord) -> str:
    """
    Format one target's result as a pass/fail block.

    Args:
        record: HealthRecord to format

    Returns:
        Multi-line text
    """
    icon = "✓" if record.healthy else "✗"
    verdict = "healthy" if record.healthy else "unhealthy"
    lines: List[str] = [f"{icon} {record.target_name} is {verdict}"]

    lines.append(f"  Status: {record.probe.status_code}")
    lines.append(f"  Response Time: {record.probe.elapsed_ms:.0f}ms")

    if record.derived is not None:
        if record.derived.uptime is not None:
            lines.append(f"  Uptime: {int(record.derived.uptime // 60)}m")
        if record.derived.environment is not None:
            lines.append(f"  Environment: {record.derived.environment}")

    if not record.healthy:
        lines.append(f"  Error: {record.detail or 'Unknown error'}")

    return "\n".join(lines)


def format_summary(report: RunReport) -> str:
    if report.overall:
        verdict = "✓ All systems operational"
    else:
        names = ", ".join(report.unhealthy)
        verdict = f"✗ Some systems are down ({names})"
    return "\n".join(["=" * BANNER_WIDTH, verdict, "=" * BANNER_WIDTH])


def print_header(started_at: datetime) -> None:
    print()
    print("=" * BANNER_WIDTH)
    print("🏥 Running Health Check...")
    print(f"Time: {started_at.isoformat()}")
    print("=" * BANNER_WIDTH)
    print()


def print_report(report: RunReport) -> None:
    """
    Print every record followed by the summary banner.

    Args:
        report: RunReport to print
    """
    for record in report.records.values():
        print(format_record(record))
        print()
    print(format_summary(report))
    print()
