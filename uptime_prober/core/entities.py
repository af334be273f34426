"""
Core entities - Immutable values flowing through one probe sweep.

Target -> ProbeResult -> HealthRecord -> RunReport
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class TargetKind(str, Enum):
    """How a target's response is judged."""

    REACHABILITY = "reachability"
    LIVENESS_JSON = "liveness-json"


class FailureKind(str, Enum):
    """Why a target was classified unhealthy."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    PAYLOAD = "payload"


@dataclass(frozen=True)
class Target:
    """A remote endpoint under observation."""

    name: str
    url: str
    kind: TargetKind = TargetKind.REACHABILITY
    timeout: float = 10.0


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of exactly one GET against a target.

    status_code is 0 when no HTTP response was obtained; in that case
    error carries the transport failure. raw_body is only kept for
    liveness-json targets.
    """

    target_name: str
    status_code: int
    elapsed_ms: float
    error: Optional[str] = None
    raw_body: Optional[str] = None


@dataclass(frozen=True)
class LivenessBody:
    """Decoded liveness document. Optional fields are None when absent."""

    status: Any
    uptime: Optional[float] = None
    environment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status}
        if self.uptime is not None:
            data["uptime"] = self.uptime
        if self.environment is not None:
            data["environment"] = self.environment
        return data


@dataclass(frozen=True)
class HealthRecord:
    """Health classification derived from a single ProbeResult."""

    target_name: str
    healthy: bool
    probe: ProbeResult
    failure: Optional[FailureKind] = None
    detail: Optional[str] = None
    derived: Optional[LivenessBody] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "healthy": self.healthy,
            "status_code": self.probe.status_code,
            "elapsed_ms": self.probe.elapsed_ms,
        }
        if self.failure is not None:
            data["failure"] = self.failure.value
        if self.detail:
            data["error"] = self.detail
        if self.derived is not None:
            data["derived"] = self.derived.to_dict()
        if self.probe.raw_body is not None:
            data["raw_body"] = self.probe.raw_body
        return data


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunReport:
    """
    Results of one sweep over all configured targets.

    records preserves configuration order and is read-only. overall is
    True iff every record is healthy.
    """

    records: Mapping[str, HealthRecord]
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    @property
    def overall(self) -> bool:
        return all(record.healthy for record in self.records.values())

    @property
    def unhealthy(self) -> Dict[str, HealthRecord]:
        return {
            name: record
            for name, record in self.records.items()
            if not record.healthy
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "healthy": self.overall,
            "checks": {
                name: record.to_dict() for name, record in self.records.items()
            },
        }
