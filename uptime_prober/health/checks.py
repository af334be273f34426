"""
Health checks - Probing targets and classifying the results.

probe() performs one timed GET and never raises. evaluate() turns the
ProbeResult into a HealthRecord for the target's kind.
"""

import json
import logging
import threading
import time
from typing import Any, Optional

import requests

from uptime_prober.core.entities import (
    FailureKind,
    HealthRecord,
    LivenessBody,
    ProbeResult,
    Target,
    TargetKind,
)

logger = logging.getLogger(__name__)

HEALTHY_STATUS = 200
CHUNK_SIZE = 8192


class PayloadError(ValueError):
    """Raised when a liveness body is not a well-formed liveness document."""


class _DeadlineExceeded(Exception):
    """Request went past the target's deadline."""


class _ProbeAttempt:
    """
    One GET running on a daemon thread so the caller can stop waiting.

    The requests timeout only bounds each socket read, so a server that
    trickles bytes could hold a read open indefinitely. The caller joins
    the thread with the target's timeout and, if it is still running,
    aborts it: the response (once received) is closed and the result is
    discarded.
    """

    def __init__(self, target: Target, started: float):
        self.target = target
        self.started = started
        self.deadline = started + target.timeout
        self.result: Optional[ProbeResult] = None
        self._lock = threading.Lock()
        self._response: Optional[requests.Response] = None
        self._aborted = False

    def run(self) -> None:
        self.result = _probe_once(self)

    def attach(self, response: requests.Response) -> None:
        with self._lock:
            if self._aborted:
                response.close()
                raise _DeadlineExceeded()
            self._response = response

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            response = self._response
        if response is not None:
            try:
                response.close()
            except Exception as e:  # pylint: disable=broad-except
                logger.debug("Error closing timed out response: %s", e)


def probe(target: Target) -> ProbeResult:
    """
    Issue exactly one GET against a target, bounded by its timeout.

    Redirects are not followed. For liveness-json targets the body is
    read and kept on the result. The whole exchange (connect, headers,
    body) must finish within the timeout; otherwise the probe gives up
    and reports a timeout.

    Args:
        target: Target to probe

    Returns:
        ProbeResult; status_code is 0 with error set on any transport
        failure (DNS, connect, TLS, timeout)
    """
    attempt = _ProbeAttempt(target, time.perf_counter())
    worker = threading.Thread(
        target=attempt.run, name=f"probe-{target.name}", daemon=True
    )
    worker.start()
    worker.join(target.timeout)

    if worker.is_alive():
        attempt.abort()
        logger.debug("Probe of %s exceeded %gs deadline", target.name, target.timeout)
        return _timeout_result(target)

    if attempt.result is None:
        return ProbeResult(
            target_name=target.name,
            status_code=0,
            elapsed_ms=min(_elapsed_ms(attempt.started), target.timeout * 1000.0),
            error="transport error: probe ended without a result",
        )

    return attempt.result


def _probe_once(attempt: _ProbeAttempt) -> ProbeResult:
    target = attempt.target
    started = attempt.started
    timeout_ms = target.timeout * 1000.0

    try:
        response = requests.get(
            target.url,
            timeout=target.timeout,
            allow_redirects=False,
            stream=True,
        )
        try:
            attempt.attach(response)
            raw_body = None
            if target.kind is TargetKind.LIVENESS_JSON:
                raw_body = _read_body(response, attempt.deadline)
        finally:
            response.close()
    except _DeadlineExceeded:
        return _timeout_result(target)
    except requests.exceptions.RequestException as e:
        elapsed_ms = _elapsed_ms(started)
        if isinstance(e, requests.exceptions.Timeout) or elapsed_ms >= timeout_ms:
            return _timeout_result(target)
        logger.debug("Probe of %s failed: %s", target.name, e)
        return ProbeResult(
            target_name=target.name,
            status_code=0,
            elapsed_ms=elapsed_ms,
            error=f"transport error: {type(e).__name__}: {e}",
        )
    except Exception as e:  # pylint: disable=broad-except
        logger.warning("Unexpected error probing %s: %s", target.name, e)
        return ProbeResult(
            target_name=target.name,
            status_code=0,
            elapsed_ms=min(_elapsed_ms(started), timeout_ms),
            error=f"transport error: {type(e).__name__}: {e}",
        )

    elapsed_ms = _elapsed_ms(started)
    if elapsed_ms > timeout_ms:
        return _timeout_result(target)

    return ProbeResult(
        target_name=target.name,
        status_code=response.status_code,
        elapsed_ms=elapsed_ms,
        raw_body=raw_body,
    )


def _read_body(response: requests.Response, deadline: float) -> str:
    chunks = []
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if time.perf_counter() > deadline:
            raise _DeadlineExceeded()
        chunks.append(chunk)
    if time.perf_counter() > deadline:
        raise _DeadlineExceeded()
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def _timeout_result(target: Target) -> ProbeResult:
    return ProbeResult(
        target_name=target.name,
        status_code=0,
        elapsed_ms=target.timeout * 1000.0,
        error=f"transport error: Timeout after {target.timeout:g}s",
    )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 3)


def evaluate(result: ProbeResult, kind: TargetKind) -> HealthRecord:
    """
    Classify a probe result.

    Healthy iff the status is exactly 200 and, for liveness-json
    targets, the body decodes as a liveness document.

    Args:
        result: ProbeResult to classify
        kind: Kind of the probed target

    Returns:
        HealthRecord; failure and detail are set when unhealthy
    """
    if result.status_code == 0:
        return HealthRecord(
            target_name=result.target_name,
            healthy=False,
            probe=result,
            failure=FailureKind.TRANSPORT,
            detail=result.error or "transport error: no response",
        )

    if result.status_code != HEALTHY_STATUS:
        return HealthRecord(
            target_name=result.target_name,
            healthy=False,
            probe=result,
            failure=FailureKind.PROTOCOL,
            detail=f"protocol error: HTTP {result.status_code}",
        )

    if kind is not TargetKind.LIVENESS_JSON:
        return HealthRecord(target_name=result.target_name, healthy=True, probe=result)

    try:
        body = decode_liveness(result.raw_body)
    except PayloadError as e:
        return HealthRecord(
            target_name=result.target_name,
            healthy=False,
            probe=result,
            failure=FailureKind.PAYLOAD,
            detail=f"payload error: {e}",
        )

    return HealthRecord(
        target_name=result.target_name,
        healthy=True,
        probe=result,
        derived=body,
    )


def decode_liveness(raw_body: Optional[str]) -> LivenessBody:
    """
    Decode a liveness document.

    The body must be a JSON object with a 'status' field. 'uptime'
    (number) and 'environment' (string) are picked up when present with
    the right type and left as None otherwise.

    Args:
        raw_body: Response body text

    Returns:
        LivenessBody

    Raises:
        PayloadError: If the body is empty, not JSON, not an object, or
                      lacks 'status'
    """
    if not raw_body or not raw_body.strip():
        raise PayloadError("empty body")

    try:
        data = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise PayloadError(f"body is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise PayloadError(f"expected a JSON object, got {type(data).__name__}")

    if "status" not in data:
        raise PayloadError("missing 'status' field")

    return LivenessBody(
        status=data["status"],
        uptime=_optional_number(data, "uptime"),
        environment=_optional_string(data, "environment"),
    )


def _optional_number(data: dict, key: str) -> Optional[float]:
    value: Any = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.debug("Ignoring non-numeric liveness field %s=%r", key, value)
        return None
    return value


def _optional_string(data: dict, key: str) -> Optional[str]:
    value: Any = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        logger.debug("Ignoring non-string liveness field %s=%r", key, value)
        return None
    return value
