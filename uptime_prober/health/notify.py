"""
Health notifications - Dispatches alerts for unhealthy targets.

The dispatcher hands each alert to one AlertSink. Delivery failures are
logged and swallowed: alerting never changes the outcome of a sweep.
Every unhealthy sweep re-dispatches; there is no de-duplication window.
"""

import logging
from typing import Optional

from uptime_prober.adapters.notifiers import (
    AdapterEmailAlertSink,
    AdapterNullAlertSink,
    AdapterWebhookAlertSink,
)
from uptime_prober.core.entities import HealthRecord
from uptime_prober.core.ports import AlertDeliveryError, AlertSink
from uptime_prober.health.config import ProbeConfig

logger = logging.getLogger(__name__)


def build_alert_sink(probe_config: ProbeConfig, dry_run: bool = False) -> AlertSink:
    """
    Pick the alert sink for this run.

    Webhook wins over e-mail; with neither configured (or in dry-run
    mode) alerts go to the no-op sink.

    Args:
        probe_config: Probe configuration
        dry_run: If True, never deliver alerts

    Returns:
        AlertSink implementation
    """
    if dry_run:
        return AdapterNullAlertSink()

    if probe_config.alert_webhook_url:
        return AdapterWebhookAlertSink(probe_config.alert_webhook_url)

    if probe_config.alert_email:
        smtp = probe_config.smtp
        return AdapterEmailAlertSink(
            probe_config.alert_email,
            host=smtp.host,
            port=smtp.port,
            user=smtp.user,
            password=smtp.password,
            sender=smtp.sender,
        )

    return AdapterNullAlertSink()


def format_alert_message(record: HealthRecord) -> str:
    """
    Format the alert text for an unhealthy record.

    Args:
        record: Unhealthy HealthRecord

    Returns:
        Message such as "Backend is down! Error: transport error: ..."
    """
    name = record.target_name[:1].upper() + record.target_name[1:]
    return f"{name} is down! Error: {record.detail or 'Unknown error'}"


class AlertDispatcher:
    """Delivers alerts through a single sink, isolating its failures."""

    def __init__(self, sink: Optional[AlertSink] = None):
        """
        Initialize the dispatcher.

        Args:
            sink: Sink to deliver to (defaults to the no-op sink)
        """
        self.sink = sink or AdapterNullAlertSink()

    def dispatch(self, record: HealthRecord) -> bool:
        """
        Send an alert for an unhealthy record.

        Args:
            record: HealthRecord to alert on; healthy records are ignored

        Returns:
            True if the sink accepted the alert, False otherwise
        """
        if record.healthy:
            return False

        message = format_alert_message(record)
        logger.warning("ALERT: %s", message)

        try:
            self.sink.send(record.target_name, message)
        except AlertDeliveryError as e:
            logger.error("Failed to send %s alert: %s", self.sink.name, e)
            return False
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "Unexpected error sending %s alert for %s: %s",
                self.sink.name,
                record.target_name,
                e,
                exc_info=True,
            )
            return False

        return True
