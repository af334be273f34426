"""
No-op adapter for AlertSink - Used when no sink is configured.
"""

import logging

from uptime_prober.core.ports import AlertSink

logger = logging.getLogger(__name__)


class AdapterNullAlertSink(AlertSink):
    """Adapter that accepts every alert and delivers nothing."""

    name = "none"

    def send(self, target_name: str, message: str) -> None:
        logger.debug("No alert sink configured; dropping alert for %s", target_name)
