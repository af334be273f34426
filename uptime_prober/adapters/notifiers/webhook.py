"""
Webhook adapter for AlertSink - Posts alerts to a Slack-style webhook.
"""

import logging

import requests

from uptime_prober.core.ports import AlertDeliveryError, AlertSink

logger = logging.getLogger(__name__)


class AdapterWebhookAlertSink(AlertSink):
    """
    Adapter that implements AlertSink with an HTTP POST of a JSON payload.

    The payload follows the Slack Incoming Webhook format; any sink that
    accepts a 'text' field works.
    """

    name = "webhook"

    def __init__(
        self,
        webhook_url: str,
        username: str = "Health Monitor",
        icon_emoji: str = ":hospital:",
        timeout: float = 10.0,
    ):
        """
        Initialize the webhook sink.

        Args:
            webhook_url: URL to POST alerts to
            username: Display name sent with the message
            icon_emoji: Icon sent with the message
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.username = username
        self.icon_emoji = icon_emoji
        self.timeout = timeout

    def build_payload(self, message: str) -> dict:
        return {
            "text": f"🚨 Health Check Alert: {message}",
            "username": self.username,
            "icon_emoji": self.icon_emoji,
        }

    def send(self, target_name: str, message: str) -> None:
        try:
            response = requests.post(
                self.webhook_url,
                json=self.build_payload(message),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise AlertDeliveryError(
                f"Webhook delivery failed for {target_name}: {e}"
            ) from e

        logger.info("Sent webhook alert for %s", target_name)
