"""
Notifiers module - AlertSink implementations.

This module contains adapters that implement the AlertSink port,
delivering alert messages to a webhook, an e-mail inbox, or nowhere.
"""

from uptime_prober.adapters.notifiers.mail import AdapterEmailAlertSink
from uptime_prober.adapters.notifiers.null import AdapterNullAlertSink
from uptime_prober.adapters.notifiers.webhook import AdapterWebhookAlertSink

__all__ = [
    "AdapterEmailAlertSink",
    "AdapterNullAlertSink",
    "AdapterWebhookAlertSink",
]
