"""
Core ports - Interfaces the health package depends on.

Adapters under uptime_prober.adapters implement these.
"""

from abc import ABC, abstractmethod


class AlertDeliveryError(RuntimeError):
    """Raised by an AlertSink when a message could not be delivered."""


class AlertSink(ABC):  # pylint: disable=too-few-public-methods
    """
    Port for delivering alert notifications to an external system.

    Implementations raise AlertDeliveryError on failure; callers decide
    whether that failure matters.
    """

    name = "sink"

    @abstractmethod
    def send(self, target_name: str, message: str) -> None:
        """
        Deliver a single alert.

        Args:
            target_name: Name of the unhealthy target
            message: Human-readable failure message

        Raises:
            AlertDeliveryError: If the sink rejected or never received it
        """
