"""
E-mail adapter for AlertSink - Sends alerts over SMTP.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from uptime_prober.core.ports import AlertDeliveryError, AlertSink

logger = logging.getLogger(__name__)


class AdapterEmailAlertSink(AlertSink):
    """
    Adapter that implements AlertSink by mailing each alert to one address.

    STARTTLS and login are only used when both user and password are set.
    """

    name = "email"

    def __init__(
        self,
        email_address: str,
        host: str = "localhost",
        port: int = 25,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "health-check@localhost",
        timeout: float = 10.0,
    ):
        """
        Initialize the e-mail sink.

        Args:
            email_address: Recipient address
            host: SMTP host
            port: SMTP port
            user: SMTP user (optional)
            password: SMTP password (optional)
            sender: From address
            timeout: Socket timeout in seconds
        """
        self.email_address = email_address
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def build_message(self, target_name: str, message: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self.sender
        msg["To"] = self.email_address
        msg["Subject"] = f"❌ Health Check Alert: {target_name}"

        body = f"""
Health Check Alert: {target_name}

{message}

---
This is an automated message from the health monitor.
"""
        msg.attach(MIMEText(body, "plain"))
        return msg

    def send(self, target_name: str, message: str) -> None:
        msg = self.build_message(target_name, message)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.user and self.password:
                    server.starttls()
                    server.login(self.user, self.password)
                server.sendmail(msg["From"], self.email_address, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise AlertDeliveryError(
                f"E-mail delivery failed for {target_name}: {e}"
            ) from e

        logger.info("Sent e-mail alert for %s to %s", target_name, self.email_address)
