"""Mail transport implementations for local and production environments."""

from __future__ import annotations

import asyncio
import smtplib
import socket
from email.message import EmailMessage
from typing import Any, Dict, List, Optional

import structlog

from saved_searches.domain.exceptions import MailDeliveryError
from saved_searches.domain.interfaces import IMailTransport

logger = structlog.get_logger(__name__)


class LocalMailTransport(IMailTransport):
    """Mail transport that only logs messages, for development."""

    def __init__(self):
        self._sent_email_count = 0
        self.outbox: List[Dict[str, Any]] = []

    async def check_health(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": "LocalMailTransport",
            "emails_sent": self._sent_email_count,
        }

    async def send_email(self, to: str, subject: str, body: str, is_html: bool = False) -> None:
        """Send email (logs locally)."""
        self._sent_email_count += 1
        self.outbox.append({"to": to, "subject": subject, "body": body, "is_html": is_html})
        logger.info(
            "Email dispatched (local)",
            recipient=to,
            subject=subject,
            is_html=is_html,
            body_length=len(body),
            body_content=body,
        )


class SmtpMailTransport(IMailTransport):
    """Delivers mails through an SMTP server.

    smtplib is blocking, so every delivery runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "noreply@localhost",
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    async def check_health(self) -> Dict[str, Any]:
        return {
            "status": "configured",
            "service": "SmtpMailTransport",
            "host": self.host,
            "port": self.port,
        }

    def _build_message(self, to: str, subject: str, body: str, is_html: bool) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body, subtype="html" if is_html else "plain")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send_email(self, to: str, subject: str, body: str, is_html: bool = False) -> None:
        msg = self._build_message(to, subject, body, is_html)

        try:
            await asyncio.to_thread(self._deliver, msg)
        except socket.gaierror as e:
            raise MailDeliveryError(f"Failed to resolve SMTP host {self.host}: {e}") from e
        except (ConnectionRefusedError, TimeoutError, socket.timeout) as e:
            raise MailDeliveryError(
                f"Connection error to SMTP server {self.host}:{self.port}: {e}"
            ) from e
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"SMTP delivery to {to} failed: {e}") from e

        logger.info("Email sent via SMTP", recipient=to, subject=subject)


__all__ = ["LocalMailTransport", "SmtpMailTransport"]
