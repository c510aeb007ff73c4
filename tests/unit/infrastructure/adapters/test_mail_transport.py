"""Tests for the local and SMTP mail transports."""

import smtplib
import socket
from unittest.mock import MagicMock, patch

import pytest

from saved_searches.domain.exceptions import MailDeliveryError
from saved_searches.infrastructure.adapters.mail_transport import (
    LocalMailTransport,
    SmtpMailTransport,
)

SMTP_PATH = "saved_searches.infrastructure.adapters.mail_transport.smtplib.SMTP"


@pytest.mark.asyncio
async def test_local_transport_keeps_outbox():
    transport = LocalMailTransport()

    await transport.send_email("alice@example.com", "Hello", "Body")

    assert transport.outbox == [
        {"to": "alice@example.com", "subject": "Hello", "body": "Body", "is_html": False}
    ]
    assert (await transport.check_health())["emails_sent"] == 1


class TestSmtpMailTransport:

    def setup_method(self):
        self.transport = SmtpMailTransport(
            host="smtp.example.com",
            port=2525,
            sender="searches@example.com",
            username="mailer",
            password="secret",
        )

    @pytest.mark.asyncio
    async def test_delivers_message(self):
        with patch(SMTP_PATH) as smtp_class:
            server = smtp_class.return_value.__enter__.return_value

            await self.transport.send_email("alice@example.com", "New results", "3 new results")

        smtp_class.assert_called_once_with("smtp.example.com", 2525, timeout=30)
        server.starttls.assert_called_once_with()
        server.login.assert_called_once_with("mailer", "secret")
        message = server.send_message.call_args.args[0]
        assert message["From"] == "searches@example.com"
        assert message["To"] == "alice@example.com"
        assert message["Subject"] == "New results"
        assert message.get_content().strip() == "3 new results"

    @pytest.mark.asyncio
    async def test_plain_connection_without_credentials(self):
        transport = SmtpMailTransport(host="localhost", port=25, use_tls=False)

        with patch(SMTP_PATH) as smtp_class:
            server = smtp_class.return_value.__enter__.return_value
            await transport.send_email("bob@example.com", "Subject", "<p>Body</p>", is_html=True)

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        assert server.send_message.call_args.args[0].get_content_subtype() == "html"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            socket.gaierror("name resolution failed"),
            ConnectionRefusedError("refused"),
            TimeoutError("timed out"),
            smtplib.SMTPServerDisconnected("gone"),
        ],
    )
    async def test_connection_problems(self, error):
        with patch(SMTP_PATH, MagicMock(side_effect=error)):
            with pytest.raises(MailDeliveryError):
                await self.transport.send_email("alice@example.com", "Subject", "Body")

    @pytest.mark.asyncio
    async def test_rejected_login(self):
        with patch(SMTP_PATH) as smtp_class:
            server = smtp_class.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"authentication failed")

            with pytest.raises(MailDeliveryError, match="alice@example.com"):
                await self.transport.send_email("alice@example.com", "Subject", "Body")

        server.send_message.assert_not_called()
