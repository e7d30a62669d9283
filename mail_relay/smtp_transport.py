"""Request-scoped SMTP transport built on aiosmtplib."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

import aiosmtplib

from .config_loader import RelaySettings
from .errors import classify_exception


@dataclass(frozen=True)
class TransportConfig:
    """Connection parameters for a single dispatch.

    Built fresh for every request from the caller's credentials; never shared
    between requests.
    """
    host: str
    port: int
    username: str
    password: str = field(repr=False)
    timeout: float = 30.0
    validate_certs: bool = False

    @classmethod
    def for_sender(cls, settings: RelaySettings, username: str, password: str) -> "TransportConfig":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=username,
            password=password,
            timeout=settings.smtp_timeout,
            validate_certs=settings.validate_certs,
        )


def text_to_html(body: str) -> str:
    """Turn newlines into ``<br>``; nothing else is escaped."""
    return body.replace("\n", "<br>")


def build_email(sender: str, recipient: str, subject: str, body: str) -> EmailMessage:
    """Compose a multipart/alternative message with plain text and HTML parts."""
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    domain = sender.rpartition("@")[2] if "@" in sender else None
    msg["Message-ID"] = make_msgid(domain=domain)
    msg.set_content(body)
    msg.add_alternative(text_to_html(body), subtype="html")
    return msg


class SMTPTransport:
    """Open one STARTTLS session, submit one message, close the session."""

    def __init__(self, config: TransportConfig):
        self.config = config

    def _client(self) -> aiosmtplib.SMTP:
        # Plain connect on the submission port, then a mandatory STARTTLS upgrade.
        return aiosmtplib.SMTP(
            hostname=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=self.config.password,
            use_tls=False,
            start_tls=True,
            validate_certs=self.config.validate_certs,
            timeout=self.config.timeout,
        )

    async def send(self, msg: EmailMessage) -> str:
        """Submit ``msg`` and return its Message-ID.

        Raises :class:`TransportError` for any failure, timeouts included.
        """
        message_id: Optional[str] = msg.get("Message-ID")
        if not message_id:
            message_id = make_msgid()
            msg["Message-ID"] = message_id

        smtp = self._client()

        async def _do_send():
            await smtp.connect()
            await smtp.send_message(msg)
            try:
                await smtp.quit()
            except aiosmtplib.SMTPException:
                smtp.close()

        try:
            await asyncio.wait_for(_do_send(), timeout=self.config.timeout)
        except Exception as exc:
            # Drop the socket instead of a QUIT that could wait another full timeout.
            smtp.close()
            raise classify_exception(exc) from exc
        return message_id


def default_transport_factory(config: TransportConfig) -> SMTPTransport:
    return SMTPTransport(config)

