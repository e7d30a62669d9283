"""Transport error codes and their classification into caller-facing messages."""

from __future__ import annotations

import asyncio
import ssl
from enum import Enum
from typing import Optional

import aiosmtplib


class ErrorCode(str, Enum):
    """Codes attached to every failed SMTP dispatch."""

    AUTH = "EAUTH"
    ENVELOPE = "EENVELOPE"
    TLS = "ETLS"
    TIMEOUT = "ETIMEDOUT"
    CONNECTION = "ECONNECTION"
    PROTOCOL = "EPROTOCOL"
    SEND_FAILED = "EMAIL_SEND_FAILED"


DEFAULT_ERROR_CODE = ErrorCode.SEND_FAILED.value

AUTH_FAILED_MESSAGE = "SMTP authentication failed, check credentials (email/app password)."
INVALID_DESTINATION_MESSAGE = "Destination address invalid."
CONNECTION_PROBLEM_MESSAGE = "SMTP server/connection problem."


class TransportError(Exception):
    """Raised by the SMTP transport when a message could not be submitted."""

    def __init__(self, message: str, code: Optional[str] = None, smtp_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.smtp_code = smtp_code


def classify_exception(exc: BaseException) -> TransportError:
    """Wrap a low level SMTP/network exception into a :class:`TransportError`."""
    if isinstance(exc, TransportError):
        return exc

    smtp_code = getattr(exc, "code", None) if isinstance(exc, aiosmtplib.SMTPException) else None
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__

    # Order matters: several aiosmtplib errors share base classes.
    if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
        code = ErrorCode.AUTH
    elif isinstance(exc, (aiosmtplib.SMTPRecipientsRefused, aiosmtplib.SMTPRecipientRefused, aiosmtplib.SMTPSenderRefused)):
        code = ErrorCode.ENVELOPE
    elif isinstance(exc, (aiosmtplib.SMTPNotSupported, ssl.SSLError)):
        code = ErrorCode.TLS
    elif isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        code = ErrorCode.TIMEOUT
    elif isinstance(exc, (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected, ConnectionError, OSError)):
        code = ErrorCode.CONNECTION
    elif isinstance(exc, aiosmtplib.SMTPException) and "starttls" in message.lower():
        # aiosmtplib reports a missing STARTTLS extension as a plain SMTPException.
        code = ErrorCode.TLS
    elif isinstance(exc, aiosmtplib.SMTPException):
        code = ErrorCode.PROTOCOL
    else:
        code = ErrorCode.SEND_FAILED
    return TransportError(message, code=code.value, smtp_code=smtp_code if isinstance(smtp_code, int) else None)


def describe_transport_error(code: Optional[str]) -> str:
    """Map an error code to the sentence shown to the caller."""
    if code == ErrorCode.AUTH:
        return AUTH_FAILED_MESSAGE
    if code == ErrorCode.ENVELOPE:
        return INVALID_DESTINATION_MESSAGE
    return CONNECTION_PROBLEM_MESSAGE


def format_failure_message(code: Optional[str]) -> str:
    return f"Failed to send email (code: {code or 'N/A'}). {describe_transport_error(code)}"
