"""Mail dispatch handler: authenticate, validate, send one email, classify the outcome.

The handler is independent from the HTTP framework. It receives the request
method, the caller supplied API key and the decoded JSON body, and always
returns a :class:`HandlerResult`; failures never escape as exceptions.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Any, Callable, Dict, Optional, Protocol

from pydantic import ValidationError

from .config_loader import RelaySettings
from .errors import DEFAULT_ERROR_CODE, TransportError, classify_exception, format_failure_message
from .logger import get_logger
from .models import (
    EmailSentData,
    ErrorResponse,
    REQUIRED_FIELDS,
    SendEmailPayload,
    SuccessResponse,
    redact_payload,
)
from .prometheus import RelayMetrics
from .smtp_transport import TransportConfig, build_email, default_transport_factory

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed. Only POST is accepted."
UNAUTHORIZED_MESSAGE = "Invalid or missing API key."
BAD_REQUEST_MESSAGE = "Incomplete request data. Check {}.".format(", ".join(REQUIRED_FIELDS))
SUCCESS_MESSAGE = "Email sent successfully."


class Transport(Protocol):
    async def send(self, msg: EmailMessage) -> str: ...


TransportFactory = Callable[[TransportConfig], Transport]


@dataclass
class HandlerResult:
    """HTTP status code and JSON body produced for one request."""
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def api_key_matches(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison; a missing value on either side never matches."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def _error(status_code: int, message: str) -> HandlerResult:
    return HandlerResult(status_code, ErrorResponse(message=message).model_dump(exclude_none=True))


class MailDispatchHandler:
    """Relay one email per authenticated POST request."""

    def __init__(
        self,
        settings: RelaySettings,
        *,
        transport_factory: TransportFactory = default_transport_factory,
        metrics: RelayMetrics | None = None,
        logger=None,
    ):
        self.settings = settings
        self.transport_factory = transport_factory
        self.metrics = metrics or RelayMetrics()
        self.logger = logger or get_logger("MailRelay")

    async def handle(self, method: str, api_key: Optional[str], payload: Any) -> HandlerResult:
        if (method or "").upper() != "POST":
            self.logger.info("Rejected %s request: method not allowed", method)
            self.metrics.inc_request("method_not_allowed")
            return _error(405, METHOD_NOT_ALLOWED_MESSAGE)

        if not api_key_matches(api_key, self.settings.api_key):
            self.logger.warning("Rejected request: invalid or missing API key")
            self.metrics.inc_request("unauthorized")
            return _error(401, UNAUTHORIZED_MESSAGE)

        request = self._parse_payload(payload)
        if request is None or request.missing_fields():
            self._log_rejected_payload(payload)
            self.metrics.inc_request("bad_request")
            return _error(400, BAD_REQUEST_MESSAGE)

        return await self._dispatch(request)

    def _parse_payload(self, payload: Any) -> SendEmailPayload | None:
        if not isinstance(payload, dict):
            return None
        try:
            return SendEmailPayload.model_validate(payload)
        except ValidationError:
            return None

    def _log_rejected_payload(self, payload: Any) -> None:
        logged = payload
        if isinstance(payload, dict) and not self.settings.log_sensitive_payloads:
            logged = redact_payload(payload)
        self.logger.error("Incomplete request data: %s", logged)

    async def _dispatch(self, request: SendEmailPayload) -> HandlerResult:
        config = TransportConfig.for_sender(self.settings, request.sender_user, request.sender_pass)
        try:
            msg = build_email(request.sender_user, request.to_email, request.subject, request.body)
            message_id = await self.transport_factory(config).send(msg)
        except Exception as exc:
            return self._failure(request, exc)

        self.logger.info(
            "Email sent: message_id=%s to=%s sender=%s number=%s user_id=%s username=%s",
            message_id,
            request.to_email,
            request.sender_user,
            request.number,
            request.user_id,
            request.username,
        )
        self.metrics.inc_request("sent")
        response = SuccessResponse(
            message=SUCCESS_MESSAGE,
            data=EmailSentData(
                message_id=message_id,
                to_email=request.to_email,
                subject=request.subject,
                sender_user=request.sender_user,
            ),
        )
        return HandlerResult(200, response.model_dump())

    def _failure(self, request: SendEmailPayload, exc: Exception) -> HandlerResult:
        error: TransportError = classify_exception(exc)
        self.logger.error(
            "SMTP dispatch failed (sender: %s): %r",
            request.sender_user,
            error,
            exc_info=exc,
        )
        code = error.code
        self.metrics.inc_request("failed")
        self.metrics.inc_send_error(code or DEFAULT_ERROR_CODE)
        response = ErrorResponse(
            message=format_failure_message(code),
            error_code=code or DEFAULT_ERROR_CODE,
            error_details=error.message,
        )
        return HandlerResult(500, response.model_dump())
