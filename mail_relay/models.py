"""Pydantic payloads describing the relay request and its responses."""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_FIELDS = ("to_email", "subject", "body", "number", "sender_user", "sender_pass")
SENSITIVE_FIELDS = ("sender_pass",)


class SendEmailPayload(BaseModel):
    """Email submission sent by the caller.

    Every field is optional at the schema level: completeness is checked by the
    handler so that an incomplete payload yields the relay's own ``400`` body
    instead of a schema validation error.
    """
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    to_email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    number: Optional[Union[str, int]] = None
    user_id: Optional[Union[str, int]] = None
    username: Optional[str] = None
    sender_user: Optional[str] = None
    sender_pass: Optional[str] = Field(default=None, repr=False)

    def missing_fields(self) -> list[str]:
        """Return the required fields that are absent or empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]


class EmailSentData(BaseModel):
    message_id: str
    to_email: str
    subject: str
    sender_user: str


class SuccessResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
    data: EmailSentData


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
    error_code: Optional[str] = None
    error_details: Optional[str] = None


def redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``payload`` with credential fields masked."""
    redacted = dict(payload)
    for name in SENSITIVE_FIELDS:
        if redacted.get(name):
            redacted[name] = "***"
    return redacted
