"""HTTP to SMTP relay sending one email per authenticated request."""

from .config_loader import RelaySettings, load_settings
from .handler import HandlerResult, MailDispatchHandler

__all__ = [
    "HandlerResult",
    "MailDispatchHandler",
    "RelaySettings",
    "load_settings",
]
