"""Settings loader for the mail relay."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 30.0
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class RelaySettings:
    """Process-wide, read-only configuration handed to the handler at startup."""

    api_key: Optional[str] = None
    http_host: str = "0.0.0.0"
    http_port: int = 8000
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_timeout: float = DEFAULT_SMTP_TIMEOUT
    validate_certs: bool = False
    log_level: str = "INFO"
    log_sensitive_payloads: bool = False


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def normalize_log_level(value: str | None) -> str:
    level = (value or "").strip().upper()
    return level if level in LOG_LEVELS else "INFO"


def load_settings(
    config_path: str | os.PathLike | None = None,
    environ: Mapping[str, str] | None = None,
) -> RelaySettings:
    """
    Load configuration from an INI file (default: config.ini) with environment variables as fallbacks.

    Environment variables:
      RELAY_CONFIG - Path to config.ini file (default: config.ini)
      API_KEY - Shared secret expected in the ``x-api-key`` header
      RELAY_HOST - Server host (default: 0.0.0.0)
      RELAY_PORT - Server port (default: 8000)
      RELAY_SMTP_HOST - SMTP submission host (default: smtp.gmail.com)
      RELAY_SMTP_PORT - SMTP submission port (default: 587)
      RELAY_SMTP_TIMEOUT - Connect, socket and send timeout in seconds (default: 30)
      RELAY_SMTP_VALIDATE_CERTS - Verify the server certificate (default: False)
      RELAY_LOG_LEVEL - Logging level (default: INFO)
      RELAY_LOG_SENSITIVE_PAYLOADS - Log rejected payloads without masking secrets (default: False)

    Config file sections/keys:
      [server] api_key, host, port
      [smtp] host, port, timeout_seconds, validate_certs
      [logging] level, sensitive_payloads
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get("RELAY_CONFIG", "config.ini"))
    parser = configparser.ConfigParser()
    parser.read(path)

    def get(section: str, option: str, fallback: str | None = None) -> str | None:
        if parser.has_option(section, option):
            return parser.get(section, option)
        return fallback

    def get_int(section: str, option: str, fallback: str | None, default: int) -> int:
        value = get(section, option, fallback)
        if value is None:
            return default
        return int(value)

    def get_float(section: str, option: str, fallback: str | None, default: float) -> float:
        value = get(section, option, fallback)
        if value is None:
            return default
        return float(value)

    api_key = get("server", "api_key", env.get("API_KEY"))
    if isinstance(api_key, str):
        api_key = api_key.strip() or None

    return RelaySettings(
        api_key=api_key,
        http_host=get("server", "host", env.get("RELAY_HOST")) or "0.0.0.0",
        http_port=get_int("server", "port", env.get("RELAY_PORT"), 8000),
        smtp_host=get("smtp", "host", env.get("RELAY_SMTP_HOST")) or DEFAULT_SMTP_HOST,
        smtp_port=get_int("smtp", "port", env.get("RELAY_SMTP_PORT"), DEFAULT_SMTP_PORT),
        smtp_timeout=get_float("smtp", "timeout_seconds", env.get("RELAY_SMTP_TIMEOUT"), DEFAULT_SMTP_TIMEOUT),
        validate_certs=_parse_bool(get("smtp", "validate_certs", env.get("RELAY_SMTP_VALIDATE_CERTS")), False),
        log_level=normalize_log_level(get("logging", "level", env.get("RELAY_LOG_LEVEL"))),
        log_sensitive_payloads=_parse_bool(
            get("logging", "sensitive_payloads", env.get("RELAY_LOG_SENSITIVE_PAYLOADS")),
            False,
        ),
    )
