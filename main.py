import uvicorn
from fastapi import FastAPI

from mail_relay.api import create_app
from mail_relay.config_loader import RelaySettings, load_settings
from mail_relay.handler import MailDispatchHandler
from mail_relay.logger import configure_logging


def build_app(settings: RelaySettings | None = None) -> FastAPI:
    """Load settings, configure logging and return the ASGI application.

    Usable as a uvicorn factory: ``uvicorn main:build_app --factory``.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    return create_app(MailDispatchHandler(settings))


if __name__ == "__main__":
    settings = load_settings()
    app = build_app(settings)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
