from unittest.mock import patch

from fastapi import FastAPI

import main
from mail_relay.config_loader import RelaySettings


def test_build_app_uses_given_settings():
    settings = RelaySettings(api_key="k", log_level="DEBUG")
    with patch("main.configure_logging") as configure:
        app = main.build_app(settings)

    configure.assert_called_once_with("DEBUG")
    assert isinstance(app, FastAPI)
    assert app.state.handler.settings is settings
