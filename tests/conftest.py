import pytest

from mail_relay.config_loader import RelaySettings
from mail_relay.handler import MailDispatchHandler

from tests.helpers import API_KEY, RecordingTransport


@pytest.fixture
def settings():
    return RelaySettings(api_key=API_KEY)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def handler(settings, transport):
    return MailDispatchHandler(settings, transport_factory=transport.factory)


@pytest.fixture
def valid_payload():
    return {
        "to_email": "dest@example.com",
        "subject": "Greetings",
        "body": "Line one\nLine two",
        "number": "6281234567890",
        "user_id": "42",
        "username": "alice",
        "sender_user": "sender@gmail.com",
        "sender_pass": "app-password",
    }
