"""Shared fakes for the relay tests."""

API_KEY = "secret-key"


class RecordingTransport:
    """Stand-in for SMTPTransport that records every submitted message."""

    def __init__(self, message_id="<fake-id@example.com>", error=None):
        self.message_id = message_id
        self.error = error
        self.configs = []
        self.sent = []

    def factory(self, config):
        self.configs.append(config)
        return self

    async def send(self, msg):
        self.sent.append(msg)
        if self.error is not None:
            raise self.error
        return self.message_id
