"""Tests for the mail-relay command-line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mail_relay.cli import main, run_async
from mail_relay.handler import HandlerResult

SEND_ARGS = [
    "send",
    "--to", "dest@example.com",
    "--subject", "Hello",
    "--body", "line one\\nline two",
    "--number", "42",
    "--sender-user", "sender@gmail.com",
    "--sender-pass", "app-password",
]


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("mail_relay.cli.configure_logging") as configure:
        yield configure


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[server]\napi_key = cli-key\n")
    return str(path)


def test_run_async():
    async def async_func():
        return 42

    assert run_async(async_func()) == 42


def test_send_success(runner, config_file):
    calls = []

    async def fake_handle(self, method, api_key, payload):
        calls.append((method, api_key, payload))
        return HandlerResult(200, {"status": "success", "message": "Email sent successfully.", "data": {}})

    with patch("mail_relay.cli.MailDispatchHandler.handle", fake_handle):
        result = runner.invoke(main, ["--config", config_file, *SEND_ARGS])

    assert result.exit_code == 0, result.output
    assert '"status": "success"' in result.output
    ((method, api_key, payload),) = calls
    assert method == "POST"
    assert api_key == "cli-key"
    assert payload["body"] == "line one\nline two"
    assert payload["sender_pass"] == "app-password"


def test_send_failure_exits_nonzero(runner, config_file):
    async def fake_handle(self, method, api_key, payload):
        return HandlerResult(500, {"status": "error", "message": "boom", "error_code": "EAUTH"})

    with patch("mail_relay.cli.MailDispatchHandler.handle", fake_handle):
        result = runner.invoke(main, ["--config", config_file, *SEND_ARGS])

    assert result.exit_code == 1
    assert "EAUTH" in result.output


def test_send_requires_api_key(runner, tmp_path, monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    result = runner.invoke(main, ["--config", str(tmp_path / "missing.ini"), *SEND_ARGS])
    assert result.exit_code == 1


def test_serve_runs_uvicorn(runner, config_file):
    with patch("uvicorn.run") as run:
        result = runner.invoke(main, ["--config", config_file, "serve", "--port", "9001"])

    assert result.exit_code == 0, result.output
    run.assert_called_once()
    _, kwargs = run.call_args
    assert kwargs["port"] == 9001
    assert kwargs["host"] == "0.0.0.0"


def test_serve_passes_known_log_level_to_uvicorn(runner, tmp_path, monkeypatch):
    monkeypatch.setenv("RELAY_LOG_LEVEL", "verbose")
    monkeypatch.setenv("API_KEY", "cli-key")
    with patch("uvicorn.run") as run:
        result = runner.invoke(main, ["--config", str(tmp_path / "missing.ini"), "serve"])

    assert result.exit_code == 0, result.output
    _, kwargs = run.call_args
    assert kwargs["log_level"] == "info"
