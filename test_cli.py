"""
Tests for the chatstream command line entry point.
"""

import httpx
import pytest
from click.testing import CliRunner

import chatstream.cli
from chatstream.cli import cli
from chatstream.client import StreamingChatClient


def install_backend(monkeypatch, handler):
    """Route the CLI's client through a mock transport."""
    built = {}

    def fake_build_client(base_url):
        built["base_url"] = base_url
        return StreamingChatClient(
            base_url or "http://backend.test/api",
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(chatstream.cli, "_build_client", fake_build_client)
    return built


@pytest.fixture
def runner():
    return CliRunner()


def test_health_ok(runner, monkeypatch):
    install_backend(monkeypatch, lambda request: httpx.Response(200))
    result = runner.invoke(cli, ["health"])
    assert result.exit_code == 0
    assert "healthy" in result.output


def test_health_failure_exit_code(runner, monkeypatch):
    install_backend(monkeypatch, lambda request: httpx.Response(500))
    result = runner.invoke(cli, ["health"])
    assert result.exit_code == 1
    assert "unhealthy" in result.output


def test_base_url_option_is_forwarded(runner, monkeypatch):
    built = install_backend(monkeypatch, lambda request: httpx.Response(200))
    runner.invoke(cli, ["--base-url", "http://other.test/api", "health"])
    assert built["base_url"] == "http://other.test/api"


def test_chat_prints_stream(runner, monkeypatch):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=b"data: Hello\n\ndata: , world\n\n",
        )

    install_backend(monkeypatch, handler)
    result = runner.invoke(cli, ["chat", "hi there", "--session-id", "9"])

    assert result.exit_code == 0
    assert "Hello, world" in result.output
    assert seen[0].url.params["sessionId"] == "9"
    assert seen[0].url.params["message"] == "hi there"


def test_chat_reports_errors(runner, monkeypatch):
    install_backend(monkeypatch, lambda request: httpx.Response(503))
    result = runner.invoke(cli, ["chat", "hi"])
    assert result.exit_code == 1
