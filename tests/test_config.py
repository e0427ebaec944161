"""Tests for settings loading and server wiring."""

import pytest
from pydantic import ValidationError

from pullnote_mcp.config import ServerConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("PULLNOTE_API_KEY", "PULLNOTE_BASE_URL", "PULLNOTE_TIMEOUT", "PULLNOTE_HOST", "PULLNOTE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("PULLNOTE_API_KEY", "secret")
    monkeypatch.setenv("PULLNOTE_HOST", "example.com")
    monkeypatch.setenv("PULLNOTE_TIMEOUT", "5")

    api_config = ServerConfig().get_api_config()

    assert api_config.api_key.get_secret_value() == "secret"
    assert api_config.base_url == "https://api.pullnote.com"
    assert api_config.timeout == 5.0
    assert api_config.host == "example.com"


def test_api_key_is_required():
    with pytest.raises(ValidationError):
        ServerConfig()


def test_api_key_not_leaked_in_repr(monkeypatch):
    monkeypatch.setenv("PULLNOTE_API_KEY", "secret")

    assert "secret" not in repr(ServerConfig())


def test_get_client_before_startup_raises():
    server = pytest.importorskip("pullnote_mcp.server")

    with pytest.raises(RuntimeError):
        server.get_client()
