from __future__ import annotations

from collections.abc import Iterator

import pytest
from twilio.rest import Client

from conversations_webhooks.config import get_settings
from conversations_webhooks.twilio_client import get_twilio_client


@pytest.fixture(autouse=True)
def _clear_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_twilio_client.cache_clear()
    yield
    get_settings.cache_clear()
    get_twilio_client.cache_clear()


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATE_DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")

    settings = get_settings()

    assert settings.state_database_url == "sqlite:///elsewhere.db"
    assert settings.log_level == "debug"
    assert settings.twilio_account_sid == "AC123"


def test_default_state_database_is_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STATE_DATABASE_URL", raising=False)

    url = get_settings().state_database_url

    assert url.startswith("sqlite:///")
    assert url.endswith("conversations_webhooks.db")


def test_twilio_client_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TWILIO_ACCOUNT_SID", raising=False)
    monkeypatch.delenv("TWILIO_AUTH_TOKEN", raising=False)

    with pytest.raises(RuntimeError, match="TWILIO_ACCOUNT_SID"):
        get_twilio_client(300)


def test_twilio_client_per_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC" + "0" * 32)
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")

    client = get_twilio_client(300)

    assert isinstance(client, Client)
    assert client.http_client.timeout == 300
    assert get_twilio_client(300) is client
    assert get_twilio_client(600) is not client
