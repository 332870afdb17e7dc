from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from twilio.base import values
from twilio.base.exceptions import TwilioRestException

from conversations_webhooks.resource import AddressConfigurationWebhookResource
from conversations_webhooks.state import Base

ACCOUNT_SID = "AC" + "0" * 32
SERVICE_SID = "IS" + "a" * 32
OTHER_SERVICE_SID = "IS" + "b" * 32


def _strip_unset(params: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if v is not values.unset}


class FakeAddressConfigurationContext:
    def __init__(self, store: FakeAddressConfigurations, sid: str) -> None:
        self._store = store
        self._sid = sid

    def _record(self) -> dict[str, Any]:
        record = self._store.records.get(self._sid)
        if record is None:
            raise TwilioRestException(
                404, self._store.uri(self._sid), msg="The requested resource was not found"
            )
        return record

    def fetch(self) -> SimpleNamespace:
        self._store.calls.append(("fetch", self._sid, {}))
        if self._store.fetch_error is not None:
            raise self._store.fetch_error
        return self._store.instance(self._record())

    def update(self, **kwargs: Any) -> SimpleNamespace:
        self._store.calls.append(("update", self._sid, kwargs))
        if self._store.update_error is not None:
            raise self._store.update_error
        record = self._record()
        self._store.apply(record, _strip_unset(kwargs))
        record["date_updated"] = datetime(2024, 5, 2, 8, 30, 0, tzinfo=UTC)
        return self._store.instance(record)

    def delete(self) -> bool:
        self._store.calls.append(("delete", self._sid, {}))
        if self._store.delete_error is not None:
            raise self._store.delete_error
        self._record()
        del self._store.records[self._sid]
        return True


class FakeAddressConfigurations:
    """Stands in for client.conversations.v1.address_configurations."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str | None, dict[str, Any]]] = []
        self.create_error: Exception | None = None
        self.fetch_error: Exception | None = None
        self.update_error: Exception | None = None
        self.delete_error: Exception | None = None
        self._counter = 0

    @staticmethod
    def uri(sid: str) -> str:
        return f"https://conversations.twilio.com/v1/Configuration/Addresses/{sid}"

    @staticmethod
    def apply(record: dict[str, Any], params: dict[str, Any]) -> None:
        auto_creation = record["auto_creation"]
        for key, value in params.items():
            if key.startswith("auto_creation_"):
                auto_creation[key.removeprefix("auto_creation_")] = None if value == "" else value
            else:
                record[key] = None if value == "" else value

    @staticmethod
    def instance(record: dict[str, Any]) -> SimpleNamespace:
        auto_creation = record["auto_creation"]
        return SimpleNamespace(
            **{**record, "auto_creation": dict(auto_creation) if auto_creation is not None else None}
        )

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(("create", None, kwargs))
        if self.create_error is not None:
            raise self.create_error
        self._counter += 1
        sid = f"IG{self._counter:032x}"
        record: dict[str, Any] = {
            "sid": sid,
            "account_sid": ACCOUNT_SID,
            "address": None,
            "type": None,
            "friendly_name": None,
            "auto_creation": {},
            "date_created": datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC),
            "date_updated": None,
            "url": self.uri(sid),
        }
        self.apply(record, _strip_unset(kwargs))
        self.records[sid] = record
        return self.instance(record)

    def __call__(self, sid: str) -> FakeAddressConfigurationContext:
        return FakeAddressConfigurationContext(self, sid)


@pytest.fixture
def fake_addresses() -> FakeAddressConfigurations:
    return FakeAddressConfigurations()


@pytest.fixture
def requested_timeouts() -> list[float]:
    return []


@pytest.fixture
def resource(
    fake_addresses: FakeAddressConfigurations, requested_timeouts: list[float]
) -> AddressConfigurationWebhookResource:
    client = SimpleNamespace(
        conversations=SimpleNamespace(v1=SimpleNamespace(address_configurations=fake_addresses))
    )

    def client_factory(timeout: float) -> Any:
        requested_timeouts.append(timeout)
        return client

    return AddressConfigurationWebhookResource(client_factory=client_factory)


@pytest.fixture
def db(tmp_path: Path) -> Iterator[Session]:
    """Session on a throwaway SQLite state database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'state.db'}")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
