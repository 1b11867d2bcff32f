"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import dramatiq
import pytest

from herald.publisher.auth import AuthContextResolver
from herald.publisher.scheduler import publish_commit_status_job
from tests.helpers.publisher_fakes import FakeStatusClient

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dramatiq.brokers.stub import StubBroker


class _SharedClientFactory:
    """Hands out one fake client for every credential flow."""

    def __init__(self, client: FakeStatusClient) -> None:
        self.client = client

    def open_for_user(
        self, server_url: str, username: str, password: str
    ) -> FakeStatusClient:
        del server_url, username, password
        return self.client

    def open_for_token(self, server_url: str, token: str) -> FakeStatusClient:
        del server_url, token
        return self.client


@pytest.fixture
def fake_client() -> FakeStatusClient:
    """Return a fake GitHub client with no scripted failures."""
    return FakeStatusClient()


@pytest.fixture
def fake_resolver(
    fake_client: FakeStatusClient, monkeypatch: pytest.MonkeyPatch
) -> AuthContextResolver:
    """Route every client resolution, including the worker's, to ``fake_client``."""
    resolver = AuthContextResolver(_SharedClientFactory(fake_client))
    monkeypatch.setattr("herald.publisher.scheduler.default_resolver", lambda: resolver)
    monkeypatch.setattr("herald.publisher.engine.default_resolver", lambda: resolver)
    return resolver


@pytest.fixture
def stub_broker() -> StubBroker:
    """Return the actor's StubBroker with empty queues."""
    broker = typ.cast("StubBroker", publish_commit_status_job.broker)
    broker.flush_all()
    return broker


@pytest.fixture
def stub_worker(stub_broker: StubBroker) -> cabc.Iterator[dramatiq.Worker]:
    """Run an in-process worker against the stub broker."""
    worker = dramatiq.Worker(stub_broker, worker_timeout=100)
    worker.start()
    yield worker
    worker.stop()
