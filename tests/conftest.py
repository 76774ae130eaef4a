"""Shared pytest fixtures for http-remote tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from http_remote.container import reset_container
from http_remote.remote import HttpRemote
from http_remote.testing import CallbackRecorder
from http_remote.transport.fake import FakeTransportFactory


@pytest.fixture
def recorder() -> CallbackRecorder:
    """Fresh callback recorder."""
    return CallbackRecorder()


@pytest.fixture
def factory() -> FakeTransportFactory:
    """Factory handing out scriptable transports."""
    return FakeTransportFactory()


@pytest.fixture
def remote(factory: FakeTransportFactory) -> HttpRemote:
    """Remote wired to the fake transport factory."""
    return HttpRemote(transport_factory=factory)


@pytest.fixture(autouse=True)
def _reset_container() -> Iterator[None]:
    """Isolate container caches and overrides between tests."""
    reset_container()
    yield
    reset_container()
