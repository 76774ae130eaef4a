"""Tests for the awaitable remote client."""

from __future__ import annotations

from typing import Any
import asyncio

import pytest

from http_remote.client import RemoteClient
from http_remote.exceptions import (
    NetworkError,
    RemoteError,
    RequestMiddlewareError,
    ResponseMiddlewareError,
)
from http_remote.models import ErrorCode, ErrorKind, ProgressUpdate, WireRequest, WireResponse
from http_remote.remote import HttpRemote, MockRemote
from http_remote.transport.fake import FakeTransportFactory


class ErrorRemote(MockRemote):
    """Remote that fails every request with a fixed kind and detail."""

    def __init__(self, kind: ErrorKind, detail: Any) -> None:
        super().__init__()
        self.kind = kind
        self.detail = detail

    def transmit(self, request: Any, on_complete: Any, on_error: Any, on_update: Any = None) -> None:
        on_error(self.kind, self.detail)


class TestRemoteClient:
    """Tests for RemoteClient.send."""

    @pytest.mark.asyncio
    async def test_send_returns_response(self) -> None:
        """Test a completed request resolves to the response."""
        remote = MockRemote(handler=lambda payload: payload["n"] * 2)

        response = await RemoteClient(remote).send({"n": 21}, abort_id="calc")

        assert response.body == 42
        assert remote.transmitted[0].abort_id == "calc"

    @pytest.mark.asyncio
    async def test_send_reports_progress(self) -> None:
        """Test progress updates reach on_progress."""
        updates: list[ProgressUpdate] = []

        await RemoteClient(MockRemote()).send(1, on_progress=updates.append)

        assert [update.progress.value for update in updates] == ["sending", "complete"]

    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        """Test a network failure raises NetworkError."""

        def handler(payload: Any) -> Any:
            raise ConnectionError("refused")

        with pytest.raises(NetworkError, match="refused") as exc_info:
            await RemoteClient(MockRemote(handler=handler)).send(1)

        assert exc_info.value.error_code is ErrorCode.EXCEPTION
        assert exc_info.value.kind is ErrorKind.NETWORK_FAILED

    @pytest.mark.asyncio
    async def test_request_middleware_failure(self) -> None:
        """Test request middleware errors are raised as-is."""

        def boom(request: WireRequest) -> WireRequest:
            raise RuntimeError("boom")

        client = RemoteClient(
            HttpRemote(request_middleware=boom, transport_factory=FakeTransportFactory())
        )

        with pytest.raises(RequestMiddlewareError, match="boom"):
            await client.send(1)

    @pytest.mark.asyncio
    async def test_response_middleware_failure(self) -> None:
        """Test response middleware errors are raised as-is."""
        detail = ResponseMiddlewareError("bad", response=WireResponse(body="raw"))

        with pytest.raises(ResponseMiddlewareError) as exc_info:
            await RemoteClient(ErrorRemote(ErrorKind.MIDDLEWARE_ABORTED, detail)).send(1)

        assert exc_info.value.response.body == "raw"

    @pytest.mark.asyncio
    async def test_unexpected_detail(self) -> None:
        """Test an unrecognised detail becomes a generic RemoteError."""
        remote = ErrorRemote(ErrorKind.NETWORK_FAILED, "plain text")

        with pytest.raises(RemoteError, match="network-failed: plain text"):
            await RemoteClient(remote).send(1)

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Test cancel rejects the pending send with an aborted NetworkError."""
        factory = FakeTransportFactory()
        client = RemoteClient(HttpRemote(transport_factory=factory))

        pending = asyncio.create_task(client.send(1, abort_id="x"))
        await asyncio.sleep(0)
        client.cancel("x")

        with pytest.raises(NetworkError) as exc_info:
            await pending

        assert exc_info.value.aborted
