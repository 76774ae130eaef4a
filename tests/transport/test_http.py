"""Unit tests for the httpx transport primitive.

HTTP traffic is mocked with respx, or with ``httpx.MockTransport`` where the
test needs the request body to be streamed. No actual network calls are made.
"""

from __future__ import annotations

from typing import Any
import asyncio

import httpx
import pytest
import respx

from http_remote.transport.base import ProgressEvent, Signal, TransportErrorCode
from http_remote.transport.exceptions import TransportStateError
from http_remote.transport.http import HttpxTransport

BASE_URL = "http://remote.test"


class SignalLog:
    """Collects every signal a transport emits."""

    def __init__(self, transport: HttpxTransport) -> None:
        self.signals: list[str] = []
        self.uploads: list[ProgressEvent] = []
        self.downloads: list[ProgressEvent] = []
        self.done = asyncio.Event()

        transport.listen(Signal.UPLOAD_PROGRESS, self.uploads.append)
        transport.listen(Signal.DOWNLOAD_PROGRESS, self.downloads.append)
        for signal in (Signal.SUCCESS, Signal.ERROR, Signal.COMPLETE):
            transport.listen(signal, self._recorder(signal))
        transport.listen(Signal.COMPLETE, lambda _: self.done.set())

    def _recorder(self, signal: Signal) -> Any:
        return lambda _: self.signals.append(signal.value)

    async def wait(self) -> None:
        await asyncio.wait_for(self.done.wait(), timeout=2)


async def _slow_handler(request: httpx.Request) -> httpx.Response:
    await asyncio.sleep(10)
    return httpx.Response(200)


class TestHttpxTransportInit:
    """Tests for HttpxTransport initialization."""

    def test_init_defaults(self) -> None:
        """Test a fresh transport has empty post-hoc state."""
        transport = HttpxTransport(httpx.AsyncClient())

        assert transport.chunk_size == 64 * 1024
        assert transport.status_code() == 0
        assert transport.response_text() == ""
        assert transport.last_error_code() == TransportErrorCode.NONE
        assert transport.last_error_text() == ""

    def test_init_invalid_chunk_size(self) -> None:
        """Test a non-positive chunk size is rejected."""
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            HttpxTransport(httpx.AsyncClient(), chunk_size=0)

    def test_send_without_event_loop(self) -> None:
        """Test send outside a running loop raises."""
        transport = HttpxTransport(httpx.AsyncClient())

        with pytest.raises(RuntimeError):
            transport.send("/api", "POST", b"{}", {})


class TestHttpxTransportExchange:
    """Tests for one HTTP exchange."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self) -> None:
        """Test a 200 response emits success then complete."""
        route = respx.post(f"{BASE_URL}/api").mock(return_value=httpx.Response(200, text="42"))

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b'{"op":"ping"}', {"Accept": "application/json"})
            await log.wait()

        assert log.signals == ["success", "complete"]
        assert transport.status_code() == 200
        assert transport.status_text() == "OK"
        assert transport.response_text() == "42"
        assert transport.last_error_code() == TransportErrorCode.NONE

        request = route.calls.last.request
        assert request.content == b'{"op":"ping"}'
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    @respx.mock
    async def test_text_body_is_encoded(self) -> None:
        """Test a str body is sent as UTF-8."""
        route = respx.put(f"{BASE_URL}/items").mock(return_value=httpx.Response(204))

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/items", "PUT", "ü", {})
            await log.wait()

        assert route.calls.last.request.content == "ü".encode()
        assert transport.status_code() == 204
        assert transport.response_text() == ""

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_status(self) -> None:
        """Test a 404 response is an HTTP_ERROR that keeps status and body."""
        respx.post(f"{BASE_URL}/api").mock(return_value=httpx.Response(404, text="missing"))

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await log.wait()

        assert log.signals == ["error", "complete"]
        assert transport.last_error_code() == TransportErrorCode.HTTP_ERROR
        assert transport.last_error_text() == "HTTP 404: Not Found"
        assert transport.status_code() == 404
        assert transport.response_text() == "missing"

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self) -> None:
        """Test an httpx timeout maps to TIMEOUT."""
        respx.post(f"{BASE_URL}/api").mock(side_effect=httpx.ReadTimeout)

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await log.wait()

        assert log.signals == ["error", "complete"]
        assert transport.last_error_code() == TransportErrorCode.TIMEOUT
        assert "timed out" in transport.last_error_text()
        assert transport.status_code() == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error(self) -> None:
        """Test a connection failure maps to EXCEPTION."""
        respx.post(f"{BASE_URL}/api").mock(side_effect=httpx.ConnectError)

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await log.wait()

        assert log.signals == ["error", "complete"]
        assert transport.last_error_code() == TransportErrorCode.EXCEPTION
        assert transport.last_error_text().startswith("Transport error")

    @pytest.mark.asyncio
    async def test_invalid_header_value(self) -> None:
        """Test a request httpx cannot build still ends in error then complete."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="42")

        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        ) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {"X-Name": "café"})
            await log.wait()

        assert log.signals == ["error", "complete"]
        assert transport.last_error_code() == TransportErrorCode.EXCEPTION
        assert transport.last_error_text().startswith("Transport error")
        assert transport.status_code() == 0


class TestHttpxTransportLifecycle:
    """Tests for abort, dispose and misuse."""

    @pytest.mark.asyncio
    async def test_abort_in_flight(self) -> None:
        """Test abort emits error and complete synchronously."""
        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(_slow_handler)
        ) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await asyncio.sleep(0.01)

            transport.abort()

            assert log.signals == ["error", "complete"]
            assert transport.last_error_code() == TransportErrorCode.ABORT
            assert transport.last_error_text() == "Request aborted"

            # Task cancellation must not produce a second outcome
            await asyncio.sleep(0.01)
            assert log.signals == ["error", "complete"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_abort_after_completion_is_noop(self) -> None:
        """Test abort after the terminal signal changes nothing."""
        respx.post(f"{BASE_URL}/api").mock(return_value=httpx.Response(200, text="ok"))

        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await log.wait()
            transport.abort()

        assert log.signals == ["success", "complete"]
        assert transport.last_error_code() == TransportErrorCode.NONE

    def test_abort_before_send_is_noop(self) -> None:
        """Test abort on an unsent transport emits nothing."""
        transport = HttpxTransport(httpx.AsyncClient())
        signals: list[Any] = []
        transport.listen(Signal.ERROR, signals.append)

        transport.abort()

        assert signals == []
        assert transport.last_error_code() == TransportErrorCode.NONE

    @pytest.mark.asyncio
    async def test_dispose_in_flight(self) -> None:
        """Test dispose cancels the exchange without emitting signals."""
        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(_slow_handler)
        ) as client:
            transport = HttpxTransport(client)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"{}", {})
            await asyncio.sleep(0.01)

            transport.dispose()
            await asyncio.sleep(0.01)

        assert log.signals == []

    @pytest.mark.asyncio
    async def test_send_twice_raises(self) -> None:
        """Test a primitive is single use."""
        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(_slow_handler)
        ) as client:
            transport = HttpxTransport(client)
            transport.send("/api", "POST", b"{}", {})

            with pytest.raises(TransportStateError, match="already sent"):
                transport.send("/api", "POST", b"{}", {})

            transport.dispose()
            await asyncio.sleep(0.01)

    @pytest.mark.asyncio
    async def test_send_after_dispose_raises(self) -> None:
        """Test a disposed primitive cannot send."""
        async with httpx.AsyncClient(base_url=BASE_URL) as client:
            transport = HttpxTransport(client)
            transport.dispose()

            with pytest.raises(TransportStateError, match="already disposed"):
                transport.send("/api", "POST", b"{}", {})


class TestHttpxTransportProgress:
    """Tests for upload and download progress signals."""

    @pytest.mark.asyncio
    async def test_progress_disabled_by_default(self) -> None:
        """Test no progress signals fire unless enabled."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"0123456789")

        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        ) as client:
            transport = HttpxTransport(client, chunk_size=4)
            log = SignalLog(transport)
            transport.send("/api", "POST", b"abcdefghij", {})
            await log.wait()

        assert log.uploads == []
        assert log.downloads == []
        assert transport.response_text() == "0123456789"

    @pytest.mark.asyncio
    async def test_upload_progress(self) -> None:
        """Test the request body is streamed in chunks with progress."""
        received: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request.content)
            return httpx.Response(200, text="ok")

        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        ) as client:
            transport = HttpxTransport(client, chunk_size=4)
            transport.enable_progress_events()
            log = SignalLog(transport)
            transport.send("/api", "POST", b"abcdefghij", {})
            await log.wait()

        assert received == [b"abcdefghij"]
        assert [event.loaded for event in log.uploads] == [4, 8, 10]
        assert all(event.total == 10 for event in log.uploads)
        assert log.signals == ["success", "complete"]

    @pytest.mark.asyncio
    async def test_download_progress(self) -> None:
        """Test download progress reaches the full response length."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"0123456789")

        async with httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        ) as client:
            transport = HttpxTransport(client, chunk_size=4)
            transport.enable_progress_events()
            log = SignalLog(transport)
            transport.send("/api", "POST", None, {})
            await log.wait()

        assert log.downloads
        loaded = [event.loaded for event in log.downloads]
        assert loaded == sorted(loaded)
        assert log.downloads[-1] == ProgressEvent(loaded=10, total=10)
        assert log.downloads[-1].length_computable
        assert transport.response_text() == "0123456789"
