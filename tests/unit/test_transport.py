"""Tests for transport module."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import SecretStr

from term_ai.errors import DecodeError, RemoteError, TransportError
from term_ai.transport import ChatTransport, get_auth_header
from term_ai.types.events import ControlSignal
from term_ai.types.message import ChatRequest, Message, OpenAIModel
from tests.conftest import API_KEY, ENDPOINT, add_stream_response

REQUEST = ChatRequest(model=OpenAIModel.GPT4O, messages=[Message.user("hi")])


class TestGetAuthHeader:
    """Tests for auth header generation."""

    def test_bearer(self) -> None:
        """Test bearer authentication header."""
        assert get_auth_header("sk-test") == {"Authorization": "Bearer sk-test"}

    def test_secret_str(self) -> None:
        """Test the secret is unwrapped."""
        assert get_auth_header(SecretStr("sk-test")) == {"Authorization": "Bearer sk-test"}


class TestChatTransport:
    """Tests for ChatTransport.send."""

    @pytest.mark.asyncio
    async def test_streams_events(self, httpx_mock, config) -> None:
        """Test every event is delivered in order, ending with Done."""
        add_stream_response(httpx_mock, "Hel", "lo")
        events = []

        async with ChatTransport(config) as transport:
            delivered = await transport.send(REQUEST, events.append)

        assert delivered == 5
        assert [e.content for e in events[:-1]] == ["", "Hel", "lo", ""]
        assert events[-1].is_done

    @pytest.mark.asyncio
    async def test_request_shape(self, httpx_mock, config) -> None:
        """Test headers and body of the posted request."""
        add_stream_response(httpx_mock, "ok")

        async with ChatTransport(config) as transport:
            await transport.send(REQUEST, lambda event: None)

        request = httpx_mock.get_request()
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"
        assert request.headers["Accept"] == "text/event-stream"
        assert json.loads(request.content) == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "hi"}],
            "stream": True,
        }

    @pytest.mark.asyncio
    async def test_stop_signal(self, httpx_mock, config) -> None:
        """Test the handler can stop reading early."""
        add_stream_response(httpx_mock, "a", "b", "c")

        async with ChatTransport(config) as transport:
            delivered = await transport.send(REQUEST, lambda event: ControlSignal.STOP)

        assert delivered == 1

    @pytest.mark.asyncio
    async def test_remote_error(self, httpx_mock, config) -> None:
        """Test a non-2xx response becomes a RemoteError."""
        httpx_mock.add_response(
            url=ENDPOINT,
            method="POST",
            status_code=500,
            json={"error": {"message": "The server had an error"}},
            headers={"x-request-id": "req_42"},
        )

        async with ChatTransport(config) as transport:
            with pytest.raises(RemoteError) as exc_info:
                await transport.send(REQUEST, lambda event: None)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "HTTP 500: The server had an error"
        assert exc_info.value.request_id == "req_42"

    @pytest.mark.asyncio
    async def test_remote_error_plain_body(self, httpx_mock, config) -> None:
        """Test a non-JSON error body."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", status_code=502, text="Bad Gateway")

        async with ChatTransport(config) as transport:
            with pytest.raises(RemoteError, match="HTTP 502"):
                await transport.send(REQUEST, lambda event: None)

    @pytest.mark.asyncio
    async def test_stream_closed_early(self, httpx_mock, config) -> None:
        """Test a stream ending without the sentinel is a transport error."""
        add_stream_response(httpx_mock, "partial", done=False)
        events = []

        async with ChatTransport(config) as transport:
            with pytest.raises(TransportError, match=r"Stream closed before \[DONE\]"):
                await transport.send(REQUEST, events.append)

        assert not any(e.is_done for e in events)

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock, config) -> None:
        """Test connection failures are transport errors."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with ChatTransport(config) as transport:
            with pytest.raises(TransportError, match="Connection failed") as exc_info:
                await transport.send(REQUEST, lambda event: None)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_read_timeout(self, httpx_mock, config) -> None:
        """Test timeouts are transport errors."""
        httpx_mock.add_exception(httpx.ReadTimeout("idle"))

        async with ChatTransport(config) as transport:
            with pytest.raises(TransportError, match="Request timed out"):
                await transport.send(REQUEST, lambda event: None)

    @pytest.mark.asyncio
    async def test_malformed_event(self, httpx_mock, config) -> None:
        """Test a malformed payload is a decode error, not a transport error."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", content=b"data: {oops\n\n")

        async with ChatTransport(config) as transport:
            with pytest.raises(DecodeError) as exc_info:
                await transport.send(REQUEST, lambda event: None)

        assert not isinstance(exc_info.value, TransportError)

    @pytest.mark.asyncio
    async def test_reconnect_opens_new_client(self, httpx_mock, config) -> None:
        """Test the transport keeps working after a reconnect."""
        add_stream_response(httpx_mock, "one")
        add_stream_response(httpx_mock, "two")
        events = []

        async with ChatTransport(config) as transport:
            await transport.send(REQUEST, events.append)
            await transport.reconnect()
            await transport.send(REQUEST, events.append)

        assert [e.content for e in events if e.content] == ["one", "two"]
        assert len(httpx_mock.get_requests()) == 2

    @pytest.mark.asyncio
    async def test_external_client(self, httpx_mock, config) -> None:
        """Test a supplied client is used and left open."""
        add_stream_response(httpx_mock, "hi")

        async with httpx.AsyncClient() as client:
            transport = ChatTransport(config, client=client)
            await transport.send(REQUEST, lambda event: None)
            await transport.reconnect()
            assert not client.is_closed
