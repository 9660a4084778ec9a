"""
HTTP transport for the streaming chat-completions API.

Provides:
- Async streaming via httpx
- Proxy and custom CA bundle support
- Connect and read-idle timeouts
- Mapping of httpx failures onto TransportError / RemoteError
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx

from term_ai.errors import RemoteError, TransportError
from term_ai.pipeline.decode import SSEDecoder, decode_event
from term_ai.telemetry import get_logger
from term_ai.transport.auth import get_auth_header
from term_ai.types.events import ControlSignal

if TYPE_CHECKING:
    from collections.abc import Callable

    from term_ai.config import TermAiConfig
    from term_ai.types.events import StreamResponse
    from term_ai.types.message import ChatRequest

logger = get_logger(__name__)


class ChatTransport:
    """Streaming transport for chat requests.

    One ``send`` call is one attempt: it posts the request, decodes every
    SSE payload and hands it to the event handler until the stream reports
    Done or the handler returns ``ControlSignal.STOP``.

    Example:
        >>> async with ChatTransport(config) as transport:
        ...     await transport.send(request, handle_event)
    """

    def __init__(
        self,
        config: TermAiConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Runtime configuration (endpoint, key, proxy, CA, timeouts)
            client: Pre-built client, mainly for tests; never closed by
                ``reconnect``
        """
        self._config = config
        self._endpoint = config.endpoint
        self._auth_headers = get_auth_header(config.api_key)
        self._decoder = SSEDecoder()
        self._external_client = client
        self._client: httpx.AsyncClient | None = None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._external_client is not None:
            return self._external_client
        if self._client is None:
            timeout = httpx.Timeout(
                self._config.read_timeout,
                connect=self._config.connect_timeout,
            )
            self._client = httpx.AsyncClient(
                timeout=timeout,
                proxy=self._config.proxy,
                verify=self._config.ssl_context(),
            )
        return self._client

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        headers.update(self._auth_headers)
        return headers

    async def send(
        self,
        request: ChatRequest,
        on_event: Callable[[StreamResponse], ControlSignal | None],
    ) -> int:
        """Send one request and stream its events to ``on_event``.

        Args:
            request: Chat request carrying the full history
            on_event: Called with every decoded event, in order; returning
                ``ControlSignal.STOP`` ends the read early

        Returns:
            Number of events delivered

        Raises:
            RemoteError: On a non-2xx response
            TransportError: On connect/read failures, timeouts, or a stream
                that ends before the Done sentinel
            DecodeError: On a malformed event payload
        """
        client = self._get_client()
        delivered = 0
        logger.debug(
            "Sending chat request",
            model=request.model,
            messages=len(request.messages),
        )

        try:
            async with client.stream(
                "POST",
                self._endpoint,
                json=request.to_payload(),
                headers=self._build_headers(),
            ) as response:
                if response.status_code >= 400:
                    await self._raise_for_status(response)

                async for payload in self._decoder.decode(response.aiter_bytes()):
                    event = decode_event(payload)
                    delivered += 1
                    signal = on_event(event)
                    if event.is_done or signal == ControlSignal.STOP:
                        return delivered
        except httpx.ConnectError as e:
            raise TransportError(
                f"Connection failed: {e}", url=self._endpoint, cause=e
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {e}", url=self._endpoint, cause=e
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}", url=self._endpoint, cause=e
            ) from e

        raise TransportError(
            "Stream closed before [DONE]", url=self._endpoint
        ).with_hint("the connection was dropped mid-reply")

    async def _raise_for_status(self, response: httpx.Response) -> None:
        """Read the error body and raise RemoteError."""
        body_text = await response.aread()
        body: dict[str, Any] | None = None
        try:
            parsed = json.loads(body_text)
        except (json.JSONDecodeError, UnicodeDecodeError):
            parsed = None
        if isinstance(parsed, dict):
            body = parsed

        raise RemoteError.from_response(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
            url=self._endpoint,
        )

    async def reconnect(self) -> None:
        """Drop the current connection so the next attempt opens a new one."""
        logger.debug("Reconnecting", endpoint=self._endpoint)
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ChatTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
