"""Root pytest fixtures and SSE body builders for term-ai tests."""

from __future__ import annotations

import json
from typing import Any

import pytest
from pydantic import SecretStr

from term_ai.config import TermAiConfig
from term_ai.resilience import RetryConfig, RetryPolicy
from term_ai.types.events import ControlSignal

ENDPOINT = "https://api.test.local/v1/chat/completions"
API_KEY = "sk-test-0123456789abcdef0123"


def openai_chunk(
    content: str | None = None,
    *,
    role: str | None = None,
    model: str = "gpt-4o",
    finish_reason: str | None = None,
) -> dict[str, Any]:
    """Create one chat.completion.chunk object."""
    delta: dict[str, Any] = {}
    if role is not None:
        delta["role"] = role
    if content is not None:
        delta["content"] = content
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1699012345,
        "model": model,
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def sse_event(payload: dict[str, Any] | str) -> bytes:
    """Encode one SSE event."""
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n".encode()


def sse_events(*fragments: str, done: bool = True) -> list[bytes]:
    """Events of a streamed reply: role chunk, one chunk per fragment, stop chunk, [DONE]."""
    events = [sse_event(openai_chunk(role="assistant"))]
    events.extend(sse_event(openai_chunk(fragment)) for fragment in fragments)
    events.append(sse_event(openai_chunk(finish_reason="stop")))
    if done:
        events.append(sse_event("[DONE]"))
    return events


def sse_body(*fragments: str, done: bool = True) -> bytes:
    """Whole SSE response body of a streamed reply."""
    return b"".join(sse_events(*fragments, done=done))


def add_stream_response(httpx_mock: Any, *fragments: str, done: bool = True) -> None:
    """Register one streamed reply on the mock endpoint."""
    httpx_mock.add_response(
        url=ENDPOINT,
        method="POST",
        content=sse_body(*fragments, done=done),
        headers={"Content-Type": "text/event-stream"},
    )


class ScriptedTransport:
    """Transport replaying one scripted event list per send.

    An exception in a script is raised when reached.
    """

    def __init__(self, *scripts: list[Any], honor_stop: bool = True) -> None:
        self._scripts = list(scripts)
        self._honor_stop = honor_stop
        self.requests: list[Any] = []
        self.reconnects = 0

    async def send(self, request: Any, on_event: Any) -> int:
        self.requests.append(request)
        delivered = 0
        for item in self._scripts.pop(0):
            if isinstance(item, Exception):
                raise item
            delivered += 1
            signal = on_event(item)
            if self._honor_stop and (item.is_done or signal == ControlSignal.STOP):
                return delivered
        return delivered

    async def reconnect(self) -> None:
        self.reconnects += 1


@pytest.fixture
def config() -> TermAiConfig:
    """Configuration pointing at the mock endpoint."""
    return TermAiConfig(
        api_key=SecretStr(API_KEY),
        endpoint=ENDPOINT,
        display_user="alice",
        display_assistant="gpt",
    )


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Three attempts, no backoff."""
    return RetryPolicy(RetryConfig(max_attempts=3, backoff_ms=0))
