"""
Integration test helper utilities.

Shared fixtures for end-to-end chat turns against a mocked endpoint.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
import pytest_asyncio

from term_ai.client.core import ChatSession
from term_ai.functions import FunctionPipeline
from term_ai.transport.http import ChatTransport
from term_ai.types.message import OpenAIModel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from term_ai.config import TermAiConfig
    from term_ai.resilience import RetryPolicy


def request_messages(request: Any) -> list[dict[str, Any]]:
    """Messages carried by a captured httpx request."""
    return json.loads(request.content)["messages"]


@pytest_asyncio.fixture
async def transport(config: TermAiConfig) -> AsyncIterator[ChatTransport]:
    """Transport talking to the mock endpoint."""
    async with ChatTransport(config) as t:
        yield t


@pytest.fixture
def pipeline() -> FunctionPipeline:
    return FunctionPipeline(limit=4000)


@pytest.fixture
def session(
    transport: ChatTransport, pipeline: FunctionPipeline, fast_retry: RetryPolicy
) -> ChatSession:
    """Session with a zero-backoff retry policy."""
    return ChatSession(transport, OpenAIModel.GPT4O, pipeline, retry=fast_retry)
