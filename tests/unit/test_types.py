"""Tests for message and event types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from term_ai.types import (
    ChatRequest,
    HandleResult,
    Message,
    MessageRole,
    OpenAIModel,
    StreamResponse,
)


class TestMessage:
    """Tests for Message."""

    def test_factories(self) -> None:
        """Test role factories."""
        assert Message.system("s").role == MessageRole.SYSTEM
        assert Message.user("u").is_user
        assert Message.assistant("a").is_assistant

    def test_frozen(self) -> None:
        """Test messages cannot be mutated."""
        message = Message.user("hi")
        with pytest.raises(ValidationError):
            message.content = "changed"  # type: ignore[misc]

    def test_with_content(self) -> None:
        """Test a draft copy keeps the role."""
        original = Message.user("hi")
        draft = original.with_content("prefix\nhi")
        assert draft.content == "prefix\nhi"
        assert draft.role == MessageRole.USER
        assert original.content == "hi"


class TestOpenAIModel:
    """Tests for OpenAIModel.from_version."""

    @pytest.mark.parametrize(
        ("flag", "model"),
        [
            ("gpt3", OpenAIModel.GPT3_5_TURBO),
            ("3", OpenAIModel.GPT3_5_TURBO),
            ("gpt4", OpenAIModel.GPT4),
            ("4", OpenAIModel.GPT4),
            ("GPT4o", OpenAIModel.GPT4O),
            ("4o", OpenAIModel.GPT4O),
            ("gpt-4-32k", OpenAIModel.GPT4_32K),
        ],
    )
    def test_supported(self, flag: str, model: OpenAIModel) -> None:
        """Test short flags and full model names."""
        assert OpenAIModel.from_version(flag) == model

    def test_unsupported(self) -> None:
        """Test an unknown flag is rejected."""
        with pytest.raises(ValueError, match="gpt5 is not supported"):
            OpenAIModel.from_version("gpt5")


class TestChatRequest:
    """Tests for ChatRequest."""

    def test_payload(self) -> None:
        """Test the wire body carries model, history and the stream flag."""
        request = ChatRequest(
            model=OpenAIModel.GPT4O,
            messages=[Message.user("hi"), Message.assistant("hello")],
        )
        assert request.to_payload() == {
            "model": "gpt-4o",
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ],
            "stream": True,
        }


class TestStreamResponse:
    """Tests for StreamResponse and HandleResult."""

    def test_delta(self) -> None:
        """Test a delta carries its text."""
        response = StreamResponse.delta("x")
        assert not response.is_done
        assert response.delta_content == "x"

    def test_done(self) -> None:
        """Test Done has no delta text."""
        response = StreamResponse.done()
        assert response.is_done
        assert response.delta_content is None

    def test_default_handle_result(self) -> None:
        """Test deltas are progress and Done is done."""
        assert HandleResult.from_response(StreamResponse.delta("")) == HandleResult.PROGRESS
        assert HandleResult.from_response(StreamResponse.done()) == HandleResult.DONE
