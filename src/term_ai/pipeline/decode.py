"""
Stream decoding.

Implements:
- SSEDecoder: splits a text/event-stream body into raw event payloads
- decode_event: turns one raw payload into a StreamResponse
"""

from __future__ import annotations

import codecs
import json
from typing import TYPE_CHECKING, Any

from term_ai.errors import DecodeError
from term_ai.types.events import StreamResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

DONE_SENTINEL = "[DONE]"


def decode_event(raw_event: str) -> StreamResponse:
    """Decode one raw stream payload.

    The sentinel ``[DONE]`` marks the end of the stream. Anything else must be
    a chat-completion-chunk object; the first choice's ``delta.content`` is
    the delta text. Role-only chunks, empty deltas and null content decode
    to an empty delta.

    Args:
        raw_event: Payload of one ``data:`` event

    Returns:
        Decoded stream response

    Raises:
        DecodeError: If the payload is neither the sentinel nor a chunk object
    """
    if raw_event.strip() == DONE_SENTINEL:
        return StreamResponse.done()

    try:
        data = json.loads(raw_event)
    except json.JSONDecodeError as e:
        raise DecodeError.malformed(raw_event, f"invalid JSON ({e.msg})") from e

    if not isinstance(data, dict):
        raise DecodeError.malformed(raw_event, "expected a JSON object")

    choices = data.get("choices")
    if not isinstance(choices, list):
        raise DecodeError.malformed(raw_event, "missing 'choices' list")

    return StreamResponse.delta(_first_delta_content(choices))


def _first_delta_content(choices: list[Any]) -> str:
    if not choices:
        return ""
    choice = choices[0]
    if not isinstance(choice, dict):
        return ""
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class SSEDecoder:
    """Server-Sent Events (SSE) decoder.

    Parses SSE format:
    ```
    data: {"choices": [...]}

    : keep-alive comment

    data: [DONE]
    ```

    Yields the data payload of every event without interpreting it. Multiple
    ``data:`` lines in one event are joined with a newline. ``event:``,
    ``id:`` and ``retry:`` fields and comment lines are ignored.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[str]:
        """Decode an SSE byte stream into event payloads.

        Args:
            byte_stream: Async iterator of raw bytes, split arbitrarily

        Yields:
            Raw data payloads in arrival order
        """
        # Multi-byte characters may be split across network chunks
        decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        buffer = ""

        async for chunk in byte_stream:
            buffer += decoder.decode(chunk)
            buffer = buffer.replace("\r\n", "\n")

            while "\n\n" in buffer:
                frame, buffer = buffer.split("\n\n", 1)
                payload = self._parse_frame(frame)
                if payload is not None:
                    yield payload

        buffer += decoder.decode(b"", final=True)
        buffer = buffer.replace("\r\n", "\n")
        for frame in buffer.split("\n\n"):
            payload = self._parse_frame(frame)
            if payload is not None:
                yield payload

    @staticmethod
    def _parse_frame(frame: str) -> str | None:
        """Extract the data payload of one event frame, if it has one."""
        data_lines: list[str] = []
        for line in frame.split("\n"):
            line = line.rstrip("\r")
            if not line or line.startswith(":"):
                continue
            field_name, _, value = line.partition(":")
            if field_name != "data":
                continue
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

        if not data_lines:
            return None
        return "\n".join(data_lines)
