"""
Streaming event types.

A chat turn is observed as a sequence of StreamResponse values: zero or more
deltas followed by exactly one Done. Functions report how they handled each
value with HandleResult; stream consumers steer the transport with
ControlSignal.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StreamKind(str, Enum):
    """Kind of decoded stream event."""

    DELTA = "delta"
    DONE = "done"


class StreamResponse(BaseModel):
    """One decoded stream event.

    ``content`` is only meaningful for deltas and may be empty
    (role-only chunks, null content).
    """

    model_config = ConfigDict(frozen=True)

    kind: StreamKind = Field(description="Delta or end-of-stream")
    content: str = Field(default="", description="Delta text")

    @classmethod
    def delta(cls, content: str) -> StreamResponse:
        return cls(kind=StreamKind.DELTA, content=content)

    @classmethod
    def done(cls) -> StreamResponse:
        return cls(kind=StreamKind.DONE)

    @property
    def is_done(self) -> bool:
        return self.kind == StreamKind.DONE

    @property
    def delta_content(self) -> str | None:
        """Delta text, or None for the end-of-stream marker."""
        if self.is_done:
            return None
        return self.content


class HandleResult(str, Enum):
    """How a pipeline function handled a stream event."""

    PROGRESS = "progress"
    DONE = "done"

    @classmethod
    def from_response(cls, response: StreamResponse) -> HandleResult:
        """Default mapping: Done -> DONE, delta -> PROGRESS."""
        return cls.DONE if response.is_done else cls.PROGRESS


class ControlSignal(str, Enum):
    """Returned by stream consumers to keep reading or stop early."""

    CONTINUE = "continue"
    STOP = "stop"
