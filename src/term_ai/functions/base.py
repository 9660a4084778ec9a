"""
Base class for pipeline functions.

A pipeline function can hook into three points of a chat turn:
- rewrite the request (``input_to_messages``), only when it claims the input
- observe every stream event (``observe``)
- perform a local side effect once the turn completes (``finalize``)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from term_ai.types.events import HandleResult
from term_ai.utils.chunker import chunk

if TYPE_CHECKING:
    from term_ai.types.events import StreamResponse
    from term_ai.types.input import UserInput
    from term_ai.types.message import Message


class PipelineFunction(ABC):
    """Base class for pipeline functions.

    Functions live for the whole session. Anything they collect during a
    turn must be dropped by ``reset``, which ``finalize`` calls once its
    side effect has run.

    Example:
        >>> class Shout(PipelineFunction):
        ...     @property
        ...     def name(self) -> str:
        ...         return "shout"
        ...
        ...     def claims(self, user_input):
        ...         return user_input.stripped.endswith("!")
        ...
        ...     def input_to_messages(self, user_input, limit):
        ...         return chunk(user_input.content.upper(), limit)
    """

    def __init__(self) -> None:
        self._active = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the function name."""
        raise NotImplementedError

    @property
    def active(self) -> bool:
        """Whether this function claimed the current turn's input."""
        return self._active

    def claims(self, user_input: UserInput) -> bool:
        """Predicate deciding whether this function converts the input."""
        return False

    def can_claim(self, user_input: UserInput) -> bool:
        """Evaluate ``claims`` for the turn and record the outcome."""
        self._active = self.claims(user_input)
        return self._active

    def input_to_messages(self, user_input: UserInput, limit: int) -> list[Message]:
        """Convert input into request messages (plain chunking by default)."""
        return chunk(user_input.content, limit)

    def observe(self, response: StreamResponse) -> HandleResult:
        """Observe one stream event."""
        return HandleResult.from_response(response)

    def begin_attempt(self) -> None:
        """Mark the start of a stream attempt; ``discard`` rolls back to it."""

    def discard(self) -> None:
        """Forget stream state gathered since the last ``begin_attempt``."""

    def reset(self) -> None:
        """Drop all turn-scoped state."""
        self._active = False

    async def finalize(self) -> None:
        """Run the side effect for a completed turn, then reset."""
        self.reset()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
