"""
Conversation history.

Holds the ordered messages of the current session and the accumulator of
the assistant reply being streamed. History is only ever extended: the request
messages of a turn and one assistant message per request are appended
together once every reply in the turn has streamed to completion.
"""

from __future__ import annotations

from term_ai.errors import HistoryError
from term_ai.types.message import Message, MessageRole


class DeltaAccumulator:
    """Ordered buffer of reply fragments for one turn."""

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def push(self, fragment: str) -> None:
        self._fragments.append(fragment)

    def content(self) -> str:
        """Concatenation of all fragments in arrival order."""
        return "".join(self._fragments)

    def clear(self) -> None:
        self._fragments.clear()

    def __len__(self) -> int:
        return len(self._fragments)


class ConversationHistory:
    """Ordered conversation history with a per-turn accumulator.

    Turn protocol::

        history.push_request(Message.user("hi"))
        history.begin_turn()
        history.accumulate("Hel")
        history.accumulate("lo")
        history.end_turn()   # appends Message.assistant("Hello")

    Calling ``accumulate`` or ``end_turn`` without an open turn raises
    HistoryError.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._accumulator = DeltaAccumulator()
        self._turn_open = False

    @property
    def turn_open(self) -> bool:
        return self._turn_open

    def push_request(self, message: Message) -> None:
        """Append an outgoing message."""
        self._messages.append(message)

    def begin_turn(self) -> None:
        """Open a turn with an empty accumulator."""
        self._accumulator.clear()
        self._turn_open = True

    def accumulate(self, fragment: str) -> None:
        """Append a reply fragment to the open turn."""
        if not self._turn_open:
            raise HistoryError("accumulate() called without an open turn", operation="accumulate")
        self._accumulator.push(fragment)

    def close_turn(self) -> str:
        """Close the turn and return the assembled reply without recording it.

        Raises:
            HistoryError: If no turn is open
        """
        if not self._turn_open:
            raise HistoryError("close_turn() called without begin_turn()", operation="close_turn")
        content = self._accumulator.content()
        self._accumulator.clear()
        self._turn_open = False
        return content

    def end_turn(self) -> str:
        """Close the turn and append the assembled assistant reply.

        Returns:
            The committed reply text

        Raises:
            HistoryError: If no turn is open
        """
        if not self._turn_open:
            raise HistoryError("end_turn() called without begin_turn()", operation="end_turn")
        content = self.close_turn()
        self._messages.append(Message.assistant(content))
        return content

    def commit(self, exchanges: list[tuple[Message, str]]) -> None:
        """Append each request message followed by its reply, in order."""
        for request, reply in exchanges:
            self.push_request(request)
            self._messages.append(Message.assistant(reply))

    def discard_turn(self) -> None:
        """Drop the open turn's fragments without touching history."""
        self._accumulator.clear()
        self._turn_open = False

    def all(self) -> list[Message]:
        """Snapshot of the full history, oldest first."""
        return list(self._messages)

    def clear(self) -> None:
        """Remove every message. A turn in flight keeps its accumulator."""
        self._messages.clear()

    def last_response(self) -> str | None:
        for message in reversed(self._messages):
            if message.role == MessageRole.ASSISTANT:
                return message.content
        return None

    def last_request(self) -> Message | None:
        for message in reversed(self._messages):
            if message.role == MessageRole.USER:
                return message
        return None

    def __len__(self) -> int:
        return len(self._messages)
