"""
Chat session engine.

Drives one turn at a time: the function pipeline builds the request
messages, each message is streamed through the transport with bounded
retry, the reply is accumulated into the conversation history, and the
pipeline's side effects run once the turn completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from term_ai.client.history import ConversationHistory
from term_ai.client.response import TurnResult, TurnStats
from term_ai.errors import ProtocolViolationError, TransportError
from term_ai.functions.registry import FunctionPipeline
from term_ai.resilience.retry import RetryPolicy
from term_ai.telemetry import (
    TurnContext,
    clear_turn_context,
    current_turn_context,
    get_logger,
    set_turn_context,
)
from term_ai.types.events import ControlSignal, HandleResult
from term_ai.types.input import UserInput
from term_ai.types.message import ChatRequest, Message

if TYPE_CHECKING:
    from collections.abc import Callable

    from term_ai.transport.http import ChatTransport
    from term_ai.types.events import StreamResponse
    from term_ai.types.message import OpenAIModel

logger = get_logger(__name__)


@dataclass
class TurnState:
    """Per-attempt stream state.

    Attributes:
        done: Set once the stream (or the pipeline) reported Done
        events: Number of events observed
    """

    done: bool = False
    events: int = 0

    def mark_done(self) -> None:
        self.done = True

    def check_open(self, response: StreamResponse) -> None:
        """Reject any event arriving after Done."""
        # ChatTransport stops reading at Done; this guards injected transports
        if self.done:
            raise ProtocolViolationError(
                "Stream event received after Done",
                raw_event=response.content if not response.is_done else "[DONE]",
            )


class ChatSession:
    """Conversation with a chat model.

    Example:
        >>> async with ChatTransport(config) as transport:
        ...     session = ChatSession(transport, OpenAIModel.GPT4O)
        ...     result = await session.run_turn("Hello!", on_delta=print)
        ...     print(result.stats.attempts)
    """

    def __init__(
        self,
        transport: ChatTransport,
        model: OpenAIModel,
        pipeline: FunctionPipeline | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._transport = transport
        self._model = model
        self._pipeline = pipeline or FunctionPipeline()
        self._retry = retry or RetryPolicy()
        self._history = ConversationHistory()

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def pipeline(self) -> FunctionPipeline:
        return self._pipeline

    @property
    def model(self) -> OpenAIModel:
        return self._model

    def clear(self) -> None:
        """Forget the conversation so far."""
        self._history.clear()

    def last_response(self) -> str | None:
        return self._history.last_response()

    async def run_turn(
        self,
        user_input: UserInput | str,
        on_delta: Callable[[str], None] | None = None,
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> TurnResult:
        """Run one conversational turn.

        Args:
            user_input: Raw input typed by the user
            on_delta: Called with every non-empty reply fragment
            on_retry: Called ``(attempt, error, delay)`` before a retry

        Returns:
            Committed reply and turn statistics

        Raises:
            ValueError: If the input is blank
            TransportError: If a message fails on every attempt
            DecodeError: On a malformed or out-of-order stream event
            FunctionError: If input conversion or a side effect fails
        """
        if isinstance(user_input, str):
            user_input = UserInput(content=user_input)
        if user_input.is_blank:
            raise ValueError("Cannot send blank input")

        stats = TurnStats(model=str(self._model.value))
        set_turn_context(TurnContext(turn_id=stats.turn_id, model=stats.model))
        stats.record_start()

        try:
            try:
                messages = self._pipeline.select_and_build_messages(user_input)
                owner = self._pipeline.owner
                set_turn_context(current_turn_context().owned_by(owner.name if owner else None))
                replies = await self._send_all(messages, stats, on_delta, on_retry)
            except Exception:
                self._pipeline.reset()
                stats.record_end()
                logger.error(
                    "Turn failed",
                    attempts=stats.attempts,
                    messages_sent=stats.messages_sent,
                )
                raise

            stats.record_end()
            result = TurnResult(content="".join(replies), replies=replies, stats=stats)
            logger.info(
                "Turn finished",
                attempts=stats.attempts,
                messages_sent=stats.messages_sent,
                latency_ms=round(stats.latency_ms, 1),
            )

            # History is already committed; a failing side effect does not
            # roll it back
            await self._pipeline.finalize()
            return result
        finally:
            clear_turn_context()

    async def _send_all(
        self,
        messages: list[Message],
        stats: TurnStats,
        on_delta: Callable[[str], None] | None,
        on_retry: Callable[[int, Exception, float], None] | None,
    ) -> list[str]:
        """Stream every request message, then commit the whole turn at once.

        Each later message is sent with the history plus the exchanges
        already completed in this turn. Nothing reaches history unless every
        message succeeds.
        """
        exchanges: list[tuple[Message, str]] = []
        for message in messages:
            if message.is_user and not message.content.strip():
                continue
            reply = await self._send_one(message, exchanges, stats, on_delta, on_retry)
            exchanges.append((message, reply))
        self._history.commit(exchanges)
        return [reply for _, reply in exchanges]

    async def _send_one(
        self,
        message: Message,
        exchanges: list[tuple[Message, str]],
        stats: TurnStats,
        on_delta: Callable[[str], None] | None,
        on_retry: Callable[[int, Exception, float], None] | None,
    ) -> str:
        """Stream the reply to one request message, retrying on transport errors."""
        context = self._history.all()
        for request_message, reply in exchanges:
            context.extend([request_message, Message.assistant(reply)])
        request = ChatRequest(model=self._model, messages=[*context, message])
        stats.messages_sent += 1

        async def attempt() -> str:
            stats.attempts += 1
            state = TurnState()
            self._history.begin_turn()
            self._pipeline.begin_attempt()
            try:
                await self._transport.send(
                    request,
                    lambda response: self._handle_event(response, state, stats, on_delta),
                )
            except Exception as e:
                self._history.discard_turn()
                self._pipeline.discard()
                if isinstance(e, TransportError):
                    logger.warning("Attempt failed", attempt=stats.attempts, error=str(e))
                    await self._transport.reconnect()
                raise
            return self._history.close_turn()

        result = await self._retry.execute(attempt, on_retry)
        return result.unwrap()  # type: ignore[no-any-return]

    def _handle_event(
        self,
        response: StreamResponse,
        state: TurnState,
        stats: TurnStats,
        on_delta: Callable[[str], None] | None,
    ) -> ControlSignal:
        state.check_open(response)
        state.events += 1
        handled = self._pipeline.observe_stream(response)

        if response.is_done:
            state.mark_done()
            return ControlSignal.STOP

        self._history.accumulate(response.content)
        if response.content:
            stats.record_first_delta()
            if on_delta is not None:
                on_delta(response.content)

        # A function ending the stream early keeps the reply received so far
        if handled == HandleResult.DONE:
            state.mark_done()
            return ControlSignal.STOP
        return ControlSignal.CONTINUE
