"""
Function pipeline.

Holds the ordered pipeline functions of a session and dispatches the three
turn hooks to them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from term_ai.config import DEFAULT_CHUNK_LIMIT
from term_ai.errors import FunctionError
from term_ai.functions.default import DefaultFunction
from term_ai.telemetry import get_logger
from term_ai.types.events import HandleResult

if TYPE_CHECKING:
    from term_ai.functions.base import PipelineFunction
    from term_ai.types.events import StreamResponse
    from term_ai.types.input import UserInput
    from term_ai.types.message import Message

logger = get_logger(__name__)


class FunctionPipeline:
    """Ordered collection of pipeline functions.

    The default function is always registered first, so the pipeline is
    never empty. Registration order matters twice:

    - the first function that claims the input converts it (single owner)
    - the HandleResult of the last-registered function is the one reported

    Example:
        >>> pipeline = FunctionPipeline()
        >>> pipeline.add_function(CodeCapture(writer))
        >>> pipeline.add_function(Speaker())   # last: its result is reported
        >>> messages = pipeline.select_and_build_messages(UserInput(content="hi"))
    """

    def __init__(self, limit: int = DEFAULT_CHUNK_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit
        self._default = DefaultFunction()
        self._functions: list[PipelineFunction] = [self._default]
        self._owner: PipelineFunction | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def functions(self) -> list[PipelineFunction]:
        return list(self._functions)

    @property
    def owner(self) -> PipelineFunction | None:
        """Function that converted the current turn's input."""
        return self._owner

    def add_function(self, function: PipelineFunction) -> FunctionPipeline:
        """Register a function after all existing ones.

        Returns:
            Self for chaining

        Raises:
            ValueError: If a function with the same name is registered
        """
        if any(f.name == function.name for f in self._functions):
            raise ValueError(f"Function already registered: {function.name}")
        self._functions.append(function)
        return self

    def get(self, name: str) -> PipelineFunction | None:
        for function in self._functions:
            if function.name == name:
                return function
        return None

    def select_and_build_messages(self, user_input: UserInput) -> list[Message]:
        """Pick the owner of this turn's input and let it build the messages.

        Every function's ``can_claim`` runs exactly once, in registration
        order, so each one knows whether it is active for the turn.
        """
        owner: PipelineFunction | None = None
        for function in self._functions:
            if function.can_claim(user_input) and owner is None:
                owner = function

        self._owner = owner or self._default
        logger.debug("Input owner selected", function=self._owner.name)
        return self._owner.input_to_messages(user_input, self._limit)

    def observe_stream(self, response: StreamResponse) -> HandleResult:
        """Deliver an event to every function; report the last one's result."""
        result = HandleResult.from_response(response)
        for function in self._functions:
            result = function.observe(response)
        return result

    def begin_attempt(self) -> None:
        for function in self._functions:
            function.begin_attempt()

    def discard(self) -> None:
        """Drop stream state observed during the failed attempt only."""
        for function in self._functions:
            function.discard()

    def reset(self) -> None:
        """Abandon the turn: clear every function's state without side effects."""
        for function in self._functions:
            function.reset()
        self._owner = None

    async def finalize(self) -> None:
        """Run every function's side effect in registration order.

        The first failure stops the remaining functions. Functions that
        already ran are not rolled back; the ones skipped are reset.

        Raises:
            FunctionError: If a function's side effect fails
        """
        try:
            for index, function in enumerate(self._functions):
                try:
                    await function.finalize()
                except FunctionError:
                    self._reset_from(index)
                    raise
                except Exception as e:
                    self._reset_from(index)
                    raise FunctionError(
                        f"{function.name} failed: {e}", function=function.name, cause=e
                    ) from e
        finally:
            self._owner = None

    def _reset_from(self, index: int) -> None:
        for function in self._functions[index:]:
            function.reset()

    def __len__(self) -> int:
        return len(self._functions)
