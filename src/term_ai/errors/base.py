"""Base error classes for term-ai.

Provides a layered error hierarchy:
- TermAiError: Base class for all errors raised by this package
- ConfigError: Invalid or missing configuration (fatal at startup)
- TransportError: HTTP/network errors (retried per turn)
- RemoteError: Non-2xx responses from the chat API
- DecodeError: Malformed stream events (never retried)
- ProtocolViolationError: Stream events out of order within a turn
- HistoryError: Misuse of the conversation history turn protocol
- FunctionError: Local side-effect failures inside pipeline functions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'choices[0].delta')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'config', 'transport', 'decode')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class TermAiError(Exception):
    """Base class for all term-ai errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> TermAiError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class ConfigError(TermAiError):
    """Invalid or missing configuration.

    Raised when:
    - OPENAI_API_KEY is not set
    - The proxy URL cannot be parsed
    - The CA bundle file does not exist or cannot be loaded
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        setting: str | None = None,
        value: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if setting:
            ctx.field_path = setting
        if value is not None:
            ctx.details["value"] = value
        super().__init__(message, ctx)
        self.setting = setting
        self.value = value


class TransportError(TermAiError):
    """Error during HTTP transport.

    Raised when:
    - Network connection failure
    - Timeout (including a stalled stream read)
    - Stream read failure or the stream closing before the sentinel
    - Proxy/TLS errors
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.__cause__ = cause


class RemoteError(TransportError):
    """Non-2xx response from the chat API.

    Attributes:
        status_code: HTTP status code
        raw_error: Parsed error body, if any
        request_id: Provider request id, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str | None = None,
        raw_error: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        if request_id:
            ctx.details["request_id"] = request_id
        super().__init__(message, ctx, url=url, status_code=status_code)
        self.raw_error = raw_error or {}
        self.request_id = request_id

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        url: str | None = None,
    ) -> RemoteError:
        """Create RemoteError from an HTTP error response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            headers: Response headers
            url: Request URL

        Returns:
            RemoteError describing the failure
        """
        detail = _extract_error_message(body)
        message = f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}"

        request_id = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            request_id = lowered.get("x-request-id") or lowered.get("request-id")

        return cls(
            message,
            status_code=status_code,
            url=url,
            raw_error=body,
            request_id=request_id,
        )


def _extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Pull the provider's error message out of an error body."""
    if not body:
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    message = body.get("message")
    return str(message) if message else None


class DecodeError(TermAiError):
    """A stream event could not be decoded.

    Decode errors are never retried: a parsing bug must not be masked by
    reconnecting.

    Attributes:
        raw_event: The offending event payload
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        raw_event: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="decode")
        if raw_event is not None:
            ctx.details["raw_event"] = raw_event
        super().__init__(message, ctx)
        self.raw_event = raw_event

    @classmethod
    def malformed(cls, raw_event: str, reason: str | None = None) -> DecodeError:
        """Create an error for a payload that is neither JSON nor the sentinel."""
        message = "Malformed stream event"
        if reason:
            message = f"{message}: {reason}"
        return cls(message, raw_event=raw_event)


class ProtocolViolationError(DecodeError):
    """The stream broke the turn protocol (e.g. a delta after Done)."""

    def __init__(self, message: str, *, raw_event: str | None = None) -> None:
        super().__init__(
            message,
            ErrorContext(source="protocol"),
            raw_event=raw_event,
        )


class HistoryError(TermAiError):
    """Conversation history turn protocol was used out of order.

    Raised when:
    - end_turn() or close_turn() is called without an open turn
    - accumulate() is called without an open turn
    """

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        ctx = ErrorContext(source="history")
        if operation:
            ctx.details["operation"] = operation
        super().__init__(message, ctx)
        self.operation = operation


class FunctionError(TermAiError):
    """A pipeline function failed to perform its local side effect.

    Raised when:
    - A file to review/translate is missing or unreadable
    - Appending a translation or writing captured code fails
    - The speech command fails
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        function: str | None = None,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="function")
        if function:
            ctx.details["function"] = function
        if path:
            ctx.details["path"] = path
        super().__init__(message, ctx)
        self.function = function
        self.path = path
        self.__cause__ = cause
