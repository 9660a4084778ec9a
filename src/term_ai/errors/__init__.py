"""Error hierarchy for term-ai.

Separates errors the retry protocol may recover from (transport) from
errors that must surface immediately (config, decode, history, function).
"""

from term_ai.errors.base import (
    ConfigError,
    DecodeError,
    ErrorContext,
    FunctionError,
    HistoryError,
    ProtocolViolationError,
    RemoteError,
    TermAiError,
    TransportError,
)

__all__ = [
    "ConfigError",
    "DecodeError",
    "ErrorContext",
    "FunctionError",
    "HistoryError",
    "ProtocolViolationError",
    "RemoteError",
    "TermAiError",
    "TransportError",
]
