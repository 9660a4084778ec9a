"""
Telemetry module for term-ai.

Logging to stderr with turn-scoped fields and masking of credentials.
"""

from term_ai.telemetry.logger import (
    TermAiLogger,
    TurnContext,
    TurnFormatter,
    clear_turn_context,
    current_turn_context,
    get_logger,
    mask_fields,
    mask_secrets,
    parse_level,
    set_turn_context,
)

__all__ = [
    "TermAiLogger",
    "TurnContext",
    "TurnFormatter",
    "clear_turn_context",
    "current_turn_context",
    "get_logger",
    "mask_fields",
    "mask_secrets",
    "parse_level",
    "set_turn_context",
]
