"""
Logging for term-ai.

Records always go to stderr so they never interleave with a reply streamed
on stdout. While a turn is running, its id, model and owning function are
attached to every record. OpenAI keys and Authorization values are masked
before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace
from typing import Any, ClassVar, TextIO

ROOT_LOGGER = "term_ai"
REDACTED = "***"

_SECRETS = [
    (re.compile(r"sk-[A-Za-z0-9_-]{16,}"), f"sk-{REDACTED}"),
    (re.compile(r"(Bearer\s+)\S+", re.IGNORECASE), rf"\g<1>{REDACTED}"),
    (
        re.compile(r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer\s)[^\"'\s]+", re.IGNORECASE),
        rf"\g<1>{REDACTED}",
    ),
    (re.compile(r"(OPENAI_API_KEY=)\S+"), rf"\g<1>{REDACTED}"),
]
_SECRET_FIELDS = ("key", "token", "authorization")


def mask_secrets(text: str) -> str:
    """Replace API keys and Authorization values in free text."""
    for pattern, replacement in _SECRETS:
        text = pattern.sub(replacement, text)
    return text


def mask_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Mask record fields; fields named like credentials are hidden entirely."""
    masked: dict[str, Any] = {}
    for name, value in fields.items():
        if any(marker in name.lower() for marker in _SECRET_FIELDS):
            masked[name] = REDACTED
        elif isinstance(value, str):
            masked[name] = mask_secrets(value)
        else:
            masked[name] = value
    return masked


@dataclass(frozen=True)
class TurnContext:
    """Fields identifying the chat turn being logged.

    Attributes:
        turn_id: Id of the turn in flight
        model: Model the turn talks to
        function: Pipeline function that owns the turn's input
    """

    turn_id: str | None = None
    model: str | None = None
    function: str | None = None

    def fields(self) -> dict[str, str]:
        return {name: value for name, value in asdict(self).items() if value}

    def owned_by(self, function: str | None) -> TurnContext:
        return replace(self, function=function)


_turn: ContextVar[TurnContext] = ContextVar("term_ai_turn", default=TurnContext())


def current_turn_context() -> TurnContext:
    return _turn.get()


def set_turn_context(context: TurnContext) -> None:
    _turn.set(context)


def clear_turn_context() -> None:
    _turn.set(TurnContext())


def parse_level(level: str | int) -> int:
    """Resolve a level name; unknown names fall back to WARNING."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


class TurnFormatter(logging.Formatter):
    """Renders a record as one text line or one JSON object.

    Text: ``time | LEVEL | logger | message | fields | turn fields``.
    JSON keys: time, level, logger, message, the record fields, and ``turn``.
    """

    def __init__(self, json_output: bool = False) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        message = mask_secrets(record.getMessage())
        fields = mask_fields(getattr(record, "event_fields", {}))
        turn = current_turn_context().fields()

        if self._json_output:
            data: dict[str, Any] = {
                "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
                "level": record.levelname,
                "logger": record.name,
                "message": message,
                **fields,
            }
            if turn:
                data["turn"] = turn
            if record.exc_info:
                data["exception"] = self.formatException(record.exc_info)
            return json.dumps(data, default=str)

        parts = [self.formatTime(record, self.datefmt), record.levelname, record.name, message]
        for group in (fields, turn):
            if group:
                parts.append(" ".join(f"{name}={value}" for name, value in group.items()))
        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class TermAiLogger:
    """Logger taking keyword fields alongside the message.

    All loggers hang off the ``term_ai`` logger, which owns the one stderr
    handler.

    Example:
        >>> logger = get_logger("term_ai.transport")
        >>> logger.warning("Attempt failed", attempt=2)
    """

    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: str | int = "WARNING",
        format: str = "text",
        stream: TextIO | None = None,
    ) -> None:
        """(Re)install the stderr handler.

        Args:
            level: Level name or number
            format: ``text`` or ``json``
            stream: Output stream (default: stderr)
        """
        root = logging.getLogger(ROOT_LOGGER)
        if cls._handler is not None:
            root.removeHandler(cls._handler)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(TurnFormatter(json_output=format == "json"))
        root.addHandler(handler)
        root.setLevel(parse_level(level))
        root.propagate = False
        cls._handler = handler

    def __init__(self, name: str) -> None:
        if TermAiLogger._handler is None:
            TermAiLogger.configure()
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, fields: dict[str, Any]) -> None:
        self._logger.log(level, msg, extra={"event_fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, fields)


def get_logger(name: str) -> TermAiLogger:
    """Get a logger; ``name`` should sit under ``term_ai``."""
    return TermAiLogger(name)
