"""
File helpers shared by pipeline functions.
"""

from __future__ import annotations

from pathlib import Path

from term_ai.errors import FunctionError
from term_ai.types.message import Message
from term_ai.utils.chunker import chunk


def is_file_path(text: str) -> bool:
    """True when ``text`` (trimmed) names an existing regular file."""
    candidate = text.strip()
    if not candidate or "\n" in candidate:
        return False
    try:
        return Path(candidate).expanduser().is_file()
    except (OSError, ValueError):
        return False


def read_file_content(path: str | Path, *, function: str | None = None) -> str:
    """Read a UTF-8 text file.

    Raises:
        FunctionError: If the file is missing or unreadable
    """
    file_path = Path(str(path).strip()).expanduser()
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FunctionError(
            f"Cannot read {file_path}: {e}",
            function=function,
            path=str(file_path),
            cause=e,
        ) from e


def append_to_file(path: str | Path, text: str, *, function: str | None = None) -> None:
    """Append text to an existing file.

    Raises:
        FunctionError: If the file cannot be opened for appending
    """
    file_path = Path(str(path).strip()).expanduser()
    try:
        with file_path.open("a", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise FunctionError(
            f"Cannot append to {file_path}: {e}",
            function=function,
            path=str(file_path),
            cause=e,
        ) from e


def prefixed_messages(content: str, prefix: str, limit: int) -> list[Message]:
    """Chunk ``content`` and put ``prefix`` and a newline before every chunk."""
    return [
        message.with_content(f"{prefix}\n{message.content}")
        for message in chunk(content, limit)
    ]
