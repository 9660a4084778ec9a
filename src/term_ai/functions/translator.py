"""
Translation functions.

- Translator: asks for a translation of the typed text
- FileTranslator: translates a file and appends the result to it
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from term_ai.functions.base import PipelineFunction
from term_ai.functions.common import (
    append_to_file,
    is_file_path,
    prefixed_messages,
    read_file_content,
)
from term_ai.telemetry import get_logger
from term_ai.types.events import HandleResult

if TYPE_CHECKING:
    from term_ai.types.events import StreamResponse
    from term_ai.types.input import UserInput
    from term_ai.types.message import Message

logger = get_logger(__name__)


class TranslateMode(str, Enum):
    """Target language of a translation."""

    JAPANESE = "ja"
    ENGLISH = "en"
    KOREAN = "ko"
    CHINESE = "ch"

    @property
    def prefix(self) -> str:
        """Instruction put before the text to translate."""
        return _PREFIXES[self]

    @classmethod
    def parse(cls, value: str) -> TranslateMode:
        """Parse a mode flag (``ja``/``jp``, ``en``, ``ko``, ``ch``/``zh``).

        Raises:
            ValueError: If the mode is not supported
        """
        key = value.strip().lower()
        key = {"jp": "ja", "zh": "ch"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"{value} is not supported") from None


_PREFIXES = {
    TranslateMode.JAPANESE: "以下の文章を日本語に翻訳してください",
    TranslateMode.ENGLISH: "以下の文章を英語に翻訳してください",
    TranslateMode.KOREAN: "以下の文章を韓国語に翻訳してください",
    TranslateMode.CHINESE: "以下の文章を中国語に翻訳してください",
}


class Translator(PipelineFunction):
    """Prefixes every chunk of the input with the mode's instruction."""

    def __init__(self, mode: TranslateMode = TranslateMode.JAPANESE) -> None:
        super().__init__()
        self._mode = mode

    @property
    def name(self) -> str:
        return "translator"

    @property
    def mode(self) -> TranslateMode:
        return self._mode

    def claims(self, user_input: UserInput) -> bool:
        return True

    def input_to_messages(self, user_input: UserInput, limit: int) -> list[Message]:
        return prefixed_messages(user_input.content, self._mode.prefix, limit)


class FileTranslator(PipelineFunction):
    """Translates the file named by the input and appends the translation.

    Claims only input that names an existing file. While active it buffers
    the reply; finalize appends ``"\\n" + translation`` to the source file.
    """

    def __init__(self, mode: TranslateMode = TranslateMode.JAPANESE) -> None:
        super().__init__()
        self._mode = mode
        self._source_path: str | None = None
        self._buffer: list[str] = []
        self._attempt_start = 0

    @property
    def name(self) -> str:
        return "file_translator"

    @property
    def source_path(self) -> str | None:
        return self._source_path

    @property
    def result(self) -> str:
        return "".join(self._buffer)

    def claims(self, user_input: UserInput) -> bool:
        if is_file_path(user_input.content):
            self._source_path = user_input.stripped
            return True
        self._source_path = None
        return False

    def input_to_messages(self, user_input: UserInput, limit: int) -> list[Message]:
        content = read_file_content(user_input.stripped, function=self.name)
        return prefixed_messages(content, self._mode.prefix, limit)

    def observe(self, response: StreamResponse) -> HandleResult:
        if self._active and not response.is_done:
            self._buffer.append(response.content)
        return HandleResult.from_response(response)

    def begin_attempt(self) -> None:
        self._attempt_start = len(self._buffer)

    def discard(self) -> None:
        del self._buffer[self._attempt_start :]

    def reset(self) -> None:
        super().reset()
        self._source_path = None
        self._buffer.clear()
        self._attempt_start = 0

    async def finalize(self) -> None:
        try:
            if self._active and self._source_path is not None:
                append_to_file(self._source_path, f"\n{self.result}", function=self.name)
                logger.info("Appended translation", path=self._source_path)
        finally:
            self.reset()
