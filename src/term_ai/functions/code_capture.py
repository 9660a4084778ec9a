"""
Code capture.

Collects the assistant reply and, once the turn completes, writes every
fenced code block in it to its own file.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from term_ai.errors import FunctionError
from term_ai.functions.base import PipelineFunction
from term_ai.telemetry import get_logger
from term_ai.types.events import HandleResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from term_ai.types.events import StreamResponse

logger = get_logger(__name__)

FENCE = "```"

# Language tag -> file extension
EXTENSIONS: dict[str, str] = {
    "rust": "rs",
    "python": "py",
    "go": "go",
    "java": "java",
    "javascript": "js",
    "typescript": "ts",
    "ruby": "rb",
    "sh": "sh",
    "bash": "sh",
    "haskell": "hs",
    "yaml": "yaml",
    "json": "json",
}


@dataclass(frozen=True)
class CodeBlock:
    """One fenced code block.

    Attributes:
        lang: Language tag announced after the opening fence (may be empty)
        code: Block body, without the tag line
    """

    lang: str
    code: str

    @property
    def extension(self) -> str | None:
        """File extension for the language tag, None if unrecognized."""
        return EXTENSIONS.get(self.lang.strip().lower())


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """Extract complete fenced code blocks from ``text``.

    Text between an odd and the following even fence is a block; its first
    line is the language tag. A block without a closing fence, or with no
    body after the tag line, is ignored.

    Examples:
        >>> extract_code_blocks("see:\\n```rust\\nfn main(){}\\n```\\n")
        [CodeBlock(lang='rust', code='fn main(){}\\n')]
    """
    segments = text.split(FENCE)
    blocks: list[CodeBlock] = []
    # Odd segments sit between fences; the last one is only complete if
    # another segment follows it
    for index in range(1, len(segments) - 1, 2):
        lang, newline, code = segments[index].partition("\n")
        if not newline or not code:
            continue
        blocks.append(CodeBlock(lang=lang.strip(), code=code))
    return blocks


class CodeWriter(ABC):
    """Destination for captured code blocks."""

    @abstractmethod
    def write_all(self, blocks: list[CodeBlock]) -> list[Path]:
        """Persist blocks, returning where they went."""
        raise NotImplementedError


class SampleFileWriter(CodeWriter):
    """Writes each block to ``<root_dir>/sample_for_gpt_<random>[.ext]``.

    Args:
        root_dir: Directory receiving the files
        rand: Random suffix source (injectable for tests)
    """

    PREFIX = "sample_for_gpt_"

    def __init__(
        self,
        root_dir: str | Path = ".",
        rand: Callable[[], int] | None = None,
    ) -> None:
        self._root_dir = Path(root_dir)
        self._rand = rand or (lambda: random.getrandbits(64))

    def make_path(self, block: CodeBlock) -> Path:
        name = f"{self.PREFIX}{self._rand()}"
        if block.extension:
            name = f"{name}.{block.extension}"
        return self._root_dir / name

    def write_all(self, blocks: list[CodeBlock]) -> list[Path]:
        written: list[Path] = []
        for block in blocks:
            path = self.make_path(block)
            try:
                path.write_text(block.code, encoding="utf-8")
            except OSError as e:
                raise FunctionError(
                    f"Cannot write captured code to {path}: {e}",
                    function="code_capture",
                    path=str(path),
                    cause=e,
                ) from e
            written.append(path)
        return written


class CodeCapture(PipelineFunction):
    """Captures fenced code blocks from the reply into files.

    Never claims input; it observes every turn.
    """

    def __init__(self, writer: CodeWriter | None = None) -> None:
        super().__init__()
        self._writer = writer or SampleFileWriter()
        self._buffer: list[str] = []
        self._attempt_start = 0
        self._written: list[Path] = []

    @property
    def name(self) -> str:
        return "code_capture"

    @property
    def text(self) -> str:
        return "".join(self._buffer)

    @property
    def last_written(self) -> list[Path]:
        """Files written by the most recent finalize."""
        return list(self._written)

    def codes(self) -> list[CodeBlock]:
        return extract_code_blocks(self.text)

    def observe(self, response: StreamResponse) -> HandleResult:
        if not response.is_done:
            self._buffer.append(response.content)
        return HandleResult.from_response(response)

    def begin_attempt(self) -> None:
        self._attempt_start = len(self._buffer)

    def discard(self) -> None:
        del self._buffer[self._attempt_start :]

    def reset(self) -> None:
        super().reset()
        self._buffer.clear()
        self._attempt_start = 0

    async def finalize(self) -> None:
        try:
            blocks = self.codes()
            if blocks:
                self._written = self._writer.write_all(blocks)
                logger.info("Captured code blocks", count=len(self._written))
            else:
                self._written = []
        finally:
            self.reset()
