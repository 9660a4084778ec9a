"""
Text-to-speech.

Speaks the assistant reply with a local speech command (macOS ``say`` by
default). Mixed-language replies are split into runs of ASCII and
non-ASCII characters so each run is read by a voice for its language.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from term_ai.errors import FunctionError
from term_ai.functions.base import PipelineFunction
from term_ai.telemetry import get_logger
from term_ai.types.events import HandleResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from term_ai.types.events import StreamResponse

logger = get_logger(__name__)


class Voice(str, Enum):
    """Voices of the speech command."""

    KAREN = "Karen"
    KYOKO = "Kyoko"


@dataclass(frozen=True)
class SpeechRun:
    """A maximal run of same-language characters."""

    text: str
    ascii: bool

    @property
    def voice(self) -> Voice:
        return Voice.KAREN if self.ascii else Voice.KYOKO


def split_language_runs(text: str) -> list[SpeechRun]:
    """Split text into alternating ASCII / non-ASCII runs.

    Examples:
        >>> [r.text for r in split_language_runs("Hello,こんにちは")]
        ['Hello,', 'こんにちは']
    """
    runs: list[SpeechRun] = []
    current: list[str] = []
    current_ascii: bool | None = None

    for char in text:
        char_ascii = char.isascii()
        if current and char_ascii != current_ascii:
            runs.append(SpeechRun("".join(current), bool(current_ascii)))
            current = []
        current.append(char)
        current_ascii = char_ascii

    if current:
        runs.append(SpeechRun("".join(current), bool(current_ascii)))
    return runs


def build_say_args(command: str, text: str, voice: Voice) -> list[str]:
    return [command, "-v", voice.value, text]


async def run_say_command(args: list[str]) -> None:
    """Run the speech command and wait for it.

    Raises:
        FunctionError: If the command is missing or exits non-zero
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise FunctionError(
            f"Cannot run speech command {args[0]!r}: {e}", function="speaker", cause=e
        ) from e

    _, stderr = await process.communicate()
    if process.returncode != 0:
        raise FunctionError(
            f"say command failed: {stderr.decode(errors='replace').strip()}",
            function="speaker",
        )


def say(text: str, voice: Voice = Voice.KAREN, command: str = "say") -> None:
    """Speak text synchronously, for use from a worker thread.

    Raises:
        FunctionError: If the command is missing or exits non-zero
    """
    try:
        result = subprocess.run(
            build_say_args(command, text, voice),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as e:
        raise FunctionError(
            f"Cannot run speech command {command!r}: {e}", function="speaker", cause=e
        ) from e

    if result.returncode != 0:
        raise FunctionError(
            f"say command failed: {result.stderr.decode(errors='replace').strip()}",
            function="speaker",
        )


class Speaker(PipelineFunction):
    """Reads the reply aloud once the turn completes.

    Never claims input; it observes every turn.

    Args:
        command: Speech executable
        runner: Coroutine running one command line (injectable for tests)
    """

    def __init__(
        self,
        command: str = "say",
        runner: Callable[[list[str]], Awaitable[None]] | None = None,
    ) -> None:
        super().__init__()
        self._command = command
        self._runner = runner or run_say_command
        self._buffer: list[str] = []
        self._attempt_start = 0

    @property
    def name(self) -> str:
        return "speaker"

    @property
    def text(self) -> str:
        return "".join(self._buffer)

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
            for run in split_language_runs(self.text):
                if not run.text.strip():
                    continue
                logger.debug("Speaking", voice=run.voice.value, chars=len(run.text))
                await self._runner(build_say_args(self._command, run.text, run.voice))
        finally:
            self.reset()
