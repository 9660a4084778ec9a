"""
Interactive chat loop.

Reads one line at a time, runs it as a chat turn and streams the reply.
Two words are commands rather than messages:

- ``exit``: leave the loop
- ``clear``: forget the conversation so far
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from term_ai.cli.console import get_console, print_error, print_warning
from term_ai.errors import TermAiError
from term_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from term_ai.client.core import ChatSession
    from term_ai.config import TermAiConfig

logger = get_logger(__name__)

EXIT_COMMAND = "exit"
CLEAR_COMMAND = "clear"


def read_stdin_line() -> str | None:
    """Read one line from stdin, or None at end of input."""
    line = sys.stdin.readline()
    if not line:
        return None
    return line.rstrip("\n")


class ChatRepl:
    """Line-based chat loop.

    Args:
        session: Chat session the turns run on
        config: Runtime configuration (display names)
        console: Reply output (default: stdout)
        reader: Blocking line reader returning None at end of input;
            called on a worker thread
        input_hook: Blocking side task run on a worker thread with each
            message while its turn streams; joined before the next prompt
        error_console: Diagnostics output (default: stderr)
    """

    def __init__(
        self,
        session: ChatSession,
        config: TermAiConfig,
        console: Console | None = None,
        reader: Callable[[], str | None] | None = None,
        *,
        input_hook: Callable[[str], None] | None = None,
        error_console: Console | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._console = console or get_console()
        self._errors = error_console or get_console(stderr=True)
        self._reader = reader or read_stdin_line
        self._input_hook = input_hook
        self._label = True

    @property
    def error_console(self) -> Console:
        return self._errors

    async def run(self) -> int:
        """Run until ``exit`` or end of input.

        Returns:
            Process exit code
        """
        while True:
            self._console.out(f"{self._config.display_user} > ", end="", highlight=False)
            line = await asyncio.to_thread(self._reader)
            if line is None:
                self._console.out("", highlight=False)
                return 0

            command = line.strip()
            if command == EXIT_COMMAND:
                return 0
            if command == CLEAR_COMMAND:
                self._session.clear()
                self._console.out("clear chat history", highlight=False)
                continue
            if not command:
                continue

            await self.chat(line)

    async def chat(self, line: str, *, label: bool = True) -> bool:
        """Run one turn, streaming the reply.

        Turn errors are reported and swallowed so the loop can continue.

        Args:
            line: Message text
            label: Print the assistant prompt label before the reply

        Returns:
            True if the turn completed without error
        """
        hook: asyncio.Future[None] | None = None
        if self._input_hook is not None:
            hook = asyncio.ensure_future(asyncio.to_thread(self._input_hook, line))

        ok = True
        self._label = label
        if label:
            self._print_assistant_label()
        try:
            await self._session.run_turn(
                line, on_delta=self._print_delta, on_retry=self._notify_retry
            )
        except TermAiError as e:
            ok = False
            self._console.out("", highlight=False)
            print_error(self._errors, e.message, e.context.hint)
        else:
            self._console.out("", highlight=False)
        finally:
            if hook is not None:
                ok = await self._join_hook(hook) and ok
        return ok

    async def _join_hook(self, hook: asyncio.Future[None]) -> bool:
        try:
            await hook
        except TermAiError as e:
            logger.warning("Input hook failed", error=str(e))
            print_error(self._errors, e.message, e.context.hint)
            return False
        return True

    def _print_assistant_label(self) -> None:
        self._console.out(f"{self._config.display_assistant} > ", end="", highlight=False)

    def _print_delta(self, text: str) -> None:
        self._console.out(text, end="", highlight=False)

    def _notify_retry(self, attempt: int, error: Exception, delay: float) -> None:
        self._console.out("", highlight=False)
        print_warning(
            self._errors,
            f"connection lost ({error}); retrying in {delay:g}s (attempt {attempt + 1})",
        )
        if self._label:
            self._print_assistant_label()


async def run_once(
    session: ChatSession,
    source: str,
    config: TermAiConfig,
    console: Console | None = None,
    error_console: Console | None = None,
) -> int:
    """Run a single turn and print the reply.

    Returns:
        0 on success, 1 if the turn failed
    """
    repl = ChatRepl(session, config, console, error_console=error_console)
    if not source.strip():
        print_error(repl.error_console, "nothing to send: the input is blank")
        return 1
    ok = await repl.chat(source, label=False)
    return 0 if ok else 1
