"""Console management for the term-ai CLI.

Replies stream to stdout; diagnostics (errors, retry notices) go to stderr
so piping a one-shot answer only captures the answer.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

TERM_AI_THEME = Theme(
    {
        "prompt.user": "bold green",
        "prompt.assistant": "bold cyan",
        "info": "dim",
        "warning": "bold yellow",
        "error": "bold red",
        "hint": "dim italic",
    }
)


def get_console(*, stderr: bool = False) -> Console:
    """Create a themed console writing to stdout (or stderr)."""
    return Console(theme=TERM_AI_THEME, stderr=stderr, highlight=False, soft_wrap=True)


def print_error(console: Console, message: str, hint: str | None = None) -> None:
    """Print an error line and an optional hint."""
    console.print(f"[error]error:[/error] {escape(message)}", markup=True, highlight=False)
    if hint:
        console.print(f"  [hint]{escape(hint)}[/hint]", markup=True, highlight=False)


def print_warning(console: Console, message: str) -> None:
    console.print(f"[warning]{escape(message)}[/warning]", markup=True, highlight=False)
