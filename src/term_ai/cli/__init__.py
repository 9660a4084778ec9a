"""
Command-line interface for term-ai.

Usage:
    term-ai ask "What is a monad?"           # One-shot question
    term-ai chat -c -t en                    # REPL with code capture + translation
    term-ai tas                              # Translate to Japanese, speak the input
    term-ai speaker "Tell me a joke"         # One-shot, reply read aloud
    term-ai tjp -f notes.md                  # Append a Japanese translation to a file
    term-ai ten "こんにちは"                  # Translate to English
    term-ai cc "FizzBuzz in rust"            # Capture code blocks into files
    term-ai cr -f src/main.py                # Code review

Every command accepts ``-v/--gpt-version`` (gpt3|3, gpt4|4, gpt4o|4o).
"""

from __future__ import annotations

import asyncio
import functools
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from term_ai import __version__
from term_ai.cli.console import get_console, print_error
from term_ai.cli.repl import ChatRepl, run_once
from term_ai.client.core import ChatSession
from term_ai.config import TermAiConfig
from term_ai.errors import ConfigError
from term_ai.functions import (
    CodeCapture,
    CodeReviewer,
    FileTranslator,
    FunctionPipeline,
    SampleFileWriter,
    Speaker,
    TranslateMode,
    Translator,
    Voice,
    say,
)
from term_ai.telemetry import TermAiLogger
from term_ai.transport.http import ChatTransport
from term_ai.types.message import OpenAIModel

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from term_ai.functions import PipelineFunction

    Body = Callable[[ChatSession, TermAiConfig], Awaitable[int]]
    Functions = Callable[[TermAiConfig], list[PipelineFunction]]

app = typer.Typer(
    name="term-ai",
    help="Chat with GPT models from the terminal.",
    no_args_is_help=True,
    add_completion=False,
)

_errors = get_console(stderr=True)

VersionOption = typer.Option(
    "gpt4o",
    "-v",
    "--gpt-version",
    help="Model version: gpt3|3, gpt4|4, gpt4o|4o.",
)

FileSourceOption = typer.Option(
    None,
    "-f",
    "--file-source",
    exists=True,
    dir_okay=False,
    help="File to translate; the translation is appended to it.",
)


def _parse_version(value: str) -> OpenAIModel:
    try:
        return OpenAIModel.from_version(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'-v' / '--gpt-version'") from None


def _parse_mode(value: str | None) -> TranslateMode | None:
    if value is None:
        return None
    try:
        return TranslateMode.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'-t' / '--translator'") from None


def load_config() -> TermAiConfig:
    """Read configuration and set up logging; exit 1 on a configuration error."""
    try:
        config = TermAiConfig.from_env()
        config.ssl_context()
    except ConfigError as e:
        print_error(_errors, e.message, e.context.hint)
        raise typer.Exit(1) from None
    TermAiLogger.configure(config.log_level, format=config.log_format)
    return config


def build_pipeline(config: TermAiConfig, functions: list[PipelineFunction]) -> FunctionPipeline:
    """Register ``functions`` after the default function, in the given order."""
    pipeline = FunctionPipeline(limit=config.chunk_limit)
    for function in functions:
        pipeline.add_function(function)
    return pipeline


def _run(version: str, functions: Functions, body: Body) -> None:
    """Load configuration, open a session and run ``body`` on it."""
    model = _parse_version(version)
    config = load_config()

    async def main() -> int:
        async with ChatTransport(config) as transport:
            pipeline = build_pipeline(config, functions(config))
            return await body(ChatSession(transport, model, pipeline), config)

    code = asyncio.run(main())
    if code:
        raise typer.Exit(code)


def _one_shot(source: str) -> Body:
    async def body(session: ChatSession, config: TermAiConfig) -> int:
        return await run_once(session, source, config, error_console=_errors)

    return body


def _repl(speak_input: bool = False) -> Body:
    async def body(session: ChatSession, config: TermAiConfig) -> int:
        hook = None
        if speak_input:
            hook = functools.partial(say, voice=Voice.KAREN, command=config.speech_command)
        repl = ChatRepl(session, config, input_hook=hook, error_console=_errors)
        return await repl.run()

    return body


def _only(*functions: PipelineFunction) -> Functions:
    return lambda config: list(functions)


def _speaker(config: TermAiConfig) -> list[PipelineFunction]:
    return [Speaker(command=config.speech_command)]


def _code_capture(config: TermAiConfig) -> list[PipelineFunction]:
    return [CodeCapture(SampleFileWriter(Path.cwd()))]


@app.command()
def ask(
    source: str = typer.Argument(..., help="Question to ask."),
    gpt_version: str = VersionOption,
) -> None:
    """Ask a single question."""
    _run(gpt_version, _only(), _one_shot(source))


@app.command()
def chat(
    gpt_version: str = VersionOption,
    code_capture: bool = typer.Option(
        False, "-c", "--code-capture", help="Write code blocks of replies to files."
    ),
    code_reviewer: bool = typer.Option(
        False, "-r", "--code-reviewer", help="Send every message as a code review request."
    ),
    translator: str | None = typer.Option(
        None, "-t", "--translator", help="Translate every message: ja, en, ko, ch."
    ),
    speaker: bool = typer.Option(False, "-s", "--speaker", help="Read replies aloud."),
) -> None:
    """Start an interactive chat."""
    mode = _parse_mode(translator)

    def functions(config: TermAiConfig) -> list[PipelineFunction]:
        # Order matters: the reviewer claims input before the translator,
        # and the speaker (last) reports the stream result.
        selected: list[PipelineFunction] = []
        if code_capture:
            selected.extend(_code_capture(config))
        if code_reviewer:
            selected.append(CodeReviewer())
        if mode is not None:
            selected.append(Translator(mode))
        if speaker:
            selected.extend(_speaker(config))
        return selected

    _run(gpt_version, functions, _repl())


@app.command()
def tas(gpt_version: str = VersionOption) -> None:
    """Chat translated to Japanese while your input is read aloud."""
    _run(gpt_version, _only(Translator(TranslateMode.JAPANESE)), _repl(speak_input=True))


@app.command(name="speaker")
def speaker_command(
    source: str = typer.Argument(..., help="Message to send."),
    gpt_version: str = VersionOption,
) -> None:
    """Ask a single question and hear the reply."""
    _run(gpt_version, _speaker, _one_shot(source))


def _translate(
    mode: TranslateMode,
    gpt_version: str,
    file_path: Path | None,
    source: str | None,
) -> None:
    if file_path is not None:
        _run(gpt_version, _only(FileTranslator(mode)), _one_shot(str(file_path)))
        return
    if source is None:
        raise typer.BadParameter("SOURCE is required unless --file-source is given")
    _run(gpt_version, _only(Translator(mode)), _one_shot(source))


@app.command()
def tjp(
    source: str | None = typer.Argument(None, help="Text to translate."),
    gpt_version: str = VersionOption,
    file_path: Path | None = FileSourceOption,
) -> None:
    """Translate to Japanese."""
    _translate(TranslateMode.JAPANESE, gpt_version, file_path, source)


@app.command()
def ten(
    source: str | None = typer.Argument(None, help="Text to translate."),
    gpt_version: str = VersionOption,
    file_path: Path | None = FileSourceOption,
) -> None:
    """Translate to English."""
    _translate(TranslateMode.ENGLISH, gpt_version, file_path, source)


@app.command()
def cc(
    source: str = typer.Argument(..., help="Message to send."),
    gpt_version: str = VersionOption,
) -> None:
    """Ask a single question and save the code blocks of the reply."""
    _run(gpt_version, _code_capture, _one_shot(source))


@app.command()
def cr(
    gpt_version: str = VersionOption,
    file_path: Path | None = typer.Option(
        None, "-f", "--file-source", exists=True, dir_okay=False, help="File to review."
    ),
    source: str | None = typer.Option(None, "-s", "--source", help="Code to review."),
) -> None:
    """Request a code review of a file or a snippet."""
    if file_path is not None:
        target = str(file_path)
    elif source is not None:
        target = source
    else:
        raise typer.BadParameter("either --file-source or --source is required")
    _run(gpt_version, _only(CodeReviewer()), _one_shot(target))


@app.command()
def version() -> None:
    """Show the version."""
    typer.echo(f"term-ai {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
