"""Tests for the command-line interface."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
from typer.testing import CliRunner

from term_ai import __version__
from term_ai.cli import app
from term_ai.telemetry import TermAiLogger
from tests.conftest import API_KEY, ENDPOINT, add_stream_response

runner = CliRunner()

_CLEARED = (
    "HTTPS_PROXY",
    "https_proxy",
    "HTTP_PROXY",
    "http_proxy",
    "CA_BUNDLE",
    "ca_bundle",
    "TERM_AI_CHUNK_LIMIT",
)


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Environment pointing the CLI at the mock endpoint."""
    for name in _CLEARED:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", API_KEY)
    monkeypatch.setenv("TERM_AI_ENDPOINT", ENDPOINT)
    yield
    TermAiLogger.configure("WARNING")


class TestCli:
    """Tests for term-ai commands."""

    def test_version(self) -> None:
        """Test the version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_key(self, env, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a missing API key exits with status 1."""
        monkeypatch.delenv("OPENAI_API_KEY")
        result = runner.invoke(app, ["ask", "hi"])
        assert result.exit_code == 1

    def test_unsupported_version(self, env) -> None:
        """Test an unknown model flag is a usage error."""
        result = runner.invoke(app, ["ask", "hi", "-v", "gpt5"])
        assert result.exit_code == 2

    def test_unsupported_translate_mode(self, env) -> None:
        """Test an unknown translation mode is a usage error."""
        result = runner.invoke(app, ["chat", "-t", "fr"])
        assert result.exit_code == 2

    def test_code_review_needs_source(self, env) -> None:
        """Test cr requires a file or a snippet."""
        result = runner.invoke(app, ["cr"])
        assert result.exit_code == 2

    def test_ask(self, env, httpx_mock) -> None:
        """Test a one-shot question prints the streamed reply."""
        add_stream_response(httpx_mock, "Hel", "lo")

        result = runner.invoke(app, ["ask", "hi", "-v", "4"])

        assert result.exit_code == 0
        assert "Hello" in result.output
        body = json.loads(httpx_mock.get_request().content)
        assert body["model"] == "gpt-4"
        assert body["messages"] == [{"role": "user", "content": "hi"}]

    def test_ten_translates_text(self, env, httpx_mock) -> None:
        """Test ten sends an English translation request."""
        add_stream_response(httpx_mock, "Hello")

        result = runner.invoke(app, ["ten", "こんにちは"])

        assert result.exit_code == 0
        content = json.loads(httpx_mock.get_request().content)["messages"][0]["content"]
        assert content.endswith("\nこんにちは")

    def test_tjp_appends_to_file(self, env, httpx_mock, tmp_path) -> None:
        """Test tjp -f appends the translation to the file."""
        source = tmp_path / "notes.txt"
        source.write_text("Good morning.", encoding="utf-8")
        add_stream_response(httpx_mock, "おはよう")

        result = runner.invoke(app, ["tjp", "-f", str(source)])

        assert result.exit_code == 0
        assert source.read_text(encoding="utf-8") == "Good morning.\nおはよう"

    def test_chat_session(self, env, httpx_mock) -> None:
        """Test the REPL answers and exits."""
        add_stream_response(httpx_mock, "Hi there")

        result = runner.invoke(app, ["chat"], input="hello\nexit\n")

        assert result.exit_code == 0
        assert "Hi there" in result.output

    def test_remote_failure_exits_1(
        self, env, httpx_mock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a request rejected on every attempt exits with status 1."""

        async def no_sleep(delay: float) -> None:
            return None

        monkeypatch.setattr("term_ai.resilience.retry.asyncio.sleep", no_sleep)
        httpx_mock.add_response(
            url=ENDPOINT,
            method="POST",
            status_code=401,
            json={"error": {"message": "Incorrect API key provided"}},
        )
        httpx_mock.add_response(url=ENDPOINT, method="POST", status_code=401)
        httpx_mock.add_response(url=ENDPOINT, method="POST", status_code=401)

        result = runner.invoke(app, ["ask", "hi"])

        assert result.exit_code == 1
