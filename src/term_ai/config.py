"""
Process configuration.

TermAiConfig is read once from the environment at startup and passed
explicitly to the transport, the session and the REPL.
"""

from __future__ import annotations

import os
import ssl
from collections.abc import Mapping
from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from term_ai.errors import ConfigError

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_CHUNK_LIMIT = 4000

_PROXY_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")
_CA_BUNDLE_VARS = ("CA_BUNDLE", "ca_bundle")
_PROXY_SCHEMES = {"http", "https", "socks5"}


def _first_set(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


class TermAiConfig(BaseModel):
    """Runtime configuration.

    Attributes:
        api_key: Bearer token for the chat API
        proxy: Proxy URL applied to every request
        ca_bundle: Extra CA certificates (PEM) trusted for TLS
        display_user: Prompt label for the user
        display_assistant: Prompt label for the assistant
        endpoint: Chat-completions URL
        connect_timeout: Connect timeout in seconds
        read_timeout: Maximum idle time between stream chunks in seconds
        chunk_limit: Maximum characters per request message
        speech_command: Local text-to-speech executable
        log_level: Logging level name
        log_format: ``text`` or ``json``
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    proxy: str | None = None
    ca_bundle: Path | None = None
    display_user: str = "you"
    display_assistant: str = "gpt"
    endpoint: str = DEFAULT_ENDPOINT
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)
    chunk_limit: int = Field(default=DEFAULT_CHUNK_LIMIT, ge=1)
    speech_command: str = "say"
    log_level: str = "WARNING"
    log_format: str = "text"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> TermAiConfig:
        """Load configuration from environment variables.

        Args:
            env: Mapping to read from (default: ``os.environ``)

        Returns:
            Validated configuration

        Raises:
            ConfigError: On a missing API key, an invalid proxy URL, a missing
                CA bundle or a malformed numeric setting
        """
        env = os.environ if env is None else env

        api_key = env.get("OPENAI_API_KEY")
        if not api_key:
            raise ConfigError(
                "OPENAI_API_KEY is not set", setting="OPENAI_API_KEY"
            ).with_hint("export OPENAI_API_KEY=<your key>")

        proxy = _first_set(env, _PROXY_VARS)
        if proxy is not None:
            validate_proxy(proxy)

        ca_bundle = _first_set(env, _CA_BUNDLE_VARS)
        ca_path = Path(ca_bundle).expanduser() if ca_bundle else None
        if ca_path is not None and not ca_path.is_file():
            raise ConfigError(
                f"CA bundle not found: {ca_path}", setting="CA_BUNDLE", value=str(ca_path)
            )

        return cls(
            api_key=SecretStr(api_key),
            proxy=proxy,
            ca_bundle=ca_path,
            display_user=env.get("USER") or "you",
            display_assistant=env.get("DISPLAY_GPT") or "gpt",
            endpoint=env.get("TERM_AI_ENDPOINT") or DEFAULT_ENDPOINT,
            read_timeout=_float_setting(env, "TERM_AI_READ_TIMEOUT", 60.0),
            chunk_limit=_int_setting(env, "TERM_AI_CHUNK_LIMIT", DEFAULT_CHUNK_LIMIT),
            speech_command=env.get("TERM_AI_SAY_COMMAND") or "say",
            log_level=(env.get("TERM_AI_LOG_LEVEL") or "WARNING").upper(),
            log_format=(env.get("TERM_AI_LOG_FORMAT") or "text").lower(),
        )

    def ssl_context(self) -> ssl.SSLContext | bool:
        """TLS verification setting for httpx.

        Returns the default verification (True) when no CA bundle is set.

        Raises:
            ConfigError: If the CA bundle cannot be loaded
        """
        if self.ca_bundle is None:
            return True
        try:
            return ssl.create_default_context(cafile=str(self.ca_bundle))
        except (OSError, ssl.SSLError) as e:
            raise ConfigError(
                f"Cannot load CA bundle {self.ca_bundle}: {e}",
                setting="CA_BUNDLE",
                value=str(self.ca_bundle),
            ) from e


def validate_proxy(proxy: str) -> httpx.URL:
    """Parse a proxy URL, raising ConfigError when it is unusable."""
    try:
        url = httpx.URL(proxy)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid proxy URL: {e}", setting="HTTPS_PROXY", value=proxy) from e

    if url.scheme not in _PROXY_SCHEMES or not url.host:
        raise ConfigError(
            f"Invalid proxy URL: {proxy}", setting="HTTPS_PROXY", value=proxy
        ).with_hint("use http://host:port, https://host:port or socks5://host:port")
    return url


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number", setting=name, value=raw) from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive", setting=name, value=raw)
    return value


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer", setting=name, value=raw) from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1", setting=name, value=raw)
    return value
