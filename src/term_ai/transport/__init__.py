"""
Transport layer for term-ai.

Streams chat requests over HTTP with httpx.
"""

from term_ai.transport.auth import get_auth_header
from term_ai.transport.http import ChatTransport

__all__ = [
    "ChatTransport",
    "get_auth_header",
]
