"""
Resilience module for term-ai.

Provides the bounded retry loop used around each streamed turn.
"""

from term_ai.resilience.retry import (
    RetryConfig,
    RetryPolicy,
    RetryResult,
)

__all__ = [
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
]
