"""Utility helpers for term-ai."""

from term_ai.utils.chunker import chunk, split_sentences

__all__ = [
    "chunk",
    "split_sentences",
]
