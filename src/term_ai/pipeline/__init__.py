"""
Stream decoding pipeline.

Bytes -> SSE payloads (SSEDecoder) -> StreamResponse (decode_event).
"""

from term_ai.pipeline.decode import DONE_SENTINEL, SSEDecoder, decode_event

__all__ = [
    "DONE_SENTINEL",
    "SSEDecoder",
    "decode_event",
]
