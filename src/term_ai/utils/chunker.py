"""
Input chunking.

Splits long input into request-sized messages on sentence boundaries so a
single request never exceeds the provider's size limit, without cutting a
sentence in half.
"""

from __future__ import annotations

from term_ai.types.message import Message, MessageRole


def split_sentences(text: str, delimiter: str = ".") -> list[str]:
    """Split text into sentences that keep their trailing delimiter.

    Text after the last delimiter forms the final sentence. Joining the
    result reproduces ``text`` exactly.

    Examples:
        >>> split_sentences("a. b. c")
        ['a.', ' b.', ' c']
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    sentences: list[str] = []
    start = 0
    while True:
        index = text.find(delimiter, start)
        if index == -1:
            break
        end = index + len(delimiter)
        sentences.append(text[start:end])
        start = end
    if start < len(text):
        sentences.append(text[start:])
    return sentences


def chunk(
    text: str,
    limit: int,
    role: MessageRole = MessageRole.USER,
    delimiter: str = ".",
) -> list[Message]:
    """Split text into messages of at most ``limit`` characters.

    Sentences are packed greedily in order. A single sentence longer than
    ``limit`` is sent alone in an over-limit message instead of being cut.

    Args:
        text: Raw input
        limit: Maximum characters per message (>= 1)
        role: Role of the produced messages
        delimiter: Sentence delimiter, kept with the preceding sentence

    Returns:
        Messages whose contents concatenate back to ``text``

    Raises:
        ValueError: If ``limit`` is less than 1 or the delimiter is empty
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    if len(text) <= limit:
        return [Message(role=role, content=text)]

    parts: list[str] = []
    current = ""
    for sentence in split_sentences(text, delimiter):
        if current and len(current) + len(sentence) > limit:
            parts.append(current)
            current = sentence
        else:
            current += sentence
    if current:
        parts.append(current)

    return [Message(role=role, content=part) for part in parts]
