"""Code review requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from term_ai.functions.base import PipelineFunction
from term_ai.functions.common import is_file_path, prefixed_messages, read_file_content

if TYPE_CHECKING:
    from term_ai.types.input import UserInput
    from term_ai.types.message import Message

REVIEW_PREFIX = "以下のコードを日本語でレビューしてください"


class CodeReviewer(PipelineFunction):
    """Turns the input (or the file it names) into a code review request.

    Every chunk is sent as ``<prefix>\\n<chunk>``.
    """

    def __init__(self, prefix: str = REVIEW_PREFIX) -> None:
        super().__init__()
        self._prefix = prefix

    @property
    def name(self) -> str:
        return "code_reviewer"

    @property
    def prefix(self) -> str:
        return self._prefix

    def claims(self, user_input: UserInput) -> bool:
        return True

    def input_to_messages(self, user_input: UserInput, limit: int) -> list[Message]:
        content = user_input.content
        if is_file_path(content):
            content = read_file_content(content, function=self.name)
        return prefixed_messages(content, self._prefix, limit)
