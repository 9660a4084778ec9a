"""
Pipeline functions for term-ai.

Functions observe and rewrite chat turns without the session knowing about
any of them individually.
"""

from term_ai.functions.base import PipelineFunction
from term_ai.functions.code_capture import (
    CodeBlock,
    CodeCapture,
    CodeWriter,
    SampleFileWriter,
    extract_code_blocks,
)
from term_ai.functions.code_reviewer import CodeReviewer
from term_ai.functions.common import append_to_file, is_file_path, read_file_content
from term_ai.functions.default import DefaultFunction
from term_ai.functions.registry import FunctionPipeline
from term_ai.functions.speaker import Speaker, Voice, say, split_language_runs
from term_ai.functions.translator import FileTranslator, TranslateMode, Translator

__all__ = [
    "CodeBlock",
    "CodeCapture",
    "CodeReviewer",
    "CodeWriter",
    "DefaultFunction",
    "FileTranslator",
    "FunctionPipeline",
    "PipelineFunction",
    "SampleFileWriter",
    "Speaker",
    "TranslateMode",
    "Translator",
    "Voice",
    "append_to_file",
    "extract_code_blocks",
    "is_file_path",
    "read_file_content",
    "say",
    "split_language_runs",
]
