#!/usr/bin/env python3
"""
Pipeline functions example.

Registers code capture and a translator on one session: the question is
sent as a Japanese translation request and any code in the reply is saved
to ./sample_for_gpt_* files.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/functions.py
"""

import asyncio

from term_ai import ChatSession, ChatTransport, OpenAIModel, TermAiConfig
from term_ai.functions import (
    CodeCapture,
    FunctionPipeline,
    SampleFileWriter,
    TranslateMode,
    Translator,
)
from term_ai.resilience import RetryConfig, RetryPolicy


async def main() -> None:
    """Run pipeline functions example."""
    config = TermAiConfig.from_env()

    capture = CodeCapture(SampleFileWriter("."))
    pipeline = FunctionPipeline(limit=config.chunk_limit)
    pipeline.add_function(capture)
    pipeline.add_function(Translator(TranslateMode.JAPANESE))

    async with ChatTransport(config) as transport:
        session = ChatSession(
            transport,
            OpenAIModel.GPT4O,
            pipeline,
            retry=RetryPolicy(RetryConfig(max_attempts=3, backoff_ms=500)),
        )
        await session.run_turn(
            "Show FizzBuzz in Python and explain it in one sentence.",
            on_delta=lambda text: print(text, end="", flush=True),
        )

    print()
    for path in capture.last_written:
        print(f"saved {path}")


if __name__ == "__main__":
    asyncio.run(main())
