#!/usr/bin/env python3
"""
Streaming response example.

This example streams a two-turn conversation token by token and prints the
turn statistics.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/streaming.py
"""

import asyncio

from term_ai import ChatSession, ChatTransport, OpenAIModel, TermAiConfig


def print_delta(text: str) -> None:
    print(text, end="", flush=True)


async def main() -> None:
    """Run streaming example."""
    config = TermAiConfig.from_env()

    async with ChatTransport(config) as transport:
        session = ChatSession(transport, OpenAIModel.GPT4O)

        print("Streaming response:\n")
        print("-" * 50)
        result = await session.run_turn(
            "Tell me a very short story about a robot learning to paint.",
            on_delta=print_delta,
        )
        print("\n" + "-" * 50)

        # The second turn is sent with the first exchange as context
        print("\n\nFollow-up:")
        print("-" * 50)
        result = await session.run_turn(
            "Give that story a title.",
            on_delta=print_delta,
            on_retry=lambda attempt, error, delay: print(f"\n[retrying: {error}]"),
        )
        print("\n" + "-" * 50)

        stats = result.stats
        if stats.time_to_first_delta_ms is not None:
            print(f"\nTime to first token: {stats.time_to_first_delta_ms:.0f}ms")
        print(f"Total latency: {stats.latency_ms:.0f}ms")
        print(f"Attempts: {stats.attempts}")
        print(f"Messages in history: {len(session.history)}")


if __name__ == "__main__":
    asyncio.run(main())
