"""
Result types for chat turns.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field


@dataclass
class TurnStats:
    """Statistics for a single chat turn.

    Attributes:
        turn_id: Client-generated turn ID for log correlation
        model: Model used for the turn
        messages_sent: Number of request messages (chunks) sent
        attempts: Transport attempts across all messages
        latency_ms: Total latency in milliseconds
        time_to_first_delta_ms: Time to first non-empty delta
    """

    turn_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    model: str | None = None
    messages_sent: int = 0
    attempts: int = 0
    latency_ms: float = 0.0
    time_to_first_delta_ms: float | None = None

    # Internal timing
    _start_time: float = field(default_factory=time.monotonic, repr=False)
    _first_delta_time: float | None = field(default=None, repr=False)

    def record_start(self) -> None:
        """Record the start time."""
        self._start_time = time.monotonic()

    def record_first_delta(self) -> None:
        """Record time of first delta."""
        if self._first_delta_time is None:
            self._first_delta_time = time.monotonic()
            self.time_to_first_delta_ms = (
                self._first_delta_time - self._start_time
            ) * 1000

    def record_end(self) -> None:
        """Record the end time and calculate latency."""
        self.latency_ms = (time.monotonic() - self._start_time) * 1000

    @property
    def retry_count(self) -> int:
        """Attempts beyond the first one per message."""
        return max(self.attempts - self.messages_sent, 0)


@dataclass
class TurnResult:
    """Outcome of ChatSession.run_turn.

    Attributes:
        content: Assistant reply committed to history (chunks concatenated)
        replies: One committed reply per request message
        stats: Timing and retry statistics
    """

    content: str = ""
    replies: list[str] = field(default_factory=list)
    stats: TurnStats = field(default_factory=TurnStats)
