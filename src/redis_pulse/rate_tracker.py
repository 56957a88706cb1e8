from __future__ import annotations

from typing import Any

from .catalog import to_int


class RateTracker:
    """Per-cycle deltas of monotonically increasing counters."""

    def __init__(self, history: dict[str, int] | None = None) -> None:
        self.history: dict[str, int] = history if history is not None else {}

    def rate(self, key: str, current: Any) -> int:
        value = to_int(current)
        previous = self.history.get(key)
        self.history[key] = value
        if previous is None:
            return 0
        # counters restart from zero when the server restarts
        return max(value - previous, 0)
