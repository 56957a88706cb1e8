from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AgentSnapshot:
    cycles_total: int
    cycles_aborted: int
    metrics_reported: int
    section_failures: int


class AgentMetrics:
    """In-memory counters describing the agent itself."""

    def __init__(self) -> None:
        self._cycles_total = 0
        self._cycles_aborted = 0
        self._metrics_reported = 0
        self._section_failures = 0

    def record_cycle(self, completed: bool, metrics_reported: int, failures: int) -> None:
        self._cycles_total += 1
        if not completed:
            self._cycles_aborted += 1
        self._metrics_reported += metrics_reported
        self._section_failures += failures

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            cycles_total=self._cycles_total,
            cycles_aborted=self._cycles_aborted,
            metrics_reported=self._metrics_reported,
            section_failures=self._section_failures,
        )
