from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from operator import attrgetter
import time
from typing import Any, Callable, Mapping

from .catalog import (
    AVERAGE_SINCE_REPORT,
    ENTRIES,
    ENTRIES_SINCE_REPORT,
    GAUGES,
    KEYSPACE_EXPIRING,
    KEYSPACE_TOTAL,
    LATENCY_EVENTS,
    MAXIMUM_SINCE_REPORT,
    MICROSECONDS,
    MILLISECONDS,
    RATES,
    coerce,
    latency_event_metric,
    slowlog_metric,
)
from .event_log import parse_keyspace, parse_latency_history, parse_slowlog
from .monitoring import AgentMetrics
from .rate_tracker import RateTracker
from .sinks import Number, ReportingSink
from .store import Store, StoreUnavailable
from .window import aggregate

logger = logging.getLogger(__name__)


@dataclass
class CycleState:
    """Window boundaries, kept in whole seconds like Redis event stamps.

    A sample stamped in the report's own second may be counted again by the
    next cycle, since Redis can still raise that second's maximum after the
    report was taken.
    """

    last_report_time: int
    last_cycle_start_time: int
    this_cycle_start_time: int

    @staticmethod
    def starting_at(ts: float) -> "CycleState":
        second = math.floor(ts)
        return CycleState(last_report_time=second, last_cycle_start_time=second, this_cycle_start_time=second)

    def begin(self, now: float) -> None:
        self.last_cycle_start_time = self.this_cycle_start_time
        self.this_cycle_start_time = math.floor(now)

    def finish(self, now: float) -> None:
        self.last_report_time = math.floor(now)


@dataclass
class EngineState:
    """Everything a cycle carries over to the next one. Never persisted."""

    cycle: CycleState
    rates: RateTracker = field(default_factory=RateTracker)

    @staticmethod
    def starting_at(ts: float) -> "EngineState":
        return EngineState(cycle=CycleState.starting_at(ts))


@dataclass(frozen=True)
class CycleReport:
    timestamp: float
    completed: bool
    metrics_reported: int
    failures: tuple[str, ...] = ()


class _CountingSink:
    def __init__(self, inner: ReportingSink) -> None:
        self.inner = inner
        self.count = 0

    def report(self, name: str, unit: str, value: Number) -> None:
        self.count += 1
        self.inner.report(name, unit, value)


class MetricEngine:
    """Turns one Redis poll into a fixed catalog of metrics.

    Latency history is windowed against the end of the previous report and
    the slow log against the start of the previous cycle. The report time
    advances on every exit from ``run_cycle``, aborted cycles included.
    """

    def __init__(
        self,
        store: Store,
        sink: ReportingSink,
        database: int | None = None,
        name: str = "redis",
        state: EngineState | None = None,
        clock: Callable[[], float] = time.time,
        metrics: AgentMetrics | None = None,
    ) -> None:
        self.store = store
        self.sink = sink
        self.database = database
        self.name = name
        self.clock = clock
        self.state = state or EngineState.starting_at(clock())
        self.metrics = metrics
        self._in_flight = False

    def run_cycle(self, now: float | None = None) -> CycleReport:
        started = now if now is not None else self.clock()
        if self._in_flight:
            logger.warning("%s: cycle already running, tick ignored", self.name)
            report = CycleReport(timestamp=started, completed=False, metrics_reported=0, failures=("busy",))
            if self.metrics is not None:
                self.metrics.record_cycle(False, 0, len(report.failures))
            return report

        self._in_flight = True
        cycle = self.state.cycle
        cycle.begin(started)
        sink = _CountingSink(self.sink)
        failures: list[str] = []
        completed = False
        try:
            completed = self._run_sections(sink, failures)
        except Exception:
            logger.exception("%s: unexpected error during poll cycle", self.name)
            failures.append("unexpected")
            completed = False
        finally:
            cycle.finish(now if now is not None else self.clock())
            self._in_flight = False

        report = CycleReport(
            timestamp=started,
            completed=completed,
            metrics_reported=sink.count,
            failures=tuple(failures),
        )
        if self.metrics is not None:
            self.metrics.record_cycle(completed, report.metrics_reported, len(report.failures))
        logger.debug(
            "%s: cycle done completed=%s metrics=%d failures=%s",
            self.name,
            completed,
            report.metrics_reported,
            ",".join(report.failures) or "-",
        )
        return report

    def _run_sections(self, sink: ReportingSink, failures: list[str]) -> bool:
        try:
            info = self.store.query_diagnostics()
        except StoreUnavailable as exc:
            logger.error("%s: diagnostics unavailable, skipping cycle: %s", self.name, exc)
            failures.append("diagnostics")
            return False

        self._report_gauges(sink, info)
        self._report_rates(sink, info)
        self._report_latency_events(sink, failures)
        self._report_slowlog(sink, failures)
        if self.database is not None:
            self._report_keyspace(sink, failures)
        return True

    def _report_gauges(self, sink: ReportingSink, info: Mapping[str, Any]) -> None:
        for spec in GAUGES:
            value = coerce(info.get(spec.field), spec.coercion)
            sink.report(spec.name, spec.unit, value)

    def _report_rates(self, sink: ReportingSink, info: Mapping[str, Any]) -> None:
        for spec in RATES:
            sink.report(spec.name, spec.unit, self.state.rates.rate(spec.field, info.get(spec.field)))

    def _report_latency_events(self, sink: ReportingSink, failures: list[str]) -> None:
        cutoff = self.state.cycle.last_report_time
        for event_name in LATENCY_EVENTS:
            try:
                rows = self.store.query_latency_history(event_name)
            except StoreUnavailable as exc:
                logger.warning("%s: latency history for %s unavailable: %s", self.name, event_name, exc)
                failures.append(f"latency:{event_name}")
                continue

            stats = aggregate(
                parse_latency_history(event_name, rows),
                cutoff,
                group_key=attrgetter("event_name"),
                value=attrgetter("latency_milliseconds"),
                groups=(event_name,),
            )[event_name]
            sink.report(latency_event_metric(event_name, AVERAGE_SINCE_REPORT), MILLISECONDS, stats.average)
            sink.report(latency_event_metric(event_name, MAXIMUM_SINCE_REPORT), MILLISECONDS, stats.maximum)
            sink.report(latency_event_metric(event_name, ENTRIES_SINCE_REPORT), ENTRIES, stats.count)

    def _report_slowlog(self, sink: ReportingSink, failures: list[str]) -> None:
        cutoff = self.state.cycle.last_cycle_start_time
        try:
            length = self.store.query_slowlog_length()
            rows = self.store.query_slowlog_entries(length) if length > 0 else []
        except StoreUnavailable as exc:
            logger.warning("%s: slowlog unavailable: %s", self.name, exc)
            failures.append("slowlog")
            return

        by_command = aggregate(
            parse_slowlog(rows),
            cutoff,
            group_key=attrgetter("command"),
            value=attrgetter("latency_microseconds"),
        )
        for command, micros in sorted(by_command.items()):
            millis = micros.scaled(1000)
            sink.report(slowlog_metric(command, AVERAGE_SINCE_REPORT), MILLISECONDS, millis.average)
            sink.report(slowlog_metric(command, AVERAGE_SINCE_REPORT), MICROSECONDS, micros.average)
            sink.report(slowlog_metric(command, MAXIMUM_SINCE_REPORT), MILLISECONDS, millis.maximum)
            sink.report(slowlog_metric(command, MAXIMUM_SINCE_REPORT), MICROSECONDS, micros.maximum)
            sink.report(slowlog_metric(command, ENTRIES_SINCE_REPORT), ENTRIES, micros.count)

    def _report_keyspace(self, sink: ReportingSink, failures: list[str]) -> None:
        try:
            descriptor = self.store.query_keyspace(self.database)
        except StoreUnavailable as exc:
            logger.warning("%s: keyspace for db%s unavailable: %s", self.name, self.database, exc)
            failures.append("keyspace")
            return

        counts = parse_keyspace(descriptor)
        for name, unit, key in (KEYSPACE_TOTAL, KEYSPACE_EXPIRING):
            sink.report(name, unit, counts.get(key, 0))
