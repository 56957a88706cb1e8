"""Redis Pulse package."""

from .engine import CycleReport, CycleState, EngineState, MetricEngine
from .rate_tracker import RateTracker
from .sinks import ConsoleSink, MemorySink, ReportingSink, SafeSink
from .store import RedisStore, Store, StoreUnavailable
from .window import WindowStats, aggregate

__all__ = [
    "ConsoleSink",
    "CycleReport",
    "CycleState",
    "EngineState",
    "MemorySink",
    "MetricEngine",
    "RateTracker",
    "RedisStore",
    "ReportingSink",
    "SafeSink",
    "Store",
    "StoreUnavailable",
    "WindowStats",
    "aggregate",
]
