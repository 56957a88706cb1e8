from operator import attrgetter

from redis_pulse.event_log import LatencyEvent, SlowLogEntry
from redis_pulse.window import WindowStats, aggregate, summarize


def test_summarize_values() -> None:
    stats = summarize([10, 20, 30])
    assert stats == WindowStats(count=3, average=20, maximum=30)


def test_average_uses_true_division() -> None:
    assert summarize([1, 2]).average == 1.5


def test_empty_window_is_sentinel() -> None:
    stats = summarize([])
    assert (stats.average, stats.maximum, stats.count) == (-1, -1, -1)
    assert stats.has_data is False


def test_aggregate_filters_at_cutoff_inclusive() -> None:
    events = [
        LatencyEvent("fork", 99, 1000),
        LatencyEvent("fork", 100, 10),
        LatencyEvent("fork", 150, 20),
        LatencyEvent("fork", 200, 30),
    ]
    result = aggregate(events, 100, group_key=attrgetter("event_name"), value=attrgetter("latency_milliseconds"))
    assert result == {"fork": WindowStats(count=3, average=20, maximum=30)}


def test_requested_groups_without_records_get_sentinel() -> None:
    result = aggregate([], 0, group_key=attrgetter("event_name"), value=attrgetter("latency_milliseconds"), groups=("fork",))
    assert result["fork"] == WindowStats.sentinel()


def test_group_seen_only_before_cutoff_gets_sentinel() -> None:
    entries = [
        SlowLogEntry(1, 50, 400, ("KEYS", "*")),
        SlowLogEntry(2, 120, 1000, ("get", "a")),
        SlowLogEntry(3, 130, 3000, ("GET", "b")),
    ]
    result = aggregate(entries, 100, group_key=attrgetter("command"), value=attrgetter("latency_microseconds"))
    assert result["KEYS"] == WindowStats.sentinel()
    assert result["GET"] == WindowStats(count=2, average=2000, maximum=3000)


def test_scaled_keeps_sentinel() -> None:
    assert WindowStats.sentinel().scaled(1000) == WindowStats.sentinel()
    assert WindowStats(count=2, average=1500, maximum=2500).scaled(1000) == WindowStats(count=2, average=1.5, maximum=2.5)
