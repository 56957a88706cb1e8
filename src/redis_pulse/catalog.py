from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Coercion(str, Enum):
    INT = "int"
    FLOAT = "float"


def _plain(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("ascii", errors="replace")
    return value


def to_int(value: Any) -> int:
    value = _plain(value)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def to_float(value: Any) -> float:
    try:
        return float(_plain(value))
    except (TypeError, ValueError):
        return 0.0


def coerce(value: Any, coercion: Coercion) -> int | float:
    """Lenient conversion of an INFO field; missing or junk values become zero."""
    return to_float(value) if coercion == Coercion.FLOAT else to_int(value)


@dataclass(frozen=True)
class GaugeSpec:
    name: str
    unit: str
    field: str
    coercion: Coercion = Coercion.INT


@dataclass(frozen=True)
class RateSpec:
    name: str
    unit: str
    field: str


GAUGES: tuple[GaugeSpec, ...] = (
    GaugeSpec("Memory/Used", "bytes", "used_memory"),
    GaugeSpec("Memory/RSS", "bytes", "used_memory_rss"),
    GaugeSpec("Memory/Peak", "bytes", "used_memory_peak"),
    GaugeSpec("Memory/Lua", "bytes", "used_memory_lua"),
    GaugeSpec("Memory/Fragmentation Ratio", "ratio", "mem_fragmentation_ratio", Coercion.FLOAT),
    GaugeSpec("CPU/System", "seconds", "used_cpu_sys", Coercion.FLOAT),
    GaugeSpec("CPU/User", "seconds", "used_cpu_user", Coercion.FLOAT),
    GaugeSpec("CPU/Child System", "seconds", "used_cpu_sys_children", Coercion.FLOAT),
    GaugeSpec("CPU/Child User", "seconds", "used_cpu_user_children", Coercion.FLOAT),
    GaugeSpec("Persistence/Changes Since Last Save", "changes", "rdb_changes_since_last_save"),
    GaugeSpec("Persistence/Background Save In Progress", "boolean", "rdb_bgsave_in_progress"),
    GaugeSpec("Persistence/AOF Rewrite In Progress", "boolean", "aof_rewrite_in_progress"),
    GaugeSpec("Persistence/Last Fork Duration", "microseconds", "latest_fork_usec"),
    GaugeSpec("Connections/Clients", "connections", "connected_clients"),
    GaugeSpec("Connections/Blocked", "connections", "blocked_clients"),
    GaugeSpec("Connections/Replicas", "connections", "connected_slaves"),
    GaugeSpec("Stats/Operations Per Second", "operations", "instantaneous_ops_per_sec"),
    GaugeSpec("Stats/Pub Sub Channels", "channels", "pubsub_channels"),
    GaugeSpec("Stats/Pub Sub Patterns", "patterns", "pubsub_patterns"),
    GaugeSpec("Server/Uptime", "seconds", "uptime_in_seconds"),
)

RATES: tuple[RateSpec, ...] = (
    RateSpec("Stats/Commands Processed", "commands", "total_commands_processed"),
    RateSpec("Stats/Connections Received", "connections", "total_connections_received"),
    RateSpec("Stats/Connections Rejected", "connections", "rejected_connections"),
    RateSpec("Stats/Keyspace Hits", "hits", "keyspace_hits"),
    RateSpec("Stats/Keyspace Misses", "misses", "keyspace_misses"),
    RateSpec("Stats/Expired Keys", "keys", "expired_keys"),
    RateSpec("Stats/Evicted Keys", "keys", "evicted_keys"),
    RateSpec("Stats/Network Input", "bytes", "total_net_input_bytes"),
    RateSpec("Stats/Network Output", "bytes", "total_net_output_bytes"),
)

LATENCY_EVENTS: tuple[str, ...] = (
    "fork",
    "command",
    "fast-command",
    "expire-cycle",
    "eviction-del",
    "eviction-cycle",
    "rdb-unlink-temp-file",
    "aof-fsync-always",
    "aof-write",
    "aof-write-pending-fsync",
    "aof-write-active-child",
    "aof-write-alone",
    "aof-rewrite-diff-write",
)

MILLISECONDS = "milliseconds"
MICROSECONDS = "microseconds"
ENTRIES = "entries"

AVERAGE_SINCE_REPORT = "Average Latency Since Last Report"
MAXIMUM_SINCE_REPORT = "Maximum Latency Since Last Report"
ENTRIES_SINCE_REPORT = "Entries Since Last Report"

KEYSPACE_TOTAL = ("Keyspace/Total Keys", "keys", "keys")
KEYSPACE_EXPIRING = ("Keyspace/Expiring Keys", "keys", "expires")


def latency_event_metric(event_name: str, label: str) -> str:
    return f"Latency/Events/{event_name}/{label}"


def slowlog_metric(command: str, label: str) -> str:
    return f"Latency/Slow Log/{command.upper()}/{label}"
