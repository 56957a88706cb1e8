from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


class MalformedRecord(ValueError):
    """A raw row returned by the store does not have the expected shape."""


@dataclass(frozen=True)
class LatencyEvent:
    event_name: str
    unix_timestamp: int
    latency_milliseconds: int


@dataclass(frozen=True)
class SlowLogEntry:
    sequence_id: int
    unix_timestamp: int
    latency_microseconds: int
    command_arguments: tuple[str, ...]

    @property
    def command(self) -> str:
        if not self.command_arguments:
            return "UNKNOWN"
        return self.command_arguments[0].upper()


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _integer(value: Any) -> int:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedRecord(f"not an integer: {value!r}") from exc


def parse_latency_history(event_name: str, rows: Iterable[Any] | None) -> list[LatencyEvent]:
    """Turn ``LATENCY HISTORY <event>`` rows into events.

    Each row must be ``[timestamp, latency_ms]``; anything else is dropped.
    """
    events: list[LatencyEvent] = []
    for row in rows or ():
        if not isinstance(row, (list, tuple)) or len(row) != 2:
            continue
        try:
            events.append(LatencyEvent(event_name, _integer(row[0]), _integer(row[1])))
        except MalformedRecord:
            continue
    return events


def parse_slowlog_row(row: Any) -> SlowLogEntry:
    if not isinstance(row, (list, tuple)) or len(row) < 4:
        raise MalformedRecord(f"slowlog row needs 4 fields: {row!r}")
    arguments = row[3]
    if isinstance(arguments, (str, bytes)) or not isinstance(arguments, Iterable):
        raise MalformedRecord(f"slowlog arguments are not a sequence: {arguments!r}")
    return SlowLogEntry(
        sequence_id=_integer(row[0]),
        unix_timestamp=_integer(row[1]),
        latency_microseconds=_integer(row[2]),
        command_arguments=tuple(_text(arg) for arg in arguments),
    )


def parse_slowlog(rows: Iterable[Any] | None) -> list[SlowLogEntry]:
    """Turn raw ``SLOWLOG GET`` rows into entries.

    Servers newer than 4.0 append client address and name after the
    argument list; those trailing fields are ignored. Rows that cannot be
    read are logged and dropped so one bad entry does not hide the rest.
    """
    entries: list[SlowLogEntry] = []
    for row in rows or ():
        try:
            entries.append(parse_slowlog_row(row))
        except MalformedRecord as exc:
            logger.warning("dropping slowlog row: %s", exc)
    return entries


def parse_keyspace(descriptor: str | bytes | Mapping[str, Any] | None) -> dict[str, int]:
    """Parse a keyspace line such as ``keys=12,expires=3,avg_ttl=0``.

    Clients that already split the line hand over a mapping instead; both
    shapes end up as ``{name: int}``.
    """
    if descriptor is None:
        return {}

    if isinstance(descriptor, Mapping):
        pairs = [(_text(k), v) for k, v in descriptor.items()]
    else:
        pairs = []
        for chunk in _text(descriptor).split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if "=" not in chunk:
                logger.warning("skipping keyspace entry without '=': %r", chunk)
                continue
            key, value = chunk.split("=", 1)
            pairs.append((key.strip(), value.strip()))

    parsed: dict[str, int] = {}
    for key, value in pairs:
        try:
            parsed[key] = _integer(value)
        except MalformedRecord:
            logger.warning("skipping keyspace entry %s=%r", key, value)
    return parsed
