from __future__ import annotations

import json
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Number = int | float


class ReportingSink(Protocol):
    def report(self, name: str, unit: str, value: Number) -> None:
        ...


class ConsoleSink:
    """Writes one JSON line per metric."""

    def __init__(self, component: str, write: Callable[[str], None] | None = None) -> None:
        self.component = component
        self._write = write or print

    def report(self, name: str, unit: str, value: Number) -> None:
        payload = {"component": self.component, "metric": name, "unit": unit, "value": value}
        self._write(json.dumps(payload, ensure_ascii=False))


class MemorySink:
    def __init__(self) -> None:
        self.reported: list[tuple[str, str, Number]] = []

    def report(self, name: str, unit: str, value: Number) -> None:
        self.reported.append((name, unit, value))

    def value(self, name: str, unit: str | None = None) -> Number | None:
        for reported_name, reported_unit, value in reversed(self.reported):
            if reported_name == name and (unit is None or reported_unit == unit):
                return value
        return None

    def names(self) -> set[str]:
        return {name for name, _unit, _value in self.reported}

    def clear(self) -> None:
        self.reported.clear()


class SafeSink:
    """Protect the poll cycle from transport exceptions."""

    def __init__(self, inner: ReportingSink) -> None:
        self.inner = inner

    def report(self, name: str, unit: str, value: Number) -> None:
        try:
            self.inner.report(name, unit, value)
        except Exception:
            logger.warning("sink failed to report %s[%s]", name, unit, exc_info=True)
