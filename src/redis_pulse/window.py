from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Hashable, Iterable, TypeVar

R = TypeVar("R")
K = TypeVar("K", bound=Hashable)

NO_DATA = -1


@dataclass(frozen=True)
class WindowStats:
    count: int
    average: float
    maximum: float

    @staticmethod
    def sentinel() -> "WindowStats":
        return WindowStats(count=NO_DATA, average=NO_DATA, maximum=NO_DATA)

    @property
    def has_data(self) -> bool:
        return self.count > 0

    def scaled(self, divisor: float) -> "WindowStats":
        if not self.has_data:
            return self
        return WindowStats(count=self.count, average=self.average / divisor, maximum=self.maximum / divisor)


def summarize(values: list[float]) -> WindowStats:
    if not values:
        return WindowStats.sentinel()
    return WindowStats(count=len(values), average=sum(values) / len(values), maximum=max(values))


def aggregate(
    records: Iterable[R],
    cutoff: float,
    group_key: Callable[[R], K],
    value: Callable[[R], float],
    groups: Iterable[K] = (),
    timestamp: Callable[[R], float] = attrgetter("unix_timestamp"),
) -> dict[K, WindowStats]:
    """Count/average/max per group over records at or after ``cutoff``.

    Groups are formed from every record first and only then filtered, so a
    key seen outside the window still shows up with the no-data sentinel.
    Keys passed in ``groups`` are always present.
    """
    buckets: dict[K, list[float]] = {key: [] for key in groups}
    for record in records:
        bucket = buckets.setdefault(group_key(record), [])
        if timestamp(record) >= cutoff:
            bucket.append(value(record))
    return {key: summarize(values) for key, values in buckets.items()}
