from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar

import redis

if TYPE_CHECKING:
    from redis import Redis

T = TypeVar("T")


class StoreUnavailable(Exception):
    """The monitored store could not answer a query."""


class Store(Protocol):
    def query_diagnostics(self) -> dict[str, Any]:
        ...

    def query_latency_history(self, event_name: str) -> list[Any]:
        ...

    def query_slowlog_length(self) -> int:
        ...

    def query_slowlog_entries(self, count: int) -> list[Any]:
        ...

    def query_keyspace(self, db_index: int) -> Any:
        ...


class RedisStore:
    """Store queries against a Redis server via redis-py.

    Latency and slowlog replies are requested through ``execute_command``
    with split command words so redis-py hands back the raw nested lists
    instead of its own dict shapes.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        timeout_seconds: float = 5.0,
        client: Redis | None = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self) -> Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                socket_timeout=self.timeout_seconds,
                socket_connect_timeout=self.timeout_seconds,
                decode_responses=True,
            )
        return self._client

    def _call(self, what: str, fn: Callable[[Redis], T]) -> T:
        try:
            return fn(self._get_client())
        except (redis.exceptions.RedisError, OSError) as exc:
            raise StoreUnavailable(f"{what} failed: {exc}") from exc

    def query_diagnostics(self) -> dict[str, Any]:
        return self._call("INFO", lambda c: dict(c.info()))

    def query_latency_history(self, event_name: str) -> list[Any]:
        return self._call(
            f"LATENCY HISTORY {event_name}",
            lambda c: list(c.execute_command("LATENCY", "HISTORY", event_name) or []),
        )

    def query_slowlog_length(self) -> int:
        return self._call("SLOWLOG LEN", lambda c: int(c.slowlog_len()))

    def query_slowlog_entries(self, count: int) -> list[Any]:
        return self._call(
            "SLOWLOG GET",
            lambda c: list(c.execute_command("SLOWLOG", "GET", count) or []),
        )

    def query_keyspace(self, db_index: int) -> Any:
        return self._call("INFO keyspace", lambda c: c.info("keyspace").get(f"db{db_index}"))
