from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import time
import tomllib

from .engine import CycleReport, MetricEngine
from .monitoring import AgentMetrics, AgentSnapshot
from .sinks import ConsoleSink, ReportingSink, SafeSink
from .store import RedisStore, Store


@dataclass(frozen=True)
class AgentConfig:
    redis_url: str = "redis://localhost:6379/0"
    instance_name: str | None = None
    database: int | None = None
    timeout_seconds: float = 5.0
    interval_seconds: int = 60
    log_level: str = "INFO"

    @property
    def display_name(self) -> str:
        return self.instance_name or self.redis_url

    @staticmethod
    def from_toml(path: str | Path) -> "AgentConfig":
        payload = tomllib.loads(Path(path).read_text(encoding="utf-8"))

        redis_section = payload.get("redis", {})
        agent = payload.get("agent", {})

        database = redis_section.get("database")
        if isinstance(database, str):
            database = _none_if_blank(database)

        return AgentConfig(
            redis_url=str(redis_section.get("url", "redis://localhost:6379/0")),
            instance_name=_none_if_blank(redis_section.get("name")),
            database=int(database) if database is not None else None,
            timeout_seconds=float(redis_section.get("timeout_seconds", 5.0)),
            interval_seconds=int(agent.get("interval_seconds", 60)),
            log_level=str(agent.get("log_level", "INFO")).upper(),
        )


def _none_if_blank(value: object) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


class PulseApplication:
    def __init__(
        self,
        config: AgentConfig,
        store: Store | None = None,
        sink: ReportingSink | None = None,
    ) -> None:
        self.config = config
        self.metrics = AgentMetrics()
        self.store = store or RedisStore(config.redis_url, timeout_seconds=config.timeout_seconds)
        self.sink = SafeSink(sink or ConsoleSink(config.display_name))
        self.engine = MetricEngine(
            store=self.store,
            sink=self.sink,
            database=config.database,
            name=config.display_name,
            metrics=self.metrics,
        )

    def run_once(self) -> CycleReport:
        return self.engine.run_cycle()

    def run_forever(self) -> None:
        while True:
            self.run_once()
            time.sleep(self.config.interval_seconds)

    def get_metrics_snapshot(self) -> AgentSnapshot:
        return self.metrics.snapshot()
