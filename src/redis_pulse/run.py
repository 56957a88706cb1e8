from __future__ import annotations

import json
import logging
from pathlib import Path

from .app import AgentConfig, PulseApplication


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLineFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def main() -> None:
    config_path = Path("config.toml")
    if not config_path.exists():
        config_path = Path("config.example.toml")

    config = AgentConfig.from_toml(config_path)
    configure_logging(config.log_level)

    app = PulseApplication(config)
    app.run_forever()


if __name__ == "__main__":
    main()
