"""
Logging configuration.

We use a YAML logging config (`src/geohunt/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `GEOHUNT_LOG_LEVEL`).

The app also owns a `LogBuffer`: a bounded, in-memory tail of formatted log lines
that operators can search through the API without shell access to the host.
"""

from __future__ import annotations

import logging
import logging.config
import threading
from collections import deque

from geohunt.config.settings import Settings, get_logging_config, get_settings

_BUFFER_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LogBuffer(logging.Handler):
    """Keep the newest `capacity` formatted records in memory."""

    def __init__(self, capacity: int = 500, level: int = logging.NOTSET):
        super().__init__(level=level)
        self._lines: deque[str] = deque(maxlen=int(capacity))
        self._lines_lock = threading.Lock()
        self.setFormatter(logging.Formatter(_BUFFER_FORMAT))

    @property
    def capacity(self) -> int:
        return int(self._lines.maxlen or 0)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        with self._lines_lock:
            self._lines.append(line)

    def lines(self) -> list[str]:
        with self._lines_lock:
            return list(self._lines)

    def tail(self, n: int) -> list[str]:
        lines = self.lines()
        return lines[-n:] if n > 0 else []

    def search(self, query: str) -> list[str]:
        """Return buffered lines containing `query` (case-insensitive), oldest first."""
        needle = query.lower()
        return [line for line in self.lines() if needle in line.lower()]


def configure_logging(settings: Settings | None = None, *, buffer: LogBuffer | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = settings or get_settings()
    config = get_logging_config()
    # dictConfig mutates nested dicts; keep the cached copy pristine.
    config = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config.items()}
    config["handlers"] = {name: dict(h) for name, h in config.get("handlers", {}).items()}
    config["root"] = dict(config.get("root", {}))

    level = settings.app.log_level.upper()
    config["root"]["level"] = level
    for handler in config["handlers"].values():
        if "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)

    if buffer is not None:
        buffer.setLevel(level)
        root = logging.getLogger()
        if buffer not in root.handlers:
            root.addHandler(buffer)
