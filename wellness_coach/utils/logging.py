"""
Logging setup for the wellness coaching toolkit.

``configure_logging(config)`` runs once per CLI invocation, before a store is
built. Library modules only ever ask for ``logging.getLogger(__name__)``.

Records go to stderr so that tables and JSON written to stdout by the CLI can
be piped. With ``[logging] json_format = true`` each record becomes a single
JSON line::

    {"ts": "2026-10-19T09:00:00Z", "level": "INFO", "logger": "...", "msg": "...", "client_id": 1}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wellness_coach.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Chatty dependency loggers held at WARNING regardless of the configured level.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """Render a record as one JSON object; ``extra=`` keys become top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "ts": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (name, value)
            for name, value in vars(record).items()
            if name not in _RESERVED and not name.startswith("_")
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and, if ``config.log_file`` is set, file) handlers on the root logger.

    Any handlers already on the root logger are replaced.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = (
        JsonLineFormatter()
        if config.json_format
        else logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    )

    handlers = [_handler(logging.StreamHandler(sys.stderr), level, formatter)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(logging.FileHandler(path, encoding="utf-8"), level, formatter))

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
