"""
Logging setup for sage-advisor.

Library modules only ever call ``logging.getLogger(__name__)``.  Handlers are
installed in exactly one place, ``configure_logging()``, which the CLI calls
after loading ``AppConfig``; a hosting service embedding the engine may call
it instead or wire its own handlers.

Output goes to stderr, never stdout: ``sage-advisor advise --json`` prints
the result document on stdout and must stay parseable.

Line formats
------------
Plain (default)::

    2026-03-02T09:15:04Z [INFO] sage_advisor.advisory.engine: Advised on technology | ...

JSON lines (``[logging] json_format = true``)::

    {"ts": "2026-03-02T09:15:04Z", "level": "INFO",
     "logger": "sage_advisor.advisory.engine", "msg": "Advised on technology | ...",
     "domain": "technology", "returned": 3, "elapsed_ms": 0.412}

Keys passed through ``extra=`` (the engine attaches ``domain``, ``returned``
and ``elapsed_ms`` to each request line) appear at the top level of the JSON
object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sage_advisor.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """Render a record as a single JSON object (``ts``, ``level``, ``logger``, ``msg``)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_KEYS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def _formatter_for(config: "LoggingConfig") -> logging.Formatter:
    if config.json_format:
        return JsonLineFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def _attach(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Replaces any handlers already on the root logger, so calling it again
    with a different config takes effect.

    Args:
        config: ``AppConfig.logging``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = _formatter_for(config)

    handlers = [_attach(logging.StreamHandler(sys.stderr), level, formatter)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _attach(logging.FileHandler(log_path, encoding="utf-8"), level, formatter)
        )

    logging.basicConfig(level=level, handlers=handlers, force=True)
