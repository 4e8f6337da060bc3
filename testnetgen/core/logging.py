"""testnetgen.core.logging

One root handler, configured once by the CLI. Everything else calls
`logging.getLogger(__name__)` and logs snake_case event names with `extra=`.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from testnetgen.core.config import LoggingConfig
from testnetgen.security.redaction import sanitize_for_log

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(sanitize_for_log(_extras(record)))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


class KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = sanitize_for_log(_extras(record))
        if not extras:
            return base
        kv = " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return f"{base} {kv}"


def configure_logging(cfg: LoggingConfig, *, stream: TextIO | None = None) -> None:
    handler = logging.StreamHandler(stream or sys.stderr)
    if cfg.json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(KeyValueFormatter("%(levelname)s %(name)s %(message)s"))

    root = logging.getLogger("testnetgen")
    root.handlers[:] = [handler]
    root.setLevel(cfg.level.upper())
    root.propagate = False
