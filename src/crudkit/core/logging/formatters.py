"""
Log formatters.

  - JsonFormatter: one JSON object per line for log collectors. Includes
    service/env/version/request_id plus any `extra={...}` fields, converting
    values that are not JSON-serializable to strings.
  - ColorFormatter: compact ANSI-colored lines for local development. The
    `extra={...}` fields (model, operation, key, ...) are appended as
    `key=value` pairs, since repository events carry their details there.

The builder picks one per handler from `LOG_FORMAT`.
"""

import json
import logging
from logging import LogRecord
from typing import Any, Iterator

from ...utils.logging import get_project_version

PROJECT_VERSION = get_project_version()

# Attributes every LogRecord has; anything else on the record came from `extra`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "request_id"}


def _extra_fields(record: LogRecord) -> Iterator[tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key in _RESERVED_ATTRS or key.startswith("_"):
            continue
        yield key, value


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Args:
        env: environment name (e.g. "development").
        service: logical service name.
        datefmt: passed to `logging.Formatter` for the timestamp.
    """

    def __init__(self, *, env: str | None = None, service: str = "crudkit", datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        for key, value in _extra_fields(record):
            if key in payload:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            payload[key] = value

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development formatter:

        TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE [| key=value ...]

    The level is colored; a traceback is appended on its own lines.
    """

    COLOR_CODES = {
        "TRACE": "\033[2m",         # dim
        "DEBUG": "\033[36m",        # cyan
        "INFO": "\033[32m",         # green
        "WARNING": "\033[33m",      # yellow
        "ERROR": "\033[31m",        # red
        "CRITICAL": "\033[1;41m",   # bold on red
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        parts = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:<8}{self.RESET}",
            f"{record.name:<40}",
            f"{getattr(record, 'request_id', '-'):<10}",
            record.getMessage(),
        ]
        extras = " ".join(f"{key}={value}" for key, value in _extra_fields(record))
        if extras:
            parts.append(extras)

        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line
