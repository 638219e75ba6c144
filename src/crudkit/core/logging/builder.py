"""
Logging builder: turn Settings into a `logging.config.dictConfig` mapping and apply it.

    setup_logging(get_settings())

Handler selection:

| LOG_TO_STDOUT | LOG_DIR | Handlers                      |
| ------------- | ------- | ----------------------------- |
| true          | any     | console + error_console       |
| false         | unset   | console + error_console       |
| false         | set     | console + file + error_file   |

`sqlalchemy.engine` is kept at WARNING unless ENABLE_SQL_LOGGING is on
(SQL statements may contain sensitive values).
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from ...config.settings import Settings
from .filters import RedactFilter, RequestIdFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)
from .levels import TRACE  # noqa: F401  registers the TRACE level name


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping.

    Contains:
      - formatters: "standard" (color in text mode, plain otherwise) and "json"
      - filters: "request_id", "redact"
      - handlers: chosen from LOG_TO_STDOUT / LOG_DIR (see module docstring)
      - loggers: root, crudkit, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": settings.SERVICE_NAME,
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # Library loggers inherit handlers from root; only the level is set here.
            "crudkit": {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration.

    Creates LOG_DIR when file logging is on, then applies the dictConfig. Every
    handler carries RequestIdFilter, so `%(request_id)s` resolves for all loggers.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
