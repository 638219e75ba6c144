"""
Logging filters.

RequestIdFilter
    Stamps `record.request_id` from a `contextvars.ContextVar`, so every log
    line emitted while serving a request carries that request's id, across
    awaits and tasks. Falls back to "-" so `%(request_id)s` never fails.

RedactFilter
    Masks record attributes whose name looks sensitive (passwords, tokens, ...),
    typically values passed through `extra={...}`.

Both filters only annotate records; they always return True.
"""

import contextvars
import logging
from logging import LogRecord

# Request id of the current execution context; None when no request is being served.
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """
    Set the request id for the current context.

    Returns:
        The token to pass to `reset_request_id()`.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee a `request_id` attribute on every record.

    Precedence: an explicit `extra={"request_id": ...}`, then the contextvar, then "-".
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {
        "password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "ssn",
        "authorization",
    }
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
