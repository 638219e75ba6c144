"""
Map exceptions to an `ErrorKind` and to the JSON error payload.

| Exception                                 | Kind         | Status |
| ----------------------------------------- | ------------ | ------ |
| `InvalidArgumentError`, `BadRequestError` | BAD_REQUEST  | 400    |
| `KeyError`, `NotFoundError`               | NOT_FOUND    | 404    |
| `UnauthorizedError`, `PermissionError`    | UNAUTHORIZED | 401    |
| `ConflictError`                           | CONFLICT     | 409    |
| anything else                             | UNEXPECTED   | 500    |

Unexpected errors never expose their own message; clients get
`GENERIC_ERROR_MESSAGE` instead.
"""
from .base import (
    BadRequestError,
    ConflictError,
    ErrorKind,
    InvalidArgumentError,
    NotFoundError,
    UnauthorizedError,
)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."

# Checked in order; the first matching row wins.
_KIND_BY_TYPE: tuple[tuple[tuple[type[BaseException], ...], ErrorKind], ...] = (
    ((InvalidArgumentError, BadRequestError), ErrorKind.BAD_REQUEST),
    ((NotFoundError, KeyError), ErrorKind.NOT_FOUND),
    ((UnauthorizedError, PermissionError), ErrorKind.UNAUTHORIZED),
    ((ConflictError,), ErrorKind.CONFLICT),
)


def classify_exception(exc: BaseException) -> ErrorKind:
    """Return the ErrorKind for `exc`, `ErrorKind.UNEXPECTED` when nothing matches."""
    for types, kind in _KIND_BY_TYPE:
        if isinstance(exc, types):
            return kind
    return ErrorKind.UNEXPECTED


def error_message(exc: BaseException) -> str:
    """
    Client-facing message of `exc`.

    KeyError's str() wraps the key in quotes, so its first argument is used instead.
    """
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


def build_error_payload(exc: BaseException) -> tuple[int, dict]:
    """
    Return `(status_code, payload)` for `exc`.

    Payload shape:
        {"status": 404, "error": "Widget with Id A1 was not found."}
    """
    kind = classify_exception(exc)
    if kind is ErrorKind.UNEXPECTED:
        message = GENERIC_ERROR_MESSAGE
    else:
        message = error_message(exc)
    return kind.status_code, {"status": kind.status_code, "error": message}


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "classify_exception",
    "error_message",
    "build_error_payload",
]
