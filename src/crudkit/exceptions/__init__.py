# crudkit/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py      # App-level errors (NotFoundError, ConflictError, ...) and ErrorKind
# │   └── mapper.py    # Map any exception to an ErrorKind / JSON error payload

from .base import (
    ErrorKind,
    AppError,
    NotFoundError,
    BadRequestError,
    InvalidArgumentError,
    InvalidOperationError,
    ConflictError,
    UnauthorizedError,
    DomainError,
    ValidationError,
)
from .mapper import GENERIC_ERROR_MESSAGE, classify_exception, error_message, build_error_payload

__all__ = [
    "ErrorKind",
    "AppError",
    "NotFoundError",
    "BadRequestError",
    "InvalidArgumentError",
    "InvalidOperationError",
    "ConflictError",
    "UnauthorizedError",
    "DomainError",
    "ValidationError",
    "GENERIC_ERROR_MESSAGE",
    "classify_exception",
    "error_message",
    "build_error_payload",
]
