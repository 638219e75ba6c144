"""
Application-level exceptions raised by repositories, the unit of work and services.

These are the errors the rest of the application should raise and catch.
The HTTP layer (see `crudkit.api.middleware`) turns them into JSON responses
through `crudkit.exceptions.mapper`; nothing below this layer suppresses them.
"""

from enum import Enum
from typing import Any, Iterable


class ErrorKind(Enum):
    """
    HTTP outcome of an exception. The value is the status code sent to the client.
    """

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    CONFLICT = 409
    UNEXPECTED = 500

    @property
    def status_code(self) -> int:
        return self.value


class AppError(Exception):
    """
    Base exception for crudkit errors.

    - message: human-friendly message (safe to show to clients)
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Entity or key is absent."""

    def __init__(self, message: str | None = None, *, entity_name: str | None = None, key: Any = None):
        if message is None:
            message = f"{entity_name or 'Entity'} with Id {key} was not found."
        super().__init__(message)
        self.entity_name = entity_name
        self.key = key


class BadRequestError(AppError):
    """Malformed caller input."""


class InvalidArgumentError(AppError, ValueError):
    """A required argument is missing or empty."""

    def __init__(self, param_name: str, message: str | None = None):
        super().__init__(message or f"{param_name} cannot be null")
        self.param_name = param_name


class InvalidOperationError(AppError, RuntimeError):
    """The call is not valid for the object's current state (e.g. the entity key is not set)."""


class ConflictError(AppError):
    """The resource is in a state that conflicts with the request."""


class UnauthorizedError(AppError):
    """Access denied."""


class DomainError(AppError):
    """
    Business-rule violation.

    The optional `inner` exception is chained as `__cause__`, the same as
    `raise DomainError(...) from inner`.
    """

    def __init__(self, message: str = "", inner: BaseException | None = None):
        super().__init__(message)
        if inner is not None:
            self.__cause__ = inner

    @property
    def inner(self) -> BaseException | None:
        return self.__cause__


class ValidationError(AppError):
    """One or more human-readable validation messages."""

    def __init__(self, errors: Iterable[str]):
        super().__init__("One or more validation errors occurred.")
        self.errors = list(errors)


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
]
