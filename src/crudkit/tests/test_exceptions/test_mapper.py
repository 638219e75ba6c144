import json

import pytest

from crudkit.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    ErrorKind,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from crudkit.exceptions.mapper import (
    GENERIC_ERROR_MESSAGE,
    build_error_payload,
    classify_exception,
    error_message,
)


@pytest.mark.parametrize(
    "exc, kind",
    [
        (InvalidArgumentError("name"), ErrorKind.BAD_REQUEST),
        (BadRequestError("bad"), ErrorKind.BAD_REQUEST),
        (NotFoundError(entity_name="Widget", key=1), ErrorKind.NOT_FOUND),
        (KeyError("missing"), ErrorKind.NOT_FOUND),
        (UnauthorizedError("no"), ErrorKind.UNAUTHORIZED),
        (PermissionError("no"), ErrorKind.UNAUTHORIZED),
        (ConflictError("taken"), ErrorKind.CONFLICT),
        (InvalidOperationError("not now"), ErrorKind.UNEXPECTED),
        (DomainError("rule"), ErrorKind.UNEXPECTED),
        (ValidationError(["x"]), ErrorKind.UNEXPECTED),
        (ValueError("plain"), ErrorKind.UNEXPECTED),
    ],
)
def test_classify_exception(exc, kind):
    assert classify_exception(exc) is kind


def test_status_codes_follow_kind():
    assert [k.status_code for k in ErrorKind] == [400, 401, 404, 409, 500]


def test_invalid_argument_is_still_a_value_error():
    # Caught by callers that only know about ValueError, but still a 400.
    exc = InvalidArgumentError("entity")
    assert isinstance(exc, ValueError)
    assert classify_exception(exc) is ErrorKind.BAD_REQUEST


def test_key_error_message_is_unquoted():
    assert str(KeyError("Item 42")) == "'Item 42'"
    assert error_message(KeyError("Item 42")) == "Item 42"
    assert error_message(KeyError()) == ""


def test_payload_for_client_error():
    status, payload = build_error_payload(NotFoundError(entity_name="Widget", key="A1"))

    assert status == 404
    assert json.loads(json.dumps(payload)) == {"status": 404, "error": "Widget with Id A1 was not found."}


def test_payload_for_unexpected_error_hides_message():
    status, payload = build_error_payload(RuntimeError("connection string leaked"))

    assert status == 500
    assert payload == {"status": 500, "error": GENERIC_ERROR_MESSAGE}


class TestExceptionTypes:

    def test_not_found_explicit_message_wins(self):
        exc = NotFoundError("Gone.", entity_name="Widget", key=7)
        assert str(exc) == "Gone."
        assert (exc.entity_name, exc.key) == ("Widget", 7)

    def test_not_found_without_entity_name(self):
        assert str(NotFoundError(key=3)) == "Entity with Id 3 was not found."

    def test_invalid_argument_default_and_custom_message(self):
        assert str(InvalidArgumentError("name")) == "name cannot be null"
        assert str(InvalidArgumentError("id", "ID cannot be null or empty")) == "ID cannot be null or empty"
        assert InvalidArgumentError("name").param_name == "name"

    def test_domain_error_chains_inner(self):
        inner = ValueError("negative stock")
        exc = DomainError("Stock rule violated", inner)

        assert exc.inner is inner
        assert exc.__cause__ is inner
        assert DomainError("no cause").inner is None

    def test_validation_error_keeps_messages(self):
        exc = ValidationError(m for m in ["name is required", "quantity must be >= 0"])

        assert str(exc) == "One or more validation errors occurred."
        assert exc.errors == ["name is required", "quantity must be >= 0"]
