"""Unit tests for domain exceptions."""

import pytest

from permset.domain.exceptions import (
    Conflict,
    DatabaseError,
    Forbidden,
    InternalError,
    NotFound,
    PermsetError,
    Unauthorized,
    ValidationFailed,
)


@pytest.mark.parametrize(
    "cls",
    [NotFound, Conflict, ValidationFailed, DatabaseError, InternalError, Unauthorized, Forbidden],
)
def test_inherits_permset_error(cls: type) -> None:
    assert issubclass(cls, PermsetError)


def test_default_message_from_code() -> None:
    error = NotFound()
    assert error.code == "PERMISSION_NOT_FOUND"
    assert error.message == "Permission not found"
    assert str(error) == "Permission not found"


def test_code_override_changes_default_message() -> None:
    error = NotFound(code="PERMISSION_SET_NOT_FOUND")
    assert error.message == "Permission set not found"
    assert NotFound.code == "PERMISSION_NOT_FOUND"


def test_to_dict_includes_field_only_when_set() -> None:
    assert Conflict().to_dict() == {"code": "DUPLICATE_ENTRY", "message": "Duplicate entry"}
    body = ValidationFailed("bad org", field="organization_id").to_dict()
    assert body == {
        "code": "VALIDATION_FAILED",
        "message": "bad org",
        "field": "organization_id",
    }


def test_catchable_as_permset_error() -> None:
    with pytest.raises(PermsetError, match="Database operation failed"):
        raise DatabaseError()
