"""Tests for the error taxonomy."""

from eventfold.domain import (
    DuplicateVersionError,
    ErrorCode,
    SaveError,
    UnhandledEventError,
)


def test_error_code_in_message():
    error = UnhandledEventError("UserCreated")

    assert error.code is ErrorCode.UNHANDLED_EVENT
    assert str(error) == "[UnhandledEvent] aggregate was unable to handle event - UserCreated"


def test_caused_by_walks_chain():
    try:
        try:
            raise DuplicateVersionError("u1")
        except DuplicateVersionError as e:
            raise SaveError("failed to save") from e
    except SaveError as error:
        assert error.caused_by(ErrorCode.DUPLICATE_VERSION)
        assert error.caused_by(ErrorCode.SAVE_ERROR)
        assert not error.caused_by(ErrorCode.NOT_FOUND)
        assert isinstance(error.cause, DuplicateVersionError)
