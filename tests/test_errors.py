from __future__ import annotations

from functionable.errors import (
    ConcealedMemberError,
    DisabledOperationError,
    FunctionableError,
)


def test_disabled_operation_error_carries_operation() -> None:
    exc = DisabledOperationError("Public visibility is disabled.", operation="public")
    assert isinstance(exc, FunctionableError)
    assert str(exc) == "Public visibility is disabled."
    assert exc.operation == "public"


def test_concealed_member_error_message() -> None:
    exc = ConcealedMemberError(namespace="Slug", member="normalize")
    assert isinstance(exc, FunctionableError)
    assert str(exc) == "private method 'normalize' called for Slug"
    assert (exc.namespace, exc.member) == ("Slug", "normalize")
