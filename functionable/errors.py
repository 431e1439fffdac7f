from __future__ import annotations

from functionable.types import Operation


class FunctionableError(Exception):
    """Base class for errors raised by guarded namespaces."""


class DisabledOperationError(FunctionableError):
    """A guarded namespace rejected a mutation.

    Rejections are permanent policy decisions. Callers match on the message,
    which names the operation and the offending member, or on `operation`.
    """

    def __init__(self, message: str, *, operation: Operation) -> None:
        super().__init__(message)
        self.operation = operation


class ConcealedMemberError(FunctionableError):
    """A concealed member was reached from outside its namespace."""

    def __init__(self, *, namespace: str, member: str) -> None:
        super().__init__(f"private method {member!r} called for {namespace}")
        self.namespace = namespace
        self.member = member
