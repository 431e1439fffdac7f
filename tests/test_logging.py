from __future__ import annotations

import json
import logging

import pytest

from functionable.errors import DisabledOperationError
from functionable.logging import StructuredFormatter, setup_logging
from functionable.policy import Functionable


def test_setup_logging_adds_handler_and_is_idempotent() -> None:
    root = logging.getLogger()
    # Clear any existing handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    setup_logging("DEBUG")
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)
    count = len(root.handlers)

    # Calling again should not add duplicate handlers
    setup_logging("DEBUG")
    assert len(root.handlers) == count


def test_structured_formatter_includes_context_fields() -> None:
    record = logging.LogRecord(
        name="functionable.policy",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg="Promoted member",
        args=None,
        exc_info=None,
    )
    record.namespace = "Slug"
    record.member = "make"

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "Promoted member"
    assert data["level"] == "DEBUG"
    assert data["namespace"] == "Slug"
    assert data["member"] == "make"
    assert "operation" not in data


def test_promotion_and_rejection_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="functionable")

    class Slug(metaclass=Functionable):
        def make(text: str) -> str:
            return text.lower()

    promoted = [r for r in caplog.records if r.getMessage() == "Promoted member"]
    assert [getattr(r, "member", None) for r in promoted] == ["make"]

    caplog.clear()
    with pytest.raises(DisabledOperationError, match="Public visibility is disabled."):
        Slug.public()
    rejected = [
        r for r in caplog.records if r.getMessage() == "Rejected disabled operation"
    ]
    assert [getattr(r, "operation", None) for r in rejected] == ["public"]
