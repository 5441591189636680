"""Tests for the cloudsync error taxonomy."""

from __future__ import annotations

import pytest

from cloudsync.errors import (
    CloudSyncError,
    ConfigurationError,
    DocumentExistsError,
    SerializationError,
    TransportError,
)


@pytest.mark.parametrize(
    ("error_type", "stage"),
    [
        (ConfigurationError, "config"),
        (TransportError, "transport"),
        (SerializationError, "serialization"),
    ],
)
def test_stage_is_reported(error_type: type[CloudSyncError], stage: str) -> None:
    error = error_type("boom")

    assert isinstance(error, CloudSyncError)
    assert error.stage == stage
    assert error.message == "boom"
    assert str(error) == f"[{stage}] boom"


def test_document_exists_is_transport_error() -> None:
    error = DocumentExistsError("notes", "a1")

    assert isinstance(error, TransportError)
    assert error.stage == "transport"
    assert error.collection == "notes"
    assert error.key == "a1"
    assert "'a1'" in str(error)


def test_cause_is_chained() -> None:
    original = ConnectionError("reset by peer")

    with pytest.raises(TransportError) as exc_info:
        try:
            raise original
        except ConnectionError as exc:
            raise TransportError("request failed") from exc

    assert exc_info.value.__cause__ is original
