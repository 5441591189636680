"""Pytest configuration and fixtures for cloudsync tests."""

from __future__ import annotations

from typing import ClassVar

import pytest

from cloudsync import CloudSync, StaticConfigProvider, SyncConfig
from cloudsync.store.memory import InMemoryBackend, InMemoryConnector


class TestObj(CloudSync):
    """Entity used across the binding tests."""

    __test__ = False

    key_field: ClassVar[str | None] = "key"

    key: str
    data: str


class Score(CloudSync):
    """Entity keyed by an integer id."""

    key_field: ClassVar[str | None] = "id"

    id: int
    value: int = 0


@pytest.fixture()
def testing_config() -> SyncConfig:
    """Config pointing at the "testing" collection."""
    return SyncConfig(
        project_id="cloudsync-testing",
        credential_path="./firebase.json",
        collection="testing",
    )


@pytest.fixture()
def backend() -> InMemoryBackend:
    """Provide an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture()
def memory_connector(backend: InMemoryBackend) -> InMemoryConnector:
    """Connector opening a new session per operation against ``backend``."""
    return InMemoryConnector(backend)


@pytest.fixture()
def test_obj_type(
    monkeypatch: pytest.MonkeyPatch,
    memory_connector: InMemoryConnector,
    testing_config: SyncConfig,
) -> type[TestObj]:
    """TestObj wired to the in-memory store and the "testing" collection."""
    monkeypatch.setattr(TestObj, "connector", memory_connector)
    monkeypatch.setattr(TestObj, "config_provider", StaticConfigProvider(testing_config))
    return TestObj


@pytest.fixture()
def score_type(
    monkeypatch: pytest.MonkeyPatch,
    memory_connector: InMemoryConnector,
    testing_config: SyncConfig,
) -> type[Score]:
    """Score wired to the in-memory store and its own collection."""
    config = SyncConfig(
        project_id=testing_config.project_id,
        credential_path=None,
        collection="counters",
    )
    monkeypatch.setattr(Score, "connector", memory_connector)
    monkeypatch.setattr(Score, "config_provider", StaticConfigProvider(config))
    return Score
