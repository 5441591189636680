"""Process-local document store.

Documents live in a shared ``InMemoryBackend`` so several store sessions (one
per operation under NAIVE pooling) see the same data. Every call is counted,
which lets tests assert that nothing touched the store.
"""

from __future__ import annotations

import copy
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from cloudsync.config import SyncConfig
from cloudsync.errors import DocumentExistsError, TransportError
from cloudsync.store.base import DocumentStore, PoolingStrategy, StoreConnector


@dataclass
class InMemoryBackend:
    """Shared document data, keyed by project then collection then document key.

    Attributes:
        projects: Stored payloads.
        calls: Number of store calls per method name.
        connections: Number of sessions opened against this backend.
    """

    projects: dict[str, dict[str, dict[str, dict[str, Any]]]] = field(default_factory=dict)
    calls: Counter[str] = field(default_factory=Counter)
    connections: int = 0

    @property
    def interaction_count(self) -> int:
        """Total number of connections opened plus store calls made."""
        return self.connections + sum(self.calls.values())

    def collection(self, project_id: str, collection: str) -> dict[str, dict[str, Any]]:
        return self.projects.setdefault(project_id, {}).setdefault(collection, {})


class InMemoryDocumentStore(DocumentStore):
    """DocumentStore over an InMemoryBackend, scoped to one project."""

    def __init__(self, backend: InMemoryBackend, project_id: str) -> None:
        self._backend = backend
        self._project_id = project_id
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise TransportError("store connection is closed")

    async def create_document(self, collection: str, key: str, payload: dict[str, Any]) -> None:
        self._check_open()
        self._backend.calls["create_document"] += 1
        documents = self._backend.collection(self._project_id, collection)
        if key in documents:
            raise DocumentExistsError(collection, key)
        documents[key] = copy.deepcopy(payload)

    async def delete_document(self, collection: str, key: str) -> None:
        self._check_open()
        self._backend.calls["delete_document"] += 1
        self._backend.collection(self._project_id, collection).pop(key, None)

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        self._check_open()
        self._backend.calls["get_document"] += 1
        payload = self._backend.collection(self._project_id, collection).get(key)
        return copy.deepcopy(payload) if payload is not None else None

    async def query_documents(self, collection: str) -> list[dict[str, Any]]:
        self._check_open()
        self._backend.calls["query_documents"] += 1
        documents = self._backend.collection(self._project_id, collection)
        return [copy.deepcopy(payload) for payload in documents.values()]

    async def close(self) -> None:
        self._closed = True


class InMemoryConnector(StoreConnector):
    """Connector that opens sessions against a shared InMemoryBackend."""

    def __init__(
        self,
        backend: InMemoryBackend | None = None,
        pooling_strategy: PoolingStrategy = PoolingStrategy.NAIVE,
    ) -> None:
        super().__init__(pooling_strategy=pooling_strategy)
        self.backend = backend or InMemoryBackend()

    async def _open(self, config: SyncConfig) -> DocumentStore:
        self.backend.connections += 1
        return InMemoryDocumentStore(self.backend, config.project_id)
