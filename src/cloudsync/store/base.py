"""Base protocols for the document store layer.

This module defines the DocumentStore protocol every backend implements and the
StoreConnector that turns a SyncConfig into an open store session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from cloudsync.config import SyncConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for an open connection to a document database."""

    async def create_document(self, collection: str, key: str, payload: dict[str, Any]) -> None:
        """Create a document at ``key``.

        Raises:
            DocumentExistsError: If a document already exists at ``key``.
            TransportError: If the request fails.
        """
        ...

    async def delete_document(self, collection: str, key: str) -> None:
        """Delete the document at ``key``. Deleting a missing key is a no-op."""
        ...

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        """Return the payload stored at ``key``, or None if there is none."""
        ...

    async def query_documents(self, collection: str) -> list[dict[str, Any]]:
        """Return the payloads of every document in ``collection``."""
        ...

    async def close(self) -> None:
        """Close the connection and release resources."""
        ...


class PoolingStrategy(Enum):
    """Connection pooling strategy for store sessions.

    Attributes:
        NAIVE: Opens a new store connection for each operation and closes it
               afterwards.
        OPTIMIZED: Keeps one connection per distinct SyncConfig and reuses it
                   until the connector is closed.
    """

    NAIVE = "naive"
    OPTIMIZED = "optimized"


class StoreConnector:
    """Opens DocumentStore sessions for a SyncConfig.

    Subclasses implement ``_open``; this class handles the pooling strategy.

    Args:
        pooling_strategy: Strategy for connection reuse (default: NAIVE).

    Example:
        ```python
        connector = FirestoreConnector(pooling_strategy=PoolingStrategy.OPTIMIZED)
        async with connector.session(config) as store:
            docs = await store.query_documents(config.collection)
        await connector.aclose()
        ```
    """

    def __init__(self, pooling_strategy: PoolingStrategy = PoolingStrategy.NAIVE) -> None:
        self._pooling_strategy = pooling_strategy
        self._pool: dict[SyncConfig, DocumentStore] = {}
        self._lock = asyncio.Lock()

    @property
    def pooling_strategy(self) -> PoolingStrategy:
        return self._pooling_strategy

    @property
    def name(self) -> str:
        """Short identifier of the backend, used in log entries."""
        return type(self).__name__

    async def _open(self, config: SyncConfig) -> DocumentStore:
        """Open a new store connection for ``config``.

        Raises:
            ConfigurationError: If ``config`` cannot be used to connect.
            TransportError: If the connection cannot be established.
        """
        raise NotImplementedError

    def _log(self, event: str, config: SyncConfig) -> None:
        log_entry = {
            "event": event,
            "connector": self.name,
            "pooling_strategy": self._pooling_strategy.value,
            "project_id": config.project_id,
        }
        logger.debug(json.dumps(log_entry))

    @asynccontextmanager
    async def session(self, config: SyncConfig) -> AsyncIterator[DocumentStore]:
        """Yield an open store for ``config``.

        Under NAIVE the store is closed when the block exits; under OPTIMIZED
        it stays in the pool.
        """
        if self._pooling_strategy == PoolingStrategy.NAIVE:
            store = await self._open(config)
            self._log("store_connection_opened", config)
            try:
                yield store
            finally:
                await store.close()
                self._log("store_connection_closed", config)
            return

        async with self._lock:
            store = self._pool.get(config)
            if store is None:
                store = await self._open(config)
                self._pool[config] = store
                self._log("store_connection_opened", config)
            else:
                self._log("store_connection_reused", config)
        yield store

    async def aclose(self) -> None:
        """Close every pooled connection."""
        async with self._lock:
            pooled = list(self._pool.items())
            self._pool.clear()
        for config, store in pooled:
            await store.close()
            self._log("store_connection_closed", config)

    async def __aenter__(self) -> StoreConnector:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
