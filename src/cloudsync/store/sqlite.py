"""SQLite-backed document store using aiosqlite.

Stores each document as a JSON text column keyed by (project, collection,
key). Useful for running an application offline against the same binding it
uses in production.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosqlite

from cloudsync.config import SyncConfig
from cloudsync.errors import DocumentExistsError, SerializationError, TransportError
from cloudsync.store.base import DocumentStore, PoolingStrategy, StoreConnector


@dataclass(frozen=True, slots=True)
class SqliteStoreConfig:
    """Configuration for SqliteDocumentStore.

    Attributes:
        db_path: Path to the SQLite database file.
        table_name: Name of the table documents are kept in.
    """

    db_path: Path
    table_name: str = "documents"


class SqliteDocumentStore(DocumentStore):
    """DocumentStore backed by a single SQLite table.

    Example:
        ```python
        store = await SqliteDocumentStore.open(SqliteStoreConfig(Path("dev.db")), "demo")
        await store.create_document("notes", "a1", {"key": "a1", "body": "hi"})
        await store.close()
        ```
    """

    def __init__(self, db: aiosqlite.Connection, config: SqliteStoreConfig, project_id: str) -> None:
        self._db = db
        self._config = config
        self._project_id = project_id

    @classmethod
    async def open(cls, config: SqliteStoreConfig, project_id: str) -> SqliteDocumentStore:
        """Open the database and create the documents table if needed."""
        try:
            db = await aiosqlite.connect(config.db_path, isolation_level=None)
        except (aiosqlite.Error, OSError) as exc:
            raise TransportError(f"cannot open sqlite store at {config.db_path}") from exc
        try:
            await db.execute("PRAGMA journal_mode = WAL")
            await db.execute("PRAGMA synchronous = NORMAL")
            await db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {config.table_name} (
                    project_id TEXT NOT NULL,
                    collection TEXT NOT NULL,
                    doc_key TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at REAL DEFAULT (strftime('%s', 'now')),
                    PRIMARY KEY (project_id, collection, doc_key)
                )
                """
            )
        except aiosqlite.Error as exc:
            await db.close()
            raise TransportError(f"cannot initialise sqlite store at {config.db_path}") from exc
        return cls(db, config, project_id)

    async def create_document(self, collection: str, key: str, payload: dict[str, Any]) -> None:
        try:
            encoded = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"payload for {key!r} is not JSON serializable") from exc

        try:
            await self._db.execute(
                f"""
                INSERT INTO {self._config.table_name} (project_id, collection, doc_key, payload)
                VALUES (?, ?, ?, ?)
                """,
                (self._project_id, collection, key, encoded),
            )
        except aiosqlite.IntegrityError as exc:
            raise DocumentExistsError(collection, key) from exc
        except aiosqlite.Error as exc:
            raise TransportError(f"create of {key!r} in {collection!r} failed") from exc

    async def delete_document(self, collection: str, key: str) -> None:
        try:
            await self._db.execute(
                f"DELETE FROM {self._config.table_name} "
                "WHERE project_id = ? AND collection = ? AND doc_key = ?",
                (self._project_id, collection, key),
            )
        except aiosqlite.Error as exc:
            raise TransportError(f"delete of {key!r} in {collection!r} failed") from exc

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        try:
            cursor = await self._db.execute(
                f"SELECT payload FROM {self._config.table_name} "
                "WHERE project_id = ? AND collection = ? AND doc_key = ?",
                (self._project_id, collection, key),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise TransportError(f"get of {key!r} in {collection!r} failed") from exc
        if row is None:
            return None
        return self._decode(row[0])

    async def query_documents(self, collection: str) -> list[dict[str, Any]]:
        try:
            cursor = await self._db.execute(
                f"SELECT payload FROM {self._config.table_name} "
                "WHERE project_id = ? AND collection = ? ORDER BY created_at, rowid",
                (self._project_id, collection),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise TransportError(f"query of {collection!r} failed") from exc
        return [self._decode(row[0]) for row in rows]

    def _decode(self, raw: str) -> dict[str, Any]:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SerializationError("stored payload is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise SerializationError("stored payload is not a JSON object")
        return payload

    async def close(self) -> None:
        await self._db.close()


class SqliteConnector(StoreConnector):
    """Connector that opens SqliteDocumentStore sessions on one database file."""

    def __init__(
        self,
        config: SqliteStoreConfig,
        pooling_strategy: PoolingStrategy = PoolingStrategy.NAIVE,
    ) -> None:
        super().__init__(pooling_strategy=pooling_strategy)
        self._config = config

    async def _open(self, config: SyncConfig) -> DocumentStore:
        return await SqliteDocumentStore.open(self._config, config.project_id)
