"""CloudSync: let pydantic models save themselves to a document store.

A model opts in by subclassing CloudSync, naming its unique key and saying
where it lives:

```python
class Note(CloudSync):
    key_field = "key"
    config_provider = StaticConfigProvider(
        SyncConfig(project_id="demo", credential_path="./firebase.json", collection="notes")
    )

    key: str
    body: str

await Note(key="a1", body="hi").save()
notes = await Note.fetch_all_as_map()
```

Every operation resolves the config, opens a store session through the class's
connector and runs one short request/response sequence. Nothing is cached
between calls apart from what the connector's pooling strategy keeps.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from cloudsync.config import ConfigProvider, SyncConfig
from cloudsync.errors import CloudSyncError, ConfigurationError, SerializationError
from cloudsync.store.base import DocumentStore, StoreConnector
from cloudsync.store.firestore import FirestoreConnector

logger = logging.getLogger(__name__)

UniqueKey = str | int


def document_id(key: UniqueKey) -> str:
    """Return the document id for ``key``.

    Firestore reads ``/`` as a path separator and reserves ``.``, ``..`` and
    ``__name__``-style ids, so such keys would address a different document or
    be rejected by the server. Checked before any store call, for every backend.

    Raises:
        SerializationError: If the key cannot be used as a document id.
    """
    document_key = str(key)
    if not document_key:
        raise SerializationError("document key must be a non-empty string")
    if "/" in document_key:
        raise SerializationError(f"document key {document_key!r} must not contain '/'")
    if document_key in (".", "..") or (
        len(document_key) >= 4 and document_key.startswith("__") and document_key.endswith("__")
    ):
        raise SerializationError(f"document key {document_key!r} is reserved")
    return document_key


class CloudSync(BaseModel):
    """Base model granting save, remove and fetch operations against a store.

    Subclasses provide two primitives: the unique key, through ``key_field``
    or an override of ``sync_key()``, and the config, through
    ``config_provider`` or an override of ``config()``.

    Class attributes:
        key_field: Name of the field holding the unique key.
        config_provider: Resolves this type's SyncConfig.
        connector: Opens store sessions; Firestore unless replaced.
    """

    key_field: ClassVar[str | None] = None
    config_provider: ClassVar[ConfigProvider | None] = None
    connector: ClassVar[StoreConnector] = FirestoreConnector()

    def sync_key(self) -> UniqueKey:
        """Return the unique key of this object.

        The string form of the key is used as the document id.

        Raises:
            ConfigurationError: If ``key_field`` is unset or names no attribute.
        """
        field = type(self).key_field
        if field is None:
            raise ConfigurationError(
                f"{type(self).__name__} must set key_field or override sync_key()"
            )
        try:
            return getattr(self, field)
        except AttributeError as exc:
            raise ConfigurationError(
                f"key_field {field!r} is not an attribute of {type(self).__name__}"
            ) from exc

    @classmethod
    def config(cls) -> SyncConfig:
        """Return this type's SyncConfig.

        Raises:
            ConfigurationError: If no provider is set or it cannot resolve.
        """
        if cls.config_provider is None:
            raise ConfigurationError(
                f"{cls.__name__} has no config_provider and does not override config()"
            )
        return cls.config_provider.resolve(cls)

    async def save(self) -> None:
        """Save this object to its collection, replacing any previous version.

        Deletes the document at this object's key, then creates it again from
        the current state. The two steps are separate store calls: a concurrent
        reader can observe the key missing in between.
        """
        cls = type(self)
        cfg = cls._resolve_config("save")
        with cls._failures_logged("save", cfg):
            key = self._document_key()
            payload = self._to_document()
        async with cls._session("save", cfg, key) as store:
            await store.delete_document(cfg.collection, key)
            await store.create_document(cfg.collection, key, payload)
        cls._log_operation("save", cfg, key=key)

    async def remove(self) -> None:
        """Remove this object from its collection. A missing document is not an error."""
        cls = type(self)
        cfg = cls._resolve_config("remove")
        with cls._failures_logged("remove", cfg):
            key = self._document_key()
        async with cls._session("remove", cfg, key) as store:
            await store.delete_document(cfg.collection, key)
        cls._log_operation("remove", cfg, key=key)

    @classmethod
    async def fetch(cls, key: UniqueKey) -> Self | None:
        """Get the object stored under ``key``, or None if there is none."""
        cfg = cls._resolve_config("fetch")
        with cls._failures_logged("fetch", cfg):
            document_key = document_id(key)
        async with cls._session("fetch", cfg, document_key) as store:
            payload = await store.get_document(cfg.collection, document_key)
        cls._log_operation("fetch", cfg, key=document_key, count=0 if payload is None else 1)
        if payload is None:
            return None
        with cls._failures_logged("fetch", cfg, document_key):
            return cls._from_document(payload)

    @classmethod
    async def fetch_all(cls) -> list[Self]:
        """Get all objects from this type's collection.

        This is the typical way to iterate over every object of a type. Order
        is whatever the store returns.
        """
        cfg = cls._resolve_config("fetch_all")
        async with cls._session("fetch_all", cfg) as store:
            payloads = await store.query_documents(cfg.collection)
        with cls._failures_logged("fetch_all", cfg):
            objects = [cls._from_document(payload) for payload in payloads]
        cls._log_operation("fetch_all", cfg, count=len(objects))
        return objects

    @classmethod
    async def fetch_all_as_map(cls) -> dict[UniqueKey, Self]:
        """Get all objects from this type's collection keyed by their unique key.

        This is the typical way to find a specific object. Should two documents
        carry the same key, the later one wins.
        """
        objects = await cls.fetch_all()
        with cls._failures_logged("fetch_all_as_map"):
            return {obj.sync_key(): obj for obj in objects}

    def _document_key(self) -> str:
        return document_id(self.sync_key())

    def _to_document(self) -> dict[str, Any]:
        try:
            return self.model_dump(mode="json")
        except PydanticSerializationError as exc:
            raise SerializationError(f"cannot serialize {type(self).__name__}") from exc

    @classmethod
    def _from_document(cls, payload: dict[str, Any]) -> Self:
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise SerializationError(f"document is not a valid {cls.__name__}") from exc

    @classmethod
    def _resolve_config(cls, operation: str) -> SyncConfig:
        with cls._failures_logged(operation):
            return cls.config()

    @classmethod
    @contextmanager
    def _failures_logged(
        cls, operation: str, cfg: SyncConfig | None = None, key: str | None = None
    ) -> Iterator[None]:
        try:
            yield
        except CloudSyncError as exc:
            cls._log_failure(operation, exc, cfg=cfg, key=key)
            raise

    @classmethod
    @asynccontextmanager
    async def _session(
        cls, operation: str, cfg: SyncConfig, key: str | None = None
    ) -> AsyncIterator[DocumentStore]:
        try:
            async with cls.connector.session(cfg) as store:
                yield store
        except CloudSyncError as exc:
            cls._log_failure(operation, exc, cfg=cfg, key=key)
            raise

    @classmethod
    def _log_operation(
        cls,
        operation: str,
        cfg: SyncConfig,
        key: str | None = None,
        count: int | None = None,
    ) -> None:
        log_entry: dict[str, Any] = {
            "event": "cloudsync_operation",
            "operation": operation,
            "entity": cls.__name__,
            "project_id": cfg.project_id,
            "collection": cfg.collection,
        }
        if key is not None:
            log_entry["key"] = key
        if count is not None:
            log_entry["count"] = count
        logger.debug(json.dumps(log_entry))

    @classmethod
    def _log_failure(
        cls,
        operation: str,
        exc: CloudSyncError,
        cfg: SyncConfig | None = None,
        key: str | None = None,
    ) -> None:
        log_entry: dict[str, Any] = {
            "event": "cloudsync_operation_failed",
            "operation": operation,
            "entity": cls.__name__,
            "stage": exc.stage,
            "error": exc.message,
        }
        if cfg is not None:
            log_entry["collection"] = cfg.collection
        if key is not None:
            log_entry["key"] = key
        logger.warning(json.dumps(log_entry))
