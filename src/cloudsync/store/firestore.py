"""Firestore document store using google.cloud.firestore.AsyncClient.

This is the production backend. Credentials come from the service-account key
file named in the SyncConfig, or from application-default credentials when the
config carries no path.
"""

from __future__ import annotations

import inspect
from pathlib import Path
from typing import Any

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.oauth2 import service_account

from cloudsync.config import SyncConfig
from cloudsync.errors import ConfigurationError, DocumentExistsError, TransportError
from cloudsync.store.base import DocumentStore, PoolingStrategy, StoreConnector

# Errors from the client library that mean the request did not go through.
_TRANSPORT_ERRORS = (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


def load_credentials(credential_path: str) -> service_account.Credentials:
    """Load service-account credentials from a JSON key file.

    Raises:
        ConfigurationError: If the file is missing or is not a valid key file.
    """
    path = Path(credential_path)
    if not path.is_file():
        raise ConfigurationError(f"credential file {credential_path!r} does not exist")
    try:
        return service_account.Credentials.from_service_account_file(str(path))
    except (ValueError, KeyError, OSError) as exc:
        raise ConfigurationError(
            f"credential file {credential_path!r} is not a valid service-account key"
        ) from exc


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore over a Firestore AsyncClient.

    Example:
        ```python
        store = FirestoreDocumentStore(firestore.AsyncClient(project="demo"))
        await store.delete_document("notes", "a1")
        ```
    """

    def __init__(self, client: firestore.AsyncClient) -> None:
        self._client = client

    @property
    def client(self) -> firestore.AsyncClient:
        return self._client

    async def create_document(self, collection: str, key: str, payload: dict[str, Any]) -> None:
        document = self._client.collection(collection).document(key)
        try:
            await document.create(payload)
        except api_exceptions.AlreadyExists as exc:
            raise DocumentExistsError(collection, key) from exc
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"create of {key!r} in {collection!r} failed") from exc

    async def delete_document(self, collection: str, key: str) -> None:
        document = self._client.collection(collection).document(key)
        try:
            await document.delete()
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"delete of {key!r} in {collection!r} failed") from exc

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        document = self._client.collection(collection).document(key)
        try:
            snapshot = await document.get()
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"get of {key!r} in {collection!r} failed") from exc
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def query_documents(self, collection: str) -> list[dict[str, Any]]:
        payloads: list[dict[str, Any]] = []
        try:
            async for snapshot in self._client.collection(collection).stream():
                payloads.append(snapshot.to_dict())
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"query of {collection!r} failed") from exc
        return payloads

    async def close(self) -> None:
        """Close the underlying client's transport."""
        close = getattr(self._client, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result


class FirestoreConnector(StoreConnector):
    """Connector that opens Firestore clients from a SyncConfig.

    Args:
        pooling_strategy: NAIVE builds a client per operation; OPTIMIZED keeps
            one client per config.
        database: Firestore database id, None for the project's default.
    """

    def __init__(
        self,
        pooling_strategy: PoolingStrategy = PoolingStrategy.NAIVE,
        database: str | None = None,
    ) -> None:
        super().__init__(pooling_strategy=pooling_strategy)
        self._database = database

    async def _open(self, config: SyncConfig) -> DocumentStore:
        credentials = None
        if config.credential_path is not None:
            credentials = load_credentials(config.credential_path)
        try:
            client = firestore.AsyncClient(
                project=config.project_id,
                credentials=credentials,
                database=self._database,
            )
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(
                f"cannot connect to Firestore project {config.project_id!r}"
            ) from exc
        return FirestoreDocumentStore(client)
