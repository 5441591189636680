"""Document store backends and connectors."""

from cloudsync.store.base import DocumentStore, PoolingStrategy, StoreConnector
from cloudsync.store.firestore import FirestoreConnector, FirestoreDocumentStore
from cloudsync.store.memory import InMemoryBackend, InMemoryConnector, InMemoryDocumentStore
from cloudsync.store.sqlite import SqliteConnector, SqliteDocumentStore, SqliteStoreConfig

__all__ = [
    "DocumentStore",
    "FirestoreConnector",
    "FirestoreDocumentStore",
    "InMemoryBackend",
    "InMemoryConnector",
    "InMemoryDocumentStore",
    "PoolingStrategy",
    "SqliteConnector",
    "SqliteDocumentStore",
    "SqliteStoreConfig",
    "StoreConnector",
]
