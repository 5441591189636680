"""cloudsync: save pydantic models to Firestore without hand-written client calls.

Subclass CloudSync, name the key field and a config provider, and the model
gains ``save``, ``remove``, ``fetch``, ``fetch_all`` and ``fetch_all_as_map``.
"""

from cloudsync.binding import CloudSync, UniqueKey
from cloudsync.config import (
    ConfigProvider,
    EnvConfigProvider,
    StaticConfigProvider,
    SyncConfig,
)
from cloudsync.errors import (
    CloudSyncError,
    ConfigurationError,
    DocumentExistsError,
    SerializationError,
    TransportError,
)
from cloudsync.store import (
    DocumentStore,
    FirestoreConnector,
    InMemoryConnector,
    PoolingStrategy,
    SqliteConnector,
    StoreConnector,
)

__version__ = "0.1.0"

__all__ = [
    "CloudSync",
    "CloudSyncError",
    "ConfigProvider",
    "ConfigurationError",
    "DocumentExistsError",
    "DocumentStore",
    "EnvConfigProvider",
    "FirestoreConnector",
    "InMemoryConnector",
    "PoolingStrategy",
    "SerializationError",
    "SqliteConnector",
    "StaticConfigProvider",
    "StoreConnector",
    "SyncConfig",
    "TransportError",
    "UniqueKey",
]
