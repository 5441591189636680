"""Error taxonomy for cloudsync operations.

Every failure raised by the binding or a store derives from CloudSyncError and
carries the stage it happened in, so callers can tell a bad configuration from
a failed store call without inspecting messages. The underlying exception, when
there is one, is chained as ``__cause__``.
"""


class CloudSyncError(Exception):
    """Base class for all cloudsync failures."""

    stage: str = "unknown"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class ConfigurationError(CloudSyncError):
    """Raised when a SyncConfig cannot be resolved or is invalid.

    Covers a missing environment variable, an empty project id or collection,
    and an unreadable credential file. Never retried.
    """

    stage = "config"


class TransportError(CloudSyncError):
    """Raised when connecting to the store or a store request fails."""

    stage = "transport"


class DocumentExistsError(TransportError):
    """Raised when creating a document at a key that is already occupied."""

    def __init__(self, collection: str, key: str) -> None:
        super().__init__(f"document {key!r} already exists in collection {collection!r}")
        self.collection = collection
        self.key = key


class SerializationError(CloudSyncError):
    """Raised when an entity cannot be converted to or from a document payload."""

    stage = "serialization"
