"""Sync configuration and the providers that resolve it.

A SyncConfig says where objects of one type live: which project, which
credentials, which collection. Providers produce it either from an explicit
value or from a snapshot of the process environment taken once at startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from cloudsync.errors import ConfigurationError

PROJECT_ID_VAR = "CLOUDSYNC_PROJECT_ID"
CREDENTIALS_VAR = "CLOUDSYNC_CREDENTIALS"
COLLECTION_PREFIX_VAR = "CLOUDSYNC_COLLECTION_PREFIX"
DEFAULT_CREDENTIAL_PATH = "./firebase.json"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Connection and placement parameters for one entity type.

    Instances are hashable and double as the key for pooled connections.

    Attributes:
        project_id: Name of the Google Cloud / Firebase project.
        credential_path: Path to the service-account JSON key file, or None to
            fall back to application-default credentials.
        collection: Name of the collection documents of this type are saved to.
    """

    project_id: str
    credential_path: str | None
    collection: str

    def __post_init__(self) -> None:
        if not self.project_id or not self.project_id.strip():
            raise ConfigurationError("project_id must be a non-empty string")
        if not self.collection or not self.collection.strip():
            raise ConfigurationError("collection must be a non-empty string")
        if "/" in self.collection:
            raise ConfigurationError(
                f"collection {self.collection!r} must not contain '/'"
            )


@runtime_checkable
class ConfigProvider(Protocol):
    """Resolves the SyncConfig for an entity type."""

    def resolve(self, entity_type: type) -> SyncConfig:
        """Return the config for ``entity_type``.

        Must be deterministic and free of side effects.

        Raises:
            ConfigurationError: If the config cannot be resolved.
        """
        ...


class StaticConfigProvider:
    """Returns the same explicit SyncConfig for every type it is asked about."""

    def __init__(self, config: SyncConfig) -> None:
        self._config = config

    @property
    def config(self) -> SyncConfig:
        return self._config

    def resolve(self, entity_type: type) -> SyncConfig:
        return self._config


class EnvConfigProvider:
    """Environment-driven provider.

    The project id comes from an environment variable, the credential path is
    fixed unless overridden, and the collection is named after the entity type.
    The environment is read once when the provider is built, never during an
    operation, so tests can hand in a plain dict.

    Args:
        environ: Mapping to read variables from. Defaults to ``os.environ``.
        project_id_var: Name of the variable holding the project id.

    Example:
        ```python
        class Note(CloudSync):
            config_provider: ClassVar[ConfigProvider] = EnvConfigProvider()
        ```
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        project_id_var: str = PROJECT_ID_VAR,
    ) -> None:
        env = dict(os.environ if environ is None else environ)
        self._project_id_var = project_id_var
        self._project_id = (env.get(project_id_var) or "").strip() or None
        self._credential_path = env.get(CREDENTIALS_VAR) or DEFAULT_CREDENTIAL_PATH
        self._collection_prefix = env.get(COLLECTION_PREFIX_VAR, "")

    @classmethod
    def from_env(cls) -> EnvConfigProvider:
        """Build a provider from the current process environment."""
        return cls(os.environ)

    def resolve(self, entity_type: type) -> SyncConfig:
        """Build the SyncConfig for ``entity_type``.

        Raises:
            ConfigurationError: If the project id variable was unset or blank.
        """
        if self._project_id is None:
            raise ConfigurationError(
                f"environment variable {self._project_id_var} is not set; "
                f"cannot resolve project for {entity_type.__name__}"
            )
        return SyncConfig(
            project_id=self._project_id,
            credential_path=self._credential_path,
            collection=f"{self._collection_prefix}{entity_type.__name__}",
        )
