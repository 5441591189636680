"""Tests for package-level exports."""

from __future__ import annotations


class TestPackageExports:
    """Test cases for top-level package imports."""

    def test_import_cloudsync(self) -> None:
        """CloudSync should be importable from cloudsync."""
        from cloudsync import CloudSync

        assert CloudSync is not None

    def test_import_config_types(self) -> None:
        from cloudsync import EnvConfigProvider, StaticConfigProvider, SyncConfig

        assert SyncConfig is not None
        assert StaticConfigProvider is not None
        assert EnvConfigProvider is not None

    def test_errors_share_base(self) -> None:
        from cloudsync import (
            CloudSyncError,
            ConfigurationError,
            SerializationError,
            TransportError,
        )

        for error_type in (ConfigurationError, SerializationError, TransportError):
            assert issubclass(error_type, CloudSyncError)

    def test_default_connector_is_firestore(self) -> None:
        from cloudsync import CloudSync, FirestoreConnector, PoolingStrategy

        assert isinstance(CloudSync.connector, FirestoreConnector)
        assert CloudSync.connector.pooling_strategy == PoolingStrategy.NAIVE

    def test_all_exports_match_declared(self) -> None:
        """All items in __all__ should be importable."""
        import cloudsync

        for name in cloudsync.__all__:
            assert hasattr(cloudsync, name), f"{name} not found in cloudsync"
