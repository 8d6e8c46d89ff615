"""Tests for the RavenDB substrate."""

import os
from unittest.mock import MagicMock, patch

import pytest

from docsgpt.service.database import (
    RavenDBConfig,
    RavenDBSubstrate,
    StoredValue,
    create_database,
    create_document_store,
    database_exists,
)
from docsgpt.state import PersistenceCodec, SubstrateError


@pytest.fixture
def mock_store():
    """Patch DocumentStore and return the store plus the session it opens."""
    with patch("docsgpt.service.database.substrate.DocumentStore") as mock_document_store_class:
        store = MagicMock()
        session = MagicMock()
        store.open_session.return_value.__enter__.return_value = session
        mock_document_store_class.return_value = store
        yield store, session, mock_document_store_class


class TestRavenDBConfig:
    """Tests for RavenDBConfig."""

    def test_from_env(self):
        with patch.dict(os.environ, {"RAVENDB_URL": "http://env:8080", "RAVENDB_DATABASE": "envdb"}):
            config = RavenDBConfig.from_env()

        assert config == RavenDBConfig(url="http://env:8080", database="envdb")
        assert config.admin_url == "http://env:8080/admin/databases"

    def test_explicit_values_win(self):
        with patch.dict(os.environ, {"RAVENDB_URL": "http://env:8080"}):
            config = RavenDBConfig.from_env("http://custom:9090/", "custom")

        assert config.url == "http://custom:9090/"
        assert config.admin_url == "http://custom:9090/admin/databases"

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RavenDBConfig.from_env()

        assert config.url == "http://localhost:8080"
        assert config.database == "docsgpt"


class TestCreateDocumentStore:
    """Tests for create_document_store function."""

    def test_creates_document_store_with_defaults(self, mock_store):
        """Test that create_document_store creates a DocumentStore with default config."""
        store, _, mock_document_store_class = mock_store

        with patch.dict(
            os.environ,
            {"RAVENDB_URL": "http://test:8080", "RAVENDB_DATABASE": "testdb"},
        ):
            result = create_document_store()

        mock_document_store_class.assert_called_once_with(["http://test:8080"], "testdb")
        store.initialize.assert_called_once()
        assert result is store


class TestDatabaseExists:
    """Tests for database_exists function."""

    def test_database_exists_returns_true(self, mock_store):
        store, session, _ = mock_store
        session.query.return_value.take.return_value = []

        assert database_exists("http://test:8080", "testdb") is True
        store.close.assert_called_once()

    def test_database_exists_returns_false_on_exception(self, mock_store):
        store, _, _ = mock_store
        store.initialize.side_effect = Exception("Database not found")

        assert database_exists("http://test:8080", "testdb") is False


class TestCreateDatabase:
    """Tests for create_database function."""

    @patch("docsgpt.service.database.substrate.requests.put")
    def test_create_database_success(self, mock_put):
        """Test that create_database makes correct API call."""
        create_database("http://test:8080", "testdb")

        mock_put.assert_called_once_with(
            "http://test:8080/admin/databases",
            json={"DatabaseName": "testdb", "Settings": {}, "Disabled": False},
            timeout=10,
        )
        mock_put.return_value.raise_for_status.assert_called_once()

    @patch("docsgpt.service.database.substrate.requests.put")
    def test_create_database_raises_on_failure(self, mock_put):
        mock_put.return_value.raise_for_status.side_effect = Exception("API error")

        with pytest.raises(Exception, match="API error"):
            create_database("http://test:8080", "testdb")


class TestRavenDBSubstrate:
    """Tests for RavenDBSubstrate with a mocked document store."""

    def test_store_is_created_lazily(self, mock_store):
        _, _, mock_document_store_class = mock_store

        substrate = RavenDBSubstrate("http://test:8080", "testdb")
        mock_document_store_class.assert_not_called()

        substrate.get("docsgpt-config")
        substrate.get("docsgpt-config")
        mock_document_store_class.assert_called_once_with(["http://test:8080"], "testdb")

    def test_get_existing_value(self, mock_store):
        _, session, _ = mock_store
        session.load.return_value = StoredValue(Id="k", value='{"a": 1}')

        assert RavenDBSubstrate("http://test:8080", "testdb").get("k") == '{"a": 1}'
        session.load.assert_called_once_with("k", StoredValue)

    def test_get_missing_value(self, mock_store):
        _, session, _ = mock_store
        session.load.return_value = None

        assert RavenDBSubstrate("http://test:8080", "testdb").get("k") is None

    def test_set_stores_whole_value(self, mock_store):
        _, session, _ = mock_store

        RavenDBSubstrate("http://test:8080", "testdb").set("k", "v")

        entry, key = session.store.call_args[0]
        assert key == "k"
        assert entry.Id == "k"
        assert entry.value == "v"
        session.save_changes.assert_called_once()

    def test_remove(self, mock_store):
        _, session, _ = mock_store

        RavenDBSubstrate("http://test:8080", "testdb").remove("k")

        session.delete.assert_called_once_with("k")
        session.save_changes.assert_called_once()

    def test_failures_raise_substrate_error(self, mock_store):
        _, session, _ = mock_store
        session.save_changes.side_effect = Exception("connection refused")
        substrate = RavenDBSubstrate("http://test:8080", "testdb")

        with pytest.raises(SubstrateError, match="connection refused"):
            substrate.set("k", "v")

    def test_codec_reports_write_failure(self, mock_store):
        """Test a RavenDB outage surfaces as a failed save, not an exception."""
        _, session, _ = mock_store
        session.save_changes.side_effect = Exception("connection refused")
        codec = PersistenceCodec(RavenDBSubstrate("http://test:8080", "testdb"))

        assert codec.save_config({"service": "ollama"}) is False

    def test_close(self, mock_store):
        store, _, _ = mock_store
        substrate = RavenDBSubstrate("http://test:8080", "testdb")
        substrate.get("k")

        substrate.close()

        store.close.assert_called_once()


class TestRavenDBIntegration:
    """Integration tests against a running RavenDB server."""

    @pytest.mark.integration
    @pytest.mark.requires_ravendb
    def test_round_trip(self, ravendb_substrate):
        key = "docsgpt-test-entry"
        ravendb_substrate.set(key, '{"version": 2}')

        assert ravendb_substrate.get(key) == '{"version": 2}'

        ravendb_substrate.remove(key)
        assert ravendb_substrate.get(key) is None
