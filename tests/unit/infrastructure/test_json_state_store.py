"""Unit tests for JSONStateStore."""

import json
import os

import pytest

from ibmrp.infrastructure.exceptions import StorageError
from ibmrp.infrastructure.persistence import JSONStateStore


@pytest.mark.unit
class TestJSONStateStore:
    """Test cases for the JSON state store."""

    @pytest.fixture(autouse=True)
    def _store(self, tmp_path):
        self.path = str(tmp_path / "state" / "ibmrp-state.json")
        self.store = JSONStateStore(self.path)

    def test_save_and_get(self):
        """Saved attributes are returned by get and the directory is created."""
        # Arrange
        attributes = {"id": "crn:v1:db", "name": "db", "node_count": 2}

        # Act
        self.store.save("ibm_database", "crn:v1:db", attributes)

        # Assert
        assert self.store.get("ibm_database", "crn:v1:db") == attributes
        with open(self.path) as f:
            raw = json.load(f)
        assert raw["ibm_database"]["crn:v1:db"]["id"] == "crn:v1:db"
        assert "updated_at" in raw["ibm_database"]["crn:v1:db"]

    def test_get_missing(self):
        assert self.store.get("ibm_database", "missing") is None

    def test_types_are_kept_apart(self):
        self.store.save("ibm_en_destination", "g/1", {"name": "d"})
        self.store.save("ibm_en_subscription", "g/1", {"name": "s"})

        assert self.store.get("ibm_en_destination", "g/1") == {"name": "d"}
        assert self.store.get("ibm_en_subscription", "g/1") == {"name": "s"}

    def test_overwrite(self):
        self.store.save("ibm_database", "id", {"name": "a"})
        self.store.save("ibm_database", "id", {"name": "b"})

        assert self.store.get("ibm_database", "id") == {"name": "b"}

    def test_delete(self):
        """delete reports whether a record was removed."""
        self.store.save("ibm_database", "id", {"name": "a"})

        assert self.store.delete("ibm_database", "id") is True
        assert self.store.delete("ibm_database", "id") is False
        assert self.store.get("ibm_database", "id") is None

    def test_list_ids(self):
        self.store.save("ibm_database", "b", {})
        self.store.save("ibm_database", "a", {})

        assert self.store.list_ids("ibm_database") == ["a", "b"]
        assert self.store.list_ids("ibm_en_destination") == []

    def test_backup_written(self):
        self.store.save("ibm_database", "a", {"name": "first"})
        self.store.save("ibm_database", "a", {"name": "second"})

        with open(f"{self.path}.backup") as f:
            backup = json.load(f)
        assert backup["ibm_database"]["a"]["attributes"] == {"name": "first"}

    def test_no_backup_when_disabled(self, tmp_path):
        path = str(tmp_path / "plain.json")
        store = JSONStateStore(path, backup=False)

        store.save("ibm_database", "a", {})
        store.save("ibm_database", "a", {})

        assert not os.path.exists(f"{path}.backup")

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "corrupt.json"
        path.write_text("[1, 2]")

        with pytest.raises(StorageError):
            JSONStateStore(str(path)).get("ibm_database", "a")
