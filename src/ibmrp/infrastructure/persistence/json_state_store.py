# src/ibmrp/infrastructure/persistence/json_state_store.py
import fcntl
import json
import os
import shutil
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from ibmrp.infrastructure.exceptions import StorageError
from ibmrp.infrastructure.logging.logger import get_logger


class JSONStateStore:
    """
    JSON file store for resource state.

    Storage structure:
    {
        "ibm_database": {
            "<instance id>": {"id": ..., "attributes": {...}, "updated_at": ...}
        },
        "ibm_en_destination": {...}
    }

    Every access holds an exclusive lock on the file.
    """

    def __init__(self, storage_path: str, backup: bool = True):
        """
        Initialize the state store.

        Args:
            storage_path: Path to the JSON state file
            backup: Copy the previous file to <path>.backup before each write
        """
        self._storage_path = storage_path
        self._backup = backup
        self._logger = get_logger(__name__)

    @contextmanager
    def _file_lock(self) -> Iterator[Any]:
        """Open the state file with an exclusive lock, creating it if needed."""
        if not os.path.exists(self._storage_path):
            directory = os.path.dirname(self._storage_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self._storage_path, "w") as f:
                json.dump({}, f, indent=2)

        with open(self._storage_path, "r+") as f:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                yield f
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    @staticmethod
    def _load(f: Any) -> Dict[str, Dict[str, Any]]:
        f.seek(0)
        content = f.read()
        if not content.strip():
            return {}
        data = json.loads(content)
        if not isinstance(data, dict):
            raise StorageError("State file must contain a JSON object")
        return data

    def _write(self, f: Any, data: Dict[str, Any]) -> None:
        if self._backup and os.path.getsize(self._storage_path) > 0:
            shutil.copyfile(self._storage_path, f"{self._storage_path}.backup")
        f.seek(0)
        f.truncate()
        json.dump(data, f, indent=2, sort_keys=True)

    def save(self, resource_type: str, resource_id: str, attributes: Dict[str, Any]) -> None:
        """
        Save the state of a resource.

        Args:
            resource_type: Resource type name, e.g. ibm_database
            resource_id: Resource ID
            attributes: Attribute map to persist

        Raises:
            StorageError: If the file cannot be read or written
        """
        try:
            with self._file_lock() as f:
                data = self._load(f)
                collection = data.setdefault(resource_type, {})
                collection[resource_id] = {
                    "id": resource_id,
                    "attributes": attributes,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }
                self._write(f, data)
            self._logger.debug(f"Saved state for {resource_type} {resource_id}")
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(f"Failed to save state for {resource_type} {resource_id}: {str(e)}")

    def get(self, resource_type: str, resource_id: str) -> Optional[Dict[str, Any]]:
        """
        Get the stored attributes of a resource.

        Returns:
            The attribute map, or None when the resource is not stored

        Raises:
            StorageError: If the file cannot be read
        """
        try:
            with self._file_lock() as f:
                data = self._load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read state: {str(e)}")
        record = data.get(resource_type, {}).get(resource_id)
        if record is None:
            return None
        return record.get("attributes", {})

    def delete(self, resource_type: str, resource_id: str) -> bool:
        """
        Remove a resource from the store.

        Returns:
            True if a record was removed
        """
        try:
            with self._file_lock() as f:
                data = self._load(f)
                collection = data.get(resource_type, {})
                if resource_id not in collection:
                    return False
                del collection[resource_id]
                if not collection:
                    data.pop(resource_type, None)
                self._write(f, data)
            self._logger.debug(f"Deleted state for {resource_type} {resource_id}")
            return True
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to delete state for {resource_type} {resource_id}: {str(e)}")

    def list_ids(self, resource_type: str) -> List[str]:
        """List the IDs stored for a resource type."""
        try:
            with self._file_lock() as f:
                data = self._load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read state: {str(e)}")
        return sorted(data.get(resource_type, {}).keys())
