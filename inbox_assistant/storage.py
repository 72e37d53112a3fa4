"""
Persistence - durable key-value store and the adapter that keeps
settings and the activity log in it
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from inbox_assistant.exceptions import StorageError
from inbox_assistant.models import ActivityLogEntry, Settings, DEFAULT_SETTINGS


logger = logging.getLogger(__name__)

SETTINGS_KEY = "gmail_cleanup_settings"
ACTIVITY_LOG_KEY = "gmail_activity_log"

_activity_log_adapter = TypeAdapter(List[ActivityLogEntry])


class KeyValueStore(Protocol):
    """Synchronous string store; get returns None for a missing key"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class JsonFileStore:
    """Key-value store backed by a single JSON file on disk"""

    def __init__(self, path: str = "data/store.json"):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError as error:
            logger.warning(f"Discarding unreadable store {self.path}: {error}")
            data = {}

        data[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2))
            tmp_path.replace(self.path)
        except OSError as error:
            raise StorageError(f"Could not write {self.path}: {error}") from error

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as error:
            raise StorageError(f"Could not read {self.path}: {error}") from error
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return data


class PersistenceAdapter:
    """Serializes session state into a KeyValueStore.

    Store failures never propagate: reads degrade to a default value and
    writes are logged and dropped, reported only through the boolean
    returned by the save methods.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    # === Settings ===

    def load_settings(self) -> Settings:
        raw = self._get(SETTINGS_KEY)
        if raw is None:
            return DEFAULT_SETTINGS
        try:
            return Settings.model_validate_json(raw)
        except ValidationError as error:
            logger.warning(f"Stored settings are invalid, using defaults: {error.error_count()} errors")
            return DEFAULT_SETTINGS

    def save_settings(self, settings: Settings) -> bool:
        return self._set(SETTINGS_KEY, settings.model_dump_json(by_alias=True))

    # === Activity Log ===

    def load_activity_log(self) -> List[ActivityLogEntry]:
        raw = self._get(ACTIVITY_LOG_KEY)
        if raw is None:
            return []
        try:
            return _activity_log_adapter.validate_json(raw)
        except ValidationError as error:
            logger.warning(f"Stored activity log is invalid, starting empty: {error.error_count()} errors")
            return []

    def save_activity_log(self, entries: List[ActivityLogEntry]) -> bool:
        payload = _activity_log_adapter.dump_json(entries, by_alias=True).decode("utf-8")
        return self._set(ACTIVITY_LOG_KEY, payload)

    # === Raw Access ===

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as error:
            logger.error(f"Failed to read {key} from store: {error}")
            return None

    def _set(self, key: str, value: str) -> bool:
        try:
            self.store.set(key, value)
            return True
        except Exception as error:
            logger.error(f"Failed to save {key}: {error}")
            return False
