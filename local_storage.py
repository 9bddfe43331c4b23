"""Small persisted key/value store for per-user client state."""

import json
import logging
import os
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value pairs kept in a JSON file.

    Mirrors the browser ``localStorage`` contract: ``get_item`` returns
    ``None`` for unknown keys and every write is persisted immediately.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._items: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable local storage %s: %s", self.path, e)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._items, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value
            self._save()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._items.pop(key, None) is not None:
                self._save()
