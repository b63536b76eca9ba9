"""
File-backed key-value store used by the local-only meeting service
"""
import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value pairs persisted to one JSON file

    Writes go through a temporary file and ``os.replace``, so the file on
    disk is always either the old or the new content.
    """

    def __init__(self, storage_path):
        self.storage_path = Path(storage_path).expanduser()
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _quarantine(self) -> Path:
        """Move an unreadable file aside so the next write cannot destroy it"""
        backup = self.storage_path.with_name(
            f"{self.storage_path.name}.corrupt-{int(time.time() * 1000)}")
        os.replace(self.storage_path, backup)
        return backup

    def _read_raw(self) -> Dict[str, str]:
        if not self.storage_path.exists():
            return {}
        try:
            payload = json.loads(self.storage_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            backup = self._quarantine()
            logger.error(f"❌ Local storage at {self.storage_path} is corrupt ({e}); "
                         f"moved to {backup}, starting empty")
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write_raw(self, payload: Dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=str(self.storage_path.parent),
                                        prefix=f".{self.storage_path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.storage_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_raw().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            payload = self._read_raw()
            payload[key] = value
            self._write_raw(payload)

    def update_item(self, key: str, update: Callable[[Optional[str]], str]) -> str:
        """Read, transform and write one key while holding the lock

        If ``update`` raises, nothing is written.
        """
        with self._lock:
            payload = self._read_raw()
            value = update(payload.get(key))
            payload[key] = value
            self._write_raw(payload)
            return value

    def remove_item(self, key: str) -> None:
        with self._lock:
            payload = self._read_raw()
            if payload.pop(key, None) is not None:
                self._write_raw(payload)

    def clear(self) -> None:
        with self._lock:
            self._write_raw({})
