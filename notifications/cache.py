import json
import logging
import os
import re
import tempfile
from pathlib import Path
from threading import Lock

from .messages import TableState

logger = logging.getLogger(__name__)


# ----------------------------
# BACKENDS
# ----------------------------

class MemoryBackend:

    def __init__(self):
        self._data = {}
        self._lock = Lock()

    def get(self, key):
        with self._lock:
            return self._data.get(key)

    def set(self, key, value):
        with self._lock:
            self._data[key] = value

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)


class FileBackend:
    """One JSON document per key inside ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key):
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe_key}.json"

    def get(self, key):
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as fh:
            return fh.read()

    def set(self, key, value):
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            os.unlink(tmp_path)
            raise

    def delete(self, key):
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


# ----------------------------
# CACHE
# ----------------------------

class NotificationCache:
    """
    Persists a TableState per table number. Backends only store strings,
    so any key/value store with get/set/delete can be plugged in.
    """

    def __init__(self, backend=None, prefix="emenu_notifications"):
        self.backend = backend if backend is not None else MemoryBackend()
        self.prefix = prefix

    def key_for(self, table_number):
        return f"{self.prefix}_{table_number}"

    def load(self, table_number):
        raw = self.backend.get(self.key_for(table_number))
        if not raw:
            return TableState()

        try:
            return TableState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable notification cache for table %s", table_number)
            return TableState()

    def save(self, table_number, state):
        self.backend.set(self.key_for(table_number), json.dumps(state.to_dict()))

    def clear(self, table_number):
        self.backend.delete(self.key_for(table_number))
