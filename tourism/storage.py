import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """Durable string key-value storage kept in one JSON document on disk.

    Values are plain strings, callers serialize whatever they store. Every
    write replaces the whole file through a temporary file so a crash never
    leaves a half-written document behind.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf8") as f:
                data = json.load(f)
        except (ValueError, OSError) as exc:
            logger.warning("Key-value file %s is unreadable, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Key-value file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def _write_all(self, data):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".kv-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key):
        return self._read_all().get(key)

    def set_item(self, key, value: str):
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key):
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
