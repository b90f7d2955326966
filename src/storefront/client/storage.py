"""Local durable key-value storage for the client (guest cart, last activity)."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path


class KeyValueStorage(ABC):
    """Values are JSON-serializable structures."""

    @abstractmethod
    def get(self, key, default=None): ...

    @abstractmethod
    def set(self, key, value) -> None: ...

    @abstractmethod
    def delete(self, key) -> None: ...

    def __contains__(self, key) -> bool:
        return self.get(key) is not None


class MemoryStorage(KeyValueStorage):
    """Keeps serialized values in a dict; each read hands back a fresh copy."""

    def __init__(self):
        self._data = {}

    def get(self, key, default=None):
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else default

    def set(self, key, value) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """A single JSON file; every write replaces the file atomically."""

    def __init__(self, path):
        self._path = Path(path)

    def _read(self):
        if not self._path.exists():
            return {}
        with self._path.open(encoding="utf-8") as fh:
            return json.load(fh)

    def _write(self, data):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self._path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, key, default=None):
        return self._read().get(key, default)

    def set(self, key, value) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
