import os
import json
import logging

from .utils import ensure_dir


class JsonKeyValueStore:
    """Named values kept in a single JSON document on disk.

    Reads never raise: a missing or unreadable file is an empty store.
    Writes are best-effort and failures are only logged.
    """

    def __init__(self, path: str, logger: logging.Logger):
        self._path = path
        self._logger = logger
        self._data: dict | None = None

    @property
    def path(self) -> str:
        return self._path

    def _load(self) -> dict:
        if self._data is not None:
            return self._data
        self._data = {}
        if not os.path.exists(self._path):
            return self._data
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                self._data = data
            else:
                self._logger.warning(f"STORE ignoring non-object document in {self._path}")
        except Exception:
            self._logger.exception("STORE load failed, starting empty")
        return self._data

    def _save(self) -> None:
        data = self._load()
        try:
            ensure_dir(os.path.dirname(self._path))
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except Exception:
            self._logger.exception("STORE save failed")

    def get(self, key: str, default=None):
        return self._load().get(key, default)

    def contains(self, key: str) -> bool:
        return key in self._load()

    def set(self, key: str, value) -> None:
        data = self._load()
        try:
            # Reject values json cannot encode before they reach the document
            json.dumps(value)
        except (TypeError, ValueError):
            self._logger.exception(f"STORE value for key={key} is not serializable, dropped")
            return
        data[key] = value
        self._save()

    def set_many(self, values: dict) -> None:
        for key, value in values.items():
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                self._logger.exception(f"STORE value for key={key} is not serializable, dropped")
                continue
            self._load()[key] = value
        self._save()

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save()
