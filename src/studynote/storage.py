"""Local key/value storage and folder utilities."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def ensure_structure(base_dir: str) -> dict:
    root = base_dir or os.getcwd()
    paths = {
        "root": root,
        "data": os.path.join(root, "Data"),
        "site": os.path.join(root, "Site"),
        "logs": os.path.join(root, "Logs"),
    }
    for path in paths.values():
        ensure_dir(path)
    return paths


class LocalStore:
    """String key/value store persisted as a single JSON file.

    Mirrors the browser local storage contract: values are strings, reads of
    a missing key return None, and every write is flushed immediately.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Storage file unreadable, treating as empty: %s", exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file has unexpected shape: %s", type(data).__name__)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        folder = os.path.dirname(os.path.abspath(self.path))
        ensure_dir(folder)
        fd, tmp_path = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=folder)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("LocalStore values must be strings")
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def keys(self) -> List[str]:
        return list(self._read_all().keys())
