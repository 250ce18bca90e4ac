"""JSON file persistence utilities.

Backs the title store with a single JSON document that is read whole and
written whole. Writes go to a sibling temp file first and are then moved
into place so a crash never leaves a half-written database behind.
"""

import os
import tempfile
from json import JSONDecodeError, dump, load
from pathlib import Path
from threading import RLock
from typing import Any

from utils.exceptions import PersistenceError


class JSONStore:
    """Single-writer JSON document on disk.

    Loading a missing file returns the supplied default; a corrupt file is
    reported instead of being silently replaced, since it holds user data.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = Path(file_path)
        self._lock = RLock()

    def load(self, default: Any = None) -> Any:
        """Load JSON data from file.

        Args:
            default: Value to return if the file doesn't exist. Defaults to empty dict.

        Raises:
            PersistenceError: On unreadable or corrupt files
        """
        if default is None:
            default = {}

        with self._lock:
            try:
                with self.file_path.open(encoding="utf-8") as f:
                    return load(f)
            except FileNotFoundError:
                return default
            except JSONDecodeError as e:
                raise PersistenceError(f"Corrupt JSON in {self.file_path}: {e}") from e
            except PermissionError as e:
                raise PersistenceError(f"Permission denied reading {self.file_path}") from e

    def save(self, data: Any, *, indent: int = 2) -> None:
        """Atomically replace the file contents with data.

        Raises:
            PersistenceError: On serialization or permission errors
        """
        with self._lock:
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.file_path.parent, prefix=self.file_path.name, suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        dump(data, f, indent=indent, ensure_ascii=False)
                    os.replace(tmp_name, self.file_path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except TypeError as e:
                raise PersistenceError(f"Cannot serialize data: {e}") from e
            except PermissionError as e:
                raise PersistenceError(f"Permission denied writing {self.file_path}") from e

    def update(self, key: str, default: Any, func) -> Any:
        """Read-modify-write one top-level key under the store lock.

        Args:
            key: Top-level key to update
            default: Value used when the key is missing
            func: Called with the current value, returns the new value

        Returns:
            The new value
        """
        with self._lock:
            data = self.load({})
            data[key] = func(data.get(key, default))
            self.save(data)
            return data[key]

    def exists(self) -> bool:
        return self.file_path.exists()
