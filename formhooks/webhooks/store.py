# formhooks/webhooks/store.py
"""
Option stores - named JSON values backing the registry and delivery log.

Both the mapping table and the delivery log are kept as whole values
under a single key each, the way a settings table would hold them:
- get(): deep copy of the stored value
- set(): whole-value overwrite
- update(): atomic read-modify-write (used for log appends)

Readers never observe a partial write.
"""

import copy
import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Union

from .models import FormhooksError

# Option keys
WEBHOOKS_OPTION = "form_webhooks"
LOGS_OPTION = "webhook_logs"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class OptionStoreError(FormhooksError):
    """Base exception for option store errors."""
    pass


class InvalidOptionKeyError(OptionStoreError):
    """Raised when an option key could escape the store root."""
    pass


class OptionStore:
    """Interface for key → JSON-compatible value storage."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def update(self, key: str, func: Callable[[Any], Any], default: Any = None) -> Any:
        """
        Apply func to the current value and store the result atomically.

        Returns:
            The newly stored value
        """
        raise NotImplementedError


class MemoryOptionStore(OptionStore):
    """Process-local option store."""

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._values:
                return copy.deepcopy(default)
            return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        value = copy.deepcopy(value)
        with self._lock:
            self._values[key] = value

    def update(self, key: str, func: Callable[[Any], Any], default: Any = None) -> Any:
        with self._lock:
            current = self.get(key, default)
            new_value = func(current)
            self.set(key, new_value)
            return copy.deepcopy(new_value)


class JsonFileOptionStore(OptionStore):
    """
    Option store persisted as one JSON file per key.

    Directory: {root}/
    Filename: {key}.json

    Writes go to a temp file in the same directory and are moved into
    place with os.replace, so a reader sees the old or the new file.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key in (".", ".."):
            raise InvalidOptionKeyError(f"Invalid option key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        with self._lock:
            if not path.exists():
                return copy.deepcopy(default)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise OptionStoreError(f"Could not read option {key!r}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        data = json.dumps(value, ensure_ascii=False, indent=2)
        with self._lock:
            fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_path, path)
            except OSError as e:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise OptionStoreError(f"Could not write option {key!r}: {e}") from e

    def update(self, key: str, func: Callable[[Any], Any], default: Any = None) -> Any:
        with self._lock:
            new_value = func(self.get(key, default))
            self.set(key, new_value)
            return copy.deepcopy(new_value)


def create_option_store(options_dir: Union[str, Path, None] = None) -> OptionStore:
    """JSON files under options_dir when given, otherwise memory."""
    if options_dir:
        return JsonFileOptionStore(options_dir)
    return MemoryOptionStore()
