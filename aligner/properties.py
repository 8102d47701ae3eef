"""Key-value stores that hold the panel's persisted path defaults."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-local store, used when nothing should survive a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)


class JsonPropertiesStore:
    """JSON file of string keys to string values.

    The whole file is rewritten on every ``set`` through a temporary file in
    the same directory, so a crash never leaves a half-written document.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._values = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Properties file '{self.path}' is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Properties file '{self.path}' must contain a JSON object")
        return {str(key): str(value) for key, value in data.items() if value is not None}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = str(value)
            self._write()

    def as_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d properties to %s", len(self._values), self.path)
