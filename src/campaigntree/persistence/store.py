"""Key-value storage for saved progress.

The saved document is an opaque string blob kept under a single well-known
key. The only contract the rest of the package relies on is
``get(key) -> str | None`` and ``set(key, value)``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from campaigntree.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)

DEFAULT_STORAGE_KEY = "gloomhavenScenarioTree"


@runtime_checkable
class ProgressStore(Protocol):
    """Storage backend protocol for saved progress blobs."""

    def get(self, key: str) -> str | None:
        """Return the blob stored under *key*, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous blob."""
        ...


class MemoryProgressStore:
    """In-memory dict-backed store."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileProgressStore:
    """Store backed by a JSON object on disk mapping key -> blob.

    Writes go to a temp file that replaces the target, so an interrupted
    write never truncates existing progress.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            # The file is ours; a corrupt one is treated like a missing save
            log.warning("progress_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            log.warning("progress_file_unreadable", path=str(self.path), error="not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except Exception:
            if tmp_path.exists():
                tmp_path.unlink()
            raise
        log.debug("progress_written", path=str(self.path), key=key, size=len(value))
