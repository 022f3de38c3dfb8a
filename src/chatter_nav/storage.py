"""Key-value stores backing the persisted navigation documents.

The tab state manager only ever talks to a ``KeyValueStore``: a synchronous
get/set/remove by string key, the same contract a browser's local storage
offers.  ``FileStore`` is the durable implementation used by the CLI and
``MemoryStore`` is the in-process one used for embedding and tests.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from filelock import FileLock, Timeout

from .logging import get_logger

log = get_logger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class CorruptStoreError(StoreError):
    """The backing file exists but does not hold a JSON object."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class FileStore:
    """JSON object on disk mapping keys to string values (with file locking)."""

    def __init__(self, path: Path, lock_timeout: float = 5) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        self.lock_timeout = lock_timeout

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(f"Corrupt store file {self.path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CorruptStoreError(f"Store file {self.path} does not hold an object")
        return data

    def _read_for_update(self) -> Tuple[Dict[str, str], bool]:
        """Current contents for a write; a corrupt file reads as empty so the write replaces it."""
        try:
            return self._read(), False
        except CorruptStoreError as exc:
            log.warning("Discarding unreadable store contents: %s", exc)
            return {}, True

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write {self.path}: {exc}") from exc

    def _lock(self) -> FileLock:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(self.lock_path), timeout=self.lock_timeout)

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock():
                value = self._read().get(key)
        except Timeout as exc:
            raise StoreError(f"Timed out waiting for {self.lock_path}") from exc
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock():
                data, _ = self._read_for_update()
                data[key] = value
                self._write(data)
        except Timeout as exc:
            raise StoreError(f"Timed out waiting for {self.lock_path}") from exc
        log.debug("Stored %s (%d bytes) in %s", key, len(value), self.path)

    def remove(self, key: str) -> None:
        try:
            with self._lock():
                data, corrupt = self._read_for_update()
                if key in data or corrupt:
                    data.pop(key, None)
                    self._write(data)
        except Timeout as exc:
            raise StoreError(f"Timed out waiting for {self.lock_path}") from exc


class MemoryStore:
    """Dict-backed store; ``fail_reads``/``fail_writes`` simulate an unavailable store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StoreError("store unavailable")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StoreError("store unavailable")
        self.data[key] = value
        self.writes += 1

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StoreError("store unavailable")
        self.data.pop(key, None)
