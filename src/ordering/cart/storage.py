"""Keyed record storage for carts, shared by every open context.

A storage backend plays the role of a browser origin's local storage: each
context (tab) attaches a ``CartStore`` to the same backend instance. Every
write or removal is announced to all attached listeners as a
``StorageEvent`` carrying the old and new value and the writer; listeners
ignore their own writes.

Records are whole strings. There is no field-level merge and no locking:
the last writer wins.
"""

import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StorageEvent:
    key: str
    old_value: str | None
    new_value: str | None
    source: object | None = None


StorageListener = Callable[[StorageEvent], None]


class CartStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, source: object | None = None) -> None: ...

    def remove(self, key: str, source: object | None = None) -> None: ...

    def subscribe(self, listener: StorageListener) -> Callable[[], None]: ...


class _ObservableStorage:
    def __init__(self):
        self._listeners: list[StorageListener] = []

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Attach a listener; returns a callable that detaches it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Storage listener failed", key=event.key)


class MemoryStorage(_ObservableStorage):
    """In-process record storage."""

    def __init__(self):
        super().__init__()
        self._records: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._records.get(key)

    def set(self, key: str, value: str, source: object | None = None) -> None:
        old_value = self._records.get(key)
        self._records[key] = value
        self._emit(StorageEvent(key=key, old_value=old_value, new_value=value, source=source))

    def remove(self, key: str, source: object | None = None) -> None:
        old_value = self._records.pop(key, None)
        self._emit(StorageEvent(key=key, old_value=old_value, new_value=None, source=source))


class FileStorage(_ObservableStorage):
    """Durable record storage: one JSON file per key under ``directory``.

    Writes go through a temporary file and an atomic rename so a reader
    never observes a half-written record.
    """

    def __init__(self, directory: str | Path):
        super().__init__()
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str, source: object | None = None) -> None:
        old_value = self.get(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(key))
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._emit(StorageEvent(key=key, old_value=old_value, new_value=value, source=source))

    def remove(self, key: str, source: object | None = None) -> None:
        old_value = self.get(key)
        self._path(key).unlink(missing_ok=True)
        self._emit(StorageEvent(key=key, old_value=old_value, new_value=None, source=source))
