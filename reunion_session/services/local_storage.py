from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from reunion_session.core.logging import get_logger
from reunion_session.schemas.responses import StorageEvent

logger = get_logger(__name__)

StorageListener = Callable[[StorageEvent], None]


class LocalStorage:
    """String key/value store shared by every tab of one process.

    Writes are announced to subscribers registered under a different origin
    than the writer, the way a browser only fires storage events in the other
    tabs. Delivery is synchronous.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else None
        self._items: dict[str, str] = self._load()
        self._listeners: list[tuple[str, StorageListener]] = []

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str, origin: str | None = None) -> None:
        old = self._items.get(key)
        self._items[key] = value
        self._save()
        self._dispatch(StorageEvent(key=key, old_value=old, new_value=value, origin=origin))

    def remove_item(self, key: str, origin: str | None = None) -> None:
        if key not in self._items:
            return
        old = self._items.pop(key)
        self._save()
        self._dispatch(StorageEvent(key=key, old_value=old, new_value=None, origin=origin))

    def subscribe(self, origin: str, listener: StorageListener) -> Callable[[], None]:
        entry = (origin, listener)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def _dispatch(self, event: StorageEvent) -> None:
        for origin, listener in list(self._listeners):
            if event.origin is not None and origin == event.origin:
                continue
            listener(event)

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("local_storage_unreadable", path=str(self._path), exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("local_storage_unreadable", path=str(self._path))
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._items), encoding="utf-8")
