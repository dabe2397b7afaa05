from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from reunion_session.core.logging import get_logger
from reunion_session.services.local_storage import LocalStorage, StorageListener

logger = get_logger(__name__)

ProfileListener = Callable[[], None]


class AuthStore:
    """The persisted "user is logged in" flag, as seen from one tab.

    Login and logout flows write it; the timeout coordinator reads and clears
    it. Every write fires an in-page ``profile-updated`` notification for
    listeners in the same tab, while other tabs receive a storage event.
    """

    def __init__(self, storage: LocalStorage, tab_id: str, key: str = "profile") -> None:
        self._storage = storage
        self._tab_id = tab_id
        self._key = key
        self._profile_listeners: list[ProfileListener] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def tab_id(self) -> str:
        return self._tab_id

    def is_logged_in(self) -> bool:
        return bool(self._storage.get_item(self._key))

    def profile(self) -> dict[str, Any] | None:
        raw = self._storage.get_item(self._key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("profile_unparseable", key=self._key)
            return None

    def set_profile(self, profile: dict[str, Any]) -> None:
        self._storage.set_item(self._key, json.dumps(profile), origin=self._tab_id)
        self._notify_profile_updated()

    def clear(self) -> None:
        self._storage.remove_item(self._key, origin=self._tab_id)
        self._notify_profile_updated()

    def on_profile_updated(self, listener: ProfileListener) -> Callable[[], None]:
        self._profile_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._profile_listeners:
                self._profile_listeners.remove(listener)

        return unsubscribe

    def on_storage(self, listener: StorageListener) -> Callable[[], None]:
        return self._storage.subscribe(self._tab_id, listener)

    def _notify_profile_updated(self) -> None:
        for listener in list(self._profile_listeners):
            listener()
