from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Protocol

from pydantic import ValidationError

from ..errors import PreferenceStoreError
from .models import UserProfile

logger = logging.getLogger(__name__)

_SAFE_USER_ID = re.compile(r"[^A-Za-z0-9_.-]")


class PreferenceStore(Protocol):
    def load(self, user_id: str) -> UserProfile: ...

    def save(self, user_id: str, profile: UserProfile) -> None: ...

    def update(
        self, user_id: str, change: Callable[[UserProfile], UserProfile],
    ) -> UserProfile: ...


class _UserLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(user_id, threading.Lock())
        with lock:
            yield


class InMemoryPreferenceStore:
    """Keeps profiles in process memory. Unknown users get defaults."""

    def __init__(self) -> None:
        self._profiles: dict[str, str] = {}
        self._locks = _UserLocks()

    def load(self, user_id: str) -> UserProfile:
        raw = self._profiles.get(user_id)
        if raw is None:
            return UserProfile()
        return UserProfile.model_validate_json(raw)

    def save(self, user_id: str, profile: UserProfile) -> None:
        self._profiles[user_id] = profile.model_dump_json()

    def update(
        self, user_id: str, change: Callable[[UserProfile], UserProfile],
    ) -> UserProfile:
        """Serialised load -> change -> save for one user."""
        with self._locks.hold(user_id):
            updated = change(self.load(user_id))
            self.save(user_id, updated)
        return updated

    def clear(self) -> None:
        self._profiles.clear()


class JsonPreferenceStore:
    """One ``<user_id>.json`` file per user under *directory*."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)
        self._locks = _UserLocks()

    def _path(self, user_id: str) -> Path:
        return self.directory / f"{_SAFE_USER_ID.sub('_', user_id)}.json"

    def load(self, user_id: str) -> UserProfile:
        path = self._path(user_id)
        if not path.exists():
            return UserProfile()
        try:
            return UserProfile.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise PreferenceStoreError(f"Corrupt preferences for {user_id}: {path}") from exc

    def save(self, user_id: str, profile: UserProfile) -> None:
        path = self._path(user_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(profile.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Saved preferences for %s to %s", user_id, path)

    def update(
        self, user_id: str, change: Callable[[UserProfile], UserProfile],
    ) -> UserProfile:
        with self._locks.hold(user_id):
            updated = change(self.load(user_id))
            self.save(user_id, updated)
        return updated
