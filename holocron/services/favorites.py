"""File-backed favorites list.

Favorites live in a small JSON key/value file.  The list is stored as a JSON
string under the fixed ``star-wars-favorites`` key, read once when the store
is created and rewritten in full after every mutation.  The catalog layer only
ever consumes the resulting set of uids.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from holocron.schemas.favorites import FavoriteCharacter

logger = logging.getLogger(__name__)

FAVORITES_KEY = "star-wars-favorites"

_favorites_adapter = TypeAdapter(list[FavoriteCharacter])


class JsonKeyValueFile:
    """Minimal string key/value store persisted as a single JSON object."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        data = self._read()
        value = data.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # The target is only ever replaced by a fully written file.
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def _read(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read key/value file %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}


class FavoritesStore:
    """Ordered list of favorite people, persisted under :data:`FAVORITES_KEY`."""

    def __init__(
        self,
        storage: JsonKeyValueFile,
        *,
        key: str = FAVORITES_KEY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock
        self._favorites: list[FavoriteCharacter] = self._load()

    def _load(self) -> list[FavoriteCharacter]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        try:
            return _favorites_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to parse stored favorites: %s", exc)
            return []

    def _persist(self, favorites: list[FavoriteCharacter]) -> None:
        """Write ``favorites`` and only then make them the in-memory list."""

        payload = _favorites_adapter.dump_json(favorites, by_alias=True)
        self._storage.set_item(self._key, payload.decode("utf-8"))
        self._favorites = favorites

    def entries(self) -> list[FavoriteCharacter]:
        return list(self._favorites)

    def uids(self) -> set[str]:
        return {favorite.uid for favorite in self._favorites}

    def is_favorite(self, uid: str) -> bool:
        return any(favorite.uid == uid for favorite in self._favorites)

    def add(self, uid: str, name: str) -> FavoriteCharacter:
        """Add a favorite; adding an existing uid returns the stored record."""

        for favorite in self._favorites:
            if favorite.uid == uid:
                return favorite
        favorite = FavoriteCharacter(uid=uid, name=name, added_at=int(self._clock() * 1000))
        self._persist([*self._favorites, favorite])
        return favorite

    def remove(self, uid: str) -> bool:
        """Remove ``uid``; returns ``False`` when it was not a favorite."""

        remaining = [favorite for favorite in self._favorites if favorite.uid != uid]
        if len(remaining) == len(self._favorites):
            return False
        self._persist(remaining)
        return True

    def toggle(self, uid: str, name: str) -> bool:
        """Flip the favorite state of ``uid`` and return the new state."""

        if self.is_favorite(uid):
            self.remove(uid)
            return False
        self.add(uid, name)
        return True


__all__ = ["FAVORITES_KEY", "FavoritesStore", "JsonKeyValueFile"]
