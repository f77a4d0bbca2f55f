"""SyncCache: stem → completion marker, persisted as one JSON object.

The marker is whatever the destination returned: ``true`` for summaries
appended to a shared page, the page id for standalone pages. A missing or
unreadable file loads as an empty cache; the next save replaces it.

Only one run may use a cache file at a time. Concurrent runs against the
same path are not guarded and can lose each other's entries.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from prmemory_store.files import write_json_atomic

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "notion-sync-cache.json"


class SyncCache:
    def __init__(self, path: str | Path = DEFAULT_CACHE_FILE, entries: dict | None = None):
        self.path = Path(path)
        self._entries: dict = dict(entries or {})

    @classmethod
    def load(cls, path: str | Path = DEFAULT_CACHE_FILE) -> SyncCache:
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return cls(path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", path, e)
            return cls(path)

        if not isinstance(data, dict):
            logger.warning("Ignoring cache %s: expected a JSON object, got %s", path, type(data).__name__)
            return cls(path)

        logger.info("Loaded cache from %s with %d entries", path, len(data))
        return cls(path, data)

    def __contains__(self, stem: object) -> bool:
        return bool(self._entries.get(stem))

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, stem: str):
        return self._entries.get(stem)

    def items(self):
        return self._entries.items()

    def mark(self, stem: str, marker) -> None:
        self._entries[stem] = marker

    def clear(self) -> None:
        self._entries.clear()

    def save(self) -> None:
        write_json_atomic(self.path, self._entries)
        logger.debug("Saved cache to %s with %d entries", self.path, len(self._entries))
