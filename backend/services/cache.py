"""TTL caches for remote API payloads.

DiskCache keeps one JSON file per key under a cache root so data survives
between site builds. MemoryCache has the same contract without touching
disk. Both are advisory: a miss, a corrupt entry or a failed write only
costs an extra API call, never a wrong result.
"""

import copy
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class DiskCache:
    """File-backed cache. Entries are `{"data": ..., "timestamp": ...}` JSON documents."""

    def __init__(
        self,
        root: str | Path,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.root = Path(root)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def path_for(self, key: str) -> Path:
        # Percent-encoding keeps every key inside the root and distinct.
        return self.root / f"{quote(key, safe='-_.')}.json"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
            timestamp = float(entry["timestamp"])
            data = entry["data"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to read cache for %s: %s", key, e)
            return None

        if self._clock() - timestamp < self.ttl_seconds:
            logger.debug("Using cached data for: %s", key)
            return data

        logger.debug("Cache expired for: %s", key)
        return None

    def set(self, key: str, value: Any) -> None:
        entry = {"data": value, "timestamp": self._clock()}
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.path_for(key).write_text(json.dumps(entry, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write cache for %s: %s", key, e)
            return
        logger.debug("Cached data for: %s", key)


class MemoryCache:
    """In-process cache with the same contract as DiskCache."""

    def __init__(self, ttl_seconds: float = 600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        if key in self._store:
            timestamp, value = self._store[key]
            if self._clock() - timestamp < self.ttl_seconds:
                return copy.deepcopy(value)
        return None

    def set(self, key: str, value: Any) -> None:
        self._store[key] = (self._clock(), copy.deepcopy(value))
