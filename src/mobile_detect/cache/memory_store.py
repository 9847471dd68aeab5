from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mobile_detect.cache.keys import DEFAULT_MAX_KEY_LENGTH, validate_key
from mobile_detect.cache.ttl import expiry_for, is_expired

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from mobile_detect.cache.protocol import TTL

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheRecord:
    key: str
    value: object
    created_at: float
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return is_expired(self.expires_at, now)


class TTLCacheStore:
    """In-memory key-value store with per-record time-to-live.

    Expiry is checked lazily: an expired record is purged the next time it is
    read through ``get``, ``has`` or ``get_keys``. ``prune_expired`` can be
    called to reclaim memory without waiting for a read.

    Thread-safe.

    Example:
        >>> store = TTLCacheStore()
        >>> store.set("isMobile", True, ttl=300)
        True
        >>> store.get("isMobile")
        True
    """

    def __init__(
        self,
        max_key_length: int = DEFAULT_MAX_KEY_LENGTH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_key_length = max_key_length
        self._clock = clock
        self._records: dict[str, CacheRecord] = {}
        self._lock = threading.RLock()

    def _check(self, key: object) -> str:
        return validate_key(key, self.max_key_length)

    def _live_record(self, key: str) -> CacheRecord | None:
        """Return the record for ``key``, purging it if it has expired. Caller holds the lock."""
        record = self._records.get(key)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            del self._records[key]
            logger.debug("Purged expired cache record %s", key)
            return None
        return record

    def get(self, key: str, default: object = None) -> object:
        self._check(key)
        with self._lock:
            record = self._live_record(key)
            return default if record is None else record.value

    def set(self, key: str, value: object, ttl: TTL = None) -> bool:
        self._check(key)
        now = self._clock()
        storable, expires_at = expiry_for(ttl, now)
        with self._lock:
            if not storable:
                self._records.pop(key, None)
                return False
            self._records[key] = CacheRecord(key=key, value=value, created_at=now, expires_at=expires_at)
        return True

    def delete(self, key: str) -> bool:
        self._check(key)
        with self._lock:
            self._records.pop(key, None)
        return True

    def clear(self) -> bool:
        with self._lock:
            self._records.clear()
        return True

    def has(self, key: str) -> bool:
        self._check(key)
        with self._lock:
            return self._live_record(key) is not None

    def get_multiple(self, keys: Iterable[str], default: object = None) -> dict[str, object]:
        keys = [self._check(key) for key in keys]
        with self._lock:
            return {key: self.get(key, default) for key in keys}

    def set_multiple(self, values: Mapping[str, object], ttl: TTL = None) -> bool:
        """Store every pair under one TTL.

        All keys are validated before anything is written. Writes are not atomic:
        ``False`` means at least one record was not retained, not that nothing ran.
        """
        for key in values:
            self._check(key)
        with self._lock:
            results = [self.set(key, value, ttl) for key, value in values.items()]
        return all(results)

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        keys = [self._check(key) for key in keys]
        with self._lock:
            for key in keys:
                self._records.pop(key, None)
        return True

    def get_keys(self) -> set[str]:
        with self._lock:
            return {key for key in list(self._records) if self._live_record(key) is not None}

    def get_record(self, key: str) -> CacheRecord | None:
        self._check(key)
        with self._lock:
            return self._live_record(key)

    def count(self) -> int:
        return len(self.get_keys())

    def __len__(self) -> int:
        return self.count()

    def prune_expired(self) -> int:
        """Remove every expired record. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, record in self._records.items() if record.is_expired(now)]
            for key in expired:
                del self._records[key]
        if expired:
            logger.debug("Pruned %d expired cache records", len(expired))
        return len(expired)
