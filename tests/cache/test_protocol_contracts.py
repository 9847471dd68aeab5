"""Contract tests for cache protocol implementations.

These tests verify that all implementations of the CacheStore protocol
satisfy the protocol's contract correctly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from mobile_detect.cache.memory_store import TTLCacheStore
from mobile_detect.cache.sqlite_store import SqliteCacheStore
from mobile_detect.exceptions import CacheInvalidArgumentError

if TYPE_CHECKING:
    from pathlib import Path

    from mobile_detect.cache.protocol import CacheStore
    from tests.helpers import FakeClock

# All CacheStore implementations
CACHE_STORES: list[str] = ["memory", "sqlite"]


@pytest.fixture(params=CACHE_STORES)
def cache_store(request: pytest.FixtureRequest, tmp_path: Path, clock: FakeClock) -> CacheStore:
    """Parametrized fixture that yields each CacheStore implementation."""
    if request.param == "memory":
        return TTLCacheStore(clock=clock)
    if request.param == "sqlite":
        return SqliteCacheStore(tmp_path / "cache.db", clock=clock)
    raise ValueError(f"Unknown cache store type: {request.param}")


class TestCacheStoreContract:
    """Contract tests for CacheStore protocol implementations."""

    @pytest.mark.parametrize(
        "method", ["get", "set", "delete", "clear", "has", "get_multiple", "set_multiple", "delete_multiple"]
    )
    def test_has_capability(self, cache_store: CacheStore, method: str) -> None:
        assert callable(getattr(cache_store, method))

    def test_get_returns_none_for_missing_key(self, cache_store: CacheStore) -> None:
        assert cache_store.get("nonexistent_key") is None

    @pytest.mark.parametrize("value", [True, False, "iPad", ""])
    def test_set_and_get_roundtrip(self, cache_store: CacheStore, value: object) -> None:
        assert cache_store.set("test_key", value, 3600) is True
        assert cache_store.get("test_key") == value

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_not_observable(self, cache_store: CacheStore, ttl: int) -> None:
        assert cache_store.set("test_key", True, ttl) is False
        assert cache_store.get("test_key") is None
        assert cache_store.has("test_key") is False

    def test_ttl_expiry(self, cache_store: CacheStore, clock: FakeClock) -> None:
        cache_store.set("test_key", "v", 1)
        clock.advance(1)
        assert cache_store.get("test_key") is None
        assert cache_store.has("test_key") is False

    @pytest.mark.parametrize("operation", ["get", "has", "delete"])
    def test_empty_key_rejected(self, cache_store: CacheStore, operation: str) -> None:
        with pytest.raises(CacheInvalidArgumentError):
            getattr(cache_store, operation)("")

    def test_empty_key_rejected_by_multiple_operations(self, cache_store: CacheStore) -> None:
        with pytest.raises(CacheInvalidArgumentError):
            cache_store.get_multiple(["ok", ""])
        with pytest.raises(CacheInvalidArgumentError):
            cache_store.set_multiple({"": 1})
        with pytest.raises(CacheInvalidArgumentError):
            cache_store.delete_multiple([""])

    def test_clear_empties_store(self, cache_store: CacheStore) -> None:
        cache_store.set_multiple({"a": 1, "b": 2})
        assert cache_store.clear() is True
        assert cache_store.get_multiple(["a", "b"]) == {"a": None, "b": None}

    def test_get_multiple_fills_missing_with_none(self, cache_store: CacheStore) -> None:
        cache_store.set("k1", "v1")
        cache_store.set("k2", "v2")
        assert cache_store.get_multiple(["k1", "k2", "k3"]) == {"k1": "v1", "k2": "v2", "k3": None}

    def test_set_multiple_zero_ttl_returns_false(self, cache_store: CacheStore) -> None:
        assert cache_store.set_multiple({"a": 1, "b": 2}, 0) is False
        assert cache_store.get_multiple(["a", "b"]) == {"a": None, "b": None}

    def test_delete_multiple_ignores_missing(self, cache_store: CacheStore) -> None:
        cache_store.set("a", 1)
        assert cache_store.delete_multiple(["a", "missing"]) is True
        assert cache_store.has("a") is False
