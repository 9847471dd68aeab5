from mobile_detect.cache.keys import KeyCodec, validate_key
from mobile_detect.cache.memory_store import CacheRecord, TTLCacheStore
from mobile_detect.cache.protocol import CacheStore
from mobile_detect.cache.sqlite_store import SqliteCacheStore

__all__ = ["CacheRecord", "CacheStore", "KeyCodec", "SqliteCacheStore", "TTLCacheStore", "validate_key"]
