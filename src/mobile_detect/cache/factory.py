from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from mobile_detect.cache.memory_store import TTLCacheStore
from mobile_detect.cache.sqlite_store import SqliteCacheStore

if TYPE_CHECKING:
    from config import ConfigurationSet

    from mobile_detect.cache.protocol import CacheStore
    from mobile_detect.detector import MobileDetect
    from mobile_detect.rules import RuleEvaluator


def create_cache_store(config: ConfigurationSet | None = None) -> CacheStore:
    """Build the store named by ``cache.backend`` (``memory`` or ``sqlite``)."""
    from mobile_detect.config import create_config, load_max_key_length

    if config is None:
        config = create_config()
    backend = str(config["cache.backend"]).lower()
    max_key_length = load_max_key_length(config)
    if backend == "memory":
        return TTLCacheStore(max_key_length=max_key_length)
    if backend == "sqlite":
        db_path = Path(str(config["cache.db_path"])).expanduser()
        return SqliteCacheStore(db_path, max_key_length=max_key_length)
    raise ValueError(f"Unknown cache backend: {backend!r}")


def create_detector(
    config: ConfigurationSet | None = None,
    evaluator: RuleEvaluator | None = None,
    cache_key_fn: object = None,
) -> MobileDetect:
    """Build a detector whose store and TTL come from configuration."""
    from mobile_detect.config import create_config, load_detector_options
    from mobile_detect.detector import MobileDetect

    if config is None:
        config = create_config()
    options = load_detector_options(config, cache_key_fn=cache_key_fn)
    return MobileDetect(
        create_cache_store(config),
        options,
        evaluator=evaluator,
    )
