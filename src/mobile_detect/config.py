from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from mobile_detect.cache.keys import DEFAULT_MAX_KEY_LENGTH

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mobile_detect.cache.protocol import TTL

logger = logging.getLogger(__name__)

_RECOGNIZED_OPTIONS = frozenset({"cache_key_fn", "ttl"})

_DEFAULTS: dict[str, object] = {
    "cache": {
        "backend": "memory",
        "db_path": "~/.cache/mobile_detect/cache.db",
        "max_key_length": DEFAULT_MAX_KEY_LENGTH,
        "ttl": "",
    },
}


@dataclass(frozen=True)
class DetectorOptions:
    """Construction-time options for a detector.

    Attributes:
        cache_key_fn: Replaces the default SHA-1 key derivation. Receives the
            ``"check:user_agent:headers"`` string. Not validated until the
            detector first uses its cache.
        ttl: Lifetime of cached results. ``None`` keeps them forever. Kept as
            given; strings are parsed by ``resolved_ttl`` when a result is stored.
    """

    cache_key_fn: object = None
    ttl: object = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None) -> DetectorOptions:
        if not options:
            return cls()
        unknown = sorted(set(options) - _RECOGNIZED_OPTIONS)
        if unknown:
            logger.warning("Ignoring unknown detector options: %s", ", ".join(unknown))
        return cls(cache_key_fn=options.get("cache_key_fn"), ttl=options.get("ttl"))

    def resolved_ttl(self) -> TTL:
        """Return the TTL to store results with.

        Raises:
            ValueError: If ``ttl`` is a string that is not a number of seconds.
        """
        if isinstance(self.ttl, str):
            return _parse_ttl(self.ttl)
        return self.ttl  # type: ignore[return-value]


def create_config(
    yaml_path: str = "mobile_detect.yaml",
    env_prefix: str = "MOBILE_DETECT",
    defaults: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``MOBILE_DETECT__CACHE__TTL``.
        defaults: Default configuration values.
    """
    if defaults is None:
        defaults = _DEFAULTS

    return ConfigurationSet(
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    )


def _parse_ttl(raw: object) -> float | None:
    """Env vars and YAML hand back strings; an empty value means never expire."""
    if raw is None:
        return None
    text = str(raw).strip()
    if text == "" or text.lower() == "none":
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"cache.ttl must be a number of seconds, got {raw!r}") from None


def load_detector_options(cfg: ConfigurationSet | None = None, cache_key_fn: object = None) -> DetectorOptions:
    """Build DetectorOptions from the ``cache`` section of a configuration.

    Key functions are code, not configuration, so ``cache_key_fn`` is passed in.
    """
    if cfg is None:
        cfg = create_config()
    return DetectorOptions(cache_key_fn=cache_key_fn, ttl=_parse_ttl(cfg["cache.ttl"]))


def load_max_key_length(cfg: ConfigurationSet) -> int:
    return int(str(cfg["cache.max_key_length"]))
