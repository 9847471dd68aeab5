"""Cache key derivation and validation.

Every store and the detector share the same key rules, so a key produced by a
custom key function is rejected by the detector before it ever reaches a store.

Usage:
    codec = KeyCodec()
    key = codec.derive_key("mobile", "Mozilla/5.0 iPhone;", "")
    # sha1("mobile:Mozilla/5.0 iPhone;:")
"""

from __future__ import annotations

import hashlib
import re
from typing import TYPE_CHECKING

from mobile_detect.exceptions import CacheInvalidArgumentError, ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_MAX_KEY_LENGTH = 40

# PSR-16 reserves these characters for future extensions.
_RESERVED_CHARACTERS = frozenset("{}()/\\@:")
_WHITESPACE = re.compile(r"\s")


def validate_key(key: object, max_length: int = DEFAULT_MAX_KEY_LENGTH) -> str:
    """Return ``key`` unchanged if it is a usable cache key.

    Raises:
        CacheInvalidArgumentError: If the key is not a string, is empty, is longer
            than ``max_length``, or contains whitespace or a reserved character.
    """
    if not isinstance(key, str):
        raise CacheInvalidArgumentError(f"Cache key must be a string, got {type(key).__name__}")
    if key == "":
        raise CacheInvalidArgumentError("Cache key must not be empty")
    if len(key) > max_length:
        raise CacheInvalidArgumentError(f"Cache key is {len(key)} characters long, the maximum is {max_length}")
    if _WHITESPACE.search(key):
        raise CacheInvalidArgumentError(f"Cache key {key!r} must not contain whitespace")
    reserved = sorted(_RESERVED_CHARACTERS.intersection(key))
    if reserved:
        raise CacheInvalidArgumentError(f"Cache key {key!r} contains reserved characters: {''.join(reserved)}")
    return key


def compose_raw_key(check_name: str, user_agent: str, context: str) -> str:
    """Return the pre-digest key ``"{check_name}:{user_agent}:{context}"``."""
    return f"{check_name}:{user_agent}:{context}"


def sha1_key(raw_key: str) -> str:
    return hashlib.sha1(raw_key.encode("utf-8")).hexdigest()


class KeyCodec:
    """Derives validated cache keys, optionally through a custom key function.

    The key function is stored as given. Whether it is callable is only checked
    when a key is first derived, so building a detector with a bad option never
    fails; using its cache does.
    """

    def __init__(self, key_fn: object = None, max_length: int = DEFAULT_MAX_KEY_LENGTH) -> None:
        self._key_fn = key_fn
        self._max_length = max_length

    @property
    def max_length(self) -> int:
        return self._max_length

    @property
    def key_fn(self) -> object:
        return self._key_fn

    def _resolve_key_fn(self) -> Callable[[str], object]:
        if self._key_fn is None:
            return sha1_key
        if not callable(self._key_fn):
            raise ConfigurationError("cache_key_fn is not a function.")
        return self._key_fn

    def derive_key(self, check_name: str, user_agent: str, context: str) -> str:
        """Build the cache key for one check.

        Raises:
            ConfigurationError: If the configured key function is not callable.
            CacheInvalidArgumentError: If the derived key breaks the key rules.
        """
        key_fn = self._resolve_key_fn()
        key = key_fn(compose_raw_key(check_name, user_agent, context))
        return validate_key(key, self._max_length)
