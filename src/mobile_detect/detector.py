"""Memoizing device detector.

``MobileDetect`` binds one user agent (and optionally its request headers) and
answers named checks through a cache store. Each check result is computed at
most once per (check, user agent, headers) for the lifetime of its record.

Usage:
    detect = MobileDetect()
    detect.set_user_agent("Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) ...")
    detect.is_mobile()   # evaluated and cached
    detect.is_mobile()   # read from the cache
    detect.is_ipad()     # same record as detect.is_("iPad")

Pass ``cache_enabled=False`` to evaluate every check directly, without key
derivation or caching.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from mobile_detect.cache.keys import DEFAULT_MAX_KEY_LENGTH, KeyCodec
from mobile_detect.cache.memory_store import TTLCacheStore
from mobile_detect.config import DetectorOptions
from mobile_detect.exceptions import CacheInvalidArgumentError, ConfigurationError, UnknownRuleError
from mobile_detect.headers import flatten_headers, normalize_header_name, normalize_headers, user_agent_from_headers
from mobile_detect.rules import MOBILE_CHECK, TABLET_CHECK, SignatureRuleEvaluator

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from mobile_detect.cache.protocol import CacheStore
    from mobile_detect.rules import RuleEvaluator

logger = logging.getLogger(__name__)


class MobileDetect:
    def __init__(
        self,
        cache: CacheStore | None = None,
        options: Mapping[str, object] | DetectorOptions | None = None,
        *,
        evaluator: RuleEvaluator | None = None,
        cache_enabled: bool = True,
    ) -> None:
        """Create a detector.

        Args:
            cache: Store used to memoize check results. When omitted, the detector
                creates and owns a private TTLCacheStore.
            options: ``{"cache_key_fn": ..., "ttl": ...}`` or DetectorOptions.
                Nothing is validated here; a bad key function fails on first use.
            evaluator: Rule evaluator. Defaults to the bundled signature table.
            cache_enabled: When False, checks are always evaluated directly.
        """
        self._options = options if isinstance(options, DetectorOptions) else DetectorOptions.from_mapping(options)
        if not cache_enabled:
            cache = None
        elif cache is None:
            cache = TTLCacheStore()
        self._cache = cache
        self._evaluator: RuleEvaluator = evaluator if evaluator is not None else SignatureRuleEvaluator()
        max_key_length = getattr(cache, "max_key_length", None)
        if not isinstance(max_key_length, int):
            max_key_length = DEFAULT_MAX_KEY_LENGTH
        self._codec = KeyCodec(self._options.cache_key_fn, max_length=max_key_length)
        self._user_agent: str | None = None
        self._http_headers: dict[str, str] = {}

    @property
    def cache(self) -> CacheStore | None:
        return self._cache

    def get_cache(self) -> CacheStore | None:
        return self._cache

    @property
    def options(self) -> DetectorOptions:
        return self._options

    # -- Session binding -----------------------------------------------------

    def set_user_agent(self, user_agent: str | None) -> str | None:
        """Bind a new user agent and drop the previous request headers.

        The shared cache is left untouched.
        """
        self._http_headers = {}
        return self._bind_user_agent(user_agent)

    def _bind_user_agent(self, user_agent: str | None) -> str | None:
        if user_agent is not None:
            user_agent = user_agent.strip() or None
        self._user_agent = user_agent
        return self._user_agent

    def get_user_agent(self) -> str | None:
        return self._user_agent

    def has_user_agent(self) -> bool:
        return self._user_agent is not None

    def set_http_headers(self, headers: Mapping[str, object]) -> None:
        """Bind request headers (WSGI environ or raw header names).

        If any user-agent header is present, the bound user agent is replaced.
        """
        self._http_headers = normalize_headers(headers)
        user_agent = user_agent_from_headers(self._http_headers)
        if user_agent is not None:
            self._bind_user_agent(user_agent)

    def get_http_headers(self) -> dict[str, str]:
        return dict(self._http_headers)

    def get_http_header(self, name: str) -> str | None:
        return self._http_headers.get(normalize_header_name(name))

    # -- Checks --------------------------------------------------------------

    def is_mobile(self) -> bool:
        return bool(self._check(MOBILE_CHECK))

    def is_tablet(self) -> bool:
        return bool(self._check(TABLET_CHECK))

    def is_(self, name: str) -> bool:
        """Check a named rule, e.g. ``is_("iPad")`` or ``is_("AndroidOS")``."""
        return bool(self._check(self._canonical_name(name)))

    def __getattr__(self, name: str) -> Callable[[], bool]:
        # Only reached for attributes missing from the instance and class.
        if not name.startswith("is_") or len(name) <= 3 or "_evaluator" not in self.__dict__:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        try:
            rule = self._canonical_name(name[3:])
        except UnknownRuleError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None
        return partial(self.is_, rule)

    def _canonical_name(self, name: str) -> str:
        resolve = getattr(self._evaluator, "resolve", None)
        return resolve(name) if resolve is not None else name

    def _check(self, check_name: str) -> object:
        method = f"is_{check_name}"
        user_agent = self._user_agent
        if user_agent is None:
            raise ConfigurationError(f"No user-agent has been set before calling {method}().")

        if self._cache is None:
            return self._evaluator.evaluate(check_name, user_agent, self._http_headers)

        try:
            key = self._codec.derive_key(check_name, user_agent, flatten_headers(self._http_headers))
            cached = self._cache.get(key)
        except (ConfigurationError, CacheInvalidArgumentError) as e:
            raise ConfigurationError(f"Cache problem in {method}(): {e}") from e

        if cached is not None:
            logger.debug("Cache hit for %s [key=%s]", check_name, key)
            return cached

        logger.debug("Cache miss for %s [key=%s], evaluating rules", check_name, key)
        value = self._evaluator.evaluate(check_name, user_agent, self._http_headers)
        try:
            ttl = self._options.resolved_ttl()
            stored = self._cache.set(key, value, ttl)
        except (CacheInvalidArgumentError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Cache problem in {method}(): {e}") from e
        if stored is False:
            raise ConfigurationError(f"Cache problem in {method}(): the store did not keep the result for key {key}.")
        logger.debug("Cached %s [key=%s, ttl=%s]", check_name, key, ttl)
        return value
