from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import timedelta

TTL: TypeAlias = "int | float | timedelta | None"


class CacheStore(Protocol):
    def get(self, key: str, default: object = None) -> object: ...

    def set(self, key: str, value: object, ttl: TTL = None) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def clear(self) -> bool: ...

    def has(self, key: str) -> bool: ...

    def get_multiple(self, keys: Iterable[str], default: object = None) -> dict[str, object]: ...

    def set_multiple(self, values: Mapping[str, object], ttl: TTL = None) -> bool: ...

    def delete_multiple(self, keys: Iterable[str]) -> bool: ...
