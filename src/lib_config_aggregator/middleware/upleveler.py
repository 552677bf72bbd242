"""Upleveler middleware: promote keys nested inside mapping values.

A source whose values are mappings (a parsed document exposed under one key,
a secret holding a JSON object) is flattened so ``read("cfg") == {"a": 1}``
becomes ``read("a") == 1``. The first parent key, in iteration order, that
defines a nested key wins.

The upleveler keeps a short-lived internal cache so bursts of reads do not
re-read the inner source for every nested key. Changes to the inner source
therefore only become visible once the window lapses. This cache is
independent of, and invisible to, the aggregator cache.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from ..application.merge import flatten_first_wins
from ..application.ports import Capability, ConfigSource, supports
from ..domain.config import describe_source
from ..domain.entities import Clock, expiry_for, monotonic_ms, unwrap
from ..observability import log_debug

T = TypeVar("T")

#: Default internal cache length in milliseconds.
DEFAULT_UPLEVEL_CACHE_LENGTH = 10_000


class Upleveler(ConfigSource[T]):
    """Middleware source exposing nested keys of mapping values.

    Parameters
    ----------
    source:
        Inner source whose values are string-keyed mappings.
    keys:
        Inner keys to uplevel. ``None`` uplevels every inner key.
    cache_length:
        Internal cache length in milliseconds. ``0`` reads the inner source
        once and keeps the result forever; a negative value disables the cache.
    clock:
        Millisecond clock, replaceable for tests.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> inner = ManualSource({"cfg": {"a": "1", "b": "2"}, "more": {"a": "x", "c": "3"}})
    >>> flat = Upleveler(inner)
    >>> flat.read_sync("a"), flat.read_sync("c")
    ('1', '3')
    >>> Upleveler(inner, keys=["more"]).list_sync()
    ['a', 'c']
    """

    def __init__(
        self,
        source: ConfigSource[Mapping[str, T]],
        keys: Sequence[str] | None = None,
        cache_length: float = DEFAULT_UPLEVEL_CACHE_LENGTH,
        *,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._source = source
        self._keys = list(keys) if keys is not None else None
        self._cache_length = cache_length
        self._clock = clock
        self._values: dict[str, T] = {}
        self._expires = -math.inf

    @property
    def label(self) -> str:
        return f"Upleveler({describe_source(self._source)})"

    @property
    def capabilities(self) -> Capability:
        return self._source.capabilities

    async def read(self, key: str) -> T | None:
        if self._is_stale():
            self._refresh(await self._read_parents())
        return self._values.get(key)

    async def read_all(self) -> dict[str, T | None]:
        if self._is_stale():
            self._refresh(await self._read_parents())
        return dict(self._values)

    async def list(self) -> list[str]:
        if self._is_stale():
            self._refresh(await self._read_parents())
        return list(self._values)

    def read_sync(self, key: str) -> T | None:
        if not supports(self._source, Capability.SYNC):
            return None
        if self._is_stale():
            self._refresh(self._read_parents_sync())
        return self._values.get(key)

    def read_all_sync(self) -> dict[str, T | None]:
        if not supports(self._source, Capability.SYNC):
            return {}
        if self._is_stale():
            self._refresh(self._read_parents_sync())
        return dict(self._values)

    def list_sync(self) -> list[str]:
        if not supports(self._source, Capability.SYNC):
            return []
        if self._is_stale():
            self._refresh(self._read_parents_sync())
        return list(self._values)

    def invalidate(self) -> None:
        """Drop the internal cache so the next call re-reads the inner source."""

        self._expires = -math.inf

    async def _read_parents(self) -> list[Any]:
        if self._keys is None:
            return list((await self._source.read_all()).values())
        return [await self._source.read(key) for key in self._keys]

    def _read_parents_sync(self) -> list[Any]:
        if self._keys is None:
            return list(self._source.read_all_sync().values())
        return [self._source.read_sync(key) for key in self._keys]

    def _is_stale(self) -> bool:
        return self._clock() >= self._expires

    def _refresh(self, parents: Iterable[Any]) -> None:
        now = self._clock()
        self._values = flatten_first_wins(unwrap(parent)[0] for parent in parents)
        expires = expiry_for(self._cache_length, now)
        self._expires = -math.inf if expires is None else expires
        log_debug("uplevel_refreshed", key=None, source=self.label, keys=len(self._values))
