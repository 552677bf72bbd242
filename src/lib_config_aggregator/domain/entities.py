"""Domain value objects describing values on their way through the aggregator.

Purpose
-------
Give every stage of a resolution a small, explicit type instead of ad-hoc
dictionaries: what an interpretation function receives, what it may return,
how a source is registered, and what ends up in the result cache.

Contents
--------
* :class:`RawEntity` – input handed to interpretation functions.
* :class:`ConfigEntity` – explicit read result carrying a cache override.
* :class:`SourceRegistration` – one source plus priority, cache and ignore
  settings.
* :class:`CachedEntity` – a resolved value with its provenance and expiry.
* :func:`unwrap` – split a read result into ``(value, cache_for)``.

System Role
-----------
Pure data; no I/O and no logging. The aggregator and middleware import these
types, never the other way round.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..application.ports import ConfigSource

T = TypeVar("T")

#: Sentinel expiry for entries that never expire.
FOREVER: float = math.inf

#: Zero-argument callable returning the current time in milliseconds.
Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default :data:`Clock`: :func:`time.monotonic` in milliseconds."""

    return time.monotonic() * 1000.0


def expiry_for(cache_for: float | None, now: float) -> float | None:
    """Return the absolute expiry for a cache duration, or ``None`` when nothing may be cached.

    ``None`` and ``0`` cache forever; negative durations disable caching.

    >>> expiry_for(None, 10.0), expiry_for(0, 10.0), expiry_for(5, 10.0), expiry_for(-1, 10.0)
    (inf, inf, 15.0, None)
    """

    if cache_for is None or cache_for == 0:
        return FOREVER
    if cache_for < 0:
        return None
    return now + cache_for


@dataclass(frozen=True, slots=True)
class RawEntity(Generic[T]):
    """The value an interpretation function is asked to transform.

    Attributes
    ----------
    key:
        Key that was read.
    source:
        The inner source the raw value came from.
    value:
        Raw value, or ``None`` when the inner source has nothing for ``key``.
    """

    key: str
    source: ConfigSource[Any]
    value: T | None


@dataclass(frozen=True, slots=True)
class ConfigEntity(Generic[T]):
    """Explicit read result that overrides the cache duration for one value.

    Returning a plain value from a source or an interpreter is equivalent to
    returning ``ConfigEntity(value)``.

    Attributes
    ----------
    value:
        The interpreted value. ``None`` still means "absent".
    cache_for:
        Cache duration in milliseconds. ``None`` defers to the registration and
        aggregator defaults, ``0`` caches forever, negative values disable
        caching for this value.

    Examples
    --------
    >>> unwrap(ConfigEntity("v", cache_for=500))
    ('v', 500)
    >>> unwrap("plain")
    ('plain', None)
    """

    value: T | None
    cache_for: float | None = None


@dataclass(slots=True)
class SourceRegistration(Generic[T]):
    """A source registered on an aggregator.

    Attributes
    ----------
    source:
        Object satisfying the source contract. Shared; the aggregator never
        mutates it and identifies it by identity only.
    priority:
        Higher wins. Defaults to ``0``.
    cache_for:
        Default cache duration in milliseconds for values produced by this
        source; ``None`` defers to the aggregator default.
    ignore_if:
        Zero-argument predicate evaluated on every read; when it returns
        ``True`` the source is skipped for that call.
    """

    source: ConfigSource[T]
    priority: int = 0
    cache_for: float | None = None
    ignore_if: Callable[[], bool] | None = None

    def is_ignored(self) -> bool:
        """Evaluate :attr:`ignore_if` afresh; no memoisation."""

        return bool(self.ignore_if is not None and self.ignore_if())


@dataclass(frozen=True, slots=True)
class CachedEntity(Generic[T]):
    """A resolved value stored in the aggregator cache.

    Attributes
    ----------
    key:
        The key (or alias) the value was resolved for.
    value:
        Interpreted value.
    priority:
        Priority of the registration that produced the value.
    source:
        The winning :class:`SourceRegistration`.
    cache_for:
        Effective cache duration in milliseconds (``None`` = forever).
    cache_until:
        Absolute clock timestamp (ms) after which the entry is stale;
        :data:`FOREVER` when it never expires.
    """

    key: str
    value: T
    priority: int
    source: SourceRegistration[Any]
    cache_for: float | None
    cache_until: float = FOREVER

    def is_expired(self, now: float) -> bool:
        """Return ``True`` once ``cache_until`` has been reached.

        >>> from types import SimpleNamespace
        >>> entity = CachedEntity("k", 1, 0, SimpleNamespace(), 10, cache_until=100.0)
        >>> entity.is_expired(99.0), entity.is_expired(100.0)
        (False, True)
        """

        return self.cache_until <= now


def unwrap(result: Any) -> tuple[Any, float | None]:
    """Return ``(value, cache_for)`` for a plain value or a :class:`ConfigEntity`."""

    if isinstance(result, ConfigEntity):
        return result.value, result.cache_for
    return result, None
