"""Resolution engine: merge many sources into one prioritised, cached lookup.

Purpose
-------
Hold an ordered list of source registrations, resolve keys by querying them
in priority order, and keep the authoritative result cache with expiry and
priority-aware invalidation.

Contents
--------
* :class:`AggregatorParams` – engine-wide settings.
* :class:`ConfigAggregator` – the engine; itself a source, so aggregators nest.
* :class:`_Resolution` – bookkeeping for one key resolution shared by the sync
  and async paths.

Resolution rules
----------------
1. An expired cache entry is purged on access.
2. Without ``cache_respects_priority`` a valid cache entry is returned
   immediately; no source is consulted.
3. Otherwise the cached entry is the starting candidate and is only displaced
   by a strictly higher priority.
4. An alias expands to its source keys, otherwise the key is used as is.
5. Registrations are queried one at a time in registration order. Sources
   below the running priority, sources whose ``ignore_if`` is true and (on the
   sync path) sources that cannot answer synchronously are skipped; ``None``
   results are skipped. At equal priority the source evaluated last wins.
6. Cache duration: entity override, else registration ``cache_for``, else
   ``default_cache_length``, else forever. A result is persisted only when a
   source contributed during this call.

Exceptions raised by sources or interpretation functions propagate unchanged
and abort the resolution; no lower-priority fallback is attempted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar, Union

from ..domain.config import ConfigSnapshot, SourceInfo, describe_source
from ..domain.entities import CachedEntity, Clock, SourceRegistration, expiry_for, monotonic_ms, unwrap
from ..domain.errors import ConfigNotFoundError, InvalidParameter
from ..observability import log_debug, make_event
from .ports import Capability, ConfigSource, supports

T = TypeVar("T")

SourceLike = Union[ConfigSource[T], SourceRegistration[T]]


@dataclass(frozen=True, slots=True)
class AggregatorParams:
    """Engine-wide settings.

    Attributes
    ----------
    cache_respects_priority:
        When ``True`` a cached value does not short-circuit reads: sources with
        a strictly higher priority than the cached value are still consulted.
    default_cache_length:
        Cache duration in milliseconds for values whose registration sets none.
        ``None`` or ``0`` cache forever; negative values disable caching.
    """

    cache_respects_priority: bool = False
    default_cache_length: float | None = None


class ConfigAggregator(ConfigSource[T]):
    """Aggregate registered sources into one prioritised lookup surface.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> defaults, overrides = ManualSource({"k": "1"}), ManualSource({"k": "2"})
    >>> config = ConfigAggregator([defaults, SourceRegistration(overrides, priority=1)])
    >>> config.read_sync("k")
    '2'
    >>> config.delete_source(overrides)
    >>> config.clear_cache()
    >>> config.read_sync("k")
    '1'
    """

    label = "ConfigAggregator"

    def __init__(
        self,
        sources: SourceLike[T] | Iterable[SourceLike[T]] | None = None,
        params: AggregatorParams | None = None,
        *,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._params = params or AggregatorParams()
        self._clock = clock
        self._registrations: list[SourceRegistration[T]] = []
        self._aliases: dict[str, list[str]] = {}
        self._cache: dict[str, CachedEntity[T]] = {}
        if sources is not None:
            self.add_source(sources)

    @property
    def params(self) -> AggregatorParams:
        return self._params

    @property
    def capabilities(self) -> Capability:
        return Capability.SYNC | Capability.ASYNC

    @property
    def registrations(self) -> tuple[SourceRegistration[T], ...]:
        """Registered sources in iteration order."""

        return tuple(self._registrations)

    # ------------------------------------------------------------------ reads

    async def read(self, key: str) -> T | None:
        """Resolve *key*, consulting sources only when the cache cannot answer."""

        resolution = self._begin(key)
        if resolution is None:
            return self._cache[key].value
        for source_key in self._source_keys(key):
            for registration in tuple(self._registrations):
                if not resolution.admits(registration) or registration.is_ignored():
                    continue
                resolution.offer(registration, await registration.source.read(source_key), self._now())
        return self._finish(resolution)

    def read_sync(self, key: str) -> T | None:
        """Synchronous :meth:`read`; only sources declaring ``SYNC`` contribute."""

        resolution = self._begin(key)
        if resolution is None:
            return self._cache[key].value
        for source_key in self._source_keys(key):
            for registration in tuple(self._registrations):
                if not resolution.admits(registration) or registration.is_ignored():
                    continue
                if not supports(registration.source, Capability.SYNC):
                    continue
                resolution.offer(registration, registration.source.read_sync(source_key), self._now())
        return self._finish(resolution)

    async def require(self, key: str) -> T:
        """Like :meth:`read` but raise :class:`ConfigNotFoundError` on absence."""

        value = await self.read(key)
        if value is None:
            raise ConfigNotFoundError(key)
        return value

    def require_sync(self, key: str) -> T:
        """Like :meth:`read_sync` but raise :class:`ConfigNotFoundError` on absence."""

        value = self.read_sync(key)
        if value is None:
            raise ConfigNotFoundError(key)
        return value

    async def read_all(self) -> dict[str, T | None]:
        """Resolve every listed key one by one.

        Each key goes through a full resolution, so this can be expensive with
        many or slow sources.
        """

        return {key: await self.read(key) for key in await self.list()}

    def read_all_sync(self) -> dict[str, T | None]:
        return {key: self.read_sync(key) for key in self.list_sync()}

    async def list(self) -> list[str]:
        """Union of alias keys and every non-ignored source's keys, deduplicated."""

        keys: list[str] = list(self._aliases)
        for registration in tuple(self._registrations):
            if registration.is_ignored():
                continue
            keys.extend(await registration.source.list())
        return list(dict.fromkeys(keys))

    def list_sync(self) -> list[str]:
        keys: list[str] = list(self._aliases)
        for registration in tuple(self._registrations):
            if registration.is_ignored() or not supports(registration.source, Capability.SYNC):
                continue
            keys.extend(registration.source.list_sync())
        return list(dict.fromkeys(keys))

    # ---------------------------------------------------------------- aliases

    def alias(self, alias_key: str, source_keys: str | Sequence[str]) -> None:
        """Make *alias_key* resolve from the highest-priority value among *source_keys*.

        The alias has its own cache slot: reading it never reuses entries cached
        for the underlying keys, and reading those keys never reuses the
        alias's entry. Direct reads of the underlying keys keep working.
        """

        keys = [source_keys] if isinstance(source_keys, str) else list(source_keys)
        self._aliases[alias_key] = keys
        log_debug("alias_registered", **make_event(alias_key, None, {"source_keys": keys}))

    # ------------------------------------------------------------ introspection

    def describe(self, key: str) -> CachedEntity[T] | None:
        """Return the cached entity for *key* without resolving anything."""

        return self._check_cache(key)

    def export(self) -> dict[str, T]:
        """Return ``{key: value}`` for every unexpired cached entity; nothing is resolved."""

        now = self._now()
        return {entity.key: entity.value for entity in self._cache.values() if not entity.is_expired(now)}

    def snapshot(self) -> ConfigSnapshot:
        """Return the exported values with their provenance as a :class:`ConfigSnapshot`."""

        now = self._now()
        data: dict[str, Any] = {}
        meta: dict[str, SourceInfo] = {}
        for entity in self._cache.values():
            if entity.is_expired(now):
                continue
            data[entity.key] = entity.value
            meta[entity.key] = SourceInfo(
                key=entity.key,
                priority=entity.priority,
                source=describe_source(entity.source.source),
            )
        return ConfigSnapshot(data, meta)

    def clear_cache(self, key: str | None = None) -> None:
        """Drop one cached key, or the whole cache when *key* is ``None``."""

        if key is None:
            self._cache = {}
        else:
            self._cache.pop(key, None)
        log_debug("cache_cleared", **make_event(key, None))

    # ---------------------------------------------------------------- sources

    def add_source(
        self,
        source: SourceLike[T] | Iterable[SourceLike[T]],
        priority: int = 0,
        *,
        cache_for: float | None = None,
        ignore_if: Callable[[], bool] | None = None,
    ) -> None:
        """Register source(s) or update the registration of already known ones.

        Bare sources are registered with *priority*, *cache_for* and
        *ignore_if*; :class:`SourceRegistration` objects carry their own
        settings. A source already registered (same object) is replaced in
        place, keeping its position in the iteration order.
        """

        entries = [source] if isinstance(source, (ConfigSource, SourceRegistration)) else list(source)
        for entry in entries:
            if isinstance(entry, SourceRegistration):
                registration = entry
            else:
                registration = SourceRegistration(entry, priority, cache_for, ignore_if)
            self._register(registration)

    set_source = add_source

    def delete_source(self, source: SourceLike[T] | Iterable[SourceLike[T]]) -> None:
        """Unregister source(s), identified by object identity.

        A :class:`SourceRegistration` stands for the source it wraps, so the
        object handed to :meth:`add_source` can be handed back here.
        """

        entries = [source] if isinstance(source, (ConfigSource, SourceRegistration)) else list(source)
        targets = [entry.source if isinstance(entry, SourceRegistration) else entry for entry in entries]
        for target in targets:
            if not isinstance(target, ConfigSource):
                raise TypeError(f"Expected a ConfigSource or SourceRegistration, got {type(target).__name__}")
        kept: list[SourceRegistration[T]] = []
        for registration in self._registrations:
            if any(registration.source is target for target in targets):
                log_debug("source_removed", **make_event(None, describe_source(registration.source)))
                continue
            kept.append(registration)
        self._registrations = kept

    unset_source = delete_source

    # ---------------------------------------------------------------- helpers

    def _register(self, registration: SourceRegistration[T]) -> None:
        if not isinstance(registration.source, ConfigSource):
            raise TypeError(f"Expected a ConfigSource, got {type(registration.source).__name__}")
        if registration.source is self:
            raise InvalidParameter("An aggregator cannot be registered as its own source")
        event = make_event(None, describe_source(registration.source), {"priority": registration.priority})
        for index, existing in enumerate(self._registrations):
            if existing.source is registration.source:
                self._registrations[index] = registration
                log_debug("source_updated", **event)
                return
        self._registrations.append(registration)
        log_debug("source_registered", **event)

    def _now(self) -> float:
        return self._clock()

    def _source_keys(self, key: str) -> list[str]:
        return self._aliases.get(key, [key])

    def _check_cache(self, key: str) -> CachedEntity[T] | None:
        entity = self._cache.get(key)
        if entity is None:
            return None
        if entity.is_expired(self._now()):
            del self._cache[key]
            log_debug("cache_expired", **make_event(key, describe_source(entity.source.source)))
            return None
        return entity

    def _begin(self, key: str) -> _Resolution[T] | None:
        """Return the resolution state for *key*, or ``None`` when the cache answers."""

        cached = self._check_cache(key)
        if cached is not None and not self._params.cache_respects_priority:
            log_debug("cache_hit", **make_event(key, describe_source(cached.source.source)))
            return None
        return _Resolution(key, cached, self._params.default_cache_length)

    def _finish(self, resolution: _Resolution[T]) -> T | None:
        candidate = resolution.candidate
        if candidate is None:
            return None
        if resolution.fresh:
            if not candidate.is_expired(self._now()):
                self._cache[resolution.key] = candidate
            log_debug(
                "value_resolved",
                **make_event(resolution.key, describe_source(candidate.source.source), {"priority": candidate.priority}),
            )
        return candidate.value


class _Resolution(Generic[T]):
    """State of one key resolution: current candidate and running priority."""

    def __init__(self, key: str, cached: CachedEntity[T] | None, default_cache_length: float | None) -> None:
        self.key = key
        self.candidate = cached
        self.fresh = False
        self._priority = cached.priority if cached is not None else None
        # A baseline taken from the cache is only displaced by a strictly higher priority.
        self._strict = cached is not None
        self._default_cache_length = default_cache_length

    def admits(self, registration: SourceRegistration[Any]) -> bool:
        if self._priority is None:
            return True
        if self._strict:
            return registration.priority > self._priority
        return registration.priority >= self._priority

    def offer(self, registration: SourceRegistration[Any], result: Any, now: float) -> None:
        value, cache_for = unwrap(result)
        if value is None:
            return
        if cache_for is None:
            cache_for = registration.cache_for if registration.cache_for is not None else self._default_cache_length
        expiry = expiry_for(cache_for, now)
        self.candidate = CachedEntity(
            key=self.key,
            value=value,
            priority=registration.priority,
            source=registration,
            cache_for=cache_for,
            cache_until=now if expiry is None else expiry,
        )
        self.fresh = True
        self._priority = registration.priority
        self._strict = False
