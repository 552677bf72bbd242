"""Fluent builders for the key-rewriting middleware.

Examples
--------
>>> from lib_config_aggregator.adapters.manual.default import ManualSource
>>> env = ManualSource({"DB_HOST": "db"})
>>> Alias.set("db.host").to("DB_HOST").without_passthrough(env).read_sync("db.host")
'db'
>>> Map.from_(str.lower).on(env).list_sync()
['db_host']
>>> Uplevel.only("cfg").without_cache().on(ManualSource({"cfg": {"a": 1}})).read_sync("a")
1
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence, TypeVar, overload

from ..application.ports import ConfigSource
from .aliaser import Aliaser, Passthrough
from .mapper import KeyMapping, Mapper
from .upleveler import DEFAULT_UPLEVEL_CACHE_LENGTH, Upleveler

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class _PendingAlias:
    """Half-built alias waiting for its source key."""

    builder: Alias
    alias: str

    def to(self, source_key: str) -> Alias:
        return Alias({**self.builder.aliases, self.alias: source_key})


@dataclass(frozen=True, slots=True)
class Alias:
    """Collects ``alias -> source_key`` pairs and builds an :class:`Aliaser`."""

    aliases: Mapping[str, str] = field(default_factory=dict)

    @overload
    @staticmethod
    def set(alias: str) -> _PendingAlias: ...

    @overload
    @staticmethod
    def set(alias: Mapping[str, str]) -> Alias: ...

    @staticmethod
    def set(alias: str | Mapping[str, str]) -> _PendingAlias | Alias:
        """Start a builder with one alias (``.to(key)`` follows) or a whole mapping."""

        return Alias().and_set(alias)

    def and_set(self, alias: str | Mapping[str, str]) -> _PendingAlias | Alias:
        """Add another alias to this builder."""

        if isinstance(alias, str):
            return _PendingAlias(self, alias)
        return Alias({**self.aliases, **alias})

    def with_passthrough(self, source: ConfigSource[T]) -> Aliaser[T]:
        """Aliases and every original key stay readable."""

        return Aliaser(source, self.aliases, Passthrough.FULL)

    on = with_passthrough

    def with_partial_passthrough(self, source: ConfigSource[T]) -> Aliaser[T]:
        """Aliased keys are only readable through their alias."""

        return Aliaser(source, self.aliases, Passthrough.PARTIAL)

    def without_passthrough(self, source: ConfigSource[T]) -> Aliaser[T]:
        """Only aliases are readable."""

        return Aliaser(source, self.aliases, Passthrough.NONE)


@dataclass(frozen=True, slots=True)
class Map:
    """Builds a :class:`Mapper` from a key mapping function."""

    mapping: KeyMapping

    @staticmethod
    def from_(mapping: KeyMapping) -> Map:
        return Map(mapping)

    def on(self, source: ConfigSource[T]) -> Mapper[T]:
        return Mapper(source, self.mapping)


@dataclass(frozen=True, slots=True)
class Uplevel:
    """Builds an :class:`Upleveler`."""

    keys: Sequence[str] | None = None
    cache_length: float = DEFAULT_UPLEVEL_CACHE_LENGTH

    @staticmethod
    def all() -> Uplevel:
        return Uplevel()

    @staticmethod
    def only(keys: str | Sequence[str]) -> Uplevel:
        return Uplevel([keys] if isinstance(keys, str) else list(keys))

    def with_cache(self, length: float) -> Uplevel:
        """Set the internal cache length in milliseconds (``0`` = forever)."""

        return Uplevel(self.keys, length)

    def without_cache(self) -> Uplevel:
        """Always re-read the inner source."""

        return Uplevel(self.keys, -1)

    def on(self, source: ConfigSource[Mapping[str, T]]) -> Upleveler[T]:
        return Upleveler(source, self.keys, self.cache_length)
