"""Aliaser middleware: expose source keys under alternate names.

Passthrough modes decide what stays visible besides the aliases:

* ``full`` – aliases and every original key resolve.
* ``partial`` – aliases resolve, original keys targeted by an alias are
  masked, every other key passes through (default).
* ``none`` – only aliases resolve.
"""

from __future__ import annotations

import enum
from typing import Mapping, TypeVar

from ..application.ports import Capability, ConfigSource
from ..domain.config import describe_source
from ..domain.errors import InvalidParameter

T = TypeVar("T")


class Passthrough(str, enum.Enum):
    """Visibility of original keys behind an :class:`Aliaser`."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class Aliaser(ConfigSource[T]):
    """Middleware source mapping ``alias -> source_key``.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> inner = ManualSource({"X": "val", "other": "o"})
    >>> aliased = Aliaser(inner, {"Y": "X"}, "partial")
    >>> aliased.read_sync("Y"), aliased.read_sync("X"), aliased.read_sync("other")
    ('val', None, 'o')
    >>> aliased.list_sync()
    ['other', 'Y']
    """

    def __init__(
        self,
        source: ConfigSource[T],
        aliases: Mapping[str, str],
        passthrough: Passthrough | str = Passthrough.PARTIAL,
    ) -> None:
        self._source = source
        self._aliases = dict(aliases)
        self._passthrough = _parse_passthrough(passthrough)

    @property
    def passthrough(self) -> Passthrough:
        return self._passthrough

    @property
    def label(self) -> str:
        return f"Aliaser({describe_source(self._source)}, {self._passthrough.value})"

    @property
    def capabilities(self) -> Capability:
        return self._source.capabilities

    async def read(self, key: str) -> T | None:
        target = self._aliases.get(key)
        if target is not None:
            value = await self._source.read(target)
            if value is not None or self._passthrough is not Passthrough.FULL:
                return value
        if not self._passes_through(key):
            return None
        return await self._source.read(key)

    async def read_all(self) -> dict[str, T | None]:
        return {key: await self.read(key) for key in await self.list()}

    async def list(self) -> list[str]:
        if self._passthrough is Passthrough.NONE:
            return list(self._aliases)
        return self._visible(await self._source.list())

    def read_sync(self, key: str) -> T | None:
        target = self._aliases.get(key)
        if target is not None:
            value = self._source.read_sync(target)
            if value is not None or self._passthrough is not Passthrough.FULL:
                return value
        if not self._passes_through(key):
            return None
        return self._source.read_sync(key)

    def read_all_sync(self) -> dict[str, T | None]:
        return {key: self.read_sync(key) for key in self.list_sync()}

    def list_sync(self) -> list[str]:
        if self._passthrough is Passthrough.NONE:
            return list(self._aliases)
        return self._visible(self._source.list_sync())

    def _passes_through(self, key: str) -> bool:
        """Return ``True`` when *key* may be read under its original name."""

        if self._passthrough is Passthrough.FULL:
            return True
        if self._passthrough is Passthrough.PARTIAL:
            return key not in self._aliases.values()
        return False

    def _visible(self, source_keys: list[str]) -> list[str]:
        keys = [key for key in source_keys if self._passes_through(key)]
        return list(dict.fromkeys([*keys, *self._aliases]))


def _parse_passthrough(value: Passthrough | str) -> Passthrough:
    try:
        return Passthrough(value)
    except ValueError as exc:
        raise InvalidParameter(f"Unknown passthrough mode: {value!r}") from exc
