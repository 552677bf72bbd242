"""Mapper middleware: rename or hide keys with a single function.

``mapping(source_key)`` returns the external key, or ``None`` to hide the key.
Reads invert the mapping through a key map rebuilt from the inner source's
``list`` whenever an unknown key is requested, so keys added to the inner
source are discovered. When several source keys map to one external key, the
first in the inner source's list order wins.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from ..application.ports import Capability, ConfigSource
from ..domain.config import describe_source

T = TypeVar("T")

KeyMapping = Callable[[str], "str | None"]


class Mapper(ConfigSource[T]):
    """Middleware source rewriting keys of an inner source.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> inner = ManualSource({"APP_PORT": "80", "SECRET": "s"})
    >>> mapped = Mapper(inner, lambda k: k[4:].lower() if k.startswith("APP_") else None)
    >>> mapped.list_sync()
    ['port']
    >>> mapped.read_sync("port"), mapped.read_sync("SECRET")
    ('80', None)
    """

    def __init__(self, source: ConfigSource[T], mapping: KeyMapping) -> None:
        self._source = source
        self._mapping = mapping
        self._key_map: dict[str, str] = {}

    @property
    def label(self) -> str:
        return f"Mapper({describe_source(self._source)})"

    @property
    def capabilities(self) -> Capability:
        return self._source.capabilities

    async def read(self, key: str) -> T | None:
        if key not in self._key_map:
            self._rebuild(await self._source.list())
        source_key = self._key_map.get(key)
        return None if source_key is None else await self._source.read(source_key)

    async def read_all(self) -> dict[str, T | None]:
        self._rebuild(await self._source.list())
        return {key: await self._source.read(source_key) for key, source_key in list(self._key_map.items())}

    async def list(self) -> list[str]:
        self._rebuild(await self._source.list())
        return list(self._key_map)

    def read_sync(self, key: str) -> T | None:
        if key not in self._key_map:
            self._rebuild(self._source.list_sync())
        source_key = self._key_map.get(key)
        return None if source_key is None else self._source.read_sync(source_key)

    def read_all_sync(self) -> dict[str, T | None]:
        self._rebuild(self._source.list_sync())
        return {key: self._source.read_sync(source_key) for key, source_key in list(self._key_map.items())}

    def list_sync(self) -> list[str]:
        self._rebuild(self._source.list_sync())
        return list(self._key_map)

    def _rebuild(self, source_keys: list[str]) -> None:
        key_map: dict[str, str] = {}
        for source_key in source_keys:
            mapped = self._mapping(source_key)
            if mapped is not None:
                key_map.setdefault(mapped, source_key)
        self._key_map = key_map
