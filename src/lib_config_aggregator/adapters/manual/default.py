"""In-memory source for tests and manual overrides.

Purpose
-------
Provide the simplest possible :class:`~lib_config_aggregator.application.ports.ConfigSource`:
a mutable ``dict`` that callers populate directly. Typical uses are unit tests
and high-priority runtime overrides registered on an aggregator.
"""

from __future__ import annotations

from typing import Mapping, TypeVar, overload

from ...application.ports import SyncConfigSource

T = TypeVar("T")


class ManualSource(SyncConfigSource[T]):
    """Synchronous source backed by a private ``dict``.

    Examples
    --------
    >>> source = ManualSource({"a": 1})
    >>> source.set("b", 2)
    >>> source.set({"c": 3})
    >>> source.unset("a")
    >>> sorted(source.list_sync())
    ['b', 'c']
    >>> source.read_sync("a") is None
    True
    """

    label = "ManualSource"

    def __init__(self, values: Mapping[str, T | None] | None = None) -> None:
        self._values: dict[str, T | None] = dict(values or {})

    def read_sync(self, key: str) -> T | None:
        return self._values.get(key)

    def read_all_sync(self) -> dict[str, T | None]:
        return dict(self._values)

    def list_sync(self) -> list[str]:
        return list(self._values)

    @overload
    def set(self, key: str, value: T | None) -> None: ...

    @overload
    def set(self, key: Mapping[str, T | None]) -> None: ...

    def set(self, key: str | Mapping[str, T | None], value: T | None = None) -> None:
        """Store *value* under *key*, or merge a whole mapping of values."""

        if isinstance(key, str):
            self._values[key] = value
        else:
            self._values.update(key)

    def unset(self, key: str) -> None:
        """Remove *key*; unknown keys are ignored."""

        self._values.pop(key, None)
