"""Immutable snapshot of already-resolved configuration.

Purpose
-------
Give tooling (the CLI, diagnostics, tests) a read-only mapping of every value
an aggregator has resolved so far, together with the provenance of each value.
Building a snapshot never triggers a resolution.

Contents
--------
* :class:`SourceInfo` – provenance record for one key.
* :class:`ConfigSnapshot` – ``Mapping`` over resolved values with provenance
  lookups and JSON export.
* :func:`describe_source` – human readable label for a source object.
* :data:`EMPTY_SNAPSHOT` – canonical empty instance.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, TypedDict


class SourceInfo(TypedDict):
    """Describe where a resolved key came from.

    Attributes
    ----------
    key:
        Key (or alias) the value was resolved for.
    priority:
        Priority of the winning registration.
    source:
        Label of the winning source (see :func:`describe_source`).
    """

    key: str
    priority: int
    source: str


@dataclass(frozen=True, slots=True)
class ConfigSnapshot(Mapping[str, Any]):
    """Read-only mapping of resolved values.

    Examples
    --------
    >>> snap = ConfigSnapshot(
    ...     {"db.host": "localhost"},
    ...     {"db.host": {"key": "db.host", "priority": 10, "source": "EnvSource(prefix='APP')"}},
    ... )
    >>> snap["db.host"]
    'localhost'
    >>> snap.origin("db.host")["priority"]
    10
    >>> snap.get("missing", "fallback")
    'fallback'
    """

    _data: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_data", MappingProxyType(dict(self._data)))
        object.__setattr__(self, "_meta", MappingProxyType(dict(self._meta)))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def as_dict(self) -> dict[str, Any]:
        """Return a mutable shallow copy of the resolved values."""

        return dict(self._data)

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for *key* or ``None`` when it was never resolved."""

        return self._meta.get(key)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return provenance for every key as a plain ``dict``."""

        return dict(self._meta)

    def to_json(self, *, indent: int | None = None, provenance: bool = False) -> str:
        """Serialise the snapshot to JSON.

        Values that JSON cannot represent natively are rendered with ``str``.
        With ``provenance=True`` the payload becomes
        ``{"config": ..., "provenance": ...}``.

        >>> ConfigSnapshot({"a": 1}, {}).to_json()
        '{"a":1}'
        """

        payload: Any = self.as_dict()
        if provenance:
            payload = {"config": payload, "provenance": self.provenance()}
        return json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False, default=_fallback)


def describe_source(source: object) -> str:
    """Return a stable label for *source* used in provenance and log events.

    >>> describe_source(object()).startswith("object")
    True
    """

    label = getattr(source, "label", None)
    if isinstance(label, str) and label:
        return label
    return type(source).__name__


def _fallback(value: Any) -> Any:
    """Render values json cannot encode (bytes, sets, custom objects)."""

    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


EMPTY_SNAPSHOT = ConfigSnapshot({}, {})
"""Canonical empty snapshot returned when nothing has been resolved."""
