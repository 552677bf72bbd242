"""Application-layer flattening policy for nested mappings.

Purpose
-------
Turn a sequence of nested mappings into one flat mapping using the
"first definition wins" rule the aggregator also applies when upleveling keys.
Free of I/O so it can be tested in isolation.

Contents
    - ``flatten_first_wins``: public entry point.
    - ``_iter_mappings``: skips entries that are not mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Iterator


def flatten_first_wins(payloads: Iterable[object]) -> dict[str, Any]:
    """Merge the top-level keys of *payloads*; the first payload defining a key wins.

    Why
    ----
    Upleveled sources expose the nested keys of several parent entries at the
    same level. Keeping the first definition (rather than the last) makes the
    outcome follow iteration order of the parent keys.

    What
    ----
    Later duplicates are dropped silently. ``None`` and non-mapping payloads are
    ignored. A nested ``None`` does not define its key, so a later payload can
    still fill it. Values are not copied.

    Examples
    --------
    >>> flatten_first_wins([{"a": 1, "b": 2}, None, "x", {"a": 9, "c": 3}])
    {'a': 1, 'b': 2, 'c': 3}
    >>> flatten_first_wins([{"a": None}, {"a": "x"}])
    {'a': 'x'}
    """

    merged: dict[str, Any] = {}
    for mapping in _iter_mappings(payloads):
        for key, value in mapping.items():
            if value is not None:
                merged.setdefault(str(key), value)
    return merged


def _iter_mappings(payloads: Iterable[object]) -> Iterator[Mapping[Any, Any]]:
    for payload in payloads:
        if isinstance(payload, Mapping):
            yield payload
