"""Aliaser middleware across the three passthrough modes."""

from __future__ import annotations

import pytest

from lib_config_aggregator import Aliaser, InvalidParameter, ManualSource, Passthrough
from tests.support import AsyncOnlySource


def _inner() -> ManualSource[str]:
    return ManualSource({"X": "val", "other": "o"})


def test_no_passthrough_exposes_only_aliases() -> None:
    aliased = Aliaser(_inner(), {"Y": "X"}, "none")
    assert aliased.read_sync("Y") == "val"
    assert aliased.read_sync("X") is None
    assert aliased.read_sync("other") is None
    assert aliased.list_sync() == ["Y"]


def test_partial_passthrough_masks_alias_targets() -> None:
    aliased = Aliaser(_inner(), {"Y": "X"})
    assert aliased.passthrough is Passthrough.PARTIAL
    assert aliased.read_sync("Y") == "val"
    assert aliased.read_sync("X") is None
    assert aliased.read_sync("other") == "o"
    assert aliased.list_sync() == ["other", "Y"]
    assert aliased.read_all_sync() == {"other": "o", "Y": "val"}


def test_full_passthrough_keeps_original_keys() -> None:
    aliased = Aliaser(_inner(), {"Y": "X"}, Passthrough.FULL)
    assert aliased.read_sync("Y") == "val"
    assert aliased.read_sync("X") == "val"
    assert aliased.list_sync() == ["X", "other", "Y"]


def test_full_passthrough_falls_back_to_literal_key() -> None:
    aliased = Aliaser(ManualSource({"Y": "literal"}), {"Y": "missing"}, Passthrough.FULL)
    assert aliased.read_sync("Y") == "literal"


def test_unknown_passthrough_mode_is_rejected() -> None:
    with pytest.raises(InvalidParameter):
        Aliaser(_inner(), {}, "sometimes")


def test_capabilities_follow_inner_source() -> None:
    inner = AsyncOnlySource({"X": "val"})
    assert Aliaser(inner, {"Y": "X"}).capabilities == inner.capabilities


@pytest.mark.asyncio
async def test_async_reads_follow_the_same_rules() -> None:
    aliased = Aliaser(AsyncOnlySource({"X": "val", "other": "o"}), {"Y": "X"}, "partial")
    assert await aliased.read("Y") == "val"
    assert await aliased.read("X") is None
    assert await aliased.list() == ["other", "Y"]
    assert await aliased.read_all() == {"other": "o", "Y": "val"}
