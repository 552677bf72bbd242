"""Upleveler middleware: flattening order and the internal cache window."""

from __future__ import annotations

import pytest

from lib_config_aggregator import ConfigAggregator, ManualSource, Upleveler
from lib_config_aggregator.middleware.upleveler import DEFAULT_UPLEVEL_CACHE_LENGTH
from tests.support import AsyncOnlySource, CountingSource, FakeClock


def test_nested_keys_are_promoted() -> None:
    flat = Upleveler(ManualSource({"cfg": {"a": "1", "b": "2"}}))
    assert flat.read_sync("a") == "1"
    assert flat.list_sync() == ["a", "b"]
    assert flat.read_all_sync() == {"a": "1", "b": "2"}


def test_first_parent_key_wins() -> None:
    flat = Upleveler(ManualSource({"one": {"a": "first"}, "two": {"a": "second", "c": "3"}}))
    assert flat.read_sync("a") == "first"
    assert flat.read_sync("c") == "3"


def test_nested_none_does_not_hide_later_parent() -> None:
    flat = Upleveler(ManualSource({"one": {"a": None}, "two": {"a": "x"}}))
    assert flat.read_sync("a") == "x"
    assert flat.list_sync() == ["a"]


def test_allow_list_restricts_parents() -> None:
    flat = Upleveler(ManualSource({"one": {"a": "1"}, "two": {"b": "2"}}), keys=["two"])
    assert flat.read_sync("a") is None
    assert flat.read_sync("b") == "2"


def test_non_mapping_values_are_ignored() -> None:
    flat = Upleveler(ManualSource({"scalar": "x", "cfg": {"a": 1}}))
    assert flat.list_sync() == ["a"]


def test_changes_are_invisible_inside_the_cache_window() -> None:
    clock = FakeClock()
    inner = ManualSource({"cfg": {"a": "1", "b": "2"}})
    flat = Upleveler(inner, clock=clock)
    assert flat.read_sync("a") == "1"
    inner.set("cfg", {"a": "9"})
    clock.advance(DEFAULT_UPLEVEL_CACHE_LENGTH - 1)
    assert flat.read_sync("a") == "1"
    clock.advance(1)
    assert flat.read_sync("a") == "9"
    assert flat.read_sync("b") is None


def test_zero_cache_length_reads_inner_source_once() -> None:
    clock = FakeClock()
    inner = CountingSource({"cfg": {"a": "1"}})
    flat = Upleveler(inner, keys=["cfg"], cache_length=0, clock=clock)
    flat.read_sync("a")
    clock.advance(10**9)
    flat.read_sync("a")
    assert inner.reads["cfg"] == 1


def test_negative_cache_length_always_rereads() -> None:
    inner = CountingSource({"cfg": {"a": "1"}})
    flat = Upleveler(inner, keys=["cfg"], cache_length=-1)
    flat.read_sync("a")
    flat.read_sync("a")
    assert inner.reads["cfg"] == 2


def test_invalidate_forces_refresh() -> None:
    inner = ManualSource({"cfg": {"a": "1"}})
    flat = Upleveler(inner)
    assert flat.read_sync("a") == "1"
    inner.set("cfg", {"a": "2"})
    flat.invalidate()
    assert flat.read_sync("a") == "2"


def test_internal_cache_is_separate_from_aggregator_cache() -> None:
    clock = FakeClock()
    inner = ManualSource({"cfg": {"a": "1"}})
    config: ConfigAggregator[str] = ConfigAggregator(clock=clock)
    config.add_source(Upleveler(inner, clock=clock), cache_for=-1)
    assert config.read_sync("a") == "1"
    inner.set("cfg", {"a": "2"})
    assert config.read_sync("a") == "1"
    clock.advance(DEFAULT_UPLEVEL_CACHE_LENGTH)
    assert config.read_sync("a") == "2"


@pytest.mark.asyncio
async def test_async_only_inner_source() -> None:
    inner = AsyncOnlySource({"cfg": {"a": "1"}})
    flat = Upleveler(inner)
    assert flat.read_sync("a") is None
    assert flat.list_sync() == []
    assert await flat.read("a") == "1"
    assert await flat.list() == ["a"]
    assert await flat.read_all() == {"a": "1"}
