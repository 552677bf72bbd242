from __future__ import annotations

import pytest

from lib_config_aggregator import ManualSource


def test_set_and_unset() -> None:
    source: ManualSource[int] = ManualSource({"a": 1})
    source.set("b", 2)
    source.set({"c": 3, "a": 10})
    source.unset("b")
    source.unset("never-set")
    assert source.read_all_sync() == {"a": 10, "c": 3}


def test_constructor_copies_input() -> None:
    values = {"a": 1}
    source = ManualSource(values)
    values["a"] = 2
    assert source.read_sync("a") == 1


@pytest.mark.asyncio
async def test_async_trio_reads_same_values() -> None:
    source = ManualSource({"a": 1})
    assert await source.read("a") == 1
    assert await source.list() == ["a"]
