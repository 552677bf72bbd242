"""Interpreter middleware: sync/async transform selection and capability declarations."""

from __future__ import annotations

import pytest

from lib_config_aggregator import (
    Capability,
    ConfigAggregator,
    ConfigEntity,
    Interpreter,
    InterpreterFunctionSet,
    ManualSource,
)
from lib_config_aggregator.application.ports import supports
from lib_config_aggregator.domain.entities import RawEntity
from tests.support import AsyncOnlySource, CountingSource


def _upper(entity: RawEntity[str]) -> str | None:
    return None if entity.value is None else entity.value.upper()


async def _async_upper(entity: RawEntity[str]) -> str | None:
    return None if entity.value is None else f"async:{entity.value.upper()}"


def test_plain_callable_serves_sync_reads() -> None:
    interpreter = Interpreter(ManualSource({"k": "v"}), _upper)
    assert supports(interpreter, Capability.SYNC)
    assert interpreter.read_sync("k") == "V"
    assert interpreter.read_all_sync() == {"k": "V"}
    assert interpreter.list_sync() == ["k"]


def test_transform_receives_key_source_and_raw_value() -> None:
    seen: list[RawEntity[str]] = []
    inner = ManualSource({"k": "v"})
    Interpreter(inner, lambda entity: seen.append(entity)).read_sync("k")
    assert seen == [RawEntity("k", inner, "v")]


def test_transform_sees_absent_values() -> None:
    interpreter = Interpreter(ManualSource(), lambda entity: "default" if entity.value is None else entity.value)
    assert interpreter.read_sync("missing") == "default"


def test_transform_runs_once_per_read() -> None:
    calls: list[str] = []
    interpreter = Interpreter(ManualSource({"k": "v"}), lambda entity: calls.append(entity.key) or entity.value)
    interpreter.read_sync("k")
    interpreter.read_sync("k")
    assert calls == ["k", "k"]


@pytest.mark.asyncio
async def test_sync_function_is_reused_for_async_reads() -> None:
    interpreter = Interpreter(ManualSource({"k": "v"}), _upper)
    assert await interpreter.read("k") == "V"
    assert await interpreter.read_all() == {"k": "V"}


@pytest.mark.asyncio
async def test_coroutine_function_makes_interpreter_async_only() -> None:
    inner = CountingSource({"k": "v"})
    interpreter = Interpreter(inner, _async_upper)
    assert not supports(interpreter, Capability.SYNC)
    assert interpreter.read_sync("k") is None
    assert interpreter.read_all_sync() == {}
    assert inner.reads["k"] == 0
    assert await interpreter.read("k") == "async:V"


@pytest.mark.asyncio
async def test_function_set_uses_each_variant_on_its_path() -> None:
    interpreter = Interpreter(ManualSource({"k": "v"}), InterpreterFunctionSet(sync=_upper, async_=_async_upper))
    assert interpreter.read_sync("k") == "V"
    assert await interpreter.read("k") == "async:V"


@pytest.mark.asyncio
async def test_async_variant_may_return_plain_values() -> None:
    interpreter = Interpreter(ManualSource({"k": "v"}), InterpreterFunctionSet(async_=lambda entity: "plain"))
    assert await interpreter.read("k") == "plain"


@pytest.mark.asyncio
async def test_plain_callable_returning_awaitable_fails_on_sync_path() -> None:
    interpreter = Interpreter(ManualSource({"k": "v"}), lambda entity: _async_upper(entity))
    with pytest.raises(TypeError, match="returned an awaitable"):
        interpreter.read_sync("k")
    with pytest.raises(TypeError, match="returned an awaitable"):
        interpreter.read_all_sync()
    assert await interpreter.read("k") == "async:V"


def test_awaitable_from_sync_transform_is_not_cached() -> None:
    config: ConfigAggregator[str] = ConfigAggregator([Interpreter(ManualSource({"k": "v"}), lambda e: _async_upper(e))])
    with pytest.raises(TypeError):
        config.read_sync("k")
    assert config.describe("k") is None
    assert config.export() == {}


def test_async_only_inner_source_removes_sync_capability() -> None:
    interpreter = Interpreter(AsyncOnlySource({"k": "v"}), _upper)
    assert interpreter.capabilities == Capability.ASYNC


def test_invalid_constructor_arguments() -> None:
    with pytest.raises(TypeError):
        Interpreter(ManualSource(), "not callable")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Interpreter(ManualSource(), InterpreterFunctionSet())


def test_cache_override_flows_into_aggregator() -> None:
    inner = CountingSource({"k": "v"})
    config: ConfigAggregator[str] = ConfigAggregator([Interpreter(inner, lambda e: ConfigEntity(e.value, cache_for=-1))])
    assert config.read_sync("k") == "v"
    assert config.read_sync("k") == "v"
    assert inner.reads["k"] == 2
