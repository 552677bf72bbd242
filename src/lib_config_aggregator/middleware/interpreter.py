"""Interpreter middleware: transform raw values of an inner source.

Purpose
-------
Turn the raw values of a low-level source (bytes from a file, strings from the
environment) into application-level values before the aggregator caches them.

Contents
--------
* :class:`InterpreterFunctionSet` – explicit pair of sync/async transforms.
* :class:`Interpreter` – the middleware source.

Rules
-----
* A single plain callable serves both paths; a single coroutine function is
  async-only.
* A sync transform must not return an awaitable; ``read_sync`` raises
  ``TypeError`` when it does. Wrap such callables in
  ``InterpreterFunctionSet(async_=...)`` instead.
* With only an async transform the interpreter is async-only: the sync trio
  yields nothing and never touches the inner source.
* With only a sync transform it is reused for async reads.
* The transform receives :class:`~lib_config_aggregator.domain.entities.RawEntity`
  and returns a value, a :class:`~lib_config_aggregator.domain.entities.ConfigEntity`
  (to override the cache duration) or ``None`` for "absent".
* The transform runs exactly once per ``read`` call; nothing is cached here.
* Keys are never changed, so ``list`` passes through.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from ..application.ports import Capability, ConfigSource, supports
from ..domain.config import describe_source
from ..domain.entities import ConfigEntity, RawEntity

T = TypeVar("T")
U = TypeVar("U")

InterpretResult = Union[U, ConfigEntity[U], None]
SyncInterpretFunction = Callable[[RawEntity[T]], Union[U, ConfigEntity[U], None]]
AsyncInterpretFunction = Callable[[RawEntity[T]], Union[U, ConfigEntity[U], None, Awaitable[Union[U, ConfigEntity[U], None]]]]


@dataclass(frozen=True, slots=True)
class InterpreterFunctionSet(Generic[T, U]):
    """Sync and async variants of one interpretation.

    ``async_`` may return a plain value or an awaitable. Omitting ``sync``
    makes the interpreter async-only; omitting ``async_`` reuses ``sync``.
    """

    sync: SyncInterpretFunction[T, U] | None = None
    async_: AsyncInterpretFunction[T, U] | None = None


class Interpreter(ConfigSource[U], Generic[T, U]):
    """Middleware source applying an interpretation function to an inner source.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> numbers = Interpreter(ManualSource({"port": "8080"}), lambda e: int(e.value) if e.value else None)
    >>> numbers.read_sync("port")
    8080
    >>> numbers.read_sync("missing") is None
    True
    """

    def __init__(
        self,
        source: ConfigSource[T],
        interpreter: SyncInterpretFunction[T, U] | InterpreterFunctionSet[T, U],
    ) -> None:
        self._source = source
        self._functions = _normalise(interpreter)

    @property
    def source(self) -> ConfigSource[T]:
        return self._source

    @property
    def label(self) -> str:
        return f"Interpreter({describe_source(self._source)})"

    @property
    def capabilities(self) -> Capability:
        capabilities = Capability.ASYNC
        if self._functions.sync is not None and supports(self._source, Capability.SYNC):
            capabilities |= Capability.SYNC
        return capabilities

    async def read(self, key: str) -> InterpretResult[U]:
        return await self._interpret(RawEntity(key, self._source, await self._source.read(key)))

    async def read_all(self) -> dict[str, InterpretResult[U]]:
        raw_values = await self._source.read_all()
        interpreted: dict[str, InterpretResult[U]] = {}
        for key, value in raw_values.items():
            interpreted[key] = await self._interpret(RawEntity(key, self._source, value))
        return interpreted

    async def list(self) -> list[str]:
        return await self._source.list()

    def read_sync(self, key: str) -> InterpretResult[U]:
        function = self._functions.sync
        if function is None:
            return None
        return _call_sync(function, RawEntity(key, self._source, self._source.read_sync(key)))

    def read_all_sync(self) -> dict[str, InterpretResult[U]]:
        function = self._functions.sync
        if function is None:
            return {}
        return {key: _call_sync(function, RawEntity(key, self._source, value)) for key, value in self._source.read_all_sync().items()}

    def list_sync(self) -> list[str]:
        return self._source.list_sync()

    async def _interpret(self, entity: RawEntity[T]) -> InterpretResult[U]:
        function: Any = self._functions.async_ or self._functions.sync
        result = function(entity)
        if inspect.isawaitable(result):
            result = await result
        return result


def _normalise(interpreter: Any) -> InterpreterFunctionSet[Any, Any]:
    """Return an :class:`InterpreterFunctionSet` for any accepted constructor argument."""

    if isinstance(interpreter, InterpreterFunctionSet):
        if interpreter.sync is None and interpreter.async_ is None:
            raise TypeError("InterpreterFunctionSet needs at least one of sync or async_")
        return interpreter
    if not callable(interpreter):
        raise TypeError(f"Interpreter expects a callable or InterpreterFunctionSet, got {type(interpreter).__name__}")
    if inspect.iscoroutinefunction(interpreter):
        return InterpreterFunctionSet(async_=interpreter)
    return InterpreterFunctionSet(sync=interpreter, async_=interpreter)


def _call_sync(function: SyncInterpretFunction[Any, Any], entity: RawEntity[Any]) -> Any:
    result = function(entity)
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise TypeError(
            f"Sync interpretation of {entity.key!r} returned an awaitable; "
            "pass the function as InterpreterFunctionSet(async_=...) instead"
        )
    return result
