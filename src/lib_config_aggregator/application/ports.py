"""Application-layer port: the source contract.

Purpose
-------
Define the capability set every configuration provider exposes so the
aggregator and the middleware can orchestrate sources without depending on
concrete implementations.

Contents
--------
* :class:`Capability` – flags declaring which half of the contract a source
  implements (``SYNC`` never blocks, ``ASYNC`` may suspend).
* :class:`ConfigSource` – abstract contract with six operations: ``read``,
  ``read_all`` and ``list`` in async and sync form.
* :class:`SyncConfigSource` – base for sources implementing the sync trio.
* :class:`AsyncConfigSource` – base for sources implementing only the async
  trio.
* :func:`supports` – the single capability check used by callers.

System Role
-----------
Every bundled adapter, every middleware and the aggregator itself implement
:class:`ConfigSource`, which is what lets them nest into resolution trees.
Returning ``None`` from ``read`` means "absent here", never an error, and
``list`` enumerates every key ``read_all`` would populate.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Capability(enum.Flag):
    """Access modes a source declares.

    ``SYNC`` sources answer the ``*_sync`` trio without blocking; because the
    async trio delegates to it they are usable from async callers as well.
    ``ASYNC`` sources may suspend. An ``ASYNC``-only source contributes
    nothing to synchronous reads.
    """

    SYNC = enum.auto()
    ASYNC = enum.auto()


class ConfigSource(ABC, Generic[T]):
    """Contract shared by every configuration provider.

    Why
    ----
    A single interface lets plain providers, middleware and aggregators be
    composed in any order.

    What
    ----
    The async trio delegates to the sync trio; the sync trio returns "no
    value", an empty mapping and an empty list. Concrete sources override one
    trio and declare it through :attr:`capabilities`.
    """

    @property
    @abstractmethod
    def capabilities(self) -> Capability:
        """Capability set implemented by this source."""

    async def read(self, key: str) -> T | None:
        """Return the value stored under *key* or ``None`` when absent."""

        return self.read_sync(key)

    async def read_all(self) -> dict[str, T | None]:
        """Return every known key with its value (``None`` for unusable values)."""

        return self.read_all_sync()

    async def list(self) -> list[str]:
        """Return every key :meth:`read_all` would populate."""

        return self.list_sync()

    def read_sync(self, key: str) -> T | None:
        """Synchronous :meth:`read`; contributes nothing by default."""

        return None

    def read_all_sync(self) -> dict[str, T | None]:
        """Synchronous :meth:`read_all`; empty by default."""

        return {}

    def list_sync(self) -> list[str]:
        """Synchronous :meth:`list`; empty by default."""

        return []


class SyncConfigSource(ConfigSource[T]):
    """Base class for sources that never block.

    Subclasses implement :meth:`read_sync` and :meth:`list_sync`;
    :meth:`read_all_sync` is derived from them unless overridden.
    """

    @property
    def capabilities(self) -> Capability:
        return Capability.SYNC | Capability.ASYNC

    @abstractmethod
    def read_sync(self, key: str) -> T | None: ...

    @abstractmethod
    def list_sync(self) -> list[str]: ...

    def read_all_sync(self) -> dict[str, T | None]:
        return {key: self.read_sync(key) for key in self.list_sync()}


class AsyncConfigSource(ConfigSource[T]):
    """Base class for sources that need to suspend (remote stores, slow I/O).

    Subclasses implement :meth:`read` and :meth:`list`. The sync trio keeps its
    "no value" defaults, so synchronous callers see such a source as empty.
    """

    @property
    def capabilities(self) -> Capability:
        return Capability.ASYNC

    @abstractmethod
    async def read(self, key: str) -> T | None: ...

    @abstractmethod
    async def list(self) -> list[str]: ...

    async def read_all(self) -> dict[str, T | None]:
        return {key: await self.read(key) for key in await self.list()}


def supports(source: ConfigSource[object], capability: Capability) -> bool:
    """Return ``True`` when *source* declares *capability*.

    >>> class Demo(SyncConfigSource[str]):
    ...     def read_sync(self, key): return None
    ...     def list_sync(self): return []
    >>> supports(Demo(), Capability.SYNC)
    True
    """

    return capability in source.capabilities
