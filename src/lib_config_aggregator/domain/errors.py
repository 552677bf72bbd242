"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the aggregator, middleware, bundled
adapters and consuming applications. The hierarchy lives in the domain layer
so outer layers may depend on it without creating import cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`ConfigNotFoundError` – raised by ``require`` when a key resolves to
  nothing.
* :class:`InvalidFormat` – parsing problems while reading structured files.
* :class:`InvalidParameter` – rejected construction arguments.
* :class:`NotFound` – raised when an optional resource is missing.

System Role
-----------
Absence of a value is never an error: sources and the aggregator signal it with
``None``. Only the ``require`` family turns absence into
:class:`ConfigNotFoundError`. Exceptions raised by user supplied sources or
interpretation functions are never wrapped in this hierarchy.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_config_aggregator``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ConfigNotFoundError(ConfigError, KeyError):
    """Raised by ``require``/``require_sync`` when no source yields a value.

    Why
    ----
    Callers that cannot continue without a key want a loud failure instead of a
    ``None`` they might forget to check.

    What
    ----
    Carries the requested key on :attr:`key`. Subclasses :class:`KeyError` so
    mapping-style ``except KeyError`` handlers keep working.

    Examples
    --------
    >>> err = ConfigNotFoundError("db.host")
    >>> err.key
    'db.host'
    >>> str(err)
    'Key [db.host] not found in any configured source.'
    """

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key [{self.key}] not found in any configured source."


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into structured data.

    Typical Sources
    ---------------
    The structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`).
    """


class InvalidParameter(ConfigError, ValueError):
    """Raised when a component is constructed with an unsupported argument."""


class NotFound(ConfigError):
    """Represents missing-but-optional resources (files, directories, etc.).

    The file source converts it into absence so a missing file behaves like an
    empty source.
    """
