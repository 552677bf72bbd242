"""Environment variable source.

Purpose
-------
Expose process environment variables through the source contract so they can
be registered on an aggregator, typically at the highest priority.

Key behaviours
--------------
* Enforces an optional prefix (``default_env_prefix``) so only relevant
  variables are visible.
* Turns ``__`` into ``.`` so ``APP_SERVICE__TIMEOUT`` is read as
  ``service.timeout``; keys are lower-cased by default.
* Values stay strings unless ``coerce=True``, in which case common scalars
  (bools, ints, floats, ``null``/``none``) are converted.
* Reads the environment on every call, so changes are visible immediately.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...application.ports import SyncConfigSource
from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-config-aggregator')
    'LIB_CONFIG_AGGREGATOR'
    """

    return slug.replace("-", "_").upper()


class EnvSource(SyncConfigSource[object]):
    """Synchronous source over environment variables.

    Examples
    --------
    >>> env = {'DEMO_SERVICE__RETRIES': '3', 'DEMO_MODE': 'debug', 'OTHER': 'x'}
    >>> source = EnvSource('DEMO', environ=env)
    >>> sorted(source.list_sync())
    ['mode', 'service.retries']
    >>> source.read_sync('service.retries')
    '3'
    >>> EnvSource('DEMO', environ=env, coerce=True).read_sync('service.retries')
    3
    """

    def __init__(
        self,
        prefix: str | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        lowercase: bool = True,
        coerce: bool = False,
    ) -> None:
        """Initialise the source.

        Parameters
        ----------
        prefix:
            Prefix filter. ``_`` is appended when missing. ``None`` exposes
            every variable.
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        lowercase:
            Lower-case exposed keys.
        coerce:
            Convert textual scalars with :func:`_coerce`.
        """

        self._prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else (prefix or "")
        self._environ = environ if environ is not None else os.environ
        self._lowercase = lowercase
        self._coerce = coerce

    @property
    def label(self) -> str:
        return f"EnvSource(prefix={self._prefix.rstrip('_')!r})"

    def read_sync(self, key: str) -> object | None:
        return self._collect().get(key)

    def read_all_sync(self) -> dict[str, object | None]:
        collected = self._collect()
        log_debug("env_variables_loaded", key=None, source=self.label, keys=sorted(collected))
        return collected

    def list_sync(self) -> list[str]:
        return list(self._collect())

    def _collect(self) -> dict[str, object | None]:
        collected: dict[str, object | None] = {}
        for name, value in self._environ.items():
            if self._prefix and not name.startswith(self._prefix):
                continue
            stripped = name[len(self._prefix) :]
            if not stripped:
                continue
            collected[self._external_key(stripped)] = _coerce(value) if self._coerce else value
        return collected

    def _external_key(self, name: str) -> str:
        """Translate a variable name into a dotted configuration key.

        >>> EnvSource()._external_key('SERVICE__TIMEOUT')
        'service.timeout'
        """

        dotted = ".".join(part for part in name.split("__") if part)
        return dotted.lower() if self._lowercase else dotted


def _coerce(value: str) -> object:
    """Coerce textual environment values to Python primitives where possible.

    Examples
    --------
    >>> _coerce('true'), _coerce('10'), _coerce('3.5'), _coerce('hello')
    (True, 10, 3.5, 'hello')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value
