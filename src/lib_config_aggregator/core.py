"""Composition root for ``lib_config_aggregator``.

Purpose
-------
Wire the bundled adapters (structured files, environment variables) and the
upleveler into a ready-to-use :class:`ConfigAggregator`. Applications with
other sources build their own aggregator directly; this module is the
canonical place for the default precedence rules.

Contents
--------
* :func:`build_aggregator` – register files and environment in precedence
  order.
* :func:`read_config` – resolve keys eagerly and return a
  :class:`ConfigSnapshot`.

Precedence
----------
Files are registered in the order given with priorities ``0..n-1`` so later
files win; the environment source gets priority ``n`` and wins over every
file. Upleveled views of a file share that file's priority.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .adapters.env.default import EnvSource, default_env_prefix
from .adapters.file_loaders.structured import FileSource
from .adapters.manual.default import ManualSource
from .application.aggregator import AggregatorParams, ConfigAggregator
from .application.ports import AsyncConfigSource, Capability, ConfigSource, SyncConfigSource
from .domain.config import ConfigSnapshot, EMPTY_SNAPSHOT
from .domain.entities import CachedEntity, ConfigEntity, RawEntity, SourceRegistration
from .domain.errors import ConfigError, ConfigNotFoundError, InvalidFormat, InvalidParameter, NotFound
from .middleware.upleveler import Upleveler
from .observability import bind_trace_id, log_info, make_event


def build_aggregator(
    *,
    files: Iterable[str | Path] = (),
    env_prefix: str | None = None,
    uplevel: Sequence[str] = (),
    params: AggregatorParams | None = None,
    environ: Mapping[str, str] | None = None,
    file_cache_length: float = -1,
) -> ConfigAggregator[object]:
    """Return an aggregator over *files* and the environment.

    Parameters
    ----------
    files:
        Structured files (TOML/JSON/YAML), lowest precedence first. Missing
        files are treated as empty.
    env_prefix:
        When given, environment variables with this prefix are registered
        above every file. Use :func:`default_env_prefix` to derive it from a
        slug.
    uplevel:
        Top-level table names whose nested keys should be promoted.
    params:
        Aggregator settings.
    environ:
        Environment mapping, defaults to :data:`os.environ`.
    file_cache_length:
        Passed to every :class:`FileSource` as ``cache_length``. The default
        parses a file on each call; ``0`` parses it once per aggregator.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / "app.toml"
    >>> _ = path.write_text('[service]\\ntimeout = 5\\n', encoding="utf-8")
    >>> config = build_aggregator(files=[path], env_prefix="DEMO", uplevel=["service"], environ={"DEMO_TIMEOUT": "9"})
    >>> config.read_sync("timeout")
    '9'
    >>> config.read_sync("service")
    {'timeout': 5}
    >>> tmp.cleanup()
    """

    aggregator: ConfigAggregator[object] = ConfigAggregator(params=params)
    file_sources = [FileSource(path, cache_length=file_cache_length) for path in files]
    for priority, source in enumerate(file_sources):
        aggregator.add_source(source, priority)
        if uplevel:
            aggregator.add_source(Upleveler(source, keys=list(uplevel)), priority)
    if env_prefix is not None:
        aggregator.add_source(EnvSource(env_prefix, environ=environ), len(file_sources))
    return aggregator


def read_config(
    *,
    files: Iterable[str | Path] = (),
    env_prefix: str | None = None,
    uplevel: Sequence[str] = (),
    keys: Sequence[str] | None = None,
    params: AggregatorParams | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigSnapshot:
    """Resolve configuration synchronously and return it as a snapshot.

    With *keys* only those keys are resolved; otherwise every listed key is.
    Keys that resolve to nothing are absent from the snapshot.
    Each file is parsed once per call, however many keys it holds.

    Side Effects
    ------------
    Clears the active trace identifier and emits a ``configuration_resolved``
    info event.
    """

    bind_trace_id(None)
    aggregator = build_aggregator(
        files=files,
        env_prefix=env_prefix,
        uplevel=uplevel,
        params=params,
        environ=environ,
        file_cache_length=0,
    )
    if keys is None:
        aggregator.read_all_sync()
    else:
        for key in keys:
            aggregator.read_sync(key)
    snapshot = aggregator.snapshot()
    if not snapshot:
        log_info("configuration_empty", **make_event(None, None))
        return EMPTY_SNAPSHOT
    log_info(
        "configuration_resolved",
        **make_event(None, None, {"keys": len(snapshot), "sources": len(aggregator.registrations)}),
    )
    return snapshot


__all__ = [
    "AggregatorParams",
    "AsyncConfigSource",
    "CachedEntity",
    "Capability",
    "ConfigAggregator",
    "ConfigEntity",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigSnapshot",
    "ConfigSource",
    "EnvSource",
    "FileSource",
    "InvalidFormat",
    "InvalidParameter",
    "ManualSource",
    "NotFound",
    "RawEntity",
    "SourceRegistration",
    "SyncConfigSource",
    "build_aggregator",
    "default_env_prefix",
    "read_config",
]
