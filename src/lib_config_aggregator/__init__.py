"""Public package surface of ``lib_config_aggregator``.

Merge configuration from many sources (environment, files, manual overrides,
nested aggregators) into one prioritised, cached lookup surface, and compose
sources with middleware (interpretation, aliasing, key mapping, upleveling).
"""

from __future__ import annotations

from .core import (
    AggregatorParams,
    AsyncConfigSource,
    CachedEntity,
    Capability,
    ConfigAggregator,
    ConfigEntity,
    ConfigError,
    ConfigNotFoundError,
    ConfigSnapshot,
    ConfigSource,
    EnvSource,
    FileSource,
    InvalidFormat,
    InvalidParameter,
    ManualSource,
    NotFound,
    RawEntity,
    SourceRegistration,
    SyncConfigSource,
    build_aggregator,
    default_env_prefix,
    read_config,
)
from .middleware import (
    Alias,
    Aliaser,
    Interpret,
    Interpreter,
    InterpreterFunctionSet,
    Map,
    Mapper,
    Passthrough,
    Uplevel,
    Upleveler,
)
from .observability import bind_trace_id, get_logger

__all__ = [
    "AggregatorParams",
    "Alias",
    "Aliaser",
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
    "Interpret",
    "Interpreter",
    "InterpreterFunctionSet",
    "InvalidFormat",
    "InvalidParameter",
    "ManualSource",
    "Map",
    "Mapper",
    "NotFound",
    "Passthrough",
    "RawEntity",
    "SourceRegistration",
    "SyncConfigSource",
    "Uplevel",
    "Upleveler",
    "bind_trace_id",
    "build_aggregator",
    "default_env_prefix",
    "get_logger",
    "read_config",
]
