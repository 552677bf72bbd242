"""Structured configuration file loaders and the file-backed source.

Purpose
-------
Convert on-disk TOML, JSON and YAML documents into mappings and expose their
top-level keys through the source contract. Nested tables stay nested: wrap a
:class:`FileSource` in an :class:`~lib_config_aggregator.middleware.upleveler.Upleveler`
to promote their keys.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`TOMLFileLoader` / :class:`JSONFileLoader` / :class:`YAMLFileLoader`
  – one loader per format.
* :func:`loader_for` – pick a loader from a file suffix.
* :class:`FileSource` – synchronous source over one structured file.
"""

from __future__ import annotations

import json
import math
import tomllib
from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml

from ...application.ports import SyncConfigSource
from ...domain.entities import Clock, expiry_for, monotonic_ms
from ...domain.errors import InvalidFormat, InvalidParameter, NotFound
from ...observability import log_debug, log_error


class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``InvalidFormat``/``NotFound``."""


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", key=None, source=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_config_aggregator.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            log_error("config_file_invalid", key=None, source=path, format="toml", error=str(exc))
            raise InvalidFormat(f"Invalid TOML in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", key=None, source=path, format="toml")
        return result


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log_error("config_file_invalid", key=None, source=path, format="json", error=str(exc))
            raise InvalidFormat(f"Invalid JSON in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", key=None, source=path, format="json")
        return result


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; an empty document is an empty mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", key=None, source=path, format="yaml", error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", key=None, source=path, format="yaml")
        return result


# Loaders keyed by suffix.
_FILE_LOADERS: dict[str, FileLoader] = {
    ".toml": TOMLFileLoader(),
    ".json": JSONFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}


def loader_for(path: str | Path) -> FileLoader:
    """Return the loader registered for the suffix of *path*.

    >>> type(loader_for("settings.yml")).__name__
    'YAMLFileLoader'
    """

    suffix = Path(path).suffix.lower()
    try:
        return _FILE_LOADERS[suffix]
    except KeyError as exc:
        raise InvalidParameter(f"Unsupported configuration file type: {suffix or path}") from exc


class FileSource(SyncConfigSource[Any]):
    """Expose the top-level keys of one structured file.

    A missing file behaves like an empty source, while malformed content raises
    :class:`InvalidFormat` to the caller.

    Parameters
    ----------
    path:
        File to read; its suffix picks the loader unless *loader* is given.
    loader:
        Explicit :class:`FileLoader`.
    cache_length:
        How long a parsed document is reused, in milliseconds. The default
        (negative) parses the file on every call so edits show up immediately;
        ``0`` parses it once and keeps the result.
    clock:
        Millisecond clock, replaceable for tests.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        loader: FileLoader | None = None,
        cache_length: float = -1,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._path = str(path)
        self._loader = loader or loader_for(path)
        self._cache_length = cache_length
        self._clock = clock
        self._document: Mapping[str, object] = {}
        self._expires = -math.inf

    @property
    def path(self) -> str:
        return self._path

    @property
    def label(self) -> str:
        return f"FileSource({self._path})"

    def read_sync(self, key: str) -> Any | None:
        return self._load().get(key)

    def read_all_sync(self) -> dict[str, Any | None]:
        return dict(self._load())

    def list_sync(self) -> list[str]:
        return list(self._load())

    def invalidate(self) -> None:
        """Forget the parsed document so the next call reads the file again."""

        self._expires = -math.inf

    def _load(self) -> Mapping[str, object]:
        now = self._clock()
        if now < self._expires:
            return self._document
        try:
            document = self._loader.load(self._path)
        except NotFound:
            document = {}
        expires = expiry_for(self._cache_length, now)
        self._document = document if expires is not None else {}
        self._expires = -math.inf if expires is None else expires
        return document
