"""Ready-made interpreters for common raw value types.

``Interpret.bytes`` covers sources producing ``bytes`` (files, secret stores),
``Interpret.text`` covers sources producing ``str`` (environment variables).
Every factory wraps a source in an :class:`~lib_config_aggregator.middleware.interpreter.Interpreter`.

Malformed input yields ``None`` (treated as absent by the aggregator) rather
than an exception, except for unsupported factory arguments which raise
:class:`~lib_config_aggregator.domain.errors.InvalidParameter` immediately.
Number decoding never consults the host byte order: it is an explicit argument
defaulting to ``"little"``.
"""

from __future__ import annotations

import json
import struct
from typing import Any, Final, Literal

from ..application.ports import ConfigSource
from ..domain.entities import RawEntity
from ..domain.errors import InvalidParameter
from .interpreter import Interpreter

ByteOrder = Literal["little", "big"]

_NUMBER_FORMATS: Final[dict[str, str]] = {
    "int8": "b",
    "uint8": "B",
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "uint64": "Q",
    "float": "f",
    "double": "d",
}

_BYTE_ORDERS: Final[dict[str, str]] = {"little": "<", "big": ">"}


def number_struct(fmt: str, byteorder: str = "little") -> struct.Struct:
    """Return the :class:`struct.Struct` decoding *fmt* in *byteorder*.

    >>> number_struct("uint16", "big").unpack(b"\\x01\\x00")
    (256,)
    """

    try:
        return struct.Struct(_BYTE_ORDERS[byteorder] + _NUMBER_FORMATS[fmt])
    except KeyError as exc:
        raise InvalidParameter(f"Unsupported number encoding: {fmt}/{byteorder}") from exc


class BytesInterpreters:
    """Interpreters for sources returning ``bytes``."""

    @staticmethod
    def as_text(source: ConfigSource[bytes], encoding: str = "utf-8") -> Interpreter[bytes, str]:
        """Decode values as text; undecodable values read as absent."""

        def interpret(entity: RawEntity[bytes]) -> str | None:
            return _decode(entity.value, encoding)

        return Interpreter(source, interpret)

    @staticmethod
    def as_bool(source: ConfigSource[bytes]) -> Interpreter[bytes, bool]:
        """``0x00`` is ``False``, ``0x01`` is ``True``, anything else is absent."""

        def interpret(entity: RawEntity[bytes]) -> bool | None:
            if not entity.value:
                return None
            return {0: False, 1: True}.get(entity.value[0])

        return Interpreter(source, interpret)

    @staticmethod
    def as_number(
        source: ConfigSource[bytes],
        fmt: str = "int32",
        byteorder: ByteOrder = "little",
    ) -> Interpreter[bytes, float]:
        """Decode a number from offset 0, ignoring trailing bytes.

        Values shorter than the encoding read as absent.
        """

        decoder = number_struct(fmt, byteorder)

        def interpret(entity: RawEntity[bytes]) -> Any:
            if entity.value is None or len(entity.value) < decoder.size:
                return None
            return decoder.unpack_from(entity.value)[0]

        return Interpreter(source, interpret)

    @staticmethod
    def as_json(source: ConfigSource[bytes], encoding: str = "utf-8") -> Interpreter[bytes, Any]:
        """Parse values as JSON; invalid documents read as absent."""

        def interpret(entity: RawEntity[bytes]) -> Any:
            return _parse_json(_decode(entity.value, encoding))

        return Interpreter(source, interpret)

    @staticmethod
    def as_text_or_json(source: ConfigSource[bytes], encoding: str = "utf-8") -> Interpreter[bytes, Any]:
        """Parse values as JSON, falling back to the decoded text."""

        def interpret(entity: RawEntity[bytes]) -> Any:
            text = _decode(entity.value, encoding)
            parsed = _parse_json(text)
            return text if parsed is None else parsed

        return Interpreter(source, interpret)


class TextInterpreters:
    """Interpreters for sources returning ``str``."""

    @staticmethod
    def as_bytes(source: ConfigSource[str], encoding: str = "utf-8") -> Interpreter[str, bytes]:
        def interpret(entity: RawEntity[str]) -> bytes | None:
            return None if entity.value is None else entity.value.encode(encoding)

        return Interpreter(source, interpret)

    @staticmethod
    def as_bool(source: ConfigSource[str]) -> Interpreter[str, bool]:
        """``"true"``/``"false"`` (case-insensitive); anything else is absent."""

        def interpret(entity: RawEntity[str]) -> bool | None:
            if entity.value is None:
                return None
            return {"true": True, "false": False}.get(entity.value.strip().lower())

        return Interpreter(source, interpret)

    @staticmethod
    def as_number(source: ConfigSource[str]) -> Interpreter[str, float]:
        """Parse values with :class:`float`; unparsable values are absent."""

        def interpret(entity: RawEntity[str]) -> float | None:
            if entity.value is None:
                return None
            try:
                return float(entity.value)
            except ValueError:
                return None

        return Interpreter(source, interpret)

    @staticmethod
    def as_json(source: ConfigSource[str]) -> Interpreter[str, Any]:
        def interpret(entity: RawEntity[str]) -> Any:
            return _parse_json(entity.value)

        return Interpreter(source, interpret)

    @staticmethod
    def as_text_or_json(source: ConfigSource[str]) -> Interpreter[str, Any]:
        def interpret(entity: RawEntity[str]) -> Any:
            parsed = _parse_json(entity.value)
            return entity.value if parsed is None else parsed

        return Interpreter(source, interpret)


class Interpret:
    """Namespace of ready-made interpreters.

    Examples
    --------
    >>> from lib_config_aggregator.adapters.manual.default import ManualSource
    >>> Interpret.text.as_bool(ManualSource({"debug": "TRUE"})).read_sync("debug")
    True
    >>> Interpret.bytes.as_number(ManualSource({"n": b"\\x2a\\x00\\x00\\x00"})).read_sync("n")
    42
    """

    bytes = BytesInterpreters
    text = TextInterpreters


def _decode(value: bytes | None, encoding: str) -> str | None:
    if value is None:
        return None
    try:
        return value.decode(encoding)
    except UnicodeDecodeError:
        return None


def _parse_json(text: str | None) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None
