"""Middleware sources wrapping another source to rewrite its keys or values."""

from __future__ import annotations

from .aliaser import Aliaser, Passthrough
from .builders import Alias, Map, Uplevel
from .interpret import Interpret
from .interpreter import Interpreter, InterpreterFunctionSet
from .mapper import Mapper
from .upleveler import Upleveler

__all__ = [
    "Alias",
    "Aliaser",
    "Interpret",
    "Interpreter",
    "InterpreterFunctionSet",
    "Map",
    "Mapper",
    "Passthrough",
    "Uplevel",
    "Upleveler",
]
