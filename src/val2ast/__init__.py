"""Turn python values into the code that rebuilds them"""
from __future__ import annotations

from importlib import metadata

from .convert import convert, try_convert
from .errors import (
    CircularReference,
    ConversionError,
    DepthExceeded,
    UnsupportedSymbol,
    UnsupportedValue,
    UnsupportedVariant,
)
from .options import Options
from .render import evaluate, highlight, to_source
from .shapes import Shape, classify

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "convert",
    "try_convert",
    "Options",
    "Shape",
    "classify",
    "to_source",
    "evaluate",
    "highlight",
    "ConversionError",
    "UnsupportedValue",
    "UnsupportedSymbol",
    "UnsupportedVariant",
    "CircularReference",
    "DepthExceeded",
)
