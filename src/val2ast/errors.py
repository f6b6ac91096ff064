"""Errors raised while converting values.

All of them carry the offending value in :attr:`ConversionError.value` and
derive from the builtin exception a caller would naturally catch (``TypeError``
for values we cannot handle, ``ValueError`` for cycles...).
"""
from __future__ import annotations

from typing import Any

__all__ = (
    "ConversionError",
    "UnsupportedValue",
    "UnsupportedSymbol",
    "UnsupportedVariant",
    "CircularReference",
    "DepthExceeded",
)


def _describe(value: Any) -> str:
    try:
        rep = repr(value)
    except Exception:
        rep = f"<{type(value).__name__} object>"
    if len(rep) > 80:
        rep = rep[:37] + "..." + rep[-37:]
    return rep


class ConversionError(Exception):
    """Base class for all the conversion errors.

    Attributes:
      value: The value that could not be converted.
    """

    value: Any

    def __init__(self, message: str, value: Any) -> None:
        super().__init__(message)
        self.value = value


class UnsupportedValue(ConversionError, TypeError):
    def __init__(self, value: Any, message: str | None = None) -> None:
        if message is None:
            message = f"Unsupported value: {_describe(value)}"
        super().__init__(message, value)


class UnsupportedSymbol(UnsupportedValue):
    "An enum member that cannot be found again from its class's name"

    def __init__(self, value: Any, reason: str | None = None) -> None:
        message = f"Only global symbols are supported, got: {_describe(value)}"
        if reason is not None:
            message += f" ({reason})"
        super().__init__(value, message)


class UnsupportedVariant(UnsupportedValue):
    "A supported type carrying a configuration we do not handle"

    def __init__(self, value: Any, reason: str) -> None:
        super().__init__(
            value, f"Unsupported variant of {type(value).__name__}: {reason}"
        )


class CircularReference(ConversionError, ValueError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Found circular reference: {_describe(value)}", value
        )


class DepthExceeded(ConversionError, RecursionError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Value of type {type(value).__name__} is nested too deeply to be "
            "converted",
            value,
        )
