"""Entry points of the conversion.

  >>> import ast
  >>> ast.unparse(convert([1, -2.5, "three", None]))
  "[1, -2.5, 'three', None]"

Shared and recursive values can be converted when references are preserved;
the result is then a module where the last statement is the value:

  >>> v = []
  >>> v.append(v)
  >>> print(ast.unparse(convert(v, preserve_references=True)))
  var0 = [None]
  var0[0] = var0
  var0
"""
from __future__ import annotations

import ast
import logging
from typing import Any

from . import program
from .errors import ConversionError, DepthExceeded
from .options import DEFAULT, Options
from .registry import Registry
from .walker import Walker

__all__ = ("convert", "try_convert")

logger = logging.getLogger(__name__)


def convert(
    value: Any, options: Options | None = None, **overrides: Any
) -> ast.expr | ast.Module:
    """Build the code that recreates *value*.

    Args:
      value: The value to convert.
      options: How to convert it.
      overrides: Fields of :class:`~val2ast.Options` overriding the ones in
        *options*.

    Returns:
      An expression or, if some variables need to be declared, a module whose
      last statement is an expression evaluating to the value.

    Raises:
      ConversionError: The value (or some value it holds) cannot be
        converted.
    """
    if options is None:
        options = DEFAULT
    if overrides:
        options = options.replace(**overrides)
    statements = program.Statements()
    registry = Registry(statements, preserve=options.preserve_references)
    walker = Walker(options, registry, statements)
    try:
        if options.preserve_references:
            registry.scan(value, options)
        result = walker.encode(value)
    except DepthExceeded:
        raise
    except RecursionError:
        raise DepthExceeded(value) from None
    logger.debug(
        "Converted %s: %d variables, %d deferred statements",
        type(value).__name__,
        len(registry.names),
        len(statements),
    )
    return program.build(registry.declarations, statements, result)


def try_convert(
    value: Any, options: Options | None = None, **overrides: Any
) -> ast.expr | ast.Module | ConversionError:
    """Like :func:`convert` but returns the error instead of raising it.

    >>> try_convert(object())
    UnsupportedValue('Unsupported value: <object object at ...>')
    """
    try:
        return convert(value, options, **overrides)
    except ConversionError as e:
        # Clear out all the fields set by `raise ...` that might hold on to
        # large amounts of memory
        e.__cause__ = e.__context__ = e.__traceback__ = None
        return e
