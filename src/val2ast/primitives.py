"""Encoding of scalar values.

These never need to be shared: they are immutable and are always written
inline.
"""
from __future__ import annotations

import ast
import enum
import functools
import keyword
import math
import operator
from typing import Any

from . import ast_utils, utils
from .errors import UnsupportedSymbol, UnsupportedValue

__all__ = ("encode", "encode_number", "encode_symbol", "SPECIAL_NAMES")

#: Names of the global values the encoder can emit as bare identifiers
SPECIAL_NAMES = frozenset(("NotImplemented",))


def encode_number(number: int | float) -> ast.expr:
    """Encode an ``int`` or a ``float``.

    Negative values (including ``-0.0``) are the negation of the encoding of
    their absolute value:

    >>> ast.unparse(encode_number(-0.0))
    '-0.0'
    >>> ast.unparse(encode_number(-math.inf))
    "-float('inf')"
    """
    if isinstance(number, float):
        if math.isnan(number):
            return ast_utils.call("float", "nan")
        if math.copysign(1, number) == -1:
            return ast_utils.neg(encode_number(-number))
        if number == math.inf:
            return ast_utils.call("float", "inf")
        return ast_utils.constant(number)
    if number < 0:
        return ast_utils.neg(encode_number(-number))
    return ast_utils.constant(number)


def _member_path(path: str, member_name: str) -> ast.expr:
    if member_name.isidentifier() and not keyword.iskeyword(member_name):
        return ast_utils.dotted_path(f"{path}.{member_name}")
    return ast_utils.subscript(
        ast_utils.dotted_path(path), ast_utils.constant(member_name)
    )


def _encode_flags(member: enum.Flag, path: str) -> ast.expr:
    """Encode a combination of flags as the ``|`` of its members.

    >>> import re
    >>> ast.unparse(encode_symbol(re.IGNORECASE | re.MULTILINE))
    're.RegexFlag.IGNORECASE | re.RegexFlag.MULTILINE'
    """
    cls = type(member)
    parts = [
        flag
        for flag in cls
        if flag.value and (flag.value & member.value) == flag.value
    ]
    if not parts:
        return ast_utils.call(path, encode_number(member.value))
    if functools.reduce(operator.or_, parts) != member:
        raise UnsupportedSymbol(member, "flags without a name")
    return ast_utils.bit_or(
        [_member_path(path, flag.name) for flag in parts]
    )


def encode_symbol(member: enum.Enum) -> ast.expr:
    """Encode an enum member as a lookup in its class.

    Members are only supported if their class can be imported back by name
    and looking up the member in that class gives us the same object.
    Combinations of :class:`enum.Flag` members are written as the ``|`` of
    those members.
    """
    cls = type(member)
    try:
        path = utils.get_locate_name(cls)
    except (TypeError, ValueError) as e:
        raise UnsupportedSymbol(member, str(e)) from None
    member_name = member.name
    if member_name is None or cls.__members__.get(member_name) is not member:
        if isinstance(member, enum.Flag):
            return _encode_flags(member, path)
        raise UnsupportedSymbol(member)
    return _member_path(path, member_name)


def encode(value: Any) -> ast.expr:
    """Encode a scalar value"""
    ty = type(value)
    # Exact type comparisons: subclasses of primitives are not primitives
    # (``bool`` is handled before ``int``).
    if value is None or ty in (bool, str, bytes) or value is Ellipsis:
        return ast_utils.constant(value)
    if value is NotImplemented:
        return ast_utils.name("NotImplemented")
    if ty in (int, float):
        return encode_number(value)
    if isinstance(value, enum.Enum):
        return encode_symbol(value)
    raise UnsupportedValue(value)
