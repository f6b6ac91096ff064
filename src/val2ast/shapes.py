"""Classification of runtime values.

The set of shapes we know how to handle is closed: :func:`classify` goes
through :data:`CLASSIFIERS` in order and returns the first matching
:class:`Shape`. We do exact type comparisons instead of calls to
``isinstance`` (except for enums) so that subclasses, which could have any
behaviour, end up as :attr:`Shape.UNSUPPORTED`.
"""
from __future__ import annotations

import array
import collections
import datetime
import decimal
import enum
import fractions
import inspect
import ipaddress
import pathlib
import re
import types
import uuid
import zoneinfo
from typing import Any, Callable, Final, Iterator

from .options import Options

__all__ = ("Shape", "classify", "children", "CLASSIFIERS", "MUTABLE")


class Shape(enum.Enum):
    NULLISH = enum.auto()
    BOOLEAN = enum.auto()
    NUMBER = enum.auto()
    STRING = enum.auto()
    SYMBOL = enum.auto()
    ARRAY = enum.auto()
    RECORD = enum.auto()
    NAMESPACE = enum.auto()
    TUPLE = enum.auto()
    FROZENSET = enum.auto()
    SET = enum.auto()
    MAP = enum.auto()
    DEQUE = enum.auto()
    BOXED = enum.auto()
    DATE = enum.auto()
    REGEX = enum.auto()
    BUFFER = enum.auto()
    NUMBER_ARRAY = enum.auto()
    URL = enum.auto()
    UNSUPPORTED = enum.auto()

    @property
    def primitive(self) -> bool:
        return self in PRIMITIVES


PRIMITIVES: Final = frozenset(
    (
        Shape.NULLISH,
        Shape.BOOLEAN,
        Shape.NUMBER,
        Shape.STRING,
        Shape.SYMBOL,
    )
)

#: Containers that are declared empty and then filled in. Values of other
#: shapes are built in one go.
MUTABLE: Final = frozenset(
    (
        Shape.ARRAY,
        Shape.RECORD,
        Shape.NAMESPACE,
        Shape.SET,
        Shape.MAP,
        Shape.DEQUE,
    )
)

BOXED_TYPES: Final = (complex, decimal.Decimal, fractions.Fraction, range)

DATE_TYPES: Final = (
    datetime.date,
    datetime.datetime,
    datetime.time,
    datetime.timedelta,
    datetime.timezone,
    zoneinfo.ZoneInfo,
)

URL_TYPES: Final = (
    uuid.UUID,
    pathlib.PurePosixPath,
    pathlib.PureWindowsPath,
    pathlib.PosixPath,
    pathlib.WindowsPath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)


def _exact(*types_: type) -> Callable[[Any, Options], bool]:
    def check(v: Any, options: Options) -> bool:
        return type(v) in types_

    return check


def _is_nullish(v: Any, options: Options) -> bool:
    return v is None or v is Ellipsis or v is NotImplemented


def _is_symbol(v: Any, options: Options) -> bool:
    return isinstance(v, enum.Enum)


def _is_instance(v: Any, options: Options) -> bool:
    if not options.treat_instances_as_plain:
        return False
    # Callables (functions, classes, bound methods...) and modules have a
    # ``__dict__`` but reconstructing them from it makes no sense.
    if callable(v) or inspect.ismodule(v):
        return False
    return isinstance(getattr(v, "__dict__", None), dict)


#: The order matters: ``bool`` is checked before numbers and enums (which can
#: be ints or strs) before anything else.
CLASSIFIERS: Final[tuple[tuple[Shape, Callable[[Any, Options], bool]], ...]] = (
    (Shape.NULLISH, _is_nullish),
    (Shape.BOOLEAN, _exact(bool)),
    (Shape.SYMBOL, _is_symbol),
    (Shape.NUMBER, _exact(int, float)),
    (Shape.STRING, _exact(str, bytes)),
    (Shape.ARRAY, _exact(list)),
    (Shape.RECORD, _exact(dict)),
    (Shape.TUPLE, _exact(tuple)),
    (Shape.FROZENSET, _exact(frozenset)),
    (Shape.SET, _exact(set)),
    (Shape.MAP, _exact(collections.OrderedDict)),
    (Shape.DEQUE, _exact(collections.deque)),
    (Shape.BOXED, _exact(*BOXED_TYPES)),
    (Shape.DATE, _exact(*DATE_TYPES)),
    (Shape.REGEX, _exact(re.Pattern)),
    (Shape.BUFFER, _exact(bytearray)),
    (Shape.NUMBER_ARRAY, _exact(array.array)),
    (Shape.URL, _exact(*URL_TYPES)),
    (Shape.NAMESPACE, _exact(types.SimpleNamespace)),
    (Shape.NAMESPACE, _is_instance),
)


def classify(value: Any, options: Options) -> Shape:
    for shape, predicate in CLASSIFIERS:
        if predicate(value, options):
            return shape
    return Shape.UNSUPPORTED


def children(value: Any, shape: Shape) -> Iterator[Any]:
    """Iterate over the values directly held by *value*.

    The values are yielded in the order in which the walker visits them.
    """
    if shape in (
        Shape.ARRAY,
        Shape.TUPLE,
        Shape.FROZENSET,
        Shape.SET,
        Shape.DEQUE,
    ):
        yield from value
    elif shape in (Shape.RECORD, Shape.MAP):
        for k, v in value.items():
            yield k
            yield v
    elif shape is Shape.NAMESPACE:
        yield from vars(value).values()
    elif shape is Shape.DATE and isinstance(
        value, datetime.datetime | datetime.time
    ):
        if value.tzinfo is not None:
            yield value.tzinfo
