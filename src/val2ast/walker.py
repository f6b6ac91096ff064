"""The recursive traversal that turns values into expressions.

Containers are built as a *shell* that gets filled while we visit their
content. When a container is bound to a variable (see
:class:`~val2ast.registry.Registry`) and one of its elements refers to a
variable, the element is not written in the shell: it is assigned by a
deferred statement once every variable has been declared.
"""
from __future__ import annotations

import array
import ast
import collections
import datetime
import decimal
import fractions
import keyword
import re
import zoneinfo
from typing import Any, Callable, ClassVar

from . import ast_utils, primitives, utils
from .errors import UnsupportedValue, UnsupportedVariant
from .options import Options
from .program import Statements
from .registry import Registry
from .shapes import Shape, classify

__all__ = ("Walker",)

_REGEX_FLAGS = (
    ("ASCII", re.ASCII.value),
    ("IGNORECASE", re.IGNORECASE.value),
    ("LOCALE", re.LOCALE.value),
    ("MULTILINE", re.MULTILINE.value),
    ("DOTALL", re.DOTALL.value),
    ("VERBOSE", re.VERBOSE.value),
)


def _is_attribute_name(key: str) -> bool:
    return key.isidentifier() and not keyword.iskeyword(key)


class Walker:
    options: Options
    registry: Registry
    statements: Statements
    # type -> dotted path of its constructor
    _constructors: dict[type, str]

    _ENCODERS: ClassVar[dict[Shape, Callable[[Walker, Any], ast.expr]]]

    def __init__(
        self, options: Options, registry: Registry, statements: Statements
    ) -> None:
        self.options = options
        self.registry = registry
        self.statements = statements
        self._constructors = {}

    def encode(self, value: Any) -> ast.expr:
        shape = classify(value, self.options)
        if shape.primitive:
            return primitives.encode(value)
        ref = self.registry.refer(value)
        if ref is not None:
            return ref
        with self.registry.visiting(value):
            return self._ENCODERS[shape](self, value)

    def _constructor(self, ty: type) -> str:
        path = self._constructors.get(ty)
        if path is None:
            path = self._constructors[ty] = utils.get_locate_name(ty)
        return path

    def _target(self, target: ast.expr) -> ast.Name:
        # Fresh node: building a statement switches its target to a store
        # context.
        assert isinstance(target, ast.Name)
        return ast_utils.name(target.id)

    def _needs_deferral(self, target: ast.expr, *exprs: ast.expr) -> bool:
        """Can't write *exprs* in *target*'s shell: it's declared before them"""
        return self.registry.is_reference(target) and any(
            self.registry.references(expr) for expr in exprs
        )

    # Mutable containers

    def _encode_list(self, value: list[Any]) -> ast.expr:
        # Slots filled by a deferred assignment keep this placeholder.
        elements = [ast_utils.constant(None) for _ in value]
        shell = ast_utils.list_(elements)
        target = self.registry.define(value, lambda: shell, mutable=True)
        for idx, item in enumerate(value):
            expr = self.encode(item)
            if self._needs_deferral(target, expr):
                self.statements.assign(
                    ast_utils.subscript(
                        self._target(target), ast_utils.constant(idx)
                    ),
                    expr,
                )
            else:
                elements[idx] = expr
        return target

    def _encode_dict(self, value: dict[Any, Any]) -> ast.expr:
        shell = ast_utils.dict_([], [])
        target = self.registry.define(value, lambda: shell, mutable=True)
        # Once one item is deferred all the following ones are too, otherwise
        # the insertion order would change.
        deferring = False
        for key, item in value.items():
            # The order is important here for references
            ekey = self.encode(key)
            eitem = self.encode(item)
            if deferring or self._needs_deferral(target, ekey, eitem):
                deferring = True
                self.statements.assign(
                    ast_utils.subscript(self._target(target), ekey), eitem
                )
            else:
                shell.keys.append(ekey)
                shell.values.append(eitem)
        return target

    def _encode_namespace(self, value: Any) -> ast.expr:
        attrs = vars(value)
        shell = ast_utils.call("types.SimpleNamespace")
        target = self.registry.define(value, lambda: shell, mutable=True)
        deferring = False
        for key, item in attrs.items():
            if not isinstance(key, str):
                raise UnsupportedVariant(
                    value, f"attribute name {key!r} is not a string"
                )
            eitem = self.encode(item)
            if deferring or self._needs_deferral(target, eitem):
                deferring = True
                if _is_attribute_name(key):
                    self.statements.assign(
                        ast_utils.attribute(self._target(target), key), eitem
                    )
                else:
                    self.statements.expr(
                        ast_utils.call(
                            "setattr", self._target(target), key, eitem
                        )
                    )
            elif _is_attribute_name(key):
                shell.keywords.append(ast_utils.keyword(key, eitem))
            else:
                shell.keywords.append(
                    ast_utils.keyword(
                        None,
                        ast_utils.dict_([ast_utils.constant(key)], [eitem]),
                    )
                )
        return target

    def _encode_set(self, value: set[Any]) -> ast.expr:
        shell = ast_utils.call("set")
        target = self.registry.define(value, lambda: shell, mutable=True)
        if self.registry.is_reference(target):
            for member in value:
                self.statements.call(
                    self._target(target), "add", self.encode(member)
                )
            return target
        if not value:
            return shell
        return ast_utils.set_([self.encode(member) for member in value])

    def _encode_ordered_dict(
        self, value: collections.OrderedDict[Any, Any]
    ) -> ast.expr:
        ctor = self._constructor(type(value))
        shell = ast_utils.call(ctor)
        target = self.registry.define(value, lambda: shell, mutable=True)
        if self.registry.is_reference(target):
            for key, item in value.items():
                ekey = self.encode(key)
                eitem = self.encode(item)
                self.statements.assign(
                    ast_utils.subscript(self._target(target), ekey), eitem
                )
            return target
        if not value:
            return shell
        pairs = [
            ast_utils.tuple_([self.encode(key), self.encode(item)])
            for key, item in value.items()
        ]
        return ast_utils.call(ctor, ast_utils.list_(pairs))

    def _encode_deque(self, value: collections.deque[Any]) -> ast.expr:
        ctor = self._constructor(type(value))
        kwargs = []
        if value.maxlen is not None:
            kwargs.append(
                ast_utils.keyword(
                    "maxlen", primitives.encode_number(value.maxlen)
                )
            )
        shell = ast_utils.call(ctor, keywords=kwargs)
        target = self.registry.define(value, lambda: shell, mutable=True)
        if self.registry.is_reference(target):
            for item in value:
                self.statements.call(
                    self._target(target), "append", self.encode(item)
                )
            return target
        if not value:
            return shell
        return ast_utils.call(
            ctor,
            ast_utils.list_([self.encode(item) for item in value]),
            keywords=kwargs,
        )

    # Immutable containers

    def _encode_tuple(self, value: tuple[Any, ...]) -> ast.expr:
        return self.registry.define(
            value,
            lambda: ast_utils.tuple_([self.encode(x) for x in value]),
            mutable=False,
        )

    def _encode_frozenset(self, value: frozenset[Any]) -> ast.expr:
        def build() -> ast.expr:
            if not value:
                return ast_utils.call("frozenset")
            return ast_utils.call(
                "frozenset", ast_utils.set_([self.encode(x) for x in value])
            )

        return self.registry.define(value, build, mutable=False)

    # Values built from primitives

    def _encode_boxed(self, value: Any) -> ast.expr:
        def build() -> ast.expr:
            ctor = self._constructor(type(value))
            number = primitives.encode_number
            match value:
                case complex():
                    return ast_utils.call(
                        ctor, number(value.real), number(value.imag)
                    )
                case decimal.Decimal():
                    return ast_utils.call(ctor, str(value))
                case fractions.Fraction():
                    return ast_utils.call(
                        ctor, number(value.numerator), number(value.denominator)
                    )
                case range():
                    args = [value.start, value.stop]
                    if value.step != 1:
                        args.append(value.step)
                    return ast_utils.call(ctor, *(number(x) for x in args))
            raise UnsupportedValue(value)  # pragma: no cover

        return self.registry.define(value, build, mutable=False)

    def _encode_tzinfo(self, owner: Any, tzinfo: datetime.tzinfo) -> ast.expr:
        if type(tzinfo) not in (datetime.timezone, zoneinfo.ZoneInfo):
            raise UnsupportedVariant(
                owner, f"tzinfo of type {type(tzinfo).__name__}"
            )
        return self.encode(tzinfo)

    def _time_kwargs(
        self, value: datetime.datetime | datetime.time
    ) -> list[ast.keyword]:
        kwargs = []
        if value.tzinfo is not None:
            kwargs.append(
                ast_utils.keyword(
                    "tzinfo", self._encode_tzinfo(value, value.tzinfo)
                )
            )
        if value.fold:
            kwargs.append(ast_utils.keyword("fold", ast_utils.constant(1)))
        return kwargs

    def _build_date(self, value: Any) -> ast.expr:
        ty = type(value)
        ctor = self._constructor(ty)
        if ty is datetime.date:
            return ast_utils.call(ctor, value.year, value.month, value.day)
        if ty is datetime.datetime:
            args = [
                value.year,
                value.month,
                value.day,
                value.hour,
                value.minute,
                value.second,
            ]
            if value.microsecond:
                args.append(value.microsecond)
            return ast_utils.call(
                ctor, *args, keywords=self._time_kwargs(value)
            )
        if ty is datetime.time:
            args = [value.hour, value.minute, value.second]
            if value.microsecond:
                args.append(value.microsecond)
            return ast_utils.call(
                ctor, *args, keywords=self._time_kwargs(value)
            )
        if ty is datetime.timedelta:
            return ast_utils.call(
                ctor,
                keywords=[
                    ast_utils.keyword(field, primitives.encode_number(amount))
                    for field, amount in (
                        ("days", value.days),
                        ("seconds", value.seconds),
                        ("microseconds", value.microseconds),
                    )
                    if amount
                ],
            )
        if ty is datetime.timezone:
            if value is datetime.timezone.utc:
                return ast_utils.dotted_path(f"{ctor}.utc")
            offset = value.utcoffset(None)
            args = [self.encode(offset)]
            tzname = value.tzname(None)
            if datetime.timezone(offset).tzname(None) != tzname:
                args.append(ast_utils.constant(tzname))
            return ast_utils.call(ctor, *args)
        assert ty is zoneinfo.ZoneInfo, ty
        if value.key is None:
            raise UnsupportedVariant(
                value, "ZoneInfo was not created from a key"
            )
        return ast_utils.call(ctor, value.key)

    def _encode_date(self, value: Any) -> ast.expr:
        return self.registry.define(
            value, lambda: self._build_date(value), mutable=False
        )

    def _encode_regex(self, value: re.Pattern[Any]) -> ast.expr:
        def build() -> ast.expr:
            flags = value.flags
            if isinstance(value.pattern, str):
                # Implied for all the text patterns
                flags &= ~re.UNICODE.value
            operands: list[ast.expr] = []
            for flag_name, flag in _REGEX_FLAGS:
                if flags & flag:
                    operands.append(ast_utils.dotted_path(f"re.{flag_name}"))
                    flags &= ~flag
            if flags:
                raise UnsupportedVariant(value, f"unknown flags {flags:#x}")
            args = [ast_utils.constant(value.pattern)]
            if operands:
                args.append(ast_utils.bit_or(operands))
            return ast_utils.call("re.compile", *args)

        return self.registry.define(value, build, mutable=False)

    def _encode_buffer(self, value: bytearray) -> ast.expr:
        return self.registry.define(
            value,
            lambda: ast_utils.call(
                self._constructor(type(value)), bytes(value)
            ),
            mutable=False,
        )

    def _encode_number_array(self, value: array.array[Any]) -> ast.expr:
        def build() -> ast.expr:
            args: list[ast.expr] = [ast_utils.constant(value.typecode)]
            if value and value.typecode in ("u", "w"):
                args.append(ast_utils.constant(value.tounicode()))
            elif value:
                args.append(
                    ast_utils.list_(
                        [primitives.encode_number(x) for x in value]
                    )
                )
            ctor = self._constructor(type(value))
            return ast_utils.call(ctor, *args)

        return self.registry.define(value, build, mutable=False)

    def _encode_url(self, value: Any) -> ast.expr:
        return self.registry.define(
            value,
            lambda: ast_utils.call(
                self._constructor(type(value)), str(value)
            ),
            mutable=False,
        )

    def _encode_unsupported(self, value: Any) -> ast.expr:
        hook = self.options.on_unsupported
        if hook is not None:
            expr = hook(value)
            if expr is not None:
                if not isinstance(expr, ast.expr):
                    raise TypeError(
                        "on_unsupported should return an ast.expr or None, "
                        f"got {type(expr).__name__}"
                    )
                return self.registry.define(value, lambda: expr, mutable=False)
        raise UnsupportedValue(value)

    _ENCODERS = {
        Shape.ARRAY: _encode_list,
        Shape.RECORD: _encode_dict,
        Shape.NAMESPACE: _encode_namespace,
        Shape.SET: _encode_set,
        Shape.MAP: _encode_ordered_dict,
        Shape.DEQUE: _encode_deque,
        Shape.TUPLE: _encode_tuple,
        Shape.FROZENSET: _encode_frozenset,
        Shape.BOXED: _encode_boxed,
        Shape.DATE: _encode_date,
        Shape.REGEX: _encode_regex,
        Shape.BUFFER: _encode_buffer,
        Shape.NUMBER_ARRAY: _encode_number_array,
        Shape.URL: _encode_url,
        Shape.UNSUPPORTED: _encode_unsupported,
    }
