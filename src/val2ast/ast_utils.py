"""Smart constructors for the :mod:`ast` nodes we emit.

Every node we build carries location attributes so that the resulting trees
can be handed to :func:`compile` as well as :func:`ast.unparse`.
"""
from __future__ import annotations

import ast
import hashlib
import io
import linecache
import math
from typing import Iterable, Protocol


class Located(Protocol):  # pragma: no cover
    @property
    def lineno(self) -> int:
        ...

    @property
    def col_offset(self) -> int:
        ...

    @property
    def end_lineno(self) -> int | None:
        ...

    @property
    def end_col_offset(self) -> int | None:
        ...


# The trees we generate do not come from any source document. All the nodes
# are tied to this anchor so that they have valid (if meaningless) positions.
ANCHOR = ast.Pass(
    lineno=1,
    col_offset=0,
    end_lineno=1,
    end_col_offset=0,
)


def _pos(anchor: Located) -> dict[str, int | None]:
    return {
        "lineno": anchor.lineno,
        "col_offset": anchor.col_offset,
        "end_lineno": anchor.end_lineno,
        "end_col_offset": anchor.end_col_offset,
    }


def _const(value: object, anchor: Located = ANCHOR) -> ast.expr:
    return ast.Constant(kind=None, value=value, **_pos(anchor))


def neg(value: ast.expr) -> ast.expr:
    return ast.UnaryOp(
        op=ast.USub(),
        operand=value,
        lineno=value.lineno,
        col_offset=value.col_offset,
        end_lineno=value.end_lineno,
        end_col_offset=value.end_col_offset,
    )


def constant(
    value: int | float | None | bool | str | bytes, anchor: Located = ANCHOR
) -> ast.expr:
    "Smart constructor for ast.Constant"
    if isinstance(value, bool | str | bytes | None) or value is Ellipsis:
        return _const(value, anchor=anchor)
    assert isinstance(value, int | float)
    assert math.isfinite(value)
    # Handle -0. and 0. properly
    if math.copysign(1, value) == 1:
        return _const(value, anchor=anchor)
    # The parser reads ``-1`` as the ``-`` operator applied to a positive
    # constant. We want our generated ast to match what would have been
    # produced by the parser.
    return neg(_const(-value, anchor=anchor))


def name(
    id: str,
    ctx: ast.Load | ast.Store | ast.Del = ast.Load(),
    anchor: Located = ANCHOR,
) -> ast.Name:
    "smart constructor for ast.Name"
    assert id.isidentifier(), id
    return ast.Name(id=id, ctx=ctx, **_pos(anchor))


def attribute(
    value: ast.expr,
    attr: str,
    ctx: ast.Load | ast.Store | ast.Del = ast.Load(),
    anchor: Located = ANCHOR,
) -> ast.Attribute:
    return ast.Attribute(value=value, attr=attr, ctx=ctx, **_pos(anchor))


def dotted_path(
    path: str,
    ctx: ast.Load | ast.Store | ast.Del = ast.Load(),
    anchor: Located = ANCHOR,
) -> ast.Name | ast.Attribute:
    """Takes a dotted path and compile it to a python expression"""
    root, *rest = path.split(".")
    res: ast.Name | ast.Attribute = name(root, ctx=ast.Load(), anchor=anchor)
    for x in rest:
        res = attribute(res, x, anchor=anchor)
    res.ctx = ctx
    return res


def subscript(
    value: ast.expr,
    key: ast.expr,
    ctx: ast.Load | ast.Store | ast.Del = ast.Load(),
    anchor: Located = ANCHOR,
) -> ast.Subscript:
    return ast.Subscript(value=value, slice=key, ctx=ctx, **_pos(anchor))


def _arg_to_expr(
    value: int | float | None | bool | str | bytes | ast.expr,
    anchor: Located = ANCHOR,
) -> ast.expr:
    if isinstance(value, ast.expr):
        return value
    return constant(value, anchor=anchor)


def keyword(
    arg: str | None, value: ast.expr, anchor: Located = ANCHOR
) -> ast.keyword:
    return ast.keyword(arg=arg, value=value, **_pos(anchor))


def call(
    func: str | ast.expr,
    *args: ast.expr | int | float | None | bool | str | bytes,
    keywords: Iterable[ast.keyword] = (),
    anchor: Located = ANCHOR,
) -> ast.Call:
    """Smart constructor for ast.Call"""
    return ast.Call(
        func=dotted_path(func, anchor=anchor)
        if isinstance(func, str)
        else func,
        args=[_arg_to_expr(arg) for arg in args],
        keywords=list(keywords),
        **_pos(anchor),
    )


def list_(elts: list[ast.expr], anchor: Located = ANCHOR) -> ast.List:
    # ``elts`` is not copied: the walker fills list shells in place.
    return ast.List(elts=elts, ctx=ast.Load(), **_pos(anchor))


def tuple_(elts: list[ast.expr], anchor: Located = ANCHOR) -> ast.Tuple:
    return ast.Tuple(elts=elts, ctx=ast.Load(), **_pos(anchor))


def set_(elts: list[ast.expr], anchor: Located = ANCHOR) -> ast.Set:
    assert elts, "Empty sets have no display"
    return ast.Set(elts=elts, **_pos(anchor))


def dict_(
    keys: list[ast.expr | None],
    values: list[ast.expr],
    anchor: Located = ANCHOR,
) -> ast.Dict:
    return ast.Dict(keys=keys, values=values, **_pos(anchor))


def bit_or(operands: list[ast.expr], anchor: Located = ANCHOR) -> ast.expr:
    """Join *operands* with ``|``"""
    first, *rest = operands
    res = first
    for operand in rest:
        res = ast.BinOp(left=res, op=ast.BitOr(), right=operand, **_pos(anchor))
    return res


def assign(
    target: ast.Name | ast.Attribute | ast.Subscript,
    value: ast.expr,
    anchor: Located = ANCHOR,
) -> ast.Assign:
    """Build ``target = value``, *target* is switched to a store context"""
    target.ctx = ast.Store()
    return ast.Assign(
        targets=[target], value=value, type_comment=None, **_pos(anchor)
    )


def expr_stmt(value: ast.expr, anchor: Located = ANCHOR) -> ast.Expr:
    return ast.Expr(value=value, **_pos(anchor))


def module(body: list[ast.stmt]) -> ast.Module:
    return ast.Module(body=body, type_ignores=[])


# We fill the linecache with the content of the generated code to make
# backtraces work well.
#
# Both doctest and ipython patch linecache to handle "fake files":
# + https://github.com/python/cpython/blob/26fa25a9a73/Lib/doctest.py#L1427
# + https://github.com/ipython/ipython/blob/b9c1adb1119/IPython/core
#   /compilerop.py#L189
#
# We use a mtime of None, which means our entries won't be purged by
# linecache.checkcache.


def fill_linecache(data: str) -> str:
    "Fill the linecache with a fake file containing the content of ``data``."
    digest = hashlib.sha1(data.encode("utf8")).hexdigest()
    filename = f"<val2ast-{digest}>"
    if filename not in linecache.cache:
        size = len(data)
        lines = list(io.StringIO(data))
        # An mtime == None means that this won't be purged by
        # linecache.checkcache
        mtime = None
        linecache.cache[filename] = (
            size,
            mtime,
            lines,
            filename,
        )
    return filename
