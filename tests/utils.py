from __future__ import annotations

import ast
import math

from val2ast import ast_utils, convert, render


def _to_stmts(x):
    if isinstance(x, str):
        return ast.parse(x).body
    elif isinstance(x, ast.Module):
        return x.body
    elif isinstance(x, list):
        return x
    elif isinstance(x, tuple):
        return list(x)
    else:
        return [x]


def unparse(*elts):
    return "\n".join(ast.unparse(stmt) for x in elts for stmt in _to_stmts(x))


Primitives = bool | bytes | str | int | float | complex | None


def explode_ast(node):
    """Turns ast nodes in a format that can easily be compared and introspected.

    This is useful because the mapping between python's syntax and python's AST
    is not always straightforward.

    """
    if isinstance(node, Primitives) or node is Ellipsis:
        return node
    if isinstance(node, list | tuple):
        return [explode_ast(v) for v in node]
    assert isinstance(node, ast.AST), node
    return {k: explode_ast(v) for k, v in ast.iter_fields(node)} | {
        "__type__": type(node).__name__
    }


def _as_stmt(x):
    if isinstance(x, ast.expr):
        return ast_utils.expr_stmt(x)
    return x


def _check_ast_eq(left, right, path):
    assert type(left) == type(right), f"At {path}"
    if isinstance(left, Primitives) or left is Ellipsis:
        assert left == right, f"At {path}"
    elif isinstance(left, list):
        assert len(left) == len(right), f"At {path}"
        for idx, (le, re) in enumerate(zip(left, right)):
            _check_ast_eq(le, re, [*path, idx])
    elif isinstance(left, ast.AST):
        for fld in left._fields:
            _check_ast_eq(
                getattr(left, fld, "<MISSING>"),
                getattr(right, fld, "<MISSING>"),
                [*path, fld],
            )
    else:
        raise TypeError(f"At: {path}, {type(left)}")


MISSING = ()


def _check_fields_attributes(e, path):
    if isinstance(e, Primitives) or e is Ellipsis:
        return
    elif isinstance(e, list):
        for idx, x in enumerate(e):
            _check_fields_attributes(x, [*path, idx])
    elif isinstance(e, ast.AST):
        names = {*e._fields, *e._attributes}
        assert {x for x in e.__dict__} - names == set(), f"At {path}: {e}"
        for fld in names:
            fld_v = getattr(e, fld, MISSING)
            assert fld_v is not MISSING, f"At {path}: {e} missing {fld}"
            _check_fields_attributes(fld_v, [*path, fld])
    else:
        raise TypeError(f"At: {path}, {type(e)}: {e}")


def assert_eq_ast(fst, *rest):
    """Check that all the arguments are the same ast.

    Strings are parsed, expressions are compared as expression statements so
    they can be checked against the output of :func:`ast.parse`.
    """
    reference = [_as_stmt(x) for x in _to_stmts(fst)]
    unparsed = unparse(reference)
    for v in rest:
        stmts = [_as_stmt(x) for x in _to_stmts(v)]
        _check_fields_attributes(stmts, [])
        assert unparsed == unparse(stmts)
        _check_ast_eq(reference, stmts, [])


def roundtrip(v, **options):
    """Convert *v*, run the generated code and return the value it built."""
    node = convert(v, **options)
    source = render.to_source(node)
    # The output is deterministic
    assert render.to_source(convert(v, **options)) == source
    v2 = render.evaluate(node)
    # nan is not equal to itself
    if isinstance(v, float) and math.isnan(v):
        assert math.isnan(v2)
    else:
        assert v2 == v
    return v2


class InstanceOf:
    """Utility class to check that a given value is an instance of a class."""

    def __init__(self, ty):
        self.ty = ty

    def __eq__(self, x):
        return isinstance(x, self.ty)
