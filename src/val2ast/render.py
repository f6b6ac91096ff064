"""Turn converted values into source code (and back into values).

The code generation itself is done by :func:`ast.unparse`; this module adds
the ``import`` statements needed by the dotted paths used in the tree:

  >>> import datetime
  >>> from val2ast import convert
  >>> print(to_source(convert(datetime.date(2022, 4, 1))))
  import datetime
  <BLANKLINE>
  datetime.date(2022, 4, 1)
"""
from __future__ import annotations

import ast
import functools
import inspect
from typing import Any, Iterator, Literal, Mapping

import pygments
import pygments.formatters
import pygments.lexers

from . import ast_utils, utils

__all__ = ("to_source", "required_imports", "evaluate", "highlight")


def _get_import(path: str) -> str | None | Exception:
    """Find the module to import to be able to evaluate *path*

    Returns ``None`` for builtins and the exception we ran into if *path*
    cannot be found.
    """
    try:
        while True:
            obj = utils.locate(path)
            if obj is None:
                return ImportError("Failed to find object")
            if inspect.ismodule(obj):
                return path
            if "." not in path:
                return None
            if path.startswith(getattr(obj, "__module__", "\000") + "."):
                return obj.__module__  # type: ignore[no-any-return]
            path, _ = path.rsplit(".", 1)
    except Exception as e:
        # Clear out all the fields set by `raise ...` that might leak large
        # amounts of memory
        e.__cause__ = e.__context__ = e.__traceback__ = None
        return e


def _as_path(node: ast.expr) -> str | None:
    parts = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


class _PathCollector(ast.NodeVisitor):
    """Collect the dotted paths read from the global namespace"""

    paths: dict[str, None]
    bound: set[str]

    def __init__(self) -> None:
        self.paths = {}
        self.bound = set()

    def visit_Assign(self, node: ast.Assign) -> None:
        for target in node.targets:
            if isinstance(target, ast.Name):
                self.bound.add(target.id)
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        path = _as_path(node)
        if path is None:
            self.generic_visit(node)
        else:
            self.paths[path] = None

    def visit_Name(self, node: ast.Name) -> None:
        self.paths[node.id] = None

    def free_paths(self) -> Iterator[str]:
        for path in self.paths:
            if path.split(".", 1)[0] not in self.bound:
                yield path


def required_imports(
    node: ast.AST,
) -> tuple[list[str], list[tuple[str, Exception]]]:
    """Find the modules to import before evaluating *node*.

    Returns:
      The sorted list of modules to import and the paths we couldn't resolve
      along with the error we got while trying.
    """
    collector = _PathCollector()
    collector.visit(node)
    imports = set[str]()
    errors: list[tuple[str, Exception]] = []
    for path in collector.free_paths():
        found = _cached_get_import(path)
        if found is None:
            continue
        if isinstance(found, Exception):
            errors.append((path, found))
        else:
            imports.add(found)
    errors.sort(key=lambda x: x[0])
    return sorted(imports), errors


# Only cache successes: the exceptions would be shared between calls
@functools.lru_cache(maxsize=256)
def _cached_get_import_str(path: str) -> str | None:
    res = _get_import(path)
    if isinstance(res, Exception):
        raise LookupError(path)
    return res


def _cached_get_import(path: str) -> str | None | Exception:
    try:
        return _cached_get_import_str(path)
    except LookupError:
        return _get_import(path)


def to_source(node: ast.AST, add_imports: bool = True) -> str:
    """Render the output of :func:`~val2ast.convert` as python code.

    Args:
      node: An expression or a module.
      add_imports: Prepend the ``import`` statements needed to evaluate the
        code.
    """
    body = ast.unparse(node)
    if not add_imports:
        return body
    imports, errors = required_imports(node)
    prelude = ""
    if errors:
        prelude += (
            "# There were errors trying to import the following "
            "constructors\n#\n"
        )
        for path, e in errors:
            prelude += f"# + {path!r}: {type(e).__name__} {e}\n"
        prelude += "\n"
    if imports:
        prelude += "".join(f"import {i}\n" for i in imports) + "\n"
    return prelude + body


def evaluate(node: ast.AST, namespace: Mapping[str, Any] | None = None) -> Any:
    """Run the code generated for a value and return the value it builds.

    Args:
      node: An expression or a module (as returned by
        :func:`~val2ast.convert`).
      namespace: Extra globals (e.g.: for names introduced via the
        ``on_unsupported`` hook).
    """
    source = to_source(node)
    filename = ast_utils.fill_linecache(source)
    *prelude, last = ast.parse(source, filename=filename).body
    assert isinstance(last, ast.Expr), last
    env: dict[str, Any] = {} if namespace is None else dict(namespace)
    before = compile(
        ast.Module(prelude, type_ignores=[]), filename=filename, mode="exec"
    )
    main = compile(ast.Expression(last.value), filename=filename, mode="eval")
    exec(before, env)
    return eval(main, env)


def highlight(
    code: str, formatter: Literal["terminal", "html"] = "terminal"
) -> str:
    """Syntax highlight python *code* with pygments."""
    lexer = pygments.lexers.PythonLexer()
    fmt: Any
    if formatter == "html":
        fmt = pygments.formatters.HtmlFormatter(cssclass="val2ast-highlight")
    else:
        fmt = pygments.formatters.TerminalFormatter()
    res: str = pygments.highlight(code, lexer, fmt)
    return res
