"""Identity tracking for a single conversion.

The :class:`Registry` maps the identity of values to the variable names they
are bound to in the generated module. It lives for the duration of one call
to :func:`val2ast.convert`.

Only values that are reachable through several paths (shared or recursive
values) get a name. :meth:`Registry.scan` finds them before any code is
generated:

  >>> from val2ast.options import Options
  >>> from val2ast.program import Statements
  >>> shared = [1]
  >>> registry = Registry(Statements(), preserve=True)
  >>> registry.scan([shared, [2], shared], Options())
  >>> registry.should_name(shared)
  True
"""
from __future__ import annotations

import ast
import contextlib
from typing import Any, Callable, Iterator

from . import ast_utils, shapes
from .errors import CircularReference
from .options import Options
from .program import Statements

__all__ = ("Registry",)


class Registry:
    preserve: bool
    statements: Statements
    declarations: list[ast.Assign]
    # id -> name
    names: dict[int, str]
    # Names whose declaration is in `declarations`
    bound: set[str]

    _all_names: set[str]
    _counts: dict[int, int]
    _marked: set[int]
    # ids of the values we are currently visiting
    _active: set[int]

    def __init__(self, statements: Statements, *, preserve: bool) -> None:
        self.preserve = preserve
        self.statements = statements
        self.declarations = []
        self.names = {}
        self.bound = set()
        self._all_names = set()
        self._counts = {}
        self._marked = set()
        self._active = set()

    # Scanning

    def scan(self, value: Any, options: Options) -> None:
        """Find all the values that need a name.

        A value needs a name if we reach it more than once in a depth first
        traversal. When we close a cycle, the mutable container nearest to the
        back edge also needs a name: it is where the back reference is
        assigned once everything is declared.
        """
        self._scan(value, options, [], {})

    def _scan(
        self,
        value: Any,
        options: Options,
        stack: list[tuple[int, bool]],
        positions: dict[int, int],
    ) -> None:
        shape = shapes.classify(value, options)
        if shape.primitive:
            return
        addr = id(value)
        seen = self._counts.get(addr, 0)
        self._counts[addr] = seen + 1
        if seen:
            pos = positions.get(addr)
            if pos is not None:
                self._mark_cycle(stack, pos)
            return
        positions[addr] = len(stack)
        stack.append((addr, shape in shapes.MUTABLE))
        for child in shapes.children(value, shape):
            self._scan(child, options, stack, positions)
        stack.pop()
        del positions[addr]

    def _mark_cycle(self, stack: list[tuple[int, bool]], start: int) -> None:
        for addr, mutable in reversed(stack[start + 1 :]):
            if mutable:
                self._marked.add(addr)
                return

    def should_name(self, value: Any) -> bool:
        addr = id(value)
        return self._counts.get(addr, 0) > 1 or addr in self._marked

    # Naming

    def refer(self, value: Any) -> ast.Name | None:
        """Get the variable a value is bound to (if any)"""
        if not self.preserve:
            return None
        name = self.names.get(id(value))
        if name is None:
            return None
        return ast_utils.name(name)

    def define(
        self, value: Any, build: Callable[[], ast.expr], *, mutable: bool
    ) -> ast.expr:
        """Get the expression to use for *value*.

        If *value* does not need a name, this is just ``build()``. Otherwise
        the value is bound to a new variable and we return a reference to that
        variable.

        Mutable values are declared as soon as they are discovered: *build*
        should return an empty shell that gets filled in afterwards. Immutable
        values are declared once built. If their initializer refers to a
        variable that hasn't been declared yet, the binding is emitted along
        with the deferred statements instead and the statements using the
        variable wait for it.
        """
        if not self.preserve or not self.should_name(value):
            return build()
        name = f"var{len(self.names)}"
        self.names[id(value)] = name
        self._all_names.add(name)
        self.statements.reserve(name)
        init = build()
        if mutable or self.references(init) <= self.bound:
            self.declarations.append(
                ast_utils.assign(ast_utils.name(name), init)
            )
            self.bound.add(name)
            self.statements.bind(name)
        else:
            self.statements.assign(ast_utils.name(name), init)
        return ast_utils.name(name)

    def is_reference(self, expr: ast.expr) -> bool:
        return isinstance(expr, ast.Name) and expr.id in self._all_names

    def references(self, expr: ast.expr) -> set[str]:
        """All the variables used in *expr*"""
        if not self._all_names:
            return set()
        return {
            node.id
            for node in ast.walk(expr)
            if isinstance(node, ast.Name) and node.id in self._all_names
        }

    # Cycle detection

    @contextlib.contextmanager
    def visiting(self, value: Any) -> Iterator[None]:
        """Mark *value* as being in progress.

        Entering a value that is already in progress means we are going around
        in a cycle.
        """
        addr = id(value)
        if addr in self._active:
            raise CircularReference(value)
        self._active.add(addr)
        try:
            yield
        finally:
            self._active.discard(addr)
