from __future__ import annotations

import ast
from typing import Iterator

from . import ast_utils

__all__ = ("Statements", "build")


class Statements:
    """Statements that run once all the variables have been declared.

    They are kept in the order in which they were added, which is the order
    in which the walker discovered them. The exceptions are statements using a
    variable that has been named but not bound yet (see :meth:`reserve`):
    they are held back until that variable is bound, either by a declaration
    (:meth:`bind`) or by an assignment added here.
    """

    _body: list[ast.stmt]
    _pending: list[ast.stmt]
    _unbound: set[str]

    def __init__(self) -> None:
        self._body = []
        self._pending = []
        self._unbound = set()

    def reserve(self, name: str) -> None:
        """*name* will be bound later on"""
        self._unbound.add(name)

    def bind(self, name: str) -> None:
        """*name* is now bound by a declaration"""
        self._unbound.discard(name)
        self._flush()

    def assign(
        self,
        target: ast.Name | ast.Attribute | ast.Subscript,
        value: ast.expr,
    ) -> None:
        self._add(ast_utils.assign(target, value))

    def call(self, target: ast.expr, method: str, *args: ast.expr) -> None:
        """Add ``target.method(*args)``"""
        self.expr(ast_utils.call(ast_utils.attribute(target, method), *args))

    def expr(self, value: ast.expr) -> None:
        self._add(ast_utils.expr_stmt(value))

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def _waiting_on(self, stmt: ast.stmt) -> bool:
        if not self._unbound:
            return False
        root: ast.AST = stmt
        if isinstance(stmt, ast.Assign) and isinstance(
            stmt.targets[0], ast.Name
        ):
            root = stmt.value
        return any(
            isinstance(node, ast.Name) and node.id in self._unbound
            for node in ast.walk(root)
        )

    def _add(self, stmt: ast.stmt) -> None:
        if self._waiting_on(stmt):
            self._pending.append(stmt)
        else:
            self._emit(stmt)
            self._flush()

    def _emit(self, stmt: ast.stmt) -> None:
        self._body.append(stmt)
        if isinstance(stmt, ast.Assign) and isinstance(
            stmt.targets[0], ast.Name
        ):
            self._unbound.discard(stmt.targets[0].id)

    def _flush(self) -> None:
        # Emit the first statement that is ready, and start over: emitting a
        # binding can unblock statements that were added before it.
        while True:
            for idx, stmt in enumerate(self._pending):
                if not self._waiting_on(stmt):
                    del self._pending[idx]
                    self._emit(stmt)
                    break
            else:
                return

    def __len__(self) -> int:
        return len(self._body)

    def __iter__(self) -> Iterator[ast.stmt]:
        return iter(self._body)


def build(
    declarations: list[ast.Assign], statements: Statements, result: ast.expr
) -> ast.expr | ast.Module:
    """Assemble the output of a conversion.

    When there is nothing to declare we return *result* as is, otherwise we
    return a module where the last statement is the value we're building.
    """
    assert not statements.pending, "Some variables were never bound"
    if not statements:
        if not declarations:
            return result
        # A lone variable that is only used as the result.
        match declarations:
            case [ast.Assign(targets=[ast.Name(declared)], value=init)] if (
                isinstance(result, ast.Name) and result.id == declared
            ):
                return init
    return ast_utils.module(
        [*declarations, *statements, ast_utils.expr_stmt(result)]
    )
