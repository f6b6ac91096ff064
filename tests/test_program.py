import ast

from val2ast import ast_utils, program

from . import utils


def test_no_declarations():
    result = ast_utils.constant(1)
    assert program.build([], program.Statements(), result) is result


def test_lone_declaration():
    decl = ast_utils.assign(ast_utils.name("var0"), ast_utils.list_([]))
    res = program.build([decl], program.Statements(), ast_utils.name("var0"))
    utils.assert_eq_ast(res, "[]")


def test_declarations_used_elsewhere():
    decl = ast_utils.assign(ast_utils.name("var0"), ast_utils.list_([]))
    result = ast_utils.list_([ast_utils.name("var0"), ast_utils.name("var0")])
    res = program.build([decl], program.Statements(), result)
    assert isinstance(res, ast.Module)
    utils.assert_eq_ast(res, "var0 = []\n[var0, var0]")


def test_statements():
    statements = program.Statements()
    decl = ast_utils.assign(ast_utils.name("var0"), ast_utils.call("set"))
    statements.call(ast_utils.name("var0"), "add", ast_utils.constant(1))
    statements.assign(
        ast_utils.attribute(ast_utils.name("var0"), "x"), ast_utils.constant(2)
    )
    statements.expr(ast_utils.call("print"))
    assert len(statements) == 3
    res = program.build([decl], statements, ast_utils.name("var0"))
    utils.assert_eq_ast(
        res, "var0 = set()\nvar0.add(1)\nvar0.x = 2\nprint()\nvar0"
    )


def test_statements_wait_for_bindings():
    statements = program.Statements()
    statements.reserve("var0")
    statements.reserve("var1")
    statements.assign(
        ast_utils.subscript(ast_utils.name("var2"), ast_utils.constant(0)),
        ast_utils.name("var1"),
    )
    statements.assign(ast_utils.name("var1"), ast_utils.name("var0"))
    assert len(statements) == 0
    assert statements.pending
    statements.bind("var0")
    assert not statements.pending
    utils.assert_eq_ast(list(statements), "var1 = var0\nvar2[0] = var1")
