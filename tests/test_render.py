import datetime
import pathlib
import types

from val2ast import ast_utils, convert, render

from . import fixtures, utils


def test_get_import():
    assert render._get_import("val2ast.Options") == "val2ast"
    assert render._get_import("val2ast.options.Options") == "val2ast.options"
    assert render._get_import("datetime.timezone.utc") == "datetime"
    assert render._get_import("math") == "math"
    assert render._get_import("float") is None
    assert render._get_import("NotImplemented") is None

    assert isinstance(render._get_import("I.DoNot.Exist"), ImportError)


def bad_locate(_):
    raise RuntimeError("locate failed")


def test_get_import_pb(monkeypatch):
    monkeypatch.setattr("val2ast.utils.locate", bad_locate)

    err = render._get_import("what.ever")
    assert isinstance(err, RuntimeError)
    assert err.__traceback__ is None


def test_to_source():
    node = convert(datetime.date(2022, 4, 1))
    assert render.to_source(node) == (
        "import datetime\n\ndatetime.date(2022, 4, 1)"
    )
    assert render.to_source(node, add_imports=False) == (
        "datetime.date(2022, 4, 1)"
    )
    assert render.to_source(convert([1, None])) == "[1, None]"


def test_required_imports():
    ns = types.SimpleNamespace(when=datetime.time(1), path=pathlib.Path("/"))
    imports, errors = render.required_imports(
        convert([ns, ns, fixtures.Color.RED], preserve_references=True)
    )
    assert imports == ["datetime", "pathlib", "tests.fixtures", "types"]
    assert errors == []


def test_variables_are_not_imported():
    x = [float("inf")]
    node = convert([x, x], preserve_references=True)
    assert render.to_source(node) == (
        "var0 = [float('inf')]\n[var0, var0]"
    )


def test_import_errors():
    node = ast_utils.call("i_do_not.exist", ast_utils.dotted_path("math.pi"))
    imports, errors = render.required_imports(node)
    assert imports == ["math"]
    assert errors == [("i_do_not.exist", utils.InstanceOf(ImportError))]
    assert render.to_source(node) == (
        "# There were errors trying to import the following constructors\n"
        "#\n"
        "# + 'i_do_not.exist': ImportError Failed to find object\n"
        "\n"
        "import math\n"
        "\n"
        "i_do_not.exist(math.pi)"
    )


def test_evaluate():
    value = {"a": [1, (2, 3)], "b": fixtures.Color.GREEN}
    assert render.evaluate(convert(value)) == value
    assert render.evaluate(ast_utils.name("x"), {"x": 42}) == 42


def test_highlight():
    code = render.to_source(convert({"a": 1}))
    terminal = render.highlight(code)
    assert "\x1b[" in terminal
    html = render.highlight(code, formatter="html")
    assert 'class="val2ast-highlight"' in html
