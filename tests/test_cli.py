import datetime
import json
import pickle

import msgpack
import pytest
from click.testing import CliRunner

from val2ast import cli

from . import fixtures


@pytest.fixture
def runner():
    return CliRunner()


def test_json(runner, tmp_path):
    path = tmp_path / "value.json"
    path.write_text(json.dumps({"a": [1, 2.5, None]}))
    result = runner.invoke(cli.cli, ["file", str(path)])
    assert result.exit_code == 0, result.output
    assert result.output == "{'a': [1, 2.5, None]}\n"


def test_msgpack(runner, tmp_path):
    path = tmp_path / "value.bin"
    path.write_bytes(msgpack.packb({1: [b"raw", "text"]}))
    result = runner.invoke(
        cli.cli, ["file", "--input-format", "msgpack", str(path)]
    )
    assert result.exit_code == 0, result.output
    assert result.output == "{1: [b'raw', 'text']}\n"


def test_pickle(runner, tmp_path):
    path = tmp_path / "value.pkl"
    path.write_bytes(pickle.dumps(datetime.date(2022, 4, 1)))
    result = runner.invoke(cli.cli, ["file", str(path)])
    assert result.exit_code == 0, result.output
    assert result.output == "import datetime\n\ndatetime.date(2022, 4, 1)\n"


def test_preserve_references(runner, tmp_path):
    x = [1]
    path = tmp_path / "value.pickle"
    path.write_bytes(pickle.dumps([x, x]))
    result = runner.invoke(cli.cli, ["file", str(path)])
    assert result.output == "[[1], [1]]\n"
    result = runner.invoke(
        cli.cli, ["file", "--preserve-references", str(path)]
    )
    assert result.exit_code == 0, result.output
    assert result.output == "var0 = [1]\n[var0, var0]\n"


def test_instances_as_plain(runner, tmp_path):
    path = tmp_path / "value.pickle"
    path.write_bytes(pickle.dumps(fixtures.Point(1, 2)))
    result = runner.invoke(cli.cli, ["file", str(path)])
    assert result.exit_code == 1
    assert "Unsupported value" in result.output

    result = runner.invoke(
        cli.cli, ["file", "--instances-as-plain", str(path)]
    )
    assert result.exit_code == 0, result.output
    assert result.output == "import types\n\ntypes.SimpleNamespace(x=1, y=2)\n"


def test_unknown_suffix(runner, tmp_path):
    path = tmp_path / "value.txt"
    path.write_text("[]")
    result = runner.invoke(cli.cli, ["file", str(path)])
    assert result.exit_code == 2
    assert "--input-format" in result.output

    result = runner.invoke(
        cli.cli, ["file", "--input-format", "json", str(path)]
    )
    assert result.exit_code == 0, result.output
    assert result.output == "[]\n"


def test_object(runner):
    result = runner.invoke(cli.cli, ["object", "string.digits"])
    assert result.exit_code == 0, result.output
    assert result.output == "'0123456789'\n"

    result = runner.invoke(cli.cli, ["object", "tests.fixtures.Level.HIGH"])
    assert result.exit_code == 0, result.output
    assert result.output == (
        "import tests.fixtures\n\ntests.fixtures.Level.HIGH\n"
    )


def test_object_errors(runner):
    result = runner.invoke(cli.cli, ["object", "i_do_not.exist"])
    assert result.exit_code == 1
    assert "Could not find 'i_do_not.exist'" in result.output

    result = runner.invoke(cli.cli, ["object", "math.floor"])
    assert result.exit_code == 1
    assert "Unsupported value" in result.output


def test_color(runner):
    result = runner.invoke(cli.cli, ["object", "--color", "math.pi"])
    assert result.exit_code == 0, result.output
    assert "\x1b[" in result.output
    result = runner.invoke(cli.cli, ["object", "--no-color", "math.pi"])
    assert result.output == "3.141592653589793\n"


def test_verbose(runner, caplog):
    caplog.set_level("DEBUG", logger="val2ast")
    result = runner.invoke(cli.cli, ["--verbose", "object", "string.digits"])
    assert result.exit_code == 0, result.output
    assert "Converted str" in caplog.text
