"""Print the python code that rebuilds a value.

::

  $ val2ast file data.json
  $ val2ast object string.ascii_letters
"""
from __future__ import annotations

import json
import logging
import pathlib
import pickle
import sys
from typing import Any, Callable, TypeVar

import click
import msgpack

from . import render, utils
from .convert import convert
from .errors import ConversionError
from .options import Options

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

INPUT_FORMATS = ("pickle", "msgpack", "json")

_SUFFIXES = {
    ".pickle": "pickle",
    ".pkl": "pickle",
    ".msgpack": "msgpack",
    ".mpk": "msgpack",
    ".json": "json",
}


def _conversion_options(f: F) -> F:
    """The flags shared by all the commands"""
    f = click.option(
        "--color/--no-color",
        default=None,
        help="Syntax highlight the output (default: only on terminals).",
    )(f)
    f = click.option(
        "--instances-as-plain",
        is_flag=True,
        help="Convert instances of arbitrary classes via their __dict__.",
    )(f)
    f = click.option(
        "--preserve-references",
        is_flag=True,
        help="Keep shared and recursive values shared.",
    )(f)
    return f


def load(path: pathlib.Path, input_format: str | None = None) -> Any:
    """Load a value from a serialized file.

    If *input_format* is not given it's inferred from the suffix of *path*.
    """
    if input_format is None:
        input_format = _SUFFIXES.get(path.suffix.lower())
        if input_format is None:
            raise click.UsageError(
                f"Cannot infer the format of {str(path)!r}, use --input-format"
            )
    logger.debug("Loading %s as %s", path, input_format)
    if input_format == "json":
        with path.open("r") as fd:
            return json.load(fd)
    with path.open("rb") as fd:
        if input_format == "msgpack":
            return msgpack.unpack(fd, raw=False, strict_map_key=False)
        assert input_format == "pickle", input_format
        return pickle.load(fd)


def emit(
    value: Any,
    *,
    preserve_references: bool,
    instances_as_plain: bool,
    color: bool | None,
) -> None:
    options = Options(
        preserve_references=preserve_references,
        treat_instances_as_plain=instances_as_plain,
    )
    try:
        node = convert(value, options)
    except ConversionError as e:
        raise click.ClickException(str(e)) from e
    code = render.to_source(node)
    if color is None:
        color = sys.stdout.isatty()
    if color:
        click.echo(render.highlight(code), nl=False, color=True)
    else:
        click.echo(code)


@click.group()
@click.version_option(package_name="val2ast")
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def cli(verbose: bool) -> None:
    """Convert python values into the code that rebuilds them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s: %(message)s",
    )


@cli.command()
@click.argument(
    "path", type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path)
)
@click.option(
    "--input-format",
    type=click.Choice(INPUT_FORMATS),
    default=None,
    help="Format of the input file (default: guessed from the suffix).",
)
@_conversion_options
def file(
    path: pathlib.Path,
    input_format: str | None,
    preserve_references: bool,
    instances_as_plain: bool,
    color: bool | None,
) -> None:
    """Convert the value stored in PATH"""
    emit(
        load(path, input_format),
        preserve_references=preserve_references,
        instances_as_plain=instances_as_plain,
        color=color,
    )


@cli.command(name="object")
@click.argument("dotted_path")
@_conversion_options
def object_(
    dotted_path: str,
    preserve_references: bool,
    instances_as_plain: bool,
    color: bool | None,
) -> None:
    """Convert the value found at DOTTED_PATH (e.g.: `string.digits`)"""
    value = utils.locate(dotted_path)
    if value is None:
        raise click.ClickException(f"Could not find {dotted_path!r}")
    emit(
        value,
        preserve_references=preserve_references,
        instances_as_plain=instances_as_plain,
        color=color,
    )
