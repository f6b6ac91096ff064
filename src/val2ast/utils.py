from __future__ import annotations

import inspect
import pydoc
import types
import typing
from typing import Any, Protocol, TypeVar

locate = pydoc.locate


@typing.runtime_checkable
class QualnameAddressable(Protocol):

    __name__: str
    __qualname__: str
    __module__: str


Addressable = TypeVar(
    "Addressable", bound=types.ModuleType | QualnameAddressable
)


def _public_name(module: str, qualname: str, v: Any) -> str:
    """Drop private sub-modules from a path when the package re-exports *v*.

    e.g.: ``pathlib._local.PosixPath`` is reachable as ``pathlib.PosixPath``.
    """
    parts = module.split(".")
    for i in range(1, len(parts)):
        if parts[i].startswith("_"):
            shorter = ".".join(parts[:i]) + "." + qualname
            if locate(shorter) is v:
                return shorter
            break
    return module + "." + qualname


def get_locate_name(v: Addressable) -> str:
    """Get a name that can be used with `locate` to reload the given argument"""
    if inspect.ismodule(v):
        name = v.__name__
    elif isinstance(v, QualnameAddressable):
        if v.__name__ == "<lambda>":
            raise TypeError("lambdas are not supported")
        if ".<locals>." in v.__qualname__:
            raise ValueError(
                "values defined inside of functions are not supported."
            )
        if v.__module__ == "builtins":
            name = v.__qualname__
        else:
            name = _public_name(v.__module__, v.__qualname__, v)
    else:
        raise TypeError(f"Type {type(v).__name__!r} not supported")

    elt = locate(name)
    if elt is None:
        raise ValueError(
            f"Argument {v} cannot be reloaded via its name: {name!r}"
        )
    elif elt != v:
        raise ValueError(f"Can't use {v}, it's overridden by {elt} as {name!r}")
    return name
