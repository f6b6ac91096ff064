from __future__ import annotations

import ast
import dataclasses
from typing import Any, Callable, TypeAlias

__all__ = ("Options", "UnsupportedHook")

#: Called with values we do not know how to convert. Returning ``None`` means
#: the hook doesn't handle the value either.
UnsupportedHook: TypeAlias = Callable[[Any], "ast.expr | None"]


@dataclasses.dataclass(frozen=True, slots=True)
class Options:
    """Configuration of a conversion.

    Attributes:
      preserve_references: Keep values that are reachable through several
        paths shared in the output (and allow recursive values). The output
        is then a module where the shared values are bound to variables.
      treat_instances_as_plain: Convert instances of arbitrary classes as
        :class:`types.SimpleNamespace` holding their attributes instead of
        rejecting them.
      on_unsupported: Last resort hook for values of an unsupported type.
    """

    preserve_references: bool = False
    treat_instances_as_plain: bool = False
    on_unsupported: UnsupportedHook | None = None

    def replace(self, **changes: Any) -> Options:
        return dataclasses.replace(self, **changes)


DEFAULT = Options()
