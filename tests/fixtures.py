"""Values that need to be importable by name to be converted."""
from __future__ import annotations

import enum


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 10


# Members whose names aren't valid attribute names
Odd = enum.Enum("Odd", [("not valid", 1), ("if", 2)])


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class Slotted:
    __slots__ = ("x",)

    def __init__(self, x):
        self.x = x


class MyList(list):
    pass


class Perm(enum.Flag):
    R = 4
    W = 2
    X = 1
