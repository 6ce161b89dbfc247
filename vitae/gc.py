"""Mark-and-sweep bookkeeping for heap objects of the virtual machine."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Iterator


class GcKind(Enum):
    """Kinds of objects the collector keeps track of."""

    STRING = 0
    FUNCTION = 1
    TABLE = 2
    ELEMENT = 3


class GcObject:
    """Base for anything the collector tracks: a kind and a mark flag."""

    gc_kind: ClassVar[GcKind] = GcKind.ELEMENT
    marked: bool = False


class Collector:
    """List of tracked objects; unmarked ones are dropped on every sweep."""

    def __init__(self) -> None:
        self._objects: list[GcObject] = []

    def track(self, obj: GcObject) -> GcObject:
        """Start tracking obj and return it."""
        if not isinstance(obj, GcObject):
            raise TypeError(f"cannot track {type(obj).__name__}")
        if not isinstance(obj.gc_kind, GcKind):
            raise TypeError(f"unknown object kind {obj.gc_kind!r}")
        self._objects.append(obj)
        return obj

    def sweep(self) -> int:
        """Drop every unmarked object, clear marks on survivors; return the count dropped."""
        survivors: list[GcObject] = []
        freed = 0
        for obj in self._objects:
            if obj.marked:
                obj.marked = False
                survivors.append(obj)
            else:
                freed += 1
        self._objects = survivors
        return freed

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[GcObject]:
        """Iterate from the most recently tracked object to the oldest."""
        return reversed(self._objects)