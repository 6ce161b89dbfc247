"""Tables of the virtual machine: an array part plus a hash part for other keys."""

from __future__ import annotations

from typing import Iterator, Optional

from vitae.elements import Element, describe
from vitae.gc import Collector, GcKind, GcObject
from vitae.hashtable import HashTable, fnv_hash
from vitae.opcodes import ValueType
from vitae.sparse_stack import SparseStack

ARRAY_GROW_AMOUNT = 32

_SHARED_TYPES = (ValueType.FUNCTION, ValueType.TABLE)


def copy_element(element: Element, collector: Optional[Collector] = None) -> Element:
    """Return a copy of element; strings are duplicated, other payloads shared.

    The copy is tracked by collector when one is given.
    """
    value = element.value
    if element.type == ValueType.STRING and value is not None:
        value = value.copy()
    copy = Element(ValueType(element.type), value)
    if collector is not None:
        collector.track(copy)
    return copy


def _key_name(key: Element) -> str:
    if key.type == ValueType.INUMBER:
        return str(key.value)
    if key.type == ValueType.STRING:
        if key.value is None:
            raise TypeError("cannot index a table with a nil string")
        return str(key.value)
    raise TypeError(f"cannot index a table with a {ValueType(key.type).name} key")


class Table(GcObject):
    """Associative table: small non-negative integer keys live in an array part.

    Integer keys far beyond the array are kept in the hash part and remembered
    in a backlog, so they move into the array once it has grown to hold them.
    """

    gc_kind = GcKind.TABLE

    def __init__(
        self,
        hash_size: int = 10,
        array_size: int = 10,
        collector: Optional[Collector] = None,
    ) -> None:
        self.hashtable = HashTable(hash_size)
        self.array = SparseStack(array_size)
        self.backlog: list[int] = []
        self.collector = collector
        if collector is not None:
            collector.track(self)

    def get(self, key: Element) -> Optional[Element]:
        """Return the element stored under key, or None when there is none."""
        if key.type == ValueType.INUMBER and 0 <= key.value < self.array.size:
            return self.array.data[key.value]
        return self.hashtable.get(_key_name(key))

    def insert(self, key: Element, value: Element) -> Element:
        """Store a copy of value under key and return the stored copy."""
        name = _key_name(key)
        stored = copy_element(value, self.collector)
        if key.type == ValueType.INUMBER:
            index = key.value
            if index < 0:
                self.hashtable.insert(name, stored)
            elif index < self.array.size:
                self.array.data[index] = stored
            elif index < self.array.size + ARRAY_GROW_AMOUNT:
                self.array.grow(ARRAY_GROW_AMOUNT)
                self.array.data[index] = stored
                self.check_backlog()
            else:
                if index not in self.backlog:
                    self.backlog.insert(0, index)
                self.hashtable.insert(name, stored)
        else:
            self.hashtable.insert(name, stored)
        return stored

    def push(self, value: Element) -> int:
        """Append value at the first free array slot at or after the top; return the new top.

        Tables and functions are stored by reference, anything else is copied.
        """
        stored = value if value.type in _SHARED_TYPES else copy_element(value, self.collector)
        if self.array.top + 2 >= self.array.size:
            self.array.grow(ARRAY_GROW_AMOUNT)
            self.check_backlog()
        return self.array.push(stored)

    def check_backlog(self) -> None:
        """Move backlogged entries that now fit from the hash part into the array part."""
        remaining: list[int] = []
        for index in self.backlog:
            if index < self.array.size:
                self.array.data[index] = self.hashtable.delete(str(index))
            else:
                remaining.append(index)
        self.backlog = remaining

    def children(self) -> Iterator[Element]:
        """Yield every element held in the hash part and then the array part."""
        for _, element in self.hashtable.items():
            yield element
        for element in self.array.data:
            if element is not None:
                yield element

    def dump(self) -> str:
        """Return a text listing of the hash part, bucket by bucket."""
        size = self.hashtable.size
        buckets: list[list[tuple[str, Element]]] = [[] for _ in range(size)]
        for name, element in self.hashtable.items():
            buckets[fnv_hash(name, size)].append((name, element))
        rule = "-" * 24
        lines = [rule]
        for index, bucket in enumerate(buckets):
            if not bucket:
                lines.append(f"{index}\t---")
            else:
                chain = "".join(f' ["{name}"] = {describe(element)}' for name, element in bucket)
                lines.append(f"{index}\t{chain}")
        lines.append(rule)
        return "\n".join(lines) + "\n"