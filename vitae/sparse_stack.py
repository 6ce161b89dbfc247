"""Growable stack whose slots may be filled out of order."""

from __future__ import annotations

from typing import Any

STACK_GROW_AMOUNT = 4


class StackUnderflowError(IndexError):
    """Raised when taking from a stack that holds too few items."""


class SparseStack:
    """Stack over a list of slots; empty slots hold None and pushes skip filled ones."""

    def __init__(self, size: int = 0) -> None:
        if size < 0:
            raise ValueError("stack size must not be negative")
        self.top = 0
        self.data: list[Any] = [None] * size

    @property
    def size(self) -> int:
        """Number of slots currently allocated."""
        return len(self.data)

    def grow(self, amount: int) -> None:
        """Add amount empty slots at the end."""
        if amount < 0:
            raise ValueError("cannot grow by a negative amount")
        self.data.extend([None] * amount)

    def push(self, item: Any) -> int:
        """Put item in the first empty slot at or above top; return the new top."""
        if self.top + 2 >= self.size:
            self.grow(STACK_GROW_AMOUNT)
        index = self.top
        while index < self.size and self.data[index] is not None:
            index += 1
        if index >= self.size:
            self.grow(index - self.size + STACK_GROW_AMOUNT)
        self.data[index] = item
        self.top = index + 1
        return self.top

    def pop(self) -> Any:
        """Remove and return the item just below top, leaving its slot empty."""
        if self.top < 1:
            raise StackUnderflowError("stack underflow")
        self.top -= 1
        item = self.data[self.top]
        self.data[self.top] = None
        return item

    def peek(self) -> Any:
        """Return the item just below top without removing it."""
        if self.top < 1:
            raise StackUnderflowError("stack underflow")
        return self.data[self.top - 1]

    def check(self, index: int) -> Any:
        """Return the item in slot index, which must lie below top."""
        if not 0 <= index < self.top:
            raise IndexError(f"stack top {self.top}, got index {index}")
        return self.data[index]

    def copy(self, start: int, end: int) -> SparseStack:
        """Return a new stack holding slots start up to end pushed in order."""
        if not 0 <= start <= end <= self.size:
            raise ValueError(f"invalid range {start}:{end}")
        result = SparseStack(end - start)
        for item in self.data[start:end]:
            result.push(item)
        return result

    def swap_top(self) -> int:
        """Exchange the two topmost items; return top."""
        if self.top < 2:
            raise StackUnderflowError("need two items to swap")
        data = self.data
        data[self.top - 1], data[self.top - 2] = data[self.top - 2], data[self.top - 1]
        return self.top

    def swap(self, pos1: int, pos2: int) -> int:
        """Exchange the items in two slots below top; return top."""
        for pos in (pos1, pos2):
            if not 0 <= pos < self.top:
                raise IndexError(f"stack top {self.top}, got index {pos}")
        self.data[pos1], self.data[pos2] = self.data[pos2], self.data[pos1]
        return self.top

    def flip(self) -> int:
        """Reverse the order of the items below top; return top."""
        self.data[: self.top] = reversed(self.data[: self.top])
        return self.top

    def __len__(self) -> int:
        return self.top