"""Mutable, garbage-collected strings of the virtual machine."""

from __future__ import annotations

from vitae.gc import GcKind, GcObject


class VString(GcObject):
    """A string value that can be changed in place, one character at a time."""

    gc_kind = GcKind.STRING

    def __init__(self, text: str = "") -> None:
        self._text = str(text)

    def char_at(self, index: int) -> str:
        """Return the character at index, or NUL when index is out of range."""
        if 0 <= index < len(self._text):
            return self._text[index]
        return "\0"

    def set_char(self, index: int, value: int | str) -> None:
        """Replace the character at index with a one-character string or a code point."""
        if not 0 <= index < len(self._text):
            raise IndexError(f"string index {index} out of range")
        char = chr(value) if isinstance(value, int) else value
        if len(char) != 1:
            raise ValueError("exactly one character expected")
        self._text = self._text[:index] + char + self._text[index + 1:]

    def append(self, other: VString | str) -> None:
        """Append other to this string in place."""
        self._text += str(other)

    def copy(self, start: int = 0, end: int | None = None) -> VString:
        """Return a new string holding the characters from start up to end."""
        if end is None:
            end = len(self._text)
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(f"invalid range {start}:{end}")
        return VString(self._text[start:end])

    def join(self, other: VString | str) -> VString:
        """Return a new string made of this one followed by other."""
        return VString(self._text + str(other))

    def find_char(self, char: str, start: int = 0, end: int | None = None) -> int:
        """Offset from start of the first char in start:end, or -1."""
        found = self._text.find(char, start, len(self._text) if end is None else end)
        return found - start if found >= 0 else -1

    def find_last_char(self, char: str, start: int = 0, end: int | None = None) -> int:
        """Offset from start of the last char in start:end, or -1."""
        found = self._text.rfind(char, start, len(self._text) if end is None else end)
        return found - start if found >= 0 else -1

    def __contains__(self, char: object) -> bool:
        return isinstance(char, str) and char in self._text

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VString):
            return self._text == other._text
        if isinstance(other, str):
            return self._text == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"VString({self._text!r})"