"""Fixed-size chained hash table keyed by short names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

MAX_NAME = 32
HASH_SEED = 42
_FNV_PRIME = 0x01000193
_MASK = 0xFFFFFFFF


def _signed_bytes(key: str) -> Iterator[int]:
    for byte in key.encode("utf-8"):
        yield byte - 256 if byte >= 128 else byte


def _check_size(size: int) -> None:
    if size <= 0:
        raise ValueError("hash table size must be positive")


def fnv_hash(key: str, size: int) -> int:
    """FNV-style 32-bit hash of key, seeded with HASH_SEED, reduced to a bucket index."""
    _check_size(size)
    value = HASH_SEED
    for char in _signed_bytes(key):
        value = ((value ^ (char & _MASK)) * _FNV_PRIME) & _MASK
    return value % size


def alt_hash(key: str, size: int) -> int:
    """Alternative cubic 32-bit hash of key, reduced to a bucket index."""
    _check_size(size)
    value = 0
    for char in _signed_bytes(key):
        value = (value + (((char * char * char) ^ value) | _FNV_PRIME)) & _MASK
    return value % size


@dataclass(slots=True)
class _Entry:
    name: str
    value: Any


class HashTable:
    """Hash table with a fixed number of buckets; names keep at most MAX_NAME - 1 characters."""

    def __init__(self, size: int) -> None:
        _check_size(size)
        self.size = size
        self._buckets: list[list[_Entry]] = [[] for _ in range(size)]

    def _find(self, name: str) -> tuple[list[_Entry], _Entry | None]:
        bucket = self._buckets[fnv_hash(name, self.size)]
        wanted = name[:MAX_NAME]
        for entry in bucket:
            if entry.name == wanted:
                return bucket, entry
        return bucket, None

    def insert(self, name: str, value: Any) -> None:
        """Set the value for name, overwriting any existing one."""
        bucket, entry = self._find(name)
        if entry is not None:
            entry.value = value
        else:
            bucket.insert(0, _Entry(name[: MAX_NAME - 1], value))

    def delete(self, name: str) -> Any:
        """Remove name and return its value; KeyError if absent."""
        bucket, entry = self._find(name)
        if entry is None:
            raise KeyError(name)
        bucket.remove(entry)
        return entry.value

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value stored under name, or default."""
        _, entry = self._find(name)
        return default if entry is None else entry.value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find(name)[1] is not None

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield (name, value) pairs bucket by bucket, newest first within a bucket."""
        for bucket in self._buckets:
            for entry in bucket:
                yield entry.name, entry.value

    def dump(self) -> str:
        """Return a text listing of every bucket and its chain."""
        rule = "-" * 24
        lines = [rule]
        for index, bucket in enumerate(self._buckets):
            if not bucket:
                lines.append(f"{index}\t---")
            else:
                chain = "".join(f' ["{e.name}"] -> {e.value!r}' for e in bucket)
                lines.append(f"{index}\t{chain}")
        lines.append(rule)
        return "\n".join(lines) + "\n"