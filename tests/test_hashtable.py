import pytest

from vitae.hashtable import HASH_SEED, MAX_NAME, HashTable, alt_hash, fnv_hash


def test_fnv_hash_of_empty_key_is_seed():
    assert fnv_hash("", 1000) == HASH_SEED


def test_alt_hash_of_empty_key_is_zero():
    assert alt_hash("", 17) == 0


@pytest.mark.parametrize("key", ["a", "hello", "print", "x" * 50, "ünï"])
@pytest.mark.parametrize("size", [1, 7, 20, 100])
def test_hashes_are_deterministic_and_in_range(key, size):
    assert 0 <= fnv_hash(key, size) < size
    assert fnv_hash(key, size) == fnv_hash(key, size)
    assert 0 <= alt_hash(key, size) < size
    assert alt_hash(key, size) == alt_hash(key, size)


def test_hash_rejects_bad_size():
    with pytest.raises(ValueError):
        fnv_hash("a", 0)
    with pytest.raises(ValueError):
        alt_hash("a", -1)
    with pytest.raises(ValueError):
        HashTable(0)


def test_insert_get_round_trip():
    table = HashTable(10)
    table.insert("halt", 1)
    table.insert("pushc", 3)
    assert table.get("halt") == 1
    assert table.get("pushc") == 3
    assert "halt" in table
    assert "missing" not in table
    assert table.get("missing", "fallback") == "fallback"


def test_insert_overwrites_existing():
    table = HashTable(4)
    table.insert("k", "old")
    table.insert("k", "new")
    assert table.get("k") == "new"
    assert list(table.items()) == [("k", "new")]


def test_delete_returns_value_and_removes():
    table = HashTable(4)
    table.insert("a", 10)
    assert table.delete("a") == 10
    assert "a" not in table
    with pytest.raises(KeyError):
        table.delete("a")


def test_single_bucket_chains_newest_first():
    table = HashTable(1)
    for name, value in [("a", 1), ("b", 2), ("c", 3)]:
        table.insert(name, value)
    assert list(table.items()) == [("c", 3), ("b", 2), ("a", 1)]
    table.delete("b")
    assert list(table.items()) == [("c", 3), ("a", 1)]


def test_many_keys_all_retrievable():
    table = HashTable(7)
    names = [f"key{i}" for i in range(50)]
    for i, name in enumerate(names):
        table.insert(name, i)
    assert all(table.get(name) == i for i, name in enumerate(names))
    assert sorted(name for name, _ in table.items()) == sorted(names)


def test_long_names_are_truncated_on_insert():
    table = HashTable(1)
    long_name = "n" * (MAX_NAME + 8)
    table.insert(long_name, 1)
    [(stored, value)] = list(table.items())
    assert stored == long_name[: MAX_NAME - 1]
    assert value == 1
    assert long_name not in table


def test_dump_marks_empty_buckets():
    table = HashTable(1)
    assert "0\t---" in table.dump()
    table.insert("a", 1)
    assert '0\t ["a"] -> 1' in table.dump()