import pytest

from vitae.elements import Element
from vitae.gc import Collector
from vitae.opcodes import ValueType
from vitae.table import ARRAY_GROW_AMOUNT, Table, copy_element
from vitae.text import VString


def inum(n):
    return Element(ValueType.INUMBER, n)


def vstr(text):
    return Element(ValueType.STRING, VString(text))


def test_copy_element_duplicates_strings():
    original = vstr("hello")
    copy = copy_element(original)
    original.value.set_char(0, "j")
    assert str(copy.value) == "hello"
    assert copy.type == ValueType.STRING


def test_copy_element_is_tracked():
    collector = Collector()
    copy = copy_element(inum(7), collector)
    assert len(collector) == 1
    assert next(iter(collector)) is copy
    assert copy.value == 7


def test_table_is_tracked_by_collector():
    collector = Collector()
    table = Table(10, 10, collector)
    assert list(collector) == [table]


def test_insert_in_array_stores_copy():
    table = Table(10, 10)
    value = inum(10)
    table.insert(inum(3), value)
    got = table.get(inum(3))
    assert got == value
    assert got is not value
    assert table.array.data[3] is got


def test_missing_key_gives_none():
    table = Table(10, 10)
    assert table.get(inum(4)) is None
    assert table.get(vstr("absent")) is None
    assert table.get(inum(-3)) is None


def test_negative_key_goes_to_hash():
    table = Table(10, 10)
    table.insert(inum(-10), inum(10))
    assert "-10" in table.hashtable
    assert table.get(inum(-10)).value == 10


def test_large_key_goes_to_hash_and_backlog():
    table = Table(10, 10)
    table.insert(inum(1294967295), inum(4))
    assert "1294967295" in table.hashtable
    assert table.backlog == [1294967295]
    assert table.get(inum(1294967295)).value == 4


def test_string_keys_and_overwrite():
    table = Table(10, 10)
    table.insert(vstr("hello"), inum(22))
    table.insert(vstr("world"), vstr("hello"))
    assert table.get(vstr("hello")).value == 22
    assert str(table.get(vstr("world")).value) == "hello"
    table.insert(vstr("hello"), inum(5))
    assert table.get(vstr("hello")).value == 5


def test_near_key_grows_array():
    table = Table(10, 10)
    table.insert(inum(15), inum(1))
    assert table.array.size == 10 + ARRAY_GROW_AMOUNT
    assert table.get(inum(15)).value == 1
    assert table.backlog == []


def test_backlog_moves_into_array_after_growth():
    table = Table(10, 10)
    table.insert(inum(50), inum(9))
    assert table.backlog == [50]
    table.insert(inum(40), inum(1))
    assert table.backlog == [50]
    table.insert(inum(45), inum(2))
    assert table.backlog == []
    assert "50" not in table.hashtable
    assert table.array.data[50].value == 9
    assert table.get(inum(50)).value == 9


def test_float_key_rejected():
    table = Table(10, 10)
    with pytest.raises(TypeError):
        table.get(Element(ValueType.NUMBER, 1.5))
    with pytest.raises(TypeError):
        table.insert(Element(ValueType.NUMBER, 1.5), inum(1))


def test_push_fills_free_slots_around_inserted():
    table = Table(10, 10)
    table.insert(inum(3), inum(10))
    for n in (5, 6, 7, 8, 9):
        table.push(inum(n))
    values = [table.get(inum(i)).value for i in range(6)]
    assert values == [5, 6, 7, 10, 8, 9]
    assert table.get(inum(6)) is None


def test_push_returns_top():
    table = Table(10, 10)
    assert table.push(inum(1)) == 1
    assert table.push(inum(2)) == 2
    assert len(table.array) == 2


def test_push_keeps_table_reference():
    inner = Table(4, 4)
    outer = Table(4, 4)
    element = Element(ValueType.TABLE, inner)
    outer.push(element)
    assert outer.get(inum(0)) is element


def test_push_copies_plain_values():
    table = Table(10, 10)
    element = vstr("abc")
    table.push(element)
    stored = table.get(inum(0))
    assert stored == element
    assert stored is not element


def test_children_cover_both_parts():
    table = Table(10, 10)
    a = table.insert(inum(2), inum(1))
    b = table.insert(vstr("key"), inum(2))
    c = table.insert(inum(-1), inum(3))
    children = list(table.children())
    assert len(children) == 3
    assert all(any(child is x for child in children) for x in (a, b, c))


def test_dump_lists_hash_entries():
    table = Table(10, 10)
    table.insert(vstr("hello"), inum(22))
    text = table.dump()
    assert '["hello"] = inumber:  22' in text
    assert text.startswith("-" * 24)
    assert text.count("\t---") == 9