"""External functions that programs running on the machine can call."""

from __future__ import annotations

from vitae.elements import Element, describe, render
from vitae.opcodes import ValueType
from vitae.table import Table
from vitae.vm import VM, VMError


def _require_args(vm: VM, argc: int) -> None:
    if argc > vm.sp:
        raise VMError("stack underflow")


def sum_args(vm: VM, argc: int) -> None:
    """Replace the argc topmost numbers with their integer sum."""
    if argc == 0:
        raise VMError("test expects at least one argument")
    _require_args(vm, argc)
    total = 0
    for _ in range(argc):
        element = vm.pop()
        if element.type not in (ValueType.INUMBER, ValueType.NUMBER):
            raise VMError(f"number expected, got {ValueType(element.type).name}")
        total += int(element.value)
    vm.push(Element(ValueType.INUMBER, total))


def print_args(vm: VM, argc: int) -> None:
    """Write the argc topmost elements, deepest first, and discard them."""
    if argc == 0:
        raise VMError("print expects at least one argument")
    _require_args(vm, argc)
    for index in range(argc):
        vm.out.write(render(vm.arg(argc, index)))
    vm.drop(argc)


def create_table(vm: VM, argc: int) -> None:
    """Build a table from argc/2 key-value pairs on the stack and push it."""
    if argc % 2 != 0:
        raise VMError("create_table expects key/value pairs")
    _require_args(vm, argc)
    table = Table(10, 10, vm.collector)
    for _ in range(argc // 2):
        value = vm.pop()
        key = vm.pop()
        try:
            table.insert(key, value)
        except TypeError as exc:
            raise VMError(str(exc)) from exc
    vm.push(Element(ValueType.TABLE, table))


def print_hash(vm: VM, argc: int) -> None:
    """Write a description and the hash part of the table on top of the stack, then drop it."""
    if argc != 1:
        raise VMError("print_hash expects exactly one argument")
    _require_args(vm, argc)
    element = vm.arg(argc, 0)
    if element.type != ValueType.TABLE:
        raise VMError(f"table expected, got {ValueType(element.type).name}")
    vm.out.write(describe(element) + "\n")
    vm.out.write(element.value.dump())
    vm.drop(argc)


def install(vm: VM) -> None:
    """Register the standard external functions on vm."""
    vm.register("test", sum_args)
    vm.register("print", print_args)
    vm.register("create_table", create_table)
    vm.register("print_hash", print_hash)