"""Command line entry point: run an assembly program or the table demonstration."""

from __future__ import annotations

import argparse
import sys
from array import array
from pathlib import Path
from typing import Optional, Sequence, TextIO

from vitae.assembler import AssemblyError, assemble
from vitae.builtins import install
from vitae.elements import Element, describe, render
from vitae.opcodes import ValueType
from vitae.table import Table
from vitae.text import VString
from vitae.vm import VM, VMError

DEFAULT_PROGRAM = "./test.rpn"
_SHOWN_SLOTS = 10


def read_file(path: str | Path) -> str:
    """Return the whole text of the file at path."""
    return Path(path).read_text()


def read_integers(path: str | Path) -> list[int]:
    """Read the file at path as native machine integers; trailing partial bytes are ignored."""
    data = Path(path).read_bytes()
    numbers = array("i")
    usable = len(data) - len(data) % numbers.itemsize
    numbers.frombytes(data[:usable])
    return numbers.tolist()


def write_file(path: str | Path, data: bytes) -> int:
    """Write data to the file at path, replacing it; return the number of bytes written."""
    with open(path, "wb") as handle:
        written = handle.write(data)
    if written != len(data):
        raise OSError(f"short write to {path}: {written} of {len(data)} bytes")
    return written


def demo_table(out: Optional[TextIO] = None) -> Table:
    """Fill a small table with mixed keys, list its array and hash parts, and return it."""
    out = sys.stdout if out is None else out
    vm = VM(out=out)
    collector = vm.collector

    def integer(n: int) -> Element:
        return collector.track(Element(ValueType.INUMBER, n))  # type: ignore[return-value]

    def string(text: str) -> Element:
        return collector.track(Element(ValueType.STRING, VString(text)))  # type: ignore[return-value]

    table = Table(10, 10, collector)
    table.insert(integer(1294967295), integer(4))
    table.insert(integer(3), integer(10))
    table.insert(integer(-10), integer(10))
    table.insert(string("hello"), integer(22))
    table.insert(string("world"), string("hello"))

    out.write("\n\n")
    for n in range(5, 10):
        table.push(integer(n))

    for index in range(table.array.size):
        found = table.get(Element(ValueType.INUMBER, index))
        if found is None:
            out.write(f"[{index}] = NULL\n")
        else:
            out.write(f"[{index}] = {render(found)}\n")

    out.write(table.dump())
    for obj in collector:
        out.write(f"gb type {obj.gc_kind.value}\n")
    return table


def _run_program(path: str, out: TextIO) -> None:
    vm = VM(out=out)
    install(vm)
    code = assemble(read_file(path), vm)
    vm.run(code)

    def resolve(slot: int) -> Element:
        if isinstance(slot, int) and 0 <= slot < vm.stack_size:
            return vm.stack[slot]
        return Element()

    for index in range(min(_SHOWN_SLOTS, vm.stack_size)):
        out.write(f"[{index}] {describe(vm.stack[index], resolve)}\n")

    out.write("############################ MARK & SWEEP TEST ###########################\n")
    vm.mark()
    total = len(vm.collector)
    freed = vm.collect()
    out.write(f"done with sweep, total list size {total} and {freed} total elements freed\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Assemble and run a program file, or show the table demonstration."""
    parser = argparse.ArgumentParser(prog="vitae", description="Run a vitae assembly program.")
    parser.add_argument("program", nargs="?", default=DEFAULT_PROGRAM, help="assembly file to run")
    parser.add_argument("--demo", action="store_true", help="run the table demonstration instead")
    args = parser.parse_args(argv)

    out = sys.stdout
    if args.demo:
        demo_table(out)
        return 0
    try:
        _run_program(args.program, out)
    except OSError as exc:
        print(f"error: cannot read {args.program}: {exc}", file=sys.stderr)
        return 2
    except (AssemblyError, VMError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0