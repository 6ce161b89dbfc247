"""Stack-based bytecode interpreter with call frames and a mark-and-sweep collector."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO

from vitae import elements
from vitae.elements import Element
from vitae.gc import Collector
from vitae.hashtable import HashTable
from vitae.opcodes import Opcode, ValueType
from vitae.table import Table
from vitae.text import VString

DEFAULT_STACK_SIZE = 256
_FRAME_WORDS = 3

ExternFunc = Callable[["VM", int], Any]
_Handler = Callable[[Sequence[Any], int], int]


class VMError(RuntimeError):
    """Raised when a program asks the machine for something it cannot do."""


@dataclass(frozen=True)
class _Frame:
    return_pc: int
    dp: int
    sp: int


def _copy(element: Element) -> Element:
    return Element(ValueType(element.type), element.value)


class VM:
    """A value stack, a frame stack, registered external functions and a collector.

    Code is a sequence of words: opcodes and their operands. Operands are
    integers, floats, string constants or external functions.
    """

    def __init__(self, stack_size: int = DEFAULT_STACK_SIZE, out: Optional[TextIO] = None) -> None:
        if stack_size <= 0:
            raise ValueError("stack size must be positive")
        self.stack_size = stack_size
        self.stack: list[Element] = [Element() for _ in range(stack_size)]
        self.sp = 0
        self.dp = 0
        self.frames: list[_Frame] = []
        self.collector = Collector()
        self.global_table = Table(100, 100, self.collector)
        self.externs = HashTable(10)
        self.out: TextIO = sys.stdout if out is None else out
        self._handlers: dict[Opcode, _Handler] = {
            Opcode.NOP: self._nop,
            Opcode.PUSHC: self._pushc,
            Opcode.ADD: self._binary(lambda a, b: elements.add(a, b, self.collector)),
            Opcode.SUB: self._binary(elements.sub),
            Opcode.MUL: self._binary(elements.mul),
            Opcode.DIV: self._binary(elements.div),
            Opcode.MOD: self._binary(elements.mod),
            Opcode.EQL: self._binary(elements.equal),
            Opcode.GRT: self._binary(elements.greater),
            Opcode.LSS: self._binary(elements.less),
            Opcode.JMP: self._jmp,
            Opcode.JMPR: self._jmpr,
            Opcode.JMPT: self._jmpt,
            Opcode.JMPF: self._jmpf,
            Opcode.ALLOC: self._alloc,
            Opcode.DSTOREC: self._dstorec,
            Opcode.DLOADC: self._dloadc,
            Opcode.DPUSHC: self._dpushc,
            Opcode.SET: self._set,
            Opcode.GET: self._get,
            Opcode.TABLE_SET: self._table_set,
            Opcode.TABLE_ACCESS: self._table_access,
            Opcode.CALL: self._call,
            Opcode.CALL_EXTERN: self._call_extern,
            Opcode.RET: self._ret,
            Opcode.RETV: self._retv,
        }

    # -- public interface -------------------------------------------------

    def register(self, name: str, func: ExternFunc) -> None:
        """Make func callable from code under name; it receives the machine and argc."""
        if not callable(func):
            raise TypeError(f"external function {name!r} is not callable")
        self.externs.insert(name, func)

    def push(self, element: Element) -> None:
        """Push a copy of element onto the value stack."""
        if self.sp >= self.stack_size:
            raise VMError("stack overflow")
        self.stack[self.sp] = _copy(element)
        self.sp += 1

    def pop(self) -> Element:
        """Remove and return the top element."""
        if self.sp <= 0:
            raise VMError("stack underflow")
        self.sp -= 1
        return self.stack[self.sp]

    def arg(self, argc: int, index: int) -> Element:
        """Return argument index of the argc topmost elements, counting from the deepest."""
        if argc > self.sp:
            raise VMError("stack underflow")
        if not 0 <= index < argc:
            raise VMError(f"argument {index} out of range for {argc} arguments")
        return self.stack[self.sp - argc + index]

    def drop(self, argc: int) -> None:
        """Discard the argc topmost elements."""
        if argc < 0 or argc > self.sp:
            raise VMError("stack underflow")
        self.sp -= argc

    def mark(self) -> None:
        """Mark every object reachable from the global table and the live stack."""
        self._mark_table(self.global_table)
        for element in self.stack[: self.sp]:
            self._mark_element(element)

    def collect(self) -> int:
        """Sweep the collector; return the number of objects dropped."""
        return self.collector.sweep()

    def run(self, code: Sequence[Any]) -> None:
        """Execute code from its first word until a halt instruction."""
        words = list(code)
        pc = 0
        while True:
            op = self._decode(self._word(words, pc), pc)
            if op is Opcode.HALT:
                return
            handler = self._handlers.get(op)
            if handler is None:
                raise VMError(f"unsupported instruction {op.name.lower()} at {pc}")
            pc = handler(words, pc)
            self.mark()
            self.collect()

    # -- marking ----------------------------------------------------------

    def _mark_element(self, element: Element) -> None:
        element.marked = True
        value = element.value
        if element.type == ValueType.STRING and isinstance(value, VString):
            value.marked = True
        elif element.type == ValueType.TABLE and isinstance(value, Table) and not value.marked:
            self._mark_table(value)

    def _mark_table(self, table: Table) -> None:
        table.marked = True
        for child in table.children():
            self._mark_element(child)

    # -- decoding helpers -------------------------------------------------

    @staticmethod
    def _word(words: Sequence[Any], index: int) -> Any:
        if not 0 <= index < len(words):
            raise VMError(f"program counter {index} outside the code")
        return words[index]

    @staticmethod
    def _decode(word: Any, pc: int) -> Opcode:
        if isinstance(word, int) and not isinstance(word, bool):
            try:
                return Opcode(word)
            except ValueError:
                pass
        raise VMError(f"invalid opcode {word!r} at {pc}")

    def _int_operand(self, words: Sequence[Any], index: int) -> int:
        word = self._word(words, index)
        if isinstance(word, bool) or not isinstance(word, int):
            raise VMError(f"integer operand expected at {index}, got {word!r}")
        return int(word)

    def _slot(self, index: int) -> int:
        if not 0 <= index < self.stack_size:
            raise VMError(f"stack slot {index} out of range")
        return index

    def _deref(self, pointer: Element) -> int:
        if pointer.type != ValueType.POINTER:
            raise VMError(f"pointer expected, got {ValueType(pointer.type).name}")
        return self._slot(pointer.value)

    # -- instructions -----------------------------------------------------

    def _nop(self, words: Sequence[Any], pc: int) -> int:
        return pc + 1

    def _pushc(self, words: Sequence[Any], pc: int) -> int:
        raw_tag = self._int_operand(words, pc + 1)
        try:
            tag = ValueType(raw_tag)
        except ValueError:
            raise VMError(f"unknown value type {raw_tag} at {pc + 1}") from None
        value = self._word(words, pc + 2)
        if tag == ValueType.NUMBER:
            if not isinstance(value, (int, float)):
                raise VMError(f"number operand expected at {pc + 2}")
            value = float(value)
        elif tag == ValueType.INUMBER:
            if not isinstance(value, (int, float)):
                raise VMError(f"integer operand expected at {pc + 2}")
            value = int(value)
        elif tag == ValueType.STRING and not isinstance(value, VString):
            raise VMError(f"string constant expected at {pc + 2}")
        self.push(Element(tag, value))
        return pc + 3

    def _binary(self, op: Callable[[Element, Element], Element]) -> _Handler:
        def step(words: Sequence[Any], pc: int) -> int:
            right = self.pop()
            left = self.pop()
            try:
                result = op(left, right)
            except TypeError as exc:
                raise VMError(str(exc)) from exc
            self.push(result)
            return pc + 1

        return step

    def _jmp(self, words: Sequence[Any], pc: int) -> int:
        return self._int_operand(words, pc + 1)

    def _jmpr(self, words: Sequence[Any], pc: int) -> int:
        return pc + self._int_operand(words, pc + 1)

    def _jmpt(self, words: Sequence[Any], pc: int) -> int:
        target = self._int_operand(words, pc + 1)
        return target if self.pop().value else pc + 2

    def _jmpf(self, words: Sequence[Any], pc: int) -> int:
        target = self._int_operand(words, pc + 1)
        return pc + 2 if self.pop().value else target

    def _alloc(self, words: Sequence[Any], pc: int) -> int:
        count = self._int_operand(words, pc + 1)
        new_sp = self.sp + count
        if new_sp > self.stack_size:
            raise VMError("stack overflow")
        if new_sp < 0:
            raise VMError("stack underflow")
        self.sp = new_sp
        return pc + 2

    def _dstorec(self, words: Sequence[Any], pc: int) -> int:
        index = self._slot(self.dp + self._int_operand(words, pc + 1))
        self.stack[index] = _copy(self.pop())
        return pc + 2

    def _dloadc(self, words: Sequence[Any], pc: int) -> int:
        index = self._slot(self.dp + self._int_operand(words, pc + 1))
        self.push(self.stack[index])
        return pc + 2

    def _dpushc(self, words: Sequence[Any], pc: int) -> int:
        offset = self._int_operand(words, pc + 1)
        self.push(Element(ValueType.POINTER, self.dp + offset))
        return pc + 2

    def _set(self, words: Sequence[Any], pc: int) -> int:
        pointer = self.pop()
        value = self.pop()
        self.stack[self._deref(pointer)] = _copy(value)
        return pc + 1

    def _get(self, words: Sequence[Any], pc: int) -> int:
        index = self._deref(self.pop())
        self.push(self.stack[index])
        return pc + 1

    def _table_set(self, words: Sequence[Any], pc: int) -> int:
        key = self.pop()
        target = self.pop()
        if target.type == ValueType.STRING:
            if (
                key.type != ValueType.INUMBER
                or self.sp < 1
                or self.stack[self.sp - 1].type != ValueType.INUMBER
            ):
                raise VMError("integer index and value expected when setting a string character")
            value = self.pop()
            if not isinstance(target.value, VString):
                raise VMError("cannot set a character of a nil string")
            try:
                target.value.set_char(key.value, value.value)
            except (IndexError, ValueError) as exc:
                raise VMError(str(exc)) from exc
        elif target.type == ValueType.TABLE:
            value = self.pop()
            try:
                target.value.insert(key, value)
            except TypeError as exc:
                raise VMError(str(exc)) from exc
        else:
            raise VMError(f"table or string expected, got {ValueType(target.type).name}")
        return pc + 1

    def _table_access(self, words: Sequence[Any], pc: int) -> int:
        key = self.pop()
        target = self.pop()
        found: Optional[Element]
        if target.type == ValueType.TABLE:
            try:
                found = target.value.get(key)
            except TypeError as exc:
                raise VMError(str(exc)) from exc
        elif target.type == ValueType.STRING:
            if key.type != ValueType.INUMBER:
                raise VMError("integer index expected when reading a string")
            if not isinstance(target.value, VString):
                raise VMError("cannot index a nil string")
            found = Element(ValueType.INUMBER, ord(target.value.char_at(key.value)))
        else:
            raise VMError(f"table or string expected, got {ValueType(target.type).name}")
        self.push(found if found is not None else Element())
        return pc + 1

    def _call(self, words: Sequence[Any], pc: int) -> int:
        target = self._int_operand(words, pc + 1)
        argc = self._int_operand(words, pc + 2)
        if (len(self.frames) + 1) * _FRAME_WORDS > self.stack_size:
            raise VMError("call stack overflow")
        if not 0 <= argc <= self.sp:
            raise VMError("stack underflow")
        self.frames.append(_Frame(pc + 3, self.dp, self.sp - argc))
        self.dp = self.sp
        return target

    def _call_extern(self, words: Sequence[Any], pc: int) -> int:
        func = self._word(words, pc + 1)
        if not callable(func):
            raise VMError(f"external function expected at {pc + 1}")
        argc = self._int_operand(words, pc + 2)
        func(self, argc)
        return pc + 3

    def _leave(self) -> _Frame:
        if not self.frames:
            raise VMError("return outside of a function")
        frame = self.frames.pop()
        self.dp = frame.dp
        return frame

    def _ret(self, words: Sequence[Any], pc: int) -> int:
        frame = self._leave()
        self.sp = frame.sp
        return frame.return_pc

    def _retv(self, words: Sequence[Any], pc: int) -> int:
        frame = self._leave()
        self.sp = frame.sp + 1
        return frame.return_pc