"""Instruction set and value type tags of the virtual machine."""

from __future__ import annotations

from enum import IntEnum


class Opcode(IntEnum):
    """Bytecode instructions, numbered in the order the machine defines them."""

    NOP = 0
    HALT = 1
    POP = 2
    PUSHC = 3
    ADD = 4
    SUB = 5
    MUL = 6
    DIV = 7
    MOD = 8
    GET = 9
    SET = 10
    DSET = 11
    DGET = 12
    DPUSHC = 13
    DSETC = 14
    DGETC = 15
    DSTOREC = 16
    DLOADC = 17
    EQL = 18
    NQL = 19
    GRT = 20
    LSS = 21
    TABLE_ACCESS = 22
    TABLE_ALLOC = 23
    TABLE_SET = 24
    JMP = 25
    JMPR = 26
    JMPF = 27
    JMPT = 28
    ALLOC = 29
    CONCAT = 30
    CALL = 31
    CALL_EXTERN = 32
    RET = 33
    RETV = 34


class ValueType(IntEnum):
    """Type tags carried by every value on the machine's stack."""

    NIL = 0
    STRING = 1
    INUMBER = 2
    NUMBER = 3
    POINTER = 4
    BOOLEAN = 5
    FUNCTION = 6
    TABLE = 7


# Opcodes that have no textual mnemonic in the assembly language.
_UNNAMED = frozenset({Opcode.NOP, Opcode.DSETC, Opcode.DGETC})

_MNEMONICS: dict[str, int] = {
    op.name.lower(): op for op in Opcode if op not in _UNNAMED
}
_MNEMONICS.update(
    {
        "type_inumber": ValueType.INUMBER,
        "type_number": ValueType.NUMBER,
        "type_string": ValueType.STRING,
    }
)


def lookup_mnemonic(name: str) -> int | None:
    """Return the opcode or type tag that an assembly word stands for, or None."""
    return _MNEMONICS.get(name)