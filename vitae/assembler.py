"""Assembler from the comma-separated textual form to machine words."""

from __future__ import annotations

import re
from typing import Any

from vitae.opcodes import lookup_mnemonic
from vitae.text import VString
from vitae.vm import VM

_CONSTANT = re.compile(r'\s*\^(.)([^=]*)="([^"]*)"\s*,?')


class AssemblyError(ValueError):
    """Raised when assembly text cannot be turned into code."""


def _parse_index(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise AssemblyError(f"invalid constant number {text!r}") from None


def _parse_word(token: str, strings: dict[int, VString], externs: list[str], vm: VM) -> Any:
    if not token:
        raise AssemblyError("empty word")
    code = lookup_mnemonic(token)
    if code is not None:
        return int(code)
    if "." in token:
        try:
            return float(token)
        except ValueError:
            raise AssemblyError(f"invalid number {token!r}") from None
    if token.startswith("#"):
        if len(token) < 3:
            raise AssemblyError(f"invalid constant reference {token!r}")
        kind = token[1]
        index = _parse_index(token[2:])
        if kind == "s":
            try:
                return strings[index]
            except KeyError:
                raise AssemblyError(f"undefined string constant {index}") from None
        if not 0 <= index < len(externs):
            raise AssemblyError(f"undefined function constant {index}")
        name = externs[index]
        func = vm.externs.get(name)
        if func is None:
            raise AssemblyError(f"unknown external function {name!r}")
        return func
    try:
        return int(token)
    except ValueError:
        raise AssemblyError(f"unknown word {token!r}") from None


def assemble(source: str, vm: VM) -> list[Any]:
    """Turn assembly text into a list of code words for vm.

    The text may open with constants: ^s<n>="text" defines string n and
    ^f<n>="name" names an external function. Words follow, each ended by a
    comma; #s<n> and #f<n> refer to constants, function constants counted
    in the order they were declared. Text after the last comma is ignored.
    """
    strings: dict[int, VString] = {}
    externs: list[str] = []
    pos = 0
    while True:
        match = _CONSTANT.match(source, pos)
        if match is None:
            break
        kind, number, text = match.groups()
        index = _parse_index(number)
        if kind == "s":
            strings[index] = VString(text)
        else:
            externs.append(text)
        pos = match.end()

    body = source[pos:]
    if body.lstrip().startswith("^"):
        raise AssemblyError("malformed constant definition")

    pieces = body.split(",")
    return [_parse_word(piece.strip(), strings, externs, vm) for piece in pieces[:-1]]