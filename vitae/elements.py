"""Tagged values of the virtual machine and the operators defined on them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from vitae.gc import Collector, GcKind, GcObject
from vitae.opcodes import ValueType
from vitae.text import VString

_INT_BITS = 64
_INT_MOD = 1 << _INT_BITS
_INT_MIN = -(1 << (_INT_BITS - 1))

_NUMERIC = (ValueType.INUMBER, ValueType.NUMBER)


@dataclass
class Element(GcObject):
    """A value tagged with its type: a float, a 64-bit integer, a string, a table, ..."""

    type: ValueType = ValueType.NIL
    value: Any = None

    gc_kind = GcKind.ELEMENT


def _wrap(n: int) -> int:
    """Reduce n to a signed 64-bit integer."""
    return (n - _INT_MIN) % _INT_MOD + _INT_MIN


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _truncating_mod(a: int, b: int) -> int:
    return a - b * _truncating_div(a, b)


def _fmod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _as_float(element: Element) -> float:
    return float(element.value)


def _integer(n: int) -> Element:
    return Element(ValueType.INUMBER, _wrap(n))


def _number(x: float) -> Element:
    return Element(ValueType.NUMBER, float(x))


def _flag(condition: bool) -> Element:
    return Element(ValueType.INUMBER, 1 if condition else 0)


def format_number(value: float) -> str:
    """Format a float the way the machine turns it into text (shortest general form)."""
    return "%g" % value


def num_digits(n: int) -> int:
    """Number of characters needed to write n in decimal, sign included."""
    return len(str(abs(n))) + (1 if n < 0 else 0)


def _as_text(element: Element) -> Optional[str]:
    if element.type == ValueType.STRING:
        if element.value is None:
            raise TypeError("cannot concatenate a nil string")
        return str(element.value)
    if element.type == ValueType.INUMBER:
        return str(element.value)
    if element.type == ValueType.NUMBER:
        return format_number(element.value)
    return None


def add(a: Element, b: Element, collector: Optional[Collector] = None) -> Element:
    """Add two numbers, or concatenate when a string is involved.

    A numeric operand joined with a string is written out as text first.
    New strings are tracked by collector when one is given. Operand pairs
    the machine has no rule for give a nil element.
    """
    if a.type in _NUMERIC and b.type in _NUMERIC:
        if a.type == ValueType.INUMBER and b.type == ValueType.INUMBER:
            return _integer(a.value + b.value)
        return _number(_as_float(a) + _as_float(b))

    if a.type == ValueType.STRING or (a.type in _NUMERIC and b.type == ValueType.STRING):
        left = _as_text(a)
        right = _as_text(b)
        if right is None:
            raise TypeError(f"cannot add {ValueType(b.type).name} to a string")
        joined = VString(left + right)
        if collector is not None:
            collector.track(joined)
        return Element(ValueType.STRING, joined)

    return Element()


def _arith(a: Element, b: Element, op: Callable[[Any, Any], Any]) -> Element:
    if a.type not in _NUMERIC or b.type not in _NUMERIC:
        return Element()
    if a.type == ValueType.INUMBER and b.type == ValueType.INUMBER:
        return _integer(op(a.value, b.value))
    return _number(op(_as_float(a), _as_float(b)))


def sub(a: Element, b: Element) -> Element:
    """Subtract b from a; nil unless both are numeric."""
    return _arith(a, b, lambda x, y: x - y)


def mul(a: Element, b: Element) -> Element:
    """Multiply a by b; nil unless both are numeric."""
    return _arith(a, b, lambda x, y: x * y)


def div(a: Element, b: Element) -> Element:
    """Divide a by b, truncating for integers; division by zero gives zero."""
    if a.type not in _NUMERIC or b.type not in _NUMERIC:
        return Element()
    if a.type == ValueType.INUMBER and b.type == ValueType.INUMBER:
        return _integer(_truncating_div(a.value, b.value) if b.value != 0 else 0)
    divisor = _as_float(b)
    return _number(_as_float(a) / divisor if divisor != 0.0 else 0.0)


def mod(a: Element, b: Element) -> Element:
    """Remainder of a by b, signed like a; a zero divisor gives zero."""
    if a.type not in _NUMERIC or b.type not in _NUMERIC:
        return Element()
    if a.type == ValueType.INUMBER and b.type == ValueType.INUMBER:
        return _integer(_truncating_mod(a.value, b.value) if b.value != 0 else 0)
    divisor = _as_float(b)
    return _number(_fmod(_as_float(a), divisor) if divisor != 0.0 else 0.0)


def _same_payload(x: Any, y: Any) -> bool:
    if isinstance(x, int) and isinstance(y, int):
        return x == y
    return x is y


def equal(a: Element, b: Element) -> Element:
    """1 when a and b are equal, else 0; tables and other objects compare by identity."""
    if a.type in _NUMERIC:
        if b.type in _NUMERIC:
            return _flag(a.value == b.value)
        return _flag(False)
    if a.type == ValueType.STRING or b.type == ValueType.STRING:
        if a.type != b.type:
            return _flag(False)
        if a.value is None or b.value is None:
            return _flag(a.value is b.value)
        return _flag(str(a.value) == str(b.value))
    return _flag(_same_payload(a.value, b.value))


def less(a: Element, b: Element) -> Element:
    """1 when numeric a is below numeric b, else 0."""
    if a.type in _NUMERIC and b.type in _NUMERIC:
        return _flag(a.value < b.value)
    return _flag(False)


def greater(a: Element, b: Element) -> Element:
    """1 when numeric a is above numeric b, else 0."""
    if a.type in _NUMERIC and b.type in _NUMERIC:
        return _flag(a.value > b.value)
    return _flag(False)


def describe(element: Element, resolve: Optional[Callable[[Any], Element]] = None) -> str:
    """One-line debugging description of element.

    A pointer is followed through resolve, which maps its value to the
    element it points at; without resolve only the pointer is shown.
    """
    kind = element.type
    if kind == ValueType.NUMBER:
        return "number: %f" % element.value
    if kind == ValueType.INUMBER:
        return f"inumber:  {element.value}"
    if kind == ValueType.POINTER:
        text = f"pointer:  {element.value}"
        if resolve is not None:
            text += " value: " + describe(resolve(element.value), resolve)
        return text
    if kind == ValueType.STRING:
        if element.value is None:
            return "STRING NIL"
        return f"STRING '{element.value}'"
    if kind == ValueType.TABLE:
        return f"Table: {id(element.value):#x}"
    if kind == ValueType.NIL:
        return "NIL"
    return f"UNKNOWN: {element.value}"


def render(element: Element) -> str:
    """Text the machine's print routine writes for element."""
    kind = element.type
    if kind == ValueType.NUMBER:
        return "%f" % element.value
    if kind in (ValueType.INUMBER, ValueType.POINTER):
        return str(element.value)
    if kind == ValueType.STRING:
        return "NIL\n" if element.value is None else str(element.value)
    if kind == ValueType.TABLE:
        return f"{id(element.value):#x}"
    if kind == ValueType.NIL:
        return "NIL\n"
    return str(element.value)