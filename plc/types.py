"""Type definitions and runtime values for the PLC language.

This module defines the static type lattice shared by the analyzer and
the interpreter, the runtime value classes that mirror it, and helpers
for classifying, comparing and printing runtime values.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Tuple


@dataclass(frozen=True)
class Type:
    """Represents a PLC type.

    A type is described by its `kind` (one of 'Any', 'Nil', 'Comparable',
    'Boolean', 'Integer', 'Decimal', 'Character', 'String' or 'List') and,
    for lists, the element type. For example `List<Integer>` becomes
    `Type(kind='List', args=(Type(kind='Integer'),))`.
    """
    kind: str
    args: Tuple['Type', ...] = ()

    def __repr__(self) -> str:
        if not self.args:
            return self.kind
        inner = ", ".join(repr(a) for a in self.args)
        return f"{self.kind}<{inner}>"

    @property
    def is_list(self) -> bool:
        return self.kind == 'List'

    @property
    def element(self) -> 'Type':
        if not self.is_list:
            raise ValueError(f"{self!r} is not a list type")
        return self.args[0]

    @staticmethod
    def list_of(elem: 'Type') -> 'Type':
        return Type('List', (elem,))


ANY = Type('Any')
NIL = Type('Nil')
COMPARABLE = Type('Comparable')
BOOLEAN = Type('Boolean')
INTEGER = Type('Integer')
DECIMAL = Type('Decimal')
CHARACTER = Type('Character')
STRING = Type('String')

BASE_TYPES = {t.kind: t for t in (ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING)}
COMPARABLE_TYPES = (INTEGER, DECIMAL, CHARACTER, STRING)

# Literal integers must fit a signed 32-bit host integer.
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


def resolve_type(name: str) -> Type:
    """Resolve a type name such as `Integer` or `List<String>`.

    Raises KeyError for unknown names; callers turn that into the error
    type of their own stage.
    """
    if name.startswith('List<') and name.endswith('>'):
        return Type.list_of(resolve_type(name[5:-1]))
    if name not in BASE_TYPES:
        raise KeyError(name)
    return BASE_TYPES[name]


def is_assignable(target: Type, source: Type) -> bool:
    if target == source:
        return True
    if target == ANY:
        return True
    if target == COMPARABLE:
        return source in COMPARABLE_TYPES
    return False


@dataclass(frozen=True)
class NilVal:
    """The PLC `NIL` value. All instances compare equal."""

    def __repr__(self) -> str:
        return 'NIL'


NIL_VALUE = NilVal()


@dataclass(frozen=True, order=True)
class CharVal:
    """A single character. Ordering follows code points."""
    value: str

    def __repr__(self) -> str:
        return f"CharVal({self.value!r})"


@dataclass(eq=False)
class ListVal:
    """Represents a PLC list value.

    A list value is a handle: every binding that reads it observes the
    same `items`, so indexed assignment through one binding is visible
    through all of them. Use `values_equal` for structural comparison.
    """
    items: List[Any]

    def __repr__(self) -> str:
        return f"ListVal({self.items!r})"


def type_of(value: Any) -> Type:
    """Return the runtime kind of a PLC value as a Type."""
    # bool is a subclass of int; test it first
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, Decimal):
        return DECIMAL
    if isinstance(value, CharVal):
        return CHARACTER
    if isinstance(value, str):
        return STRING
    if isinstance(value, NilVal):
        return NIL
    if isinstance(value, ListVal):
        return Type.list_of(ANY)
    raise TypeError(f"not a PLC value: {value!r}")


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality: kinds must agree, lists compare element-wise."""
    if type_of(a) != type_of(b):
        return False
    if isinstance(a, ListVal):
        if len(a.items) != len(b.items):
            return False
        return all(values_equal(x, y) for x, y in zip(a.items, b.items))
    if isinstance(a, Decimal):
        # scale is part of a decimal's value: 1.0 != 1.00
        return a == b and a.as_tuple().exponent == b.as_tuple().exponent
    return a == b


def to_string(value: Any) -> str:
    """Convert a PLC value to the text `print` and `+` produce."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, CharVal):
        return value.value
    if isinstance(value, str):
        return value
    if isinstance(value, NilVal):
        return 'nil'
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    return str(value)
