"""Abstract Syntax Tree (AST) definitions for the PLC language.

The AST classes defined in this module represent the syntactic structure
of parsed PLC programs. The parser builds them, the analyzer annotates
them (every expression gets a `type`, every name reference gets its
resolved binding) and the interpreter and generator walk them.

Annotation fields are excluded from `__init__` and from equality, so two
trees built from the same source compare equal before and after
analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .environment import Function as FunctionBinding, Variable
    from .types import Type


def _annotation():
    return field(default=None, init=False, repr=False, compare=False)


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Expression(Node):
    """Base class for expressions. `type` is filled in by the analyzer."""
    type: Optional['Type'] = _annotation()


@dataclass
class Statement(Node):
    pass


@dataclass
class Global(Node):
    name: str
    type_name: Optional[str]
    mutable: bool
    value: Optional[Expression]
    variable: Optional['Variable'] = _annotation()


@dataclass
class Function(Node):
    name: str
    parameters: List[str]
    parameter_type_names: List[Optional[str]]
    return_type_name: Optional[str]
    body: List[Statement]
    function: Optional['FunctionBinding'] = _annotation()


@dataclass
class Source(Node):
    globals: List[Global]
    functions: List[Function]


# Statements

@dataclass
class ExpressionStmt(Statement):
    expression: Expression


@dataclass
class Declaration(Statement):
    name: str
    type_name: Optional[str]
    value: Optional[Expression]
    variable: Optional['Variable'] = _annotation()


@dataclass
class Assignment(Statement):
    receiver: Expression  # must be an Access
    value: Expression


@dataclass
class If(Statement):
    condition: Expression
    then_block: List[Statement]
    else_block: List[Statement]


@dataclass
class Case(Statement):
    value: Optional[Expression]  # None marks the default case
    body: List[Statement]


@dataclass
class Switch(Statement):
    condition: Expression
    cases: List[Case]


@dataclass
class While(Statement):
    condition: Expression
    body: List[Statement]


@dataclass
class Return(Statement):
    value: Expression


# Expressions

@dataclass
class Literal(Expression):
    value: Any


@dataclass
class Group(Expression):
    expression: Expression


@dataclass
class Binary(Expression):
    operator: str
    left: Expression
    right: Expression


@dataclass
class Access(Expression):
    name: str
    offset: Optional[Expression] = None
    variable: Optional['Variable'] = _annotation()


@dataclass
class Call(Expression):
    name: str
    arguments: List[Expression]
    function: Optional['FunctionBinding'] = _annotation()


@dataclass
class ListLiteral(Expression):
    elements: List[Expression]
