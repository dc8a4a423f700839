"""Scopes, variables and functions shared by the analyzer and interpreter.

Scopes live in an arena addressed by index. Because every scope is
closed by the block that opened it, the arena is also a stack: the most
recently opened scope is always the active one, and closing a scope pops
it. Each scope records the index of its parent, which is not necessarily
the scope below it on the stack (a function body's parent is the scope
the function was defined in, not the caller's).
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type as ErrorClass

from .errors import PlcError
from .types import Type, NIL_VALUE


@dataclass
class Variable:
    name: str
    type: Type
    mutable: bool
    value: Any = NIL_VALUE

    def __repr__(self) -> str:
        return f"<variable {self.name}: {self.type!r}>"


@dataclass
class Function:
    """A function binding, resolved by name and arity.

    `return_type` is None while the analyzer is still inferring it.
    `implementation` is set by the interpreter (or for natives) and takes
    the evaluated argument list.
    """
    name: str
    parameter_types: List[Type]
    return_type: Optional[Type]
    implementation: Optional[Callable[[List[Any]], Any]] = None

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def invoke(self, args: List[Any]) -> Any:
        if self.implementation is None:
            raise PlcError(f"function {self.name}/{self.arity} has no implementation")
        return self.implementation(args)

    def __repr__(self) -> str:
        return f"<function {self.name}/{self.arity}>"


@dataclass
class Scope:
    parent: Optional[int]
    variables: Dict[str, Variable] = field(default_factory=dict)
    functions: Dict[Tuple[str, int], Function] = field(default_factory=dict)


class Environment:
    """Arena of scopes plus lookup and definition helpers.

    `error` is the exception class raised for unresolved or duplicate
    names, so the analyzer reports type errors and the interpreter
    runtime errors from the same code.
    """
    ROOT = 0

    def __init__(self, error: ErrorClass[PlcError] = PlcError):
        self.error = error
        self.scopes: List[Scope] = [Scope(parent=None)]

    @property
    def current(self) -> int:
        return len(self.scopes) - 1

    @property
    def root(self) -> Scope:
        return self.scopes[self.ROOT]

    def open(self, parent: Optional[int] = None) -> int:
        self.scopes.append(Scope(parent=self.current if parent is None else parent))
        return self.current

    def close(self, index: int) -> None:
        if index != self.current or index == self.ROOT:
            raise PlcError(f"scope {index} closed out of order")
        self.scopes.pop()

    @contextmanager
    def scope(self, parent: Optional[int] = None) -> Iterator[int]:
        """Open a child scope for the duration of a block.

        The scope is closed on every exit path, including exceptions.
        """
        index = self.open(parent)
        try:
            yield index
        finally:
            self.close(index)

    def _chain(self) -> Iterator[Scope]:
        index: Optional[int] = self.current
        while index is not None:
            scope = self.scopes[index]
            yield scope
            index = scope.parent

    def define_variable(self, name: str, type_: Type, mutable: bool, value: Any = NIL_VALUE) -> Variable:
        scope = self.scopes[self.current]
        if name in scope.variables:
            raise self.error(f"variable {name} is already defined in this scope")
        variable = Variable(name, type_, mutable, value)
        scope.variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        for scope in self._chain():
            if name in scope.variables:
                return scope.variables[name]
        raise self.error(f"undefined variable {name}")

    def define_function(self, function: Function) -> Function:
        scope = self.scopes[self.current]
        key = (function.name, function.arity)
        if key in scope.functions:
            raise self.error(f"function {function.name}/{function.arity} is already defined in this scope")
        scope.functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Function:
        for scope in self._chain():
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
        raise self.error(f"undefined function {name}/{arity}")
