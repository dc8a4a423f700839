"""Static type checker for the PLC language.

The analyzer walks a parsed `Source` once: globals first, then
functions, then a check that `main/0` exists and returns Integer. Every
expression node gets its `type` set and every name reference gets its
resolved binding. The first violated rule raises AnalysisError.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from .ast import (
    Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, Case, While, Return, Expression, Literal,
    Group, Binary, Access, Call, ListLiteral,
)
from .environment import Environment, Function as FunctionBinding
from .errors import AnalysisError
from .types import (
    Type, ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING,
    CharVal, NilVal, INT_MIN, INT_MAX, is_assignable, resolve_type,
)


def require_assignable(target: Type, source: Type) -> None:
    """Fail unless a value of type `source` may be stored in `target`.

    Succeeds when the types are equal, when `target` is Any, or when
    `target` is Comparable and `source` is Integer, Decimal, Character or
    String.
    """
    if not is_assignable(target, source):
        raise AnalysisError(f"cannot assign {source!r} to {target!r}")


@dataclass
class FunctionContext:
    """Return-type state for the function whose body is being walked."""
    declared: Optional[Type]
    inferred: Optional[Type] = None


class Analyzer:
    """Type checks a Source AST in place."""

    def __init__(self, environment: Optional[Environment] = None):
        self.environment = environment or Environment(error=AnalysisError)
        self.environment.define_function(FunctionBinding('print', [ANY], NIL))

    def analyze(self, source: Source) -> Source:
        for global_ in source.globals:
            self.analyze_global(global_)
        for function in source.functions:
            self.analyze_function(function)
        main = self.environment.lookup_function('main', 0)
        if main.return_type != INTEGER:
            raise AnalysisError(f"main/0 must return Integer, not {main.return_type!r}")
        return source

    def resolve(self, type_name: str) -> Type:
        try:
            return resolve_type(type_name)
        except KeyError:
            raise AnalysisError(f"unknown type {type_name}") from None

    def binding_type(self, name: str, type_name: Optional[str], value: Optional[Expression]) -> Type:
        """Type of a new variable from its annotation and/or initializer."""
        if type_name is None:
            if value is None:
                raise AnalysisError(f"type of {name} cannot be determined without a type or value")
            self.analyze_expression(value)
            return value.type
        declared = self.resolve(type_name)
        if value is not None:
            if isinstance(value, ListLiteral) and declared.is_list:
                value.type = declared
            self.analyze_expression(value)
            require_assignable(declared, value.type)
        return declared

    def analyze_global(self, node: Global) -> None:
        if not node.mutable and node.value is None:
            raise AnalysisError(f"immutable global {node.name} requires a value")
        type_ = self.binding_type(node.name, node.type_name, node.value)
        node.variable = self.environment.define_variable(node.name, type_, node.mutable)

    def analyze_function(self, node: Function) -> None:
        parameter_types = [self.resolve(t) if t is not None else ANY for t in node.parameter_type_names]
        declared = self.resolve(node.return_type_name) if node.return_type_name is not None else None
        binding = FunctionBinding(node.name, parameter_types, declared)
        node.function = self.environment.define_function(binding)
        context = FunctionContext(declared)
        with self.environment.scope():
            for name, type_ in zip(node.parameters, parameter_types):
                self.environment.define_variable(name, type_, True)
            self.analyze_block(node.body, context)
        if declared is None:
            binding.return_type = context.inferred if context.inferred is not None else NIL

    # Statements

    def analyze_block(self, statements: List[Statement], context: FunctionContext) -> None:
        for statement in statements:
            self.analyze_statement(statement, context)

    def analyze_scoped_block(self, statements: List[Statement], context: FunctionContext) -> None:
        with self.environment.scope():
            self.analyze_block(statements, context)

    def analyze_statement(self, node: Statement, context: FunctionContext) -> None:
        if isinstance(node, ExpressionStmt):
            if not isinstance(node.expression, Call):
                raise AnalysisError("expression statements must be function calls")
            self.analyze_expression(node.expression)
        elif isinstance(node, Declaration):
            type_ = self.binding_type(node.name, node.type_name, node.value)
            node.variable = self.environment.define_variable(node.name, type_, True)
        elif isinstance(node, Assignment):
            if not isinstance(node.receiver, Access):
                raise AnalysisError("assignment receiver must be a variable or list element")
            self.analyze_expression(node.receiver)
            if isinstance(node.value, ListLiteral) and node.receiver.type.is_list:
                node.value.type = node.receiver.type
            self.analyze_expression(node.value)
            require_assignable(node.receiver.type, node.value.type)
        elif isinstance(node, If):
            self.analyze_expression(node.condition)
            if node.condition.type != BOOLEAN:
                raise AnalysisError(f"IF condition must be Boolean, not {node.condition.type!r}")
            if not node.then_block:
                raise AnalysisError("IF statement must have a non-empty then block")
            self.analyze_scoped_block(node.then_block, context)
            self.analyze_scoped_block(node.else_block, context)
        elif isinstance(node, Switch):
            self.analyze_switch(node, context)
        elif isinstance(node, Case):
            self.analyze_scoped_block(node.body, context)
        elif isinstance(node, While):
            self.analyze_expression(node.condition)
            if node.condition.type != BOOLEAN:
                raise AnalysisError(f"WHILE condition must be Boolean, not {node.condition.type!r}")
            self.analyze_scoped_block(node.body, context)
        elif isinstance(node, Return):
            self.analyze_expression(node.value)
            if context.declared is not None:
                require_assignable(context.declared, node.value.type)
            elif context.inferred is None:
                context.inferred = node.value.type
            else:
                require_assignable(context.inferred, node.value.type)
        else:
            raise AnalysisError(f"unexpected statement {type(node).__name__}")

    def analyze_switch(self, node: Switch, context: FunctionContext) -> None:
        self.analyze_expression(node.condition)
        if not node.cases:
            raise AnalysisError("SWITCH requires a DEFAULT case")
        last = len(node.cases) - 1
        for i, case in enumerate(node.cases):
            if case.value is not None:
                if i == last:
                    raise AnalysisError("the last case of a SWITCH must be a DEFAULT without a value")
                self.analyze_expression(case.value)
                if case.value.type != node.condition.type:
                    raise AnalysisError(
                        f"CASE value of type {case.value.type!r} does not match "
                        f"SWITCH condition of type {node.condition.type!r}")
            elif i != last:
                raise AnalysisError("DEFAULT must be the last case of a SWITCH")
            self.analyze_statement(case, context)

    # Expressions

    def analyze_expression(self, node: Expression) -> None:
        if isinstance(node, Literal):
            node.type = self.literal_type(node.value)
        elif isinstance(node, Group):
            if not isinstance(node.expression, Binary):
                raise AnalysisError("only binary expressions may be grouped")
            self.analyze_expression(node.expression)
            node.type = node.expression.type
        elif isinstance(node, Binary):
            self.analyze_expression(node.left)
            self.analyze_expression(node.right)
            node.type = self.binary_type(node.operator, node.left.type, node.right.type)
        elif isinstance(node, Access):
            self.analyze_access(node)
        elif isinstance(node, Call):
            self.analyze_call(node)
        elif isinstance(node, ListLiteral):
            self.analyze_list(node)
        else:
            raise AnalysisError(f"unexpected expression {type(node).__name__}")

    def literal_type(self, value) -> Type:
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, int):
            if not INT_MIN <= value <= INT_MAX:
                raise AnalysisError(f"integer literal {value} is too large")
            return INTEGER
        if isinstance(value, Decimal):
            if float(value) in (float('inf'), float('-inf')):
                raise AnalysisError(f"decimal literal {value} is too large")
            return DECIMAL
        if isinstance(value, CharVal):
            return CHARACTER
        if isinstance(value, str):
            return STRING
        if isinstance(value, NilVal):
            return NIL
        raise AnalysisError(f"unsupported literal {value!r}")

    def binary_type(self, operator: str, left: Type, right: Type) -> Type:
        if operator in ('&&', '||'):
            if left != BOOLEAN or right != BOOLEAN:
                raise AnalysisError(f"{operator} requires Boolean operands, not {left!r} and {right!r}")
            return BOOLEAN
        if operator in ('<', '>', '==', '!='):
            require_assignable(COMPARABLE, left)
            require_assignable(COMPARABLE, right)
            if left != right:
                raise AnalysisError(f"cannot compare {left!r} with {right!r}")
            return BOOLEAN
        if operator == '+' and (left == STRING or right == STRING):
            return STRING
        if operator in ('+', '-', '*', '/'):
            if left == right and left in (INTEGER, DECIMAL):
                return left
            raise AnalysisError(f"{operator} requires two Integer or two Decimal operands, not {left!r} and {right!r}")
        if operator == '^':
            if left in (INTEGER, DECIMAL) and right == INTEGER:
                return left
            raise AnalysisError("^ requires an Integer or Decimal base and an Integer exponent")
        raise AnalysisError(f"unknown operator {operator}")

    def analyze_access(self, node: Access) -> None:
        node.variable = self.environment.lookup_variable(node.name)
        if node.offset is None:
            node.type = node.variable.type
            return
        self.analyze_expression(node.offset)
        if node.offset.type != INTEGER:
            raise AnalysisError(f"list offset must be Integer, not {node.offset.type!r}")
        if not node.variable.type.is_list:
            raise AnalysisError(f"{node.name} is not a list")
        node.type = node.variable.type.element

    def analyze_call(self, node: Call) -> None:
        node.function = self.environment.lookup_function(node.name, len(node.arguments))
        for argument, parameter_type in zip(node.arguments, node.function.parameter_types):
            self.analyze_expression(argument)
            require_assignable(parameter_type, argument.type)
        if node.function.return_type is None:
            raise AnalysisError(f"return type of {node.name}/{len(node.arguments)} cannot be inferred before its first RETURN")
        node.type = node.function.return_type

    def analyze_list(self, node: ListLiteral) -> None:
        if node.type is not None:
            element = node.type.element
            for value in node.elements:
                self.analyze_expression(value)
                require_assignable(element, value.type)
            return
        if not node.elements:
            raise AnalysisError("cannot infer the element type of an empty list")
        first, *rest = node.elements
        self.analyze_expression(first)
        for value in rest:
            self.analyze_expression(value)
            require_assignable(first.type, value.type)
        node.type = Type.list_of(first.type)


def analyze(source: Source) -> Analyzer:
    """Analyze a Source AST and return the analyzer holding its scope."""
    analyzer = Analyzer()
    analyzer.analyze(source)
    return analyzer
