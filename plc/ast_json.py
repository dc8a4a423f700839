"""JSON serialization for PLC ASTs.

This module converts analyzed AST dataclasses into plain Python dict/list
structures suitable for JSON encoding, for inspecting what the parser
built and which types the analyzer resolved.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Source,
    Global,
    Function,
    ExpressionStmt,
    Declaration,
    Assignment,
    If,
    Switch,
    Case,
    While,
    Return,
    Expression,
    Literal,
    Group,
    Binary,
    Access,
    Call,
    ListLiteral,
)
from .types import Type, CharVal, NilVal


def type_to_obj(t: Type) -> Any:
    return None if t is None else repr(t)


def literal_to_obj(value: Any) -> Any:
    if isinstance(value, NilVal):
        return None
    if isinstance(value, CharVal):
        return {"char": value.value}
    if isinstance(value, Decimal):
        return {"decimal": str(value)}
    return value


def expression_to_obj(node: Expression) -> Dict[str, Any]:
    obj = _expression_fields(node)
    obj["resolved_type"] = type_to_obj(node.type)
    return obj


def _expression_fields(node: Expression) -> Dict[str, Any]:
    if isinstance(node, Literal):
        return {"type": "Literal", "value": literal_to_obj(node.value)}
    if isinstance(node, Group):
        return {"type": "Group", "expression": expression_to_obj(node.expression)}
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "operator": node.operator,
            "left": expression_to_obj(node.left),
            "right": expression_to_obj(node.right),
        }
    if isinstance(node, Access):
        return {
            "type": "Access",
            "name": node.name,
            "offset": expression_to_obj(node.offset) if node.offset is not None else None,
        }
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "arguments": [expression_to_obj(a) for a in node.arguments]}
    if isinstance(node, ListLiteral):
        return {"type": "ListLiteral", "elements": [expression_to_obj(e) for e in node.elements]}
    raise TypeError(f"unsupported expression {type(node).__name__}")


def optional_expression(node) -> Any:
    return expression_to_obj(node) if node is not None else None


def ast_to_obj(node: Any) -> Any:
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Expression):
        return expression_to_obj(node)
    if isinstance(node, Source):
        return {
            "type": "Source",
            "globals": ast_to_obj(node.globals),
            "functions": ast_to_obj(node.functions),
        }
    if isinstance(node, Global):
        return {
            "type": "Global",
            "name": node.name,
            "type_name": node.type_name,
            "mutable": node.mutable,
            "value": optional_expression(node.value),
            "resolved_type": type_to_obj(node.variable.type) if node.variable else None,
        }
    if isinstance(node, Function):
        return {
            "type": "Function",
            "name": node.name,
            "parameters": node.parameters,
            "parameter_type_names": node.parameter_type_names,
            "return_type_name": node.return_type_name,
            "body": ast_to_obj(node.body),
            "resolved_return_type": type_to_obj(node.function.return_type) if node.function else None,
        }
    if isinstance(node, ExpressionStmt):
        return {"type": "ExpressionStmt", "expression": expression_to_obj(node.expression)}
    if isinstance(node, Declaration):
        return {
            "type": "Declaration",
            "name": node.name,
            "type_name": node.type_name,
            "value": optional_expression(node.value),
            "resolved_type": type_to_obj(node.variable.type) if node.variable else None,
        }
    if isinstance(node, Assignment):
        return {
            "type": "Assignment",
            "receiver": expression_to_obj(node.receiver),
            "value": expression_to_obj(node.value),
        }
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": expression_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_block": ast_to_obj(node.else_block),
        }
    if isinstance(node, Switch):
        return {
            "type": "Switch",
            "condition": expression_to_obj(node.condition),
            "cases": ast_to_obj(node.cases),
        }
    if isinstance(node, Case):
        return {"type": "Case", "value": optional_expression(node.value), "body": ast_to_obj(node.body)}
    if isinstance(node, While):
        return {"type": "While", "condition": expression_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, Return):
        return {"type": "Return", "value": expression_to_obj(node.value)}
    raise TypeError(f"unsupported node {type(node).__name__}")
