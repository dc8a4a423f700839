"""Java source emitter for analyzed PLC programs.

The generator only formats: it reads the types and bindings the analyzer
attached to the AST and never re-checks them.
"""

from __future__ import annotations

import io
from decimal import Decimal
from typing import List, TextIO

from .ast import (
    Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, Case, While, Return, Expression, Literal,
    Group, Binary, Access, Call, ListLiteral,
)
from .types import Type, CharVal, NilVal

JVM_NAMES = {
    'Any': 'Object',
    'Nil': 'Void',
    'Comparable': 'Comparable',
    'Boolean': 'boolean',
    'Integer': 'int',
    'Decimal': 'double',
    'Character': 'char',
    'String': 'String',
}

NATIVE_NAMES = {
    ('print', 1): 'System.out.println',
}

JAVA_ESCAPES = {
    '\b': '\\b',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\\': '\\\\',
}


def jvm_name(type_: Type) -> str:
    if type_.is_list:
        return jvm_name(type_.element) + '[]'
    return JVM_NAMES[type_.kind]


def escape(text: str, quote: str) -> str:
    return ''.join(JAVA_ESCAPES.get(c, '\\' + c if c == quote else c) for c in text)


class Generator:
    INDENT = '    '

    def __init__(self, writer: TextIO):
        self.writer = writer
        self.indent = 0

    def write(self, *parts: str) -> None:
        for part in parts:
            self.writer.write(part)

    def newline(self, indent: int) -> None:
        self.writer.write('\n' + self.INDENT * indent)

    def generate(self, source: Source) -> None:
        self.write('public class Main {')
        if source.globals:
            self.newline(0)
        self.indent += 1
        for global_ in source.globals:
            self.newline(self.indent)
            self.generate_global(global_)
        self.newline(0)
        self.newline(self.indent)
        self.write('public static void main(String[] args) {')
        self.newline(self.indent + 1)
        self.write('System.exit(new Main().main());')
        self.newline(self.indent)
        self.write('}')
        for function in source.functions:
            self.newline(0)
            self.newline(self.indent)
            self.generate_function(function)
        self.newline(0)
        self.indent -= 1
        self.newline(self.indent)
        self.write('}')

    def generate_global(self, node: Global) -> None:
        if not node.mutable:
            self.write('final ')
        self.write(jvm_name(node.variable.type), ' ', node.name)
        if node.value is not None:
            self.write(' = ')
            self.generate_expression(node.value)
        self.write(';')

    def generate_function(self, node: Function) -> None:
        binding = node.function
        parameters = ', '.join(
            f"{jvm_name(type_)} {name}" for type_, name in zip(binding.parameter_types, node.parameters)
        )
        self.write(f"{jvm_name(binding.return_type)} {node.name}({parameters}) {{")
        self.generate_block(node.body)
        self.write('}')

    def generate_block(self, statements: List[Statement]) -> None:
        """Write indented statements and leave the cursor on a fresh line."""
        if not statements:
            return
        self.indent += 1
        for statement in statements:
            self.newline(self.indent)
            self.generate_statement(statement)
        self.indent -= 1
        self.newline(self.indent)

    # Statements

    def generate_statement(self, node: Statement) -> None:
        if isinstance(node, ExpressionStmt):
            self.generate_expression(node.expression)
            self.write(';')
        elif isinstance(node, Declaration):
            self.write(jvm_name(node.variable.type), ' ', node.name)
            if node.value is not None:
                self.write(' = ')
                self.generate_expression(node.value)
            self.write(';')
        elif isinstance(node, Assignment):
            self.generate_expression(node.receiver)
            self.write(' = ')
            self.generate_expression(node.value)
            self.write(';')
        elif isinstance(node, If):
            self.write('if (')
            self.generate_expression(node.condition)
            self.write(') {')
            self.generate_block(node.then_block)
            self.write('}')
            if node.else_block:
                self.write(' else {')
                self.generate_block(node.else_block)
                self.write('}')
        elif isinstance(node, Switch):
            self.write('switch (')
            self.generate_expression(node.condition)
            self.write(') {')
            self.indent += 1
            for case in node.cases:
                self.newline(self.indent)
                self.generate_case(case)
            self.indent -= 1
            self.newline(self.indent)
            self.write('}')
        elif isinstance(node, While):
            self.write('while (')
            self.generate_expression(node.condition)
            self.write(') {')
            self.generate_block(node.body)
            self.write('}')
        elif isinstance(node, Return):
            self.write('return ')
            self.generate_expression(node.value)
            self.write(';')
        else:
            raise ValueError(f"cannot generate {type(node).__name__}")

    def generate_case(self, node: Case) -> None:
        if node.value is not None:
            self.write('case ')
            self.generate_expression(node.value)
            self.write(':')
        else:
            self.write('default:')
        self.indent += 1
        for statement in node.body:
            self.newline(self.indent)
            self.generate_statement(statement)
        self.newline(self.indent)
        self.write('break;')
        self.indent -= 1

    # Expressions

    def generate_expression(self, node: Expression) -> None:
        if isinstance(node, Literal):
            self.write(self.literal(node.value))
        elif isinstance(node, Group):
            self.write('(')
            self.generate_expression(node.expression)
            self.write(')')
        elif isinstance(node, Binary):
            if node.operator == '^':
                self.write('Math.pow(')
                self.generate_expression(node.left)
                self.write(', ')
                self.generate_expression(node.right)
                self.write(')')
            else:
                self.generate_expression(node.left)
                self.write(f" {node.operator} ")
                self.generate_expression(node.right)
        elif isinstance(node, Access):
            self.write(node.variable.name)
            if node.offset is not None:
                self.write('[')
                self.generate_expression(node.offset)
                self.write(']')
        elif isinstance(node, Call):
            function = node.function
            self.write(NATIVE_NAMES.get((function.name, function.arity), function.name), '(')
            for i, argument in enumerate(node.arguments):
                if i:
                    self.write(', ')
                self.generate_expression(argument)
            self.write(')')
        elif isinstance(node, ListLiteral):
            self.write('{')
            for i, element in enumerate(node.elements):
                if i:
                    self.write(', ')
                self.generate_expression(element)
            self.write('}')
        else:
            raise ValueError(f"cannot generate {type(node).__name__}")

    def literal(self, value) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, NilVal):
            return 'null'
        if isinstance(value, CharVal):
            return "'" + escape(value.value, "'") + "'"
        if isinstance(value, str):
            return '"' + escape(value, '"') + '"'
        if isinstance(value, (int, Decimal)):
            return str(value)
        raise ValueError(f"cannot generate literal {value!r}")


def generate_source(source: Source) -> str:
    """Render an analyzed Source as Java text."""
    buffer = io.StringIO()
    Generator(buffer).generate(source)
    return buffer.getvalue()
