"""Recursive-descent parser for the PLC language.

The parser consumes the token list produced by `plc.lexer.lex` and
builds a `Source` AST. Each grammar rule has its own method. The
`parse_*` statement methods should only be called when the next token
starts that statement; they consume the leading keyword themselves.

Errors are never recovered from: the first mismatch raises ParseError
anchored at the current token, or one past the last token at end of
input.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import List, Optional, Union

from .ast import (
    Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, Case, While, Return, Expression, Literal,
    Group, Binary, Access, Call, ListLiteral,
)
from .errors import ParseError
from .lexer import Token, TokenType, lex
from .types import CharVal, NIL_VALUE

Pattern = Union[str, TokenType]

BLOCK_END = ('END', 'ELSE', 'CASE', 'DEFAULT')

LOGICAL_OPERATORS = ('&&', '||')
COMPARISON_OPERATORS = ('<', '>', '==', '!=')
ADDITIVE_OPERATORS = ('+', '-')
MULTIPLICATIVE_OPERATORS = ('*', '/', '^')

ESCAPES = {
    'b': '\b',
    'n': '\n',
    'r': '\r',
    't': '\t',
    '"': '"',
    "'": "'",
    '\\': '\\',
}
ESCAPE_RE = re.compile(r'\\([bnrt"\'\\])')


def replace_escapes(text: str) -> str:
    return ESCAPE_RE.sub(lambda m: ESCAPES[m.group(1)], text)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # Token stream helpers

    def has(self, offset: int = 0) -> bool:
        return self.pos + offset < len(self.tokens)

    def peek(self, *patterns: Pattern) -> bool:
        """True if the upcoming tokens match `patterns` one-for-one.

        A TokenType pattern matches on token type, a str pattern on the
        token's literal text.
        """
        for i, pattern in enumerate(patterns):
            if not self.has(i):
                return False
            token = self.tokens[self.pos + i]
            if isinstance(pattern, TokenType):
                if token.type != pattern:
                    return False
            elif token.literal != pattern:
                return False
        return True

    def match(self, *patterns: Pattern) -> bool:
        if self.peek(*patterns):
            self.pos += len(patterns)
            return True
        return False

    def match_any(self, literals) -> Optional[str]:
        for literal in literals:
            if self.match(literal):
                return literal
        return None

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def error_offset(self) -> int:
        if self.has():
            return self.tokens[self.pos].offset
        if not self.tokens:
            return 0
        last = self.tokens[-1]
        return last.offset + len(last.literal)

    def error(self, message: str) -> ParseError:
        return ParseError(message, self.error_offset())

    def expect(self, pattern: Pattern, description: Optional[str] = None) -> Token:
        if not self.match(pattern):
            if description is None:
                description = pattern.value.lower() if isinstance(pattern, TokenType) else repr(pattern)
            raise self.error(f"Expected {description}")
        return self.previous()

    # Top level

    def parse_source(self) -> Source:
        globals_: List[Global] = []
        functions: List[Function] = []
        while self.peek('LIST') or self.peek('VAR') or self.peek('VAL'):
            globals_.append(self.parse_global())
        while self.peek('FUN'):
            functions.append(self.parse_function())
        if self.has():
            raise self.error("Expected a global or function definition")
        return Source(globals_, functions)

    def parse_global(self) -> Global:
        if self.peek('LIST'):
            result = self.parse_list()
        elif self.peek('VAR'):
            result = self.parse_mutable()
        elif self.peek('VAL'):
            result = self.parse_immutable()
        else:
            raise self.error("Expected LIST, VAR or VAL")
        self.expect(';')
        return result

    def parse_list(self) -> Global:
        self.expect('LIST')
        name = self.expect(TokenType.IDENTIFIER, 'a list name').literal
        element_type = self.parse_optional_type()
        self.expect('=')
        self.expect('[')
        if self.peek(']'):
            raise self.error("Expected at least one list element")
        elements = self.parse_comma_separated(']')
        type_name = f"List<{element_type}>" if element_type is not None else None
        return Global(name, type_name, True, ListLiteral(elements))

    def parse_mutable(self) -> Global:
        self.expect('VAR')
        name = self.expect(TokenType.IDENTIFIER, 'a variable name').literal
        type_name = self.parse_optional_type()
        value = None
        if self.match('='):
            value = self.parse_expression()
        return Global(name, type_name, True, value)

    def parse_immutable(self) -> Global:
        self.expect('VAL')
        name = self.expect(TokenType.IDENTIFIER, 'a variable name').literal
        type_name = self.parse_optional_type()
        self.expect('=', "'=' (immutable globals require a value)")
        value = self.parse_expression()
        return Global(name, type_name, False, value)

    def parse_function(self) -> Function:
        self.expect('FUN')
        name = self.expect(TokenType.IDENTIFIER, 'a function name').literal
        self.expect('(')
        parameters: List[str] = []
        parameter_types: List[Optional[str]] = []
        if not self.match(')'):
            while True:
                parameters.append(self.expect(TokenType.IDENTIFIER, 'a parameter name').literal)
                parameter_types.append(self.parse_optional_type())
                if self.match(')'):
                    break
                self.expect(',', "',' or ')'")
        return_type = self.parse_optional_type()
        self.expect('DO')
        body = self.parse_block()
        self.expect('END')
        return Function(name, parameters, parameter_types, return_type, body)

    def parse_optional_type(self) -> Optional[str]:
        if self.match(':'):
            return self.parse_type()
        return None

    def parse_type(self) -> str:
        # IDENT ['<' type '>']
        name = self.expect(TokenType.IDENTIFIER, 'a type name').literal
        if self.match('<'):
            inner = self.parse_type()
            self.expect('>')
            return f"{name}<{inner}>"
        return name

    def parse_block(self) -> List[Statement]:
        statements: List[Statement] = []
        while self.has() and not any(self.peek(word) for word in BLOCK_END):
            statements.append(self.parse_statement())
        return statements

    # Statements

    def parse_statement(self) -> Statement:
        if self.peek('LET'):
            return self.parse_declaration_statement()
        if self.peek('SWITCH'):
            return self.parse_switch_statement()
        if self.peek('IF'):
            return self.parse_if_statement()
        if self.peek('WHILE'):
            return self.parse_while_statement()
        if self.peek('RETURN'):
            return self.parse_return_statement()
        expression = self.parse_expression()
        if isinstance(expression, Access) and self.match('='):
            value = self.parse_expression()
            result: Statement = Assignment(expression, value)
        else:
            result = ExpressionStmt(expression)
        self.expect(';')
        return result

    def parse_declaration_statement(self) -> Declaration:
        self.expect('LET')
        name = self.expect(TokenType.IDENTIFIER, 'a variable name').literal
        type_name = self.parse_optional_type()
        value = None
        if self.match('='):
            value = self.parse_expression()
        self.expect(';')
        return Declaration(name, type_name, value)

    def parse_if_statement(self) -> If:
        self.expect('IF')
        condition = self.parse_expression()
        self.expect('DO')
        then_block = self.parse_block()
        else_block: List[Statement] = []
        if self.match('ELSE'):
            else_block = self.parse_block()
        self.expect('END')
        return If(condition, then_block, else_block)

    def parse_switch_statement(self) -> Switch:
        self.expect('SWITCH')
        condition = self.parse_expression()
        cases: List[Case] = []
        while self.peek('CASE'):
            cases.append(self.parse_case_statement())
        if not self.peek('DEFAULT'):
            raise self.error("Expected CASE or DEFAULT")
        cases.append(self.parse_case_statement())
        self.expect('END')
        return Switch(condition, cases)

    def parse_case_statement(self) -> Case:
        if self.match('CASE'):
            value = self.parse_expression()
            self.expect(':')
            return Case(value, self.parse_block())
        self.expect('DEFAULT')
        self.match(':')
        return Case(None, self.parse_block())

    def parse_while_statement(self) -> While:
        self.expect('WHILE')
        condition = self.parse_expression()
        self.expect('DO')
        body = self.parse_block()
        self.expect('END')
        return While(condition, body)

    def parse_return_statement(self) -> Return:
        self.expect('RETURN')
        value = self.parse_expression()
        self.expect(';')
        return Return(value)

    # Expressions, lowest to highest precedence

    def parse_expression(self) -> Expression:
        return self.parse_logical_expression()

    def parse_binary_level(self, operators, parse_operand) -> Expression:
        node = parse_operand()
        while True:
            operator = self.match_any(operators)
            if operator is None:
                return node
            node = Binary(operator, node, parse_operand())

    def parse_logical_expression(self) -> Expression:
        return self.parse_binary_level(LOGICAL_OPERATORS, self.parse_comparison_expression)

    def parse_comparison_expression(self) -> Expression:
        return self.parse_binary_level(COMPARISON_OPERATORS, self.parse_additive_expression)

    def parse_additive_expression(self) -> Expression:
        return self.parse_binary_level(ADDITIVE_OPERATORS, self.parse_multiplicative_expression)

    def parse_multiplicative_expression(self) -> Expression:
        return self.parse_binary_level(MULTIPLICATIVE_OPERATORS, self.parse_primary_expression)

    def parse_primary_expression(self) -> Expression:
        if self.match('NIL'):
            return Literal(NIL_VALUE)
        if self.match('TRUE'):
            return Literal(True)
        if self.match('FALSE'):
            return Literal(False)
        if self.match(TokenType.INTEGER):
            return Literal(int(self.previous().literal))
        if self.match(TokenType.DECIMAL):
            return Literal(Decimal(self.previous().literal))
        if self.match(TokenType.CHARACTER):
            return Literal(CharVal(replace_escapes(self.previous().literal[1:-1])))
        if self.match(TokenType.STRING):
            return Literal(replace_escapes(self.previous().literal[1:-1]))
        if self.match('('):
            expression = self.parse_expression()
            self.expect(')', "closing parenthesis")
            return Group(expression)
        if self.match('['):
            if self.match(']'):
                return ListLiteral([])
            return ListLiteral(self.parse_comma_separated(']'))
        if self.match(TokenType.IDENTIFIER):
            name = self.previous().literal
            if self.match('['):
                offset = self.parse_expression()
                self.expect(']', "closing bracket")
                return Access(name, offset)
            if self.match('('):
                if self.match(')'):
                    return Call(name, [])
                return Call(name, self.parse_comma_separated(')'))
            return Access(name)
        raise self.error("Expected an expression")

    def parse_comma_separated(self, closing: str) -> List[Expression]:
        """Parse `expr (',' expr)*` followed by the closing token."""
        items = [self.parse_expression()]
        while not self.match(closing):
            self.expect(',', f"',' or {closing!r}")
            items.append(self.parse_expression())
        return items


def parse_program(source: str) -> Source:
    """Lex and parse PLC source text into a Source AST."""
    return Parser(lex(source)).parse_source()
