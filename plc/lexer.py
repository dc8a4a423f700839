"""Tokenizer for the PLC language.

Token classes are declared as terminals of a small Lark grammar and
scanned with Lark's basic lexer. Only the lexer is used: the grammar's
single rule exists so Lark keeps every terminal, while the structure of
the program is recovered by the recursive-descent parser in
`plc.parser`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import ParseError


class TokenType(Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    DECIMAL = 'DECIMAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'
    OPERATOR = 'OPERATOR'


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str
    offset: int


PLC_TOKENS = r"""
    start: (IDENTIFIER | INTEGER | DECIMAL | CHARACTER | STRING | OPERATOR)*

    IDENTIFIER: /[A-Za-z@][A-Za-z0-9_-]*/
    DECIMAL.3: /-?(0|[1-9][0-9]*)\.[0-9]+/
    INTEGER.2: /-?(0|[1-9][0-9]*)/
    CHARACTER: /'([^'\\\n\r]|\\[bnrt'"\\])'/
    STRING: /"([^"\\\n\r]|\\[bnrt'"\\])*"/
    OPERATOR: /!=|==|&&|\|\||[^\sA-Za-z0-9_@'"]/

    %ignore /\s+/
"""


PLC_LEXER = Lark(
    PLC_TOKENS,
    parser='lalr',
    lexer='basic',
)


ESCAPE_CHARACTERS = "bnrt'\"\\"


def describe_lex_error(source: str, offset: int) -> Tuple[str, int]:
    """Message and offset for a scan failure starting at `offset`.

    Quoted literals are rescanned so the error points at the offending
    escape character or the position where the closing quote was expected.
    """
    c = source[offset]
    if c == '"':
        i = offset + 1
        while i < len(source) and source[i] != '"':
            if source[i] in '\n\r':
                return 'String literal cannot span multiple lines', i
            if source[i] == '\\':
                i += 1
                if i >= len(source) or source[i] not in ESCAPE_CHARACTERS:
                    return 'Invalid escape sequence', i
            i += 1
        return 'Unterminated string literal', i
    if c == "'":
        i = offset + 1
        if i < len(source) and source[i] == '\\':
            i += 1
            if i >= len(source) or source[i] not in ESCAPE_CHARACTERS:
                return 'Invalid escape sequence', i
        return 'Invalid character literal', i + 1
    return f'Unexpected character {c!r}', offset


def lex(source: str) -> List[Token]:
    """Convert source text into a list of tokens.

    Whitespace is dropped. A malformed literal raises ParseError at the
    offset where scanning failed.
    """
    tokens: List[Token] = []
    try:
        for tok in PLC_LEXER.lex(source):
            tokens.append(Token(TokenType[tok.type], str(tok), tok.start_pos))
    except UnexpectedCharacters as e:
        message, offset = describe_lex_error(source, e.pos_in_stream)
        raise ParseError(message, offset) from None
    return tokens
