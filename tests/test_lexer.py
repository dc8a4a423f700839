import pytest

from plc.errors import ParseError
from plc.lexer import TokenType, lex


def kinds(source):
    return [(t.type, t.literal) for t in lex(source)]


def test_declaration_tokens():
    tokens = lex('LET x = -1.5;')
    assert [(t.type, t.literal, t.offset) for t in tokens] == [
        (TokenType.IDENTIFIER, 'LET', 0),
        (TokenType.IDENTIFIER, 'x', 4),
        (TokenType.OPERATOR, '=', 6),
        (TokenType.DECIMAL, '-1.5', 8),
        (TokenType.OPERATOR, ';', 12),
    ]


def test_identifiers_may_contain_dashes():
    assert kinds('@a-b_1') == [(TokenType.IDENTIFIER, '@a-b_1')]


def test_negative_integer_needs_adjacent_digit():
    assert kinds('x - 1') == [
        (TokenType.IDENTIFIER, 'x'),
        (TokenType.OPERATOR, '-'),
        (TokenType.INTEGER, '1'),
    ]
    assert kinds('-12') == [(TokenType.INTEGER, '-12')]


def test_compound_operators():
    assert [t.literal for t in lex('!= == && || < =')] == ['!=', '==', '&&', '||', '<', '=']


def test_character_and_string_literals():
    assert kinds(r"'\n' 'a' " + r'"say \"hi\""') == [
        (TokenType.CHARACTER, r"'\n'"),
        (TokenType.CHARACTER, "'a'"),
        (TokenType.STRING, r'"say \"hi\""'),
    ]


def test_unterminated_string():
    with pytest.raises(ParseError) as excinfo:
        lex('print("abc);')
    assert excinfo.value.offset == 12


def test_invalid_escape():
    with pytest.raises(ParseError) as excinfo:
        lex(r'"bad \q"')
    assert excinfo.value.offset == 6


def test_character_with_two_chars():
    with pytest.raises(ParseError) as excinfo:
        lex("x = 'ab';")
    assert excinfo.value.offset == 6
    assert str(excinfo.value).startswith('SyntaxError:')


def test_invalid_escape_points_at_escape_character():
    with pytest.raises(ParseError) as excinfo:
        lex(r'"a\q"')
    assert excinfo.value.offset == 3
    with pytest.raises(ParseError) as excinfo:
        lex(r"'\q'")
    assert excinfo.value.offset == 2


def test_string_cannot_span_lines():
    with pytest.raises(ParseError) as excinfo:
        lex('"ab\ncd"')
    assert excinfo.value.offset == 3
