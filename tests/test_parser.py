from decimal import Decimal

import pytest

from plc.ast import (
    Access, Assignment, Binary, Call, Case, Declaration, ExpressionStmt,
    Function, Global, Group, If, ListLiteral, Literal, Return, Source,
    Switch, While,
)
from plc.errors import ParseError
from plc.lexer import lex
from plc.parser import Parser, parse_program
from plc.types import CharVal, NIL_VALUE


def expression(source):
    return Parser(lex(source)).parse_expression()


def statement(source):
    return Parser(lex(source)).parse_statement()


def test_multiplication_binds_tighter():
    assert expression('1 + 2 * 3') == Binary('+', Literal(1), Binary('*', Literal(2), Literal(3)))


def test_same_level_is_left_associative():
    assert expression('1 - 2 - 3') == Binary('-', Binary('-', Literal(1), Literal(2)), Literal(3))
    assert expression('a && b || c') == Binary('||', Binary('&&', Access('a'), Access('b')), Access('c'))


def test_comparison_below_additive():
    assert expression('x + 1 < 10') == Binary('<', Binary('+', Access('x'), Literal(1)), Literal(10))


def test_primary_literals():
    assert expression('NIL') == Literal(NIL_VALUE)
    assert expression('TRUE') == Literal(True)
    assert expression('2.50') == Literal(Decimal('2.50'))
    assert expression(r"'\t'") == Literal(CharVal('\t'))
    assert expression(r'"a\nb"') == Literal('a\nb')


def test_group_list_access_and_call():
    assert expression('(x)') == Group(Access('x'))
    assert expression('[1, 2]') == ListLiteral([Literal(1), Literal(2)])
    assert expression('[]') == ListLiteral([])
    assert expression('xs[i]') == Access('xs', Access('i'))
    assert expression('f()') == Call('f', [])
    assert expression('f(1, y)') == Call('f', [Literal(1), Access('y')])


def test_access_followed_by_equals_is_assignment():
    assert statement('x = 1;') == Assignment(Access('x'), Literal(1))
    assert statement('xs[0] = 2;') == Assignment(Access('xs', Literal(0)), Literal(2))


def test_call_statement():
    assert statement('print(1);') == ExpressionStmt(Call('print', [Literal(1)]))


def test_call_cannot_be_assigned():
    with pytest.raises(ParseError) as excinfo:
        statement('f() = 2;')
    assert excinfo.value.offset == 4


def test_declaration_forms():
    assert statement('LET x;') == Declaration('x', None, None)
    assert statement('LET x: Integer = 1;') == Declaration('x', 'Integer', Literal(1))


def test_if_while_and_return():
    assert statement('IF x DO f(); ELSE g(); END') == If(
        Access('x'), [ExpressionStmt(Call('f', []))], [ExpressionStmt(Call('g', []))])
    assert statement('WHILE x DO END') == While(Access('x'), [])
    assert statement('RETURN 1;') == Return(Literal(1))


def test_switch_cases_end_with_default():
    parsed = statement('SWITCH x CASE 1: f(); DEFAULT: g(); END')
    assert parsed == Switch(Access('x'), [
        Case(Literal(1), [ExpressionStmt(Call('f', []))]),
        Case(None, [ExpressionStmt(Call('g', []))]),
    ])


def test_switch_requires_default():
    with pytest.raises(ParseError):
        statement('SWITCH x CASE 1: f(); END')


def test_source_structure():
    source = parse_program(
        'LIST xs: Integer = [1];\n'
        'VAR y;\n'
        'VAL z: Decimal = 1.0;\n'
        'FUN main(a, b: String): Integer DO RETURN 0; END\n'
    )
    assert source == Source(
        [
            Global('xs', 'List<Integer>', True, ListLiteral([Literal(1)])),
            Global('y', None, True, None),
            Global('z', 'Decimal', False, Literal(Decimal('1.0'))),
        ],
        [Function('main', ['a', 'b'], [None, 'String'], 'Integer', [Return(Literal(0))])],
    )


def test_nested_list_type():
    source = parse_program('VAR grid: List<List<Integer>>;')
    assert source.globals[0].type_name == 'List<List<Integer>>'


def test_missing_semicolon_at_end_of_input():
    with pytest.raises(ParseError) as excinfo:
        parse_program('VAR x = 1')
    assert excinfo.value.offset == 9


def test_globals_must_precede_functions():
    source = 'FUN main() DO RETURN 0; END\nVAR x;'
    with pytest.raises(ParseError) as excinfo:
        parse_program(source)
    assert excinfo.value.offset == source.index('VAR')


def test_immutable_global_requires_value():
    with pytest.raises(ParseError):
        parse_program('VAL x: Integer;')


def test_empty_list_global_rejected():
    with pytest.raises(ParseError):
        parse_program('LIST xs = [];')
