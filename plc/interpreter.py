"""Tree-walking interpreter for the PLC language.

The interpreter executes an analyzed `Source`: globals are bound in
declaration order, functions are defined in the root scope, and then
`main()` is invoked with no arguments. Its return value is the result of
the run.

Statement execution returns an explicit outcome, either `COMPLETED` or
`Returning(value)`. Block runners stop at the first `Returning` and hand
it upward; the function invocation boundary unwraps it. Scopes are
opened with `Environment.scope()` so they are closed on every exit path.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import (
    Decimal, DecimalException, DivisionByZero, InvalidOperation, Overflow,
    ROUND_HALF_EVEN, localcontext,
)
from typing import Any, List, Union

from .analyzer import analyze
from .ast import (
    Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, While, Return, Expression, Literal,
    Group, Binary, Access, Call, ListLiteral,
)
from .environment import Environment, Function as FunctionBinding
from .errors import PlcRuntimeError
from .parser import parse_program
from .types import (
    ANY, NIL, CharVal, ListVal, NIL_VALUE, INT_MIN, INT_MAX,
    is_integer, to_string, type_of, values_equal,
)


class Completed:
    """Outcome of a statement that finished normally."""

    def __repr__(self) -> str:
        return 'COMPLETED'


COMPLETED = Completed()


@dataclass
class Returning:
    """Outcome of a RETURN, carried up to the enclosing invocation."""
    value: Any


Outcome = Union[Completed, Returning]


def divide_integers(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def divide_decimals(a: Decimal, b: Decimal) -> Decimal:
    """Decimal division keeping the dividend's scale, rounding half-even."""
    exponent = a.as_tuple().exponent
    with localcontext() as ctx:
        # integer digits of the quotient, the kept fraction, and guard digits
        ctx.prec = max(ctx.prec, a.adjusted() - b.adjusted() + 2 - exponent + 28)
        return (a / b).quantize(Decimal(1).scaleb(exponent), rounding=ROUND_HALF_EVEN)


def exact_precision(a: Decimal, b: Decimal) -> int:
    """Digits needed for `a + b`, `a - b` and `a * b` to be exact."""
    ta, tb = a.as_tuple(), b.as_tuple()
    span = max(a.adjusted(), b.adjusted()) - min(ta.exponent, tb.exponent) + 2
    return max(span, len(ta.digits) + len(tb.digits))


def exact_decimal(op: str, a: Decimal, b: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact_precision(a, b))
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        return a * b


def power_decimal(base: Decimal, exponent: int) -> Decimal:
    """Decimal power to 16 significant digits, rounding half-even."""
    if exponent == 0:
        return Decimal(1)
    if exponent < 0 and base == 0:
        raise PlcRuntimeError('division by zero in Decimal power')
    with localcontext() as ctx:
        ctx.prec = 16
        ctx.rounding = ROUND_HALF_EVEN
        for signal in (DivisionByZero, InvalidOperation, Overflow):
            ctx.traps[signal] = True
        try:
            return base ** exponent
        except DecimalException as e:
            raise PlcRuntimeError(f'Decimal power {base} ^ {exponent} failed: {type(e).__name__}') from None


class Interpreter:
    """Core interpreter that executes a PLC AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.environment = Environment(error=PlcRuntimeError)
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.environment.define_function(FunctionBinding('print', [ANY], NIL, self.native_print))

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def native_print(self, args: List[Any]) -> Any:
        print(to_string(args[0]))
        return NIL_VALUE

    # Public API
    def run(self, source: Source) -> Any:
        """Bind globals, define functions and return the value of main()."""
        try:
            for global_ in source.globals:
                self.execute_global(global_)
            for function in source.functions:
                self.define_function(function)
            main = self.environment.lookup_function('main', 0)
            return main.invoke([])
        finally:
            if self.debug_fp:
                self.debug_fp.close()

    def execute_global(self, node: Global) -> None:
        value = self.evaluate(node.value) if node.value is not None else NIL_VALUE
        self.environment.define_variable(node.name, type_of(value), node.mutable, value)
        if self.debug_level >= 2:
            self.debug(f"global {node.name} = {to_string(value)}")

    def define_function(self, node: Function) -> None:
        defining_scope = self.environment.current

        def invoke(args: List[Any]) -> Any:
            if self.debug_level >= 3:
                self.debug(f"call {node.name}({', '.join(to_string(a) for a in args)})")
            with self.environment.scope(parent=defining_scope):
                for name, arg in zip(node.parameters, args):
                    self.environment.define_variable(name, ANY, True, arg)
                outcome = self.execute_block(node.body)
            if isinstance(outcome, Returning):
                return outcome.value
            return NIL_VALUE

        self.environment.define_function(FunctionBinding(node.name, [ANY] * len(node.parameters), None, invoke))
        if self.debug_level >= 2:
            self.debug(f"define function {node.name}/{len(node.parameters)}")

    # Statements

    def execute_block(self, statements: List[Statement]) -> Outcome:
        for statement in statements:
            outcome = self.execute(statement)
            if isinstance(outcome, Returning):
                return outcome
        return COMPLETED

    def execute_scoped_block(self, statements: List[Statement]) -> Outcome:
        with self.environment.scope():
            return self.execute_block(statements)

    def execute(self, node: Statement) -> Outcome:
        if isinstance(node, ExpressionStmt):
            self.evaluate(node.expression)
            return COMPLETED
        if isinstance(node, Declaration):
            value = self.evaluate(node.value) if node.value is not None else NIL_VALUE
            self.environment.define_variable(node.name, type_of(value), True, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name} = {to_string(value)}")
            return COMPLETED
        if isinstance(node, Assignment):
            self.assign(node)
            return COMPLETED
        if isinstance(node, If):
            condition = self.require_boolean(self.evaluate(node.condition), 'IF')
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_string(condition)}")
            return self.execute_scoped_block(node.then_block if condition else node.else_block)
        if isinstance(node, Switch):
            return self.execute_switch(node)
        if isinstance(node, While):
            while self.require_boolean(self.evaluate(node.condition), 'WHILE'):
                outcome = self.execute_scoped_block(node.body)
                if isinstance(outcome, Returning):
                    return outcome
            return COMPLETED
        if isinstance(node, Return):
            return Returning(self.evaluate(node.value))
        raise PlcRuntimeError(f"unexpected statement {type(node).__name__}")

    def execute_switch(self, node: Switch) -> Outcome:
        with self.environment.scope():
            condition = self.evaluate(node.condition)
            for case in node.cases:
                if case.value is None or values_equal(condition, self.evaluate(case.value)):
                    if self.debug_level >= 3:
                        self.debug(f"switch {to_string(condition)} -> {'default' if case.value is None else 'case'}")
                    return self.execute_block(case.body)
        return COMPLETED

    def assign(self, node: Assignment) -> None:
        value = self.evaluate(node.value)
        receiver = node.receiver
        if not isinstance(receiver, Access):
            raise PlcRuntimeError('assignment receiver must be an access expression')
        variable = self.environment.lookup_variable(receiver.name)
        if not variable.mutable:
            raise PlcRuntimeError(f'cannot assign to immutable variable {receiver.name}')
        if receiver.offset is None:
            variable.value = value
            return
        items = self.list_items(variable.value, receiver.name)
        index = self.list_index(self.evaluate(receiver.offset), items)
        items[index] = value

    def require_boolean(self, value: Any, context: str) -> bool:
        if not isinstance(value, bool):
            raise PlcRuntimeError(f'{context} expects Boolean, got {type_of(value)!r}')
        return value

    def list_items(self, value: Any, name: str) -> List[Any]:
        if not isinstance(value, ListVal):
            raise PlcRuntimeError(f'cannot index {name}: {type_of(value)!r} is not a list')
        return value.items

    def list_index(self, offset: Any, items: List[Any]) -> int:
        if not is_integer(offset):
            raise PlcRuntimeError(f'list offset must be Integer, got {type_of(offset)!r}')
        if offset < 0 or offset >= len(items):
            raise PlcRuntimeError(f'list index {offset} out of range')
        return offset

    # Expressions

    def evaluate(self, node: Expression) -> Any:
        if isinstance(node, Literal):
            if is_integer(node.value) and not INT_MIN <= node.value <= INT_MAX:
                raise PlcRuntimeError(f'integer literal {node.value} is too large')
            return node.value
        if isinstance(node, Group):
            return self.evaluate(node.expression)
        if isinstance(node, Binary):
            return self.evaluate_binary(node)
        if isinstance(node, Access):
            variable = self.environment.lookup_variable(node.name)
            if node.offset is None:
                return variable.value
            offset = self.evaluate(node.offset)
            items = self.list_items(variable.value, node.name)
            return items[self.list_index(offset, items)]
        if isinstance(node, Call):
            function = self.environment.lookup_function(node.name, len(node.arguments))
            args = [self.evaluate(arg) for arg in node.arguments]
            return function.invoke(args)
        if isinstance(node, ListLiteral):
            return ListVal([self.evaluate(el) for el in node.elements])
        raise PlcRuntimeError(f"unexpected expression {type(node).__name__}")

    def evaluate_binary(self, node: Binary) -> Any:
        op = node.operator
        left = self.evaluate(node.left)
        # Short-circuit for && and ||
        if op in ('&&', '||'):
            self.require_boolean(left, op)
            if (op == '&&' and not left) or (op == '||' and left):
                return left
            return self.require_boolean(self.evaluate(node.right), op)
        right = self.evaluate(node.right)
        return self.apply_binary_op(op, left, right)

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in ('==', '!='):
            equal = values_equal(a, b)
            return equal if op == '==' else not equal
        if op in ('<', '>'):
            if type_of(a) != type_of(b) or not isinstance(a, (int, Decimal, CharVal, str)) or isinstance(a, bool):
                raise PlcRuntimeError(f'cannot compare {type_of(a)!r} with {type_of(b)!r}')
            return a < b if op == '<' else a > b
        if op == '+' and (isinstance(a, str) or isinstance(b, str)):
            return to_string(a) + to_string(b)
        if op == '/' and (is_integer(b) or isinstance(b, Decimal)) and b == 0:
            raise PlcRuntimeError('division by zero')
        if op == '^':
            if not is_integer(b):
                raise PlcRuntimeError(f'exponent must be Integer, got {type_of(b)!r}')
            if isinstance(a, Decimal):
                return power_decimal(a, b)
            if is_integer(a):
                if b < 0:
                    raise PlcRuntimeError('negative exponent for Integer power')
                return a ** b
            raise PlcRuntimeError(f'unsupported ^ for {type_of(a)!r}')
        if op in ('+', '-', '*', '/'):
            if is_integer(a) and is_integer(b):
                if op == '+':
                    return a + b
                if op == '-':
                    return a - b
                if op == '*':
                    return a * b
                return divide_integers(a, b)
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                if op == '/':
                    return divide_decimals(a, b)
                return exact_decimal(op, a, b)
            raise PlcRuntimeError(f'unsupported {op} for {type_of(a)!r} and {type_of(b)!r}')
        raise PlcRuntimeError(f'unknown operator {op}')


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to parse, analyze and run PLC source text."""
    ast_source = parse_program(source)
    analyze(ast_source)
    interpreter = Interpreter(debug_level=debug_level)
    return interpreter.run(ast_source)
