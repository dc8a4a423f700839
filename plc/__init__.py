# PLC language package
# This package provides a parser, static analyzer, interpreter and Java
# emitter for the PLC language.
from .errors import PlcError, ParseError, AnalysisError, PlcRuntimeError
from .lexer import lex
from .parser import parse_program
from .analyzer import Analyzer, analyze
from .interpreter import Interpreter, run_program
from .generator import Generator, generate_source

__all__ = [
    'lex',
    'parse_program',
    'Analyzer',
    'analyze',
    'Interpreter',
    'run_program',
    'Generator',
    'generate_source',
    'PlcError',
    'ParseError',
    'AnalysisError',
    'PlcRuntimeError',
]
