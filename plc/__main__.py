"""CLI entry point for the PLC interpreter.

Usage:
    python -m plc [-v|-vv|-vvv] <program_file>
    python -m plc [-v...] --emit-ast <program_file>
    python -m plc --generate <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse and analyze the given file and emit an AST JSON file
  --generate    Parse and analyze the given file and print Java source

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The exit status of a run is the value
returned by `main()`; any parse, type or runtime error is reported on
stderr and exits with status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import analyze
from .ast_json import ast_to_obj
from .errors import PlcError
from .generator import generate_source
from .interpreter import Interpreter
from .parser import parse_program


def read_program(path: str) -> str:
    program_file = Path(path)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="PLC language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit analyzed AST JSON for the given file')
    group.add_argument('--generate', metavar='PLC_FILE', help='print the Java translation of the given file')
    parser.add_argument('program', nargs='?', help='PLC program file to execute')
    args = parser.parse_args(argv)

    try:
        # Emit AST mode
        if args.emit_ast:
            source = parse_program(read_program(args.emit_ast))
            analyze(source)
            program_file = Path(args.emit_ast)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(source), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Java generation mode
        if args.generate:
            source = parse_program(read_program(args.generate))
            analyze(source)
            print(generate_source(source))
            return

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --emit-ast/--generate')
        source = parse_program(read_program(args.program))
        analyze(source)
        result = Interpreter(debug_level=args.v).run(source)
    except PlcError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(result)


if __name__ == '__main__':
    main()
