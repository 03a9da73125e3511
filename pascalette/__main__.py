"""CLI entry point for the Pascalette interpreter.

Usage:
    python -m pascalette [-v|-vv|-vvv|-vvvv] [--strict] <program_file>
    python -m pascalette [-v...] --emit-ast <program_file>
    python -m pascalette [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --strict      Report variables read before they are ever assigned
  --emit-ast    Parse the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. A program with syntax errors is not
executed; the exit status is 1. A runtime error ends the run with exit
status 3.
"""

import argparse
import json
import sys
from pathlib import Path
from .ast_json import ast_to_obj, ast_from_obj
from .errors import ExecutionError
from .interpreter import Interpreter

PARSE_ERROR_STATUS = 1
RUNTIME_ERROR_STATUS = 3


def read_source(path: Path) -> str:
    if not path.is_file():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(interpreter: Interpreter, program) -> None:
    try:
        interpreter.run(program)
    except ExecutionError as e:
        print(e.diagnostic)
        sys.exit(RUNTIME_ERROR_STATUS)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Pascalette language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--strict', action='store_true', help='report variables read before assignment')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='program file to execute')
    args = parser.parse_args(argv)

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        source = read_source(ast_path)
        interpreter = Interpreter(debug_level=args.v)
        try:
            program = ast_from_obj(json.loads(source), interpreter.symtab)
        except ValueError as e:
            interpreter.close()
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        execute(interpreter, program)
        return

    source_name = args.emit_ast or args.program
    if not source_name:
        parser.error('missing program file; or use --emit-ast/--ast')
    program_file = Path(source_name)
    source = read_source(program_file)
    interpreter = Interpreter(debug_level=args.v, strict=args.strict)
    program = interpreter.parse(source)
    if interpreter.error_count:
        interpreter.close()
        print(f"{interpreter.error_count} error(s) found, program not executed", file=sys.stderr)
        sys.exit(PARSE_ERROR_STATUS)

    # Emit AST mode
    if args.emit_ast:
        interpreter.close()
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    execute(interpreter, program)


if __name__ == '__main__':
    main()
