"""Interpreter for the Pascalette language.

This module wires the toolchain together: the scanner produces tokens,
the recursive-descent parser builds the program tree while filling the
symbol table, and the executor runs the tree. Diagnostics are printed as
single lines on standard output as they are found.

Debug tracing follows verbosity levels. When ``debug_level`` is above
zero, trace lines are written to ``debug_file``:

1. parse summary, start and end of execution
2. assignments and writes
3. branch and loop-test decisions
4. every token read by the parser
"""

from __future__ import annotations

from typing import Optional, TextIO

from .ast import Node
from .executor import Executor
from .parser import Parser
from .scanner import Scanner
from .symtab import SymbolTable


class Interpreter:
    """Parses and executes Pascalette programs against one symbol table."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 strict: bool = False, out: Optional[TextIO] = None):
        self.symtab = SymbolTable()
        self.strict = strict
        self.out = out
        self.error_count = 0
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def trace(self, level: int, msg: str):
        self.debug(msg, level)

    def report(self, diagnostic: str):
        print(diagnostic, file=self.out)
        self.debug(diagnostic)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def parse(self, source: str) -> Node:
        token_debug = (lambda msg: self.debug(msg, 4)) if self.debug_level >= 4 else None
        scanner = Scanner(source, report=self.report, debug=token_debug)
        parser = Parser(scanner, self.symtab, strict=self.strict, report=self.report)
        program = parser.parse_program()
        self.error_count += parser.error_count
        self.debug(f"parsed program {program.text}: {parser.error_count} error(s)")
        return program

    def run(self, program: Node):
        """Execute a parsed program. ExecutionError propagates to the caller."""
        executor = Executor(out=self.out, debug=self.trace)
        self.debug(f"execute program {program.text}")
        try:
            executor.run(program)
        finally:
            self.debug(f"end of program {program.text}")
            self.close()


def parse_program(source: str, symtab: Optional[SymbolTable] = None, strict: bool = False) -> Node:
    """Parse source code into a program tree, printing any diagnostics."""
    parser = Parser(Scanner(source), symtab if symtab is not None else SymbolTable(), strict=strict)
    return parser.parse_program()


def run_program(source: str, debug_level: int = 0) -> Interpreter:
    """Convenience function to parse and run a program from a source string.

    The program only runs when it parsed without errors.
    """
    interpreter = Interpreter(debug_level=debug_level)
    program = interpreter.parse(source)
    if interpreter.error_count:
        interpreter.close()
        return interpreter
    interpreter.run(program)
    return interpreter


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and run a program file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
