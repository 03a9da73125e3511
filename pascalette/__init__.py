# Pascalette language package
# This package provides a scanner, parser and tree-walking interpreter for Pascalette.
from .interpreter import run_program, compile_module, parse_program, Interpreter
from .errors import PascaletteError, ExecutionError

__all__ = [
    'run_program',
    'compile_module',
    'parse_program',
    'Interpreter',
    'PascaletteError',
    'ExecutionError',
]
