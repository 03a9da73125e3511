from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    TOKEN = 'TOKEN'
    SYNTAX = 'SYNTAX'
    SEMANTIC = 'SEMANTIC'
    RUNTIME = 'RUNTIME'


def format_diagnostic(kind: ErrorKind, line: int, message: str, text: Optional[str]) -> str:
    """Render the single-line diagnostic shared by every error kind."""
    return f"{kind.value} ERROR at line {line}: {message} at '{'' if text is None else text}'"


class PascaletteError(Exception):
    """Base class for errors reported against a source line."""
    kind = ErrorKind.SYNTAX

    def __init__(self, line: int, message: str, text: Optional[str] = None):
        super().__init__(format_diagnostic(self.kind, line, message, text))
        self.line = line
        self.message = message
        self.text = text

    @property
    def diagnostic(self) -> str:
        return str(self)


class ParseError(PascaletteError):
    """Internal exception used by the parser to abandon a statement."""
    kind = ErrorKind.SYNTAX


class SemanticError(PascaletteError):
    kind = ErrorKind.SEMANTIC


class ExecutionError(PascaletteError):
    """Fatal runtime error; execution stops where it is raised."""
    kind = ErrorKind.RUNTIME


class ValueContractError(TypeError):
    """A runtime value carried a different tag than its evaluation site expects."""
