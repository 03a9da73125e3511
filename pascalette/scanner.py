"""Scanner for Pascalette.

The lexical rules live in a small Lark grammar. Only Lark's lexer is used
(``Lark.lex``); the grammar's single rule exists so that every terminal is
kept when the grammar is compiled. Raw Lark tokens are then classified
into ``Token`` objects:

* words are looked up case-insensitively in ``RESERVED_WORDS`` and are
  identifiers otherwise;
* numbers with no dot are INTEGER, with one dot REAL, and anything else is
  an ERROR token;
* quoted text of length one is a CHARACTER, otherwise a STRING, with
  ``''`` standing for a single quote.

Malformed input never stops the scanner: it produces an ERROR token and
reports a TOKEN error. Once the text is exhausted ``next_token`` keeps
returning END_OF_FILE.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from lark import Lark

from .errors import ErrorKind, format_diagnostic


class TokenKind(Enum):
    PROGRAM = 'PROGRAM'
    BEGIN = 'BEGIN'
    END = 'END'
    REPEAT = 'REPEAT'
    UNTIL = 'UNTIL'
    WRITE = 'WRITE'
    WRITELN = 'WRITELN'
    DIV = 'DIV'
    MOD = 'MOD'
    AND = 'AND'
    OR = 'OR'
    NOT = 'NOT'
    CONST = 'CONST'
    TYPE = 'TYPE'
    VAR = 'VAR'
    PROCEDURE = 'PROCEDURE'
    FUNCTION = 'FUNCTION'
    WHILE = 'WHILE'
    DO = 'DO'
    FOR = 'FOR'
    TO = 'TO'
    DOWNTO = 'DOWNTO'
    IF = 'IF'
    THEN = 'THEN'
    ELSE = 'ELSE'
    CASE = 'CASE'
    OF = 'OF'

    PERIOD = 'PERIOD'
    COMMA = 'COMMA'
    COLON = 'COLON'
    COLON_EQUALS = 'COLON_EQUALS'
    SEMICOLON = 'SEMICOLON'
    PLUS = 'PLUS'
    MINUS = 'MINUS'
    STAR = 'STAR'
    SLASH = 'SLASH'
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    EQUALS = 'EQUALS'
    NOT_EQUALS = 'NOT_EQUALS'
    LESS_THAN = 'LESS_THAN'
    LESS_EQUALS = 'LESS_EQUALS'
    GREATER_THAN = 'GREATER_THAN'
    GREATER_EQUALS = 'GREATER_EQUALS'
    DOT_DOT = 'DOT_DOT'
    LBRACKET = 'LBRACKET'
    RBRACKET = 'RBRACKET'
    CARAT = 'CARAT'

    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    REAL = 'REAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'

    END_OF_FILE = 'END_OF_FILE'
    ERROR = 'ERROR'


RESERVED_WORDS = {
    name: TokenKind[name] for name in (
        'PROGRAM', 'BEGIN', 'END', 'REPEAT', 'UNTIL', 'WRITE', 'WRITELN',
        'DIV', 'MOD', 'AND', 'OR', 'NOT', 'CONST', 'TYPE', 'VAR',
        'PROCEDURE', 'FUNCTION', 'WHILE', 'DO', 'FOR', 'TO', 'DOWNTO',
        'IF', 'THEN', 'ELSE', 'CASE', 'OF',
    )
}

# Lark terminal names that map one-to-one onto a token kind.
SPECIAL_SYMBOLS = {
    name: TokenKind[name] for name in (
        'PERIOD', 'COMMA', 'COLON', 'COLON_EQUALS', 'SEMICOLON', 'PLUS',
        'MINUS', 'STAR', 'SLASH', 'LPAREN', 'RPAREN', 'EQUALS', 'NOT_EQUALS',
        'LESS_THAN', 'LESS_EQUALS', 'GREATER_THAN', 'GREATER_EQUALS',
        'DOT_DOT', 'LBRACKET', 'RBRACKET', 'CARAT',
    )
}


PASCALETTE_LEXICON = r"""
    start: _lexeme*
    _lexeme: WORD | NUMBER | STRING | OPEN_STRING
           | COLON_EQUALS | LESS_EQUALS | NOT_EQUALS | GREATER_EQUALS | DOT_DOT
           | PERIOD | COMMA | COLON | SEMICOLON | PLUS | MINUS | STAR | SLASH
           | LPAREN | RPAREN | EQUALS | LESS_THAN | GREATER_THAN
           | LBRACKET | RBRACKET | CARAT | INVALID

    WORD: /[A-Za-z][A-Za-z0-9]*/
    NUMBER: /[0-9][0-9.]*/
    STRING: /'([^']|'')*'/
    OPEN_STRING: /'([^']|'')*\Z/

    COLON_EQUALS: ":="
    LESS_EQUALS: "<="
    NOT_EQUALS: "<>"
    GREATER_EQUALS: ">="
    DOT_DOT: ".."
    PERIOD: "."
    COMMA: ","
    COLON: ":"
    SEMICOLON: ";"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    LPAREN: "("
    RPAREN: ")"
    EQUALS: "="
    LESS_THAN: "<"
    GREATER_THAN: ">"
    LBRACKET: "["
    RBRACKET: "]"
    CARAT: "^"

    // Anything else, one character at a time
    INVALID.-1: /./

    COMMENT: /\{[^}]*\}?/
    %ignore COMMENT
    %import common.WS
    %ignore WS
"""


PASCALETTE_LEXER = Lark(
    PASCALETTE_LEXICON,
    parser='lalr',
    lexer='basic',
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    literal: Any = None


def _print_report(diagnostic: str):
    print(diagnostic)


class Scanner:
    """Produces the token stream for one source text."""

    def __init__(self, source: str,
                 report: Optional[Callable[[str], None]] = None,
                 debug: Optional[Callable[[str], None]] = None):
        self._raw = PASCALETTE_LEXER.lex(source)
        self._report = report or _print_report
        self._debug = debug
        self._line = 1
        self.error_count = 0

    def next_token(self) -> Token:
        raw = next(self._raw, None)
        if raw is None:
            token = Token(TokenKind.END_OF_FILE, '', self._line)
        else:
            self._line = raw.line
            token = self.classify(raw.type, str(raw), raw.line)
        if self._debug is not None:
            self._debug(f"token {token.kind.name} {token.text!r} line {token.line}")
        return token

    def __iter__(self) -> Iterator[Token]:
        """Iterate over the tokens up to, not including, END_OF_FILE."""
        while True:
            token = self.next_token()
            if token.kind is TokenKind.END_OF_FILE:
                return
            yield token

    def classify(self, terminal: str, text: str, line: int) -> Token:
        if terminal == 'WORD':
            return Token(RESERVED_WORDS.get(text.upper(), TokenKind.IDENTIFIER), text, line)
        if terminal == 'NUMBER':
            points = text.count('.')
            if points == 0:
                return Token(TokenKind.INTEGER, text, line, int(text))
            if points == 1:
                return Token(TokenKind.REAL, text, line, float(text))
            return self.error(text, line, 'Invalid number')
        if terminal == 'STRING':
            value = text[1:-1].replace("''", "'")
            kind = TokenKind.CHARACTER if len(value) == 1 else TokenKind.STRING
            return Token(kind, text, line, value)
        if terminal == 'OPEN_STRING':
            return self.error(text, line, 'String not closed')
        if terminal in SPECIAL_SYMBOLS:
            return Token(SPECIAL_SYMBOLS[terminal], text, line)
        return self.error(text, line, 'Invalid token')

    def error(self, text: str, line: int, message: str) -> Token:
        self.error_count += 1
        self._report(format_diagnostic(ErrorKind.TOKEN, line, message, text))
        return Token(TokenKind.ERROR, text, line)
