"""Recursive-descent parser for Pascalette.

The parser pulls tokens one at a time from a token stream (anything with
a ``next_token()`` method, normally a ``Scanner``) and builds the program
tree defined in ``pascalette.ast``. Variable references are bound to
symbol-table entries while parsing, so execution never looks names up.

Expression precedence, lowest first::

    expression       := simpleExpression (relOp simpleExpression)?
    simpleExpression := term ((+ | -) term)*
    term             := factor ((* | / | AND | OR) factor)*
    factor           := variable | integer | real | - factor
                      | NOT expression | ( expression )

Binary operators associate to the left.

WHILE and FOR have no node kinds of their own: they are rewritten into
LOOP/TEST trees, the loop primitive being "repeat until".

Syntax errors do not stop the parse. The failing statement is abandoned,
the error is reported and counted, and tokens are skipped up to the next
``;``, ``END``, ``UNTIL`` or end of file.
"""

from __future__ import annotations

from typing import Callable, Optional

from .ast import Node, NodeKind
from .errors import ParseError, PascaletteError, SemanticError
from .scanner import Token, TokenKind
from .symtab import SymbolTable


# Tokens that can start a statement.
STATEMENT_STARTERS = frozenset({
    TokenKind.BEGIN, TokenKind.IDENTIFIER, TokenKind.REPEAT, TokenKind.WRITE,
    TokenKind.WRITELN, TokenKind.WHILE, TokenKind.IF, TokenKind.FOR, TokenKind.CASE,
})

# Tokens that can immediately follow a statement; error recovery stops here.
STATEMENT_FOLLOWERS = frozenset({
    TokenKind.SEMICOLON, TokenKind.END, TokenKind.UNTIL, TokenKind.END_OF_FILE,
})

# Tokens in front of which an empty statement is read.
EMPTY_STATEMENT_FOLLOWERS = STATEMENT_FOLLOWERS | {TokenKind.ELSE}

BLOCK_TERMINATORS = frozenset({TokenKind.END, TokenKind.UNTIL})

HEADER_FOLLOWERS = frozenset({TokenKind.BEGIN})

CASE_CONSTANT_STARTERS = frozenset({
    TokenKind.INTEGER, TokenKind.CHARACTER, TokenKind.MINUS,
})

RELATIONAL_OPERATORS = {
    TokenKind.EQUALS: NodeKind.EQ,
    TokenKind.LESS_THAN: NodeKind.LT,
    TokenKind.LESS_EQUALS: NodeKind.LE,
    TokenKind.GREATER_THAN: NodeKind.GT,
    TokenKind.GREATER_EQUALS: NodeKind.GE,
    TokenKind.NOT_EQUALS: NodeKind.NE,
}

SIMPLE_EXPRESSION_OPERATORS = {
    TokenKind.PLUS: NodeKind.ADD,
    TokenKind.MINUS: NodeKind.SUBTRACT,
}

TERM_OPERATORS = {
    TokenKind.STAR: NodeKind.MULTIPLY,
    TokenKind.SLASH: NodeKind.DIVIDE,
    TokenKind.AND: NodeKind.AND,
    TokenKind.OR: NodeKind.OR,
}


class Parser:
    def __init__(self, scanner, symtab: SymbolTable, strict: bool = False,
                 report: Optional[Callable[[str], None]] = None):
        self.scanner = scanner
        self.symtab = symtab
        self.strict = strict
        self._report = report or print
        self._errors = 0
        self.current: Token = scanner.next_token()

    @property
    def error_count(self) -> int:
        """Errors reported so far, including the token stream's own."""
        return self._errors + getattr(self.scanner, 'error_count', 0)

    # Token handling

    def match(self, *kinds: TokenKind) -> bool:
        return self.current.kind in kinds

    def advance(self) -> Token:
        token = self.current
        self.current = self.scanner.next_token()
        return token

    def consume(self, kind: TokenKind, message: str) -> Token:
        if self.current.kind is not kind:
            raise self.syntax_error(message)
        return self.advance()

    def expect(self, kind: TokenKind, message: str) -> bool:
        """Like consume, but report a mismatch instead of raising."""
        if self.current.kind is kind:
            self.advance()
            return True
        self.report(self.syntax_error(message))
        return False

    # Error handling

    def syntax_error(self, message: str) -> ParseError:
        return ParseError(self.current.line, message, self.current.text)

    def report(self, error: PascaletteError):
        self._errors += 1
        self._report(error.diagnostic)

    def recover(self, error: ParseError, followers=STATEMENT_FOLLOWERS):
        self.report(error)
        while self.current.kind not in followers and self.current.kind is not TokenKind.END_OF_FILE:
            self.advance()

    # Program and statements

    def parse_program(self) -> Node:
        program = Node(NodeKind.PROGRAM, self.current.line)
        try:
            self.consume(TokenKind.PROGRAM, 'Expecting PROGRAM')
            name = self.consume(TokenKind.IDENTIFIER, 'Expecting program name')
            program.text = name.text
            self.symtab.enter(name.text)
            self.consume(TokenKind.SEMICOLON, 'Missing ;')
        except ParseError as err:
            self.recover(err, HEADER_FOLLOWERS)

        compound = Node(NodeKind.COMPOUND, self.current.line)
        if not self.expect(TokenKind.BEGIN, 'Expecting BEGIN') and self.match(TokenKind.END_OF_FILE):
            program.adopt(compound)
            return program
        self.parse_statement_list(compound, TokenKind.END)
        self.expect(TokenKind.END, 'Expecting END')
        program.adopt(compound)
        self.expect(TokenKind.PERIOD, 'Expecting .')
        return program

    def parse_statement_list(self, parent: Node, terminator: TokenKind):
        while not self.match(terminator, TokenKind.END_OF_FILE):
            # Leave a terminator that belongs to an enclosing construct to it.
            if self.match(*BLOCK_TERMINATORS):
                break
            try:
                statement = self.parse_statement()
            except ParseError as err:
                self.recover(err)
                statement = None
            if statement is not None:
                parent.adopt(statement)

            # A semicolon separates statements.
            if self.match(TokenKind.SEMICOLON):
                while self.match(TokenKind.SEMICOLON):
                    self.advance()
            elif self.match(*STATEMENT_STARTERS):
                self.report(self.syntax_error('Missing ;'))
            elif not self.match(terminator, TokenKind.END_OF_FILE, *BLOCK_TERMINATORS):
                # A stray token such as ELSE after a semicolon; skip it.
                self.recover(self.syntax_error('Unexpected token'))

    def parse_statement(self) -> Optional[Node]:
        kind = self.current.kind
        if kind is TokenKind.IDENTIFIER:
            return self.parse_assignment_statement()
        if kind is TokenKind.BEGIN:
            return self.parse_compound_statement()
        if kind is TokenKind.REPEAT:
            return self.parse_repeat_statement()
        if kind is TokenKind.WRITE:
            return self.parse_write_statement()
        if kind is TokenKind.WRITELN:
            return self.parse_writeln_statement()
        if kind is TokenKind.WHILE:
            return self.parse_while_statement()
        if kind is TokenKind.FOR:
            return self.parse_for_statement()
        if kind is TokenKind.IF:
            return self.parse_if_statement()
        if kind is TokenKind.CASE:
            return self.parse_case_statement()
        if kind in EMPTY_STATEMENT_FOLLOWERS:
            return None
        raise self.syntax_error('Unexpected token')

    def parse_branch(self) -> Node:
        """A statement in a THEN, ELSE, DO or CASE branch; never None."""
        line = self.current.line
        statement = self.parse_statement()
        if statement is None:
            return Node(NodeKind.COMPOUND, line)
        return statement

    def parse_assignment_statement(self) -> Node:
        assign = Node(NodeKind.ASSIGN, self.current.line)
        assign.adopt(self.parse_variable(assigned=True))
        self.consume(TokenKind.COLON_EQUALS, 'Missing :=')
        assign.adopt(self.parse_expression())
        return assign

    def parse_compound_statement(self) -> Node:
        compound = Node(NodeKind.COMPOUND, self.current.line)
        self.advance()  # BEGIN
        self.parse_statement_list(compound, TokenKind.END)
        self.expect(TokenKind.END, 'Expecting END')
        return compound

    def parse_repeat_statement(self) -> Node:
        loop = Node(NodeKind.LOOP, self.current.line)
        self.advance()  # REPEAT
        self.parse_statement_list(loop, TokenKind.UNTIL)

        test = Node(NodeKind.TEST, self.current.line)
        self.consume(TokenKind.UNTIL, 'Expecting UNTIL')
        test.adopt(self.parse_expression())
        loop.adopt(test)
        return loop

    def parse_while_statement(self) -> Node:
        loop = Node(NodeKind.LOOP, self.current.line)
        self.advance()  # WHILE

        # Loop until the condition no longer holds.
        test = Node(NodeKind.TEST, self.current.line)
        negation = Node(NodeKind.NOT, self.current.line, 'NOT')
        negation.adopt(self.parse_expression())
        test.adopt(negation)
        loop.adopt(test)

        self.consume(TokenKind.DO, 'Expecting DO')
        loop.adopt(self.parse_branch())
        return loop

    def parse_for_statement(self) -> Node:
        line = self.current.line
        self.advance()  # FOR

        compound = Node(NodeKind.COMPOUND, line)
        initial = self.parse_assignment_statement()
        control = initial.children[0]
        compound.adopt(initial)

        if self.match(TokenKind.TO):
            comparison, step = NodeKind.GT, NodeKind.ADD
        elif self.match(TokenKind.DOWNTO):
            comparison, step = NodeKind.LT, NodeKind.SUBTRACT
        else:
            raise self.syntax_error('Expecting TO or DOWNTO')
        direction = self.advance()

        loop = Node(NodeKind.LOOP, line)
        test = Node(NodeKind.TEST, direction.line)
        limit = Node(comparison, direction.line, '>' if comparison is NodeKind.GT else '<')
        limit.adopt(self.copy_variable(control))
        limit.adopt(self.parse_expression())
        test.adopt(limit)
        loop.adopt(test)

        self.consume(TokenKind.DO, 'Expecting DO')
        loop.adopt(self.parse_branch())

        increment = Node(NodeKind.ASSIGN, line)
        increment.adopt(self.copy_variable(control))
        operation = Node(step, line, '+' if step is NodeKind.ADD else '-')
        operation.adopt(self.copy_variable(control))
        operation.adopt(Node(NodeKind.INTEGER_CONSTANT, line, '1', 1))
        increment.adopt(operation)
        loop.adopt(increment)

        compound.adopt(loop)
        return compound

    def parse_if_statement(self) -> Node:
        node = Node(NodeKind.IF, self.current.line)
        self.advance()  # IF
        node.adopt(self.parse_expression())
        self.consume(TokenKind.THEN, 'Expecting THEN')
        node.adopt(self.parse_branch())
        if self.match(TokenKind.ELSE):
            self.advance()
            node.adopt(self.parse_branch())
        return node

    def parse_case_statement(self) -> Node:
        select = Node(NodeKind.SELECT, self.current.line)
        self.advance()  # CASE
        select.adopt(self.parse_expression())
        self.consume(TokenKind.OF, 'Missing OF')

        while not self.match(TokenKind.END, TokenKind.UNTIL, TokenKind.END_OF_FILE):
            try:
                select.adopt(self.parse_case_branch())
            except ParseError as err:
                # Resume with the next branch.
                self.recover(err)
            if self.match(TokenKind.SEMICOLON):
                while self.match(TokenKind.SEMICOLON):
                    self.advance()
            elif self.match(*CASE_CONSTANT_STARTERS):
                self.report(self.syntax_error('Missing ;'))

        self.expect(TokenKind.END, 'Expecting END')
        return select

    def parse_case_branch(self) -> Node:
        branch = Node(NodeKind.SELECT_BRANCH, self.current.line)
        constants = branch.adopt(Node(NodeKind.SELECT_CONSTANTS, self.current.line))
        constants.adopt(self.parse_case_constant())
        while self.match(TokenKind.COMMA):
            self.advance()
            constants.adopt(self.parse_case_constant())
        self.consume(TokenKind.COLON, 'Expecting :')
        branch.adopt(self.parse_branch())
        return branch

    def parse_case_constant(self) -> Node:
        message = 'Invalid case constant. Must be character or integer'
        if self.match(TokenKind.INTEGER):
            return self.parse_integer_constant(message)
        if self.match(TokenKind.CHARACTER):
            return self.parse_string_constant()
        if self.match(TokenKind.MINUS):
            sign = self.advance()
            negate = Node(NodeKind.NEGATE, sign.line, sign.text)
            negate.adopt(self.parse_integer_constant(message))
            return negate
        raise self.syntax_error(message)

    def parse_write_statement(self) -> Node:
        node = Node(NodeKind.WRITE, self.current.line)
        self.advance()  # WRITE
        self.parse_write_arguments(node, required=True)
        return node

    def parse_writeln_statement(self) -> Node:
        node = Node(NodeKind.WRITELN, self.current.line)
        self.advance()  # WRITELN
        if self.match(TokenKind.LPAREN):
            self.parse_write_arguments(node, required=False)
        return node

    def parse_write_arguments(self, node: Node, required: bool):
        self.consume(TokenKind.LPAREN, 'Missing left parenthesis')

        if self.match(TokenKind.IDENTIFIER):
            node.adopt(self.parse_variable())
        elif self.match(TokenKind.CHARACTER, TokenKind.STRING):
            node.adopt(self.parse_string_constant())
        elif required or not self.match(TokenKind.RPAREN):
            raise self.syntax_error('Invalid WRITE or WRITELN statement')

        # Optional field width and count of decimal places.
        if node.children and self.match(TokenKind.COLON):
            self.advance()
            node.adopt(self.parse_integer_constant('Invalid field width'))
            if self.match(TokenKind.COLON):
                self.advance()
                node.adopt(self.parse_integer_constant('Invalid count of decimal places'))

        self.consume(TokenKind.RPAREN, 'Missing right parenthesis')

    # Expressions

    def parse_expression(self) -> Node:
        node = self.parse_simple_expression()
        if self.current.kind in RELATIONAL_OPERATORS:
            operator = self.advance()
            relation = Node(RELATIONAL_OPERATORS[operator.kind], operator.line, operator.text)
            relation.adopt(node)
            relation.adopt(self.parse_simple_expression())
            node = relation
        return node

    def parse_simple_expression(self) -> Node:
        node = self.parse_term()
        while self.current.kind in SIMPLE_EXPRESSION_OPERATORS:
            operator = self.advance()
            operation = Node(SIMPLE_EXPRESSION_OPERATORS[operator.kind], operator.line, operator.text)
            operation.adopt(node)
            operation.adopt(self.parse_term())
            node = operation
        return node

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while self.current.kind in TERM_OPERATORS:
            operator = self.advance()
            operation = Node(TERM_OPERATORS[operator.kind], operator.line, operator.text)
            operation.adopt(node)
            operation.adopt(self.parse_factor())
            node = operation
        return node

    def parse_factor(self) -> Node:
        kind = self.current.kind
        if kind is TokenKind.IDENTIFIER:
            return self.parse_variable()
        if kind is TokenKind.INTEGER:
            return self.parse_integer_constant('Expecting integer')
        if kind is TokenKind.REAL:
            token = self.advance()
            return Node(NodeKind.REAL_CONSTANT, token.line, token.text, token.literal)
        if kind is TokenKind.MINUS:
            sign = self.advance()
            negate = Node(NodeKind.NEGATE, sign.line, sign.text)
            negate.adopt(self.parse_factor())
            return negate
        if kind is TokenKind.NOT:
            token = self.advance()
            negation = Node(NodeKind.NOT, token.line, token.text)
            negation.adopt(self.parse_expression())
            return negation
        if kind is TokenKind.LPAREN:
            self.advance()
            node = self.parse_expression()
            self.consume(TokenKind.RPAREN, 'Expecting )')
            return node
        raise self.syntax_error('Unexpected token in expression')

    def parse_variable(self, assigned: bool = False) -> Node:
        token = self.consume(TokenKind.IDENTIFIER, 'Expecting identifier')
        entry = self.symtab.lookup(token.text)
        if entry is None:
            # Stricter variants require a name to be assigned before it is read.
            if self.strict and not assigned:
                self.report(SemanticError(token.line, 'Undeclared identifier', token.text))
            entry = self.symtab.enter(token.text)
        return Node(NodeKind.VARIABLE, token.line, token.text, entry=entry)

    def copy_variable(self, variable: Node) -> Node:
        return Node(NodeKind.VARIABLE, variable.line, variable.text, entry=variable.entry)

    def parse_integer_constant(self, message: str) -> Node:
        token = self.consume(TokenKind.INTEGER, message)
        return Node(NodeKind.INTEGER_CONSTANT, token.line, token.text, token.literal)

    def parse_string_constant(self) -> Node:
        token = self.advance()
        return Node(NodeKind.STRING_CONSTANT, token.line, token.text, token.literal)
