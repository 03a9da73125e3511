"""Tree-walking executor for Pascalette.

The executor makes one depth-first pass over a parsed program. Statement
nodes are executed for their side effects; expression nodes evaluate to a
runtime value (``float``, ``bool`` or ``str``, see ``pascalette.types``).
Variables are read and written through the symbol-table entries bound by
the parser.

Division by zero raises ``ExecutionError`` and ends the run.
"""

from __future__ import annotations

import operator
from typing import Callable, List, Optional, TextIO

from .ast import (
    ARITHMETIC_KINDS, CONSTANT_KINDS, RELATIONAL_KINDS, STATEMENT_KINDS,
    Node, NodeKind,
)
from .errors import ExecutionError
from .types import RuntimeValue, expect_boolean, expect_real, format_value, same_value


RELATIONAL_OPERATIONS = {
    NodeKind.EQ: operator.eq,
    NodeKind.LT: operator.lt,
    NodeKind.LE: operator.le,
    NodeKind.GT: operator.gt,
    NodeKind.GE: operator.ge,
    NodeKind.NE: operator.ne,
}

ARITHMETIC_OPERATIONS = {
    NodeKind.ADD: operator.add,
    NodeKind.SUBTRACT: operator.sub,
    NodeKind.MULTIPLY: operator.mul,
}


class Executor:
    """Executes a program tree."""
    def __init__(self, out: Optional[TextIO] = None,
                 debug: Optional[Callable[[int, str], None]] = None):
        self.out = out
        self.line = 0
        self._debug = debug

    def debug(self, level: int, msg: str):
        if self._debug is not None:
            self._debug(level, msg)

    # Public API
    def run(self, program: Node):
        if program.kind is not NodeKind.PROGRAM:
            raise TypeError(f"run: expected a PROGRAM node, got {program.kind}")
        self.visit(program)
        self.flush()

    def visit(self, node: Node) -> Optional[RuntimeValue]:
        if node.kind is NodeKind.PROGRAM or node.kind in STATEMENT_KINDS:
            self.execute(node)
            return None
        return self.evaluate(node)

    # Statements
    def execute(self, node: Node):
        kind = node.kind
        if kind is NodeKind.PROGRAM:
            self.execute(node.children[0])
            return
        self.line = node.line
        if kind is NodeKind.COMPOUND:
            for statement in node.children:
                self.visit(statement)
            return
        if kind is NodeKind.ASSIGN:
            target, expression = node.children
            value = expect_real(self.evaluate(expression), f"assignment to {target.text} at line {node.line}")
            target.entry.set_value(value)
            self.debug(2, f"assign {target.text} = {value}")
            return
        if kind is NodeKind.LOOP:
            self.execute_loop(node)
            return
        if kind is NodeKind.IF:
            condition = expect_boolean(self.evaluate(node.children[0]), f"IF at line {node.line}")
            self.debug(3, f"if condition at line {node.line} -> {condition}")
            if condition:
                self.visit(node.children[1])
            elif len(node.children) > 2:
                self.visit(node.children[2])
            return
        if kind is NodeKind.SELECT:
            self.execute_select(node)
            return
        if kind is NodeKind.WRITE:
            self.write(node.children)
            return
        if kind is NodeKind.WRITELN:
            if node.children:
                self.write(node.children)
            self.emit('\n')
            return
        raise NotImplementedError(f"execute: unexpected node kind {kind}")

    def execute_loop(self, node: Node):
        done = False
        while not done:
            for child in node.children:
                value = self.visit(child)
                # A true TEST ends the loop, wherever it sits in the body.
                if child.kind is NodeKind.TEST and value:
                    done = True
                    break

    def execute_select(self, node: Node):
        value = self.evaluate(node.children[0])
        for branch in node.children[1:]:
            constants, statement = branch.children
            if any(same_value(value, self.evaluate(constant)) for constant in constants.children):
                self.debug(3, f"case at line {node.line} selects branch at line {branch.line}")
                self.visit(statement)
                return
        self.debug(3, f"case at line {node.line} matched no branch")

    def write(self, arguments: List[Node]):
        width = None
        decimals = None
        # Use any specified field width and count of decimal places.
        if len(arguments) > 1:
            width = int(expect_real(self.evaluate(arguments[1]), 'field width'))
            if len(arguments) > 2:
                decimals = int(expect_real(self.evaluate(arguments[2]), 'decimal places'))
        text = format_value(self.evaluate(arguments[0]), width, decimals)
        self.debug(2, f"write {text!r}")
        self.emit(text)

    def emit(self, text: str):
        print(text, end='', file=self.out)

    def flush(self):
        print(end='', file=self.out, flush=True)

    # Expressions
    def evaluate(self, node: Node) -> RuntimeValue:
        kind = node.kind
        if kind is NodeKind.VARIABLE:
            return node.entry.get_value()
        if kind in CONSTANT_KINDS:
            if kind is NodeKind.STRING_CONSTANT:
                return node.literal
            # Integers are widened to Real.
            return float(node.literal)
        if kind is NodeKind.TEST:
            value = expect_boolean(self.evaluate(node.children[0]), f"loop test at line {node.line}")
            self.debug(3, f"loop test at line {node.line} -> {value}")
            return value
        if kind is NodeKind.NOT:
            return not expect_boolean(self.evaluate(node.children[0]), 'NOT')
        if kind is NodeKind.NEGATE:
            return -expect_real(self.evaluate(node.children[0]), 'negation')
        if kind is NodeKind.AND or kind is NodeKind.OR:
            # Both operands are always evaluated.
            first = expect_boolean(self.evaluate(node.children[0]), kind.value)
            second = expect_boolean(self.evaluate(node.children[1]), kind.value)
            return (first and second) if kind is NodeKind.AND else (first or second)
        if kind in RELATIONAL_KINDS:
            left, right = self.evaluate_operands(node)
            return RELATIONAL_OPERATIONS[kind](left, right)
        if kind in ARITHMETIC_KINDS:
            left, right = self.evaluate_operands(node)
            if kind is NodeKind.DIVIDE:
                if right == 0.0:
                    raise ExecutionError(self.line, 'Division by zero', node.text)
                return left / right
            return ARITHMETIC_OPERATIONS[kind](left, right)
        raise NotImplementedError(f"evaluate: unexpected node kind {kind}")

    def evaluate_operands(self, node: Node):
        context = f"{node.kind.value} at line {node.line}"
        left = expect_real(self.evaluate(node.children[0]), context)
        right = expect_real(self.evaluate(node.children[1]), context)
        return left, right
