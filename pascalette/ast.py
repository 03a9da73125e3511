"""Abstract Syntax Tree (AST) definitions for Pascalette.

A parsed program is a single tree of ``Node`` objects rooted at a
``PROGRAM`` node. Every node carries its ``kind``; the kind fixes how many
children the node has and what they are:

==================  ===============================================
Kind                Children
==================  ===============================================
PROGRAM             COMPOUND
COMPOUND            statement*
ASSIGN              VARIABLE, expression
LOOP                (statement | TEST)*  (at least one TEST)
TEST                expression
NOT                 expression
WRITE, WRITELN      [VARIABLE | STRING_CONSTANT [, INTEGER_CONSTANT
                    [, INTEGER_CONSTANT]]]  (WRITE needs the argument)
IF                  expression, statement [, statement]
SELECT              expression, SELECT_BRANCH*
SELECT_BRANCH       SELECT_CONSTANTS, statement
SELECT_CONSTANTS    (INTEGER_CONSTANT | STRING_CONSTANT | NEGATE)*
NEGATE              expression
ADD ... OR          expression, expression
VARIABLE, *_CONST   none
==================  ===============================================

Variable nodes hold a reference to their symbol-table entry. The entry
never points back at the tree, so the tree and the table can be dropped
independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .symtab import SymtabEntry


class NodeKind(Enum):
    PROGRAM = 'PROGRAM'
    COMPOUND = 'COMPOUND'
    ASSIGN = 'ASSIGN'
    LOOP = 'LOOP'
    TEST = 'TEST'
    NOT = 'NOT'
    WRITE = 'WRITE'
    WRITELN = 'WRITELN'
    IF = 'IF'
    SELECT = 'SELECT'
    SELECT_BRANCH = 'SELECT_BRANCH'
    SELECT_CONSTANTS = 'SELECT_CONSTANTS'
    NEGATE = 'NEGATE'
    ADD = 'ADD'
    SUBTRACT = 'SUBTRACT'
    MULTIPLY = 'MULTIPLY'
    DIVIDE = 'DIVIDE'
    EQ = 'EQ'
    LT = 'LT'
    LE = 'LE'
    GT = 'GT'
    GE = 'GE'
    NE = 'NE'
    AND = 'AND'
    OR = 'OR'
    VARIABLE = 'VARIABLE'
    INTEGER_CONSTANT = 'INTEGER_CONSTANT'
    REAL_CONSTANT = 'REAL_CONSTANT'
    STRING_CONSTANT = 'STRING_CONSTANT'


STATEMENT_KINDS = frozenset({
    NodeKind.COMPOUND, NodeKind.ASSIGN, NodeKind.LOOP, NodeKind.WRITE,
    NodeKind.WRITELN, NodeKind.IF, NodeKind.SELECT,
})

RELATIONAL_KINDS = frozenset({
    NodeKind.EQ, NodeKind.LT, NodeKind.LE, NodeKind.GT, NodeKind.GE, NodeKind.NE,
})

ARITHMETIC_KINDS = frozenset({
    NodeKind.ADD, NodeKind.SUBTRACT, NodeKind.MULTIPLY, NodeKind.DIVIDE,
})

CONSTANT_KINDS = frozenset({
    NodeKind.INTEGER_CONSTANT, NodeKind.REAL_CONSTANT, NodeKind.STRING_CONSTANT,
})


@dataclass
class Node:
    """A node of the program tree.

    Equality is structural: two nodes are equal when kind, line, text,
    literal and children are equal. The symbol entry is left out of the
    comparison; the variable's name is in ``text``.
    """
    kind: NodeKind
    line: int = 0
    text: Optional[str] = None
    literal: Any = None
    entry: Optional[SymtabEntry] = field(default=None, compare=False, repr=False)
    children: List['Node'] = field(default_factory=list)

    def adopt(self, child: 'Node') -> 'Node':
        self.children.append(child)
        return child

    def walk(self):
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()
