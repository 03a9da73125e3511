"""JSON serialization/deserialization for the Pascalette AST.

This module converts between program trees and plain Python dict/list
structures suitable for JSON encoding. Symbol-table entries are not
serialized: a Variable node is stored by name and rebound to an entry of
the given symbol table when the tree is loaded.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .ast import Node, NodeKind
from .symtab import SymbolTable


def ast_to_obj(node: Node) -> Dict[str, Any]:
    return {
        "kind": node.kind.value,
        "line": node.line,
        "text": node.text,
        "literal": node.literal,
        "children": [ast_to_obj(child) for child in node.children],
    }


def ast_from_obj(obj: Dict[str, Any], symtab: Optional[SymbolTable] = None) -> Node:
    if symtab is None:
        symtab = SymbolTable()
    if not isinstance(obj, dict):
        raise ValueError(f"not a Pascalette AST node: {obj!r}")
    try:
        kind = NodeKind(obj["kind"])
    except (KeyError, ValueError, TypeError):
        raise ValueError(f"not a Pascalette AST node: {obj!r}")
    node = Node(kind, obj.get("line", 0), obj.get("text"), obj.get("literal"))
    if kind is NodeKind.VARIABLE:
        node.entry = symtab.enter(node.text)
    elif kind is NodeKind.PROGRAM and node.text:
        symtab.enter(node.text)
    for child in obj.get("children", []):
        node.adopt(ast_from_obj(child, symtab))
    return node
