#!/usr/bin/env python3
"""
Example custom printers for astfuzz.

This file demonstrates how to create printers that turn a generated tree
into the source text handed to the tool under test. Each printer is a
function that takes the root Node and returns a string. Printers must be
deterministic: the minimizer relies on the same tree always printing the
same way.

To use these printers:
  python -m astfuzz config.json --printers custom_printers.py

Then in your config.json, use:
  "printer": "python_dump"
"""

import ast
import json

from astfuzz.nodes import Node
from astfuzz.printers import to_python_ast


# Use the decorator to register printers
# (PrinterRegistry and register_printer are injected by astfuzz when loading)

@register_printer("python_dump")
def print_python_dump(tree: Node) -> str:
    """Print the tree as an ``ast.dump`` expression.

    Handy for tools that consume AST dumps rather than source code.
    """
    module = ast.fix_missing_locations(to_python_ast(tree))
    return ast.dump(module, indent=1)


@register_printer("compact_json")
def print_compact_json(tree: Node) -> str:
    """Single-line JSON, keys in generation order."""
    return json.dumps(tree.to_dict(), separators=(',', ':'))


@register_printer("python_with_header")
def print_with_header(tree: Node) -> str:
    """Python source with a fixed header comment line."""
    return "# generated by astfuzz\n" + ast.unparse(ast.fix_missing_locations(to_python_ast(tree)))
