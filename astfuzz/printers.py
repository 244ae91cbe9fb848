"""Built-in printers."""

import ast
from typing import Any

from .nodes import Node, dump_tree
from .registry import register_printer


def to_python_ast(value: Any) -> Any:
    """Convert a generated tree into ``ast`` objects.

    Node kinds must name ``ast`` classes; lists and primitives pass through.
    """
    if isinstance(value, Node):
        cls = getattr(ast, value.kind, None)
        if not (isinstance(cls, type) and issubclass(cls, ast.AST)):
            raise ValueError(f"'{value.kind}' is not a Python AST node type")
        kwargs = {name: to_python_ast(field) for name, field in value.fields.items() if name != 'type'}
        return cls(**kwargs)

    if isinstance(value, list):
        return [to_python_ast(item) for item in value]

    return value


@register_printer("python")
def print_python(tree: Node) -> str:
    module = ast.fix_missing_locations(to_python_ast(tree))
    return ast.unparse(module)


@register_printer("json")
def print_json(tree: Node) -> str:
    return dump_tree(tree, indent=2)
