"""Generated syntax tree nodes."""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Node:
    """A generated node: a type name plus ordered field values.

    Field values are other nodes, primitives, compiled regexes or lists of
    those. A field literally named ``type`` overrides the node type in the
    dumped form, which lets a grammar reuse one shape under another name.
    """
    type: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        """The effective node type (honors a ``type`` field)."""
        kind = self.fields.get('type', self.type)
        return kind if isinstance(kind, str) else self.type

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def to_dict(self) -> Dict[str, Any]:
        result = {'type': self.type}
        for name, value in self.fields.items():
            result[name] = _plain(value)
        return result


def _plain(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_tree(tree: Any, indent: Optional[int] = None) -> str:
    """Structural dump of a generated tree as JSON."""
    return json.dumps(_plain(tree), indent=indent, default=_json_default)
