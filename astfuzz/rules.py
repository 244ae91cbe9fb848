"""Grammar rule model and loading.

A grammar is an ordered table mapping type names to rule specs. Keys that
start with ``$`` are alias groups rather than concrete node types:

- ``"$Name": [{...}, {...}]`` - one type name with several field blocks
- ``"$Name": {"A": {...}, "B": {...}}`` - a collection of other types

Field rules are either a type name (``"Expression"``, ``"string"``...) or
one of the combinator objects built by the helpers at the bottom of this
module (``literal``, ``one_of``, ``array_of``...).
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


ALIAS_MARKER = '$'
PRIMITIVES = ('boolean', 'number', 'string', 'regexp')
BUILTIN_GRAMMARS = {
    'python': Path(__file__).parent / 'grammars' / 'python.json',
}


class GrammarError(ValueError):
    """Raised when a grammar is malformed or references unknown types."""


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Choice:
    options: Tuple['Rule', ...]


@dataclass(frozen=True)
class ArrayRule:
    element: 'Rule'
    non_empty: bool = False
    trailing: Optional['Rule'] = None


@dataclass(frozen=True)
class TypeRef:
    name: str


Rule = Union[Literal, Choice, ArrayRule, TypeRef]


@dataclass
class NodeRule:
    """A concrete node type: field name -> rule, in declaration order."""
    name: str
    fields: Dict[str, Rule]


@dataclass
class VariantAlias:
    """One type name with several alternative field blocks."""
    name: str
    variants: List[NodeRule]


@dataclass
class NestedAlias:
    """A type name standing for a collection of other definitions."""
    name: str
    members: Dict[str, 'Definition']


Definition = Union[NodeRule, VariantAlias, NestedAlias]


@dataclass
class Grammar:
    """Parsed grammar: top-level definitions in declaration order."""
    definitions: Dict[str, Definition]

    def __contains__(self, name: str) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)

    @property
    def names(self) -> List[str]:
        return list(self.definitions.keys())


def parse_rule(spec: Any, where: str) -> Rule:
    """Parse a single field rule spec."""
    if isinstance(spec, str):
        if not spec:
            raise GrammarError(f"Empty type reference at '{where}'")
        return TypeRef(spec)

    if not isinstance(spec, dict) or 'type' not in spec:
        raise GrammarError(f"Invalid rule at '{where}': {spec!r}")

    kind = spec['type']
    if kind == 'literal':
        if 'literal' not in spec:
            raise GrammarError(f"Literal rule at '{where}' has no 'literal' value")
        return Literal(spec['literal'])

    if kind == 'choice':
        options = spec.get('of')
        if not isinstance(options, list) or not options:
            raise GrammarError(f"Choice rule at '{where}' needs a non-empty 'of' list")
        return Choice(tuple(parse_rule(opt, f"{where}[{i}]") for i, opt in enumerate(options)))

    if kind == 'array':
        if 'of' not in spec:
            raise GrammarError(f"Array rule at '{where}' has no 'of' rule")
        trailing = spec.get('trailing')
        return ArrayRule(
            element=parse_rule(spec['of'], f"{where}.of"),
            non_empty=bool(spec.get('nonEmpty', False)),
            trailing=parse_rule(trailing, f"{where}.trailing") if trailing is not None else None,
        )

    raise GrammarError(f"Unknown rule type '{kind}' at '{where}'")


def _parse_fields(name: str, spec: Any, where: str) -> NodeRule:
    if not isinstance(spec, dict):
        raise GrammarError(f"Node rule '{where}' must map field names to rules")
    fields = {key: parse_rule(rule, f"{where}.{key}") for key, rule in spec.items()}
    return NodeRule(name, fields)


def parse_definition(key: str, spec: Any, where: str = '') -> Definition:
    """Parse one table entry, honoring the alias marker."""
    where = f"{where}.{key}" if where else key
    if not key.startswith(ALIAS_MARKER):
        return _parse_fields(key, spec, where)

    name = key[len(ALIAS_MARKER):]
    if not name:
        raise GrammarError(f"Alias '{where}' has no type name")

    if isinstance(spec, list):
        if not spec:
            raise GrammarError(f"Alias '{where}' declares no variants")
        return VariantAlias(name, [
            _parse_fields(name, block, f"{where}[{i}]") for i, block in enumerate(spec)
        ])

    if isinstance(spec, dict):
        return NestedAlias(name, _parse_table(spec, where))

    raise GrammarError(f"Alias '{where}' must be a list of variants or a table of types")


def _parse_table(table: Dict[str, Any], where: str = '') -> Dict[str, Definition]:
    if not table:
        raise GrammarError(f"Grammar table '{where or '<root>'}' is empty")

    definitions: Dict[str, Definition] = {}
    for key, spec in table.items():
        definition = parse_definition(key, spec, where)
        if definition.name in definitions:
            raise GrammarError(f"Type '{definition.name}' is defined twice in '{where or '<root>'}'")
        definitions[definition.name] = definition
    return definitions


def parse_grammar(table: Dict[str, Any]) -> Grammar:
    """Parse a raw grammar table into rule objects."""
    if not isinstance(table, dict):
        raise GrammarError("Grammar must be a mapping of type names to rules")
    return Grammar(_parse_table(table))


def load_grammar(source: Union[str, Path], validator=None) -> Grammar:
    """Load a grammar by built-in name or from a JSON file.

    Args:
        source: Built-in grammar name (e.g. 'python') or path to a JSON file
        validator: Optional SchemaValidator used to check the file first
    """
    path = BUILTIN_GRAMMARS.get(str(source), Path(source))
    if not path.exists():
        available = ', '.join(sorted(BUILTIN_GRAMMARS))
        raise GrammarError(f"Grammar '{source}' not found (built-in: {available})")

    if validator is not None:
        table = validator.validate(path)
    else:
        with open(path, 'r', encoding='utf-8') as f:
            table = json.load(f)
    return parse_grammar(table)


# Shortcuts for writing grammars in Python

def literal(value: Any) -> Dict[str, Any]:
    return {'type': 'literal', 'literal': value}


def one_of(*of: Any) -> Dict[str, Any]:
    return {'type': 'choice', 'of': list(of)}


def nullable(of: Any) -> Dict[str, Any]:
    return one_of(literal(None), of)


def array_of(of: Any, trailing: Any = None, non_empty: bool = False) -> Dict[str, Any]:
    spec = {'type': 'array', 'of': of}
    if non_empty:
        spec['nonEmpty'] = True
    if trailing is not None:
        spec['trailing'] = trailing
    return spec


def non_empty_array_of(of: Any) -> Dict[str, Any]:
    return array_of(of, non_empty=True)
