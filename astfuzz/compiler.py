"""Grammar compilation into generator factories."""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config import DEFAULT_MAX_DEPTH, DEFAULT_STRINGS
from .nodes import Node
from .random_source import RandomSource
from .rules import (
    ArrayRule, Choice, Definition, Grammar, GrammarError, Literal, NestedAlias,
    NodeRule, Rule, TypeRef, VariantAlias,
)
from .values import (
    ArrayFactory, BooleanFactory, ChoiceFactory, ExpansionDepth, Factory,
    LiteralFactory, NumberFactory, RegexpFactory, StringFactory,
)


class NodeFactory(Factory):
    """Builds one node by generating each field in declared order."""

    def __init__(self, name: str, fields: List[Tuple[str, Factory]], depth: ExpansionDepth):
        self.name = name
        self.fields = fields
        self.depth = depth

    def generate(self, random: RandomSource) -> Node:
        values = {}
        for field_name, factory in self.fields:
            values[field_name] = self.depth.call(factory, random)
        return Node(self.name, values)


class VariantFactory(Factory):
    """Picks one of several field blocks for the same type name."""

    def __init__(self, name: str, variants: List[NodeFactory]):
        self.name = name
        self.variants = variants

    def generate(self, random: RandomSource) -> Node:
        return self.variants[random.choice(len(self.variants))].generate(random)


class NestedFactory(Factory):
    """Picks one member type of an alias group."""

    def __init__(self, name: str, members: Dict[str, Factory]):
        self.name = name
        self.members = members
        self._order = list(members.values())

    def generate(self, random: RandomSource) -> Any:
        return self._order[random.choice(len(self._order))].generate(random)


class ReferenceFactory(Factory):
    """A type reference, bound to its target once compilation finishes."""

    def __init__(self, name: str, where: str):
        self.name = name
        self.where = where
        self.target: Optional[Factory] = None

    def generate(self, random: RandomSource) -> Any:
        return self.target.generate(random)


class FactoryRegistry(Mapping):
    """Ordered mapping of type name -> compiled factory."""

    def __init__(self, depth: ExpansionDepth):
        self.depth = depth
        self._factories: Dict[str, Factory] = {}

    def add(self, name: str, factory: Factory) -> None:
        self._factories[name] = factory

    def __getitem__(self, name: str) -> Factory:
        return self._factories[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)


class GrammarCompiler:
    """Compiles a parsed grammar into a FactoryRegistry.

    Type references are checked at compile time: a grammar that names an
    unknown type fails here rather than halfway through a fuzzing run.
    """

    def __init__(self, strings: Optional[List[str]] = None, max_depth: int = DEFAULT_MAX_DEPTH):
        self.strings = list(strings) if strings is not None else list(DEFAULT_STRINGS)
        self.max_depth = max_depth
        self._depth: Optional[ExpansionDepth] = None
        self._references: List[ReferenceFactory] = []

    def compile(self, grammar: Grammar) -> FactoryRegistry:
        self._depth = ExpansionDepth(self.max_depth)
        self._references = []

        registry = FactoryRegistry(self._depth)
        for name, definition in grammar.definitions.items():
            registry.add(name, self._compile_definition(definition, name))

        self._bind_references(registry)
        return registry

    def _primitives(self) -> Dict[str, Factory]:
        strings = StringFactory(self.strings)
        return {
            'boolean': BooleanFactory(),
            'number': NumberFactory(),
            'string': strings,
            'regexp': RegexpFactory(strings),
        }

    def _bind_references(self, registry: FactoryRegistry) -> None:
        primitives = self._primitives()
        for ref in self._references:
            target = registry.get(ref.name)
            if target is None:
                target = primitives.get(ref.name)
            if target is None:
                raise GrammarError(f"Unknown type '{ref.name}' referenced from '{ref.where}'")
            ref.target = target

    def _compile_definition(self, definition: Definition, where: str) -> Factory:
        if isinstance(definition, NodeRule):
            return self._compile_node(definition, where)

        if isinstance(definition, VariantAlias):
            if not definition.variants:
                raise GrammarError(f"Alias '{where}' declares no variants")
            return VariantFactory(definition.name, [
                self._compile_node(variant, f"{where}[{i}]")
                for i, variant in enumerate(definition.variants)
            ])

        if isinstance(definition, NestedAlias):
            if not definition.members:
                raise GrammarError(f"Alias '{where}' declares no member types")
            return NestedFactory(definition.name, {
                name: self._compile_definition(member, f"{where}.{name}")
                for name, member in definition.members.items()
            })

        raise GrammarError(f"Unsupported definition at '{where}': {definition!r}")

    def _compile_node(self, rule: NodeRule, where: str) -> NodeFactory:
        fields = [
            (name, self._compile_rule(field_rule, f"{where}.{name}"))
            for name, field_rule in rule.fields.items()
        ]
        return NodeFactory(rule.name, fields, self._depth)

    def _compile_rule(self, rule: Rule, where: str) -> Factory:
        if isinstance(rule, Literal):
            return LiteralFactory(rule.value)

        if isinstance(rule, TypeRef):
            ref = ReferenceFactory(rule.name, where)
            self._references.append(ref)
            return ref

        if isinstance(rule, Choice):
            if not rule.options:
                raise GrammarError(f"Choice at '{where}' has no options")
            return ChoiceFactory([
                self._compile_rule(option, f"{where}[{i}]")
                for i, option in enumerate(rule.options)
            ], self._depth)

        if isinstance(rule, ArrayRule):
            trailing = None
            if rule.trailing is not None:
                trailing = self._compile_rule(rule.trailing, f"{where}.trailing")
            return ArrayFactory(
                self._compile_rule(rule.element, f"{where}.of"),
                self._depth,
                non_empty=rule.non_empty,
                trailing=trailing,
            )

        raise GrammarError(f"Unsupported rule at '{where}': {rule!r}")


def compile_grammar(grammar: Grammar, strings: Optional[List[str]] = None,
                    max_depth: int = DEFAULT_MAX_DEPTH) -> FactoryRegistry:
    """Shortcut for GrammarCompiler(strings, max_depth).compile(grammar)."""
    return GrammarCompiler(strings, max_depth).compile(grammar)
