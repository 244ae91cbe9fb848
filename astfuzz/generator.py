"""Syntax tree generation."""

import random
from typing import Optional, Tuple

from .compiler import FactoryRegistry
from .nodes import Node
from .random_source import RandomSource, RecordingRandom
from .rules import GrammarError


class Generator:
    """Generates syntax trees for one root type of a compiled grammar."""

    def __init__(self, registry: FactoryRegistry, root: str):
        if root not in registry:
            available = ', '.join(registry)
            raise GrammarError(f"Root type '{root}' is not defined. Available: {available}")
        self.registry = registry
        self.root = root

    @property
    def max_depth(self) -> int:
        return self.registry.depth.limit

    def generate(self, random: RandomSource) -> Node:
        """Generate a tree, drawing every decision from ``random``."""
        self.registry.depth.reset()
        return self.registry[self.root].generate(random)

    def generate_recorded(self, rng: Optional[random.Random] = None) -> Tuple[Node, RecordingRandom]:
        """Generate a fresh tree and return it with the recording source."""
        recording = RecordingRandom(rng)
        return self.generate(recording), recording
