"""Value factories for the primitive combinators."""

import random
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import rstr

from .random_source import RandomSource


class Factory(ABC):
    """Something that generates a value from a random source."""

    @abstractmethod
    def generate(self, random: RandomSource) -> Any:
        pass


class ExpansionDepth:
    """Nesting depth of rule expansions during one generation.

    Every field, choice option and array element counts as one level.
    Arrays stop growing once the limit is reached, which keeps
    self-recursive grammars finite.
    """

    def __init__(self, limit: int = 10):
        self.limit = limit
        self.value = 0

    def reset(self) -> None:
        self.value = 0

    @property
    def exhausted(self) -> bool:
        return self.value >= self.limit

    def call(self, factory: Factory, random: RandomSource) -> Any:
        self.value += 1
        try:
            return factory.generate(random)
        finally:
            self.value -= 1


class LiteralFactory(Factory):
    def __init__(self, value: Any):
        self.value = value

    def generate(self, random: RandomSource) -> Any:
        return self.value


class BooleanFactory(Factory):
    def generate(self, random: RandomSource) -> bool:
        return random.choice(2) > 0


class NumberFactory(Factory):
    def generate(self, random: RandomSource) -> int:
        return random.choice(10)


class StringFactory(Factory):
    """Picks one placeholder from a fixed pool."""

    def __init__(self, pool: List[str]):
        if not pool:
            raise ValueError("String pool must not be empty")
        self.pool = list(pool)

    def generate(self, random: RandomSource) -> str:
        return self.pool[random.choice(len(self.pool))]


class RegexpFactory(Factory):
    """Wraps a placeholder string in a compiled regular expression."""

    def __init__(self, strings: StringFactory):
        self.strings = strings

    def generate(self, random: RandomSource) -> 're.Pattern':
        return re.compile(re.escape(self.strings.generate(random)))


class ChoiceFactory(Factory):
    def __init__(self, options: List[Factory], depth: ExpansionDepth):
        self.options = options
        self.depth = depth

    def generate(self, random: RandomSource) -> Any:
        option = self.options[random.choice(len(self.options))]
        return self.depth.call(option, random)


class ArrayFactory(Factory):
    """Generates a list of elements.

    Each optional element lives in its own group so playback can drop it
    while leaving its siblings alone. The decision to continue the loop is
    made outside the group.
    """

    def __init__(self, element: Factory, depth: ExpansionDepth,
                 non_empty: bool = False, trailing: Optional[Factory] = None):
        self.element = element
        self.depth = depth
        self.non_empty = non_empty
        self.trailing = trailing

    def generate(self, random: RandomSource) -> List[Any]:
        result = []
        if self.non_empty:
            result.append(self.depth.call(self.element, random))

        if not self.depth.exhausted:
            while random.choice(4) > 0:
                if random.push():
                    result.append(self.depth.call(self.element, random))
                    random.pop()

        if self.trailing is not None and random.choice(4) == 3:
            if random.push():
                result.append(self.depth.call(self.trailing, random))
                random.pop()

        return result


def build_string_pool(pattern: str, size: int, seed: int = 0) -> List[str]:
    """Derive a fixed placeholder pool from a regex pattern.

    The pool is generated once with a seeded generator so recording and
    playback always see the same strings.
    """
    generator = rstr.Rstr(random.Random(seed))
    pool: List[str] = []
    attempts = 0
    while len(pool) < size and attempts < size * 20:
        value = generator.xeger(pattern)
        if value not in pool:
            pool.append(value)
        attempts += 1

    if not pool:
        raise ValueError(f"Pattern '{pattern}' produced no strings")
    return pool
