"""Test doubles and log helpers shared by the test modules."""

from astfuzz.compiler import compile_grammar
from astfuzz.generator import Generator
from astfuzz.random_source import GroupEvent
from astfuzz.rules import load_grammar


# Built-in Python grammar; compiled once, generate() resets its depth
PYTHON = Generator(compile_grammar(load_grammar('python')), 'Module')


class StubRng:
    """Stands in for random.Random, handing out a fixed sequence."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randrange(self, count):
        value = self.values.pop(0)
        assert 0 <= value < count, f"scripted {value} is out of range for {count}"
        self.calls.append(count)
        return value


def groups_of(log):
    """Top-level groups of a decision log."""
    return [event for event in log if isinstance(event, GroupEvent)]


def resolve_all(log, skip=False):
    """Mark every group, nested ones included, as resolved."""
    for event in log:
        if isinstance(event, GroupEvent):
            event.skip = skip
            resolve_all(event.children, skip)
