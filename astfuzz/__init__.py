"""
astfuzz - Grammar-based fuzzer with test case minimization

Generates random syntax trees from a declarative grammar, runs a tool on
the printed source and shrinks every interesting failure by replaying the
recorded random decisions with parts of the tree left out.
"""

from .config import (
    Classification,
    FuzzConfig,
    RunConfig,
    ToolConfig,
)
from .rules import (
    Grammar,
    GrammarError,
    parse_grammar,
    load_grammar,
    literal,
    one_of,
    nullable,
    array_of,
    non_empty_array_of,
)
from .nodes import Node, dump_tree
from .random_source import (
    RandomSource,
    RecordingRandom,
    PlaybackRandom,
    PlaybackError,
    ChoiceEvent,
    GroupEvent,
)
from .compiler import GrammarCompiler, FactoryRegistry, compile_grammar
from .generator import Generator
from .registry import PrinterRegistry, register_printer
from . import printers
from .schema import SchemaValidator
from .oracle import Oracle, Outcome, ToolInvoker, ToolResult
from .minimizer import Minimizer, MinimizeResult
from .writer import Finding, FindingWriter
from .fuzzer import FuzzDriver


__version__ = '1.0.0'

__all__ = [
    # Main entry point
    'FuzzDriver',

    # Configuration
    'FuzzConfig',
    'RunConfig',
    'ToolConfig',
    'Classification',

    # Grammar
    'Grammar',
    'GrammarError',
    'parse_grammar',
    'load_grammar',
    'literal',
    'one_of',
    'nullable',
    'array_of',
    'non_empty_array_of',

    # Data classes
    'Node',
    'Outcome',
    'ToolResult',
    'Finding',
    'MinimizeResult',
    'ChoiceEvent',
    'GroupEvent',

    # Components
    'SchemaValidator',
    'GrammarCompiler',
    'FactoryRegistry',
    'compile_grammar',
    'RandomSource',
    'RecordingRandom',
    'PlaybackRandom',
    'PlaybackError',
    'Generator',
    'Oracle',
    'ToolInvoker',
    'Minimizer',
    'FindingWriter',
    'dump_tree',

    # Registry
    'PrinterRegistry',
    'register_printer',
]
