"""Configuration and data classes for astfuzz."""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any

from .rules import BUILTIN_GRAMMARS


DEFAULT_STRINGS = ['a', 'b', 'c']
DEFAULT_MAX_DEPTH = 10


class Classification(Enum):
    """How a tool invocation turned out"""
    SUCCESS = "success"
    UNINTERESTING = "uninteresting"
    INTERESTING = "interesting"
    PANIC = "panic"


@dataclass
class RunConfig:
    """Configuration for the fuzzing run itself (command line level)"""
    iterations: Optional[int] = None  # None = run until interrupted
    max_findings: Optional[int] = None
    seed: Optional[int] = None
    output_dir: Optional[Path] = None
    printers_file: Optional[Path] = None
    progress_interval: int = 10
    verbose: bool = False


@dataclass
class ToolConfig:
    """How to invoke and judge the tool under test"""
    command: List[str]
    input_suffix: str = ".txt"
    timeout: float = 10.0
    error_pattern: str = r"error: (.*)"
    panic_markers: List[str] = field(default_factory=lambda: ["panic"])
    ignore: List[str] = field(default_factory=list)
    options: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, spec: Dict[str, Any]) -> 'ToolConfig':
        tool = cls(command=list(spec['command']))
        tool.input_suffix = spec.get('input_suffix', tool.input_suffix)
        tool.timeout = float(spec.get('timeout', tool.timeout))
        tool.error_pattern = spec.get('error_pattern', tool.error_pattern)
        tool.panic_markers = list(spec.get('panic_markers', tool.panic_markers))
        tool.ignore = list(spec.get('ignore', tool.ignore))
        tool.options = [list(axis) for axis in spec.get('options', [])]

        for pattern in [tool.error_pattern] + tool.ignore:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern '{pattern}': {e}")
        return tool


@dataclass
class FuzzConfig:
    """Parsed fuzzing configuration file"""
    tool: ToolConfig
    name: str = "tool"
    grammar: str = "python"
    root: str = "Module"
    printer: str = "python"
    printers_file: Optional[Path] = None
    strings: List[str] = field(default_factory=lambda: list(DEFAULT_STRINGS))
    string_pattern: Optional[str] = None
    string_pool_size: int = 3
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> 'FuzzConfig':
        """Build from validated config data.

        Relative grammar and printer file paths are resolved against
        ``base_dir`` (normally the directory holding the config file).
        """
        base_dir = base_dir or Path('.')
        config = cls(tool=ToolConfig.from_dict(data['tool']))
        config.name = data.get('metadata', {}).get('name', config.name)

        grammar = data.get('grammar', config.grammar)
        if grammar not in BUILTIN_GRAMMARS:
            grammar = str(base_dir / grammar)
        config.grammar = grammar

        if 'printers_file' in data:
            config.printers_file = base_dir / data['printers_file']

        config.root = data.get('root', config.root)
        config.printer = data.get('printer', config.printer)
        config.strings = list(data.get('strings', config.strings))
        config.string_pattern = data.get('string_pattern')
        config.string_pool_size = data.get('string_pool_size', config.string_pool_size)
        config.max_depth = data.get('max_depth', config.max_depth)
        return config
