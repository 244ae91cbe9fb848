"""Shared fixtures for the astfuzz test suite."""

import json
import sys
import textwrap
from pathlib import Path

import pytest

from astfuzz.compiler import compile_grammar
from astfuzz.generator import Generator
from astfuzz.rules import parse_grammar


@pytest.fixture
def make_generator():
    """Compile a grammar table and return a Generator for its root."""

    def factory(table, root, **kwargs):
        return Generator(compile_grammar(parse_grammar(table), **kwargs), root)

    return factory


@pytest.fixture
def write_tool(tmp_path):
    """Write a small Python script acting as the tool under test."""

    def factory(body, name='tool.py'):
        path = tmp_path / name
        path.write_text(textwrap.dedent(body), encoding='utf-8')
        return path

    return factory


@pytest.fixture
def write_config(tmp_path):
    """Write a fuzzing configuration that runs ``script`` with this interpreter."""

    def factory(script: Path, **overrides):
        tool = {
            'command': [sys.executable, str(script), '{input}'],
            'input_suffix': '.py',
            'timeout': 30,
        }
        tool.update(overrides.pop('tool', {}))
        config = {
            'metadata': {'name': 'fake-tool'},
            'grammar': 'python',
            'root': 'Module',
            'printer': 'python',
            'max_depth': 4,
            'tool': tool,
        }
        config.update(overrides)
        path = tmp_path / 'config.json'
        path.write_text(json.dumps(config), encoding='utf-8')
        return path

    return factory
