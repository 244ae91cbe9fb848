"""Printer registry for serializing generated trees."""

import importlib.util
import inspect
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .nodes import Node


# Type alias for printer functions
# Signature: (tree: Node) -> str
PrinterFunc = Callable[[Node], str]


class PrinterRegistry:
    """Registry for tree printers.

    Printers are deterministic functions that turn a generated tree into
    the source text handed to the tool under test.
    """

    _printers: Dict[str, PrinterFunc] = {}

    @classmethod
    def register(cls, name: str, func: PrinterFunc) -> None:
        """Register a printer function by name.

        Raises:
            ValueError: If ``func`` cannot be called with a single tree
        """
        check_printer(name, func)
        cls._printers[name] = func

    @classmethod
    def get(cls, name: str) -> Optional[PrinterFunc]:
        """Get a printer function by name."""
        return cls._printers.get(name)

    @classmethod
    def require(cls, name: str) -> PrinterFunc:
        """Get a printer function by name or fail with the available names."""
        func = cls.get(name)
        if func is None:
            available = ', '.join(sorted(cls._printers))
            raise ValueError(f"Printer '{name}' not found. Available: {available}")
        return func

    @classmethod
    def list_printers(cls) -> List[str]:
        """List all registered printer names."""
        return list(cls._printers.keys())

    @classmethod
    def load_from_file(cls, filepath: Path) -> int:
        """Load custom printers from a Python file.

        Returns: Number of printers loaded.
        """
        if not filepath.exists():
            return 0

        spec = importlib.util.spec_from_file_location("custom_printers", filepath)
        if spec is None or spec.loader is None:
            return 0

        module = importlib.util.module_from_spec(spec)
        module.PrinterRegistry = cls
        module.register_printer = register_printer

        before = len(cls._printers)
        try:
            spec.loader.exec_module(module)
        except ValueError as e:
            raise ValueError(f"Invalid printers file {filepath}: {e}")
        return len(cls._printers) - before


def check_printer(name: str, func) -> None:
    """Make sure ``func`` can be called as ``func(tree)``."""
    if not callable(func):
        raise ValueError(f"Printer '{name}' is not callable: {func!r}")

    try:
        signature = inspect.signature(func)
    except ValueError:
        # C callables without introspection data are taken on trust
        return

    try:
        signature.bind(None)
    except TypeError:
        raise ValueError(f"Printer '{name}' must be callable with one argument (the tree), "
                         f"got {name}{signature}")


def register_printer(name: str):
    """Decorator to register a printer function.

    Usage:
        @register_printer("my_printer")
        def my_printer(tree: Node) -> str:
            return "source text"
    """
    def decorator(func: PrinterFunc) -> PrinterFunc:
        PrinterRegistry.register(name, func)
        return func
    return decorator
