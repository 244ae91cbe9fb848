"""Main fuzzing loop orchestrator."""

import random
from pathlib import Path
from typing import List, Optional

from . import printers  # noqa: F401  (registers built-in printers)
from .compiler import GrammarCompiler
from .config import FuzzConfig, RunConfig
from .generator import Generator
from .minimizer import Minimizer
from .oracle import Oracle
from .registry import PrinterRegistry
from .rules import load_grammar
from .schema import SchemaValidator
from .values import build_string_pool
from .writer import Finding, FindingWriter


class FuzzDriver:
    """Main fuzzing loop orchestrator.

    Generates a tree, runs the tool on it and, when the failure is
    interesting, minimizes the tree and reports it. Repeats until the
    iteration or finding limit is reached, or forever.
    """

    def __init__(self, config_path: Path, run_config: RunConfig):
        self.config_path = config_path
        self.run_config = run_config
        self.rng = random.Random(run_config.seed)
        self.verbose = run_config.verbose

        # Pipeline components (initialized in setup())
        self.validator = SchemaValidator.for_config()
        self.config: Optional[FuzzConfig] = None
        self.generator: Optional[Generator] = None
        self.oracle: Optional[Oracle] = None
        self.minimizer: Optional[Minimizer] = None
        self.writer: Optional[FindingWriter] = None

        self.iterations = 0
        self.findings = 0
        self._printed_progress = False

    def setup(self) -> None:
        """Build every pipeline component from the configuration file."""
        self._log("[1/6] Loading and validating configuration...")
        data = self.validator.validate(self.config_path)
        self.config = FuzzConfig.from_dict(data, self.config_path.parent)
        self._log(f"      Tool: {self.config.name}")

        self._log("[2/6] Loading printers...")
        loaded_count = 0
        for printers_file in (self.config.printers_file, self.run_config.printers_file):
            if printers_file is not None:
                if not printers_file.exists():
                    raise ValueError(f"Printers file not found: {printers_file}")
                loaded_count += PrinterRegistry.load_from_file(printers_file)
        printer = PrinterRegistry.require(self.config.printer)
        self._log(f"      Built-in: {len(PrinterRegistry.list_printers()) - loaded_count}")
        self._log(f"      Custom: {loaded_count}")
        self._log(f"      Using: {self.config.printer}")

        self._log("[3/6] Compiling grammar...")
        grammar = load_grammar(self.config.grammar, SchemaValidator.for_grammar())
        strings = self.config.strings
        if self.config.string_pattern:
            strings = build_string_pool(self.config.string_pattern, self.config.string_pool_size)
        registry = GrammarCompiler(strings, self.config.max_depth).compile(grammar)
        self.generator = Generator(registry, self.config.root)
        self._log(f"      Grammar: {self.config.grammar}")
        self._log(f"      Types: {len(registry)}")
        self._log(f"      Root: {self.config.root}")

        self._log("[4/6] Initializing oracle...")
        self.oracle = Oracle(self.config.tool, printer)
        self.minimizer = Minimizer(self.generator, self.oracle, self.verbose)
        self._log(f"      Command: {' '.join(self.config.tool.command)}")
        self._log(f"      Option axes: {len(self.config.tool.options)}")
        self._log(f"      Ignore patterns: {len(self.config.tool.ignore)}")

        self._log("[5/6] Initializing finding writer...")
        self.writer = FindingWriter(self.run_config.output_dir, self.config.tool.input_suffix)
        self.writer.initialize()

    def run(self) -> int:
        """Run the complete fuzzing pipeline. Returns the number of findings."""
        self.setup()

        self._log("[6/6] Fuzzing...")
        limit = self.run_config.iterations
        self._log(f"      Iterations: {limit if limit is not None else 'unlimited'}")

        try:
            while limit is None or self.iterations < limit:
                self.fuzz_once()
                if self._enough_findings():
                    break
        finally:
            self._end_progress()
            total = self.writer.finalize()
            self._log("\nFuzzing stopped.")
            self._log(f"  Iterations: {self.iterations}")
            self._log(f"  Findings: {total}")
            if self.run_config.output_dir is not None:
                self._log(f"  Output: {self.run_config.output_dir}")

        return total

    def fuzz_once(self) -> Optional[Finding]:
        """One generate -> run -> minimize -> report cycle."""
        self.iterations += 1
        self._progress()

        options = self._pick_options()
        tree, recording = self.generator.generate_recorded(self.rng)
        outcome = self.oracle.run(tree, options)
        if not outcome.is_interesting:
            return None

        self._end_progress()
        original_size = len(self.oracle.printer(tree))
        result = self.minimizer.minimize(tree, recording.log, outcome, options)

        finding = Finding(
            source=self.oracle.printer(result.tree),
            tree=result.tree,
            outcome=result.outcome,
            options=options,
            original_size=original_size,
            passes=result.passes,
            removed=result.removed,
        )
        self.writer.write(finding)
        self.findings += 1
        return finding

    def _pick_options(self) -> List[str]:
        """Pick one entry from each option axis."""
        return [self.rng.choice(axis) for axis in self.config.tool.options]

    def _enough_findings(self) -> bool:
        max_findings = self.run_config.max_findings
        return max_findings is not None and self.findings >= max_findings

    def _progress(self) -> None:
        interval = self.run_config.progress_interval
        if self.verbose and interval > 0 and self.iterations % interval == 0:
            print(f"      Test count: {self.iterations}", end='\r', flush=True)
            self._printed_progress = True

    def _end_progress(self) -> None:
        # Make sure not to overwrite the progress message
        if self._printed_progress:
            print()
            self._printed_progress = False

    def _log(self, message: str) -> None:
        """Log message if verbose mode is enabled."""
        if self.verbose:
            print(message)
