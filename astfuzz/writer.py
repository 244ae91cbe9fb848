"""Reporting minimized findings."""

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from .nodes import Node, dump_tree
from .oracle import Outcome


@dataclass
class Finding:
    """A minimized failing input"""
    source: str
    tree: Node
    outcome: Outcome
    options: List[str] = field(default_factory=list)
    original_size: int = 0
    passes: int = 0
    removed: int = 0


class FindingWriter:
    """Writes findings to stdout and, optionally, to an output directory."""

    def __init__(self, output_dir: Optional[Path] = None, suffix: str = ".txt",
                 stream: Optional[TextIO] = None):
        self.output_dir = output_dir
        self.suffix = suffix
        self.stream = stream
        self.finding_count = 0

    def initialize(self) -> None:
        """Initialize output destination."""
        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, finding: Finding) -> None:
        """Report a single finding."""
        out = self.stream or sys.stdout
        outcome = finding.outcome
        print('=' * 80, *finding.options, file=out)
        print(f"{outcome.classification.value}: {outcome.text}".rstrip(), file=out)
        if outcome.output.strip():
            print(outcome.output.rstrip(), file=out)

        print('-' * 20, file=out)
        print(finding.source, file=out)

        print('-' * 20, file=out)
        print(dump_tree(finding.tree), file=out)
        out.flush()

        if self.output_dir is not None:
            self._save(finding)

        self.finding_count += 1

    def report_path(self, index: int) -> Path:
        """Path of the JSON report for finding ``index``.

        Kept apart from the source file when the tool's inputs are JSON too.
        """
        stem = f"finding_{index:06d}"
        if self.suffix == '.json':
            return self.output_dir / f"{stem}.report.json"
        return self.output_dir / f"{stem}.json"

    def _save(self, finding: Finding) -> None:
        stem = self.output_dir / f"finding_{self.finding_count:06d}"
        report = {
            'classification': finding.outcome.classification.value,
            'message': finding.outcome.text,
            'output': finding.outcome.output,
            'options': finding.options,
            'original_size': finding.original_size,
            'minimized_size': len(finding.source),
            'passes': finding.passes,
            'removed_groups': finding.removed,
            'tree': json.loads(dump_tree(finding.tree)),
        }
        try:
            with open(f"{stem}{self.suffix}", 'w', encoding='utf-8') as f:
                f.write(finding.source + '\n')
            with open(self.report_path(self.finding_count), 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2)
                f.write('\n')
        except IOError as e:
            raise IOError(f"Failed to write finding {self.finding_count}: {e}")

    def finalize(self) -> int:
        """Finalize output and return count."""
        return self.finding_count
