"""Running the tool under test and classifying what happened."""

import re
import signal
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import Classification, ToolConfig
from .nodes import Node
from .registry import PrinterFunc


@dataclass(frozen=True)
class Outcome:
    """Classified result of one tool invocation"""
    classification: Classification
    text: str = ""
    output: str = ""

    @property
    def signature(self) -> Tuple[Classification, str]:
        """What must stay the same for two failures to count as one bug."""
        return self.classification, self.text

    @property
    def is_interesting(self) -> bool:
        return self.classification in (Classification.PANIC, Classification.INTERESTING)


@dataclass
class ToolResult:
    """Raw result of running the tool"""
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode('utf-8', 'replace')
    return data


def ignore_matcher(entry: str) -> Callable[[str], bool]:
    """Build the test for one ignore-list entry.

    An entry matches when it is found as a regular expression, or when its
    words appear in the message in order as whole words, so
    ``already declared`` also covers ``X has already been declared``.
    """
    pattern = re.compile(entry)
    words = [re.escape(word) for word in entry.split()]
    in_order = re.compile(r'\b' + r'\b.*?\b'.join(words) + r'\b') if len(words) > 1 else None

    def matches(text: str) -> bool:
        if pattern.search(text):
            return True
        return in_order is not None and in_order.search(text) is not None

    return matches


class ToolInvoker:
    """Runs the tool under test on one source text."""

    def __init__(self, tool: ToolConfig):
        self.tool = tool

    def build_command(self, input_path: Path, output_path: Path,
                      options: Sequence[str] = ()) -> List[str]:
        """Substitute file placeholders and append the option set.

        Without an ``{input}`` placeholder the input path goes last.
        """
        args = [
            part.replace('{input}', str(input_path)).replace('{output}', str(output_path))
            for part in self.tool.command
        ]
        args.extend(option for option in options if option)
        if not any('{input}' in part for part in self.tool.command):
            args.append(str(input_path))
        return args

    def invoke(self, source: str, options: Sequence[str] = ()) -> ToolResult:
        with tempfile.TemporaryDirectory(prefix='astfuzz.') as workdir:
            input_path = Path(workdir) / f"input{self.tool.input_suffix}"
            output_path = Path(workdir) / f"output{self.tool.input_suffix}"
            input_path.write_text(source, encoding='utf-8')

            args = self.build_command(input_path, output_path, options)
            try:
                result = subprocess.run(
                    args,
                    capture_output=True,
                    text=True,
                    errors='replace',
                    timeout=self.tool.timeout,
                )
            except subprocess.TimeoutExpired as e:
                return ToolResult(None, _as_text(e.stdout), _as_text(e.stderr), timed_out=True)

        return ToolResult(result.returncode, result.stdout, result.stderr)


class Oracle:
    """Prints a tree, runs the tool on it and classifies the result.

    Classification order:
        1. panic - timeout, killed by a signal, or a crash marker on stderr
        2. success - zero exit status
        3. interesting - an extracted error message matching no ignore pattern
        4. uninteresting - anything else
    """

    def __init__(self, tool: ToolConfig, printer: PrinterFunc,
                 invoker: Optional[ToolInvoker] = None):
        self.tool = tool
        self.printer = printer
        self.invoker = invoker or ToolInvoker(tool)
        self._error_re = re.compile(tool.error_pattern)
        self._ignore = [ignore_matcher(entry) for entry in tool.ignore]

    def run(self, tree: Node, options: Sequence[str] = ()) -> Outcome:
        source = self.printer(tree)
        return self.classify(self.invoker.invoke(source, options))

    def classify(self, result: ToolResult) -> Outcome:
        stderr = result.stderr

        if result.timed_out:
            return Outcome(Classification.PANIC, f"timed out after {self.tool.timeout:g}s", stderr)

        if result.returncode is not None and result.returncode < 0:
            return Outcome(Classification.PANIC, f"killed by signal {self._signal_name(-result.returncode)}", stderr)

        # Panics are always interesting
        if any(marker in stderr for marker in self.tool.panic_markers):
            return Outcome(Classification.PANIC, "", stderr)

        if result.ok:
            return Outcome(Classification.SUCCESS)

        for text in self.error_messages(stderr):
            if not self.is_ignored(text):
                return Outcome(Classification.INTERESTING, text, stderr)

        return Outcome(Classification.UNINTERESTING, "", stderr)

    def error_messages(self, stderr: str) -> List[str]:
        """Error texts extracted from the tool's stderr, in order."""
        messages = []
        for match in self._error_re.finditer(stderr):
            messages.append(match.group(1) if self._error_re.groups else match.group(0))
        return messages

    def is_ignored(self, text: str) -> bool:
        return any(matches(text) for matches in self._ignore)

    @staticmethod
    def _signal_name(number: int) -> str:
        try:
            return signal.Signals(number).name
        except ValueError:
            return str(number)
