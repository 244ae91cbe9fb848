"""
Tests for tool invocation and outcome classification.
"""

import sys
from unittest.mock import Mock

import pytest

from astfuzz.config import Classification, ToolConfig
from astfuzz.nodes import Node
from astfuzz.oracle import Oracle, Outcome, ToolInvoker, ToolResult, ignore_matcher


def make_oracle(**tool):
    tool.setdefault('command', ['tool'])
    return Oracle(ToolConfig.from_dict(tool), printer=lambda tree: tree.type)


class TestClassify:

    def test_success(self):
        outcome = make_oracle().classify(ToolResult(0, 'built', ''))
        assert outcome == Outcome(Classification.SUCCESS)
        assert not outcome.is_interesting

    def test_timeout_is_panic(self):
        outcome = make_oracle(timeout=2.5).classify(ToolResult(None, timed_out=True))
        assert outcome.classification is Classification.PANIC
        assert outcome.text == "timed out after 2.5s"

    def test_signal_is_panic(self):
        outcome = make_oracle().classify(ToolResult(-11, '', 'boom'))
        assert outcome.signature == (Classification.PANIC, "killed by signal SIGSEGV")

    def test_panic_marker(self):
        stderr = "panic: runtime error: index out of range\ngoroutine 1 [running]:\n"
        outcome = make_oracle().classify(ToolResult(2, '', stderr))

        assert outcome.classification is Classification.PANIC
        assert outcome.text == ""
        assert outcome.output == stderr
        assert outcome.is_interesting

    def test_panics_share_one_signature(self):
        oracle = make_oracle()
        first = oracle.classify(ToolResult(2, '', 'panic: a'))
        second = oracle.classify(ToolResult(1, '', 'error: x\npanic: b'))
        assert first.signature == second.signature

    def test_panic_marker_on_stdout_is_ignored(self):
        outcome = make_oracle().classify(ToolResult(1, 'panic', 'error: bad input'))
        assert outcome.signature == (Classification.INTERESTING, "bad input")

    def test_custom_panic_markers(self):
        oracle = make_oracle(panic_markers=['Traceback', 'Fatal'])
        assert oracle.classify(ToolResult(1, '', 'Traceback (most recent call last):')).classification \
            is Classification.PANIC
        assert oracle.classify(ToolResult(1, '', 'panic')).classification \
            is Classification.UNINTERESTING

    def test_first_error_is_reported(self):
        stderr = "✘ [ERROR] two errors\nerror: Unexpected \"}\"\nerror: Expected \";\"\n"
        outcome = make_oracle().classify(ToolResult(1, '', stderr))

        assert outcome.signature == (Classification.INTERESTING, 'Unexpected "}"')
        assert outcome.is_interesting

    def test_ignored_error_is_uninteresting(self):
        oracle = make_oracle(ignore=['already declared'])
        outcome = oracle.classify(ToolResult(1, '', 'error: X has already been declared'))

        assert outcome.classification is Classification.UNINTERESTING
        assert not outcome.is_interesting

    def test_ignored_errors_are_skipped(self):
        oracle = make_oracle(ignore=['already declared', r'^Cannot use'])
        stderr = "error: X has already been declared\nerror: Cannot use yield here\nerror: Invalid label\n"

        assert oracle.classify(ToolResult(1, '', stderr)).text == "Invalid label"

    def test_failure_without_error_text(self):
        outcome = make_oracle().classify(ToolResult(1, '', 'something went wrong'))
        assert outcome.classification is Classification.UNINTERESTING

    def test_error_pattern_without_group(self):
        oracle = make_oracle(error_pattern=r'\w+Error: .*')
        assert oracle.error_messages("  File x\nSyntaxError: bad\n") == ["SyntaxError: bad"]


class TestIgnoreMatcher:

    @pytest.mark.parametrize("entry, text", [
        ('already declared', 'X has already been declared'),
        ('already declared', 'already declared'),
        ('Cannot use', 'Cannot use "await" here'),
        (r'^Cannot use', 'Cannot use "await" here'),
        ('not allowed at', 'nonlocal declaration not allowed at module level'),
    ])
    def test_matches(self, entry, text):
        assert ignore_matcher(entry)(text)

    @pytest.mark.parametrize("entry, text", [
        ('already declared', 'declared already'),
        ('already declared', 'alreadyX has been declared'),
        ('already declared', 'X has already been redeclared'),
        (r'^Cannot use', 'You Cannot use this'),
        ('outside', 'Unexpected "}"'),
    ])
    def test_does_not_match(self, entry, text):
        assert not ignore_matcher(entry)(text)


def test_invalid_pattern_rejected():
    with pytest.raises(ValueError, match="Invalid pattern"):
        make_oracle(ignore=['(unclosed'])


def test_run_prints_and_invokes():
    invoker = Mock()
    invoker.invoke.return_value = ToolResult(1, '', 'error: nope')
    oracle = Oracle(ToolConfig(['tool']), printer=lambda tree: 'source text', invoker=invoker)

    outcome = oracle.run(Node('Module'), ['--minify'])

    invoker.invoke.assert_called_once_with('source text', ['--minify'])
    assert outcome.signature == (Classification.INTERESTING, 'nope')


def test_classification_is_deterministic():
    invoker = Mock()
    invoker.invoke.return_value = ToolResult(1, '', 'error: same\nerror: other')
    oracle = Oracle(ToolConfig(['tool']), printer=lambda tree: 'x', invoker=invoker)

    outcomes = {oracle.run(Node('Module')) for _ in range(5)}
    assert len(outcomes) == 1


class TestToolInvoker:

    def test_placeholders(self, tmp_path):
        invoker = ToolInvoker(ToolConfig(['tool', '{input}', '--outfile={output}']))
        args = invoker.build_command(tmp_path / 'in.js', tmp_path / 'out.js', ['--minify', ''])

        assert args == ['tool', str(tmp_path / 'in.js'), f"--outfile={tmp_path / 'out.js'}", '--minify']

    def test_input_appended_without_placeholder(self, tmp_path):
        invoker = ToolInvoker(ToolConfig(['tool', '--check']))
        args = invoker.build_command(tmp_path / 'in.js', tmp_path / 'out.js', ['--strict'])

        assert args == ['tool', '--check', '--strict', str(tmp_path / 'in.js')]

    def test_invoke_real_process(self, write_tool):
        script = write_tool("""
            import sys
            source = open(sys.argv[1], encoding='utf-8').read()
            print('checked ' + sys.argv[1][-3:])
            if 'bad' in source:
                sys.stderr.write('error: found ' + source.strip() + '\\n')
                sys.exit(1)
        """)
        invoker = ToolInvoker(ToolConfig([sys.executable, str(script), '{input}'], input_suffix='.py'))

        good = invoker.invoke('fine')
        assert good.ok
        assert good.stdout.strip() == 'checked .py'

        bad = invoker.invoke('bad')
        assert bad.returncode == 1
        assert bad.stderr == 'error: found bad\n'

    def test_timeout(self, write_tool):
        script = write_tool("""
            import time
            time.sleep(30)
        """)
        invoker = ToolInvoker(ToolConfig([sys.executable, str(script)], timeout=0.5))

        result = invoker.invoke('')
        assert result.timed_out
        assert not result.ok

    @pytest.mark.skipif(sys.platform == 'win32', reason="POSIX signals")
    def test_killed_by_signal(self, write_tool):
        script = write_tool("""
            import os, signal
            os.kill(os.getpid(), signal.SIGKILL)
        """)
        tool = ToolConfig([sys.executable, str(script)])
        oracle = Oracle(tool, printer=lambda tree: '')

        outcome = oracle.run(Node('Module'))
        assert outcome.signature == (Classification.PANIC, "killed by signal SIGKILL")

    def test_missing_binary_propagates(self, tmp_path):
        invoker = ToolInvoker(ToolConfig([str(tmp_path / 'no-such-tool')]))
        with pytest.raises(OSError):
            invoker.invoke('')
