"""Greedy test case reduction over a recorded decision log."""

from dataclasses import dataclass
from typing import Sequence

from .generator import Generator
from .nodes import Node
from .oracle import Oracle, Outcome
from .random_source import DecisionLog, PlaybackRandom, count_groups


@dataclass
class MinimizeResult:
    """Smallest tree found and the outcome it reproduces"""
    tree: Node
    outcome: Outcome
    passes: int = 0
    removed: int = 0


class Minimizer:
    """Shrinks a failing tree by dropping one decision group per pass.

    Every pass replays the log with the first unresolved group masked and
    reruns the oracle. The group is dropped for good when the failure
    signature (classification and message) is exactly the same, and kept
    for good otherwise. Each pass resolves one group, so the number of
    passes is bounded by the number of groups in the log.
    """

    def __init__(self, generator: Generator, oracle: Oracle, verbose: bool = False):
        self.generator = generator
        self.oracle = oracle
        self.verbose = verbose

    def minimize(self, tree: Node, log: DecisionLog, outcome: Outcome,
                 options: Sequence[str] = ()) -> MinimizeResult:
        """Minimize ``tree``, recorded as ``log``, which produced ``outcome``.

        The ``skip`` flags of ``log`` are updated in place.
        """
        signature = outcome.signature
        result = MinimizeResult(tree, outcome)
        total = count_groups(log, unresolved_only=True)

        while True:
            random = PlaybackRandom(log)
            candidate = self.generator.generate(random)
            if not random.did_change():
                result.tree = candidate
                break

            result.passes += 1
            self._progress(result, total)

            try:
                attempt = self.oracle.run(candidate, options)
            except BaseException:
                random.reject()
                raise

            if attempt.signature == signature:
                random.accept()
                result.outcome = attempt
                result.removed += 1
            else:
                random.reject()

        if self.verbose and result.passes:
            print()
        return result

    def _progress(self, result: MinimizeResult, total: int) -> None:
        if self.verbose:
            print(f"      Minimizing: pass {result.passes}/{total}, removed {result.removed}", end="\r", flush=True)
