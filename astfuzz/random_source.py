"""Random decision sources.

The generator takes a random source. The first time through, a
RecordingRandom logs every decision it hands out. Later runs use a
PlaybackRandom over that log to rebuild the same tree, and each pass may
drop one group from it. Groups are opened by push() and closed by pop();
everything decided inside a group can be omitted without disturbing the
decisions around it.
"""

import random as _random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union


class PlaybackError(RuntimeError):
    """Raised when a replay asks for decisions the log does not hold."""


@dataclass
class ChoiceEvent:
    value: int


@dataclass
class GroupEvent:
    children: List[Union[ChoiceEvent, 'GroupEvent']] = field(default_factory=list)
    skip: Optional[bool] = None  # None = not resolved yet


DecisionLog = List[Union[ChoiceEvent, GroupEvent]]


class RandomSource(ABC):
    """Source of decisions for the generator."""

    @abstractmethod
    def choice(self, count: int) -> int:
        """Return an integer in [0, count)."""

    @abstractmethod
    def push(self) -> bool:
        """Open a group. False means the group's content must be omitted."""

    @abstractmethod
    def pop(self) -> None:
        """Close the innermost open group."""


class RecordingRandom(RandomSource):
    """Samples decisions uniformly and records them."""

    def __init__(self, rng: Optional[_random.Random] = None):
        self.rng = rng if rng is not None else _random.Random()
        self.log: DecisionLog = []
        self._segment = self.log
        self._stack: List[DecisionLog] = []

    def choice(self, count: int) -> int:
        value = self.rng.randrange(count)
        self._segment.append(ChoiceEvent(value))
        return value

    def push(self) -> bool:
        group = GroupEvent()
        self._segment.append(group)
        self._stack.append(self._segment)
        self._segment = group.children
        return True

    def pop(self) -> None:
        if not self._stack:
            raise PlaybackError("pop() without a matching push()")
        self._segment = self._stack.pop()

    def for_playback(self) -> 'PlaybackRandom':
        return PlaybackRandom(self.log)


class PlaybackRandom(RandomSource):
    """Replays a recorded log, masking at most one unresolved group per pass.

    The first unresolved group reached during a pass becomes the candidate:
    it is tentatively skipped. After judging the result, call accept() to
    drop it for good or reject() to keep it. Both rewind the cursor so the
    same instance can drive the next pass.
    """

    def __init__(self, log: DecisionLog):
        self.log = log
        self._candidate: Optional[GroupEvent] = None
        self._rewind()

    def _rewind(self) -> None:
        self._segment = self.log
        self._index = 0
        self._stack: List[Tuple[DecisionLog, int]] = []

    def _next_event(self, expected: str) -> Union[ChoiceEvent, GroupEvent]:
        if self._index >= len(self._segment):
            raise PlaybackError(f"Decision log exhausted, expected {expected}")
        event = self._segment[self._index]
        self._index += 1
        return event

    def choice(self, count: int) -> int:
        event = self._next_event('choice')
        if not isinstance(event, ChoiceEvent):
            raise PlaybackError("Expected choice, found group")
        if not 0 <= event.value < count:
            raise PlaybackError(f"Recorded choice {event.value} out of range for {count} options")
        return event.value

    def push(self) -> bool:
        event = self._next_event('group')
        if not isinstance(event, GroupEvent):
            raise PlaybackError("Expected group, found choice")

        if self._candidate is None and event.skip is None:
            event.skip = True
            self._candidate = event

        if event.skip:
            return False

        self._stack.append((self._segment, self._index))
        self._segment = event.children
        self._index = 0
        return True

    def pop(self) -> None:
        if not self._stack:
            raise PlaybackError("pop() without a matching push()")
        self._segment, self._index = self._stack.pop()

    def accept(self) -> None:
        """Keep the candidate's content dropped."""
        self._candidate = None
        self._rewind()

    def reject(self) -> None:
        """Restore the candidate's content and keep it from now on."""
        if self._candidate is not None:
            self._candidate.skip = False
        self._candidate = None
        self._rewind()

    def did_change(self) -> bool:
        return self._candidate is not None


def count_groups(log: DecisionLog, unresolved_only: bool = False) -> int:
    """Count groups in a log, including nested ones."""
    total = 0
    for event in log:
        if isinstance(event, GroupEvent):
            if not unresolved_only or event.skip is None:
                total += 1
            total += count_groups(event.children, unresolved_only)
    return total


def dump_log(log: DecisionLog) -> List[Any]:
    """JSON-friendly form of a log: ints for choices, dicts for groups."""
    result: List[Any] = []
    for event in log:
        if isinstance(event, ChoiceEvent):
            result.append(event.value)
        else:
            result.append({'skip': event.skip, 'children': dump_log(event.children)})
    return result
