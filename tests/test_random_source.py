"""
Tests for the recording and playback random sources.

Verifies:
1.  Recording logs choices and nested groups in call order.
2.  Playback reproduces the recorded choices.
3.  Exactly one unresolved group is masked per pass.
4.  accept()/reject() resolve the candidate and rewind.
5.  A replay that drifts from the log raises PlaybackError.
"""

import random

import pytest

from astfuzz.random_source import (
    ChoiceEvent, GroupEvent, PlaybackError, PlaybackRandom, RecordingRandom,
    count_groups, dump_log,
)

from helpers import StubRng, groups_of


def record_three_groups():
    """choice, [choice], [choice, [choice]], [choice]"""
    recording = RecordingRandom(StubRng([1, 2, 3, 4, 5, 6]))
    recording.choice(10)
    for value_count in (1, 2, 1):
        recording.push()
        recording.choice(10)
        if value_count == 2:
            recording.push()
            recording.choice(10)
            recording.pop()
        recording.pop()
    return recording


def replay(random_source):
    """Walk the shape recorded by record_three_groups()."""
    values = [random_source.choice(10)]
    for value_count in (1, 2, 1):
        if random_source.push():
            values.append(random_source.choice(10))
            if value_count == 2 and random_source.push():
                values.append(random_source.choice(10))
                random_source.pop()
            random_source.pop()
    return values


def test_recording_logs_choices_and_groups():
    recording = record_three_groups()

    assert dump_log(recording.log) == [
        1,
        {'skip': None, 'children': [2]},
        {'skip': None, 'children': [3, {'skip': None, 'children': [4]}]},
        {'skip': None, 'children': [5]},
    ]
    assert count_groups(recording.log) == 4


def test_recording_samples_uniformly_in_range():
    recording = RecordingRandom(random.Random(7))
    values = [recording.choice(3) for _ in range(200)]

    assert set(values) == {0, 1, 2}
    assert [event.value for event in recording.log] == values


def test_recording_push_always_grants():
    recording = RecordingRandom()
    assert recording.push() is True
    recording.pop()


def test_recording_pop_without_push():
    with pytest.raises(PlaybackError):
        RecordingRandom().pop()


def test_playback_masks_first_group_only():
    playback = record_three_groups().for_playback()

    assert replay(playback) == [1, 3, 4, 5]
    assert playback.did_change()
    first, second, third = groups_of(playback.log)
    assert first.skip is True
    assert second.skip is None
    assert third.skip is None


def test_accept_keeps_candidate_dropped():
    recording = record_three_groups()
    playback = PlaybackRandom(recording.log)

    replay(playback)
    playback.accept()

    assert not playback.did_change()
    assert groups_of(recording.log)[0].skip is True
    # next pass masks the following group
    assert replay(playback) == [1, 5]
    assert groups_of(recording.log)[1].skip is True


def test_reject_restores_candidate():
    recording = record_three_groups()
    playback = PlaybackRandom(recording.log)

    replay(playback)
    playback.reject()

    assert groups_of(recording.log)[0].skip is False
    assert replay(playback) == [1, 2, 5]


def test_nested_groups_resolve_after_parent_kept():
    recording = record_three_groups()
    playback = PlaybackRandom(recording.log)

    for _ in range(2):
        replay(playback)
        playback.reject()

    # parent group kept, the group nested inside it is the candidate
    assert replay(playback) == [1, 2, 3, 5]
    nested = groups_of(recording.log)[1].children[1]
    assert nested.skip is True


def test_fully_resolved_log_replays_unchanged():
    recording = record_three_groups()
    playback = PlaybackRandom(recording.log)

    for _ in range(count_groups(recording.log)):
        replay(playback)
        playback.reject()

    assert count_groups(recording.log, unresolved_only=True) == 0
    assert replay(playback) == [1, 2, 3, 4, 5]
    assert not playback.did_change()


def test_unmasked_subgroups_of_skipped_group_are_never_visited():
    recording = record_three_groups()
    playback = PlaybackRandom(recording.log)

    replay(playback)
    playback.reject()
    replay(playback)
    playback.accept()

    # the nested group sat inside the dropped group and stays unresolved
    assert count_groups(recording.log, unresolved_only=True) == 2
    assert replay(playback) == [1, 2]
    playback.reject()
    replay(playback)
    assert not playback.did_change()


def test_choice_where_group_was_recorded():
    log = [GroupEvent([ChoiceEvent(0)])]
    with pytest.raises(PlaybackError, match="Expected choice"):
        PlaybackRandom(log).choice(2)


def test_push_where_choice_was_recorded():
    with pytest.raises(PlaybackError, match="Expected group"):
        PlaybackRandom([ChoiceEvent(0)]).push()


def test_choice_out_of_range():
    with pytest.raises(PlaybackError, match="out of range"):
        PlaybackRandom([ChoiceEvent(3)]).choice(2)


def test_log_exhausted():
    playback = PlaybackRandom([ChoiceEvent(1)])
    playback.choice(2)
    with pytest.raises(PlaybackError, match="exhausted"):
        playback.choice(2)


def test_playback_pop_without_push():
    with pytest.raises(PlaybackError):
        PlaybackRandom([]).pop()


def test_count_unresolved_groups():
    log = [
        GroupEvent([GroupEvent([], skip=None)], skip=False),
        GroupEvent([], skip=True),
        ChoiceEvent(0),
    ]
    assert count_groups(log) == 3
    assert count_groups(log, unresolved_only=True) == 1
