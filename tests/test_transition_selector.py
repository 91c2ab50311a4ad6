"""Tests for scene and segment transition rules."""

import pytest

from assembly_timeline.utils.config import Config
from assembly_timeline.video_assembly.timeline_models import (
    SceneInterval,
    ScenePurpose,
    TimingMark,
    TransitionType,
)
from assembly_timeline.video_assembly.transition_selector import (
    TransitionSelector,
    near_pause,
    select_segment_transition,
    select_transition,
)


def _pause(timestamp, scene_number=2):
    return TimingMark(scene_number=scene_number, timestamp=timestamp, type="pause")


class TestSelectTransition:
    """Tests for the boundary rule table."""

    @pytest.mark.parametrize("purpose, expected, duration", [
        (ScenePurpose.HOOK, TransitionType.QUICK_CUT, 0.1),
        (ScenePurpose.PROBLEM, TransitionType.DISSOLVE, 0.8),
        (ScenePurpose.SOLUTION, TransitionType.SLIDE, 0.6),
        (ScenePurpose.CALL_TO_ACTION, TransitionType.ZOOM, 0.4),
        (ScenePurpose.GENERIC, TransitionType.CROSSFADE, 0.5),
    ])
    def test_middle_scene_by_purpose(self, purpose, expected, duration):
        transition = select_transition(purpose, 3, 5)
        assert transition.type == expected
        assert transition.duration == duration
        assert not transition.speech_aligned

    def test_first_scene_fades_in_whatever_its_purpose(self):
        for purpose in ScenePurpose:
            transition = select_transition(purpose, 1, 5)
            assert transition.type == TransitionType.FADE_IN
            assert transition.duration == 0.5

    def test_last_scene_fades_out(self):
        transition = select_transition(ScenePurpose.CALL_TO_ACTION, 5, 5)
        assert transition.type == TransitionType.FADE_OUT
        assert transition.duration == 1.0

    def test_single_scene_takes_first_scene_rule(self):
        assert select_transition(ScenePurpose.HOOK, 1, 1).type == TransitionType.FADE_IN


class TestSpeechAlignment:
    """Tests for pause proximity."""

    def test_pause_inside_window(self):
        transition = select_transition(
            ScenePurpose.SOLUTION, 2, 3, nearby_timing_marks=[_pause(75.5)], transition_time=75.9
        )
        assert transition.speech_aligned

    def test_window_edge_is_inclusive(self):
        assert near_pause([_pause(9.0)], 10.0, window=1.0)
        assert not near_pause([_pause(8.9)], 10.0, window=1.0)

    def test_non_pause_marks_ignored(self):
        marks = [
            TimingMark(scene_number=2, timestamp=10.0, type="emphasis"),
            TimingMark(scene_number=2, timestamp=10.0, type="speech"),
        ]
        assert not near_pause(marks, 10.0)

    def test_localised_marks_without_time(self):
        """Test that any pause counts when no transition time is given."""
        assert near_pause([_pause(500.0)], None)
        assert not near_pause([], None)
        assert not near_pause(None, None)

    def test_alignment_does_not_change_type_or_duration(self):
        plain = select_transition(ScenePurpose.PROBLEM, 2, 3)
        aligned = select_transition(ScenePurpose.PROBLEM, 2, 3, [_pause(0.0)])
        assert (plain.type, plain.duration) == (aligned.type, aligned.duration)
        assert aligned.speech_aligned


class TestSegmentTransition:
    """Tests for cuts inside a scene."""

    def test_opening_segment_of_video_fades_in(self):
        transition = select_segment_transition(0, 1, 0.0)
        assert transition.type == TransitionType.FADE_IN

    def test_opening_segment_of_later_scene_has_none(self):
        assert select_segment_transition(0, 2, 15.0) is None

    def test_inner_cuts_crossfade(self):
        transition = select_segment_transition(3, 2, 30.0, crossfade_duration=0.25)
        assert transition.type == TransitionType.CROSSFADE
        assert transition.duration == 0.25


class TestTransitionSelector:
    """Tests for scene boundary placement."""

    def test_fade_in_is_the_entry(self):
        interval = SceneInterval(start=0, end=15, duration=15)
        transition_in, transition_out = TransitionSelector().scene_boundary(
            ScenePurpose.HOOK, 1, 3, interval
        )
        assert transition_in.type == TransitionType.FADE_IN
        assert transition_out is None

    def test_other_transitions_are_the_exit(self):
        interval = SceneInterval(start=15, end=75, duration=60)
        transition_in, transition_out = TransitionSelector().scene_boundary(
            ScenePurpose.SOLUTION, 2, 3, interval
        )
        assert transition_in is None
        assert transition_out.type == TransitionType.SLIDE

    def test_exit_aligned_against_scene_end(self):
        interval = SceneInterval(start=15.2, end=75.9, duration=60.7)
        _, transition_out = TransitionSelector().scene_boundary(
            ScenePurpose.SOLUTION, 2, 3, interval, [_pause(20.0), _pause(75.5)]
        )
        assert transition_out.speech_aligned

        _, transition_out = TransitionSelector().scene_boundary(
            ScenePurpose.SOLUTION, 2, 3, interval, [_pause(20.0)]
        )
        assert not transition_out.speech_aligned

    def test_window_from_config(self):
        config = Config(transitions={"pause_alignment_window": 0.2})
        interval = SceneInterval(start=15.2, end=75.9, duration=60.7)
        _, transition_out = TransitionSelector(config).scene_boundary(
            ScenePurpose.SOLUTION, 2, 3, interval, [_pause(75.5)]
        )
        assert not transition_out.speech_aligned
