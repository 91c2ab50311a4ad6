"""Transition selection.

Scene boundaries follow a fixed rule table keyed on position and scene purpose.
Segment cuts inside a scene crossfade. A transition close to a narration pause
is flagged ``speech_aligned`` so the renderer may nudge the cut onto the pause;
the flag never changes timing.
"""

from typing import Iterable, Optional, Tuple

from ..utils.config import Config
from .timeline_models import (
    SceneInterval, ScenePurpose, TimingMark, TimingMarkType, Transition, TransitionType,
)

FIRST_SCENE_TRANSITION = (TransitionType.FADE_IN, 0.5)
LAST_SCENE_TRANSITION = (TransitionType.FADE_OUT, 1.0)

PURPOSE_TRANSITIONS = {
    ScenePurpose.HOOK: (TransitionType.QUICK_CUT, 0.1),
    ScenePurpose.PROBLEM: (TransitionType.DISSOLVE, 0.8),
    ScenePurpose.SOLUTION: (TransitionType.SLIDE, 0.6),
    ScenePurpose.CALL_TO_ACTION: (TransitionType.ZOOM, 0.4),
}
DEFAULT_TRANSITION = (TransitionType.CROSSFADE, 0.5)

DEFAULT_PAUSE_WINDOW = 1.0


def near_pause(timing_marks: Optional[Iterable[TimingMark]],
               transition_time: Optional[float],
               window: float = DEFAULT_PAUSE_WINDOW) -> bool:
    """True if a pause mark lies within `window` seconds of `transition_time`.

    Without a transition time the marks are taken as already localised to the
    transition, so any pause among them counts.
    """
    for mark in timing_marks or ():
        if mark.type != TimingMarkType.PAUSE:
            continue
        if transition_time is None or abs(mark.timestamp - transition_time) <= window:
            return True
    return False


def select_transition(scene_purpose: ScenePurpose,
                      scene_number: int,
                      total_scenes: int,
                      nearby_timing_marks: Optional[Iterable[TimingMark]] = None,
                      transition_time: Optional[float] = None,
                      pause_window: float = DEFAULT_PAUSE_WINDOW) -> Transition:
    """Pick the boundary transition for a scene from the rule table."""
    if scene_number == 1:
        kind, duration = FIRST_SCENE_TRANSITION
    elif scene_number == total_scenes:
        kind, duration = LAST_SCENE_TRANSITION
    else:
        kind, duration = PURPOSE_TRANSITIONS.get(scene_purpose, DEFAULT_TRANSITION)

    return Transition(
        type=kind,
        duration=duration,
        speech_aligned=near_pause(nearby_timing_marks, transition_time, pause_window),
    )


def select_segment_transition(segment_index: int,
                              scene_number: int,
                              segment_start: float,
                              nearby_timing_marks: Optional[Iterable[TimingMark]] = None,
                              crossfade_duration: float = 0.5,
                              pause_window: float = DEFAULT_PAUSE_WINDOW) -> Optional[Transition]:
    """Entry transition of a segment within its scene.

    The opening segment of the video fades in; the opening segment of any
    other scene has none because the previous scene's exit covers that cut.
    """
    marks = list(nearby_timing_marks or ())
    if segment_index == 0:
        if scene_number != 1:
            return None
        kind, duration = FIRST_SCENE_TRANSITION
    else:
        kind, duration = TransitionType.CROSSFADE, crossfade_duration

    return Transition(
        type=kind,
        duration=duration,
        speech_aligned=near_pause(marks, segment_start, pause_window),
    )


class TransitionSelector:
    """Applies the transition rules with configured windows and durations."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.pause_window = self.config.transitions.pause_alignment_window
        self.crossfade_duration = self.config.transitions.segment_crossfade_duration

    def scene_boundary(self,
                       scene_purpose: ScenePurpose,
                       scene_number: int,
                       total_scenes: int,
                       interval: SceneInterval,
                       timing_marks: Iterable[TimingMark] = ()) -> Tuple[Optional[Transition], Optional[Transition]]:
        """Return (transition_in, transition_out) for a scene.

        A fade-in is an entry, placed at the scene start; everything else is
        the scene's exit, placed at its end.
        """
        marks = list(timing_marks)
        entering = scene_number == 1
        transition = select_transition(
            scene_purpose,
            scene_number,
            total_scenes,
            nearby_timing_marks=marks,
            transition_time=interval.start if entering else interval.end,
            pause_window=self.pause_window,
        )
        if transition.type == TransitionType.FADE_IN:
            return transition, None
        return None, transition

    def segment_entry(self,
                      segment_index: int,
                      scene_number: int,
                      segment_start: float,
                      timing_marks: Iterable[TimingMark] = ()) -> Optional[Transition]:
        return select_segment_transition(
            segment_index,
            scene_number,
            segment_start,
            nearby_timing_marks=timing_marks,
            crossfade_duration=self.crossfade_duration,
            pause_window=self.pause_window,
        )
