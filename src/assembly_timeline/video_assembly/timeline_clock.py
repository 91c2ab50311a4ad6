"""Scene clock.

Decides each scene's [start, end) interval. Narration breakpoints are
authoritative when present; otherwise scenes are laid back-to-back from t=0
using their planned durations.
"""

from __future__ import annotations

from typing import Dict, Optional

from .errors import InternalInvariantError
from .timeline_models import AudioTimingRecord, SceneInterval, ScenePlan

# Breakpoints closer than this are the same boundary (matches validation)
TOUCH_EPSILON = 1e-6


def compute_scene_times(scene_plan: ScenePlan,
                        audio_timing: Optional[AudioTimingRecord] = None) -> Dict[int, SceneInterval]:
    """Return {scene_number: SceneInterval} in ascending scene order.

    Pure: identical inputs always give identical intervals.
    """
    intervals: Dict[int, SceneInterval] = {}

    if audio_timing is not None:
        for scene in scene_plan.sorted_scenes():
            bp = audio_timing.breakpoint_for(scene.scene_number)
            if bp is None:
                raise InternalInvariantError(
                    f"scene {scene.scene_number} has no audio breakpoint", scene.scene_number
                )
            intervals[scene.scene_number] = SceneInterval(
                start=bp.start_time, end=bp.end_time, duration=bp.duration, from_audio=True
            )
        return _share_touching_boundaries(intervals)

    t = 0.0
    for scene in scene_plan.sorted_scenes():
        end = t + scene.planned_duration
        intervals[scene.scene_number] = SceneInterval(
            start=t, end=end, duration=scene.planned_duration
        )
        t = end
    return intervals


def _share_touching_boundaries(intervals: Dict[int, SceneInterval]) -> Dict[int, SceneInterval]:
    # a scene ending within TOUCH_EPSILON of the next start ends exactly there
    numbers = list(intervals)
    for current, following in zip(numbers, numbers[1:]):
        iv = intervals[current]
        next_start = intervals[following].start
        if iv.end != next_start and abs(iv.end - next_start) <= TOUCH_EPSILON:
            intervals[current] = SceneInterval(
                start=iv.start, end=next_start, duration=next_start - iv.start, from_audio=iv.from_audio
            )
    return intervals


def timeline_end(intervals: Dict[int, SceneInterval]) -> float:
    return max((iv.end for iv in intervals.values()), default=0.0)
