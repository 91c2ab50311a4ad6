"""Segment sequencer.

Expands one scene into contiguous visual segments using a retention-oriented
pacing heuristic, then assigns an asset and a visual treatment to each:

- hook: first min(15s, 10% of the scene), fast 3-5s cuts
- main: up to 90% of the scene, 5-8s cuts
- conclusion: the tail, slower 6-10s cuts

Segment boundaries are chained from the scene start so the segments tile the
scene exactly. Asset selection and Ken Burns cycling are pure functions of the
segment index and the scene's asset lists, so scenes can be sequenced in any
order or in parallel.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from ..utils.config import Config, PacingConfig
from ..utils.logger import LoggerMixin
from ..utils.seed import RandomSource, SeededRandomSource, seed_for_scene
from .errors import InternalInvariantError
from .timeline_models import (
    KenBurnsPreset, MediaAsset, MediaKind, PacingPhase, Scene, SceneInterval,
    SceneMediaMapping, TimingMark, VisualSegment, VisualTreatment,
)
from .transition_selector import TransitionSelector

# Residual phase time below this is folded into the previous cut
EPSILON = 1e-9

RENDER_FPS = 25
FRAME_SIZE = "1920x1080"
SCALE_TO_FILL = "scale=1920:1080:force_original_aspect_ratio=increase"
CROP_TO_FRAME = "crop=1920:1080"

# preset, zoompan expression (frames filled in per segment), start/end (zoom, x, y)
KEN_BURNS_PRESETS: List[Tuple[KenBurnsPreset, Optional[str], Tuple[float, float, float], Tuple[float, float, float]]] = [
    (KenBurnsPreset.SLOW_ZOOM, "zoompan=z=1.1:d={frames}:s=" + FRAME_SIZE,
     (1.0, 0.5, 0.5), (1.1, 0.5, 0.5)),
    (KenBurnsPreset.PAN_RIGHT, "zoompan=z=1.05:x=iw*0.1:d={frames}:s=" + FRAME_SIZE,
     (1.05, 0.4, 0.5), (1.05, 0.6, 0.5)),
    (KenBurnsPreset.PAN_DOWN, "zoompan=z=1.08:y=ih*0.1:d={frames}:s=" + FRAME_SIZE,
     (1.08, 0.5, 0.4), (1.08, 0.5, 0.6)),
    (KenBurnsPreset.STATIC_FILL, None, (1.0, 0.5, 0.5), (1.0, 0.5, 0.5)),
]


# --------- Pacing ---------

def phase_bounds(duration: float, pacing: PacingConfig) -> List[Tuple[PacingPhase, float, float]]:
    """Scene-relative [start, end) of the hook, main and conclusion phases."""
    hook_end = min(pacing.hook_max_seconds, pacing.hook_ratio * duration)
    main_end = max(hook_end, pacing.main_end_ratio * duration)
    return [
        (PacingPhase.HOOK, 0.0, hook_end),
        (PacingPhase.MAIN, hook_end, main_end),
        (PacingPhase.CONCLUSION, main_end, duration),
    ]


def _phase_range(phase: PacingPhase, pacing: PacingConfig) -> Tuple[float, float]:
    if phase == PacingPhase.HOOK:
        return pacing.hook_segment_range
    if phase == PacingPhase.MAIN:
        return pacing.main_segment_range
    return pacing.conclusion_segment_range


def split_scene(duration: float,
                random_source: RandomSource,
                pacing: Optional[PacingConfig] = None) -> List[Tuple[PacingPhase, float, float]]:
    """Cut a scene of `duration` seconds into (phase, start, end) offsets.

    Each phase draws cut lengths from its range, clamped to the time the phase
    has left, until the phase is used up. The last offset is exactly `duration`.
    """
    pacing = pacing or PacingConfig()
    cuts: List[Tuple[PacingPhase, float, float]] = []

    for phase, start, end in phase_bounds(duration, pacing):
        low, high = _phase_range(phase, pacing)
        cursor = start
        while end - cursor > EPSILON:
            cut_end = cursor + random_source.uniform(low, high)
            if cut_end >= end - EPSILON:
                cut_end = end
            cuts.append((phase, cursor, cut_end))
            cursor = cut_end

    # A phase shorter than EPSILON emits nothing; stretch the last cut to the end
    if cuts and cuts[-1][2] != duration:
        phase, start, _ = cuts[-1]
        cuts[-1] = (phase, start, duration)
    return cuts


def timeline_bounds(cuts: Sequence[Tuple[PacingPhase, float, float]],
                    scene_interval: SceneInterval) -> List[Tuple[PacingPhase, float, float]]:
    """Place scene-relative cuts on the timeline as (phase, start, end).

    Boundaries are computed once and shared, so each end is the next start
    and the last end is the scene end. Cuts that collapse to zero width once
    offset are merged into their neighbour.
    """
    phases: List[PacingPhase] = []
    starts: List[float] = []
    for phase, offset, _ in cuts:
        start = scene_interval.start + offset
        if starts and start <= starts[-1]:
            continue
        if start >= scene_interval.end:
            break
        phases.append(phase)
        starts.append(start)
    ends = starts[1:] + [scene_interval.end]
    return list(zip(phases, starts, ends))


# --------- Asset selection ---------

def wants_video(segment_index: int, phase: PacingPhase, video_every: int = 5) -> bool:
    return segment_index % video_every == 0 or phase in (PacingPhase.HOOK, PacingPhase.CONCLUSION)


def choose_asset(segment_index: int,
                 phase: PacingPhase,
                 videos: Sequence[MediaAsset],
                 images: Sequence[MediaAsset],
                 videos_used: int,
                 images_used: int,
                 video_every: int = 5) -> MediaAsset:
    """Pick the asset for one segment.

    Each video is shown once, at key moments, while unused videos remain;
    images fill the rest round-robin. With no images at all the videos are
    reused round-robin instead.
    """
    if not images:
        if not videos:
            raise InternalInvariantError(
                f"segment {segment_index}: no video or image assets left to assign"
            )
        return videos[videos_used % len(videos)]

    if videos_used < len(videos) and wants_video(segment_index, phase, video_every):
        return videos[videos_used]
    return images[images_used % len(images)]


# --------- Visual treatment ---------

def ken_burns_for(segment_index: int):
    return KEN_BURNS_PRESETS[segment_index % len(KEN_BURNS_PRESETS)]


def video_treatment(phase: PacingPhase) -> VisualTreatment:
    fade_in = phase == PacingPhase.HOOK
    filters = [SCALE_TO_FILL, CROP_TO_FRAME]
    if fade_in:
        filters.append("fade=in:0:30")
    return VisualTreatment(
        kind=MediaKind.VIDEO,
        scale_to_fill=True,
        crop_to_frame=True,
        fade_in=fade_in,
        filters=filters,
    )


def image_treatment(segment_index: int,
                    duration: float,
                    first_in_scene: bool,
                    last_in_timeline: bool) -> VisualTreatment:
    preset, zoompan, kb_start, kb_end = ken_burns_for(segment_index)
    if zoompan is not None:
        filters = [zoompan.format(frames=max(1, round(duration * RENDER_FPS)))]
    else:
        filters = [SCALE_TO_FILL, CROP_TO_FRAME]
    if first_in_scene:
        filters.append("fade=in:0:15")
    if last_in_timeline:
        fade_len = min(1.0, duration)
        filters.append(f"fade=out:st={duration - fade_len:.3f}:d={fade_len:.3f}")
    return VisualTreatment(
        kind=MediaKind.IMAGE,
        ken_burns=preset,
        ken_burns_start=kb_start,
        ken_burns_end=kb_end,
        scale_to_fill=zoompan is None,
        crop_to_frame=zoompan is None,
        fade_in=first_in_scene,
        fade_out=last_in_timeline,
        filters=filters,
    )


def marks_between(timing_marks: Iterable[TimingMark], start: float, end: float) -> List[TimingMark]:
    return [m for m in timing_marks if start <= m.timestamp <= end]


class SegmentSequencer(LoggerMixin):
    """Builds the visual segments of one scene."""

    def __init__(self,
                 config: Optional[Config] = None,
                 transition_selector: Optional[TransitionSelector] = None):
        self.config = config or Config()
        self.pacing = self.config.pacing
        self.transitions = transition_selector or TransitionSelector(self.config)

    def default_random_source(self, scene_number: int) -> SeededRandomSource:
        continuity = self.config.continuity
        return SeededRandomSource(
            seed_for_scene(continuity.seed_namespace, continuity.default_seed, scene_number)
        )

    def sequence(self,
                 scene: Scene,
                 media_mapping: SceneMediaMapping,
                 scene_interval: SceneInterval,
                 random_source: Optional[RandomSource] = None,
                 *,
                 is_last_scene: bool = False,
                 timing_marks: Iterable[TimingMark] = ()) -> List[VisualSegment]:
        """Expand a scene into its ordered visual segments.

        Args:
            scene: Scene being sequenced
            media_mapping: Assets mapped to the scene
            scene_interval: Resolved timing of the scene
            random_source: Source of cut lengths; seeded per scene if omitted
            is_last_scene: Whether this scene closes the video
            timing_marks: Narration marks belonging to the scene

        Returns:
            Contiguous segments whose durations sum to the scene duration
        """
        if random_source is None:
            random_source = self.default_random_source(scene.scene_number)

        marks = list(timing_marks)
        videos = media_mapping.videos
        images = media_mapping.images
        cuts = timeline_bounds(
            split_scene(scene_interval.duration, random_source, self.pacing), scene_interval
        )

        segments: List[VisualSegment] = []
        videos_used = 0
        images_used = 0

        for index, (phase, start_time, end_time) in enumerate(cuts):
            try:
                asset = choose_asset(
                    index, phase, videos, images, videos_used, images_used,
                    self.pacing.video_every_n_segments,
                )
            except InternalInvariantError as e:
                raise InternalInvariantError(
                    f"scene {scene.scene_number}: {e}", scene.scene_number
                ) from e

            duration = end_time - start_time

            if asset.kind == MediaKind.VIDEO:
                videos_used += 1
                treatment = video_treatment(phase)
            else:
                images_used += 1
                treatment = image_treatment(
                    index,
                    duration,
                    first_in_scene=index == 0,
                    last_in_timeline=is_last_scene and index == len(cuts) - 1,
                )

            segments.append(VisualSegment(
                index=index,
                start_time=start_time,
                end_time=end_time,
                phase=phase,
                asset=asset,
                visual_treatment=treatment,
                transition_in=self.transitions.segment_entry(
                    index, scene.scene_number, start_time, marks
                ),
                timing_marks=marks_between(marks, start_time, end_time),
            ))

        self.logger.debug(
            f"Scene {scene.scene_number}: {len(segments)} segments "
            f"({sum(1 for s in segments if s.phase == PacingPhase.HOOK)} hook, "
            f"{sum(1 for s in segments if s.phase == PacingPhase.MAIN)} main, "
            f"{sum(1 for s in segments if s.phase == PacingPhase.CONCLUSION)} conclusion), "
            f"{videos_used} video / {images_used} image"
        )
        return segments
