"""
Timeline Assembler

Top-level compiler that turns the three upstream records into one assembly
timeline:
- Context validation (fails closed, reporting every error at once)
- Scene clock from narration breakpoints or planned durations
- Per-scene segment sequencing and transitions, optionally in parallel
- Quality scoring and publish readiness

An assembler compiles exactly once; build a fresh one per request.
"""

from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, List, Optional

from ..utils.config import Config
from ..utils.logger import LoggerMixin
from ..utils.seed import SeededRandomSource, seed_for_scene
from .context_validator import ContextValidator
from .errors import AssemblerStateError, InternalInvariantError
from .quality_scorer import QualityScorer
from .segment_sequencer import SegmentSequencer
from .timeline_clock import compute_scene_times, timeline_end
from .timeline_models import (
    AssemblyTimeline, AudioTimingRecord, AudioTrack, CompilationResult, IssueKind,
    MediaInventory, Scene, SceneEffects, SceneInterval, ScenePlan, ScenePurpose,
    SceneTimeline, ValidationIssue,
)
from .transition_selector import TransitionSelector

SCENE_AUDIO_FADE = 0.5


class AssemblyState(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    FAILED = "failed"
    TIMING = "timing"
    SEQUENCING = "sequencing"
    SCORING = "scoring"
    COMPLETED = "completed"


_ALLOWED = {
    AssemblyState.PENDING: {AssemblyState.VALIDATING},
    AssemblyState.VALIDATING: {AssemblyState.FAILED, AssemblyState.TIMING},
    AssemblyState.TIMING: {AssemblyState.SEQUENCING},
    AssemblyState.SEQUENCING: {AssemblyState.SCORING, AssemblyState.FAILED},
    AssemblyState.SCORING: {AssemblyState.COMPLETED},
    AssemblyState.FAILED: set(),
    AssemblyState.COMPLETED: set(),
}


def scene_effects_for(scene: Scene, has_timing_marks: bool) -> SceneEffects:
    return SceneEffects(
        background_music="energetic" if scene.purpose == ScenePurpose.HOOK else "subtle",
        text_overlay=scene.purpose == ScenePurpose.CALL_TO_ACTION,
        emphasize_on_speech_marks=has_timing_marks,
    )


class TimelineAssembler(LoggerMixin):
    """
    Single-use assembly timeline compiler.

    Features:
    - Deterministic output for a given seed, independent of worker scheduling
    - Parallel per-scene sequencing (fork-join, no shared state)
    - Structured failure results instead of partial timelines
    """

    def __init__(self, config: Optional[Config] = None, seed: Optional[int] = None):
        self.config = config or Config()
        self.seed = self.config.continuity.default_seed if seed is None else seed
        self.state = AssemblyState.PENDING

        self.validator = ContextValidator(self.config)
        self.transitions = TransitionSelector(self.config)
        self.sequencer = SegmentSequencer(self.config, self.transitions)
        self.scorer = QualityScorer(self.config)

        self.max_workers = self.config.performance.max_parallel_scenes

    def _advance(self, state: AssemblyState) -> None:
        if state not in _ALLOWED[self.state]:
            raise AssemblerStateError(f"cannot move from {self.state.value} to {state.value}")
        self.logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def compile(self,
                scene_plan: ScenePlan,
                media_inventory: MediaInventory,
                audio_timing: Optional[AudioTimingRecord] = None) -> CompilationResult:
        """
        Compile the records into an assembly timeline.

        Args:
            scene_plan: Scenes with purpose and planned duration
            media_inventory: Assets mapped per scene
            audio_timing: Narration breakpoints and timing marks, optional

        Returns:
            CompilationResult holding the timeline and quality report, or the
            errors that blocked compilation (never a partial timeline)
        """
        if self.state != AssemblyState.PENDING:
            raise AssemblerStateError(
                "TimelineAssembler is single-use; construct a new one per compilation"
            )

        self._advance(AssemblyState.VALIDATING)
        validation = self.validator.validate(scene_plan, media_inventory, audio_timing)
        if not validation.ok:
            self._advance(AssemblyState.FAILED)
            return CompilationResult(errors=validation.errors, warnings=validation.warnings)

        self._advance(AssemblyState.TIMING)
        intervals = compute_scene_times(scene_plan, audio_timing)
        self.logger.info(
            f"Scene clock resolved {len(intervals)} scenes from "
            f"{'narration breakpoints' if audio_timing is not None else 'planned durations'}"
        )

        self._advance(AssemblyState.SEQUENCING)
        try:
            scene_timelines = self._sequence_scenes(scene_plan, media_inventory, intervals, audio_timing)
        except InternalInvariantError as e:
            self.logger.error(f"Sequencing aborted on internal invariant: {e}")
            self._advance(AssemblyState.FAILED)
            issue = ValidationIssue(
                kind=IssueKind.INTERNAL_INVARIANT,
                code="internal_invariant",
                message=str(e),
                scene_number=e.scene_number,
            )
            return CompilationResult(errors=[issue], warnings=validation.warnings)

        total_duration = timeline_end(intervals)
        if audio_timing is not None:
            total_duration = max(total_duration, audio_timing.master_duration)

        timeline = AssemblyTimeline(
            total_duration=total_duration,
            scenes=scene_timelines,
            audio_synchronized=audio_timing is not None,
            seed=self.seed,
        )

        self._advance(AssemblyState.SCORING)
        quality = self.scorer.score(timeline, media_inventory, audio_timing, validation)

        self._advance(AssemblyState.COMPLETED)
        self.logger.info(
            f"Timeline compiled: {len(timeline.scenes)} scenes, "
            f"{quality.total_segments} segments, {timeline.total_duration:.1f}s, "
            f"quality {quality.overall_score:.1f} (publish ready: {quality.ready_for_publish})"
        )
        return CompilationResult(timeline=timeline, quality=quality, warnings=validation.warnings)

    def _sequence_scenes(self,
                         scene_plan: ScenePlan,
                         media_inventory: MediaInventory,
                         intervals: Dict[int, SceneInterval],
                         audio_timing: Optional[AudioTimingRecord]) -> List[SceneTimeline]:
        scenes = scene_plan.sorted_scenes()
        total_scenes = scene_plan.total_scenes

        def build(scene: Scene) -> SceneTimeline:
            return self._compile_scene(
                scene, media_inventory, intervals[scene.scene_number], total_scenes, audio_timing
            )

        if self.max_workers <= 1 or len(scenes) <= 1:
            results = [build(scene) for scene in scenes]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(scenes))) as executor:
                futures = [executor.submit(build, scene) for scene in scenes]
                results = [future.result() for future in futures]

        return sorted(results, key=lambda s: s.scene_number)

    def _compile_scene(self,
                       scene: Scene,
                       media_inventory: MediaInventory,
                       interval: SceneInterval,
                       total_scenes: int,
                       audio_timing: Optional[AudioTimingRecord]) -> SceneTimeline:
        number = scene.scene_number
        is_last = number == total_scenes
        marks = audio_timing.marks_for_scene(number) if audio_timing is not None else []
        # boundary transitions see every mark; the pause window picks the near ones
        all_marks = audio_timing.timing_marks if audio_timing is not None else []
        bp = audio_timing.breakpoint_for(number) if audio_timing is not None else None

        random_source = SeededRandomSource(
            seed_for_scene(self.config.continuity.seed_namespace, self.seed, number)
        )
        segments = self.sequencer.sequence(
            scene,
            media_inventory.get_mapping(number),
            interval,
            random_source,
            is_last_scene=is_last,
            timing_marks=marks,
        )
        transition_in, transition_out = self.transitions.scene_boundary(
            scene.purpose, number, total_scenes, interval, all_marks
        )

        audio_track = AudioTrack(
            start_time=interval.start,
            duration=interval.duration,
            source_path=bp.audio_path if bp is not None else None,
            fade_in=SCENE_AUDIO_FADE if number == 1 else 0.0,
            fade_out=SCENE_AUDIO_FADE if is_last else 0.0,
            precise_sync=interval.from_audio,
        )

        return SceneTimeline(
            scene_number=number,
            purpose=scene.purpose,
            start_time=interval.start,
            end_time=interval.end,
            audio_track=audio_track,
            segments=segments,
            transition_in=transition_in,
            transition_out=transition_out,
            scene_effects=scene_effects_for(scene, bool(marks)),
        )


def compile_timeline(scene_plan: ScenePlan,
                     media_inventory: MediaInventory,
                     audio_timing: Optional[AudioTimingRecord] = None,
                     *,
                     seed: Optional[int] = None,
                     config: Optional[Config] = None) -> CompilationResult:
    """Compile once with a fresh assembler."""
    return TimelineAssembler(config, seed=seed).compile(scene_plan, media_inventory, audio_timing)
