"""
Video Assembly Timeline Compiler

This module compiles the upstream pipeline records into a renderer-ready
assembly timeline, combining:
- Scene plan (purpose and planned duration per scene)
- Media inventory (curated images and video clips per scene)
- Audio timing (narration breakpoints and timing marks, optional)
- Pacing, Ken Burns motion and transition selection
- Quality scoring and publish readiness
"""

from .context_validator import ContextValidator, validate_context
from .errors import (
    AssemblerStateError, InternalInvariantError, TimelineCompilerError, ValidationFailedError,
)
from .quality_scorer import QualityScorer
from .segment_sequencer import SegmentSequencer
from .timeline_assembler import AssemblyState, TimelineAssembler, compile_timeline
from .timeline_builder import build_render_clips
from .timeline_clock import compute_scene_times
from .timeline_models import (
    AssemblyTimeline, AudioTimingRecord, CompilationResult, MediaAsset, MediaInventory,
    QualityReport, Scene, SceneMediaMapping, ScenePlan, ValidationResult,
)
from .transition_selector import TransitionSelector, select_transition

__all__ = [
    'TimelineAssembler',
    'AssemblyState',
    'compile_timeline',
    'ContextValidator',
    'validate_context',
    'compute_scene_times',
    'SegmentSequencer',
    'TransitionSelector',
    'select_transition',
    'QualityScorer',
    'build_render_clips',
    'AssemblyTimeline',
    'AudioTimingRecord',
    'CompilationResult',
    'MediaAsset',
    'MediaInventory',
    'QualityReport',
    'Scene',
    'SceneMediaMapping',
    'ScenePlan',
    'ValidationResult',
    'TimelineCompilerError',
    'ValidationFailedError',
    'InternalInvariantError',
    'AssemblerStateError',
]
