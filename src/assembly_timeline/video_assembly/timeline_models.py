"""
Assembly Timeline Data Models

Pydantic models for the three upstream records (scene plan, media inventory,
audio timing) and for the compiled assembly timeline handed to the renderer.
Every record is frozen: a compilation never patches its inputs or its output.
"""

from typing import List, Optional, Dict, Any, Tuple
from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, computed_field,
    field_validator, model_validator,
)
from enum import Enum


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ScenePurpose(str, Enum):
    """Narrative role of a scene in the script"""
    HOOK = "hook"
    PROBLEM = "problem"
    SOLUTION = "solution"
    CALL_TO_ACTION = "call_to_action"
    GENERIC = "generic"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class TimingMarkType(str, Enum):
    PAUSE = "pause"
    EMPHASIS = "emphasis"
    SPEECH = "speech"


class PacingPhase(str, Enum):
    """Retention phases of a scene"""
    HOOK = "hook"
    MAIN = "main"
    CONCLUSION = "conclusion"


class TransitionType(str, Enum):
    """Types of transitions between segments and scenes"""
    FADE_IN = "fade-in"
    FADE_OUT = "fade-out"
    QUICK_CUT = "quick-cut"
    DISSOLVE = "dissolve"
    SLIDE = "slide"
    ZOOM = "zoom"
    CROSSFADE = "crossfade"


class KenBurnsPreset(str, Enum):
    """Canned pan/zoom motions for still images"""
    SLOW_ZOOM = "slow_zoom"
    PAN_RIGHT = "pan_right"
    PAN_DOWN = "pan_down"
    STATIC_FILL = "static_fill"


class IssueKind(str, Enum):
    STRUCTURAL_ERROR = "structural_error"
    CONSISTENCY_WARNING = "consistency_warning"
    INTERNAL_INVARIANT = "internal_invariant"


# ---------------------------------------------------------------------------
# Scene plan
# ---------------------------------------------------------------------------

class Scene(_Record):
    """A narrative unit of the script"""
    scene_number: int = Field(ge=1, validation_alias=AliasChoices("scene_number", "sceneNumber"))
    purpose: ScenePurpose = ScenePurpose.GENERIC
    planned_duration: float = Field(
        gt=0.0, validation_alias=AliasChoices("planned_duration", "plannedDuration", "duration")
    )
    visual_style: str = Field(default="", validation_alias=AliasChoices("visual_style", "visualStyle"))
    mood: str = ""
    title: str = Field(default="", validation_alias=AliasChoices("title", "sceneTitle"))

    @field_validator("purpose", mode="before")
    @classmethod
    def _coerce_purpose(cls, value: Any) -> Any:
        # Upstream planners invent purposes freely; anything unknown is generic
        if isinstance(value, ScenePurpose):
            return value
        try:
            return ScenePurpose(str(value).strip().lower())
        except ValueError:
            return ScenePurpose.GENERIC


class ScenePlan(_Record):
    scenes: List[Scene]

    @property
    def scene_numbers(self) -> List[int]:
        return [scene.scene_number for scene in self.scenes]

    @property
    def total_scenes(self) -> int:
        return len(self.scenes)

    def get_scene(self, scene_number: int) -> Optional[Scene]:
        for scene in self.scenes:
            if scene.scene_number == scene_number:
                return scene
        return None

    def sorted_scenes(self) -> List[Scene]:
        return sorted(self.scenes, key=lambda s: s.scene_number)

    @classmethod
    def from_dict(cls, data: Any) -> "ScenePlan":
        """Build from a scene-planning payload (a scene list or {"scenes": [...]})"""
        if isinstance(data, list):
            data = {"scenes": data}
        return cls.model_validate(data)


# ---------------------------------------------------------------------------
# Media inventory
# ---------------------------------------------------------------------------

class MediaAsset(_Record):
    asset_id: str = Field(validation_alias=AliasChoices("asset_id", "assetId", "id"))
    kind: MediaKind = Field(validation_alias=AliasChoices("kind", "type", "assetType"))
    source_path: str = Field(
        validation_alias=AliasChoices("source_path", "sourcePath", "s3Location", "s3Url", "url")
    )
    relevance_score: float = Field(
        default=0.0, ge=0.0, le=100.0,
        validation_alias=AliasChoices("relevance_score", "relevanceScore", "score"),
    )
    duration_hint: Optional[float] = Field(
        default=None, gt=0.0, validation_alias=AliasChoices("duration_hint", "durationHint")
    )

    @model_validator(mode="after")
    def _duration_hint_only_for_video(self) -> "MediaAsset":
        if self.duration_hint is not None and self.kind != MediaKind.VIDEO:
            raise ValueError(f"asset {self.asset_id}: duration_hint is only valid for video assets")
        return self


class SceneMediaMapping(_Record):
    scene_number: int = Field(ge=1, validation_alias=AliasChoices("scene_number", "sceneNumber"))
    assets: List[MediaAsset] = Field(
        default_factory=list, validation_alias=AliasChoices("assets", "mediaAssets", "mediaSequence")
    )
    total_assets_available: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("total_assets_available", "totalAssetsAvailable")
    )

    @model_validator(mode="before")
    @classmethod
    def _default_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and not any(
            k in data for k in ("total_assets_available", "totalAssetsAvailable")
        ):
            assets = data.get("assets", data.get("mediaAssets", data.get("mediaSequence", [])))
            data = {**data, "total_assets_available": len(assets or [])}
        return data

    @property
    def videos(self) -> List[MediaAsset]:
        return [a for a in self.assets if a.kind == MediaKind.VIDEO]

    @property
    def images(self) -> List[MediaAsset]:
        return [a for a in self.assets if a.kind == MediaKind.IMAGE]


class MediaInventory(_Record):
    mappings: Dict[int, SceneMediaMapping] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _keys_match_scene_numbers(self) -> "MediaInventory":
        for key, mapping in self.mappings.items():
            if key != mapping.scene_number:
                raise ValueError(
                    f"media mapping keyed {key} describes scene {mapping.scene_number}"
                )
        return self

    def get_mapping(self, scene_number: int) -> Optional[SceneMediaMapping]:
        return self.mappings.get(scene_number)

    @property
    def scene_numbers(self) -> List[int]:
        return sorted(self.mappings)

    @classmethod
    def from_mappings(cls, mappings: List[SceneMediaMapping]) -> "MediaInventory":
        return cls(mappings={m.scene_number: m for m in mappings})

    @classmethod
    def from_dict(cls, data: Any) -> "MediaInventory":
        """Build from a media-curation payload.

        Accepts {"sceneMediaMapping": [...]}, {"mappings": {...}} or a bare list
        of per-scene mappings.
        """
        if isinstance(data, dict) and "sceneMediaMapping" in data:
            data = data["sceneMediaMapping"]
        if isinstance(data, list):
            return cls.from_mappings([SceneMediaMapping.model_validate(m) for m in data])
        return cls.model_validate(data)


# ---------------------------------------------------------------------------
# Audio timing
# ---------------------------------------------------------------------------

class SceneBreakpoint(_Record):
    """Authoritative start/duration of a scene from the synthesized narration"""
    scene_number: int = Field(ge=1, validation_alias=AliasChoices("scene_number", "sceneNumber"))
    start_time: float = Field(ge=0.0, validation_alias=AliasChoices("start_time", "startTime"))
    duration: float = Field(gt=0.0)
    audio_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("audio_path", "audioPath", "s3Location")
    )

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


class TimingMark(_Record):
    scene_number: int = Field(ge=1, validation_alias=AliasChoices("scene_number", "sceneNumber"))
    timestamp: float = Field(ge=0.0)  # seconds on the master narration track
    type: TimingMarkType


class AudioTimingRecord(_Record):
    master_duration: float = Field(gt=0.0, validation_alias=AliasChoices("master_duration", "masterDuration"))
    scene_breakpoints: List[SceneBreakpoint] = Field(
        default_factory=list, validation_alias=AliasChoices("scene_breakpoints", "sceneBreakpoints")
    )
    timing_marks: List[TimingMark] = Field(
        default_factory=list, validation_alias=AliasChoices("timing_marks", "timingMarks")
    )

    def breakpoint_for(self, scene_number: int) -> Optional[SceneBreakpoint]:
        for bp in self.scene_breakpoints:
            if bp.scene_number == scene_number:
                return bp
        return None

    def marks_for_scene(self, scene_number: int) -> List[TimingMark]:
        return [m for m in self.timing_marks if m.scene_number == scene_number]

    @property
    def total_breakpoint_duration(self) -> float:
        return sum(bp.duration for bp in self.scene_breakpoints)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioTimingRecord":
        """Build from a narration-synthesis payload.

        Besides the flat shape, the nested narration context is understood:
        breakpoints under ``synchronizationData`` and the master duration under
        ``audioFiles.masterAudio``.
        """
        flat = dict(data)
        sync = data.get("synchronizationData") or {}
        if "sceneBreakpoints" in sync and "sceneBreakpoints" not in flat:
            flat["sceneBreakpoints"] = sync["sceneBreakpoints"]
        master = (data.get("audioFiles") or {}).get("masterAudio") or {}
        if "duration" in master and not any(k in flat for k in ("masterDuration", "master_duration")):
            flat["masterDuration"] = master["duration"]
        return cls.model_validate(flat)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationIssue(_Record):
    kind: IssueKind
    code: str
    message: str
    scene_number: Optional[int] = None

    @property
    def is_fatal(self) -> bool:
        return self.kind != IssueKind.CONSISTENCY_WARNING

    def __str__(self) -> str:
        return self.message


class ValidationResult(_Record):
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Compiled timeline
# ---------------------------------------------------------------------------

class SceneInterval(_Record):
    start: float
    end: float
    duration: float
    from_audio: bool = False


class Transition(_Record):
    type: TransitionType
    duration: float = Field(ge=0.0)
    speech_aligned: bool = False


class VisualTreatment(_Record):
    """How a segment's asset is framed and moved on screen"""
    kind: MediaKind
    ken_burns: Optional[KenBurnsPreset] = None
    ken_burns_start: Optional[Tuple[float, float, float]] = None  # zoom, x, y
    ken_burns_end: Optional[Tuple[float, float, float]] = None
    scale_to_fill: bool = False
    crop_to_frame: bool = False
    fade_in: bool = False
    fade_out: bool = False
    filters: List[str] = Field(default_factory=list)


class VisualSegment(_Record):
    """A sub-interval of a scene showing exactly one asset"""
    index: int = Field(ge=0)
    start_time: float  # seconds on the timeline
    end_time: float  # equals the next segment's start_time exactly
    phase: PacingPhase
    asset: MediaAsset
    visual_treatment: VisualTreatment
    transition_in: Optional[Transition] = None
    timing_marks: List[TimingMark] = Field(default_factory=list)

    @model_validator(mode="after")
    def _non_empty(self) -> "VisualSegment":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"segment {self.index} ends at {self.end_time} before it starts at {self.start_time}"
            )
        return self

    @computed_field
    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class AudioTrack(_Record):
    start_time: float
    duration: float
    source_path: Optional[str] = None
    volume: float = Field(default=1.0, ge=0.0, le=1.0)
    fade_in: float = Field(default=0.0, ge=0.0)
    fade_out: float = Field(default=0.0, ge=0.0)
    precise_sync: bool = False


class SceneEffects(_Record):
    background_music: str = "subtle"
    text_overlay: bool = False
    emphasize_on_speech_marks: bool = False


class SceneTimeline(_Record):
    scene_number: int
    purpose: ScenePurpose
    start_time: float
    end_time: float
    audio_track: AudioTrack
    segments: List[VisualSegment]
    transition_in: Optional[Transition] = None
    transition_out: Optional[Transition] = None
    scene_effects: SceneEffects = SceneEffects()

    @computed_field
    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class AssemblyTimeline(_Record):
    """The only artifact precise enough to drive a renderer"""
    total_duration: float
    scenes: List[SceneTimeline]
    audio_synchronized: bool = False
    seed: int = 0

    def get_scene(self, scene_number: int) -> Optional[SceneTimeline]:
        for scene in self.scenes:
            if scene.scene_number == scene_number:
                return scene
        return None

    def all_segments(self) -> List[VisualSegment]:
        return [seg for scene in self.scenes for seg in scene.segments]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return self.model_dump_json()


class QualityReport(_Record):
    average_relevance: float
    audio_sync_confidence: float
    overall_score: float
    ready_for_publish: bool
    scenes_covered: int = 0
    total_segments: int = 0
    distinct_assets: int = 0
    video_segment_ratio: float = 0.0


class CompilationResult(_Record):
    """Outcome of one compilation: a timeline, or the errors that blocked it"""
    timeline: Optional[AssemblyTimeline] = None
    quality: Optional[QualityReport] = None
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return not self.errors and self.timeline is not None

    def raise_for_errors(self) -> AssemblyTimeline:
        """Return the timeline or raise the matching compiler exception"""
        from .errors import InternalInvariantError, ValidationFailedError

        if self.ok:
            return self.timeline
        internal = [e for e in self.errors if e.kind == IssueKind.INTERNAL_INVARIANT]
        if internal:
            raise InternalInvariantError(internal[0].message, scene_number=internal[0].scene_number)
        raise ValidationFailedError(self.errors)
