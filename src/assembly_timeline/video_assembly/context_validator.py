"""Context validation engine.

Cross-checks the scene plan, media inventory and optional audio timing record
before anything is compiled:
- Scene numbering (non-empty, unique, contiguous from 1)
- Media coverage per scene (mapped, at least one asset)
- Media mapped to scenes that do not exist
- Audio breakpoint coverage, ordering and overlap
- Narration length against the breakpoint total

Every problem is collected; nothing short-circuits, so a caller can fix all of
them in one pass.
"""

from collections import Counter
from typing import List, Optional

from ..utils.config import Config
from ..utils.logger import LoggerMixin
from .timeline_models import (
    AudioTimingRecord, IssueKind, MediaInventory, ScenePlan,
    ValidationIssue, ValidationResult,
)

NO_AUDIO_TIMING_MESSAGE = "no audio timing; falling back to estimated scene durations"

# Tolerance for touching breakpoints (end of one == start of next)
_TIME_EPSILON = 1e-6


def _error(code: str, message: str, scene_number: Optional[int] = None) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.STRUCTURAL_ERROR, code=code, message=message, scene_number=scene_number
    )


def _warning(code: str, message: str, scene_number: Optional[int] = None) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.CONSISTENCY_WARNING, code=code, message=message, scene_number=scene_number
    )


class ContextValidator(LoggerMixin):
    """Validates that the three upstream records agree with each other."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.tolerance = self.config.validation.duration_tolerance_seconds

    def validate(self,
                 scene_plan: ScenePlan,
                 media_inventory: MediaInventory,
                 audio_timing: Optional[AudioTimingRecord] = None) -> ValidationResult:
        """Run every check and return the combined verdict.

        Args:
            scene_plan: Scenes produced by the scene-planning stage
            media_inventory: Per-scene assets produced by media curation
            audio_timing: Breakpoints and timing marks from narration, if any

        Returns:
            ValidationResult with ok == (no errors)
        """
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        errors.extend(self._check_scene_numbering(scene_plan))
        errors.extend(self._check_media_coverage(scene_plan, media_inventory))
        errors.extend(self._check_unknown_media_scenes(scene_plan, media_inventory))
        warnings.extend(self._check_asset_counts(media_inventory))

        if audio_timing is not None:
            audio_errors, audio_warnings = self._check_audio_timing(scene_plan, audio_timing)
            errors.extend(audio_errors)
            warnings.extend(audio_warnings)
        else:
            warnings.append(_warning("no_audio_timing", NO_AUDIO_TIMING_MESSAGE))

        result = ValidationResult(errors=errors, warnings=warnings)
        if result.ok:
            self.logger.info(f"Context validation passed with {len(warnings)} warning(s)")
        else:
            self.logger.warning(
                f"Context validation failed: {len(errors)} error(s), {len(warnings)} warning(s)"
            )
            for issue in errors:
                self.logger.warning(f"  - {issue.code}: {issue.message}")
        return result

    def _check_scene_numbering(self, scene_plan: ScenePlan) -> List[ValidationIssue]:
        if not scene_plan.scenes:
            return [_error("empty_scene_plan", "scene plan contains no scenes")]

        issues = []
        counts = Counter(scene_plan.scene_numbers)
        for number in sorted(n for n, c in counts.items() if c > 1):
            issues.append(_error(
                "duplicate_scene_number",
                f"scene {number} appears {counts[number]} times in the scene plan",
                number,
            ))

        missing = sorted(set(range(1, max(counts) + 1)) - set(counts))
        if missing:
            issues.append(_error(
                "scene_numbers_not_contiguous",
                "scene numbers must be contiguous from 1; missing "
                + ", ".join(str(n) for n in missing),
            ))
        return issues

    def _check_media_coverage(self,
                              scene_plan: ScenePlan,
                              media_inventory: MediaInventory) -> List[ValidationIssue]:
        issues = []
        for number in sorted(set(scene_plan.scene_numbers)):
            mapping = media_inventory.get_mapping(number)
            if mapping is None:
                issues.append(_error(
                    "missing_media", f"scene {number} has no media mapping", number
                ))
            elif not mapping.assets:
                issues.append(_error(
                    "empty_media", f"scene {number} is mapped to zero media assets", number
                ))
        return issues

    def _check_unknown_media_scenes(self,
                                    scene_plan: ScenePlan,
                                    media_inventory: MediaInventory) -> List[ValidationIssue]:
        known = set(scene_plan.scene_numbers)
        return [
            _error(
                "unknown_media_scene",
                f"media inventory maps scene {number}, which is not in the scene plan",
                number,
            )
            for number in media_inventory.scene_numbers
            if number not in known
        ]

    def _check_asset_counts(self, media_inventory: MediaInventory) -> List[ValidationIssue]:
        issues = []
        for number in media_inventory.scene_numbers:
            mapping = media_inventory.get_mapping(number)
            if mapping.total_assets_available < len(mapping.assets):
                issues.append(_warning(
                    "asset_count_mismatch",
                    f"scene {number} lists {len(mapping.assets)} assets but reports "
                    f"{mapping.total_assets_available} available",
                    number,
                ))
        return issues

    def _check_audio_timing(self,
                            scene_plan: ScenePlan,
                            audio_timing: AudioTimingRecord):
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []
        known = set(scene_plan.scene_numbers)

        breakpoint_counts = Counter(bp.scene_number for bp in audio_timing.scene_breakpoints)
        for number in sorted(known):
            if number not in breakpoint_counts:
                errors.append(_error(
                    "missing_breakpoint", f"scene {number} has no audio breakpoint", number
                ))
        for number in sorted(breakpoint_counts):
            if number not in known:
                errors.append(_error(
                    "unknown_breakpoint_scene",
                    f"audio breakpoint for scene {number}, which is not in the scene plan",
                    number,
                ))
            elif breakpoint_counts[number] > 1:
                errors.append(_error(
                    "duplicate_breakpoint",
                    f"scene {number} has {breakpoint_counts[number]} audio breakpoints",
                    number,
                ))

        ordered = sorted(audio_timing.scene_breakpoints, key=lambda bp: (bp.scene_number, bp.start_time))
        for previous, current in zip(ordered, ordered[1:]):
            if current.scene_number == previous.scene_number:
                continue
            if current.start_time < previous.end_time - _TIME_EPSILON:
                errors.append(_error(
                    "overlapping_breakpoints",
                    f"audio breakpoint for scene {current.scene_number} starts at "
                    f"{current.start_time:.3f}s, before scene {previous.scene_number} ends at "
                    f"{previous.end_time:.3f}s",
                    current.scene_number,
                ))

        total = audio_timing.total_breakpoint_duration
        if abs(total - audio_timing.master_duration) > self.tolerance:
            warnings.append(_warning(
                "duration_mismatch",
                f"breakpoint durations sum to {total:.3f}s but narration lasts "
                f"{audio_timing.master_duration:.3f}s",
            ))

        if not audio_timing.timing_marks:
            warnings.append(_warning(
                "no_timing_marks",
                "audio timing marks not available; transitions will not be speech aligned",
            ))
        stray = sorted({m.scene_number for m in audio_timing.timing_marks} - known)
        for number in stray:
            warnings.append(_warning(
                "unknown_timing_mark_scene",
                f"timing marks reference scene {number}, which is not in the scene plan",
                number,
            ))

        return errors, warnings


def validate_context(scene_plan: ScenePlan,
                     media_inventory: MediaInventory,
                     audio_timing: Optional[AudioTimingRecord] = None,
                     config: Optional[Config] = None) -> ValidationResult:
    return ContextValidator(config).validate(scene_plan, media_inventory, audio_timing)
