"""Quality scoring for compiled timelines.

Relevance is averaged over asset *uses*, so an asset shown three times weighs
three times. Audio-sync confidence is all-or-nothing: narration breakpoints
either drove the clock or they did not.
"""

from __future__ import annotations

from typing import Optional

from ..utils.config import Config
from .timeline_models import (
    AssemblyTimeline, AudioTimingRecord, MediaInventory, MediaKind,
    QualityReport, ValidationResult,
)


def average_relevance(timeline: AssemblyTimeline) -> float:
    segments = timeline.all_segments()
    if not segments:
        return 0.0
    return sum(seg.asset.relevance_score for seg in segments) / len(segments)


def audio_sync_confidence(timeline: AssemblyTimeline,
                          audio_timing: Optional[AudioTimingRecord] = None) -> float:
    return 100.0 if audio_timing is not None and timeline.audio_synchronized else 0.0


def score(timeline: AssemblyTimeline,
          media_inventory: MediaInventory,
          audio_timing: Optional[AudioTimingRecord] = None,
          validation: Optional[ValidationResult] = None,
          publish_threshold: float = 70.0) -> QualityReport:
    """Score a timeline and decide whether it is ready to publish.

    A missing validation result is treated as not validated, so the timeline
    is never reported publish-ready on the score alone.
    """
    segments = timeline.all_segments()
    relevance = average_relevance(timeline)
    sync = audio_sync_confidence(timeline, audio_timing)
    overall = (relevance + sync) / 2.0
    validated = validation is not None and validation.ok

    known_assets = {
        asset.asset_id
        for mapping in media_inventory.mappings.values()
        for asset in mapping.assets
    }
    used_assets = {seg.asset.asset_id for seg in segments if seg.asset.asset_id in known_assets}
    video_uses = sum(1 for seg in segments if seg.asset.kind == MediaKind.VIDEO)

    return QualityReport(
        average_relevance=relevance,
        audio_sync_confidence=sync,
        overall_score=overall,
        ready_for_publish=overall >= publish_threshold and validated,
        scenes_covered=len(timeline.scenes),
        total_segments=len(segments),
        distinct_assets=len(used_assets),
        video_segment_ratio=(video_uses / len(segments)) if segments else 0.0,
    )


class QualityScorer:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def score(self,
              timeline: AssemblyTimeline,
              media_inventory: MediaInventory,
              audio_timing: Optional[AudioTimingRecord] = None,
              validation: Optional[ValidationResult] = None) -> QualityReport:
        """Score a compiled timeline.

        Args:
            timeline: Compiled assembly timeline
            media_inventory: Inventory the timeline was compiled from
            audio_timing: Narration timing, if the timeline was synchronized
            validation: Result of context validation for the same inputs.
                Required for publish readiness: when omitted the scores are
                still computed but ``ready_for_publish`` is always False.

        Returns:
            QualityReport
        """
        return score(
            timeline,
            media_inventory,
            audio_timing,
            validation,
            publish_threshold=self.config.quality.publish_threshold,
        )
