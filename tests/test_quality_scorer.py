"""Tests for timeline quality scoring."""

import pytest

from assembly_timeline.utils.config import Config
from assembly_timeline.video_assembly.quality_scorer import (
    QualityScorer,
    audio_sync_confidence,
    average_relevance,
    score,
)
from assembly_timeline.video_assembly.timeline_models import (
    AssemblyTimeline,
    AudioTimingRecord,
    AudioTrack,
    IssueKind,
    MediaInventory,
    PacingPhase,
    SceneBreakpoint,
    SceneMediaMapping,
    SceneTimeline,
    ValidationIssue,
    ValidationResult,
    VisualSegment,
    VisualTreatment,
)


def _timeline(assets, audio_synchronized=False):
    """One scene showing each asset in turn for one second."""
    segments = [
        VisualSegment(
            index=i,
            start_time=float(i),
            end_time=float(i + 1),
            phase=PacingPhase.MAIN,
            asset=asset,
            visual_treatment=VisualTreatment(kind=asset.kind),
        )
        for i, asset in enumerate(assets)
    ]
    scene = SceneTimeline(
        scene_number=1,
        purpose="generic",
        start_time=0.0,
        end_time=float(len(assets)),
        audio_track=AudioTrack(start_time=0.0, duration=float(len(assets))),
        segments=segments,
    )
    return AssemblyTimeline(
        total_duration=float(len(assets)), scenes=[scene], audio_synchronized=audio_synchronized
    )


def _audio(duration):
    return AudioTimingRecord(
        master_duration=duration,
        scene_breakpoints=[SceneBreakpoint(scene_number=1, start_time=0, duration=duration)],
    )


class TestRelevance:
    """Tests for use-weighted relevance."""

    def test_weighted_by_use(self, make_image):
        good = make_image("good", score=100)
        bad = make_image("bad", score=0)
        # good shown 7 times out of 13
        assets = [good, bad] * 6 + [good]
        assert average_relevance(_timeline(assets)) == pytest.approx(700 / 13)

    def test_not_a_mean_over_distinct_assets(self, make_image):
        good = make_image("good", score=90)
        bad = make_image("bad", score=30)
        assert average_relevance(_timeline([good, good, good, bad])) == pytest.approx(75.0)


class TestAudioSync:
    """Tests for audio sync confidence."""

    def test_full_confidence_with_audio(self, make_image):
        timeline = _timeline([make_image("a")], audio_synchronized=True)
        assert audio_sync_confidence(timeline, _audio(1.0)) == 100.0

    def test_zero_without_audio(self, make_image):
        timeline = _timeline([make_image("a")])
        assert audio_sync_confidence(timeline) == 0.0
        assert audio_sync_confidence(timeline, _audio(1.0)) == 0.0


class TestScore:
    """Tests for the overall score and publish decision."""

    def _inventory(self, *assets):
        return MediaInventory.from_mappings([SceneMediaMapping(scene_number=1, assets=list(assets))])

    def test_ready_with_audio_and_relevant_media(self, make_image, make_video):
        image = make_image("i", score=80)
        video = make_video("v", score=60)
        timeline = _timeline([video, image, image, image], audio_synchronized=True)
        report = score(timeline, self._inventory(image, video), _audio(4.0), ValidationResult())
        assert report.average_relevance == pytest.approx(75.0)
        assert report.audio_sync_confidence == 100.0
        assert report.overall_score == pytest.approx(87.5)
        assert report.ready_for_publish
        assert report.total_segments == 4
        assert report.distinct_assets == 2
        assert report.video_segment_ratio == pytest.approx(0.25)
        assert report.scenes_covered == 1

    def test_no_audio_caps_score_at_fifty(self, make_image):
        image = make_image("i", score=100)
        report = score(_timeline([image]), self._inventory(image), None, ValidationResult())
        assert report.overall_score == 50.0
        assert not report.ready_for_publish

    def test_never_ready_without_validation(self, make_image):
        image = make_image("i", score=100)
        timeline = _timeline([image], audio_synchronized=True)
        report = score(timeline, self._inventory(image), _audio(1.0), None)
        assert report.overall_score == 100.0
        assert not report.ready_for_publish

    def test_never_ready_after_failed_validation(self, make_image):
        image = make_image("i", score=100)
        timeline = _timeline([image], audio_synchronized=True)
        failed = ValidationResult(errors=[
            ValidationIssue(kind=IssueKind.STRUCTURAL_ERROR, code="missing_media", message="x")
        ])
        report = score(timeline, self._inventory(image), _audio(1.0), failed)
        assert not report.ready_for_publish

    def test_threshold_is_inclusive_and_configurable(self, make_image):
        image = make_image("i", score=40)
        timeline = _timeline([image], audio_synchronized=True)
        inventory = self._inventory(image)
        # overall = (40 + 100) / 2 = 70
        assert score(timeline, inventory, _audio(1.0), ValidationResult()).ready_for_publish

        strict = QualityScorer(Config(quality={"publish_threshold": 75}))
        assert not strict.score(timeline, inventory, _audio(1.0), ValidationResult()).ready_for_publish

    def test_video_ratio_counts_uses(self, make_image, make_video):
        video = make_video("v")
        image = make_image("i")
        report = score(_timeline([video, video, image]), self._inventory(video, image))
        assert report.video_segment_ratio == pytest.approx(2 / 3)
        assert report.distinct_assets == 2
