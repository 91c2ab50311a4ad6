"""Shared fixtures for timeline compiler tests."""

from typing import List

import pytest

from assembly_timeline.video_assembly.timeline_models import (
    AudioTimingRecord,
    MediaAsset,
    MediaInventory,
    MediaKind,
    Scene,
    SceneBreakpoint,
    SceneMediaMapping,
    ScenePlan,
    TimingMark,
    TimingMarkType,
)


class MinRandom:
    """RandomSource that always draws the low end of the range."""

    def uniform(self, a: float, b: float) -> float:
        return a


class MaxRandom:
    """RandomSource that always draws the high end of the range."""

    def uniform(self, a: float, b: float) -> float:
        return b


@pytest.fixture
def min_random() -> MinRandom:
    return MinRandom()


@pytest.fixture
def max_random() -> MaxRandom:
    return MaxRandom()


@pytest.fixture
def make_image():
    def _make(asset_id: str, score: float = 80.0) -> MediaAsset:
        return MediaAsset(
            asset_id=asset_id,
            kind=MediaKind.IMAGE,
            source_path=f"media/images/{asset_id}.jpg",
            relevance_score=score,
        )
    return _make


@pytest.fixture
def make_video():
    def _make(asset_id: str, score: float = 80.0, duration_hint: float = 12.0) -> MediaAsset:
        return MediaAsset(
            asset_id=asset_id,
            kind=MediaKind.VIDEO,
            source_path=f"media/videos/{asset_id}.mp4",
            relevance_score=score,
            duration_hint=duration_hint,
        )
    return _make


@pytest.fixture
def make_inventory(make_image):
    """Inventory giving each listed scene two images (or the given assets)."""
    def _make(scene_numbers: List[int], score: float = 80.0) -> MediaInventory:
        return MediaInventory.from_mappings([
            SceneMediaMapping(
                scene_number=n,
                assets=[make_image(f"s{n}-img1", score), make_image(f"s{n}-img2", score)],
            )
            for n in scene_numbers
        ])
    return _make


@pytest.fixture
def three_scene_plan() -> ScenePlan:
    return ScenePlan(scenes=[
        Scene(scene_number=1, purpose="hook", planned_duration=15, visual_style="dynamic", mood="exciting"),
        Scene(scene_number=2, purpose="solution", planned_duration=60, visual_style="cinematic", mood="optimistic"),
        Scene(scene_number=3, purpose="call_to_action", planned_duration=10, visual_style="clean", mood="warm"),
    ])


@pytest.fixture
def three_scene_inventory(make_inventory) -> MediaInventory:
    return make_inventory([1, 2, 3])


@pytest.fixture
def three_scene_audio() -> AudioTimingRecord:
    return AudioTimingRecord(
        master_duration=86.0,
        scene_breakpoints=[
            SceneBreakpoint(scene_number=1, start_time=0.0, duration=15.2, audio_path="audio/scene-1.mp3"),
            SceneBreakpoint(scene_number=2, start_time=15.2, duration=60.7, audio_path="audio/scene-2.mp3"),
            SceneBreakpoint(scene_number=3, start_time=75.9, duration=10.1, audio_path="audio/scene-3.mp3"),
        ],
        timing_marks=[
            TimingMark(scene_number=1, timestamp=4.0, type=TimingMarkType.SPEECH),
            TimingMark(scene_number=2, timestamp=40.0, type=TimingMarkType.EMPHASIS),
            TimingMark(scene_number=2, timestamp=75.5, type=TimingMarkType.PAUSE),
        ],
    )
