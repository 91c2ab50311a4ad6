"""Render clip builder

Flattens a compiled assembly timeline into the two ordered clip lists a
renderer walks: one visual clip per segment and one narration clip per scene.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .timeline_models import AssemblyTimeline


def build_render_clips(timeline: AssemblyTimeline) -> Dict[str, List[Dict[str, Any]]]:
    """Return {"video": [...], "audio": [...]} clip dicts in timeline order."""
    video = []
    audio = []
    for scene in timeline.scenes:
        last_index = len(scene.segments) - 1
        for seg in scene.segments:
            transition = seg.transition_in
            if seg.index == 0 and scene.transition_in is not None:
                transition = scene.transition_in
            video.append({
                "scene_number": scene.scene_number,
                "segment_index": seg.index,
                "start_s": seg.start_time,
                "end_s": seg.end_time,
                "asset_id": seg.asset.asset_id,
                "source_path": seg.asset.source_path,
                "kind": seg.asset.kind.value,
                "filters": list(seg.visual_treatment.filters),
                "transition_in": transition.model_dump(mode="json") if transition else None,
                "transition_out": (
                    scene.transition_out.model_dump(mode="json")
                    if seg.index == last_index and scene.transition_out is not None
                    else None
                ),
            })
        track = scene.audio_track
        audio.append({
            "scene_number": scene.scene_number,
            "start_s": track.start_time,
            "end_s": track.start_time + track.duration,
            "source_path": track.source_path,
            "volume": track.volume,
            "fade_in": track.fade_in,
            "fade_out": track.fade_out,
        })
    return {"video": video, "audio": audio}
