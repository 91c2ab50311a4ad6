"""Configuration management for the assembly timeline compiler"""

import yaml
from pathlib import Path
from typing import Any, Dict, Tuple
from pydantic import BaseModel, Field, field_validator


class PacingConfig(BaseModel):
    hook_max_seconds: float = 15.0
    hook_ratio: float = Field(default=0.1, gt=0.0, lt=1.0)
    main_end_ratio: float = Field(default=0.9, gt=0.0, lt=1.0)
    hook_segment_range: Tuple[float, float] = (3.0, 5.0)
    main_segment_range: Tuple[float, float] = (5.0, 8.0)
    conclusion_segment_range: Tuple[float, float] = (6.0, 10.0)
    video_every_n_segments: int = Field(default=5, ge=1)

    @field_validator("hook_segment_range", "main_segment_range", "conclusion_segment_range")
    @classmethod
    def _check_range(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        low, high = value
        if low <= 0 or high < low:
            raise ValueError(f"invalid segment length range: {value}")
        return value


class TransitionConfig(BaseModel):
    pause_alignment_window: float = Field(default=1.0, ge=0.0)
    segment_crossfade_duration: float = Field(default=0.5, ge=0.0)


class ValidationConfig(BaseModel):
    duration_tolerance_seconds: float = Field(default=1.0, ge=0.0)


class QualityConfig(BaseModel):
    publish_threshold: float = Field(default=70.0, ge=0.0, le=100.0)


class ContinuityConfig(BaseModel):
    seed_namespace: str = "assembly_timeline"
    default_seed: int = 0


class PerformanceConfig(BaseModel):
    max_parallel_scenes: int = Field(default=4, ge=1, le=64)


class Config(BaseModel):
    pacing: PacingConfig = PacingConfig()
    transitions: TransitionConfig = TransitionConfig()
    validation: ValidationConfig = ValidationConfig()
    quality: QualityConfig = QualityConfig()
    continuity: ContinuityConfig = ContinuityConfig()
    performance: PerformanceConfig = PerformanceConfig()
    logging: Dict[str, Any] = {}

    @classmethod
    def load(cls, config_path: str) -> "Config":
        """Load configuration from YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def save(self, config_path: str):
        """Save configuration to YAML file"""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)
