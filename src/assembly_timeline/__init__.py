"""Context-aware assembly timeline compiler for the topic-to-video pipeline."""

from .utils.config import Config
from .video_assembly import compile_timeline, TimelineAssembler

__version__ = "0.1.0"

__all__ = ['Config', 'compile_timeline', 'TimelineAssembler']
