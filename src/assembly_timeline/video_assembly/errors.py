"""Exceptions raised by the assembly timeline compiler."""

from typing import Iterable, List, Optional

from .timeline_models import ValidationIssue


class TimelineCompilerError(Exception):
    """Base class for compiler failures."""


class ValidationFailedError(TimelineCompilerError):
    """The input records are structurally inconsistent; carries every error found."""

    def __init__(self, issues: Iterable[ValidationIssue]):
        self.issues: List[ValidationIssue] = list(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"{len(self.issues)} validation error(s): {summary}")


class InternalInvariantError(TimelineCompilerError):
    """Raised when sequencing hits a state validation should have ruled out."""

    def __init__(self, message: str, scene_number: Optional[int] = None):
        self.scene_number = scene_number
        super().__init__(message)


class AssemblerStateError(TimelineCompilerError):
    """A single-use assembler was driven out of order or reused."""
