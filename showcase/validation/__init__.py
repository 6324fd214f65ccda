"""Static validation and auto-repair of generated stories."""

from showcase.validation.extract import extract_artifact
from showcase.validation.feedback import (
    format_runtime_feedback,
    format_validation_feedback,
    group_diagnostics,
)
from showcase.validation.parser import ParsedArtifact, parse_artifact
from showcase.validation.validator import StoryValidator, validate

__all__ = [
    "ParsedArtifact",
    "StoryValidator",
    "extract_artifact",
    "format_runtime_feedback",
    "format_validation_feedback",
    "group_diagnostics",
    "parse_artifact",
    "validate",
]
