"""showcase — Component catalog, story validation and runtime verification.

Usage:
    from showcase import ComponentCatalog, StoryPipeline, load_project_config

    config = load_project_config()
    pipeline = await StoryPipeline.from_config(config, writer=write_story)
    result = await pipeline.process(llm_response, title="Product Card")
"""

from showcase.types import (
    ComponentRecord, ComponentOrigin, ComponentCategory, Dialect,
    Severity, DiagnosticCategory, ValidationDiagnostic, ValidationOutcome,
    RuntimeErrorKind, VerificationState, RuntimeCheckResult,
    PipelineStage, PipelineResult,
)
from showcase.exceptions import (
    ShowcaseError, ConfigError, CatalogSourceError, IntrospectionError,
    ArtifactParseError, RuntimeVerificationError,
)
from showcase.config import load_project_config
from showcase.catalog import ComponentCatalog, NameOracle, build_catalog
from showcase.validation import StoryValidator, validate, extract_artifact
from showcase.runtime import RuntimeVerifier
from showcase.pipeline import StoryPipeline
from showcase.version import __version__

__all__ = [
    "ComponentRecord", "ComponentOrigin", "ComponentCategory", "Dialect",
    "Severity", "DiagnosticCategory", "ValidationDiagnostic", "ValidationOutcome",
    "RuntimeErrorKind", "VerificationState", "RuntimeCheckResult",
    "PipelineStage", "PipelineResult",
    "ShowcaseError", "ConfigError", "CatalogSourceError", "IntrospectionError",
    "ArtifactParseError", "RuntimeVerificationError",
    "load_project_config",
    "ComponentCatalog", "NameOracle", "build_catalog",
    "StoryValidator", "validate", "extract_artifact",
    "RuntimeVerifier",
    "StoryPipeline",
    "__version__",
]
