"""Static validator: parse, cross-check, repair.

    outcome = validate(text, Dialect.REACT, catalog, import_path="antd")
    if not outcome.is_valid:
        print(format_validation_feedback(outcome))

Expected defects come back as diagnostics. A fault inside the validator itself
is logged and returned as an ``internal-error`` diagnostic.
"""

import logging
from typing import Iterable, Optional, Union

from showcase.catalog.builder import ComponentCatalog
from showcase.catalog.oracle import NameOracle
from showcase.config import settings
from showcase.exceptions import ArtifactParseError
from showcase.types import (
    ComponentRecord,
    Dialect,
    DiagnosticCategory,
    Severity,
    ValidationDiagnostic,
    ValidationOutcome,
)
from showcase.validation.dialects import check_dialect
from showcase.validation.imports import (
    check_catalog_imports,
    check_deep_imports,
    check_strict_paths,
    check_unimported_usage,
)
from showcase.validation.parser import ParsedArtifact, parse_artifact
from showcase.validation.repair import repair_registry, run_repairs
from showcase.validation.structural import check_structure

logger = logging.getLogger(__name__)

CatalogLike = Union[ComponentCatalog, NameOracle, Iterable[ComponentRecord]]


def _as_oracle(catalog: CatalogLike, import_path: Optional[str]) -> NameOracle:
    if isinstance(catalog, NameOracle):
        return catalog
    return NameOracle(catalog, primary_import_path=import_path)


class StoryValidator:
    """Validates generated stories for one dialect against one catalog."""

    def __init__(
        self,
        catalog: CatalogLike,
        dialect: Union[Dialect, str] = Dialect.REACT,
        *,
        strict_import_paths: bool = False,
        import_path: Optional[str] = None,
        story_prefix: Optional[str] = None,
        max_passes: Optional[int] = None,
    ) -> None:
        self.dialect = Dialect(dialect)
        self.oracle = _as_oracle(catalog, import_path)
        self.import_path = import_path or self.oracle.primary_import_path or ""
        self.strict_import_paths = strict_import_paths
        self.story_prefix = story_prefix
        self.max_passes = settings.max_repair_passes if max_passes is None else max_passes

    def analyze(self, text: str) -> tuple[ParsedArtifact, list[ValidationDiagnostic]]:
        """One full validation pass over ``text``; no rewrites."""
        try:
            parsed = parse_artifact(text, self.dialect)
        except Exception as e:
            raise ArtifactParseError(f"Parser fault: {e}") from e

        diags = list(parsed.diagnostics)
        diags.extend(check_structure(parsed))
        diags.extend(check_unimported_usage(parsed, self.oracle))
        if self.dialect != Dialect.WEB_COMPONENTS:
            diags.extend(check_deep_imports(parsed, self.import_path))
        diags.extend(check_catalog_imports(parsed, self.oracle, self.import_path))
        if self.strict_import_paths:
            diags.extend(check_strict_paths(parsed, self.oracle))
        diags.extend(check_dialect(parsed, self.story_prefix))
        return parsed, diags

    def validate(self, artifact_text: str, repair: bool = True) -> ValidationOutcome:
        try:
            return self._validate(artifact_text, repair)
        except ArtifactParseError as e:
            logger.exception("Artifact could not be parsed")
            return ValidationOutcome(is_valid=False, diagnostics=[ValidationDiagnostic(
                severity=Severity.ERROR, message=e.args[0], line=e.line or None,
                code="parse-failure", category=DiagnosticCategory.INTERNAL,
            )])
        except Exception as e:
            logger.exception("Validator fault")
            return ValidationOutcome(is_valid=False, diagnostics=[ValidationDiagnostic(
                severity=Severity.ERROR, message=f"Internal validator error: {e}",
                code="internal-error", category=DiagnosticCategory.INTERNAL,
            )])

    def _validate(self, text: str, repair: bool) -> ValidationOutcome:
        if not repair or self.max_passes <= 0:
            _, diags = self.analyze(text)
            return ValidationOutcome(is_valid=not any(d.is_error for d in diags), diagnostics=diags)

        result = run_repairs(
            text, self.analyze, repair_registry(self.dialect, self.import_path), self.max_passes,
        )
        diags = list(result.diagnostics)
        for name, code in result.applied:
            diags.append(ValidationDiagnostic(
                severity=Severity.WARNING, message=f"Auto-repaired {code} with {name}",
                code="auto-repaired", category=DiagnosticCategory.STRUCTURAL,
            ))
        outcome = ValidationOutcome(
            is_valid=not any(d.is_error for d in diags),
            diagnostics=diags,
            repaired_artifact=result.text if result.applied else None,
            applied_repairs=[name for name, _ in result.applied],
        )
        logger.debug(
            "Validated %s artifact: %d error(s), %d repair(s)",
            self.dialect.value, len(outcome.errors), len(outcome.applied_repairs),
        )
        return outcome


def validate(
    artifact_text: str,
    dialect: Union[Dialect, str],
    catalog: CatalogLike,
    *,
    strict_import_paths: bool = False,
    repair: bool = True,
    import_path: Optional[str] = None,
    story_prefix: Optional[str] = None,
    max_passes: Optional[int] = None,
) -> ValidationOutcome:
    validator = StoryValidator(
        catalog, dialect,
        strict_import_paths=strict_import_paths,
        import_path=import_path,
        story_prefix=story_prefix,
        max_passes=max_passes,
    )
    return validator.validate(artifact_text, repair=repair)
