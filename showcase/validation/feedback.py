"""Regeneration feedback: turn validation and runtime failures into prompt text."""

from pydantic import BaseModel, Field

from showcase.types import (
    DiagnosticCategory,
    RuntimeCheckResult,
    RuntimeErrorKind,
    ValidationOutcome,
)


class GroupedDiagnostics(BaseModel):
    syntax: list[str] = Field(default_factory=list)
    pattern: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.syntax) + len(self.pattern) + len(self.imports)


_BUCKETS = {
    DiagnosticCategory.SYNTAX: "syntax",
    DiagnosticCategory.STRUCTURAL: "syntax",
    DiagnosticCategory.INTERNAL: "syntax",
    DiagnosticCategory.DIALECT: "pattern",
    DiagnosticCategory.SEMANTIC: "imports",
}


def group_diagnostics(outcome: ValidationOutcome) -> GroupedDiagnostics:
    """Error messages bucketed into syntax / pattern / import problems."""
    grouped = GroupedDiagnostics()
    for diag in outcome.errors:
        getattr(grouped, _BUCKETS[diag.category]).append(str(diag))
    return grouped


def format_validation_feedback(outcome: ValidationOutcome) -> str:
    if outcome.is_valid:
        return ""
    grouped = group_diagnostics(outcome)
    parts = [f"The generated story has {grouped.total} error(s) that must be fixed:"]
    sections = (
        ("Syntax errors", grouped.syntax),
        ("Pattern errors", grouped.pattern),
        ("Import errors", grouped.imports),
    )
    for heading, messages in sections:
        if messages:
            parts.append("")
            parts.append(f"### {heading}")
            parts.extend(f"- {m}" for m in messages)
    parts.append("")
    parts.append("Return the complete corrected story in a single code block.")
    return "\n".join(parts)


_RUNTIME_HINTS: dict[RuntimeErrorKind, list[str]] = {
    RuntimeErrorKind.MODULE_ERROR: [
        "This is a module/import error. Common causes:",
        "- Invalid story file structure",
        "- Missing or malformed default export (meta)",
        "- Story exports that conflict with preview internals",
        "- Invalid import statements",
    ],
    RuntimeErrorKind.RENDER_ERROR: [
        "This is a component render error. Common causes:",
        "- Using undefined variables or components",
        "- Invalid props passed to components",
        "- Missing required props",
        "- Incorrect component composition",
    ],
    RuntimeErrorKind.NOT_FOUND: [
        "The story was not found in the preview index. This usually means:",
        "- The file has syntax errors that prevent the preview from parsing it",
        "- The story title/path doesn't match the expected format",
        "- The default export is missing or invalid",
    ],
    RuntimeErrorKind.TIMEOUT: [
        "The preview server did not answer in time. The story may still be building.",
    ],
    RuntimeErrorKind.CONNECTION_ERROR: [
        "The preview server could not be reached. Check that it is running.",
    ],
}


def format_runtime_feedback(result: RuntimeCheckResult) -> str:
    if result.passed:
        return ""
    parts = ["RUNTIME ERROR: The generated story failed to load in the preview."]
    if result.render_error:
        parts.append(f"Error: {result.render_error}")
    if result.error_kind is not None:
        parts.extend(_RUNTIME_HINTS.get(result.error_kind, []))
    if result.details:
        parts.append("")
        parts.append(f"Details: {result.details}")
    return "\n".join(parts)
