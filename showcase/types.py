"""All shared types, enums, and type aliases. Everything imports from here."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────

class ComponentOrigin(str, Enum):
    USER_OVERRIDE = "user_override"
    LOCAL_FILE_SCAN = "local_file_scan"
    INSTALLED_PACKAGE = "installed_package"
    DECLARATIVE_MANIFEST = "declarative_manifest"

class ComponentCategory(str, Enum):
    LAYOUT = "layout"
    CONTENT = "content"
    FORM = "form"
    NAVIGATION = "navigation"
    FEEDBACK = "feedback"
    OTHER = "other"

class Dialect(str, Enum):
    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    SVELTE = "svelte"
    WEB_COMPONENTS = "web-components"

class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"

class DiagnosticCategory(str, Enum):
    SYNTAX = "syntax"           # tokenizer / bracket / JSX nesting
    STRUCTURAL = "structural"   # truncation, brace balance, title text
    SEMANTIC = "semantic"       # imports and component names
    DIALECT = "dialect"         # framework-specific shape rules
    INTERNAL = "internal"       # validator fault converted to data

class RuntimeErrorKind(str, Enum):
    MODULE_ERROR = "module_error"       # import / bundling failure
    RENDER_ERROR = "render_error"       # story loaded but threw while rendering
    NOT_FOUND = "not_found"             # never appeared in the preview index
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"

class VerificationState(str, Enum):
    SKIPPED = "skipped"             # verification disabled or no preview server
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    RENDER_FAILED = "render_failed"


# Lower value wins a name collision.
ORIGIN_PRIORITY: dict[ComponentOrigin, int] = {
    ComponentOrigin.USER_OVERRIDE: 0,
    ComponentOrigin.LOCAL_FILE_SCAN: 1,
    ComponentOrigin.INSTALLED_PACKAGE: 2,
    ComponentOrigin.DECLARATIVE_MANIFEST: 3,
}


# ── Catalog ────────────────────────────────────────────────────────────

def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


class ComponentRecord(BaseModel):
    """One UI component known to the catalog."""

    name: str
    category: ComponentCategory = ComponentCategory.OTHER
    props: list[str] = Field(default_factory=list)
    slots: list[str] = Field(default_factory=lambda: ["default"])
    description: str = ""
    import_path: str = ""
    origin: ComponentOrigin
    prop_types: dict[str, str] = Field(default_factory=dict)  # from usage examples
    source_file: Optional[str] = None
    tag_name: Optional[str] = None  # custom-element tag, manifests only

    model_config = {"frozen": True}

    @field_validator("props", mode="after")
    @classmethod
    def dedupe_props(cls, v):
        return _unique(v)

    @field_validator("slots", mode="after")
    @classmethod
    def ensure_default_slot(cls, v):
        slots = _unique(v)
        if "default" not in slots:
            slots.insert(0, "default")
        return slots

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        if isinstance(v, str):
            try:
                return ComponentCategory(v.lower())
            except ValueError:
                return ComponentCategory.OTHER
        return v


# ── Validation ─────────────────────────────────────────────────────────

class ValidationDiagnostic(BaseModel):
    """A single defect found in a generated artifact."""

    severity: Severity
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    code: str = "generic"
    category: DiagnosticCategory = DiagnosticCategory.SEMANTIC

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        return f"{where}{self.message}"


class ValidationOutcome(BaseModel):
    """Result of validating (and possibly repairing) one artifact."""

    is_valid: bool
    diagnostics: list[ValidationDiagnostic] = Field(default_factory=list)
    repaired_artifact: Optional[str] = None
    applied_repairs: list[str] = Field(default_factory=list)

    @property
    def errors(self) -> list[ValidationDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


# ── Runtime ────────────────────────────────────────────────────────────

class RuntimeCheckResult(BaseModel):
    """Outcome of checking a written artifact against the live preview server."""

    state: VerificationState
    story_found: bool = False
    story_id: Optional[str] = None
    render_error: Optional[str] = None
    error_kind: Optional[RuntimeErrorKind] = None
    details: str = ""

    @property
    def passed(self) -> bool:
        return self.state in (VerificationState.VERIFIED, VerificationState.SKIPPED)


# ── Pipeline ───────────────────────────────────────────────────────────

class PipelineStage(str, Enum):
    EXTRACTION = "extraction"   # no code found in the response
    VALIDATION = "validation"   # static validation failed; nothing written
    WRITE = "write"             # writer raised
    RUNTIME = "runtime"         # written, but the preview rejected it
    COMPLETE = "complete"


class PipelineResult(BaseModel):
    """What happened to one generated response, stage by stage."""

    stage: PipelineStage
    accepted: bool = False
    artifact: Optional[str] = None        # final text (repaired when repairs were kept)
    validation: Optional[ValidationOutcome] = None
    runtime: Optional[RuntimeCheckResult] = None
    written_to: Optional[str] = None
    feedback: str = ""                    # regeneration prompt text when not accepted
    error: Optional[str] = None
