"""Import / usage cross-checks against the component catalog.

  unimported-usage   a component tag whose root name is never imported or declared
  invalid-import     known-bad name imported from the library (made-up, internal, deprecated)
  unknown-import     name imported from the library that the catalog does not contain
  deep-import-path   sub-path of the canonical specifier; rewritable
  import-path-mismatch (strict mode) catalog component imported from the wrong specifier
"""

from typing import Optional

from showcase.catalog.oracle import NameOracle
from showcase.types import DiagnosticCategory, Severity, ValidationDiagnostic
from showcase.validation.parser import ImportDecl, ParsedArtifact

# Specifiers that never hold catalog components.
FRAMEWORK_SPECIFIER_PREFIXES = (
    "react", "react-dom", "@storybook/", "vue", "@angular/", "lit", "svelte",
    "@testing-library/", "storybook/",
)

AVAILABLE_PREVIEW_COUNT = 10


def _diag(code: str, message: str, line: Optional[int]) -> ValidationDiagnostic:
    return ValidationDiagnostic(
        severity=Severity.ERROR, message=message, line=line,
        code=code, category=DiagnosticCategory.SEMANTIC,
    )


def is_framework_specifier(specifier: str) -> bool:
    return specifier.startswith(FRAMEWORK_SPECIFIER_PREFIXES) or specifier.startswith((".", "/"))


def is_deep_import(specifier: str, canonical: str) -> bool:
    """True for a sub-path that still resolves into the canonical package."""
    if not canonical or specifier == canonical:
        return False
    if specifier.startswith(canonical + "/"):
        return True
    last = canonical.rstrip("/").split("/")[-1]
    return f"/{last}/" in specifier


# ── Checks ─────────────────────────────────────────────────────────────────────

def check_unimported_usage(parsed: ParsedArtifact, oracle: Optional[NameOracle]) -> list[ValidationDiagnostic]:
    """One diagnostic per component name used as a tag without being in scope."""
    in_scope = parsed.imported_names | parsed.local_bindings
    reported: set[str] = set()
    diags = []
    for usage in parsed.tag_usages:
        root = usage.root
        if root in in_scope or root in reported:
            continue
        reported.add(root)
        hint = ""
        if "." not in usage.name and oracle is not None:
            suggestion = oracle.suggest(root)
            if suggestion and suggestion in in_scope:
                hint = f' You imported "{suggestion}"; did you mean to use it?'
            elif suggestion:
                hint = f' Did you mean "{suggestion}"?'
        diags.append(_diag(
            "unimported-usage",
            f'JSX error: "{root}" is used but was never imported. Either add it to your imports, '
            f"or if it is a sub-component, use the Parent.Child form instead.{hint}",
            usage.line,
        ))
    return diags


def check_catalog_imports(
    parsed: ParsedArtifact,
    oracle: NameOracle,
    canonical: str,
) -> list[ValidationDiagnostic]:
    """Every name imported from the canonical specifier (or a deep variant) must be real."""
    if not canonical or not oracle.available():
        return []
    available = oracle.available()
    preview = ", ".join(available[:AVAILABLE_PREVIEW_COUNT])
    if len(available) > AVAILABLE_PREVIEW_COUNT:
        preview += ", ..."

    diags = []
    for decl in parsed.imports:
        if decl.type_only:
            continue
        if decl.specifier != canonical and not is_deep_import(decl.specifier, canonical):
            continue
        names = [imported for imported, _ in decl.named]
        if decl.default:
            names.insert(0, decl.default)
        for name in names:
            if oracle.is_known_bad(name):
                alternatives = oracle.alternatives_for(name)
                instead = f" Use these components instead: {', '.join(alternatives)}." if alternatives else ""
                diags.append(_diag(
                    "invalid-import",
                    f'Import error: "{name}" is not a valid component from {canonical}. '
                    f"{oracle.bad_name_reason(name)}.{instead}",
                    decl.line,
                ))
            elif not oracle.is_known(name):
                suggestion = oracle.suggest(name)
                hint = f' Did you mean "{suggestion}"?' if suggestion else ""
                diags.append(_diag(
                    "unknown-import",
                    f'Import error: "{name}" is not available from {canonical}. '
                    f"Available components include: {preview}.{hint}",
                    decl.line,
                ))
    return diags


def check_deep_imports(parsed: ParsedArtifact, canonical: str) -> list[ValidationDiagnostic]:
    diags = []
    for decl in parsed.imports:
        if is_deep_import(decl.specifier, canonical):
            diags.append(_diag(
                "deep-import-path",
                f'Import path error: using "{decl.specifier}" but the configured import path is '
                f'"{canonical}". Import from "{canonical}" instead.',
                decl.line,
            ))
    return diags


def check_strict_paths(parsed: ParsedArtifact, oracle: NameOracle) -> list[ValidationDiagnostic]:
    """Catalog components must come from the import path their record declares."""
    diags = []
    for decl in parsed.imports:
        if decl.type_only or is_framework_specifier(decl.specifier):
            continue
        for imported, _ in decl.named:
            expected = oracle.import_path_for(imported)
            if expected and expected != decl.specifier:
                diags.append(_diag(
                    "import-path-mismatch",
                    f'Import path error: "{imported}" must be imported from "{expected}", '
                    f'not "{decl.specifier}".',
                    decl.line,
                ))
    return diags


# ── Repair ─────────────────────────────────────────────────────────────────────

def render_import(default: Optional[str], named: list[tuple[str, str]], specifier: str) -> str:
    parts = []
    if default:
        parts.append(default)
    if named:
        items = [imported if imported == local else f"{imported} as {local}" for imported, local in named]
        parts.append("{ " + ", ".join(items) + " }")
    return f"import {', '.join(parts)} from '{specifier}';"


def consolidate_deep_imports(text: str, parsed: ParsedArtifact, canonical: str) -> str:
    """Rewrite deep sub-path imports to ``canonical`` and merge them into one declaration.

    Namespace imports and deep default imports are left alone; they cannot be
    merged without changing meaning.
    """
    deep = [
        d for d in parsed.imports
        if is_deep_import(d.specifier, canonical) and not d.namespace and not d.default
    ]
    if not deep:
        return text
    existing = [d for d in parsed.imports if d.specifier == canonical and not d.namespace and not d.type_only]
    group: list[ImportDecl] = existing + [d for d in deep if not d.type_only]
    if not group:
        return text

    default: Optional[str] = None
    named: list[tuple[str, str]] = []
    for decl in group:
        if decl.default:
            if default is None:
                default = decl.default
            elif decl.default != default:
                # the second default becomes a named import of the same component
                named.append((decl.default, decl.default))
        for pair in decl.named:
            if pair not in named:
                named.append(pair)

    merged = render_import(default, named, canonical)
    first = min(group, key=lambda d: d.start)
    out = []
    cursor = 0
    for decl in sorted(group, key=lambda d: d.start):
        out.append(text[cursor:decl.start])
        if decl is first:
            out.append(merged)
        cursor = decl.end
        # swallow the newline after a removed statement
        if decl is not first and text[cursor:cursor + 1] == "\n":
            cursor += 1
    out.append(text[cursor:])
    return "".join(out)
