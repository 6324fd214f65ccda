"""Framework-specific story shape rules.

Every rule is a ``DialectRule``. ``check`` returns (message, line) pairs and
``repair``, when present, rewrites the text so the rule no longer fires.
"""

import re
from typing import Callable, NamedTuple, Optional

from showcase.types import Dialect, DiagnosticCategory, Severity, ValidationDiagnostic
from showcase.validation.imports import render_import
from showcase.validation.lexer import IDENT, JSX_CLOSE, JSX_OPEN, JSX_SELF_CLOSE, PUNCT
from showcase.validation.parser import ParsedArtifact

Finding = tuple[str, Optional[int]]
CheckFn = Callable[[ParsedArtifact, Optional[str]], list[Finding]]
RepairFn = Callable[[str, ParsedArtifact], str]


class DialectRule(NamedTuple):
    code: str
    severity: Severity
    check: CheckFn
    repair: Optional[RepairFn] = None


REACT_SPECIFIERS = ("react", "react-dom")


def _line_at(text: str, pos: int) -> int:
    return text.count("\n", 0, pos) + 1


def _first(pattern: str, text: str, message: str, flags: int = 0) -> list[Finding]:
    m = re.search(pattern, text, flags)
    return [(message, _line_at(text, m.start()))] if m else []


def _is_react_import(specifier: str) -> bool:
    return specifier in REACT_SPECIFIERS or specifier.startswith(("react/", "react-dom/"))


def _has_import(parsed: ParsedArtifact, prefix: str) -> bool:
    return any(d.specifier == prefix or d.specifier.startswith(prefix + "/") or d.specifier.startswith(prefix + "-")
               for d in parsed.imports)


def _remove_spans(text: str, spans: list[tuple[int, int]]) -> str:
    out = []
    cursor = 0
    for start, end in sorted(spans):
        out.append(text[cursor:start])
        cursor = end
        if text[cursor:cursor + 1] == "\n":
            cursor += 1
    out.append(text[cursor:])
    return "".join(out)


# ── Common ─────────────────────────────────────────────────────────────────────

def _check_empty(parsed, story_prefix):
    return [] if parsed.text.strip() else [("Story content is empty", None)]


def _check_has_export(parsed, story_prefix):
    if not parsed.text.strip():
        return []
    if any(t.kind == IDENT and t.value == "export" for t in parsed.tokens):
        return []
    return [("Story is missing exports", None)]


def _check_unsafe_props(parsed, story_prefix):
    return [
        (f"{m.group(0)} is not allowed in stories; use the component's supported props instead",
         _line_at(parsed.text, m.start()))
        for m in re.finditer(r"\bUNSAFE_(?:style|className)\b", parsed.text)
    ]


def _check_title_prefix(parsed, story_prefix):
    if not story_prefix or parsed.title is None or parsed.title.startswith(story_prefix):
        return []
    return [(f"Story title '{parsed.title}' does not start with '{story_prefix}'", parsed.title_line)]


def _check_react_import_absent(parsed, story_prefix):
    found = [d for d in parsed.imports if _is_react_import(d.specifier)]
    if not found:
        return []
    return [(f"React import found in a {parsed.dialect.value} story", found[0].line)]


def remove_react_imports(text: str, parsed: ParsedArtifact) -> str:
    spans = [(d.start, d.end) for d in parsed.imports if _is_react_import(d.specifier)]
    return _remove_spans(text, spans) if spans else text


# ── React ──────────────────────────────────────────────────────────────────────

def _check_default_export(parsed, story_prefix):
    if not parsed.text.strip() or parsed.has_default_export:
        return []
    return [("React story is missing 'export default' meta", None)]


def _check_commonjs(parsed, story_prefix):
    return _first(r"\bmodule\.exports\b", parsed.text,
                  "module.exports is not supported; use ES module 'export default'")


def _jsx_end(parsed: ParsedArtifact, k: int) -> tuple[int, int]:
    """(token index, char offset) just past the JSX element starting at token ``k``."""
    tokens = parsed.tokens
    depth = 0
    for idx in range(k, len(tokens)):
        tok = tokens[idx]
        if tok.kind == JSX_OPEN:
            depth += 1
        elif tok.kind == JSX_SELF_CLOSE:
            depth -= 1
            if depth == 0:
                return idx, tok.pos + 2
        elif tok.kind == JSX_CLOSE:
            depth -= 1
            if depth == 0:
                close = parsed.text.find(">", tok.pos)
                return idx, (close + 1 if close >= 0 else len(parsed.text))
    return len(tokens) - 1, len(parsed.text)


def find_args_children(parsed: ParsedArtifact) -> list[tuple[int, int, int, int, int]]:
    """(entry start, jsx start, jsx end, args close brace offset, line) per JSX children in args."""
    tokens = parsed.tokens
    n = len(tokens)
    found = []
    for i, tok in enumerate(tokens):
        if not (tok.kind == IDENT and tok.value == "args" and i + 2 < n
                and tokens[i + 1].value == ":" and tokens[i + 2].value == "{"):
            continue
        depth = 1
        pending = None
        j = i + 3
        while j < n:
            t = tokens[j]
            if t.kind == PUNCT and t.value in ("{", "${"):
                depth += 1
            elif t.kind == PUNCT and t.value == "}":
                depth -= 1
                if depth == 0:
                    if pending:
                        found.append(pending[:3] + (t.pos, pending[3]))
                    break
            elif (depth == 1 and t.kind == IDENT and t.value == "children" and j + 2 < n
                  and tokens[j + 1].value == ":" and tokens[j + 2].kind == JSX_OPEN):
                end_idx, end = _jsx_end(parsed, j + 2)
                if pending is None:
                    pending = (t.pos, tokens[j + 2].pos, end, t.line)
                j = end_idx
            j += 1
    return found


def _check_children_in_args(parsed, story_prefix):
    return [
        ("JSX passed as 'children' in args; render it from a 'render' function instead", line)
        for _, _, _, _, line in find_args_children(parsed)
    ]


def move_children_to_render(text: str, parsed: ParsedArtifact) -> str:
    m = re.search(r"\bcomponent\s*:\s*([A-Z][\w$.]*)", text)
    found = find_args_children(parsed)
    if not m or not found:
        return text
    component = m.group(1)
    entry_start, jsx_start, jsx_end, args_close, _ = found[0]
    jsx = text[jsx_start:jsx_end]

    after = jsx_end
    while after < len(text) and text[after] in " \t":
        after += 1
    if text[after:after + 1] == ",":
        after += 1
    while after < len(text) and text[after] in " \t\r\n":
        after += 1

    line_start = text.rfind("\n", 0, args_close) + 1
    indent = re.match(r"[ \t]*", text[line_start:]).group(0)
    render = f",\n{indent}render: (args) => <{component} {{...args}}>{jsx}</{component}>"
    return text[:entry_start] + text[after:args_close + 1] + render + text[args_close + 1:]


def _check_react_import(parsed, story_prefix):
    if not any(t.kind == JSX_OPEN for t in parsed.tokens):
        return []
    for decl in parsed.imports:
        if decl.specifier == "react" and "React" in (decl.default, decl.namespace):
            return []
    return [("Missing \"import React from 'react'\" statement", 1)]


def insert_react_import(text: str, parsed: ParsedArtifact) -> str:
    return "import React from 'react';\n" + text


# ── Vue ────────────────────────────────────────────────────────────────────────

def _check_vue_import(parsed, story_prefix):
    if _has_import(parsed, "@storybook/vue3"):
        return []
    return [("Missing '@storybook/vue3' import", 1)]


def _check_vue_jsx_attrs(parsed, story_prefix):
    return (
        _first(r"\bonClick=\{", parsed.text, "Using JSX-style event handlers instead of Vue @event syntax")
        + _first(r"\bclassName=", parsed.text, "Using JSX 'className' instead of Vue 'class'")
    )


# ── Angular ────────────────────────────────────────────────────────────────────

_THIS_STATE = re.compile(r"this\.\w+\s*=\s*\w+|this\.\w+\+\+|this\.\w+--|\+\+this\.\w+|--this\.\w+")


def _check_angular_import(parsed, story_prefix):
    if _has_import(parsed, "@storybook/angular"):
        return []
    return [("Missing '@storybook/angular' import", 1)]


def _check_angular_metadata(parsed, story_prefix):
    text = parsed.text
    if not text.strip() or any(k in text for k in ("moduleMetadata", "applicationConfig", "component:")):
        return []
    return [("Missing moduleMetadata or applicationConfig decorator", None)]


def _check_angular_state(parsed, story_prefix):
    m = _THIS_STATE.search(parsed.text)
    if not m:
        return []
    return [("Angular stories should not use 'this.property' state management; use args-based patterns instead",
             _line_at(parsed.text, m.start()))]


# ── Web components ─────────────────────────────────────────────────────────────

def _lit_decl(parsed: ParsedArtifact):
    for decl in parsed.imports:
        if decl.specifier == "lit" and not decl.namespace and not decl.type_only:
            return decl
    return None


def _check_lit_html(parsed, story_prefix):
    decl = _lit_decl(parsed)
    if decl and any(imported == "html" for imported, _ in decl.named):
        return []
    return [("Missing \"import { html } from 'lit'\" statement", 1)]


def insert_lit_html_import(text: str, parsed: ParsedArtifact) -> str:
    decl = _lit_decl(parsed)
    if decl is None:
        return "import { html } from 'lit';\n" + text
    named = [("html", "html")] + list(decl.named)
    return text[:decl.start] + render_import(decl.default, named, "lit") + text[decl.end:]


def _check_no_jsx(parsed, story_prefix):
    for tok in parsed.tokens:
        if tok.kind == JSX_OPEN:
            return [("Using JSX syntax instead of a Lit html`` template", tok.line)]
    return []


# ── Svelte ─────────────────────────────────────────────────────────────────────

_CONTEXT_MODULE = re.compile(r"<script(\s[^>]*)?\scontext=[\"']module[\"']([^>]*)>")
_MODULE_SCRIPT = re.compile(r"<script\b(?![^>]*\bcontext=)[^>]*\bmodule\b[^>]*>")
_DEFINE_META_BINDING = re.compile(r"const\s*\{[^}]*\bStory\b[^}]*\}\s*=\s*defineMeta\s*\(")
_STORY_OPEN = re.compile(r"<Story\b((?:\{[^}]*\}|[^>])*)>")
_CSF3_SHAPE = re.compile(r"\bsatisfies\s+Meta\b|:\s*Meta\s*<|\bStoryObj\s*<")
_SVELTE_EVENTS = re.compile(r"\bon(Click|Change)=")


def _check_context_module(parsed, story_prefix):
    return _first(_CONTEXT_MODULE.pattern, parsed.text,
                  "Using old '<script context=\"module\">'; use '<script module>' for Svelte 5")


def use_module_script(text: str, parsed: ParsedArtifact) -> str:
    return _CONTEXT_MODULE.sub(lambda m: f"<script{m.group(1) or ''} module{m.group(2)}>", text)


def _check_old_meta(parsed, story_prefix):
    return _first(r"export\s+const\s+meta\b|export\s+default\s+meta\b", parsed.text,
                  "Using old CSF syntax 'export const/default meta'; use defineMeta() instead")


def _check_csf3_shape(parsed, story_prefix):
    return _first(_CSF3_SHAPE.pattern, parsed.text,
                  "CSF3 TypeScript story shape is not valid in a .svelte story; use defineMeta and <Story>")


def _check_svelte_required(parsed, story_prefix):
    text = parsed.text
    if not text.strip():
        return []
    findings = []
    if not _MODULE_SCRIPT.search(text) and not _CONTEXT_MODULE.search(text):
        findings.append(("Missing '<script module>' block", None))
    has_define_meta = any(
        d.specifier == "@storybook/addon-svelte-csf" and any(i == "defineMeta" for i, _ in d.named)
        for d in parsed.imports
    )
    if not has_define_meta:
        findings.append(("Missing 'defineMeta' import from '@storybook/addon-svelte-csf'", None))
    if not _DEFINE_META_BINDING.search(text):
        findings.append(("Missing 'const { Story } = defineMeta(...)'", None))
    if not re.search(r"<Story\b[^>]*\bname=", text):
        findings.append(("No '<Story name=...>' found", None))
    return findings


def _check_class_name(parsed, story_prefix):
    return _first(r"\bclassName=", parsed.markup or parsed.text, "Svelte uses 'class=', not 'className='")


def use_class_attribute(text: str, parsed: ParsedArtifact) -> str:
    return re.sub(r"\bclassName=", "class=", text)


def _check_svelte_events(parsed, story_prefix):
    m = _SVELTE_EVENTS.search(parsed.text)
    if not m:
        return []
    return [(f"Using JSX-style {m.group(0)[:-1]}; use lowercase on{m.group(1).lower()} for Svelte 5",
             _line_at(parsed.text, m.start()))]


def lowercase_event_attributes(text: str, parsed: ParsedArtifact) -> str:
    return _SVELTE_EVENTS.sub(lambda m: f"on{m.group(1).lower()}=", text)


def _check_svelte_tag_balance(parsed, story_prefix):
    text = parsed.text
    findings = []
    opens = len(re.findall(r"<script\b", text))
    closes = len(re.findall(r"</script\s*>", text))
    if opens != closes:
        findings.append((f"Unbalanced <script> tags: {opens} opening vs {closes} closing", None))
    story_opens = sum(1 for m in _STORY_OPEN.finditer(text) if not m.group(1).rstrip().endswith("/"))
    story_closes = len(re.findall(r"</Story\s*>", text))
    if story_opens != story_closes:
        findings.append((f"Unbalanced <Story> tags: {story_opens} opening vs {story_closes} closing", None))
    return findings


# ── Registry ───────────────────────────────────────────────────────────────────

_E, _W = Severity.ERROR, Severity.WARNING

COMMON_RULES: list[DialectRule] = [
    DialectRule("empty-artifact", _E, _check_empty),
    DialectRule("unsafe-style-prop", _E, _check_unsafe_props),
    DialectRule("title-prefix", _W, _check_title_prefix),
]

DIALECT_RULES: dict[Dialect, list[DialectRule]] = {
    Dialect.REACT: [
        DialectRule("missing-export", _E, _check_has_export),
        DialectRule("missing-default-export", _E, _check_default_export),
        DialectRule("commonjs-export", _E, _check_commonjs),
        DialectRule("children-in-args", _E, _check_children_in_args, move_children_to_render),
        DialectRule("missing-react-import", _E, _check_react_import, insert_react_import),
    ],
    Dialect.VUE: [
        DialectRule("missing-export", _E, _check_has_export),
        DialectRule("missing-framework-import", _E, _check_vue_import),
        DialectRule("react-import", _E, _check_react_import_absent, remove_react_imports),
        DialectRule("jsx-attribute", _E, _check_vue_jsx_attrs),
    ],
    Dialect.ANGULAR: [
        DialectRule("missing-export", _E, _check_has_export),
        DialectRule("missing-framework-import", _E, _check_angular_import),
        DialectRule("react-import", _E, _check_react_import_absent, remove_react_imports),
        DialectRule("missing-module-metadata", _E, _check_angular_metadata),
        DialectRule("component-state", _E, _check_angular_state),
    ],
    Dialect.WEB_COMPONENTS: [
        DialectRule("missing-export", _E, _check_has_export),
        DialectRule("missing-lit-html", _E, _check_lit_html, insert_lit_html_import),
        DialectRule("react-import", _E, _check_react_import_absent, remove_react_imports),
        DialectRule("jsx-in-lit", _E, _check_no_jsx),
    ],
    Dialect.SVELTE: [
        DialectRule("svelte-context-module", _E, _check_context_module, use_module_script),
        DialectRule("svelte-old-meta", _E, _check_old_meta),
        DialectRule("svelte-csf3-shape", _E, _check_csf3_shape),
        DialectRule("svelte-missing-structure", _E, _check_svelte_required),
        DialectRule("react-import", _E, _check_react_import_absent, remove_react_imports),
        DialectRule("svelte-class-name", _E, _check_class_name, use_class_attribute),
        DialectRule("svelte-event-case", _E, _check_svelte_events, lowercase_event_attributes),
        DialectRule("svelte-tag-balance", _E, _check_svelte_tag_balance),
    ],
}


def rules_for(dialect: Dialect) -> list[DialectRule]:
    return COMMON_RULES + DIALECT_RULES.get(dialect, [])


def check_dialect(parsed: ParsedArtifact, story_prefix: Optional[str] = None) -> list[ValidationDiagnostic]:
    diags = []
    for rule in rules_for(parsed.dialect):
        for message, line in rule.check(parsed, story_prefix):
            diags.append(ValidationDiagnostic(
                severity=rule.severity, message=message, line=line,
                code=rule.code, category=DiagnosticCategory.DIALECT,
            ))
    return diags


def dialect_repairs(dialect: Dialect) -> dict[str, RepairFn]:
    return {rule.code: rule.repair for rule in rules_for(dialect) if rule.repair is not None}
