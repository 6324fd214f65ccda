"""Artifact parser: imports, component-tag usages, bindings and syntax diagnostics.

Builds a ParsedArtifact from the token stream produced by the lexer. Svelte
story files are split into <script> blocks (tokenized as TypeScript) and
markup (scanned for component tags).
"""

import re
from typing import Optional

from pydantic import BaseModel, Field

from showcase.types import Dialect, DiagnosticCategory, Severity, ValidationDiagnostic
from showcase.validation.lexer import (
    IDENT,
    JSX_OPEN,
    PUNCT,
    STRING,
    TEMPLATE,
    Token,
    tokenize,
)


class ImportDecl(BaseModel):
    """One ``import … from '…'`` statement."""

    specifier: str
    default: Optional[str] = None
    named: list[tuple[str, str]] = Field(default_factory=list)  # (imported, local)
    namespace: Optional[str] = None
    type_only: bool = False
    line: int = 0
    start: int = 0   # char offsets into the parsed text
    end: int = 0

    @property
    def local_names(self) -> list[str]:
        names = [local for _, local in self.named]
        if self.default:
            names.insert(0, self.default)
        if self.namespace:
            names.append(self.namespace)
        return names


class TagUsage(BaseModel):
    """A component tag such as ``<Card.Section>``; ``root`` is what must be imported."""

    name: str
    root: str
    line: int


class ScriptBlock(BaseModel):
    attributes: str
    content: str
    start_line: int
    content_start: int
    start: int
    end: int


class ParsedArtifact(BaseModel):
    text: str
    dialect: Dialect
    tokens: list[Token] = Field(default_factory=list)
    imports: list[ImportDecl] = Field(default_factory=list)
    tag_usages: list[TagUsage] = Field(default_factory=list)
    local_bindings: set[str] = Field(default_factory=set)
    has_default_export: bool = False
    named_exports: list[str] = Field(default_factory=list)
    title: Optional[str] = None
    title_line: Optional[int] = None
    diagnostics: list[ValidationDiagnostic] = Field(default_factory=list)
    scripts: list[ScriptBlock] = Field(default_factory=list)
    markup: str = ""

    model_config = {"arbitrary_types_allowed": True}

    @property
    def imported_names(self) -> set[str]:
        names: set[str] = set()
        for decl in self.imports:
            names.update(decl.local_names)
        return names

    def imports_from(self, specifier: str) -> list[ImportDecl]:
        return [d for d in self.imports if d.specifier == specifier]


# ── Syntax checks over the token stream ────────────────────────────────────────

_PAIRS = {"(": ")", "[": "]", "{": "}", "${": "}"}
_CLOSERS = {")": "(", "]": "[", "}": "{"}


def _syntax_error(message: str, line: int, column: Optional[int] = None, code: str = "unbalanced-bracket"):
    return ValidationDiagnostic(
        severity=Severity.ERROR, message=message, line=line, column=column,
        code=code, category=DiagnosticCategory.SYNTAX,
    )


def check_brackets(tokens: list[Token]) -> list[ValidationDiagnostic]:
    """Nesting errors between (), [] and {}.

    Surplus or missing braces alone are left to the brace-balance heuristic;
    this only reports a closer that meets the wrong opener, and unclosed
    parentheses / square brackets.
    """
    diags = []
    stack: list[Token] = []
    for tok in tokens:
        if tok.kind != PUNCT:
            continue
        if tok.value in _PAIRS:
            stack.append(tok)
        elif tok.value in _CLOSERS:
            if not stack:
                if tok.value != "}":
                    diags.append(_syntax_error(f"Unexpected '{tok.value}'", tok.line, tok.col))
                continue
            opener = stack[-1]
            if _PAIRS[opener.value] == tok.value:
                stack.pop()
                continue
            # tolerate one missing closer: look one level down
            if len(stack) > 1 and _PAIRS[stack[-2].value] == tok.value:
                missing = stack.pop()
                stack.pop()
                if missing.value != "{" and missing.value != "${":
                    diags.append(_syntax_error(
                        f"'{missing.value}' opened at line {missing.line} is never closed",
                        missing.line, missing.col,
                    ))
                continue
            diags.append(_syntax_error(
                f"Unexpected '{tok.value}'; expected '{_PAIRS[opener.value]}' "
                f"to close '{opener.value}' from line {opener.line}",
                tok.line, tok.col,
            ))
    for opener in stack:
        if opener.value in ("(", "["):
            diags.append(_syntax_error(
                f"'{opener.value}' opened at line {opener.line} is never closed",
                opener.line, opener.col,
            ))
    return diags


# ── Imports ────────────────────────────────────────────────────────────────────

def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] in "'\"" and raw[-1] == raw[0]:
        return raw[1:-1]
    return raw.strip("'\"")


def _statement_start(tokens: list[Token], i: int) -> bool:
    if i == 0:
        return True
    prev = tokens[i - 1]
    return (prev.kind == PUNCT and prev.value in (";", "}")) or prev.line < tokens[i].line


def parse_imports(tokens: list[Token], text: str) -> tuple[list[ImportDecl], list[ValidationDiagnostic]]:
    imports: list[ImportDecl] = []
    diags: list[ValidationDiagnostic] = []
    n = len(tokens)
    i = 0
    while i < n:
        tok = tokens[i]
        if not (tok.kind == IDENT and tok.value == "import" and _statement_start(tokens, i)):
            i += 1
            continue
        nxt = tokens[i + 1] if i + 1 < n else None
        if nxt is None or (nxt.kind == PUNCT and nxt.value in ("(", ".")):
            i += 1
            continue

        decl = ImportDecl(specifier="", line=tok.line, start=tok.pos)
        j = i + 1
        if nxt.kind == STRING:
            decl.specifier = _unquote(nxt.value)
            j += 1
        else:
            if nxt.kind == IDENT and nxt.value == "type" and j + 1 < n and tokens[j + 1].value != "from":
                decl.type_only = True
                j += 1
            ok = True
            while j < n and not (tokens[j].kind == IDENT and tokens[j].value == "from"):
                t = tokens[j]
                if t.kind == IDENT:
                    decl.default = t.value
                    j += 1
                elif t.kind == PUNCT and t.value == ",":
                    j += 1
                elif t.kind == PUNCT and t.value == "*":
                    if j + 2 < n and tokens[j + 1].value == "as" and tokens[j + 2].kind == IDENT:
                        decl.namespace = tokens[j + 2].value
                        j += 3
                    else:
                        ok = False
                        break
                elif t.kind == PUNCT and t.value == "{":
                    j = _parse_named(tokens, j + 1, decl)
                else:
                    ok = False
                    break
            if ok and j + 1 < n and tokens[j + 1].kind == STRING:
                decl.specifier = _unquote(tokens[j + 1].value)
                j += 2
            else:
                bad_line = tokens[min(j, n - 1)].line
                diags.append(_syntax_error(
                    "Malformed import statement", tok.line if bad_line < tok.line else bad_line,
                    code="malformed-import",
                ))
                i = max(j, i + 1)
                continue

        end_tok = tokens[j - 1]
        end = end_tok.pos + len(end_tok.value)
        if j < n and tokens[j].kind == PUNCT and tokens[j].value == ";":
            end = tokens[j].pos + 1
            j += 1
        decl.end = end
        imports.append(decl)
        i = j
    return imports, diags


def _parse_named(tokens: list[Token], j: int, decl: ImportDecl) -> int:
    n = len(tokens)
    while j < n and not (tokens[j].kind == PUNCT and tokens[j].value == "}"):
        t = tokens[j]
        if t.kind in (IDENT, STRING):
            imported = _unquote(t.value)
            k = j + 1
            item_type_only = False
            if imported == "type" and k < n and tokens[k].kind == IDENT and tokens[k].value not in ("as",):
                item_type_only = True
                imported = tokens[k].value
                k += 1
            local = imported
            if k + 1 < n and tokens[k].value == "as" and tokens[k + 1].kind == IDENT:
                local = tokens[k + 1].value
                k += 2
            if not item_type_only and not decl.type_only:
                decl.named.append((imported, local))
            j = k
        else:
            j += 1
    return j + 1


# ── Bindings, exports, tags ────────────────────────────────────────────────────

_DECL_WORDS = frozenset({"const", "let", "var"})


def collect_bindings(tokens: list[Token]) -> set[str]:
    """Locally declared names: functions, classes, variables, destructuring."""
    names: set[str] = set()
    n = len(tokens)
    for i, tok in enumerate(tokens):
        if tok.kind != IDENT or i + 1 >= n:
            continue
        nxt = tokens[i + 1]
        if tok.value in ("function", "class") and nxt.kind == IDENT:
            names.add(nxt.value)
        elif tok.value in _DECL_WORDS:
            if nxt.kind == IDENT:
                names.add(nxt.value)
            elif nxt.kind == PUNCT and nxt.value in ("{", "["):
                names.update(_destructured_names(tokens, i + 1))
    return names


def _destructured_names(tokens: list[Token], j: int) -> set[str]:
    names: set[str] = set()
    depth = 0
    n = len(tokens)
    while j < n:
        t = tokens[j]
        if t.kind == PUNCT and t.value in ("{", "["):
            depth += 1
        elif t.kind == PUNCT and t.value in ("}", "]"):
            depth -= 1
            if depth == 0:
                break
        elif t.kind == IDENT and depth == 1 and j + 1 < n:
            after = tokens[j + 1]
            if after.kind == PUNCT and after.value in (",", "}", "]", "="):
                names.add(t.value)
        j += 1
    return names


def collect_exports(tokens: list[Token]) -> tuple[bool, list[str]]:
    has_default = False
    named: list[str] = []
    n = len(tokens)
    for i, tok in enumerate(tokens):
        if tok.kind != IDENT or tok.value != "export" or i + 1 >= n:
            continue
        nxt = tokens[i + 1]
        if nxt.value == "default":
            has_default = True
        elif nxt.value in ("const", "let", "var", "function", "class") and i + 2 < n:
            if tokens[i + 2].kind == IDENT:
                named.append(tokens[i + 2].value)
        elif nxt.kind == PUNCT and nxt.value == "{":
            j = i + 2
            while j < n and tokens[j].value != "}":
                if tokens[j].kind == IDENT and j + 1 < n and tokens[j + 1].value in (",", "}"):
                    if tokens[j].value == "default":
                        has_default = True
                    else:
                        named.append(tokens[j].value)
                j += 1
    return has_default, named


def is_component_tag(name: str) -> bool:
    return bool(name) and name[0].isupper() and "-" not in name and ":" not in name


def collect_jsx_usages(tokens: list[Token]) -> list[TagUsage]:
    usages = []
    for tok in tokens:
        if tok.kind == JSX_OPEN and is_component_tag(tok.value):
            usages.append(TagUsage(name=tok.value, root=tok.value.split(".")[0], line=tok.line))
    return usages


_MARKUP_TAG = re.compile(r"<([A-Z][\w$]*(?:\.[A-Za-z_$][\w$]*)*)(?=[\s/>])")


def scan_markup_tags(markup: str, line_offset: int = 0) -> list[TagUsage]:
    """Component tags inside HTML-like markup (Svelte bodies, Vue template strings)."""
    usages = []
    for m in _MARKUP_TAG.finditer(markup):
        line = markup.count("\n", 0, m.start()) + 1 + line_offset
        usages.append(TagUsage(name=m.group(1), root=m.group(1).split(".")[0], line=line))
    return usages


def collect_template_usages(tokens: list[Token]) -> list[TagUsage]:
    """PascalCase tags inside ``template:`` strings (Vue render templates)."""
    usages: list[TagUsage] = []
    n = len(tokens)
    for i, tok in enumerate(tokens):
        if not (tok.kind == IDENT and tok.value == "template" and i + 2 < n and tokens[i + 1].value == ":"):
            continue
        j = i + 2
        if tokens[j].kind == STRING:
            usages.extend(scan_markup_tags(_unquote(tokens[j].value), tokens[j].line - 1))
        elif tokens[j].kind == PUNCT and tokens[j].value == "`":
            j += 1
            while j < n and not (tokens[j].kind == PUNCT and tokens[j].value == "`"):
                if tokens[j].kind == TEMPLATE:
                    usages.extend(scan_markup_tags(tokens[j].value, tokens[j].line - 1))
                j += 1
    return usages


# ── Title ──────────────────────────────────────────────────────────────────────

_TITLE_LINE = re.compile(r"""^\s*title\s*:\s*(['"`])(.*)\1\s*,?\s*$""")
_TITLE_ANY = re.compile(r"""\btitle\s*:\s*(['"`])((?:\\.|(?!\1).)*)\1""")


def find_title(text: str) -> tuple[Optional[str], Optional[int]]:
    """The story title and its line, preferring a ``title:`` alone on its line."""
    for idx, line in enumerate(text.splitlines(), start=1):
        m = _TITLE_LINE.match(line)
        if m:
            return m.group(2), idx
    m = _TITLE_ANY.search(text)
    if m:
        return m.group(2), text.count("\n", 0, m.start()) + 1
    return None, None


# ── Svelte ─────────────────────────────────────────────────────────────────────

_SCRIPT_BLOCK = re.compile(r"<script\b([^>]*)>(.*?)</script\s*>", re.S)


def split_svelte(text: str) -> tuple[list[ScriptBlock], str]:
    """Script blocks plus markup with scripts blanked out (line numbers preserved)."""
    scripts = []
    markup = list(text)
    for m in _SCRIPT_BLOCK.finditer(text):
        content_start = m.start(2)
        scripts.append(ScriptBlock(
            attributes=m.group(1).strip(),
            content=m.group(2),
            start_line=text.count("\n", 0, content_start) + 1,
            content_start=content_start,
            start=m.start(),
            end=m.end(),
        ))
        for k in range(m.start(), m.end()):
            if markup[k] != "\n":
                markup[k] = " "
    return scripts, "".join(markup)


# ── Entry point ────────────────────────────────────────────────────────────────

def parse_artifact(text: str, dialect: Dialect) -> ParsedArtifact:
    """Tolerantly parse ``text``; never raises for malformed input."""
    title, title_line = find_title(text)

    if dialect == Dialect.SVELTE:
        scripts, markup = split_svelte(text)
        tokens: list[Token] = []
        diagnostics: list[ValidationDiagnostic] = []
        imports: list[ImportDecl] = []
        for block in scripts:
            result = tokenize(block.content, jsx=False, line_offset=block.start_line - 1)
            diagnostics.extend(result.diagnostics)
            diagnostics.extend(check_brackets(result.tokens))
            block_imports, import_diags = parse_imports(result.tokens, block.content)
            for decl in block_imports:
                decl.start += block.content_start
                decl.end += block.content_start
            imports.extend(block_imports)
            diagnostics.extend(import_diags)
            tokens.extend(result.tokens)
        has_default, named = collect_exports(tokens)
        return ParsedArtifact(
            text=text, dialect=dialect, tokens=tokens, imports=imports,
            tag_usages=scan_markup_tags(markup),
            local_bindings=collect_bindings(tokens),
            has_default_export=has_default, named_exports=named,
            title=title, title_line=title_line,
            diagnostics=diagnostics, scripts=scripts, markup=markup,
        )

    result = tokenize(text, jsx=True)
    tokens = result.tokens
    imports, import_diags = parse_imports(tokens, text)
    usages = collect_jsx_usages(tokens)
    if dialect == Dialect.VUE:
        usages.extend(collect_template_usages(tokens))
    has_default, named = collect_exports(tokens)
    return ParsedArtifact(
        text=text, dialect=dialect, tokens=tokens, imports=imports,
        tag_usages=usages,
        local_bindings=collect_bindings(tokens),
        has_default_export=has_default, named_exports=named,
        title=title, title_line=title_line,
        diagnostics=result.diagnostics + check_brackets(tokens) + import_diags,
    )
