"""Dialect-independent structural heuristics and their deterministic repairs.

Checks:
  truncation: output stops mid-expression, or ends with closing
    tags that have no opener followed by a bare brace
  brace-imbalance: unequal ``{`` / ``}`` counts outside strings/comments
  title-unescaped-quote: ``title: 'Women's Shoes'``
  duplicate-title-words: ``title: 'Generated/Product Card Product Card'``

Each repair takes the artifact text and its ParsedArtifact and returns new
text (or the same text when it has nothing to do).
"""

import re

from showcase.types import DiagnosticCategory, Severity, ValidationDiagnostic
from showcase.validation.lexer import JSX_CLOSE, JSX_OPEN, JSX_SELF_CLOSE, PUNCT
from showcase.validation.parser import ParsedArtifact

_CLOSER_LINE = re.compile(r"^\s*</[\w$.:-]*>\s*$")
_BARE_BRACE_LINE = re.compile(r"^\s*[)\]}]+\s*;?\s*$")
_OPEN_TAG_UNFINISHED = re.compile(r"<[A-Za-z][^>]*$")
_TITLE_LINE = re.compile(r"""^(\s*title\s*:\s*)(['"])(.*)\2(\s*,?\s*)$""")
_STRING_TAIL = re.compile(r"[\s,;)\]}]*$")

_UNCLOSED_CODES = frozenset({
    "unclosed-jsx", "unterminated-string", "unterminated-template", "unterminated-comment",
})


def _diag(code: str, message: str, line=None) -> ValidationDiagnostic:
    return ValidationDiagnostic(
        severity=Severity.ERROR, message=message, line=line,
        code=code, category=DiagnosticCategory.STRUCTURAL,
    )


def _last_line(text: str) -> tuple[int, str]:
    """(1-based line number, content) of the last non-blank line."""
    lines = text.split("\n")
    for idx in range(len(lines) - 1, -1, -1):
        if lines[idx].strip():
            return idx + 1, lines[idx]
    return 0, ""


def brace_counts(parsed: ParsedArtifact) -> tuple[int, int]:
    opens = sum(1 for t in parsed.tokens if t.kind == PUNCT and t.value in ("{", "${"))
    closes = sum(1 for t in parsed.tokens if t.kind == PUNCT and t.value == "}")
    return opens, closes


def _count_unescaped(line: str, quote: str) -> int:
    return len(re.findall(rf"(?<!\\){quote}", line))


# ── Detection ──────────────────────────────────────────────────────────────────

def dangling_tail(text: str) -> tuple[list[int], int] | None:
    """Line numbers of a trailing run of closing-tag-only lines plus the bare brace line after it."""
    lines = text.split("\n")
    idx = len(lines) - 1
    while idx >= 0 and not lines[idx].strip():
        idx -= 1
    if idx < 1 or not _BARE_BRACE_LINE.match(lines[idx]):
        return None
    brace_idx = idx
    idx -= 1
    closers = []
    while idx >= 0 and _CLOSER_LINE.match(lines[idx]):
        closers.append(idx + 1)
        idx -= 1
    if not closers:
        return None
    return sorted(closers), brace_idx + 1


def truncation_reason(parsed: ParsedArtifact) -> tuple[str, int] | None:
    """Why the artifact looks cut off, and on which line; None if it looks whole."""
    text = parsed.text
    line_no, last = _last_line(text)
    if not last:
        return None

    tail = dangling_tail(text)
    if tail:
        closer_lines, brace_line = tail
        orphan_lines = {d.line for d in parsed.diagnostics if d.code in ("orphan-closing-tag", "mismatched-jsx")}
        if orphan_lines.intersection(closer_lines):
            return (
                f"ends with {len(closer_lines)} closing tag(s) that were never opened, "
                f"followed by a bare '{last.strip()}' (lines {closer_lines[0]}-{brace_line})",
                closer_lines[0],
            )

    opens, closes = brace_counts(parsed)
    has_unclosed = opens > closes or any(d.code in _UNCLOSED_CODES for d in parsed.diagnostics)
    if not has_unclosed:
        return None

    stripped = last.strip()
    if _OPEN_TAG_UNFINISHED.search(stripped):
        return "last line stops inside a JSX tag", line_no
    if _count_unescaped(stripped, "'") % 2 or _count_unescaped(stripped, '"') % 2:
        return "last line has an unterminated string", line_no
    if stripped.count("(") > stripped.count(")"):
        return "last line opens a parenthesis that is never closed", line_no
    if re.search(r"[A-Za-z0-9]$", stripped) and not stripped.endswith((";", "}")):
        return "last line stops mid-expression", line_no
    return None


def check_structure(parsed: ParsedArtifact) -> list[ValidationDiagnostic]:
    diags = []

    reason = truncation_reason(parsed)
    if reason:
        message, line = reason
        diags.append(_diag("truncation", f"Artifact appears truncated: {message}", line))

    opens, closes = brace_counts(parsed)
    if opens != closes:
        diags.append(_diag(
            "brace-imbalance",
            f"Unbalanced braces: {opens} opening '{{' vs {closes} closing '}}'",
            _last_line(parsed.text)[0] or None,
        ))

    if parsed.title_line is not None:
        line = parsed.text.split("\n")[parsed.title_line - 1]
        m = _TITLE_LINE.match(line)
        if m:
            quote, content = m.group(2), m.group(3)
            if re.search(rf"(?<!\\){quote}", content):
                diags.append(_diag(
                    "title-unescaped-quote",
                    f"Story title contains an unescaped {quote} character: {content}",
                    parsed.title_line,
                ))
        title = parsed.title or ""
        if find_duplicate_segment(title.split("/")[-1]):
            diags.append(_diag(
                "duplicate-title-words",
                f"Story title repeats itself: {title}",
                parsed.title_line,
            ))
    return diags


def find_duplicate_segment(title: str) -> tuple[int, int] | None:
    """(start word index, window) of the first immediately repeated word sequence."""
    words = title.split()
    for window in range(2, len(words) // 2 + 1):
        for i in range(0, len(words) - 2 * window + 1):
            segment = words[i:i + window]
            if segment == words[i + window:i + 2 * window] and len(" ".join(segment)) > 3:
                return i, window
    return None


# ── Repairs ────────────────────────────────────────────────────────────────────

def drop_dangling_tail(text: str, parsed: ParsedArtifact) -> str:
    """Remove trailing orphan closing-tag lines, and the bare brace after them if it is surplus."""
    tail = dangling_tail(text)
    if not tail:
        return text
    closer_lines, brace_line = tail
    lines = text.split("\n")
    drop = set(closer_lines)

    opens, closes = brace_counts(parsed)
    brace_text = lines[brace_line - 1]
    if closes > opens and "}" in brace_text:
        drop.add(brace_line)

    kept = [line for idx, line in enumerate(lines, start=1) if idx not in drop]
    return "\n".join(kept).rstrip() + "\n"


def close_dangling_constructs(text: str, parsed: ParsedArtifact) -> str:
    """Append closers for every unclosed JSX element and bracket, innermost first."""
    pairs = {"(": ")", "[": "]", "{": "}", "${": "}"}
    stack: list[tuple[str, str]] = []  # ("jsx"|"br", name-or-opener)

    for tok in parsed.tokens:
        if tok.kind == JSX_OPEN:
            stack.append(("jsx", tok.value))
        elif tok.kind == JSX_SELF_CLOSE:
            if stack and stack[-1][0] == "jsx":
                stack.pop()
        elif tok.kind == JSX_CLOSE:
            for idx in range(len(stack) - 1, -1, -1):
                if stack[idx] == ("jsx", tok.value):
                    del stack[idx:]
                    break
        elif tok.kind == PUNCT and tok.value in pairs:
            stack.append(("br", tok.value))
        elif tok.kind == PUNCT and tok.value in (")", "]", "}"):
            for idx in range(len(stack) - 1, -1, -1):
                kind, value = stack[idx]
                if kind == "br" and pairs[value] == tok.value:
                    del stack[idx:]
                    break

    if not stack:
        return text

    closers = []
    for kind, value in reversed(stack):
        closers.append(f"</{value}>" if kind == "jsx" else pairs[value])

    out = text.rstrip()
    tail = ""
    for closer in closers:
        if closer.startswith("</"):
            tail += "\n" + closer
        elif closer == "}":
            tail += "\n}"
        else:
            tail += closer
    if stack[0] == ("br", "{"):
        tail += ";"
    return out + tail + "\n"


def drop_truncated_line(text: str, parsed: ParsedArtifact) -> str:
    """Drop the last non-blank line; it is the one the generator was cut off in."""
    line_no, _ = _last_line(text)
    if line_no <= 1:
        return text
    lines = text.split("\n")
    return "\n".join(lines[:line_no - 1]).rstrip() + "\n"


def close_unterminated_strings(text: str, parsed: ParsedArtifact) -> str:
    """Close each quote left open on its line, ahead of the line's trailing punctuation."""
    targets = sorted(
        {(d.line, d.column) for d in parsed.diagnostics
         if d.code == "unterminated-string" and d.line and d.column},
        reverse=True,
    )
    lines = text.split("\n")
    for line_no, col in targets:
        if line_no > len(lines):
            continue
        line = lines[line_no - 1]
        start = col - 1
        if start >= len(line) or line[start] not in "'\"":
            continue
        body = line[start + 1:]
        content = _STRING_TAIL.sub("", body, count=1)
        lines[line_no - 1] = line[:start + 1] + content + line[start] + body[len(content):]
    return "\n".join(lines)


def rebalance_braces(text: str, parsed: ParsedArtifact) -> str:
    opens, closes = brace_counts(parsed)
    if opens > closes:
        return text.rstrip() + "\n" + "}" * (opens - closes) + "\n"
    if closes > opens:
        surplus = closes - opens
        lines = text.rstrip().split("\n")
        while surplus > 0 and lines and _BARE_BRACE_LINE.match(lines[-1]):
            removable = lines[-1].count("}")
            if removable > surplus:
                break
            surplus -= removable
            lines.pop()
        if surplus == closes - opens:
            return text
        return "\n".join(lines) + "\n"
    return text


def escape_title_quotes(text: str, parsed: ParsedArtifact) -> str:
    if parsed.title_line is None:
        return text
    lines = text.split("\n")
    line = lines[parsed.title_line - 1]
    m = _TITLE_LINE.match(line)
    if not m:
        return text
    prefix, quote, content, suffix = m.groups()
    fixed = re.sub(rf"(?<!\\){quote}", "\\\\" + quote, content)
    lines[parsed.title_line - 1] = f"{prefix}{quote}{fixed}{quote}{suffix}"
    return "\n".join(lines)


def collapse_duplicate_title_words(text: str, parsed: ParsedArtifact) -> str:
    if parsed.title is None or parsed.title_line is None:
        return text
    head, _, leaf = parsed.title.rpartition("/")
    words = leaf.split()
    changed = False
    found = find_duplicate_segment(leaf)
    while found:
        start, window = found
        del words[start + window:start + 2 * window]
        changed = True
        found = find_duplicate_segment(" ".join(words))
    if not changed:
        return text
    new_title = (head + "/" if head else "") + " ".join(words)
    lines = text.split("\n")
    lines[parsed.title_line - 1] = lines[parsed.title_line - 1].replace(parsed.title, new_title, 1)
    return "\n".join(lines)
