"""Known failure signatures in a rendered preview frame.

The frame HTML is matched against ERROR_SIGNATURES in order; the first hit
decides the error kind. If none match, error-boundary markers are checked.
"""

import re
from typing import NamedTuple, Optional

from showcase.types import RuntimeErrorKind

DETAIL_LIMIT = 200


class ErrorSignature(NamedTuple):
    pattern: re.Pattern
    kind: RuntimeErrorKind
    description: str


class FrameError(NamedTuple):
    kind: RuntimeErrorKind
    detail: str


def _sig(pattern: str, kind: RuntimeErrorKind, description: str) -> ErrorSignature:
    return ErrorSignature(re.compile(pattern, re.I), kind, description)


_M, _R = RuntimeErrorKind.MODULE_ERROR, RuntimeErrorKind.RENDER_ERROR

ERROR_SIGNATURES: list[ErrorSignature] = [
    _sig(r"importers\[.*?\] is not a function", _M, "Story module loader error"),
    _sig(r"Cannot read propert.*of undefined", _R, "Component render error"),
    _sig(r"is not defined", _R, "Undefined variable error"),
    _sig(r"Module not found", _M, "Module resolution error"),
    _sig(r"Failed to resolve import", _M, "Import resolution error"),
    _sig(r"SyntaxError", _M, "Runtime syntax error"),
    _sig(r"Unexpected token", _M, "Parse error"),
    _sig(r"ReferenceError", _R, "Reference error"),
    _sig(r"TypeError", _R, "Type error"),
]

# Class attributes only; the same names also appear in CSS selectors.
_VISIBLE_ERROR = re.compile(r'class="[^"]*sb-show-errordisplay[^"]*"', re.I)
_STORY_ERROR = re.compile(r'class="[^"]*story-error[^"]*"', re.I)
_ERROR_MESSAGE = re.compile(r'<h1[^>]*id="error-message"[^>]*>([^<]+)</h1>', re.I)
_ERROR_STACK = re.compile(r'<code[^>]*id="error-stack"[^>]*>[^<]+</code>', re.I)
_DOCS_ERROR = re.compile(r">\s*DocsRenderer error", re.I)

_PRE = re.compile(r"<pre[^>]*>([\s\S]*?)</pre>", re.I)
_ERROR_LINE = re.compile(r"Error:?\s*([^\n<]+)", re.I)


def extract_detail(html: str) -> Optional[str]:
    m = _PRE.search(html) or _ERROR_LINE.search(html)
    if not m:
        return None
    return m.group(1).strip()[:DETAIL_LIMIT]


def has_error_boundary(html: str) -> bool:
    return bool(
        _VISIBLE_ERROR.search(html)
        or _ERROR_MESSAGE.search(html)
        or _ERROR_STACK.search(html)
        or _DOCS_ERROR.search(html)
        or _STORY_ERROR.search(html)
    )


def classify_frame(html: str) -> Optional[FrameError]:
    """The first failure found in the frame body, or None for a clean render."""
    for sig in ERROR_SIGNATURES:
        if sig.pattern.search(html):
            return FrameError(sig.kind, extract_detail(html) or sig.description)
    if has_error_boundary(html):
        m = _ERROR_MESSAGE.search(html)
        detail = m.group(1).strip()[:DETAIL_LIMIT] if m else "Preview error boundary triggered"
        return FrameError(RuntimeErrorKind.RENDER_ERROR, detail)
    return None
