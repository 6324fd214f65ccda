"""Tolerant tokenizer for JavaScript / TypeScript / JSX story files.

The lexer never raises. Anything it cannot make sense of (unterminated strings,
templates or comments, EOF inside a JSX tag, closing tags with no opener) is
recorded as a syntax diagnostic and scanning continues.

JSX is recognised by context: ``<`` starts an element only where an expression
may begin (after ``(``, ``=``, ``return``, ``=>``, ``,`` …), so TypeScript
generics such as ``Meta<typeof Button>`` stay ordinary punctuation.
"""

import bisect
import re
from typing import NamedTuple, Optional

from showcase.types import DiagnosticCategory, Severity, ValidationDiagnostic


class Token(NamedTuple):
    kind: str
    value: str
    pos: int
    line: int
    col: int


# Token kinds
IDENT = "ident"
NUMBER = "number"
STRING = "string"
TEMPLATE = "template"          # one literal chunk of a template string
REGEX = "regex"
PUNCT = "punct"
JSX_OPEN = "jsx_open"          # "<Name" ("" for a fragment)
JSX_ATTR = "jsx_attr"
JSX_TAG_END = "jsx_tag_end"    # ">" finishing an opening tag
JSX_SELF_CLOSE = "jsx_self_close"
JSX_CLOSE = "jsx_close"        # "</Name>" ("" for a fragment)
JSX_TEXT = "jsx_text"

_IDENT_RE = re.compile(r"[A-Za-z_$\u00c0-\uffff][\w$\u00c0-\uffff]*")
_NUMBER_RE = re.compile(r"\d[\w.]*|\.\d[\w]*")
_TAG_NAME_RE = re.compile(r"[A-Za-z_$][\w$]*(?:[.:-][A-Za-z_$][\w$-]*)*")
_ATTR_NAME_RE = re.compile(r"[A-Za-z_$][\w$:.-]*")

_PUNCTUATORS = sorted([
    "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
], key=len, reverse=True)

# After these, "<" begins JSX and "/" begins a regex.
_EXPRESSION_START_PUNCT = frozenset({
    "(", "[", "{", ",", ";", "=", ":", "?", "!", "&", "|", "^", "~", "+", "-",
    "*", "%", "=>", "&&", "||", "??", "==", "===", "!=", "!==", "+=", "-=",
    "*=", "/=", "${", "}",
})
_EXPRESSION_START_WORDS = frozenset({
    "return", "yield", "await", "default", "case", "else", "do", "in", "of",
    "typeof", "void", "delete", "new", "throw", "export",
})

# mode stack entries
_JS = "js"
_TEMPLATE = "template"
_TAG = "tag"
_CHILDREN = "children"


class _Mode(NamedTuple):
    kind: str
    name: str = ""
    line: int = 0
    col: int = 0


class LexResult(NamedTuple):
    tokens: list[Token]
    diagnostics: list[ValidationDiagnostic]


class Lexer:
    """Single-use tokenizer; call ``tokenize()`` once."""

    def __init__(self, text: str, jsx: bool = True, line_offset: int = 0) -> None:
        self.text = text
        self.jsx = jsx
        self.line_offset = line_offset
        self.pos = 0
        self.tokens: list[Token] = []
        self.diagnostics: list[ValidationDiagnostic] = []
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]
        # (mode, brace depth within that mode); depth only meaningful for js
        self._modes: list[_Mode] = [_Mode(_JS)]
        self._depths: list[int] = [0]

    # ── helpers ────────────────────────────────────────────────────────────

    def _loc(self, pos: int) -> tuple[int, int]:
        idx = bisect.bisect_right(self._line_starts, pos) - 1
        return idx + 1 + self.line_offset, pos - self._line_starts[idx] + 1

    def _emit(self, kind: str, value: str, pos: int) -> None:
        line, col = self._loc(pos)
        self.tokens.append(Token(kind, value, pos, line, col))

    def _error(self, message: str, pos: int, code: str = "syntax-error") -> None:
        line, col = self._loc(pos)
        self.diagnostics.append(ValidationDiagnostic(
            severity=Severity.ERROR, message=message, line=line, column=col,
            code=code, category=DiagnosticCategory.SYNTAX,
        ))

    def _prev_significant(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None

    def _expression_may_start(self) -> bool:
        prev = self._prev_significant()
        if prev is None:
            return True
        if prev.kind == PUNCT:
            return prev.value in _EXPRESSION_START_PUNCT
        if prev.kind == IDENT:
            return prev.value in _EXPRESSION_START_WORDS
        return prev.kind in (JSX_CLOSE, JSX_SELF_CLOSE)

    # ── driver ─────────────────────────────────────────────────────────────

    def tokenize(self) -> LexResult:
        n = len(self.text)
        while self.pos < n:
            mode = self._modes[-1].kind
            if mode == _JS:
                self._scan_js()
            elif mode == _TEMPLATE:
                self._scan_template()
            elif mode == _TAG:
                self._scan_tag()
            else:
                self._scan_children()
        self._finish()
        return LexResult(self.tokens, self.diagnostics)

    def _finish(self) -> None:
        for mode in reversed(self._modes):
            if mode.kind == _TEMPLATE:
                self._error("Unterminated template literal", len(self.text) - 1 if self.text else 0,
                            code="unterminated-template")
            elif mode.kind in (_TAG, _CHILDREN):
                label = mode.name or "<>"
                line = mode.line
                self.diagnostics.append(ValidationDiagnostic(
                    severity=Severity.ERROR,
                    message=f"JSX element '{label}' has no corresponding closing tag.",
                    line=line, column=mode.col, code="unclosed-jsx",
                    category=DiagnosticCategory.SYNTAX,
                ))

    # ── JavaScript ─────────────────────────────────────────────────────────

    def _scan_js(self) -> None:
        text = self.text
        ch = text[self.pos]

        if ch in " \t\r\n\ufeff":
            self.pos += 1
            return

        if text.startswith("//", self.pos):
            end = text.find("\n", self.pos)
            self.pos = len(text) if end == -1 else end
            return

        if text.startswith("/*", self.pos):
            end = text.find("*/", self.pos + 2)
            if end == -1:
                self._error("Unterminated comment", self.pos, code="unterminated-comment")
                self.pos = len(text)
            else:
                self.pos = end + 2
            return

        if ch in "'\"":
            self._scan_string(ch)
            return

        if ch == "`":
            self._emit(PUNCT, "`", self.pos)
            self.pos += 1
            self._modes.append(_Mode(_TEMPLATE))
            self._depths.append(0)
            return

        m = _IDENT_RE.match(text, self.pos)
        if m:
            self._emit(IDENT, m.group(0), self.pos)
            self.pos = m.end()
            return

        m = _NUMBER_RE.match(text, self.pos)
        if m and (ch.isdigit() or (ch == "." and self.pos + 1 < len(text) and text[self.pos + 1].isdigit())):
            self._emit(NUMBER, m.group(0), self.pos)
            self.pos = m.end()
            return

        if ch == "<" and self.jsx and self._expression_may_start():
            if self._try_jsx_start():
                return

        if ch == "/" and self._expression_may_start():
            self._scan_regex()
            return

        if ch == "{":
            self._emit(PUNCT, "{", self.pos)
            self._depths[-1] += 1
            self.pos += 1
            return

        if ch == "}":
            self._emit(PUNCT, "}", self.pos)
            self.pos += 1
            if len(self._modes) > 1:
                self._depths[-1] -= 1
                if self._depths[-1] <= 0:
                    # end of ${…} or a JSX expression container
                    self._modes.pop()
                    self._depths.pop()
            elif self._depths[-1] > 0:
                self._depths[-1] -= 1
            return

        for p in _PUNCTUATORS:
            if text.startswith(p, self.pos):
                self._emit(PUNCT, p, self.pos)
                self.pos += len(p)
                return

        self._emit(PUNCT, ch, self.pos)
        self.pos += 1

    def _scan_string(self, quote: str) -> None:
        text = self.text
        start = self.pos
        i = start + 1
        while i < len(text):
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == quote:
                self._emit(STRING, text[start:i + 1], start)
                self.pos = i + 1
                return
            if c == "\n":
                break
            i += 1
        self._error("Unterminated string literal", start, code="unterminated-string")
        self._emit(STRING, text[start:i], start)
        self.pos = i

    def _scan_regex(self) -> None:
        text = self.text
        start = self.pos
        i = start + 1
        in_class = False
        while i < len(text):
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == "\n":
                # not a regex after all; treat "/" as an operator
                self._emit(PUNCT, "/", start)
                self.pos = start + 1
                return
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                i += 1
                while i < len(text) and (text[i].isalpha()):
                    i += 1
                self._emit(REGEX, text[start:i], start)
                self.pos = i
                return
            i += 1
        self._emit(PUNCT, "/", start)
        self.pos = start + 1

    # ── Template literals ──────────────────────────────────────────────────

    def _scan_template(self) -> None:
        text = self.text
        start = self.pos
        i = start
        while i < len(text):
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == "`":
                if i > start:
                    self._emit(TEMPLATE, text[start:i], start)
                self._emit(PUNCT, "`", i)
                self.pos = i + 1
                self._modes.pop()
                self._depths.pop()
                return
            if c == "$" and text.startswith("${", i):
                if i > start:
                    self._emit(TEMPLATE, text[start:i], start)
                self._emit(PUNCT, "${", i)
                self.pos = i + 2
                self._modes.append(_Mode(_JS))
                self._depths.append(1)
                return
            i += 1
        if i > start:
            self._emit(TEMPLATE, text[start:i], start)
        self.pos = len(text)

    # ── JSX ────────────────────────────────────────────────────────────────

    def _try_jsx_start(self) -> bool:
        """At "<" in expression position: open tag, fragment, or orphan closer."""
        text = self.text
        nxt = text[self.pos + 1] if self.pos + 1 < len(text) else ""
        if nxt == "/":
            return self._scan_closing_tag(orphan=True)
        if nxt == ">":
            self._emit(JSX_OPEN, "", self.pos)
            self._emit(JSX_TAG_END, ">", self.pos + 1)
            line, col = self._loc(self.pos)
            self._modes.append(_Mode(_CHILDREN, "", line, col))
            self._depths.append(0)
            self.pos += 2
            return True
        m = _TAG_NAME_RE.match(text, self.pos + 1)
        if not m:
            return False
        self._open_tag(m.group(0), self.pos, m.end())
        return True

    def _open_tag(self, name: str, start: int, end: int) -> None:
        self._emit(JSX_OPEN, name, start)
        line, col = self._loc(start)
        self._modes.append(_Mode(_TAG, name, line, col))
        self._depths.append(0)
        self.pos = end

    def _scan_closing_tag(self, orphan: bool = False) -> bool:
        """Handle "</Name>" at self.pos. Pops the matching element if there is one."""
        text = self.text
        start = self.pos
        m = _TAG_NAME_RE.match(text, start + 2)
        name = m.group(0) if m else ""
        i = m.end() if m else start + 2
        while i < len(text) and text[i] in " \t\r\n":
            i += 1
        if i < len(text) and text[i] == ">":
            i += 1
        else:
            self._error(f"Expected '>' to finish closing tag </{name}", start, code="malformed-jsx")
        self._emit(JSX_CLOSE, name, start)
        self.pos = i

        open_index = None
        for idx in range(len(self._modes) - 1, 0, -1):
            mode = self._modes[idx]
            if mode.kind == _JS:
                # an expression container boundary; never close across it
                break
            if mode.kind == _CHILDREN and mode.name == name:
                open_index = idx
                break

        if open_index is None:
            label = name or "<>"
            if orphan or not any(md.kind == _CHILDREN for md in self._modes):
                self._error(f"Closing tag </{label}> has no matching opening tag", start,
                            code="orphan-closing-tag")
            else:
                expected = self._modes[-1].name or "<>"
                self._error(f"Expected corresponding JSX closing tag for '{expected}', found </{label}>",
                            start, code="mismatched-jsx")
            return True

        # anything still open above the match was never closed
        for mode in self._modes[open_index + 1:]:
            if mode.kind in (_TAG, _CHILDREN):
                self.diagnostics.append(ValidationDiagnostic(
                    severity=Severity.ERROR,
                    message=f"JSX element '{mode.name or '<>'}' has no corresponding closing tag.",
                    line=mode.line, column=mode.col, code="unclosed-jsx",
                    category=DiagnosticCategory.SYNTAX,
                ))
        del self._modes[open_index:]
        del self._depths[open_index:]
        return True

    def _scan_tag(self) -> None:
        text = self.text
        ch = text[self.pos]
        if ch in " \t\r\n":
            self.pos += 1
            return
        if text.startswith("/>", self.pos):
            self._emit(JSX_SELF_CLOSE, "/>", self.pos)
            self.pos += 2
            self._modes.pop()
            self._depths.pop()
            return
        if ch == ">":
            self._emit(JSX_TAG_END, ">", self.pos)
            self.pos += 1
            mode = self._modes.pop()
            self._depths.pop()
            self._modes.append(_Mode(_CHILDREN, mode.name, mode.line, mode.col))
            self._depths.append(0)
            return
        if ch == "{":
            self._emit(PUNCT, "{", self.pos)
            self.pos += 1
            self._modes.append(_Mode(_JS))
            self._depths.append(1)
            return
        if ch in "'\"":
            end = text.find(ch, self.pos + 1)
            if end == -1:
                self._error("Unterminated attribute string", self.pos, code="unterminated-string")
                end = len(text) - 1
            self._emit(STRING, text[self.pos:end + 1], self.pos)
            self.pos = end + 1
            return
        if ch == "=":
            self._emit(PUNCT, "=", self.pos)
            self.pos += 1
            return
        if ch == "<":
            m = _TAG_NAME_RE.match(text, self.pos + 1)
            if m:
                self._open_tag(m.group(0), self.pos, m.end())
                return
        m = _ATTR_NAME_RE.match(text, self.pos)
        if m:
            self._emit(JSX_ATTR, m.group(0), self.pos)
            self.pos = m.end()
            return
        self._error(f"Unexpected character {ch!r} in JSX tag <{self._modes[-1].name}>", self.pos,
                    code="malformed-jsx")
        self.pos += 1

    def _scan_children(self) -> None:
        text = self.text
        ch = text[self.pos]
        if ch == "{":
            self._emit(PUNCT, "{", self.pos)
            self.pos += 1
            self._modes.append(_Mode(_JS))
            self._depths.append(1)
            return
        if ch == "<":
            if text.startswith("</", self.pos):
                self._scan_closing_tag()
                return
            if text.startswith("<>", self.pos):
                self._emit(JSX_OPEN, "", self.pos)
                self._emit(JSX_TAG_END, ">", self.pos + 1)
                line, col = self._loc(self.pos)
                self._modes.append(_Mode(_CHILDREN, "", line, col))
                self._depths.append(0)
                self.pos += 2
                return
            m = _TAG_NAME_RE.match(text, self.pos + 1)
            if m:
                self._open_tag(m.group(0), self.pos, m.end())
                return
        start = self.pos
        i = start
        while i < len(text) and text[i] not in "<{":
            i += 1
        if i == start:
            i += 1
        chunk = text[start:i]
        if chunk.strip():
            self._emit(JSX_TEXT, chunk, start)
        self.pos = i


def tokenize(text: str, jsx: bool = True, line_offset: int = 0) -> LexResult:
    return Lexer(text, jsx=jsx, line_offset=line_offset).tokenize()
