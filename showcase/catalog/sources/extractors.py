"""Extractor strategies for component source files.

Each strategy is independent and returns a partial, ordered result. Callers
union the results explicitly with ``union_names``; no strategy reads or
mutates another's output.

Export-name strategies: ``extract(text, path) -> list[str]``
Prop strategies:        ``extract(text, component) -> list[str]``
"""

import re
from pathlib import Path
from typing import Protocol

IDENT = r"[A-Za-z_$][\w$]*"


def union_names(*results: list[str]) -> list[str]:
    """Order-preserving union of strategy results."""
    out: dict[str, None] = {}
    for result in results:
        for name in result:
            if name:
                out.setdefault(name, None)
    return list(out)


def balanced_block(text: str, open_index: int) -> str:
    """Return the text between the bracket at ``open_index`` and its match.

    Skips quoted strings. Unterminated blocks return everything to EOF.
    """
    pairs = {"{": "}", "(": ")", "[": "]", "<": ">"}
    opener = text[open_index]
    closer = pairs[opener]
    depth = 0
    quote = ""
    i = open_index
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "'\"`":
            quote = ch
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[open_index + 1:i]
        i += 1
    return text[open_index + 1:]


def top_level_segments(block: str, separators: str = ",;\n") -> list[str]:
    """Split ``block`` on separators that sit at nesting depth zero."""
    segments = []
    depth = 0
    quote = ""
    current: list[str] = []
    for i, ch in enumerate(block):
        if quote:
            current.append(ch)
            if ch == quote and block[i - 1] != "\\":
                quote = ""
            continue
        if ch in "'\"`":
            quote = ch
        elif ch in "{([<":
            depth += 1
        elif ch in "})]>" and depth > 0:
            # "=>" is not a closing angle bracket
            if not (ch == ">" and i > 0 and block[i - 1] == "="):
                depth -= 1
        elif ch in separators and depth == 0:
            segments.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        segments.append(tail)
    return [s for s in segments if s]


def _strip_comments(text: str) -> str:
    text = re.sub(r"/\*.*?\*/", "", text, flags=re.S)
    return re.sub(r"(?m)(^|[^:\\])//.*$", r"\1", text)


# ── Export-name strategies ─────────────────────────────────────────────────────

class ExportStrategy(Protocol):
    def extract(self, text: str, path: Path) -> list[str]:
        ...


class DirectExportStrategy:
    """``export [default] function|const|class|let Name``."""

    _PATTERN = re.compile(
        r"export\s+(?:default\s+)?(?:async\s+)?(?:function\*?|const|class|let|var)\s+([A-Z][A-Za-z0-9]*)"
    )

    def extract(self, text: str, path: Path) -> list[str]:
        return union_names(self._PATTERN.findall(text))


class ReExportListStrategy:
    """``export { A, B as C }`` with or without a ``from`` clause."""

    _PATTERN = re.compile(r"export\s+\{([^}]*)\}")

    def extract(self, text: str, path: Path) -> list[str]:
        names = []
        for block in self._PATTERN.findall(text):
            for item in block.split(","):
                item = item.strip()
                if not item or item.startswith("type "):
                    continue
                local = item.split(" as ")[-1].strip()
                if local != "default":
                    names.append(local)
        return union_names(names)


class BarrelReExportStrategy:
    """``export * from './Button'`` and ``export { default } from './Button'``.

    The exported name is taken from the module basename.
    """

    _STAR = re.compile(r"export\s+\*\s+from\s+['\"]([^'\"]+)['\"]")
    _DEFAULT = re.compile(r"export\s+\{\s*default\s*\}\s+from\s+['\"]([^'\"]+)['\"]")

    def extract(self, text: str, path: Path) -> list[str]:
        names = []
        for spec in self._STAR.findall(text) + self._DEFAULT.findall(text):
            base = spec.rstrip("/").split("/")[-1]
            base = re.sub(r"\.(tsx?|jsx?|vue|svelte)$", "", base)
            if base == "index":
                base = spec.rstrip("/").split("/")[-2] if spec.count("/") >= 2 else ""
            if base[:1].isupper():
                names.append(base)
        return union_names(names)


class SingleFileComponentStrategy:
    """Vue and Svelte single-file components are named after the file."""

    def extract(self, text: str, path: Path) -> list[str]:
        if path.suffix not in (".vue", ".svelte"):
            return []
        stem = path.stem
        if stem == "index":
            stem = path.parent.name
        name = "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_.]", stem) if part)
        return [name] if name else []


EXPORT_STRATEGIES: list[ExportStrategy] = [
    DirectExportStrategy(),
    ReExportListStrategy(),
    BarrelReExportStrategy(),
    SingleFileComponentStrategy(),
]


def extract_export_names(text: str, path: Path) -> list[str]:
    clean = _strip_comments(text)
    return union_names(*(s.extract(clean, path) for s in EXPORT_STRATEGIES))


# ── Prop strategies ────────────────────────────────────────────────────────────

class PropStrategy(Protocol):
    def extract(self, text: str, component: str) -> list[str]:
        ...


_FIELD = re.compile(rf"^(?:readonly\s+)?['\"]?({IDENT})['\"]?\??\s*[:(]")
_KEY = re.compile(rf"^['\"]?({IDENT})['\"]?\s*:")


def _fields(block: str) -> list[str]:
    names = []
    for seg in top_level_segments(block):
        m = _FIELD.match(seg)
        if m:
            names.append(m.group(1))
    return names


class InterfacePropsStrategy:
    """Fields of ``interface XProps {…}`` or ``type XProps = {…}``.

    Prefers ``<Component>Props``; falls back to the first ``*Props`` declared.
    """

    _DECL = re.compile(r"(?:interface\s+(\w*Props)\b[^{]*|type\s+(\w*Props)\s*(?:<[^>]*>)?\s*=\s*[^{;]*?)\{")

    def extract(self, text: str, component: str) -> list[str]:
        fallback = None
        for m in self._DECL.finditer(text):
            name = m.group(1) or m.group(2)
            if name == f"{component}Props":
                return _fields(balanced_block(text, m.end() - 1))
            if fallback is None:
                fallback = m
        if fallback is not None:
            return _fields(balanced_block(text, fallback.end() - 1))
        return []


class PropTypesStrategy:
    """Legacy ``Component.propTypes = {…}`` maps."""

    def extract(self, text: str, component: str) -> list[str]:
        m = re.search(rf"\b{re.escape(component)}\.propTypes\s*=\s*\{{", text)
        if not m:
            return []
        names = []
        for seg in top_level_segments(balanced_block(text, m.end() - 1), ",\n"):
            km = _KEY.match(seg)
            if km:
                names.append(km.group(1))
        return names


def _destructured(block: str) -> list[str]:
    names = []
    for seg in top_level_segments(block, ",\n"):
        if seg.startswith("..."):
            continue
        m = re.match(rf"({IDENT})", seg)
        if m:
            names.append(m.group(1))
    return names


class DestructuredParamsStrategy:
    """``function X({ a, b = 1 })``, ``const X = ({ a }) =>``, ``forwardRef(({ a }, ref) =>``."""

    def extract(self, text: str, component: str) -> list[str]:
        c = re.escape(component)
        decl = re.search(
            rf"(?:function\s+{c}\b|(?:const|let|var)\s+{c}\b[^=]*=)",
            text,
        )
        if not decl:
            return []
        window = text[decl.end():decl.end() + 400]
        m = re.match(r"[^{;]*?\(\s*\{", window, flags=re.S)
        if not m:
            return []
        start = decl.end() + m.end() - 1
        return _destructured(balanced_block(text, start))


class VuePropsStrategy:
    """``defineProps<{…}>()``, ``defineProps({…})`` and options-API ``props``."""

    def extract(self, text: str, component: str) -> list[str]:
        m = re.search(r"defineProps\s*<\s*\{", text)
        if m:
            return _fields(balanced_block(text, m.end() - 1))
        m = re.search(r"(?:defineProps\s*\(\s*|\bprops\s*:\s*)\{", text)
        if m:
            names = []
            for seg in top_level_segments(balanced_block(text, m.end() - 1), ",\n"):
                km = _KEY.match(seg) or re.match(rf"^({IDENT})$", seg)
                if km:
                    names.append(km.group(1))
            return names
        m = re.search(r"(?:defineProps\s*\(\s*|\bprops\s*:\s*)\[([^\]]*)\]", text)
        if m:
            return re.findall(r"['\"]([^'\"]+)['\"]", m.group(1))
        return []


class SveltePropsStrategy:
    """``export let x`` (Svelte 4) and ``let { a, b } = $props()`` (Svelte 5)."""

    def extract(self, text: str, component: str) -> list[str]:
        names = re.findall(rf"export\s+let\s+({IDENT})", text)
        for m in re.finditer(r"let\s*\{", text):
            block = balanced_block(text, m.end() - 1)
            after = text[m.end() + len(block):m.end() + len(block) + 120]
            if re.match(r"\}\s*(?::[^=]+)?=\s*\$props\(\)", after):
                names.extend(_destructured(block))
                break
        return union_names(names)


PROP_STRATEGIES: list[PropStrategy] = [
    InterfacePropsStrategy(),
    PropTypesStrategy(),
    DestructuredParamsStrategy(),
    VuePropsStrategy(),
    SveltePropsStrategy(),
]


def extract_props(text: str, component: str) -> list[str]:
    clean = _strip_comments(text)
    return union_names(*(s.extract(clean, component) for s in PROP_STRATEGIES))


def extract_slots(text: str) -> list[str]:
    """Named content-insertion points. ``default`` is always present."""
    slots = ["default"]
    slots.extend(re.findall(r"<slot\s+[^>]*name=[\"']([\w-]+)[\"']", text))
    slots.extend(re.findall(r"\b(slot[A-Z]\w*)", text))
    slots.extend(re.findall(r"\{@render\s+(\w+)\s*\(", text))
    return [s if s != "children" else "default" for s in union_names(slots)]


# ── Usage-example mining ───────────────────────────────────────────────────────

USAGE_EXAMPLE_SUFFIXES = (".example", ".examples", ".usage")


def infer_value_type(name: str, raw: str | None) -> str:
    """Best-effort type of a JSX attribute value as written in an example."""
    if raw is None:
        return "boolean"
    raw = raw.strip()
    if raw[:1] in "'\"":
        return "string"
    if raw.startswith("{") and raw.endswith("}"):
        inner = raw[1:-1].strip()
        if inner in ("true", "false"):
            return "boolean"
        if re.fullmatch(r"-?\d+(\.\d+)?", inner):
            return "number"
        if inner[:1] in "'\"`":
            return "string"
        if inner.startswith("["):
            return "array"
        if inner.startswith("{"):
            return "object"
        if "=>" in inner or inner.startswith("function") or re.match(r"^on[A-Z]", name):
            return "function"
        if inner.startswith("<"):
            return "node"
    return "unknown"


def _scan_attributes(text: str, start: int) -> list[tuple[str, str | None]]:
    """Parse JSX attributes from ``start`` up to the end of the opening tag."""
    attrs = []
    i = start
    n = len(text)
    while i < n:
        while i < n and text[i].isspace():
            i += 1
        if i >= n or text[i] in "/>":
            break
        if text[i] == "{":
            # spread attribute
            i += len(balanced_block(text, i)) + 2
            continue
        m = re.match(r"[A-Za-z_][\w:-]*", text[i:])
        if not m:
            break
        name = m.group(0)
        i += len(name)
        while i < n and text[i].isspace():
            i += 1
        if i < n and text[i] == "=":
            i += 1
            while i < n and text[i].isspace():
                i += 1
            if i < n and text[i] in "'\"":
                end = text.find(text[i], i + 1)
                end = n - 1 if end == -1 else end
                attrs.append((name, text[i:end + 1]))
                i = end + 1
            elif i < n and text[i] == "{":
                body = balanced_block(text, i)
                attrs.append((name, "{" + body + "}"))
                i += len(body) + 2
            else:
                attrs.append((name, ""))
        else:
            attrs.append((name, None))
    return attrs


def mine_usage_example(text: str, component: str) -> dict[str, str]:
    """Prop names and inferred types from every ``<Component …>`` in an example file."""
    found: dict[str, str] = {}
    for m in re.finditer(rf"<{re.escape(component)}(?=[\s/>])", text):
        for name, raw in _scan_attributes(text, m.end()):
            if name in ("key", "ref"):
                continue
            inferred = infer_value_type(name, raw)
            if found.get(name, "unknown") == "unknown":
                found[name] = inferred
    return found


def find_usage_example(source: Path, component: str) -> Path | None:
    """Co-located ``<Component>.example(s)|usage.<ext>`` next to ``source``."""
    exts = union_names([source.suffix], [".tsx", ".jsx", ".ts", ".js", ".vue", ".svelte"])
    for suffix in USAGE_EXAMPLE_SUFFIXES:
        for ext in exts:
            candidate = source.parent / f"{component}{suffix}{ext}"
            if candidate.is_file():
                return candidate
    return None
