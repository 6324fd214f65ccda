"""Pull the story source out of a raw LLM response."""

import re
from typing import Optional, Union

from showcase.types import Dialect

_FENCE = re.compile(r"```([\w+-]*)[^\n]*\n(.*?)(?:```|\Z)", re.S)

# Fence languages that mean "this is the story", in preference order per dialect.
_LANGS: dict[Dialect, tuple[str, ...]] = {
    Dialect.REACT: ("tsx", "jsx", "typescript", "ts", "javascript", "js"),
    Dialect.VUE: ("vue", "typescript", "ts", "javascript", "js", "html"),
    Dialect.ANGULAR: ("typescript", "ts", "javascript", "js"),
    Dialect.SVELTE: ("svelte", "html", "typescript", "ts", "javascript", "js"),
    Dialect.WEB_COMPONENTS: ("typescript", "ts", "javascript", "js"),
}

_FRAMEWORK_STARTS = re.compile(
    r"""<script\s+module\b|<script\s+context=["']module["']|<script\s+setup\b|<script\s+lang=["']ts["']"""
)
_CODE_START = re.compile(r"^[ \t]*(?:import|export)\b", re.M)


def extract_artifact(response: str, dialect: Union[Dialect, str] = Dialect.REACT) -> Optional[str]:
    """Return the story code in ``response``, or None if nothing code-like is there.

    Tries a fenced block (language-tagged blocks first), then a framework
    script start, then everything from the first import/export line.
    """
    if not response or not response.strip():
        return None
    dialect = Dialect(dialect)

    blocks = [(m.group(1).lower(), m.group(2)) for m in _FENCE.finditer(response)]
    blocks = [(lang, body) for lang, body in blocks if body.strip()]
    if blocks:
        preferred = _LANGS.get(dialect, ())
        for lang in preferred:
            for block_lang, body in blocks:
                if block_lang == lang:
                    return body.strip() + "\n"
        for block_lang, body in blocks:
            if not block_lang:
                return body.strip() + "\n"
        return blocks[0][1].strip() + "\n"

    m = _FRAMEWORK_STARTS.search(response)
    if m:
        return response[m.start():].strip() + "\n"

    m = _CODE_START.search(response)
    if m:
        return response[m.start():].strip() + "\n"
    return None
