"""Known-bad component names.

Three families of names are rejected even when an import statement that uses
them looks perfectly valid:

  * internal tool names that belong to the story tooling itself;
  * deprecated library components, keyed by the package that removed them;
  * made-up names that LLMs produce from story export names or layout words
    (``ProductCardStory``, ``CustomCard``, ``LayoutWrapper``), when the name is
    not actually in the catalog.
"""

import re

INTERNAL_TOOL_NAMES: frozenset[str] = frozenset({
    "StoryUIPanel",
    "StoryUIMessage",
    "GitHubStyleRepoCard",
    "GitHubHeader",
    "ComponentCard",
    "StoryCard",
    "UICard",
})

MADE_UP_PATTERNS: list[re.Pattern] = [
    re.compile(r".+Story$"),
    re.compile(r".+Example$"),
    re.compile(r".+Demo$"),
    re.compile(r"^Custom[A-Z]"),
    re.compile(r"^Styled[A-Z]"),
    re.compile(r".+Layout$"),
    re.compile(r".+Wrapper$"),
    re.compile(r".+Container$"),
    re.compile(r"^GitHub"),
    re.compile(r".+Header$"),
    re.compile(r".+Card$"),
]

# name -> replacement, per import path
DEPRECATED_COMPONENTS: dict[str, dict[str, str]] = {
    "@shopify/polaris": {
        "Heading": "Text",
        "Subheading": "Text",
        "Caption": "Text",
        "TextStyle": "Text",
        "DisplayText": "Text",
        "VisuallyHidden": "Text",
        "Stack": "BlockStack",
        "TextContainer": "BlockStack",
        "Inline": "InlineStack",
    },
    "@mui/material": {
        "Hidden": "Box",
    },
}

# Replacement candidates for made-up names, checked in order against the catalog.
ALTERNATIVES: dict[str, list[str]] = {
    "LayoutWrapper": ["Box", "Stack", "Layout", "Container"],
    "ContentWrapper": ["Box", "Stack", "Container"],
    "CustomCard": ["Card"],
    "StyledCard": ["Card"],
    "StoryCard": ["Card"],
    "UICard": ["Card"],
    "ComponentCard": ["Card"],
    "GitHubStyleRepoCard": ["Card"],
    "GitHubHeader": ["Header", "Text", "Heading"],
    "StoryUIPanel": ["Box", "Card"],
}

_SUFFIX_HINTS: list[tuple[str, list[str]]] = [
    ("Card", ["Card"]),
    ("Layout", ["Layout", "Box", "Stack"]),
    ("Wrapper", ["Box", "Stack"]),
    ("Container", ["Container", "Box"]),
    ("Header", ["Header", "Text", "Heading"]),
]

_EXEMPT = frozenset({"Card", "Header", "Layout", "Container", "Wrapper"})


def deprecated_replacement(name: str, import_path: str = "", extra: dict[str, str] = None) -> str | None:
    """Replacement for a deprecated component, or None if not deprecated."""
    if extra and name in extra:
        return extra[name]
    table = DEPRECATED_COMPONENTS.get(import_path, {})
    return table.get(name)


def matches_made_up_pattern(name: str) -> bool:
    if name in _EXEMPT:
        return False
    return any(p.match(name) for p in MADE_UP_PATTERNS)


def raw_alternatives(name: str) -> list[str]:
    """Unfiltered replacement candidates for a known-bad name."""
    if name in ALTERNATIVES:
        return list(ALTERNATIVES[name])
    for suffix in ("Story", "Example", "Demo"):
        if name.endswith(suffix) and len(name) > len(suffix):
            return [name[: -len(suffix)]]
    for prefix in ("Custom", "Styled"):
        if name.startswith(prefix) and len(name) > len(prefix):
            return [name[len(prefix):]]
    for suffix, hints in _SUFFIX_HINTS:
        if name.endswith(suffix):
            return list(hints)
    return []
