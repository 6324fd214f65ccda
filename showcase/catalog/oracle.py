"""Name/import oracle built from a finished catalog.

Usage:
    oracle = NameOracle(catalog)
    oracle.is_known("Button")          # True
    oracle.import_path_for("Button")   # "antd"
    oracle.suggest("VerticalStack")    # "Stack"
    oracle.is_known_bad("CardStory")   # True
"""

from typing import Iterable, Optional, Union

from showcase.catalog.blocklist import (
    INTERNAL_TOOL_NAMES,
    deprecated_replacement,
    matches_made_up_pattern,
    raw_alternatives,
)
from showcase.catalog.builder import ComponentCatalog
from showcase.catalog.categorize import split_pascal
from showcase.types import ComponentRecord

# Generic word -> concrete components, in preference order.
GENERIC_MAPPINGS: dict[str, list[str]] = {
    "stack": ["Stack", "BlockStack", "InlineStack", "VStack", "HStack", "LegacyStack"],
    "vstack": ["VStack", "BlockStack", "Stack"],
    "hstack": ["HStack", "InlineStack", "Group", "Stack"],
    "layout": ["Layout", "Box"],
    "container": ["Container", "Box", "Layout"],
    "grid": ["Grid", "SimpleGrid", "InlineGrid"],
    "row": ["Row", "InlineStack", "HStack", "Flex"],
    "column": ["Col", "BlockStack", "VStack", "Stack"],
    "text": ["Text", "Typography"],
    "heading": ["Heading", "Title", "Text", "Typography"],
    "title": ["Title", "Heading", "Text", "Typography"],
    "button": ["Button"],
    "card": ["Card", "LegacyCard", "Paper"],
    "modal": ["Modal", "Dialog"],
    "dialog": ["Dialog", "Modal"],
    "input": ["Input", "TextField", "TextInput"],
    "textfield": ["TextField", "Input", "TextInput"],
    "alert": ["Alert", "Banner"],
    "banner": ["Banner", "Alert"],
    "divider": ["Divider"],
}

_MIN_SUBSTRING = 3


class NameOracle:
    """Answers existence, import-path and near-miss questions about component names."""

    def __init__(
        self,
        catalog: Union[ComponentCatalog, Iterable[ComponentRecord]],
        primary_import_path: Optional[str] = None,
        deprecated: Optional[dict[str, str]] = None,
    ) -> None:
        if not isinstance(catalog, ComponentCatalog):
            catalog = ComponentCatalog(catalog, primary_import_path=primary_import_path)
        self.catalog = catalog
        self.primary_import_path = primary_import_path or catalog.primary_import_path
        self._imports = catalog.import_table()
        self._sorted_names = sorted(self._imports)
        self._deprecated = deprecated or {}

    # ── Existence ──────────────────────────────────────────────────────────

    def is_known(self, name: str) -> bool:
        return name in self._imports

    def import_path_for(self, name: str) -> Optional[str]:
        return self._imports.get(name)

    def available(self) -> list[str]:
        return list(self._sorted_names)

    # ── Suggestions ────────────────────────────────────────────────────────

    def suggest(self, name: str) -> Optional[str]:
        """Closest real component for ``name``, or None.

        Substring containment (either direction, case-insensitive) first, then
        the generic mapping table. Deterministic: catalog names are scanned in
        sorted order and mapping candidates in table order.
        """
        if not name:
            return None
        lowered = name.lower()
        for candidate in self._sorted_names:
            if candidate == name:
                continue
            c = candidate.lower()
            if len(c) >= _MIN_SUBSTRING and c in lowered:
                return candidate
            if len(lowered) >= _MIN_SUBSTRING and lowered in c:
                return candidate

        words = split_pascal(name)
        keys = [lowered] + ([words[-1].lower()] if words else [])
        for key in keys:
            for candidate in GENERIC_MAPPINGS.get(key, []):
                if candidate != name and self.is_known(candidate):
                    return candidate
        return None

    # ── Known-bad names ────────────────────────────────────────────────────

    def deprecated_replacement(self, name: str) -> Optional[str]:
        return deprecated_replacement(name, self.primary_import_path or "", self._deprecated)

    def is_known_bad(self, name: str) -> bool:
        """Names rejected even when the import statement itself looks valid."""
        if self.deprecated_replacement(name):
            return True
        if name in INTERNAL_TOOL_NAMES:
            return True
        return not self.is_known(name) and matches_made_up_pattern(name)

    def bad_name_reason(self, name: str) -> str:
        replacement = self.deprecated_replacement(name)
        if replacement:
            return f"{name} is deprecated; use {replacement} instead"
        if name in INTERNAL_TOOL_NAMES:
            return f"{name} is an internal tool component, not part of the library"
        if name.endswith(("Story", "Example", "Demo")):
            return "This appears to be a story export name, not a library component"
        return "This appears to be a made-up component name"

    def alternatives_for(self, name: str) -> list[str]:
        """Real components to use instead of a known-bad name."""
        candidates = []
        replacement = self.deprecated_replacement(name)
        if replacement:
            candidates.append(replacement)
        candidates.extend(raw_alternatives(name))
        known = [c for c in dict.fromkeys(candidates) if self.is_known(c) and c != name]
        if known:
            return known
        fallback = self.suggest(name)
        if fallback and fallback != name:
            return [fallback]
        # deprecated replacements are worth naming even if discovery missed them
        return [replacement] if replacement else []
