"""Name-based category hints and component-name shape checks."""

import re

from showcase.types import ComponentCategory

# Order matters: "ButtonGroup" is form before content, "ListItem" is content.
_CATEGORY_PATTERNS: list[tuple[ComponentCategory, re.Pattern]] = [
    (ComponentCategory.LAYOUT, re.compile(
        r"^(layout|grid|row|col|column|container|box|flex|stack|section|wrapper|panel|divider|spacer|center)")),
    (ComponentCategory.FORM, re.compile(
        r"^(form|input|button|select|checkbox|radio|switch|toggle|field|textarea|slider|datepicker|combobox)")),
    (ComponentCategory.NAVIGATION, re.compile(
        r"^(nav|menu|tab|breadcrumb|pagination|link|anchor|stepper|steps|drawer)")),
    (ComponentCategory.FEEDBACK, re.compile(
        r"^(alert|modal|dialog|toast|notification|message|tooltip|popover|progress|spinner|skeleton|banner)")),
    (ComponentCategory.CONTENT, re.compile(
        r"^(card|list|table|badge|tag|chip|avatar|image|text|heading|paragraph|typography|icon|accordion)")),
]

_PASCAL = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_ALL_CAPS = re.compile(r"^[A-Z0-9_]+$")
_NON_COMPONENT_SHAPES = re.compile(r"^Styled|Provider$|Context$|Types?$|Props$")


def categorize(name: str) -> ComponentCategory:
    """Guess a category from a component name. A hint, not truth."""
    lowered = name.lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.match(lowered):
            return category
    return ComponentCategory.OTHER


def is_component_name(name: str) -> bool:
    """PascalCase, not ALL_CAPS, not a provider/context/type helper."""
    if not name or not _PASCAL.match(name):
        return False
    if len(name) > 1 and _ALL_CAPS.match(name):
        return False
    return not _NON_COMPONENT_SHAPES.search(name)


def split_pascal(name: str) -> list[str]:
    """'InlineStackItem' -> ['Inline', 'Stack', 'Item']."""
    return re.findall(r"[A-Z]+(?=[A-Z][a-z]|\d|$)|[A-Z]?[a-z]+|\d+", name)
