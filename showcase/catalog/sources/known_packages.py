"""Curated component tables for popular design systems.

Used when a package cannot be introspected (not installed, no node runtime,
or the package refuses to load outside a bundler).

Usage:
    from showcase.catalog.sources.known_packages import KNOWN_PACKAGES

    entries = KNOWN_PACKAGES["antd"]()
"""

from typing import NamedTuple


class KnownComponent(NamedTuple):
    name: str
    category: str
    description: str
    props: tuple[str, ...] = ()


def _c(name: str, category: str, description: str, *props: str) -> KnownComponent:
    return KnownComponent(name, category, description, tuple(props))


def antd_components() -> list[KnownComponent]:
    """Ant Design 5: layout grid, data display, forms, feedback, navigation."""
    return [
        _c("Layout", "layout", "Main layout wrapper"),
        _c("Row", "layout", "Grid row for layouts", "gutter", "align", "justify"),
        _c("Col", "layout", "Grid column for layouts", "span", "offset", "xs", "md", "lg"),
        _c("Space", "layout", "Spacing component", "direction", "size", "align"),
        _c("Flex", "layout", "Flexbox layout", "vertical", "gap", "justify", "align"),
        _c("Divider", "layout", "Divider line", "orientation", "dashed"),
        _c("Table", "content", "Data table", "dataSource", "columns", "pagination", "loading"),
        _c("Card", "content", "Card container", "title", "extra", "loading", "bordered"),
        _c("Statistic", "content", "Statistical display", "title", "value", "prefix", "suffix"),
        _c("List", "content", "List display", "dataSource", "renderItem", "loading"),
        _c("Badge", "content", "Badge for status", "count", "dot", "status"),
        _c("Tag", "content", "Tag label", "color", "closable", "icon"),
        _c("Avatar", "content", "User avatar", "src", "size", "shape", "icon"),
        _c("Typography", "content", "Typography namespace (Title, Text, Paragraph)"),
        _c("Progress", "feedback", "Progress bar", "percent", "status", "type"),
        _c("Form", "form", "Form container", "layout", "onFinish", "initialValues"),
        _c("Input", "form", "Text input", "placeholder", "value", "onChange", "size"),
        _c("Select", "form", "Select dropdown", "options", "value", "onChange", "placeholder"),
        _c("Button", "form", "Button", "type", "size", "loading", "icon", "onClick"),
        _c("Switch", "form", "Toggle switch", "checked", "onChange", "size"),
        _c("Checkbox", "form", "Checkbox", "checked", "onChange", "disabled"),
        _c("DatePicker", "form", "Date picker", "value", "onChange", "format"),
        _c("Alert", "feedback", "Alert message", "message", "type", "showIcon", "closable"),
        _c("Modal", "feedback", "Modal dialog", "title", "open", "onOk", "onCancel"),
        _c("Tooltip", "feedback", "Tooltip", "title", "placement"),
        _c("Dropdown", "feedback", "Dropdown menu", "menu", "placement", "trigger"),
        _c("Menu", "navigation", "Navigation menu", "items", "mode", "selectedKeys"),
        _c("Tabs", "navigation", "Tabbed navigation", "items", "activeKey", "onChange"),
        _c("Breadcrumb", "navigation", "Breadcrumb navigation", "items"),
        _c("Pagination", "navigation", "Pagination", "current", "total", "pageSize", "onChange"),
    ]


def mui_components() -> list[KnownComponent]:
    """Material UI 5/6 core components."""
    return [
        _c("Box", "layout", "Basic layout box", "sx", "component"),
        _c("Container", "layout", "Responsive container", "maxWidth", "fixed"),
        _c("Grid", "layout", "Grid layout", "container", "item", "xs", "sm", "md", "lg", "xl", "spacing"),
        _c("Stack", "layout", "Stack layout", "direction", "spacing", "divider"),
        _c("Card", "content", "Card surface", "variant", "raised"),
        _c("CardContent", "content", "Card content area"),
        _c("CardActions", "content", "Card action area", "disableSpacing"),
        _c("Paper", "content", "Paper surface", "elevation", "variant"),
        _c("Typography", "content", "Text typography", "variant", "component", "gutterBottom"),
        _c("Table", "content", "Data table", "size", "stickyHeader"),
        _c("Chip", "content", "Chip component", "label", "color", "variant", "onDelete"),
        _c("Avatar", "content", "User avatar", "src", "alt", "variant"),
        _c("Button", "form", "Button", "variant", "color", "size", "startIcon", "endIcon"),
        _c("TextField", "form", "Text input", "label", "variant", "value", "onChange"),
        _c("Select", "form", "Select dropdown", "value", "onChange", "label"),
        _c("Switch", "form", "Toggle switch", "checked", "onChange"),
        _c("Checkbox", "form", "Checkbox", "checked", "onChange"),
        _c("Alert", "feedback", "Alert message", "severity", "variant", "onClose"),
        _c("Dialog", "feedback", "Modal dialog", "open", "onClose", "fullWidth"),
        _c("Tooltip", "feedback", "Tooltip", "title", "placement", "arrow"),
        _c("Tabs", "navigation", "Tabbed navigation", "value", "onChange"),
        _c("Breadcrumbs", "navigation", "Breadcrumb navigation", "separator"),
    ]


def chakra_components() -> list[KnownComponent]:
    """Chakra UI v2 core components."""
    return [
        _c("Box", "layout", "Basic layout box"),
        _c("Flex", "layout", "Flexbox layout", "direction", "align", "justify", "gap"),
        _c("Grid", "layout", "CSS Grid layout", "templateColumns", "gap"),
        _c("SimpleGrid", "layout", "Simple grid layout", "columns", "spacing"),
        _c("Stack", "layout", "Stack layout", "direction", "spacing"),
        _c("HStack", "layout", "Horizontal stack", "spacing"),
        _c("VStack", "layout", "Vertical stack", "spacing"),
        _c("Card", "content", "Card container", "variant", "size"),
        _c("Text", "content", "Text component", "fontSize", "color"),
        _c("Heading", "content", "Heading text", "as", "size"),
        _c("Badge", "content", "Badge component", "colorScheme", "variant"),
        _c("Button", "form", "Button", "colorScheme", "size", "variant"),
        _c("Input", "form", "Text input", "placeholder", "size", "variant"),
        _c("Select", "form", "Select dropdown", "placeholder"),
        _c("Alert", "feedback", "Alert message", "status", "variant"),
        _c("Modal", "feedback", "Modal dialog", "isOpen", "onClose"),
    ]


def mantine_components() -> list[KnownComponent]:
    """Mantine 7 core components."""
    return [
        _c("Box", "layout", "Basic layout box"),
        _c("Container", "layout", "Centered container", "size"),
        _c("Group", "layout", "Horizontal group", "gap", "justify"),
        _c("Stack", "layout", "Vertical stack", "gap", "align"),
        _c("Grid", "layout", "Grid layout", "columns", "gutter"),
        _c("SimpleGrid", "layout", "Simple grid layout", "cols", "spacing"),
        _c("Card", "content", "Card container", "shadow", "padding", "radius", "withBorder"),
        _c("Text", "content", "Text component", "size", "c", "fw"),
        _c("Title", "content", "Heading text", "order"),
        _c("Badge", "content", "Badge component", "color", "variant"),
        _c("Button", "form", "Button", "variant", "color", "size", "loading"),
        _c("TextInput", "form", "Text input", "label", "placeholder", "value", "onChange"),
        _c("Select", "form", "Select dropdown", "data", "label", "value", "onChange"),
        _c("Alert", "feedback", "Alert message", "title", "color", "icon"),
        _c("Modal", "feedback", "Modal dialog", "opened", "onClose", "title"),
        _c("Tabs", "navigation", "Tabbed navigation", "value", "onChange"),
    ]


def polaris_components() -> list[KnownComponent]:
    """Shopify Polaris 12+ (layout primitives replaced Stack/Heading)."""
    return [
        _c("Page", "layout", "Page frame", "title", "primaryAction", "backAction"),
        _c("Layout", "layout", "Page layout sections", "sectioned"),
        _c("Box", "layout", "Layout primitive", "padding", "background", "borderRadius"),
        _c("BlockStack", "layout", "Vertical stack", "gap", "align", "inlineAlign"),
        _c("InlineStack", "layout", "Horizontal stack", "gap", "align", "blockAlign", "wrap"),
        _c("InlineGrid", "layout", "Responsive grid", "columns", "gap"),
        _c("Divider", "layout", "Divider line", "borderColor"),
        _c("Card", "content", "Card surface", "padding", "roundedAbove", "background"),
        _c("LegacyCard", "content", "Pre-v12 card", "title", "sectioned"),
        _c("Text", "content", "Typography", "as", "variant", "tone", "fontWeight"),
        _c("Badge", "content", "Status badge", "tone", "progress"),
        _c("Thumbnail", "content", "Image thumbnail", "source", "alt", "size"),
        _c("DataTable", "content", "Data table", "columnContentTypes", "headings", "rows"),
        _c("Button", "form", "Button", "variant", "tone", "size", "onClick", "url"),
        _c("TextField", "form", "Text input", "label", "value", "onChange", "autoComplete"),
        _c("Select", "form", "Select dropdown", "label", "options", "value", "onChange"),
        _c("Checkbox", "form", "Checkbox", "label", "checked", "onChange"),
        _c("Banner", "feedback", "Inline banner", "title", "tone", "onDismiss"),
        _c("Modal", "feedback", "Modal dialog", "open", "onClose", "title"),
        _c("Tooltip", "feedback", "Tooltip", "content"),
        _c("Tabs", "navigation", "Tabbed navigation", "tabs", "selected", "onSelect"),
        _c("Pagination", "navigation", "Pagination", "hasNext", "hasPrevious", "onNext", "onPrevious"),
    ]


# ── Export all known packages ──────────────────────────────────────────────────

KNOWN_PACKAGES = {
    "antd":             antd_components,
    "ant-design":       antd_components,
    "@mui/material":    mui_components,
    "@chakra-ui/react": chakra_components,
    "@mantine/core":    mantine_components,
    "@shopify/polaris": polaris_components,
}

__all__ = [
    "KnownComponent", "antd_components", "mui_components", "chakra_components",
    "mantine_components", "polaris_components", "KNOWN_PACKAGES",
]
