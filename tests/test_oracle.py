"""Name oracle: existence, import paths, suggestions, known-bad names."""

import pytest

from conftest import make_record
from showcase.catalog import NameOracle, categorize, is_component_name
from showcase.catalog.blocklist import deprecated_replacement, matches_made_up_pattern, raw_alternatives
from showcase.catalog.categorize import split_pascal
from showcase.types import ComponentCategory


def _oracle(*names, import_path="antd", **kwargs):
    return NameOracle([make_record(n, import_path=import_path) for n in names], **kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# Existence
# ─────────────────────────────────────────────────────────────────────────────

class TestExistence:

    def test_known_and_import_path(self, oracle):
        assert oracle.is_known("Card")
        assert not oracle.is_known("Banner")
        assert oracle.import_path_for("Card") == "antd"
        assert oracle.import_path_for("Banner") is None

    def test_available_is_sorted(self, oracle):
        assert oracle.available() == ["Badge", "Button", "Card", "Text"]

    def test_primary_import_path_from_catalog(self):
        assert _oracle("Card", "Text").primary_import_path == "antd"


# ─────────────────────────────────────────────────────────────────────────────
# Suggestions
# ─────────────────────────────────────────────────────────────────────────────

class TestSuggest:

    def test_catalog_name_inside_requested_name(self):
        assert _oracle("BlockStack", "Button", "Stack").suggest("VerticalStack") == "Stack"

    def test_requested_name_inside_catalog_name(self):
        assert _oracle("DatePicker").suggest("Picker") == "DatePicker"

    def test_case_insensitive(self):
        assert _oracle("Card").suggest("PRODUCTCARD") == "Card"

    def test_short_candidates_ignored(self):
        assert _oracle("Tr", "Button").suggest("Trigger") is None

    def test_generic_mapping(self):
        assert _oracle("BlockStack", "InlineStack").suggest("VStack") == "BlockStack"

    def test_mapping_on_last_word(self):
        assert _oracle("Typography").suggest("FancyText") == "Typography"

    def test_never_suggests_itself(self):
        assert _oracle("Card").suggest("Card") is None

    def test_no_match(self, oracle):
        assert oracle.suggest("Zebra") is None
        assert oracle.suggest("") is None


# ─────────────────────────────────────────────────────────────────────────────
# Known-bad names
# ─────────────────────────────────────────────────────────────────────────────

class TestKnownBad:

    def test_made_up_name_not_in_catalog(self, oracle):
        assert oracle.is_known_bad("CustomCard")
        assert oracle.alternatives_for("CustomCard") == ["Card"]
        assert oracle.bad_name_reason("CustomCard") == "This appears to be a made-up component name"

    def test_made_up_pattern_in_catalog_is_fine(self):
        assert not _oracle("PageHeader").is_known_bad("PageHeader")

    def test_bare_suffix_words_are_fine(self, oracle):
        assert not oracle.is_known_bad("Card")

    def test_story_export_name(self, oracle):
        assert oracle.is_known_bad("ProductCardStory")
        assert "story export name" in oracle.bad_name_reason("ProductCardStory")
        assert oracle.alternatives_for("ProductCardStory") == ["Card"]

    def test_internal_tool_names_bad_even_in_catalog(self):
        oracle = _oracle("StoryCard", "Card")
        assert oracle.is_known_bad("StoryCard")
        assert "internal tool" in oracle.bad_name_reason("StoryCard")
        assert oracle.alternatives_for("StoryCard") == ["Card"]

    def test_deprecated_for_primary_import_path(self):
        oracle = _oracle("Stack", "BlockStack", import_path="@shopify/polaris")
        assert oracle.is_known_bad("Stack")
        assert oracle.bad_name_reason("Stack") == "Stack is deprecated; use BlockStack instead"
        assert oracle.alternatives_for("Stack") == ["BlockStack"]

    def test_deprecation_is_per_library(self):
        assert not _oracle("Stack").is_known_bad("Stack")

    def test_configured_deprecations(self):
        oracle = _oracle("Card", deprecated={"OldCard": "Card"})
        assert oracle.deprecated_replacement("OldCard") == "Card"
        assert oracle.alternatives_for("OldCard") == ["Card"]

    def test_deprecated_replacement_named_even_if_undiscovered(self):
        oracle = _oracle("Button", import_path="@shopify/polaris")
        assert oracle.alternatives_for("TextContainer") == ["BlockStack"]


class TestBlocklistHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("ProductCardStory", True),
        ("ButtonExample", True),
        ("CustomButton", True),
        ("StyledBox", True),
        ("PageLayout", True),
        ("Card", False),
        ("Layout", False),
        ("Button", False),
    ])
    def test_made_up_patterns(self, name, expected):
        assert matches_made_up_pattern(name) is expected

    def test_raw_alternatives(self):
        assert raw_alternatives("LayoutWrapper") == ["Box", "Stack", "Layout", "Container"]
        assert raw_alternatives("ButtonDemo") == ["Button"]
        assert raw_alternatives("StyledInput") == ["Input"]
        assert raw_alternatives("PageHeader") == ["Header", "Text", "Heading"]
        assert raw_alternatives("Button") == []

    def test_deprecated_lookup(self):
        assert deprecated_replacement("Hidden", "@mui/material") == "Box"
        assert deprecated_replacement("Hidden", "antd") is None


# ─────────────────────────────────────────────────────────────────────────────
# Name shape helpers
# ─────────────────────────────────────────────────────────────────────────────

class TestNameShapes:

    @pytest.mark.parametrize("name,category", [
        ("ButtonGroup", ComponentCategory.FORM),
        ("ListItem", ComponentCategory.CONTENT),
        ("Grid", ComponentCategory.LAYOUT),
        ("Tabs", ComponentCategory.NAVIGATION),
        ("Tooltip", ComponentCategory.FEEDBACK),
        ("Zebra", ComponentCategory.OTHER),
    ])
    def test_categorize(self, name, category):
        assert categorize(name) == category

    @pytest.mark.parametrize("name,expected", [
        ("Button", True),
        ("X", True),
        ("BUTTON", False),
        ("button", False),
        ("ThemeProvider", False),
        ("ButtonProps", False),
        ("StyledButton", False),
    ])
    def test_is_component_name(self, name, expected):
        assert is_component_name(name) is expected

    def test_split_pascal(self):
        assert split_pascal("InlineStackItem") == ["Inline", "Stack", "Item"]
        assert split_pascal("HTMLElement") == ["HTML", "Element"]
