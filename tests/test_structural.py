"""Structural heuristics, their repairs, and the bounded repair loop."""

import logging

from showcase.types import Dialect, Severity, ValidationDiagnostic
from showcase.validation.parser import parse_artifact
from showcase.validation.repair import (
    STRUCTURAL_REPAIRS,
    Repairer,
    is_improvement,
    repair_registry,
    run_repairs,
)
from showcase.validation.structural import (
    check_structure,
    close_dangling_constructs,
    close_unterminated_strings,
    collapse_duplicate_title_words,
    dangling_tail,
    drop_dangling_tail,
    drop_truncated_line,
    escape_title_quotes,
    find_duplicate_segment,
    rebalance_braces,
    truncation_reason,
)


def _parse(text):
    return parse_artifact(text, Dialect.REACT)


def _codes(diags):
    return [d.code for d in diags]


# ─────────────────────────────────────────────────────────────────────────────
# Detection
# ─────────────────────────────────────────────────────────────────────────────

class TestDetection:

    def test_clean_story_has_no_findings(self, valid_story):
        assert check_structure(_parse(valid_story)) == []

    def test_dangling_tail_lines(self):
        assert dangling_tail("a\n</div>\n}\n") == ([2], 3)
        assert dangling_tail("a\n}\n") is None
        assert dangling_tail("a\n</div>\n") is None

    def test_orphan_tail_is_truncation(self, dangling_story):
        codes = _codes(check_structure(_parse(dangling_story)))
        assert codes == ["truncation", "brace-imbalance"]

    def test_stops_inside_jsx_tag(self):
        parsed = _parse("export const A = {\n  render: () => <Card title=\"x\"\n")
        assert truncation_reason(parsed) == ("last line stops inside a JSX tag", 2)

    def test_stops_mid_expression(self):
        parsed = _parse("export const A = {\n  value: someIdentifier\n")
        assert truncation_reason(parsed) == ("last line stops mid-expression", 2)

    def test_unclosed_paren_on_last_line(self):
        parsed = _parse("export const A = {\n  render: () => render(\n")
        reason, line = truncation_reason(parsed)
        assert "parenthesis" in reason
        assert line == 2

    def test_unescaped_title_quote(self):
        parsed = _parse("const meta = {\n  title: 'Women's Shoes',\n};\n")
        diags = [d for d in check_structure(parsed) if d.code == "title-unescaped-quote"]
        assert len(diags) == 1
        assert diags[0].line == 2

    def test_duplicate_title_words(self):
        parsed = _parse("const meta = {\n  title: 'Generated/Product Card Product Card',\n};\n")
        assert _codes(check_structure(parsed)) == ["duplicate-title-words"]

    def test_find_duplicate_segment(self):
        assert find_duplicate_segment("Product Card Product Card") == (0, 2)
        assert find_duplicate_segment("Big Red Button Red Button") == (1, 2)
        assert find_duplicate_segment("a b a b") is None
        assert find_duplicate_segment("Card Card") is None
        assert find_duplicate_segment("Product Card") is None


# ─────────────────────────────────────────────────────────────────────────────
# Repairs
# ─────────────────────────────────────────────────────────────────────────────

class TestStructuralRepairs:

    def test_drop_dangling_tail_removes_surplus_brace(self, dangling_story):
        fixed = drop_dangling_tail(dangling_story, _parse(dangling_story))
        assert fixed.endswith("render: () => <Card>Hi</Card>,\n};\n")
        assert "</div>" not in fixed

    def test_close_dangling_constructs(self):
        text = "const a = (\n  <Card>\n    <Text>hi\n"
        fixed = close_dangling_constructs(text, _parse(text))
        assert fixed == "const a = (\n  <Card>\n    <Text>hi\n</Text>\n</Card>)\n"

    def test_close_dangling_constructs_noop_when_closed(self, valid_story):
        assert close_dangling_constructs(valid_story, _parse(valid_story)) == valid_story

    def test_drop_truncated_line(self):
        text = "const a = 1;\nconst b = foo(\n"
        assert drop_truncated_line(text, _parse(text)) == "const a = 1;\n"

    def test_close_unterminated_strings(self):
        text = "const a = {\n  label: 'Hello },\n  count: 1,\n};\n"
        fixed = close_unterminated_strings(text, _parse(text))
        assert fixed.split("\n")[1] == "  label: 'Hello' },"

    def test_close_unterminated_strings_noop_when_closed(self, valid_story):
        assert close_unterminated_strings(valid_story, _parse(valid_story)) == valid_story

    def test_rebalance_missing_braces(self):
        text = "const a = {\n  b: 1,\n"
        assert rebalance_braces(text, _parse(text)) == "const a = {\n  b: 1,\n}\n"

    def test_rebalance_surplus_braces(self):
        text = "const a = {};\n}\n}\n"
        assert rebalance_braces(text, _parse(text)) == "const a = {};\n"

    def test_rebalance_leaves_inner_surplus(self):
        text = "const a = {}};\nconst b = 1;\n"
        assert rebalance_braces(text, _parse(text)) == text

    def test_escape_title_quotes(self):
        text = "const meta = {\n  title: 'Women's Shoes',\n};\n"
        fixed = escape_title_quotes(text, _parse(text))
        assert fixed.split("\n")[1] == "  title: 'Women\\'s Shoes',"

    def test_collapse_duplicate_title_words(self):
        text = "const meta = {\n  title: 'Generated/Product Card Product Card',\n};\n"
        fixed = collapse_duplicate_title_words(text, _parse(text))
        assert "title: 'Generated/Product Card'," in fixed


# ─────────────────────────────────────────────────────────────────────────────
# Repair loop
# ─────────────────────────────────────────────────────────────────────────────

def _count_x(text):
    diags = [
        ValidationDiagnostic(severity=Severity.ERROR, message="too many x", code="too-many-x")
        for _ in range(text.count("x"))
    ]
    return parse_artifact("", Dialect.REACT), diags


def _drop_x(text, parsed):
    return text.replace("x", "", 1)


def _add_x(text, parsed):
    return text + "x"


def _boom(text, parsed):
    raise RuntimeError("repairer exploded")


class TestRunRepairs:

    def test_one_repair_per_code_per_pass(self):
        result = run_repairs("xxxx", _count_x, {"too-many-x": [Repairer("drop_x", _drop_x)]}, max_passes=2)
        assert result.text == "xx"
        assert result.applied == [("drop_x", "too-many-x")] * 2
        assert len(result.diagnostics) == 2

    def test_worse_rewrite_rejected(self):
        result = run_repairs("xx", _count_x, {"too-many-x": [Repairer("add_x", _add_x)]}, max_passes=3)
        assert result.text == "xx"
        assert result.applied == []

    def test_failing_repairer_skipped(self, caplog):
        registry = {"too-many-x": [Repairer("boom", _boom), Repairer("drop_x", _drop_x)]}
        with caplog.at_level(logging.ERROR, logger="showcase.validation.repair"):
            result = run_repairs("xxx", _count_x, registry, max_passes=1)
        assert result.text == "xx"
        assert result.applied == [("drop_x", "too-many-x")]
        assert "boom" in caplog.text

    def test_unregistered_codes_end_loop(self):
        result = run_repairs("xxx", _count_x, {}, max_passes=3)
        assert result.text == "xxx"
        assert result.applied == []

    def test_is_improvement(self):
        def d(code):
            return ValidationDiagnostic(severity=Severity.ERROR, message=code, code=code)

        warning = ValidationDiagnostic(severity=Severity.WARNING, message="w", code="a")
        assert is_improvement([d("a"), d("b")], [d("a")], "a")
        assert is_improvement([d("a"), d("b")], [d("a"), d("c")], "b")
        assert not is_improvement([d("a"), d("b")], [d("a"), d("c")], "a")
        assert is_improvement([d("a")], [warning], "a")

    def test_registry_per_dialect(self):
        react = repair_registry(Dialect.REACT, "antd")
        assert [r.name for r in react["deep-import-path"]] == ["consolidate_deep_imports"]
        assert [r.name for r in react["missing-react-import"]] == ["insert_react_import"]
        assert [r.name for r in react["unterminated-string"]] == ["close_unterminated_strings"]

        lit = repair_registry(Dialect.WEB_COMPONENTS, "antd")
        assert "deep-import-path" not in lit
        assert [r.name for r in lit["missing-lit-html"]] == ["insert_lit_html_import"]

        assert set(STRUCTURAL_REPAIRS) <= set(repair_registry(Dialect.SVELTE))
