"""Tolerant lexer and artifact parser."""

from showcase.types import Dialect, Severity
from showcase.validation.lexer import (
    IDENT,
    JSX_CLOSE,
    JSX_OPEN,
    REGEX,
    TEMPLATE,
    tokenize,
)
from showcase.validation.parser import (
    check_brackets,
    collect_bindings,
    collect_exports,
    find_title,
    is_component_tag,
    parse_artifact,
    parse_imports,
    split_svelte,
)


def _codes(diags):
    return [d.code for d in diags]


def _kinds(tokens, kind):
    return [t.value for t in tokens if t.kind == kind]


# ─────────────────────────────────────────────────────────────────────────────
# Lexer
# ─────────────────────────────────────────────────────────────────────────────

class TestLexerJsx:

    def test_generic_type_arguments_are_not_jsx(self):
        result = tokenize("const meta: Meta<typeof Button> = {};")
        assert _kinds(result.tokens, JSX_OPEN) == []
        assert result.diagnostics == []

    def test_fragment(self):
        result = tokenize("const x = <><Card /></>;")
        assert _kinds(result.tokens, JSX_OPEN) == ["", "Card"]
        assert _kinds(result.tokens, JSX_CLOSE) == [""]
        assert result.diagnostics == []

    def test_nested_expression_containers(self):
        text = "const a = <Card>{items.map((i) => <Text key={i}>{i}</Text>)}</Card>;"
        result = tokenize(text)
        assert _kinds(result.tokens, JSX_OPEN) == ["Card", "Text"]
        assert _kinds(result.tokens, JSX_CLOSE) == ["Text", "Card"]
        assert result.diagnostics == []

    def test_orphan_closing_tag(self):
        result = tokenize("const a = 1;\n</div>\n")
        [diag] = result.diagnostics
        assert diag.code == "orphan-closing-tag"
        assert diag.line == 2
        assert diag.severity == Severity.ERROR

    def test_unclosed_child_reported_at_its_line(self):
        text = "const a = (\n  <Card>\n    <Text>hi\n  </Card>\n);"
        result = tokenize(text)
        [diag] = result.diagnostics
        assert diag.code == "unclosed-jsx"
        assert diag.line == 3
        assert "'Text'" in diag.message

    def test_mismatched_closing_tag(self):
        result = tokenize("const a = <Card></Text>;")
        assert _codes(result.diagnostics) == ["mismatched-jsx", "unclosed-jsx"]

    def test_jsx_disabled(self):
        result = tokenize("const a = <Card />;", jsx=False)
        assert _kinds(result.tokens, JSX_OPEN) == []


class TestLexerLiterals:

    def test_unterminated_string(self):
        result = tokenize("const a = 'abc\nconst b = 1;")
        assert _codes(result.diagnostics) == ["unterminated-string"]
        assert result.diagnostics[0].line == 1

    def test_template_with_substitution(self):
        result = tokenize("const s = `a ${b} c`;")
        assert _kinds(result.tokens, TEMPLATE) == ["a ", " c"]
        assert "b" in _kinds(result.tokens, IDENT)
        assert result.diagnostics == []

    def test_unterminated_template(self):
        assert _codes(tokenize("const s = `abc").diagnostics) == ["unterminated-template"]

    def test_regex_literal(self):
        result = tokenize("const r = /a\\/b/g;")
        assert _kinds(result.tokens, REGEX) == ["/a\\/b/g"]

    def test_comments_hide_markup(self):
        result = tokenize("// <Card>\n/* </div> */\nconst a = 1;")
        assert _kinds(result.tokens, JSX_OPEN) == []
        assert result.diagnostics == []

    def test_unterminated_comment(self):
        assert _codes(tokenize("/* abc").diagnostics) == ["unterminated-comment"]

    def test_line_offset(self):
        assert tokenize("a", line_offset=4).tokens[0].line == 5


# ─────────────────────────────────────────────────────────────────────────────
# Bracket nesting
# ─────────────────────────────────────────────────────────────────────────────

class TestCheckBrackets:

    def test_missing_square_bracket(self):
        diags = check_brackets(tokenize("foo(1, [2, 3);").tokens)
        assert _codes(diags) == ["unbalanced-bracket"]
        assert "'['" in diags[0].message

    def test_unclosed_paren(self):
        diags = check_brackets(tokenize("foo(1;").tokens)
        assert _codes(diags) == ["unbalanced-bracket"]

    def test_surplus_brace_left_to_heuristic(self):
        assert check_brackets(tokenize("a }").tokens) == []

    def test_balanced(self):
        assert check_brackets(tokenize("f({ a: [1, (2)] });").tokens) == []


# ─────────────────────────────────────────────────────────────────────────────
# Imports, bindings, exports
# ─────────────────────────────────────────────────────────────────────────────

IMPORTS = (
    "import React from 'react';\n"
    "import type { Meta } from '@storybook/react';\n"
    "import { Card, type CardProps, Text as T } from 'antd';\n"
    "import * as Icons from '@ant-design/icons';\n"
    "import 'antd/dist/reset.css';\n"
    "import Default, { Button } from 'kit';\n"
)


class TestParseImports:

    def _parse(self, text):
        return parse_imports(tokenize(text).tokens, text)

    def test_all_forms(self):
        imports, diags = self._parse(IMPORTS)
        assert diags == []
        assert [d.specifier for d in imports] == [
            "react", "@storybook/react", "antd", "@ant-design/icons", "antd/dist/reset.css", "kit",
        ]
        react, types, antd, icons, css, kit = imports
        assert react.default == "React"
        assert types.type_only and types.named == []
        assert antd.named == [("Card", "Card"), ("Text", "T")]
        assert antd.local_names == ["Card", "T"]
        assert icons.namespace == "Icons"
        assert css.local_names == []
        assert kit.local_names == ["Default", "Button"]

    def test_offsets_cover_statement(self):
        imports, _ = self._parse(IMPORTS)
        first = imports[0]
        assert IMPORTS[first.start:first.end] == "import React from 'react';"
        assert imports[2].line == 3

    def test_dynamic_import_ignored(self):
        imports, diags = self._parse("const m = import('x');")
        assert imports == [] and diags == []

    def test_malformed(self):
        imports, diags = self._parse("import { Card from 'antd';\n")
        assert imports == []
        assert _codes(diags) == ["malformed-import"]


class TestBindingsAndExports:

    def test_bindings(self):
        text = "const { a, b = 2 } = props; function Helper() {} class Box {} let [x, y] = pair;"
        assert collect_bindings(tokenize(text).tokens) == {"a", "b", "Helper", "Box", "x", "y"}

    def test_exports(self):
        text = "export default meta;\nexport const Primary = {};\nexport { Secondary, Other as default };"
        has_default, named = collect_exports(tokenize(text).tokens)
        assert has_default
        assert named == ["Primary", "Secondary"]

    def test_component_tags(self):
        assert is_component_tag("Card")
        assert is_component_tag("Card.Section")
        assert not is_component_tag("div")
        assert not is_component_tag("Foo-Bar")


class TestFindTitle:

    def test_title_on_own_line(self):
        assert find_title("const meta = {\n  title: 'Generated/Card',\n};") == ("Generated/Card", 2)

    def test_inline_title(self):
        assert find_title('export default { title: "A/B", component: X };') == ("A/B", 1)

    def test_unescaped_apostrophe_on_own_line(self):
        assert find_title("  title: 'Women's Shoes',\n")[0] == "Women's Shoes"

    def test_no_title(self):
        assert find_title("export default {};") == (None, None)


# ─────────────────────────────────────────────────────────────────────────────
# parse_artifact
# ─────────────────────────────────────────────────────────────────────────────

class TestParseArtifact:

    def test_react_story(self, valid_story):
        parsed = parse_artifact(valid_story, Dialect.REACT)
        assert parsed.diagnostics == []
        assert [u.name for u in parsed.tag_usages] == ["Card", "Text"]
        assert parsed.imported_names == {"React", "Card", "Text"}
        assert parsed.has_default_export
        assert parsed.named_exports == ["Default"]
        assert parsed.title == "Generated/Product Card"
        assert "meta" in parsed.local_bindings
        assert len(parsed.imports_from("antd")) == 1

    def test_member_tag_root(self):
        parsed = parse_artifact("const a = <Card.Section />;", Dialect.REACT)
        [usage] = parsed.tag_usages
        assert (usage.name, usage.root) == ("Card.Section", "Card")

    def test_vue_template_strings(self):
        text = (
            "export const Default = {\n"
            "  render: () => ({ components: { Card }, template: '<Card title=\"x\"><Badge /></Card>' }),\n"
            "};\n"
        )
        parsed = parse_artifact(text, Dialect.VUE)
        assert [u.name for u in parsed.tag_usages] == ["Card", "Badge"]
        assert parsed.tag_usages[0].line == 2

    def test_svelte_split(self):
        text = (
            "<script lang=\"ts\">\n"
            "  import Card from './Card.svelte';\n"
            "</script>\n"
            "\n"
            "<Card title=\"x\" />\n"
        )
        scripts, markup = split_svelte(text)
        assert scripts[0].attributes == 'lang="ts"'
        assert markup.count("\n") == text.count("\n")
        assert "import" not in markup

        parsed = parse_artifact(text, Dialect.SVELTE)
        assert parsed.imports[0].default == "Card"
        assert parsed.imports[0].line == 2
        assert [(u.name, u.line) for u in parsed.tag_usages] == [("Card", 5)]
        assert text[parsed.imports[0].start:parsed.imports[0].end] == "import Card from './Card.svelte';"
