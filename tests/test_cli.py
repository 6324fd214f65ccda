"""CLI commands via typer's CliRunner."""

import pytest
from typer.testing import CliRunner

from showcase.cli.main import app
from showcase.config import settings

runner = CliRunner()

PROJECT_YAML = """\
import_path: antd
dialect: react
overrides:
  - name: Card
    props: [title]
  - name: Text
"""


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "showcase.yaml"
    path.write_text(PROJECT_YAML)
    return path


@pytest.fixture(autouse=True)
def runtime_off(monkeypatch):
    monkeypatch.setattr(settings, "runtime_validation", False)
    monkeypatch.setattr(settings, "proxy_enabled", False)


class TestApp:

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "showcase v" in result.output

    def test_config(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "prefix: SHOWCASE_" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# catalog
# ─────────────────────────────────────────────────────────────────────────────

class TestCatalogCommand:

    def test_table(self, project):
        result = runner.invoke(app, ["catalog", "--config", str(project)])
        assert result.exit_code == 0
        assert "Card" in result.output
        assert "Primary import path: antd" in result.output

    def test_json(self, project):
        result = runner.invoke(app, ["catalog", "--config", str(project), "--json"])
        assert result.exit_code == 0
        assert '"Card"' in result.output
        assert '"user_override"' in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["catalog", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# validate
# ─────────────────────────────────────────────────────────────────────────────

class TestValidateCommand:

    def test_valid(self, project, tmp_path, valid_story):
        story = tmp_path / "Card.stories.tsx"
        story.write_text(valid_story)
        result = runner.invoke(app, ["validate", str(story), "--config", str(project)])
        assert result.exit_code == 0
        assert "Valid" in result.output

    def test_errors_exit_1(self, project, tmp_path, valid_story):
        story = tmp_path / "Card.stories.tsx"
        story.write_text(valid_story.replace("{ Card, Text }", "{ Card, Text, Banner }"))
        result = runner.invoke(app, ["validate", str(story), "--config", str(project)])
        assert result.exit_code == 1
        assert "1 error(s)" in result.output

    def test_write_repaired(self, project, tmp_path, dangling_story):
        story = tmp_path / "Card.stories.tsx"
        story.write_text(dangling_story)
        result = runner.invoke(app, ["validate", str(story), "--config", str(project), "--write"])
        assert result.exit_code == 0
        assert "drop_dangling_tail" in result.output
        assert "</div>" not in story.read_text()

    def test_no_repair(self, project, tmp_path, dangling_story):
        story = tmp_path / "Card.stories.tsx"
        story.write_text(dangling_story)
        result = runner.invoke(app, ["validate", str(story), "--config", str(project), "--no-repair"])
        assert result.exit_code == 1
        assert story.read_text() == dangling_story

    def test_missing_file(self, project, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.tsx"), "--config", str(project)])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_unknown_dialect(self, project, tmp_path, valid_story):
        story = tmp_path / "Card.stories.tsx"
        story.write_text(valid_story)
        result = runner.invoke(app, ["validate", str(story), "--config", str(project), "--dialect", "elm"])
        assert result.exit_code == 1
        assert "Unknown dialect" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# verify / check
# ─────────────────────────────────────────────────────────────────────────────

class TestVerifyCommand:

    def test_requires_title_or_file(self):
        result = runner.invoke(app, ["verify"])
        assert result.exit_code == 1
        assert "Pass a TITLE or --file" in result.output

    def test_disabled_is_skipped(self):
        result = runner.invoke(app, ["verify", "Product Card"])
        assert result.exit_code == 0
        assert "skipped" in result.output


class TestCheckCommand:

    def test_accepted_story_written(self, project, tmp_path, valid_story):
        response = tmp_path / "response.md"
        response.write_text(f"Here it is:\n```tsx\n{valid_story}```\n")
        out = tmp_path / "stories" / "Card.stories.tsx"
        result = runner.invoke(app, ["check", str(response), "--out", str(out), "--config", str(project)])
        assert result.exit_code == 0
        assert "Story accepted" in result.output
        assert out.read_text() == valid_story

    def test_rejected_story_not_written(self, project, tmp_path, valid_story):
        response = tmp_path / "response.md"
        response.write_text(valid_story.replace("{ Card, Text }", "{ Card, Text, Banner }"))
        out = tmp_path / "Card.stories.tsx"
        result = runner.invoke(app, ["check", str(response), "--out", str(out), "--config", str(project)])
        assert result.exit_code == 1
        assert "Rejected at validation" in result.output
        assert not out.exists()

    def test_no_code(self, project, tmp_path):
        response = tmp_path / "response.md"
        response.write_text("I'm not able to write that story.")
        out = tmp_path / "Card.stories.tsx"
        result = runner.invoke(app, ["check", str(response), "--out", str(out), "--config", str(project)])
        assert result.exit_code == 1
        assert "Rejected at extraction" in result.output
