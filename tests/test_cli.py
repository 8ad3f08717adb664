"""Tests for CLI commands."""
import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from plm import __version__
from plm.cli.main import cli


@pytest.fixture
def config_file(tmp_path, cache_dir):
    path = tmp_path / "config.yaml"
    path.write_text(f"cache_dir: {cache_dir}\ntargets: [codex, copilot]\n")
    return path


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


def _invoke(config_file, project, *args, **kwargs):
    # Wide console so rich tables don't wrap component names.
    runner = CliRunner(env={"COLUMNS": "200"})
    return runner.invoke(
        cli, ["--config", str(config_file), "--project", str(project), *args], **kwargs
    )


class TestVersionCommand:
    """Test 'plm version' command."""

    def test_version_command(self):
        """Test that version command outputs version number."""
        # Given: CLI runner
        runner = CliRunner()

        # When: we run 'plm version'
        result = runner.invoke(cli, ['version'])

        # Then: should succeed and show version
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_option(self):
        result = CliRunner().invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestTargetsCommand:
    """Test 'plm targets' command."""

    def test_lists_all_targets(self, config_file, project):
        result = _invoke(config_file, project, "targets")

        assert result.exit_code == 0
        for name in ("codex", "copilot", "antigravity", "gemini"):
            assert name in result.output


class TestTargetCommand:
    """Test 'plm target list/add/remove'."""

    def test_list_enabled(self, config_file, project):
        result = _invoke(config_file, project, "target", "list")

        assert result.exit_code == 0
        assert "• codex (Codex)" in result.output
        assert "copilot" in result.output
        assert "gemini" not in result.output

    def test_add_writes_config(self, config_file, project, cache_dir):
        # When: adding gemini
        result = _invoke(config_file, project, "target", "add", "Gemini")

        # Then: the config file lists it and keeps the cache dir
        assert result.exit_code == 0
        assert "Added target gemini" in result.output
        data = yaml.safe_load(config_file.read_text())
        assert data == {"cache_dir": str(cache_dir), "targets": ["codex", "copilot", "gemini"]}

    def test_add_already_enabled(self, config_file, project):
        before = config_file.read_text()

        result = _invoke(config_file, project, "target", "add", "codex")

        assert result.exit_code == 0
        assert "Target codex is already enabled" in result.output
        assert config_file.read_text() == before

    def test_remove_then_list(self, config_file, project):
        result = _invoke(config_file, project, "target", "remove", "copilot")
        assert result.exit_code == 0
        assert "Removed target copilot" in result.output

        listed = _invoke(config_file, project, "target", "list")
        assert "copilot" not in listed.output
        assert "codex" in listed.output

    def test_remove_not_enabled(self, config_file, project):
        result = _invoke(config_file, project, "target", "remove", "antigravity")

        assert result.exit_code == 0
        assert "Target antigravity is not enabled" in result.output

    def test_unknown_target(self, config_file, project):
        result = _invoke(config_file, project, "target", "add", "cursor")

        assert result.exit_code != 0
        assert "Unknown target" in result.output
        assert "cursor" not in config_file.read_text()

    def test_creates_missing_config(self, tmp_path, project):
        config_file = tmp_path / "fresh" / "config.yaml"

        result = _invoke(config_file, project, "target", "add", "antigravity")

        assert result.exit_code == 0
        assert yaml.safe_load(config_file.read_text())["targets"] == ["codex", "copilot", "antigravity"]


class TestInfoCommand:
    """Test 'plm info'."""

    def test_table_output(self, config_file, project, demo_plugin):
        # Given: demo enabled for codex
        _invoke(config_file, project, "enable", "demo", "--target", "codex")

        # When: showing its details
        result = _invoke(config_file, project, "info", "demo")

        # Then: components, source and deployment are listed
        assert result.exit_code == 0
        assert "Plugin: demo" in result.output
        assert "1.0.0" in result.output
        assert "GitHub" in result.output
        assert "my-skill" in result.output
        assert "pre-commit" in result.output
        assert "codex" in result.output

    def test_json_output(self, config_file, project, make_plugin):
        make_plugin("tools", marketplace="official", manifest={
            "name": "tools", "version": "0.3.0", "author": "Dev",
        }, files={"agents/helper.agent.md": "h"})

        result = _invoke(config_file, project, "info", "tools", "-m", "official", "--format", "json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "tools"
        assert data["author"] == "Dev"
        assert data["source"] == "Marketplace (official)"
        assert data["components"]["agents"] == ["helper"]
        assert data["components"]["skills"] == []
        assert data["enabled"] is False
        assert data["enabled_targets"] == []

    def test_unknown_plugin(self, config_file, project):
        result = _invoke(config_file, project, "info", "missing")

        assert result.exit_code == 1
        assert "not found" in result.output


class TestListCommand:
    """Test 'plm list' command."""

    def test_no_plugins(self, config_file, project):
        result = _invoke(config_file, project, "list")

        assert result.exit_code == 0
        assert "No plugins installed" in result.output

    def test_text_output(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "list")

        assert result.exit_code == 0
        assert "demo@github 1.0.0 (disabled)" in result.output
        assert "my-skill" in result.output

    def test_json_output(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "list", "--format", "json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["name"] == "demo"
        assert data[0]["agents"] == ["review"]
        assert data[0]["enabled"] is False

    def test_bad_config(self, tmp_path, project):
        config = tmp_path / "bad.yaml"
        config.write_text("targets: [cursor]\n")

        result = _invoke(config, project, "list")

        assert result.exit_code != 0
        assert "Failed to load config" in result.output


class TestEnableDisableCommands:
    """Test 'plm enable' / 'plm disable'."""

    def test_enable_and_disable(self, config_file, project, demo_plugin):
        # When: enabling
        result = _invoke(config_file, project, "enable", "demo")

        # Then: success and files placed
        assert result.exit_code == 0
        assert "codex: 3 component(s)" in result.output
        assert "Enabled demo" in result.output
        assert (project / ".codex/agents/github/demo/review.agent.md").exists()

        # When: disabling
        result = _invoke(config_file, project, "disable", "demo")

        # Then: files removed
        assert result.exit_code == 0
        assert not (project / ".codex/agents/github/demo/review.agent.md").exists()

    def test_enable_missing_plugin(self, config_file, project):
        result = _invoke(config_file, project, "enable", "missing")

        assert result.exit_code == 1
        assert "Error: " in result.output
        assert "not found" in result.output

    def test_enable_with_target(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "enable", "demo", "--target", "copilot")

        assert result.exit_code == 0
        assert not (project / ".codex").exists()
        assert (project / ".github/agents/github/demo/review.agent.md").exists()


class TestUninstallCommand:
    """Test 'plm uninstall'."""

    def test_confirmation_declined(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "uninstall", "demo", input="n\n")

        assert result.exit_code != 0
        assert demo_plugin.exists()

    def test_confirmation_accepted(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "uninstall", "demo", input="y\n")

        assert result.exit_code == 0
        assert not demo_plugin.exists()

    def test_force_skips_prompt(self, config_file, project, demo_plugin):
        result = _invoke(config_file, project, "uninstall", "demo", "--force")

        assert result.exit_code == 0
        assert "Uninstall demo?" not in result.output
        assert not demo_plugin.exists()


class TestPlacedCommand:
    """Test 'plm placed'."""

    def test_nothing_placed(self, config_file, project):
        result = _invoke(config_file, project, "placed", "--target", "codex", "--scope", "project")

        assert result.exit_code == 0
        assert "Nothing placed for codex" in result.output

    def test_lists_placed(self, config_file, project, demo_plugin):
        _invoke(config_file, project, "enable", "demo")

        result = _invoke(config_file, project, "placed", "--target", "codex", "--scope", "project")

        assert result.exit_code == 0
        assert "github/demo/my-skill" in result.output
        assert "AGENTS.md" in result.output

    def test_unknown_target(self, config_file, project):
        result = _invoke(config_file, project, "placed", "--target", "cursor")

        assert result.exit_code != 0
        assert "Unknown target" in result.output


class TestSyncCommand:
    """Test 'plm sync'."""

    def test_sync_creates(self, config_file, project, demo_plugin):
        # Given: demo enabled for codex only
        _invoke(config_file, project, "enable", "demo", "--target", "codex")

        # When: syncing the project scope to antigravity
        result = _invoke(
            config_file, project,
            "sync", "--from", "codex", "--to", "antigravity", "--scope", "project",
        )

        # Then: the skill is copied
        assert result.exit_code == 0
        assert "Created: 1" in result.output
        assert (project / ".agent/skills/github/demo/my-skill/SKILL.md").exists()

    def test_dry_run(self, config_file, project, demo_plugin):
        _invoke(config_file, project, "enable", "demo", "--target", "codex")

        result = _invoke(
            config_file, project,
            "sync", "--from", "codex", "--to", "copilot",
            "--scope", "project", "--type", "skill", "--dry-run",
        )

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert not (project / ".github").exists()

    def test_nothing_to_sync(self, config_file, project):
        result = _invoke(
            config_file, project, "sync", "--from", "codex", "--to", "copilot", "--scope", "project"
        )

        assert result.exit_code == 0
        assert "Nothing to sync" in result.output

    def test_same_target(self, config_file, project):
        result = _invoke(config_file, project, "sync", "--from", "codex", "--to", "codex")

        assert result.exit_code == 2
        assert "onto itself" in result.output

    def test_unknown_target(self, config_file, project):
        result = _invoke(config_file, project, "sync", "--from", "codex", "--to", "cursor")

        assert result.exit_code == 2
        assert "Unknown target" in result.output
