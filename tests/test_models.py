"""Tests for data models."""
from pathlib import Path

import pytest

from plm.models.component import Component, ComponentKind, ComponentRef, Scope
from plm.models.operation import AffectedTargets, OperationResult, TargetId
from plm.models.origin import (
    GitHubOrigin,
    MarketplaceOrigin,
    PluginOrigin,
    to_display_source,
    to_internal_source,
)
from plm.models.placement import LocationKind, PlacementLocation
from plm.models.sync import SyncAction, SyncItem, SyncOptions, SyncResult


class TestComponentKind:
    """Test ComponentKind enum."""

    def test_values_and_plurals(self):
        """Test stable identifiers and plural forms."""
        assert ComponentKind("skill") == ComponentKind.SKILL
        assert ComponentKind.AGENT.plural == "agents"
        assert ComponentKind.INSTRUCTION.plural == "instructions"
        assert ComponentKind.HOOK.display_name == "Hook"

    def test_all_in_declaration_order(self):
        """Test all() keeps declaration order."""
        assert [kind.value for kind in ComponentKind.all()] == [
            "skill", "agent", "command", "instruction", "hook"
        ]

    def test_component_ref(self):
        component = Component(ComponentKind.AGENT, "review", Path("/c/review.agent.md"))
        assert component.ref == ComponentRef(ComponentKind.AGENT, "review")


class TestPluginOrigin:
    """Test PluginOrigin encoding."""

    def test_cached_plugin_without_marketplace_uses_github(self):
        """Test plugins without a marketplace live under 'github'."""
        origin = PluginOrigin.from_cached_plugin(None, "demo")

        assert origin == MarketplaceOrigin("github", "demo")
        assert origin.encode() == "github/demo"

    def test_cached_plugin_with_marketplace(self):
        origin = PluginOrigin.from_cached_plugin("official", "demo")
        assert origin.segments() == ("official", "demo")

    def test_github_origin_encoding(self):
        """Test GitHub origins use the double-hyphen separator."""
        origin = GitHubOrigin(owner="octo", repo="tools")

        assert origin.marketplace_dir == "github"
        assert origin.plugin_dir == "octo--tools"
        assert str(origin) == "github/octo--tools"

    @pytest.mark.parametrize("origin", [
        MarketplaceOrigin("official", "demo"),
        GitHubOrigin("octo", "tools"),
        GitHubOrigin("octo", "my--repo"),
    ])
    def test_encode_decode_round_trip(self, origin):
        """Test decode(encode(origin)) == origin."""
        assert PluginOrigin.decode(origin.encode()) == origin

    @pytest.mark.parametrize("encoded", ["", "demo", "/demo", "official/", "a/b/c"])
    def test_decode_rejects_malformed(self, encoded):
        with pytest.raises(ValueError):
            PluginOrigin.decode(encoded)

    def test_github_marketplace_without_separator(self):
        """Test 'github/demo' stays a marketplace-style origin."""
        assert PluginOrigin.decode("github/demo") == MarketplaceOrigin("github", "demo")

    def test_base_origin_is_abstract(self):
        """Test PluginOrigin cannot be instantiated without its path segments."""
        with pytest.raises(TypeError):
            PluginOrigin()


class TestSourceConversion:
    """Test display/internal source conversion."""

    def test_to_display_source(self):
        assert to_display_source("github:owner/repo") == "owner/repo"
        assert to_display_source("owner/repo") == "owner/repo"

    def test_to_internal_source_is_idempotent(self):
        assert to_internal_source("owner/repo") == "github:owner/repo"
        assert to_internal_source("github:owner/repo") == "github:owner/repo"

    def test_round_trip_on_prefixed_input(self):
        source = "github:owner/repo"
        assert to_internal_source(to_display_source(source)) == source


class TestPlacementLocation:
    def test_constructors(self):
        assert PlacementLocation.dir(Path("/a")).is_dir
        location = PlacementLocation.file(Path("/a.md"))
        assert location.kind == LocationKind.FILE
        assert not location.is_dir


class TestAffectedTargets:
    """Test result aggregation."""

    def test_success_without_errors(self):
        # Given: two successful targets
        affected = AffectedTargets()
        affected.record_success(TargetId("codex"), 2)
        affected.record_success(TargetId("copilot"), 1)

        # When: converted into a result
        result = affected.into_result()

        # Then: success with both effects
        assert result.success is True
        assert result.error is None
        assert affected.target_names == ["codex", "copilot"]
        assert affected.total_components == 3

    def test_zero_count_success_not_recorded(self):
        """Test groups that did nothing leave no effect."""
        affected = AffectedTargets()
        affected.record_success(TargetId("codex"), 0)

        assert affected.effects == []
        assert affected.into_result().success is True

    def test_errors_are_joined(self):
        """Test the aggregated message lists each failing target."""
        affected = AffectedTargets()
        affected.record_error(TargetId("codex"), "disk full")
        affected.record_error(TargetId("copilot"), "denied")

        result = affected.into_result()

        assert result.success is False
        assert result.error == "codex: disk full; copilot: denied"

    def test_failure_constructor(self):
        result = OperationResult.failure("Plugin not found")
        assert result.success is False
        assert result.error == "Plugin not found"
        assert result.affected_targets.effects == []


class TestSyncModels:
    """Test sync models."""

    def test_default_options(self):
        """Test default sync kinds exclude hooks and both scopes are used."""
        options = SyncOptions()
        assert ComponentKind.HOOK not in options.effective_kinds()
        assert options.effective_scopes() == [Scope.PERSONAL, Scope.PROJECT]

    def test_result_record_buckets(self):
        result = SyncResult()
        for action in SyncAction:
            result.record(SyncItem(ComponentKind.SKILL, "s", Scope.PROJECT, action))

        assert len(result.created) == 1
        assert len(result.updated) == 1
        assert len(result.deleted) == 1
        assert len(result.skipped) == 1
        assert len(result.unsupported) == 1
        assert result.is_success
        assert result.total == 5

    def test_display_name(self):
        item = SyncItem(
            ComponentKind.SKILL, "s", Scope.PROJECT, SyncAction.CREATE,
            origin=MarketplaceOrigin("github", "demo"),
        )
        assert item.display_name == "github/demo/s"
        assert SyncItem(
            ComponentKind.INSTRUCTION, "AGENTS.md", Scope.PROJECT, SyncAction.CREATE
        ).display_name == "AGENTS.md"
