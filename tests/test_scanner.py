"""Tests for ComponentScanner."""
from plm.core.manifest import PluginManifest
from plm.core.scanner import ComponentScanner
from plm.models.component import ComponentKind


def _names(components, kind):
    return [c.name for c in components if c.kind == kind]


class TestComponentScanner:
    """Test scanning plugin directories."""

    def test_scan_all_kinds(self, demo_plugin):
        """Test every default location is scanned."""
        # When: scanning the demo plugin
        components = ComponentScanner().scan(demo_plugin)

        # Then: one component of each kind
        assert _names(components, ComponentKind.SKILL) == ["my-skill"]
        assert _names(components, ComponentKind.AGENT) == ["review"]
        assert _names(components, ComponentKind.COMMAND) == ["fix"]
        assert _names(components, ComponentKind.INSTRUCTION) == ["instructions"]
        assert _names(components, ComponentKind.HOOK) == ["pre-commit"]

    def test_result_sorted_by_kind_then_name(self, make_plugin):
        plugin = make_plugin("p", files={
            "agents/zeta.md": "z",
            "agents/alpha.agent.md": "a",
            "skills/b/SKILL.md": "b",
            "skills/a/SKILL.md": "a",
        })

        components = ComponentScanner().scan(plugin)

        assert [(c.kind.value, c.name) for c in components] == [
            ("skill", "a"), ("skill", "b"), ("agent", "alpha"), ("agent", "zeta"),
        ]

    def test_skill_without_manifest_skipped(self, make_plugin):
        """Test skill directories need SKILL.md."""
        plugin = make_plugin("p", files={
            "skills/good/SKILL.md": "g",
            "skills/bad/README.md": "b",
        })

        assert _names(ComponentScanner().scan(plugin), ComponentKind.SKILL) == ["good"]

    def test_non_markdown_files_ignored(self, make_plugin):
        plugin = make_plugin("p", files={
            "agents/review.agent.md": "r",
            "agents/notes.txt": "n",
            "commands/run.prompt.md": "r",
            "commands/script.sh": "s",
        })

        components = ComponentScanner().scan(plugin)

        assert _names(components, ComponentKind.AGENT) == ["review"]
        assert _names(components, ComponentKind.COMMAND) == ["run"]

    def test_single_agent_file(self, make_plugin):
        """Test an agents path that is a file is the only agent."""
        plugin = make_plugin(
            "p",
            files={"reviewer.agent.md": "r"},
        )
        manifest = PluginManifest(name="p", version="1.0.0", agents="reviewer.agent.md")

        components = ComponentScanner().scan(plugin, manifest)

        assert _names(components, ComponentKind.AGENT) == ["reviewer"]

    def test_manifest_overrides_directories(self, make_plugin):
        plugin = make_plugin("p", files={
            "custom-skills/s/SKILL.md": "s",
            "skills/ignored/SKILL.md": "i",
        })
        manifest = PluginManifest(name="p", version="1.0.0", skills="custom-skills")

        components = ComponentScanner().scan(plugin, manifest)

        assert _names(components, ComponentKind.SKILL) == ["s"]

    def test_instructions_directory(self, make_plugin):
        """Test instructions/ is used when instructions.md is absent."""
        plugin = make_plugin("p", files={
            "instructions/style.md": "s",
            "instructions/testing.md": "t",
        })

        components = ComponentScanner().scan(plugin)

        assert _names(components, ComponentKind.INSTRUCTION) == ["style", "testing"]

    def test_instructions_file_preferred(self, make_plugin):
        plugin = make_plugin("p", files={
            "instructions.md": "root",
            "instructions/style.md": "s",
        })

        components = ComponentScanner().scan(plugin)

        assert _names(components, ComponentKind.INSTRUCTION) == ["instructions"]

    def test_manifest_instructions_path(self, make_plugin):
        plugin = make_plugin("p", files={"docs/RULES.md": "r", "instructions.md": "ignored"})
        manifest = PluginManifest(name="p", version="1.0.0", instructions="docs/RULES.md")

        components = ComponentScanner().scan(plugin, manifest)

        assert _names(components, ComponentKind.INSTRUCTION) == ["RULES"]

    def test_empty_plugin(self, make_plugin):
        """Test missing directories yield nothing."""
        assert ComponentScanner().scan(make_plugin("empty")) == []

    def test_scan_memory_fs(self, memory_fs):
        memory_fs.write_bytes("/cache/p/agents/review.agent.md", b"r")

        components = ComponentScanner(memory_fs).scan("/cache/p")

        assert [(c.kind, c.name) for c in components] == [(ComponentKind.AGENT, "review")]
        assert str(components[0].path) == "/cache/p/agents/review.agent.md"
