"""Enumerate the components shipped in a cached plugin."""
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from plm.core.fs import FileSystem, LocalFileSystem
from plm.core.manifest import PluginManifest
from plm.core.targets.base import SKILL_MANIFEST
from plm.models.component import Component, ComponentKind

logger = logging.getLogger(__name__)

AGENT_SUFFIXES = (".agent.md", ".md")
COMMAND_SUFFIXES = (".prompt.md", ".md")
INSTRUCTION_SUFFIXES = (".md",)
DEFAULT_INSTRUCTIONS_FILE = "instructions.md"


def _strip_suffix(filename: str, suffixes: Tuple[str, ...]) -> Optional[str]:
    """Return ``filename`` without the first matching suffix, or None."""
    for suffix in suffixes:
        if filename.endswith(suffix) and len(filename) > len(suffix):
            return filename[:-len(suffix)]
    return None


def _is_valid_name(name: str) -> bool:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class ComponentScanner:
    """Scanner for plugin cache directories."""

    def __init__(self, fs: Optional[FileSystem] = None):
        self.fs = fs or LocalFileSystem()

    def scan(
        self,
        plugin_dir: Path,
        manifest: Optional[PluginManifest] = None
    ) -> List[Component]:
        """
        Scan a plugin directory for components.

        Args:
            plugin_dir: Root of the cached plugin
            manifest: Parsed plugin.json, whose path fields override the
                default ``skills``, ``agents``, ``commands``, ``hooks`` and
                ``instructions`` locations

        Returns:
            Components sorted by kind then name
        """
        plugin_dir = Path(plugin_dir)

        def location(key: str) -> Path:
            override = manifest.component_path(key) if manifest else None
            return plugin_dir / (override or key)

        components: List[Component] = []
        components.extend(self._scan_skills(location("skills")))
        components.extend(
            self._scan_files(location("agents"), ComponentKind.AGENT, AGENT_SUFFIXES)
        )
        components.extend(
            self._scan_files(location("commands"), ComponentKind.COMMAND, COMMAND_SUFFIXES)
        )
        components.extend(self._scan_instructions(plugin_dir, manifest))
        components.extend(self._scan_hooks(location("hooks")))

        components.sort(key=lambda component: (component.kind.order, component.name))
        logger.debug("Scanned %d components in %s", len(components), plugin_dir)
        return components

    def _scan_skills(self, skills_dir: Path) -> List[Component]:
        if not self.fs.is_dir(skills_dir):
            return []
        skills = []
        for child in self.fs.read_dir(skills_dir):
            if not _is_valid_name(child.name):
                continue
            if self.fs.is_dir(child) and self.fs.is_file(child / SKILL_MANIFEST):
                skills.append(Component(ComponentKind.SKILL, child.name, child))
        return skills

    def _scan_files(
        self,
        path: Path,
        kind: ComponentKind,
        suffixes: Tuple[str, ...]
    ) -> List[Component]:
        # A single file stands in for a directory holding just that file.
        if self.fs.is_file(path):
            candidates = [path]
        elif self.fs.is_dir(path):
            candidates = [child for child in self.fs.read_dir(path) if self.fs.is_file(child)]
        else:
            return []

        components = []
        for candidate in candidates:
            if not _is_valid_name(candidate.name):
                continue
            name = _strip_suffix(candidate.name, suffixes)
            if name is not None:
                components.append(Component(kind, name, candidate))
        return components

    def _scan_instructions(
        self,
        plugin_dir: Path,
        manifest: Optional[PluginManifest]
    ) -> List[Component]:
        override = manifest.component_path("instructions") if manifest else None
        if override:
            return self._scan_files(
                plugin_dir / override, ComponentKind.INSTRUCTION, INSTRUCTION_SUFFIXES
            )

        default_file = plugin_dir / DEFAULT_INSTRUCTIONS_FILE
        if self.fs.is_file(default_file):
            return self._scan_files(default_file, ComponentKind.INSTRUCTION, INSTRUCTION_SUFFIXES)
        return self._scan_files(
            plugin_dir / "instructions", ComponentKind.INSTRUCTION, INSTRUCTION_SUFFIXES
        )

    def _scan_hooks(self, hooks_dir: Path) -> List[Component]:
        if not self.fs.is_dir(hooks_dir):
            return []
        hooks = []
        for child in self.fs.read_dir(hooks_dir):
            if self.fs.is_file(child) and _is_valid_name(child.name):
                hooks.append(Component(ComponentKind.HOOK, child.stem or child.name, child))
        return hooks
