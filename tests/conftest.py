"""Pytest configuration and shared fixtures."""
import json
from pathlib import Path
from typing import Dict, Optional

import pytest

from plm.core.fs import MemoryFileSystem
from plm.core.targets import get_target

PROJECT_ROOT = Path("/proj")
HOME = Path("/home/tester")


def write_plugin(
    cache_dir: Path,
    name: str,
    marketplace: str = "github",
    manifest: Optional[Dict] = None,
    files: Optional[Dict[str, str]] = None,
) -> Path:
    """Create a cached plugin on disk and return its directory."""
    plugin_dir = cache_dir / marketplace / name
    manifest_path = plugin_dir / ".claude-plugin" / "plugin.json"
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(
        json.dumps(manifest if manifest is not None else {"name": name, "version": "1.0.0"})
    )
    for relative, content in (files or {}).items():
        path = plugin_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return plugin_dir


@pytest.fixture
def demo_files() -> Dict[str, str]:
    """Return the component files of a plugin with one of every kind."""
    return {
        "skills/my-skill/SKILL.md": "---\nname: my-skill\n---\n# My Skill\n",
        "skills/my-skill/scripts/run.sh": "echo run\n",
        "agents/review.agent.md": "# Reviewer\n",
        "commands/fix.prompt.md": "Fix the bug\n",
        "instructions.md": "Always write tests\n",
        "hooks/pre-commit.sh": "exit 0\n",
    }


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def demo_plugin(cache_dir, demo_files) -> Path:
    """Return a cached plugin 'demo' with no marketplace."""
    return write_plugin(cache_dir, "demo", files=demo_files)


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def home() -> Path:
    return HOME


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def codex(memory_fs):
    return get_target("codex", HOME, memory_fs)


@pytest.fixture
def copilot(memory_fs):
    return get_target("copilot", HOME, memory_fs)


@pytest.fixture
def make_plugin(cache_dir):
    """Return a factory writing cached plugins under cache_dir."""
    def _make(name, marketplace="github", manifest=None, files=None) -> Path:
        return write_plugin(cache_dir, name, marketplace, manifest, files)
    return _make
