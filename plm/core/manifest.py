"""Parser for a cached plugin's plugin.json."""
from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from plm.core.errors import ManifestError
from plm.core.fs import FileSystem, LocalFileSystem

MANIFEST_CANDIDATES = (
    Path(".claude-plugin") / "plugin.json",
    Path("plugin.json"),
)

# Manifest keys that override where a component kind lives inside the plugin.
COMPONENT_PATH_KEYS = ("skills", "agents", "commands", "instructions", "hooks")


@dataclass
class PluginManifest:
    """plugin.json representation."""

    name: str
    version: str
    description: Optional[str] = None
    author: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    skills: Optional[str] = None
    agents: Optional[str] = None
    commands: Optional[str] = None
    instructions: Optional[str] = None
    hooks: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate manifest data after initialization."""
        for key in ("name", "version"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ManifestError(f"plugin.json: '{key}' must be a non-empty string")

        for key in COMPONENT_PATH_KEYS:
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                raise ManifestError(f"plugin.json: '{key}' must be a path string")

    def component_path(self, key: str) -> Optional[str]:
        """Path override for a component directory, relative to the plugin root."""
        return getattr(self, key) if key in COMPONENT_PATH_KEYS else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginManifest":
        """
        Build a manifest from decoded JSON.

        ``author`` may be a string or an object with a ``name`` key.
        Unknown keys are ignored.

        Raises:
            ManifestError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ManifestError("plugin.json must contain a JSON object")

        author = data.get("author")
        if isinstance(author, dict):
            author = author.get("name")

        keywords = data.get("keywords") or []
        if not isinstance(keywords, list):
            raise ManifestError("plugin.json: 'keywords' must be a list")

        return cls(
            name=data.get("name"),
            version=data.get("version"),
            description=data.get("description"),
            author=author,
            keywords=[str(keyword) for keyword in keywords],
            **{key: data.get(key) for key in COMPONENT_PATH_KEYS},
        )

    @classmethod
    def load(cls, path: Path, fs: Optional[FileSystem] = None) -> "PluginManifest":
        """
        Load and parse a plugin.json file.

        Args:
            path: Path to plugin.json
            fs: Filesystem to read from

        Returns:
            Parsed PluginManifest

        Raises:
            ManifestError: If the file is missing, not JSON or invalid
        """
        fs = fs or LocalFileSystem()
        try:
            text = fs.read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f"Cannot read manifest {path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)


def resolve_manifest_path(plugin_dir: Path, fs: Optional[FileSystem] = None) -> Optional[Path]:
    """Locate plugin.json, preferring ``.claude-plugin/plugin.json``."""
    fs = fs or LocalFileSystem()
    for candidate in MANIFEST_CANDIDATES:
        path = plugin_dir / candidate
        if fs.is_file(path):
            return path
    return None
