"""Read side of the plugin cache."""
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from plm.core.errors import ManifestError, PluginNotFoundError
from plm.core.fs import FileSystem, LocalFileSystem
from plm.core.manifest import PluginManifest, resolve_manifest_path
from plm.models.origin import GITHUB_MARKETPLACE

logger = logging.getLogger(__name__)


def default_cache_dir() -> Path:
    return Path.home() / ".plm" / "cache" / "plugins"


class PluginCache:
    """
    Plugins downloaded into ``<cache_dir>/<marketplace>/<plugin>``.

    Plugins installed straight from GitHub have no marketplace and live
    under ``github``.
    """

    def __init__(self, cache_dir: Optional[Path] = None, fs: Optional[FileSystem] = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        self.fs = fs or LocalFileSystem()

    def plugin_path(self, name: str, marketplace: Optional[str] = None) -> Path:
        return self.cache_dir / (marketplace or GITHUB_MARKETPLACE) / name

    def is_cached(self, name: str, marketplace: Optional[str] = None) -> bool:
        return self.fs.is_dir(self.plugin_path(name, marketplace))

    def list(self) -> List[Tuple[str, str]]:
        """
        List cached plugins.

        Returns:
            Sorted ``(marketplace, plugin)`` pairs; hidden directories are skipped
        """
        if not self.fs.is_dir(self.cache_dir):
            return []

        plugins = []
        for marketplace in self.fs.read_dir(self.cache_dir):
            if marketplace.name.startswith(".") or not self.fs.is_dir(marketplace):
                continue
            for plugin in self.fs.read_dir(marketplace):
                if plugin.name.startswith(".") or not self.fs.is_dir(plugin):
                    continue
                plugins.append((marketplace.name, plugin.name))
        return plugins

    def load_manifest(self, name: str, marketplace: Optional[str] = None) -> PluginManifest:
        """
        Load the manifest of a cached plugin.

        Raises:
            PluginNotFoundError: If the plugin is not cached
            ManifestError: If plugin.json is missing or invalid
        """
        plugin_dir = self.plugin_path(name, marketplace)
        if not self.fs.is_dir(plugin_dir):
            raise PluginNotFoundError(
                f"Plugin '{name}' not found in cache: {plugin_dir}"
            )

        manifest_path = resolve_manifest_path(plugin_dir, self.fs)
        if manifest_path is None:
            raise ManifestError(f"No plugin.json found in {plugin_dir}")
        return PluginManifest.load(manifest_path, self.fs)

    def remove(self, name: str, marketplace: Optional[str] = None) -> None:
        """
        Delete a cached plugin and, if it was the last one, its marketplace dir.

        Raises:
            PluginNotFoundError: If the plugin is not cached
        """
        plugin_dir = self.plugin_path(name, marketplace)
        if not self.fs.is_dir(plugin_dir):
            raise PluginNotFoundError(f"Plugin '{name}' not found in cache: {plugin_dir}")
        self.fs.remove_dir_all(plugin_dir)
        self.fs.remove_empty_dir(plugin_dir.parent)
        logger.info("Removed %s from cache", plugin_dir)


def prune_empty_dirs(fs: FileSystem, start: Path, stop: Path) -> None:
    """
    Remove ``start`` and then its ancestors while they are empty.

    Stops before reaching ``stop``, which is never removed.
    """
    current = Path(start)
    stop = Path(stop)
    while current != stop and stop in current.parents:
        if not fs.remove_empty_dir(current):
            break
        logger.debug("Pruned empty directory %s", current)
        current = current.parent
