"""Plugin-level operations over the cache and the enabled targets."""
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from plm.core.cache import PluginCache, prune_empty_dirs
from plm.core.config import PlmConfig
from plm.core.errors import PlmError
from plm.core.fs import FileSystem, LocalFileSystem
from plm.core.intent import ActionKind, PluginAction, PluginIntent
from plm.core.scanner import ComponentScanner
from plm.core.sync import SyncExecutor, SyncPlanner
from plm.core.targets import Target, get_target, parse_placement
from plm.models.component import Component, ComponentKind, Scope
from plm.models.operation import OperationResult
from plm.models.origin import GITHUB_MARKETPLACE, PluginOrigin
from plm.models.sync import SyncOptions, SyncResult

logger = logging.getLogger(__name__)


@dataclass
class PluginSummary:
    """A cached plugin as shown by ``plm list``."""

    name: str
    marketplace: str
    version: str
    description: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    agents: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)
    enabled: bool = False

    @classmethod
    def from_components(
        cls,
        name: str,
        marketplace: str,
        version: str,
        components: List[Component],
        **kwargs
    ) -> "PluginSummary":
        summary = cls(name=name, marketplace=marketplace, version=version, **kwargs)
        for component in components:
            getattr(summary, component.kind.plural).append(component.name)
        return summary

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "marketplace": self.marketplace,
            "version": self.version,
            "description": self.description,
            "skills": self.skills,
            "agents": self.agents,
            "commands": self.commands,
            "instructions": self.instructions,
            "hooks": self.hooks,
            "enabled": self.enabled,
        }


@dataclass
class PluginDetail:
    """One cached plugin as shown by ``plm info``."""

    name: str
    marketplace: str
    version: str
    cache_path: Path
    description: Optional[str] = None
    author: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    components: Dict[ComponentKind, List[str]] = field(default_factory=dict)
    enabled_targets: List[str] = field(default_factory=list)

    @property
    def source(self) -> str:
        if self.marketplace == GITHUB_MARKETPLACE:
            return "GitHub"
        return f"Marketplace ({self.marketplace})"

    @property
    def enabled(self) -> bool:
        return bool(self.enabled_targets)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "author": self.author,
            "keywords": self.keywords,
            "marketplace": self.marketplace,
            "source": self.source,
            "cache_path": str(self.cache_path),
            "components": {
                kind.plural: self.components.get(kind, []) for kind in ComponentKind.all()
            },
            "enabled": self.enabled,
            "enabled_targets": self.enabled_targets,
        }


class PluginManager:
    """Entry point for list, enable, disable, uninstall and sync."""

    def __init__(
        self,
        config: PlmConfig,
        project_root: Path,
        home: Optional[Path] = None,
        fs: Optional[FileSystem] = None
    ):
        self.config = config
        self.project_root = Path(project_root)
        self.home = Path(home) if home is not None else Path.home()
        self.fs = fs or LocalFileSystem()
        self.cache = PluginCache(config.cache_dir, self.fs)
        self.scanner = ComponentScanner(self.fs)

    def target(self, name: str) -> Target:
        """Build a target bound to this manager's home and filesystem."""
        return get_target(name, self.home, self.fs)

    def enabled_targets(self) -> List[Target]:
        return [self.target(name) for name in self.config.targets]

    def list_installed_plugins(self) -> List[PluginSummary]:
        """
        Summarize every cached plugin.

        A plugin is enabled when any enabled target has a project placement
        under its origin. Plugins with an unreadable manifest are skipped.
        """
        placed = self._placed_origins()
        summaries = []
        for marketplace, name in self.cache.list():
            try:
                manifest = self.cache.load_manifest(name, marketplace)
            except PlmError as e:
                logger.warning("Skipping %s/%s: %s", marketplace, name, e)
                continue
            components = self.scanner.scan(self.cache.plugin_path(name, marketplace), manifest)
            summaries.append(
                PluginSummary.from_components(
                    name=name,
                    marketplace=marketplace,
                    version=manifest.version,
                    components=components,
                    description=manifest.description,
                    enabled=(marketplace, name) in placed,
                )
            )
        return summaries

    def _placed_origins(self) -> Set[Tuple[str, str]]:
        origins = set()
        for target in self.enabled_targets():
            for kind in ComponentKind.all():
                for entry in target.list_placed(kind, Scope.PROJECT, self.project_root):
                    parsed = parse_placement(entry)
                    if parsed is not None:
                        origins.add(parsed)
        return origins

    def plugin_info(self, name: str, marketplace: Optional[str] = None) -> PluginDetail:
        """
        Describe one cached plugin.

        Args:
            name: Plugin name
            marketplace: Marketplace, None for GitHub plugins

        Returns:
            PluginDetail with manifest fields, components per kind and the
            enabled targets that have it placed in the project

        Raises:
            PluginNotFoundError: If the plugin isn't cached
            ManifestError: If its plugin.json is missing or invalid
        """
        manifest = self.cache.load_manifest(name, marketplace)
        plugin_dir = self.cache.plugin_path(name, marketplace)
        origin = PluginOrigin.from_cached_plugin(marketplace, name)

        components: Dict[ComponentKind, List[str]] = {kind: [] for kind in ComponentKind.all()}
        for component in self.scanner.scan(plugin_dir, manifest):
            components[component.kind].append(component.name)

        return PluginDetail(
            name=name,
            marketplace=origin.marketplace_dir,
            version=manifest.version,
            cache_path=plugin_dir,
            description=manifest.description,
            author=manifest.author,
            keywords=list(manifest.keywords),
            components=components,
            enabled_targets=[
                target.name for target in self.enabled_targets()
                if self._has_placements(target, origin)
            ],
        )

    def _has_placements(self, target: Target, origin: PluginOrigin) -> bool:
        for kind in ComponentKind.all():
            for entry in target.list_placed(kind, Scope.PROJECT, self.project_root):
                if parse_placement(entry) == origin.segments():
                    return True
        return False

    def enable_plugin(
        self,
        name: str,
        marketplace: Optional[str] = None,
        target: Optional[str] = None
    ) -> OperationResult:
        """Place a cached plugin's components for the enabled (or given) targets."""
        return self._apply(ActionKind.ENABLE, name, marketplace, target)

    def disable_plugin(
        self,
        name: str,
        marketplace: Optional[str] = None,
        target: Optional[str] = None
    ) -> OperationResult:
        """Remove a plugin's placed components, keeping it in the cache."""
        return self._apply(ActionKind.DISABLE, name, marketplace, target)

    def uninstall_plugin(
        self,
        name: str,
        marketplace: Optional[str] = None,
        force: bool = False
    ) -> OperationResult:
        """
        Disable a plugin everywhere and delete it from the cache.

        Args:
            name: Plugin name
            marketplace: Marketplace, None for GitHub plugins
            force: Delete the cache entry even if removing placements failed

        Returns:
            OperationResult of the removal
        """
        result = self._apply(ActionKind.UNINSTALL, name, marketplace, None)
        if not result.success and not force:
            return result

        try:
            self.cache.remove(name, marketplace)
        except (PlmError, OSError) as e:
            return OperationResult(
                success=False,
                error=f"Failed to remove {name} from cache: {e}",
                affected_targets=result.affected_targets,
            )
        return result

    def _apply(
        self,
        kind: ActionKind,
        name: str,
        marketplace: Optional[str],
        target: Optional[str]
    ) -> OperationResult:
        try:
            manifest = self.cache.load_manifest(name, marketplace)
            targets = self.enabled_targets()
            if target is not None:
                requested = self.target(target)
                target = requested.name
                if target not in [t.name for t in targets]:
                    targets.append(requested)
        except PlmError as e:
            return OperationResult.failure(str(e))

        action = PluginAction(kind, name, marketplace)
        components = self.scanner.scan(self.cache.plugin_path(name, marketplace), manifest)
        intent = PluginIntent(
            action=action,
            components=components,
            project_root=self.project_root,
            targets=targets,
            target_filter=target,
        )
        result = intent.apply(self.fs)
        if action.is_remove:
            self._prune(intent)
        return result

    def _prune(self, intent: PluginIntent) -> None:
        origin = intent.action.origin
        for _, operation in intent.expand():
            plugin_dir = operation.target.as_path().parent
            marketplace_dir = plugin_dir.parent
            if plugin_dir.name != origin.plugin_dir or marketplace_dir.name != origin.marketplace_dir:
                continue
            try:
                prune_empty_dirs(self.fs, plugin_dir, marketplace_dir.parent)
            except OSError as e:
                logger.debug("Could not prune %s: %s", plugin_dir, e)

    def sync(
        self,
        from_target: str,
        to_target: str,
        options: Optional[SyncOptions] = None
    ) -> SyncResult:
        """
        Copy components placed for one target into another target's layout.

        Raises:
            TargetNotFoundError: If either target name is unknown
            ValueError: If both names refer to the same target
        """
        options = options or SyncOptions()
        planner = SyncPlanner(
            self.target(from_target),
            self.target(to_target),
            self.project_root,
            self.fs,
        )
        plan = planner.plan(options)
        executor = SyncExecutor(self.fs, self.project_root, self.home)
        return executor.execute(plan, dry_run=options.dry_run)
