"""Cross-target sync: plan what to copy between two targets, then do it."""
import logging
from pathlib import Path
from typing import Iterator, Optional, Set, Tuple

from plm.core.cache import prune_empty_dirs
from plm.core.errors import PathEscapeError
from plm.core.fs import FileSystem, LocalFileSystem
from plm.core.scoped_path import ScopedPath
from plm.core.targets.base import Target
from plm.models.component import ComponentKind, ComponentRef, Scope
from plm.models.origin import NO_ORIGIN, PluginOrigin
from plm.models.placement import PlacementContext
from plm.models.sync import (
    UNCHANGED,
    SyncAction,
    SyncFailure,
    SyncItem,
    SyncOptions,
    SyncPlan,
    SyncResult,
)

logger = logging.getLogger(__name__)

# (origin, name) for components placed under an origin, (None, None) otherwise.
IdentityKey = Tuple[Optional[str], Optional[str]]


def parse_component_name(entry: str) -> Tuple[Optional[PluginOrigin], str]:
    """
    Split a ``list_placed`` entry into origin and component name.

    Args:
        entry: ``"marketplace/plugin/name"`` or a bare name such as ``"AGENTS.md"``

    Returns:
        ``(origin, name)``; origin is None for entries without one
    """
    parts = entry.split("/")
    if len(parts) >= 3 and parts[0] and parts[1]:
        return PluginOrigin.from_segments(parts[0], parts[1]), "/".join(parts[2:])
    return None, entry


def _identity(origin: Optional[PluginOrigin], name: str) -> IdentityKey:
    if origin is None:
        return None, None
    return origin.encode(), name


class SyncPlanner:
    """Compares what is placed for one target with another target's tree."""

    def __init__(
        self,
        source: Target,
        destination: Target,
        project_root: Path,
        fs: Optional[FileSystem] = None
    ):
        """
        Raises:
            ValueError: If source and destination are the same target
        """
        if source.name == destination.name:
            raise ValueError(f"Cannot sync target '{source.name}' onto itself")
        self.source = source
        self.destination = destination
        self.project_root = Path(project_root)
        self.fs = fs or LocalFileSystem()

    def plan(self, options: Optional[SyncOptions] = None) -> SyncPlan:
        """
        Build the sync plan.

        Args:
            options: Kind/scope filters and whether to plan deletions

        Returns:
            SyncPlan with items sorted by kind, scope, origin and name
        """
        options = options or SyncOptions()
        plan = SyncPlan(source=self.source.name, destination=self.destination.name)

        for kind in options.effective_kinds():
            for scope in options.effective_scopes():
                seen: Set[IdentityKey] = set()
                for entry in self.source.list_placed(kind, scope, self.project_root):
                    origin, name = parse_component_name(entry)
                    item = self._plan_item(kind, scope, origin, name)
                    if item is not None:
                        seen.add(_identity(origin, name))
                        plan.items.append(item)
                if options.delete:
                    plan.items.extend(self._plan_deletions(kind, scope, seen))

        plan.items.sort(key=SyncItem.sort_key)
        logger.debug(
            "Planned %d items from %s to %s", len(plan.items), plan.source, plan.destination
        )
        return plan

    def _context(
        self,
        kind: ComponentKind,
        scope: Scope,
        origin: Optional[PluginOrigin],
        name: str
    ) -> PlacementContext:
        return PlacementContext(
            component=ComponentRef(kind, name),
            origin=origin if origin is not None else NO_ORIGIN,
            scope=scope,
            project_root=self.project_root,
        )

    def _plan_item(
        self,
        kind: ComponentKind,
        scope: Scope,
        origin: Optional[PluginOrigin],
        name: str
    ) -> Optional[SyncItem]:
        ctx = self._context(kind, scope, origin, name)
        source_location = self.source.placement_location(ctx)
        if source_location is None:
            return None

        item = SyncItem(
            kind=kind,
            name=name,
            scope=scope,
            action=SyncAction.UNSUPPORTED,
            origin=origin,
            source_path=source_location.path,
        )
        destination_location = self.destination.placement_location(ctx)
        if destination_location is None:
            return item

        target_path = destination_location.path
        if not self.fs.exists(target_path):
            action, reason = SyncAction.CREATE, None
        elif self.fs.content_hash(source_location.path) == self.fs.content_hash(target_path):
            action, reason = SyncAction.SKIP, UNCHANGED
        else:
            action, reason = SyncAction.UPDATE, None

        return SyncItem(
            kind=kind,
            name=name,
            scope=scope,
            action=action,
            origin=origin,
            source_path=source_location.path,
            target_path=target_path,
            reason=reason,
        )

    def _plan_deletions(
        self,
        kind: ComponentKind,
        scope: Scope,
        seen: Set[IdentityKey]
    ) -> Iterator[SyncItem]:
        for entry in self.destination.list_placed(kind, scope, self.project_root):
            origin, name = parse_component_name(entry)
            if _identity(origin, name) in seen:
                continue
            location = self.destination.placement_location(
                self._context(kind, scope, origin, name)
            )
            if location is None:
                continue
            yield SyncItem(
                kind=kind,
                name=name,
                scope=scope,
                action=SyncAction.DELETE,
                origin=origin,
                target_path=location.path,
            )


class SyncExecutor:
    """Applies a sync plan to the filesystem."""

    def __init__(self, fs: FileSystem, project_root: Path, home: Path):
        self.fs = fs
        self.project_root = Path(project_root)
        self.home = Path(home)

    def execute(self, plan: SyncPlan, dry_run: bool = False) -> SyncResult:
        """
        Execute a plan.

        Item failures are collected in ``failed`` and never stop the run.

        Args:
            plan: Plan from SyncPlanner
            dry_run: Only sort items into buckets, write nothing

        Returns:
            SyncResult
        """
        result = SyncResult(dry_run=dry_run)
        for item in plan.items:
            if dry_run or not item.action.writes:
                result.record(item)
                continue
            try:
                self._apply(item)
            except (OSError, PathEscapeError) as e:
                logger.warning("Sync of %s failed: %s", item.display_name, e)
                result.failed.append(SyncFailure(item, str(e)))
                continue
            result.record(item)
        return result

    def _root_for(self, scope: Scope) -> Path:
        return self.project_root if scope == Scope.PROJECT else self.home

    def _apply(self, item: SyncItem) -> None:
        destination = ScopedPath(item.target_path, self._root_for(item.scope))
        logger.debug("%s %s", item.action.value, destination)

        if item.action == SyncAction.DELETE:
            self._remove(destination)
            if item.origin is not None:
                # <kind>/<marketplace>/<plugin>/<component>
                kind_dir = destination.as_path().parent.parent.parent
                prune_empty_dirs(self.fs, destination.as_path().parent, kind_dir)
            return

        # Stale files go only after the copy succeeded; a failed copy leaves the old tree.
        if self.fs.is_dir(item.source_path):
            if self.fs.is_file(destination):
                self.fs.remove_file(destination)
            self.fs.copy_dir(item.source_path, destination)
            self._remove_stale(item.source_path, destination.as_path())
        else:
            if self.fs.is_dir(destination):
                self.fs.remove_dir_all(destination)
            self.fs.copy_file(item.source_path, destination)

    def _remove_stale(self, source: Path, destination: Path) -> None:
        """Remove files under ``destination`` that ``source`` no longer has."""
        wanted = {path.relative_to(source) for path in self.fs.walk_files(source)}
        for path in self.fs.walk_files(destination):
            if path.relative_to(destination) not in wanted:
                self.fs.remove_file(path)
                prune_empty_dirs(self.fs, path.parent, destination)

    def _remove(self, destination: ScopedPath) -> None:
        if self.fs.is_dir(destination):
            self.fs.remove_dir_all(destination)
        else:
            self.fs.remove_file(destination)
