"""Base class for target assistants."""
from abc import ABC, abstractmethod
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from plm.core.fs import FileSystem, LocalFileSystem
from plm.models.component import ComponentKind, ComponentRef, Scope
from plm.models.operation import TargetId
from plm.models.origin import NO_ORIGIN, PluginOrigin
from plm.models.placement import PlacedComponent, PlacementContext, PlacementLocation

logger = logging.getLogger(__name__)

SKILL_MANIFEST = "SKILL.md"

# File suffix of placed file components, keyed by kind.
PLACED_SUFFIXES: Dict[ComponentKind, str] = {
    ComponentKind.AGENT: ".agent.md",
    ComponentKind.COMMAND: ".prompt.md",
}


def parse_placement(entry: str) -> Optional[Tuple[str, str]]:
    """
    Extract ``(marketplace, plugin)`` from a ``list_placed`` entry.

    Args:
        entry: Entry such as ``"github/demo/my-skill"``

    Returns:
        The first two segments when both are non-empty, otherwise None
    """
    parts = entry.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


class Target(ABC):
    """
    An AI assistant that plm places plugin components for.

    Subclasses describe their on-disk layout through :meth:`kind_dir` and
    :meth:`instruction_file`; placement, scope support and listing are
    derived from those two.
    """

    name: str = ""
    display_name: str = ""
    supported_components: Tuple[ComponentKind, ...] = ()

    def __init__(self, home: Path, fs: Optional[FileSystem] = None):
        """
        Args:
            home: User's home directory, base of personal placements
            fs: Filesystem used by list_placed (defaults to the real disk)
        """
        self.home = Path(home)
        self.fs = fs or LocalFileSystem()

    @property
    def id(self) -> TargetId:
        return TargetId(self.name)

    @abstractmethod
    def kind_dir(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> Optional[Path]:
        """Directory holding ``<marketplace>/<plugin>/<component>`` trees, or None."""
        pass

    def instruction_file(self, scope: Scope, project_root: Path) -> Optional[Path]:
        """Well-known instruction file for ``scope``, or None when unsupported."""
        return None

    def supports(self, kind: ComponentKind) -> bool:
        return kind in self.supported_components

    def supports_scope(self, kind: ComponentKind, scope: Scope) -> bool:
        ctx = PlacementContext(
            component=ComponentRef(kind, "_"),
            origin=NO_ORIGIN,
            scope=scope,
            project_root=self.home,
        )
        return self.placement_location(ctx) is not None

    def placement_location(self, ctx: PlacementContext) -> Optional[PlacementLocation]:
        """
        Resolve where a component is placed for this target.

        Args:
            ctx: Component, origin, scope and project root

        Returns:
            File or Dir location, or None when the kind/scope pair is unsupported
        """
        kind = ctx.component.kind
        if not self.supports(kind):
            return None

        if kind == ComponentKind.INSTRUCTION:
            path = self.instruction_file(ctx.scope, ctx.project_root)
            return PlacementLocation.file(path) if path is not None else None

        directory = self.kind_dir(kind, ctx.scope, ctx.project_root)
        if directory is None:
            return None
        base = directory / ctx.origin.marketplace_dir / ctx.origin.plugin_dir

        if kind == ComponentKind.SKILL:
            return PlacementLocation.dir(base / ctx.component.name)
        suffix = PLACED_SUFFIXES.get(kind)
        if suffix is None:
            return None
        return PlacementLocation.file(base / f"{ctx.component.name}{suffix}")

    def list_placed(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> List[str]:
        """
        List components of ``kind`` currently placed for this target.

        Entries are ``marketplace/plugin/name`` for components placed under
        an origin, or the bare filename for instruction files.

        Args:
            kind: Component kind to list
            scope: Personal or project placements
            project_root: Project root for project scope

        Returns:
            Sorted entries, empty when nothing is placed or unsupported
        """
        if not self.supports_scope(kind, scope):
            return []

        if kind == ComponentKind.INSTRUCTION:
            path = self.instruction_file(scope, project_root)
            if path is not None and self.fs.is_file(path):
                return [path.name]
            return []

        directory = self.kind_dir(kind, scope, project_root)
        if directory is None or not self.fs.is_dir(directory):
            return []

        entries = []
        for marketplace in self._subdirs(directory):
            for plugin in self._subdirs(marketplace):
                for child in self.fs.read_dir(plugin):
                    name = self._placed_name(kind, child)
                    if name is not None:
                        entries.append(f"{marketplace.name}/{plugin.name}/{name}")
        return entries

    def placed_components(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> List[PlacedComponent]:
        """Like :meth:`list_placed`, with the absolute path of each component."""
        placed = []
        for entry in self.list_placed(kind, scope, project_root):
            parsed = parse_placement(entry)
            origin: Optional[PluginOrigin] = None
            name = entry
            if parsed is not None:
                origin = PluginOrigin.from_segments(*parsed)
                name = entry.split("/", 2)[2]
            location = self.placement_location(
                PlacementContext(ComponentRef(kind, name), origin or NO_ORIGIN, scope, project_root)
            )
            if location is not None:
                placed.append(PlacedComponent(kind, name, scope, location.path, origin))
        return placed

    def _subdirs(self, directory: Path) -> List[Path]:
        return [child for child in self.fs.read_dir(directory) if self.fs.is_dir(child)]

    def _placed_name(self, kind: ComponentKind, path: Path) -> Optional[str]:
        if kind == ComponentKind.SKILL:
            if self.fs.is_dir(path) and self.fs.is_file(path / SKILL_MANIFEST):
                return path.name
            return None
        suffix = PLACED_SUFFIXES.get(kind)
        if suffix is None or not self.fs.is_file(path):
            return None
        if path.name.endswith(suffix) and len(path.name) > len(suffix):
            return path.name[:-len(suffix)]
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(home={str(self.home)!r})"
