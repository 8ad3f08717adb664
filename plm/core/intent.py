"""Expansion of plugin-level actions into file operations."""
from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from plm.core.errors import PathEscapeError
from plm.core.executor import execute_operations
from plm.core.fs import FileSystem
from plm.core.scoped_path import ScopedPath
from plm.core.targets.base import Target
from plm.models.component import Component, ComponentKind, Scope
from plm.models.operation import FileOperation, OperationResult, TargetId
from plm.models.origin import PluginOrigin
from plm.models.placement import PlacementContext

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    ENABLE = "enable"
    DISABLE = "disable"


@dataclass(frozen=True)
class PluginAction:
    """A user-level action on one plugin."""

    kind: ActionKind
    plugin_name: str
    marketplace: Optional[str] = None

    @property
    def is_deploy(self) -> bool:
        return self.kind in (ActionKind.INSTALL, ActionKind.ENABLE)

    @property
    def is_remove(self) -> bool:
        return self.kind in (ActionKind.UNINSTALL, ActionKind.DISABLE)

    @property
    def origin(self) -> PluginOrigin:
        return PluginOrigin.from_cached_plugin(self.marketplace, self.plugin_name)


@dataclass
class PluginIntent:
    """
    An action on a plugin together with everything needed to carry it out.

    :meth:`expand` is pure: it only looks at the components it was given
    and the targets' placement rules, never at the project tree.
    """

    action: PluginAction
    components: Sequence[Component]
    project_root: Path
    targets: Sequence[Target] = field(default_factory=list)
    target_filter: Optional[str] = None

    def selected_targets(self) -> List[Target]:
        if self.target_filter is None:
            return list(self.targets)
        wanted = self.target_filter.strip().lower()
        return [target for target in self.targets if target.name == wanted]

    def expand(self) -> List[Tuple[TargetId, FileOperation]]:
        """
        Turn the action into file operations, grouped by target order.

        Components a target doesn't support, and placements that would
        escape the project root, are skipped.

        Returns:
            ``(target_id, operation)`` pairs
        """
        origin = self.action.origin
        operations = []
        for target in self.selected_targets():
            for component in self.components:
                if not target.supports(component.kind):
                    continue
                location = target.placement_location(
                    PlacementContext(
                        component=component.ref,
                        origin=origin,
                        scope=Scope.PROJECT,
                        project_root=self.project_root,
                    )
                )
                if location is None:
                    continue
                try:
                    destination = ScopedPath(location.path, self.project_root)
                except PathEscapeError as e:
                    logger.debug("Skipping %s for %s: %s", component.name, target.name, e)
                    continue
                operations.append((target.id, self._operation(component, destination)))
        return operations

    def _operation(self, component: Component, destination: ScopedPath) -> FileOperation:
        is_skill = component.kind == ComponentKind.SKILL
        if self.action.is_deploy:
            if is_skill:
                return FileOperation.copy_dir(component.path, destination)
            return FileOperation.copy_file(component.path, destination)
        if is_skill:
            return FileOperation.remove_dir(destination)
        return FileOperation.remove_file(destination)

    def apply(self, fs: FileSystem) -> OperationResult:
        """Expand and execute the intent."""
        operations = self.expand()
        logger.info(
            "%s %s: %d operations",
            self.action.kind.value.capitalize(),
            self.action.plugin_name,
            len(operations),
        )
        return execute_operations(operations, fs)
