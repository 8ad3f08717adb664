"""Cross-target sync plan and result models."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from plm.models.component import ComponentKind, Scope
from plm.models.origin import PluginOrigin

DEFAULT_SYNC_KINDS: Tuple[ComponentKind, ...] = (
    ComponentKind.SKILL,
    ComponentKind.AGENT,
    ComponentKind.COMMAND,
    ComponentKind.INSTRUCTION,
)

UNCHANGED = "unchanged"


class SyncAction(str, Enum):
    """What the executor does with a sync item."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"
    UNSUPPORTED = "unsupported"

    @property
    def writes(self) -> bool:
        return self in (SyncAction.CREATE, SyncAction.UPDATE, SyncAction.DELETE)


@dataclass
class SyncOptions:
    """Filters and switches for a sync run."""

    kinds: Optional[List[ComponentKind]] = None
    scope: Optional[Scope] = None
    dry_run: bool = False
    delete: bool = False

    def effective_kinds(self) -> List[ComponentKind]:
        return list(self.kinds) if self.kinds else list(DEFAULT_SYNC_KINDS)

    def effective_scopes(self) -> List[Scope]:
        return [self.scope] if self.scope else list(Scope)


@dataclass(frozen=True)
class SyncItem:
    """One component in a sync plan.

    ``origin`` is None for components placed without an origin, such as
    instruction files. ``source_path`` is None for deletions and
    ``target_path`` is None when the destination can't hold the component.
    """

    kind: ComponentKind
    name: str
    scope: Scope
    action: SyncAction
    origin: Optional[PluginOrigin] = None
    source_path: Optional[Path] = None
    target_path: Optional[Path] = None
    reason: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.origin is None:
            return self.name
        return f"{self.origin.encode()}/{self.name}"

    def sort_key(self) -> Tuple[int, int, str, str]:
        origin = self.origin.encode() if self.origin is not None else ""
        return (self.kind.order, self.scope.order, origin, self.name)


@dataclass
class SyncPlan:
    source: str
    destination: str
    items: List[SyncItem] = field(default_factory=list)

    def by_action(self, action: SyncAction) -> List[SyncItem]:
        return [item for item in self.items if item.action == action]

    @property
    def has_changes(self) -> bool:
        return any(item.action.writes for item in self.items)


@dataclass(frozen=True)
class SyncFailure:
    item: SyncItem
    error: str

    @property
    def action(self) -> SyncAction:
        return self.item.action


@dataclass
class SyncResult:
    """Outcome of executing (or previewing) a sync plan."""

    created: List[SyncItem] = field(default_factory=list)
    updated: List[SyncItem] = field(default_factory=list)
    deleted: List[SyncItem] = field(default_factory=list)
    skipped: List[SyncItem] = field(default_factory=list)
    unsupported: List[SyncItem] = field(default_factory=list)
    failed: List[SyncFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def is_success(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return (
            len(self.created) + len(self.updated) + len(self.deleted)
            + len(self.skipped) + len(self.unsupported) + len(self.failed)
        )

    def record(self, item: SyncItem) -> None:
        """File an item into the bucket matching its action."""
        bucket = {
            SyncAction.CREATE: self.created,
            SyncAction.UPDATE: self.updated,
            SyncAction.DELETE: self.deleted,
            SyncAction.SKIP: self.skipped,
            SyncAction.UNSUPPORTED: self.unsupported,
        }[item.action]
        bucket.append(item)
