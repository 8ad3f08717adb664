"""Placement requests and answers."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from plm.models.component import ComponentKind, ComponentRef, Scope
from plm.models.origin import PluginOrigin


@dataclass(frozen=True)
class PlacementContext:
    """Everything a target needs to decide where a component goes."""

    component: ComponentRef
    origin: PluginOrigin
    scope: Scope
    project_root: Path


class LocationKind(str, Enum):
    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class PlacementLocation:
    """Destination of a placed component.

    Skills resolve to directories and are copied recursively; every other
    kind resolves to a single file.
    """

    kind: LocationKind
    path: Path

    @classmethod
    def file(cls, path: Path) -> "PlacementLocation":
        return cls(LocationKind.FILE, path)

    @classmethod
    def dir(cls, path: Path) -> "PlacementLocation":
        return cls(LocationKind.DIR, path)

    @property
    def is_dir(self) -> bool:
        return self.kind == LocationKind.DIR


@dataclass(frozen=True)
class PlacedComponent:
    """A component found in a target's tree by ``Target.list_placed``.

    ``name`` is the component name, as in :class:`Component`. ``origin`` is
    None for entries placed without one, such as instruction files.
    """

    kind: ComponentKind
    name: str
    scope: Scope
    path: Path
    origin: Optional[PluginOrigin] = None

    @property
    def entry(self) -> str:
        """The ``list_placed`` form: ``marketplace/plugin/name`` or the bare name."""
        if self.origin is None:
            return self.name
        return f"{self.origin.encode()}/{self.name}"
