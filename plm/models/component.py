"""Component kinds, scopes and component records."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple


class ComponentKind(str, Enum):
    """Kind of artifact shipped inside a plugin."""

    SKILL = "skill"
    AGENT = "agent"
    COMMAND = "command"
    INSTRUCTION = "instruction"
    HOOK = "hook"

    @property
    def plural(self) -> str:
        """Plural form, also the default directory name inside a plugin."""
        return f"{self.value}s"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def order(self) -> int:
        """Position in declaration order, used for stable sorting."""
        return list(ComponentKind).index(self)

    @classmethod
    def all(cls) -> Tuple["ComponentKind", ...]:
        return tuple(cls)


class Scope(str, Enum):
    """Where a component is placed: the user's home tree or a project tree."""

    PERSONAL = "personal"
    PROJECT = "project"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def order(self) -> int:
        return list(Scope).index(self)


@dataclass(frozen=True)
class ComponentRef:
    """Kind and name of a component, without its location."""

    kind: ComponentKind
    name: str


@dataclass(frozen=True)
class Component:
    """A component found in a plugin cache directory."""

    kind: ComponentKind
    name: str
    path: Path

    @property
    def ref(self) -> ComponentRef:
        return ComponentRef(self.kind, self.name)
