"""Low-level file operations and their aggregated results."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from plm.core.scoped_path import ScopedPath


@dataclass(frozen=True, order=True)
class TargetId:
    """Identifier of a target assistant (``codex``, ``copilot``, ...)."""

    value: str

    def __str__(self) -> str:
        return self.value


class OperationKind(str, Enum):
    COPY_FILE = "copy_file"
    COPY_DIR = "copy_dir"
    REMOVE_FILE = "remove_file"
    REMOVE_DIR = "remove_dir"


@dataclass(frozen=True)
class FileOperation:
    """
    One filesystem step produced by intent expansion.

    Copies read ``source`` from the plugin cache and write ``target``;
    removals only use ``target``. The destination is always a ScopedPath.
    """

    kind: OperationKind
    target: ScopedPath
    source: Optional[Path] = None

    @classmethod
    def copy_file(cls, source: Path, target: ScopedPath) -> "FileOperation":
        return cls(OperationKind.COPY_FILE, target, source)

    @classmethod
    def copy_dir(cls, source: Path, target: ScopedPath) -> "FileOperation":
        return cls(OperationKind.COPY_DIR, target, source)

    @classmethod
    def remove_file(cls, path: ScopedPath) -> "FileOperation":
        return cls(OperationKind.REMOVE_FILE, path)

    @classmethod
    def remove_dir(cls, path: ScopedPath) -> "FileOperation":
        return cls(OperationKind.REMOVE_DIR, path)

    @property
    def is_removal(self) -> bool:
        return self.kind in (OperationKind.REMOVE_FILE, OperationKind.REMOVE_DIR)

    def describe(self) -> str:
        if self.source is None:
            return f"{self.kind.value} {self.target}"
        return f"{self.kind.value} {self.source} -> {self.target}"


@dataclass(frozen=True)
class TargetEffect:
    target: TargetId
    component_count: int


@dataclass(frozen=True)
class TargetError:
    target: TargetId
    message: str


@dataclass
class AffectedTargets:
    """Append-only record of per-target successes and failures."""

    effects: List[TargetEffect] = field(default_factory=list)
    errors: List[TargetError] = field(default_factory=list)

    def record_success(self, target: TargetId, component_count: int) -> None:
        """Record a completed target group; groups that did nothing are dropped."""
        if component_count > 0:
            self.effects.append(TargetEffect(target, component_count))

    def record_error(self, target: TargetId, message: str) -> None:
        self.errors.append(TargetError(target, message))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def target_names(self) -> List[str]:
        return [str(effect.target) for effect in self.effects]

    @property
    def total_components(self) -> int:
        return sum(effect.component_count for effect in self.effects)

    def error_message(self) -> Optional[str]:
        """Join errors as ``"target: message; target: message"``."""
        if not self.errors:
            return None
        return "; ".join(f"{error.target}: {error.message}" for error in self.errors)

    def into_result(self) -> "OperationResult":
        return OperationResult(
            success=not self.has_errors,
            error=self.error_message(),
            affected_targets=self,
        )


@dataclass
class OperationResult:
    """Result of a plugin-level operation."""

    success: bool
    error: Optional[str] = None
    affected_targets: AffectedTargets = field(default_factory=AffectedTargets)

    @classmethod
    def failure(cls, message: str) -> "OperationResult":
        """Result for an operation that failed before touching any target."""
        return cls(success=False, error=message)
