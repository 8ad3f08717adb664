"""Target assistants and the target registry."""
from pathlib import Path
from typing import Dict, List, Optional, Type

from plm.core.errors import TargetNotFoundError
from plm.core.fs import FileSystem
from plm.core.targets.antigravity import AntigravityTarget
from plm.core.targets.base import Target, parse_placement
from plm.core.targets.codex import CodexTarget
from plm.core.targets.copilot import CopilotTarget
from plm.core.targets.gemini import GeminiTarget

TARGET_CLASSES: Dict[str, Type[Target]] = {
    cls.name: cls
    for cls in (CodexTarget, CopilotTarget, AntigravityTarget, GeminiTarget)
}

TARGET_NAMES: List[str] = list(TARGET_CLASSES)


def get_target(
    name: str,
    home: Optional[Path] = None,
    fs: Optional[FileSystem] = None
) -> Target:
    """
    Build a target by name.

    Args:
        name: Target name (case-insensitive)
        home: Home directory for personal placements (defaults to the user's)
        fs: Filesystem for listing placements

    Returns:
        Target instance

    Raises:
        TargetNotFoundError: If no target has that name
    """
    cls = TARGET_CLASSES.get(name.strip().lower())
    if cls is None:
        raise TargetNotFoundError(name, TARGET_NAMES)
    return cls(home if home is not None else Path.home(), fs)


def all_targets(
    home: Optional[Path] = None,
    fs: Optional[FileSystem] = None
) -> List[Target]:
    """Build every known target, in registry order."""
    return [get_target(name, home, fs) for name in TARGET_NAMES]


__all__ = [
    "Target",
    "CodexTarget",
    "CopilotTarget",
    "AntigravityTarget",
    "GeminiTarget",
    "TARGET_CLASSES",
    "TARGET_NAMES",
    "get_target",
    "all_targets",
    "parse_placement",
]
