"""OpenAI Codex target."""
from pathlib import Path
from typing import Optional

from plm.core.targets.base import Target
from plm.models.component import ComponentKind, Scope


class CodexTarget(Target):
    """Codex reads skills and agents from ``.codex`` and instructions from AGENTS.md."""

    name = "codex"
    display_name = "OpenAI Codex"
    supported_components = (
        ComponentKind.SKILL,
        ComponentKind.AGENT,
        ComponentKind.INSTRUCTION,
    )

    def base_dir(self, scope: Scope, project_root: Path) -> Path:
        if scope == Scope.PERSONAL:
            return self.home / ".codex"
        return project_root / ".codex"

    def kind_dir(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> Optional[Path]:
        if kind in (ComponentKind.SKILL, ComponentKind.AGENT):
            return self.base_dir(scope, project_root) / kind.plural
        return None

    def instruction_file(self, scope: Scope, project_root: Path) -> Optional[Path]:
        if scope == Scope.PERSONAL:
            return self.home / ".codex" / "AGENTS.md"
        return project_root / "AGENTS.md"
