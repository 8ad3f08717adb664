"""Gemini CLI target."""
from pathlib import Path
from typing import Optional

from plm.core.targets.base import Target
from plm.models.component import ComponentKind, Scope


class GeminiTarget(Target):
    """Gemini CLI reads skills from ``.gemini/skills`` and instructions from GEMINI.md."""

    name = "gemini"
    display_name = "Gemini CLI"
    supported_components = (ComponentKind.SKILL, ComponentKind.INSTRUCTION)

    def base_dir(self, scope: Scope, project_root: Path) -> Path:
        if scope == Scope.PERSONAL:
            return self.home / ".gemini"
        return project_root / ".gemini"

    def kind_dir(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> Optional[Path]:
        if kind == ComponentKind.SKILL:
            return self.base_dir(scope, project_root) / "skills"
        return None

    def instruction_file(self, scope: Scope, project_root: Path) -> Optional[Path]:
        if scope == Scope.PERSONAL:
            return self.home / ".gemini" / "GEMINI.md"
        return project_root / "GEMINI.md"
