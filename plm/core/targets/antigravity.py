"""Google Antigravity target."""
from pathlib import Path
from typing import Optional

from plm.core.targets.base import Target
from plm.models.component import ComponentKind, Scope


class AntigravityTarget(Target):
    """Antigravity only understands skills."""

    name = "antigravity"
    display_name = "Google Antigravity"
    supported_components = (ComponentKind.SKILL,)

    def kind_dir(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> Optional[Path]:
        if kind != ComponentKind.SKILL:
            return None
        if scope == Scope.PERSONAL:
            return self.home / ".gemini" / "antigravity" / "skills"
        return project_root / ".agent" / "skills"
