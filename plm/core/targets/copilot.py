"""GitHub Copilot target."""
from pathlib import Path
from typing import Optional

from plm.core.targets.base import Target
from plm.models.component import ComponentKind, Scope


class CopilotTarget(Target):
    """
    Copilot places project components under ``.github``.

    Only agents have a personal location (``~/.copilot/agents``); skills,
    prompt commands and instructions are project-only.
    """

    name = "copilot"
    display_name = "GitHub Copilot"
    supported_components = (
        ComponentKind.SKILL,
        ComponentKind.AGENT,
        ComponentKind.COMMAND,
        ComponentKind.INSTRUCTION,
    )

    def kind_dir(
        self,
        kind: ComponentKind,
        scope: Scope,
        project_root: Path
    ) -> Optional[Path]:
        if scope == Scope.PERSONAL:
            if kind == ComponentKind.AGENT:
                return self.home / ".copilot" / "agents"
            return None

        github_dir = project_root / ".github"
        if kind == ComponentKind.SKILL:
            return github_dir / "skills"
        if kind == ComponentKind.AGENT:
            return github_dir / "agents"
        if kind == ComponentKind.COMMAND:
            return github_dir / "prompts"
        return None

    def instruction_file(self, scope: Scope, project_root: Path) -> Optional[Path]:
        if scope == Scope.PROJECT:
            return project_root / ".github" / "copilot-instructions.md"
        return None
