"""Rendering of CLI output."""
from io import StringIO
import json
from typing import List, Sequence

from rich.console import Console
from rich.table import Table

from plm.core.manager import PluginDetail, PluginSummary
from plm.core.targets import Target
from plm.models.component import ComponentKind, Scope
from plm.models.placement import PlacedComponent
from plm.models.sync import SyncAction, SyncItem, SyncResult

ACTION_STYLES = {
    SyncAction.CREATE: "green",
    SyncAction.UPDATE: "yellow",
    SyncAction.DELETE: "red",
    SyncAction.SKIP: "dim",
    SyncAction.UNSUPPORTED: "magenta",
}


def _render(table: Table) -> str:
    console = Console(file=StringIO(), force_terminal=True)
    console.print(table)
    return console.file.getvalue()


def format_targets_table(targets: Sequence[Target], enabled: Sequence[str]) -> str:
    """Table of targets with their enabled flag and per-scope support."""
    table = Table(title="Targets")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Display Name", style="white")
    table.add_column("Enabled", style="green")
    table.add_column("Project", style="magenta")
    table.add_column("Personal", style="magenta")

    for target in targets:
        table.add_row(
            target.name,
            target.display_name,
            "yes" if target.name in enabled else "no",
            _supported_kinds(target, Scope.PROJECT),
            _supported_kinds(target, Scope.PERSONAL),
        )
    return _render(table)


def _supported_kinds(target: Target, scope: Scope) -> str:
    kinds = [
        kind.value for kind in ComponentKind.all()
        if target.supports_scope(kind, scope)
    ]
    return ", ".join(kinds) or "-"


def format_plugins_text(plugins: List[PluginSummary]) -> str:
    lines = []
    for plugin in plugins:
        status = "enabled" if plugin.enabled else "disabled"
        lines.append(f"• {plugin.name}@{plugin.marketplace} {plugin.version} ({status})")
        if plugin.description:
            lines.append(f"    {plugin.description}")
        for kind in ComponentKind.all():
            names = getattr(plugin, kind.plural)
            if names:
                lines.append(f"    {kind.display_name}s: {', '.join(names)}")
    return "\n".join(lines)


def _format_list(items: Sequence[str]) -> str:
    return ", ".join(items) if items else "none"


def format_plugin_info_table(detail: PluginDetail) -> str:
    """Two-column table with a plugin's manifest, source, components and deployment."""
    table = Table(title=f"Plugin: {detail.name}", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Version", detail.version)
    table.add_row("Description", detail.description or "none")
    table.add_row("Author", detail.author or "none")
    table.add_row("Keywords", _format_list(detail.keywords))
    table.add_row("Source", detail.source)
    table.add_row("Cache", str(detail.cache_path))
    for kind in ComponentKind.all():
        table.add_row(f"{kind.display_name}s", _format_list(detail.components.get(kind, [])))
    table.add_row("Enabled", _format_list(detail.enabled_targets))
    return _render(table)


def format_plugin_info_json(detail: PluginDetail) -> str:
    return json.dumps(detail.to_dict(), indent=2)


def format_plugins_json(plugins: List[PluginSummary]) -> str:
    return json.dumps([plugin.to_dict() for plugin in plugins], indent=2)


def format_placed_table(target: Target, placed: List[PlacedComponent]) -> str:
    table = Table(title=f"Placed for {target.display_name}")
    table.add_column("Kind", style="cyan")
    table.add_column("Scope", style="magenta")
    table.add_column("Name", style="white")
    table.add_column("Path", style="dim")
    for component in placed:
        table.add_row(
            component.kind.value,
            component.scope.value,
            component.entry,
            str(component.path),
        )
    return _render(table)


def format_sync_table(result: SyncResult, source: str, destination: str) -> str:
    """
    Table of sync items by outcome.

    Args:
        result: Executed or dry-run result
        source: Source target name
        destination: Destination target name

    Returns:
        Rendered table
    """
    title = f"Sync {source} → {destination}"
    if result.dry_run:
        title += " (dry run)"
    table = Table(title=title)
    table.add_column("Action", no_wrap=True)
    table.add_column("Kind", style="cyan")
    table.add_column("Scope", style="magenta")
    table.add_column("Component", style="white")
    table.add_column("Note", style="dim")

    rows: List[SyncItem] = (
        result.created + result.updated + result.deleted
        + result.skipped + result.unsupported
    )
    for item in sorted(rows, key=SyncItem.sort_key):
        style = ACTION_STYLES[item.action]
        table.add_row(
            f"[{style}]{item.action.value}[/{style}]",
            item.kind.value,
            item.scope.value,
            item.display_name,
            item.reason or "",
        )
    for failure in result.failed:
        table.add_row(
            f"[red]failed ({failure.action.value})[/red]",
            failure.item.kind.value,
            failure.item.scope.value,
            failure.item.display_name,
            failure.error,
        )
    return _render(table)
