"""Main CLI entry point for plm."""
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from plm import __version__
from plm.models.operation import OperationResult

SCOPE_CHOICES = ['personal', 'project']
KIND_CHOICES = ['skill', 'agent', 'command', 'instruction']


def _error(message: str) -> None:
    click.echo(click.style("Error: ", fg="red", bold=True) + message, err=True)


def _get_manager(ctx: click.Context):
    """Build the PluginManager from the group options, once per invocation."""
    from plm.core.config import load_config
    from plm.core.manager import PluginManager

    if "manager" not in ctx.obj:
        try:
            config = load_config(ctx.obj["config_path"])
        except (OSError, yaml.YAMLError, ValueError) as e:
            _error(f"Failed to load config: {e}")
            raise click.Abort()
        ctx.obj["manager"] = PluginManager(config, ctx.obj["project_root"])
    return ctx.obj["manager"]


def _report(result: OperationResult, verb: str, name: str) -> None:
    """Print an OperationResult and exit non-zero on failure."""
    for effect in result.affected_targets.effects:
        click.echo(
            click.style("✓ ", fg="green") +
            f"{effect.target}: {effect.component_count} component(s)"
        )
    if not result.success:
        _error(result.error or f"Failed to {verb.lower()} {name}")
        sys.exit(1)
    if not result.affected_targets.effects:
        click.echo(f"{verb} {name}: nothing to do")
        return
    click.echo(click.style(f"{verb} {name}", fg="green", bold=True))


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Path to config.yaml (default: $PLM_CONFIG or ~/.plm/config.yaml)'
)
@click.option(
    '--project', 'project_root',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Project root (default: current directory)'
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_path: Optional[Path],
    project_root: Optional[Path],
) -> None:
    """plm - Plugin Manager

    Places AI-assistant plugins for Codex, Copilot, Antigravity and Gemini,
    and syncs placed components between them.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["project_root"] = (project_root or Path.cwd()).absolute()


@cli.command()
def version() -> None:
    """Show plm version."""
    click.echo(f"plm version {__version__}")


@cli.command()
@click.pass_context
def targets(ctx: click.Context) -> None:
    """List targets and the component kinds they support."""
    from plm.cli.formatting import format_targets_table
    from plm.core.targets import TARGET_NAMES

    manager = _get_manager(ctx)
    all_targets = [manager.target(name) for name in TARGET_NAMES]
    click.echo(format_targets_table(all_targets, manager.config.targets))


@cli.group()
def target() -> None:
    """Manage the targets enabled in config.yaml."""


@target.command(name="list")
@click.pass_context
def target_list(ctx: click.Context) -> None:
    """List enabled targets."""
    manager = _get_manager(ctx)
    if not manager.config.targets:
        click.echo("No targets enabled")
        return
    for name in manager.config.targets:
        click.echo(f"• {name} ({manager.target(name).display_name})")


@target.command(name="add")
@click.argument('name')
@click.pass_context
def target_add(ctx: click.Context, name: str) -> None:
    """Enable a target in config.yaml."""
    _edit_targets(ctx, name, add=True)


@target.command(name="remove")
@click.argument('name')
@click.pass_context
def target_remove(ctx: click.Context, name: str) -> None:
    """Disable a target in config.yaml."""
    _edit_targets(ctx, name, add=False)


def _edit_targets(ctx: click.Context, name: str, add: bool) -> None:
    from plm.core.config import save_config

    config = _get_manager(ctx).config
    try:
        changed = config.add_target(name) if add else config.remove_target(name)
    except ValueError as e:
        _error(str(e))
        raise click.Abort()

    normalized = name.strip().lower()
    if not changed:
        state = "already enabled" if add else "not enabled"
        click.echo(f"Target {normalized} is {state}")
        return

    try:
        path = save_config(config, ctx.obj["config_path"])
    except OSError as e:
        _error(f"Failed to write config: {e}")
        raise click.Abort()
    verb = "Added" if add else "Removed"
    click.echo(click.style("✓ ", fg="green") + f"{verb} target {normalized} ({path})")


@cli.command()
@click.argument('name')
@click.option('--marketplace', '-m', help='Marketplace the plugin came from')
@click.option(
    '--format', 'output_format',
    type=click.Choice(['table', 'json']),
    default='table',
    help='Output format (table, json)'
)
@click.pass_context
def info(ctx: click.Context, name: str, marketplace: Optional[str], output_format: str) -> None:
    """Show details of a cached plugin."""
    from plm.cli.formatting import format_plugin_info_json, format_plugin_info_table
    from plm.core.errors import PlmError

    manager = _get_manager(ctx)
    try:
        detail = manager.plugin_info(name, marketplace)
    except (PlmError, OSError) as e:
        _error(str(e))
        sys.exit(1)

    if output_format == 'json':
        click.echo(format_plugin_info_json(detail))
        return
    click.echo(format_plugin_info_table(detail))


@cli.command(name="list")
@click.option(
    '--format', 'output_format',
    type=click.Choice(['text', 'json']),
    default='text',
    help='Output format (text, json)'
)
@click.pass_context
def list_plugins(ctx: click.Context, output_format: str) -> None:
    """List plugins in the cache."""
    from plm.cli.formatting import format_plugins_json, format_plugins_text

    manager = _get_manager(ctx)
    try:
        plugins = manager.list_installed_plugins()
    except OSError as e:
        _error(f"Failed to read plugin cache: {e}")
        raise click.Abort()

    if output_format == 'json':
        click.echo(format_plugins_json(plugins))
        return
    if not plugins:
        click.echo("No plugins installed")
        return
    click.echo(format_plugins_text(plugins))


@cli.command()
@click.argument('name')
@click.option('--marketplace', '-m', help='Marketplace the plugin came from')
@click.option('--target', '-t', help='Only place for this target')
@click.pass_context
def enable(ctx: click.Context, name: str, marketplace: Optional[str], target: Optional[str]) -> None:
    """Place a cached plugin's components into the project."""
    result = _get_manager(ctx).enable_plugin(name, marketplace, target)
    _report(result, "Enabled", name)


@cli.command()
@click.argument('name')
@click.option('--marketplace', '-m', help='Marketplace the plugin came from')
@click.option('--target', '-t', help='Only remove from this target')
@click.pass_context
def disable(ctx: click.Context, name: str, marketplace: Optional[str], target: Optional[str]) -> None:
    """Remove a plugin's components from the project, keeping it cached."""
    result = _get_manager(ctx).disable_plugin(name, marketplace, target)
    _report(result, "Disabled", name)


@cli.command()
@click.argument('name')
@click.option('--marketplace', '-m', help='Marketplace the plugin came from')
@click.option('--force', is_flag=True, help='Skip confirmation and remove from cache even on errors')
@click.pass_context
def uninstall(ctx: click.Context, name: str, marketplace: Optional[str], force: bool) -> None:
    """Disable a plugin and delete it from the cache."""
    if not force:
        click.confirm(f"Uninstall {name}?", abort=True)
    result = _get_manager(ctx).uninstall_plugin(name, marketplace, force=force)
    _report(result, "Uninstalled", name)


@cli.command()
@click.option('--target', '-t', 'target_name', required=True, help='Target to inspect')
@click.option('--scope', type=click.Choice(SCOPE_CHOICES), help='Filter by scope')
@click.pass_context
def placed(ctx: click.Context, target_name: str, scope: Optional[str]) -> None:
    """Show components currently placed for a target."""
    from plm.cli.formatting import format_placed_table
    from plm.core.errors import TargetNotFoundError
    from plm.models.component import ComponentKind, Scope

    manager = _get_manager(ctx)
    try:
        target = manager.target(target_name)
    except TargetNotFoundError as e:
        _error(str(e))
        raise click.Abort()

    scopes = [Scope(scope)] if scope else list(Scope)
    components = []
    for kind in ComponentKind.all():
        for each_scope in scopes:
            components.extend(target.placed_components(kind, each_scope, manager.project_root))

    if not components:
        click.echo(f"Nothing placed for {target.name}")
        return
    click.echo(format_placed_table(target, components))


@cli.command()
@click.option('--from', 'from_target', required=True, help='Source target')
@click.option('--to', 'to_target', required=True, help='Destination target')
@click.option('--type', 'kind', type=click.Choice(KIND_CHOICES), help='Only sync this component kind')
@click.option('--scope', type=click.Choice(SCOPE_CHOICES), help='Only sync this scope')
@click.option('--dry-run', is_flag=True, help='Show the plan without writing')
@click.option('--delete', is_flag=True, help='Delete destination components missing from the source')
@click.pass_context
def sync(
    ctx: click.Context,
    from_target: str,
    to_target: str,
    kind: Optional[str],
    scope: Optional[str],
    dry_run: bool,
    delete: bool,
) -> None:
    """Copy components placed for one target into another."""
    from plm.cli.formatting import format_sync_table
    from plm.models.component import ComponentKind, Scope
    from plm.models.sync import SyncOptions

    options = SyncOptions(
        kinds=[ComponentKind(kind)] if kind else None,
        scope=Scope(scope) if scope else None,
        dry_run=dry_run,
        delete=delete,
    )
    manager = _get_manager(ctx)
    try:
        result = manager.sync(from_target, to_target, options)
    except ValueError as e:
        _error(str(e))
        sys.exit(2)
    except OSError as e:
        _error(f"Sync failed: {e}")
        sys.exit(1)

    if result.total == 0:
        click.echo(f"Nothing to sync from {from_target} to {to_target}")
        return

    click.echo(format_sync_table(result, from_target, to_target))
    summary = (
        f"Created: {len(result.created)}, Updated: {len(result.updated)}, "
        f"Deleted: {len(result.deleted)}, Skipped: {len(result.skipped)}, "
        f"Unsupported: {len(result.unsupported)}"
    )
    if result.is_success:
        click.echo(click.style(summary, fg="green", bold=True))
        return
    click.echo(summary + ", " + click.style(f"Failed: {len(result.failed)}", fg="red"))
    _error("; ".join(f"{f.item.display_name}: {f.error}" for f in result.failed))
    sys.exit(1)
