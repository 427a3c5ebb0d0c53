"""
Command-line interface for the theme engine.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Mapping
from datetime import date, time
from pathlib import Path

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from bbs_theme_engine.art import ArtContext, ArtResolver
from bbs_theme_engine.config import EngineConfig, get_config_path
from bbs_theme_engine.errors import ArtNotFoundError, ThemeEngineError
from bbs_theme_engine.logging import setup_logging
from bbs_theme_engine.registry import ThemeRegistry

console = Console()
err_console = Console(stderr=True)

DEFAULT_CONFIG_NAMES = ("bbs.yaml", "bbs-config.yaml")


def main() -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="BBS Theme Engine CLI",
        prog="bbs-themes",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Configuration file (default: $BBS_THEME_CONFIG or ./bbs.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    list_parser = subparsers.add_parser("list", help="List available themes")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # Show command
    show_parser = subparsers.add_parser("show", help="Show a resolved theme")
    show_parser.add_argument("theme", help="Theme id")
    target = show_parser.add_mutually_exclusive_group()
    target.add_argument("--menu", help="Only show this menu")
    target.add_argument("--prompt", help="Only show this prompt")

    # Art command
    art_parser = subparsers.add_parser("art", help="Resolve themed art")
    art_parser.add_argument("name", help="Art name, path or @art: spec")
    art_parser.add_argument("-t", "--theme", help="Explicit theme id")
    art_parser.add_argument("-u", "--user-theme", help="User's preferred theme id")
    art_parser.add_argument(
        "--no-random",
        action="store_true",
        help="Disable NAME<n>.EXT variant selection",
    )

    # Validate command
    subparsers.add_parser("validate", help="Validate theme definitions")

    # Watch command
    subparsers.add_parser("watch", help="Reload themes as definition files change")

    # Config command with subcommands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")

    config_subparsers.add_parser("show", help="Show current configuration")

    config_init_parser = config_subparsers.add_parser("init", help="Initialize a new config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default="bbs.yaml",
        help="Output file path",
    )

    args = parser.parse_args()

    # Setup logging based on verbosity
    if getattr(args, "verbose", False):
        setup_logging("DEBUG", console=err_console)
    else:
        setup_logging("WARNING", console=err_console)

    if args.command == "list":
        cmd_list(args)
    elif args.command == "show":
        cmd_show(args)
    elif args.command == "art":
        cmd_art(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "watch":
        cmd_watch(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()


def _find_config(explicit: str | None = None) -> Path | None:
    """Locate the config file: explicit, environment, then the working directory."""
    if explicit:
        return Path(explicit)
    env_path = get_config_path()
    if env_path is not None:
        return env_path
    for name in DEFAULT_CONFIG_NAMES:
        candidate = Path.cwd() / name
        if candidate.exists():
            return candidate
    return None


def _load_config(explicit: str | None = None) -> EngineConfig:
    path = _find_config(explicit)
    if path is None:
        return EngineConfig()
    if not path.exists():
        console.print(f"[red]Config file not found: {path}[/red]")
        sys.exit(1)
    return EngineConfig.from_yaml(path)


def _create_registry(config_path: str | None = None) -> ThemeRegistry:
    """Create and populate a registry from CLI args."""
    registry = ThemeRegistry(_load_config(config_path))
    try:
        registry.discover_and_load_all()
    except ThemeEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    return registry


def cmd_list(args: argparse.Namespace) -> None:
    """List available themes."""
    registry = _create_registry(args.config)
    themes = registry.themes()

    if args.json:
        data = [
            {"id": t.theme_id, "name": t.info.name, "author": t.info.author}
            for t in themes
        ]
        console.print_json(json.dumps(data, indent=2))
        return

    default_id = registry.config.defaults.theme
    table = Table(title="Available Themes")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Author", style="dim")

    for theme in themes:
        theme_id = f"{theme.theme_id} *" if theme.theme_id == default_id else theme.theme_id
        table.add_row(theme_id, theme.info.name, theme.info.author)

    console.print(table)
    console.print(f"\n[dim]Total: {len(themes)} themes[/dim]")


def _json_default(value: object) -> object:
    """Serialize read-only mappings and YAML dates/timestamps for JSON output."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def cmd_show(args: argparse.Namespace) -> None:
    """Show a resolved theme, or one of its menus/prompts."""
    registry = _create_registry(args.config)
    theme = registry.get(args.theme)
    if theme is None:
        console.print(f"[red]Theme not found: {args.theme}[/red]")
        sys.exit(1)

    if args.menu:
        data = theme.menu(args.menu)
        kind, name = "Menu", args.menu
    elif args.prompt:
        data = theme.prompt(args.prompt)
        kind, name = "Prompt", args.prompt
    else:
        data = theme.to_dict()
        kind, name = "Theme", args.theme

    if data is None:
        console.print(f"[red]{kind} not found: {name}[/red]")
        sys.exit(1)

    console.print_json(json.dumps(data, default=_json_default))


def cmd_art(args: argparse.Namespace) -> None:
    """Resolve art and show where it came from."""
    resolver = ArtResolver(_load_config(args.config))
    context = ArtContext(
        theme_id=args.theme,
        user_theme_id=args.user_theme,
        random=False if args.no_random else None,
    )

    try:
        art = resolver.resolve_asset(args.name, context)
    except ArtNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except ThemeEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"[bold]{art.name}[/bold]")
    console.print(f"  Path: {art.path}")
    console.print(f"  Size: {len(art.data)} bytes")
    console.print(f"  Encoding: {art.encoding}")

    if art.sauce:
        sauce = art.sauce
        console.print("\n[bold]SAUCE:[/bold]")
        console.print(f"  Title: {sauce.title}")
        console.print(f"  Author: {sauce.author}")
        console.print(f"  Group: {sauce.group}")
        console.print(f"  Date: {sauce.date}")
        console.print(f"  Type: {sauce.data_type_name} / {sauce.file_type_name or sauce.file_type}")
        if sauce.columns:
            console.print(f"  Size: {sauce.columns}x{sauce.rows or '?'}")
        if sauce.font_name:
            console.print(f"  Font: {sauce.font_name}")
        for comment in sauce.comments:
            console.print(f"  [dim]{comment}[/dim]")


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate every theme definition."""
    registry = ThemeRegistry(_load_config(args.config))
    theme_ids = registry.source.list_theme_ids()

    console.print(f"\n[bold]Validating themes in {registry.config.paths.themes}[/bold]")

    errors: list[tuple[str, str]] = []
    for theme_id in theme_ids:
        try:
            definition = registry.loader.load(theme_id)
        except ThemeEngineError as e:
            errors.append((theme_id, str(e)))
            console.print(f"  [red]✗[/red] {theme_id}: {e}")
            continue

        warnings = []
        if not definition.customization:
            warnings.append("No customization section")

        if warnings:
            console.print(f"  [yellow]⚠[/yellow] {theme_id}: {', '.join(warnings)}")
        else:
            console.print(f"  [green]✓[/green] {theme_id} ({definition.info.name})")

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Valid: {len(theme_ids) - len(errors)}")
    console.print(f"  Errors: {len(errors)}")

    if errors:
        sys.exit(1)


def report_reload(theme_ids: list[str]) -> None:
    console.print(f"[green]Reloaded:[/green] {', '.join(theme_ids)}")


async def _watch(registry: ThemeRegistry) -> None:
    await registry.start_watching(report_reload)
    try:
        while registry.is_watching:
            await asyncio.sleep(1)
    finally:
        await registry.stop_watching()


def cmd_watch(args: argparse.Namespace) -> None:
    """Load every theme and reload on changes until interrupted."""
    registry = _create_registry(args.config)
    console.print(
        f"[bold]Watching {len(registry)} themes in {registry.config.paths.themes}[/bold] "
        "[dim](Ctrl+C to stop)[/dim]"
    )
    try:
        asyncio.run(_watch(registry))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")


def cmd_config(args: argparse.Namespace) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        _config_show(args.config)
    elif args.config_command == "init":
        _config_init(args.output)
    else:
        console.print("[yellow]Usage: bbs-themes config <show|init>[/yellow]")


def _config_show(explicit: str | None = None) -> None:
    """Show current configuration."""
    path = _find_config(explicit)
    if path is None:
        console.print("[dim]No config file found. Using defaults.[/dim]")
    else:
        console.print(f"[dim]Loaded from: {path}[/dim]\n")

    config = _load_config(explicit)
    console.print("[bold]Current Configuration:[/bold]\n")
    console.print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))


def _config_init(output: str) -> None:
    """Initialize a new config file."""
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[red]File already exists: {output_path}[/red]")
        sys.exit(1)

    with open(output_path, "w") as f:
        yaml.dump(EngineConfig().to_dict(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Created config file: {output_path}[/green]")


if __name__ == "__main__":
    main()
