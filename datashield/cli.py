#!/usr/bin/env python3
"""
Command-line interface for DataShield.

Provides configuration inspection, the user directory and a scenario runner
that replays scripted sessions and reports the resulting tables and audit
trail.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from . import __version__
from .access_control import IdentityProvider
from .config import get_config
from .notifications import NoticeLevel
from .scenario import ScenarioResult, load_scenario, run_scenario
from .tables import Table, table_to_excel

console = Console()

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.INFO: "blue",
    NoticeLevel.ERROR: "red",
}


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else get_config().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """DataShield - permission-aware spreadsheet data with an audit trail."""
    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]DataShield[/bold blue] v{__version__}\n"
                "[dim]Permission-aware spreadsheet data with an audit trail[/dim]\n\n"
                "Use [bold]datashield --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.group()
def config() -> None:
    """Inspect DataShield configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    try:
        config_dict = get_config().to_dict()
    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    if format == "json":
        console.print_json(data=config_dict)
    elif format == "yaml":
        console.print(yaml.dump(config_dict, default_flow_style=False))
    else:
        table = RichTable(title="DataShield Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in config_dict.items():
            if isinstance(value, bool):
                value = "✓" if value else "✗"
            table.add_row(key, str(value))
        console.print(table)


@config.command("validate")
def config_validate() -> None:
    """Validate current configuration."""
    config = get_config()
    issues = []
    warnings = []

    if not config.audit_enabled and config.environment == "production":
        issues.append("Audit trail must be enabled in production")
    if not config.seed_column_permissions:
        warnings.append(
            "New tables get no column permissions; only the producer role "
            "can edit by default"
        )

    if issues:
        console.print("[red]✗ Configuration validation failed:[/red]")
        for issue in issues:
            console.print(f"  [red]• {issue}[/red]")
        sys.exit(1)
    console.print("[green]✓ Configuration is valid[/green]")

    if warnings:
        console.print("\n[yellow]⚠ Warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")


@cli.command()
def users() -> None:
    """List the demo user directory."""
    table = RichTable(title="User Directory")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("Role", style="yellow")
    table.add_column("Permissions", style="blue")

    for user in IdentityProvider().users():
        table.add_row(
            user.id,
            user.name,
            user.email,
            user.role.value,
            ", ".join(sorted(p.value for p in user.permissions)),
        )
    console.print(table)


def _render_table(table: Table) -> RichTable:
    state = "confirmed" if table.confirmed else "draft"
    status = f"{state} v{table.version}"
    rendered = RichTable(title=f"{table.name} ({status})")
    rendered.add_column("#", style="dim")
    for header in table.headers:
        rendered.add_column(header)
    for index, row in enumerate(table.rows):
        cells = []
        for cell in row:
            text = "" if cell.value is None else str(cell.value)
            cells.append(f"[green]{text}[/green]" if cell.confirmed else text)
        rendered.add_row(str(index + 1), *cells)
    return rendered


def _render_result(result: ScenarioResult) -> None:
    for notice in result.notifier.drain():
        style = NOTICE_STYLES[notice.level]
        console.print(f"[{style}]• {notice.message}[/{style}]")

    for table in result.store.tables:
        console.print()
        console.print(_render_table(table))

    console.print()
    audit_table = RichTable(title=f"Audit Trail ({len(result.audit)} entries)")
    audit_table.add_column("Timestamp", style="cyan")
    audit_table.add_column("User", style="green")
    audit_table.add_column("Action", style="yellow")
    audit_table.add_column("Resource", style="blue")
    audit_table.add_column("Details")
    config = get_config()
    for entry in result.audit.entries:
        audit_table.add_row(
            config.localize(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S"),
            entry.user_name,
            entry.action.value,
            entry.resource,
            entry.details,
        )
    console.print(audit_table)


@cli.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option("--audit-csv", type=click.Path(dir_okay=False), help="Write audit CSV")
@click.option(
    "--export-dir", type=click.Path(file_okay=False), help="Write every table here"
)
@click.option(
    "--format",
    "export_format",
    type=click.Choice(["csv", "excel"]),
    default="csv",
    help="Table export format",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def run(
    script: str,
    audit_csv: Optional[str],
    export_dir: Optional[str],
    export_format: str,
    verbose: bool,
) -> None:
    """Replay a scripted session and report tables and audit trail."""
    _configure_logging(verbose)

    try:
        result = run_scenario(load_scenario(script))
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error running scenario: {e}[/red]")
        sys.exit(1)

    _render_result(result)

    if audit_csv:
        Path(audit_csv).write_text(result.audit.export_all(), encoding="utf-8")
        console.print(
            f"[green]✓ Exported {len(result.audit)} audit entries to "
            f"{audit_csv}[/green]"
        )

    if export_dir:
        out = Path(export_dir)
        out.mkdir(parents=True, exist_ok=True)
        for table in result.store.tables:
            stem = "".join(c if c.isalnum() else "_" for c in table.name)
            if export_format == "excel":
                path = table_to_excel(table, out / f"{stem}_export.xlsx")
            else:
                content = result.store.export_table_to_csv(table_id=table.id)
                path = out / f"{stem}_export.csv"
                path.write_text(content or "", encoding="utf-8")
            console.print(f"[green]✓ Wrote {path}[/green]")

    integrity = result.audit.verify_integrity()
    if integrity["invalid"]:
        console.print(
            f"[red]✗ {integrity['invalid']} audit entries failed "
            "verification[/red]"
        )
        sys.exit(1)


if __name__ == "__main__":
    cli()
