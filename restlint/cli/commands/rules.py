"""Rules listing command."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from restlint.config import LintConfig
from restlint.errors import ConfigError
from restlint.rules.validators import RULES

console = Console()


@click.command("rules")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def rules_command(output_json: bool) -> None:
    """List available rules."""
    try:
        disabled = LintConfig.discover().disabled_rules
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(2)

    if output_json:
        output = [dict(rule.to_dict(), enabled=rule.id not in disabled) for rule in RULES]
        click.echo(json.dumps(output, indent=2))
        return

    table = Table(title="Rules")
    table.add_column("Rule ID", style="cyan")
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Enabled")

    for rule in RULES:
        severity_style = {
            "error": "red",
            "warning": "yellow",
            "info": "blue",
        }.get(rule.severity.value, "white")

        table.add_row(
            rule.id,
            rule.name,
            f"[{severity_style}]{rule.severity.value}[/{severity_style}]",
            rule.category.value,
            "[red]no[/red]" if rule.id in disabled else "[green]yes[/green]",
        )

    console.print(table)
