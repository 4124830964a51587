"""Output formats for lint reports."""

from __future__ import annotations

import json
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from restlint.rules.schemas import Report, RuleSeverity

SEVERITY_STYLES = {
    RuleSeverity.ERROR: "red",
    RuleSeverity.WARNING: "yellow",
    RuleSeverity.INFO: "blue",
}

GITHUB_LEVELS = {
    RuleSeverity.ERROR: "error",
    RuleSeverity.WARNING: "warning",
    RuleSeverity.INFO: "notice",
}


def render_table(reports: Iterable[Report], console: Console) -> None:
    """Print reports as rich tables followed by a summary line."""
    reports = list(reports)

    for report in reports:
        if not report.violations:
            console.print(f"[green]{escape(report.source or 'document')}: no violations[/green]")
            continue

        table = Table(show_header=True, title=escape(report.source) if report.source else None)
        table.add_column("Severity", style="bold")
        table.add_column("Rule", style="cyan")
        table.add_column("Location")
        table.add_column("Message")

        for violation in report.violations:
            style = SEVERITY_STYLES.get(violation.severity, "white")
            message = escape(violation.message)
            if violation.suggestion:
                message += f"\n[dim]{escape(violation.suggestion)}[/dim]"
            table.add_row(
                f"[{style}]{violation.severity.value}[/{style}]",
                violation.rule_id,
                escape(str(violation.location)),
                message,
            )

        console.print(table)

    errors = sum(r.error_count for r in reports)
    warnings = sum(r.warning_count for r in reports)
    infos = sum(r.info_count for r in reports)
    failed = sum(1 for r in reports if not r.passed)

    console.print()
    console.print(
        f"[bold]Summary:[/bold] {len(reports)} document(s), "
        f"[red]{errors} error(s)[/red], [yellow]{warnings} warning(s)[/yellow], "
        f"[blue]{infos} info(s)[/blue]"
    )
    if failed:
        console.print(f"[red]{failed} document(s) failed[/red]")
    else:
        console.print("[green]All documents passed[/green]")


def render_json(reports: Iterable[Report]) -> str:
    """Serialize reports as a JSON array."""
    return json.dumps([r.to_dict() for r in reports], indent=2)


def render_github(reports: Iterable[Report]) -> str:
    """Format violations as GitHub Actions workflow commands."""
    lines = []
    for report in reports:
        for violation in report.violations:
            level = GITHUB_LEVELS[violation.severity]
            properties = f"title={_escape_property(violation.rule_id)}"
            if report.source:
                properties = f"file={_escape_property(report.source)},{properties}"
            message = f"{violation.location}: {violation.message}"
            lines.append(f"::{level} {properties}::{_escape_data(message)}")
    return "\n".join(lines)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")
