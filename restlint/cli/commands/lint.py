"""Lint command for API descriptions."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from restlint.config import LintConfig
from restlint.errors import ConfigError
from restlint.reporting import render_github, render_json, render_table
from restlint.rules.engine import RuleEngine
from restlint.rules.schemas import RuleSeverity

console = Console()
err_console = Console(stderr=True)


@click.command("lint")
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: nearest .restlint.yaml)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "github"]),
    default="table",
    help="Output format",
)
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    help="Lowest severity that fails the run (overrides config)",
)
@click.option("--allow-api-prefix", is_flag=True, help="Allow paths starting with /api")
@click.option("--disable", "disabled", multiple=True, help="Disable a rule by id (repeatable)")
def lint_command(
    files: tuple[Path, ...],
    config_path: Path | None,
    output_format: str,
    fail_on: str | None,
    allow_api_prefix: bool,
    disabled: tuple[str, ...],
) -> None:
    """Lint API descriptions against the guidelines.

    FILES are OpenAPI or Swagger documents in JSON or YAML.

    Examples:

        restlint lint openapi.yaml

        restlint lint specs/*.json --format github

        restlint lint openapi.yaml --fail-on warning --disable version-in-path
    """
    try:
        config = LintConfig.from_yaml(config_path) if config_path else LintConfig.discover()

        overrides: dict = {}
        if fail_on:
            overrides["min_severity_to_fail"] = RuleSeverity(fail_on)
        if allow_api_prefix:
            overrides["api_prefix_allowed"] = True
        if disabled:
            overrides["disabled_rules"] = config.disabled_rules | frozenset(disabled)
        if overrides:
            config = config.with_overrides(**overrides)

        engine = RuleEngine(config)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(2)

    reports = [engine.evaluate_file(path) for path in files]

    if output_format == "json":
        click.echo(render_json(reports))
    elif output_format == "github":
        output = render_github(reports)
        if output:
            click.echo(output)
    else:
        render_table(reports, console)

    if not all(report.passed for report in reports):
        raise SystemExit(1)
