"""Init command for writing a default configuration."""

from pathlib import Path

import click
from rich.console import Console

from restlint.config import CONFIG_FILENAME, LintConfig

console = Console()


@click.command("init")
@click.option("--path", "directory", default=".", help="Directory to write the config into")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init_command(directory: str, force: bool) -> None:
    """Write a default .restlint.yaml."""
    config_path = Path(directory) / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] {config_path} already exists (use --force to overwrite)")
        raise SystemExit(1)

    LintConfig().save(config_path)
    console.print(f"[green]Wrote {config_path}[/green]")
