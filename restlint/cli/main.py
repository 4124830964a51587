"""Main CLI entry point for restlint."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from restlint import __version__
from restlint.cli.commands.init import init_command
from restlint.cli.commands.lint import lint_command
from restlint.cli.commands.rules import rules_command


def configure_logging(verbose: bool) -> None:
    """Send restlint log records to stderr through rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("restlint")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """restlint - check REST API descriptions against the API guidelines.

    \b
    GETTING STARTED:
      restlint init                      Write a default .restlint.yaml
      restlint lint openapi.yaml         Lint an API description
      restlint rules                     List the available rules

    \b
    CI USAGE:
      restlint lint specs/*.yaml --format github
      restlint lint openapi.json --fail-on warning
    """
    configure_logging(verbose)


cli.add_command(lint_command, name="lint")
cli.add_command(rules_command, name="rules")
cli.add_command(init_command, name="init")


if __name__ == "__main__":
    cli()
