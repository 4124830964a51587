"""Allow ``python -m restlint``."""

from restlint.cli.main import cli

if __name__ == "__main__":
    cli()
