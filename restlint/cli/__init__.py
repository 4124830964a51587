"""Command-line interface for restlint."""
