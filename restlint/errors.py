"""Exceptions raised by restlint."""

from __future__ import annotations

from pathlib import Path


class RestLintError(Exception):
    """Base class for restlint errors."""


class StructuralError(RestLintError):
    """The API description cannot be interpreted."""

    def __init__(self, message: str, pointer: str = "") -> None:
        super().__init__(f"{message} (at {pointer})" if pointer else message)
        self.reason = message
        self.pointer = pointer


class DocumentLoadError(StructuralError):
    """The API description file could not be read or decoded."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Could not load {path}: {reason}")
        self.path = Path(path)


class ConfigError(RestLintError):
    """Invalid configuration file or value."""
