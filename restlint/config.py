"""Linter configuration loaded from .restlint.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from restlint.errors import ConfigError
from restlint.rules.schemas import RuleSeverity

CONFIG_FILENAME = ".restlint.yaml"

DEFAULT_SINGLETON_RESOURCES = frozenset({"status", "health"})

# camelCase spellings accepted for compatibility with the guideline documents
_ALIASES = {
    "apiPrefixAllowed": "api_prefix_allowed",
    "singletonResourceAllowList": "singleton_resources",
    "minSeverityToFail": "min_severity_to_fail",
    "disabledRules": "disabled_rules",
}


@dataclass(frozen=True)
class LintConfig:
    """Options consumed read-only by the rule engine."""

    api_prefix_allowed: bool = False
    singleton_resources: frozenset[str] = DEFAULT_SINGLETON_RESOURCES
    min_severity_to_fail: RuleSeverity = RuleSeverity.ERROR
    disabled_rules: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        try:
            severity = RuleSeverity(self.min_severity_to_fail)
        except ValueError:
            raise ConfigError(f"Invalid min_severity_to_fail '{self.min_severity_to_fail}'") from None
        object.__setattr__(self, "min_severity_to_fail", severity)
        if self.min_severity_to_fail == RuleSeverity.INFO:
            raise ConfigError("min_severity_to_fail must be 'error' or 'warning'")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LintConfig:
        """Create config from dictionary.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        options: dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ConfigError(f"Unknown configuration option '{key}'")
            options[name] = value

        kwargs: dict[str, Any] = {}
        if "api_prefix_allowed" in options:
            if not isinstance(options["api_prefix_allowed"], bool):
                raise ConfigError("api_prefix_allowed must be true or false")
            kwargs["api_prefix_allowed"] = options["api_prefix_allowed"]
        if "singleton_resources" in options:
            kwargs["singleton_resources"] = _string_set(options["singleton_resources"], "singleton_resources")
        if "disabled_rules" in options:
            kwargs["disabled_rules"] = _string_set(options["disabled_rules"], "disabled_rules")
        if "min_severity_to_fail" in options:
            try:
                kwargs["min_severity_to_fail"] = RuleSeverity(str(options["min_severity_to_fail"]).lower())
            except ValueError:
                raise ConfigError(
                    f"Invalid min_severity_to_fail '{options['min_severity_to_fail']}'"
                ) from None

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: Path | str) -> LintConfig:
        """Load config from a YAML file.

        An empty file yields the defaults.
        """
        yaml_path = Path(yaml_path)
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Could not load {yaml_path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def discover(cls, start_dir: Path | str = ".") -> LintConfig:
        """Load the nearest .restlint.yaml from ``start_dir`` upwards.

        Returns the defaults when no file is found.
        """
        directory = Path(start_dir).resolve()
        for candidate in (directory, *directory.parents):
            config_path = candidate / CONFIG_FILENAME
            if config_path.is_file():
                return cls.from_yaml(config_path)
        return cls()

    def with_overrides(self, **overrides: Any) -> LintConfig:
        """Return a copy with the given fields replaced."""
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update(overrides)
        return LintConfig(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "api_prefix_allowed": self.api_prefix_allowed,
            "singleton_resources": sorted(self.singleton_resources),
            "min_severity_to_fail": self.min_severity_to_fail.value,
            "disabled_rules": sorted(self.disabled_rules),
        }

    def save(self, yaml_path: Path | str) -> None:
        """Save config to a YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        yaml_path.write_text(yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False))


def _string_set(value: Any, option: str) -> frozenset[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigError(f"{option} must be a list of strings")
    return frozenset(str(v) for v in value)
