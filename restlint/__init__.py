"""Conformance checker for REST API descriptions."""

__version__ = "0.1.0"

from restlint.config import LintConfig
from restlint.errors import ConfigError, DocumentLoadError, RestLintError, StructuralError
from restlint.rules.engine import RuleEngine
from restlint.rules.schemas import Location, Report, Rule, RuleSeverity, Violation
from restlint.spec.parser import DocumentParser
from restlint.spec.schemas import ApiDocument

__all__ = [
    "ApiDocument",
    "ConfigError",
    "DocumentLoadError",
    "DocumentParser",
    "LintConfig",
    "Location",
    "Report",
    "RestLintError",
    "Rule",
    "RuleEngine",
    "RuleSeverity",
    "StructuralError",
    "Violation",
    "__version__",
]
