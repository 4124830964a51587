"""Rule system data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, NamedTuple

if TYPE_CHECKING:
    from restlint.config import LintConfig
    from restlint.spec.schemas import ApiDocument


class RuleSeverity(Enum):
    """Severity level of a rule violation."""

    ERROR = "error"  # Must be fixed
    WARNING = "warning"  # Should be fixed
    INFO = "info"  # Informational

    @property
    def rank(self) -> int:
        """Numeric rank for comparisons (higher = more severe)."""
        ranks = {
            RuleSeverity.ERROR: 3,
            RuleSeverity.WARNING: 2,
            RuleSeverity.INFO: 1,
        }
        return ranks[self]

    def at_least(self, other: RuleSeverity) -> bool:
        """Whether this severity is as severe as ``other`` or more."""
        return self.rank >= other.rank


class RuleCategory(Enum):
    """Category of rule for organization."""

    STRUCTURE = "structure"
    NAMING = "naming"
    VERSIONING = "versioning"
    METHODS = "methods"
    PAGINATION = "pagination"
    ERRORS = "errors"
    METADATA = "metadata"
    DEPRECATION = "deprecation"
    DATA_FORMATS = "data_formats"


@dataclass(frozen=True)
class Location:
    """Where in the API description a violation was found."""

    path: str = ""  # Path template, empty for document-level findings
    method: str | None = None
    field: str | None = None  # e.g. "responses.404", "info.x-api-id"

    def __str__(self) -> str:
        parts = [p for p in (self.method, self.path) if p]
        location = " ".join(parts) or "document"
        if self.field:
            location += f" ({self.field})"
        return location

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"path": self.path, "method": self.method, "field": self.field}


@dataclass(frozen=True)
class Violation:
    """A single non-conformance detected by a rule."""

    rule_id: str
    severity: RuleSeverity
    location: Location
    message: str
    suggestion: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "location": self.location.to_dict(),
            "message": self.message,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[{self.severity.value.upper()}] {self.rule_id} at {self.location}: {self.message}"


class Finding(NamedTuple):
    """Raw output of a check function, before it is attributed to a rule."""

    location: Location
    message: str
    suggestion: str = ""


CheckFn = Callable[["ApiDocument", "LintConfig"], Iterable[Finding]]


@dataclass(frozen=True)
class Rule:
    """A named, stateless check over an API description."""

    id: str  # e.g. "resource-naming"
    name: str
    severity: RuleSeverity
    category: RuleCategory
    description: str
    check_fn: CheckFn = field(repr=False, compare=False)

    def violation(self, finding: Finding) -> Violation:
        """Attribute a finding to this rule."""
        return Violation(
            rule_id=self.id,
            severity=self.severity,
            location=finding.location,
            message=finding.message,
            suggestion=finding.suggestion,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert rule to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "severity": self.severity.value,
            "category": self.category.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class Report:
    """Ordered result of evaluating all rules against one document."""

    source: str = ""
    violations: tuple[Violation, ...] = ()
    fail_threshold: RuleSeverity = RuleSeverity.ERROR

    @property
    def error_count(self) -> int:
        """Count of errors."""
        return sum(1 for v in self.violations if v.severity == RuleSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of warnings."""
        return sum(1 for v in self.violations if v.severity == RuleSeverity.WARNING)

    @property
    def info_count(self) -> int:
        """Count of info findings."""
        return sum(1 for v in self.violations if v.severity == RuleSeverity.INFO)

    @property
    def passed(self) -> bool:
        """Whether no violation reaches the failure threshold."""
        return not any(v.severity.at_least(self.fail_threshold) for v in self.violations)

    def by_rule(self, rule_id: str) -> list[Violation]:
        """Violations produced by one rule."""
        return [v for v in self.violations if v.rule_id == rule_id]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "passed": self.passed,
            "fail_threshold": self.fail_threshold.value,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "violations": [v.to_dict() for v in self.violations],
        }
