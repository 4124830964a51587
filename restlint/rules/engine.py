"""Rule engine for evaluating API descriptions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from restlint.config import LintConfig
from restlint.errors import ConfigError, StructuralError
from restlint.rules.schemas import Finding, Location, Report, Rule, RuleSeverity, Violation
from restlint.rules.validators import RULES, STRUCTURE_RULE_ID, get_rule
from restlint.spec.parser import DocumentParser
from restlint.spec.schemas import ApiDocument

logger = logging.getLogger(__name__)


class RuleEngine:
    """Engine for evaluating API descriptions against the guideline rules.

    The engine holds no per-run state: rules are plain functions and the
    configuration is immutable, so one engine may evaluate many documents,
    including from several threads at once.

    Violations in a report are ordered by location (document-level findings
    first, then paths and operations in source order) and then by rule
    registration order, which keeps output stable across runs.
    """

    def __init__(self, config: LintConfig | None = None) -> None:
        """Initialize the rule engine.

        Args:
            config: Lint configuration. Defaults are used when omitted.

        Raises:
            ConfigError: If the configuration disables an unknown rule.
        """
        self.config = config or LintConfig()

        unknown = sorted(r for r in self.config.disabled_rules if get_rule(r) is None)
        if unknown:
            raise ConfigError(f"Unknown rule id(s) in disabled_rules: {', '.join(unknown)}")

        self._rules = tuple(
            rule for rule in RULES
            if rule.id not in self.config.disabled_rules or rule.id == STRUCTURE_RULE_ID
        )

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Enabled rules in registration order."""
        return self._rules

    def evaluate(self, document: ApiDocument | Mapping[str, Any], source: str = "") -> Report:
        """Evaluate a document against all enabled rules.

        Args:
            document: Parsed document, or decoded JSON/YAML data to parse first.
            source: Name of the document for reporting, e.g. its file path.

        Returns:
            Report with violations in deterministic order.
        """
        if not isinstance(document, ApiDocument):
            try:
                document = ApiDocument.from_dict(document)
            except StructuralError as e:
                return self._structural_report(e, source)

        logger.debug("Evaluating %s against %d rules", source or "document", len(self._rules))

        ordered: list[tuple[tuple[int, int], int, Violation]] = []
        positions = _location_positions(document)

        for rule_index, rule in enumerate(self._rules):
            for violation in self._run_rule(rule, document):
                position = positions.get(
                    (violation.location.path, violation.location.method),
                    positions.get((violation.location.path, None), (-1, -1)),
                )
                ordered.append((position, rule_index, violation))

        # sort is stable, so emission order within a rule is preserved
        ordered.sort(key=lambda entry: (entry[0], entry[1]))

        return Report(
            source=source,
            violations=tuple(v for _, _, v in ordered),
            fail_threshold=self.config.min_severity_to_fail,
        )

    def evaluate_file(self, file_path: Path | str) -> Report:
        """Load a document from disk and evaluate it.

        Load and decoding failures are reported as a structural violation.
        """
        try:
            document = DocumentParser().load(file_path)
        except StructuralError as e:
            return self._structural_report(e, str(file_path))
        return self.evaluate(document, source=str(file_path))

    def _run_rule(self, rule: Rule, document: ApiDocument) -> list[Violation]:
        """Run one rule, converting a failure into a violation of that rule."""
        try:
            return [rule.violation(finding) for finding in rule.check_fn(document, self.config)]
        except Exception as e:
            logger.warning("Rule %s failed: %s", rule.id, e, exc_info=logger.isEnabledFor(logging.DEBUG))
            return [Violation(
                rule_id=rule.id,
                severity=RuleSeverity.ERROR,
                location=Location(),
                message=f"Rule evaluation failed: {type(e).__name__}: {e}",
            )]

    def _structural_report(self, error: StructuralError, source: str) -> Report:
        logger.info("Structural error in %s: %s", source or "document", error)
        rule = get_rule(STRUCTURE_RULE_ID)
        finding = Finding(Location(field=error.pointer or None), error.reason)
        return Report(
            source=source,
            violations=(rule.violation(finding),),
            fail_threshold=self.config.min_severity_to_fail,
        )


def _location_positions(document: ApiDocument) -> dict[tuple[str, str | None], tuple[int, int]]:
    """Map (path, method) locations to their position in the source document."""
    positions: dict[tuple[str, str | None], tuple[int, int]] = {("", None): (-1, -1)}
    for path_index, item in enumerate(document.paths):
        positions.setdefault((item.path, None), (path_index, -1))
        for op_index, operation in enumerate(item.operations):
            positions.setdefault((item.path, operation.method), (path_index, op_index))
    return positions
