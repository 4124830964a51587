"""Rule catalog and result types.

The engine lives in ``restlint.rules.engine``; it is not re-exported here
because it depends on ``restlint.config``, which itself imports the rule types.
"""

from restlint.rules.schemas import (
    Finding,
    Location,
    Report,
    Rule,
    RuleCategory,
    RuleSeverity,
    Violation,
)
from restlint.rules.validators import RULES, STRUCTURE_RULE_ID, get_rule

__all__ = [
    "Finding",
    "Location",
    "RULES",
    "Report",
    "Rule",
    "RuleCategory",
    "RuleSeverity",
    "STRUCTURE_RULE_ID",
    "Violation",
    "get_rule",
]
