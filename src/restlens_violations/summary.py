from typing import Sequence

from .models import FlatViolation, RuleCount, Severity, ViolationSummary


def build_violation_summary(violations: Sequence[FlatViolation]) -> ViolationSummary:
    """Count violations by severity and by rule, most frequent rule first"""
    summary = ViolationSummary(total_violations=len(violations))
    by_rule: dict[int, RuleCount] = {}

    for v in violations:
        if v.severity == Severity.ERROR:
            summary.error_count += 1
        elif v.severity == Severity.WARNING:
            summary.warning_count += 1
        else:
            summary.info_count += 1

        # The first name/severity seen for a rule id is the one reported
        entry = by_rule.setdefault(v.rule_id, RuleCount(v.rule_id, v.rule_name, v.severity))
        entry.count += 1

    # sorted() is stable, so rules with equal counts keep encounter order
    summary.by_rule = sorted(by_rule.values(), key=lambda r: r.count, reverse=True)
    return summary
