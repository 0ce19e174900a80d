import pytest
from restlens_violations.models import FlatViolation, LinePosition, Severity, SystemKey
from restlens_violations.summary import build_violation_summary


def make(rule_id: int, severity: Severity = Severity.WARNING, name: str | None = None) -> FlatViolation:
    return FlatViolation(
        key=SystemKey(),
        position=LinePosition(1, 0, 0),
        rule_id=rule_id,
        rule_name=name or f"rule-{rule_id}",
        message="m",
        severity=severity,
    )


def test_empty_summary():
    summary = build_violation_summary([])
    assert summary.total_violations == 0
    assert summary.by_rule == []


def test_counts_by_severity():
    flat = [
        make(1, Severity.ERROR),
        make(2, Severity.WARNING),
        make(2, Severity.WARNING),
        make(3, Severity.INFO),
    ]

    summary = build_violation_summary(flat)

    assert summary.total_violations == 4
    assert (summary.error_count, summary.warning_count, summary.info_count) == (1, 2, 1)


@pytest.mark.parametrize(
    "severities",
    [
        [],
        [Severity.ERROR] * 3,
        [Severity.INFO, Severity.WARNING, Severity.ERROR, Severity.INFO],
    ],
)
def test_counts_add_up(severities):
    flat = [make(i % 2, s) for i, s in enumerate(severities)]

    summary = build_violation_summary(flat)

    assert summary.error_count + summary.warning_count + summary.info_count == summary.total_violations
    assert sum(r.count for r in summary.by_rule) == summary.total_violations


def test_rules_sorted_by_count_with_stable_ties():
    flat = [make(1, name="rule-a")] * 2 + [make(2, name="rule-b")] * 5 + [make(3, name="rule-c")] * 2

    summary = build_violation_summary(flat)

    assert [(r.rule_name, r.count) for r in summary.by_rule] == [("rule-b", 5), ("rule-a", 2), ("rule-c", 2)]


def test_first_seen_name_and_severity_kept():
    flat = [make(1, Severity.ERROR, "first-name"), make(1, Severity.INFO, "second-name")]

    summary = build_violation_summary(flat)

    assert len(summary.by_rule) == 1
    rule = summary.by_rule[0]
    assert (rule.rule_name, rule.severity, rule.count) == ("first-name", Severity.ERROR, 2)
    assert summary.error_count == 1
    assert summary.info_count == 1
