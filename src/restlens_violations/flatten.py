from typing import Iterable

from .locator import ViolationLocator
from .models import FlatViolation, ViolationKV


def flatten_violations(violations: Iterable[ViolationKV], text: str) -> list[FlatViolation]:
    """Convert grouped violations to one located record per rule finding.

    Each finding is located with its own message, since the message can
    change which fallback the locator takes for a shared key.
    """
    locator = ViolationLocator(text)
    result = []

    for kv in violations:
        for violation in kv.value:
            result.append(
                FlatViolation(
                    key=kv.key,
                    position=locator.locate(kv.key, violation.message),
                    rule_id=violation.rule_id,
                    rule_name=violation.rule_name,
                    message=violation.message,
                    severity=violation.effective_severity,
                )
            )

    return result
