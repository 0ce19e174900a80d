"""
REST Lens violations - locate rule-engine findings in OpenAPI documents

This package provides:
- Locating a violation key in raw JSON/YAML spec text
- Flattening grouped violations into one located record per finding
- Summaries by severity and by rule
"""

__version__ = "0.1.0"

from .flatten import flatten_violations
from .locator import ViolationLocator, locate
from .models import (
    FlatViolation,
    HttpCodeKey,
    InfoKey,
    LinePosition,
    OperationKey,
    PathKey,
    RuleCount,
    SchemaKey,
    Severity,
    SystemKey,
    TagKey,
    Violation,
    ViolationKey,
    ViolationKV,
    ViolationSummary,
)
from .summary import build_violation_summary

__all__ = [
    "locate",
    "ViolationLocator",
    "flatten_violations",
    "build_violation_summary",
    "Severity",
    "OperationKey",
    "PathKey",
    "SchemaKey",
    "HttpCodeKey",
    "TagKey",
    "InfoKey",
    "SystemKey",
    "ViolationKey",
    "Violation",
    "ViolationKV",
    "LinePosition",
    "FlatViolation",
    "RuleCount",
    "ViolationSummary",
]
