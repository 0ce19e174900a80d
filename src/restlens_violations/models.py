from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Severity(str, Enum):
    """Violation severity levels reported by the rule engine"""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class OperationKey:
    """Violation on an operation, identified by operationId (path as fallback)"""

    operation_id: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class PathKey:
    path: str | None = None


@dataclass(frozen=True)
class SchemaKey:
    """Violation on a schema; schema_path is a slash-delimited pointer"""

    schema_path: str | None = None


@dataclass(frozen=True)
class HttpCodeKey:
    """Violation on a response status code, nested under an operation"""

    http_code: str | None = None
    operation_id: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class TagKey:
    tag: str | None = None


@dataclass(frozen=True)
class InfoKey:
    pass


@dataclass(frozen=True)
class SystemKey:
    """Document-wide violation with no location of its own"""


ViolationKey = Union[OperationKey, PathKey, SchemaKey, HttpCodeKey, TagKey, InfoKey, SystemKey]


@dataclass
class Violation:
    """One rule finding as reported by the evaluation service"""

    rule_id: int
    message: str
    severity: Severity | None = None
    rule_slug: str | None = None

    @property
    def effective_severity(self) -> Severity:
        return self.severity or Severity.WARNING

    @property
    def rule_name(self) -> str:
        return self.rule_slug or f"rule-{self.rule_id}"


@dataclass
class ViolationKV:
    """A violation key with all rule hits reported against it"""

    key: ViolationKey
    value: list[Violation] = field(default_factory=list)


@dataclass(frozen=True)
class LinePosition:
    """Location of a violation: 1-indexed line, 0-indexed columns"""

    line: int
    column: int
    end_column: int

    @classmethod
    def default(cls, lines: list[str]) -> "LinePosition":
        """Position used when nothing could be located: the whole first line"""
        return cls(line=1, column=0, end_column=len(lines[0]) if lines else 0)

    @classmethod
    def from_offset(cls, lines: list[str], offset: int, length: int) -> "LinePosition":
        """Convert a character offset into the text the lines were split from"""
        line = 0
        column = 0
        current = 0
        for i, text in enumerate(lines):
            line_length = len(text) + 1  # +1 for the removed newline
            if current + line_length > offset:
                line = i
                column = offset - current
                break
            current += line_length

        return cls(line=line + 1, column=column, end_column=column + length)


@dataclass
class FlatViolation:
    """A single rule finding resolved to a location in the source text"""

    key: ViolationKey
    position: LinePosition
    rule_id: int
    rule_name: str
    message: str
    severity: Severity

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column


@dataclass
class RuleCount:
    rule_id: int
    rule_name: str
    severity: Severity
    count: int = 0


@dataclass
class ViolationSummary:
    """Rollup of flattened violations by severity and by rule"""

    total_violations: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    by_rule: list[RuleCount] = field(default_factory=list)
