from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from restlens_violations.models import Severity


class KeyType(str, Enum):
    OPERATION_ID = "operation_id"
    PATH = "path"
    SCHEMA_PATH = "schema_path"
    HTTP_CODE = "http_code"
    TAG = "tag"
    INFO = "info"
    SYSTEM = "system"


class EvaluationStatus(str, Enum):
    READY = "ready"
    EVALUATING = "evaluating"
    ERROR = "error"
    PARTIAL = "partial"
    STALE = "stale"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


class ViolationKeyPayload(BaseModel):
    """Violation key as sent by the evaluation service"""

    violation_key_type: KeyType
    operation_id: Optional[str] = None
    path: Optional[str] = None
    schema_path: Optional[str] = None
    http_code: Optional[str] = None
    tag: Optional[str] = None

    @field_validator("http_code", mode="before")
    @classmethod
    def _code_as_string(cls, value):
        return str(value) if isinstance(value, int) else value


class ViolationPayload(BaseModel):
    rule_id: int
    message: str
    severity: Optional[Severity] = None
    rule_slug: Optional[str] = None


class ViolationKVPayload(BaseModel):
    key: ViolationKeyPayload
    value: List[ViolationPayload] = Field(default_factory=list)


class EvaluationInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: EvaluationStatus
    spec_id: Optional[str] = Field(None, alias="specId")
    message: Optional[str] = None
    category: Optional[str] = None
    stale_rules_count: Optional[int] = Field(None, alias="staleRulesCount")


class ViolationsResponse(BaseModel):
    """Saved response of the violations endpoint"""

    model_config = ConfigDict(populate_by_name=True)

    evaluation: Optional[EvaluationInfo] = None
    status: Optional[EvaluationStatus] = None
    violations: List[ViolationKVPayload] = Field(default_factory=list)
    rule_id_to_slug: Dict[int, str] = Field(default_factory=dict, alias="ruleIdToSlug")
    billing_warning: Optional[str] = Field(None, alias="billingWarning")
    error: Optional[str] = None
    total_violations: Optional[int] = Field(None, alias="totalViolations")

    @property
    def effective_status(self) -> Optional[EvaluationStatus]:
        if self.evaluation is not None:
            return self.evaluation.status
        return self.status

    @property
    def failed(self) -> bool:
        return bool(self.error) or self.effective_status in (EvaluationStatus.ERROR, EvaluationStatus.FAILED)


class Annotation(BaseModel):
    """One located finding, as printed or exported"""

    severity: Severity
    file_path: str
    line_number: int
    column: int
    end_column: int
    rule_id: int
    rule_name: str
    message: str


class RuleCountReport(BaseModel):
    rule_id: int
    rule_name: str
    severity: Severity
    count: int


class SummaryReport(BaseModel):
    total_violations: int
    error_count: int
    warning_count: int
    info_count: int
    by_rule: List[RuleCountReport] = Field(default_factory=list)
