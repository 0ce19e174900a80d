import json

from restlens_violations.models import (
    FlatViolation,
    HttpCodeKey,
    InfoKey,
    OperationKey,
    PathKey,
    SchemaKey,
    SystemKey,
    TagKey,
    Violation,
    ViolationKey,
    ViolationKV,
    ViolationSummary,
)

from .models import (
    Annotation,
    KeyType,
    RuleCountReport,
    SummaryReport,
    ViolationKeyPayload,
    ViolationPayload,
    ViolationsResponse,
)


class ViolationFileError(ValueError):
    """A violations file that parsed but cannot be annotated"""


def load_violations_response(raw: str) -> ViolationsResponse:
    """Parse a saved violations response, or a bare list of key/value pairs"""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ViolationFileError(f"Invalid JSON in violations file: {e}") from e

    if isinstance(data, list):
        data = {"violations": data}
    response = ViolationsResponse.model_validate(data)

    if response.failed:
        detail = response.error or (response.evaluation and response.evaluation.message) or "no details"
        raise ViolationFileError(f"Evaluation did not complete ({response.effective_status}): {detail}")
    return response


def payload_to_key(payload: ViolationKeyPayload) -> ViolationKey:
    """Build the key variant for the tag, reading only the fields that tag uses"""
    key_type = payload.violation_key_type
    if key_type == KeyType.OPERATION_ID:
        return OperationKey(operation_id=payload.operation_id, path=payload.path)
    if key_type == KeyType.PATH:
        return PathKey(path=payload.path)
    if key_type == KeyType.SCHEMA_PATH:
        return SchemaKey(schema_path=payload.schema_path)
    if key_type == KeyType.HTTP_CODE:
        return HttpCodeKey(http_code=payload.http_code, operation_id=payload.operation_id, path=payload.path)
    if key_type == KeyType.TAG:
        return TagKey(tag=payload.tag)
    if key_type == KeyType.INFO:
        return InfoKey()
    if key_type == KeyType.SYSTEM:
        return SystemKey()
    raise ViolationFileError(f"Unsupported violation key type: {key_type}")


def payload_to_violation(payload: ViolationPayload, rule_slugs: dict[int, str] | None = None) -> Violation:
    slug = payload.rule_slug or (rule_slugs or {}).get(payload.rule_id)
    return Violation(
        rule_id=payload.rule_id,
        message=payload.message,
        severity=payload.severity,
        rule_slug=slug,
    )


def response_to_violation_kvs(response: ViolationsResponse) -> list[ViolationKV]:
    return [
        ViolationKV(
            key=payload_to_key(kv.key),
            value=[payload_to_violation(v, response.rule_id_to_slug) for v in kv.value],
        )
        for kv in response.violations
    ]


def flat_violation_to_annotation(violation: FlatViolation, file_path: str) -> Annotation:
    """Convert an internal dataclass record to an external Pydantic annotation"""
    return Annotation(
        severity=violation.severity,
        file_path=file_path,
        line_number=violation.position.line,
        column=violation.position.column,
        end_column=violation.position.end_column,
        rule_id=violation.rule_id,
        rule_name=violation.rule_name,
        message=violation.message,
    )


def summary_to_report(summary: ViolationSummary) -> SummaryReport:
    return SummaryReport(
        total_violations=summary.total_violations,
        error_count=summary.error_count,
        warning_count=summary.warning_count,
        info_count=summary.info_count,
        by_rule=[
            RuleCountReport(rule_id=r.rule_id, rule_name=r.rule_name, severity=r.severity, count=r.count)
            for r in summary.by_rule
        ],
    )
