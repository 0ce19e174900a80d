import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from restlens_violations.flatten import flatten_violations
from restlens_violations.locator import locate as locate_key
from restlens_violations.models import Severity, ViolationKV
from restlens_violations.sniff import is_openapi_content, is_openapi_filename
from restlens_violations.summary import build_violation_summary

from .config import AnnotateConfig
from .converters import (
    flat_violation_to_annotation,
    load_violations_response,
    payload_to_key,
    response_to_violation_kvs,
    summary_to_report,
)
from .models import Annotation, KeyType, ViolationKeyPayload

app = typer.Typer(help="REST Lens Annotator - Map OpenAPI rule violations onto spec lines")

GITHUB_LEVELS = {Severity.ERROR: "error", Severity.WARNING: "warning", Severity.INFO: "notice"}


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    GITHUB = "github"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Map OpenAPI rule violations onto spec lines"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_spec(spec: Path) -> str:
    if not is_openapi_filename(spec.name):
        typer.echo(f"Warning: {spec} does not have a .yaml, .yml or .json extension", err=True)

    try:
        text = spec.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: cannot read {spec}: {e}", err=True)
        raise typer.Exit(code=2)

    if not is_openapi_content(text):
        typer.echo(f"Error: {spec} is not an OpenAPI 3.x document", err=True)
        raise typer.Exit(code=2)
    return text


def _read_violations(violations: Path) -> list[ViolationKV]:
    try:
        response = load_violations_response(violations.read_text(encoding="utf-8"))
        return response_to_violation_kvs(response)
    except OSError as e:
        typer.echo(f"Error: cannot read {violations}: {e}", err=True)
    except ValueError as e:
        typer.echo(f"Error: {violations}: {e}", err=True)
    raise typer.Exit(code=2)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def _github_command(a: Annotation) -> str:
    # Workflow commands use 1-based columns
    props = (
        f"file={_escape_property(a.file_path)},line={a.line_number},"
        f"col={a.column + 1},endColumn={a.end_column + 1},title={_escape_property(a.rule_name)}"
    )
    return f"::{GITHUB_LEVELS[a.severity]} {props}::{_escape_data(a.message)}"


@app.command()
def annotate(
    spec: Path = typer.Argument(..., help="OpenAPI spec file (YAML or JSON)"),
    violations: Path = typer.Argument(..., help="Saved violations response (JSON)"),
    output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", help="Output format"),
    config_file: Path = typer.Option(Path(".restlens.toml"), "--config", help="Path to config file"),
):
    """Print every violation with its line and column in the spec"""
    config = AnnotateConfig(config_file)
    text = _read_spec(spec)
    grouped = _read_violations(violations)

    flat = flatten_violations(grouped, text)
    reported = [v for v in flat if config.is_reported(v)]
    annotations = [flat_violation_to_annotation(v, str(spec)) for v in reported]

    if output_format == OutputFormat.JSON:
        report = {
            "annotations": [a.model_dump(mode="json") for a in annotations],
            "summary": summary_to_report(build_violation_summary(reported)).model_dump(mode="json"),
        }
        typer.echo(json.dumps(report, indent=2))
    elif output_format == OutputFormat.GITHUB:
        for a in annotations:
            typer.echo(_github_command(a))
    else:
        for a in sorted(annotations, key=lambda x: (x.line_number, x.column)):
            typer.echo(
                f"{a.severity.value.upper()}: {a.file_path}:{a.line_number}:{a.column} "
                f"[{a.rule_name}] - {a.message}"
            )
        typer.echo(f"\nTotal violations found: {len(flat)} ({len(reported)} reported)")

    if any(config.fails(v) for v in reported):
        raise typer.Exit(code=1)


@app.command()
def summary(
    spec: Path = typer.Argument(..., help="OpenAPI spec file (YAML or JSON)"),
    violations: Path = typer.Argument(..., help="Saved violations response (JSON)"),
    config_file: Path = typer.Option(Path(".restlens.toml"), "--config", help="Path to config file"),
):
    """Print violation counts by severity and by rule"""
    config = AnnotateConfig(config_file)
    text = _read_spec(spec)
    grouped = _read_violations(violations)

    reported = [v for v in flatten_violations(grouped, text) if config.is_reported(v)]
    result = build_violation_summary(reported)

    typer.echo(f"Total violations: {result.total_violations}")
    typer.echo(f"  errors: {result.error_count}  warnings: {result.warning_count}  info: {result.info_count}")
    if result.by_rule:
        typer.echo("")
        typer.echo(f"{'Count':>5}  {'Severity':<8}  Rule")
        for rule in result.by_rule:
            typer.echo(f"{rule.count:>5}  {rule.severity.value:<8}  {rule.rule_name}")


@app.command()
def locate(
    spec: Path = typer.Argument(..., help="OpenAPI spec file (YAML or JSON)"),
    key_type: KeyType = typer.Option(..., "--type", help="Violation key type"),
    operation_id: Optional[str] = typer.Option(None, help="operationId of the operation"),
    path: Optional[str] = typer.Option(None, help="Path template, e.g. /pets/{petId}"),
    schema_path: Optional[str] = typer.Option(None, help="Schema pointer, e.g. #/components/schemas/Pet"),
    http_code: Optional[str] = typer.Option(None, help="Response status code"),
    tag: Optional[str] = typer.Option(None, help="Tag name"),
    message: Optional[str] = typer.Option(None, help="Violation message, used to refine the match"),
):
    """Find the line and column for a single violation key"""
    text = _read_spec(spec)
    key = payload_to_key(
        ViolationKeyPayload(
            violation_key_type=key_type,
            operation_id=operation_id,
            path=path,
            schema_path=schema_path,
            http_code=http_code,
            tag=tag,
        )
    )

    position = locate_key(key, text, message)
    typer.echo(f"{position.line}:{position.column}-{position.end_column}")


if __name__ == "__main__":
    app()
