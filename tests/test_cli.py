import json

import pytest
from conftest import PETSTORE_YAML, line_of
from restlens_cli.main import app
from typer.testing import CliRunner

runner = CliRunner()

VIOLATIONS = {
    "evaluation": {"status": "ready", "specId": "spec-1"},
    "violations": [
        {
            "key": {"violation_key_type": "operation_id", "operation_id": "getPet"},
            "value": [
                {"rule_id": 12, "message": "Operation is missing a summary", "severity": "error"},
                {"rule_id": 13, "message": "Operation is missing a description"},
            ],
        },
        {
            "key": {"violation_key_type": "path", "path": "/store-orders"},
            "value": [{"rule_id": 20, "message": "Path contains an underscore", "rule_slug": "no-underscores"}],
        },
        {
            "key": {"violation_key_type": "system"},
            "value": [{"rule_id": 99, "message": "No servers defined", "severity": "info"}],
        },
    ],
    "ruleIdToSlug": {"12": "op-summary"},
}

GET_PET_LINE = line_of(PETSTORE_YAML, "operationId: getPet")


@pytest.fixture
def files(tmp_path):
    spec = tmp_path / "api.yaml"
    spec.write_text(PETSTORE_YAML, encoding="utf-8")
    violations = tmp_path / "violations.json"
    violations.write_text(json.dumps(VIOLATIONS), encoding="utf-8")
    return spec, violations


def test_cli_annotate_help():
    result = runner.invoke(app, ["annotate", "--help"])
    assert result.exit_code == 0
    assert "Print every violation" in result.stdout


def test_cli_annotate_text(files, tmp_path):
    spec, violations = files

    result = runner.invoke(app, ["annotate", str(spec), str(violations), "--config", str(tmp_path / "none.toml")])

    assert result.exit_code == 1  # Exit code 1 because of ERROR
    assert f"ERROR: {spec}:{GET_PET_LINE}:6 [op-summary] - Operation is missing a summary" in result.stdout
    assert f"WARNING: {spec}:{GET_PET_LINE}:6 [rule-13]" in result.stdout
    assert "[no-underscores]" in result.stdout
    assert "No servers defined" not in result.stdout
    assert "Total violations found: 4 (3 reported)" in result.stdout


def test_cli_annotate_github(files):
    spec, violations = files

    result = runner.invoke(app, ["annotate", str(spec), str(violations), "--format", "github"])

    assert result.exit_code == 1
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 3
    assert lines[0].startswith(f"::error file={spec},")
    assert lines[0].endswith(f"line={GET_PET_LINE},col=7,endColumn=26,title=op-summary::Operation is missing a summary")
    assert lines[1].startswith("::warning ")


def test_cli_annotate_json_with_config(files, tmp_path):
    spec, violations = files
    config = tmp_path / ".restlens.toml"
    config.write_text('[tool.restlens]\ninclude_info_severity = true\nfail_on = "warning"\n', encoding="utf-8")

    result = runner.invoke(app, ["annotate", str(spec), str(violations), "--format", "json", "--config", str(config)])

    assert result.exit_code == 1
    report = json.loads(result.stdout)
    assert len(report["annotations"]) == 4
    underscore = report["annotations"][2]
    assert underscore["line_number"] == line_of(PETSTORE_YAML, "/store_orders:")
    assert underscore["column"] == 2
    assert report["summary"]["total_violations"] == 4
    assert report["summary"]["info_count"] == 1


def test_cli_annotate_passes_without_errors(tmp_path):
    spec = tmp_path / "api.yaml"
    spec.write_text(PETSTORE_YAML, encoding="utf-8")
    violations = tmp_path / "violations.json"
    violations.write_text(json.dumps([{"key": {"violation_key_type": "info"}, "value": [{"rule_id": 1, "message": "No contact"}]}]))

    result = runner.invoke(app, ["annotate", str(spec), str(violations)])

    assert result.exit_code == 0
    assert f"WARNING: {spec}:2:0 [rule-1] - No contact" in result.stdout


def test_cli_summary(files):
    spec, violations = files

    result = runner.invoke(app, ["summary", str(spec), str(violations)])

    assert result.exit_code == 0
    assert "Total violations: 3" in result.stdout
    assert "errors: 1  warnings: 2  info: 0" in result.stdout
    assert "op-summary" in result.stdout


def test_cli_locate(files):
    spec, _ = files

    result = runner.invoke(app, ["locate", str(spec), "--type", "operation_id", "--operation-id", "getPet"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"{GET_PET_LINE}:6-25"


def test_cli_locate_schema_property(files):
    spec, _ = files

    result = runner.invoke(
        app,
        [
            "--verbose",
            "locate",
            str(spec),
            "--type",
            "schema_path",
            "--schema-path",
            "#/components/schemas/Pet",
            "--message",
            "Schema property 'status' should be an enum",
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.strip().startswith(f"{line_of(PETSTORE_YAML, '        status:')}:")


def test_cli_rejects_non_openapi(tmp_path):
    spec = tmp_path / "notes.yaml"
    spec.write_text("hello: world\n", encoding="utf-8")

    result = runner.invoke(app, ["locate", str(spec), "--type", "info"])

    assert result.exit_code == 2
    assert "not an OpenAPI 3.x document" in result.output


def test_cli_bad_violations_file(files):
    spec, violations = files
    violations.write_text('{"error": "quota exceeded"}', encoding="utf-8")

    result = runner.invoke(app, ["annotate", str(spec), str(violations)])

    assert result.exit_code == 2
    assert "quota exceeded" in result.output


def test_cli_missing_violations_file(files, tmp_path):
    spec, _ = files

    result = runner.invoke(app, ["annotate", str(spec), str(tmp_path / "nope.json")])

    assert result.exit_code == 2
