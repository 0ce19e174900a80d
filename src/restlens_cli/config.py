import logging
import tomllib
from pathlib import Path

from restlens_violations.models import FlatViolation, Severity

logger = logging.getLogger(__name__)

SEVERITY_RANK = {Severity.INFO: 1, Severity.WARNING: 2, Severity.ERROR: 3}


class AnnotateConfig:
    """Handles loading of .restlens.toml configuration"""

    def __init__(self, config_path: Path | None = None):
        self.include_info_severity: bool = False
        self.ignore: list[str] = []
        self.fail_on: Severity = Severity.ERROR

        if config_path and config_path.exists():
            self._load_from_file(config_path)

    def _load_from_file(self, path: Path):
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            section = data.get("tool", {}).get("restlens", {})
            include_info = bool(section.get("include_info_severity", self.include_info_severity))
            ignore = [str(rule) for rule in section.get("ignore", self.ignore)]
            fail_on = Severity(str(section.get("fail_on", self.fail_on.value)).lower())
        except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            return

        self.include_info_severity = include_info
        self.ignore = ignore
        self.fail_on = fail_on

    def is_reported(self, violation: FlatViolation) -> bool:
        if violation.severity == Severity.INFO and not self.include_info_severity:
            return False
        return violation.rule_name not in self.ignore

    def fails(self, violation: FlatViolation) -> bool:
        """Should this finding make the run exit non-zero"""
        return SEVERITY_RANK[violation.severity] >= SEVERITY_RANK[self.fail_on]
