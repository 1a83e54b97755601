from __future__ import annotations

"""Configuration models.

CONTRACT
- Inputs: YAML gate file path (covgate.yaml) or explicit options
- Outputs (required):
  - Validated, immutable GateConfig
- Invariants:
  - Adapter name is stored lower-cased
  - Coverage path defaults to `.covgate/coverage`
  - JUnit path stays None unless given (or defaulted on request for PHPUnit)
- Failure:
  - Raises ValueError on invalid YAML or schema
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .adapters import TestFrameworkAdapter, classify_adapter

DEFAULT_COVERAGE_PATH = ".covgate/coverage"
DEFAULT_GATE_FILE = "covgate.yaml"


@dataclass(frozen=True)
class GateConfig:
    skip_coverage: bool
    skip_initial_tests: bool
    initial_test_php_options: str
    coverage_path: str
    junit_path: str | None
    test_framework_adapter_name: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "test_framework_adapter_name", self.test_framework_adapter_name.lower()
        )

    @property
    def adapter(self) -> TestFrameworkAdapter:
        return classify_adapter(self.test_framework_adapter_name)

    @classmethod
    def from_options(
        cls,
        *,
        skip_coverage: bool = False,
        skip_initial_tests: bool = False,
        initial_test_php_options: str = "",
        coverage_path: str | None = None,
        junit_path: str | None = None,
        test_framework: str = "phpunit",
        default_junit: bool = False,
    ) -> "GateConfig":
        coverage_path = coverage_path or DEFAULT_COVERAGE_PATH
        if (
            junit_path is None
            and default_junit
            and classify_adapter(test_framework) is TestFrameworkAdapter.PHPUNIT
        ):
            junit_path = f"{coverage_path}/junit.xml"
        return cls(
            skip_coverage=skip_coverage,
            skip_initial_tests=skip_initial_tests,
            initial_test_php_options=initial_test_php_options,
            coverage_path=coverage_path,
            junit_path=junit_path,
            test_framework_adapter_name=test_framework,
        )


GATE_SCHEMA = {
    "type": "object",
    "properties": {
        "skip_coverage": {"type": "boolean"},
        "skip_initial_tests": {"type": "boolean"},
        "initial_tests_php_options": {"type": "string"},
        "coverage_dir": {"type": "string", "minLength": 1},
        "junit": {"type": ["string", "null"]},
        "default_junit": {"type": "boolean"},
        "test_framework": {"type": "string"},
    },
    "additionalProperties": False,
}


def read_gate_file(path: Path) -> dict[str, Any]:
    import jsonschema  # lazy import

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid gate file YAML: {e}") from e
    try:
        jsonschema.validate(instance=data, schema=GATE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid gate file schema: {e.message}") from e
    return data


def load_gate_file(path: Path, **overrides: Any) -> GateConfig:
    """Build a GateConfig from a gate file; non-None overrides win."""
    data = read_gate_file(path)
    options: dict[str, Any] = {
        "skip_coverage": bool(data.get("skip_coverage", False)),
        "skip_initial_tests": bool(data.get("skip_initial_tests", False)),
        "initial_test_php_options": str(data.get("initial_tests_php_options", "")),
        "coverage_path": data.get("coverage_dir"),
        "junit_path": data.get("junit"),
        "test_framework": str(data.get("test_framework", "phpunit")),
        "default_junit": bool(data.get("default_junit", False)),
    }
    options.update({k: v for k, v in overrides.items() if v is not None})
    return GateConfig.from_options(**options)


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Gate config loader")
    parser.add_argument("--gate-file", default=DEFAULT_GATE_FILE, help="Path to covgate.yaml")
    args = parser.parse_args()

    try:
        print(load_gate_file(Path(args.gate_file)))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
