from __future__ import annotations

"""Coverage gate diagnostics.

CONTRACT
- Inputs: Diagnostic models built by the coverage checker
- Outputs:
  - render_diagnostic() returns the user-facing multi-line message
  - CoverageNotFound carries both the model and the rendered text
- Invariants:
  - All message wording lives here; the checker only decides *what* failed
  - Adapter hints are appended only for recognized adapters
  - Run evidence (command line, output) is embedded verbatim
- Failure:
  - Raises ValidationError when a Diagnostic is built with an unknown kind
"""

from typing import Literal

from pydantic import BaseModel, Field

from .adapters import TestFrameworkAdapter

ISSUE_TRACKER_URL = "https://github.com/infection/infection"

DiagnosticKind = Literal[
    "initial_tests_skipped",
    "no_coverage_driver",
    "missing_coverage_index",
    "missing_junit_report",
    "invalid_coverage",
]

NO_COVERAGE_DRIVER_MESSAGE = """\
Coverage needs to be generated but no code coverage generator (pcov, phpdbg or xdebug) has been detected. Please either:
- Enable pcov and run infection again
- Use phpdbg, e.g. `phpdbg -qrr infection`
- Enable Xdebug and run infection again
- Use the "--coverage" option with path to the existing coverage report
- Enable the code generator tool for the initial test run only, e.g. with `--initial-tests-php-options -d zend_extension=xdebug.so`"""

INVALID_COVERAGE_TEMPLATE = """\
The code coverage generated by the initial test run is invalid. Please report the issue on the
infection repository "{url}".

```
$ {command_line}
{output}
```

Issue(s):
{issues}"""


class Diagnostic(BaseModel):
    schema_version: int = 1
    kind: DiagnosticKind
    adapter: TestFrameworkAdapter = TestFrameworkAdapter.UNRECOGNIZED
    coverage_path: str = ""
    junit_configured: bool = False
    missing_path: str | None = None
    missing_paths: list[str] = Field(default_factory=list)
    command_line: str | None = None
    output: str | None = None


class CoverageNotFound(Exception):
    """Coverage requirements or artifacts are unmet; the pipeline must stop."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(render_diagnostic(diagnostic))
        self.diagnostic = diagnostic


def _missing_file_sentence(path: str, report: str) -> str:
    return (
        f'Could not find the file "{path}". Please ensure that the {report} coverage report '
        "has been properly generated at the right place."
    )


COVERAGE_INDEX_OPTIONS = {
    TestFrameworkAdapter.PHPUNIT: "--coverage-xml={coverage_path}/coverage-xml",
    TestFrameworkAdapter.CODECEPTION: "--coverage-phpunit={coverage_path}/coverage-xml",
}

JUNIT_OPTIONS = {
    TestFrameworkAdapter.PHPUNIT: "--log-junit={coverage_path}/junit.xml",
    TestFrameworkAdapter.CODECEPTION: "--xml",
}


def _adapter_hint(options: dict, adapter: TestFrameworkAdapter, coverage_path: str) -> str:
    option = options.get(adapter)
    if option is None:
        return ""
    return (
        f" The {adapter.display_name} option for the path given is "
        f'"{option.format(coverage_path=coverage_path)}"'
    )


def issue_line(path: str) -> str:
    return f'- The file "{path}" could not be found'


def render_diagnostic(diagnostic: Diagnostic) -> str:
    kind = diagnostic.kind

    if kind == "initial_tests_skipped":
        junit = "and JUnit coverage " if diagnostic.junit_configured else ""
        return (
            f"The initial test suite run is being skipped. The XML {junit}reports need to be "
            'provided with the "--coverage" option'
        )

    if kind == "no_coverage_driver":
        return NO_COVERAGE_DRIVER_MESSAGE

    if kind == "missing_coverage_index":
        return _missing_file_sentence(diagnostic.missing_path or "", "XML") + _adapter_hint(
            COVERAGE_INDEX_OPTIONS, diagnostic.adapter, diagnostic.coverage_path
        )

    if kind == "missing_junit_report":
        return _missing_file_sentence(diagnostic.missing_path or "", "JUnit") + _adapter_hint(
            JUNIT_OPTIONS, diagnostic.adapter, diagnostic.coverage_path
        )

    return INVALID_COVERAGE_TEMPLATE.format(
        url=ISSUE_TRACKER_URL,
        command_line=diagnostic.command_line or "",
        output=diagnostic.output or "",
        issues="\n".join(issue_line(p) for p in diagnostic.missing_paths),
    )
