"""CLI entrypoint.

Gate checks, in pipeline order:
- covgate requirements
- covgate exists
- covgate generated --command-line ... --output-file ...

Utilities:
- covgate doctor

CONTRACT
- Inputs: Command line arguments (parsed by Typer), optional covgate.yaml
- Outputs (required):
  - Exit code 0 when the check passes
  - Exit code 2 with the diagnostic on stderr when coverage is unusable
  - Exit code 1 on an invalid gate file or unusable options
- Invariants:
  - CLI options override gate file values
  - Checks themselves are delegated to CoverageChecker
- Failure:
  - CoverageNotFound is caught here and only here
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .checker import CoverageChecker
from .config import DEFAULT_GATE_FILE, GateConfig, load_gate_file
from .diagnostics import CoverageNotFound
from .doctor import doctor_report
from .probe import PhpRuntimeProbe
from .util.paths import ensure_dir

app = typer.Typer(add_completion=False, help="Coverage precondition gate for mutation testing runs.")

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool):
    if value:
        console.print(f"covgate version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


_GATE_FILE_OPTION = typer.Option(
    None,
    "--gate-file",
    help=f"Gate YAML file (default: ./{DEFAULT_GATE_FILE} if present).",
)
_COVERAGE_OPTION = typer.Option(
    None,
    "--coverage",
    help="Existing coverage directory; implies --skip-coverage.",
)
_COVERAGE_DIR_OPTION = typer.Option(
    None,
    "--coverage-dir",
    help="Directory the initial run writes coverage to.",
)
_JUNIT_OPTION = typer.Option(
    None,
    "--junit",
    help="JUnit XML report path.",
)
_DEFAULT_JUNIT_OPTION = typer.Option(
    False,
    "--default-junit",
    help="Expect <coverage>/junit.xml for PHPUnit.",
)
_SKIP_INITIAL_TESTS_OPTION = typer.Option(
    False,
    "--skip-initial-tests",
    help="The initial test run is skipped.",
)
_PHP_OPTIONS_OPTION = typer.Option(
    None,
    "--initial-tests-php-options",
    help="PHP options for the initial test run.",
)
_TEST_FRAMEWORK_OPTION = typer.Option(
    None,
    "--test-framework",
    help="Test framework adapter (phpunit, codeception, ...).",
)
_PHP_OPTION = typer.Option(
    "php",
    "--php",
    help="PHP binary to probe.",
)
_REPORT_OPTION = typer.Option(
    None,
    "--report",
    help="Write the diagnostic as JSON here on failure.",
)


def _usage_error(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    raise typer.Exit(code=1)


def _build_config(
    gate_file: Path | None,
    coverage: str | None,
    coverage_dir: str | None,
    junit: str | None,
    default_junit: bool,
    skip_initial_tests: bool,
    php_options: str | None,
    test_framework: str | None,
) -> GateConfig:
    overrides = {
        "skip_coverage": True if coverage else None,
        "coverage_path": coverage or coverage_dir,
        "junit_path": junit,
        "default_junit": True if default_junit else None,
        "skip_initial_tests": True if skip_initial_tests else None,
        "initial_test_php_options": php_options,
        "test_framework": test_framework,
    }
    if gate_file is None and Path(DEFAULT_GATE_FILE).is_file():
        gate_file = Path(DEFAULT_GATE_FILE)
    try:
        if gate_file is not None:
            if not gate_file.is_file():
                raise ValueError(f"Gate file not found: {gate_file}")
            return load_gate_file(gate_file, **overrides)
        return GateConfig.from_options(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        _usage_error(str(e))


def _run_check(check: Callable[[], None], report: Path | None) -> None:
    try:
        check()
    except CoverageNotFound as e:
        err_console.print(str(e), markup=False, highlight=False, emoji=False, soft_wrap=True)
        if report is not None:
            ensure_dir(report.parent)
            report.write_text(
                json.dumps(e.diagnostic.model_dump(mode="json"), indent=2) + "\n", encoding="utf-8"
            )
        raise typer.Exit(code=2) from e
    console.print("[green]OK[/green]")


@app.command()
def requirements(
    gate_file: Path | None = _GATE_FILE_OPTION,
    coverage: str | None = _COVERAGE_OPTION,
    coverage_dir: str | None = _COVERAGE_DIR_OPTION,
    junit: str | None = _JUNIT_OPTION,
    default_junit: bool = _DEFAULT_JUNIT_OPTION,
    skip_initial_tests: bool = _SKIP_INITIAL_TESTS_OPTION,
    php_options: str | None = _PHP_OPTIONS_OPTION,
    test_framework: str | None = _TEST_FRAMEWORK_OPTION,
    php: str = _PHP_OPTION,
    report: Path | None = _REPORT_OPTION,
) -> None:
    """Check that the options allow obtaining coverage at all."""
    cfg = _build_config(
        gate_file, coverage, coverage_dir, junit, default_junit, skip_initial_tests, php_options, test_framework
    )
    checker = CoverageChecker(cfg, PhpRuntimeProbe(php))
    _run_check(checker.check_coverage_requirements, report)


@app.command()
def exists(
    gate_file: Path | None = _GATE_FILE_OPTION,
    coverage: str | None = _COVERAGE_OPTION,
    coverage_dir: str | None = _COVERAGE_DIR_OPTION,
    junit: str | None = _JUNIT_OPTION,
    default_junit: bool = _DEFAULT_JUNIT_OPTION,
    test_framework: str | None = _TEST_FRAMEWORK_OPTION,
    report: Path | None = _REPORT_OPTION,
) -> None:
    """Check that an existing coverage report is in place."""
    cfg = _build_config(gate_file, coverage, coverage_dir, junit, default_junit, False, None, test_framework)
    checker = CoverageChecker(cfg)
    _run_check(checker.check_coverage_exists, report)


@app.command()
def generated(
    command_line: str = typer.Option(..., "--command-line", help="Command line of the initial test run."),
    output: str | None = typer.Option(None, "--output", help="Captured output of the initial test run."),
    output_file: Path | None = typer.Option(None, "--output-file", help="File holding the captured output."),
    gate_file: Path | None = _GATE_FILE_OPTION,
    coverage_dir: str | None = _COVERAGE_DIR_OPTION,
    junit: str | None = _JUNIT_OPTION,
    default_junit: bool = _DEFAULT_JUNIT_OPTION,
    test_framework: str | None = _TEST_FRAMEWORK_OPTION,
    report: Path | None = _REPORT_OPTION,
) -> None:
    """Check that the initial test run produced its coverage artifacts."""
    if output is not None and output_file is not None:
        _usage_error("Use either --output or --output-file, not both.")
    if output_file is not None:
        if not output_file.is_file():
            _usage_error(f"Output file not found: {output_file}")
        output = output_file.read_text(encoding="utf-8", errors="replace")

    cfg = _build_config(gate_file, None, coverage_dir, junit, default_junit, False, None, test_framework)
    checker = CoverageChecker(cfg)
    _run_check(lambda: checker.check_coverage_has_been_generated(command_line, output or ""), report)


@app.command()
def doctor(
    gate_file: Path | None = _GATE_FILE_OPTION,
    coverage: str | None = _COVERAGE_OPTION,
    php_options: str | None = _PHP_OPTIONS_OPTION,
    php: str = _PHP_OPTION,
) -> None:
    """Show every coverage capability signal."""
    cfg = _build_config(gate_file, coverage, None, None, False, False, php_options, None)
    report = doctor_report(cfg, PhpRuntimeProbe(php))
    table = Table(title="covgate doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)

