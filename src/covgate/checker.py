from __future__ import annotations

"""Coverage precondition gate.

CONTRACT
- Inputs: GateConfig (immutable), CapabilityProbe
- Outputs (required):
  - check_coverage_requirements(): None, or raises before any test run
  - check_coverage_exists(): None, or raises on the first missing artifact
  - check_coverage_has_been_generated(cmd, output): None, or raises once
    with every missing artifact plus the run evidence
- Invariants:
  - Checks are read-only and idempotent (filesystem stats + regex only)
  - Adapter name only affects message wording
- Failure:
  - Raises CoverageNotFound (the only error kind); never recovers locally
"""

from pathlib import Path

from loguru import logger

from .config import GateConfig
from .diagnostics import CoverageNotFound, Diagnostic
from .probe import CapabilityProbe, PhpRuntimeProbe, detect_coverage_signals
from .util.paths import coverage_index_path


class CoverageChecker:
    def __init__(self, config: GateConfig, probe: CapabilityProbe | None = None):
        self.config = config
        self.probe = probe if probe is not None else PhpRuntimeProbe()

    @property
    def coverage_index_file_path(self) -> str:
        return coverage_index_path(self.config.coverage_path)

    def _diagnostic(self, kind: str, **fields) -> Diagnostic:
        return Diagnostic(
            kind=kind,
            adapter=self.config.adapter,
            coverage_path=self.config.coverage_path,
            junit_configured=self.config.junit_path is not None,
            **fields,
        )

    def check_coverage_requirements(self) -> None:
        cfg = self.config
        if cfg.skip_initial_tests and not cfg.skip_coverage:
            raise CoverageNotFound(self._diagnostic("initial_tests_skipped"))

        if not cfg.skip_coverage and not self.has_coverage_generator_enabled():
            raise CoverageNotFound(self._diagnostic("no_coverage_driver"))

        logger.debug("Coverage requirements satisfied.")

    def check_coverage_exists(self) -> None:
        index = self.coverage_index_file_path
        if not Path(index).exists():
            raise CoverageNotFound(self._diagnostic("missing_coverage_index", missing_path=index))

        junit = self.config.junit_path
        if junit is not None and not Path(junit).exists():
            raise CoverageNotFound(self._diagnostic("missing_junit_report", missing_path=junit))

        logger.debug(f"Coverage artifacts present under {self.config.coverage_path}.")

    def missing_artifacts(self) -> list[str]:
        missing: list[str] = []
        index = self.coverage_index_file_path
        if not Path(index).exists():
            missing.append(index)

        junit = self.config.junit_path
        if junit is not None and not Path(junit).exists():
            missing.append(junit)
        return missing

    def check_coverage_has_been_generated(
        self, initial_test_suite_command_line: str, initial_test_suite_output: str
    ) -> None:
        missing = self.missing_artifacts()
        if not missing:
            logger.debug("Initial test run produced all coverage artifacts.")
            return

        logger.debug(f"Initial test run is missing {len(missing)} artifact(s).")
        raise CoverageNotFound(
            self._diagnostic(
                "invalid_coverage",
                missing_paths=missing,
                command_line=initial_test_suite_command_line,
                output=initial_test_suite_output,
            )
        )

    def has_coverage_generator_enabled(self) -> bool:
        signals = detect_coverage_signals(self.probe, self.config.initial_test_php_options)
        logger.debug(f"Coverage signals: {signals}")
        return signals.any
