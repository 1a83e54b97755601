"""covgate package.

Coverage precondition gate for mutation testing runs:

    from covgate import CoverageChecker, GateConfig

    checker = CoverageChecker(GateConfig.from_options(coverage_path="build/coverage"))
    checker.check_coverage_requirements()
    # ... run the initial test suite ...
    checker.check_coverage_has_been_generated(command_line, output)
"""

__version__ = "0.1.0"

from .adapters import TestFrameworkAdapter, classify_adapter
from .checker import CoverageChecker
from .config import GateConfig, load_gate_file
from .diagnostics import CoverageNotFound, Diagnostic, render_diagnostic
from .probe import CapabilityProbe, PhpRuntimeProbe, StaticProbe

__all__ = [
    "CapabilityProbe",
    "CoverageChecker",
    "CoverageNotFound",
    "Diagnostic",
    "GateConfig",
    "PhpRuntimeProbe",
    "StaticProbe",
    "TestFrameworkAdapter",
    "classify_adapter",
    "load_gate_file",
    "render_diagnostic",
]
