from __future__ import annotations

"""Coverage capability report.

CONTRACT
- Inputs: GateConfig, CapabilityProbe
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - One item per capability signal: SAPI, each coverage extension,
    xdebug-handler skip, PHP options request
  - Does not modify system state (read-only checks)
- Failure:
  - Returns DoctorReport with ok=False if coverage must be generated and
    no signal is present
"""

from dataclasses import dataclass

from .config import GateConfig
from .probe import COVERAGE_EXTENSIONS, CapabilityProbe, detect_coverage_signals


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


def doctor_report(config: GateConfig, probe: CapabilityProbe) -> DoctorReport:
    items: list[DoctorItem] = []
    signals = detect_coverage_signals(probe, config.initial_test_php_options)

    if signals.phpdbg:
        items.append(DoctorItem("php sapi", "OK", "phpdbg provides coverage"))
    else:
        items.append(DoctorItem("php sapi", "INFO", probe.sapi() or "unknown (php binary not usable?)"))

    for ext in sorted(COVERAGE_EXTENSIONS):
        if ext in signals.loaded_extensions:
            items.append(DoctorItem(ext, "OK", "extension loaded"))
        else:
            items.append(DoctorItem(ext, "INFO", "extension not loaded"))

    if signals.skipped_xdebug_version:
        items.append(
            DoctorItem("xdebug-handler", "OK", f"xdebug {signals.skipped_xdebug_version} skipped for this run")
        )
    else:
        items.append(DoctorItem("xdebug-handler", "INFO", "no skipped xdebug"))

    if signals.requested_extensions:
        items.append(
            DoctorItem("initial tests php options", "OK", f"loads {', '.join(signals.requested_extensions)}")
        )
    else:
        items.append(DoctorItem("initial tests php options", "INFO", "no coverage extension requested"))

    ok = True
    if config.skip_coverage:
        items.append(DoctorItem("coverage", "OK", f"existing report expected in {config.coverage_path}"))
    elif signals.any:
        items.append(DoctorItem("coverage", "OK", "coverage can be generated"))
    else:
        ok = False
        items.append(DoctorItem("coverage", "FAIL", "no code coverage generator (pcov, phpdbg or xdebug)"))

    return DoctorReport(ok=ok, items=items)
