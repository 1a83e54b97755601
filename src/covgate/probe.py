from __future__ import annotations

"""Coverage capability probes.

CONTRACT
- Inputs: PHP binary name/path (real probe) or fixed answers (static probe)
- Outputs (required):
  - sapi(): PHP server API name ("cli", "phpdbg", ...)
  - loaded_extensions(): lower-cased names of loaded PHP modules
  - skipped_xdebug_version(): version xdebug-handler disabled, or ""
- Invariants:
  - Read-only: never changes the environment or the filesystem
  - PhpRuntimeProbe runs each PHP query at most once per instance
- Failure:
  - A missing or failing PHP binary yields "no capability" (empty answers)
    and a warning, never an exception
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from loguru import logger

from .util.shell import run_cmd, which

PHPDBG_SAPI = "phpdbg"
COVERAGE_EXTENSIONS = frozenset({"xdebug", "pcov"})

# composer/xdebug-handler exports its restart settings to child processes as
# tmpIni|scanned|scanDir|phprc|inis|skipped; skipped is the Xdebug version it
# switched off. inis itself is joined with os.pathsep.
XDEBUG_HANDLER_SETTINGS_ENV = "XDEBUG_HANDLER_SETTINGS"
XDEBUG_HANDLER_SETTINGS_FIELDS = 6

XDEBUG_IN_PHP_OPTIONS_RE = re.compile(r"(zend_extension\s*=.*xdebug.*)", re.IGNORECASE | re.MULTILINE)
PCOV_IN_PHP_OPTIONS_RE = re.compile(r"(extension\s*=.*pcov.*)", re.IGNORECASE | re.MULTILINE)

PHP_OPTIONS_MATCHERS: dict[str, re.Pattern] = {
    "xdebug": XDEBUG_IN_PHP_OPTIONS_RE,
    "pcov": PCOV_IN_PHP_OPTIONS_RE,
}

PROBE_TIMEOUT_S = 15


class CapabilityProbe(Protocol):
    def sapi(self) -> str: ...

    def loaded_extensions(self) -> frozenset[str]: ...

    def skipped_xdebug_version(self) -> str: ...


def php_options_request(php_options: str) -> list[str]:
    """Names of coverage extensions the PHP options ask to load."""
    return [name for name, rx in PHP_OPTIONS_MATCHERS.items() if rx.search(php_options)]


def skipped_version_from_env(env: Mapping[str, str]) -> str:
    fields = env.get(XDEBUG_HANDLER_SETTINGS_ENV, "").split("|")
    if len(fields) != XDEBUG_HANDLER_SETTINGS_FIELDS:
        return ""
    return fields[-1].strip()


@dataclass(frozen=True)
class CoverageSignals:
    """Every coverage capability signal found for one gate configuration."""

    phpdbg: bool
    loaded_extensions: frozenset[str]
    skipped_xdebug_version: str
    requested_extensions: tuple[str, ...]

    @property
    def any(self) -> bool:
        return bool(
            self.phpdbg
            or self.loaded_extensions
            or self.skipped_xdebug_version
            or self.requested_extensions
        )


def detect_coverage_signals(probe: CapabilityProbe, php_options: str) -> CoverageSignals:
    return CoverageSignals(
        phpdbg=probe.sapi() == PHPDBG_SAPI,
        loaded_extensions=probe.loaded_extensions() & COVERAGE_EXTENSIONS,
        skipped_xdebug_version=probe.skipped_xdebug_version(),
        requested_extensions=tuple(php_options_request(php_options)),
    )


class PhpRuntimeProbe:
    """Asks a real PHP binary about its SAPI and loaded modules."""

    def __init__(self, php_binary: str = "php", env: Mapping[str, str] | None = None):
        self.php_binary = php_binary
        self._env = env
        self._sapi: str | None = None
        self._extensions: frozenset[str] | None = None

    def _resolve(self) -> str | None:
        resolved = which(self.php_binary)
        if resolved is None:
            logger.warning(f"PHP binary {self.php_binary!r} not found; assuming no coverage driver.")
        return resolved

    def sapi(self) -> str:
        if self._sapi is not None:
            return self._sapi

        if Path(self.php_binary).name.startswith(PHPDBG_SAPI):
            self._sapi = PHPDBG_SAPI
            return self._sapi

        self._sapi = ""
        binary = self._resolve()
        if binary:
            res = run_cmd([binary, "-r", "echo PHP_SAPI;"], timeout_s=PROBE_TIMEOUT_S)
            if res.ok:
                self._sapi = res.stdout.strip().lower()
            else:
                logger.warning(f"Could not read PHP_SAPI from {binary} (rc={res.returncode}).")
        logger.debug(f"PHP SAPI: {self._sapi or '(unknown)'}")
        return self._sapi

    def loaded_extensions(self) -> frozenset[str]:
        if self._extensions is not None:
            return self._extensions

        self._extensions = frozenset()
        binary = self._resolve()
        if binary:
            res = run_cmd([binary, "-m"], timeout_s=PROBE_TIMEOUT_S)
            if res.ok:
                self._extensions = parse_module_list(res.stdout)
            else:
                logger.warning(f"Could not list PHP modules from {binary} (rc={res.returncode}).")
        logger.debug(f"Loaded PHP modules: {sorted(self._extensions)}")
        return self._extensions

    def skipped_xdebug_version(self) -> str:
        return skipped_version_from_env(os.environ if self._env is None else self._env)


def parse_module_list(output: str) -> frozenset[str]:
    """Parse `php -m` output, skipping "[PHP Modules]"-style section headers."""
    names = set()
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("["):
            continue
        names.add(line.lower())
    return frozenset(names)


@dataclass(frozen=True)
class StaticProbe:
    """Probe with fixed answers, for tests and embedding callers."""

    sapi_name: str = "cli"
    extensions: frozenset[str] = frozenset()
    skipped_version: str = ""

    def sapi(self) -> str:
        return self.sapi_name

    def loaded_extensions(self) -> frozenset[str]:
        return frozenset(e.lower() for e in self.extensions)

    def skipped_xdebug_version(self) -> str:
        return self.skipped_version


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Probe a PHP binary for coverage drivers")
    parser.add_argument("--php", default="php", help="PHP binary")
    args = parser.parse_args()

    probe = PhpRuntimeProbe(args.php)
    print(f"SAPI: {probe.sapi()}")
    print(f"Coverage extensions: {sorted(probe.loaded_extensions() & COVERAGE_EXTENSIONS)}")
    print(f"Skipped xdebug version: {probe.skipped_xdebug_version() or '-'}")
