from __future__ import annotations

"""Test framework adapter classification.

CONTRACT
- Inputs: free-form adapter name (any case, may be empty)
- Outputs:
  - TestFrameworkAdapter member (PHPUNIT, CODECEPTION or UNRECOGNIZED)
- Invariants:
  - Matching is case-insensitive and ignores surrounding whitespace
  - Unknown names never raise; they classify as UNRECOGNIZED
"""

from enum import Enum


class TestFrameworkAdapter(str, Enum):
    PHPUNIT = "phpunit"
    CODECEPTION = "codeception"
    UNRECOGNIZED = "unrecognized"

    # Keep pytest from collecting this enum.
    __test__ = False

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, "")


_DISPLAY_NAMES = {
    TestFrameworkAdapter.PHPUNIT: "PHPUnit",
    TestFrameworkAdapter.CODECEPTION: "Codeception",
}

_RECOGNIZED = {
    TestFrameworkAdapter.PHPUNIT.value: TestFrameworkAdapter.PHPUNIT,
    TestFrameworkAdapter.CODECEPTION.value: TestFrameworkAdapter.CODECEPTION,
}


def classify_adapter(name: str | None) -> TestFrameworkAdapter:
    return _RECOGNIZED.get((name or "").strip().lower(), TestFrameworkAdapter.UNRECOGNIZED)
