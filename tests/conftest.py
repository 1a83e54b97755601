import pytest

from covgate.config import GateConfig
from covgate.probe import StaticProbe


@pytest.fixture
def no_driver() -> StaticProbe:
    """A plain `cli` PHP with no coverage driver at all."""
    return StaticProbe()


@pytest.fixture
def make_config():
    def _make(**kwargs) -> GateConfig:
        defaults = dict(
            skip_coverage=False,
            skip_initial_tests=False,
            initial_test_php_options="",
            coverage_path="/tmp/covgate",
            junit_path=None,
            test_framework_adapter_name="phpunit",
        )
        defaults.update(kwargs)
        return GateConfig(**defaults)

    return _make


@pytest.fixture
def coverage_dir(tmp_path):
    """Coverage directory with a generated index and JUnit log."""
    d = tmp_path / "coverage"
    (d / "coverage-xml").mkdir(parents=True)
    (d / "coverage-xml" / "index.xml").write_text("<phpunit/>", encoding="utf-8")
    (d / "junit.xml").write_text("<testsuites/>", encoding="utf-8")
    return d
