import pytest

from covgate.util.paths import COVERAGE_INDEX_FILE_NAME, canonicalize, coverage_index_path, ensure_dir


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/var/cov", "/var/cov"),
        ("/var/cov/", "/var/cov"),
        ("/var//cov/./x", "/var/cov/x"),
        ("/var/tmp/../cov", "/var/cov"),
        ("/../cov", "/cov"),
        ("build/cov", "build/cov"),
        ("./build/cov", "build/cov"),
        ("../build/../cov", "../cov"),
        ("a/../../b", "../b"),
        ("C:\\build\\cov", "C:/build/cov"),
        ("C:\\..\\x", "C:/x"),
        ("c:/a/../../b", "c:/b"),
        ("C:", "C:/"),
        ("", ""),
    ],
)
def test_canonicalize(raw, expected):
    assert canonicalize(raw) == expected


def test_coverage_index_path():
    assert COVERAGE_INDEX_FILE_NAME == "coverage-xml/index.xml"
    assert coverage_index_path("/tmp/infection/") == "/tmp/infection/coverage-xml/index.xml"
    assert coverage_index_path("build/./cov") == "build/cov/coverage-xml/index.xml"


def test_ensure_dir(tmp_path):
    d = tmp_path / "subdir" / "nested"
    assert not d.exists()
    ensure_dir(d)
    assert d.is_dir()
