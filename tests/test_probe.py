"""Tests for the PHP capability probes."""

import os

import pytest

from covgate.checker import CoverageChecker
from covgate.diagnostics import CoverageNotFound
from covgate import probe as probe_mod
from covgate.probe import (
    PhpRuntimeProbe,
    StaticProbe,
    detect_coverage_signals,
    parse_module_list,
    php_options_request,
    skipped_version_from_env,
)
from covgate.util.shell import CmdResult


def _fake_run(answers):
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        rc, out = answers[cmd[1]]
        return CmdResult(cmd=" ".join(cmd), returncode=rc, stdout=out, stderr="", elapsed_s=0.0)

    return run, calls


def test_parse_module_list():
    out = "[PHP Modules]\nCore\njson\nxdebug\n\n[Zend Modules]\nXdebug\n"
    assert parse_module_list(out) == frozenset({"core", "json", "xdebug"})


def test_php_options_request():
    assert php_options_request("-d zend_extension=xdebug.so") == ["xdebug"]
    assert php_options_request("-d extension=pcov.so\n-d zend_extension=xdebug.so") == ["xdebug", "pcov"]
    assert php_options_request("-d memory_limit=-1") == []


def _handler_settings(skipped: str) -> str:
    inis = os.pathsep.join(["/etc/php/php.ini", "/etc/php/conf.d/20-xdebug.ini"])
    return "|".join(["/tmp/x.ini", "1", "*", "*", inis, skipped])


def test_skipped_version_from_env():
    assert skipped_version_from_env({"XDEBUG_HANDLER_SETTINGS": _handler_settings("3.2.1")}) == "3.2.1"
    assert skipped_version_from_env({}) == ""


@pytest.mark.parametrize(
    "settings",
    [
        _handler_settings(""),
        "/tmp/x.ini|1|*|*",
        "/tmp/x.ini|1|*|*|a|b|3.2.1",
        "3.2.1",
        "",
    ],
)
def test_skipped_version_absent(settings):
    assert skipped_version_from_env({"XDEBUG_HANDLER_SETTINGS": settings}) == ""


def test_settings_without_skipped_version_do_not_enable_coverage(make_config, monkeypatch):
    monkeypatch.setenv("XDEBUG_HANDLER_SETTINGS", _handler_settings(""))
    monkeypatch.setattr(probe_mod, "which", lambda name: None)

    checker = CoverageChecker(make_config(), PhpRuntimeProbe("php"))

    assert not checker.has_coverage_generator_enabled()
    with pytest.raises(CoverageNotFound):
        checker.check_coverage_requirements()


def test_runtime_probe_queries_php_once(monkeypatch):
    run, calls = _fake_run({"-r": (0, "cli"), "-m": (0, "[PHP Modules]\npcov\n")})
    monkeypatch.setattr(probe_mod, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(probe_mod, "run_cmd", run)

    probe = PhpRuntimeProbe("php", env={})
    for _ in range(2):
        assert probe.sapi() == "cli"
        assert probe.loaded_extensions() == frozenset({"pcov"})
        assert probe.skipped_xdebug_version() == ""

    assert calls == [["/usr/bin/php", "-r", "echo PHP_SAPI;"], ["/usr/bin/php", "-m"]]


def test_runtime_probe_phpdbg_binary_needs_no_query(monkeypatch):
    run, calls = _fake_run({})
    monkeypatch.setattr(probe_mod, "run_cmd", run)

    assert PhpRuntimeProbe("/opt/php/bin/phpdbg").sapi() == "phpdbg"
    assert calls == []


def test_runtime_probe_missing_binary_means_no_capability(monkeypatch):
    monkeypatch.setattr(probe_mod, "which", lambda name: None)

    probe = PhpRuntimeProbe("php-does-not-exist", env={})
    assert probe.sapi() == ""
    assert probe.loaded_extensions() == frozenset()


def test_runtime_probe_failing_binary_means_no_capability(monkeypatch):
    run, _ = _fake_run({"-r": (255, "Fatal"), "-m": (255, "Fatal")})
    monkeypatch.setattr(probe_mod, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(probe_mod, "run_cmd", run)

    probe = PhpRuntimeProbe("php", env={})
    assert probe.sapi() == ""
    assert probe.loaded_extensions() == frozenset()


def test_runtime_probe_reads_process_env(monkeypatch):
    monkeypatch.setenv("XDEBUG_HANDLER_SETTINGS", _handler_settings("3.3.0"))
    assert PhpRuntimeProbe().skipped_xdebug_version() == "3.3.0"


def test_static_probe_lower_cases_extensions():
    probe = StaticProbe(sapi_name="cli", extensions=frozenset({"PCOV"}))
    assert probe.loaded_extensions() == frozenset({"pcov"})
    assert probe.skipped_xdebug_version() == ""


def test_detect_coverage_signals_collects_every_signal():
    probe = StaticProbe(sapi_name="phpdbg", extensions=frozenset({"pcov", "json"}), skipped_version="3.1.0")
    signals = detect_coverage_signals(probe, "-d zend_extension=xdebug.so")

    assert signals.phpdbg
    assert signals.loaded_extensions == frozenset({"pcov"})
    assert signals.skipped_xdebug_version == "3.1.0"
    assert signals.requested_extensions == ("xdebug",)
    assert signals.any


def test_detect_coverage_signals_none_found():
    signals = detect_coverage_signals(StaticProbe(extensions=frozenset({"json"})), "-d memory_limit=1G")

    assert not signals.any
    assert signals.loaded_extensions == frozenset()
