from covgate.doctor import doctor_report
from covgate.probe import StaticProbe


def _status(report, name):
    return next(i.status for i in report.items if i.name == name)


def test_doctor_fails_without_any_driver(make_config):
    report = doctor_report(make_config(), StaticProbe())

    assert not report.ok
    assert _status(report, "coverage") == "FAIL"
    assert _status(report, "xdebug") == "INFO"
    assert _status(report, "pcov") == "INFO"


def test_doctor_reports_each_signal(make_config):
    probe = StaticProbe(sapi_name="phpdbg", extensions=frozenset({"pcov"}), skipped_version="3.1.0")
    report = doctor_report(make_config(initial_test_php_options="-d zend_extension=xdebug.so"), probe)

    assert report.ok
    assert _status(report, "php sapi") == "OK"
    assert _status(report, "pcov") == "OK"
    assert _status(report, "xdebug-handler") == "OK"
    assert _status(report, "initial tests php options") == "OK"


def test_doctor_ok_when_coverage_supplied(make_config):
    report = doctor_report(make_config(skip_coverage=True), StaticProbe())

    assert report.ok
    assert _status(report, "coverage") == "OK"
