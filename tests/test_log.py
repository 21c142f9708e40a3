import io
import re

import pytest

from kmstext.log import (
    DEFAULT_CONFIG,
    GLOBAL_DEFAULT_CONFIG,
    Log,
    LogConfig,
    LogFilter,
    Severity,
    STRMAX,
)


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def log(out):
    return Log(out)


def _submitted(log, out, *args, **kwargs):
    """Submit a message and return everything written to the stream so far."""
    log.submit(*args, **kwargs)
    return out.getvalue()


def _print_init(log, out, appname):
    log.print_init(appname)
    return out.getvalue()


def test_severity_order():
    cfg = LogConfig.all(0, 0, 0, 0, 0, 0, 0, 1)
    assert cfg.value_for(Severity(0)) == 1
    assert cfg.value_for(Severity(7)) == 0
    assert Severity(0) is Severity.FATAL
    assert Severity(7) is Severity.DEBUG
    assert list(Severity) == sorted(Severity)


def test_config_all_and_value_for():
    cfg = LogConfig.all(0, 1, 2, 0, 1, 2, 0, 1)
    assert cfg.value_for(Severity.DEBUG) == 0
    assert cfg.value_for(Severity.INFO) == 1
    assert cfg.value_for(Severity.NOTICE) == 2
    assert cfg.value_for(Severity.FATAL) == 1


def test_config_value_for_invalid():
    with pytest.raises(ValueError):
        DEFAULT_CONFIG.value_for(8)


def test_default_configs():
    assert all(DEFAULT_CONFIG.value_for(s) == 2 for s in Severity)
    assert GLOBAL_DEFAULT_CONFIG.value_for(Severity.DEBUG) == 0
    assert GLOBAL_DEFAULT_CONFIG.value_for(Severity.WARNING) == 1


def test_filter_matches():
    flt = LogFilter(file="a.c", line=-1, func="", subsystem="sub")
    assert flt.matches("a.c", 10, "f", "sub")
    assert not flt.matches("b.c", 10, "f", "sub")
    assert not flt.matches("a.c", 10, "f", None)
    assert LogFilter(line=5).matches(None, 5, None, None)
    assert not LogFilter(line=5).matches(None, 6, None, None)


def test_filter_truncates_long_strings():
    long = "x" * 300
    flt = LogFilter(file=long)
    assert len(flt.file) == STRMAX - 1
    assert not flt.matches(long, 0, None, None)


def test_first_message_format(log, out):
    assert not log.omit(Severity.ERROR)
    text = _submitted(log, out, Severity.ERROR, "boom", file="a.c", line=3,
                      func="f", subsystem="sub")
    assert text == "[0000.000000] ERROR: sub: boom (f() in a.c:3)\n"


def test_newline_message_has_no_location(log, out):
    assert not log.omit(Severity.WARNING)
    text = _submitted(log, out, Severity.WARNING, "hello\n")
    assert text == "[0000.000000] WARNING: hello\n"


def test_unknown_severity_and_defaults(log, out):
    assert not log.omit(Severity.NOTICE)
    text = _submitted(log, out, 9, "x", line=-4)
    assert text == "[0000.000000] x (<unknown>() in <unknown>:0)\n"


def test_later_message_time_format(log, out):
    assert not log.omit(Severity.NOTICE)
    _submitted(log, out, Severity.NOTICE, "one\n")
    lines = _submitted(log, out, Severity.NOTICE, "two\n").splitlines()
    assert len(lines) == 2
    assert re.match(r"^\[\d{4}\.\d{6}\] NOTICE: two$", lines[1])


def test_debug_omitted_by_default(log, out):
    log.submit(Severity.DEBUG, "hidden\n")
    log.submit(Severity.INFO, "hidden\n")
    assert out.getvalue() == ""
    assert log.omit(Severity.DEBUG)
    assert not log.omit(Severity.NOTICE)


def test_message_config_overrides(log, out):
    cfg = LogConfig(debug=1, error=0)
    assert not log.omit(Severity.DEBUG, config=cfg)
    assert log.omit(Severity.ERROR, config=cfg)
    log.submit(Severity.DEBUG, "shown\n", config=cfg)
    assert "DEBUG: shown" in out.getvalue()


def test_set_config(log):
    log.set_config(LogConfig.all(1, 1, 0, 0, 0, 0, 0, 0))
    assert not log.omit(Severity.DEBUG)
    assert log.omit(Severity.FATAL)
    with pytest.raises(TypeError):
        log.set_config(None)


def test_filters_and_handles(log):
    flt = LogFilter(subsystem="sub")
    first = log.add_filter(flt, LogConfig(debug=1))
    second = log.add_filter(LogFilter(func="g"), LogConfig(debug=0))
    assert (first, second) == (0, 1)
    assert not log.omit(Severity.DEBUG, subsystem="sub")
    assert log.omit(Severity.DEBUG, subsystem="other")
    # newest filter wins
    assert log.omit(Severity.DEBUG, func="g", subsystem="sub")
    log.remove_filter(second)
    assert not log.omit(Severity.DEBUG, func="g", subsystem="sub")
    log.clean_filters()
    assert log.omit(Severity.DEBUG, subsystem="sub")


def test_handle_after_removal_of_head(log):
    a = log.add_filter(LogFilter(), LogConfig())
    b = log.add_filter(LogFilter(), LogConfig())
    log.remove_filter(b)
    assert log.add_filter(LogFilter(), LogConfig()) == a + 1
    log.remove_filter(12345)


def test_add_filter_type_errors(log):
    with pytest.raises(TypeError):
        log.add_filter(None, LogConfig())
    with pytest.raises(TypeError):
        log.add_filter(LogFilter(), None)


def test_set_file_redirects(log, out, tmp_path):
    path = tmp_path / "out.log"
    log.set_file(path)
    assert f"NOTICE: log: set log-file to {path}" in out.getvalue()
    log.submit(Severity.ERROR, "to file\n")
    log.close()
    assert "ERROR: to file" in path.read_text()
    assert "to file" not in out.getvalue()


def test_set_file_back_to_default(log, out, tmp_path):
    path = tmp_path / "out.log"
    log.set_file(path)
    log.set_file(None)
    assert "set log-file to <default>" in path.read_text()
    before = out.getvalue()
    log.set_file(None)
    assert out.getvalue() == before


def test_set_file_failure(log, out, tmp_path):
    bad = tmp_path / "missing" / "x.log"
    with pytest.raises(OSError):
        log.set_file(bad)
    assert "ERROR: log: cannot change log-file to" in out.getvalue()


def test_print_init(log, out):
    assert not log.omit(Severity.NOTICE)
    text = _print_init(log, out, "myapp")
    assert text.startswith("[0000.000000] NOTICE: myapp Revision ")
    assert "print_init()" in text


def test_print_init_without_name(log, out):
    assert not log.omit(Severity.NOTICE)
    text = _print_init(log, out, None)
    assert "NOTICE: <unknown> Revision" in text