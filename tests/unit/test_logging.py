from __future__ import annotations

from servedir.core.config import LoggingPolicy
from servedir.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_verbosity,
)


def _policy(level: str, *, color: bool = False) -> LoggingPolicy:
    return LoggingPolicy(
        level_name=level,
        emit_info=level != "quiet",
        emit_verbose=level in ("verbose", "debug"),
        emit_debug=level == "debug",
        color=color,
        source="default",
    )


def test_get_logger_is_cached() -> None:
    assert get_logger("a") is get_logger("a")
    assert get_logger("a") is not get_logger("b")


def test_apply_logging_policy_levels() -> None:
    expected = {
        "quiet": VerbosityLevel.QUIET,
        "normal": VerbosityLevel.NORMAL,
        "verbose": VerbosityLevel.VERBOSE,
        "debug": VerbosityLevel.DEBUG,
    }
    for level, verbosity in expected.items():
        apply_logging_policy(_policy(level))
        assert get_verbosity() == verbosity


def test_levels_filter_output(capsys) -> None:
    log = get_logger("test")
    set_verbosity(VerbosityLevel.NORMAL)

    log.debug("hidden debug")
    log.verbose("hidden verbose")
    log.info("shown info")
    log.warning("shown warning")
    log.error("shown error")

    out, err = capsys.readouterr()
    assert "hidden" not in out
    assert "[info] shown info" in out
    assert "[warning] shown warning" in out
    assert err.strip() == "[error] shown error"


def test_quiet_still_reports_errors(capsys) -> None:
    set_verbosity(0)
    get_logger("test").info("nope")
    get_logger("test").error("yes")
    out, err = capsys.readouterr()
    assert out == ""
    assert "[error] yes" in err


def test_no_colors_when_not_a_tty(capsys) -> None:
    apply_logging_policy(_policy("debug", color=True))
    get_logger("test").debug("plain")
    out, _err = capsys.readouterr()
    assert out == "[debug] plain\n"
