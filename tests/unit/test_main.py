"""Tests for the servedir entry point."""

from __future__ import annotations

import os

import pytest

from servedir import __version__
from servedir.cli import main as cli_main
from servedir.cli.main import banner_lines, main
from servedir.cli.parser import parse_args
from servedir.server import FileServer
from servedir.server.interfaces import InterfaceAddresses

ARGV0 = ["/usr/bin/python3", "servedir"]


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in list(os.environ):
        if key.startswith("SERVEDIR_"):
            monkeypatch.delenv(key)


def _config(args):
    outcome = parse_args(args)
    assert outcome.config is not None
    return outcome.config


def test_version(capsys):
    assert main([*ARGV0, "--version"]) == 0
    assert capsys.readouterr().out.strip() == f"v{__version__}"


def test_help(capsys):
    assert main([*ARGV0, "-h"]) == 0
    assert capsys.readouterr().out.startswith("Usage: servedir [options] [file]")


def test_parse_error_exit_code(capsys):
    assert main([*ARGV0, "-p"]) == 1
    out, err = capsys.readouterr()
    assert out == ""
    assert "Invalid argument for option '-p'" in err


def test_unknown_argument_exit_code(capsys):
    assert main([*ARGV0, "--bogus"]) == 1
    assert "Invalid argument '--bogus'" in capsys.readouterr().err


def test_invalid_settings_exit_code(monkeypatch, capsys):
    monkeypatch.setenv("SERVEDIR_LOGGING_LEVEL", "shouty")
    assert main([*ARGV0, "-v"]) == 1
    assert "logging.level" in capsys.readouterr().err


def test_startup_error_is_reported_once(tmp_path, capsys):
    missing = tmp_path / "does-not-exist"
    assert main([*ARGV0, "-p", "0", str(missing)]) == 1
    err = capsys.readouterr().err
    assert err.count("does not exist") == 1


def test_successful_run(monkeypatch, tmp_path, capsys):
    calls = []

    async def fake_listen(self):
        calls.append(self.settings)
        for callback in self._listening_callbacks:
            callback("http", "127.0.0.1", 9999)

    monkeypatch.setattr(FileServer, "listen", fake_listen)
    monkeypatch.setattr(cli_main, "list_addresses", lambda: InterfaceAddresses())

    assert main([*ARGV0, "-H", "127.0.0.1", "-p", "9999", str(tmp_path)]) == 0
    assert calls[0].port == 9999
    out = capsys.readouterr().out
    assert f"Serving {tmp_path}" in out
    assert "http://127.0.0.1:9999" in out


def test_keyboard_interrupt_exits_cleanly(monkeypatch, tmp_path, capsys):
    async def interrupted(self):
        raise KeyboardInterrupt

    monkeypatch.setattr(FileServer, "listen", interrupted)
    assert main([*ARGV0, str(tmp_path)]) == 0
    assert "Interrupted" in capsys.readouterr().out


def test_unexpected_error_prints_traceback(monkeypatch, tmp_path, capsys):
    async def broken(self):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(FileServer, "listen", broken)
    assert main([*ARGV0, str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert "RuntimeError: kaboom" in err
    assert "Traceback" in err


class TestBanner:
    def test_specific_host(self):
        config = _config(["-H", "127.0.0.1", "/srv"])
        lines = banner_lines(config, "http", 8080, InterfaceAddresses())
        assert lines == [
            f"Serving {os.path.abspath('/srv')}",
            "Available on: http://127.0.0.1:8080",
        ]

    def test_ipv6_host_is_bracketed(self):
        lines = banner_lines(_config(["-H", "fe80::1"]), "https", 443, InterfaceAddresses())
        assert lines[-1] == "Available on: https://[fe80::1]:443"

    def test_wildcard_lists_addresses(self):
        addresses = InterfaceAddresses(ipv4=("192.168.1.10", "10.0.0.5"), ipv6=("2001:db8::5",))
        lines = banner_lines(_config(["-H", "::", "-a", "pw"]), "http", 8080, addresses)
        assert "Basic auth enabled for user 'admin'" in lines
        assert lines[-4:] == [
            "Available on:",
            "  IPv4: http://192.168.1.10:8080",
            "        http://10.0.0.5:8080",
            "  IPv6: http://[2001:db8::5]:8080",
        ]

    def test_ipv4_wildcard_skips_ipv6(self):
        addresses = InterfaceAddresses(ipv4=("10.0.0.5",), ipv6=("2001:db8::5",))
        lines = banner_lines(_config(["-H", "0.0.0.0"]), "http", 80, addresses)
        assert not any("IPv6" in line for line in lines)

    def test_first_address_is_highlighted(self):
        addresses = InterfaceAddresses(ipv4=("10.0.0.5", "10.0.0.6"))
        lines = banner_lines(_config(["-H", "0.0.0.0"]), "http", 80, addresses, color=True)
        assert "\033[" in lines[-2]
        assert "\033[" not in lines[-1]
