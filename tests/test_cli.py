"""Tests for the ``mpssh-hosts`` command line."""

from __future__ import annotations

import pytest

from mpssh.cli import _build_parser, format_entry, main
from mpssh.hostfile import parse_lines


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("MPSSH_HOSTFILE", "MPSSH_USER", "MPSSH_LABEL"):
        monkeypatch.delenv(name, raising=False)


def test_parser_defaults():
    args = _build_parser().parse_args([])

    assert args.file is None
    assert args.user is None
    assert args.label is None
    assert args.max_sessions == 100
    assert args.log_level == "WARNING"


def test_parser_env_defaults(monkeypatch):
    monkeypatch.setenv("MPSSH_HOSTFILE", "/tmp/hosts")
    monkeypatch.setenv("MPSSH_USER", "deploy")
    monkeypatch.setenv("MPSSH_LABEL", "web")
    args = _build_parser().parse_args([])

    assert args.file == "/tmp/hosts"
    assert args.user == "deploy"
    assert args.label == "web"


def test_format_entry_aligns_columns():
    hosts = parse_lines(["alice@a:2222", "bo@longer-host", "bare"])

    assert [format_entry(e, hosts) for e in hosts] == [
        "alice@a          :2222",
        "   bo@longer-host:22",
        "      bare       :22",
    ]


def test_format_entry_without_logins():
    hosts = parse_lines(["a", "bbb:10"])

    assert [format_entry(e, hosts) for e in hosts] == ["a  :22", "bbb:10"]


def test_main_prints_table_and_clamps(write_hostfile, capsys):
    path = write_hostfile("%web", "w1", "w2:2200", "%db", "root@d1", "oops@")

    rc = main(["-f", str(path), "-u", "ops", "-l", "web", "-p", "10"])

    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out == [
        "ops@w1:22",
        "ops@w2:2200",
        "2 host(s), 1 skipped, 1 filtered, 2 concurrent session(s)",
    ]


def test_main_max_sessions_below_count(write_hostfile, capsys):
    path = write_hostfile("h1", "h2", "h3", "@")

    rc = main(["--file", str(path), "--max-sessions", "2"])

    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out[-1] == "3 host(s), 1 skipped, 0 filtered, 2 concurrent session(s)"


def test_main_reads_hostfile_from_env(write_hostfile, monkeypatch, capsys):
    monkeypatch.setenv("MPSSH_HOSTFILE", str(write_hostfile("envhost")))

    assert main([]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "envhost:22"


def test_main_unreadable_file(tmp_path, capsys):
    rc = main(["-f", str(tmp_path / "missing")])

    err = capsys.readouterr().err
    assert rc == 1
    assert err.startswith("mpssh-hosts: Can't open file:")


def test_main_missing_home(monkeypatch, capsys):
    monkeypatch.delenv("HOME", raising=False)

    rc = main([])

    assert rc == 1
    assert "HOME is not set" in capsys.readouterr().err
