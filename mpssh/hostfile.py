"""Hostfile loader for mpssh remote sessions.

Hostfile format, one host per line::

    %web
    deploy@web1.example.com:2222
    web2.example.com
    %db
    root@db1

``%name`` lines start a label section that lasts until the next label line.
Host lines take the form ``[login@]hostname[:port]``. Each line is cut down
to its leading run of ``[A-Za-z0-9.@:%-]`` characters. A line that is left
empty is ignored.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Iterator, Mapping

logger = logging.getLogger("mpssh.hostfile")

SSH_DEFAULT_PORT = 22
HOSTFILE_NAME = ".mpssh/hosts"
LABEL_MARKER = "%"

_ALLOWED_RUN = re.compile(r"[A-Za-z0-9.@:%-]*")
_STRTOL_PREFIX = re.compile(r"([+-]?)0*([0-9]+)")

# strtol saturates here on overflow
LONG_MAX = 2**63 - 1
LONG_MIN = -(2**63)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class HostfileError(Exception):
    """Fatal failure while loading a hostfile.

    ``kind`` names the failure class so callers can branch on it without
    isinstance checks.
    """

    kind = "HostfileError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FileUnreadableError(HostfileError):
    kind = "FileUnreadable"


class MissingHomeDirectoryError(HostfileError):
    kind = "MissingHomeDirectory"


class AllocationFailureError(HostfileError):
    kind = "AllocationFailure"


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HostEntry:
    """One remote session target."""

    login: str | None
    hostname: str
    port: int = SSH_DEFAULT_PORT
    position: int = 0
    lineno: int = 0

    @property
    def target(self) -> str:
        if self.login:
            return f"{self.login}@{self.hostname}"
        return self.hostname


@dataclass(frozen=True)
class LoadStats:
    """Counters over the committed entries of one load.

    ``skipped`` counts host lines dropped for an empty hostname and
    ``filtered`` counts host lines suppressed by the label filter; neither
    contributes to ``count`` or the maxima.
    """

    count: int = 0
    max_login_len: int = 0
    max_hostname_len: int = 0
    skipped: int = 0
    filtered: int = 0

    def clamp_sessions(self, requested: int) -> int:
        """Bound a configured session limit by the number of hosts."""
        return min(requested, self.count)


@dataclass(frozen=True)
class HostList:
    """Ordered, immutable result of a hostfile load."""

    entries: tuple[HostEntry, ...] = ()
    stats: LoadStats = field(default_factory=LoadStats)
    path: Path | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HostEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> HostEntry:
        return self.entries[index]

    @property
    def hostnames(self) -> list[str]:
        return [e.hostname for e in self.entries]


# ---------------------------------------------------------------------------
# Line level parsing
# ---------------------------------------------------------------------------


def sanitize_line(raw: str) -> str:
    """Return the leading run of allowed characters in *raw*.

    Scanning stops at the first character outside the set, so trailing
    comments, whitespace and newlines are dropped, and a line that begins
    with whitespace reduces to ``""``.
    """
    return _ALLOWED_RUN.match(raw).group(0)


def parse_port(text: str) -> int:
    """Resolve the port field of a host line.

    The leading signed decimal number is taken (``"80x"`` gives 80),
    saturated to the range of a C ``long`` and truncated to 16 bits;
    anything that leaves 0 maps to :data:`SSH_DEFAULT_PORT`.
    """
    m = _STRTOL_PREFIX.match(text)
    if not m:
        value = 0
    elif len(m.group(2)) > len(str(LONG_MAX)):
        value = LONG_MIN if m.group(1) == "-" else LONG_MAX
    else:
        value = max(LONG_MIN, min(LONG_MAX, int(m.group(1) + m.group(2))))
    port = value & 0xFFFF
    return port if port else SSH_DEFAULT_PORT


def parse_entry(
    line: str, default_login: str | None = None
) -> tuple[str | None, str, int] | None:
    """Split a sanitized host line into ``(login, hostname, port)``.

    Returns ``None`` when the hostname comes out empty.

    Parameters
    ----------
    line:
        A line already passed through :func:`sanitize_line` that is not a
        label line.
    default_login:
        Login used when the line carries no ``@``.
    """
    login: str | None
    if "@" in line:
        login, rest = line.split("@", 1)
        # a colon ahead of the first @ ends the login
        login = login.partition(":")[0]
    else:
        login, rest = default_login, line

    hostname, sep, port_text = rest.partition(":")
    if not hostname:
        return None
    port = parse_port(port_text) if sep else SSH_DEFAULT_PORT
    return login, hostname, port


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class _Scanner:
    """Single-pass state for one load: active label, entries and counters."""

    def __init__(self, default_login: str | None, label: str | None) -> None:
        self.default_login = default_login
        self.label_filter = label
        self.label: str | None = None
        self.entries: list[HostEntry] = []
        self.max_login_len = 0
        self.max_hostname_len = 0
        self.skipped = 0
        self.filtered = 0

    def feed(self, raw: str, lineno: int) -> None:
        line = sanitize_line(raw)
        if not line:
            return

        if line.startswith(LABEL_MARKER):
            self.label = line[1:]
            return

        parsed = parse_entry(line, self.default_login)
        if parsed is None:
            self.skipped += 1
            logger.debug("line %d: no hostname in %r, skipped", lineno, line)
            return

        if self.label_filter is not None and self.label != self.label_filter:
            self.filtered += 1
            logger.debug(
                "line %d: %r outside label %r, skipped",
                lineno,
                line,
                self.label_filter,
            )
            return

        login, hostname, port = parsed
        self.entries.append(
            HostEntry(
                login=login,
                hostname=hostname,
                port=port,
                position=len(self.entries),
                lineno=lineno,
            )
        )
        if login is not None:
            self.max_login_len = max(self.max_login_len, len(login))
        self.max_hostname_len = max(self.max_hostname_len, len(hostname))

    def result(self) -> HostList:
        stats = LoadStats(
            count=len(self.entries),
            max_login_len=self.max_login_len,
            max_hostname_len=self.max_hostname_len,
            skipped=self.skipped,
            filtered=self.filtered,
        )
        return HostList(entries=tuple(self.entries), stats=stats)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_hostfile_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return ``$HOME/.mpssh/hosts``.

    Raises :class:`MissingHomeDirectoryError` when ``HOME`` is unset or empty.
    """
    env = os.environ if environ is None else environ
    home = env.get("HOME")
    if not home:
        raise MissingHomeDirectoryError(
            "HOME is not set; cannot locate the default hostfile"
        )
    return Path(home) / HOSTFILE_NAME


def parse_lines(
    lines: Iterable[str],
    default_login: str | None = None,
    label: str | None = None,
) -> HostList:
    """Build a :class:`HostList` from raw hostfile lines.

    Parameters
    ----------
    lines:
        Raw lines, with or without trailing newlines.
    default_login:
        Login for host lines without ``login@``.
    label:
        When not ``None``, only host lines under a ``%label`` line whose
        name equals *label* exactly are kept.
    """
    scanner = _Scanner(default_login, label)
    try:
        for lineno, raw in enumerate(lines, start=1):
            scanner.feed(raw, lineno)
        return scanner.result()
    except MemoryError as exc:
        raise AllocationFailureError("out of memory while building host list") from exc


def load_hostfile(
    path: str | Path | None = None,
    default_login: str | None = None,
    label: str | None = None,
) -> HostList:
    """Read a hostfile and return its entries in file order.

    Parameters
    ----------
    path:
        Hostfile to read. Defaults to :func:`default_hostfile_path`.
    default_login:
        Login for host lines without ``login@``; may be ``None``.
    label:
        Optional exact label to select.

    Returns
    -------
    HostList
        Entries and :class:`LoadStats`. Nothing is returned on a fatal error.

    Raises
    ------
    FileUnreadableError
        The file cannot be opened or read.
    MissingHomeDirectoryError
        *path* is ``None`` and ``HOME`` is not set.
    AllocationFailureError
        Memory ran out while building the list.
    """
    resolved = Path(path) if path is not None else default_hostfile_path()
    try:
        with open(resolved, encoding="utf-8", errors="replace") as fh:
            hosts = parse_lines(fh, default_login=default_login, label=label)
    except OSError as exc:
        raise FileUnreadableError(
            f"Can't open file: {resolved} ({exc.strerror or exc})"
        ) from exc

    hosts = replace(hosts, path=resolved)
    logger.info(
        "Loaded %d host(s) from %s (%d skipped, %d filtered)",
        hosts.stats.count,
        resolved,
        hosts.stats.skipped,
        hosts.stats.filtered,
    )
    return hosts
