"""CLI entry point for inspecting an mpssh hostfile.

Usage::

    mpssh-hosts [--file /path/to/hosts] [--user LOGIN] [--label NAME]

The hostfile path can also be supplied via the ``MPSSH_HOSTFILE``
environment variable; without either, ``$HOME/.mpssh/hosts`` is read.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from mpssh.hostfile import HostEntry, HostfileError, HostList, load_hostfile

DEFAULT_MAX_SESSIONS = 100


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``mpssh-hosts``."""
    parser = argparse.ArgumentParser(
        prog="mpssh-hosts",
        description=(
            "Load an mpssh hostfile and print the hosts a parallel run "
            "would connect to."
        ),
    )
    parser.add_argument(
        "--file",
        "-f",
        default=os.environ.get("MPSSH_HOSTFILE"),
        help=(
            "Path to the hostfile. Falls back to the MPSSH_HOSTFILE "
            "environment variable, then $HOME/.mpssh/hosts."
        ),
    )
    parser.add_argument(
        "--user",
        "-u",
        default=os.environ.get("MPSSH_USER"),
        help="Login for hosts that do not name one (default: MPSSH_USER).",
    )
    parser.add_argument(
        "--label",
        "-l",
        default=os.environ.get("MPSSH_LABEL"),
        help="Only load hosts under this %%label (default: MPSSH_LABEL).",
    )
    parser.add_argument(
        "--max-sessions",
        "-p",
        type=int,
        default=DEFAULT_MAX_SESSIONS,
        help=(
            "Maximum number of concurrent sessions; clamped to the host "
            f"count (default: {DEFAULT_MAX_SESSIONS})."
        ),
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING).",
    )
    return parser


def format_entry(entry: HostEntry, hosts: HostList) -> str:
    """Render *entry* aligned to the widest login and hostname in *hosts*."""
    stats = hosts.stats
    host = f"{entry.hostname:<{stats.max_hostname_len}}:{entry.port}"
    if not stats.max_login_len:
        return host
    if entry.login:
        return f"{entry.login:>{stats.max_login_len}}@{host}"
    return f"{'':>{stats.max_login_len}} {host}"


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments, load the hostfile and print the host table."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        hosts = load_hostfile(args.file, default_login=args.user, label=args.label)
    except HostfileError as exc:
        print(f"mpssh-hosts: {exc.message}", file=sys.stderr)
        return 1

    for entry in hosts:
        print(format_entry(entry, hosts))

    stats = hosts.stats
    print(
        f"{stats.count} host(s), {stats.skipped} skipped, "
        f"{stats.filtered} filtered, "
        f"{stats.clamp_sessions(args.max_sessions)} concurrent session(s)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
