#!/usr/bin/env python3
"""Load each label section of a hostfile and show the session limit per section.

Example::

    python examples/label_subsets.py examples/hosts web db
"""

from __future__ import annotations

import argparse
import logging
import sys

from mpssh import HostfileError, load_hostfile


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("hostfile")
    parser.add_argument("labels", nargs="+")
    parser.add_argument("--user", default="operator")
    parser.add_argument("--max-sessions", type=int, default=8)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    for label in args.labels:
        try:
            hosts = load_hostfile(args.hostfile, default_login=args.user, label=label)
        except HostfileError as exc:
            sys.exit(f"{exc.kind}: {exc.message}")
        limit = hosts.stats.clamp_sessions(args.max_sessions)
        print(f"%{label}: {len(hosts)} host(s), up to {limit} at once")
        for entry in hosts:
            print(f"  ssh -p {entry.port} {entry.target}")


if __name__ == "__main__":
    main()
