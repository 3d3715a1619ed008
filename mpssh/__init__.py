"""mpssh: host list loading for parallel remote sessions."""

from mpssh.hostfile import (
    AllocationFailureError,
    FileUnreadableError,
    HostEntry,
    HostfileError,
    HostList,
    LoadStats,
    MissingHomeDirectoryError,
    default_hostfile_path,
    load_hostfile,
    parse_lines,
)

__all__ = [
    "AllocationFailureError",
    "FileUnreadableError",
    "HostEntry",
    "HostList",
    "HostfileError",
    "LoadStats",
    "MissingHomeDirectoryError",
    "default_hostfile_path",
    "load_hostfile",
    "parse_lines",
]
