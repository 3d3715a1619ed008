"""Shared fixtures — hostfile writers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def write_hostfile(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes *lines* to a hostfile under ``tmp_path``."""

    def _write(*lines: str, name: str = "hosts") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{line}\n" for line in lines))
        return path

    return _write


@pytest.fixture
def labelled_hostfile(write_hostfile) -> Path:
    """Two label sections with one host each."""
    return write_hostfile("%a", "h1", "%b", "h2")
