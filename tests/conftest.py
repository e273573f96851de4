"""Shared fixtures for notedex tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

BASE_NS = 1_700_000_000_000_000_000


def set_mtime(path: Path, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def write_note(tmp_path: Path) -> Callable[..., Path]:
    """Write a file under ``tmp_path/notes`` with a fixed modification time."""
    root = tmp_path / "notes"
    root.mkdir(exist_ok=True)

    def _write(name: str, text: str, *, mtime_ns: int = BASE_NS) -> Path:
        path = root / name
        path.write_text(text, encoding="utf-8")
        set_mtime(path, mtime_ns)
        return path

    return _write


@pytest.fixture
def notes_root(tmp_path: Path) -> Path:
    root = tmp_path / "notes"
    root.mkdir(exist_ok=True)
    return root
