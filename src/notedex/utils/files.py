"""Utility helpers for working with files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator


def iter_candidate_paths(root: Path) -> Iterator[Path]:
    """Yield the direct children of ``root`` in name order, without descending."""
    yield from sorted(Path(root).iterdir())
