"""Core notedex data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class Comment:
    """Free-form note filed under one or more tags."""

    tags: Tuple[str, ...]
    heading: Optional[str]
    comment: str


@dataclass(frozen=True, slots=True)
class Definition:
    """Definition of a single term."""

    term: str
    definition: str


Annotation = Union[Comment, Definition]
