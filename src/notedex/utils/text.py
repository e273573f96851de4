"""Text helpers for terminal output."""

from __future__ import annotations

import textwrap

MAX_WIDTH = 80
INDENT = "  "


def wrap_block(text: str, *, width: int = MAX_WIDTH, indent: str = INDENT) -> str:
    """Wrap ``text`` to at most ``width`` columns, indenting every line.

    Blank-line separated paragraphs are wrapped on their own.
    """
    width = max(min(width, MAX_WIDTH), len(indent) + 1)
    paragraphs = [part.strip() for part in text.split("\n\n")]
    return "\n\n".join(
        textwrap.fill(
            " ".join(paragraph.split()),
            width=width,
            initial_indent=indent,
            subsequent_indent=indent,
        )
        for paragraph in paragraphs
        if paragraph
    )
