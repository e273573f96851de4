"""Locate raw ``<note ...>`` tags inside arbitrary text."""

from __future__ import annotations

import re
from typing import Iterator

TAG_PATTERN = re.compile(r"<note[^>]+>")


class TagExtractor:
    """Yields every note tag in a document, left to right.

    A ``>`` inside an attribute value ends the tag early; the scan is not
    aware of quoting.
    """

    def __init__(self, pattern: re.Pattern[str] = TAG_PATTERN) -> None:
        self.pattern = pattern

    def tags(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            yield match.group(0)
