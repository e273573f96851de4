"""Per-file annotation indexing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from notedex.models import Annotation, Comment, Definition
from notedex.note.extractor import TagExtractor
from notedex.note.parser import InlineParser, ParseInlineError

LOGGER = logging.getLogger(__name__)


class IndexingError(Exception):
    """A tag in ``path`` could not be parsed."""

    def __init__(self, path: Path, cause: ParseInlineError) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass(slots=True)
class Index:
    """Annotations of a single file: comments by tag and definitions by term."""

    comments: Dict[str, List[Comment]] = field(default_factory=dict)
    definitions: Dict[str, str] = field(default_factory=dict)

    def add(self, annotation: Annotation) -> None:
        match annotation:
            case Comment(tags=tags):
                for tag in tags:
                    self.comments.setdefault(tag, []).append(annotation)
            case Definition(term=term, definition=definition):
                self.definitions[term] = definition
            case _:
                raise TypeError(f"not an annotation: {annotation!r}")

    @classmethod
    def from_annotations(cls, annotations: Iterable[Annotation]) -> "Index":
        index = cls()
        for annotation in annotations:
            index.add(annotation)
        return index


class Indexer:
    """Reads a file once and folds every note tag in it into an ``Index``."""

    def __init__(
        self,
        extractor: TagExtractor | None = None,
        parser: InlineParser | None = None,
        *,
        encoding: str = "utf-8",
    ) -> None:
        self.extractor = extractor or TagExtractor()
        self.parser = parser or InlineParser()
        self.encoding = encoding

    def parse_text(self, text: str) -> List[Annotation]:
        """Parse every tag in ``text``; the first malformed tag aborts."""
        return [self.parser.parse(tag) for tag in self.extractor.tags(text)]

    def index_file(self, path: Path) -> Index:
        text = Path(path).read_text(encoding=self.encoding, errors="replace")
        try:
            annotations = self.parse_text(text)
        except ParseInlineError as exc:
            raise IndexingError(Path(path), exc) from exc
        LOGGER.debug("Parsed %d annotations from %s", len(annotations), path)
        return Index.from_annotations(annotations)
