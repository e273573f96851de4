"""Incremental cache of per-file indices keyed by file identity."""

from __future__ import annotations

import errno
import logging
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from notedex.index.indexer import Index, Indexer
from notedex.models import Comment
from notedex.utils.files import iter_candidate_paths

LOGGER = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Identity of a regular file: canonical path plus modification time.

    Any change to the modification time, however small, gives a new key.
    """

    path: Path
    modified_ns: int

    @classmethod
    def from_path(cls, path: Path) -> "CacheKey":
        """Key a plain file; anything else raises ``FileNotFoundError``."""
        path = Path(path)
        try:
            info = path.lstat()
        except OSError as exc:
            raise FileNotFoundError(errno.ENOENT, f"cannot stat: {exc}", str(path)) from exc
        if not stat.S_ISREG(info.st_mode):
            raise FileNotFoundError(errno.ENOENT, "expected file", str(path))
        return cls(path=path.resolve(), modified_ns=info.st_mtime_ns)

    @property
    def seconds(self) -> int:
        return self.modified_ns // NANOS_PER_SECOND

    @property
    def nanos(self) -> int:
        return self.modified_ns % NANOS_PER_SECOND


@dataclass(slots=True)
class RebuildStats:
    hits: int = 0
    misses: int = 0
    pruned: int = 0

    @property
    def files(self) -> int:
        return self.hits + self.misses


@dataclass(slots=True)
class FileCache:
    """Mapping of ``CacheKey`` to the ``Index`` parsed from that file."""

    entries: Dict[CacheKey, Index] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def define(self, term: str) -> Optional[str]:
        """Return the definition of ``term``, checking files in path order."""
        for key in sorted(self.entries, key=lambda k: str(k.path)):
            definition = self.entries[key].definitions.get(term)
            if definition is not None:
                return definition
        return None

    def search(self, tag: str) -> Iterator[Comment]:
        """Yield comments filed under ``tag``, oldest file first.

        Comments from the same file keep their document order.
        """
        matches = [
            (key, index.comments[tag])
            for key, index in self.entries.items()
            if tag in index.comments
        ]
        matches.sort(key=lambda item: (item[0].modified_ns, str(item[0].path)))
        for _, comments in matches:
            yield from comments

    @classmethod
    def rebuild(
        cls,
        root: Path,
        previous: "FileCache | None" = None,
        *,
        indexer: Indexer | None = None,
    ) -> Tuple["FileCache", RebuildStats]:
        """Build a cache for the files directly under ``root``.

        Entries of ``previous`` whose key still matches a file are reused;
        other files are parsed again. Entries that are not revisited are
        dropped. ``previous`` is consumed.
        """
        indexer = indexer or Indexer()
        remaining = previous.entries if previous is not None else {}
        cache = cls()
        stats = RebuildStats()

        for path in iter_candidate_paths(root):
            try:
                key = CacheKey.from_path(path)
            except FileNotFoundError:
                LOGGER.debug("Skipping %s", path)
                continue

            index = remaining.pop(key, None)
            if index is not None:
                LOGGER.debug("Cache hit: %s", key.path)
                stats.hits += 1
            else:
                LOGGER.info("Indexing: %s", key.path)
                index = indexer.index_file(key.path)
                stats.misses += 1
            cache.entries[key] = index

        stats.pruned = len(remaining)
        remaining.clear()
        LOGGER.info(
            "Rebuilt cache: %d reused, %d parsed, %d pruned",
            stats.hits,
            stats.misses,
            stats.pruned,
        )
        return cache, stats
