"""Compressed on-disk persistence for the file cache."""

from __future__ import annotations

import gzip
import json
import logging
import os
import tempfile
import zlib
from pathlib import Path
from typing import Any, Dict, List

from notedex.index.cache import NANOS_PER_SECOND, CacheKey, FileCache
from notedex.index.indexer import Index
from notedex.models import Comment

LOGGER = logging.getLogger(__name__)

FORMAT_VERSION = 1
COMPRESS_LEVEL = 1


class CacheCorruptError(Exception):
    """The cache file exists but cannot be decoded."""


def _encode_comment(comment: Comment) -> Dict[str, Any]:
    return {"tags": list(comment.tags), "heading": comment.heading, "comment": comment.comment}


def _decode_comment(data: Dict[str, Any]) -> Comment:
    heading = data["heading"]
    if heading is not None and not isinstance(heading, str):
        raise TypeError("heading must be a string")
    return Comment(
        tags=tuple(str(tag) for tag in data["tags"]),
        heading=heading,
        comment=str(data["comment"]),
    )


def _encode_entry(key: CacheKey, index: Index) -> Dict[str, Any]:
    return {
        "path": str(key.path),
        "secs": key.seconds,
        "nanos": key.nanos,
        "comments": {
            tag: [_encode_comment(comment) for comment in comments]
            for tag, comments in index.comments.items()
        },
        "definitions": dict(index.definitions),
    }


def _decode_entry(data: Dict[str, Any]) -> tuple[CacheKey, Index]:
    secs, nanos = data["secs"], data["nanos"]
    if not isinstance(secs, int) or not isinstance(nanos, int):
        raise TypeError("modification time must be integers")
    if not 0 <= nanos < NANOS_PER_SECOND:
        raise ValueError(f"nanoseconds out of range: {nanos}")
    key = CacheKey(path=Path(data["path"]), modified_ns=secs * NANOS_PER_SECOND + nanos)
    index = Index(
        comments={
            str(tag): [_decode_comment(item) for item in comments]
            for tag, comments in data["comments"].items()
        },
        definitions={str(term): str(text) for term, text in data["definitions"].items()},
    )
    return key, index


def encode(cache: FileCache) -> bytes:
    """Serialize the whole cache to a single gzip-compressed blob."""
    entries: List[Dict[str, Any]] = [
        _encode_entry(key, index) for key, index in cache.entries.items()
    ]
    # Default ASCII escaping keeps surrogate-escaped file names intact.
    payload = json.dumps({"version": FORMAT_VERSION, "entries": entries})
    return gzip.compress(payload.encode("utf-8"), compresslevel=COMPRESS_LEVEL)


def decode(blob: bytes) -> FileCache:
    """Reverse ``encode``; any malformed input raises ``CacheCorruptError``."""
    try:
        document = json.loads(gzip.decompress(blob).decode("utf-8"))
        if document["version"] != FORMAT_VERSION:
            raise ValueError(f"unsupported cache version: {document['version']}")
        cache = FileCache()
        for item in document["entries"]:
            key, index = _decode_entry(item)
            cache.entries[key] = index
    except (
        OSError, EOFError, zlib.error, ValueError, KeyError, TypeError, AttributeError
    ) as exc:
        raise CacheCorruptError(f"cannot decode cache: {exc}") from exc
    return cache


def load_cache(path: Path) -> FileCache:
    """Load a persisted cache; a missing file yields an empty cache."""
    path = Path(path)
    try:
        blob = path.read_bytes()
    except FileNotFoundError:
        LOGGER.info("No cache at %s, starting empty", path)
        return FileCache()
    try:
        return decode(blob)
    except CacheCorruptError as exc:
        raise CacheCorruptError(f"{path}: {exc}") from exc


def save_cache(path: Path, cache: FileCache) -> None:
    """Write the cache, replacing any previous file in one step."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    blob = encode(cache)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(blob)
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    LOGGER.debug("Saved %d cache entries to %s", len(cache), path)
