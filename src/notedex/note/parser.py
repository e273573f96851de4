"""Turn a raw note tag into a typed annotation."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from notedex.models import Annotation, Comment, Definition


class Attribute(str, Enum):
    COMMENT = "comment"
    DEFINITION = "definition"
    HEADING = "heading"
    TAGS = "tags"
    TERM = "term"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_key(cls, key: str) -> "Attribute":
        """Map a key as written in a tag onto an attribute."""
        lowered = key.lower()
        if lowered == "tag":
            return cls.TAGS
        try:
            return cls(lowered)
        except ValueError:
            raise InvalidAttribute(lowered) from None


class ParseInlineError(Exception):
    """Base class for malformed note tags."""


class InvalidAttribute(ParseInlineError):
    def __init__(self, key: str) -> None:
        super().__init__(f"tag contains invalid attribute: {key}")
        self.key = key


class MissingAttribute(ParseInlineError):
    def __init__(self, attribute: Attribute) -> None:
        super().__init__(f"expected attribute: {attribute}")
        self.attribute = attribute


class UnknownType(ParseInlineError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"unknown tag type: {tag}")
        self.tag = tag


AttributeDict = Dict[Attribute, str]

ATTRIBUTE_PATTERN = re.compile(
    r"(?<![\w-])(term|definition|heading|tags?|comment)=", re.IGNORECASE
)
KEY_PATTERN = re.compile(r"(?<![\w-])([A-Za-z_][\w-]*)=")


def _check_unquoted(text: str) -> None:
    """Reject a ``key=`` sequence found outside any recognised position."""
    match = KEY_PATTERN.search(text)
    if match:
        raise InvalidAttribute(match.group(1).lower())


def _unquoted_tail(value: str) -> str:
    """Return the part of a raw value where a stray key would be a key.

    That is the text after the closing quote of a quoted value, or everything
    after the first word of an unquoted one, so `definition=http://x/?q=1` is
    accepted.
    """
    if value.startswith('"'):
        closing = value.rfind('"')
        return value[closing + 1 :] if closing > 0 else ""
    parts = value.split(None, 1)
    return parts[1] if len(parts) > 1 else ""


def _key_spans(text: str) -> Iterator[Tuple[str, str]]:
    matches = list(ATTRIBUTE_PATTERN.finditer(text))
    for position, match in enumerate(matches):
        end = matches[position + 1].start() if position + 1 < len(matches) else len(text)
        yield match.group(1), text[match.end() : end].strip()


def build_attribute_dict(interior: str) -> AttributeDict:
    """Split the inside of a tag into attribute values.

    Everything between one recognised ``key=`` and the next belongs to the
    first key, trimmed of surrounding whitespace. Values keep their quotes.
    When a key repeats, the last value wins.
    """
    first = ATTRIBUTE_PATTERN.search(interior)
    _check_unquoted(interior[: first.start()] if first else interior)

    attributes: AttributeDict = {}
    for key, value in _key_spans(interior):
        _check_unquoted(_unquoted_tail(value))
        attributes[Attribute.from_key(key)] = value
    return attributes


def _unquote(value: str) -> str:
    return value.strip('"')


class InlineParser:
    """Interprets note tags as comments or definitions."""

    def parse(self, tag: str) -> Annotation:
        interior = tag
        if interior.startswith("<note"):
            interior = interior[len("<note") :]
        if interior.endswith(">"):
            interior = interior[:-1]
        attributes = build_attribute_dict(interior)
        return self.interpret(attributes, tag)

    def interpret(self, attributes: AttributeDict, tag: str) -> Annotation:
        # A comment wins when a tag carries both comment= and term=.
        comment = attributes.get(Attribute.COMMENT)
        if comment is not None:
            return Comment(
                tags=self._split_tags(attributes.get(Attribute.TAGS)),
                heading=self._optional(attributes.get(Attribute.HEADING)),
                comment=_unquote(comment),
            )

        term = attributes.get(Attribute.TERM)
        if term is not None:
            definition = attributes.get(Attribute.DEFINITION)
            if definition is None:
                raise MissingAttribute(Attribute.DEFINITION)
            return Definition(term=_unquote(term), definition=_unquote(definition))

        raise UnknownType(tag)

    @staticmethod
    def _split_tags(raw: Optional[str]) -> Tuple[str, ...]:
        if raw is None:
            raise MissingAttribute(Attribute.TAGS)
        tags = tuple(part.strip() for part in _unquote(raw).split(","))
        tags = tuple(tag for tag in tags if tag)
        if not tags:
            raise MissingAttribute(Attribute.TAGS)
        return tags

    @staticmethod
    def _optional(raw: Optional[str]) -> Optional[str]:
        return None if raw is None else _unquote(raw)
