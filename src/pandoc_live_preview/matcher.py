"""Pattern matching for cross-reference markup in raw document text.

This module extracts three kinds of occurrences from a text blob:
1. Definitions: ``{#fig:id}`` and ``{#tbl:id}`` tags
2. References: ``@fig:id``, optionally wrapped as ``( @fig:id )`` and
   optionally followed by a one-letter suffix (``@fig:a b``)
3. Images: ``![alt](url)`` and ``![alt](<url>)``

It also attributes captions to definitions by looking backward from the tag.

Matching is purely textual. There is no Markdown awareness, so markup inside
code spans or comments is matched like any other text, and malformed tags
simply do not match.

Example:
    >>> result = scan("![Cat](cat.png){#fig:a} See @fig:a.")
    >>> [(d.kind, d.id) for d in result.definitions]
    [('fig', 'a')]
    >>> find_caption("![Cat](cat.png){#fig:a}", 15, "fig").text
    'Cat'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import (
    COLON_CAPTION_PATTERN,
    DEFINITION_PATTERN,
    FIGURE_TAG_LOOKAHEAD,
    FIGURE_TAG_OPENER,
    IMAGE_CAPTION_LOOKBACK,
    IMAGE_PATTERN,
    IMAGE_TAIL_PATTERN,
    REFERENCE_PATTERN,
    TABLE_CAPTION_LOOKBACK,
    TBL,
)


class CaptionSource(Enum):
    """Where a definition's caption was found."""

    IMAGE = "image"
    COLON = "colon"


@dataclass(frozen=True)
class DefinitionMatch:
    """A ``{#kind:id}`` tag found in the text.

    Attributes:
        kind: "fig" or "tbl"
        id: The identifier after the colon
        start: Offset of the opening brace
        end: Offset just past the closing brace
    """

    kind: str
    id: str
    start: int
    end: int


@dataclass(frozen=True)
class ReferenceMatch:
    """An ``@kind:id`` reference found in the text.

    Attributes:
        kind: "fig" or "tbl"
        id: The identifier after the colon
        start: Offset of the match, including any opening parenthesis
        end: Offset just past the match, including any closing parenthesis
        token_start: Offset of the "@"
        token_end: Offset just past the id, or past the suffix letter if present
        suffix: Single-letter suffix ("" if none)
        has_open_paren: An opening "(" precedes the token
        has_close_paren: A closing ")" follows the token
    """

    kind: str
    id: str
    start: int
    end: int
    token_start: int
    token_end: int
    suffix: str = ""
    has_open_paren: bool = False
    has_close_paren: bool = False

    @property
    def has_paren(self) -> bool:
        """True only when both the opening and closing parenthesis are present."""
        return self.has_open_paren and self.has_close_paren

    @property
    def raw_text(self) -> str:
        """The bare reference token, e.g. "@fig:a"."""
        return f"@{self.kind}:{self.id}"


@dataclass(frozen=True)
class ImageMatch:
    """An image markup occurrence.

    Attributes:
        alt: The alt text between the brackets (not stripped)
        start: Offset of the "!"
        end: Offset just past the closing parenthesis
        is_defined: A figure tag follows the image after only whitespace
    """

    alt: str
    start: int
    end: int
    is_defined: bool


@dataclass(frozen=True)
class CaptionMatch:
    """A caption attributed to a definition by looking backward from its tag.

    Attributes:
        source: CaptionSource.IMAGE or CaptionSource.COLON
        text: The caption text, stripped ("" for an image without alt text)
        start: Offset where the matched markup begins (the "!" or the ":")
    """

    source: CaptionSource
    text: str
    start: int


@dataclass(frozen=True)
class MatchResult:
    """All occurrences found in one pass over a text, each list in document order."""

    definitions: list[DefinitionMatch]
    references: list[ReferenceMatch]
    images: list[ImageMatch]


def find_definitions(text: str) -> list[DefinitionMatch]:
    """Find all definition tags in document order."""
    return [
        DefinitionMatch(kind=m.group(1), id=m.group(2), start=m.start(), end=m.end())
        for m in DEFINITION_PATTERN.finditer(text)
    ]


def find_references(text: str) -> list[ReferenceMatch]:
    """Find all references in document order.

    Each match records whether it is wrapped in parentheses. A reference only
    counts as parenthesized when both the "(" and the ")" are present;
    ``@fig:a)`` on its own is not.
    """
    references = []
    for m in REFERENCE_PATTERN.finditer(text):
        suffix = m.group("suffix") or ""
        token_end = m.end("suffix") if suffix else m.end("id")
        references.append(
            ReferenceMatch(
                kind=m.group("kind"),
                id=m.group("id"),
                start=m.start(),
                end=m.end(),
                token_start=m.start("kind") - 1,
                token_end=token_end,
                suffix=suffix,
                has_open_paren=m.group("open") is not None,
                has_close_paren=m.group("close") is not None,
            )
        )
    return references


def find_images(text: str) -> list[ImageMatch]:
    """Find all image markup in document order.

    An image is "defined" when it is followed, after only whitespace, by a
    figure tag opener ``{#fig:``.
    """
    images = []
    for m in IMAGE_PATTERN.finditer(text):
        following = text[m.end() : m.end() + FIGURE_TAG_LOOKAHEAD]
        images.append(
            ImageMatch(
                alt=m.group(1),
                start=m.start(),
                end=m.end(),
                is_defined=FIGURE_TAG_OPENER.match(following) is not None,
            )
        )
    return images


def find_image_before(text: str, position: int) -> tuple[str, int] | None:
    """Find image markup that ends right before ``position``.

    Only whitespace may separate the image from ``position``. The search
    covers the preceding IMAGE_CAPTION_LOOKBACK characters.

    Returns:
        Tuple of (alt text, offset of the "!") or None
    """
    window_start = max(0, position - IMAGE_CAPTION_LOOKBACK)
    match = IMAGE_TAIL_PATTERN.search(text, window_start, position)
    if match is None:
        return None
    return match.group(1), match.start()


def find_colon_caption(text: str, position: int) -> tuple[str, int] | None:
    """Find a ``: caption`` run on the same line, ending right before ``position``.

    The caption may not contain a line break or a "{". The search covers the
    preceding TABLE_CAPTION_LOOKBACK characters.

    Returns:
        Tuple of (caption text, offset of the ":") or None
    """
    window_start = max(0, position - TABLE_CAPTION_LOOKBACK)
    match = COLON_CAPTION_PATTERN.search(text, window_start, position)
    if match is None:
        return None
    return match.group(1)[1:].strip(), match.start()


def find_caption(text: str, position: int, kind: str) -> CaptionMatch | None:
    """Attribute a caption to the definition tag starting at ``position``.

    Precedence:
    1. Alt text of an image immediately before the tag (any kind)
    2. For table tags only, a ``: caption`` run on the same line

    An image with empty alt text still counts as the adjoining markup; its
    caption text is "". Figure tags never take a colon caption.

    Args:
        text: Full document text
        position: Offset of the definition tag's opening brace
        kind: "fig" or "tbl"

    Returns:
        CaptionMatch or None if no caption adjoins the tag
    """
    image = find_image_before(text, position)
    if image is not None:
        alt, start = image
        return CaptionMatch(source=CaptionSource.IMAGE, text=alt.strip(), start=start)

    if kind == TBL:
        colon = find_colon_caption(text, position)
        if colon is not None:
            caption, start = colon
            return CaptionMatch(source=CaptionSource.COLON, text=caption, start=start)

    return None


def scan(text: str) -> MatchResult:
    """Run every matcher over ``text``."""
    return MatchResult(
        definitions=find_definitions(text),
        references=find_references(text),
        images=find_images(text),
    )
