"""
Cross-reference index built from one scan of a document.

The index is the immutable output of a single scan. It is never updated in
place: when the text changes, a new index is built from scratch and replaces
the old one. Numbering, unused/broken classification and all lookups are
therefore always consistent with the text they were built from.

Example:
    >>> index = scan_document("![Cat](cat.png){#fig:a}\\nSee @fig:a.")
    >>> index.definitions[0].label, index.definitions[0].caption
    ('Figure 1', 'Cat')
    >>> index.references[0].is_broken
    False
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .config import XrefConfig
from .constants import UNTITLED_IMAGE_CAPTION
from .errors import UnknownKindError
from .matcher import MatchResult, find_caption, scan

logger = logging.getLogger(__name__)


class Kind(str, Enum):
    """Cross-reference kinds."""

    FIG = "fig"
    TBL = "tbl"

    @classmethod
    def parse(cls, value: str) -> Kind:
        """Parse "fig" or "tbl" (case-insensitive) into a Kind."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownKindError(str(value)) from None


@dataclass(frozen=True)
class Definition:
    """A figure or table definition tag.

    Attributes:
        id: Identifier after the colon
        kind: Kind.FIG or Kind.TBL
        sequence_number: 1-based number, in document order, per kind
        label: Configured prefix followed by sequence_number
        position: Offset of the tag's opening brace
        caption: Adjoining caption, or the id when none was found
        is_unused: No reference in the document uses this id
    """

    id: str
    kind: Kind
    sequence_number: int
    label: str
    position: int
    caption: str
    is_unused: bool

    @property
    def full_id(self) -> str:
        """Kind and id joined as they appear in markup, e.g. "fig:a"."""
        return f"{self.kind.value}:{self.id}"


@dataclass(frozen=True)
class Reference:
    """An in-text reference.

    Attributes:
        id: Identifier after the colon
        kind: Kind.FIG or Kind.TBL
        position: Offset of the "@"
        raw_text: The reference token, e.g. "@fig:a"
        is_broken: No definition in the document has this id
    """

    id: str
    kind: Kind
    position: int
    raw_text: str
    is_broken: bool


@dataclass(frozen=True)
class UndefinedImage:
    """Image markup that is not followed by a figure tag."""

    caption: str
    position: int


@dataclass(frozen=True)
class IndexSummary:
    """Counts shown in the outline header."""

    definitions: int
    figures: int
    tables: int
    references: int
    orphan_references: int
    unused_definitions: int
    undefined_images: int

    def __str__(self) -> str:
        return (
            f"Definitions: {self.definitions} | "
            f"Broken references: {self.orphan_references} | "
            f"Undefined images: {self.undefined_images}"
        )


def _readonly(data: dict) -> Mapping:
    return MappingProxyType(data)


@dataclass(frozen=True)
class CrossReferenceIndex:
    """All definitions, references and derived lookups for one document scan.

    Lookups key on the bare id unless the index was built with
    ``scoped_ids=True``, in which case "fig:a" and "tbl:a" are distinct.
    Use the query methods rather than the maps directly so both modes work.
    """

    definitions: tuple[Definition, ...] = ()
    references: tuple[Reference, ...] = ()
    orphan_references: tuple[Reference, ...] = ()
    undefined_images: tuple[UndefinedImage, ...] = ()
    scoped_ids: bool = False

    fig_numbers: Mapping[str, int] = field(default_factory=lambda: _readonly({}))
    tbl_numbers: Mapping[str, int] = field(default_factory=lambda: _readonly({}))
    positions: Mapping[object, int] = field(default_factory=lambda: _readonly({}))
    unused: Mapping[object, bool] = field(default_factory=lambda: _readonly({}))
    defined_ids: frozenset = frozenset()

    def _key(self, kind: Kind | str, id: str) -> object:
        return (Kind(kind), id) if self.scoped_ids else id

    def number_for(self, kind: Kind | str, id: str) -> int | None:
        """Sequence number of ``id`` among definitions of ``kind``, or None."""
        numbers = self.fig_numbers if Kind(kind) is Kind.FIG else self.tbl_numbers
        return numbers.get(id)

    def position_for(self, kind: Kind | str, id: str) -> int | None:
        """Offset of the definition that ``kind:id`` resolves to, or None."""
        return self.positions.get(self._key(kind, id))

    def is_defined(self, kind: Kind | str, id: str) -> bool:
        """True if a reference to ``kind:id`` resolves to some definition."""
        return self._key(kind, id) in self.defined_ids

    def is_unused(self, kind: Kind | str, id: str) -> bool:
        """True if the definition ``kind:id`` exists and nothing references it."""
        return self.unused.get(self._key(kind, id), False)

    def definitions_of(self, kind: Kind | str) -> list[Definition]:
        """Definitions of one kind in document order."""
        kind = Kind(kind)
        return [d for d in self.definitions if d.kind is kind]

    def summary(self) -> IndexSummary:
        """Return counts for the outline header."""
        return IndexSummary(
            definitions=len(self.definitions),
            figures=len(self.definitions_of(Kind.FIG)),
            tables=len(self.definitions_of(Kind.TBL)),
            references=len(self.references),
            orphan_references=len(self.orphan_references),
            unused_definitions=sum(1 for d in self.definitions if d.is_unused),
            undefined_images=len(self.undefined_images),
        )


def build_index(
    text: str, matches: MatchResult, config: XrefConfig | None = None
) -> CrossReferenceIndex:
    """Build the cross-reference index from matcher output.

    Definitions are numbered per kind in match order. A definition is unused
    when no reference carries its id; a reference is broken when no
    definition carries its id. Kinds are ignored in both tests unless
    ``config.scoped_ids`` is set.

    Args:
        text: The text the matches were taken from (used for caption lookback)
        matches: Output of ``matcher.scan(text)``
        config: Settings supplying label prefixes and id scoping

    Returns:
        A new CrossReferenceIndex
    """
    config = config or XrefConfig()
    scoped = config.scoped_ids

    def key(kind: Kind, id: str) -> object:
        return (kind, id) if scoped else id

    counters = {Kind.FIG: 0, Kind.TBL: 0}
    numbers: dict[Kind, dict[str, int]] = {Kind.FIG: {}, Kind.TBL: {}}
    positions: dict[object, int] = {}
    defined: set[object] = set()
    pending = []

    for match in matches.definitions:
        kind = Kind(match.kind)
        counters[kind] += 1
        number = counters[kind]
        caption = find_caption(text, match.start, match.kind)
        pending.append((match, kind, number, caption.text if caption else match.id))
        numbers[kind][match.id] = number
        positions[key(kind, match.id)] = match.start
        defined.add(key(kind, match.id))

    references = []
    for match in matches.references:
        kind = Kind(match.kind)
        references.append(
            Reference(
                id=match.id,
                kind=kind,
                position=match.token_start,
                raw_text=match.raw_text,
                is_broken=key(kind, match.id) not in defined,
            )
        )

    used = {key(r.kind, r.id) for r in references}
    definitions = []
    unused: dict[object, bool] = {}
    for match, kind, number, caption in pending:
        is_unused = key(kind, match.id) not in used
        unused[key(kind, match.id)] = is_unused
        definitions.append(
            Definition(
                id=match.id,
                kind=kind,
                sequence_number=number,
                label=f"{config.prefix_for(kind.value)}{number}",
                position=match.start,
                caption=caption or match.id,
                is_unused=is_unused,
            )
        )

    undefined_images = tuple(
        UndefinedImage(caption=image.alt or UNTITLED_IMAGE_CAPTION, position=image.start)
        for image in matches.images
        if not image.is_defined
    )
    orphans = tuple(r for r in references if r.is_broken)

    logger.debug(
        "Indexed %d definitions, %d references (%d broken), %d undefined images",
        len(definitions),
        len(references),
        len(orphans),
        len(undefined_images),
    )

    return CrossReferenceIndex(
        definitions=tuple(definitions),
        references=tuple(references),
        orphan_references=orphans,
        undefined_images=undefined_images,
        scoped_ids=scoped,
        fig_numbers=_readonly(numbers[Kind.FIG]),
        tbl_numbers=_readonly(numbers[Kind.TBL]),
        positions=_readonly(positions),
        unused=_readonly(unused),
        defined_ids=frozenset(defined),
    )


def scan_document(text: str, config: XrefConfig | None = None) -> CrossReferenceIndex:
    """Scan ``text`` and build its cross-reference index.

    This is a pure function: the same text and config always produce an
    equal index, and nothing is carried over between calls.
    """
    return build_index(text, scan(text), config)
