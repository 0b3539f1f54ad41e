"""
Decoration planning for the live preview.

The planner walks the text a second time with the same patterns the matcher
uses and produces span-replacement instructions: "show this annotation in
place of text[start:end]". Instructions never modify the document. Any
presentation layer (terminal, web view, native editor) can draw them.

Layout adjustments follow the preview's conventions:
- A figure definition right after an image takes the image's alt text as its
  caption. With ``hide_gap_around_image``, the blank line before the image is
  hidden by a separate GAP instruction, the whitespace between image and tag
  is absorbed, and one line break after the tag is absorbed.
- A table definition with a ``: caption`` run absorbs the caption text.
- Spans touching a selection or cursor are skipped so the raw markup stays
  editable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .config import XrefConfig
from .constants import BROKEN_MARKER
from .index import CrossReferenceIndex, Kind
from .matcher import CaptionSource, find_caption, find_definitions, find_references

logger = logging.getLogger(__name__)


class InstructionKind(Enum):
    """What a decoration instruction draws."""

    LABEL = "label"
    GAP = "gap"


class Status(Enum):
    """Display status of a labelled occurrence."""

    NORMAL = "normal"
    UNUSED = "unused"
    BROKEN = "broken"


@dataclass(frozen=True)
class SelectionRange:
    """A cursor or selection span, ``start <= end``."""

    start: int
    end: int


@dataclass(frozen=True)
class LabelStyle:
    """Renderer-agnostic style hints for a label.

    ``center`` and the offsets only apply to definition labels.
    """

    color: str | None = None
    bold: bool = False
    center: bool = False
    top_offset: int = 0
    bottom_distance: int = 0


@dataclass(frozen=True)
class DecorationInstruction:
    """Replace ``text[start:end]`` with an annotation.

    Attributes:
        start: Offset where the replaced span begins
        end: Offset where the replaced span ends (exclusive)
        kind: LABEL for definitions and references, GAP for hidden blank lines
        target_kind: "fig" or "tbl" (None for gaps)
        is_definition: True for definition tags, False for references
        text: "<prefix><number>" or, for broken references, the bare id
        caption: Caption shown after a definition label ("" if none)
        suffix: Letter appended to a reference label ("" if none)
        has_paren: Wrap the reference label in parentheses
        status: NORMAL, UNUSED (definitions) or BROKEN (references)
        jump_target: Definition offset to navigate to on click, if enabled
        style: Style hints, None for broken references and gaps
    """

    start: int
    end: int
    kind: InstructionKind = InstructionKind.LABEL
    target_kind: str | None = None
    is_definition: bool = False
    text: str = ""
    caption: str = ""
    suffix: str = ""
    has_paren: bool = False
    status: Status = Status.NORMAL
    jump_target: int | None = None
    style: LabelStyle | None = None

    @property
    def display_text(self) -> str:
        """Text the renderer shows in place of the span."""
        if self.kind is InstructionKind.GAP:
            return ""
        if self.is_definition:
            return f"{self.text} {self.caption}" if self.caption else self.text
        if self.status is Status.BROKEN:
            return f"{BROKEN_MARKER} @{self.target_kind}:{self.text}"
        content = f"{self.text}{self.suffix}"
        return f"({content})" if self.has_paren else content

    @property
    def tooltip(self) -> str | None:
        """Hover text for flagged occurrences."""
        if self.status is Status.UNUSED:
            return "Warning: this figure/table is never referenced"
        if self.status is Status.BROKEN:
            return "Error: the referenced id does not exist"
        return None

    @property
    def css_classes(self) -> list[str]:
        """Class names for HTML-like renderers."""
        if self.kind is InstructionKind.GAP:
            return ["pandoc-gap"]
        classes = [
            "pandoc-widget",
            f"pandoc-{self.target_kind}",
            "pandoc-def" if self.is_definition else "pandoc-ref",
        ]
        if self.status is Status.UNUSED:
            classes.append("pandoc-unused")
        elif self.status is Status.BROKEN:
            classes.append("pandoc-broken")
        if self.caption:
            classes.append("has-caption")
        if self.jump_target is not None:
            classes.append("pandoc-clickable")
        return classes

    def to_dict(self) -> dict:
        """Serializable form for JSON output."""
        return {
            "start": self.start,
            "end": self.end,
            "kind": self.kind.value,
            "target_kind": self.target_kind,
            "is_definition": self.is_definition,
            "status": self.status.value,
            "display_text": self.display_text,
            "jump_target": self.jump_target,
            "tooltip": self.tooltip,
        }


def _normalize_selections(
    selections: Iterable[SelectionRange | tuple[int, int]],
) -> list[SelectionRange]:
    normalized = []
    for sel in selections:
        if not isinstance(sel, SelectionRange):
            sel = SelectionRange(*sel)
        if sel.start > sel.end:
            sel = SelectionRange(sel.end, sel.start)
        normalized.append(sel)
    return normalized


def overlaps_selection(start: int, end: int, selections: Iterable[SelectionRange]) -> bool:
    """True if ``[start, end]`` touches any selection (closed-interval test)."""
    return any(sel.start <= end and sel.end >= start for sel in selections)


def _skip_whitespace_backward(text: str, position: int) -> int:
    """Move ``position`` back over spaces and line breaks."""
    while position > 0 and text[position - 1] in "\n\r ":
        position -= 1
    return position


def _skip_horizontal_space(text: str, position: int) -> int:
    while position < len(text) and text[position] in " \t":
        position += 1
    return position


def _definition_style(config: XrefConfig, status: Status) -> LabelStyle:
    return LabelStyle(
        # Unused labels keep the renderer's warning color
        color=config.caption_color if status is not Status.UNUSED else None,
        bold=config.caption_bold,
        center=config.caption_center,
        top_offset=config.caption_top_offset,
        bottom_distance=config.caption_bottom_distance,
    )


def _reference_style(config: XrefConfig) -> LabelStyle:
    return LabelStyle(color=config.reference_color, bold=config.reference_bold)


def _plan_definitions(
    text: str,
    index: CrossReferenceIndex,
    config: XrefConfig,
    selections: list[SelectionRange],
) -> list[DecorationInstruction]:
    planned = []
    for match in find_definitions(text):
        kind = Kind(match.kind)
        start, end = match.start, match.end
        caption = find_caption(text, start, match.kind)
        caption_text = caption.text if caption is not None else ""

        if kind is Kind.FIG:
            if caption is not None and caption.source is CaptionSource.IMAGE:
                if config.hide_gap_around_image:
                    image_start = caption.start
                    if image_start > 0 and text[image_start - 1] == "\n":
                        gap_start = image_start - 1
                        if not overlaps_selection(gap_start, image_start, selections):
                            planned.append(
                                DecorationInstruction(
                                    start=gap_start, end=image_start, kind=InstructionKind.GAP
                                )
                            )
                    start = _skip_whitespace_backward(text, start)
            if config.hide_gap_around_image:
                check = _skip_horizontal_space(text, end)
                if text.startswith("\r\n", check):
                    end = check + 2
                elif text.startswith("\n", check):
                    end = check + 1
        elif caption is not None and caption.source is CaptionSource.COLON:
            start = _skip_whitespace_backward(text, caption.start)

        if overlaps_selection(start, end, selections):
            logger.debug("Skipping definition %s:%s under selection", match.kind, match.id)
            continue

        status = Status.UNUSED if index.is_unused(kind, match.id) else Status.NORMAL
        number = index.number_for(kind, match.id)
        planned.append(
            DecorationInstruction(
                start=start,
                end=end,
                target_kind=match.kind,
                is_definition=True,
                text=f"{config.prefix_for(match.kind)}{number if number is not None else '?'}",
                caption=caption_text,
                status=status,
                style=_definition_style(config, status),
            )
        )
    return planned


def _plan_references(
    text: str,
    index: CrossReferenceIndex,
    config: XrefConfig,
    selections: list[SelectionRange],
) -> list[DecorationInstruction]:
    planned = []
    for match in find_references(text):
        kind = Kind(match.kind)
        # An unpaired parenthesis stays visible as ordinary text
        if match.has_paren:
            start, end = match.start, match.end
        else:
            start, end = match.token_start, match.token_end

        if overlaps_selection(start, end, selections):
            logger.debug("Skipping reference %s under selection", match.raw_text)
            continue

        if not index.is_defined(kind, match.id):
            planned.append(
                DecorationInstruction(
                    start=start,
                    end=end,
                    target_kind=match.kind,
                    text=match.id,
                    suffix=match.suffix,
                    has_paren=match.has_paren,
                    status=Status.BROKEN,
                )
            )
            continue

        number = index.number_for(kind, match.id)
        jump_target = None
        if config.enable_click_to_jump:
            jump_target = index.position_for(kind, match.id)
        planned.append(
            DecorationInstruction(
                start=start,
                end=end,
                target_kind=match.kind,
                text=f"{config.prefix_for(match.kind)}{number if number is not None else '?'}",
                suffix=match.suffix,
                has_paren=match.has_paren,
                jump_target=jump_target,
                style=_reference_style(config),
            )
        )
    return planned


def plan_decorations(
    text: str,
    index: CrossReferenceIndex,
    config: XrefConfig | None = None,
    selections: Iterable[SelectionRange | tuple[int, int]] = (),
) -> list[DecorationInstruction]:
    """Plan the decorations for ``text``.

    Args:
        text: Current document text
        index: Index built from the same text
        config: Prefixes, layout switches and style settings
        selections: Cursor/selection ranges as SelectionRange or (from, to)
            tuples. Any span touching one of them is left undecorated.

    Returns:
        Non-overlapping instructions sorted by start offset. If two planned
        spans would overlap, the one starting first is kept; definitions win
        ties with references.
    """
    config = config or XrefConfig()
    ranges = _normalize_selections(selections)

    planned = _plan_definitions(text, index, config, ranges)
    planned.extend(_plan_references(text, index, config, ranges))
    # Gaps sort before the label that follows them; definitions before references
    planned.sort(
        key=lambda d: (d.start, d.kind is not InstructionKind.GAP, not d.is_definition)
    )

    instructions: list[DecorationInstruction] = []
    for instruction in planned:
        if instructions and instruction.start < instructions[-1].end:
            logger.debug(
                "Dropping decoration [%d, %d) overlapping [%d, %d)",
                instruction.start,
                instruction.end,
                instructions[-1].start,
                instructions[-1].end,
            )
            continue
        instructions.append(instruction)

    logger.debug("Planned %d decorations", len(instructions))
    return instructions


def apply_decorations(text: str, instructions: Iterable[DecorationInstruction]) -> str:
    """Render a plain-text preview by substituting each span's display text.

    ``instructions`` must be sorted and non-overlapping, as returned by
    ``plan_decorations``.
    """
    parts = []
    cursor = 0
    for instruction in instructions:
        parts.append(text[cursor : instruction.start])
        parts.append(instruction.display_text)
        cursor = instruction.end
    parts.append(text[cursor:])
    return "".join(parts)
