"""
Audit reports for a document's cross-references.

This module renders the contents of the outline panel: summary counts,
broken references, images without a figure tag, and the numbered list of
definitions with unused ones flagged. Every entry carries its document
offset and 1-based line number so a consumer can navigate to it.
"""

from __future__ import annotations

import bisect
import json
from datetime import datetime
from typing import Any, Literal

from .index import CrossReferenceIndex


class LineLocator:
    """Maps document offsets to 1-based line numbers."""

    def __init__(self, text: str) -> None:
        self._line_starts = [0]
        for i, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(i + 1)

    def line_of(self, offset: int) -> int:
        return max(1, bisect.bisect_right(self._line_starts, offset))


def _index_to_dict(index: CrossReferenceIndex, text: str) -> dict[str, Any]:
    """Convert an index to a dictionary for JSON serialization."""
    locate = LineLocator(text).line_of
    summary = index.summary()
    return {
        "summary": {
            "definitions": summary.definitions,
            "figures": summary.figures,
            "tables": summary.tables,
            "references": summary.references,
            "orphan_references": summary.orphan_references,
            "unused_definitions": summary.unused_definitions,
            "undefined_images": summary.undefined_images,
        },
        "definitions": [
            {
                "id": d.id,
                "kind": d.kind.value,
                "sequence_number": d.sequence_number,
                "label": d.label,
                "caption": d.caption,
                "position": d.position,
                "line": locate(d.position),
                "is_unused": d.is_unused,
            }
            for d in index.definitions
        ],
        "orphan_references": [
            {
                "id": r.id,
                "kind": r.kind.value,
                "text": r.raw_text,
                "position": r.position,
                "line": locate(r.position),
            }
            for r in index.orphan_references
        ],
        "undefined_images": [
            {"caption": img.caption, "position": img.position, "line": locate(img.position)}
            for img in index.undefined_images
        ],
    }


def export_index_json(index: CrossReferenceIndex, text: str, indent: int | None = 2) -> str:
    """Export the index as JSON.

    Args:
        index: Index built from ``text``
        text: The scanned text, used for line numbers
        indent: JSON indentation level, or None for compact output

    Returns:
        JSON string with summary, definitions, orphan references and
        undefined images
    """
    return json.dumps(_index_to_dict(index, text), indent=indent, ensure_ascii=False)


def export_index_markdown(
    index: CrossReferenceIndex, text: str, title: str = "Cross-Reference Audit"
) -> str:
    """Export the index as a Markdown audit report.

    Sections appear in the outline panel's order: broken references first,
    then untagged images, then all definitions.
    """
    locate = LineLocator(text).line_of
    summary = index.summary()

    lines = [f"# {title}", ""]
    lines.extend(
        [
            "## Summary",
            "",
            f"- **Definitions**: {summary.definitions}"
            f" ({summary.figures} figures, {summary.tables} tables)",
            f"- **References**: {summary.references}",
            f"- **Broken references**: {summary.orphan_references}",
            f"- **Unused definitions**: {summary.unused_definitions}",
            f"- **Undefined images**: {summary.undefined_images}",
            "",
        ]
    )

    if index.orphan_references:
        lines.extend(["## Broken References", ""])
        for ref in index.orphan_references:
            lines.append(f"- `{ref.raw_text}` (line {locate(ref.position)})")
        lines.append("")

    if index.undefined_images:
        lines.extend(["## Images Without a Figure Tag", ""])
        for img in index.undefined_images:
            lines.append(f"- {img.caption} (line {locate(img.position)})")
        lines.append("")

    if index.definitions:
        lines.extend(["## Definitions", ""])
        for d in index.definitions:
            marker = " *(unused)*" if d.is_unused else ""
            location = f"`{d.full_id}`, line {locate(d.position)}"
            lines.append(f"- **{d.label}** {d.caption}{marker} ({location})")
        lines.append("")
    else:
        lines.append("*No figure or table definitions found.*")

    return "\n".join(lines)


def generate_audit_report(
    index: CrossReferenceIndex,
    text: str,
    format: Literal["markdown", "json"] = "markdown",
    title: str | None = None,
) -> str:
    """Generate an audit report in the requested format.

    The JSON form adds a title and generation timestamp around the
    ``export_index_json`` payload.
    """
    if format == "json":
        report = {
            "title": title or "Cross-Reference Audit",
            "generated_at": datetime.now().isoformat(),
            **_index_to_dict(index, text),
        }
        return json.dumps(report, indent=2, ensure_ascii=False)
    return export_index_markdown(index, text, title=title or "Cross-Reference Audit")
