"""
Completion candidates for partially typed references.

The editor integration calls ``find_trigger`` with the text of the cursor's
line on every keystroke. When the text just before the cursor looks like the
start of a reference (``@``, ``@fi``, ``@fig:``, ``@tbl:res`` ...), it gets a
trigger range and a query. ``get_suggestions`` filters the current index for
that query, and ``accept_suggestion`` produces the text that replaces the
trigger range once the user picks a candidate.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import XrefConfig
from .constants import DEFAULT_SUGGESTION_LIMIT, TRIGGER_PATTERN
from .index import CrossReferenceIndex, Definition


@dataclass(frozen=True)
class SuggestionTrigger:
    """A partial reference token ending at the cursor.

    Attributes:
        line: Zero-based line number of the cursor
        start: Column where the token starts (the "@")
        end: Column of the cursor; the range is half-open
        query: The token text, e.g. "@fig:ca"
    """

    line: int
    start: int
    end: int
    query: str


@dataclass(frozen=True)
class Suggestion:
    """A completion candidate.

    Attributes:
        definition: The definition being suggested
        text: The reference token for it, e.g. "@fig:cat"
    """

    definition: Definition
    text: str

    @property
    def label(self) -> str:
        return self.definition.label

    def __str__(self) -> str:
        return f"{self.definition.label} ({self.definition.id})"


@dataclass(frozen=True)
class TextReplacement:
    """Replace columns ``[start, end)`` of ``line`` with ``text``."""

    line: int
    start: int
    end: int
    text: str

    def apply(self, line_text: str) -> str:
        """Return ``line_text`` with the replacement made."""
        return line_text[: self.start] + self.text + line_text[self.end :]


def find_trigger(line_text: str, column: int, line: int = 0) -> SuggestionTrigger | None:
    """Detect a partial reference token ending exactly at ``column``.

    Args:
        line_text: Full text of the cursor's line
        column: Cursor column within the line
        line: Line number, carried through to the trigger

    Returns:
        SuggestionTrigger, or None when there is nothing to complete
    """
    column = max(0, min(column, len(line_text)))
    match = TRIGGER_PATTERN.search(line_text, 0, column)
    if match is None:
        return None
    return SuggestionTrigger(line=line, start=match.start(), end=column, query=match.group(0))


def get_suggestions(
    index: CrossReferenceIndex, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT
) -> list[Suggestion]:
    """Return definitions whose "@kind:id" contains ``query``, ignoring case.

    Candidates keep the index's definition order; there is no re-ranking.
    """
    needle = query.lower()
    suggestions = []
    for definition in index.definitions:
        token = f"@{definition.full_id}"
        if needle in token.lower():
            suggestions.append(Suggestion(definition=definition, text=token))
            if len(suggestions) >= limit:
                break
    return suggestions


def accept_suggestion(
    suggestion: Suggestion, trigger: SuggestionTrigger, config: XrefConfig | None = None
) -> TextReplacement:
    """Build the replacement for the trigger range once a candidate is picked."""
    config = config or XrefConfig()
    text = suggestion.text
    if config.auto_parentheses:
        text = f"( {text} )"
    return TextReplacement(line=trigger.line, start=trigger.start, end=trigger.end, text=text)
