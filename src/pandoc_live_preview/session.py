"""
Event-driven recomputation for a live-edited document.

A PreviewSession sits between an editor and the engine. On every text change
or selection change it rebuilds the index and the decorations synchronously
and swaps them in by reference. Previously returned objects are never
mutated, so a consumer still holding the old index keeps a consistent view.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .config import XrefConfig
from .decorations import DecorationInstruction, SelectionRange, plan_decorations
from .index import CrossReferenceIndex, scan_document
from .suggestions import (
    Suggestion,
    SuggestionTrigger,
    TextReplacement,
    accept_suggestion,
    find_trigger,
    get_suggestions,
)

logger = logging.getLogger(__name__)


class PreviewSession:
    """Holds the latest scan of one document.

    Example:
        >>> session = PreviewSession()
        >>> session.update("{#fig:a} see @fig:a")
        >>> [d.display_text for d in session.decorations]
        ['Figure 1', 'Figure 1']
    """

    def __init__(self, config: XrefConfig | None = None, text: str = "") -> None:
        self._config = config or XrefConfig()
        self._text = text
        self._selections: tuple[SelectionRange | tuple[int, int], ...] = ()
        self._index = scan_document(text, self._config)
        self._decorations = plan_decorations(text, self._index, self._config)

    @property
    def config(self) -> XrefConfig:
        return self._config

    @property
    def text(self) -> str:
        return self._text

    @property
    def index(self) -> CrossReferenceIndex:
        """Index of the current text."""
        return self._index

    @property
    def decorations(self) -> list[DecorationInstruction]:
        """Decorations for the current text and selection (a fresh list per update)."""
        return self._decorations

    def update(
        self, text: str, selections: Iterable[SelectionRange | tuple[int, int]] | None = None
    ) -> None:
        """Handle a document change: rescan and replan."""
        if selections is not None:
            self._selections = tuple(selections)
        self._text = text
        self._index = scan_document(text, self._config)
        self._replan()

    def select(self, selections: Iterable[SelectionRange | tuple[int, int]]) -> None:
        """Handle a selection change."""
        self._selections = tuple(selections)
        self._replan()

    def reconfigure(self, config: XrefConfig) -> None:
        """Apply new settings; labels and layout are rebuilt immediately."""
        self._config = config
        self._index = scan_document(self._text, config)
        self._replan()

    def _replan(self) -> None:
        self._decorations = plan_decorations(
            self._text, self._index, self._config, self._selections
        )
        logger.debug(
            "Session updated: %d definitions, %d decorations",
            len(self._index.definitions),
            len(self._decorations),
        )

    def suggest(self, line_text: str, column: int, line: int = 0) -> tuple[
        SuggestionTrigger | None, list[Suggestion]
    ]:
        """Return the trigger at the cursor and its candidates from the current index."""
        trigger = find_trigger(line_text, column, line)
        if trigger is None:
            return None, []
        return trigger, get_suggestions(self._index, trigger.query, self._config.suggestion_limit)

    def accept(self, suggestion: Suggestion, trigger: SuggestionTrigger) -> TextReplacement:
        """Return the replacement for an accepted candidate."""
        return accept_suggestion(suggestion, trigger, self._config)
