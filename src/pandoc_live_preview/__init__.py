"""
pandoc_live_preview - Live cross-reference index for Pandoc figure/table markup.

This package scans Markdown text for ``{#fig:id}``/``{#tbl:id}`` definitions
and ``@fig:id``/``@tbl:id`` references, numbers them, flags broken and unused
entries, and plans the decorations an editor overlays on the raw text.

Example:
    >>> from pandoc_live_preview import scan_document, plan_decorations
    >>> text = "![Cat](cat.png){#fig:a}\\nSee @fig:a."
    >>> index = scan_document(text)
    >>> index.definitions[0].label
    'Figure 1'
    >>> [d.display_text for d in plan_decorations(text, index)]
    ['Figure 1 Cat', 'Figure 1']
"""

__version__ = "0.1.0"
__all__ = [
    "XrefConfig",
    "load_config",
    "config_from_dict",
    "PreviewError",
    "ConfigError",
    "UnknownKindError",
    "Kind",
    "Definition",
    "Reference",
    "UndefinedImage",
    "CrossReferenceIndex",
    "IndexSummary",
    "build_index",
    "scan_document",
    "MatchResult",
    "scan",
    "DecorationInstruction",
    "InstructionKind",
    "LabelStyle",
    "SelectionRange",
    "Status",
    "apply_decorations",
    "plan_decorations",
    "Suggestion",
    "SuggestionTrigger",
    "TextReplacement",
    "accept_suggestion",
    "find_trigger",
    "get_suggestions",
    "PreviewSession",
    "generate_timestamp_id",
    "make_definition_tag",
    # Reports
    "export_index_json",
    "export_index_markdown",
    "generate_audit_report",
]

# Import configuration
from .config import XrefConfig, config_from_dict, load_config

# Import decoration planning
from .decorations import (
    DecorationInstruction,
    InstructionKind,
    LabelStyle,
    SelectionRange,
    Status,
    apply_decorations,
    plan_decorations,
)
from .errors import ConfigError, PreviewError, UnknownKindError

# Import index types
from .index import (
    CrossReferenceIndex,
    Definition,
    IndexSummary,
    Kind,
    Reference,
    UndefinedImage,
    build_index,
    scan_document,
)
from .matcher import MatchResult, scan

# Import report functionality
from .report import export_index_json, export_index_markdown, generate_audit_report

# Import live session
from .session import PreviewSession

# Import suggestion provider
from .suggestions import (
    Suggestion,
    SuggestionTrigger,
    TextReplacement,
    accept_suggestion,
    find_trigger,
    get_suggestions,
)
from .tags import generate_timestamp_id, make_definition_tag
