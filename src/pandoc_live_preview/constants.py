"""
Centralized patterns and limits for cross-reference scanning.

The index builder and the decoration planner both walk the document text.
They share the compiled patterns below so that offsets produced by either
pass always agree. Import from here rather than re-declaring a pattern.
"""

import re

# =============================================================================
# Kinds
# =============================================================================

FIG = "fig"
TBL = "tbl"

# Identifier characters accepted after "fig:" / "tbl:"
ID_CHARS = r"[A-Za-z0-9_\-]"


# =============================================================================
# Definitions: {#fig:id} or {#tbl:id width=50%}
# =============================================================================

# Group 1: kind, group 2: id. Trailing attributes are matched and ignored.
DEFINITION_PATTERN = re.compile(r"\{#(fig|tbl):(" + ID_CHARS + r"+)(?:\s+.*?)?\}")


# =============================================================================
# References: @fig:id, ( @fig:id ), @fig:id a
# =============================================================================

# Groups: open  - "(" plus horizontal whitespace, if present
#         kind  - fig | tbl
#         id    - identifier
#         suffix - a standalone single letter after whitespace ("@fig:a b")
#         close - horizontal whitespace plus ")", if present
REFERENCE_PATTERN = re.compile(
    r"(?P<open>\([ \t]*)?"
    r"@(?P<kind>fig|tbl):(?P<id>" + ID_CHARS + r"+)"
    r"(?:[ \t]+(?P<suffix>[A-Za-z])(?![A-Za-z0-9_]))?"
    r"(?P<close>[ \t]*\))?"
)


# =============================================================================
# Images: ![alt](url) and ![alt](<url with (parens)>)
# =============================================================================

IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\((?:<[^>]+>|[^)]+)\)")

# Image markup ending the lookback window, allowing only whitespace after it
IMAGE_TAIL_PATTERN = re.compile(r"!\[([^\]]*)\]\((?:<[^>]+>|[^)]+)\)\s*\Z")

# Figure tag opener that marks an image as labelled
FIGURE_TAG_OPENER = re.compile(r"\s*\{#fig:")

# Pandoc table caption ": Caption text" on the same line as the tag
COLON_CAPTION_PATTERN = re.compile(r"(:[^\r\n{]+)\Z")


# =============================================================================
# Suggestions
# =============================================================================

# Partial reference token ending exactly at the cursor
TRIGGER_PATTERN = re.compile(r"@(?:fig|tbl)?:?" + ID_CHARS + r"*\Z")


# =============================================================================
# Lookback windows and limits
# =============================================================================

IMAGE_CAPTION_LOOKBACK = 500
TABLE_CAPTION_LOOKBACK = 1000
FIGURE_TAG_LOOKAHEAD = 50
DEFAULT_SUGGESTION_LIMIT = 1000

UNTITLED_IMAGE_CAPTION = "Untitled image"
BROKEN_MARKER = "⛔"

# Timestamp identifiers for new definition tags
TIMESTAMP_ID_FORMAT = "%Y%m%d%H%M%S"
