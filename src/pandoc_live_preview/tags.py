"""
Identifiers and tags for new definitions.

New figures and tables get a timestamp id such as ``20261019143005``. Two
inserts within the same second produce the same id; nothing guards against
that.
"""

from __future__ import annotations

from datetime import datetime

from .constants import TIMESTAMP_ID_FORMAT
from .index import Kind


def generate_timestamp_id(now: datetime | None = None) -> str:
    """Return ``now`` (default: the current local time) as YYYYMMDDHHmmss."""
    return (now or datetime.now()).strftime(TIMESTAMP_ID_FORMAT)


def make_definition_tag(kind: Kind | str, now: datetime | None = None) -> str:
    """Return a definition tag with a fresh timestamp id, e.g. ``{#fig:20261019143005}``.

    Raises:
        UnknownKindError: If ``kind`` is not "fig" or "tbl"
    """
    kind = kind if isinstance(kind, Kind) else Kind.parse(kind)
    return f"{{#{kind.value}:{generate_timestamp_id(now)}}}"
