"""
Configuration for cross-reference scanning and preview.

XrefConfig is passed explicitly into every scanning, planning and suggestion
function. There is no module-level "current settings" object: callers that
change settings build a new config with ``config.replace(...)``.

Config files may be YAML or JSON. Keys are accepted in snake_case or in the
camelCase used by the Obsidian plugin's ``data.json``, so an existing plugin
settings file can be loaded directly.

Example YAML file:
    ```yaml
    fig_prefix: "Fig. "
    tbl_prefix: "Tab. "
    hide_gap_around_image: false
    ```
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import DEFAULT_SUGGESTION_LIMIT, FIG
from .errors import ConfigError, UnknownKindError

logger = logging.getLogger(__name__)

# Plugin settings that belong to the image upload workflow, not to the engine
_UPLOAD_KEYS = frozenset({"picgo_url", "auto_upload", "add_new_line_around_image", "delete_local"})

# Slider limits from the plugin's settings tab
_RANGES: dict[str, tuple[int, int]] = {
    "caption_top_offset": (-50, 50),
    "caption_bottom_distance": (0, 100),
}


@dataclass(frozen=True)
class XrefConfig:
    """Settings that drive numbering, decoration layout and suggestions.

    Attributes:
        fig_prefix: Text placed before figure numbers (label = prefix + number)
        tbl_prefix: Text placed before table numbers
        hide_gap_around_image: Collapse the blank line before an image and the
            line break after its figure tag in the preview
        enable_click_to_jump: Attach the definition offset to resolved references
        auto_parentheses: Wrap accepted suggestions as "( @fig:id )"
        scoped_ids: Treat "fig:a" and "tbl:a" as different ids when resolving
            references. Off by default so ids share one namespace.
        caption_color: Color for definition labels
        caption_bold: Render definition labels in bold
        caption_center: Center definition labels
        caption_top_offset: Space above definition labels, in pixels
        caption_bottom_distance: Space below definition labels, in pixels
        reference_color: Color for reference labels
        reference_bold: Render reference labels in bold
        suggestion_limit: Maximum number of completion candidates returned
    """

    fig_prefix: str = "Figure "
    tbl_prefix: str = "Table "
    hide_gap_around_image: bool = True
    enable_click_to_jump: bool = True
    auto_parentheses: bool = True
    scoped_ids: bool = False

    caption_color: str = "#1e88e5"
    caption_bold: bool = True
    caption_center: bool = True
    caption_top_offset: int = 6
    caption_bottom_distance: int = 12
    reference_color: str = "#1e88e5"
    reference_bold: bool = False

    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT

    def __post_init__(self) -> None:
        errors = []
        bad_keys = set()
        for f in fields(self):
            value = getattr(self, f.name)
            expected = _FIELD_TYPES[f.name]
            # bool is a subclass of int; reject it for numeric settings
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                errors.append(f"{f.name} must be {expected.__name__}, got {type(value).__name__}")
                bad_keys.add(f.name)
        for name, (low, high) in _RANGES.items():
            value = getattr(self, name)
            if isinstance(value, int) and not low <= value <= high:
                errors.append(f"{name} must be between {low} and {high}, got {value}")
                bad_keys.add(name)
        if isinstance(self.suggestion_limit, int) and self.suggestion_limit < 1:
            errors.append(f"suggestion_limit must be at least 1, got {self.suggestion_limit}")
            bad_keys.add("suggestion_limit")
        if errors:
            # Name the key when every problem is with the same setting
            key = next(iter(bad_keys)) if len(bad_keys) == 1 else None
            raise ConfigError("Invalid configuration", key=key, errors=errors)

    def prefix_for(self, kind: str) -> str:
        """Return the label prefix for a kind ("fig" or "tbl")."""
        if kind == FIG:
            return self.fig_prefix
        if kind == "tbl":
            return self.tbl_prefix
        raise UnknownKindError(str(kind))

    def replace(self, **changes: Any) -> XrefConfig:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as a plain dictionary."""
        return dataclasses.asdict(self)


_FIELD_TYPES: dict[str, type] = {
    "fig_prefix": str,
    "tbl_prefix": str,
    "hide_gap_around_image": bool,
    "enable_click_to_jump": bool,
    "auto_parentheses": bool,
    "scoped_ids": bool,
    "caption_color": str,
    "caption_bold": bool,
    "caption_center": bool,
    "caption_top_offset": int,
    "caption_bottom_distance": int,
    "reference_color": str,
    "reference_bold": bool,
    "suggestion_limit": int,
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _normalize_key(key: str) -> str:
    """Convert camelCase keys to snake_case; leave snake_case unchanged."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def config_from_dict(data: dict[str, Any], base: XrefConfig | None = None) -> XrefConfig:
    """Build a config from a mapping of settings, merged onto ``base``.

    Args:
        data: Settings keyed by snake_case or camelCase names
        base: Config supplying values for missing keys (defaults if None)

    Returns:
        New XrefConfig

    Raises:
        ConfigError: If a value has the wrong type or is out of range
    """
    base = base or XrefConfig()
    known = {f.name for f in fields(XrefConfig)}
    changes: dict[str, Any] = {}

    for raw_key, value in data.items():
        key = _normalize_key(str(raw_key))
        if key in known:
            changes[key] = value
        elif key in _UPLOAD_KEYS:
            logger.debug("Ignoring upload setting '%s'", raw_key)
        else:
            logger.warning("Unknown configuration key '%s'", raw_key)

    return base.replace(**changes)


def load_config(path: str | Path, format: str | None = None) -> XrefConfig:
    """Load settings from a YAML or JSON file.

    Args:
        path: Path to the settings file
        format: "yaml" or "json"; inferred from the file suffix when None

    Returns:
        XrefConfig with file values merged onto the defaults

    Raises:
        ConfigError: If the file cannot be parsed or contains invalid values
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if format is None:
        format = "json" if file_path.suffix.lower() == ".json" else "yaml"

    try:
        with open(file_path, encoding="utf-8") as f:
            if format == "yaml":
                data = yaml.safe_load(f)
            elif format == "json":
                data = json.load(f)
            else:
                raise ConfigError(f"Unsupported config format: {format}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse JSON config: {e}") from e

    # An empty YAML file loads as None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a dictionary/object")

    config = config_from_dict(data)
    logger.debug("Loaded config from %s", file_path)
    return config
