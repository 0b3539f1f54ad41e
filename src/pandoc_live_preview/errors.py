"""
Custom exception classes for pandoc_live_preview package.

Scanning, indexing and decoration planning accept any text and never raise:
broken references, unused definitions and unlabelled images are reported as
data. The exceptions below cover the edges around that core, such as reading
configuration files and parsing user-supplied kind names.
"""


class PreviewError(Exception):
    """Base exception for all pandoc_live_preview errors."""

    pass


class ConfigError(PreviewError):
    """Raised when a configuration file or value cannot be used.

    Attributes:
        key: The configuration key at fault (None for file-level problems)
        errors: List of specific problems found
    """

    def __init__(
        self, message: str, key: str | None = None, errors: list[str] | None = None
    ) -> None:
        self.key = key
        self.errors = errors or []
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the message with the key and any collected problems."""
        msg = self.message
        if self.key:
            msg = f"{msg} (key '{self.key}')"
        if self.errors:
            msg += "\n"
            for error in self.errors:
                msg += f"  • {error}\n"
        return msg


class UnknownKindError(PreviewError, ValueError):
    """Raised when a cross-reference kind other than 'fig' or 'tbl' is requested.

    Attributes:
        kind: The kind string that was given
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown cross-reference kind '{kind}'. Expected 'fig' or 'tbl'")
