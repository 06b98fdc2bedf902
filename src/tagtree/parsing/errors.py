"""Errors reported by the tag parser.

Every error records the offset into the input buffer at which the problem
was detected.
"""

from typing import Any, Dict


class ParseError(Exception):
    """Base class for all parse failures."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.message = message
        self.offset = offset

    @property
    def kind(self) -> str:
        """Error class name, used as a stable identifier in reports."""
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a JSON-friendly dictionary."""
        return {"kind": self.kind, "message": self.message, "offset": self.offset}


class UnexpectedEndOfInput(ParseError):
    """Input ended inside a tag name, an opening tag or an inner-text capture."""


class UnmatchedClosingTag(ParseError):
    """A closing marker arrived while no element was open."""


class MalformedAttribute(ParseError):
    """An attribute is missing its quote or its key/value never terminates."""


class MalformedTag(ParseError):
    """An opening tag has no name."""


class NestingTooDeep(ParseError):
    """Element nesting exceeded the configured maximum depth."""

    def __init__(self, offset: int, max_depth: int) -> None:
        super().__init__(f"Nesting depth exceeds maximum of {max_depth}", offset)
        self.max_depth = max_depth
