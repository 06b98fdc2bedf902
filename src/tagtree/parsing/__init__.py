"""State-machine parser for simplified tag markup."""

from .errors import (
    MalformedAttribute,
    MalformedTag,
    NestingTooDeep,
    ParseError,
    UnexpectedEndOfInput,
    UnmatchedClosingTag,
)
from .machine import ParseResult, Span, TagTreeParser
from .states import Effect, ParserState, Transition, transition

__all__ = [
    "MalformedAttribute",
    "MalformedTag",
    "NestingTooDeep",
    "ParseError",
    "UnexpectedEndOfInput",
    "UnmatchedClosingTag",
    "ParseResult",
    "Span",
    "TagTreeParser",
    "Effect",
    "ParserState",
    "Transition",
    "transition",
]
