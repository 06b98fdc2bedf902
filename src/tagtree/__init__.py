"""tagtree.

A single-pass, state-machine parser that turns simplified tag markup into an
element tree. Each element carries its name, its ordered attributes and the
text that immediately follows its opening tag.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Configured parser - TagParser class with ParserConfig
- Level 3: Raw state machine - TagTreeParser with a step hook
"""

__version__ = "0.1.0"
__author__ = "tagtree Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured parser
from .api import TagParser, parse, parse_file, parse_string

# Output helpers
from .output import format_tree, print_tree

# Parser core and error taxonomy
from .parsing import (
    MalformedAttribute,
    MalformedTag,
    NestingTooDeep,
    ParseError,
    ParseResult,
    TagTreeParser,
    UnexpectedEndOfInput,
    UnmatchedClosingTag,
)

# Configuration classes for advanced usage
from .shared.config import ParserConfig, TailTextPolicy

# Tree data structures
from .tree import Attribute, Element, Node

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",

    # Level 2: Configured parser
    "TagParser",
    "ParserConfig",
    "TailTextPolicy",

    # Level 3: State machine
    "TagTreeParser",

    # Result objects and data structures
    "ParseResult",
    "Node",
    "Element",
    "Attribute",

    # Errors
    "ParseError",
    "UnexpectedEndOfInput",
    "UnmatchedClosingTag",
    "MalformedAttribute",
    "MalformedTag",
    "NestingTooDeep",

    # Output
    "format_tree",
    "print_tree",
]
