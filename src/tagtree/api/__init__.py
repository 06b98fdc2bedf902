"""Public API for tagtree."""

from .adapters import (
    AdapterMetadata,
    AdapterType,
    ConversionResult,
    IntegrationAdapter,
    LxmlAdapter,
    get_adapter,
    list_adapters,
    register_adapter,
)
from .parser import TagParser, parse, parse_file, parse_string

__all__ = [
    "AdapterMetadata",
    "AdapterType",
    "ConversionResult",
    "IntegrationAdapter",
    "LxmlAdapter",
    "get_adapter",
    "list_adapters",
    "register_adapter",
    "TagParser",
    "parse",
    "parse_file",
    "parse_string",
]
