"""Input loading for tagtree."""

from .loader import (
    BOMDetector,
    BufferLoadError,
    decode_buffer,
    load_buffer,
    validate_buffer,
)

__all__ = [
    "BOMDetector",
    "BufferLoadError",
    "decode_buffer",
    "load_buffer",
    "validate_buffer",
]
