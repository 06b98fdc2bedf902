"""Load markup from disk or raw bytes into a parser-ready text buffer.

The parser needs the complete text in memory and no embedded null
characters. When no encoding is given the byte order mark, if any, picks the
codec; otherwise UTF-8 is assumed. Undecodable bytes are replaced rather than
rejected.
"""

from pathlib import Path
from typing import ClassVar, Dict, Optional, Tuple, Union

DEFAULT_ENCODING = "utf-8"


class BufferLoadError(Exception):
    """Raised when input cannot be turned into a parser buffer."""


class BOMDetector:
    """Byte Order Mark (BOM) detection for the UTF encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[Tuple[str, int]]:
        """Detect encoding based on BOM.

        Returns:
            ``(encoding, bom_length)`` if a BOM is present, None otherwise
        """
        # UTF-32 LE shares its first two bytes with UTF-16 LE, so longest first
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return encoding, len(bom_bytes)
        return None


def decode_buffer(data: bytes, encoding: Optional[str] = None) -> str:
    """Decode raw bytes into a parser buffer.

    Args:
        data: Raw input bytes
        encoding: Codec to use; detected from the BOM when omitted

    Returns:
        Decoded text without a leading BOM

    Raises:
        BufferLoadError: If the codec is unknown or the text contains a null
            character
    """
    if encoding is None:
        detected = BOMDetector().detect(data)
        if detected:
            encoding, bom_length = detected
            data = data[bom_length:]
        else:
            encoding = DEFAULT_ENCODING

    try:
        text = data.decode(encoding, errors="replace")
    except LookupError as e:
        raise BufferLoadError(f"Unknown encoding: {encoding}") from e

    return validate_buffer(text)


def validate_buffer(text: str) -> str:
    """Check that ``text`` satisfies the parser's input contract."""
    null_index = text.find("\x00")
    if null_index != -1:
        raise BufferLoadError(f"Input contains a null character at offset {null_index}")
    return text


def load_buffer(path: Union[str, Path], encoding: Optional[str] = None) -> str:
    """Read a whole file into a parser buffer.

    Raises:
        BufferLoadError: If the file is missing, unreadable or not valid input
    """
    path_obj = Path(path)
    if not path_obj.exists():
        raise BufferLoadError(f"File not found: {path_obj}")
    if not path_obj.is_file():
        raise BufferLoadError(f"Path is not a file: {path_obj}")

    try:
        with path_obj.open("rb") as file:
            data = file.read()
    except OSError as e:
        raise BufferLoadError(f"Could not read {path_obj}: {e}") from e

    return decode_buffer(data, encoding)
