"""Public parsing API for tagtree.

Module-level functions cover the common cases; :class:`TagParser` adds a
reusable, configurable instance with usage statistics. Both follow the
never-fail policy by default: any failure, including unreadable input, is
returned as a :class:`ParseResult` with ``success=False`` and diagnostics.
With ``ParserConfig(never_fail_mode=False)`` parse errors are raised instead.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, TextIO, Union

from tagtree.character import BufferLoadError, decode_buffer, load_buffer
from tagtree.parsing import ParseResult, TagTreeParser
from tagtree.shared import DiagnosticSeverity, ParserConfig, get_logger

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup from a string, bytes, a Path or a file-like object.

    Args:
        input_data: Markup content or a source to read it from
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult containing the tree and diagnostics

    Examples:
        >>> result = parse('<list><item id="1">one</item></list>')
        >>> result.success
        True
        >>> result.root.find('item').element.get_attribute('id')
        '1'
    """
    config = _effective_config(config, correlation_id)
    logger = get_logger(__name__, config.correlation_id, "parse")

    logger.info(
        "Starting parse operation",
        extra={"input_type": type(input_data).__name__}
    )

    if isinstance(input_data, Path):
        return parse_file(input_data, config=config)
    if hasattr(input_data, "read"):
        return _parse_file_like_object(input_data, config)
    return _parse_content(input_data, config)


def parse_string(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup held in a string.

    Examples:
        >>> result = parse_string('<a>hello<b>world</b></a>')
        >>> result.root.children[0].element.inner_text
        'hello'
    """
    config = _effective_config(config, correlation_id)
    logger = get_logger(__name__, config.correlation_id, "parse_string")

    logger.info(
        "Starting string parse operation",
        extra={
            "content_length": len(text) if isinstance(text, str) else None,
            "preview": (
                text[:PREVIEW_LENGTH] + "..."
                if isinstance(text, str) and len(text) > PREVIEW_LENGTH else text
            )
        }
    )
    return _parse_content(text, config)


def parse_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup from a file.

    Args:
        file_path: Path to the file (string or Path object)
        encoding: Optional encoding override (BOM-detected, else UTF-8)
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; a missing or unreadable file yields ``success=False``
    """
    start_time = time.time()
    config = _effective_config(config, correlation_id)
    logger = get_logger(__name__, config.correlation_id, "parse_file")
    path_obj = Path(file_path)

    logger.info(
        "Starting file parse operation",
        extra={"file_path": str(path_obj), "encoding_override": encoding}
    )

    try:
        text = load_buffer(path_obj, encoding)
    except BufferLoadError as e:
        logger.warning("Could not load input file", extra={"file_path": str(path_obj)})
        if not config.never_fail_mode:
            raise
        return _create_error_result(
            str(e), config.correlation_id, (time.time() - start_time) * MS_PER_SECOND
        )

    result = _parse_content(text, config)
    result.add_diagnostic(
        DiagnosticSeverity.INFO,
        f"Parsed file {path_obj}",
        "file_parser",
        details={"file_path": str(path_obj), "encoding": encoding or "auto"}
    )
    return result


def _effective_config(
    config: Optional[ParserConfig], correlation_id: Optional[str]
) -> ParserConfig:
    config = config or ParserConfig()
    if correlation_id is not None and correlation_id != config.correlation_id:
        config = config.override(correlation_id=correlation_id)
    return config


def _parse_content(content: Union[str, bytes], config: ParserConfig) -> ParseResult:
    """Parse direct content (string or bytes) honoring the failure policy."""
    start_time = time.time()
    logger = get_logger(__name__, config.correlation_id, "parse_direct")

    try:
        text = decode_buffer(content) if isinstance(content, bytes) else content
        result = TagTreeParser(config=config).parse(text)
    except (BufferLoadError, TypeError, ValueError) as e:
        logger.warning("Input rejected", extra={"error": str(e)})
        if not config.never_fail_mode:
            raise
        return _create_error_result(
            f"Input rejected: {e}",
            config.correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
        )

    if result.error is not None and not config.never_fail_mode:
        raise result.error

    logger.info(
        "Content parsing completed",
        extra={
            "success": result.success,
            "element_count": result.element_count,
            "processing_time_ms": result.processing_time_ms,
        }
    )
    return result


def _parse_file_like_object(
    file_obj: Union[BinaryIO, TextIO],
    config: ParserConfig
) -> ParseResult:
    start_time = time.time()
    logger = get_logger(__name__, config.correlation_id, "parse_filelike")

    try:
        content = file_obj.read()
    except OSError as e:
        logger.exception("File-like object read failed")
        if not config.never_fail_mode:
            raise
        return _create_error_result(
            f"File-like object read failed: {e}",
            config.correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
        )

    logger.debug(
        "File-like object read",
        extra={
            "content_length": len(content) if content else 0,
            "content_type": type(content).__name__
        }
    )
    return _parse_content(content, config)


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create a failed result for input that never reached the parser."""
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time
    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )
    return result


class TagParser:
    """Reusable parser with a fixed configuration and usage statistics.

    Examples:
        >>> parser = TagParser(ParserConfig.lenient())
        >>> result = parser.parse('<a>x<b/>y</a>')
        >>> result.root.find('b').element.tail
        'y'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = _effective_config(config, correlation_id)
        self.correlation_id = self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "tag_parser_api")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(self, input_data: InputType) -> ParseResult:
        """Parse ``input_data`` with this parser's configuration."""
        start_time = time.time()
        try:
            result = parse(input_data, config=self.config)
        finally:
            self._parse_count += 1
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND

        if result.success:
            self._successful_parses += 1
        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the configuration used for subsequent parses."""
        self.config = _effective_config(config, self.correlation_id)
        self.logger.info("Parser reconfigured", extra={"config": self.config.to_dict()})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
