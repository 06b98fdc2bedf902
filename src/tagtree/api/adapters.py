"""Integration adapters for handing parsed trees to other XML libraries.

Adapters convert between a :class:`ParseResult` and a third-party
representation. Conversions never raise; problems are reported on the
returned :class:`ConversionResult`.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type

from tagtree.parsing import ParseResult
from tagtree.shared import ParserConfig, get_logger
from tagtree.tree import Node


class AdapterType(Enum):
    """Types of integration adapters."""

    XML_LIBRARY = auto()     # XML processing libraries (lxml)
    PLUGIN = auto()          # Custom plugin adapters


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    version: str
    adapter_type: AdapterType
    target_library: str
    supported_versions: List[str]
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the integration adapter.

        Args:
            config: Parser configuration used when converting back to a result
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self._logger = get_logger(__name__, self.correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library is importable."""

    @abstractmethod
    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert a ParseResult to the target representation."""

    @abstractmethod
    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert the target representation back to a ParseResult."""

    def _create_error_result(
        self, message: str, original_data: Any, start_time: float
    ) -> ConversionResult:
        self._logger.warning("Conversion failed", extra={"error": message})
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=(time.time() - start_time) * 1000,
            errors=[message],
        )


class LxmlAdapter(IntegrationAdapter):
    """Adapter for conversion to and from ``lxml.etree`` elements.

    The synthetic root becomes the lxml root element, each element's inner
    text becomes ``.text`` and its tail (if captured) becomes ``.tail``.
    lxml keeps one value per attribute name, so repeated attributes collapse
    to the last value and a warning is recorded.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="lxml",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="lxml",
            supported_versions=["4.0+"],
            description="Conversion between ParseResult and lxml.etree"
        )

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
        except ImportError:
            return False
        return True

    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert ParseResult to an ``lxml.etree._Element`` tree."""
        start_time = time.time()

        if not self.is_available():
            return self._create_error_result("lxml is not installed", parse_result, start_time)
        if not parse_result.success:
            return self._create_error_result(
                "ParseResult is not successful", parse_result, start_time
            )

        from lxml import etree

        warnings: List[str] = []
        try:
            lxml_root = self._convert_tree(parse_result.root, etree, warnings)
        except ValueError as e:
            # lxml rejects names the tag grammar accepts, e.g. "a:b:c"
            return self._create_error_result(
                f"Failed to convert to lxml: {e}", parse_result, start_time
            )

        return ConversionResult(
            success=True,
            converted_data=lxml_root,
            original_data=parse_result,
            conversion_time_ms=(time.time() - start_time) * 1000,
            warnings=warnings,
            metadata={
                "lxml_version": etree.LXML_VERSION,
                "element_count": parse_result.element_count,
            }
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Serialize an lxml element and parse the markup back."""
        start_time = time.time()

        if not self.is_available():
            return self._create_error_result("lxml is not installed", target_data, start_time)
        if not hasattr(target_data, "tag"):
            return self._create_error_result(
                "Target data is not a valid lxml element", target_data, start_time
            )

        from lxml import etree
        from tagtree.api.parser import parse_string

        markup = etree.tostring(target_data, encoding="unicode")
        parse_result = parse_string(markup, config=self.config)

        return ConversionResult(
            success=parse_result.success,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=(time.time() - start_time) * 1000,
            errors=[str(parse_result.error)] if parse_result.error else [],
            metadata={"original_tag": target_data.tag, "markup_length": len(markup)}
        )

    def _convert_tree(self, root: Node, etree: Any, warnings: List[str]) -> Any:
        lxml_root = self._convert_element(root, etree, warnings)
        stack = [(root, lxml_root)]
        while stack:
            node, lxml_parent = stack.pop()
            for child in node.children:
                lxml_child = self._convert_element(child, etree, warnings)
                lxml_parent.append(lxml_child)
                stack.append((child, lxml_child))
        return lxml_root

    def _convert_element(self, node: Node, etree: Any, warnings: List[str]) -> Any:
        element = node.element
        lxml_element = etree.Element(element.name)
        seen = set()
        for attribute in element.attributes:
            if attribute.key in seen:
                warnings.append(
                    f"Duplicate attribute {attribute.key!r} on <{element.name}> collapsed"
                )
            seen.add(attribute.key)
            lxml_element.set(attribute.key, attribute.value)
        if element.inner_text:
            lxml_element.text = element.inner_text
        if element.tail:
            lxml_element.tail = element.tail
        return lxml_element


class AdapterRegistry:
    """Registry of adapter classes by name."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[IntegrationAdapter]] = {}

    def register(self, adapter_class: Type[IntegrationAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        name = adapter_class().metadata.name
        self._adapters[name] = adapter_class

    def get(
        self,
        name: str,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> Optional[IntegrationAdapter]:
        """Instantiate the adapter registered under ``name``."""
        adapter_class = self._adapters.get(name)
        if adapter_class is None:
            return None
        return adapter_class(config=config, correlation_id=correlation_id)

    def names(self) -> List[str]:
        """Names of all registered adapters."""
        return sorted(self._adapters)


_adapter_registry = AdapterRegistry()
_adapter_registry.register(LxmlAdapter)


def register_adapter(adapter_class: Type[IntegrationAdapter]) -> None:
    """Register a custom adapter class."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    name: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Get an adapter instance by name, or None if unknown."""
    return _adapter_registry.get(name, config, correlation_id)


def list_adapters() -> List[str]:
    """List the names of all registered adapters."""
    return _adapter_registry.names()
