"""Single-pass tag parser and its result object.

:class:`TagTreeParser` scans the input buffer one character at a time,
asks :func:`~tagtree.parsing.states.transition` what to do with it and
applies the requested effect to the tree under construction. Token text is
tracked as :class:`Span` offsets and only copied out of the buffer when the
token completes, so the scan is O(n) with no backtracking.

Malformed input aborts the parse with a :class:`ParseError` subclass. The
error is reported on the returned :class:`ParseResult` together with the
partially built tree; it is never swallowed.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from tagtree.parsing.errors import (
    MalformedAttribute,
    MalformedTag,
    NestingTooDeep,
    ParseError,
    UnexpectedEndOfInput,
    UnmatchedClosingTag,
)
from tagtree.parsing.states import Effect, ParserState, Transition, transition
from tagtree.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParserConfig,
    PerformanceMetrics,
    TailTextPolicy,
    get_logger,
)
from tagtree.tree import (
    Node,
    add_attribute,
    append_child,
    create_attribute,
    create_element,
    create_node,
    create_root,
)

COMPONENT = "tag_parser"

StepHook = Callable[[int, str, ParserState, Transition], None]

_END_OF_INPUT_ERRORS = {
    ParserState.READ_ELEMENT_NAME: (UnexpectedEndOfInput, "Input ended inside a tag name"),
    ParserState.LOOK_FOR_ATTRIBUTE_KEY: (
        UnexpectedEndOfInput, "Input ended inside an opening tag"
    ),
    ParserState.READ_ATTRIBUTE_KEY: (
        MalformedAttribute, "Input ended inside an attribute key"
    ),
    ParserState.READ_ATTRIBUTE_VALUE: (
        MalformedAttribute, "Input ended inside an attribute value"
    ),
    ParserState.READ_INNER_HTML: (UnexpectedEndOfInput, "Input ended inside inner text"),
}


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range of the input buffer."""

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate span bounds."""
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def text(self, buffer: str) -> str:
        """Materialize the span as an owned string."""
        return buffer[self.start:self.end]


@dataclass
class ParseResult:
    """Outcome of one parse: the tree, the error if any, and diagnostics.

    ``root`` is always the synthetic root node. ``current`` is the node that
    was current when scanning stopped; it is the root unless elements were
    left open or the parse aborted.
    """

    root: Node = field(default_factory=create_root)
    current: Optional[Node] = None
    success: bool = True
    error: Optional[ParseError] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None
    source_length: int = 0

    @property
    def elements(self) -> List[Node]:
        """All parsed nodes in document order, excluding the synthetic root."""
        return [node for node in self.root.iter() if node is not self.root]

    @property
    def element_count(self) -> int:
        """Number of parsed elements."""
        return len(self.elements)

    @property
    def attribute_count(self) -> int:
        """Number of attributes across all parsed elements."""
        return sum(len(node.element.attributes) for node in self.elements)

    @property
    def max_depth(self) -> int:
        """Deepest nesting level reached (top-level elements = 1)."""
        return max((level for _, level in self.root.iter_with_depth()), default=0)

    @property
    def is_balanced(self) -> bool:
        """True when every opened element was closed."""
        return self.current is None or self.current is self.root

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                position=position,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse."""
        return {
            "success": self.success,
            "balanced": self.is_balanced,
            "element_count": self.element_count,
            "attribute_count": self.attribute_count,
            "max_depth": self.max_depth,
            "characters_processed": self.performance.characters_processed,
            "tokens_emitted": self.performance.tokens_emitted,
            "processing_time_ms": self.performance.processing_time_ms,
            "error": self.error.to_dict() if self.error else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result, including the tree, to a JSON-friendly dictionary."""
        result = self.summary()
        result["diagnostics"] = [diag.to_dict() for diag in self.diagnostics]
        result["root"] = self.root.to_dict()
        return result


class TagTreeParser:
    """Character-by-character state-machine parser for simplified tag markup.

    The parser holds per-call scanning state only, so one instance can be
    reused for any number of sequential parses.

    Examples:
        >>> result = TagTreeParser().parse('<a x="1">hi</a>')
        >>> result.root.children[0].element.inner_text
        'hi'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        step_hook: Optional[StepHook] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig()``)
            step_hook: Optional callable invoked before each transition is
                applied with ``(offset, char, state, transition)``
        """
        self.config = config or ParserConfig()
        self.step_hook = step_hook
        self.logger = get_logger(__name__, self.config.correlation_id, COMPONENT)
        self._reset_state("")

    def _reset_state(self, buffer: str) -> None:
        self.buffer = buffer
        self.state = ParserState.LOOK_FOR_ELEMENT
        self.root = create_root()
        self.current = self.root
        self.depth = 0
        self.tokens_emitted = 0

        self.tag_start = 0
        self.name_start = 0
        self.key_start = 0
        self.key_span: Optional[Span] = None
        self.value_start = 0
        self.inner_start = 0

        self.tail_owner: Optional[Node] = None
        self.tail_start: Optional[int] = None

    def parse(self, buffer: str) -> ParseResult:
        """Parse ``buffer`` into a tree rooted at a synthetic root node.

        Args:
            buffer: Complete input text, without null characters

        Returns:
            ParseResult holding the tree and, on failure, the error

        Raises:
            TypeError: If ``buffer`` is not a string
            ValueError: If ``buffer`` contains a null character
        """
        if not isinstance(buffer, str):
            raise TypeError(f"Input buffer must be str, not {type(buffer).__name__}")
        if "\x00" in buffer:
            raise ValueError("Input buffer must not contain null characters")

        start_time = time.time()
        self._reset_state(buffer)
        result = ParseResult(
            root=self.root,
            correlation_id=self.config.correlation_id,
            source_length=len(buffer),
        )

        self.logger.debug(
            "Starting parse",
            extra={"char_count": len(buffer), "max_depth": self.config.max_depth}
        )

        try:
            self._scan()
            self._finish()
        except ParseError as e:
            result.success = False
            result.error = e
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                e.message,
                COMPONENT,
                position={"offset": e.offset},
                details={"kind": e.kind, "state": self.state.name},
            )
            self.logger.warning(
                "Parse aborted",
                extra={"kind": e.kind, "offset": e.offset, "state": self.state.name}
            )

        result.current = self.current
        if result.success and not result.is_balanced and self.config.warn_on_unbalanced:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Input ended with {self.depth} unclosed element(s)",
                COMPONENT,
                position={"offset": len(buffer)},
                details={"current": self.current.name},
            )

        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        result.performance.characters_processed = len(buffer)
        result.performance.tokens_emitted = self.tokens_emitted

        self.logger.debug(
            "Parse completed",
            extra={
                "success": result.success,
                "tokens_emitted": self.tokens_emitted,
                "processing_time_ms": result.performance.processing_time_ms,
            }
        )
        return result

    def _scan(self) -> None:
        buffer = self.buffer
        length = len(buffer)
        index = 0
        while index < length:
            char = buffer[index]
            lookahead = buffer[index + 1] if index + 1 < length else None
            step = transition(self.state, char, lookahead)
            if self.step_hook is not None:
                self.step_hook(index, char, self.state, step)
            if step.effect is not Effect.NONE:
                self._apply(step.effect, index)
            self.state = step.state
            index += step.consumed

    def _finish(self) -> None:
        length = len(self.buffer)
        if self.state is ParserState.LOOK_FOR_ELEMENT:
            self._flush_tail(length)
            return
        error_class, message = _END_OF_INPUT_ERRORS[self.state]
        raise error_class(message, length)

    def _apply(self, effect: Effect, index: int) -> None:
        if effect is Effect.BEGIN_ELEMENT_NAME:
            self._flush_tail(index)
            self.tag_start = index
            self.name_start = index + 1
        elif effect is Effect.CLOSE_ELEMENT:
            self._flush_tail(index)
            self._close_current(index)
        elif effect is Effect.CLOSING_TAG_END:
            if self.tail_owner is not None and self.tail_start is None:
                self.tail_start = index + 1
        elif effect is Effect.OPEN_ELEMENT:
            self._open_element(index)
            self.inner_start = index + 1
        elif effect is Effect.OPEN_ELEMENT_WITH_ATTRIBUTES:
            self._open_element(index)
        elif effect is Effect.OPEN_SELF_CLOSING_ELEMENT:
            self._open_element(index)
            self._self_close(index)
        elif effect is Effect.BEGIN_INNER_TEXT:
            self.inner_start = index + 1
        elif effect is Effect.SELF_CLOSE:
            self._self_close(index)
        elif effect is Effect.BEGIN_ATTRIBUTE_KEY:
            self.key_start = index
        elif effect is Effect.END_ATTRIBUTE_KEY:
            self.key_span = Span(self.key_start, index)
            # Skip the opening quote
            self.value_start = index + 2
        elif effect is Effect.END_ATTRIBUTE_VALUE:
            self._emit_attribute(index)
        elif effect is Effect.INNER_TEXT_THEN_CLOSE:
            self._emit_inner_text(index)
            self._close_current(index)
        elif effect is Effect.INNER_TEXT_THEN_OPEN:
            self._emit_inner_text(index)
            self.tag_start = index
            self.name_start = index + 1
        elif effect is Effect.MISSING_QUOTE:
            raise MalformedAttribute("Attribute value must start with '\"'", index + 1)
        elif effect is Effect.UNTERMINATED_KEY:
            key = Span(self.key_start, index).text(self.buffer)
            raise MalformedAttribute(f"Attribute key {key!r} is not followed by '='", index)

    def _open_element(self, index: int) -> None:
        name_span = Span(self.name_start, index)
        if not name_span:
            raise MalformedTag("Element name is empty", self.tag_start)
        if self.depth >= self.config.max_depth:
            raise NestingTooDeep(self.tag_start, self.config.max_depth)

        node = create_node(create_element(name_span.text(self.buffer), self.tag_start))
        append_child(self.current, node)
        self.current = node
        self.depth += 1
        self.tokens_emitted += 1

    def _self_close(self, index: int) -> None:
        self.current.element.inner_text = ""
        self._close_current(index)

    def _close_current(self, index: int) -> None:
        parent = self.current.parent
        if parent is None:
            raise UnmatchedClosingTag("Closing tag without an open element", index)
        if self.config.tail_text is TailTextPolicy.TAIL:
            self.tail_owner = self.current
            self.tail_start = None
        self.current = parent
        self.depth -= 1

    def _emit_attribute(self, index: int) -> None:
        key = self.key_span.text(self.buffer)
        value = Span(self.value_start, index).text(self.buffer)
        add_attribute(self.current.element, create_attribute(key, value))
        self.key_span = None
        self.tokens_emitted += 1

    def _emit_inner_text(self, index: int) -> None:
        self.current.element.inner_text = Span(self.inner_start, index).text(self.buffer)
        self.tokens_emitted += 1

    def _flush_tail(self, index: int) -> None:
        owner, start = self.tail_owner, self.tail_start
        self.tail_owner = None
        self.tail_start = None
        if owner is not None and start is not None and index > start:
            owner.element.tail = Span(start, index).text(self.buffer)
            self.tokens_emitted += 1
